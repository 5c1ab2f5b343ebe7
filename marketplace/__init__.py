"""Decentralized marketplace backend: catalog and ledger-reconciled orders."""
