"""
Marketplace Service — Flask application
Product catalog plus order/payment reconciliation against the token ledger.
"""

import logging
import time
from datetime import datetime, timezone

from flask import Flask, jsonify
from flasgger import Swagger

from marketplace.config import Config
from marketplace.errors import register_error_handlers
from marketplace.extensions import db, jwt
from marketplace.ledger import create_ledger_client
from marketplace.repositories import OrderRepository, ProductRepository
from marketplace.services import (
    PaymentVerifier,
    ProductCatalog,
    ReconciliationService,
    ReservationStore,
)

SWAGGER_TEMPLATE = {
    "info": {"title": "Marketplace API", "version": "1.0.0"},
    "securityDefinitions": {
        "Bearer": {"type": "apiKey", "name": "Authorization", "in": "header"},
    },
}


def create_app(overrides=None, ledger=None, clock=time.time, config_object=Config):
    app = Flask(__name__)

    # Configuration
    app.config.from_object(config_object)
    if overrides:
        app.config.from_mapping(overrides)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize Extensions
    db.init_app(app)
    jwt.init_app(app)
    Swagger(app, template=SWAGGER_TEMPLATE)
    register_error_handlers(app)

    with app.app_context():
        db.create_all()

    # Wire the reconciliation service
    ledger = ledger or create_ledger_client(app.config)
    catalog = ProductCatalog(ProductRepository())
    reservations = ReservationStore(clock=clock, eager_expiry=app.config["RESERVATION_EAGER_EXPIRY"])
    app.extensions["marketplace"] = ReconciliationService(
        catalog=catalog,
        orders=OrderRepository(),
        reservations=reservations,
        verifier=PaymentVerifier(ledger),
        ledger=ledger,
        ttl_seconds=app.config["RESERVATION_TTL"],
        payment_mode=app.config["PAYMENT_MODE"],
        clock=clock,
    )

    # Register Blueprints
    from marketplace.routes import accounts_bp, orders_bp, products_bp
    app.register_blueprint(products_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(accounts_bp)

    # --- Health check ---------------------------------------------------
    @app.route("/health")
    def health():
        try:
            db.session.execute(db.text("SELECT 1"))
        except Exception as e:
            return jsonify({"service": "marketplace", "status": "unhealthy", "error": str(e)}), 503
        return jsonify({
            "status": "healthy",
            "service": "marketplace",
            "payment_mode": app.config["PAYMENT_MODE"],
            "pending_orders": len(reservations),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }), 200

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=5000)
