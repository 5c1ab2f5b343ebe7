import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///marketplace.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Caller identity comes from bearer tokens issued by the identity service
    JWT_SECRET_KEY = os.getenv("JWT_SECRET", "dev-secret-change-me")

    # Ledger
    LEDGER_BACKEND = os.getenv("LEDGER_BACKEND", "http")  # http | memory
    LEDGER_URL = os.getenv("LEDGER_URL", "http://ledger:4943")
    LEDGER_TIMEOUT = float(os.getenv("LEDGER_TIMEOUT", "5"))
    LEDGER_TOKEN = os.getenv("LEDGER_TOKEN")
    SERVICE_IDENTITY = os.getenv("SERVICE_IDENTITY", "marketplace-service")

    # Orders
    PAYMENT_MODE = os.getenv("PAYMENT_MODE", "transfer")  # transfer | allowance
    RESERVATION_TTL = int(os.getenv("RESERVATION_TTL", "120"))
    RESERVATION_EAGER_EXPIRY = os.getenv("RESERVATION_EAGER_EXPIRY", "true").lower() == "true"

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-secret-with-enough-length-for-hs256"
    LEDGER_BACKEND = "memory"
    RESERVATION_EAGER_EXPIRY = False
