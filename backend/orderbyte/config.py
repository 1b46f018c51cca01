# backend/orderbyte/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key (also signs table QR tokens)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Process-memory store; every restart starts from the seed dataset
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///:memory:",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SEED_ON_STARTUP = _env_flag("ORDERBYTE_SEED", "true")

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    SESSION_COOKIE_NAME_AUTH = "session_id"
    CUSTOMER_COOKIE_NAME = "ob_client_id"
    CUSTOMER_COOKIE_MAX_AGE = 60 * 60 * 24 * 365

    # "My orders" listings for anonymous customers are always bounded
    CUSTOMER_ORDER_LIMIT = 50
    CUSTOMER_ORDER_LIMIT_MAX = 100

    PUBLIC_BASE_URL = os.environ.get("ORDERBYTE_PUBLIC_URL")

    CORS_ALLOWED_ORIGINS = {
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    }
