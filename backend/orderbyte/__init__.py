# backend/orderbyte/__init__.py
import uuid

from flask import Flask, g, request

from .config import Config
from .extensions import db
from .responses import json_error


def _is_memory_sqlite(uri: str) -> bool:
    return uri.startswith("sqlite") and (uri.endswith(":memory:") or uri in {"sqlite://", "sqlite:///"})


def create_app(test_config=None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    if _is_memory_sqlite(app.config["SQLALCHEMY_DATABASE_URI"]):
        # One shared connection holds the whole store; the store lock owns
        # transaction boundaries, so the pool must not reset it on checkin
        engine_options = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
        engine_options.setdefault("pool_reset_on_return", None)
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options

    # Initialize extensions
    db.init_app(app)

    from . import models  # noqa: F401

    from .services.auth_service import PasswordAuthenticator
    app.extensions["orderbyte.authenticator"] = PasswordAuthenticator()

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.orders import orders_bp, org_orders_bp
    from .routes.menu import menu_bp
    from .routes.staff import staff_bp
    from .routes.settings import settings_bp
    from .routes.analytics import analytics_bp
    from .routes.qr import qr_bp
    from .routes.superadmin import superadmin_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(org_orders_bp)
    app.register_blueprint(menu_bp)
    app.register_blueprint(staff_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(qr_bp)
    app.register_blueprint(superadmin_bp)

    @app.before_request
    def establish_customer_session():
        g.session_context = None
        g.org_id = None
        existing = request.cookies.get(app.config["CUSTOMER_COOKIE_NAME"])
        g.customer_session_id = existing or str(uuid.uuid4())
        g.customer_session_is_new = not existing

    @app.after_request
    def issue_customer_cookie(response):
        if getattr(g, "customer_session_is_new", False):
            response.set_cookie(
                app.config["CUSTOMER_COOKIE_NAME"],
                g.customer_session_id,
                max_age=app.config["CUSTOMER_COOKIE_MAX_AGE"],
                httponly=True,
                samesite="Lax",
            )
        return response

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type, x-tenant-id"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PATCH,DELETE,OPTIONS"
        return response

    @app.errorhandler(404)
    def not_found(_exc):
        return json_error("Not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(_exc):
        return json_error("Method not allowed", 405)

    @app.errorhandler(500)
    def internal_error(_exc):
        return json_error("Internal server error", 500)

    with app.app_context():
        db.create_all()
        if app.config["SEED_ON_STARTUP"]:
            from .seed_data import load_seed_data
            load_seed_data()

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
