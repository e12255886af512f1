# backend/vault/__init__.py
from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException

from .config import Config
from .extensions import db, migrate
from .validation import ValidationError, NotFoundError



def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    from .storage import init_storage
    from .services.nlp_service import init_classifier
    init_storage(app)
    init_classifier(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.products import products_bp
    from .routes.sales import sales_bp
    from .routes.income import income_bp
    from .routes.queries import queries_bp
    from .routes.users import users_bp
    from .routes.backups import backups_bp
    from .routes.files import files_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(income_bp)
    app.register_blueprint(queries_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(backups_bp)
    app.register_blueprint(files_bp)

    allowed_origins = set(app.config.get("CORS_ALLOWED_ORIGINS", []))

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
        return response

    _register_error_handlers(app)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    if app.config.get("BACKUP_SCHEDULE_ENABLED") and not app.testing:
        from .services.backup_scheduler import schedule_backups
        schedule_backups(app)

    return app


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return jsonify({"message": "Invalid request data", "errors": e.errors}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found_error(e):
        return jsonify({"message": str(e) or "Not found"}), 404

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return jsonify({"message": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"message": "Internal server error"}), 500
