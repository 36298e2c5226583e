from flask import Flask
from .config import config_by_name
from .extensions import db, migrate, jwt, cache
from .errors import register_error_handlers


def create_app(config_name: str = "development") -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # -------------------------------------------------
    # Extensions
    # -------------------------------------------------
    db.init_app(app)

    # Import all models before initializing migrate (for Alembic discovery)
    from . import models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)
    cache.init_app(app)

    # -------------------------------------------------
    # API Blueprints
    # -------------------------------------------------
    from .api.v1 import v1_bp

    app.register_blueprint(v1_bp, url_prefix="/api/v1")
    register_error_handlers(app)

    app.logger.info(f"folio started with {config_name} configuration")

    return app
