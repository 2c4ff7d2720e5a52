"""Advisory API Flask Application Factory."""

import logging
from typing import Optional

from flask import Flask

from advisory_api.config import get_global_settings


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config_name: Configuration name (development, testing, production);
            overrides APP_ENV when given

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)

    # Configuration from Pydantic Settings
    settings = get_global_settings()
    app_env = config_name or settings.app_env
    app.config["SECRET_KEY"] = settings.secret_key
    app.config["DATABASE_URL"] = settings.db_url
    app.config["ENV"] = settings.flask_env
    app.config["DEBUG"] = app_env == "development"
    app.config["TESTING"] = app_env == "testing"

    logging.basicConfig(level=settings.log_level)
    logging.getLogger().setLevel(settings.log_level)
    app.logger.setLevel(settings.log_level)

    # Register blueprints
    from advisory_api.blueprints.allocations import allocations_bp
    from advisory_api.blueprints.clients import clients_bp
    from advisory_api.blueprints.health import health_bp
    from advisory_api.blueprints.insurances import insurances_bp
    from advisory_api.blueprints.movements import movements_bp
    from advisory_api.blueprints.projections import projections_bp
    from advisory_api.blueprints.simulations import simulations_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(clients_bp)
    app.register_blueprint(simulations_bp)
    app.register_blueprint(allocations_bp)
    app.register_blueprint(movements_bp)
    app.register_blueprint(insurances_bp)
    app.register_blueprint(projections_bp)

    return app
