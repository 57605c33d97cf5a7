from __future__ import annotations
import os
from flask import Flask
from config import config_map
from extensions import dashboard


def register_blueprints(app: Flask) -> None:
    from blueprints.core import bp as core_bp, api_bp as core_api_bp
    from blueprints.assignments.routes import api_bp as assignments_api_bp
    from blueprints.notifications.routes import api_bp as notifications_api_bp
    from blueprints.validation.routes import api_bp as validation_api_bp

    # core without prefix -> '/health' at the root
    app.register_blueprint(core_bp)
    app.register_blueprint(core_api_bp, url_prefix="/api/v1")
    app.register_blueprint(assignments_api_bp, url_prefix="/api/v1")
    app.register_blueprint(notifications_api_bp, url_prefix="/api/v1")
    app.register_blueprint(validation_api_bp, url_prefix="/api/v1")


def create_app(config_name: str | None = None, **session_options) -> Flask:
    """Build the dashboard app.

    ``session_options`` go to the dashboard session (``scheduler``, ``rng``,
    ``clock``) so tests can drive time and randomness by hand.
    """
    app = Flask(__name__, instance_relative_config=True)
    cfg_name = config_name or os.getenv("FLASK_CONFIG", "default")
    app.config.from_object(config_map[cfg_name])
    # no background timers while pytest is running
    if os.environ.get("PYTEST_CURRENT_TEST"):
        app.config["NOTIFICATION_SIMULATION"] = False

    dashboard.init_app(app, **session_options)
    register_blueprints(app)
    return app


if __name__ == "__main__":
    create_app().run()
