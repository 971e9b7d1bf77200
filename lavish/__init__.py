"""
Lavish Website Back-office - Application Factory

This module provides the Flask application factory pattern for creating
and configuring the application instance.
"""

import logging
import os

from flask import Flask

from lavish.config import Config
from lavish.errors import register_error_handlers
from lavish.extensions import db


def create_app(config_class=Config):
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use (default: Config)

    Returns:
        Configured Flask application instance

    Raises:
        ConfigurationError: if the token signing key or token strategy is
            missing or invalid. This is fatal at startup, never per request.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    _configure_logging(app)

    # Initialize extensions
    from lavish.auth.service import admin_auth
    db.init_app(app)
    admin_auth.init_app(app)

    # Register blueprints
    from lavish.auth import auth_bp
    from lavish.admin import admin_bp, security_bp
    from lavish.public import public_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(security_bp, url_prefix='/api/security')
    app.register_blueprint(public_bp, url_prefix='/api')

    register_error_handlers(app)

    # Create database tables
    with app.app_context():
        if not app.testing:
            os.makedirs(app.config['INSTANCE_DIR'], exist_ok=True)
        import lavish.models  # noqa: F401
        db.create_all()

    return app


def _configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )
    logging.getLogger('lavish').setLevel(level)
    app.logger.setLevel(level)
