"""Application factory for the identity service."""

from flask import Flask

from pictureit.auth import EXTENSION, Auth
from pictureit.auth.exceptions import ConfigurationError
from pictureit.handlers import register_error_handlers

from . import routes
from .services import users


def create_app() -> Flask:
    """Initialize and configure the identity application."""
    app = Flask('identity')
    app.config.from_pyfile('config.py')

    users.init_app(app)
    Auth(app)   # Fails here if the signing key cannot be loaded.
    if not app.extensions[EXTENSION].can_sign:
        raise ConfigurationError('JWT_PRIVATE_KEY_PATH must be set')

    app.register_blueprint(routes.blueprint)
    register_error_handlers(app)

    if app.config['CREATE_DB']:
        with app.app_context():
            users.create_all()
    return app
