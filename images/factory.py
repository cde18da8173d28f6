"""Application factory for the image service."""

from flask import Flask

from pictureit.auth import Auth
from pictureit.handlers import register_error_handlers

from . import routes
from .services import datastore, imagestore


def create_app() -> Flask:
    """Initialize and configure the image application."""
    app = Flask('images')
    app.config.from_pyfile('config.py')

    datastore.init_app(app)
    imagestore.init_app(app)
    Auth(app)   # Fails here if the verification key cannot be loaded.

    app.register_blueprint(routes.blueprint)
    register_error_handlers(app)

    if app.config['CREATE_DB']:
        with app.app_context():
            datastore.create_all()
    return app
