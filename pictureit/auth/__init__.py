"""Provides tools for authenticating requests with signed access tokens."""

from typing import Optional

from flask import Flask, current_app, request

from . import decorators, gate, keys, permissions, tokens
from .exceptions import ConfigurationError
from .. import logging
from ..exceptions import AuthenticationError

logger = logging.getLogger(__name__)

EXTENSION = 'pictureit.auth'


class Auth(object):
    """
    Loads key material and attaches verified claims to each request.

    Intended for use in a Flask application factory, for example:

    .. code-block:: python

       from flask import Flask
       from pictureit.auth import Auth
       from someapp import routes


       def create_app() -> Flask:
          app = Flask('someapp')
          app.config.from_pyfile('config.py')
          Auth(app)     # Fails here if the keys cannot be loaded.
          app.register_blueprint(routes.blueprint)
          return app

    A service that issues tokens sets ``JWT_PRIVATE_KEY_PATH`` (and
    optionally ``JWT_PRIVATE_KEY_PASSPHRASE``); a service that only verifies
    tokens sets ``JWT_PUBLIC_KEY_PATH``.

    """

    def __init__(self, app: Optional[Flask] = None) -> None:
        """
        Initialize ``app`` with key material.

        Parameters
        ----------
        app : :class:`Flask`

        """
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """
        Load the keys and attach :meth:`.load_session` to the Flask app.

        Raises
        ------
        :class:`ConfigurationError`
            If no usable key is configured.

        """
        app.config.setdefault('JWT_ALGORITHM', tokens.DEFAULT_ALGORITHM)
        if app.config['JWT_ALGORITHM'] not in tokens.ASYMMETRIC_ALGORITHMS:
            raise ConfigurationError('JWT_ALGORITHM must be asymmetric')

        if app.config.get('JWT_PRIVATE_KEY_PATH'):
            key_material = keys.load_signing_keys(
                app.config['JWT_PRIVATE_KEY_PATH'],
                app.config.get('JWT_PRIVATE_KEY_PASSPHRASE')
            )
        elif app.config.get('JWT_PUBLIC_KEY_PATH'):
            key_material = keys.load_verification_key(
                app.config['JWT_PUBLIC_KEY_PATH']
            )
        else:
            raise ConfigurationError('Set JWT_PRIVATE_KEY_PATH or'
                                     ' JWT_PUBLIC_KEY_PATH')
        app.extensions[EXTENSION] = key_material
        app.before_request(self.load_session)

    def load_session(self) -> None:
        """
        Verify the request's bearer token, if there is one.

        Sets ``request.auth`` to the :class:`.domain.Claims` of a valid
        token, to ``None`` if there is no ``Authorization`` header, or to the
        :class:`.AuthenticationError` that should be raised if a protected
        route is requested (see :func:`.decorators.scoped`).
        """
        header = request.headers.get('Authorization')
        if header is None:
            request.auth = None
            return
        try:
            request.auth = gate.authenticate(
                header,
                current_keys().verification_key,
                [current_app.config['JWT_ALGORITHM']]
            )
        except AuthenticationError as e:
            logger.debug('Request not authenticated: %s', e)
            request.auth = e


def current_keys() -> keys.KeyMaterial:
    """Get the key material loaded for the current application."""
    try:
        key_material: keys.KeyMaterial = current_app.extensions[EXTENSION]
    except KeyError as e:
        raise ConfigurationError('Auth extension not initialized') from e
    return key_material
