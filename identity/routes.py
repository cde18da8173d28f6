"""Provides the HTTP API of the identity service."""

from typing import Any

from flask import Blueprint, Response, current_app, jsonify, make_response, \
    request

from pictureit import logging, status
from pictureit.auth import current_keys
from pictureit.auth.decorators import scoped
from pictureit.domain import Permission

from .controllers import accounts, users

logger = logging.getLogger(__name__)

blueprint = Blueprint('identity', __name__, url_prefix='')


def _json_payload() -> Any:
    return request.get_json(force=True, silent=True)


def _respond(data: dict, code: int, headers: dict) -> Response:
    response: Response = make_response(jsonify(data), code, headers)
    return response


@blueprint.route('/status', methods=['GET'])
def ok() -> Response:
    """Health check endpoint."""
    return _respond({'status': 'ok'}, status.HTTP_200_OK, {})


@blueprint.route('/api/v1/', methods=['GET'])
def welcome() -> Response:
    """Describe the service."""
    return _respond({
        'message': 'Welcome to the picture-it identity service',
        'version': current_app.config['VERSION']
    }, status.HTTP_200_OK, {})


@blueprint.route('/api/v1/register', methods=['POST'])
def register() -> Response:
    """Register a new user."""
    return _respond(*accounts.register(
        _json_payload(),
        current_app.config['DEFAULT_PERMISSIONS']
    ))


@blueprint.route('/api/v1/login', methods=['POST'])
def login() -> Response:
    """Log in with a username and password, and get an access token."""
    return _respond(*accounts.login(
        _json_payload(),
        current_keys().signing_key,
        current_app.config['ACCESS_TOKEN_LIFE'],
        current_app.config['JWT_ALGORITHM']
    ))


@blueprint.route('/api/v1/users/<string:user_id>', methods=['GET'])
@scoped(Permission.READ)
def get_user(user_id: str) -> Response:
    """Get the identity document of a user."""
    return _respond(*users.get_user(user_id))
