"""Provides the HTTP API of the image service."""

from typing import Any

from flask import Blueprint, Response, current_app, jsonify, make_response, \
    request

from pictureit import domain, logging, status
from pictureit.auth import gate
from pictureit.auth.decorators import scoped
from pictureit.domain import Permission

from .controllers import images
from .services import datastore, imagestore

logger = logging.getLogger(__name__)

blueprint = Blueprint('images', __name__, url_prefix='')


def is_owner(claims: domain.Claims, image_id: str, **kwargs: Any) -> bool:
    """Check that the caller owns the requested image."""
    gate.authorize_owner(claims, datastore.find_by_id(image_id).owner_id)
    return True


def _json_payload() -> Any:
    return request.get_json(force=True, silent=True)


def _respond(data: Any, code: int, headers: dict) -> Response:
    if code == status.HTTP_204_NO_CONTENT:
        response: Response = make_response('', code, headers)
    else:
        response = make_response(jsonify(data), code, headers)
    return response


@blueprint.route('/status', methods=['GET'])
def ok() -> Response:
    """Health check endpoint."""
    return _respond({'status': 'ok', 'imagestore': imagestore.store_status()},
                    status.HTTP_200_OK, {})


@blueprint.route('/api/v1/', methods=['GET'])
def welcome() -> Response:
    """Describe the service."""
    return _respond({
        'message': 'Welcome to the picture-it image service',
        'version': current_app.config['VERSION']
    }, status.HTTP_200_OK, {})


@blueprint.route('/api/v1/images', methods=['GET'])
@scoped(Permission.READ)
def list_images() -> Response:
    """List all images."""
    return _respond(*images.list_images())


@blueprint.route('/api/v1/images', methods=['POST'])
@scoped(Permission.CREATE)
def create_image() -> Response:
    """Upload a new image, owned by the caller."""
    return _respond(*images.create_image(_json_payload(),
                                         request.auth.subject))


@blueprint.route('/api/v1/images/<string:image_id>', methods=['GET'])
@scoped(Permission.READ)
def get_image(image_id: str) -> Response:
    """Get an image."""
    return _respond(*images.get_image(image_id))


@blueprint.route('/api/v1/images/<string:image_id>', methods=['PUT'])
@scoped(Permission.UPDATE, authorizer=is_owner)
def replace_image(image_id: str) -> Response:
    """Replace an image owned by the caller."""
    return _respond(*images.replace_image(image_id, _json_payload()))


@blueprint.route('/api/v1/images/<string:image_id>', methods=['PATCH'])
@scoped(Permission.UPDATE, authorizer=is_owner)
def patch_image(image_id: str) -> Response:
    """Change some fields of an image owned by the caller."""
    return _respond(*images.patch_image(image_id, _json_payload()))


@blueprint.route('/api/v1/images/<string:image_id>', methods=['DELETE'])
@scoped(Permission.DELETE, authorizer=is_owner)
def delete_image(image_id: str) -> Response:
    """Delete an image owned by the caller."""
    return _respond(*images.delete_image(image_id))
