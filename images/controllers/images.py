"""
Controllers for image records.

Reads go straight to the record store. Changes are validated here, then
handed to :mod:`images.process.sync`, which applies them to the remote image
store before recording them. Ownership is checked before these controllers
are called (see :mod:`images.routes`).
"""

from typing import Any, Dict, Tuple

from flask import url_for

from pictureit import logging, status
from pictureit.exceptions import ValidationError

from .forms import ImageForm, ImagePatchForm
from ..domain import Image
from ..process import sync
from ..services import datastore

logger = logging.getLogger(__name__)

ResponseData = Tuple[Any, int, dict]


def list_images() -> ResponseData:
    """Get a summary of every image."""
    images = datastore.find_all()
    return [to_summary(image) for image in images], status.HTTP_200_OK, {}


def get_image(image_id: str) -> ResponseData:
    """Get the public fields of an image."""
    return to_json(datastore.find_by_id(image_id)), status.HTTP_200_OK, {}


def create_image(payload: Any, owner_id: str) -> ResponseData:
    """Upload a new image owned by ``owner_id``."""
    form = _validated(ImageForm, payload)
    image = sync.create_image(
        owner_id,
        form.content_bytes,
        form.content_type.data,
        description=form.description.data,
        location=form.location.data
    )
    location = url_for('images.get_image', image_id=image.image_id)
    return to_json(image), status.HTTP_201_CREATED, {'Location': location}


def replace_image(image_id: str, payload: Any) -> ResponseData:
    """Replace the content and metadata of an image."""
    form = _validated(ImageForm, payload)
    image = sync.replace_image(
        image_id,
        form.content_bytes,
        form.content_type.data,
        description=form.description.data,
        location=form.location.data
    )
    return to_json(image), status.HTTP_200_OK, {}


def patch_image(image_id: str, payload: Any) -> ResponseData:
    """Change some of the fields of an image."""
    form = _validated(ImagePatchForm, payload)
    changes: Dict[str, Any] = {}
    if form.content.data:
        changes['data'] = form.content_bytes
    if form.content_type.data:
        changes['content_type'] = form.content_type.data
    for field in ('description', 'location'):
        value = getattr(form, field).data
        if value is not None:
            changes[field] = value
    logger.debug('Patch %s: %s', image_id, list(changes))
    sync.patch_image(image_id, changes)
    return {}, status.HTTP_204_NO_CONTENT, {}


def delete_image(image_id: str) -> ResponseData:
    """Delete an image and its record."""
    sync.delete_image(image_id)
    return {}, status.HTTP_204_NO_CONTENT, {}


def _validated(form_class: Any, payload: Any) -> Any:
    form = form_class.from_json(payload)
    if not form.validate():
        logger.debug('Image payload not valid: %s', form.errors)
        raise ValidationError(errors=form.wire_errors())
    return form


def _isoformat(image: Image, field: str) -> Any:
    value = getattr(image, field)
    return value.isoformat() if value is not None else None


def to_summary(image: Image) -> dict:
    """Fields of an image shown in listings."""
    return {
        'id': image.image_id,
        'imageUrl': image.url,
        'description': image.description,
        'location': image.location,
        'createdAt': _isoformat(image, 'created'),
        'updatedAt': _isoformat(image, 'updated')
    }


def to_json(image: Image) -> dict:
    """Public fields of a single image."""
    data = to_summary(image)
    data['contentType'] = image.content_type
    return data
