"""Database integration for persisting image records."""

from datetime import datetime
from typing import List, Optional

from pytz import UTC

from pictureit.exceptions import NotFoundError

from . import models, util
from ...domain import Image

DatastoreError = util.DatastoreError

init_app = util.init_app
create_all = util.create_all
drop_all = util.drop_all


class NoSuchImage(NotFoundError):
    """An image was requested that does not exist."""


def find_by_id(image_id: str) -> Image:
    """
    Load an :class:`.Image` by its id.

    Raises
    ------
    :class:`NoSuchImage`
    :class:`DatastoreError`

    """
    with util.transaction(commit=False) as dbsession:
        db_image = dbsession.get(models.DBImage, image_id)
        if db_image is None:
            raise NoSuchImage(f'No image with id {image_id}')
        return _to_domain(db_image)


def find_all() -> List[Image]:
    """Load all image records, oldest first."""
    with util.transaction(commit=False) as dbsession:
        db_images = dbsession.query(models.DBImage) \
            .order_by(models.DBImage.created) \
            .all()
        return [_to_domain(db_image) for db_image in db_images]


def create(image: Image) -> Image:
    """Persist a new :class:`.Image`; its id is assigned here."""
    now = models.utcnow()
    db_image = models.DBImage(
        owner_id=image.owner_id,
        url=image.url,
        content_type=image.content_type,
        description=image.description,
        location=image.location,
        data=image.data,
        created=_naive(image.created) or now,
        updated=_naive(image.updated) or now
    )
    with util.transaction() as dbsession:
        dbsession.add(db_image)
    return find_by_id(db_image.image_id)


def update(image: Image) -> Image:
    """Overwrite an existing record with the fields of ``image``, as of now."""
    with util.transaction() as dbsession:
        db_image = dbsession.get(models.DBImage, image.image_id)
        if db_image is None:
            raise NoSuchImage(f'No image with id {image.image_id}')
        db_image.url = image.url
        db_image.content_type = image.content_type
        db_image.description = image.description
        db_image.location = image.location
        db_image.data = image.data
        db_image.updated = models.utcnow()
        dbsession.add(db_image)
    return find_by_id(image.image_id)


def delete(image_id: str) -> None:
    """Remove the record of an image."""
    with util.transaction() as dbsession:
        db_image = dbsession.get(models.DBImage, image_id)
        if db_image is None:
            raise NoSuchImage(f'No image with id {image_id}')
        dbsession.delete(db_image)


def _naive(timestamp: Optional[datetime]) -> Optional[datetime]:
    if timestamp is None or timestamp.tzinfo is None:
        return timestamp
    return timestamp.astimezone(UTC).replace(tzinfo=None)


def _to_domain(db_image: models.DBImage) -> Image:
    return Image(
        image_id=str(db_image.image_id),
        owner_id=db_image.owner_id,
        url=db_image.url,
        content_type=db_image.content_type,
        description=db_image.description,
        location=db_image.location,
        created=UTC.localize(db_image.created) if db_image.created else None,
        updated=UTC.localize(db_image.updated) if db_image.updated else None,
        data=db_image.data
    )
