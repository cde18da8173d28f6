"""Core data structures for the image service."""

from datetime import datetime
from typing import NamedTuple, Optional
from urllib.parse import urlparse

CONTENT_TYPES = ('image/jpeg', 'image/png', 'image/gif')


def remote_id_from_url(url: str) -> str:
    """The image store's id for an image is the last segment of its URL."""
    return urlparse(url).path.rstrip('/').rsplit('/', 1)[-1]


class Image(NamedTuple):
    """The local record of an image held in the remote image store."""

    image_id: Optional[str]
    """Assigned by the record store; ``None`` until persisted."""

    owner_id: str
    """The :attr:`pictureit.domain.User.user_id` of the uploader."""

    url: str
    """Where the image store serves the image."""

    content_type: str
    """One of :data:`CONTENT_TYPES`."""

    description: Optional[str] = None
    location: Optional[str] = None
    created: Optional[datetime] = None
    updated: Optional[datetime] = None

    data: Optional[bytes] = None
    """Cached copy of the content most recently sent to the image store."""

    @property
    def remote_id(self) -> str:
        """The id of this image in the remote image store."""
        return remote_id_from_url(self.url)


class RemoteImage(NamedTuple):
    """An image as described by the remote image store."""

    remote_id: str
    url: str
    content_type: Optional[str] = None
    created: Optional[datetime] = None
    updated: Optional[datetime] = None
