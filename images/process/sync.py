"""
Keeps image records consistent with the remote image store.

Every change goes to the image store first, and is recorded locally only
once the store reports success. So a local record never points at content
that the store does not have. If the store fails, the local record is not
touched and the :class:`.UpstreamError` propagates. If the store succeeds
but the local write then fails, the two are out of step; this is raised as
a :class:`.ConsistencyError` carrying what is needed to reconcile them by
hand. Nothing is rolled back automatically.

Changes to the same record are serialized with a lock keyed by image id, so
two requests never interleave their remote and local steps. The lock is
in-process: run one process per record store, or add a distributed lock.
"""

import threading
from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional

from pictureit import logging
from pictureit.exceptions import ConsistencyError, UpstreamError

from ..domain import Image
from ..services import datastore, imagestore

logger = logging.getLogger(__name__)

PATCHABLE = ('data', 'content_type', 'description', 'location')


class RecordLocks(object):
    """Mutual exclusion per image id."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, List[Any]] = {}

    @contextmanager
    def hold(self, image_id: str) -> Generator[None, None, None]:
        """Hold the lock for ``image_id`` for the duration of the context."""
        with self._guard:
            entry = self._locks.setdefault(image_id, [threading.Lock(), 0])
            entry[1] += 1
        entry[0].acquire()
        try:
            yield
        finally:
            entry[0].release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[image_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class ResourceSyncEngine(object):
    """Applies changes to images, remote store first."""

    def __init__(self, store: Any = imagestore, records: Any = datastore,
                 locks: Optional[RecordLocks] = None) -> None:
        self.store = store
        self.records = records
        self.locks = locks if locks is not None else RecordLocks()

    def create_image(self, owner_id: str, data: bytes, content_type: str,
                     description: Optional[str] = None,
                     location: Optional[str] = None) -> Image:
        """
        Upload an image, then record it as owned by ``owner_id``.

        Raises
        ------
        :class:`.UpstreamError`
            If the upload failed. Nothing is recorded.
        :class:`.ConsistencyError`
            If the upload succeeded but the record could not be written, or
            the store accepted the upload without saying where it is.

        """
        try:
            remote = self.store.create_image(data, content_type)
        except imagestore.UndescribedImage as e:
            raise ConsistencyError(
                'Uploaded image was not described', operation='create',
                image_id=None, owner_id=owner_id, remote_id=e.remote_id,
                remote_url=None, remote_status=e.status_code,
                remote_body=e.body
            ) from e
        logger.debug('Uploaded %s for %s', remote.remote_id, owner_id)
        image = Image(
            image_id=None,
            owner_id=owner_id,
            url=remote.url,
            content_type=remote.content_type or content_type,
            description=description,
            location=location,
            data=data
        )
        try:
            created: Image = self.records.create(image)
        except datastore.DatastoreError as e:
            raise ConsistencyError(
                'Uploaded image was not recorded', operation='create',
                image_id=None, owner_id=owner_id,
                remote_id=remote.remote_id, remote_url=remote.url
            ) from e
        logger.info('Created image %s', created.image_id)
        return created

    def replace_image(self, image_id: str, data: bytes, content_type: str,
                      description: Optional[str] = None,
                      location: Optional[str] = None) -> Image:
        """
        Replace the content and metadata of an existing image.

        The remote image to replace is identified by the existing record,
        never by the request. The caller must already have checked that the
        requester owns the image.
        """
        with self.locks.hold(image_id):
            current: Image = self.records.find_by_id(image_id)
            remote = self.store.update_image(current.remote_id, data,
                                             content_type)
            url = self._current_url(current, remote)
            replacement = current._replace(
                url=url,
                content_type=content_type,
                description=description,
                location=location,
                data=data
            )
            return self._record_update(replacement, 'replace')

    def patch_image(self, image_id: str, changes: Dict[str, Any]) -> Image:
        """
        Apply the fields present in ``changes`` to an existing image.

        ``changes`` may hold any of :data:`PATCHABLE`. New content or a new
        content type is sent to the image store before anything is recorded.
        If nothing differs from the current record, neither the store nor
        the record is touched and the current record is returned.
        """
        with self.locks.hold(image_id):
            current: Image = self.records.find_by_id(image_id)
            differing = {field: value for field, value in changes.items()
                         if field in PATCHABLE
                         and getattr(current, field) != value}
            if not differing:
                logger.debug('Nothing to change for %s', image_id)
                return current

            patched = current._replace(**differing)
            if 'data' in differing or 'content_type' in differing:
                remote = self.store.patch_image(
                    current.remote_id,
                    data=differing.get('data'),
                    content_type=differing.get('content_type')
                )
                if remote is not None:
                    patched = patched._replace(url=remote.url)
                return self._record_update(patched, 'patch')
            return self.records.update(patched)

    def delete_image(self, image_id: str) -> None:
        """
        Delete an image from the store, then its record.

        If the store does not have the image, it is already consistent with
        the record going away.
        """
        with self.locks.hold(image_id):
            current: Image = self.records.find_by_id(image_id)
            if not self.store.delete_image(current.remote_id):
                logger.warning('Image %s was not in the store', image_id)
            try:
                self.records.delete(image_id)
            except datastore.DatastoreError as e:
                raise self._inconsistent(current, 'delete') from e
            logger.info('Deleted image %s', image_id)

    def _current_url(self, current: Image, remote: Any) -> str:
        if remote is not None:
            url: str = remote.url
            return url
        try:
            url = self.store.get_image(current.remote_id).url
        except UpstreamError as e:
            logger.warning('Could not refresh URL of %s: %s',
                           current.image_id, e)
            return current.url
        return url

    def _record_update(self, image: Image, operation: str) -> Image:
        try:
            updated: Image = self.records.update(image)
        except datastore.DatastoreError as e:
            raise self._inconsistent(image, operation) from e
        logger.debug('Recorded %s of %s', operation, image.image_id)
        return updated

    def _inconsistent(self, image: Image, operation: str) -> ConsistencyError:
        return ConsistencyError(
            f'Image store changed but record was not ({operation})',
            operation=operation, image_id=image.image_id,
            owner_id=image.owner_id, remote_id=image.remote_id,
            remote_url=image.url
        )


_engine = ResourceSyncEngine()

create_image = _engine.create_image
replace_image = _engine.replace_image
patch_image = _engine.patch_image
delete_image = _engine.delete_image
