"""Tests for :mod:`images.process.sync`."""

import threading
import time
from datetime import datetime
from unittest import TestCase, mock

from pytz import UTC

from pictureit.exceptions import ConsistencyError, UpstreamError

from images.domain import Image, RemoteImage
from images.process import sync
from images.services import datastore, imagestore

URL = 'https://cdn.store.local/images/r1'


def make_image(**overrides) -> Image:
    fields = dict(
        image_id='i1', owner_id='u1', url=URL, content_type='image/png',
        description='A cat', location='Ithaca', data=b'old',
        created=datetime(2024, 5, 1, tzinfo=UTC),
        updated=datetime(2024, 5, 1, tzinfo=UTC)
    )
    fields.update(overrides)
    return Image(**fields)


class EngineTestCase(TestCase):
    """Runs the engine with a mock image store and record store."""

    def setUp(self):
        self.store = mock.MagicMock()
        self.records = mock.MagicMock()
        self.records.update.side_effect = lambda image: image
        self.current = make_image()
        self.records.find_by_id.return_value = self.current
        self.engine = sync.ResourceSyncEngine(self.store, self.records)


class TestCreate(EngineTestCase):
    """Creating an image uploads it first, then records it."""

    def test_create(self):
        """The record points at the uploaded image and is owned by caller."""
        self.store.create_image.return_value = \
            RemoteImage('r9', 'https://cdn/images/r9', 'image/png')
        self.records.create.side_effect = \
            lambda image: image._replace(image_id='i9')

        image = self.engine.create_image('u1', b'png', 'image/png',
                                         description='Dog')

        self.store.create_image.assert_called_once_with(b'png', 'image/png')
        self.assertEqual(image.image_id, 'i9')
        self.assertEqual(image.owner_id, 'u1')
        self.assertEqual(image.url, 'https://cdn/images/r9')
        self.assertEqual(image.description, 'Dog')
        self.assertEqual(image.data, b'png')

    def test_remote_failure(self):
        """If the upload fails, nothing is recorded."""
        self.store.create_image.side_effect = \
            UpstreamError('nope', status_code=413, body={'error': 'big'})
        with self.assertRaises(UpstreamError):
            self.engine.create_image('u1', b'png', 'image/png')
        self.records.create.assert_not_called()

    def test_local_failure(self):
        """If the upload succeeds but the record fails, it is reported."""
        self.store.create_image.return_value = \
            RemoteImage('r9', 'https://cdn/images/r9', 'image/png')
        self.records.create.side_effect = datastore.DatastoreError('disk')
        with self.assertRaises(ConsistencyError) as ctx:
            self.engine.create_image('u1', b'png', 'image/png')
        self.assertEqual(ctx.exception.context['remote_id'], 'r9')
        self.assertEqual(ctx.exception.context['owner_id'], 'u1')
        self.assertEqual(ctx.exception.context['operation'], 'create')

    def test_upload_not_described(self):
        """An upload the store accepted but did not describe is reported."""
        self.store.create_image.side_effect = imagestore.UndescribedImage(
            'No URL', status_code=201, body={'id': 'r9'}
        )
        with self.assertRaises(ConsistencyError) as ctx:
            self.engine.create_image('u1', b'png', 'image/png')
        self.records.create.assert_not_called()
        self.assertEqual(ctx.exception.context['operation'], 'create')
        self.assertEqual(ctx.exception.context['owner_id'], 'u1')
        self.assertEqual(ctx.exception.context['remote_id'], 'r9')
        self.assertEqual(ctx.exception.context['remote_body'], {'id': 'r9'})


class TestReplace(EngineTestCase):
    """Replacing an image."""

    def test_replace(self):
        """The remote image named by the record is replaced."""
        self.store.update_image.return_value = \
            RemoteImage('r1', URL + '?v=2', 'image/gif')
        image = self.engine.replace_image('i1', b'gif', 'image/gif')

        self.store.update_image.assert_called_once_with('r1', b'gif',
                                                        'image/gif')
        self.assertEqual(image.url, URL + '?v=2')
        self.assertEqual(image.content_type, 'image/gif')
        self.assertIsNone(image.description)
        self.assertEqual(image.owner_id, 'u1')

    def test_refreshes_url(self):
        """If the store does not describe the image, it is fetched."""
        self.store.update_image.return_value = None
        self.store.get_image.return_value = \
            RemoteImage('r1', URL + '?v=3', 'image/gif')
        image = self.engine.replace_image('i1', b'gif', 'image/gif')
        self.store.get_image.assert_called_once_with('r1')
        self.assertEqual(image.url, URL + '?v=3')

    def test_refresh_fails(self):
        """If the URL cannot be refreshed, the current one is kept."""
        self.store.update_image.return_value = None
        self.store.get_image.side_effect = UpstreamError('down')
        image = self.engine.replace_image('i1', b'gif', 'image/gif')
        self.assertEqual(image.url, URL)
        self.records.update.assert_called_once()

    def test_remote_failure(self):
        """If the store fails, the record is not changed."""
        self.store.update_image.side_effect = UpstreamError('down')
        with self.assertRaises(UpstreamError):
            self.engine.replace_image('i1', b'gif', 'image/gif')
        self.records.update.assert_not_called()

    def test_local_failure(self):
        """If the record cannot be changed, it is reported."""
        self.store.update_image.return_value = None
        self.store.get_image.return_value = RemoteImage('r1', URL)
        self.records.update.side_effect = datastore.DatastoreError('disk')
        with self.assertRaises(ConsistencyError) as ctx:
            self.engine.replace_image('i1', b'gif', 'image/gif')
        self.assertEqual(ctx.exception.context['image_id'], 'i1')
        self.assertEqual(ctx.exception.context['operation'], 'replace')


class TestPatch(EngineTestCase):
    """Patching an image changes only what differs."""

    def test_no_op(self):
        """Unchanged fields touch neither the store nor the record."""
        image = self.engine.patch_image('i1', {
            'data': b'old', 'content_type': 'image/png',
            'description': 'A cat', 'location': 'Ithaca'
        })
        self.assertEqual(image, self.current)
        self.store.patch_image.assert_not_called()
        self.records.update.assert_not_called()

    def test_empty(self):
        """An empty patch is a no-op."""
        self.engine.patch_image('i1', {})
        self.store.patch_image.assert_not_called()
        self.records.update.assert_not_called()

    def test_metadata_only(self):
        """Metadata changes are recorded without calling the store."""
        image = self.engine.patch_image('i1', {'location': 'Paris'})
        self.store.patch_image.assert_not_called()
        self.records.update.assert_called_once()
        self.assertEqual(image.location, 'Paris')
        self.assertEqual(image.description, 'A cat')

    def test_new_data(self):
        """New content goes to the store before it is recorded."""
        calls = []
        self.store.patch_image.side_effect = \
            lambda *a, **k: calls.append('store')
        self.records.update.side_effect = \
            lambda image: calls.append('record') or image

        image = self.engine.patch_image('i1', {'data': b'new'})

        self.assertEqual(calls, ['store', 'record'])
        self.store.patch_image.assert_called_once_with(
            'r1', data=b'new', content_type=None
        )
        self.assertEqual(image.data, b'new')

    def test_new_content_type(self):
        """A new content type alone is sent to the store."""
        self.store.patch_image.return_value = None
        self.engine.patch_image('i1', {'content_type': 'image/gif'})
        self.store.patch_image.assert_called_once_with(
            'r1', data=None, content_type='image/gif'
        )

    def test_remote_failure(self):
        """If the store fails, nothing is recorded."""
        self.store.patch_image.side_effect = UpstreamError('down')
        with self.assertRaises(UpstreamError):
            self.engine.patch_image('i1', {'data': b'new',
                                           'location': 'Paris'})
        self.records.update.assert_not_called()

    def test_local_failure(self):
        """A record failure after the store changed is reported."""
        self.store.patch_image.return_value = None
        self.records.update.side_effect = datastore.DatastoreError('disk')
        with self.assertRaises(ConsistencyError):
            self.engine.patch_image('i1', {'data': b'new'})

    def test_unknown_fields_ignored(self):
        """Fields that cannot be patched are ignored."""
        self.engine.patch_image('i1', {'owner_id': 'u2', 'url': 'x'})
        self.records.update.assert_not_called()


class TestDelete(EngineTestCase):
    """Deleting an image removes it from the store first."""

    def test_delete(self):
        """The remote image is deleted, then the record."""
        self.store.delete_image.return_value = True
        self.engine.delete_image('i1')
        self.store.delete_image.assert_called_once_with('r1')
        self.records.delete.assert_called_once_with('i1')

    def test_already_gone(self):
        """If the store did not have the image, the record is deleted."""
        self.store.delete_image.return_value = False
        self.engine.delete_image('i1')
        self.records.delete.assert_called_once_with('i1')

    def test_remote_failure(self):
        """If the store fails, the record is kept."""
        self.store.delete_image.side_effect = UpstreamError('down')
        with self.assertRaises(UpstreamError):
            self.engine.delete_image('i1')
        self.records.delete.assert_not_called()

    def test_local_failure(self):
        """A record failure after the remote delete is reported."""
        self.store.delete_image.return_value = True
        self.records.delete.side_effect = datastore.DatastoreError('disk')
        with self.assertRaises(ConsistencyError) as ctx:
            self.engine.delete_image('i1')
        self.assertEqual(ctx.exception.context['remote_url'], URL)


class TestRecordLocks(TestCase):
    """Changes to the same record do not interleave."""

    def test_serializes_same_record(self):
        """Two holders of the same id never overlap."""
        locks = sync.RecordLocks()
        events = []

        def hold(name):
            with locks.hold('i1'):
                events.append(f'{name} in')
                time.sleep(0.05)
                events.append(f'{name} out')

        threads = [threading.Thread(target=hold, args=(n,))
                   for n in ('a', 'b')]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(events), 4)
        self.assertEqual(events[0][0], events[1][0])
        self.assertEqual(events[2][0], events[3][0])
        self.assertEqual(len(locks), 0)

    def test_different_records(self):
        """Different ids do not block each other."""
        locks = sync.RecordLocks()
        with locks.hold('i1'):
            acquired = threading.Event()

            def hold_other():
                with locks.hold('i2'):
                    acquired.set()

            thread = threading.Thread(target=hold_other)
            thread.start()
            self.assertTrue(acquired.wait(1))
            thread.join()
        self.assertEqual(len(locks), 0)

    def test_released_on_error(self):
        """The lock is released if the holder raises."""
        locks = sync.RecordLocks()
        with self.assertRaises(RuntimeError):
            with locks.hold('i1'):
                raise RuntimeError('boom')
        self.assertEqual(len(locks), 0)
        with locks.hold('i1'):
            pass
