"""
Integration with the remote image store.

The image store holds the image content and serves it at a public URL. It
speaks JSON over HTTP, and authenticates us by the private token sent in the
``X-API-Private-Token`` header. Any response other than the expected status,
and any connection error or timeout, is raised as an
:class:`.UpstreamError` carrying the store's status and body.
"""

import base64
from functools import wraps
from typing import Any, Dict, Iterable, Optional

import requests
from dateutil import parser
from flask import current_app, g
from retry import retry

from pictureit import logging, status
from pictureit.exceptions import UpstreamError

from ..domain import RemoteImage, remote_id_from_url

logger = logging.getLogger(__name__)

TOKEN_HEADER = 'X-API-Private-Token'


class Unreachable(UpstreamError):
    """The image store could not be reached."""


class UndescribedImage(UpstreamError):
    """
    The image store accepted an upload but did not say where it is.

    The image may exist in the store with no record pointing at it.
    ``remote_id`` is the id the store gave, if any.
    """

    def __init__(self, message: str, status_code: Optional[int] = None,
                 body: Any = None) -> None:
        super().__init__(message, status_code=status_code, body=body)
        self.remote_id = body.get('id') if isinstance(body, dict) else None


class ImageStoreSession(object):
    """An HTTP session with the remote image store."""

    def __init__(self, endpoint: str, token: str, timeout: float = 10) -> None:
        """Create a new HTTP session."""
        self.endpoint = endpoint.rstrip('/')
        self.timeout = timeout
        self._session = requests.Session()
        self._adapter = requests.adapters.HTTPAdapter(max_retries=2)
        self._session.mount('http://', self._adapter)
        self._session.mount('https://', self._adapter)
        self._session.headers.update({TOKEN_HEADER: token})
        logger.debug('New ImageStoreSession with endpoint %s', self.endpoint)

    def _url(self, remote_id: Optional[str] = None) -> str:
        if remote_id is None:
            return f'{self.endpoint}/images'
        return f'{self.endpoint}/images/{remote_id}'

    def _request(self, method: str, url: str, expected: Iterable[int],
                 **kwargs: Any) -> requests.Response:
        try:
            response: requests.Response = getattr(self._session, method)(
                url, timeout=self.timeout, **kwargs
            )
        except requests.exceptions.Timeout as e:
            logger.error('Image store timed out: %s %s', method.upper(), url)
            raise UpstreamError('Image store timed out') from e
        except requests.exceptions.ConnectionError as e:
            logger.error('Image store unreachable: %s %s', method.upper(), url)
            raise Unreachable('Image store unreachable') from e
        except requests.exceptions.RequestException as e:
            logger.error('Image store request failed: %s', e)
            raise UpstreamError('Image store request failed') from e
        if response.status_code not in expected:
            body = _body(response)
            logger.error('Image store responded to %s %s with %i: %s',
                         method.upper(), url, response.status_code, body)
            raise UpstreamError('Image store did not report success',
                                status_code=response.status_code, body=body)
        return response

    def status(self) -> bool:
        """Check the availability of the image store."""
        try:
            response = self._session.head(self.endpoint, timeout=self.timeout)
        except requests.exceptions.RequestException:
            return False
        return bool(response.ok)

    def create_image(self, data: bytes, content_type: str) -> RemoteImage:
        """
        Upload a new image.

        Parameters
        ----------
        data : bytes
            The image content.
        content_type : str
            MIME type of the image.

        Returns
        -------
        :class:`.RemoteImage`
            Includes the URL at which the image is served.

        Raises
        ------
        :class:`.UpstreamError`

        """
        logger.debug('Uploading %i bytes of %s', len(data), content_type)
        response = self._request(
            'post', self._url(), [status.HTTP_200_OK, status.HTTP_201_CREATED],
            json={'data': _encode(data), 'contentType': content_type}
        )
        body = _body(response)
        remote = _parse(body)
        if remote is None:
            logger.error('Image store accepted upload without describing it:'
                         ' %s', body)
            raise UndescribedImage('Image store did not describe the new'
                                   ' image', status_code=response.status_code,
                                   body=body)
        logger.debug('Uploaded image %s', remote.remote_id)
        return remote

    def update_image(self, remote_id: str, data: bytes,
                     content_type: str) -> Optional[RemoteImage]:
        """
        Replace the content of an image.

        Returns the updated :class:`.RemoteImage` if the store described it,
        otherwise ``None``.
        """
        logger.debug('Replacing image %s', remote_id)
        response = self._request(
            'put', self._url(remote_id),
            [status.HTTP_200_OK, status.HTTP_204_NO_CONTENT],
            json={'data': _encode(data), 'contentType': content_type}
        )
        return _parse(_body(response))

    def patch_image(self, remote_id: str, data: Optional[bytes] = None,
                    content_type: Optional[str] = None) \
            -> Optional[RemoteImage]:
        """Change the content and/or the content type of an image."""
        payload: Dict[str, str] = {}
        if data is not None:
            payload['data'] = _encode(data)
        if content_type is not None:
            payload['contentType'] = content_type
        logger.debug('Patching image %s: %s', remote_id, list(payload))
        response = self._request(
            'patch', self._url(remote_id),
            [status.HTTP_200_OK, status.HTTP_204_NO_CONTENT],
            json=payload
        )
        return _parse(_body(response))

    @retry(Unreachable, tries=3, delay=0.5, backoff=2)
    def get_image(self, remote_id: str) -> RemoteImage:
        """Get the store's description of an image."""
        response = self._request('get', self._url(remote_id),
                                 [status.HTTP_200_OK])
        remote = _parse(_body(response))
        if remote is None:
            raise UpstreamError('Image store did not describe the image',
                                status_code=response.status_code)
        return remote

    def delete_image(self, remote_id: str) -> bool:
        """
        Delete an image from the store.

        Returns ``False`` if the store did not have the image.
        """
        logger.debug('Deleting image %s', remote_id)
        response = self._request(
            'delete', self._url(remote_id),
            [status.HTTP_200_OK, status.HTTP_204_NO_CONTENT,
             status.HTTP_404_NOT_FOUND]
        )
        if response.status_code == status.HTTP_404_NOT_FOUND:
            logger.debug('Image %s was already gone', remote_id)
            return False
        return True


def _encode(data: bytes) -> str:
    return base64.b64encode(data).decode('ascii')


def _body(response: requests.Response) -> Any:
    if response.status_code == status.HTTP_204_NO_CONTENT \
            or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _parse(body: Any) -> Optional[RemoteImage]:
    if not isinstance(body, dict) or not body.get('imageUrl'):
        return None
    url = body['imageUrl']
    return RemoteImage(
        remote_id=str(body.get('id') or remote_id_from_url(url)),
        url=url,
        content_type=body.get('contentType'),
        created=_parse_date(body.get('createdAt')),
        updated=_parse_date(body.get('updatedAt'))
    )


def _parse_date(value: Any) -> Any:
    if not isinstance(value, str):
        return None
    try:
        return parser.isoparse(value)
    except ValueError:
        return None


def init_app(app: Any = None) -> None:
    """Set required configuration defaults for the application."""
    if app is not None:
        app.config.setdefault('IMAGESTORE_ENDPOINT',
                              'http://localhost:8001/api/v1')
        app.config.setdefault('IMAGESTORE_TOKEN', '')
        app.config.setdefault('IMAGESTORE_TIMEOUT', 10)


def get_session(app: Any = None) -> ImageStoreSession:
    """Create a new image store session."""
    config = (app or current_app).config
    return ImageStoreSession(config['IMAGESTORE_ENDPOINT'],
                             config['IMAGESTORE_TOKEN'],
                             config['IMAGESTORE_TIMEOUT'])


def current_session() -> ImageStoreSession:
    """Get the image store session for this request context."""
    if 'imagestore' not in g:
        g.imagestore = get_session()
    session: ImageStoreSession = g.imagestore
    return session


@wraps(ImageStoreSession.status)
def store_status() -> bool:
    """Wrapper for :meth:`ImageStoreSession.status`."""
    return current_session().status()


@wraps(ImageStoreSession.create_image)
def create_image(data: bytes, content_type: str) -> RemoteImage:
    """Wrapper for :meth:`ImageStoreSession.create_image`."""
    return current_session().create_image(data, content_type)


@wraps(ImageStoreSession.update_image)
def update_image(remote_id: str, data: bytes,
                 content_type: str) -> Optional[RemoteImage]:
    """Wrapper for :meth:`ImageStoreSession.update_image`."""
    return current_session().update_image(remote_id, data, content_type)


@wraps(ImageStoreSession.patch_image)
def patch_image(remote_id: str, data: Optional[bytes] = None,
                content_type: Optional[str] = None) -> Optional[RemoteImage]:
    """Wrapper for :meth:`ImageStoreSession.patch_image`."""
    return current_session().patch_image(remote_id, data, content_type)


@wraps(ImageStoreSession.get_image)
def get_image(remote_id: str) -> RemoteImage:
    """Wrapper for :meth:`ImageStoreSession.get_image`."""
    return current_session().get_image(remote_id)


@wraps(ImageStoreSession.delete_image)
def delete_image(remote_id: str) -> bool:
    """Wrapper for :meth:`ImageStoreSession.delete_image`."""
    return current_session().delete_image(remote_id)
