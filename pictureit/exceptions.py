"""
Error taxonomy shared by the picture-it services.

Components raise these and let them propagate. Only the request boundary
(:mod:`pictureit.handlers`) turns them into HTTP responses, using
:attr:`PictureItError.code`.
"""

from typing import Any, Dict, List, Optional

from . import status


class PictureItError(RuntimeError):
    """Base class for errors that map to a response status."""

    code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    reason: str = 'Internal Server Error'


class AuthenticationError(PictureItError):
    """No token, a token with the wrong scheme, or an invalid token."""

    code = status.HTTP_401_UNAUTHORIZED
    reason = 'Unauthorized'


class AuthorizationError(PictureItError):
    """The caller lacks the required permission, or does not own the target."""

    code = status.HTTP_403_FORBIDDEN
    reason = 'Forbidden'


class NotFoundError(PictureItError):
    """A requested identity or image does not exist."""

    code = status.HTTP_404_NOT_FOUND
    reason = 'Not Found'


class ValidationError(PictureItError):
    """Input does not satisfy field constraints."""

    code = status.HTTP_400_BAD_REQUEST
    reason = 'Bad Request'

    def __init__(self, message: str = 'Validation failed',
                 errors: Optional[Dict[str, List[str]]] = None) -> None:
        super().__init__(message)
        self.errors = errors or {}


class ConflictError(PictureItError):
    """A uniqueness constraint would be violated."""

    code = status.HTTP_409_CONFLICT
    reason = 'Conflict'


class UpstreamError(PictureItError):
    """
    The remote image store did not report success.

    ``status_code`` and ``body`` are what the store returned. When the store
    could not be reached (or timed out) there is no upstream response, and
    ``status_code`` is ``None``.
    """

    code = status.HTTP_502_BAD_GATEWAY
    reason = 'Bad Gateway'

    def __init__(self, message: str, status_code: Optional[int] = None,
                 body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        if status_code is not None \
                and (status.is_client_error(status_code)
                     or status.is_server_error(status_code)):
            self.code = status_code


class ConsistencyError(PictureItError):
    """
    The remote store and the local record store disagree.

    Raised when one side of a remote-then-local sequence succeeded and the
    other did not. ``context`` holds what an operator needs to reconcile the
    two by hand.
    """

    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    reason = 'Image storage is inconsistent'

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context = context
