"""HTTP status codes used by the picture-it services."""

from http import HTTPStatus

HTTP_200_OK = HTTPStatus.OK
HTTP_201_CREATED = HTTPStatus.CREATED
HTTP_204_NO_CONTENT = HTTPStatus.NO_CONTENT

HTTP_400_BAD_REQUEST = HTTPStatus.BAD_REQUEST
HTTP_401_UNAUTHORIZED = HTTPStatus.UNAUTHORIZED
HTTP_403_FORBIDDEN = HTTPStatus.FORBIDDEN
HTTP_404_NOT_FOUND = HTTPStatus.NOT_FOUND
HTTP_405_METHOD_NOT_ALLOWED = HTTPStatus.METHOD_NOT_ALLOWED
HTTP_409_CONFLICT = HTTPStatus.CONFLICT

HTTP_500_INTERNAL_SERVER_ERROR = HTTPStatus.INTERNAL_SERVER_ERROR
HTTP_502_BAD_GATEWAY = HTTPStatus.BAD_GATEWAY


def is_client_error(code: int) -> bool:
    """Indicate whether ``code`` is a 4xx status."""
    return HTTPStatus.BAD_REQUEST <= code < HTTPStatus.INTERNAL_SERVER_ERROR


def is_server_error(code: int) -> bool:
    """Indicate whether ``code`` is a 5xx status."""
    return HTTPStatus.INTERNAL_SERVER_ERROR <= code < 600
