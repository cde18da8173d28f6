"""
Request-level authentication and authorization.

Each request moves through these steps, and stops at the first failure:

1. The ``Authorization`` header is parsed. It must use the ``Bearer``
   scheme; otherwise :class:`.AuthenticationError` (401).
2. The token is verified with :func:`.tokens.decode`. Any failure becomes
   :class:`.AuthenticationError` (401); the cause is not exposed.
3. The request is now authenticated, and carries :class:`.domain.Claims`.
4. Routes that require a capability check the permission mask with
   :func:`authorize`; failure is :class:`.AuthorizationError` (403).
5. Routes that act on a user's own resource also compare the resource's
   owner with the token subject using :func:`authorize_owner`; a mismatch is
   :class:`.AuthorizationError` (403) no matter what the mask allows.

Nothing here has side effects beyond logging.
"""

from typing import Iterable, Optional, Union

from . import permissions, tokens
from .exceptions import InvalidToken
from .keys import PublicKey
from .. import domain, logging
from ..exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

SCHEME = 'Bearer'


def parse_authorization(header: Optional[str]) -> str:
    """
    Get the bearer token from an ``Authorization`` header value.

    Raises
    ------
    :class:`AuthenticationError`
        If the header is absent, does not use the bearer scheme, or has no
        token.

    """
    parts = header.split() if header else []
    if not parts:
        logger.debug('No authorization header')
        raise AuthenticationError('No authorization header')
    if parts[0].lower() != SCHEME.lower():
        logger.debug('Authorization header lacks bearer scheme')
        raise AuthenticationError('Invalid authentication scheme')
    if len(parts) != 2:
        logger.debug('Authorization header is not two parts')
        raise AuthenticationError('Malformed authorization header')
    return parts[1]


def authenticate(header: Optional[str], key: PublicKey,
                 algorithms: Iterable[str] = tokens.ASYMMETRIC_ALGORITHMS) \
        -> domain.Claims:
    """
    Resolve the caller's identity from an ``Authorization`` header.

    Raises
    ------
    :class:`AuthenticationError`
        If the header or the token is not valid, for any reason.

    """
    token = parse_authorization(header)
    try:
        claims = tokens.decode(token, key, algorithms)
    except InvalidToken as e:
        raise AuthenticationError('Invalid authorization token') from e
    logger.debug('Authenticated subject %s', claims.subject)
    return claims


def authorize(claims: domain.Claims,
              required: Union[int, domain.Permission]) -> None:
    """
    Check that the caller holds every capability in ``required``.

    Raises
    ------
    :class:`AuthorizationError`

    """
    if not permissions.has_capability(claims.permissions, required):
        logger.debug('Subject %s lacks %r', claims.subject, required)
        raise AuthorizationError('Permission denied')


def authorize_owner(claims: domain.Claims, owner_id: str) -> None:
    """
    Check that the caller is the owner of a resource.

    Raises
    ------
    :class:`AuthorizationError`

    """
    if str(owner_id) != str(claims.subject):
        logger.debug('Subject %s does not own resource of %s',
                     claims.subject, owner_id)
        raise AuthorizationError('You can only modify your own resources')
