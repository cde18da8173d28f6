"""
Functions for working with signed access tokens.

Tokens are JWTs signed with an asymmetric algorithm: the identity service
signs with its private key, and any service holding the public key can
verify a token without calling back to the identity service. Tokens are
stateless; expiry is the only way a token stops being valid.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Optional, Union

import jwt
from pytz import UTC

from . import permissions
from .exceptions import EncodingError, InvalidToken
from .keys import PrivateKey, PublicKey
from .. import domain, logging

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = 'RS256'
ASYMMETRIC_ALGORITHMS = ('RS256', 'RS384', 'RS512', 'PS256', 'PS384', 'PS512',
                         'ES256', 'ES384', 'ES512')
REQUIRED_CLAIMS = ['sub', 'iat', 'exp']


def encode(user: domain.User, mask: Union[int, domain.Permission],
           key: PrivateKey, lifetime: Union[int, timedelta],
           algorithm: str = DEFAULT_ALGORITHM,
           issued_at: Optional[datetime] = None) -> str:
    """
    Issue a signed token for ``user``.

    Parameters
    ----------
    user : :class:`domain.User`
        Profile fields of the user are embedded in the token.
    mask : int
        The permission mask to grant. Must be one of
        :data:`permissions.VALID_MASKS`.
    key : private key
        The signing key (see :mod:`pictureit.auth.keys`).
    lifetime : int or :class:`timedelta`
        How long the token is valid, in seconds if an int.
    algorithm : str
        One of :data:`ASYMMETRIC_ALGORITHMS`.
    issued_at : :class:`datetime`
        Defaults to now.

    Returns
    -------
    str

    Raises
    ------
    :class:`EncodingError`
        If the user data, mask or algorithm cannot be encoded.

    """
    if algorithm not in ASYMMETRIC_ALGORITHMS:
        raise EncodingError(f'Not an asymmetric algorithm: {algorithm}')
    if not permissions.is_valid(mask):
        raise EncodingError(f'Invalid permission mask: {mask}')
    if not user.user_id:
        raise EncodingError('User has no id')
    if isinstance(lifetime, timedelta):
        lifetime = int(lifetime.total_seconds())
    if issued_at is None:
        issued_at = datetime.now(tz=UTC)

    iat = int(issued_at.timestamp())
    claims: Dict[str, Any] = {
        'sub': str(user.user_id),
        'username': user.username,
        'given_name': user.first_name,
        'family_name': user.last_name,
        'email': user.email,
        'permission_level': int(mask),
        'iat': iat,
        'exp': iat + int(lifetime)
    }
    try:
        token = jwt.encode(claims, key, algorithm=algorithm)
    except (TypeError, ValueError, jwt.exceptions.PyJWTError) as e:
        raise EncodingError(f'Could not encode token: {e}') from e
    if isinstance(token, bytes):
        token = token.decode('ascii')
    return token


def decode(token: str, key: PublicKey,
           algorithms: Iterable[str] = ASYMMETRIC_ALGORITHMS) -> domain.Claims:
    """
    Verify a token and get its claims.

    Raises
    ------
    :class:`InvalidToken`
        If the signature does not match, the token is malformed or missing
        required claims, or the token has expired. The cause is chained but
        the message is always the same.

    """
    try:
        data: Dict[str, Any] = jwt.decode(
            token, key,
            algorithms=list(algorithms),
            options={'require': REQUIRED_CLAIMS}
        )
    except (jwt.exceptions.PyJWTError, ValueError, TypeError) as e:
        logger.debug('Token rejected: %s: %s', type(e).__name__, e)
        raise InvalidToken('Not a valid token') from e

    mask = data.get('permission_level')
    if not permissions.is_valid(mask):
        logger.debug('Token rejected: bad permission level %r', mask)
        raise InvalidToken('Not a valid token')
    try:
        return domain.Claims(
            subject=str(data['sub']),
            permissions=domain.Permission(mask),
            issued_at=datetime.fromtimestamp(int(data['iat']), tz=UTC),
            expires_at=datetime.fromtimestamp(int(data['exp']), tz=UTC),
            username=data.get('username'),
            first_name=data.get('given_name'),
            last_name=data.get('family_name'),
            email=data.get('email')
        )
    except (TypeError, ValueError) as e:
        logger.debug('Token rejected: bad claim values: %s', e)
        raise InvalidToken('Not a valid token') from e
