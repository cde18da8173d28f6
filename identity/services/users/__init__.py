"""
Persistence of user accounts.

Stores users with a salted password hash (see
:func:`werkzeug.security.generate_password_hash`), and looks them up by id or
by credentials. Field constraints are enforced by the registration form
before anything reaches this module; the uniqueness of ``username`` and
``email`` is enforced here.
"""

from functools import lru_cache
from typing import Union

from pytz import UTC
from werkzeug.security import check_password_hash, generate_password_hash

from pictureit import domain, logging
from pictureit.auth import permissions
from pictureit.exceptions import ConflictError, NotFoundError, \
    ValidationError

from . import models, util

logger = logging.getLogger(__name__)

init_app = util.init_app
create_all = util.create_all
drop_all = util.drop_all


class NoSuchUser(NotFoundError):
    """A user was requested that does not exist."""


class UserExists(ConflictError):
    """The username or e-mail address is already registered."""


class AuthenticationFailed(RuntimeError):
    """The username is unknown, or the password does not match."""


def create_user(username: str, password: str, first_name: str,
                last_name: str, email: str,
                mask: Union[int, domain.Permission] = domain.Permission.READ) \
        -> domain.User:
    """
    Register a new user.

    Parameters
    ----------
    username : str
    password : str
        Plaintext password; only its hash is stored.
    first_name : str
    last_name : str
    email : str
        Stored lowercased.
    mask : int
        Permission mask for the new user.

    Returns
    -------
    :class:`domain.User`

    Raises
    ------
    :class:`UserExists`
        If the username or e-mail address is taken.
    :class:`ValidationError`
        If ``mask`` is not a valid permission mask.

    """
    if not permissions.is_valid(mask):
        raise ValidationError(errors={'permissionLevel': ['Invalid value']})
    db_user = models.DBUser(
        username=username,
        password=generate_password_hash(password),
        first_name=first_name,
        last_name=last_name,
        email=email.strip().lower(),
        permission_level=int(mask)
    )
    try:
        with util.transaction() as dbsession:
            dbsession.add(db_user)
    except util.Duplicate as e:
        logger.debug('Registration conflict for %s', username)
        raise UserExists('Username or email already registered') from e
    logger.info('Registered user %s', db_user.user_id)
    return _to_domain(db_user)


def find_by_id(user_id: str) -> domain.User:
    """
    Load a :class:`domain.User` by its id.

    Raises
    ------
    :class:`NoSuchUser`

    """
    with util.transaction(commit=False) as dbsession:
        db_user = dbsession.get(models.DBUser, user_id)
        if db_user is None:
            raise NoSuchUser(f'No user with id {user_id}')
        return _to_domain(db_user)


def find_by_credentials(username: str, password: str) -> domain.User:
    """
    Load the user identified by ``username`` if ``password`` matches.

    A password hash is checked whether or not the user exists, so the two
    failure cases take about the same time.

    Raises
    ------
    :class:`AuthenticationFailed`

    """
    with util.transaction(commit=False) as dbsession:
        db_user = dbsession.query(models.DBUser) \
            .filter(models.DBUser.username == username) \
            .first()
        if db_user is None:
            check_password_hash(_dummy_hash(), password)
            raise AuthenticationFailed('Invalid username or password')
        if not check_password_hash(db_user.password, password):
            raise AuthenticationFailed('Invalid username or password')
        return _to_domain(db_user)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return generate_password_hash('not-a-password')


def _to_domain(db_user: models.DBUser) -> domain.User:
    return domain.User(
        user_id=str(db_user.user_id),
        username=db_user.username,
        first_name=db_user.first_name,
        last_name=db_user.last_name,
        email=db_user.email,
        permissions=domain.Permission(db_user.permission_level),
        created=UTC.localize(db_user.created) if db_user.created else None,
        updated=UTC.localize(db_user.updated) if db_user.updated else None
    )
