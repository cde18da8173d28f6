"""
Controllers for registration and login.

Registration validates the payload with :class:`.forms.RegistrationForm` and
stores the user with the configured default permission mask. Login checks
the credentials and issues a signed access token carrying the user's
permission mask.
"""

from datetime import timedelta
from typing import Any, Tuple, Union

from flask import url_for

from pictureit import logging, status
from pictureit.auth import tokens
from pictureit.auth.keys import PrivateKey
from pictureit.exceptions import AuthenticationError, ValidationError

from .forms import LoginForm, RegistrationForm
from ..services import users

logger = logging.getLogger(__name__)

ResponseData = Tuple[dict, int, dict]


def register(payload: Any, default_mask: int) -> ResponseData:
    """Register a new user from a JSON payload."""
    form = RegistrationForm.from_json(payload)
    if not form.validate():
        logger.debug('Registration payload not valid: %s', form.errors)
        raise ValidationError(errors=form.wire_errors())

    user = users.create_user(
        username=form.username.data,
        password=form.password.data,
        first_name=form.first_name.data,
        last_name=form.last_name.data,
        email=form.email.data,
        mask=default_mask
    )
    location = url_for('identity.get_user', user_id=user.user_id)
    return {'id': user.user_id}, status.HTTP_201_CREATED, \
        {'Location': location}


def login(payload: Any, signing_key: PrivateKey,
          lifetime: Union[int, timedelta],
          algorithm: str = tokens.DEFAULT_ALGORITHM) -> ResponseData:
    """
    Exchange a username and password for an access token.

    Missing fields, an unknown username and a wrong password all get the
    same response.

    Raises
    ------
    :class:`AuthenticationError`

    """
    form = LoginForm.from_json(payload)
    if not form.validate():
        logger.debug('Login payload not valid')
        raise AuthenticationError('Invalid username or password')
    try:
        user = users.find_by_credentials(form.username.data,
                                         form.password.data)
    except users.AuthenticationFailed as e:
        logger.debug('Login failed: %s', e)
        raise AuthenticationError('Invalid username or password') from e

    token = tokens.encode(user, user.permissions, signing_key, lifetime,
                          algorithm=algorithm)
    logger.info('Issued access token for %s', user.user_id)
    return {'access_token': token}, status.HTTP_201_CREATED, {}
