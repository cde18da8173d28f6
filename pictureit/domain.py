"""Core data structures shared by the identity and image services."""

from datetime import datetime
from enum import IntFlag
from typing import NamedTuple, Optional


class Permission(IntFlag):
    """
    Capabilities a user may hold.

    Combine with ``|``; see :mod:`pictureit.auth.permissions`.
    """

    READ = 1
    CREATE = 2
    UPDATE = 4
    DELETE = 8


class User(NamedTuple):
    """An authenticated principal."""

    user_id: str
    """Opaque unique identifier."""

    username: str
    """Unique login name."""

    first_name: str
    last_name: str

    email: str
    """Unique, lowercase e-mail address."""

    permissions: Permission = Permission.READ
    """The capabilities held by this user."""

    created: Optional[datetime] = None
    updated: Optional[datetime] = None

    @property
    def name(self) -> str:
        """Display name of the user."""
        return f'{self.first_name} {self.last_name}'


class Claims(NamedTuple):
    """
    The claim set carried by an access token.

    Never persisted; reconstructed by :func:`pictureit.auth.tokens.decode` on
    every request.
    """

    subject: str
    """The :attr:`User.user_id` of the token holder."""

    permissions: Permission
    issued_at: datetime
    expires_at: datetime

    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
