"""Controllers for looking up registered users."""

from typing import Tuple

from pictureit import domain, status

from ..services import users

ResponseData = Tuple[dict, int, dict]


def get_user(user_id: str) -> ResponseData:
    """Get the public identity document of a user."""
    user = users.find_by_id(user_id)
    return to_json(user), status.HTTP_200_OK, {}


def to_json(user: domain.User) -> dict:
    """Public fields of a user; never includes the password hash."""
    return {
        'id': user.user_id,
        'username': user.username,
        'firstName': user.first_name,
        'lastName': user.last_name,
        'email': user.email,
        'permissionLevel': int(user.permissions),
        'createdAt': user.created.isoformat() if user.created else None,
        'updatedAt': user.updated.isoformat() if user.updated else None
    }
