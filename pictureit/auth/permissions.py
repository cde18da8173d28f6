"""
Permission bits for picture-it users.

A user's permission mask is any non-empty combination of four independent
capabilities. The mask is issued in the access token and checked with
:func:`has_capability` wherever a route requires a capability (see
:func:`pictureit.auth.decorators.scoped`).

.. code-block:: python

   >>> mask = Permission.READ | Permission.UPDATE
   >>> has_capability(mask, Permission.UPDATE)
   True
   >>> has_capability(mask, Permission.READ | Permission.DELETE)
   False

"""

from typing import List, Union

from ..domain import Permission

ALL = Permission.READ | Permission.CREATE | Permission.UPDATE \
    | Permission.DELETE
"""Every capability."""

VALID_MASKS = list(range(1, int(ALL) + 1))
"""The 15 non-empty combinations of the four capability bits."""

_HUMAN_LABELS = {
    Permission.READ: 'View users and images',
    Permission.CREATE: 'Upload new images',
    Permission.UPDATE: 'Change your images',
    Permission.DELETE: 'Remove your images',
}


def has_capability(mask: Union[int, Permission],
                   required: Union[int, Permission]) -> bool:
    """Check that every bit of ``required`` is set in ``mask``."""
    return (int(mask) & int(required)) == int(required)


def is_valid(mask: Union[int, Permission]) -> bool:
    """Check that ``mask`` is one of the :data:`VALID_MASKS`."""
    return isinstance(mask, int) and not isinstance(mask, bool) \
        and int(mask) in VALID_MASKS


def split(mask: Union[int, Permission]) -> List[Permission]:
    """Get the individual capabilities in ``mask``."""
    return [perm for perm in Permission if int(mask) & int(perm)]


def label_for(permission: Permission) -> str:
    """Human-readable description of a single capability."""
    return _HUMAN_LABELS[permission]
