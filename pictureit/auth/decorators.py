"""
Permission- and ownership-based authorization of requests.

This module provides :func:`scoped`, a decorator factory used to protect
Flask routes. A route can require a capability (see
:mod:`pictureit.auth.permissions`) and/or provide an authorizer function
for per-request checks such as ownership. The call signature of the
authorizer is ``(claims: domain.Claims, *args, **kwargs) -> bool``, where
``*args`` and ``**kwargs`` are the arguments passed by Flask to the route
(e.g. URL parameters).

.. code-block:: python

   from pictureit.auth.decorators import scoped
   from pictureit.domain import Permission


   def is_owner(claims: domain.Claims, image_id: str) -> bool:
       '''Check whether the caller owns the requested image.'''
       return datastore.find_by_id(image_id).owner_id == claims.subject


   @blueprint.route('/images/<string:image_id>', methods=['DELETE'])
   @scoped(Permission.DELETE, authorizer=is_owner)
   def delete_image(image_id: str):
       ...

When the decorated route is called...

- If :class:`pictureit.auth.Auth` could not authenticate the request, the
  :class:`.AuthenticationError` it recorded is raised.
- If a capability is required, the permission mask in the claims is
  checked, raising :class:`.AuthorizationError` if it is lacking.
- If an authorizer was provided it is called, and
  :class:`.AuthorizationError` is raised if it returns ``False``.
- Otherwise the route is called with its original parameters.

"""

from functools import wraps
from typing import Any, Callable, Optional, Union

from flask import request

from . import gate
from .. import domain, logging
from ..exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)


def scoped(required: Optional[Union[int, domain.Permission]] = None,
           authorizer: Optional[Callable[..., bool]] = None) -> Callable:
    """
    Generate a decorator to enforce authorization requirements.

    Parameters
    ----------
    required : :class:`domain.Permission`
        Capabilities the caller must hold. If not provided, any
        authenticated caller passes this check.
    authorizer : function
        Additional check, e.g. resource ownership. Should have the signature
        ``(claims: domain.Claims, *args, **kwargs) -> bool``.

    Returns
    -------
    function
        A decorator that enforces authentication, the required capabilities
        and the (optional) authorizer.

    """
    def protector(func: Callable) -> Callable:
        """Decorator that provides authorization enforcement."""
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            """
            Check the request's claims before executing the route.

            Raises
            ------
            :class:`.AuthenticationError`
                Raised when the request is not authenticated.
            :class:`.AuthorizationError`
                Raised when the caller lacks the required capabilities, or
                the authorizer returns ``False``.

            """
            claims = getattr(request, 'auth', None)
            if isinstance(claims, AuthenticationError):
                raise claims
            if not isinstance(claims, domain.Claims):
                logger.debug('Request is not authenticated; aborting')
                raise AuthenticationError('Not authenticated')

            if required is not None:
                gate.authorize(claims, required)

            if authorizer and not authorizer(claims, *args, **kwargs):
                logger.debug('Authorizer returned negative result')
                raise AuthorizationError('Access denied')

            logger.debug('Request is authorized, proceeding')
            return func(*args, **kwargs)
        return wrapper
    return protector
