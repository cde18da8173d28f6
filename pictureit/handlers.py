"""
Renders errors as JSON responses.

This is the only place where exceptions become HTTP responses; everything
else raises and lets errors propagate to here.
"""

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException

from . import logging
from .exceptions import ConsistencyError, PictureItError, UpstreamError, \
    ValidationError

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""
    app.errorhandler(HTTPException)(jsonify_exception)
    app.errorhandler(ValidationError)(jsonify_validation_error)
    app.errorhandler(UpstreamError)(jsonify_upstream_error)
    app.errorhandler(ConsistencyError)(jsonify_consistency_error)
    app.errorhandler(PictureItError)(jsonify_error)


def jsonify_exception(error: HTTPException) -> Response:
    """Render werkzeug exceptions as JSON."""
    exc_resp = error.get_response()
    response: Response = jsonify(reason=error.description)
    response.status_code = exc_resp.status_code
    return response


def jsonify_error(error: PictureItError) -> Response:
    """Render a :class:`.PictureItError` with its generic reason."""
    response: Response = jsonify(reason=error.reason)
    response.status_code = error.code
    return response


def jsonify_validation_error(error: ValidationError) -> Response:
    """Render a :class:`.ValidationError` with its field errors."""
    response: Response = jsonify(reason=str(error), errors=error.errors)
    response.status_code = error.code
    return response


def jsonify_upstream_error(error: UpstreamError) -> Response:
    """
    Pass a failure from the remote image store through to the client.

    The upstream body is returned verbatim when the upstream status is an
    error status; otherwise the response is a generic 502.
    """
    if error.status_code is not None and error.code == error.status_code:
        body = error.body
        if not isinstance(body, (dict, list)):
            body = {'reason': body or error.reason}
    else:
        body = {'reason': 'Image store unavailable'}
    response: Response = jsonify(body)
    response.status_code = error.code
    return response


def jsonify_consistency_error(error: ConsistencyError) -> Response:
    """Log reconciliation details, and render a generic server error."""
    logger.error('Reconciliation required: %s', error,
                 extra={'reconcile': error.context})
    response: Response = jsonify(reason=error.reason)
    response.status_code = error.code
    return response
