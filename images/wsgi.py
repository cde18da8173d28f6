"""Web Server Gateway Interface entry-point."""

import os
from typing import Optional

from flask import Flask

from images.factory import create_app

__flask_app__: Optional[Flask] = None


def application(environ, start_response):    # type: ignore
    """WSGI application."""
    global __flask_app__
    for key, value in environ.items():
        # SERVER_NAME from the container is not useful for building URLs.
        if key == 'SERVER_NAME' or not isinstance(value, str):
            continue
        os.environ[key] = value
    # Keys are loaded at creation, so wait for the first request's environ.
    if __flask_app__ is None:
        __flask_app__ = create_app()
    return __flask_app__(environ, start_response)
