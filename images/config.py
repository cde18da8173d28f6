"""Flask configuration for the image service."""

import os

VERSION = '0.3'

JWT_PUBLIC_KEY_PATH = os.environ.get('JWT_PUBLIC_KEY_PATH')
"""PEM public key used to verify access tokens. Required."""

JWT_ALGORITHM = os.environ.get('JWT_ALGORITHM', 'RS256')

IMAGESTORE_ENDPOINT = os.environ.get('IMAGESTORE_ENDPOINT',
                                     'http://localhost:8001/api/v1')
"""Base URL of the remote image store API."""

IMAGESTORE_TOKEN = os.environ.get('IMAGESTORE_TOKEN', '')
"""Sent to the image store in the ``X-API-Private-Token`` header."""

IMAGESTORE_TIMEOUT = float(os.environ.get('IMAGESTORE_TIMEOUT', '10'))
"""Seconds to wait for the image store before giving up."""

LOGFILE = os.environ.get('LOGFILE')
LOGLEVEL = os.environ.get('LOGLEVEL', 20)

SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite://')
SQLALCHEMY_TRACK_MODIFICATIONS = False
CREATE_DB = bool(int(os.environ.get('CREATE_DB', 0)))
