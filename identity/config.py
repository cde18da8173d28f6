"""Flask configuration for the identity service."""

import os

VERSION = '0.3'

JWT_PRIVATE_KEY_PATH = os.environ.get('JWT_PRIVATE_KEY_PATH')
"""PEM private key used to sign access tokens. Required."""

JWT_PRIVATE_KEY_PASSPHRASE = os.environ.get('JWT_PRIVATE_KEY_PASSPHRASE')
"""Passphrase for the private key, if it is encrypted."""

JWT_ALGORITHM = os.environ.get('JWT_ALGORITHM', 'RS256')

ACCESS_TOKEN_LIFE = int(os.environ.get('ACCESS_TOKEN_LIFE', '3600'))
"""Lifetime of an access token, in seconds."""

DEFAULT_PERMISSIONS = int(os.environ.get('DEFAULT_PERMISSIONS', '1'))
"""Permission mask given to newly registered users (1 = read)."""

LOGFILE = os.environ.get('LOGFILE')
LOGLEVEL = os.environ.get('LOGLEVEL', 20)

SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite://')
SQLALCHEMY_TRACK_MODIFICATIONS = False
CREATE_DB = bool(int(os.environ.get('CREATE_DB', 0)))
