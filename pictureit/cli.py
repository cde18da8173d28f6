"""
Command-line helpers for local development.

Generate a key pair for the services, then a token to try the image API:

.. code-block:: bash

   $ picture-it generate-keys --out ./keys
   Private key: ./keys/jwt.key
   Public key: ./keys/jwt.pub
   $ picture-it generate-token --key ./keys/jwt.key
   User ID [5c1d...]:
   Username [jdoe]:
   ...
   Permissions (comma delim) [READ,CREATE,UPDATE,DELETE]:

   eyJ0eXAiOiJKV1QiLCJhbGciOiJSUzI1NiJ9...

Start the identity service with ``JWT_PRIVATE_KEY_PATH=./keys/jwt.key`` and
the image service with ``JWT_PUBLIC_KEY_PATH=./keys/jwt.pub``, then send the
token as ``Authorization: Bearer <token>``.
"""

import os
import uuid
from functools import reduce

import click

from .auth import helpers, keys, permissions
from .auth.exceptions import ConfigurationError, EncodingError
from .domain import Permission

DEFAULT_PERMISSIONS = ','.join(perm.name for perm in Permission)


def _parse_permissions(value: str) -> Permission:
    try:
        perms = [Permission[name.strip().upper()]
                 for name in value.split(',') if name.strip()]
    except KeyError as e:
        raise click.BadParameter(f'Unknown permission {e}') from e
    if not perms:
        raise click.BadParameter('At least one permission is required')
    mask: Permission = reduce(lambda a, b: a | b, perms)
    return mask


@click.group()
def cli() -> None:
    """Development tools for picture-it."""


@cli.command('generate-keys')
@click.option('--out', default='.', type=click.Path(file_okay=False),
              help='Directory for the key files.')
@click.option('--name', default='jwt', help='Base name for the key files.')
@click.option('--passphrase', default=None,
              help='Encrypt the private key with this passphrase.')
def generate_keys(out: str, name: str, passphrase: str) -> None:
    """Generate an RSA key pair for signing and verifying tokens."""
    os.makedirs(out, exist_ok=True)
    private_path, public_path = helpers.write_keypair(out, name, passphrase)
    click.echo(f'Private key: {private_path}')
    click.echo(f'Public key: {public_path}')


@cli.command('generate-token')
@click.option('--key', 'key_path', required=True,
              type=click.Path(exists=True, dir_okay=False),
              help='Private key used to sign the token.')
@click.option('--passphrase', default=None)
@click.option('--user_id', prompt='User ID', default=lambda: uuid.uuid4().hex)
@click.option('--username', prompt='Username', default='jdoe')
@click.option('--first_name', prompt='First name', default='Jane')
@click.option('--last_name', prompt='Last name', default='Doe')
@click.option('--email', prompt='Email address', default='jdoe@example.com')
@click.option('--perms', prompt='Permissions (comma delim)',
              default=DEFAULT_PERMISSIONS)
@click.option('--lifetime', default=36000, type=int,
              help='Seconds until the token expires.')
def generate_token(key_path: str, passphrase: str, user_id: str,
                   username: str, first_name: str, last_name: str,
                   email: str, perms: str, lifetime: int) -> None:
    """Generate an access token for dev/testing purposes."""
    mask = _parse_permissions(perms)
    try:
        signing_key = keys.load_signing_keys(key_path, passphrase).signing_key
        token = helpers.generate_token(
            signing_key, user_id=user_id, mask=mask, username=username,
            first_name=first_name, last_name=last_name, email=email,
            lifetime=lifetime
        )
    except (ConfigurationError, EncodingError) as e:
        raise click.ClickException(str(e)) from e
    click.echo(', '.join(permissions.label_for(p)
                         for p in permissions.split(mask)), err=True)
    click.echo(token)


if __name__ == '__main__':
    cli()
