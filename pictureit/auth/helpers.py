"""Helpers for generating keys and tokens in development and tests."""

import os
import uuid
from datetime import datetime, timedelta
from typing import Optional, Tuple, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from . import tokens
from .keys import PrivateKey
from .. import domain


def generate_private_key(key_size: int = 2048) -> rsa.RSAPrivateKey:
    """Generate a new RSA private key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=key_size)


def to_pem(private_key: PrivateKey,
           passphrase: Optional[str] = None) -> Tuple[bytes, bytes]:
    """Serialize a private key and its public key as PEM."""
    if passphrase:
        encryption: serialization.KeySerializationEncryption = \
            serialization.BestAvailableEncryption(passphrase.encode('utf-8'))
    else:
        encryption = serialization.NoEncryption()
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=encryption
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    )
    return private_pem, public_pem


def write_keypair(directory: str, name: str = 'jwt',
                  passphrase: Optional[str] = None) -> Tuple[str, str]:
    """
    Generate a key pair and write it to ``directory``.

    Returns
    -------
    str
        Path to the private key (``{name}.key``).
    str
        Path to the public key (``{name}.pub``).

    """
    private_pem, public_pem = to_pem(generate_private_key(), passphrase)
    private_path = os.path.join(directory, f'{name}.key')
    public_path = os.path.join(directory, f'{name}.pub')
    with open(private_path, 'wb') as f:
        f.write(private_pem)
    os.chmod(private_path, 0o600)
    with open(public_path, 'wb') as f:
        f.write(public_pem)
    return private_path, public_path


def generate_token(key: PrivateKey,
                   user_id: Optional[str] = None,
                   mask: Union[int, domain.Permission] = 1,
                   username: str = 'jdoe',
                   first_name: str = 'Jane',
                   last_name: str = 'Doe',
                   email: str = 'jdoe@example.com',
                   lifetime: Union[int, timedelta] = 3600,
                   issued_at: Optional[datetime] = None,
                   algorithm: str = tokens.DEFAULT_ALGORITHM) -> str:
    """Generate a signed token for a (possibly made-up) user."""
    user = domain.User(
        user_id=user_id or uuid.uuid4().hex,
        username=username,
        first_name=first_name,
        last_name=last_name,
        email=email,
        permissions=domain.Permission(mask)
    )
    return tokens.encode(user, mask, key, lifetime, algorithm=algorithm,
                         issued_at=issued_at)
