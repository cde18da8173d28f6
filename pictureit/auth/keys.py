"""
Asymmetric key material for signing and verifying access tokens.

The identity service loads the private key (and derives the public key from
it); the image service loads only the public key. Keys are loaded once, when
the application is created, and are read-only afterwards.
"""

from typing import NamedTuple, Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from .exceptions import ConfigurationError
from .. import logging

logger = logging.getLogger(__name__)

PrivateKey = Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey]
PublicKey = Union[rsa.RSAPublicKey, ec.EllipticCurvePublicKey]


class KeyMaterial(NamedTuple):
    """Keys available to a service."""

    verification_key: PublicKey
    """Checks token signatures."""

    signing_key: Optional[PrivateKey] = None
    """Signs tokens. Only the identity service has this."""

    @property
    def can_sign(self) -> bool:
        """Indicate whether tokens can be issued with these keys."""
        return self.signing_key is not None


def _read(path: Optional[str]) -> bytes:
    if not path:
        raise ConfigurationError('No key path configured')
    try:
        with open(path, 'rb') as f:
            return f.read()
    except OSError as e:
        raise ConfigurationError(f'Cannot read key at {path}: {e}') from e


def load_signing_keys(path: Optional[str],
                      passphrase: Optional[str] = None) -> KeyMaterial:
    """
    Load a PEM-encoded private key, and derive its public counterpart.

    Parameters
    ----------
    path : str
        Location of the private key file.
    passphrase : str
        Passphrase protecting the private key, if it is encrypted.

    Returns
    -------
    :class:`KeyMaterial`

    Raises
    ------
    :class:`ConfigurationError`
        If the key is missing, unreadable, or not a usable private key.

    """
    raw = _read(path)
    password = passphrase.encode('utf-8') if passphrase else None
    try:
        private_key = serialization.load_pem_private_key(raw, password)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ConfigurationError(f'Malformed private key at {path}') from e
    if not isinstance(private_key, (rsa.RSAPrivateKey,
                                    ec.EllipticCurvePrivateKey)):
        raise ConfigurationError(f'Unsupported private key type at {path}')
    logger.debug('Loaded signing key from %s', path)
    return KeyMaterial(verification_key=private_key.public_key(),
                       signing_key=private_key)


def load_verification_key(path: Optional[str]) -> KeyMaterial:
    """
    Load a PEM-encoded public key.

    Raises
    ------
    :class:`ConfigurationError`
        If the key is missing, unreadable, or not a usable public key.

    """
    raw = _read(path)
    try:
        public_key = serialization.load_pem_public_key(raw)
    except (ValueError, UnsupportedAlgorithm) as e:
        raise ConfigurationError(f'Malformed public key at {path}') from e
    if not isinstance(public_key, (rsa.RSAPublicKey,
                                   ec.EllipticCurvePublicKey)):
        raise ConfigurationError(f'Unsupported public key type at {path}')
    logger.debug('Loaded verification key from %s', path)
    return KeyMaterial(verification_key=public_key)
