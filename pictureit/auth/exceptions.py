"""Exceptions raised while loading keys and handling tokens."""


class InvalidToken(ValueError):
    """Token is forged, malformed, or expired."""


class EncodingError(ValueError):
    """User data could not be encoded into a token."""


class ConfigurationError(RuntimeError):
    """Key material is missing or cannot be loaded."""
