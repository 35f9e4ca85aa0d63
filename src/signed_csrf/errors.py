"""Exception types raised by the signature engine."""


class SignatureError(Exception):
    """Base class for signature engine errors."""

    pass


class InvalidConfiguration(SignatureError, ValueError):
    """Raised when a validity window or config value cannot be used.

    The engine state is left untouched when this is raised.
    """

    pass


class InvalidInput(SignatureError, ValueError):
    """Raised when signing input is malformed (non-integer timestamp, bad key, unserializable value)."""

    pass
