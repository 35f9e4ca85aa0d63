"""Crypto provider: secure random hex and keyed hashing.

The provider is a stateless capability handed to the signature engine.
Implementations can be swapped (HSM-backed, test doubles) without changing
the token format.
"""

import hashlib
import hmac
import secrets
from abc import ABC, abstractmethod
from typing import Optional, Union

from loguru import logger

from .config import Config
from .errors import InvalidConfiguration

BytesLike = Union[str, bytes]


def _to_bytes(value: BytesLike) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


class CryptoProvider(ABC):
    """Abstract base class for crypto providers.

    Providers supply cryptographically secure randomness and an HMAC
    function. They hold no per-call state and may be shared freely.
    """

    @abstractmethod
    def random_hex(self, length: int) -> str:
        """Return exactly ``length`` hex characters from a secure source.

        Args:
            length: Number of hex characters (must be even)

        Returns:
            Lowercase hexadecimal string
        """
        pass

    @abstractmethod
    def hash(self, data: BytesLike, secret: BytesLike) -> str:
        """Return the hex HMAC digest of ``data`` keyed by ``secret``.

        Args:
            data: Message to authenticate
            secret: HMAC key

        Returns:
            Lowercase hexadecimal digest
        """
        pass


class DefaultCryptoProvider(CryptoProvider):
    """Provider backed by ``secrets`` and HMAC-SHA512 (configurable digest)."""

    def __init__(self, algorithm: Optional[str] = None):
        """Initialize provider.

        Args:
            algorithm: hashlib digest name (defaults to Config.HASH_ALGORITHM)

        Raises:
            InvalidConfiguration: If the digest is not an allowed strong hash
        """
        algorithm = (algorithm or Config.HASH_ALGORITHM).lower()
        if algorithm not in Config.ALLOWED_HASH_ALGORITHMS:
            raise InvalidConfiguration(
                f"Unsupported hash algorithm {algorithm!r}; "
                f"expected one of {', '.join(Config.ALLOWED_HASH_ALGORITHMS)}"
            )
        self.algorithm = algorithm
        logger.debug(f"Crypto provider initialized with HMAC-{algorithm.upper()}")

    def random_hex(self, length: int) -> str:
        if isinstance(length, bool) or not isinstance(length, int):
            raise ValueError(f"length must be an integer, got {type(length).__name__}")
        if length <= 0 or length % 2:
            raise ValueError(f"length must be a positive even number, got {length}")
        return secrets.token_bytes(length // 2).hex()

    def hash(self, data: BytesLike, secret: BytesLike) -> str:
        return hmac.new(_to_bytes(secret), _to_bytes(data), self.algorithm).hexdigest()

    def __repr__(self) -> str:
        return f"DefaultCryptoProvider(algorithm={self.algorithm!r})"


_default_provider: Optional[DefaultCryptoProvider] = None


def get_default_provider() -> DefaultCryptoProvider:
    """Get or create the shared default provider."""
    global _default_provider
    if _default_provider is None:
        _default_provider = DefaultCryptoProvider()
    return _default_provider
