"""Centralized configuration for signed-csrf."""

import os

from .errors import InvalidConfiguration
from .window import RelativeExpression


class Config:
    """
    signed-csrf configuration with environment variable overrides.

    All configuration values are centralized here with sensible defaults.
    Values can be overridden via environment variables.
    """

    @staticmethod
    def _parse_int(name: str, default: str) -> int:
        """Parse an integer environment variable."""
        raw = os.getenv(name, default)
        try:
            return int(raw)
        except ValueError as e:
            raise ValueError(f"Invalid {name} environment variable: {e}")

    # ========================================================================
    # Token Configuration
    # ========================================================================
    DEFAULT_VALIDITY_WINDOW: str = os.getenv("CSRF_VALIDITY_WINDOW", "-1 hour")
    NONCE_HEX_LENGTH: int = _parse_int.__func__("CSRF_NONCE_HEX_LENGTH", "128")

    # ========================================================================
    # Crypto Provider
    # ========================================================================
    HASH_ALGORITHM: str = os.getenv("CSRF_HASH_ALGORITHM", "sha512").lower()
    ALLOWED_HASH_ALGORITHMS: tuple[str, ...] = (
        "sha256",
        "sha384",
        "sha512",
        "sha3_256",
        "sha3_384",
        "sha3_512",
    )

    # ========================================================================
    # Logging
    # ========================================================================
    LOG_LEVEL: str = os.getenv("CSRF_LOG_LEVEL", "WARNING").upper()
    LOG_LEVELS: tuple[str, ...] = (
        "TRACE",
        "DEBUG",
        "INFO",
        "SUCCESS",
        "WARNING",
        "ERROR",
        "CRITICAL",
    )

    @classmethod
    def validate(cls) -> bool:
        """
        Validate configuration consistency.

        Checks:
        - NONCE_HEX_LENGTH is a positive even number
        - HASH_ALGORITHM is one of the allowed digests
        - DEFAULT_VALIDITY_WINDOW parses as a relative expression
        - LOG_LEVEL is a known loguru level

        Returns:
            True if validation passes

        Raises:
            ValueError: If validation fails
        """
        errors = []

        if cls.NONCE_HEX_LENGTH <= 0 or cls.NONCE_HEX_LENGTH % 2:
            errors.append(
                f"NONCE_HEX_LENGTH must be a positive even number, got {cls.NONCE_HEX_LENGTH}"
            )
        elif cls.NONCE_HEX_LENGTH < 32:
            import warnings

            warnings.warn(
                f"NONCE_HEX_LENGTH is only {cls.NONCE_HEX_LENGTH} characters. "
                "For security, use at least 32 (128 random bits)."
            )

        if cls.HASH_ALGORITHM not in cls.ALLOWED_HASH_ALGORITHMS:
            errors.append(
                f"HASH_ALGORITHM must be one of {', '.join(cls.ALLOWED_HASH_ALGORITHMS)}, "
                f"got {cls.HASH_ALGORITHM!r}"
            )

        try:
            RelativeExpression(cls.DEFAULT_VALIDITY_WINDOW).resolve()
        except InvalidConfiguration as e:
            errors.append(f"DEFAULT_VALIDITY_WINDOW is not usable: {e}")

        if cls.LOG_LEVEL not in cls.LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of {', '.join(cls.LOG_LEVELS)}, got {cls.LOG_LEVEL!r}")

        if errors:
            raise ValueError(f"Config validation failed: {'; '.join(errors)}")

        return True
