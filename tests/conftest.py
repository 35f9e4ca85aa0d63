"""Pytest fixtures and test utilities for signed-csrf test suite."""

import itertools
from typing import List

import pytest
from loguru import logger

from signed_csrf.crypto import CryptoProvider, DefaultCryptoProvider
from signed_csrf.signature import SignatureGenerator


# ============================================================================
# CRYPTO FIXTURES
# ============================================================================


class CountingCryptoProvider(CryptoProvider):
    """
    Deterministic provider for tests.

    random_hex() returns a counter-derived hex string so nonces are
    predictable; hash() delegates to the real HMAC-SHA512 implementation.
    """

    def __init__(self):
        self._counter = itertools.count()
        self._hmac = DefaultCryptoProvider("sha512")
        self.hash_calls: List[str] = []

    def random_hex(self, length: int) -> str:
        value = format(next(self._counter), "x")
        return value.zfill(length)[-length:]

    def hash(self, data, secret) -> str:
        self.hash_calls.append(data)
        return self._hmac.hash(data, secret)


@pytest.fixture
def counting_crypto():
    """Provide a deterministic crypto provider."""
    return CountingCryptoProvider()


# ============================================================================
# ENGINE FIXTURES
# ============================================================================


@pytest.fixture
def make_engine():
    """
    Factory for SignatureGenerator instances.

    Usage:
        engine = make_engine("secret", values=["a"], keyed={"user": 1})
    """

    def _make(secret="test_secret", values=(), keyed=None, **kwargs):
        engine = SignatureGenerator(secret, **kwargs)
        for value in values:
            engine.add_value(value)
        for key, value in (keyed or {}).items():
            engine.add_key_value(key, value)
        return engine

    return _make


# ============================================================================
# LOG CAPTURE
# ============================================================================


@pytest.fixture
def log_messages():
    """
    Capture loguru records emitted during the test.

    Yields:
        List of formatted "LEVEL message" strings
    """
    messages: List[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["level"].name + " " + message.record["message"]),
        level="DEBUG",
    )
    try:
        yield messages
    finally:
        logger.remove(handler_id)
