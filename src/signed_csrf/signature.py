"""Signature engine: issues and verifies context-bound CSRF tokens."""

import copy
import hmac
import time
from collections.abc import Mapping
from typing import Any, Optional, Union

from loguru import logger

from .config import Config
from .crypto import CryptoProvider, get_default_provider
from .encoding import (
    TokenParts,
    canonical_json,
    canonical_sort,
    decode_token,
    encode_token,
    hex_to_base64,
    parse_timestamp,
)
from .errors import InvalidInput
from .window import resolve_window


class SignatureGenerator:
    """
    Issues and verifies HMAC-signed tokens bound to a secret and context data.

    Context data is split into positional values (add_value) and keyed
    values (add_key_value). Both are canonicalized before signing, so the
    verifying side only needs the same set of values, not the same
    insertion order.

    Not safe for concurrent mutation: callers sharing an instance across
    threads must serialize add_*/set_data against issue/verify.

    Security:
    - HMAC (SHA-512 by default) over canonical JSON of timestamp, nonce and context
    - 64 random bytes of nonce per token
    - Constant-time signature comparison
    - Verification fails closed and never raises
    """

    def __init__(
        self,
        secret: Union[str, bytes],
        crypto: Optional[CryptoProvider] = None,
        validity_window=None,
    ):
        """Initialize engine.

        Args:
            secret: HMAC secret, owned by the caller
            crypto: Crypto provider (defaults to the shared HMAC-SHA512 provider)
            validity_window: Initial window (defaults to Config.DEFAULT_VALIDITY_WINDOW)

        Raises:
            InvalidConfiguration: If the initial window cannot be resolved
        """
        self.secret = secret
        self.crypto = crypto if crypto is not None else get_default_provider()
        self._positional: list[Any] = []
        self._keyed: dict[str, Any] = {}
        self._window_floor = 0
        self.set_validity_window(
            Config.DEFAULT_VALIDITY_WINDOW if validity_window is None else validity_window
        )

    # ========================================================================
    # Configuration
    # ========================================================================

    @property
    def validity_window(self) -> int:
        """Earliest accepted issuance epoch."""
        return self._window_floor

    def set_validity_window(self, window) -> None:
        """
        Set the earliest acceptable token issuance time.

        Args:
            window: int epoch, relative expression ("-1 hour"), datetime/date,
                or a tagged window from signed_csrf.window

        Raises:
            InvalidConfiguration: If window is of an unsupported type or unparseable;
                the previous window is kept
        """
        floor = resolve_window(window)
        self._window_floor = floor
        logger.debug(f"Validity window set to {floor}")

    # ========================================================================
    # Context data
    # ========================================================================

    def add_value(self, value: Any) -> None:
        """Append a positional context value."""
        self._positional.append(value)

    def add_key_value(self, key: str, value: Any) -> None:
        """Insert or overwrite a keyed context value."""
        if not isinstance(key, str):
            raise InvalidInput(f"key must be a string, got {type(key).__name__}")
        self._keyed[key] = value

    def set_data(self, data) -> None:
        """
        Replace all context data.

        Mapping input: str keys become keyed entries, int keys become
        positional entries in iteration order. Any other iterable becomes
        positional entries only.

        Raises:
            InvalidInput: On a mapping key that is neither str nor int, or non-iterable data
        """
        positional: list[Any] = []
        keyed: dict[str, Any] = {}

        if isinstance(data, Mapping):
            for key, value in data.items():
                if isinstance(key, str):
                    keyed[key] = value
                elif isinstance(key, int) and not isinstance(key, bool):
                    positional.append(value)
                else:
                    raise InvalidInput(f"Unsupported context key type: {type(key).__name__}")
        elif isinstance(data, (str, bytes)):
            raise InvalidInput("Context data must be a mapping or a sequence, got a string")
        else:
            try:
                positional.extend(data)
            except TypeError:
                raise InvalidInput(f"Context data must be a mapping or a sequence, got {type(data).__name__}")

        self._positional = positional
        self._keyed = keyed

    @property
    def data(self) -> dict[str, Any]:
        """Snapshot of the current context as {"array": [...], "object": {...}}."""
        return {
            "array": copy.deepcopy(self._positional),
            "object": copy.deepcopy(self._keyed),
        }

    # ========================================================================
    # Tokens
    # ========================================================================

    def issue(self) -> str:
        """
        Issue a new token for the current context.

        Returns:
            Wire token: base64("<issued_at>:<nonce>:<signature>")

        Raises:
            InvalidInput: If the context holds values JSON cannot represent
        """
        issued_at = int(time.time())
        nonce = hex_to_base64(self.crypto.random_hex(Config.NONCE_HEX_LENGTH))
        signature = self.sign(issued_at, nonce)
        return encode_token(TokenParts(issued_at, nonce, signature))

    def verify(self, token: str) -> bool:
        """
        Verify a presented token against the current context and window.

        Checks:
        1. Token decodes into exactly three fields with an integer timestamp
        2. Timestamp is not earlier than the validity window
        3. Signature matches the one recomputed from the current context

        Tokens stamped in the future are accepted; only the lower bound applies.

        Returns:
            True if the token is valid, False otherwise (never raises)
        """
        parts = decode_token(token)
        if parts is None:
            logger.warning("Token verification failed: malformed token")
            return False

        if parts.issued_at < self._window_floor:
            logger.warning(
                f"Token verification failed: expired "
                f"(issued_at={parts.issued_at}, window={self._window_floor})"
            )
            return False

        try:
            expected = self.sign(parts.issued_at, parts.nonce)
        except InvalidInput as e:
            logger.warning(f"Token verification failed: {e}")
            return False

        if not hmac.compare_digest(expected, parts.signature):
            logger.warning("Token verification failed: invalid signature")
            return False

        return True

    def sign(self, issued_at: Union[int, str], nonce: str) -> str:
        """
        Compute the signature for a timestamp and nonce under the current context.

        Signed record (canonical JSON, this key order):
            {"timestamp": int, "token": nonce, "array": [...values in PHP sort() order],
             "object": {...sorted by key}}

        Returns:
            base64 of the raw HMAC digest

        Raises:
            InvalidInput: If issued_at is not an integer or context is not serializable
        """
        timestamp = parse_timestamp(issued_at)

        record = {
            "timestamp": timestamp,
            "token": nonce,
            "array": canonical_sort(self._positional),
            "object": {key: self._keyed[key] for key in sorted(self._keyed)},
        }

        return hex_to_base64(self.crypto.hash(canonical_json(record), self.secret))

    def __repr__(self) -> str:
        return (
            f"SignatureGenerator(window={self._window_floor}, "
            f"values={len(self._positional)}, keys={len(self._keyed)}, crypto={self.crypto!r})"
        )
