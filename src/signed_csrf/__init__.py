"""signed-csrf - HMAC-signed anti-forgery tokens bound to contextual data."""

__version__ = "0.1.0"

from .config import Config
from .crypto import CryptoProvider, DefaultCryptoProvider, get_default_provider
from .encoding import (
    TokenParts,
    canonical_sort,
    decode_token,
    encode_token,
    hex_to_base64,
    php_compare,
)
from .errors import InvalidConfiguration, InvalidInput, SignatureError
from .signature import SignatureGenerator
from .window import AbsoluteEpoch, PointInTime, RelativeExpression, resolve_window

__all__ = [
    "SignatureGenerator",
    "CryptoProvider",
    "DefaultCryptoProvider",
    "get_default_provider",
    "TokenParts",
    "decode_token",
    "encode_token",
    "hex_to_base64",
    "canonical_sort",
    "php_compare",
    "AbsoluteEpoch",
    "RelativeExpression",
    "PointInTime",
    "resolve_window",
    "Config",
    "SignatureError",
    "InvalidConfiguration",
    "InvalidInput",
    "__version__",
]
