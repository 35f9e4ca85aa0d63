"""Wire encoding for signed tokens.

Token Format: base64("<issued_at>:<nonce>:<signature>")
- issued_at: decimal epoch seconds
- nonce: base64 of 64 random bytes
- signature: base64 of the raw HMAC digest

Base64 never produces ":", so the two separators are unambiguous.

The signed record is JSON encoded exactly the way PHP's json_encode does
by default, so tokens stay interchangeable with existing PHP verifiers.
"""

import base64
import json
import re
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Optional, Union

from .errors import InvalidInput

# Bounded to the width of a 64-bit epoch
_INTEGER = re.compile(r"[+-]?[0-9]{1,19}")


@dataclass(frozen=True)
class TokenParts:
    """Decoded token fields. Carries no proof of validity on its own."""

    issued_at: int
    nonce: str
    signature: str


def hex_to_base64(hex_string: str) -> str:
    """
    Re-encode a hex string as standard base64.

    Args:
        hex_string: Even-length hexadecimal text

    Returns:
        Padded base64 text of the decoded bytes

    Raises:
        ValueError: If the input is not valid even-length hex
    """
    return base64.b64encode(bytes.fromhex(hex_string)).decode("ascii")


def parse_timestamp(value: Union[int, str]) -> int:
    """
    Parse a token timestamp as an integer epoch.

    Raises:
        InvalidInput: If value is not an int or a decimal integer string
    """
    if isinstance(value, bool):
        raise InvalidInput("timestamp must be an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER.fullmatch(value):
        try:
            return int(value)
        except ValueError as e:
            raise InvalidInput(f"timestamp must be an integer: {e}") from e
    shown = value[:32] if isinstance(value, str) else value
    raise InvalidInput(f"timestamp must be an integer, got {shown!r}")


def _php_shape(value: Any) -> Any:
    # json_encode renders an empty associative array as []
    if isinstance(value, dict):
        if not value:
            return []
        return {key: _php_shape(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_php_shape(item) for item in value]
    return value


def canonical_json(value: Any) -> str:
    """
    Serialize ``value`` the way PHP json_encode does with default flags.

    - compact separators
    - non-ASCII escaped as \\uXXXX
    - "/" escaped as "\\/"
    - empty mappings rendered as []

    Key order is preserved, so callers sort before encoding.

    Raises:
        InvalidInput: If value holds something JSON cannot represent
    """
    try:
        encoded = json.dumps(
            _php_shape(value),
            separators=(",", ":"),
            ensure_ascii=True,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Context data is not JSON serializable: {e}")
    # "/" can only occur inside string literals
    return encoded.replace("/", "\\/")


# PHP 8 numeric string: optional surrounding whitespace, sign, fraction, exponent
_NUMERIC = re.compile(
    r"[ \t\n\r\v\f]*[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?[ \t\n\r\v\f]*"
)


def _cmp(left: Any, right: Any) -> int:
    return (left > right) - (left < right)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple, dict))


def _numeric_value(text: str) -> Optional[Union[int, float]]:
    if not _NUMERIC.fullmatch(text):
        return None
    stripped = text.strip(" \t\n\r\v\f")
    try:
        return int(stripped)
    except ValueError:
        return float(stripped)


def _number_text(number: Union[int, float]) -> str:
    if isinstance(number, float) and number.is_integer() and abs(number) < 1e15:
        return str(int(number))
    return str(number)


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value not in ("", "0")
    return bool(value)


def _compare_arrays(left: Any, right: Any) -> int:
    left_items = left if isinstance(left, dict) else dict(enumerate(left))
    right_items = right if isinstance(right, dict) else dict(enumerate(right))
    if len(left_items) != len(right_items):
        return _cmp(len(left_items), len(right_items))
    for key, value in left_items.items():
        if key not in right_items:
            # Incomparable arrays order the left operand last
            return 1
        result = php_compare(value, right_items[key])
        if result:
            return result
    return 0


def php_compare(left: Any, right: Any) -> int:
    """
    Compare two context values the way PHP 8's ``<=>`` does.

    Rules, in order:
    - null against a string compares as ""
    - bool or null against anything compares truthiness
    - arrays compare by size, then element by element; an array is
      greater than any scalar
    - numbers and numeric strings compare numerically
    - a number against a non-numeric string compares as text
    - two non-numeric strings compare as text

    Returns:
        Negative, zero or positive

    Raises:
        InvalidInput: For values JSON cannot represent
    """
    if left is None and isinstance(right, str):
        left = ""
    elif right is None and isinstance(left, str):
        right = ""

    if isinstance(left, bool) or isinstance(right, bool) or left is None or right is None:
        return _cmp(_truthy(left), _truthy(right))

    if _is_array(left) and _is_array(right):
        return _compare_arrays(left, right)
    if _is_array(left):
        return 1
    if _is_array(right):
        return -1

    if _is_number(left) and _is_number(right):
        return _cmp(left, right)

    if isinstance(left, str) and isinstance(right, str):
        left_number, right_number = _numeric_value(left), _numeric_value(right)
        if left_number is not None and right_number is not None:
            return _cmp(left_number, right_number)
        return _cmp(left, right)

    if _is_number(left) and isinstance(right, str):
        right_number = _numeric_value(right)
        if right_number is not None:
            return _cmp(left, right_number)
        return _cmp(_number_text(left), right)

    if isinstance(left, str) and _is_number(right):
        return -php_compare(right, left)

    raise InvalidInput(
        f"Cannot order context values of type {type(left).__name__} and {type(right).__name__}"
    )


def canonical_sort(values: list[Any]) -> list[Any]:
    """Order positional values the way PHP's sort() does with default flags."""
    return sorted(values, key=cmp_to_key(php_compare))


def encode_token(parts: TokenParts) -> str:
    """Serialize token fields into the base64 wire string."""
    body = f"{parts.issued_at}:{parts.nonce}:{parts.signature}"
    return base64.b64encode(body.encode("ascii")).decode("ascii")


def decode_token(token: str) -> Optional[TokenParts]:
    """
    Decode token fields WITHOUT verification.

    WARNING: This does NOT check the signature or expiry. Only use for
    debugging or logging. Never trust the decoded data without
    SignatureGenerator.verify().

    Args:
        token: Wire token

    Returns:
        TokenParts, or None if the token is structurally malformed
    """
    if not isinstance(token, str) or not token:
        return None

    try:
        payload = base64.b64decode(token).decode("ascii")
    except ValueError:
        # binascii.Error and UnicodeDecodeError are both ValueErrors
        return None

    fields = payload.split(":")
    if len(fields) != 3:
        return None

    issued_at, nonce, signature = fields
    try:
        return TokenParts(parse_timestamp(issued_at), nonce, signature)
    except InvalidInput:
        return None
