"""
Security Tests for signed CSRF tokens

Security Requirements:
1. Token Forgery Prevention: Tokens signed with another secret MUST be rejected
2. Payload Tampering: Modified timestamp, nonce or signature MUST fail verification
3. Context Binding: Tokens MUST NOT verify against different context data
4. Malformed Input: verify() MUST return False and never raise
5. Expiry: Tokens older than the validity window MUST be rejected
"""

import base64
import time

import pytest

from signed_csrf.signature import SignatureGenerator


def _fields(token: str) -> list:
    return base64.b64decode(token).decode("ascii").split(":")


def _join(fields: list) -> str:
    return base64.b64encode(":".join(fields).encode("ascii")).decode("ascii")


def _flip_char(value: str, index: int = 0) -> str:
    replacement = "A" if value[index] != "A" else "B"
    return value[:index] + replacement + value[index + 1:]


@pytest.fixture
def engine():
    engine = SignatureGenerator("s3cr3t")
    engine.add_key_value("session", "d41d8cd98f00b204")
    engine.add_key_value("form", "transfer")
    engine.add_value("POST")
    return engine


def test_token_forgery_rejected(engine):
    """
    CRITICAL: Tokens signed with an attacker's secret must be rejected.

    Attack Scenario:
    1. Attacker knows the context values (they are often public form fields)
    2. Attacker signs a token with their own secret
    3. Server must reject because the HMAC does not match
    """
    attacker = SignatureGenerator("ATTACKER_SECRET_12345")
    attacker.set_data({"session": "d41d8cd98f00b204", "form": "transfer", 0: "POST"})

    forged_token = attacker.issue()
    assert engine.verify(forged_token) is False, "SECURITY BREACH: Forged token accepted!"

    assert engine.verify(engine.issue()) is True, "Legitimate token should be accepted"


@pytest.mark.parametrize("index", [0, 10, 40])
def test_signature_tampering_rejected(engine, index):
    fields = _fields(engine.issue())
    fields[2] = _flip_char(fields[2], index)
    assert engine.verify(_join(fields)) is False


def test_nonce_tampering_rejected(engine):
    fields = _fields(engine.issue())
    fields[1] = _flip_char(fields[1])
    assert engine.verify(_join(fields)) is False


def test_timestamp_tampering_rejected(engine):
    """Pushing the timestamp forward to extend lifetime breaks the signature."""
    fields = _fields(engine.issue())
    fields[0] = str(int(fields[0]) + 3600)
    assert engine.verify(_join(fields)) is False


def test_context_change_rejected(engine):
    token = engine.issue()

    engine.add_key_value("form", "delete_account")
    assert engine.verify(token) is False


def test_added_context_value_rejected(engine):
    token = engine.issue()

    engine.add_value("extra")
    assert engine.verify(token) is False


def test_secret_isolation():
    token = SignatureGenerator("secret-a").issue()
    assert SignatureGenerator("secret-b").verify(token) is False


def test_expired_token_with_valid_signature_rejected(engine):
    stale = int(time.time()) - 7200
    nonce = "bm9uY2U="
    token = _join([str(stale), nonce, engine.sign(stale, nonce)])

    assert engine.verify(token) is False


@pytest.mark.parametrize(
    "token",
    [
        "",
        None,
        12345,
        "!!!not base64!!!",
        "====",
        "ü",
        base64.b64encode(b"only:two").decode(),
        base64.b64encode(b"one").decode(),
        base64.b64encode(b"a:b:c:d").decode(),
        base64.b64encode(b"1700000000:bm9uY2U=:c2ln:extra").decode(),
        base64.b64encode(b"not-a-number:bm9uY2U=:c2ln").decode(),
        base64.b64encode(b"1.5e9:bm9uY2U=:c2ln").decode(),
        base64.b64encode(b"9" * 5000 + b":bm9uY2U=:c2ln").decode(),
        base64.b64encode(b"1" * 20 + b":bm9uY2U=:c2ln").decode(),
        base64.b64encode(b"\xff\xfe:\x00:\x01").decode(),
    ],
)
def test_malformed_tokens_return_false(engine, token):
    """verify() must never raise, whatever the caller hands it."""
    assert engine.verify(token) is False


def test_failure_reasons_are_indistinguishable_to_caller(engine):
    expired_engine = SignatureGenerator("s3cr3t", validity_window=int(time.time()) + 60)
    results = {
        engine.verify("garbage"),
        engine.verify(SignatureGenerator("other").issue()),
        expired_engine.verify(engine.issue()),
    }
    assert results == {False}
