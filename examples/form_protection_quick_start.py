#!/usr/bin/env python3
"""
Quick start example for signed CSRF tokens.

This script demonstrates issuing a token while rendering a form and
verifying it when the form is posted back.
"""

import base64

from signed_csrf import SignatureGenerator
from signed_csrf.log_setup import configure_logging

SECRET = "change-me-to-a-long-random-secret"


def render_form(session_id: str) -> str:
    """Example: Issue a token bound to the session and form name."""
    print("=" * 80)
    print("Example 1: Issuing a token")
    print("=" * 80)
    print()

    engine = SignatureGenerator(SECRET)
    engine.add_key_value("session", session_id)
    engine.add_value("transfer_form")

    token = engine.issue()
    issued_at, nonce, signature = base64.b64decode(token).decode("ascii").split(":")
    print(f"Token:     {token[:48]}...")
    print(f"Issued at: {issued_at}")
    print(f"Nonce:     {nonce[:24]}...")
    print(f"Signature: {signature[:24]}...")
    print()
    return token


def handle_post(session_id: str, token: str) -> bool:
    """Example: Rebuild the same context (any order) and verify."""
    print("=" * 80)
    print("Example 2: Verifying a posted token")
    print("=" * 80)
    print()

    engine = SignatureGenerator(SECRET, validity_window="-15 minutes")
    engine.add_value("transfer_form")
    engine.add_key_value("session", session_id)

    valid = engine.verify(token)
    print(f"Session {session_id!r}: {'accepted' if valid else 'rejected'}")
    print()
    return valid


def main():
    configure_logging(level="WARNING")

    token = render_form("sess-123")
    handle_post("sess-123", token)

    # Same token replayed from another session fails
    handle_post("sess-456", token)


if __name__ == "__main__":
    main()
