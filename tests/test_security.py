# tests/test_security.py
"""Tests for password hashing and code and session generation."""

from __future__ import annotations

from neor.core.security import hash_password, new_code, new_session_token, verify_password


def test_password_hashing() -> None:
    hashed = hash_password("s3cret")
    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("other", hashed)
    assert not verify_password("s3cret", "not-a-hash")


def test_generators_skip_taken_values() -> None:
    seen: list[str] = []

    def taken_once(value: str) -> bool:
        seen.append(value)
        return len(seen) == 1

    code = new_code(taken_once)
    assert len(code) == 6 and code.isdigit()
    assert len(seen) == 2

    token = new_session_token(lambda value: False)
    assert len(token) == 36
