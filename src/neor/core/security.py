"""Password hashing and generation of session tokens and codes."""
from __future__ import annotations

import logging
import secrets
import uuid
from collections.abc import Callable

from passlib.context import CryptContext

from neor.core.values import CODE_MAX, CODE_MIN

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    """Return an argon2 hash of ``password``."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check ``plain_password`` against a stored hash.

    Malformed stored hashes count as a mismatch.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


def new_session_token(is_taken: Callable[[str], bool]) -> str:
    """Return a UUID4 session token for which ``is_taken`` is false."""
    while True:
        token = str(uuid.uuid4())
        if not is_taken(token):
            return token


def new_code(is_taken: Callable[[str], bool]) -> str:
    """Return a six digit code for which ``is_taken`` is false."""
    while True:
        code = str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))
        if not is_taken(code):
            return code
