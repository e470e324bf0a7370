"""Validated value types for form input.

Each type wraps a plain ``str`` (or ``frozenset`` for tags) and can only be
built through ``parse``, so holding an instance means the value already passed
its length and format rules. Lengths are counted in code points.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

TITLE_MAX_CHARS = 256
DESCRIPTION_MAX_CHARS = 512
CONTENT_MAX_CHARS = 8129
TAG_MAX_CHARS = 64
TAGS_MAX_COUNT = 10
TAGS_MAX_CHARS = TAG_MAX_CHARS * TAGS_MAX_COUNT + (TAGS_MAX_COUNT - 1)
USERNAME_MAX_CHARS = 64
EMAIL_MAX_CHARS = 320
PASSWORD_MAX_CHARS = 64
NAME_MAX_CHARS = 256
USER_DESCRIPTION_MAX_CHARS = 512
CODE_MIN = 100_000
CODE_MAX = 999_999

_SLUG_RE = re.compile(r"[A-Za-z0-9\-_]{1,64}")
_CODE_RE = re.compile(r"[0-9]{6}")


class InvalidValue(ValueError):
    """Raised when raw input does not satisfy a value type's rules."""


def _bounded(raw: str, max_chars: int) -> str:
    if not raw or len(raw) > max_chars:
        raise InvalidValue(raw)
    return raw


class _BoundedText(str):
    max_chars: int = 0

    @classmethod
    def parse(cls, raw: str):
        return cls(_bounded(raw, cls.max_chars))


class Title(_BoundedText):
    max_chars = TITLE_MAX_CHARS


class Description(_BoundedText):
    max_chars = DESCRIPTION_MAX_CHARS


class Content(_BoundedText):
    max_chars = CONTENT_MAX_CHARS


class CommentContent(_BoundedText):
    max_chars = CONTENT_MAX_CHARS


class Email(_BoundedText):
    max_chars = EMAIL_MAX_CHARS


class Password(_BoundedText):
    max_chars = PASSWORD_MAX_CHARS


class Name(_BoundedText):
    max_chars = NAME_MAX_CHARS


class UserDescription(_BoundedText):
    max_chars = USER_DESCRIPTION_MAX_CHARS


class Username(str):
    @classmethod
    def parse(cls, raw: str) -> Username:
        if not _SLUG_RE.fullmatch(raw):
            raise InvalidValue(raw)
        return cls(raw)


class Code(str):
    """Six digit verification or password reset code."""

    @classmethod
    def parse(cls, raw: str) -> Code:
        raw = raw.strip()
        if not _CODE_RE.fullmatch(raw):
            raise InvalidValue(raw)
        return cls(raw)


class Tags(frozenset):
    """Deduplicated set of tag names.

    The 1 to 10 count is checked on the whitespace-split input before
    duplicates are folded away, so ``"a b a"`` is three tags for the limit
    and two once stored.
    """

    @classmethod
    def parse(cls, raw: str) -> Tags:
        parts = raw.split()
        if not 1 <= len(parts) <= TAGS_MAX_COUNT:
            raise InvalidValue(raw)
        for part in parts:
            if not _SLUG_RE.fullmatch(part):
                raise InvalidValue(raw)
        return cls(parts)

    def sorted(self) -> list[str]:
        return sorted(self)


@dataclass(frozen=True)
class PasswordPair:
    """A password and its confirmation, guaranteed equal."""

    password: Password

    class Mismatch(InvalidValue):
        pass

    @classmethod
    def parse(cls, password: str, confirm: str) -> PasswordPair:
        first = Password.parse(password)
        second = Password.parse(confirm)
        if first != second:
            raise cls.Mismatch(confirm)
        return cls(password=first)
