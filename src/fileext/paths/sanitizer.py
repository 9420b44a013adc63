"""Rejection of paths carrying shell metacharacters."""

from __future__ import annotations

import os

from ..errors import RejectedPathError

DISALLOWED_CHARACTERS = frozenset(" '\"&|;")


def strip_control_characters(path: str) -> str:
    return "".join(char for char in path if ord(char) >= 32 and ord(char) != 127).strip()


def validate(path: str | os.PathLike[str]) -> str:
    """Return the cleaned path, or raise if it still holds a disallowed character.

    ASCII control characters and surrounding whitespace are removed first.
    Callers must continue with the returned value, never the raw input.
    """
    cleaned = strip_control_characters(os.fspath(path))
    found = sorted(DISALLOWED_CHARACTERS.intersection(cleaned))
    if found:
        raise RejectedPathError(
            cleaned,
            "Path contains not allowed characters "
            f"({', '.join(repr(char) for char in found)}); whitespace, single quote, "
            "quotation mark, ampersand, pipe and semicolon are rejected",
        )
    return cleaned


def gate(path: str | os.PathLike[str], *, enabled: bool = True) -> str:
    """Validate ``path`` when checks are enabled, otherwise pass it through."""
    if enabled:
        return validate(path)
    return os.fspath(path)
