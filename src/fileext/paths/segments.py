"""Platform-aware splitting and joining of path segments."""

from __future__ import annotations

import os
import string
from dataclasses import dataclass
from typing import Iterable, Sequence

PARENT = ".."
CURRENT = "."


@dataclass(frozen=True)
class PathSegments:
    """Split and join paths on a single platform separator.

    ``split`` keeps the empty leading segment of an absolute POSIX path and the
    empty trailing segment of a path ending with a separator, so ``join`` is an
    exact inverse of ``split``.
    """

    windows: bool = False

    @classmethod
    def for_host(cls) -> "PathSegments":
        return cls(windows=os.name == "nt")

    @property
    def separator(self) -> str:
        return "\\" if self.windows else "/"

    def split(self, path: str | os.PathLike[str]) -> list[str]:
        return os.fspath(path).split(self.separator)

    def join(self, segments: Iterable[str]) -> str:
        return self.separator.join(segments)

    def is_root(self, segment: str) -> bool:
        if self.windows:
            return len(segment) == 2 and segment[1] == ":" and segment[0] in string.ascii_letters
        return segment in ("", self.separator)

    def is_parent(self, segment: str) -> bool:
        return segment == PARENT

    def is_absolute(self, path: str) -> bool:
        if path.startswith(self.separator):
            return True
        return self.windows and len(path) > 1 and path[1] == ":"

    def root(self) -> str:
        """Root token of the platform (``/`` or the system drive)."""
        if self.windows:
            return os.environ.get("SystemDrive", "C:")
        return self.separator

    def folder_up(self) -> str:
        return PARENT

    def build_path(self, *parts: str) -> str:
        """Join ``parts``; a leading root token is not followed by a second separator."""
        if not parts:
            return ""
        head, tail = parts[0], parts[1:]
        if head == self.separator:
            return self.separator + self.join(tail)
        return self.join(parts)

    def anchor(self, segments: Sequence[str]) -> tuple[str, list[str]]:
        """Separate the root marker from the named segments.

        Returns the prefix that must lead the joined path (``""`` for relative
        paths) and the remaining non-empty segments.
        """
        if not segments:
            return "", []
        head, rest = segments[0], list(segments[1:])
        if head == "" and len(segments) > 1:
            prefix = self.separator
        elif self.windows and self.is_root(head):
            prefix = head + self.separator
        else:
            prefix, rest = "", list(segments)
        return prefix, [segment for segment in rest if segment not in ("", CURRENT)]


HOST = PathSegments.for_host()
