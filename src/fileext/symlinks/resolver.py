"""Lexical resolution of symbolic-link targets."""

from __future__ import annotations

import logging
import os
import stat
from typing import Optional

from ..config import get_settings
from ..errors import AboveRootError, NotFoundError
from ..paths import sanitizer
from ..paths.segments import HOST, PathSegments

logger = logging.getLogger("fileext.symlinks")


def resolve(
    base_directory: str | os.PathLike[str],
    link_target: str | os.PathLike[str],
    *,
    segments: PathSegments = HOST,
    log: Optional[logging.Logger] = None,
) -> str:
    """Compute the path ``link_target`` designates when read from ``base_directory``.

    Resolution is purely lexical: nothing is looked up on disk, so the base
    directory does not need to exist. Absolute targets are returned unchanged.
    Each ``..`` removes one segment from the base; walking past the first
    segment raises :class:`AboveRootError` instead of clamping at the root.
    ``.`` and empty segments are ignored. A relative base yields a relative
    result.
    """
    log = log or logger
    enabled = get_settings().sanitize_paths
    base = sanitizer.gate(base_directory, enabled=enabled)
    target = sanitizer.gate(link_target, enabled=enabled)

    if segments.is_absolute(target):
        log.debug("Absolute link target %s kept as is", target)
        return target

    prefix, resolved = segments.anchor(segments.split(base))
    remaining = segments.split(target) if target else []
    for segment in remaining:
        if segments.is_parent(segment):
            if not resolved:
                raise AboveRootError(
                    segments.join([base, target]),
                    "Not valid path for the symlink, target walks above the base directory",
                )
            resolved.pop()
        elif segment and segment != ".":
            resolved.append(segment)
        log.debug("Resolving %s: base now %s", target, resolved)

    return prefix + segments.join(resolved)


def is_symlink(path: str | os.PathLike[str]) -> bool:
    """Return whether ``path`` is a symbolic link; the link itself must exist."""
    try:
        mode = os.lstat(path).st_mode
    except FileNotFoundError as exc:
        raise NotFoundError(path, "No such file, directory or link") from exc
    return stat.S_ISLNK(mode)


def symlink_exists(path: str | os.PathLike[str]) -> bool:
    return os.path.islink(path)


def read_target(link_path: str | os.PathLike[str]) -> str:
    """Return the raw target stored in a symbolic link."""
    try:
        return os.readlink(link_path)
    except FileNotFoundError as exc:
        raise NotFoundError(link_path, "Symbolic link does not exist") from exc


def resolve_link(
    link_path: str | os.PathLike[str],
    *,
    segments: PathSegments = HOST,
    log: Optional[logging.Logger] = None,
) -> str:
    """Read the link at ``link_path`` and resolve it against its own directory."""
    target = read_target(link_path)
    directory = os.path.dirname(os.fspath(link_path))
    return resolve(directory, target, segments=segments, log=log)
