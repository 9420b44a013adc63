"""Segment-by-segment directory creation and recursive deletion."""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from typing import Optional

from ..config import Settings, get_settings
from ..errors import (
    AlreadyExistsError,
    CreationError,
    DeletionError,
    NotFoundError,
    PermissionDeniedError,
    SubprocessFailureError,
)
from ..paths import sanitizer
from ..paths.segments import HOST, PathSegments

logger = logging.getLogger("fileext.directories")


def directory_exists(path: str | os.PathLike[str]) -> bool:
    return os.path.isdir(path)


def create_all(
    path: str | os.PathLike[str],
    *,
    exist_ok: bool = False,
    segments: PathSegments = HOST,
    log: Optional[logging.Logger] = None,
) -> list[str]:
    """Create ``path`` and every missing ancestor, one directory per call.

    Each level is created independently and nothing is rolled back when a
    later level fails. An existing level is an error unless ``exist_ok`` is
    set and the existing entry is a directory. Returns the directories created.
    """
    log = log or logger
    cleaned = sanitizer.gate(path, enabled=get_settings().sanitize_paths)
    prefix, names = segments.anchor(segments.split(cleaned))

    created: list[str] = []
    processed: list[str] = []
    for name in names:
        processed.append(name)
        current = prefix + segments.join(processed)
        if exist_ok and os.path.isdir(current):
            continue
        try:
            os.mkdir(current)
        except FileExistsError as exc:
            raise AlreadyExistsError(current, "Unable to create directory, path already exists") from exc
        except PermissionError as exc:
            raise PermissionDeniedError(current, f"Unable to create directory: {exc.strerror}") from exc
        except OSError as exc:
            raise CreationError(current, f"Unable to create directory: {exc.strerror or exc}") from exc
        log.debug("Created directory %s", current)
        created.append(current)
    return created


def delete_all(
    path: str | os.PathLike[str],
    *,
    settings: Optional[Settings] = None,
    log: Optional[logging.Logger] = None,
) -> None:
    """Remove the directory at ``path`` and everything beneath it."""
    settings = settings or get_settings()
    log = log or logger
    cleaned = sanitizer.gate(path, enabled=settings.sanitize_paths)
    if not os.path.lexists(cleaned):
        raise NotFoundError(cleaned, "Unable to delete directory, nothing exists at path")
    if os.path.islink(cleaned) or not os.path.isdir(cleaned):
        raise DeletionError(cleaned, "Unable to delete directory, path is not a directory")

    if settings.delete_strategy == "subprocess":
        _delete_with_host_tool(cleaned, settings, log)
    else:
        _delete_natively(cleaned, log)


def _delete_natively(path: str, log: logging.Logger) -> None:
    try:
        shutil.rmtree(path)
    except OSError as exc:
        raise DeletionError(path, f"Unable to delete directory: {exc.strerror or exc}") from exc
    log.debug("Deleted directory tree %s", path)


def _delete_with_host_tool(path: str, settings: Settings, log: logging.Logger) -> None:
    base = settings.windows_delete_command if os.name == "nt" else settings.posix_delete_command
    # "--" keeps a path starting with "-" from being read as an option
    command = [*base, path] if os.name == "nt" else [*base, "--", path]
    log.info("$ %s", " ".join(shlex.quote(part) for part in command))
    try:
        completed = subprocess.run(command, capture_output=True, text=True, check=False)
    except OSError as exc:
        raise DeletionError(path, f"Unable to run {base[0]}: {exc.strerror or exc}") from exc
    if completed.returncode != 0:
        raise SubprocessFailureError(
            path,
            completed.returncode,
            completed.stdout,
            completed.stderr,
            command=command,
        )
    if os.path.lexists(path):
        raise DeletionError(path, f"{base[0]} exited successfully but the directory still exists")
    log.debug("Deleted directory tree %s with %s", path, base[0])
