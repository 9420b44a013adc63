"""Single-file read, write and metadata helpers."""

from __future__ import annotations

import os
from pathlib import Path

from ..errors import DeletionError, NotFoundError, TransferReadError, TransferWriteError


def file_exists(path: str | os.PathLike[str]) -> bool:
    return Path(path).is_file()


def file_length(path: str | os.PathLike[str]) -> int:
    try:
        return os.stat(path).st_size
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise NotFoundError(path, "Unable to read file length, file does not exist") from exc
    except OSError as exc:
        raise TransferReadError(path, f"Unable to read file length: {exc.strerror or exc}") from exc


def create_file(path: str | os.PathLike[str]) -> None:
    """Create ``path`` empty, truncating any existing content."""
    try:
        Path(path).write_bytes(b"")
    except OSError as exc:
        raise TransferWriteError(path, f"Unable to create file: {exc.strerror or exc}") from exc


def delete_file(path: str | os.PathLike[str]) -> None:
    try:
        os.remove(path)
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise NotFoundError(path, "Unable to delete file, file does not exist") from exc
    except OSError as exc:
        raise DeletionError(path, f"Unable to delete file: {exc.strerror or exc}") from exc


def read_file(path: str | os.PathLike[str]) -> bytes:
    try:
        return Path(path).read_bytes()
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise NotFoundError(path, "Unable to open file") from exc
    except OSError as exc:
        raise TransferReadError(path, f"Unable to read file: {exc.strerror or exc}") from exc


def read_file_partially(path: str | os.PathLike[str], start: int, end: int) -> bytes:
    """Return bytes ``start`` through ``end`` inclusive.

    Fewer bytes are returned when the file ends before ``end``.
    """
    if start < 0 or end < start:
        raise ValueError(f"Invalid byte range {start}-{end}")
    try:
        with open(path, "rb") as fh:
            fh.seek(start)
            return fh.read(end - start + 1)
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise NotFoundError(path, "Unable to open file") from exc
    except OSError as exc:
        raise TransferReadError(path, f"Unable to read file: {exc.strerror or exc}") from exc


def append_bytes(path: str | os.PathLike[str], content: bytes) -> None:
    """Append ``content`` to ``path``, creating the file when absent."""
    try:
        with open(path, "ab") as fh:
            fh.write(content)
    except OSError as exc:
        raise TransferWriteError(path, f"Unable to write to file: {exc.strerror or exc}") from exc


def read_or_create_and_write(path: str | os.PathLike[str], content: bytes) -> bytes:
    """Return the existing content of ``path``, or write ``content`` there first."""
    if file_exists(path):
        return read_file(path)
    create_file(path)
    append_bytes(path, content)
    return bytes(content)
