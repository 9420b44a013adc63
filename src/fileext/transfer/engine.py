"""Chunked, range-bounded file copy with progress and cancellation hooks."""

from __future__ import annotations

import logging
import os
from typing import Callable, Optional

from ..config import get_settings
from ..errors import TransferReadError
from ..storage import files
from .models import TransferProgress, TransferRange, TransferReport

logger = logging.getLogger("fileext.transfer")

ProgressCallback = Callable[[int, int, int], object]
CancelCallback = Callable[[int, int, int], bool]


def _ignore_progress(block_start: int, block_end: int, total_length: int) -> None:
    return None


def _never_cancel(block_start: int, block_end: int, total_length: int) -> bool:
    return False


def copy_range(
    source: str | os.PathLike[str],
    destination: str | os.PathLike[str],
    transfer_range: TransferRange,
    on_progress: Optional[ProgressCallback] = None,
    on_cancel: Optional[CancelCallback] = None,
    *,
    log: Optional[logging.Logger] = None,
) -> TransferReport:
    """Append bytes ``transfer_range.start``..``transfer_range.end`` of ``source`` to ``destination``.

    The range is copied block by block. Before each block ``on_progress`` is
    called with ``(block_start, block_end, total_length)``; after the block has
    been appended ``on_cancel`` is called with the same arguments and a true
    result stops the copy without raising. ``destination`` is created when it
    does not exist and existing content is kept, which lets a caller resume an
    interrupted copy from the byte where it stopped.

    The source length is read once. A range reaching past it, or a source that
    shrinks while being copied, raises :class:`TransferReadError`.
    """
    log = log or logger
    on_progress = on_progress or _ignore_progress
    on_cancel = on_cancel or _never_cancel

    total_length = files.file_length(source)
    if transfer_range.end >= total_length:
        raise TransferReadError(
            source,
            f"Range {transfer_range.start}-{transfer_range.end} exceeds file length {total_length}",
        )
    if not files.file_exists(destination):
        files.create_file(destination)

    blocks = 0
    copied = 0
    block: tuple[int, int] | None = transfer_range.first_block()
    while block is not None:
        progress = TransferProgress(block[0], block[1], total_length)
        on_progress(*progress.as_args())

        expected = progress.block_end - progress.block_start + 1
        content = files.read_file_partially(source, progress.block_start, progress.block_end)
        if len(content) != expected:
            raise TransferReadError(
                source,
                f"Short read at bytes {progress.block_start}-{progress.block_end}: "
                f"expected {expected} bytes, got {len(content)}",
            )
        files.append_bytes(destination, content)
        blocks += 1
        copied += expected
        log.debug("Copied block %s-%s of %s bytes", progress.block_start, progress.block_end, total_length)

        if on_cancel(*progress.as_args()):
            log.info("Copy of %s cancelled after byte %s", os.fspath(source), progress.block_end)
            return TransferReport(blocks=blocks, bytes_copied=copied, cancelled=True)

        block = transfer_range.next_block(progress.block_end)

    return TransferReport(blocks=blocks, bytes_copied=copied)


def copy_file(source: str | os.PathLike[str], destination: str | os.PathLike[str]) -> TransferReport:
    return copy_file_with_callbacks(source, destination, None, _ignore_progress, _never_cancel)


def copy_file_with_callbacks(
    source: str | os.PathLike[str],
    destination: str | os.PathLike[str],
    block_size: Optional[int],
    on_progress: ProgressCallback,
    on_cancel: CancelCallback,
) -> TransferReport:
    return copy_file_with_callbacks_starting_from_byte(source, destination, 0, block_size, on_progress, on_cancel)


def copy_file_with_callbacks_starting_from_byte(
    source: str | os.PathLike[str],
    destination: str | os.PathLike[str],
    starting_byte: int,
    block_size: Optional[int],
    on_progress: ProgressCallback,
    on_cancel: CancelCallback,
) -> TransferReport:
    """Copy from ``starting_byte`` to the end of ``source``."""
    total_length = files.file_length(source)
    if starting_byte == total_length:
        # Nothing left to copy, e.g. an empty source or a finished resume.
        if not files.file_exists(destination):
            files.create_file(destination)
        return TransferReport(blocks=0, bytes_copied=0)
    return copy_file_with_callbacks_starting_from_byte_and_ending_at_byte(
        source,
        destination,
        starting_byte,
        total_length - 1,
        block_size,
        on_progress,
        on_cancel,
    )


def copy_file_with_callbacks_starting_from_byte_and_ending_at_byte(
    source: str | os.PathLike[str],
    destination: str | os.PathLike[str],
    starting_byte: int,
    ending_byte: int,
    block_size: Optional[int],
    on_progress: ProgressCallback,
    on_cancel: CancelCallback,
) -> TransferReport:
    transfer_range = TransferRange(
        start=starting_byte,
        end=ending_byte,
        block_size=block_size if block_size is not None else get_settings().default_block_size,
    )
    return copy_range(source, destination, transfer_range, on_progress, on_cancel)
