"""Filesystem helpers: symlink resolution, directory materialization and chunked copy."""

from .directories.materializer import create_all, delete_all, directory_exists
from .errors import (
    AboveRootError,
    AlreadyExistsError,
    CreationError,
    DeletionError,
    FileExtError,
    NotFoundError,
    PermissionDeniedError,
    RejectedPathError,
    SubprocessFailureError,
    TransferReadError,
    TransferWriteError,
)
from .paths.sanitizer import validate
from .paths.segments import PathSegments
from .symlinks.resolver import resolve, resolve_link
from .transfer.engine import copy_file, copy_file_with_callbacks, copy_range
from .transfer.models import TransferProgress, TransferRange, TransferReport

__all__ = [
    "AboveRootError",
    "AlreadyExistsError",
    "CreationError",
    "DeletionError",
    "FileExtError",
    "NotFoundError",
    "PathSegments",
    "PermissionDeniedError",
    "RejectedPathError",
    "SubprocessFailureError",
    "TransferProgress",
    "TransferRange",
    "TransferReadError",
    "TransferReport",
    "TransferWriteError",
    "copy_file",
    "copy_file_with_callbacks",
    "copy_range",
    "create_all",
    "delete_all",
    "directory_exists",
    "resolve",
    "resolve_link",
    "validate",
]
