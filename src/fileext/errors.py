"""Exception hierarchy shared by every fileext operation."""

from __future__ import annotations

import os
from typing import Optional


class FileExtError(Exception):
    """Base class for failures carrying the offending path."""

    reason = "Error"

    def __init__(self, path: str | os.PathLike[str], message: str) -> None:
        self.path = os.fspath(path)
        self.message = message
        super().__init__(f"{message}: {self.path}")

    def __str__(self) -> str:
        return f"{self.message}: {self.path}"


class RejectedPathError(FileExtError, ValueError):
    """Raised when a path contains characters that are unsafe to forward."""

    reason = "DisallowedCharacter"


class AboveRootError(FileExtError, ValueError):
    """Raised when a relative target walks above its base directory."""

    reason = "AboveRoot"


class NotFoundError(FileExtError, FileNotFoundError):
    reason = "NotFound"


class CreationError(FileExtError, OSError):
    """Raised when a single directory level could not be created."""

    reason = "CreationFailed"


class AlreadyExistsError(CreationError, FileExistsError):
    reason = "AlreadyExists"


class PermissionDeniedError(CreationError, PermissionError):
    reason = "PermissionDenied"


class DeletionError(FileExtError, OSError):
    reason = "DeletionFailed"


class SubprocessFailureError(DeletionError):
    """Raised when the host recursive-delete tool exits with a non-zero code."""

    reason = "SubprocessFailure"

    def __init__(
        self,
        path: str | os.PathLike[str],
        return_code: int,
        stdout: str,
        stderr: str,
        command: Optional[list[str]] = None,
    ) -> None:
        self.return_code = return_code
        self.stdout = stdout
        self.stderr = stderr
        self.command = command or []
        super().__init__(path, f"Delete command exited with code {return_code}")

    def __str__(self) -> str:
        output = "".join(part for part in (self.stdout, self.stderr) if part).rstrip()
        if not output:
            return super().__str__()
        return f"{super().__str__()}\n{output}"


class TransferReadError(FileExtError, OSError):
    reason = "Read"


class TransferWriteError(FileExtError, OSError):
    reason = "Write"
