"""Transfer range and progress models."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field, model_validator


class TransferRange(BaseModel):
    """Inclusive byte range copied in blocks of at most ``block_size`` bytes.

    ``block_size`` has no default here; the ``copy_file*`` helpers fill it from
    the ``default_block_size`` setting when the caller passes None.
    """

    model_config = {"frozen": True}

    start: int = Field(ge=0, description="First byte offset to copy.")
    end: int = Field(ge=0, description="Last byte offset to copy (inclusive).")
    block_size: int = Field(ge=1, description="Maximum bytes per block.")

    @model_validator(mode="after")
    def _check_order(self) -> "TransferRange":
        if self.start > self.end:
            raise ValueError(f"start ({self.start}) must not exceed end ({self.end})")
        return self

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def block_count(self) -> int:
        return -(-self.length // self.block_size)

    def first_block(self) -> tuple[int, int]:
        return self.start, min(self.start + self.block_size - 1, self.end)

    def next_block(self, block_end: int) -> tuple[int, int] | None:
        """Block following the one ending at ``block_end``, or None when finished."""
        if block_end >= self.end:
            return None
        start = block_end + 1
        return start, min(start + self.block_size - 1, self.end)


@dataclass(frozen=True)
class TransferProgress:
    block_start: int
    block_end: int
    total_length: int

    def as_args(self) -> tuple[int, int, int]:
        return self.block_start, self.block_end, self.total_length


@dataclass(frozen=True)
class TransferReport:
    """Outcome of a finished (or cooperatively cancelled) copy."""

    blocks: int
    bytes_copied: int
    cancelled: bool = False
