"""Background chunked copies with progress streaming and cooperative cancel."""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, Dict, Optional

from ..config import get_settings
from ..errors import FileExtError
from .engine import copy_file_with_callbacks_starting_from_byte, copy_range
from .models import TransferProgress, TransferRange, TransferReport

logger = logging.getLogger("fileext.jobs")


@dataclass
class TransferJob:
    """Runtime state for one background copy."""

    job_id: str
    source: Path
    destination: Path
    start: int
    block_size: int
    transfer_range: Optional[TransferRange] = None
    status: str = "pending"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    progress: Optional[TransferProgress] = None
    report: Optional[TransferReport] = None
    error: Optional[str] = None
    events: list[str] = field(default_factory=list)
    subscribers: list[asyncio.Queue[Optional[str]]] = field(default_factory=list)
    cancel_requested: threading.Event = field(default_factory=threading.Event)
    loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def finished(self) -> bool:
        return self.status in ("succeeded", "cancelled", "failed")

    def add_event(self, line: str) -> None:
        self.events.append(line)
        for queue in list(self.subscribers):
            queue.put_nowait(line)

    def complete_streams(self) -> None:
        for queue in list(self.subscribers):
            queue.put_nowait(None)

    # Called from the worker thread running copy_range.
    def record_progress(self, block_start: int, block_end: int, total_length: int) -> None:
        self.progress = TransferProgress(block_start, block_end, total_length)
        line = f"copying block {block_start}-{block_end} of {total_length} bytes"
        if self.loop is not None:
            self.loop.call_soon_threadsafe(self.add_event, line)

    def should_cancel(self, block_start: int, block_end: int, total_length: int) -> bool:
        return self.cancel_requested.is_set()


class TransferJobManager:
    """Manage chunked copies running in worker threads."""

    def __init__(self, *, keep_finished: int = 100) -> None:
        self._keep_finished = keep_finished
        self._jobs: Dict[str, TransferJob] = {}
        self._tasks: Dict[str, asyncio.Task[None]] = {}
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------ public
    async def start_job(
        self,
        source: Path,
        destination: Path,
        *,
        start: int = 0,
        end: Optional[int] = None,
        block_size: Optional[int] = None,
    ) -> TransferJob:
        """Queue a copy of bytes ``start``..``end`` (end of source when None).

        An explicit range is validated before the job is registered.
        """
        if block_size is None:
            block_size = get_settings().default_block_size
        transfer_range = None
        if end is not None:
            transfer_range = TransferRange(start=start, end=end, block_size=block_size)
        job = TransferJob(
            job_id=str(uuid.uuid4()),
            source=source,
            destination=destination,
            start=start,
            block_size=block_size,
            transfer_range=transfer_range,
            loop=asyncio.get_running_loop(),
        )

        async with self._lock:
            self._evict_finished()
            self._jobs[job.job_id] = job
            self._tasks[job.job_id] = asyncio.create_task(self._execute(job))
        return job

    async def get_job(self, job_id: str) -> TransferJob | None:
        async with self._lock:
            return self._jobs.get(job_id)

    async def list_jobs(self) -> list[TransferJob]:
        async with self._lock:
            return list(self._jobs.values())

    async def cancel(self, job_id: str) -> TransferJob:
        """Ask a job to stop at its next block boundary."""
        job = await self.get_job(job_id)
        if not job:
            raise KeyError(f"Unknown job_id: {job_id}")
        job.cancel_requested.set()
        return job

    async def wait(self, job_id: str) -> TransferJob:
        async with self._lock:
            job = self._jobs.get(job_id)
            task = self._tasks.get(job_id)
        if not job or not task:
            raise KeyError(f"Unknown job_id: {job_id}")
        await task
        return job

    async def forget(self, job_id: str) -> TransferJob:
        """Drop a finished job from the registry."""
        async with self._lock:
            job = self._jobs.get(job_id)
            if not job:
                raise KeyError(f"Unknown job_id: {job_id}")
            if not job.finished:
                raise ValueError(f"Job {job_id} is still {job.status}")
            del self._jobs[job_id]
            self._tasks.pop(job_id, None)
        return job

    async def stream_job(self, job_id: str) -> AsyncIterator[str]:
        job = await self.get_job(job_id)
        if not job:
            raise KeyError(f"Unknown job_id: {job_id}")

        queue: asyncio.Queue[Optional[str]] = asyncio.Queue()
        # Prime with events emitted before subscribing
        for line in job.events:
            queue.put_nowait(line)
        if job.finished:
            queue.put_nowait(None)

        job.subscribers.append(queue)
        try:
            while True:
                line = await queue.get()
                if line is None:
                    break
                yield line
        finally:
            job.subscribers.remove(queue)

    # ----------------------------------------------------------------- private
    async def _execute(self, job: TransferJob) -> None:
        job.status = "running"
        job.started_at = datetime.now(timezone.utc)
        job.add_event(f"$ copy {job.source} -> {job.destination}")
        if job.transfer_range is None:
            copy = functools.partial(
                copy_file_with_callbacks_starting_from_byte,
                job.source,
                job.destination,
                job.start,
                job.block_size,
                job.record_progress,
                job.should_cancel,
            )
        else:
            copy = functools.partial(
                copy_range,
                job.source,
                job.destination,
                job.transfer_range,
                job.record_progress,
                job.should_cancel,
            )
        try:
            job.report = await asyncio.to_thread(copy)
        except FileExtError as exc:
            job.status = "failed"
            job.error = str(exc)
            logger.warning("Transfer %s failed: %s", job.job_id, exc)
        except Exception as exc:
            job.error = f"Transfer failed unexpectedly: {exc}"
            logger.exception("Transfer %s failed unexpectedly", job.job_id)
            raise
        else:
            job.status = "cancelled" if job.report.cancelled else "succeeded"
        finally:
            job.finished_at = datetime.now(timezone.utc)
            if job.status == "running":
                job.status = "failed"
            job.add_event(self._build_summary(job))
            job.complete_streams()

    def _evict_finished(self) -> None:
        # Caller holds self._lock. Oldest finished jobs go first.
        finished = [job for job in self._jobs.values() if job.finished]
        for job in finished[: max(len(finished) - self._keep_finished, 0)]:
            del self._jobs[job.job_id]
            self._tasks.pop(job.job_id, None)

    def _build_summary(self, job: TransferJob) -> str:
        if job.status == "failed":
            return job.error or "Transfer failed with an unknown error."
        report = job.report
        if report is None:
            return "Transfer produced no report."
        if report.cancelled:
            return f"Transfer cancelled after {report.blocks} blocks ({report.bytes_copied} bytes)."
        return f"Transfer completed: {report.blocks} blocks, {report.bytes_copied} bytes."
