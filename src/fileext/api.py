"""FastAPI application exposing the filesystem helpers."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import AsyncIterator

from fastapi import Depends, FastAPI, HTTPException, Query, Response, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field, ValidationError

from .config import Settings, get_settings
from .directories import materializer
from .errors import (
    AboveRootError,
    AlreadyExistsError,
    FileExtError,
    NotFoundError,
    PermissionDeniedError,
    RejectedPathError,
)
from .storage import files
from .symlinks import resolver
from .transfer.jobs import TransferJob, TransferJobManager

app = FastAPI(title="fileext", version="0.1.0")


class ResolveRequest(BaseModel):
    base_directory: str = Field(..., description="Directory the symbolic link lives in.")
    link_target: str = Field(..., description="Target stored in the link, relative or absolute.")


class CreateDirectoryRequest(BaseModel):
    path: str
    exist_ok: bool = False


class TransferRequest(BaseModel):
    source: str
    destination: str
    start: int = Field(default=0, ge=0)
    end: int | None = Field(default=None, ge=0, description="Last byte to copy; defaults to the end of the source.")
    block_size: int | None = Field(default=None, ge=1)


class TransferResponse(BaseModel):
    job_id: str
    status: str


class TransferStatusResponse(BaseModel):
    job_id: str
    status: str
    block_start: int | None = None
    block_end: int | None = None
    total_length: int | None = None
    blocks: int | None = None
    bytes_copied: int | None = None
    error: str | None = None

    @classmethod
    def from_job(cls, job: TransferJob) -> "TransferStatusResponse":
        progress = job.progress
        report = job.report
        return cls(
            job_id=job.job_id,
            status=job.status,
            block_start=progress.block_start if progress else None,
            block_end=progress.block_end if progress else None,
            total_length=progress.total_length if progress else None,
            blocks=report.blocks if report else None,
            bytes_copied=report.bytes_copied if report else None,
            error=job.error,
        )


def _http_error(exc: FileExtError) -> HTTPException:
    if isinstance(exc, (RejectedPathError, AboveRootError)):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, PermissionDeniedError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, AlreadyExistsError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail={"reason": exc.reason, "path": exc.path, "message": str(exc)})


async def get_manager() -> TransferJobManager:
    if not hasattr(app.state, "transfer_manager"):
        app.state.transfer_manager = TransferJobManager()
    return app.state.transfer_manager


@app.get("/healthz")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/symlinks/resolve", response_model=dict[str, str])
def resolve_symlink(payload: ResolveRequest):
    try:
        path = resolver.resolve(payload.base_directory, payload.link_target)
    except FileExtError as exc:
        raise _http_error(exc) from exc
    return {"path": path}


@app.get("/symlinks/target", response_model=dict[str, str])
def symlink_target(path: str = Query(..., description="Path of the symbolic link.")):
    try:
        points_to = resolver.read_target(path)
        resolved = resolver.resolve_link(path)
    except FileExtError as exc:
        raise _http_error(exc) from exc
    except OSError as exc:
        raise HTTPException(status_code=400, detail=f"Not a symbolic link: {path}") from exc
    return {"points_to": points_to, "resolved": resolved}


@app.post("/directories", response_model=dict[str, list[str]], status_code=status.HTTP_201_CREATED)
def create_directory(payload: CreateDirectoryRequest):
    try:
        created = materializer.create_all(payload.path, exist_ok=payload.exist_ok)
    except FileExtError as exc:
        raise _http_error(exc) from exc
    return {"created": created}


@app.delete("/directories", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_directory(
    path: str = Query(...),
    settings: Settings = Depends(get_settings),
):
    try:
        materializer.delete_all(path, settings=settings)
    except FileExtError as exc:
        raise _http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post("/transfers", response_model=TransferResponse, status_code=status.HTTP_202_ACCEPTED)
async def start_transfer(
    payload: TransferRequest,
    settings: Settings = Depends(get_settings),
    manager: TransferJobManager = Depends(get_manager),
):
    try:
        length = await asyncio.to_thread(files.file_length, payload.source)
    except FileExtError as exc:
        raise _http_error(exc) from exc
    if payload.start > length:
        raise HTTPException(
            status_code=400,
            detail=f"start ({payload.start}) is past the end of the source ({length} bytes)",
        )
    try:
        job = await manager.start_job(
            Path(payload.source),
            Path(payload.destination),
            start=payload.start,
            end=payload.end,
            block_size=payload.block_size or settings.default_block_size,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return TransferResponse(job_id=job.job_id, status=job.status)


@app.get("/transfers/{job_id}", response_model=TransferStatusResponse)
async def get_transfer(job_id: str, manager: TransferJobManager = Depends(get_manager)):
    job = await manager.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Transfer not found")
    return TransferStatusResponse.from_job(job)


@app.delete("/transfers/{job_id}", response_model=TransferStatusResponse, status_code=status.HTTP_202_ACCEPTED)
async def cancel_transfer(job_id: str, manager: TransferJobManager = Depends(get_manager)):
    try:
        job = await manager.cancel(job_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return TransferStatusResponse.from_job(job)


async def _sse_event_stream(generator: AsyncIterator[str]) -> AsyncIterator[bytes]:
    async for chunk in generator:
        yield f"data: {chunk.rstrip()}\n\n".encode("utf-8")
        await asyncio.sleep(0)


@app.get("/stream/{job_id}")
async def stream_progress(job_id: str, manager: TransferJobManager = Depends(get_manager)):
    if not await manager.get_job(job_id):
        raise HTTPException(status_code=404, detail="Transfer not found")
    return StreamingResponse(_sse_event_stream(manager.stream_job(job_id)), media_type="text/event-stream")
