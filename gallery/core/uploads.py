"""
Clip upload pipeline.

    idle -> uploading -> processing -> queued
    uploading | processing -> error

Validation happens at file-selection time and never touches the network.
`submit` walks the remaining states strictly in order; any failure parks the
job in `error` with the triggering message. There is no retry: a failed job
has to be removed and the file picked again.
"""
import asyncio
import logging
import os
from pathlib import Path
from typing import Callable, Optional, Sequence
from pydantic import BaseModel
from gallery.core.config import Settings
from gallery.core.errors import (
    BackendError,
    FileValidationError,
    ProbeError,
    UploadError,
    UploadInProgressError,
)
from gallery.core.media import DurationProbe
from gallery.core.media_host import MediaHostClient, ProcessingBackendClient
from gallery.schemas.upload import UploadJob, UploadState

logger = logging.getLogger(__name__)

MB = 1024 * 1024
GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}

class UploadPolicy(BaseModel):
    allowed_extensions: Sequence[str] = ("mp4", "mov", "avi", "mkv")
    allowed_mime_types: Sequence[str] = ("video/mp4", "video/quicktime", "video/x-msvideo", "video/x-matroska")
    max_bytes: int = 100 * MB
    max_duration: float = 60.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "UploadPolicy":
        return cls(
            allowed_extensions=[e.lower().lstrip(".") for e in settings.ALLOWED_VIDEO_EXTENSIONS],
            allowed_mime_types=[m.lower() for m in settings.ALLOWED_VIDEO_MIME_TYPES],
            max_bytes=settings.MAX_UPLOAD_MB * MB,
            max_duration=settings.MAX_DURATION_SECONDS,
        )

    def type_message(self) -> str:
        formats = ", ".join(e.upper() for e in self.allowed_extensions)
        return f"Invalid file type. Supported formats: {formats}"

    def size_message(self) -> str:
        return f"File too large. Maximum size is {self.max_bytes // MB} MB"

    def duration_message(self, duration: float) -> str:
        return f"Video is too long ({duration:.1f}s). Maximum duration is {self.max_duration:g} seconds"

def check_type(filename: str, content_type: Optional[str], policy: UploadPolicy) -> None:
    extension = Path(filename or "").suffix.lower().lstrip(".")
    if extension not in policy.allowed_extensions:
        raise FileValidationError("type", policy.type_message())
    mime = (content_type or "").lower()
    if mime not in GENERIC_CONTENT_TYPES and mime not in policy.allowed_mime_types:
        raise FileValidationError("type", policy.type_message())

def check_size(size: int, policy: UploadPolicy) -> None:
    if size > policy.max_bytes:
        raise FileValidationError("size", policy.size_message())

async def check_duration(path: str, policy: UploadPolicy, probe: DurationProbe) -> float:
    try:
        duration = await probe.probe(path)
    except ProbeError as e:
        logger.warning(f"Duration probe failed for {path}: {e}")
        raise FileValidationError("unreadable", "Could not read the video's duration. The file may be corrupt.") from e
    if duration > policy.max_duration:
        raise FileValidationError("duration", policy.duration_message(duration))
    return duration

async def validate_clip(
    filename: str,
    content_type: Optional[str],
    size: int,
    path: str,
    policy: UploadPolicy,
    probe: DurationProbe,
) -> float:
    """Type, then size, then decoded duration. Returns the probed duration."""
    check_type(filename, content_type, policy)
    check_size(size, policy)
    return await check_duration(path, policy, probe)

def discard_job_file(job: UploadJob) -> None:
    if job.path and os.path.exists(job.path):
        try:
            os.remove(job.path)
        except OSError as e:
            logger.warning(f"Could not remove temp file {job.path}: {e}")

StateListener = Callable[[UploadJob], None]

class UploadPipeline:
    def __init__(
        self,
        media_host: MediaHostClient,
        backend: ProcessingBackendClient,
        progress_interval: float = 0.5,
        progress_step: int = 10,
        progress_cap: int = 90,
        on_change: Optional[StateListener] = None,
    ):
        self.media_host = media_host
        self.backend = backend
        self.progress_interval = progress_interval
        self.progress_step = progress_step
        self.progress_cap = progress_cap
        self.on_change = on_change

    @classmethod
    def from_settings(cls, settings: Settings, on_change: Optional[StateListener] = None) -> "UploadPipeline":
        return cls(
            MediaHostClient.from_settings(settings),
            ProcessingBackendClient(settings.PROCESSING_BACKEND_URL),
            progress_interval=settings.UPLOAD_PROGRESS_INTERVAL,
            progress_step=settings.UPLOAD_PROGRESS_STEP,
            progress_cap=settings.UPLOAD_PROGRESS_CAP,
            on_change=on_change,
        )

    def _transition(self, job: UploadJob, state: UploadState, **changes) -> None:
        job.state = state
        for key, value in changes.items():
            setattr(job, key, value)
        logger.info(f"Upload {job.upload_id}: -> {state.value}")
        if self.on_change:
            self.on_change(job)

    def start(self, job: UploadJob) -> None:
        """idle(with file) -> uploading. Rejects jobs already in flight or finished."""
        if job.state != UploadState.IDLE or not job.path:
            raise UploadInProgressError(f"Upload {job.upload_id} cannot be submitted from state '{job.state.value}'")
        self._transition(job, UploadState.UPLOADING, progress=0, error=None)

    async def _tick_progress(self, job: UploadJob) -> None:
        # Estimate only: the transport exposes no byte-level progress
        while True:
            await asyncio.sleep(self.progress_interval)
            job.progress = min(self.progress_cap, job.progress + self.progress_step)

    async def run(self, job: UploadJob) -> UploadJob:
        """uploading -> processing -> queued, or -> error. Expects `start` to have run."""
        try:
            content = await asyncio.to_thread(Path(job.path).read_bytes)
            ticker = asyncio.create_task(self._tick_progress(job))
            try:
                asset = await self.media_host.upload(job.filename, content, job.content_type)
            finally:
                ticker.cancel()
            self._transition(job, UploadState.PROCESSING, progress=100, asset=asset)

            ack = await self.backend.notify(asset)
            self._transition(job, UploadState.QUEUED, job_id=ack.job_id)
        except (UploadError, BackendError) as e:
            logger.error(f"Upload {job.upload_id} failed: {e}")
            self._transition(job, UploadState.ERROR, error=str(e))
        except Exception as e:
            logger.error(f"Upload {job.upload_id} failed unexpectedly: {e}")
            self._transition(job, UploadState.ERROR, error=str(e) or "Upload failed")
        return job

    async def submit(self, job: UploadJob) -> UploadJob:
        self.start(job)
        return await self.run(job)
