from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Response, UploadFile
from pathlib import Path
from typing import Optional
import logging
import os
import tempfile
from gallery.api.deps import get_duration_probe, get_pipeline, get_settings, get_upload_policy
from gallery.core.config import Settings
from gallery.core.errors import FileValidationError, UploadInProgressError
from gallery.core.media import DurationProbe
from gallery.core.uploads import (
    UploadPipeline,
    UploadPolicy,
    check_duration,
    check_size,
    check_type,
    discard_job_file,
)
from gallery.db.memory import UPLOAD_JOBS
from gallery.schemas.upload import UploadJob, ValidationFailure

router = APIRouter()
logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

def _get_job(upload_id: str) -> UploadJob:
    job = UPLOAD_JOBS.get(upload_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Upload not found")
    return job

def _drop_job(upload_id: str) -> None:
    job = UPLOAD_JOBS.pop(upload_id, None)
    if job is not None:
        discard_job_file(job)
        logger.info(f"Upload {upload_id} dismissed")

def _rejected(e: FileValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail=ValidationFailure(reason=e.reason, message=e.message).model_dump())

async def _spool_to_disk(file: UploadFile, tmp_dir: Optional[str], max_bytes: int) -> tuple:
    """Copy the upload to a temp file. Stops early once `max_bytes` is exceeded."""
    suffix = Path(file.filename or "").suffix
    size = 0
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix, dir=tmp_dir or None) as tmp:
        try:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    break
                tmp.write(chunk)
        except Exception:
            tmp.close()
            os.remove(tmp.name)
            logger.warning(f"Upload of {file.filename} interrupted; temp file removed")
            raise
    return tmp.name, size

@router.post("/uploads", response_model=UploadJob, status_code=201)
async def select_file(
    file: UploadFile = File(...),
    replaces: Optional[str] = Form(None),
    s: Settings = Depends(get_settings),
    policy: UploadPolicy = Depends(get_upload_policy),
    probe: DurationProbe = Depends(get_duration_probe),
):
    """
    Pick a clip: validate type, size and duration, then hold it as an idle job.
    Picking a new file discards the job named in `replaces`.
    """
    if replaces:
        _drop_job(replaces)

    try:
        check_type(file.filename, file.content_type, policy)
    except FileValidationError as e:
        raise _rejected(e)

    path, size = await _spool_to_disk(file, s.UPLOAD_TMP_DIR, policy.max_bytes)
    job = UploadJob(filename=file.filename, content_type=file.content_type, size=size, path=path)
    try:
        check_size(size, policy)
        job.duration = await check_duration(path, policy, probe)
    except FileValidationError as e:
        discard_job_file(job)
        logger.info(f"Rejected {file.filename}: {e.reason}")
        raise _rejected(e)

    UPLOAD_JOBS[job.upload_id] = job
    logger.info(f"Upload {job.upload_id} ready: {job.filename} ({job.size} bytes, {job.duration:.1f}s)")
    return job

@router.post("/uploads/{upload_id}/submit", response_model=UploadJob, status_code=202)
async def submit_upload(
    upload_id: str,
    background_tasks: BackgroundTasks,
    pipeline: UploadPipeline = Depends(get_pipeline),
):
    job = _get_job(upload_id)
    try:
        pipeline.start(job)
    except UploadInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    background_tasks.add_task(pipeline.run, job)
    return job

@router.get("/uploads/{upload_id}", response_model=UploadJob)
async def get_upload(upload_id: str):
    return _get_job(upload_id)

@router.delete("/uploads/{upload_id}", status_code=204)
async def remove_upload(upload_id: str):
    _get_job(upload_id)
    _drop_job(upload_id)
    return Response(status_code=204)
