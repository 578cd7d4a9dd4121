from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime
import uuid

class UploadState(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    QUEUED = "queued"
    ERROR = "error"

class MediaAsset(BaseModel):
    """Reference returned by the media host for a stored clip."""
    model_config = ConfigDict(extra="allow")

    secure_url: str
    public_id: str
    asset_id: Optional[str] = None
    duration: Optional[float] = None
    bytes: Optional[int] = None
    format: Optional[str] = None

class ProcessingRequest(BaseModel):
    video_url: str
    public_id: str
    asset_id: Optional[str] = None
    duration: Optional[float] = None
    file_size: Optional[int] = None
    format: Optional[str] = None

class ProcessingAck(BaseModel):
    model_config = ConfigDict(extra="allow")

    job_id: str
    status: str = "queued"

    @field_validator("job_id", mode="before")
    @classmethod
    def coerce_job_id(cls, v):
        # Some backends answer with numeric ids
        if isinstance(v, int):
            return str(v)
        return v

class UploadJob(BaseModel):
    upload_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    filename: str
    content_type: Optional[str] = None
    size: int
    duration: Optional[float] = None
    # Local temp copy of the selected file; never serialized
    path: Optional[str] = Field(None, exclude=True)
    state: UploadState = UploadState.IDLE
    progress: int = 0
    job_id: Optional[str] = None
    error: Optional[str] = None
    asset: Optional[MediaAsset] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

class ValidationFailure(BaseModel):
    reason: str
    message: str
