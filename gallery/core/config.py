from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    PROJECT_NAME: str = "Record Gallery"
    LOG_LEVEL: str = "INFO"

    # Airtable (blank or placeholder values switch to demo data)
    AIRTABLE_BASE_ID: str = ""
    AIRTABLE_API_TOKEN: str = ""
    AIRTABLE_TABLE_NAME: str = "Imported Table"
    AIRTABLE_API_URL: str = "https://api.airtable.com/v0"
    DEMO_DELAY_SECONDS: float = 1.0
    DEMO_RECORD_DELAY_SECONDS: float = 0.8

    # Cloudinary
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""
    CLOUDINARY_FOLDER: str = "pipeline/uploads"
    CLOUDINARY_API_URL: str = "https://api.cloudinary.com/v1_1"
    # When set, clips are posted here instead of being signed in-process
    UPLOAD_SIGNING_PROXY_URL: str = ""

    PROCESSING_BACKEND_URL: str = ""

    # Upload policy
    ALLOWED_VIDEO_EXTENSIONS: List[str] = ["mp4", "mov", "avi", "mkv"]
    ALLOWED_VIDEO_MIME_TYPES: List[str] = [
        "video/mp4",
        "video/quicktime",
        "video/x-msvideo",
        "video/x-matroska",
    ]
    MAX_UPLOAD_MB: int = 100
    MAX_DURATION_SECONDS: float = 60.0
    FFPROBE_BIN: str = "ffprobe"
    FFPROBE_TIMEOUT: float = 15.0

    # Progress is an estimate; the transport reports no byte-level progress
    UPLOAD_PROGRESS_INTERVAL: float = 0.5
    UPLOAD_PROGRESS_STEP: int = 10
    UPLOAD_PROGRESS_CAP: int = 90
    UPLOAD_TMP_DIR: str = ""

    class Config:
        case_sensitive = True

settings = Settings()
