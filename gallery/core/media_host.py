import hashlib
import logging
import time
from typing import Any, Dict, Optional
import httpx
from pydantic import ValidationError
from gallery.core.config import Settings
from gallery.core.errors import BackendError, UploadError
from gallery.schemas.upload import MediaAsset, ProcessingAck, ProcessingRequest

logger = logging.getLogger(__name__)

def sign_upload_params(params: Dict[str, str], api_secret: str) -> str:
    """Cloudinary signature: SHA-1 over sorted `k=v` pairs joined by `&`, secret appended."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()

def _error_message(response: httpx.Response, prefix: str) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            error = error.get("message")
        if error:
            return str(error)
    return f"{prefix}: {response.status_code}"

class MediaHostClient:
    """Signed video uploads to Cloudinary, or through a same-origin signing proxy."""

    def __init__(
        self,
        cloud_name: str = "",
        api_key: str = "",
        api_secret: str = "",
        folder: str = "pipeline/uploads",
        api_url: str = "https://api.cloudinary.com/v1_1",
        signing_proxy_url: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.api_url = api_url.rstrip("/")
        self.signing_proxy_url = signing_proxy_url
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "MediaHostClient":
        return cls(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            folder=settings.CLOUDINARY_FOLDER,
            api_url=settings.CLOUDINARY_API_URL,
            signing_proxy_url=settings.UPLOAD_SIGNING_PROXY_URL,
            transport=transport,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    @property
    def upload_url(self) -> str:
        return f"{self.api_url}/{self.cloud_name}/video/upload"

    def signed_fields(self, timestamp: Optional[int] = None) -> Dict[str, str]:
        params = {
            "folder": self.folder,
            "timestamp": str(timestamp if timestamp is not None else int(time.time())),
        }
        signature = sign_upload_params(params, self.api_secret)
        return {**params, "api_key": self.api_key, "signature": signature}

    async def forward(self, filename: str, content: bytes, content_type: Optional[str]) -> httpx.Response:
        """Sign and post one file to the media host; the raw response is returned."""
        data = self.signed_fields()
        files = {"file": (filename, content, content_type or "application/octet-stream")}
        logger.info(f"Uploading {filename} ({len(content)} bytes) to Cloudinary")
        async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
            return await client.post(self.upload_url, data=data, files=files)

    async def upload(self, filename: str, content: bytes, content_type: Optional[str] = None) -> MediaAsset:
        try:
            if self.signing_proxy_url:
                files = {"file": (filename, content, content_type or "application/octet-stream")}
                logger.info(f"Uploading {filename} via signing proxy {self.signing_proxy_url}")
                async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
                    response = await client.post(self.signing_proxy_url, files=files)
            else:
                if not self.has_credentials:
                    raise UploadError("Server configuration error: missing Cloudinary credentials")
                response = await self.forward(filename, content, content_type)
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary upload transport error: {e}")
            raise UploadError(f"Upload failed: {e}") from e

        if not response.is_success:
            logger.error(f"Cloudinary error: {response.status_code} - {response.text}")
            raise UploadError(_error_message(response, "Cloudinary upload failed"))

        try:
            asset = MediaAsset.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise UploadError("Media host returned an unexpected response") from e
        logger.info(f"Cloudinary upload successful: {asset.public_id}")
        return asset

class ProcessingBackendClient:
    def __init__(self, url: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self._transport = transport

    async def notify(self, asset: MediaAsset) -> ProcessingAck:
        if not self.url:
            raise BackendError("Processing backend URL not configured")

        payload = ProcessingRequest(
            video_url=asset.secure_url,
            public_id=asset.public_id,
            asset_id=asset.asset_id,
            duration=asset.duration,
            file_size=asset.bytes,
            format=asset.format,
        )
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(self.url, json=payload.model_dump())
        except httpx.HTTPError as e:
            logger.error(f"Processing backend transport error: {e}")
            raise BackendError(f"Processing backend unreachable: {e}") from e

        if not response.is_success:
            logger.error(f"Processing backend error: {response.status_code} - {response.text}")
            raise BackendError(_error_message(response, "Processing backend error"))

        try:
            body: Any = response.json()
            ack = ProcessingAck.model_validate(body)
        except (ValueError, ValidationError) as e:
            raise BackendError("Processing backend returned no job id") from e
        if not ack.job_id:
            raise BackendError("Processing backend returned no job id")
        logger.info(f"Processing job queued: {ack.job_id}")
        return ack
