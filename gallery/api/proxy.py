from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse
import httpx
import logging
from typing import Optional
from gallery.api.deps import get_airtable_client, get_media_host, get_settings
from gallery.core.config import Settings
from gallery.core.fetcher import AirtableClient
from gallery.core.media_host import MediaHostClient
from gallery.schemas.proxy import ProxyRequest

router = APIRouter()
logger = logging.getLogger(__name__)

# Both proxies keep secrets server-side and answer {"error": ...} on failure.

def _error(message: str, status_code: int, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})

@router.post("/airtable-proxy")
async def airtable_proxy(
    request: ProxyRequest,
    s: Settings = Depends(get_settings),
    client: AirtableClient = Depends(get_airtable_client),
):
    if not s.AIRTABLE_API_TOKEN or not s.AIRTABLE_BASE_ID:
        logger.error("Missing Airtable configuration")
        return _error("Airtable configuration missing", 500)

    record_id = request.record_id if request.wants_single_record else None
    logger.info(f"Airtable proxy request: action={request.action}, recordId={request.record_id}")

    try:
        response = await client.get(record_id)
    except httpx.HTTPError as e:
        logger.error(f"Error in airtable proxy: {e}")
        return _error(str(e) or "Airtable request failed", 500)

    if not response.is_success:
        logger.error(f"Airtable API error: {response.status_code} - {response.text}")
        return _error(f"Airtable API error: {response.status_code}", response.status_code)

    try:
        data = response.json()
    except ValueError as e:
        return _error(f"Invalid Airtable response: {e}", 502)

    logger.info("Airtable response received successfully")
    return JSONResponse(content=data)

@router.post("/cloudinary-upload")
async def cloudinary_upload(
    file: Optional[UploadFile] = File(None),
    media_host: MediaHostClient = Depends(get_media_host),
):
    if not media_host.has_credentials:
        logger.error("Missing Cloudinary credentials")
        return _error("Server configuration error: missing Cloudinary credentials", 500)

    if file is None or not file.filename:
        return _error("No video file provided", 400)

    content = await file.read()
    logger.info(f"Cloudinary upload: Processing file {file.filename} ({len(content)} bytes)")

    try:
        response = await media_host.forward(file.filename, content, file.content_type)
    except httpx.HTTPError as e:
        logger.error(f"Error in cloudinary upload proxy: {e}")
        return _error(str(e) or "Cloudinary request failed", 500)

    if not response.is_success:
        logger.error(f"Cloudinary error: {response.status_code} - {response.text}")
        return _error(f"Cloudinary upload failed: {response.status_code}", response.status_code, details=response.text)

    try:
        data = response.json()
    except ValueError as e:
        return _error(f"Invalid Cloudinary response: {e}", 502)

    logger.info(f"Cloudinary upload successful: {data.get('public_id') if isinstance(data, dict) else None}")
    return JSONResponse(content=data)
