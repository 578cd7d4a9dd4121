from fastapi import APIRouter, Depends
from gallery.api.deps import get_settings
from gallery.core.config import Settings
from gallery.core.fetcher import has_valid_credentials

router = APIRouter()

@router.get("/health")
async def health(s: Settings = Depends(get_settings)):
    data_source = "airtable" if has_valid_credentials(s.AIRTABLE_BASE_ID, s.AIRTABLE_API_TOKEN) else "demo"
    return {"status": "ok", "data_source": data_source}
