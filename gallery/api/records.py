from fastapi import APIRouter, Depends, HTTPException
import logging
from gallery.api.deps import get_fetcher, get_store
from gallery.core.errors import FetchError, NotFoundError
from gallery.core.fetcher import DataFetcher, refresh_records, select_record
from gallery.core.presenter import present, present_all
from gallery.db.memory import RecordStore
from gallery.schemas.display import DisplayModel, RecordListResponse

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/records", response_model=RecordListResponse)
async def list_records(
    store: RecordStore = Depends(get_store),
    fetcher: DataFetcher = Depends(get_fetcher),
):
    try:
        records = await refresh_records(store, fetcher)
    except FetchError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return RecordListResponse(
        source=fetcher.source,
        count=len(records),
        records=present_all(records),
    )

@router.get("/records/{record_id}", response_model=DisplayModel)
async def get_record(
    record_id: str,
    store: RecordStore = Depends(get_store),
    fetcher: DataFetcher = Depends(get_fetcher),
):
    try:
        record = await select_record(store, fetcher, record_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FetchError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return present(record)
