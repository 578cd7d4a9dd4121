from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pathlib import Path
from gallery.api.deps import get_fetcher, get_store
from gallery.core.errors import FetchError, NotFoundError
from gallery.core.fetcher import DataFetcher, refresh_records, select_record
from gallery.core.presenter import PLACEHOLDER_IMAGE_URL, present, present_all
from gallery.db.memory import RecordStore

router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

@router.get("/", response_class=HTMLResponse)
async def gallery_page(
    request: Request,
    store: RecordStore = Depends(get_store),
    fetcher: DataFetcher = Depends(get_fetcher),
):
    try:
        await refresh_records(store, fetcher)
    except FetchError:
        # The error is already in the store; render it with a retry link
        pass

    state = store.state
    return templates.TemplateResponse(request, "home.html", {
        "cards": present_all(state.records),
        "error": state.error,
        "demo_mode": fetcher.source == "demo",
        "placeholder_image": PLACEHOLDER_IMAGE_URL,
    }, status_code=502 if state.error else 200)

@router.get("/details/{record_id}", response_class=HTMLResponse)
async def detail_page(
    request: Request,
    record_id: str,
    store: RecordStore = Depends(get_store),
    fetcher: DataFetcher = Depends(get_fetcher),
):
    context = {"record": None, "error": None, "not_found": False, "placeholder_image": PLACEHOLDER_IMAGE_URL}
    status_code = 200
    try:
        record = await select_record(store, fetcher, record_id)
        context["record"] = present(record)
    except NotFoundError:
        context["not_found"] = True
        status_code = 404
    except FetchError:
        context["error"] = store.state.error
        status_code = 502

    return templates.TemplateResponse(request, "detail.html", context, status_code=status_code)
