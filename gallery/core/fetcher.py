import asyncio
import logging
from typing import List, Optional
from urllib.parse import quote
import httpx
from pydantic import ValidationError
from gallery.core.config import Settings
from gallery.core.demo_data import DEMO_RECORDS
from gallery.core.errors import FetchError, GalleryError, NotFoundError
from gallery.db.memory import Action, ActionType, RecordStore
from gallery.schemas.record import Record, RecordsPage

logger = logging.getLogger(__name__)

PLACEHOLDER_BASE_ID = "<BASE_ID_OF_THE_AIRTABLE_TABLE>"
PLACEHOLDER_API_TOKEN = "your_api_token_here"

def _mask(value: str) -> str:
    return f"{value[:8]}..." if value else "Not set"

def has_valid_credentials(base_id: str, api_token: str) -> bool:
    return bool(
        base_id
        and api_token
        and base_id != PLACEHOLDER_BASE_ID
        and api_token != PLACEHOLDER_API_TOKEN
    )

class AirtableClient:
    """Bearer-authenticated GETs against one Airtable table.

    Returns raw `httpx.Response` objects; callers decide how to map status codes.
    """

    def __init__(
        self,
        base_id: str,
        api_token: str,
        table_name: str,
        api_url: str = "https://api.airtable.com/v0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = f"{api_url.rstrip('/')}/{base_id}"
        self.table_name = table_name
        self._headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
        }
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "AirtableClient":
        return cls(
            settings.AIRTABLE_BASE_ID,
            settings.AIRTABLE_API_TOKEN,
            settings.AIRTABLE_TABLE_NAME,
            api_url=settings.AIRTABLE_API_URL,
            transport=transport,
        )

    def table_url(self, record_id: Optional[str] = None) -> str:
        # The id stays a single path segment under the configured table
        # One path segment of the configured table; "/", "?" and ".." cannot escape it
        url = f"{self.base_url}/{self.table_name}"
        return f"{url}/{quote(record_id, safe='')}" if record_id else url

    async def get(self, record_id: Optional[str] = None) -> httpx.Response:
        url = self.table_url(record_id)
        logger.info(f"Airtable request: GET {url}")
        async with httpx.AsyncClient(headers=self._headers, transport=self._transport) as client:
            return await client.get(url)

class DataFetcher:
    """Reads records from Airtable, or from the demo set when no credentials exist.

    Single attempt, no cache and no pagination. Every remote failure is reduced
    to one generic FetchError; the detailed cause is only logged.
    """

    def __init__(
        self,
        client: Optional[AirtableClient] = None,
        demo_delay: float = 1.0,
        demo_record_delay: float = 0.8,
    ):
        self.client = client
        self.demo_delay = demo_delay
        self.demo_record_delay = demo_record_delay

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "DataFetcher":
        client = None
        if has_valid_credentials(settings.AIRTABLE_BASE_ID, settings.AIRTABLE_API_TOKEN):
            client = AirtableClient.from_settings(settings, transport=transport)
        logger.debug(
            f"Data source config: baseId={_mask(settings.AIRTABLE_BASE_ID)}, "
            f"token={_mask(settings.AIRTABLE_API_TOKEN)}, table={settings.AIRTABLE_TABLE_NAME}, "
            f"remote={client is not None}"
        )
        return cls(client, settings.DEMO_DELAY_SECONDS, settings.DEMO_RECORD_DELAY_SECONDS)

    @property
    def source(self) -> str:
        return "airtable" if self.client else "demo"

    async def fetch_all(self) -> List[Record]:
        if self.client is None:
            logger.warning("Using demo data - configure AIRTABLE_BASE_ID and AIRTABLE_API_TOKEN to use real Airtable data")
            await asyncio.sleep(self.demo_delay)
            return list(DEMO_RECORDS)

        try:
            response = await self.client.get()
            response.raise_for_status()
            page = RecordsPage.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.error(f"Error fetching records: {e}")
            raise FetchError("Failed to fetch records from Airtable") from e

        logger.info(f"Airtable returned {len(page.records)} records")
        return page.records

    async def fetch_one(self, record_id: str) -> Record:
        if self.client is None:
            await asyncio.sleep(self.demo_record_delay)
            record = next((r for r in DEMO_RECORDS if r.id == record_id), None)
            if record is None:
                logger.info(f"Record not found in demo data: {record_id}")
                raise NotFoundError("Record not found")
            return record

        try:
            response = await self.client.get(record_id)
            response.raise_for_status()
            record = Record.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.error(f"Error fetching record {record_id}: {e}")
            raise FetchError("Failed to fetch record from Airtable") from e

        return record

async def refresh_records(store: RecordStore, fetcher: DataFetcher) -> List[Record]:
    """Page-load action for the gallery: loading -> records, or loading -> error.

    On failure the error lands in the store and is re-raised; `records` keep
    their previous value.
    """
    store.dispatch(Action(ActionType.SET_LOADING, True))
    try:
        records = await fetcher.fetch_all()
    except GalleryError as e:
        store.dispatch(Action(ActionType.SET_ERROR, str(e) or "An error occurred"))
        raise
    store.dispatch(Action(ActionType.SET_RECORDS, records))
    return records

async def select_record(store: RecordStore, fetcher: DataFetcher, record_id: str) -> Record:
    """Page-load action for the detail view."""
    store.dispatch(Action(ActionType.SET_LOADING, True))
    try:
        record = await fetcher.fetch_one(record_id)
    except GalleryError as e:
        store.dispatch(Action(ActionType.SET_ERROR, str(e) or "An error occurred"))
        raise
    store.dispatch(Action(ActionType.SET_SELECTED_RECORD, record))
    store.dispatch(Action(ActionType.SET_LOADING, False))
    return record
