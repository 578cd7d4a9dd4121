import logging
import httpx
import pytest
from fakes import RecordingTransport
from gallery.core.demo_data import DEMO_RECORDS
from gallery.core.errors import FetchError, NotFoundError
from gallery.core.fetcher import (
    AirtableClient,
    DataFetcher,
    has_valid_credentials,
    refresh_records,
    select_record,
)
from gallery.db.memory import Action, ActionType, RecordStore

REMOTE_RECORDS = {
    "records": [
        {"id": "recB", "fields": {"title": "Second"}, "createdTime": "2024-03-02T00:00:00.000Z"},
        {"id": "recA", "fields": {"Name": "First"}, "createdTime": "2024-03-01T00:00:00.000Z"},
    ]
}

def _remote_fetcher(handler):
    transport = RecordingTransport(handler)
    client = AirtableClient("appTEST1234", "patSECRET0000", "Imported Table", transport=transport)
    return DataFetcher(client), transport

def test_placeholder_credentials_select_demo_mode():
    assert not has_valid_credentials("", "")
    assert not has_valid_credentials("<BASE_ID_OF_THE_AIRTABLE_TABLE>", "pat123")
    assert not has_valid_credentials("app123", "your_api_token_here")
    assert has_valid_credentials("app123", "pat123")

def test_from_settings_picks_source(demo_settings, remote_settings):
    assert DataFetcher.from_settings(demo_settings).source == "demo"
    assert DataFetcher.from_settings(remote_settings).source == "airtable"

@pytest.mark.asyncio
async def test_demo_fetch_all_returns_fallback_set(demo_settings):
    fetcher = DataFetcher.from_settings(demo_settings)
    records = await fetcher.fetch_all()
    assert [r.id for r in records] == [r.id for r in DEMO_RECORDS]

@pytest.mark.asyncio
async def test_demo_fetch_one_and_not_found(demo_settings):
    fetcher = DataFetcher.from_settings(demo_settings)
    record = await fetcher.fetch_one("rec3")
    assert record.fields["title"] == "Ocean Sunset"
    with pytest.raises(NotFoundError):
        await fetcher.fetch_one("rec-missing")

@pytest.mark.asyncio
async def test_remote_fetch_all_sends_bearer_and_keeps_order():
    fetcher, transport = _remote_fetcher(lambda request: httpx.Response(200, json=REMOTE_RECORDS))
    records = await fetcher.fetch_all()

    assert [r.id for r in records] == ["recB", "recA"]
    assert len(transport.requests) == 1
    request = transport.requests[0]
    assert request.method == "GET"
    assert request.url.path == "/v0/appTEST1234/Imported Table"
    assert request.headers["Authorization"] == "Bearer patSECRET0000"

@pytest.mark.asyncio
async def test_remote_fetch_one_hits_record_url():
    payload = {"id": "recA", "fields": {"title": "A"}, "createdTime": "2024-03-01T00:00:00.000Z"}
    fetcher, transport = _remote_fetcher(lambda request: httpx.Response(200, json=payload))
    record = await fetcher.fetch_one("recA")
    assert record.id == "recA"
    assert transport.requests[0].url.path.endswith("/recA")

@pytest.mark.asyncio
async def test_remote_non_2xx_becomes_generic_fetch_error():
    body = {"error": {"type": "AUTHENTICATION_REQUIRED", "message": "Authentication required"}}
    fetcher, transport = _remote_fetcher(lambda request: httpx.Response(401, json=body))
    with pytest.raises(FetchError) as exc:
        await fetcher.fetch_all()
    assert str(exc.value) == "Failed to fetch records from Airtable"
    # single attempt, no retry
    assert len(transport.requests) == 1

@pytest.mark.asyncio
async def test_remote_transport_error_becomes_fetch_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    fetcher, _ = _remote_fetcher(handler)
    with pytest.raises(FetchError):
        await fetcher.fetch_one("recA")

@pytest.mark.asyncio
async def test_refresh_records_success_updates_store():
    fetcher, _ = _remote_fetcher(lambda request: httpx.Response(200, json=REMOTE_RECORDS))
    store = RecordStore()
    store.dispatch(Action(ActionType.SET_ERROR, "old failure"))

    records = await refresh_records(store, fetcher)

    assert store.state.loading is False
    assert store.state.error is None
    assert store.state.records == records
    assert [r.id for r in store.state.records] == ["recB", "recA"]

@pytest.mark.asyncio
async def test_refresh_records_failure_keeps_previous_records():
    ok_fetcher, _ = _remote_fetcher(lambda request: httpx.Response(200, json=REMOTE_RECORDS))
    bad_fetcher, _ = _remote_fetcher(lambda request: httpx.Response(500, text="upstream down"))
    store = RecordStore()
    previous = await refresh_records(store, ok_fetcher)

    with pytest.raises(FetchError):
        await refresh_records(store, bad_fetcher)

    assert store.state.loading is False
    assert store.state.error == "Failed to fetch records from Airtable"
    assert store.state.records == previous

@pytest.mark.asyncio
async def test_select_record_sets_selection_or_error(demo_settings):
    fetcher = DataFetcher.from_settings(demo_settings)
    store = RecordStore()

    record = await select_record(store, fetcher, "rec1")
    assert store.state.selected_record == record
    assert store.state.loading is False

    with pytest.raises(NotFoundError):
        await select_record(store, fetcher, "nope")
    assert store.state.error == "Record not found"
    assert store.state.loading is False

def test_building_a_fetcher_does_not_log_at_info(remote_settings, caplog):
    with caplog.at_level(logging.INFO, logger="gallery.core.fetcher"):
        DataFetcher.from_settings(remote_settings)
    assert not [r for r in caplog.records if "Data source config" in r.getMessage()]
