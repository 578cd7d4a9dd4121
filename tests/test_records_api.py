import httpx
import pytest
from fastapi.testclient import TestClient
from gallery.main import app
from gallery.api.deps import get_fetcher, get_settings
from gallery.core.fetcher import AirtableClient, DataFetcher
from gallery.core.presenter import PLACEHOLDER_IMAGE_URL
from gallery.db.memory import Action, ActionType

client = TestClient(app)

@pytest.fixture(autouse=True)
def fresh_state(demo_settings):
    app.state.store.dispatch(Action(ActionType.RESET))
    app.dependency_overrides[get_settings] = lambda: demo_settings
    yield
    app.dependency_overrides.clear()

def _failing_fetcher():
    transport = httpx.MockTransport(lambda request: httpx.Response(503, text="maintenance"))
    return DataFetcher(AirtableClient("appX", "patX", "Imported Table", transport=transport))

def test_health_reports_demo_mode():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "data_source": "demo"}

def test_list_records_from_demo_data():
    response = client.get("/records")
    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "demo"
    assert data["count"] == 6
    assert [r["id"] for r in data["records"]] == ["rec1", "rec2", "rec3", "rec4", "rec5", "rec6"]

    first = data["records"][0]
    assert first["title"] == "Mountain Landscape"
    assert first["image_url"].startswith("https://images.unsplash.com/photo-1464822759844")
    # rec4 has no image in the demo set
    assert data["records"][3]["image_url"] == PLACEHOLDER_IMAGE_URL

    state = app.state.store.state
    assert state.loading is False
    assert state.error is None
    assert len(state.records) == 6

def test_get_single_record():
    response = client.get("/records/rec2")
    assert response.status_code == 200
    assert response.json()["title"] == "Modern Architecture"
    assert app.state.store.state.selected_record.id == "rec2"

def test_missing_record_is_404():
    response = client.get("/records/does-not-exist")
    assert response.status_code == 404
    assert response.json()["detail"] == "Record not found"

def test_remote_failure_is_502_and_keeps_records():
    client.get("/records")
    app.dependency_overrides[get_fetcher] = _failing_fetcher

    response = client.get("/records")
    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to fetch records from Airtable"

    state = app.state.store.state
    assert state.error == "Failed to fetch records from Airtable"
    assert state.loading is False
    assert len(state.records) == 6

def test_gallery_page_renders_cards_and_setup_hint():
    response = client.get("/")
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Mountain Landscape" in response.text
    assert "Showing demo data" in response.text
    assert 'href="/details/rec1"' in response.text
    assert "this.onerror=null" in response.text

def test_gallery_page_shows_error_with_retry():
    app.dependency_overrides[get_fetcher] = _failing_fetcher
    response = client.get("/")
    assert response.status_code == 502
    assert "Failed to fetch records from Airtable" in response.text
    assert "Try again" in response.text

def test_detail_page_and_empty_state():
    response = client.get("/details/rec3")
    assert response.status_code == 200
    assert "Ocean Sunset" in response.text
    assert "California Coast" in response.text

    missing = client.get("/details/nope")
    assert missing.status_code == 404
    assert "Record not found" in missing.text

if __name__ == "__main__":
    test_health_reports_demo_mode()
