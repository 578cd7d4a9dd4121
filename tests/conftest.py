import pytest
from gallery.core.config import Settings

@pytest.fixture
def demo_settings():
    return Settings(
        AIRTABLE_BASE_ID="",
        AIRTABLE_API_TOKEN="",
        DEMO_DELAY_SECONDS=0,
        DEMO_RECORD_DELAY_SECONDS=0,
    )

@pytest.fixture
def remote_settings():
    return Settings(
        AIRTABLE_BASE_ID="appTEST1234",
        AIRTABLE_API_TOKEN="patSECRET0000",
        AIRTABLE_TABLE_NAME="Listings",
        CLOUDINARY_CLOUD_NAME="demo-cloud",
        CLOUDINARY_API_KEY="123456",
        CLOUDINARY_API_SECRET="shhh",
        UPLOAD_SIGNING_PROXY_URL="",
        PROCESSING_BACKEND_URL="https://backend.test/process",
        UPLOAD_PROGRESS_INTERVAL=0.01,
    )
