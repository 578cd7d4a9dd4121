from fastapi import Depends, Request
from gallery.core.config import Settings, settings
from gallery.core.fetcher import AirtableClient, DataFetcher
from gallery.core.media import DurationProbe
from gallery.core.media_host import MediaHostClient
from gallery.core.uploads import UploadPipeline, UploadPolicy
from gallery.db.memory import RecordStore

# Every collaborator is built per request from Settings so tests can swap
# either the settings or the collaborator through app.dependency_overrides.

def get_settings() -> Settings:
    return settings

def get_store(request: Request) -> RecordStore:
    return request.app.state.store

def get_fetcher(s: Settings = Depends(get_settings)) -> DataFetcher:
    return DataFetcher.from_settings(s)

def get_airtable_client(s: Settings = Depends(get_settings)) -> AirtableClient:
    return AirtableClient.from_settings(s)

def get_media_host(s: Settings = Depends(get_settings)) -> MediaHostClient:
    return MediaHostClient.from_settings(s)

def get_upload_policy(s: Settings = Depends(get_settings)) -> UploadPolicy:
    return UploadPolicy.from_settings(s)

def get_duration_probe(s: Settings = Depends(get_settings)) -> DurationProbe:
    return DurationProbe(s.FFPROBE_BIN, s.FFPROBE_TIMEOUT)

def get_pipeline(s: Settings = Depends(get_settings)) -> UploadPipeline:
    return UploadPipeline.from_settings(s)
