from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from gallery.core.config import settings
from gallery.core.middleware import RequestLogMiddleware
from gallery.db.memory import RecordStore, UPLOAD_JOBS
from gallery.core.fetcher import has_valid_credentials
from gallery.core.uploads import discard_job_file
from gallery.api import health, records, proxy, uploads, web

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)

# Application State lives for the whole process
app.state.store = RecordStore()

# Permissive CORS so browser pre-flight requests to the proxies succeed
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLogMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(records.router)
app.include_router(proxy.router)
app.include_router(uploads.router)
app.include_router(web.router)

@app.on_event("startup")
async def startup_event():
    data_source = "airtable" if has_valid_credentials(settings.AIRTABLE_BASE_ID, settings.AIRTABLE_API_TOKEN) else "demo"
    logger.info(f"Data source: {data_source} (table={settings.AIRTABLE_TABLE_NAME})")

@app.on_event("shutdown")
async def shutdown_event():
    # Drop temp copies of any clips that were never dismissed
    for job in list(UPLOAD_JOBS.values()):
        discard_job_file(job)
    UPLOAD_JOBS.clear()
    logger.info("Upload temp files cleaned up")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
