from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)

def classify_request(path: str) -> str:
    if path.startswith("/uploads") or "cloudinary" in path:
        return "UPLOAD"
    if "proxy" in path:
        return "PROXY"
    if path.startswith("/records") or path == "/" or path.startswith("/details"):
        return "RECORDS"
    if path.startswith("/health"):
        return "HEALTH_CHECK"
    return "UNKNOWN"

class RequestLogMiddleware(BaseHTTPMiddleware):
    """Logs one line per request: action, method, path, status, elapsed ms.

    Bodies are never read here; uploads can be large.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        path = request.url.path
        method = request.method
        action_type = classify_request(path)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.exception(f"{action_type} {method} {path} failed after {elapsed_ms:.1f}ms")
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        log = logger.info if response.status_code < 500 else logger.error
        log(f"{action_type} {method} {path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
        return response
