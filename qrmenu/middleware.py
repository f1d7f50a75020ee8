from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
import time
import uuid

from qrmenu.util.logger import MenuLogger

logger = MenuLogger("qrmenu.http")

class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = req_id
        logger.info(f"{req_id} {request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f}ms)")
        return response
