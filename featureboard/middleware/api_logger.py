import time
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("featureboard.api")


class APILoggerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"💥 {request.method} {request.url.path} crashed")
            raise
        process_time = (time.time() - start_time) * 1000

        log = logger.warning if response.status_code >= 500 else logger.info
        log(f"{request.method} {request.url.path} → {response.status_code} ({process_time:.1f} ms)")

        response.headers["X-Process-Time-Ms"] = f"{process_time:.1f}"
        return response
