"""Отклоняет слишком большие запросы по Content-Length, до разбора multipart на диск."""
import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import PlainTextResponse

_log = logging.getLogger(__name__)

# запас на границы и заголовки частей multipart
MULTIPART_OVERHEAD = 16 * 1024


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, max_bytes: int):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request, call_next):
        length = request.headers.get("content-length")
        try:
            size = int(length) if length is not None else None
        except ValueError:
            return PlainTextResponse("Error parsing the request", status_code=400)
        if size is not None and size > self.max_bytes:
            _log.warning("%s %s rejected: body of %d bytes exceeds %d", request.method, request.url.path, size, self.max_bytes)
            return PlainTextResponse(
                f"Request body exceeds the maximum size of {self.max_bytes} bytes", status_code=400
            )
        return await call_next(request)
