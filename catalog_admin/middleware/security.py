"""
HTTP middleware: security headers and request timing
"""
import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


class TimingMiddleware(BaseHTTPMiddleware):
    """Adds X-Process-Time and logs slow admin requests"""

    slow_request_seconds = 2.0

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time
        response.headers["X-Process-Time"] = f"{duration:.4f}"
        if duration > self.slow_request_seconds:
            logger.warning(f"Slow request: {request.method} {request.url.path} ({duration:.3f}s)")
        return response
