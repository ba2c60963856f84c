# middleware.py
"""
Middleware for security headers and request logging.
"""
import time
from typing import Callable
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from app.core.logging import logger

SLOW_REQUEST_SECONDS = 2.0


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next: Callable):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "camera=(), microphone=(), geolocation=()"

        return response


class AuditMiddleware(BaseHTTPMiddleware):
    """Log every request with its status and duration."""

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        client_ip = request.client.host if request.client else None

        response = await call_next(request)

        duration = time.perf_counter() - start
        logger.info(
            f"Request: {request.method} {request.url.path} | "
            f"Status: {response.status_code} | "
            f"Duration: {duration:.3f}s | "
            f"IP: {client_ip}"
        )

        if duration > SLOW_REQUEST_SECONDS:
            logger.warning(f"Slow request detected: {request.method} {request.url.path} | Duration: {duration:.3f}s")

        if response.status_code in (401, 403):
            logger.warning(
                f"Access refused: {response.status_code} | "
                f"Path: {request.url.path} | "
                f"IP: {client_ip}"
            )

        return response
