import logging
import os
import time
from typing import Callable

from dotenv import load_dotenv
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

load_dotenv()

APPLICATION_ID = os.environ.get("APPLICATION_ID", "Unknown")

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration of every API request."""

    def __init__(self, app: ASGIApp, excluded_paths=None):
        super().__init__(app)
        self.excluded_paths = excluded_paths or ["/api/docs", "/api/redoc", "/api/openapi.json"]
        self.application_id = APPLICATION_ID

    async def dispatch(self, request: Request, call_next: Callable):
        if any(request.url.path.startswith(path) for path in self.excluded_paths):
            return await call_next(request)

        start_time = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000

        logger.info(
            "[%s] %s %s %s %.1fms",
            self.application_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response
