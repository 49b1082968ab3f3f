# report_engine/logging/exception_handlers.py

import logging
import os

from dotenv import load_dotenv
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse

from report_engine.core.exceptions import MetadataServiceError, ReportEngineError, UnknownReportTypeError

load_dotenv()

APPLICATION_ID = os.environ.get("APPLICATION_ID", "Unknown")

logger = logging.getLogger(__name__)


def log_error(request: Request, status_code: int, exc: Exception) -> None:
    log = logger.exception if status_code >= 500 and not isinstance(exc, NotImplementedError) else logger.warning
    log(
        "[%s] %s %s -> %s (%s: %s)",
        APPLICATION_ID,
        request.method,
        request.url.path,
        status_code,
        type(exc).__name__,
        exc,
    )


def convert_error(error):
    """Convert validation errors to a JSON-safe structure"""
    if isinstance(error, dict):
        return {k: convert_error(v) for k, v in error.items()}
    elif isinstance(error, (list, tuple)):
        return [convert_error(item) for item in error]
    elif isinstance(error, (int, float, bool)) or error is None:
        return error
    return str(error)


async def report_engine_exception_handler(request: Request, exc: ReportEngineError):
    """Invalid definitions and unconvertible legacy reports"""
    log_error(request, 400, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc), "type": type(exc).__name__})


async def unknown_report_type_exception_handler(request: Request, exc: UnknownReportTypeError):
    log_error(request, 404, exc)
    return JSONResponse(status_code=404, content={"detail": str(exc), "type": type(exc).__name__})


async def metadata_exception_handler(request: Request, exc: MetadataServiceError):
    """The metadata service failed; the upstream status travels in the body"""
    log_error(request, 502, exc)
    return JSONResponse(
        status_code=502,
        content={"detail": str(exc), "type": type(exc).__name__, "upstream_status": exc.status_code},
    )


async def not_implemented_exception_handler(request: Request, exc: NotImplementedError):
    """Report types without a compiler for the dialect, and legacy imports without a field map"""
    log_error(request, 501, exc)
    return JSONResponse(status_code=501, content={"detail": str(exc) or "Not implemented"})


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    log_error(request, 422, exc)
    return JSONResponse(status_code=422, content={"detail": convert_error(exc.errors())})


async def response_validation_exception_handler(request: Request, exc: ResponseValidationError):
    log_error(request, 500, exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error: Response validation failed."},
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions and log 4xx/5xx errors"""
    if exc.status_code >= 400:
        log_error(request, exc.status_code, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    log_error(request, 500, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})
