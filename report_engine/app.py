"""FastAPI application entry point for the report engine."""

import logging

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.middleware.cors import CORSMiddleware

from report_engine.core.config import get_settings
from report_engine.core.exceptions import MetadataServiceError, ReportEngineError, UnknownReportTypeError
from report_engine.core.router import register_routes
from report_engine.logging.exception_handlers import (
    general_exception_handler,
    http_exception_handler,
    metadata_exception_handler,
    not_implemented_exception_handler,
    report_engine_exception_handler,
    request_validation_exception_handler,
    response_validation_exception_handler,
    unknown_report_type_exception_handler,
)
from report_engine.logging.middleware import LoggingMiddleware


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Report Engine",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # Add request logger middleware
    app.add_middleware(LoggingMiddleware)

    # Domain errors, matched on the closest class in the MRO
    app.add_exception_handler(UnknownReportTypeError, unknown_report_type_exception_handler)
    app.add_exception_handler(MetadataServiceError, metadata_exception_handler)
    app.add_exception_handler(ReportEngineError, report_engine_exception_handler)
    app.add_exception_handler(NotImplementedError, not_implemented_exception_handler)

    app.add_exception_handler(ResponseValidationError, response_validation_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, replace with specific origins
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)

    return app
