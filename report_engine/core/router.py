# report_engine/core/router.py
"""
Module for registering routes in the FastAPI application.
"""

from fastapi import FastAPI

from report_engine.legacy.router import router as legacy_router
from report_engine.reports.router import router as reports_router


def register_routes(app: FastAPI) -> None:
    """
    Registers all the routes for the FastAPI application.

    Args:
        app (FastAPI): The FastAPI application instance.
    """
    app.include_router(reports_router, prefix="/api")
    app.include_router(legacy_router, prefix="/api")
