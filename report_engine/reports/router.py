"""API router for compiling report definitions."""

from typing import List

from fastapi import APIRouter, Depends

from report_engine.core.dependencies import get_report_service
from report_engine.reports.schemas import (
    CompileRequest,
    CompileResponse,
    DefaultStructureRequest,
    ReportDefinition,
    ReportTypeRead,
    SortingRequest,
)
from report_engine.reports.service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


# ===== COMPILATION ENDPOINTS =====


@router.post("/compile", response_model=CompileResponse)
async def compile_report(
    request: CompileRequest, service: ReportService = Depends(get_report_service)
) -> CompileResponse:
    """Compile a report definition to SQL."""
    return await service.compile(request)


@router.post("/default", response_model=ReportDefinition)
async def create_default_report(
    request: DefaultStructureRequest, service: ReportService = Depends(get_report_service)
) -> ReportDefinition:
    """Build a new definition with the mandatory fields and default filters."""
    return await service.default_structure(request)


@router.post("/sorting", response_model=ReportDefinition)
async def apply_sorting(
    request: SortingRequest, service: ReportService = Depends(get_report_service)
) -> ReportDefinition:
    """Replace the sorting options of a definition."""
    return service.apply_sorting(request)


# ===== CATALOG ENDPOINTS =====


@router.get("/types", response_model=List[ReportTypeRead])
async def get_report_types(service: ReportService = Depends(get_report_service)) -> List[ReportTypeRead]:
    """Get every report type with its field catalog."""
    return service.list_types()
