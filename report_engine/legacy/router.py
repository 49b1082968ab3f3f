"""API router for importing legacy reports."""

from fastapi import APIRouter, Depends

from report_engine.core.dependencies import get_report_service
from report_engine.legacy.schemas import LegacyImportRequest, LegacyImportResponse
from report_engine.reports.service import ReportService

router = APIRouter(prefix="/legacy", tags=["legacy"])


@router.post("/import", response_model=LegacyImportResponse)
async def import_legacy_reports(
    request: LegacyImportRequest, service: ReportService = Depends(get_report_service)
) -> LegacyImportResponse:
    """Convert legacy reports; the ones that cannot be converted come back under notParsed."""
    return await service.import_legacy(request)
