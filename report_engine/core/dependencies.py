# report_engine/core/dependencies.py
"""FastAPI dependencies for the metadata client and the report service"""

from typing import Annotated

from fastapi import Depends

from report_engine.core.config import Settings, get_settings
from report_engine.core.database import get_warehouse_engine
from report_engine.extra_fields.resolver import WarehouseInspector
from report_engine.services.hydra import HydraClient

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_metadata_client(settings: SettingsDep) -> HydraClient:
    """Metadata client configured from the environment, one per request"""
    return HydraClient(
        settings.hydra_base_url,
        token=settings.hydra_token,
        limits={
            "csv": settings.export_csv_limit,
            "xlsx": settings.export_xlsx_limit,
            "preview": settings.preview_limit,
        },
    )


def get_warehouse_inspector() -> WarehouseInspector:
    return WarehouseInspector(get_warehouse_engine())


MetadataDep = Annotated[HydraClient, Depends(get_metadata_client)]
InspectorDep = Annotated[WarehouseInspector, Depends(get_warehouse_inspector)]


def get_report_service(metadata: MetadataDep, inspector: InspectorDep, settings: SettingsDep):
    """Report service wired to the metadata client and the warehouse inspector"""
    from report_engine.reports.service import ReportService
    return ReportService(metadata, inspector, settings.default_dialect)
