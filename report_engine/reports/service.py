# report_engine/reports/service.py
"""Service layer for compiling report definitions and importing legacy reports."""

import logging
from typing import List, Optional

from report_engine.catalog.enums import Dialect
from report_engine.catalog.registry import get_catalog
from report_engine.extra_fields.resolver import WarehouseInspector
from report_engine.legacy.importer import LegacyReportImporter
from report_engine.legacy.schemas import LegacyImportRequest, LegacyImportResponse
from report_engine.reports.factory import REPORT_COMPILERS, get_compiler
from report_engine.reports.schemas import (
    CatalogFieldRead,
    CompileRequest,
    CompileResponse,
    DefaultStructureRequest,
    ReportDefinition,
    ReportTypeRead,
    SortingRequest,
    with_sorting,
)
from report_engine.reports.session import SessionContext
from report_engine.services.protocol import MetadataService

logger = logging.getLogger(__name__)


class ReportService:
    """Builds the caller session and dispatches to the compiler of each report type."""

    def __init__(
        self,
        metadata: MetadataService,
        inspector: Optional[WarehouseInspector] = None,
        default_dialect: Dialect = Dialect.ATHENA,
    ):
        self.metadata = metadata
        self.inspector = inspector or WarehouseInspector()
        self.default_dialect = default_dialect

    async def get_session(self) -> SessionContext:
        return await self.metadata.session()

    # ===== COMPILATION =====

    async def compile(self, request: CompileRequest) -> CompileResponse:
        """Compile a definition to SQL for the requested (or default) dialect."""
        dialect = request.dialect or self.default_dialect
        session = await self.get_session()
        compiler = get_compiler(request.definition.type, dialect, self.metadata, self.inspector)
        sql = await compiler.compile(
            request.definition,
            session,
            limit=request.limit,
            is_preview=request.is_preview,
            check_visibility=request.check_visibility,
            from_schedule=request.from_schedule,
        )
        logger.info(
            "Compiled report %s (%s) for %s", request.definition.id_report, request.definition.type.value, dialect.value
        )
        return CompileResponse(
            sql=sql,
            dialect=dialect,
            columns=compiler.columns,
            unmapped_fields=list(compiler.stats.unmapped_fields),
        )

    async def default_structure(self, request: DefaultStructureRequest) -> ReportDefinition:
        session = await self.get_session()
        compiler = get_compiler(request.type, self.default_dialect, self.metadata, self.inspector)
        return compiler.default_structure(session, request.title, request.description)

    def apply_sorting(self, request: SortingRequest) -> ReportDefinition:
        return with_sorting(request.definition, request.sorting)

    def list_types(self) -> List[ReportTypeRead]:
        """Every registered report type with its standard field catalog."""
        report_types = []
        for report_type, compiler_class in REPORT_COMPILERS.items():
            catalog = get_catalog(report_type)
            report_types.append(
                ReportTypeRead(
                    type=report_type,
                    dialects=list(compiler_class.supported_dialects),
                    mandatory_fields=catalog.mandatory_fields,
                    default_sort=catalog.default_sort.value,
                    extra_field_entities=[entity.value for entity in catalog.extra_field_entities],
                    fields=[CatalogFieldRead(**entry.to_dict()) for entry in catalog.get_entries()],
                )
            )
        return report_types

    # ===== LEGACY IMPORT =====

    async def import_legacy(self, request: LegacyImportRequest) -> LegacyImportResponse:
        session = await self.get_session()
        importer = LegacyReportImporter(session, self.metadata, self.default_dialect)
        result = importer.parse_many(request.reports, request.visibility_rules, request.platform)
        return LegacyImportResponse(parsed=result.parsed, not_parsed=result.not_parsed)

