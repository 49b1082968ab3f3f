"""
Unit tests for the report service.
Tests dialect selection, default structures, sorting and legacy import dispatch.
"""

from unittest.mock import AsyncMock

import pytest

from report_engine.catalog.enums import Dialect, ReportType, SortDirection, SortSelector
from report_engine.core.exceptions import MetadataServerError
from report_engine.legacy.schemas import LegacyImportRequest, LegacyReport
from report_engine.reports.schemas import CompileRequest, DefaultStructureRequest, SortingOptions, SortingRequest
from report_engine.reports.service import ReportService


class TestReportServiceCompile:
    """Compilation through the service"""

    @pytest.fixture
    def service(self, metadata, inspector):
        return ReportService(metadata, inspector)

    async def test_default_dialect(self, service, make_definition, admin_session):
        request = CompileRequest(definition=make_definition(ReportType.USERS_COURSES, admin_session))

        response = await service.compile(request)

        assert response.dialect == Dialect.ATHENA
        assert response.columns == ["Username", "_COURSE_NAME"]
        assert response.unmapped_fields == []

    async def test_configured_default_dialect(self, metadata, inspector, make_definition, admin_session):
        service = ReportService(metadata, inspector, default_dialect=Dialect.SNOWFLAKE)
        request = CompileRequest(definition=make_definition(ReportType.USERS_COURSES, admin_session))

        response = await service.compile(request)

        assert response.dialect == Dialect.SNOWFLAKE
        assert 'cu."userid"' in response.sql

    async def test_request_options_reach_the_compiler(self, service, make_definition, admin_session):
        request = CompileRequest(
            definition=make_definition(ReportType.USERS_COURSES, admin_session),
            limit=25,
            from_schedule=True,
        )
        response = await service.compile(request)
        assert response.sql.endswith(" LIMIT 25")

    async def test_metadata_errors_propagate(self, metadata, inspector, make_definition, admin_session):
        metadata.session = AsyncMock(side_effect=MetadataServerError("Metadata service unavailable", 500))
        service = ReportService(metadata, inspector)
        request = CompileRequest(definition=make_definition(ReportType.USERS_COURSES, admin_session))

        with pytest.raises(MetadataServerError):
            await service.compile(request)


class TestReportServiceDefinitions:
    """Default structures, sorting and the catalog listing"""

    @pytest.fixture
    def service(self, metadata, inspector):
        return ReportService(metadata, inspector)

    async def test_default_structure(self, service, admin_session):
        definition = await service.default_structure(
            DefaultStructureRequest(type=ReportType.ASSETS_STATISTICS, title="Assets", description="All assets")
        )
        assert definition.type == ReportType.ASSETS_STATISTICS
        assert definition.description == "All assets"
        assert definition.fields == ["asset_name"]
        assert definition.timezone == admin_session.timezone
        assert definition.assets.all is True
        assert definition.users is None

    async def test_apply_sorting_copies_the_definition(self, service, make_definition, admin_session):
        definition = make_definition(ReportType.USERS_COURSES, admin_session)
        sorting = SortingOptions(selector=SortSelector.CUSTOM, selected_field="course_name", order_by=SortDirection.DESC)

        result = service.apply_sorting(SortingRequest(definition=definition, sorting=sorting))

        assert result.sorting_options == sorting
        assert definition.sorting_options.selector == SortSelector.DEFAULT

    def test_list_types(self, service):
        report_types = {item.type: item for item in service.list_types()}

        assert set(report_types) == set(ReportType)
        surveys = report_types[ReportType.SURVEYS_INDIVIDUAL_ANSWERS]
        assert surveys.mandatory_fields == ["survey_title", "question", "answer_user"]
        assert surveys.extra_field_entities == ["course"]
        assert {field.category for field in surveys.fields} == {"user", "course", "survey", "question"}


class TestReportServiceLegacyImport:
    async def test_import_uses_session_platform(self, metadata, inspector, admin_session):
        service = ReportService(metadata, inspector)
        request = LegacyImportRequest(
            reports=[
                LegacyReport(id_filter="1", report_type_id="1", filter_data='{"filters": {"a": 1}}'),
                LegacyReport(id_filter="2", report_type_id="1", filter_data="{}"),
            ]
        )

        response = await service.import_legacy(request)

        assert [definition.imported_from_legacy_id for definition in response.parsed] == ["1"]
        assert response.parsed[0].platform == admin_session.platform.base_url
        assert [report.id_filter for report in response.not_parsed] == ["2"]
        assert "session" in metadata.calls
