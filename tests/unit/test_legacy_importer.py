"""
Unit tests for the legacy report importer.
"""

import json

import pytest

from report_engine.catalog.enums import DateConditions, ReportType, SortDirection, SortSelector, VisibilityTypes
from report_engine.core.exceptions import LegacyReportError
from report_engine.legacy.importer import LegacyReportImporter, parse_legacy_date
from report_engine.legacy.schemas import LegacyReport, VisibilityRule
from report_engine.reports.base import default_date_option


def legacy_report(report_type_id="1", filter_data=None, **kwargs) -> LegacyReport:
    if filter_data is None:
        filter_data = {"filters": {"condition_status": "and"}}
    return LegacyReport(
        id_filter=kwargs.pop("id_filter", "17"),
        report_type_id=report_type_id,
        author=kwargs.pop("author", "5"),
        filter_name=kwargs.pop("filter_name", "Legacy report"),
        filter_data=json.dumps(filter_data),
        **kwargs,
    )


@pytest.fixture
def importer(admin_session, metadata):
    return LegacyReportImporter(admin_session, metadata)


class TestLegacyDates:
    """Legacy date filter conversion"""

    @pytest.mark.parametrize("combobox, days, operator, expected_days", [
        ("<", 5, "isAfter", 5),
        ("<=", 5, "isAfter", 6),
        (">", 5, "isBefore", 5),
        (">=", 5, "isBefore", 4),
        ("=", 5, "isEqual", 5),
    ])
    def test_days_ago(self, combobox, days, operator, expected_days):
        legacy = {"type": "ndago", "data": {"combobox": combobox, "days_count": days}}
        option = parse_legacy_date(default_date_option(), legacy)
        assert option.any is False
        assert option.type == "relative"
        assert option.operator == operator
        assert option.days == expected_days

    def test_range(self):
        legacy = {"type": "range", "data": {"from": "2024-01-01", "to": "2024-02-01"}}
        option = parse_legacy_date(default_date_option(), legacy)
        assert (option.any, option.operator, option.from_, option.to) == (False, "range", "2024-01-01", "2024-02-01")

    @pytest.mark.parametrize("legacy", [
        None,
        {"type": "any"},
        {"type": "ndago", "data": {"combobox": "<", "days_count": "01/02/2024"}},
        {"type": "ndago", "data": {"combobox": "?", "days_count": 3}},
    ])
    def test_unconvertible_filters_keep_the_default(self, legacy):
        assert parse_legacy_date(default_date_option(), legacy).any is True


class TestLegacyImporterParse:
    """Single report conversion"""

    def test_users_courses_report(self, importer):
        report = legacy_report(
            filter_data={
                "users": [3, {"id": "4"}],
                "courses": [{"key": 9}],
                "branches": [{"id": 2, "selectState": "2"}],
                "fields": {
                    "user": ["email", "firstname"],
                    "course": {"code": True, "name": True, "category": False},
                    "enrollment": ["status", "unknown_column"],
                },
                "order": {"orderBy": "user.email", "type": "desc"},
                "filters": {
                    "condition_status": "or",
                    "start_date": {"type": "ndago", "data": {"combobox": "<=", "days_count": 10}},
                    "end_date": {"type": "any"},
                    "subscription_status": "completed",
                },
            },
            creation_date="2020-05-01 10:00:00",
            is_standard="1",
        )

        definition = importer.parse(report, "acme.example.com", [])

        assert definition.type == ReportType.USERS_COURSES
        assert definition.title == "Legacy report"
        assert definition.author == 5
        assert definition.platform == "acme.example.com"
        assert definition.standard is True
        assert definition.imported_from_legacy_id == "17"
        assert definition.creation_date == "2020-05-01 10:00:00"
        assert definition.fields == [
            "user_userid",
            "course_name",
            "user_email",
            "user_firstname",
            "course_code",
            "courseuser_status",
        ]
        assert definition.sorting_options.selector == SortSelector.CUSTOM
        assert definition.sorting_options.selected_field == "user_email"
        assert definition.sorting_options.order_by == SortDirection.DESC

        assert definition.users.all is False
        assert [item.id for item in definition.users.users] == [3, 4]
        assert definition.users.branches[0].descendants is True
        assert definition.courses.all is False
        assert [item.id for item in definition.courses.courses] == [9]

        assert definition.conditions == DateConditions.AT_LEAST_ONE
        assert definition.enrollment_date.operator == "isAfter"
        assert definition.enrollment_date.days == 11
        assert definition.completion_date.any is True

        assert definition.enrollment.completed is True
        assert definition.enrollment.in_progress is False
        assert definition.enrollment.subscribed is False

    def test_subscribed_status_turns_on_not_started(self, importer):
        report = legacy_report(filter_data={"filters": {"subscription_status": ["0", "1"]}})
        enrollment = importer.parse(report, "", []).enrollment
        assert enrollment.subscribed and enrollment.not_started and enrollment.in_progress
        assert not enrollment.completed

    def test_no_order_keeps_default_sort(self, importer):
        definition = importer.parse(legacy_report(), "", [])
        assert definition.sorting_options.selector == SortSelector.DEFAULT
        assert definition.fields == ["user_userid", "course_name"]
        assert definition.users.all is True

    def test_missing_filters_section(self, importer):
        with pytest.raises(LegacyReportError):
            importer.parse(legacy_report(filter_data={"fields": {}}), "", [])

    def test_selected_power_users_visibility(self, importer):
        rules = [
            VisibilityRule(id_report="17", member_type="user", member_id="8"),
            VisibilityRule(id_report="17", member_type="group", member_id="9"),
            VisibilityRule(id_report="17", member_type="branch", member_id="10", select_state="2"),
            VisibilityRule(id_report="99", member_type="user", member_id="11"),
        ]
        definition = importer.parse(legacy_report(visibility_type="selection"), "", rules)

        visibility = definition.visibility
        assert visibility.type == VisibilityTypes.ALL_GODADMINS_AND_SELECTED_PU
        assert [item.id for item in visibility.users] == [8]
        assert [item.id for item in visibility.groups] == [9]
        assert visibility.branches[0].id == 10
        assert visibility.branches[0].descendants is True

    @pytest.mark.parametrize("visibility_type, expected", [
        ("private", VisibilityTypes.ALL_GODADMINS),
        ("public", VisibilityTypes.ALL_GODADMINS_AND_PU),
        ("unknown", VisibilityTypes.ALL_GODADMINS),
    ])
    def test_visibility_types(self, importer, visibility_type, expected):
        definition = importer.parse(legacy_report(visibility_type=visibility_type), "", [])
        assert definition.visibility.type == expected

    def test_enrollment_time_course_expiration(self, importer):
        report = legacy_report(
            report_type_id="2",
            filter_data={
                "fields": {"enrollment": ["date_expire_validity"]},
                "filters": {"courses_expiring_in": "30"},
            },
        )
        definition = importer.parse(report, "", [])

        assert definition.type == ReportType.USERS_ENROLLMENT_TIME
        assert definition.fields == ["user_userid", "course_name", "courseuser_expiration_date"]
        assert definition.course_expiration_date.operator == "expiringIn"
        assert definition.course_expiration_date.days == 30

    def test_course_expiring_before(self, importer):
        report = legacy_report(filter_data={"filters": {"courses_expiring_before": "2025-12-31"}})
        option = importer.parse(report, "", []).course_expiration_date
        assert (option.from_, option.to, option.operator) == ("1970-01-01", "2025-12-31", "range")

    def test_assets_report(self, importer):
        report = legacy_report(
            report_type_id="50",
            filter_data={
                "channels": [5],
                "fields": {"asset": ["title"], "stat": ["total_views"]},
                "filters": {"start_date": {"type": "range", "data": {"from": "2024-01-01", "to": "2024-06-30"}}},
            },
        )
        definition = importer.parse(report, "", [])

        assert definition.type == ReportType.ASSETS_STATISTICS
        assert definition.fields == ["asset_name", "total_views"]
        assert definition.assets.all is False
        assert [item.id for item in definition.assets.channels] == [5]
        assert definition.published_date.to == "2024-06-30"

    def test_learning_plans_have_no_legacy_fields(self, importer):
        with pytest.raises(NotImplementedError):
            importer.parse(legacy_report(), "", [], report_type=ReportType.LP_USERS_STATISTICS)


class TestLegacyImporterParseMany:
    """Batch conversion"""

    def test_failures_are_not_parsed(self, importer):
        reports = [
            legacy_report(id_filter="1"),
            legacy_report(id_filter="2", report_type_id="99"),
            legacy_report(id_filter="3", filter_data={}),
            legacy_report(id_filter="4", filter_data={"filters": {"subscription_status": "bogus"}}),
        ]

        result = importer.parse_many(reports, [])

        assert [definition.imported_from_legacy_id for definition in result.parsed] == ["1"]
        assert [report.id_filter for report in result.not_parsed] == ["2", "3", "4"]

    def test_platform_defaults_to_session(self, importer, admin_session):
        result = importer.parse_many([legacy_report()], [])
        assert result.parsed[0].platform == admin_session.platform.base_url
