"""
Legacy report importer.

Converts reports saved by the legacy reporting tool (a loosely typed filter
JSON plus sharing rules) into report definitions of the matching report type.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from report_engine.catalog.enums import (
    DateConditions,
    DateOperator,
    Dialect,
    EnrollmentStatuses,
    ReportType,
    SortDirection,
    SortSelector,
    VisibilityTypes,
)
from report_engine.core.exceptions import LegacyReportError, ReportEngineError
from report_engine.legacy.schemas import LegacyReport, VisibilityRule
from report_engine.reports.base import ReportCompiler
from report_engine.reports.factory import get_compiler
from report_engine.reports.schemas import (
    AssetsFilter,
    DateOption,
    ReportDefinition,
    SelectionItem,
    SortingOptions,
    Visibility,
)
from report_engine.reports.session import SessionContext
from report_engine.services.protocol import MetadataService

logger = logging.getLogger(__name__)

LEGACY_TYPES: Dict[str, ReportType] = {
    "1": ReportType.USERS_COURSES,
    "2": ReportType.USERS_ENROLLMENT_TIME,
    "20": ReportType.USERS_CLASSROOM_SESSIONS,
    "50": ReportType.ASSETS_STATISTICS,
}

# legacy date filter -> definition date option, per report type
LEGACY_DATE_FILTERS: Dict[ReportType, Dict[str, str]] = {
    ReportType.USERS_COURSES: {"start_date": "enrollment_date", "end_date": "completion_date"},
    ReportType.USERS_CLASSROOM_SESSIONS: {"start_date": "enrollment_date"},
    ReportType.USERS_ENROLLMENT_TIME: {},
    ReportType.ASSETS_STATISTICS: {"start_date": "published_date"},
}

LEGACY_VISIBILITY: Dict[str, VisibilityTypes] = {
    "private": VisibilityTypes.ALL_GODADMINS,
    "public": VisibilityTypes.ALL_GODADMINS_AND_PU,
    "selection": VisibilityTypes.ALL_GODADMINS_AND_SELECTED_PU,
}

# legacy enrollment status code -> enrollment filter flags
LEGACY_ENROLLMENT_STATUSES: Dict[int, Tuple[str, ...]] = {
    EnrollmentStatuses.WAITING_LIST.value: ("waiting_list",),
    EnrollmentStatuses.CONFIRMED.value: ("enrollments_to_confirm",),
    EnrollmentStatuses.SUBSCRIBED.value: ("subscribed", "not_started"),
    EnrollmentStatuses.IN_PROGRESS.value: ("in_progress",),
    EnrollmentStatuses.COMPLETED.value: ("completed",),
    EnrollmentStatuses.SUSPEND.value: ("suspended",),
    EnrollmentStatuses.OVERBOOKING.value: ("overbooking",),
}

LEGACY_STATUS_NAMES: Dict[str, int] = {
    "waiting_list": EnrollmentStatuses.WAITING_LIST.value,
    "to_confirm": EnrollmentStatuses.CONFIRMED.value,
    "subscribed": EnrollmentStatuses.SUBSCRIBED.value,
    "in_progress": EnrollmentStatuses.IN_PROGRESS.value,
    "completed": EnrollmentStatuses.COMPLETED.value,
    "suspended": EnrollmentStatuses.SUSPEND.value,
    "overbooking": EnrollmentStatuses.OVERBOOKING.value,
}

EPOCH = "1970-01-01"
WITH_DESCENDANTS = "2"


@dataclass
class LegacyImportResult:
    parsed: List[ReportDefinition] = field(default_factory=list)
    not_parsed: List[LegacyReport] = field(default_factory=list)


# ===== DATE HELPERS =====


def parse_legacy_days_ago(option: DateOption, legacy: Dict[str, Any]) -> DateOption:
    """Map an ``ndago`` legacy filter through its comparison combobox."""
    data = legacy.get("data") or {}
    days = int(data.get("days_count") or 0)
    combobox = data.get("combobox")
    if combobox == "<":
        operator, days = DateOperator.IS_AFTER, days
    elif combobox == "<=":
        operator, days = DateOperator.IS_AFTER, days + 1
    elif combobox == ">":
        operator, days = DateOperator.IS_BEFORE, days
    elif combobox == ">=":
        operator, days = DateOperator.IS_BEFORE, max(days - 1, 0)
    elif combobox == "=":
        operator, days = DateOperator.IS_EQUAL, days
    else:
        return option
    return option.model_copy(update={"any": False, "type": "relative", "operator": operator.value, "days": days})


def parse_legacy_range(option: DateOption, legacy: Dict[str, Any]) -> DateOption:
    data = legacy.get("data") or {}
    return option.model_copy(update={
        "any": False,
        "type": "range",
        "days": 0,
        "operator": DateOperator.RANGE.value,
        "from_": data.get("from", ""),
        "to": data.get("to", ""),
    })


def parse_legacy_date(option: DateOption, legacy: Optional[Dict[str, Any]]) -> DateOption:
    """Convert a legacy ``{type, data}`` date filter; ``any`` and unknown types keep ``option``."""
    if not legacy:
        return option
    legacy_type = legacy.get("type")
    if legacy_type == "ndago":
        days_count = str((legacy.get("data") or {}).get("days_count", ""))
        # a date in days_count is a broken legacy filter
        if "/" in days_count:
            return option
        return parse_legacy_days_ago(option, legacy)
    if legacy_type == "range":
        return parse_legacy_range(option, legacy)
    return option


def _ids(values: Any) -> List[int]:
    """Ids of a legacy selection: a list of ids or of ``{"id"|"key": ...}`` objects."""
    ids = []
    for value in values or []:
        if isinstance(value, dict):
            value = value.get("id", value.get("key"))
        if value is None or str(value).strip() == "":
            continue
        ids.append(int(value))
    return ids


def _branch_items(values: Any) -> List[SelectionItem]:
    items = []
    for value in values or []:
        if isinstance(value, dict):
            branch_id = value.get("id", value.get("key"))
            descendants = str(value.get("selectState", value.get("select_state", "1"))) == WITH_DESCENDANTS
        else:
            branch_id, descendants = value, False
        if branch_id is None:
            continue
        items.append(SelectionItem(id=int(branch_id), descendants=descendants))
    return items


class LegacyReportImporter:
    """Builds report definitions from legacy reports, one compiler per report type."""

    def __init__(self, session: SessionContext, metadata: MetadataService, dialect: Dialect = Dialect.ATHENA):
        self.session = session
        self.metadata = metadata
        self.dialect = dialect

    def target_type(self, legacy_report: LegacyReport) -> Optional[ReportType]:
        return LEGACY_TYPES.get(str(legacy_report.report_type_id))

    def parse(
        self,
        legacy_report: LegacyReport,
        platform: str,
        visibility_rules: List[VisibilityRule],
        report_type: Optional[ReportType] = None,
    ) -> ReportDefinition:
        """Convert one legacy report; raises LegacyReportError when it cannot be converted."""
        report_type = report_type or self.target_type(legacy_report)
        if report_type is None:
            raise LegacyReportError(f"No report type for the legacy type {legacy_report.report_type_id}")
        compiler = get_compiler(report_type, self.dialect, self.metadata)
        field_maps = compiler.legacy_field_maps()

        definition = compiler.default_structure(
            self.session,
            title=legacy_report.filter_name,
            author=int(legacy_report.author or 0),
        )
        updates = self._common_fields(legacy_report, platform, visibility_rules)
        filter_data = legacy_report.filter_payload()
        updates.update(self._selections(filter_data, definition))

        filters = filter_data.get("filters")
        if not filters:
            logger.error("No legacy filters section for id report: %s", legacy_report.id_filter)
            raise LegacyReportError("No legacy filters section")

        updates.update(self._dates(filters, definition, report_type))
        if filters.get("condition_status"):
            updates["conditions"] = (
                DateConditions.ALL if filters["condition_status"] == "and" else DateConditions.AT_LEAST_ONE
            )
        enrollment = self._enrollment_status(filters, definition)
        if enrollment is not None:
            updates["enrollment"] = enrollment

        fields, sorting = self._fields_and_sorting(filter_data, field_maps, compiler)
        updates["fields"] = fields
        if sorting is not None:
            updates["sorting_options"] = sorting
        return definition.model_copy(update=updates, deep=True)

    def parse_many(
        self, legacy_reports: List[LegacyReport], visibility_rules: List[VisibilityRule], platform: str = ""
    ) -> LegacyImportResult:
        """Convert every report; failures are logged and returned as not parsed."""
        platform = platform or self.session.platform.base_url
        result = LegacyImportResult()
        for legacy_report in legacy_reports:
            report_type = self.target_type(legacy_report)
            if report_type is None:
                logger.error("No mappable type for the legacy type %s", legacy_report.report_type_id)
                result.not_parsed.append(legacy_report)
                continue
            try:
                result.parsed.append(self.parse(legacy_report, platform, visibility_rules, report_type))
            except (ReportEngineError, NotImplementedError, ValueError, KeyError, TypeError) as e:
                logger.error("Error during the parse of the legacy report %s: %s", legacy_report.id_filter, e)
                result.not_parsed.append(legacy_report)
        logger.info("Imported %d legacy reports, %d not parsed", len(result.parsed), len(result.not_parsed))
        return result

    # ===== COMMON FIELDS =====

    def _common_fields(
        self, legacy_report: LegacyReport, platform: str, visibility_rules: List[VisibilityRule]
    ) -> Dict[str, Any]:
        updates: Dict[str, Any] = {
            "title": legacy_report.filter_name,
            "platform": platform,
            "standard": legacy_report.is_standard == "1",
            "imported_from_legacy_id": legacy_report.id_filter,
            "visibility": self._visibility(legacy_report, visibility_rules),
        }
        if legacy_report.creation_date:
            updates["creation_date"] = legacy_report.creation_date
            updates["last_edit"] = legacy_report.last_edit or legacy_report.creation_date
        return updates

    def _visibility(self, legacy_report: LegacyReport, visibility_rules: List[VisibilityRule]) -> Visibility:
        visibility_type = LEGACY_VISIBILITY.get(legacy_report.visibility_type, VisibilityTypes.ALL_GODADMINS)
        visibility = Visibility(type=visibility_type)
        if visibility_type != VisibilityTypes.ALL_GODADMINS_AND_SELECTED_PU:
            return visibility

        for rule in visibility_rules:
            if rule.id_report != legacy_report.id_filter:
                continue
            item = SelectionItem(id=int(rule.member_id))
            if rule.member_type == "user":
                visibility.users.append(item)
            elif rule.member_type == "group":
                visibility.groups.append(item)
            elif rule.member_type == "branch":
                item.descendants = rule.select_state == WITH_DESCENDANTS
                visibility.branches.append(item)
        return visibility

    # ===== SELECTIONS =====

    def _selections(self, filter_data: Dict[str, Any], definition: ReportDefinition) -> Dict[str, Any]:
        updates: Dict[str, Any] = {}
        if definition.users is not None:
            users = [SelectionItem(id=user_id) for user_id in _ids(filter_data.get("users"))]
            groups = [SelectionItem(id=group_id) for group_id in _ids(filter_data.get("groups"))]
            branches = _branch_items(filter_data.get("branches"))
            updates["users"] = definition.users.model_copy(update={
                "all": not (users or groups or branches),
                "users": users,
                "groups": groups,
                "branches": branches,
            })
        if definition.courses is not None:
            courses = [SelectionItem(id=course_id) for course_id in _ids(filter_data.get("courses"))]
            updates["courses"] = definition.courses.model_copy(update={"all": not courses, "courses": courses})
        if definition.assets is not None:
            assets = [SelectionItem(id=asset_id) for asset_id in _ids(filter_data.get("assets"))]
            channels = [SelectionItem(id=channel_id) for channel_id in _ids(filter_data.get("channels"))]
            updates["assets"] = AssetsFilter(all=not (assets or channels), assets=assets, channels=channels)
        return updates

    # ===== DATES =====

    def _dates(self, filters: Dict[str, Any], definition: ReportDefinition, report_type: ReportType) -> Dict[str, Any]:
        updates: Dict[str, Any] = {}
        if definition.course_expiration_date is not None:
            expiring_in = str(filters.get("courses_expiring_in") or "")
            expiring_before = filters.get("courses_expiring_before")
            if expiring_in and "/" not in expiring_in:
                updates["course_expiration_date"] = definition.course_expiration_date.model_copy(update={
                    "any": False,
                    "type": "relative",
                    "days": int(expiring_in),
                    "operator": DateOperator.EXPIRING_IN.value,
                })
            elif expiring_before:
                updates["course_expiration_date"] = definition.course_expiration_date.model_copy(update={
                    "any": False,
                    "type": "range",
                    "days": 0,
                    "operator": DateOperator.RANGE.value,
                    "from_": EPOCH,
                    "to": expiring_before,
                })

        for legacy_key, attribute in LEGACY_DATE_FILTERS.get(report_type, {}).items():
            option = getattr(definition, attribute)
            legacy = filters.get(legacy_key)
            if option is None or not legacy or legacy.get("type") == "any":
                continue
            updates[attribute] = parse_legacy_date(option, legacy)
        return updates

    # ===== ENROLLMENT STATUS =====

    def _enrollment_status(self, filters: Dict[str, Any], definition: ReportDefinition):
        """Enrollment filter with only the legacy statuses on; None keeps every status."""
        if definition.enrollment is None:
            return None
        legacy = filters.get("subscription_status")
        if legacy is None or legacy == "all" or legacy == "":
            return None
        values = legacy if isinstance(legacy, list) else [legacy]

        flags = {name: False for name in definition.enrollment.status_flags()}
        for value in values:
            code = LEGACY_STATUS_NAMES.get(str(value))
            if code is None:
                code = int(value)
            for flag in LEGACY_ENROLLMENT_STATUSES.get(code, ()):
                flags[flag] = True
        if not any(flags.values()):
            return None
        return definition.enrollment.model_copy(update=flags)

    # ===== FIELDS AND ORDER =====

    def _fields_and_sorting(
        self, filter_data: Dict[str, Any], field_maps: Dict[str, Dict[str, str]], compiler: ReportCompiler
    ) -> Tuple[List[str], Optional[SortingOptions]]:
        """
        Mandatory fields first, then the mapped legacy fields section by section.

        The last mapped field matching the legacy ``order`` becomes the custom sort.
        """
        legacy_fields = filter_data.get("fields") or {}
        order = filter_data.get("order") or {}
        order_by = order.get("orderBy", "")
        direction = SortDirection.DESC if str(order.get("type", "")).lower() == "desc" else SortDirection.ASC

        selected: List[str] = []
        sort_field = None
        for section, mapping in field_maps.items():
            keys = legacy_fields.get(section) or []
            if isinstance(keys, dict):
                keys = [key for key, enabled in keys.items() if enabled]
            for key in keys:
                field_id = mapping.get(key)
                if field_id is None:
                    logger.debug("Legacy field %s.%s has no counterpart; skipped", section, key)
                    continue
                field_value = getattr(field_id, "value", field_id)
                selected.append(field_value)
                if order_by == f"{section}.{key}":
                    sort_field = field_value

        fields = compiler.catalog.with_mandatory(selected)
        if sort_field is None:
            return fields, None
        return fields, SortingOptions(selector=SortSelector.CUSTOM, selected_field=sort_field, order_by=direction)
