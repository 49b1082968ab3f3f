"""Pydantic schemas for report definitions and the report endpoints."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from report_engine.catalog.enums import (
    CourseTypeFilter,
    DateConditions,
    Dialect,
    EnrollmentTypes,
    ReportType,
    SortDirection,
    SortSelector,
    TimeFrameOptions,
    VisibilityTypes,
)


class CamelModel(BaseModel):
    """Stored definitions use camelCase keys; attributes stay snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ===== SELECTION SCHEMAS =====


class SelectionItem(CamelModel):
    id: int
    name: Optional[str] = None
    descendants: bool = False  # branches only


class Visibility(CamelModel):
    type: Optional[VisibilityTypes] = None
    users: List[SelectionItem] = []
    groups: List[SelectionItem] = []
    branches: List[SelectionItem] = []


class SortingOptions(CamelModel):
    selector: SortSelector = SortSelector.DEFAULT
    selected_field: str = ""
    order_by: SortDirection = SortDirection.ASC


class PlanningOption(CamelModel):
    is_paused: bool = False
    recipients: List[str] = []
    every: int = 1
    time_frame: TimeFrameOptions = TimeFrameOptions.DAYS
    schedule_from: str = ""
    start_hour: str = "00:00"
    timezone: str = ""


class Planning(CamelModel):
    active: bool = False
    option: PlanningOption = Field(default_factory=PlanningOption)


class DateOption(CamelModel):
    """A date restriction; ``any`` disables it."""

    any: bool = True
    type: str = ""  # '', 'relative' or 'range'
    operator: str = ""
    days: int = 1
    from_: str = Field("", alias="from")
    to: str = ""


class LastEditBy(CamelModel):
    id_user: int = 0
    firstname: str = ""
    lastname: str = ""
    username: str = ""
    avatar: str = ""


# ===== ENTITY FILTER SCHEMAS =====


class UsersFilter(CamelModel):
    all: bool = True
    users: List[SelectionItem] = []
    groups: List[SelectionItem] = []
    branches: List[SelectionItem] = []
    hide_deactivated: bool = False
    show_only_learners: bool = False
    hide_expired_users: bool = False
    is_user_add_fields: bool = False
    # manager types of a "my team" report; users are limited to the caller's subordinates
    manager_types: List[int] = []


class CoursesFilter(CamelModel):
    all: bool = True
    courses: List[SelectionItem] = []
    categories: List[SelectionItem] = []
    course_type: CourseTypeFilter = CourseTypeFilter.ALL
    instructors: List[SelectionItem] = []


class SessionsFilter(CamelModel):
    all: bool = True
    sessions: List[SelectionItem] = []


class LearningPlansFilter(CamelModel):
    all: bool = True
    learning_plans: List[SelectionItem] = []


class SurveysFilter(CamelModel):
    all: bool = True
    surveys: List[SelectionItem] = []


class AssetsFilter(CamelModel):
    all: bool = True
    assets: List[SelectionItem] = []
    channels: List[SelectionItem] = []


class EnrollmentFilter(CamelModel):
    """Enrollment status flags; all on (or all off) means no status filter."""

    completed: bool = True
    in_progress: bool = True
    not_started: bool = True
    waiting_list: bool = True
    suspended: bool = True
    enrollments_to_confirm: bool = True
    subscribed: bool = True
    overbooking: bool = True
    enrollment_types: EnrollmentTypes = EnrollmentTypes.ACTIVE

    def status_flags(self) -> Dict[str, bool]:
        return {
            "completed": self.completed,
            "in_progress": self.in_progress,
            "not_started": self.not_started,
            "waiting_list": self.waiting_list,
            "suspended": self.suspended,
            "enrollments_to_confirm": self.enrollments_to_confirm,
            "subscribed": self.subscribed,
            "overbooking": self.overbooking,
        }


class SessionDates(CamelModel):
    conditions: DateConditions = DateConditions.ALL
    start_date: DateOption = Field(default_factory=DateOption)
    end_date: DateOption = Field(default_factory=DateOption)


class SessionAttendanceType(CamelModel):
    blended: bool = True
    flexible: bool = True
    full_online: bool = True
    full_onsite: bool = True


# ===== REPORT DEFINITION =====


class ReportDefinition(CamelModel):
    """A saved report: selected fields, filters, sort order and visibility."""

    id_report: str
    type: ReportType
    title: str = ""
    description: str = ""
    creation_date: str = ""
    last_edit: str = ""
    last_edit_by: LastEditBy = Field(default_factory=LastEditBy)
    author: int = 0
    platform: str = ""
    standard: bool = False
    timezone: str = ""
    visibility: Visibility = Field(default_factory=Visibility)
    fields: List[str] = []
    sorting_options: SortingOptions = Field(default_factory=SortingOptions)
    planning: Planning = Field(default_factory=Planning)
    conditions: DateConditions = DateConditions.ALL

    users: Optional[UsersFilter] = None
    courses: Optional[CoursesFilter] = None
    sessions: Optional[SessionsFilter] = None
    learning_plans: Optional[LearningPlansFilter] = None
    surveys: Optional[SurveysFilter] = None
    assets: Optional[AssetsFilter] = None

    enrollment_date: Optional[DateOption] = None
    completion_date: Optional[DateOption] = None
    survey_completion_date: Optional[DateOption] = None
    archiving_date: Optional[DateOption] = None
    course_expiration_date: Optional[DateOption] = None
    published_date: Optional[DateOption] = None

    enrollment: Optional[EnrollmentFilter] = None
    # dropdown user custom field id -> required option id
    user_additional_fields_filter: Dict[int, int] = {}
    session_dates: Optional[SessionDates] = None
    session_attendance_type: Optional[SessionAttendanceType] = None

    imported_from_legacy_id: Optional[str] = None
    deleted: bool = False
    login_required: bool = True


def with_sorting(definition: ReportDefinition, sorting: SortingOptions) -> ReportDefinition:
    """Copy of ``definition`` with new sorting options."""
    return definition.model_copy(update={"sorting_options": sorting.model_copy()}, deep=True)


# ===== API SCHEMAS =====


class CompileRequest(BaseModel):
    """Request schema for compiling a definition."""

    definition: ReportDefinition
    dialect: Optional[Dialect] = None  # settings default when omitted
    limit: int = 0
    is_preview: bool = False
    check_visibility: bool = True
    from_schedule: bool = False

    model_config = ConfigDict(extra="forbid")

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Limit cannot be negative")
        return v


class CompileResponse(BaseModel):
    sql: str
    dialect: Dialect
    columns: List[str]
    unmapped_fields: List[str] = []


class DefaultStructureRequest(BaseModel):
    type: ReportType
    title: str
    description: str = ""

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Report title cannot be empty")
        return v.strip()


class SortingRequest(BaseModel):
    definition: ReportDefinition
    sorting: SortingOptions


class CatalogFieldRead(BaseModel):
    field: str
    translation_key: str
    mandatory: bool
    is_additional_field: bool
    category: str
    feature: Optional[str] = None


class ReportTypeRead(BaseModel):
    """A compilable report type and its standard catalog."""

    type: ReportType
    dialects: List[Dialect]
    mandatory_fields: List[str]
    default_sort: str
    extra_field_entities: List[str]
    fields: List[CatalogFieldRead]
