"""Per-report-type field catalogs."""

from typing import Dict, List, Optional

from report_engine.catalog.enums import ReportType
from report_engine.catalog.fields import ExtraFieldEntity, FieldId, translation_key


class FieldCatalogEntry:
    """A selectable output field of a report type."""

    def __init__(
        self,
        field: str,
        translation_key: str,
        mandatory: bool = False,
        is_additional_field: bool = False,
        category: str = "General",
        feature: Optional[str] = None,
    ):
        self.field = field
        self.translation_key = translation_key
        self.mandatory = mandatory
        self.is_additional_field = is_additional_field
        self.category = category
        self.feature = feature  # plugin or toggle that must be on

    def to_dict(self) -> Dict[str, object]:
        return {
            "field": self.field,
            "translation_key": self.translation_key,
            "mandatory": self.mandatory,
            "is_additional_field": self.is_additional_field,
            "category": self.category,
            "feature": self.feature,
        }


class ReportCatalog:
    """Fields, mandatory subset, default sort and extra-field entities of one report type."""

    def __init__(
        self,
        report_type: ReportType,
        categories: Dict[str, List[FieldId]],
        mandatory: List[FieldId],
        default_sort: FieldId,
        extra_field_entities: List[ExtraFieldEntity],
        gates: Optional[Dict[FieldId, str]] = None,
    ):
        self.report_type = report_type
        self.mandatory = list(mandatory)
        self.default_sort = default_sort
        self.extra_field_entities = list(extra_field_entities)
        self.gates: Dict[str, str] = {field.value: feature for field, feature in (gates or {}).items()}
        self.entries: Dict[str, FieldCatalogEntry] = {}
        for category, fields in categories.items():
            for field in fields:
                self.entries[field.value] = FieldCatalogEntry(
                    field=field.value,
                    translation_key=translation_key(field),
                    mandatory=field in self.mandatory,
                    category=category,
                    feature=self.gates.get(field.value),
                )

    @property
    def mandatory_fields(self) -> List[str]:
        return [field.value for field in self.mandatory]

    def has_field(self, field: str) -> bool:
        return field in self.entries

    def get_entries(self, category: Optional[str] = None) -> List[FieldCatalogEntry]:
        """Catalog entries, optionally restricted to one category."""
        return [
            entry for entry in self.entries.values()
            if category is None or entry.category == category
        ]

    def with_mandatory(self, fields: List[str]) -> List[str]:
        """Mandatory fields first, then ``fields`` without duplicates."""
        result = self.mandatory_fields
        for field in fields:
            if field not in result:
                result.append(field)
        return result


# Catalog Registry
REPORT_CATALOGS: Dict[ReportType, ReportCatalog] = {}


def register_catalog(catalog: ReportCatalog):
    """Register a report catalog."""
    REPORT_CATALOGS[catalog.report_type] = catalog


def get_catalog(report_type: ReportType) -> ReportCatalog:
    return REPORT_CATALOGS[report_type]


USER_FIELDS = [
    FieldId.USER_ID,
    FieldId.USER_USERID,
    FieldId.USER_FIRSTNAME,
    FieldId.USER_LASTNAME,
    FieldId.USER_FULLNAME,
    FieldId.USER_EMAIL,
    FieldId.USER_EMAIL_VALIDATION_STATUS,
    FieldId.USER_LEVEL,
    FieldId.USER_DEACTIVATED,
    FieldId.USER_EXPIRATION,
    FieldId.USER_SUSPEND_DATE,
    FieldId.USER_REGISTER_DATE,
    FieldId.USER_LAST_ACCESS_DATE,
    FieldId.USER_BRANCH_NAME,
    FieldId.USER_BRANCH_PATH,
    FieldId.USER_BRANCHES_CODES,
    FieldId.USER_DIRECT_MANAGER,
]

COURSE_FIELDS = [
    FieldId.COURSE_ID,
    FieldId.COURSE_UNIQUE_ID,
    FieldId.COURSE_CODE,
    FieldId.COURSE_NAME,
    FieldId.COURSE_CATEGORY_CODE,
    FieldId.COURSE_CATEGORY_NAME,
    FieldId.COURSE_STATUS,
    FieldId.COURSE_CREDITS,
    FieldId.COURSE_DURATION,
    FieldId.COURSE_TYPE,
    FieldId.COURSE_DATE_BEGIN,
    FieldId.COURSE_DATE_END,
    FieldId.COURSE_EXPIRED,
    FieldId.COURSE_CREATION_DATE,
    FieldId.COURSE_E_SIGNATURE,
    FieldId.COURSE_LANGUAGE,
    FieldId.COURSE_SKILLS,
]

ENROLLMENT_FIELDS = [
    FieldId.COURSEUSER_LEVEL,
    FieldId.COURSEUSER_DATE_INSCR,
    FieldId.COURSEUSER_DATE_FIRST_ACCESS,
    FieldId.COURSEUSER_DATE_LAST_ACCESS,
    FieldId.COURSEUSER_DATE_COMPLETE,
    FieldId.COURSEUSER_STATUS,
    FieldId.COURSEUSER_DATE_BEGIN_VALIDITY,
    FieldId.COURSEUSER_DATE_EXPIRE_VALIDITY,
    FieldId.COURSEUSER_SCORE_GIVEN,
    FieldId.COURSEUSER_INITIAL_SCORE_GIVEN,
    FieldId.COURSE_E_SIGNATURE_HASH,
    FieldId.COURSEUSER_ASSIGNMENT_TYPE,
    FieldId.ENROLLMENT_ARCHIVING_DATE,
    FieldId.ENROLLMENT_ARCHIVED,
]

USAGE_STATISTICS_FIELDS = [
    FieldId.STATS_USER_COURSE_COMPLETION_PERCENTAGE,
    FieldId.STATS_TOTAL_TIME_IN_COURSE,
    FieldId.STATS_TOTAL_SESSIONS_IN_COURSE,
    FieldId.STATS_NUMBER_OF_ACTIONS,
    FieldId.STATS_SESSION_TIME,
    FieldId.STATS_USER_FLOW_YES_NO,
    FieldId.STATS_USER_COURSE_FLOW_PERCENTAGE,
    FieldId.STATS_USER_COURSE_TIME_SPENT_BY_FLOW,
    FieldId.STATS_USER_FLOW_MS_TEAMS_YES_NO,
    FieldId.STATS_USER_COURSE_FLOW_MS_TEAMS_PERCENTAGE,
    FieldId.STATS_USER_COURSE_TIME_SPENT_BY_FLOW_MS_TEAMS,
    FieldId.STATS_COURSE_ACCESS_FROM_MOBILE,
    FieldId.STATS_PERCENTAGE_OF_COURSE_FROM_MOBILE,
    FieldId.STATS_TIME_SPENT_FROM_MOBILE,
]

SESSION_FIELDS = [
    FieldId.SESSION_NAME,
    FieldId.SESSION_CODE,
    FieldId.SESSION_UNIQUE_ID,
    FieldId.SESSION_START_DATE,
    FieldId.SESSION_END_DATE,
    FieldId.SESSION_EVALUATION_SCORE_BASE,
    FieldId.SESSION_TIME_SESSION,
    FieldId.SESSION_INSTRUCTOR_USERIDS,
    FieldId.SESSION_INSTRUCTOR_FULLNAMES,
    FieldId.SESSION_ATTENDANCE_TYPE,
    FieldId.SESSION_MINIMUM_ENROLLMENTS,
    FieldId.SESSION_MAXIMUM_ENROLLMENTS,
]

SESSION_ENROLLMENT_FIELDS = [
    FieldId.ENROLLMENT_USER_COURSE_LEVEL,
    FieldId.ENROLLMENT_DATE,
    FieldId.ENROLLMENT_ENROLLMENT_STATUS,
    FieldId.COURSEUSER_DATE_COMPLETE,
    FieldId.ENROLLMENT_USER_SESSION_STATUS,
    FieldId.ENROLLMENT_USER_SESSION_SUBSCRIBE_DATE,
    FieldId.ENROLLMENT_USER_SESSION_COMPLETE_DATE,
    FieldId.ENROLLMENT_EVALUATION_STATUS,
    FieldId.ENROLLMENT_LEARNER_EVALUATION,
    FieldId.ENROLLMENT_INSTRUCTOR_FEEDBACK,
    FieldId.ENROLLMENT_ATTENDANCE,
    FieldId.COURSE_E_SIGNATURE_HASH,
    FieldId.ENROLLMENT_ARCHIVING_DATE,
    FieldId.ENROLLMENT_ARCHIVED,
]

ARCHIVE_GATES = {
    FieldId.ENROLLMENT_ARCHIVING_DATE: "toggleMultipleEnrollmentCompletions",
    FieldId.ENROLLMENT_ARCHIVED: "toggleMultipleEnrollmentCompletions",
}

ESIGNATURE_GATES = {
    FieldId.COURSE_E_SIGNATURE: "esignature",
    FieldId.COURSE_E_SIGNATURE_HASH: "esignature",
}


register_catalog(ReportCatalog(
    report_type=ReportType.USERS_COURSES,
    categories={
        "user": USER_FIELDS,
        "course": COURSE_FIELDS,
        "enrollment": ENROLLMENT_FIELDS,
        "usageStatistics": USAGE_STATISTICS_FIELDS,
    },
    mandatory=[FieldId.USER_USERID, FieldId.COURSE_NAME],
    default_sort=FieldId.USER_USERID,
    extra_field_entities=[ExtraFieldEntity.USER, ExtraFieldEntity.COURSE, ExtraFieldEntity.COURSEUSER],
    gates={
        **ARCHIVE_GATES,
        **ESIGNATURE_GATES,
        FieldId.COURSEUSER_ASSIGNMENT_TYPE: "coursesAssignmentType",
        FieldId.STATS_USER_FLOW_YES_NO: "flow",
        FieldId.STATS_USER_COURSE_FLOW_PERCENTAGE: "flow",
        FieldId.STATS_USER_COURSE_TIME_SPENT_BY_FLOW: "flow",
        FieldId.STATS_USER_FLOW_MS_TEAMS_YES_NO: "flowMsTeams",
        FieldId.STATS_USER_COURSE_FLOW_MS_TEAMS_PERCENTAGE: "flowMsTeams",
        FieldId.STATS_USER_COURSE_TIME_SPENT_BY_FLOW_MS_TEAMS: "flowMsTeams",
    },
))

register_catalog(ReportCatalog(
    report_type=ReportType.USERS_CLASSROOM_SESSIONS,
    categories={
        "user": USER_FIELDS,
        "course": COURSE_FIELDS,
        "session": SESSION_FIELDS,
        "enrollment": SESSION_ENROLLMENT_FIELDS,
    },
    mandatory=[FieldId.USER_USERID, FieldId.COURSE_NAME, FieldId.SESSION_NAME],
    default_sort=FieldId.USER_USERID,
    extra_field_entities=[ExtraFieldEntity.USER, ExtraFieldEntity.COURSE, ExtraFieldEntity.ILT],
    gates={**ARCHIVE_GATES, **ESIGNATURE_GATES},
))

register_catalog(ReportCatalog(
    report_type=ReportType.USERS_ENROLLMENT_TIME,
    categories={
        "user": USER_FIELDS,
        "course": COURSE_FIELDS,
        "enrollment": [
            FieldId.COURSEUSER_LEVEL,
            FieldId.COURSEUSER_DATE_INSCR,
            FieldId.COURSEUSER_STATUS,
            FieldId.COURSEUSER_DATE_BEGIN_VALIDITY,
            FieldId.COURSEUSER_EXPIRATION_DATE,
            FieldId.COURSEUSER_DAYS_LEFT,
        ],
    },
    mandatory=[FieldId.USER_USERID, FieldId.COURSE_NAME],
    default_sort=FieldId.USER_USERID,
    extra_field_entities=[ExtraFieldEntity.USER, ExtraFieldEntity.COURSE, ExtraFieldEntity.COURSEUSER],
    gates=dict(ESIGNATURE_GATES),
))

register_catalog(ReportCatalog(
    report_type=ReportType.SURVEYS_INDIVIDUAL_ANSWERS,
    categories={
        "user": [
            FieldId.USER_USERID,
            FieldId.USER_FIRSTNAME,
            FieldId.USER_LASTNAME,
            FieldId.USER_FULLNAME,
            FieldId.USER_EMAIL,
            FieldId.GROUP_GROUP_OR_BRANCH_NAME,
        ],
        "course": [
            FieldId.COURSE_ID,
            FieldId.COURSE_CODE,
            FieldId.COURSE_NAME,
            FieldId.COURSE_TYPE,
        ],
        "survey": [
            FieldId.SURVEY_ID,
            FieldId.SURVEY_TITLE,
            FieldId.SURVEY_DESCRIPTION,
            FieldId.SURVEY_TRACKING_TYPE,
            FieldId.SURVEY_COMPLETION_ID,
            FieldId.SURVEY_COMPLETION_DATE,
        ],
        "question": [
            FieldId.QUESTION_ID,
            FieldId.QUESTION,
            FieldId.QUESTION_TYPE,
            FieldId.QUESTION_MANDATORY,
            FieldId.ANSWER_USER,
        ],
    },
    mandatory=[FieldId.SURVEY_TITLE, FieldId.QUESTION, FieldId.ANSWER_USER],
    default_sort=FieldId.SURVEY_TITLE,
    extra_field_entities=[ExtraFieldEntity.COURSE],
))

register_catalog(ReportCatalog(
    report_type=ReportType.ASSETS_STATISTICS,
    categories={
        "asset": [
            FieldId.ASSET_NAME,
            FieldId.CHANNELS,
            FieldId.PUBLISHED_BY,
            FieldId.PUBLISHED_ON,
        ],
        "statistics": [
            FieldId.ANSWER_DISLIKES,
            FieldId.ANSWER_LIKES,
            FieldId.ANSWERS,
            FieldId.ASSET_RATING,
            FieldId.AVERAGE_REACTION_TIME,
            FieldId.BEST_ANSWERS,
            FieldId.GLOBAL_WATCH_RATE,
            FieldId.INVITED_PEOPLE,
            FieldId.NOT_WATCHED,
            FieldId.QUESTIONS,
            FieldId.TOTAL_VIEWS,
            FieldId.WATCHED,
        ],
    },
    mandatory=[FieldId.ASSET_NAME],
    default_sort=FieldId.ASSET_NAME,
    extra_field_entities=[],
))

register_catalog(ReportCatalog(
    report_type=ReportType.LP_USERS_STATISTICS,
    categories={
        "learningPlan": [
            FieldId.LP_NAME,
            FieldId.LP_CODE,
            FieldId.LP_CREDITS,
            FieldId.LP_UUID,
            FieldId.LP_LAST_EDIT,
            FieldId.LP_CREATION_DATE,
            FieldId.LP_DESCRIPTION,
            FieldId.LP_ASSOCIATED_COURSES,
            FieldId.LP_MANDATORY_ASSOCIATED_COURSES,
            FieldId.LP_STATUS,
            FieldId.LP_LANGUAGE,
        ],
        "statistics": [
            FieldId.STATS_PATH_ENROLLED_USERS,
            FieldId.STATS_PATH_COMPLETED_USERS,
            FieldId.STATS_PATH_COMPLETED_USERS_PERCENTAGE,
            FieldId.STATS_PATH_IN_PROGRESS_USERS,
            FieldId.STATS_PATH_IN_PROGRESS_USERS_PERCENTAGE,
            FieldId.STATS_PATH_NOT_STARTED_USERS,
            FieldId.STATS_PATH_NOT_STARTED_USERS_PERCENTAGE,
        ],
    },
    mandatory=[FieldId.LP_NAME],
    default_sort=FieldId.LP_NAME,
    extra_field_entities=[ExtraFieldEntity.LP],
    gates={
        field: "toggleNewLearningPlanManagementAndReportEnhancement"
        for field in (
            FieldId.LP_UUID,
            FieldId.LP_LAST_EDIT,
            FieldId.LP_CREATION_DATE,
            FieldId.LP_DESCRIPTION,
            FieldId.LP_STATUS,
            FieldId.LP_LANGUAGE,
            FieldId.LP_ASSOCIATED_COURSES,
            FieldId.LP_MANDATORY_ASSOCIATED_COURSES,
        )
    },
))
