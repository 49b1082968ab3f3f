"""Platform enumerations shared by the compilers and the legacy importer."""

from enum import Enum, IntEnum


class ReportType(str, Enum):
    """Report types the engine knows how to compile."""

    USERS_COURSES = "Users - Courses"
    USERS_CLASSROOM_SESSIONS = "Users - Classroom Sessions"
    SURVEYS_INDIVIDUAL_ANSWERS = "Surveys - Individual Answers"
    ASSETS_STATISTICS = "Assets - Statistics"
    LP_USERS_STATISTICS = "Learning plans - Users Statistics"
    USERS_ENROLLMENT_TIME = "Users - Course Enrollment Time"


class Dialect(str, Enum):
    """Target query engines."""

    ATHENA = "athena"
    SNOWFLAKE = "snowflake"


class UserLevel(str, Enum):
    """Permission level of the caller."""

    USER = "user"
    POWER_USER = "power_user"
    GOD_ADMIN = "godadmin"


class EnrollmentStatuses(IntEnum):
    WAITING_LIST = -2
    CONFIRMED = -1
    SUBSCRIBED = 0
    IN_PROGRESS = 1
    COMPLETED = 2
    SUSPEND = 3
    OVERBOOKING = 4


class UserLevelsGroups(str, Enum):
    USER = "/framework/level/user"
    POWER_USER = "/framework/level/admin"
    GOD_ADMIN = "/framework/level/godadmin"


class CourseuserLevels(IntEnum):
    STUDENT = 3
    TUTOR = 4
    TEACHER = 6


class CourseTypes(str, Enum):
    ELEARNING = "elearning"
    CLASSROOM = "classroom"
    WEBINAR = "webinar"


class CourseTypeFilter(IntEnum):
    ALL = 0
    E_LEARNING = 1
    ILT = 2


class AdditionalFieldsTypes(str, Enum):
    """Custom field kinds as reported by the metadata service."""

    CODICE_FISCALE = "codicefiscale"
    COUNTRY = "country"
    DATE = "date"
    DROPDOWN = "dropdown"
    FREE_TEXT = "freetext"
    GMAIL = "gmail"
    ICQ = "icq"
    MSN = "msn"
    SKYPE = "skype"
    TEXTFIELD = "textfield"
    TEXT = "text"
    TEXTAREA = "textarea"
    UPLOAD = "upload"
    YAHOO = "yahoo"
    YES_NO = "yesno"


TEXT_LIKE_FIELD_TYPES = frozenset(
    {
        AdditionalFieldsTypes.CODICE_FISCALE.value,
        AdditionalFieldsTypes.FREE_TEXT.value,
        AdditionalFieldsTypes.GMAIL.value,
        AdditionalFieldsTypes.ICQ.value,
        AdditionalFieldsTypes.MSN.value,
        AdditionalFieldsTypes.SKYPE.value,
        AdditionalFieldsTypes.TEXTFIELD.value,
        AdditionalFieldsTypes.TEXT.value,
        AdditionalFieldsTypes.TEXTAREA.value,
        AdditionalFieldsTypes.YAHOO.value,
        AdditionalFieldsTypes.UPLOAD.value,
    }
)


class LOTypes(str, Enum):
    POLL = "poll"


class LOQuestTypes(str, Enum):
    TITLE = "title"
    BREAK_PAGE = "break_page"
    CHOICE = "choice"
    CHOICE_MULTIPLE = "choice_multiple"
    INLINE_CHOICE = "inline_choice"
    EXTENDED_TEXT = "extended_text"
    LIKERT_SCALE = "likert_scale"


class AssignmentTypes(IntEnum):
    MANDATORY = 1
    REQUIRED = 2
    RECOMMENDED = 3
    OPTIONAL = 4


class VisibilityTypes(IntEnum):
    ALL_GODADMINS = 1
    ALL_GODADMINS_AND_PU = 2
    ALL_GODADMINS_AND_SELECTED_PU = 3


class EnrollmentTypes(IntEnum):
    ACTIVE = 1
    ARCHIVED = 2
    ACTIVE_AND_ARCHIVED = 3


class TimeFrameOptions(str, Enum):
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"


class DateConditions(str, Enum):
    """How several date filters combine."""

    ALL = "allConditions"
    AT_LEAST_ONE = "atLeastOneCondition"


class DateOperator(str, Enum):
    IS_AFTER = "isAfter"
    IS_BEFORE = "isBefore"
    IS_EQUAL = "isEqual"
    EXPIRING_IN = "expiringIn"
    RANGE = "range"


class SortSelector(str, Enum):
    DEFAULT = "default"
    CUSTOM = "custom"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ExportLimit(IntEnum):
    """Default row caps per export kind."""

    CSV = 2000000
    XLSX = 1000000
    PREVIEW = 100


class AttendanceTypes(str, Enum):
    BLENDED = "blended"
    FULL_ONSITE = "onsite"
    FULL_ONLINE = "online"
    FLEXIBLE = "flexible"


class SessionEvaluationStatus(IntEnum):
    PASSED = 1
    FAILED = -1
