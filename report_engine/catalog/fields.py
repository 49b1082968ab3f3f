"""
Selectable report fields and their translation keys.

Field ids are stable strings stored in saved report definitions. Labels are
never stored: each field maps to a translation key that the metadata service
translates into the caller's language at compile time.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union


class FieldId(str, Enum):
    """Every standard field id known to the compilers."""

    # User
    USER_ID = "user_id"
    USER_USERID = "user_userid"
    USER_FIRSTNAME = "user_firstname"
    USER_LASTNAME = "user_lastname"
    USER_FULLNAME = "user_fullname"
    USER_EMAIL = "user_email"
    USER_EMAIL_VALIDATION_STATUS = "user_email_validation_status"
    USER_LEVEL = "user_level"
    USER_DEACTIVATED = "user_deactivated"
    USER_EXPIRATION = "user_expiration"
    USER_SUSPEND_DATE = "user_suspend_date"
    USER_REGISTER_DATE = "user_register_date"
    USER_LAST_ACCESS_DATE = "user_last_access_date"
    USER_BRANCH_NAME = "user_branch_name"
    USER_BRANCH_PATH = "user_branch_path"
    USER_BRANCHES_CODES = "user_branches_codes"
    USER_DIRECT_MANAGER = "user_direct_manager"

    # Course
    COURSE_ID = "course_id"
    COURSE_UNIQUE_ID = "course_unique_id"
    COURSE_CODE = "course_code"
    COURSE_NAME = "course_name"
    COURSE_CATEGORY_CODE = "course_category_code"
    COURSE_CATEGORY_NAME = "course_category"
    COURSE_STATUS = "course_status"
    COURSE_CREDITS = "course_credits"
    COURSE_DURATION = "course_duration"
    COURSE_TYPE = "course_type"
    COURSE_DATE_BEGIN = "course_date_begin"
    COURSE_DATE_END = "course_date_end"
    COURSE_EXPIRED = "course_expired"
    COURSE_CREATION_DATE = "course_creation_date"
    COURSE_E_SIGNATURE = "course_e_signature"
    COURSE_E_SIGNATURE_HASH = "course_e_signature_hash"
    COURSE_LANGUAGE = "course_language"
    COURSE_SKILLS = "course_skills"

    # Enrollment
    COURSEUSER_LEVEL = "courseuser_level"
    COURSEUSER_DATE_INSCR = "courseuser_date_inscr"
    COURSEUSER_DATE_FIRST_ACCESS = "courseuser_date_first_access"
    COURSEUSER_DATE_LAST_ACCESS = "courseuser_date_last_access"
    COURSEUSER_DATE_COMPLETE = "courseuser_date_complete"
    COURSEUSER_STATUS = "courseuser_status"
    COURSEUSER_DATE_BEGIN_VALIDITY = "courseuser_date_begin_validity"
    COURSEUSER_DATE_EXPIRE_VALIDITY = "courseuser_date_expire_validity"
    COURSEUSER_SCORE_GIVEN = "courseuser_score_given"
    COURSEUSER_INITIAL_SCORE_GIVEN = "courseuser_initial_score_given"
    COURSEUSER_ASSIGNMENT_TYPE = "courseuser_assignment_type"
    COURSEUSER_EXPIRATION_DATE = "courseuser_expiration_date"
    COURSEUSER_DAYS_LEFT = "courseuser_days_left"
    ENROLLMENT_ARCHIVED = "enrollment_archived"
    ENROLLMENT_ARCHIVING_DATE = "enrollment_archiving_date"

    # Usage statistics
    STATS_USER_COURSE_COMPLETION_PERCENTAGE = "stats_user_course_completion_percentage"
    STATS_TOTAL_TIME_IN_COURSE = "stats_total_time_in_course"
    STATS_TOTAL_SESSIONS_IN_COURSE = "stats_total_sessions_in_course"
    STATS_NUMBER_OF_ACTIONS = "stats_number_of_actions"
    STATS_SESSION_TIME = "stats_session_time"
    STATS_USER_FLOW_YES_NO = "stats_user_flow_yes_no"
    STATS_USER_COURSE_FLOW_PERCENTAGE = "stats_user_course_flow_percentage"
    STATS_USER_COURSE_TIME_SPENT_BY_FLOW = "stats_user_course_time_spent_by_flow"
    STATS_USER_FLOW_MS_TEAMS_YES_NO = "stats_user_flow_ms_teams_yes_no"
    STATS_USER_COURSE_FLOW_MS_TEAMS_PERCENTAGE = "stats_user_course_flow_ms_teams_percentage"
    STATS_USER_COURSE_TIME_SPENT_BY_FLOW_MS_TEAMS = "stats_user_course_time_spent_by_flow_ms_teams"
    STATS_COURSE_ACCESS_FROM_MOBILE = "stats_course_access_from_mobile"
    STATS_PERCENTAGE_OF_COURSE_FROM_MOBILE = "stats_percentage_of_course_from_mobile"
    STATS_TIME_SPENT_FROM_MOBILE = "stats_time_spent_from_mobile"

    # Classroom session
    SESSION_NAME = "session_name"
    SESSION_CODE = "session_code"
    SESSION_END_DATE = "session_end_date"
    SESSION_EVALUATION_SCORE_BASE = "session_evaluation_score_base"
    SESSION_TIME_SESSION = "session_time_session"
    SESSION_START_DATE = "session_start_date"
    SESSION_UNIQUE_ID = "session_unique_id"
    SESSION_INSTRUCTOR_USERIDS = "session_instructor_userids"
    SESSION_INSTRUCTOR_FULLNAMES = "session_instructor_fullnames"
    SESSION_ATTENDANCE_TYPE = "session_attendance_type"
    SESSION_MINIMUM_ENROLLMENTS = "session_minimum_enrollments"
    SESSION_MAXIMUM_ENROLLMENTS = "session_maximum_enrollments"

    # Session enrollment
    ENROLLMENT_ATTENDANCE = "enrollment_attendance"
    ENROLLMENT_DATE = "enrollment_date"
    ENROLLMENT_ENROLLMENT_STATUS = "enrollment_enrollment_status"
    ENROLLMENT_EVALUATION_STATUS = "enrollment_evaluation_status"
    ENROLLMENT_INSTRUCTOR_FEEDBACK = "enrollment_instructor_feedback"
    ENROLLMENT_LEARNER_EVALUATION = "enrollment_learner_evaluation"
    ENROLLMENT_USER_COURSE_LEVEL = "enrollment_user_course_level"
    ENROLLMENT_USER_SESSION_STATUS = "enrollment_user_session_status"
    ENROLLMENT_USER_SESSION_SUBSCRIBE_DATE = "enrollment_user_session_subscribe_date"
    ENROLLMENT_USER_SESSION_COMPLETE_DATE = "enrollment_user_session_complete_date"

    # Survey
    GROUP_GROUP_OR_BRANCH_NAME = "group_group_or_branch_name"
    SURVEY_ID = "survey_id"
    SURVEY_TITLE = "survey_title"
    SURVEY_DESCRIPTION = "survey_description"
    SURVEY_TRACKING_TYPE = "survey_tracking_type"
    SURVEY_COMPLETION_ID = "survey_completion_id"
    SURVEY_COMPLETION_DATE = "survey_completion_date"
    QUESTION_ID = "question_id"
    QUESTION = "question"
    QUESTION_TYPE = "question_type"
    QUESTION_MANDATORY = "question_mandatory"
    ANSWER_USER = "answer_user"

    # Asset
    ASSET_NAME = "asset_name"
    CHANNELS = "channels"
    PUBLISHED_BY = "published_by"
    PUBLISHED_ON = "published_on"
    ANSWER_DISLIKES = "answer_dislikes"
    ANSWER_LIKES = "answer_likes"
    ANSWERS = "answers"
    ASSET_RATING = "asset_rating"
    AVERAGE_REACTION_TIME = "average_reaction_time"
    BEST_ANSWERS = "best_answers"
    GLOBAL_WATCH_RATE = "global_watch_rate"
    INVITED_PEOPLE = "invited_people"
    NOT_WATCHED = "not_watched"
    QUESTIONS = "questions"
    TOTAL_VIEWS = "total_views"
    WATCHED = "watched"

    # Learning plan
    LP_NAME = "lp_name"
    LP_CODE = "lp_code"
    LP_CREDITS = "lp_credits"
    LP_UUID = "lp_uuid"
    LP_LAST_EDIT = "lp_last_edit"
    LP_CREATION_DATE = "lp_creation_date"
    LP_DESCRIPTION = "lp_description"
    LP_ASSOCIATED_COURSES = "lp_associated_courses"
    LP_MANDATORY_ASSOCIATED_COURSES = "lp_mandatory_associated_courses"
    LP_STATUS = "lp_status"
    LP_LANGUAGE = "lp_language"
    STATS_PATH_COMPLETED_USERS = "stats_path_completed_users"
    STATS_PATH_COMPLETED_USERS_PERCENTAGE = "stats_path_completed_users_percentage"
    STATS_PATH_IN_PROGRESS_USERS = "stats_path_in_progress_users"
    STATS_PATH_IN_PROGRESS_USERS_PERCENTAGE = "stats_path_in_progress_users_percentage"
    STATS_PATH_NOT_STARTED_USERS = "stats_path_not_started_users"
    STATS_PATH_NOT_STARTED_USERS_PERCENTAGE = "stats_path_not_started_users_percentage"
    STATS_PATH_ENROLLED_USERS = "stats_path_enrolled_users"


class FieldTranslation(str, Enum):
    """Labels used inside computed columns (CASE branches)."""

    YES = "yes"
    NO = "no"
    USER_LEVEL_USER = "user_level_user"
    USER_LEVEL_POWERUSER = "user_level_poweruser"
    USER_LEVEL_GODADMIN = "user_level_godadmin"
    COURSE_STATUS_PREPARATION = "course_status_preparation"
    COURSE_STATUS_EFFECTIVE = "course_status_effective"
    COURSE_TYPE_ELEARNING = "course_type_elearning"
    COURSE_TYPE_CLASSROOM = "course_type_classroom"
    COURSE_TYPE_WEBINAR = "course_type_webinar"
    COURSEUSER_LEVEL_STUDENT = "courseuser_level_students"
    COURSEUSER_LEVEL_TUTOR = "courseuser_level_tutor"
    COURSEUSER_LEVEL_TEACHER = "courseuser_level_teacher"
    COURSEUSER_STATUS_WAITING_LIST = "courseuser_status_waiting_list"
    COURSEUSER_STATUS_CONFIRMED = "courseuser_status_confirmed"
    COURSEUSER_STATUS_ENROLLMENTS_TO_CONFIRM = "courseuser_status_enrollments_to_confirm"
    COURSEUSER_STATUS_SUBSCRIBED = "courseuser_status_subscribed"
    COURSEUSER_STATUS_IN_PROGRESS = "courseuser_status_in_progress"
    COURSEUSER_STATUS_COMPLETED = "courseuser_status_completed"
    COURSEUSER_STATUS_SUSPENDED = "courseuser_status_suspended"
    COURSEUSER_STATUS_OVERBOOKING = "courseuser_status_overbooking"
    COURSEUSER_STATUS_ENROLLED = "courseuser_status_enrolled"
    EVALUATION_STATUS_PASSED = "evaluation_status_passed"
    EVALUATION_STATUS_FAILED = "evaluation_status_failed"
    ASSIGNMENT_TYPE_MANDATORY = "assignment_type_mandatory"
    ASSIGNMENT_TYPE_REQUIRED = "assignment_type_required"
    ASSIGNMENT_TYPE_RECOMMENDED = "assignment_type_recommended"
    ASSIGNMENT_TYPE_OPTIONAL = "assignment_type_optional"
    SESSION_ATTENDANCE_TYPE_BLENDED = "session_attendance_type_blended"
    SESSION_ATTENDANCE_TYPE_FLEXIBLE = "session_attendance_type_flexible"
    SESSION_ATTENDANCE_TYPE_FULLONLINE = "session_attendance_type_fullOnline"
    SESSION_ATTENDANCE_TYPE_FULLONSITE = "session_attendance_type_fullOnsite"
    LOCAL_TRACKING = "local_tracking"
    SHARED_TRACKING = "shared_tracking"
    CHOICE = "choice"
    CHOICE_MULTIPLE = "choice_multiple"
    INLINE_CHOICE = "inline_choice"
    EXTENDED_TEXT = "extended_text"
    LIKERT_SCALE = "likert_scale"
    LP_UNDER_MAINTENANCE = "lp_under_maintenance"
    LP_PUBLISHED = "lp_published"


TRANSLATION_KEYS: Dict[Union[FieldId, FieldTranslation], str] = {
    FieldId.USER_ID: "User unique ID",
    FieldId.USER_USERID: "Username",
    FieldId.USER_FIRSTNAME: "First Name",
    FieldId.USER_LASTNAME: "Last Name",
    FieldId.USER_FULLNAME: "Fullname",
    FieldId.USER_EMAIL: "Email",
    FieldId.USER_EMAIL_VALIDATION_STATUS: "Email Validation Status",
    FieldId.USER_LEVEL: "User Level",
    FieldId.USER_DEACTIVATED: "Deactivated",
    FieldId.USER_EXPIRATION: "User expiration date",
    FieldId.USER_SUSPEND_DATE: "User Suspension Date",
    FieldId.USER_REGISTER_DATE: "User Creation Date",
    FieldId.USER_LAST_ACCESS_DATE: "User last access date",
    FieldId.USER_BRANCH_NAME: "Branch name",
    FieldId.USER_BRANCH_PATH: "Branch path",
    FieldId.USER_BRANCHES_CODES: "Branches Codes",
    FieldId.USER_DIRECT_MANAGER: "Direct Manager",
    FieldId.COURSE_ID: "Course Internal Id",
    FieldId.COURSE_UNIQUE_ID: "Course Unique ID",
    FieldId.COURSE_CODE: "_COURSE_CODE",
    FieldId.COURSE_NAME: "_COURSE_NAME",
    FieldId.COURSE_CATEGORY_CODE: "Course Category Code",
    FieldId.COURSE_CATEGORY_NAME: "Course Category",
    FieldId.COURSE_STATUS: "Course Status",
    FieldId.COURSE_CREDITS: "_CREDITS",
    FieldId.COURSE_DURATION: "Course duration",
    FieldId.COURSE_TYPE: "Course Type",
    FieldId.COURSE_DATE_BEGIN: "Course Start Date",
    FieldId.COURSE_DATE_END: "_COURSE_END",
    FieldId.COURSE_EXPIRED: "Course has expired",
    FieldId.COURSE_CREATION_DATE: "Course Creation Date",
    FieldId.COURSE_E_SIGNATURE: "E-Signature",
    FieldId.COURSE_E_SIGNATURE_HASH: "E-Signature Hash",
    FieldId.COURSE_LANGUAGE: "Language",
    FieldId.COURSE_SKILLS: "Skills in course",
    FieldId.COURSEUSER_LEVEL: "User Course Level",
    FieldId.COURSEUSER_DATE_INSCR: "Enrollment date",
    FieldId.COURSEUSER_DATE_FIRST_ACCESS: "Course First Access Date",
    FieldId.COURSEUSER_DATE_LAST_ACCESS: "Course Last Access Date",
    FieldId.COURSEUSER_DATE_COMPLETE: "Completion date",
    FieldId.COURSEUSER_STATUS: "Enrollment status",
    FieldId.COURSEUSER_DATE_BEGIN_VALIDITY: "Enrollment Start Date",
    FieldId.COURSEUSER_DATE_EXPIRE_VALIDITY: "Enrollment End Date",
    FieldId.COURSEUSER_SCORE_GIVEN: "Final score",
    FieldId.COURSEUSER_INITIAL_SCORE_GIVEN: "_COURSES_FILTER_SCORE_INIT",
    FieldId.COURSEUSER_ASSIGNMENT_TYPE: "Assignment Type",
    FieldId.COURSEUSER_EXPIRATION_DATE: "Enrollment Expiration Date",
    FieldId.COURSEUSER_DAYS_LEFT: "Days Left",
    FieldId.ENROLLMENT_ARCHIVED: "Archived Enrollment (Yes / No)",
    FieldId.ENROLLMENT_ARCHIVING_DATE: "Archive Date",
    FieldId.STATS_USER_COURSE_COMPLETION_PERCENTAGE: "Course Progression (%)",
    FieldId.STATS_TOTAL_TIME_IN_COURSE: "Training Material Time (sec)",
    FieldId.STATS_TOTAL_SESSIONS_IN_COURSE: "_TH_USER_NUMBER_SESSION",
    FieldId.STATS_NUMBER_OF_ACTIONS: "Number of Actions",
    FieldId.STATS_SESSION_TIME: "Session Time (min)",
    FieldId.STATS_USER_FLOW_YES_NO: "Training Material Access from Flow",
    FieldId.STATS_USER_COURSE_FLOW_PERCENTAGE: "% of Training Material from Flow",
    FieldId.STATS_USER_COURSE_TIME_SPENT_BY_FLOW: "Time in Training Material from Flow",
    FieldId.STATS_USER_FLOW_MS_TEAMS_YES_NO: "Training Material Access From Flow for Microsoft Teams",
    FieldId.STATS_USER_COURSE_FLOW_MS_TEAMS_PERCENTAGE: "% Of Training Material From Flow for Microsoft Teams",
    FieldId.STATS_USER_COURSE_TIME_SPENT_BY_FLOW_MS_TEAMS: "Time In Training Material From Flow for Microsoft Teams",
    FieldId.STATS_COURSE_ACCESS_FROM_MOBILE: "Training Material Access from Mobile App",
    FieldId.STATS_PERCENTAGE_OF_COURSE_FROM_MOBILE: "% of Training Material from Mobile App",
    FieldId.STATS_TIME_SPENT_FROM_MOBILE: "Time in Training Material from Mobile App",
    FieldId.SESSION_NAME: "Session name",
    FieldId.SESSION_CODE: "Session code",
    FieldId.SESSION_END_DATE: "Session End Date",
    FieldId.SESSION_EVALUATION_SCORE_BASE: "Evaluation score base",
    FieldId.SESSION_TIME_SESSION: "Time in Session",
    FieldId.SESSION_START_DATE: "Session date begin",
    FieldId.SESSION_UNIQUE_ID: "Session Unique ID",
    FieldId.SESSION_INSTRUCTOR_USERIDS: "Session Instructor Username",
    FieldId.SESSION_INSTRUCTOR_FULLNAMES: "Session Instructor Full Name",
    FieldId.SESSION_ATTENDANCE_TYPE: "Session Attendance Type",
    FieldId.SESSION_MINIMUM_ENROLLMENTS: "Session Minimum Enrollments",
    FieldId.SESSION_MAXIMUM_ENROLLMENTS: "Session Maximum Enrollments",
    FieldId.ENROLLMENT_ATTENDANCE: "_ATTENDANCE",
    FieldId.ENROLLMENT_DATE: "Enrollment date",
    FieldId.ENROLLMENT_ENROLLMENT_STATUS: "Course Enrollment Status",
    FieldId.ENROLLMENT_EVALUATION_STATUS: "Evaluation Status",
    FieldId.ENROLLMENT_INSTRUCTOR_FEEDBACK: "Instructor Feedback",
    FieldId.ENROLLMENT_LEARNER_EVALUATION: "Learner Evaluation",
    FieldId.ENROLLMENT_USER_COURSE_LEVEL: "User Course Level",
    FieldId.ENROLLMENT_USER_SESSION_STATUS: "Session Enrollment Status",
    FieldId.ENROLLMENT_USER_SESSION_SUBSCRIBE_DATE: "Session Enrollment Date",
    FieldId.ENROLLMENT_USER_SESSION_COMPLETE_DATE: "Session Completion Date",
    FieldId.GROUP_GROUP_OR_BRANCH_NAME: "Group/Branch Name",
    FieldId.SURVEY_ID: "Survey ID",
    FieldId.SURVEY_TITLE: "Survey Title",
    FieldId.SURVEY_DESCRIPTION: "Survey Description",
    FieldId.SURVEY_TRACKING_TYPE: "Survey Tracking Type",
    FieldId.SURVEY_COMPLETION_ID: "Survey Completion ID",
    FieldId.SURVEY_COMPLETION_DATE: "Survey Completion Date",
    FieldId.QUESTION_ID: "Question ID",
    FieldId.QUESTION: "Question",
    FieldId.QUESTION_TYPE: "Question Type",
    FieldId.QUESTION_MANDATORY: "Mandatory Question (Yes / No)",
    FieldId.ANSWER_USER: "User Answer to Question (Text)",
    FieldId.ASSET_NAME: "Asset Name",
    FieldId.CHANNELS: "Channels",
    FieldId.PUBLISHED_BY: "Published by",
    FieldId.PUBLISHED_ON: "Published on",
    FieldId.ANSWER_DISLIKES: "Answers dislikes",
    FieldId.ANSWER_LIKES: "Answers likes",
    FieldId.ANSWERS: "Answers",
    FieldId.ASSET_RATING: "Asset rating",
    FieldId.AVERAGE_REACTION_TIME: "Average reaction time",
    FieldId.BEST_ANSWERS: "Best answers",
    FieldId.GLOBAL_WATCH_RATE: "Global watch rate",
    FieldId.INVITED_PEOPLE: "Total invited people",
    FieldId.NOT_WATCHED: "Not watched",
    FieldId.QUESTIONS: "Questions",
    FieldId.TOTAL_VIEWS: "Total views",
    FieldId.WATCHED: "Watched",
    FieldId.LP_NAME: "Learning Plan Name",
    FieldId.LP_CODE: "Learning Plan Code",
    FieldId.LP_CREDITS: "_CREDITS",
    FieldId.LP_UUID: "Learning Plan UUID",
    FieldId.LP_LAST_EDIT: "Learning Plan Last Edit",
    FieldId.LP_CREATION_DATE: "Learning Plan Creation Date",
    FieldId.LP_DESCRIPTION: "Learning Plan Description",
    FieldId.LP_ASSOCIATED_COURSES: "Number of Associated Courses",
    FieldId.LP_MANDATORY_ASSOCIATED_COURSES: "Number of Mandatory Associated Courses",
    FieldId.LP_STATUS: "Learning Plan Status",
    FieldId.LP_LANGUAGE: "Learning Plan Language",
    FieldId.STATS_PATH_COMPLETED_USERS: "Completed User Status",
    FieldId.STATS_PATH_COMPLETED_USERS_PERCENTAGE: "Completed User Status Percentage",
    FieldId.STATS_PATH_IN_PROGRESS_USERS: "In Progress User Status",
    FieldId.STATS_PATH_IN_PROGRESS_USERS_PERCENTAGE: "In Progress User Status Percentage",
    FieldId.STATS_PATH_NOT_STARTED_USERS: "Not Started User Status",
    FieldId.STATS_PATH_NOT_STARTED_USERS_PERCENTAGE: "Not Started User Status Percentage",
    FieldId.STATS_PATH_ENROLLED_USERS: "Users Enrolled In Learning Plan",
    FieldTranslation.YES: "_YES",
    FieldTranslation.NO: "_NO",
    FieldTranslation.USER_LEVEL_USER: "_DIRECTORY_/framework/level/user",
    FieldTranslation.USER_LEVEL_POWERUSER: "_DIRECTORY_/framework/level/admin",
    FieldTranslation.USER_LEVEL_GODADMIN: "_DIRECTORY_/framework/level/godadmin",
    FieldTranslation.COURSE_STATUS_PREPARATION: "_CST_PREPARATION",
    FieldTranslation.COURSE_STATUS_EFFECTIVE: "_CST_CONFIRMED",
    FieldTranslation.COURSE_TYPE_ELEARNING: "E-Learning",
    FieldTranslation.COURSE_TYPE_CLASSROOM: "Classroom",
    FieldTranslation.COURSE_TYPE_WEBINAR: "Webinar",
    FieldTranslation.COURSEUSER_LEVEL_STUDENT: "_LEVEL_3",
    FieldTranslation.COURSEUSER_LEVEL_TUTOR: "_LEVEL_4",
    FieldTranslation.COURSEUSER_LEVEL_TEACHER: "_LEVEL_6",
    FieldTranslation.COURSEUSER_STATUS_WAITING_LIST: "_WAITING_USERS",
    FieldTranslation.COURSEUSER_STATUS_CONFIRMED: "_USER_STATUS_CONFIRMED",
    FieldTranslation.COURSEUSER_STATUS_ENROLLMENTS_TO_CONFIRM: "Enrollments to confirm",
    FieldTranslation.COURSEUSER_STATUS_SUBSCRIBED: "Enrolled",
    FieldTranslation.COURSEUSER_STATUS_IN_PROGRESS: "_USER_STATUS_BEGIN",
    FieldTranslation.COURSEUSER_STATUS_COMPLETED: "_USER_STATUS_END",
    FieldTranslation.COURSEUSER_STATUS_SUSPENDED: "_USER_STATUS_SUSPEND",
    FieldTranslation.COURSEUSER_STATUS_OVERBOOKING: "_USER_STATUS_OVERBOOKING",
    FieldTranslation.COURSEUSER_STATUS_ENROLLED: "_USER_STATUS_SUBS",
    FieldTranslation.EVALUATION_STATUS_PASSED: "Passed",
    FieldTranslation.EVALUATION_STATUS_FAILED: "Failed",
    FieldTranslation.ASSIGNMENT_TYPE_MANDATORY: "Mandatory",
    FieldTranslation.ASSIGNMENT_TYPE_REQUIRED: "Required",
    FieldTranslation.ASSIGNMENT_TYPE_RECOMMENDED: "Recommended",
    FieldTranslation.ASSIGNMENT_TYPE_OPTIONAL: "Optional",
    FieldTranslation.SESSION_ATTENDANCE_TYPE_BLENDED: "Blended",
    FieldTranslation.SESSION_ATTENDANCE_TYPE_FLEXIBLE: "Flexible",
    FieldTranslation.SESSION_ATTENDANCE_TYPE_FULLONLINE: "Full Online",
    FieldTranslation.SESSION_ATTENDANCE_TYPE_FULLONSITE: "Full Onsite",
    FieldTranslation.LOCAL_TRACKING: "Local tracking",
    FieldTranslation.SHARED_TRACKING: "Shared tracking",
    FieldTranslation.CHOICE: "Single Choice",
    FieldTranslation.CHOICE_MULTIPLE: "Multiple Choice",
    FieldTranslation.INLINE_CHOICE: "Inline choice",
    FieldTranslation.EXTENDED_TEXT: "_QUEST_EXTENDED_TEXT",
    FieldTranslation.LIKERT_SCALE: "Likert scale",
    FieldTranslation.LP_UNDER_MAINTENANCE: "Under Maintenance",
    FieldTranslation.LP_PUBLISHED: "Published",
}


class ExtraFieldEntity(str, Enum):
    """Entity kinds that can carry admin-defined custom fields."""

    USER = "user"
    COURSE = "course"
    COURSEUSER = "courseuser"
    ILT = "ilt"
    LP = "lp"


EXTRA_FIELD_PATTERN = re.compile(r"^(user|course|courseuser|ilt|lp)_extrafield_(\d+)$")


@dataclass(frozen=True)
class ExtraFieldRef:
    """A parsed ``<entity>_extrafield_<id>`` selection."""

    entity: ExtraFieldEntity
    field_id: int

    @property
    def key(self) -> str:
        return f"{self.entity.value}_extrafield_{self.field_id}"


def parse_extra_field(field: str) -> Optional[ExtraFieldRef]:
    """Return the extra-field reference encoded in ``field``, or None for standard fields."""
    match = EXTRA_FIELD_PATTERN.match(field)
    if not match:
        return None
    return ExtraFieldRef(entity=ExtraFieldEntity(match.group(1)), field_id=int(match.group(2)))


def extra_field_key(entity: ExtraFieldEntity, field_id: int) -> str:
    return f"{entity.value}_extrafield_{field_id}"


def translation_key(field: Union[FieldId, FieldTranslation]) -> str:
    """Translation key for a field or label; falls back to the raw value."""
    return TRANSLATION_KEYS.get(field, field.value)
