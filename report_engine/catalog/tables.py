"""Physical warehouse tables and the aliases used for them in compiled queries."""

from enum import Enum


class Tables(str, Enum):
    """Warehouse table names referenced by the report compilers."""

    CORE_COUNTRY = "core_country"
    CORE_GROUP = "core_group"
    CORE_GROUP_MEMBERS = "core_group_members"
    CORE_LANG_LANGUAGE = "core_lang_language"
    CORE_ORG_CHART = "core_org_chart"
    CORE_ORG_CHART_TREE = "core_org_chart_tree"
    CORE_USER = "core_user"
    CORE_USER_PU = "core_user_pu"
    CORE_USER_BRANCHES = "core_user_branches"
    CORE_USER_BRANCHES_NAMES = "core_user_branches_names"
    CORE_USER_FIELD_DROPDOWN_TRANSLATIONS = "core_user_field_dropdown_translations"
    CORE_USER_FIELD_VALUE = "core_user_field_value"
    CORE_USER_LEVELS = "core_user_levels"
    SKILL_MANAGERS = "skill_managers"
    SKILL_SKILLS = "skill_skills"
    SKILL_SKILLS_OBJECTS = "skill_skills_objects"
    SKILLS_WITH = "skills_with"

    LEARNING_CATEGORY = "learning_category"
    LEARNING_COMMONTRACK = "learning_commontrack"
    LEARNING_COMMONTRACK_COMPLETED = "learning_commontrack_completed"
    LEARNING_COURSE = "learning_course"
    LEARNING_COURSE_FIELD_DROPDOWN_TRANSLATIONS = "learning_course_field_dropdown_translations"
    LEARNING_COURSE_FIELD_VALUE = "learning_course_field_value"
    LEARNING_COURSEPATH = "learning_coursepath"
    LEARNING_COURSEPATH_COURSES = "learning_coursepath_courses"
    LEARNING_COURSEPATH_COURSES_COUNT = "learning_coursepath_courses_count"
    LEARNING_COURSEPATH_FIELD_VALUE = "learning_coursepath_field_value"
    LEARNING_COURSEPATH_COURSESUSER_MANDATORY_COMPLETE_WITH = (
        "learning_coursepath_coursesuser_mandatory_complete_with"
    )
    LEARNING_COURSEPATH_USER = "learning_coursepath_user"
    LEARNING_COURSEPATH_USER_COMPLETED_COURSES = "learning_coursepath_user_completed_courses"
    LEARNING_COURSEUSER = "learning_courseuser"
    LEARNING_COURSEUSER_AGGREGATE = "learning_courseuser_aggregate"
    LEARNING_COURSEUSER_SIGN = "learning_courseuser_sign"
    LEARNING_ENROLLMENT_FIELDS_DROPDOWN = "learning_enrollment_fields_dropdown"
    LEARNING_ORGANIZATION = "learning_organization"
    LEARNING_ORGANIZATION_COUNT = "learning_organization_count"
    LEARNING_POLL = "learning_poll"
    LEARNING_POLL_LIKERT_SCALE = "learning_poll_likert_scale"
    LEARNING_POLLQUEST = "learning_pollquest"
    LEARNING_POLLQUEST_ANSWER = "learning_pollquestanswer"
    LEARNING_POLLQUEST_WITH = "learning_pollquest_with"
    LEARNING_POLLTRACK = "learning_polltrack"
    LEARNING_POLLTRACK_ANSWER = "learning_polltrack_answer"
    LEARNING_REPOSITORY_OBJECT = "learning_repository_object"
    LEARNING_TRACKSESSION_AGGREGATE = "learning_tracksession_aggregate"
    COURSE_SESSION_TIME_AGGREGATE = "course_session_time_aggregate"

    LT_COURSE_SESSION = "lt_course_session"
    LT_COURSE_SESSION_FIELD_VALUES = "lt_course_session_field_value"
    LT_COURSE_SESSION_INSTRUCTOR = "lt_course_session_instructor"
    LT_COURSE_SESSION_INSTRUCTOR_AGGREGATE = "lt_course_session_instructor_aggregate"
    LT_COURSE_SESSION_DATE_ATTENDANCE_AGGREGATE = "lt_course_session_date_attendance_aggregate"
    LT_COURSEUSER_SESSION_DETAILS = "lt_courseuser_session_details"
    LT_LOCATION = "lt_location"

    APP7020_CONTENT = "app7020_content"
    APP7020_CONTENT_PUBLISHED = "app7020_content_published"
    APP7020_CHANNEL_ASSETS = "app7020_channel_assets"
    APP7020_CHANNEL_TRANSLATION = "app7020_channel_translation"
    APP7020_CONTENT_RATING = "app7020_content_rating"
    APP7020_QUESTION = "app7020_question"
    APP7020_ANSWER_AGGREGATE = "app7020_answer_aggregate"
    APP7020_ANSWER_LIKE_AGGREGATE = "app7020_answer_like_aggregate"
    APP7020_ANSWER_DISLIKE_AGGREGATE = "app7020_answer_dislike_aggregate"
    APP7020_BEST_ANSWER_AGGREGATE = "app7020_best_answer_aggregate"
    APP7020_INVITATIONS_AGGREGATE = "app7020_invitations_aggregate"
    APP7020_INVITATIONS_AVERAGE_TIME = "app7020_invitations_average_time"
    APP7020_CONTENT_HISTORY_AGGREGATE = "app7020_content_history_aggregate"
    APP7020_INVOLVED_CHANNELS_AGGREGATE = "app7020_involved_channels_aggregate"
    APP7020_CONTENT_HISTORY_TOTAL_VIEWS_AGGREGATE = "app7020_content_history_total_views_aggregate"
    APP7020_CONTENT_HISTORY = "app7020_content_history"
    RBAC_ASSIGNMENT = "rbac_assignment"

    ARCHIVED_ENROLLMENT_COURSE = "archived_enrollment_course"
    ARCHIVED_ENROLLMENT_SESSION = "archived_enrollment_session"


class TableAliases(str, Enum):
    """Short aliases, one per table, shared by both dialects."""

    CORE_COUNTRY = "cc"
    CORE_GROUP = "cg"
    CORE_GROUP_MEMBERS = "cgm"
    CORE_LANG_LANGUAGE = "cll"
    CORE_ORG_CHART = "coc"
    CORE_ORG_CHART_TREE = "coct"
    CORE_USER = "cu"
    CORE_USER_PU = "cup"
    CORE_USER_BRANCHES = "cub"
    CORE_USER_BRANCHES_NAMES = "cubn"
    CORE_USER_FIELD_DROPDOWN_TRANSLATIONS = "cufdt"
    CORE_USER_FIELD_VALUE = "cufv"
    CORE_USER_LEVELS = "cul"
    SKILL_MANAGERS = "sm"
    SKILL_SKILLS = "ss"
    SKILL_SKILLS_OBJECTS = "sso"
    SKILLS_WITH = "ssw"

    LEARNING_CATEGORY = "lca"
    LEARNING_COMMONTRACK = "lco"
    LEARNING_COMMONTRACK_COMPLETED = "lcoc"
    LEARNING_COURSE = "lc"
    LEARNING_COURSE_FIELD_DROPDOWN_TRANSLATIONS = "lcfdt"
    LEARNING_COURSE_FIELD_VALUE = "lcfv"
    LEARNING_COURSEPATH = "lcp"
    LEARNING_COURSEPATH_COURSES = "lcpc"
    LEARNING_COURSEPATH_COURSES_COUNT = "lcpcc"
    LEARNING_COURSEPATH_FIELD_VALUE = "lcpfv"
    LEARNING_COURSEPATH_COURSESUSER_MANDATORY_COMPLETE_WITH = "lcpcumcw"
    LEARNING_COURSEPATH_USER = "lcpu"
    LEARNING_COURSEPATH_USER_COMPLETED_COURSES = "lcpucc"
    LEARNING_COURSEUSER = "lcu"
    LEARNING_COURSEUSER_AGGREGATE = "lcu_a"
    LEARNING_COURSEUSER_SIGN = "lcus"
    LEARNING_ENROLLMENT_FIELDS_DROPDOWN = "lefd"
    LEARNING_ORGANIZATION = "lo"
    LEARNING_ORGANIZATION_COUNT = "loc"
    LEARNING_POLL = "lp"
    LEARNING_POLL_LIKERT_SCALE = "lpls"
    LEARNING_POLLQUEST = "lpq"
    LEARNING_POLLQUEST_ANSWER = "lpqa"
    LEARNING_POLLTRACK = "lpt"
    LEARNING_POLLTRACK_ANSWER = "lpta"
    LEARNING_REPOSITORY_OBJECT = "lro"
    LEARNING_TRACKSESSION_AGGREGATE = "lta"
    COURSE_SESSION_TIME_AGGREGATE = "csta"

    LT_COURSE_SESSION = "ltcs"
    LT_COURSE_SESSION_FIELD_VALUES = "ltcsfv"
    LT_COURSE_SESSION_INSTRUCTOR = "ltcsi"
    LT_COURSE_SESSION_INSTRUCTOR_AGGREGATE = "ltcsia"
    LT_COURSE_SESSION_DATE_ATTENDANCE_AGGREGATE = "ltcsdaa"
    LT_COURSEUSER_SESSION_DETAILS = "ltcusd"
    LT_LOCATION = "ll"

    APP7020_CONTENT = "c"
    APP7020_CONTENT_PUBLISHED = "cop"
    APP7020_CHANNEL_ASSETS = "cha"
    APP7020_CHANNEL_TRANSLATION = "cht"
    APP7020_CONTENT_RATING = "cr"
    APP7020_QUESTION = "q"
    APP7020_ANSWER_AGGREGATE = "aa"
    APP7020_ANSWER_LIKE_AGGREGATE = "ala"
    APP7020_ANSWER_DISLIKE_AGGREGATE = "ada"
    APP7020_BEST_ANSWER_AGGREGATE = "baa"
    APP7020_INVITATIONS_AGGREGATE = "ia"
    APP7020_INVITATIONS_AVERAGE_TIME = "iat"
    APP7020_CONTENT_HISTORY_AGGREGATE = "coha"
    APP7020_INVOLVED_CHANNELS_AGGREGATE = "ica"
    APP7020_CONTENT_HISTORY_TOTAL_VIEWS_AGGREGATE = "cohtva"
    APP7020_CONTENT_HISTORY = "ch"
    RBAC_ASSIGNMENT = "ra"

    ARCHIVED_ENROLLMENT_COURSE = "aec"
    ARCHIVED_ENROLLMENT_SESSION = "aes"
