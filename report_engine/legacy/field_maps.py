"""Legacy report field keys per section, mapped to catalog field ids."""

from typing import Dict

from report_engine.catalog.fields import FieldId

LEGACY_USER_FIELDS: Dict[str, FieldId] = {
    "idst": FieldId.USER_ID,
    "userid": FieldId.USER_USERID,
    "firstname": FieldId.USER_FIRSTNAME,
    "lastname": FieldId.USER_LASTNAME,
    "fullname": FieldId.USER_FULLNAME,
    "email": FieldId.USER_EMAIL,
    "email_status": FieldId.USER_EMAIL_VALIDATION_STATUS,
    "level": FieldId.USER_LEVEL,
    "valid": FieldId.USER_DEACTIVATED,
    "expiration": FieldId.USER_EXPIRATION,
    "suspend_date": FieldId.USER_SUSPEND_DATE,
    "register_date": FieldId.USER_REGISTER_DATE,
    "lastenter": FieldId.USER_LAST_ACCESS_DATE,
}

LEGACY_COURSE_FIELDS: Dict[str, FieldId] = {
    "idCourse": FieldId.COURSE_ID,
    "uidCourse": FieldId.COURSE_UNIQUE_ID,
    "code": FieldId.COURSE_CODE,
    "name": FieldId.COURSE_NAME,
    "category": FieldId.COURSE_CATEGORY_NAME,
    "status": FieldId.COURSE_STATUS,
    "credits": FieldId.COURSE_CREDITS,
    "mediumTime": FieldId.COURSE_DURATION,
    "course_type": FieldId.COURSE_TYPE,
    "date_begin": FieldId.COURSE_DATE_BEGIN,
    "date_end": FieldId.COURSE_DATE_END,
    "create_date": FieldId.COURSE_CREATION_DATE,
    "lang_code": FieldId.COURSE_LANGUAGE,
}

LEGACY_ENROLLMENT_FIELDS: Dict[str, FieldId] = {
    "level": FieldId.COURSEUSER_LEVEL,
    "date_inscr": FieldId.COURSEUSER_DATE_INSCR,
    "date_first_access": FieldId.COURSEUSER_DATE_FIRST_ACCESS,
    "date_last_access": FieldId.COURSEUSER_DATE_LAST_ACCESS,
    "date_complete": FieldId.COURSEUSER_DATE_COMPLETE,
    "status": FieldId.COURSEUSER_STATUS,
    "date_begin_validity": FieldId.COURSEUSER_DATE_BEGIN_VALIDITY,
    "date_expire_validity": FieldId.COURSEUSER_DATE_EXPIRE_VALIDITY,
    "score_given": FieldId.COURSEUSER_SCORE_GIVEN,
    "initial_score_given": FieldId.COURSEUSER_INITIAL_SCORE_GIVEN,
    "total_time_in_course": FieldId.STATS_TOTAL_TIME_IN_COURSE,
    "number_of_sessions": FieldId.STATS_TOTAL_SESSIONS_IN_COURSE,
    "completion_percentage": FieldId.STATS_USER_COURSE_COMPLETION_PERCENTAGE,
}

LEGACY_ENROLLMENT_TIME_FIELDS: Dict[str, FieldId] = {
    "level": FieldId.COURSEUSER_LEVEL,
    "date_inscr": FieldId.COURSEUSER_DATE_INSCR,
    "status": FieldId.COURSEUSER_STATUS,
    "date_begin_validity": FieldId.COURSEUSER_DATE_BEGIN_VALIDITY,
    "date_expire_validity": FieldId.COURSEUSER_EXPIRATION_DATE,
    "days_left": FieldId.COURSEUSER_DAYS_LEFT,
}

LEGACY_SESSION_FIELDS: Dict[str, FieldId] = {
    "name": FieldId.SESSION_NAME,
    "code": FieldId.SESSION_CODE,
    "uid_session": FieldId.SESSION_UNIQUE_ID,
    "date_begin": FieldId.SESSION_START_DATE,
    "date_end": FieldId.SESSION_END_DATE,
    "score_base": FieldId.SESSION_EVALUATION_SCORE_BASE,
    "total_hours": FieldId.SESSION_TIME_SESSION,
    "min_enroll": FieldId.SESSION_MINIMUM_ENROLLMENTS,
    "max_enroll": FieldId.SESSION_MAXIMUM_ENROLLMENTS,
}

LEGACY_SESSION_ENROLLMENT_FIELDS: Dict[str, FieldId] = {
    "level": FieldId.ENROLLMENT_USER_COURSE_LEVEL,
    "date_inscr": FieldId.ENROLLMENT_DATE,
    "status": FieldId.ENROLLMENT_ENROLLMENT_STATUS,
    "learningCourseuserSessions.evaluation_score": FieldId.ENROLLMENT_LEARNER_EVALUATION,
    "learningCourseuserSessions.evaluation_status": FieldId.ENROLLMENT_EVALUATION_STATUS,
    "learningCourseuserSessions.evaluation_text": FieldId.ENROLLMENT_INSTRUCTOR_FEEDBACK,
    "learningCourseuserSessions.attendance_hours": FieldId.ENROLLMENT_ATTENDANCE,
}

LEGACY_ASSET_FIELDS: Dict[str, FieldId] = {
    "title": FieldId.ASSET_NAME,
    "channels": FieldId.CHANNELS,
    "published_by": FieldId.PUBLISHED_BY,
    "publish_date": FieldId.PUBLISHED_ON,
}

LEGACY_ASSET_STATISTICS_FIELDS: Dict[str, FieldId] = {
    "total_views": FieldId.TOTAL_VIEWS,
    "rating": FieldId.ASSET_RATING,
    "watch_rate": FieldId.GLOBAL_WATCH_RATE,
    "watched": FieldId.WATCHED,
    "not_watched": FieldId.NOT_WATCHED,
    "invited": FieldId.INVITED_PEOPLE,
    "reaction_time": FieldId.AVERAGE_REACTION_TIME,
    "questions": FieldId.QUESTIONS,
    "answers": FieldId.ANSWERS,
    "best_answers": FieldId.BEST_ANSWERS,
    "likes": FieldId.ANSWER_LIKES,
    "dislikes": FieldId.ANSWER_DISLIKES,
}
