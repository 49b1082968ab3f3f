"""Users - Classroom Sessions: one row per user, course and session."""

from typing import Dict, Optional

from report_engine.catalog.enums import (
    AttendanceTypes,
    CourseTypes,
    CourseuserLevels,
    EnrollmentStatuses,
    ReportType,
    SessionEvaluationStatus,
)
from report_engine.catalog.fields import ExtraFieldEntity, FieldId, FieldTranslation
from report_engine.catalog.tables import TableAliases as A
from report_engine.catalog.tables import Tables as T
from report_engine.extra_fields.resolver import ResolvedExtraField
from report_engine.filters.calculators import instructors_filter
from report_engine.legacy.field_maps import (
    LEGACY_COURSE_FIELDS,
    LEGACY_SESSION_ENROLLMENT_FIELDS,
    LEGACY_SESSION_FIELDS,
    LEGACY_USER_FIELDS,
)
from report_engine.query.dates import compose_date_options, date_options_predicate
from report_engine.reports.base import FieldBuilder, ReportCompiler, default_date_option
from report_engine.reports.common_fields import (
    COURSE_BUILDERS,
    CU,
    ENROLLMENT_BUILDERS,
    LC,
    LCU,
    USER_BUILDERS,
    _join_on,
    course_extra_field,
    course_field_value,
    courseuser_level_case,
    enrollment_status_case,
    user_extra_field,
)
from report_engine.reports.context import ARCHIVE, CompileContext
from report_engine.reports.schemas import (
    CoursesFilter,
    EnrollmentFilter,
    SessionAttendanceType,
    SessionDates,
    SessionsFilter,
    UsersFilter,
)
from report_engine.reports.session import SessionContext
from report_engine.reports.users_courses import course_subquery, user_subquery

LTCUSD = A.LT_COURSEUSER_SESSION_DETAILS.value
AES = A.ARCHIVED_ENROLLMENT_SESSION.value


def _session_json(ctx: CompileContext, column: str, key: str) -> str:
    return ctx.archive_json(column, key, alias=AES)


def _archived_session_status(ctx: CompileContext) -> str:
    return f"CAST({_session_json(ctx, 'enrollment_info', 'status')} AS int)"


# ===== FILTERS =====


def session_status_filter(ctx: CompileContext, status: str, waiting: Optional[str] = None) -> str:
    """
    `` AND (...)`` on the session enrollment status.

    Waiting-list rows carry status -2; the other statuses only count when the
    row is not flagged as waiting.
    """
    enrollment = ctx.definition.enrollment
    if enrollment is None:
        return ""
    flags = {
        EnrollmentStatuses.SUBSCRIBED.value: enrollment.not_started,
        EnrollmentStatuses.IN_PROGRESS.value: enrollment.in_progress,
        EnrollmentStatuses.COMPLETED.value: enrollment.completed,
        EnrollmentStatuses.SUSPEND.value: enrollment.suspended,
    }
    all_flags = list(flags.values()) + [enrollment.waiting_list]
    if all(all_flags) or not any(all_flags):
        return ""

    codes = [str(code) for code, selected in flags.items() if selected]
    in_list = ""
    if codes:
        in_list = f"{status} IN ({', '.join(codes)})"
        if waiting is not None:
            in_list += f" AND {waiting} = 0"
    waiting_list = f"{status} = {EnrollmentStatuses.WAITING_LIST.value}"

    if codes and enrollment.waiting_list:
        return f" AND (({in_list}) OR ({waiting_list}))"
    if codes:
        return f" AND ({in_list})"
    return f" AND ({waiting_list})"


def attendance_type_filter(ctx: CompileContext, column: str) -> str:
    attendance = ctx.definition.session_attendance_type
    if attendance is None:
        return ""
    flags = {
        AttendanceTypes.BLENDED.value: attendance.blended,
        AttendanceTypes.FLEXIBLE.value: attendance.flexible,
        AttendanceTypes.FULL_ONLINE.value: attendance.full_online,
        AttendanceTypes.FULL_ONSITE.value: attendance.full_onsite,
    }
    if all(flags.values()) or not any(flags.values()):
        return ""
    selected = ", ".join(f"'{value}'" for value, on in flags.items() if on)
    return f" AND {column} IN ({selected})"


def session_dates_filter(ctx: CompileContext, start: str, end: str, anchor: Optional[str] = None) -> str:
    session_dates = ctx.definition.session_dates
    if session_dates is None:
        return ""
    predicate = date_options_predicate(ctx.dialect, session_dates.conditions, [
        (start, session_dates.start_date),
        (end, session_dates.end_date),
    ])
    if not predicate:
        return ""
    if anchor is not None:
        return f" AND ({anchor} IS NULL OR {predicate})"
    return f" AND {predicate}"


# ===== SESSION FIELDS =====


def _join_instructor(ctx: CompileContext) -> str:
    ltcsi = A.LT_COURSE_SESSION_INSTRUCTOR.value
    ctx.join(ltcsi, _join_on(
        T.LT_COURSE_SESSION_INSTRUCTOR, A.LT_COURSE_SESSION_INSTRUCTOR,
        f"{ctx.col(ltcsi, 'id_session')} = {ctx.col(LTCUSD, 'id_session')}"
        f" AND {ctx.col(ltcsi, 'id_user')} = {ctx.col(LTCUSD, 'id_user')}",
    ))
    return ltcsi


def _join_instructor_aggregate(ctx: CompileContext) -> str:
    ltcsia = A.LT_COURSE_SESSION_INSTRUCTOR_AGGREGATE.value
    ctx.join(ltcsia, _join_on(
        T.LT_COURSE_SESSION_INSTRUCTOR_AGGREGATE, A.LT_COURSE_SESSION_INSTRUCTOR_AGGREGATE,
        f"{ctx.col(ltcsia, 'id_session')} = {ctx.col(LTCUSD, 'id_session')}",
    ))
    return ltcsia


def _join_attendance(ctx: CompileContext) -> str:
    ltcsdaa = A.LT_COURSE_SESSION_DATE_ATTENDANCE_AGGREGATE.value
    ctx.join(ltcsdaa, _join_on(
        T.LT_COURSE_SESSION_DATE_ATTENDANCE_AGGREGATE, A.LT_COURSE_SESSION_DATE_ATTENDANCE_AGGREGATE,
        f"{ctx.col(ltcsdaa, 'id_session')} = {ctx.col(LTCUSD, 'id_session')}"
        f" AND {ctx.col(ltcsdaa, 'id_user')} = {ctx.col(LTCUSD, 'id_user')}",
    ))
    return ltcsdaa


def _session_column(field: FieldId, column: str, archived_key: Optional[str] = None, archived: str = "''"):
    def builder(ctx: CompileContext) -> None:
        archived_expr = _session_json(ctx, "session_info", archived_key) if archived_key else archived
        ctx.select(field.value, ctx.v(LTCUSD, column), archived_expr)
    return builder


def _session_date(field: FieldId, column: str, archived_key: str):
    def builder(ctx: CompileContext) -> None:
        ctx.select(
            field.value,
            ctx.datetime(ctx.v(LTCUSD, column)),
            ctx.datetime(ctx.dialect.parse_datetime(_session_json(ctx, "session_info", archived_key))),
        )
    return builder


def session_evaluation_score_base(ctx: CompileContext) -> None:
    score = ctx.dialect.cast_varchar(ctx.v(LTCUSD, "evaluation_score"))
    base = ctx.dialect.cast_varchar(ctx.v(LTCUSD, "score_base"))
    ctx.select(FieldId.SESSION_EVALUATION_SCORE_BASE.value, f"CONCAT({score}, '/', {base})", "''")


def session_time_session(ctx: CompileContext) -> None:
    hours = ctx.v(LTCUSD, "total_hours")
    minutes = f"CAST((({hours} / 60) * 3600) % 60 AS INTEGER)"
    expr = (
        f"CASE WHEN {minutes} = 0"
        f" THEN CONCAT({ctx.dialect.cast_varchar(f'CAST({hours} AS INTEGER)')}, 'h')"
        f" ELSE CONCAT({ctx.dialect.cast_varchar(f'CAST(FLOOR({hours}) AS INTEGER)')}, 'h ',"
        f" {ctx.dialect.cast_varchar(minutes)}, 'm') END"
    )
    ctx.select(FieldId.SESSION_TIME_SESSION.value, expr, "''")


def session_instructor_userids(ctx: CompileContext) -> None:
    ltcsia = _join_instructor_aggregate(ctx)
    username = f"CASE WHEN {ctx.col(ltcsia, 'id_date')} IS NULL THEN {ctx.col(ltcsia, 'userid')} END"
    ctx.select(FieldId.SESSION_INSTRUCTOR_USERIDS.value, ctx.dialect.distinct_array_join(username), "''")


def session_instructor_fullnames(ctx: CompileContext) -> None:
    ltcsia = _join_instructor_aggregate(ctx)
    first, last = ctx.col(ltcsia, "firstname"), ctx.col(ltcsia, "lastname")
    fullname = f"CONCAT({first}, ' ', {last})" if ctx.platform.show_first_name_first else f"CONCAT({last}, ' ', {first})"
    expr = f"CASE WHEN {ctx.col(ltcsia, 'id_date')} IS NULL THEN {fullname} END"
    ctx.select(FieldId.SESSION_INSTRUCTOR_FULLNAMES.value, ctx.dialect.distinct_array_join(expr), "''")


def _attendance_type_case(ctx: CompileContext, attendance_type: str) -> str:
    return (
        f"CASE WHEN {attendance_type} = '{AttendanceTypes.BLENDED.value}'"
        f" THEN {ctx.t(FieldTranslation.SESSION_ATTENDANCE_TYPE_BLENDED)}"
        f" WHEN {attendance_type} = '{AttendanceTypes.FLEXIBLE.value}'"
        f" THEN {ctx.t(FieldTranslation.SESSION_ATTENDANCE_TYPE_FLEXIBLE)}"
        f" WHEN {attendance_type} = '{AttendanceTypes.FULL_ONLINE.value}'"
        f" THEN {ctx.t(FieldTranslation.SESSION_ATTENDANCE_TYPE_FULLONLINE)}"
        f" WHEN {attendance_type} = '{AttendanceTypes.FULL_ONSITE.value}'"
        f" THEN {ctx.t(FieldTranslation.SESSION_ATTENDANCE_TYPE_FULLONSITE)}"
        " ELSE '' END"
    )


def session_attendance_type(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.SESSION_ATTENDANCE_TYPE.value,
        _attendance_type_case(ctx, ctx.v(LTCUSD, "attendance_type")),
        _attendance_type_case(ctx, _session_json(ctx, "attendance_info", "type")),
    )


SESSION_BUILDERS: Dict[str, FieldBuilder] = {
    FieldId.SESSION_NAME.value: _session_column(FieldId.SESSION_NAME, "name", "name"),
    FieldId.SESSION_CODE.value: _session_column(FieldId.SESSION_CODE, "session_code", "code"),
    FieldId.SESSION_UNIQUE_ID.value: _session_column(FieldId.SESSION_UNIQUE_ID, "uid_session", "uid"),
    FieldId.SESSION_START_DATE.value: _session_date(FieldId.SESSION_START_DATE, "date_begin", "start_at"),
    FieldId.SESSION_END_DATE.value: _session_date(FieldId.SESSION_END_DATE, "date_end", "end_at"),
    FieldId.SESSION_EVALUATION_SCORE_BASE.value: session_evaluation_score_base,
    FieldId.SESSION_TIME_SESSION.value: session_time_session,
    FieldId.SESSION_INSTRUCTOR_USERIDS.value: session_instructor_userids,
    FieldId.SESSION_INSTRUCTOR_FULLNAMES.value: session_instructor_fullnames,
    FieldId.SESSION_ATTENDANCE_TYPE.value: session_attendance_type,
    FieldId.SESSION_MINIMUM_ENROLLMENTS.value: _session_column(
        FieldId.SESSION_MINIMUM_ENROLLMENTS, "min_enroll", archived="NULL"),
    FieldId.SESSION_MAXIMUM_ENROLLMENTS.value: _session_column(
        FieldId.SESSION_MAXIMUM_ENROLLMENTS, "max_enroll", archived="NULL"),
}


# ===== SESSION ENROLLMENT FIELDS =====


def enrollment_user_course_level(ctx: CompileContext) -> None:
    ltcsi = _join_instructor(ctx)
    live = (
        f"CASE WHEN {ctx.v(ltcsi, 'id_user')} IS NOT NULL THEN {ctx.t(FieldTranslation.COURSEUSER_LEVEL_TEACHER)}"
        f" WHEN {ctx.v(LCU, 'level')} = {CourseuserLevels.TUTOR.value} THEN {ctx.t(FieldTranslation.COURSEUSER_LEVEL_TUTOR)}"
        f" ELSE {ctx.t(FieldTranslation.COURSEUSER_LEVEL_STUDENT)} END"
    )
    ctx.select(
        FieldId.ENROLLMENT_USER_COURSE_LEVEL.value,
        live,
        courseuser_level_case(ctx, ctx.archive_col("enrollment_level")),
    )


def enrollment_date(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.ENROLLMENT_DATE.value,
        ctx.datetime(ctx.v(LCU, "date_inscr")),
        ctx.datetime(ctx.archive_col("enrollment_enrolled_at")),
    )


def enrollment_enrollment_status(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.ENROLLMENT_ENROLLMENT_STATUS.value,
        enrollment_status_case(ctx, ctx.v(LCU, "status")),
        enrollment_status_case(ctx, ctx.archive_col("enrollment_status")),
    )


def _session_status_case(ctx: CompileContext, status: str) -> str:
    return (
        f"CASE WHEN {status} = {EnrollmentStatuses.WAITING_LIST.value}"
        f" THEN {ctx.t(FieldTranslation.COURSEUSER_STATUS_WAITING_LIST)}"
        f" WHEN {status} = {EnrollmentStatuses.SUBSCRIBED.value} THEN {ctx.t(FieldTranslation.COURSEUSER_STATUS_ENROLLED)}"
        f" WHEN {status} = {EnrollmentStatuses.IN_PROGRESS.value} THEN {ctx.t(FieldTranslation.COURSEUSER_STATUS_IN_PROGRESS)}"
        f" WHEN {status} = {EnrollmentStatuses.COMPLETED.value} THEN {ctx.t(FieldTranslation.COURSEUSER_STATUS_COMPLETED)}"
        f" WHEN {status} = {EnrollmentStatuses.SUSPEND.value} THEN {ctx.t(FieldTranslation.COURSEUSER_STATUS_SUSPENDED)}"
        " ELSE '' END"
    )


def enrollment_user_session_status(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.ENROLLMENT_USER_SESSION_STATUS.value,
        _session_status_case(ctx, ctx.v(LTCUSD, "status")),
        _session_status_case(ctx, _archived_session_status(ctx)),
    )


def _session_enrollment_date(field: FieldId, column: str, archived_key: str):
    def builder(ctx: CompileContext) -> None:
        archived = ctx.dialect.parse_datetime(_session_json(ctx, "enrollment_info", archived_key))
        ctx.select(field.value, ctx.datetime(ctx.v(LTCUSD, column)), ctx.datetime(archived))
    return builder


def _evaluation_status_case(ctx: CompileContext, status: str) -> str:
    return (
        f"CASE WHEN {status} = {SessionEvaluationStatus.PASSED.value} THEN {ctx.t(FieldTranslation.EVALUATION_STATUS_PASSED)}"
        f" WHEN {status} = {SessionEvaluationStatus.FAILED.value} THEN {ctx.t(FieldTranslation.EVALUATION_STATUS_FAILED)}"
        " ELSE '' END"
    )


def enrollment_evaluation_status(ctx: CompileContext) -> None:
    archived = f"CAST({_session_json(ctx, 'attendance_info', 'attendance.status')} AS int)"
    ctx.select(
        FieldId.ENROLLMENT_EVALUATION_STATUS.value,
        _evaluation_status_case(ctx, ctx.v(LTCUSD, "evaluation_status")),
        _evaluation_status_case(ctx, archived),
    )


def enrollment_attendance(ctx: CompileContext) -> None:
    ltcsdaa = _join_attendance(ctx)
    spent = ctx.v(ltcsdaa, "attendance_time_spent")
    total = ctx.v(ltcsdaa, "session_total_time")
    hours = ctx.v(LTCUSD, "total_hours")
    expr = (
        f"CASE WHEN {spent} = '0h' AND {total} = '0h'"
        f" THEN (CASE WHEN {hours} % 60 = 0 THEN CONCAT({ctx.dialect.cast_varchar(hours)}, ' h')"
        " ELSE CONCAT('0h / ', '0h') END)"
        f" ELSE CONCAT({ctx.dialect.cast_varchar(spent)}, ' / ', {ctx.dialect.cast_varchar(total)}) END"
    )
    ctx.select(FieldId.ENROLLMENT_ATTENDANCE.value, expr, "''")


SESSION_ENROLLMENT_BUILDERS: Dict[str, FieldBuilder] = {
    FieldId.ENROLLMENT_USER_COURSE_LEVEL.value: enrollment_user_course_level,
    FieldId.ENROLLMENT_DATE.value: enrollment_date,
    FieldId.ENROLLMENT_ENROLLMENT_STATUS.value: enrollment_enrollment_status,
    FieldId.ENROLLMENT_USER_SESSION_STATUS.value: enrollment_user_session_status,
    FieldId.ENROLLMENT_USER_SESSION_SUBSCRIBE_DATE.value: _session_enrollment_date(
        FieldId.ENROLLMENT_USER_SESSION_SUBSCRIBE_DATE, "date_subscribed", "created_at"),
    FieldId.ENROLLMENT_USER_SESSION_COMPLETE_DATE.value: _session_enrollment_date(
        FieldId.ENROLLMENT_USER_SESSION_COMPLETE_DATE, "date_completed", "completed_at"),
    FieldId.ENROLLMENT_EVALUATION_STATUS.value: enrollment_evaluation_status,
    FieldId.ENROLLMENT_LEARNER_EVALUATION.value: _session_column(
        FieldId.ENROLLMENT_LEARNER_EVALUATION, "evaluation_score", archived="NULL"),
    FieldId.ENROLLMENT_INSTRUCTOR_FEEDBACK.value: _session_column(
        FieldId.ENROLLMENT_INSTRUCTOR_FEEDBACK, "evaluation_text"),
    FieldId.ENROLLMENT_ATTENDANCE.value: enrollment_attendance,
}

SHARED_ENROLLMENT_FIELDS = (
    FieldId.COURSEUSER_DATE_COMPLETE,
    FieldId.COURSE_E_SIGNATURE_HASH,
    FieldId.ENROLLMENT_ARCHIVING_DATE,
    FieldId.ENROLLMENT_ARCHIVED,
)


class ClassroomCompiler(ReportCompiler):
    """Classroom enrollments joined to their session details; grouped per user, course and session."""

    report_type = ReportType.USERS_CLASSROOM_SESSIONS
    supports_archive = True
    filter_kinds = ("users", "courses", "sessions")

    def field_builders(self) -> Dict[str, FieldBuilder]:
        shared = {field.value: ENROLLMENT_BUILDERS[field.value] for field in SHARED_ENROLLMENT_FIELDS}
        return {**USER_BUILDERS, **COURSE_BUILDERS, **SESSION_BUILDERS, **shared, **SESSION_ENROLLMENT_BUILDERS}

    def build_extra_field(self, ctx: CompileContext, field: ResolvedExtraField) -> None:
        entity = field.ref.entity
        if entity == ExtraFieldEntity.USER:
            user_extra_field(ctx, field, ctx.col(LCU, "idUser"))
        elif entity == ExtraFieldEntity.COURSE:
            course_extra_field(ctx, field, ctx.col(LCU, "idCourse"))
        elif entity == ExtraFieldEntity.ILT:
            ltcsfv = A.LT_COURSE_SESSION_FIELD_VALUES.value
            ctx.join(ltcsfv, _join_on(
                T.LT_COURSE_SESSION_FIELD_VALUES, A.LT_COURSE_SESSION_FIELD_VALUES,
                f"{ctx.col(ltcsfv, 'id_session')} = {ctx.col(LTCUSD, 'id_session')}",
            ))
            ctx.select(field.key, course_field_value(ctx, field, ltcsfv), "''")
        else:
            ctx.select(field.key, "''", "''")

    def build_base(self, ctx: CompileContext) -> None:
        ctx.wrap_values = True
        self._build_live(ctx)
        if ctx.archive is not None:
            self._build_archive(ctx)

    def _session_details(self, ctx: CompileContext) -> str:
        name = ctx.dialect.column_name
        sql = f"SELECT * FROM {T.LT_COURSEUSER_SESSION_DETAILS.value} WHERE TRUE"
        sql += ctx.filter("users").clause(name("id_user"))
        sql += ctx.filter("courses").clause(name("course_id"))
        instructors = instructors_filter(ctx.definition)
        if not instructors.is_unrestricted:
            sql += (
                f" AND {name('id_session')} IN (SELECT {name('id_session')}"
                f" FROM {T.LT_COURSE_SESSION_INSTRUCTOR.value} WHERE TRUE{instructors.clause(name('id_user'))})"
            )
        return sql

    def _build_live(self, ctx: CompileContext) -> None:
        name = ctx.dialect.column_name
        definition = ctx.definition
        users = definition.users
        show_only_learners = users is not None and users.show_only_learners

        enrollments = f"SELECT * FROM {T.LEARNING_COURSEUSER_AGGREGATE.value} WHERE TRUE"
        enrollments += ctx.filter("users").clause(name("idUser"))
        enrollments += ctx.filter("courses").clause(name("idCourse"))
        if show_only_learners:
            enrollments += f" AND {name('level')} = {CourseuserLevels.STUDENT.value}"
        enrollments += compose_date_options(ctx.dialect, definition.conditions, [
            (name("date_inscr"), definition.enrollment_date),
            (name("date_complete"), definition.completion_date),
        ])
        courses = f"{course_subquery(ctx)} AND {name('course_type')} = '{CourseTypes.CLASSROOM.value}'"

        ctx.live.add_from(f"({enrollments}) AS {LCU}")
        ctx.live.add_from(f"JOIN ({user_subquery(ctx)}) AS {CU} ON {ctx.col(CU, 'idst')} = {ctx.col(LCU, 'idUser')}")
        ctx.live.add_from(f"JOIN ({courses}) AS {LC} ON {ctx.col(LC, 'idCourse')} = {ctx.col(LCU, 'idCourse')}")
        ctx.live.add_from(
            f"JOIN ({self._session_details(ctx)}) AS {LTCUSD}"
            f" ON {ctx.col(LTCUSD, 'course_id')} = {ctx.col(LCU, 'idCourse')}"
            f" AND {ctx.col(LTCUSD, 'id_user')} = {ctx.col(LCU, 'idUser')}"
        )
        if show_only_learners:
            ltcsi = _join_instructor(ctx)
            ctx.live.add_where(f"AND {ctx.col(ltcsi, 'id_user')} IS NULL")

        ctx.live.add_where(f"AND {ctx.col(CU, 'userid')} <> '/Anonymous'")
        ctx.live.add_where(session_status_filter(ctx, ctx.col(LTCUSD, "status"), ctx.col(LTCUSD, "waiting")))
        ctx.live.add_where(ctx.filter("sessions").clause(ctx.col(LTCUSD, "id_session")))
        ctx.live.add_where(attendance_type_filter(ctx, ctx.col(LTCUSD, "attendance_type")))
        ctx.live.add_where(session_dates_filter(
            ctx, ctx.col(LTCUSD, "date_begin"), ctx.col(LTCUSD, "date_end"), anchor=ctx.col(LTCUSD, "id_user")
        ))
        ctx.live.add_group_by(ctx.col(LCU, "idUser"), ctx.col(LCU, "idCourse"), ctx.col(LTCUSD, "id_session"))

    def _build_archive(self, ctx: CompileContext) -> None:
        definition = ctx.definition
        archive = ctx.archive
        archive.add_from(f"{T.ARCHIVED_ENROLLMENT_COURSE.value} AS {ARCHIVE}")
        archive.add_from(
            f"JOIN {T.ARCHIVED_ENROLLMENT_SESSION.value} AS {AES}"
            f" ON {ctx.archive_col('id')} = {ctx.col(AES, 'id_archived_enrollment_course')}"
        )
        archive.add_where(f"AND {ctx.archive_json('course_info', 'type')} = '{CourseTypes.CLASSROOM.value}'")
        archive.add_where(ctx.filter("users").clause(ctx.archive_col("user_id")))
        archive.add_where(ctx.user_fields_clause(ctx.archive_col("user_id")))
        archive.add_where(ctx.filter("courses").clause(ctx.archive_col("course_id")))
        archive.add_where(ctx.filter("sessions").clause(ctx.col(AES, "session_id")))
        if definition.users is not None and definition.users.show_only_learners:
            archive.add_where(f"AND {ctx.archive_col('enrollment_level')} = {CourseuserLevels.STUDENT.value}")

        course_end = ctx.dialect.parse_date(ctx.archive_json("course_info", "end_at"))
        archive.add_where(compose_date_options(ctx.dialect, definition.conditions, [
            (course_end, definition.course_expiration_date),
        ]))
        archive.add_where(compose_date_options(ctx.dialect, definition.conditions, [
            (ctx.archive_col("enrollment_enrolled_at"), definition.enrollment_date),
            (ctx.archive_col("enrollment_completed_at"), definition.completion_date),
            (ctx.archive_col("created_at"), definition.archiving_date),
        ]))
        archive.add_where(session_status_filter(ctx, _archived_session_status(ctx)))
        archive.add_where(attendance_type_filter(ctx, _session_json(ctx, "attendance_info", "type")))
        archive.add_where(session_dates_filter(
            ctx,
            ctx.dialect.parse_datetime(_session_json(ctx, "session_info", "start_at")),
            ctx.dialect.parse_datetime(_session_json(ctx, "session_info", "end_at")),
        ))

    def default_filters(self, session: SessionContext) -> Dict[str, object]:
        filters = {
            "users": UsersFilter(hide_deactivated=True),
            "courses": CoursesFilter(),
            "sessions": SessionsFilter(),
            "enrollment_date": default_date_option(),
            "completion_date": default_date_option(),
            "course_expiration_date": default_date_option(),
            "session_dates": SessionDates(start_date=default_date_option(), end_date=default_date_option()),
            "session_attendance_type": SessionAttendanceType(),
            "enrollment": EnrollmentFilter(),
        }
        if session.platform.multiple_enrollment_completions:
            filters["archiving_date"] = default_date_option()
        return filters

    def legacy_field_maps(self) -> Dict[str, Dict[str, str]]:
        return {
            "user": LEGACY_USER_FIELDS,
            "course": LEGACY_COURSE_FIELDS,
            "session": LEGACY_SESSION_FIELDS,
            "enrollment": LEGACY_SESSION_ENROLLMENT_FIELDS,
        }
