"""
Field builders shared by the enrollment-based reports.

Every builder writes one column through ``ctx.select`` with a live expression
(``cu``/``lc``/``lcu_a`` anchored) and an archived expression read from the
denormalised ``archived_enrollment_course`` row.
"""

from typing import Dict, Optional

from report_engine.catalog.enums import (
    AdditionalFieldsTypes,
    AssignmentTypes,
    CourseTypes,
    CourseuserLevels,
    EnrollmentStatuses,
    TEXT_LIKE_FIELD_TYPES,
    UserLevelsGroups,
)
from report_engine.catalog.fields import ExtraFieldEntity, FieldId, FieldTranslation
from report_engine.catalog.tables import TableAliases as A
from report_engine.catalog.tables import Tables as T
from report_engine.extra_fields.resolver import ResolvedExtraField
from report_engine.reports.context import CompileContext

CU = A.CORE_USER.value
LC = A.LEARNING_COURSE.value
LCU = A.LEARNING_COURSEUSER_AGGREGATE.value
MANAGER = "cus"


def _join_on(table: T, alias: A, condition: str) -> str:
    return f"LEFT JOIN {table.value} AS {alias.value} ON {condition}"


# ===== USER =====


def _user_json(ctx: CompileContext, key: str) -> str:
    return ctx.archive_json("user_info", key)


def _fullname(ctx: CompileContext, firstname: str, lastname: str) -> str:
    if ctx.platform.show_first_name_first:
        return f"CONCAT({firstname}, ' ', {lastname})"
    return f"CONCAT({lastname}, ' ', {firstname})"


def user_id(ctx: CompileContext) -> None:
    ctx.select(FieldId.USER_ID.value, ctx.v(CU, "idst"), ctx.archive_col("user_id"))


def user_userid(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.USER_USERID.value,
        f"SUBSTR({ctx.v(CU, 'userid')}, 2)",
        f"SUBSTR({_user_json(ctx, 'username')}, 2)",
    )


def user_firstname(ctx: CompileContext) -> None:
    ctx.select(FieldId.USER_FIRSTNAME.value, ctx.v(CU, "firstname"), _user_json(ctx, "firstname"))


def user_lastname(ctx: CompileContext) -> None:
    ctx.select(FieldId.USER_LASTNAME.value, ctx.v(CU, "lastname"), _user_json(ctx, "lastname"))


def user_fullname(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.USER_FULLNAME.value,
        _fullname(ctx, ctx.v(CU, "firstname"), ctx.v(CU, "lastname")),
        _fullname(ctx, _user_json(ctx, "firstname"), _user_json(ctx, "lastname")),
    )


def user_email(ctx: CompileContext) -> None:
    ctx.select(FieldId.USER_EMAIL.value, ctx.v(CU, "email"), _user_json(ctx, "email"))


def user_email_validation_status(ctx: CompileContext) -> None:
    expr = (
        f"CASE WHEN {ctx.v(CU, 'email_status')} = 0 THEN {ctx.t(FieldTranslation.NO)}"
        f" ELSE {ctx.t(FieldTranslation.YES)} END"
    )
    ctx.select(FieldId.USER_EMAIL_VALIDATION_STATUS.value, expr)


def user_level(ctx: CompileContext) -> None:
    cul = A.CORE_USER_LEVELS.value
    ctx.join(cul, _join_on(T.CORE_USER_LEVELS, A.CORE_USER_LEVELS,
                           f"{ctx.col(cul, 'idUser')} = {ctx.col(CU, 'idst')}"))
    level = ctx.v(cul, "level")
    expr = (
        f"CASE WHEN {level} = '{UserLevelsGroups.GOD_ADMIN.value}' THEN {ctx.t(FieldTranslation.USER_LEVEL_GODADMIN)}"
        f" WHEN {level} = '{UserLevelsGroups.POWER_USER.value}' THEN {ctx.t(FieldTranslation.USER_LEVEL_POWERUSER)}"
        f" ELSE {ctx.t(FieldTranslation.USER_LEVEL_USER)} END"
    )
    ctx.select(FieldId.USER_LEVEL.value, expr)


def user_deactivated(ctx: CompileContext) -> None:
    expr = (
        f"CASE WHEN {ctx.v(CU, 'valid')} = {ctx.dialect.true_flag()} THEN {ctx.t(FieldTranslation.NO)}"
        f" ELSE {ctx.t(FieldTranslation.YES)} END"
    )
    ctx.select(FieldId.USER_DEACTIVATED.value, expr, "''")


def user_expiration(ctx: CompileContext) -> None:
    ctx.select(FieldId.USER_EXPIRATION.value, ctx.v(CU, "expiration"))


def user_suspend_date(ctx: CompileContext) -> None:
    ctx.select(FieldId.USER_SUSPEND_DATE.value, ctx.datetime(ctx.v(CU, "suspend_date")))


def user_register_date(ctx: CompileContext) -> None:
    ctx.select(FieldId.USER_REGISTER_DATE.value, ctx.datetime(ctx.v(CU, "register_date")))


def user_last_access_date(ctx: CompileContext) -> None:
    ctx.select(FieldId.USER_LAST_ACCESS_DATE.value, ctx.datetime(ctx.v(CU, "lastenter")))


def user_branch_name(ctx: CompileContext) -> None:
    cubn = A.CORE_USER_BRANCHES_NAMES.value
    ctx.join(cubn, _join_on(T.CORE_USER_BRANCHES_NAMES, A.CORE_USER_BRANCHES_NAMES,
                            f"{ctx.col(cubn, 'idst')} = {ctx.col(CU, 'idst')}"))
    ctx.select(FieldId.USER_BRANCH_NAME.value, ctx.v(cubn, "branches_names"))


def _join_user_branches(ctx: CompileContext) -> str:
    cub = A.CORE_USER_BRANCHES.value
    ctx.join(cub, _join_on(T.CORE_USER_BRANCHES, A.CORE_USER_BRANCHES,
                           f"{ctx.col(cub, 'idst')} = {ctx.col(CU, 'idst')}"))
    return cub


def user_branch_path(ctx: CompileContext) -> None:
    cub = _join_user_branches(ctx)
    ctx.select(FieldId.USER_BRANCH_PATH.value, ctx.v(cub, "branches"))


def user_branches_codes(ctx: CompileContext) -> None:
    cub = _join_user_branches(ctx)
    ctx.select(FieldId.USER_BRANCHES_CODES.value, ctx.v(cub, "codes"), "''")


def user_direct_manager(ctx: CompileContext) -> None:
    sm = A.SKILL_MANAGERS.value
    ctx.join(sm, _join_on(T.SKILL_MANAGERS, A.SKILL_MANAGERS,
                          f"{ctx.col(sm, 'idEmployee')} = {ctx.col(CU, 'idst')} AND {ctx.col(sm, 'type')} = 1"))
    ctx.join(MANAGER, f"LEFT JOIN {T.CORE_USER.value} AS {MANAGER} ON {ctx.col(MANAGER, 'idst')} = {ctx.col(sm, 'idManager')}")
    fullname = _fullname(ctx, ctx.v(MANAGER, "firstname"), ctx.v(MANAGER, "lastname"))
    expr = ctx.dialect.if_(f"{fullname} = ' '", f"SUBSTR({ctx.v(MANAGER, 'userid')}, 2)", fullname)
    ctx.select(FieldId.USER_DIRECT_MANAGER.value, expr)


USER_BUILDERS = {
    FieldId.USER_ID.value: user_id,
    FieldId.USER_USERID.value: user_userid,
    FieldId.USER_FIRSTNAME.value: user_firstname,
    FieldId.USER_LASTNAME.value: user_lastname,
    FieldId.USER_FULLNAME.value: user_fullname,
    FieldId.USER_EMAIL.value: user_email,
    FieldId.USER_EMAIL_VALIDATION_STATUS.value: user_email_validation_status,
    FieldId.USER_LEVEL.value: user_level,
    FieldId.USER_DEACTIVATED.value: user_deactivated,
    FieldId.USER_EXPIRATION.value: user_expiration,
    FieldId.USER_SUSPEND_DATE.value: user_suspend_date,
    FieldId.USER_REGISTER_DATE.value: user_register_date,
    FieldId.USER_LAST_ACCESS_DATE.value: user_last_access_date,
    FieldId.USER_BRANCH_NAME.value: user_branch_name,
    FieldId.USER_BRANCH_PATH.value: user_branch_path,
    FieldId.USER_BRANCHES_CODES.value: user_branches_codes,
    FieldId.USER_DIRECT_MANAGER.value: user_direct_manager,
}


# ===== COURSE =====


def _course_json(ctx: CompileContext, key: str) -> str:
    return ctx.archive_json("course_info", key)


def course_type_case(ctx: CompileContext, course_type: str) -> str:
    return (
        f"CASE WHEN {course_type} = '{CourseTypes.ELEARNING.value}' THEN {ctx.t(FieldTranslation.COURSE_TYPE_ELEARNING)}"
        f" WHEN {course_type} = '{CourseTypes.CLASSROOM.value}' THEN {ctx.t(FieldTranslation.COURSE_TYPE_CLASSROOM)}"
        f" ELSE {ctx.t(FieldTranslation.COURSE_TYPE_WEBINAR)} END"
    )


def _course_status_case(ctx: CompileContext, status: str) -> str:
    return (
        f"CASE WHEN {status} = 0 THEN {ctx.t(FieldTranslation.COURSE_STATUS_PREPARATION)}"
        f" ELSE {ctx.t(FieldTranslation.COURSE_STATUS_EFFECTIVE)} END"
    )


def _expired_case(ctx: CompileContext, date_end: str) -> str:
    return ctx.yes_no(f"{date_end} < {ctx.dialect.current_date()}")


def course_id(ctx: CompileContext) -> None:
    ctx.select(FieldId.COURSE_ID.value, ctx.v(LC, "idCourse"), f"CAST({_course_json(ctx, 'id')} AS INT)")


def course_unique_id(ctx: CompileContext) -> None:
    ctx.select(FieldId.COURSE_UNIQUE_ID.value, ctx.v(LC, "uidCourse"), _course_json(ctx, "uid"))


def course_code(ctx: CompileContext) -> None:
    ctx.select(FieldId.COURSE_CODE.value, ctx.v(LC, "code"), _course_json(ctx, "code"))


def course_name(ctx: CompileContext) -> None:
    ctx.select(FieldId.COURSE_NAME.value, ctx.v(LC, "name"), _course_json(ctx, "name"))


def _join_category(ctx: CompileContext) -> str:
    lca = A.LEARNING_CATEGORY.value
    ctx.join(lca, _join_on(
        T.LEARNING_CATEGORY, A.LEARNING_CATEGORY,
        f"{ctx.col(lca, 'idCategory')} = {ctx.col(LC, 'idCategory')}"
        f" AND {ctx.col(lca, 'lang_code')} = {ctx.dialect.literal(ctx.session.lang)}",
    ))
    return lca


def course_category_code(ctx: CompileContext) -> None:
    lca = _join_category(ctx)
    ctx.select(FieldId.COURSE_CATEGORY_CODE.value, ctx.v(lca, "code"), "''")


def course_category_name(ctx: CompileContext) -> None:
    lca = _join_category(ctx)
    ctx.select(FieldId.COURSE_CATEGORY_NAME.value, ctx.v(lca, "translation"), "''")


def course_status(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.COURSE_STATUS.value,
        _course_status_case(ctx, ctx.v(LC, "status")),
        _course_status_case(ctx, f"CAST({_course_json(ctx, 'status')} AS int)"),
    )


def course_credits(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.COURSE_CREDITS.value,
        ctx.v(LC, "credits"),
        f"ROUND(CAST({_course_json(ctx, 'credits')} AS DOUBLE), 2)",
    )


def course_duration(ctx: CompileContext) -> None:
    ctx.select(FieldId.COURSE_DURATION.value, ctx.v(LC, "mediumTime"), f"CAST({_course_json(ctx, 'duration')} AS INT)")


def course_type(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.COURSE_TYPE.value,
        course_type_case(ctx, ctx.v(LC, "course_type")),
        course_type_case(ctx, _course_json(ctx, "type")),
    )


def course_date_begin(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.COURSE_DATE_BEGIN.value,
        ctx.v(LC, "date_begin"),
        ctx.dialect.parse_date(_course_json(ctx, "start_at")),
    )


def course_date_end(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.COURSE_DATE_END.value,
        ctx.v(LC, "date_end"),
        ctx.dialect.parse_date(_course_json(ctx, "end_at")),
    )


def course_expired(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.COURSE_EXPIRED.value,
        _expired_case(ctx, ctx.v(LC, "date_end")),
        _expired_case(ctx, ctx.dialect.parse_date(_course_json(ctx, "end_at"))),
    )


def course_creation_date(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.COURSE_CREATION_DATE.value,
        ctx.datetime(ctx.v(LC, "create_date")),
        ctx.datetime(ctx.dialect.parse_datetime(_course_json(ctx, "created_at"))),
    )


def course_e_signature(ctx: CompileContext) -> None:
    ctx.select(FieldId.COURSE_E_SIGNATURE.value, ctx.yes_no(f"{ctx.v(LC, 'has_esignature_enabled')} = 1"), "''")


def course_language(ctx: CompileContext) -> None:
    cll = A.CORE_LANG_LANGUAGE.value
    ctx.join(cll, _join_on(T.CORE_LANG_LANGUAGE, A.CORE_LANG_LANGUAGE,
                           f"{ctx.col(LC, 'lang_code')} = {ctx.col(cll, 'lang_code')}"))
    ctx.select(FieldId.COURSE_LANGUAGE.value, ctx.v(cll, "lang_description"), _course_json(ctx, "language"))


def course_skills(ctx: CompileContext) -> None:
    sso = A.SKILL_SKILLS_OBJECTS.value
    ss = A.SKILL_SKILLS.value
    ssw = A.SKILLS_WITH.value
    body = (
        f"SELECT {ctx.col(sso, 'idObject')} AS {ctx.dialect.column_name('idCourse')},"
        f" {ctx.dialect.distinct_array_join(ctx.col(ss, 'title'))} AS {ctx.dialect.column_name('skillsInCourse')}"
        f" FROM {T.SKILL_SKILLS_OBJECTS.value} AS {sso}"
        f" LEFT JOIN {T.SKILL_SKILLS.value} AS {ss} ON {ctx.col(ss, 'id')} = {ctx.col(sso, 'idSkill')}"
        f" WHERE {ctx.col(sso, 'objectType')} = 1{ctx.filter('courses').clause(ctx.col(sso, 'idObject'))}"
        f" GROUP BY {ctx.col(sso, 'idObject')}"
    )
    ctx.live.add_cte(T.SKILLS_WITH.value, body)
    if ctx.archive is not None:
        ctx.archive.add_cte(T.SKILLS_WITH.value, body)
    ctx.join(ssw, f"LEFT JOIN {T.SKILLS_WITH.value} AS {ssw} ON {ctx.col(ssw, 'idCourse')} = {ctx.col(LC, 'idCourse')}")
    ctx.archive_join(ssw, f"LEFT JOIN {T.SKILLS_WITH.value} AS {ssw} ON {ctx.col(ssw, 'idCourse')} = {ctx.archive_col('course_id')}")
    ctx.select(FieldId.COURSE_SKILLS.value, ctx.v(ssw, "skillsInCourse"), ctx.col(ssw, "skillsInCourse"))


COURSE_BUILDERS = {
    FieldId.COURSE_ID.value: course_id,
    FieldId.COURSE_UNIQUE_ID.value: course_unique_id,
    FieldId.COURSE_CODE.value: course_code,
    FieldId.COURSE_NAME.value: course_name,
    FieldId.COURSE_CATEGORY_CODE.value: course_category_code,
    FieldId.COURSE_CATEGORY_NAME.value: course_category_name,
    FieldId.COURSE_STATUS.value: course_status,
    FieldId.COURSE_CREDITS.value: course_credits,
    FieldId.COURSE_DURATION.value: course_duration,
    FieldId.COURSE_TYPE.value: course_type,
    FieldId.COURSE_DATE_BEGIN.value: course_date_begin,
    FieldId.COURSE_DATE_END.value: course_date_end,
    FieldId.COURSE_EXPIRED.value: course_expired,
    FieldId.COURSE_CREATION_DATE.value: course_creation_date,
    FieldId.COURSE_E_SIGNATURE.value: course_e_signature,
    FieldId.COURSE_LANGUAGE.value: course_language,
    FieldId.COURSE_SKILLS.value: course_skills,
}


# ===== ENROLLMENT =====


def courseuser_level_case(ctx: CompileContext, level: str) -> str:
    return (
        f"CASE WHEN {level} = {CourseuserLevels.TEACHER.value} THEN {ctx.t(FieldTranslation.COURSEUSER_LEVEL_TEACHER)}"
        f" WHEN {level} = {CourseuserLevels.TUTOR.value} THEN {ctx.t(FieldTranslation.COURSEUSER_LEVEL_TUTOR)}"
        f" ELSE {ctx.t(FieldTranslation.COURSEUSER_LEVEL_STUDENT)} END"
    )


def waiting_condition(status: str, waiting: Optional[str] = None, course_type: Optional[str] = None) -> str:
    condition = f"{status} = {EnrollmentStatuses.WAITING_LIST.value}"
    if waiting is not None and course_type is not None:
        condition += f" OR ({waiting} = 1 AND {course_type} = '{CourseTypes.ELEARNING.value}')"
    return condition


def enrollment_status_case(
    ctx: CompileContext, status: str, waiting: Optional[str] = None, course_type: Optional[str] = None
) -> str:
    """Enrollment status labels; unknown codes fall back to the raw code."""
    return (
        f"CASE WHEN {status} = {EnrollmentStatuses.CONFIRMED.value}"
        f" THEN {ctx.t(FieldTranslation.COURSEUSER_STATUS_ENROLLMENTS_TO_CONFIRM)}"
        f" WHEN {waiting_condition(status, waiting, course_type)}"
        f" THEN {ctx.t(FieldTranslation.COURSEUSER_STATUS_WAITING_LIST)}"
        f" WHEN {status} = {EnrollmentStatuses.SUBSCRIBED.value} THEN {ctx.t(FieldTranslation.COURSEUSER_STATUS_SUBSCRIBED)}"
        f" WHEN {status} = {EnrollmentStatuses.IN_PROGRESS.value} THEN {ctx.t(FieldTranslation.COURSEUSER_STATUS_IN_PROGRESS)}"
        f" WHEN {status} = {EnrollmentStatuses.COMPLETED.value} THEN {ctx.t(FieldTranslation.COURSEUSER_STATUS_COMPLETED)}"
        f" WHEN {status} = {EnrollmentStatuses.SUSPEND.value} THEN {ctx.t(FieldTranslation.COURSEUSER_STATUS_SUSPENDED)}"
        f" WHEN {status} = {EnrollmentStatuses.OVERBOOKING.value} THEN {ctx.t(FieldTranslation.COURSEUSER_STATUS_OVERBOOKING)}"
        f" ELSE {ctx.dialect.cast_varchar(status)} END"
    )


def enrollment_status_filter(
    ctx: CompileContext, status: str, waiting: Optional[str] = None, course_type: Optional[str] = None
) -> str:
    """
    `` AND (...)`` restricting enrollments to the selected statuses.

    No predicate when every status (or none) is selected.
    """
    enrollment = ctx.definition.enrollment
    if enrollment is None:
        return ""
    flags = enrollment.status_flags()
    if all(flags.values()) or not any(flags.values()):
        return ""

    codes = []
    if flags["enrollments_to_confirm"]:
        codes.append(EnrollmentStatuses.CONFIRMED.value)
    if flags["not_started"] or flags["subscribed"]:
        codes.append(EnrollmentStatuses.SUBSCRIBED.value)
    if flags["in_progress"]:
        codes.append(EnrollmentStatuses.IN_PROGRESS.value)
    if flags["completed"]:
        codes.append(EnrollmentStatuses.COMPLETED.value)
    if flags["suspended"]:
        codes.append(EnrollmentStatuses.SUSPEND.value)
    if flags["overbooking"]:
        codes.append(EnrollmentStatuses.OVERBOOKING.value)

    has_fallback = waiting is not None and course_type is not None
    parts = []
    if codes:
        in_list = f"{status} IN ({', '.join(str(code) for code in codes)})"
        if has_fallback and not flags["waiting_list"]:
            in_list = f"({in_list} AND NOT ({waiting} = 1 AND {course_type} = '{CourseTypes.ELEARNING.value}'))"
        parts.append(in_list)
    if flags["waiting_list"]:
        parts.append(f"({waiting_condition(status, waiting, course_type)})")
    return " AND (" + " OR ".join(parts) + ")"


def courseuser_level(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.COURSEUSER_LEVEL.value,
        courseuser_level_case(ctx, ctx.v(LCU, "level")),
        courseuser_level_case(ctx, ctx.archive_col("enrollment_level")),
    )


def _enrollment_datetime(field: FieldId, live_column: str, archived_column: str):
    def builder(ctx: CompileContext) -> None:
        ctx.select(
            field.value,
            ctx.datetime(ctx.v(LCU, live_column)),
            ctx.datetime(ctx.archive_col(archived_column)),
        )
    return builder


def courseuser_status(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.COURSEUSER_STATUS.value,
        enrollment_status_case(ctx, ctx.v(LCU, "status"), ctx.v(LCU, "waiting"), ctx.v(LC, "course_type")),
        enrollment_status_case(ctx, ctx.archive_col("enrollment_status")),
    )


def courseuser_score_given(ctx: CompileContext) -> None:
    ctx.select(FieldId.COURSEUSER_SCORE_GIVEN.value, ctx.v(LCU, "score_given"), ctx.archive_col("enrollment_score"))


def courseuser_initial_score_given(ctx: CompileContext) -> None:
    ctx.select(
        FieldId.COURSEUSER_INITIAL_SCORE_GIVEN.value,
        ctx.v(LCU, "initial_score_given"),
        ctx.archive_col("enrollment_score_initial"),
    )


def course_e_signature_hash(ctx: CompileContext) -> None:
    lcus = A.LEARNING_COURSEUSER_SIGN.value
    ctx.join(lcus, _join_on(
        T.LEARNING_COURSEUSER_SIGN, A.LEARNING_COURSEUSER_SIGN,
        f"{ctx.col(lcus, 'course_id')} = {ctx.col(LCU, 'idCourse')} AND {ctx.col(lcus, 'user_id')} = {ctx.col(LCU, 'idUser')}",
    ))
    ctx.select(FieldId.COURSE_E_SIGNATURE_HASH.value, ctx.v(lcus, "signature"))


def courseuser_assignment_type(ctx: CompileContext) -> None:
    assignment = ctx.v(LCU, "assignment_type")
    expr = (
        f"CASE WHEN {assignment} = {AssignmentTypes.MANDATORY.value} THEN {ctx.t(FieldTranslation.ASSIGNMENT_TYPE_MANDATORY)}"
        f" WHEN {assignment} = {AssignmentTypes.REQUIRED.value} THEN {ctx.t(FieldTranslation.ASSIGNMENT_TYPE_REQUIRED)}"
        f" WHEN {assignment} = {AssignmentTypes.RECOMMENDED.value} THEN {ctx.t(FieldTranslation.ASSIGNMENT_TYPE_RECOMMENDED)}"
        f" WHEN {assignment} = {AssignmentTypes.OPTIONAL.value} THEN {ctx.t(FieldTranslation.ASSIGNMENT_TYPE_OPTIONAL)}"
        " ELSE NULL END"
    )
    ctx.select(FieldId.COURSEUSER_ASSIGNMENT_TYPE.value, expr)


def enrollment_archiving_date(ctx: CompileContext) -> None:
    ctx.select(FieldId.ENROLLMENT_ARCHIVING_DATE.value, "NULL", ctx.datetime(ctx.archive_col("created_at")))


def enrollment_archived(ctx: CompileContext) -> None:
    ctx.select(FieldId.ENROLLMENT_ARCHIVED.value, ctx.t(FieldTranslation.NO), ctx.t(FieldTranslation.YES))


ENROLLMENT_BUILDERS = {
    FieldId.COURSEUSER_LEVEL.value: courseuser_level,
    FieldId.COURSEUSER_DATE_INSCR.value: _enrollment_datetime(
        FieldId.COURSEUSER_DATE_INSCR, "date_inscr", "enrollment_enrolled_at"),
    FieldId.COURSEUSER_DATE_FIRST_ACCESS.value: _enrollment_datetime(
        FieldId.COURSEUSER_DATE_FIRST_ACCESS, "date_first_access", "enrollment_access_first"),
    FieldId.COURSEUSER_DATE_LAST_ACCESS.value: _enrollment_datetime(
        FieldId.COURSEUSER_DATE_LAST_ACCESS, "date_last_access", "enrollment_access_last"),
    FieldId.COURSEUSER_DATE_COMPLETE.value: _enrollment_datetime(
        FieldId.COURSEUSER_DATE_COMPLETE, "date_complete", "enrollment_completed_at"),
    FieldId.COURSEUSER_STATUS.value: courseuser_status,
    FieldId.COURSEUSER_DATE_BEGIN_VALIDITY.value: _enrollment_datetime(
        FieldId.COURSEUSER_DATE_BEGIN_VALIDITY, "date_begin_validity", "enrollment_validity_start"),
    FieldId.COURSEUSER_DATE_EXPIRE_VALIDITY.value: _enrollment_datetime(
        FieldId.COURSEUSER_DATE_EXPIRE_VALIDITY, "date_expire_validity", "enrollment_validity_end"),
    FieldId.COURSEUSER_SCORE_GIVEN.value: courseuser_score_given,
    FieldId.COURSEUSER_INITIAL_SCORE_GIVEN.value: courseuser_initial_score_given,
    FieldId.COURSE_E_SIGNATURE_HASH.value: course_e_signature_hash,
    FieldId.COURSEUSER_ASSIGNMENT_TYPE.value: courseuser_assignment_type,
    FieldId.ENROLLMENT_ARCHIVING_DATE.value: enrollment_archiving_date,
    FieldId.ENROLLMENT_ARCHIVED.value: enrollment_archived,
}


# ===== USAGE STATISTICS =====


def _join_tracksession(ctx: CompileContext) -> str:
    lta = A.LEARNING_TRACKSESSION_AGGREGATE.value
    ctx.join(lta, _join_on(
        T.LEARNING_TRACKSESSION_AGGREGATE, A.LEARNING_TRACKSESSION_AGGREGATE,
        f"{ctx.col(lta, 'idUser')} = {ctx.col(LCU, 'idUser')} AND {ctx.col(lta, 'idCourse')} = {ctx.col(LCU, 'idCourse')}",
    ))
    return lta


def stats_completion_percentage(ctx: CompileContext) -> None:
    loc = A.LEARNING_ORGANIZATION_COUNT.value
    lcoc = A.LEARNING_COMMONTRACK_COMPLETED.value
    ctx.join(loc, _join_on(T.LEARNING_ORGANIZATION_COUNT, A.LEARNING_ORGANIZATION_COUNT,
                           f"{ctx.col(loc, 'idCourse')} = {ctx.col(LCU, 'idCourse')}"))
    ctx.join(lcoc, _join_on(
        T.LEARNING_COMMONTRACK_COMPLETED, A.LEARNING_COMMONTRACK_COMPLETED,
        f"{ctx.col(lcoc, 'idUser')} = {ctx.col(LCU, 'idUser')} AND {ctx.col(lcoc, 'idCourse')} = {ctx.col(LCU, 'idCourse')}",
    ))
    completed = ctx.v(lcoc, "completed")
    count = ctx.v(loc, "count")
    expr = f"CASE WHEN {completed} IS NOT NULL AND {count} > 0 THEN ({completed} * 100) / {count} ELSE 0 END"
    ctx.select(FieldId.STATS_USER_COURSE_COMPLETION_PERCENTAGE.value, expr)


def stats_total_time(ctx: CompileContext) -> None:
    lta = _join_tracksession(ctx)
    ctx.select(FieldId.STATS_TOTAL_TIME_IN_COURSE.value, ctx.v(lta, "totalTime"))


def stats_total_sessions(ctx: CompileContext) -> None:
    lta = _join_tracksession(ctx)
    ctx.select(
        FieldId.STATS_TOTAL_SESSIONS_IN_COURSE.value,
        ctx.v(lta, "actions"),
        ctx.archive_col("enrollment_sessions_count"),
    )


def stats_number_of_actions(ctx: CompileContext) -> None:
    lta = _join_tracksession(ctx)
    ctx.select(FieldId.STATS_NUMBER_OF_ACTIONS.value, ctx.v(lta, "numberOfActions"))


def stats_session_time(ctx: CompileContext) -> None:
    csta = A.COURSE_SESSION_TIME_AGGREGATE.value
    ctx.join(csta, _join_on(
        T.COURSE_SESSION_TIME_AGGREGATE, A.COURSE_SESSION_TIME_AGGREGATE,
        f"{ctx.col(csta, 'id_user')} = {ctx.col(LCU, 'idUser')} AND {ctx.col(csta, 'course_id')} = {ctx.col(LCU, 'idCourse')}",
    ))
    ctx.select(FieldId.STATS_SESSION_TIME.value, ctx.v(csta, "session_time"), ctx.archive_col("enrollment_time_spent"))


def _channel_stats(yes_no: FieldId, percentage: FieldId, time_spent: FieldId, suffix: str) -> Dict[str, object]:
    """Access, share and time of training material consumed through one channel."""

    def access(ctx: CompileContext) -> None:
        lta = _join_tracksession(ctx)
        expr = ctx.dialect.if_(
            f"{ctx.v(lta, 'numberOfActions' + suffix)} != 0",
            ctx.t(FieldTranslation.YES),
            ctx.t(FieldTranslation.NO),
        )
        ctx.select(yes_no.value, expr, "''")

    def share(ctx: CompileContext) -> None:
        lta = _join_tracksession(ctx)
        total = ctx.v(lta, "totalTime")
        expr = ctx.dialect.if_(f"{total} > 0", f"({ctx.v(lta, 'totalTime' + suffix)} * 100) / {total}", "0")
        ctx.select(percentage.value, expr)

    def spent(ctx: CompileContext) -> None:
        lta = _join_tracksession(ctx)
        time = ctx.v(lta, "totalTime" + suffix)
        ctx.select(time_spent.value, ctx.dialect.if_(f"{time} IS NOT NULL", time, "0"))

    return {yes_no.value: access, percentage.value: share, time_spent.value: spent}


STATS_BUILDERS = {
    FieldId.STATS_USER_COURSE_COMPLETION_PERCENTAGE.value: stats_completion_percentage,
    FieldId.STATS_TOTAL_TIME_IN_COURSE.value: stats_total_time,
    FieldId.STATS_TOTAL_SESSIONS_IN_COURSE.value: stats_total_sessions,
    FieldId.STATS_NUMBER_OF_ACTIONS.value: stats_number_of_actions,
    FieldId.STATS_SESSION_TIME.value: stats_session_time,
    **_channel_stats(
        FieldId.STATS_USER_FLOW_YES_NO,
        FieldId.STATS_USER_COURSE_FLOW_PERCENTAGE,
        FieldId.STATS_USER_COURSE_TIME_SPENT_BY_FLOW,
        "Flow",
    ),
    **_channel_stats(
        FieldId.STATS_COURSE_ACCESS_FROM_MOBILE,
        FieldId.STATS_PERCENTAGE_OF_COURSE_FROM_MOBILE,
        FieldId.STATS_TIME_SPENT_FROM_MOBILE,
        "GoLearn",
    ),
    **_channel_stats(
        FieldId.STATS_USER_FLOW_MS_TEAMS_YES_NO,
        FieldId.STATS_USER_COURSE_FLOW_MS_TEAMS_PERCENTAGE,
        FieldId.STATS_USER_COURSE_TIME_SPENT_BY_FLOW_MS_TEAMS,
        "FlowMsTeams",
    ),
}


# ===== EXTRA FIELDS =====


def user_extra_field(ctx: CompileContext, field: ResolvedExtraField, user_key: str) -> None:
    cufv = A.CORE_USER_FIELD_VALUE.value
    ctx.join(cufv, _join_on(T.CORE_USER_FIELD_VALUE, A.CORE_USER_FIELD_VALUE,
                            f"{ctx.col(cufv, 'id_user')} = {user_key}"))
    column = f"field_{field.ref.field_id}"
    value = ctx.v(cufv, column)

    if field.type == AdditionalFieldsTypes.DATE.value:
        expr = ctx.dialect.date_format(value)
    elif field.type == AdditionalFieldsTypes.DROPDOWN.value:
        alias = f"{A.CORE_USER_FIELD_DROPDOWN_TRANSLATIONS.value}_{field.ref.field_id}"
        ctx.join(alias, (
            f"LEFT JOIN {T.CORE_USER_FIELD_DROPDOWN_TRANSLATIONS.value} AS {alias}"
            f" ON {ctx.col(alias, 'id_option')} = {ctx.col(cufv, column)}"
            f" AND {ctx.col(alias, 'lang_code')} = {ctx.dialect.literal(ctx.session.lang)}"
        ))
        expr = ctx.v(alias, "translation")
    elif field.type == AdditionalFieldsTypes.YES_NO.value:
        expr = (
            f"CASE WHEN {value} = 1 THEN {ctx.t(FieldTranslation.YES)}"
            f" WHEN {value} = 2 THEN {ctx.t(FieldTranslation.NO)} ELSE '' END"
        )
    elif field.type == AdditionalFieldsTypes.COUNTRY.value:
        alias = f"{A.CORE_COUNTRY.value}_{field.ref.field_id}"
        ctx.join(alias, (
            f"LEFT JOIN {T.CORE_COUNTRY.value} AS {alias}"
            f" ON {ctx.col(alias, 'id_country')} = {ctx.col(cufv, column)}"
        ))
        expr = ctx.v(alias, "name_country")
    elif field.type in TEXT_LIKE_FIELD_TYPES:
        expr = value
    else:
        expr = "''"
    ctx.select(field.key, expr)


def course_field_value(ctx: CompileContext, field: ResolvedExtraField, value_alias: str) -> str:
    """Expression of a course-like custom field read from the joined value table ``value_alias``."""
    column = f"field_{field.ref.field_id}"
    value = ctx.v(value_alias, column)

    if field.type == AdditionalFieldsTypes.DATE.value:
        return ctx.dialect.date_format(value)
    if field.type == AdditionalFieldsTypes.DROPDOWN.value:
        alias = f"{A.LEARNING_COURSE_FIELD_DROPDOWN_TRANSLATIONS.value}_{value_alias}_{field.ref.field_id}"
        ctx.join(alias, (
            f"LEFT JOIN {T.LEARNING_COURSE_FIELD_DROPDOWN_TRANSLATIONS.value} AS {alias}"
            f" ON {ctx.col(alias, 'id_option')} = {ctx.col(value_alias, column)}"
            f" AND {ctx.col(alias, 'lang_code')} = {ctx.dialect.literal(ctx.session.lang)}"
        ))
        return ctx.v(alias, "translation")
    if field.type == AdditionalFieldsTypes.YES_NO.value:
        return ctx.yes_no(f"{value} = 1")
    if field.type in TEXT_LIKE_FIELD_TYPES:
        return value
    return "''"


def course_extra_field(ctx: CompileContext, field: ResolvedExtraField, course_key: str) -> None:
    lcfv = A.LEARNING_COURSE_FIELD_VALUE.value
    ctx.join(lcfv, _join_on(T.LEARNING_COURSE_FIELD_VALUE, A.LEARNING_COURSE_FIELD_VALUE,
                            f"{ctx.col(lcfv, 'id_course')} = {course_key}"))
    ctx.select(field.key, course_field_value(ctx, field, lcfv))


def courseuser_extra_field(ctx: CompileContext, field: ResolvedExtraField) -> None:
    enrollment_fields = ctx.col(LCU, "enrollment_fields")
    raw = ctx.dialect.json_scalar(enrollment_fields, str(field.ref.field_id))

    if field.type == AdditionalFieldsTypes.DROPDOWN.value:
        alias = f"{A.LEARNING_ENROLLMENT_FIELDS_DROPDOWN.value}_{field.ref.field_id}"
        ctx.join(alias, (
            f"LEFT JOIN {T.LEARNING_ENROLLMENT_FIELDS_DROPDOWN.value} AS {alias}"
            f" ON {ctx.col(alias, 'id')} = CAST({raw} AS INTEGER)"
        ))
        translation = ctx.col(alias, "translation")
        lang_code = ctx.lang_code
        default_code = ctx.platform.default_language_code
        expr = ctx.dialect.if_(
            f"{translation} LIKE '%\"{lang_code}\":%'",
            ctx.dialect.json_scalar_key(translation, lang_code),
            ctx.dialect.json_scalar_key(translation, default_code),
        )
        expr = ctx.value(expr)
    else:
        expr = ctx.value(raw)
    ctx.select(field.key, expr)


def build_enrollment_extra_field(ctx: CompileContext, field: ResolvedExtraField) -> None:
    """Extra fields of the user, course and enrollment entities anchored on ``lcu_a``."""
    if field.ref.entity == ExtraFieldEntity.USER:
        user_extra_field(ctx, field, ctx.col(LCU, "idUser"))
    elif field.ref.entity == ExtraFieldEntity.COURSE:
        course_extra_field(ctx, field, ctx.col(LCU, "idCourse"))
    elif field.ref.entity == ExtraFieldEntity.COURSEUSER:
        courseuser_extra_field(ctx, field)
    else:
        ctx.select(field.key, "''", "''")
