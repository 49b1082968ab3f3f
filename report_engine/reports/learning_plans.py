"""Learning plans - Users Statistics: one row per learning plan with enrollment counters (Snowflake only)."""

from typing import Dict

from report_engine.catalog.enums import Dialect, EnrollmentStatuses, ReportType
from report_engine.catalog.fields import ExtraFieldEntity, FieldId, FieldTranslation
from report_engine.catalog.tables import TableAliases as A
from report_engine.catalog.tables import Tables as T
from report_engine.extra_fields.resolver import ResolvedExtraField
from report_engine.query.dates import build_date_filter, compose_date_options
from report_engine.reports.base import FieldBuilder, ReportCompiler, default_date_option
from report_engine.reports.common_fields import CU, _join_on, course_field_value
from report_engine.reports.context import CompileContext
from report_engine.reports.schemas import LearningPlansFilter, UsersFilter
from report_engine.reports.session import SessionContext

LCP = A.LEARNING_COURSEPATH.value
LCPU = A.LEARNING_COURSEPATH_USER.value
LCPC = A.LEARNING_COURSEPATH_COURSES.value
LCPCC = A.LEARNING_COURSEPATH_COURSES_COUNT.value
LCPUCC = A.LEARNING_COURSEPATH_USER_COMPLETED_COURSES.value
MANDATORY_COMPLETE = A.LEARNING_COURSEPATH_COURSESUSER_MANDATORY_COMPLETE_WITH.value

LP_UNDER_MAINTENANCE = 0
LP_PUBLISHED = 1


def _column(field: FieldId, column: str):
    def builder(ctx: CompileContext) -> None:
        ctx.select(field.value, ctx.v(LCP, column))
    return builder


def _datetime_column(field: FieldId, column: str):
    def builder(ctx: CompileContext) -> None:
        ctx.select(field.value, ctx.datetime(ctx.v(LCP, column)))
    return builder


def lp_status(ctx: CompileContext) -> None:
    status = ctx.v(LCP, "status")
    expr = (
        f"CASE WHEN {status} = {LP_UNDER_MAINTENANCE} THEN {ctx.t(FieldTranslation.LP_UNDER_MAINTENANCE)}"
        f" WHEN {status} = {LP_PUBLISHED} THEN {ctx.t(FieldTranslation.LP_PUBLISHED)}"
        f" ELSE {ctx.dialect.cast_varchar(status)} END"
    )
    ctx.select(FieldId.LP_STATUS.value, expr)


def lp_language(ctx: CompileContext) -> None:
    cll = A.CORE_LANG_LANGUAGE.value
    ctx.join(cll, _join_on(T.CORE_LANG_LANGUAGE, A.CORE_LANG_LANGUAGE,
                           f"{ctx.col(LCP, 'lang_code')} = {ctx.col(cll, 'lang_code')}"))
    ctx.select(FieldId.LP_LANGUAGE.value, ctx.v(cll, "lang_description"))


def _join_path_courses(ctx: CompileContext) -> None:
    ctx.join(LCPC, _join_on(T.LEARNING_COURSEPATH_COURSES, A.LEARNING_COURSEPATH_COURSES,
                            f"{ctx.col(LCPC, 'id_path')} = {ctx.col(LCP, 'id_path')}"))


def lp_associated_courses(ctx: CompileContext) -> None:
    _join_path_courses(ctx)
    # one row per enrolled user and course after the join
    ctx.select(FieldId.LP_ASSOCIATED_COURSES.value, f"COUNT(DISTINCT {ctx.col(LCPC, 'id_item')})")


def lp_mandatory_associated_courses(ctx: CompileContext) -> None:
    _join_path_courses(ctx)
    expr = (
        f"COUNT(DISTINCT CASE WHEN {ctx.col(LCPC, 'is_required')} = 1"
        f" THEN {ctx.col(LCPC, 'id_item')} END)"
    )
    ctx.select(FieldId.LP_MANDATORY_ASSOCIATED_COURSES.value, expr)


# ===== STATISTICS =====


def _join_progress(ctx: CompileContext) -> None:
    ctx.join(LCPUCC, _join_on(
        T.LEARNING_COURSEPATH_USER_COMPLETED_COURSES, A.LEARNING_COURSEPATH_USER_COMPLETED_COURSES,
        f"{ctx.col(LCPUCC, 'idUser')} = {ctx.col(LCPU, 'idUser')}"
        f" AND {ctx.col(LCPUCC, 'idPath')} = {ctx.col(LCPU, 'id_path')}",
    ))
    ctx.join(LCPCC, _join_on(
        T.LEARNING_COURSEPATH_COURSES_COUNT, A.LEARNING_COURSEPATH_COURSES_COUNT,
        f"{ctx.col(LCPCC, 'id_path')} = {ctx.col(LCPU, 'id_path')}",
    ))


def _progress_condition(ctx: CompileContext, state: str) -> str:
    completed = f"COALESCE({ctx.col(LCPUCC, 'completedCoursesMandatory')}, 0)"
    mandatory = ctx.col(LCPCC, "coursesMandatory")
    if state == "completed":
        return f"{completed} = {mandatory}"
    if state == "in_progress":
        return f"{completed} > 0 AND {completed} < {mandatory}"
    return f"{completed} = 0 AND {mandatory} > 0"


def _enrolled_users(ctx: CompileContext) -> str:
    return f"COUNT(DISTINCT {ctx.col(LCPU, 'idUser')})"


def _users_in_state(ctx: CompileContext, state: str) -> str:
    _join_progress(ctx)
    return f"COUNT(DISTINCT CASE WHEN {_progress_condition(ctx, state)} THEN {ctx.col(LCPU, 'idUser')} END)"


def _state_count(field: FieldId, state: str):
    def builder(ctx: CompileContext) -> None:
        ctx.select(field.value, _users_in_state(ctx, state))
    return builder


def _state_percentage(field: FieldId, state: str):
    def builder(ctx: CompileContext) -> None:
        enrolled = _enrolled_users(ctx)
        expr = (
            f"CASE WHEN {enrolled} > 0"
            f" THEN ROUND({_users_in_state(ctx, state)} * 100.0 / {enrolled}, 2) ELSE 0 END"
        )
        ctx.select(field.value, expr)
    return builder


def stats_path_enrolled_users(ctx: CompileContext) -> None:
    ctx.select(FieldId.STATS_PATH_ENROLLED_USERS.value, _enrolled_users(ctx))


LP_BUILDERS: Dict[str, FieldBuilder] = {
    FieldId.LP_NAME.value: _column(FieldId.LP_NAME, "path_name"),
    FieldId.LP_CODE.value: _column(FieldId.LP_CODE, "path_code"),
    FieldId.LP_CREDITS.value: _column(FieldId.LP_CREDITS, "credits"),
    FieldId.LP_UUID.value: _column(FieldId.LP_UUID, "uuid"),
    FieldId.LP_LAST_EDIT.value: _datetime_column(FieldId.LP_LAST_EDIT, "last_update"),
    FieldId.LP_CREATION_DATE.value: _datetime_column(FieldId.LP_CREATION_DATE, "create_date"),
    FieldId.LP_DESCRIPTION.value: _column(FieldId.LP_DESCRIPTION, "path_descr"),
    FieldId.LP_STATUS.value: lp_status,
    FieldId.LP_LANGUAGE.value: lp_language,
    FieldId.LP_ASSOCIATED_COURSES.value: lp_associated_courses,
    FieldId.LP_MANDATORY_ASSOCIATED_COURSES.value: lp_mandatory_associated_courses,
}

STATISTICS_BUILDERS: Dict[str, FieldBuilder] = {
    FieldId.STATS_PATH_ENROLLED_USERS.value: stats_path_enrolled_users,
    FieldId.STATS_PATH_COMPLETED_USERS.value: _state_count(FieldId.STATS_PATH_COMPLETED_USERS, "completed"),
    FieldId.STATS_PATH_COMPLETED_USERS_PERCENTAGE.value: _state_percentage(
        FieldId.STATS_PATH_COMPLETED_USERS_PERCENTAGE, "completed"
    ),
    FieldId.STATS_PATH_IN_PROGRESS_USERS.value: _state_count(FieldId.STATS_PATH_IN_PROGRESS_USERS, "in_progress"),
    FieldId.STATS_PATH_IN_PROGRESS_USERS_PERCENTAGE.value: _state_percentage(
        FieldId.STATS_PATH_IN_PROGRESS_USERS_PERCENTAGE, "in_progress"
    ),
    FieldId.STATS_PATH_NOT_STARTED_USERS.value: _state_count(FieldId.STATS_PATH_NOT_STARTED_USERS, "not_started"),
    FieldId.STATS_PATH_NOT_STARTED_USERS_PERCENTAGE.value: _state_percentage(
        FieldId.STATS_PATH_NOT_STARTED_USERS_PERCENTAGE, "not_started"
    ),
}


def mandatory_complete_cte(ctx: CompileContext, completion: str) -> str:
    """Users who completed every mandatory course of a plan, filtered on their last completion date."""
    name = ctx.dialect.column_name
    lcu = A.LEARNING_COURSEUSER.value
    path, user = ctx.col(LCPU, "id_path"), ctx.col(LCPU, "idUser")
    return (
        f"SELECT {path} AS {name('id_path')}, {user} AS {name('idUser')}"
        f" FROM {T.LEARNING_COURSEPATH_USER.value} AS {LCPU}"
        f" JOIN {T.LEARNING_COURSEPATH_COURSES.value} AS {LCPC} ON {path} = {ctx.col(LCPC, 'id_path')}"
        f" JOIN {T.LEARNING_COURSEUSER.value} AS {lcu} ON {user} = {ctx.col(lcu, 'idUser')}"
        f" AND {ctx.col(lcu, 'idCourse')} = {ctx.col(LCPC, 'id_item')}"
        f" AND {ctx.col(lcu, 'status')} = {EnrollmentStatuses.COMPLETED.value}"
        f" JOIN {T.LEARNING_COURSEPATH_COURSES_COUNT.value} AS {LCPCC} ON {ctx.col(LCPCC, 'id_path')} = {ctx.col(LCPC, 'id_path')}"
        f" WHERE ({ctx.col(LCPC, 'is_required')} = 1 OR {ctx.col(LCPC, 'is_required')} IS NULL)"
        f"{ctx.filter('learning_plans').clause(path)}"
        f"{ctx.filter('users').clause(user)}"
        f" GROUP BY {user}, {path}, {ctx.col(LCPCC, 'coursesMandatory')}"
        f" HAVING {ctx.col(LCPCC, 'coursesMandatory')} = COUNT(DISTINCT {ctx.col(lcu, 'idCourse')})"
        f" AND {completion}"
    )


class LearningPlanStatisticsCompiler(ReportCompiler):
    """Per-plan counts of enrolled, completed, in-progress and not-started users."""

    report_type = ReportType.LP_USERS_STATISTICS
    supported_dialects = (Dialect.SNOWFLAKE,)
    filter_kinds = ("users", "learning_plans")

    def field_builders(self) -> Dict[str, FieldBuilder]:
        return {**LP_BUILDERS, **STATISTICS_BUILDERS}

    def build_extra_field(self, ctx: CompileContext, field: ResolvedExtraField) -> None:
        if field.ref.entity != ExtraFieldEntity.LP:
            ctx.select(field.key, "''")
            return
        lcpfv = A.LEARNING_COURSEPATH_FIELD_VALUE.value
        ctx.join(lcpfv, _join_on(T.LEARNING_COURSEPATH_FIELD_VALUE, A.LEARNING_COURSEPATH_FIELD_VALUE,
                                 f"{ctx.col(lcpfv, 'id_path')} = {ctx.col(LCP, 'id_path')}"))
        ctx.select(field.key, course_field_value(ctx, field, lcpfv))

    def build_base(self, ctx: CompileContext) -> None:
        name = ctx.dialect.column_name
        definition = ctx.definition
        users = definition.users
        ctx.wrap_values = True

        plans = f"SELECT * FROM {T.LEARNING_COURSEPATH.value} WHERE TRUE"
        plans += ctx.filter("learning_plans").clause(name("id_path"))

        enrollments = f"SELECT * FROM {T.LEARNING_COURSEPATH_USER.value} WHERE TRUE"
        enrollments += ctx.filter("learning_plans").clause(name("id_path"))
        enrollments += ctx.filter("users").clause(name("idUser"))
        enrollments += ctx.user_fields_clause(name("idUser"))
        enrollments += compose_date_options(ctx.dialect, definition.conditions, [
            (name("date_assign"), definition.enrollment_date),
        ])

        valid_users = f"SELECT {name('idst')} FROM {T.CORE_USER.value} WHERE {name('userid')} <> '/Anonymous'"
        if users is not None and users.hide_deactivated:
            valid_users += f" AND {name('valid')} = {ctx.dialect.true_flag()}"
        if users is not None and users.hide_expired_users:
            valid_users += f" AND ({name('expiration')} IS NULL OR {name('expiration')} > {ctx.dialect.now()})"

        ctx.live.add_from(f"({plans}) AS {LCP}")
        ctx.live.add_from(f"JOIN ({enrollments}) AS {LCPU} ON {ctx.col(LCP, 'id_path')} = {ctx.col(LCPU, 'id_path')}")
        ctx.live.add_from(f"JOIN ({valid_users}) AS {CU} ON {ctx.col(CU, 'idst')} = {ctx.col(LCPU, 'idUser')}")

        lcu = A.LEARNING_COURSEUSER.value
        completion = build_date_filter(
            ctx.dialect, f"MAX({ctx.col(lcu, 'date_complete')})", definition.completion_date
        )
        if completion:
            ctx.live.add_cte(T.LEARNING_COURSEPATH_COURSESUSER_MANDATORY_COMPLETE_WITH.value,
                             mandatory_complete_cte(ctx, completion))
            ctx.live.add_from(
                f"JOIN {T.LEARNING_COURSEPATH_COURSESUSER_MANDATORY_COMPLETE_WITH.value} AS {MANDATORY_COMPLETE}"
                f" ON {ctx.col(MANDATORY_COMPLETE, 'idUser')} = {ctx.col(LCPU, 'idUser')}"
                f" AND {ctx.col(MANDATORY_COMPLETE, 'id_path')} = {ctx.col(LCPU, 'id_path')}"
            )
        ctx.live.add_group_by(ctx.col(LCP, "id_path"))

    def default_filters(self, session: SessionContext) -> Dict[str, object]:
        return {
            "users": UsersFilter(),
            "learning_plans": LearningPlansFilter(),
            "enrollment_date": default_date_option(),
            "completion_date": default_date_option(),
        }
