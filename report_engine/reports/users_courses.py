"""Users - Courses: one row per enrollment, live and archived."""

from typing import Dict

from report_engine.catalog.enums import CourseTypeFilter, CourseTypes, CourseuserLevels, ReportType
from report_engine.catalog.tables import Tables as T
from report_engine.extra_fields.resolver import ResolvedExtraField
from report_engine.legacy.field_maps import LEGACY_COURSE_FIELDS, LEGACY_ENROLLMENT_FIELDS, LEGACY_USER_FIELDS
from report_engine.query.dates import compose_date_options
from report_engine.reports.base import FieldBuilder, ReportCompiler, default_date_option
from report_engine.reports.common_fields import (
    COURSE_BUILDERS,
    CU,
    ENROLLMENT_BUILDERS,
    LC,
    LCU,
    STATS_BUILDERS,
    USER_BUILDERS,
    build_enrollment_extra_field,
    enrollment_status_filter,
)
from report_engine.reports.context import ARCHIVE, CompileContext
from report_engine.reports.schemas import (
    CoursesFilter,
    EnrollmentFilter,
    LearningPlansFilter,
    UsersFilter,
)
from report_engine.reports.session import SessionContext


def course_type_predicate(course_type_filter: CourseTypeFilter, column: str) -> str:
    if course_type_filter == CourseTypeFilter.E_LEARNING:
        return f" AND {column} = '{CourseTypes.ELEARNING.value}'"
    if course_type_filter == CourseTypeFilter.ILT:
        return f" AND {column} = '{CourseTypes.CLASSROOM.value}'"
    return ""


def user_subquery(ctx: CompileContext) -> str:
    """``core_user`` restricted by the deactivated/expired user options."""
    name = ctx.dialect.column_name
    users = ctx.definition.users
    sql = f"SELECT * FROM {T.CORE_USER.value} WHERE TRUE"
    sql += ctx.user_fields_clause(name("idst"))
    if users is not None and users.hide_deactivated:
        sql += f" AND {name('valid')} = {ctx.dialect.true_flag()}"
    if users is not None and users.hide_expired_users:
        sql += f" AND ({name('expiration')} IS NULL OR {name('expiration')} > {ctx.dialect.now()})"
    return sql


def course_subquery(ctx: CompileContext) -> str:
    """``learning_course`` restricted by the course list, course type and expiration date."""
    name = ctx.dialect.column_name
    definition = ctx.definition
    sql = f"SELECT * FROM {T.LEARNING_COURSE.value} WHERE TRUE"
    sql += ctx.filter("courses").clause(name("idCourse"))
    if definition.courses is not None:
        sql += course_type_predicate(definition.courses.course_type, name("course_type"))
    sql += compose_date_options(ctx.dialect, definition.conditions, [
        (name("date_end"), definition.course_expiration_date),
    ])
    return sql


class UsersCoursesCompiler(ReportCompiler):
    report_type = ReportType.USERS_COURSES
    supports_archive = True
    filter_kinds = ("users", "courses")

    def field_builders(self) -> Dict[str, FieldBuilder]:
        return {**USER_BUILDERS, **COURSE_BUILDERS, **ENROLLMENT_BUILDERS, **STATS_BUILDERS}

    def build_extra_field(self, ctx: CompileContext, field: ResolvedExtraField) -> None:
        build_enrollment_extra_field(ctx, field)

    def build_base(self, ctx: CompileContext) -> None:
        self._build_live(ctx)
        if ctx.archive is not None:
            self._build_archive(ctx)

    def _build_live(self, ctx: CompileContext) -> None:
        name = ctx.dialect.column_name
        definition = ctx.definition
        users = definition.users

        enrollments = f"SELECT * FROM {T.LEARNING_COURSEUSER_AGGREGATE.value} WHERE TRUE"
        enrollments += ctx.filter("users").clause(name("idUser"))
        enrollments += ctx.filter("courses").clause(name("idCourse"))
        if users is not None and users.show_only_learners:
            enrollments += f" AND {name('level')} = {CourseuserLevels.STUDENT.value}"
        enrollments += compose_date_options(ctx.dialect, definition.conditions, [
            (name("date_inscr"), definition.enrollment_date),
            (name("date_complete"), definition.completion_date),
        ])

        ctx.live.add_from(f"({enrollments}) AS {LCU}")
        ctx.live.add_from(f"JOIN ({user_subquery(ctx)}) AS {CU} ON {ctx.col(CU, 'idst')} = {ctx.col(LCU, 'idUser')}")
        ctx.live.add_from(f"JOIN ({course_subquery(ctx)}) AS {LC} ON {ctx.col(LC, 'idCourse')} = {ctx.col(LCU, 'idCourse')}")
        ctx.live.add_where(f"AND {ctx.col(CU, 'userid')} <> '/Anonymous'")
        ctx.live.add_where(enrollment_status_filter(
            ctx, ctx.col(LCU, "status"), ctx.col(LCU, "waiting"), ctx.col(LC, "course_type")
        ))

    def _build_archive(self, ctx: CompileContext) -> None:
        definition = ctx.definition
        archive = ctx.archive
        archive.add_from(f"{T.ARCHIVED_ENROLLMENT_COURSE.value} AS {ARCHIVE}")
        archive.add_where(ctx.filter("users").clause(ctx.archive_col("user_id")))
        archive.add_where(ctx.user_fields_clause(ctx.archive_col("user_id")))
        archive.add_where(ctx.filter("courses").clause(ctx.archive_col("course_id")))
        if definition.users is not None and definition.users.show_only_learners:
            archive.add_where(f"AND {ctx.archive_col('enrollment_level')} = {CourseuserLevels.STUDENT.value}")
        if definition.courses is not None:
            archive.add_where(course_type_predicate(
                definition.courses.course_type, ctx.archive_json("course_info", "type")
            ))

        course_end = ctx.dialect.parse_date(ctx.archive_json("course_info", "end_at"))
        archive.add_where(compose_date_options(ctx.dialect, definition.conditions, [
            (course_end, definition.course_expiration_date),
        ]))
        archive.add_where(compose_date_options(ctx.dialect, definition.conditions, [
            (ctx.archive_col("enrollment_enrolled_at"), definition.enrollment_date),
            (ctx.archive_col("enrollment_completed_at"), definition.completion_date),
            (ctx.archive_col("created_at"), definition.archiving_date),
        ]))
        archive.add_where(enrollment_status_filter(ctx, ctx.archive_col("enrollment_status")))

    def default_filters(self, session: SessionContext) -> Dict[str, object]:
        filters = {
            "users": UsersFilter(hide_deactivated=True),
            "courses": CoursesFilter(),
            "learning_plans": LearningPlansFilter(),
            "enrollment_date": default_date_option(),
            "completion_date": default_date_option(),
            "course_expiration_date": default_date_option(),
            "enrollment": EnrollmentFilter(),
        }
        if session.platform.multiple_enrollment_completions:
            filters["archiving_date"] = default_date_option()
        return filters

    def legacy_field_maps(self):
        return {
            "user": LEGACY_USER_FIELDS,
            "course": LEGACY_COURSE_FIELDS,
            "enrollment": LEGACY_ENROLLMENT_FIELDS,
        }
