"""Users - Course Enrollment Time: active enrollments with a validity window and the days left in it."""

from typing import Dict

from report_engine.catalog.enums import CourseuserLevels, EnrollmentStatuses, ReportType
from report_engine.catalog.fields import FieldId
from report_engine.catalog.tables import Tables as T
from report_engine.extra_fields.resolver import ResolvedExtraField
from report_engine.legacy.field_maps import LEGACY_COURSE_FIELDS, LEGACY_ENROLLMENT_TIME_FIELDS, LEGACY_USER_FIELDS
from report_engine.reports.base import FieldBuilder, ReportCompiler, default_date_option
from report_engine.reports.common_fields import (
    COURSE_BUILDERS,
    CU,
    ENROLLMENT_BUILDERS,
    LC,
    LCU,
    USER_BUILDERS,
    build_enrollment_extra_field,
)
from report_engine.reports.context import CompileContext
from report_engine.reports.schemas import CoursesFilter, UsersFilter
from report_engine.reports.session import SessionContext
from report_engine.reports.users_courses import course_subquery, user_subquery

ENROLLMENT_FIELDS = (
    FieldId.COURSEUSER_LEVEL,
    FieldId.COURSEUSER_DATE_INSCR,
    FieldId.COURSEUSER_STATUS,
    FieldId.COURSEUSER_DATE_BEGIN_VALIDITY,
    FieldId.COURSE_E_SIGNATURE_HASH,
)


def courseuser_expiration_date(ctx: CompileContext) -> None:
    ctx.select(FieldId.COURSEUSER_EXPIRATION_DATE.value, ctx.datetime(ctx.col(LCU, "date_expire_validity")))


def courseuser_days_left(ctx: CompileContext) -> None:
    expire = ctx.col(LCU, "date_expire_validity")
    expr = f"CASE WHEN {expire} IS NULL THEN NULL ELSE {ctx.dialect.days_left(expire)} END"
    ctx.select(FieldId.COURSEUSER_DAYS_LEFT.value, expr)


class EnrollmentTimeCompiler(ReportCompiler):
    """
    Subscribed or in-progress enrollments that can expire: either the course
    has a validity period or the enrollment has an explicit end date.
    """

    report_type = ReportType.USERS_ENROLLMENT_TIME
    filter_kinds = ("users", "courses")

    def field_builders(self) -> Dict[str, FieldBuilder]:
        enrollment = {field.value: ENROLLMENT_BUILDERS[field.value] for field in ENROLLMENT_FIELDS}
        return {
            **USER_BUILDERS,
            **COURSE_BUILDERS,
            **enrollment,
            FieldId.COURSEUSER_EXPIRATION_DATE.value: courseuser_expiration_date,
            FieldId.COURSEUSER_DAYS_LEFT.value: courseuser_days_left,
        }

    def build_extra_field(self, ctx: CompileContext, field: ResolvedExtraField) -> None:
        build_enrollment_extra_field(ctx, field)

    def build_base(self, ctx: CompileContext) -> None:
        name = ctx.dialect.column_name
        users = ctx.definition.users

        enrollments = f"SELECT * FROM {T.LEARNING_COURSEUSER_AGGREGATE.value} WHERE TRUE"
        enrollments += ctx.filter("users").clause(name("idUser"))
        enrollments += ctx.filter("courses").clause(name("idCourse"))
        if users is not None and users.show_only_learners:
            enrollments += f" AND {name('level')} = {CourseuserLevels.STUDENT.value}"

        ctx.live.add_from(f"({enrollments}) AS {LCU}")
        ctx.live.add_from(f"JOIN ({user_subquery(ctx)}) AS {CU} ON {ctx.col(CU, 'idst')} = {ctx.col(LCU, 'idUser')}")
        ctx.live.add_from(f"JOIN ({course_subquery(ctx)}) AS {LC} ON {ctx.col(LC, 'idCourse')} = {ctx.col(LCU, 'idCourse')}")

        status = ctx.col(LCU, "status")
        ctx.live.add_where(f"AND {ctx.col(CU, 'userid')} <> '/Anonymous'")
        ctx.live.add_where(
            f"AND ({status} = {EnrollmentStatuses.SUBSCRIBED.value} OR {status} = {EnrollmentStatuses.IN_PROGRESS.value})"
        )
        ctx.live.add_where(
            f"AND ({ctx.col(LC, 'valid_time')} > 0 OR {ctx.col(LCU, 'date_expire_validity')} IS NOT NULL)"
        )

    def default_filters(self, session: SessionContext) -> Dict[str, object]:
        return {
            "users": UsersFilter(hide_deactivated=True),
            "courses": CoursesFilter(),
            "course_expiration_date": default_date_option(),
        }

    def legacy_field_maps(self) -> Dict[str, Dict[str, str]]:
        return {
            "user": LEGACY_USER_FIELDS,
            "course": LEGACY_COURSE_FIELDS,
            "enrollment": LEGACY_ENROLLMENT_TIME_FIELDS,
        }
