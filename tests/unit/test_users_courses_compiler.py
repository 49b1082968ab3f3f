"""
Unit tests for the Users - Courses compiler: base query, filters, limits,
unmapped fields, custom fields and the live/archive UNION.
"""

import re

import pytest

from report_engine.catalog.enums import (
    CourseTypeFilter,
    DateConditions,
    Dialect,
    EnrollmentTypes,
    ReportType,
    SortDirection,
    SortSelector,
)
from report_engine.extra_fields.resolver import WarehouseInspector
from report_engine.query.fragments import CompileStats
from report_engine.reports.factory import get_compiler
from report_engine.reports.context import CompileContext
from report_engine.reports.schemas import (
    CoursesFilter,
    DateOption,
    EnrollmentFilter,
    SelectionItem,
    SortingOptions,
    UsersFilter,
)
from report_engine.services.protocol import ExtraFieldMetadata

USERS_COURSES = ReportType.USERS_COURSES


def select_aliases(branch: str):
    """Quoted column aliases of one SELECT branch"""
    return re.findall(r' AS ("[^"]+")', branch.split(" FROM ", 1)[0])


def archiving_in_last(days: int) -> DateOption:
    return DateOption(any=False, type="relative", operator="isAfter", days=days)


class TestUsersCoursesBaseQuery:
    """Default definition compiled for both dialects"""

    async def test_default_definition_athena(self, make_compiler, make_definition, admin_session, split_sql):
        compiler = make_compiler(USERS_COURSES)
        definition = make_definition(USERS_COURSES, admin_session)

        sql = await compiler.compile(definition, admin_session)

        assert sql == (
            'SELECT SUBSTR(cu.userid, 2) AS "Username", lc.name AS "_COURSE_NAME"'
            " FROM (SELECT * FROM learning_courseuser_aggregate WHERE TRUE) AS lcu_a"
            " JOIN (SELECT * FROM core_user WHERE TRUE AND valid = 1) AS cu ON cu.idst = lcu_a.idUser"
            " JOIN (SELECT * FROM learning_course WHERE TRUE) AS lc ON lc.idCourse = lcu_a.idCourse"
            " WHERE TRUE AND cu.userid <> '/Anonymous'"
            ' ORDER BY "Username" ASC LIMIT 1000000'
        )
        assert compiler.columns == ["Username", "_COURSE_NAME"]
        assert len(split_sql(sql)) == 1

    async def test_default_definition_snowflake(self, make_compiler, make_definition, admin_session):
        compiler = make_compiler(USERS_COURSES, Dialect.SNOWFLAKE)
        definition = make_definition(USERS_COURSES, admin_session)

        sql = await compiler.compile(definition, admin_session)

        assert 'SUBSTR(cu."userid", 2) AS "Username"' in sql
        assert 'JOIN (SELECT * FROM core_user WHERE TRUE AND "valid" = 1) AS cu' in sql
        assert 'ON lc."idcourse" = lcu_a."idcourse"' in sql
        assert "ARBITRARY" not in sql

    async def test_labels_are_translated(self, make_compiler, make_definition, admin_session, metadata):
        metadata.translations = {"Username": "Nome utente"}
        compiler = make_compiler(USERS_COURSES)

        sql = await compiler.compile(make_definition(USERS_COURSES, admin_session), admin_session)

        assert 'AS "Nome utente"' in sql
        assert compiler.columns[0] == "Nome utente"


class TestUsersCoursesLimits:
    """Export limits and preview"""

    async def test_preview_has_no_order_by(self, make_compiler, make_definition, admin_session):
        sql = await make_compiler(USERS_COURSES).compile(
            make_definition(USERS_COURSES, admin_session), admin_session, is_preview=True
        )
        assert "ORDER BY" not in sql
        assert sql.endswith(" LIMIT 100")

    @pytest.mark.parametrize("limit, from_schedule, expected", [
        (50, False, " LIMIT 50"),
        (5000000, False, " LIMIT 1000000"),
        (0, True, " LIMIT 2000000"),
    ])
    async def test_limit_is_capped(self, make_compiler, make_definition, admin_session, limit, from_schedule, expected):
        sql = await make_compiler(USERS_COURSES).compile(
            make_definition(USERS_COURSES, admin_session), admin_session, limit=limit, from_schedule=from_schedule
        )
        assert sql.endswith(expected)

    async def test_custom_sort(self, make_compiler, make_definition, admin_session):
        definition = make_definition(
            USERS_COURSES,
            admin_session,
            sorting_options=SortingOptions(
                selector=SortSelector.CUSTOM, selected_field="course_name", order_by=SortDirection.DESC
            ),
        )
        sql = await make_compiler(USERS_COURSES).compile(definition, admin_session)
        assert 'ORDER BY "_COURSE_NAME" DESC' in sql


class TestUsersCoursesFields:
    """Unmapped, gated and custom fields"""

    async def test_unmapped_field_is_skipped(self, make_compiler, make_definition, admin_session):
        compiler = make_compiler(USERS_COURSES)
        definition = make_definition(USERS_COURSES, admin_session, fields=["user_userid", "no_such_field"])

        sql = await compiler.compile(definition, admin_session)

        assert compiler.stats.unmapped_fields == ["no_such_field"]
        assert compiler.columns == ["Username"]
        assert "no_such_field" not in sql

    async def test_gated_field_is_dropped(self, make_compiler, make_definition, admin_session):
        compiler = make_compiler(USERS_COURSES)
        definition = make_definition(USERS_COURSES, admin_session, fields=["user_userid", "enrollment_archived"])

        await compiler.compile(definition, admin_session)

        assert compiler.stats.dropped_fields == ["enrollment_archived"]
        assert compiler.columns == ["Username"]

    async def test_joins_are_added_once(self, make_compiler, make_definition, admin_session):
        definition = make_definition(USERS_COURSES, admin_session, fields=["user_level", "user_level"])
        sql = await make_compiler(USERS_COURSES).compile(definition, admin_session)
        assert sql.count("LEFT JOIN core_user_levels AS cul") == 1

    async def test_user_extra_field(self, make_compiler, make_definition, admin_session, metadata):
        metadata.user_extra_fields = [ExtraFieldMetadata(id=3, title="Cost center", type="textfield")]
        compiler = make_compiler(USERS_COURSES)
        definition = make_definition(USERS_COURSES, admin_session, fields=["user_userid", "user_extrafield_3"])

        sql = await compiler.compile(definition, admin_session)

        assert "LEFT JOIN core_user_field_value AS cufv ON cufv.id_user = lcu_a.idUser" in sql
        assert 'cufv.field_3 AS "Cost center"' in sql
        assert compiler.columns == ["Username", "Cost center"]

    async def test_unmaterialized_extra_field_is_empty(self, metadata, make_definition, admin_session):
        metadata.user_extra_fields = [ExtraFieldMetadata(id=3, title="Cost center", type="textfield")]
        inspector = WarehouseInspector(known_columns={"core_user_field_value": ["id_user", "field_1"]})
        compiler = get_compiler(USERS_COURSES, Dialect.ATHENA, metadata, inspector)
        definition = make_definition(USERS_COURSES, admin_session, fields=["user_extrafield_3"])

        sql = await compiler.compile(definition, admin_session)

        assert "'' AS \"Cost center\"" in sql
        assert "core_user_field_value" not in sql

    async def test_unknown_extra_field_is_unmapped(self, make_compiler, make_definition, admin_session):
        compiler = make_compiler(USERS_COURSES)
        definition = make_definition(USERS_COURSES, admin_session, fields=["user_userid", "user_extrafield_99"])

        await compiler.compile(definition, admin_session)

        assert compiler.stats.unmapped_fields == ["user_extrafield_99"]


class TestUsersCoursesFilters:
    """Entity, status and date filters"""

    async def test_empty_user_selection_matches_nothing(self, make_compiler, make_definition, admin_session):
        definition = make_definition(USERS_COURSES, admin_session, users=UsersFilter(all=False))
        sql = await make_compiler(USERS_COURSES).compile(definition, admin_session)
        assert "FROM learning_courseuser_aggregate WHERE TRUE AND FALSE" in sql

    async def test_selected_courses(self, make_compiler, make_definition, admin_session):
        definition = make_definition(
            USERS_COURSES,
            admin_session,
            courses=CoursesFilter(all=False, courses=[SelectionItem(id=7), SelectionItem(id=3)]),
        )
        sql = await make_compiler(USERS_COURSES).compile(definition, admin_session)
        assert "AND idCourse IN (3,7)" in sql
        assert "FROM learning_course WHERE TRUE AND idCourse IN (3,7)" in sql

    async def test_power_user_restriction(self, make_metadata, make_definition, power_user_session):
        metadata = make_metadata(power_user_session)
        metadata.pu_users = [5, 6]
        metadata.pu_courses = [9]
        compiler = get_compiler(USERS_COURSES, Dialect.ATHENA, metadata, WarehouseInspector())

        sql = await compiler.compile(make_definition(USERS_COURSES, power_user_session), power_user_session)

        assert "AND idUser IN (5,6)" in sql
        assert "AND idCourse IN (9)" in sql

    async def test_completed_status_only(self, make_compiler, make_definition, admin_session):
        enrollment = EnrollmentFilter(
            in_progress=False,
            not_started=False,
            waiting_list=False,
            suspended=False,
            enrollments_to_confirm=False,
            subscribed=False,
            overbooking=False,
        )
        definition = make_definition(USERS_COURSES, admin_session, enrollment=enrollment)
        sql = await make_compiler(USERS_COURSES).compile(definition, admin_session)
        assert (
            "AND ((lcu_a.status IN (2) AND NOT (lcu_a.waiting = 1 AND lc.course_type = 'elearning')))" in sql
        )

    async def test_enrollment_date(self, make_compiler, make_definition, admin_session):
        definition = make_definition(
            USERS_COURSES,
            admin_session,
            enrollment_date=DateOption(any=False, type="relative", operator="isAfter", days=7),
        )
        sql = await make_compiler(USERS_COURSES).compile(definition, admin_session)
        assert "AND ((date_inscr >= DATE_ADD('day', -7, CURRENT_DATE)))" in sql

    async def test_ilt_course_type_means_classroom(self, make_compiler, make_definition, archive_session):
        definition = make_definition(
            USERS_COURSES,
            archive_session,
            courses=CoursesFilter(course_type=CourseTypeFilter.ILT),
            enrollment=EnrollmentFilter(enrollment_types=EnrollmentTypes.ACTIVE_AND_ARCHIVED),
        )
        sql = await make_compiler(USERS_COURSES).compile(definition, archive_session)

        assert "AND course_type = 'classroom'" in sql
        assert "AND JSON_EXTRACT_SCALAR(aec.course_info, '$.type') = 'classroom'" in sql
        assert "course_type <> " not in sql
        assert "'webinar'" not in sql

    async def test_user_custom_field_filter(self, make_compiler, make_definition, archive_session, metadata):
        metadata.user_extra_fields = [ExtraFieldMetadata(id=4, title="Region", type="dropdown")]
        definition = make_definition(
            USERS_COURSES,
            archive_session,
            users=UsersFilter(is_user_add_fields=True),
            user_additional_fields_filter={4: 12},
            enrollment=EnrollmentFilter(enrollment_types=EnrollmentTypes.ACTIVE_AND_ARCHIVED),
        )
        sql = await make_compiler(USERS_COURSES).compile(definition, archive_session)

        matching = "IN (SELECT id_user FROM core_user_field_value WHERE field_4 = 12)"
        assert f"FROM core_user WHERE TRUE AND idst {matching}" in sql
        assert f"AND aec.user_id {matching}" in sql

    async def test_user_custom_field_filter_needs_flag(self, make_compiler, make_definition, admin_session, metadata):
        metadata.user_extra_fields = [ExtraFieldMetadata(id=4, title="Region", type="dropdown")]
        definition = make_definition(USERS_COURSES, admin_session, user_additional_fields_filter={4: 12})
        sql = await make_compiler(USERS_COURSES).compile(definition, admin_session)
        assert "core_user_field_value" not in sql


class TestUsersCoursesArchive:
    """Live/archive UNION driven by enrollment types and the archive toggle"""

    async def test_active_and_archived(self, make_compiler, make_definition, archive_session, split_sql):
        definition = make_definition(
            USERS_COURSES,
            archive_session,
            enrollment=EnrollmentFilter(enrollment_types=EnrollmentTypes.ACTIVE_AND_ARCHIVED),
        )
        compiler = make_compiler(USERS_COURSES)

        sql = await compiler.compile(definition, archive_session)

        assert sql.count(" UNION ") == 1
        live, archive = sql.split(" UNION ")
        assert select_aliases(live) == select_aliases(archive)
        assert len(select_aliases(live)) == 2
        assert "FROM archived_enrollment_course AS aec" in sql
        assert "JSON_EXTRACT_SCALAR(aec.user_info, '$.username')" in sql
        assert len(split_sql(sql)) == 1

    async def test_archiving_date_alone_keeps_only_archive(self, make_compiler, make_definition, archive_session):
        definition = make_definition(
            USERS_COURSES,
            archive_session,
            archiving_date=archiving_in_last(30),
            enrollment=EnrollmentFilter(enrollment_types=EnrollmentTypes.ACTIVE_AND_ARCHIVED),
        )
        sql = await make_compiler(USERS_COURSES).compile(definition, archive_session)

        assert " UNION " not in sql
        assert "learning_courseuser_aggregate" not in sql
        assert "aec.created_at >= DATE_ADD('day', -30, CURRENT_DATE)" in sql

    @pytest.mark.parametrize("conditions, union_count", [
        (DateConditions.ALL, 0),
        (DateConditions.AT_LEAST_ONE, 1),
    ])
    async def test_archiving_date_with_other_dates(
        self, make_compiler, make_definition, archive_session, conditions, union_count
    ):
        definition = make_definition(
            USERS_COURSES,
            archive_session,
            conditions=conditions,
            archiving_date=archiving_in_last(30),
            enrollment_date=archiving_in_last(7),
            enrollment=EnrollmentFilter(enrollment_types=EnrollmentTypes.ACTIVE_AND_ARCHIVED),
        )
        sql = await make_compiler(USERS_COURSES).compile(definition, archive_session)

        assert sql.count(" UNION ") == union_count
        assert "aec.created_at" in sql
        assert ("learning_courseuser_aggregate" in sql) == bool(union_count)

    async def test_archiving_date_without_type_still_counts(self, make_compiler, make_definition, archive_session):
        """Only the any flag decides the UNION layout"""
        definition = make_definition(
            USERS_COURSES,
            archive_session,
            archiving_date=DateOption(any=False, type="", operator=""),
            enrollment=EnrollmentFilter(enrollment_types=EnrollmentTypes.ACTIVE_AND_ARCHIVED),
        )
        sql = await make_compiler(USERS_COURSES).compile(definition, archive_session)

        assert " UNION " not in sql
        assert "learning_courseuser_aggregate" not in sql
        assert "aec.created_at" not in sql

    async def test_archive_only_query_keeps_shared_ctes(self, make_compiler, make_definition, archive_session):
        definition = make_definition(
            USERS_COURSES,
            archive_session,
            fields=["user_userid", "course_name", "course_skills"],
            enrollment=EnrollmentFilter(enrollment_types=EnrollmentTypes.ARCHIVED),
        )
        sql = await make_compiler(USERS_COURSES).compile(definition, archive_session)

        assert sql.startswith("WITH skills_with AS (")
        assert sql.count("skills_with AS (") == 1
        assert "LEFT JOIN skills_with AS" in sql
        assert "learning_courseuser_aggregate" not in sql

    async def test_ctes_of_a_skipped_live_branch_are_dropped(self, make_compiler, make_definition, archive_session):
        compiler = make_compiler(USERS_COURSES)
        definition = make_definition(
            USERS_COURSES,
            archive_session,
            enrollment=EnrollmentFilter(enrollment_types=EnrollmentTypes.ARCHIVED),
        )
        ctx = CompileContext(
            definition=definition,
            session=archive_session,
            dialect=compiler.dialect,
            labels={},
            translations={},
            filters={},
            extra_fields={},
            stats=CompileStats(),
            with_archive=True,
        )
        compiler.build_base(ctx)
        ctx.select("user_userid", "cu.userid", "aec.user_id")
        ctx.live.add_cte("live_only_with", "SELECT 1")

        sql = compiler.assemble(ctx, limit=0, is_preview=True, from_schedule=False)

        assert "live_only_with" not in sql
        assert sql.startswith("SELECT aec.user_id AS")

    async def test_archived_only(self, make_compiler, make_definition, archive_session):
        definition = make_definition(
            USERS_COURSES,
            archive_session,
            enrollment=EnrollmentFilter(enrollment_types=EnrollmentTypes.ARCHIVED),
        )
        sql = await make_compiler(USERS_COURSES).compile(definition, archive_session)
        assert " UNION " not in sql
        assert "learning_courseuser_aggregate" not in sql
        assert sql.startswith("SELECT SUBSTR(JSON_EXTRACT_SCALAR(aec.user_info, '$.username'), 2) AS \"Username\"")

    async def test_active_only(self, make_compiler, make_definition, archive_session):
        definition = make_definition(USERS_COURSES, archive_session)
        sql = await make_compiler(USERS_COURSES).compile(definition, archive_session)
        assert " UNION " not in sql
        assert "archived_enrollment_course" not in sql

    async def test_without_toggle_archive_is_ignored(self, make_compiler, make_definition, admin_session):
        definition = make_definition(
            USERS_COURSES,
            admin_session,
            enrollment=EnrollmentFilter(enrollment_types=EnrollmentTypes.ARCHIVED),
        )
        sql = await make_compiler(USERS_COURSES).compile(definition, admin_session)
        assert "archived_enrollment_course" not in sql
        assert "learning_courseuser_aggregate" in sql

    async def test_archive_gated_field_on_archive_platform(self, make_compiler, make_definition, archive_session):
        definition = make_definition(
            USERS_COURSES,
            archive_session,
            fields=["user_userid", "enrollment_archived"],
            enrollment=EnrollmentFilter(enrollment_types=EnrollmentTypes.ACTIVE_AND_ARCHIVED),
        )
        compiler = make_compiler(USERS_COURSES)

        sql = await compiler.compile(definition, archive_session)

        live, archive = sql.split(" UNION ")
        assert "'_NO' AS" in live
        assert "'_YES' AS" in archive
        assert compiler.stats.dropped_fields == []
