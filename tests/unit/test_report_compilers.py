"""
Unit tests for the enrollment time, classroom, surveys, assets and learning
plan compilers, plus the compiler registry.
"""

import pytest

from report_engine.catalog.enums import Dialect, EnrollmentTypes, ReportType
from report_engine.core.exceptions import UnknownReportTypeError
from report_engine.reports.factory import REPORT_COMPILERS, get_compiler
from report_engine.reports.schemas import (
    AssetsFilter,
    CoursesFilter,
    DateOption,
    EnrollmentFilter,
    LearningPlansFilter,
    SelectionItem,
    SessionAttendanceType,
    SessionsFilter,
    SurveysFilter,
    UsersFilter,
)


def items(*ids):
    return [SelectionItem(id=entity_id) for entity_id in ids]


def last_days(days: int) -> DateOption:
    return DateOption(any=False, type="relative", operator="isAfter", days=days)


class TestCompilerRegistry:
    def test_every_report_type_has_a_compiler(self):
        assert set(REPORT_COMPILERS) == set(ReportType)

    @pytest.mark.parametrize("report_type", ["Users - Badges", "", None])
    def test_unknown_report_type(self, metadata, report_type):
        with pytest.raises(UnknownReportTypeError):
            get_compiler(report_type, Dialect.ATHENA, metadata)

    def test_lookup_by_value(self, metadata):
        compiler = get_compiler("Users - Courses", Dialect.ATHENA, metadata)
        assert compiler.report_type == ReportType.USERS_COURSES


class TestEnrollmentTimeCompiler:
    """Active enrollments with a validity window"""

    async def test_default_definition(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.USERS_ENROLLMENT_TIME
        compiler = make_compiler(report_type)

        sql = await compiler.compile(make_definition(report_type, admin_session), admin_session)

        assert sql.startswith('SELECT SUBSTR(cu.userid, 2) AS "Username", lc.name AS "_COURSE_NAME"')
        assert "JOIN (SELECT * FROM core_user WHERE TRUE AND valid = 1) AS cu" in sql
        assert "AND (lcu_a.status = 0 OR lcu_a.status = 1)" in sql
        assert "AND (lc.valid_time > 0 OR lcu_a.date_expire_validity IS NOT NULL)" in sql
        assert "UNION" not in sql
        assert "GROUP BY" not in sql

    async def test_days_left(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.USERS_ENROLLMENT_TIME
        compiler = make_compiler(report_type)
        definition = make_definition(report_type, admin_session, fields=["user_userid", "courseuser_days_left"])

        sql = await compiler.compile(definition, admin_session)

        assert (
            "CASE WHEN lcu_a.date_expire_validity IS NULL THEN NULL"
            " ELSE DATE_DIFF('day', CURRENT_DATE, CAST(lcu_a.date_expire_validity AS DATE)) END AS \"Days Left\""
        ) in sql
        assert compiler.columns == ["Username", "Days Left"]

    async def test_course_expiration_filter(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.USERS_ENROLLMENT_TIME
        definition = make_definition(report_type, admin_session, course_expiration_date=last_days(3))
        sql = await make_compiler(report_type).compile(definition, admin_session)
        assert "FROM learning_course WHERE TRUE AND ((date_end >= DATE_ADD('day', -3, CURRENT_DATE)))" in sql

    async def test_show_only_learners(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.USERS_ENROLLMENT_TIME
        definition = make_definition(report_type, admin_session, users=UsersFilter(show_only_learners=True))
        sql = await make_compiler(report_type).compile(definition, admin_session)
        assert "FROM learning_courseuser_aggregate WHERE TRUE AND level = 3" in sql


class TestClassroomCompiler:
    """Classroom enrollments joined to their sessions"""

    async def test_default_definition(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.USERS_CLASSROOM_SESSIONS
        compiler = make_compiler(report_type)

        sql = await compiler.compile(make_definition(report_type, admin_session), admin_session)

        assert 'SUBSTR(ARBITRARY(cu.userid), 2) AS "Username"' in sql
        assert 'ARBITRARY(ltcusd.name) AS "Session name"' in sql
        assert "AND course_type = 'classroom') AS lc" in sql
        assert (
            "JOIN (SELECT * FROM lt_courseuser_session_details WHERE TRUE) AS ltcusd"
            " ON ltcusd.course_id = lcu_a.idCourse AND ltcusd.id_user = lcu_a.idUser"
        ) in sql
        assert "GROUP BY lcu_a.idUser, lcu_a.idCourse, ltcusd.id_session" in sql
        assert compiler.columns == ["Username", "_COURSE_NAME", "Session name"]

    async def test_selected_sessions_and_instructors(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.USERS_CLASSROOM_SESSIONS
        definition = make_definition(
            report_type,
            admin_session,
            sessions=SessionsFilter(all=False, sessions=items(4)),
            courses=CoursesFilter(instructors=items(11)),
        )
        sql = await make_compiler(report_type).compile(definition, admin_session)

        assert "AND ltcusd.id_session IN (4)" in sql
        assert "AND id_session IN (SELECT id_session FROM lt_course_session_instructor WHERE TRUE AND id_user IN (11))" in sql

    async def test_session_status_with_waiting_list(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.USERS_CLASSROOM_SESSIONS
        enrollment = EnrollmentFilter(not_started=False, in_progress=False, suspended=False)
        definition = make_definition(report_type, admin_session, enrollment=enrollment)

        sql = await make_compiler(report_type).compile(definition, admin_session)

        assert "AND ((ltcusd.status IN (2) AND ltcusd.waiting = 0) OR (ltcusd.status = -2))" in sql

    async def test_attendance_type(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.USERS_CLASSROOM_SESSIONS
        attendance = SessionAttendanceType(blended=False, flexible=False, full_online=True, full_onsite=False)
        definition = make_definition(report_type, admin_session, session_attendance_type=attendance)

        sql = await make_compiler(report_type).compile(definition, admin_session)

        assert "AND ltcusd.attendance_type IN ('online')" in sql

    async def test_show_only_learners_excludes_instructors(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.USERS_CLASSROOM_SESSIONS
        definition = make_definition(report_type, admin_session, users=UsersFilter(show_only_learners=True))

        sql = await make_compiler(report_type).compile(definition, admin_session)

        assert "LEFT JOIN lt_course_session_instructor AS ltcsi" in sql
        assert "AND ltcsi.id_user IS NULL" in sql

    async def test_archive_branch(self, make_compiler, make_definition, archive_session, split_sql):
        report_type = ReportType.USERS_CLASSROOM_SESSIONS
        definition = make_definition(
            report_type,
            archive_session,
            enrollment=EnrollmentFilter(enrollment_types=EnrollmentTypes.ACTIVE_AND_ARCHIVED),
        )
        sql = await make_compiler(report_type).compile(definition, archive_session)

        live, archive = sql.split(" UNION ")
        assert "lt_courseuser_session_details" in live
        assert "JOIN archived_enrollment_session AS aes ON aec.id = aes.id_archived_enrollment_course" in archive
        assert "JSON_EXTRACT_SCALAR(aec.course_info, '$.type') = 'classroom'" in archive
        assert len(split_sql(sql)) == 1


class TestSurveysCompiler:
    """Individual survey answers"""

    async def test_default_definition(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.SURVEYS_INDIVIDUAL_ANSWERS
        compiler = make_compiler(report_type)

        sql = await compiler.compile(make_definition(report_type, admin_session), admin_session)

        assert sql.startswith("WITH learning_pollquest_with AS (SELECT ")
        assert (
            "FROM (SELECT * FROM core_group WHERE TRUE AND (hidden = 'false' OR groupid LIKE '/oc|_%' ESCAPE '|')) AS cg"
        ) in sql
        assert "JOIN (SELECT * FROM learning_polltrack WHERE status = 'valid') AS lpt" in sql
        assert "AND lpq.type_quest NOT IN ('title', 'break_page')" in sql
        assert "GROUP BY cu.idst, lcu_a.idCourse, lpq.id_quest, lpq.title_quest" in sql
        assert 'ORDER BY "Survey Title" ASC' in sql
        assert compiler.columns[:2] == ["Survey Title", "Question"]

    async def test_likert_questions_are_expanded(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.SURVEYS_INDIVIDUAL_ANSWERS
        sql = await make_compiler(report_type).compile(make_definition(report_type, admin_session), admin_session)
        assert "CONCAT(lpq.title_quest, ' - ', lpqa.answer) AS title_quest" in sql
        assert "WHERE type_quest <> 'likert_scale' UNION SELECT" in sql

    async def test_selected_surveys_and_completion_date(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.SURVEYS_INDIVIDUAL_ANSWERS
        definition = make_definition(
            report_type,
            admin_session,
            surveys=SurveysFilter(all=False, surveys=items(8)),
            survey_completion_date=last_days(7),
        )
        sql = await make_compiler(report_type).compile(definition, admin_session)

        assert "JOIN (SELECT * FROM learning_poll WHERE TRUE AND id_poll IN (8)) AS lp" in sql
        assert "AND lco.last_complete >= DATE_ADD('day', -7, CURRENT_DATE)" in sql

    async def test_mandatory_question_is_yes_no(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.SURVEYS_INDIVIDUAL_ANSWERS
        definition = make_definition(report_type, admin_session, fields=["question_mandatory"])
        sql = await make_compiler(report_type).compile(definition, admin_session)
        assert "CASE WHEN CAST(ARBITRARY(lpq.mandatory) AS INTEGER) > 0 THEN '_YES' ELSE '_NO' END" in sql


class TestAssetsCompiler:
    """Asset statistics, grouped per asset"""

    async def test_default_definition(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.ASSETS_STATISTICS
        compiler = make_compiler(report_type)

        sql = await compiler.compile(make_definition(report_type, admin_session), admin_session)

        assert sql.startswith('SELECT ARBITRARY(c.title) AS "Asset Name" FROM (SELECT * FROM app7020_content WHERE TRUE) AS c')
        assert "JOIN app7020_channel_assets AS cha ON cha.idAsset = c.id AND cha.asset_type = 1" in sql
        assert "LEFT JOIN app7020_content_published AS cop" in sql
        assert "WHERE TRUE AND c.conversion_status = 20 AND c.is_private = 0" in sql
        assert "FROM rbac_assignment WHERE item_name = '/framework/level/erpadmin')" in sql
        assert 'GROUP BY c.id ORDER BY "Asset Name" ASC' in sql

    async def test_selected_assets(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.ASSETS_STATISTICS
        definition = make_definition(report_type, admin_session, assets=AssetsFilter(all=False, assets=items(3)))
        sql = await make_compiler(report_type).compile(definition, admin_session)
        assert "FROM app7020_content WHERE TRUE AND id IN (3)" in sql
        assert "idChannel IN" not in sql

    async def test_channel_only_selection(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.ASSETS_STATISTICS
        definition = make_definition(report_type, admin_session, assets=AssetsFilter(all=False, channels=items(5)))

        sql = await make_compiler(report_type).compile(definition, admin_session)

        assert "FROM (SELECT * FROM app7020_content WHERE TRUE) AS c" in sql
        assert "AND FALSE" not in sql
        assert "AND cha.idChannel IN (5) GROUP BY c.id" in sql

    async def test_published_date(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.ASSETS_STATISTICS
        definition = make_definition(report_type, admin_session, published_date=last_days(30))
        sql = await make_compiler(report_type).compile(definition, admin_session)
        assert "FROM app7020_content WHERE TRUE AND created >= DATE_ADD('day', -30, CURRENT_DATE)" in sql

    async def test_snowflake_uses_any_value(self, make_compiler, make_definition, admin_session):
        report_type = ReportType.ASSETS_STATISTICS
        compiler = make_compiler(report_type, Dialect.SNOWFLAKE)
        sql = await compiler.compile(make_definition(report_type, admin_session), admin_session)
        assert 'ANY_VALUE(c."title") AS "Asset Name"' in sql
        assert "ARBITRARY" not in sql


class TestLearningPlanStatisticsCompiler:
    """Learning plan statistics (Snowflake only)"""

    async def test_athena_is_not_supported(self, make_compiler, make_definition, lp_session):
        report_type = ReportType.LP_USERS_STATISTICS
        with pytest.raises(NotImplementedError):
            await make_compiler(report_type).compile(make_definition(report_type, lp_session), lp_session)

    async def test_default_definition(self, make_compiler, make_definition, lp_session):
        report_type = ReportType.LP_USERS_STATISTICS
        compiler = make_compiler(report_type, Dialect.SNOWFLAKE)

        sql = await compiler.compile(make_definition(report_type, lp_session), lp_session)

        assert sql.startswith(
            'SELECT ANY_VALUE(lcp."path_name") AS "Learning Plan Name"'
            " FROM (SELECT * FROM learning_coursepath WHERE TRUE) AS lcp"
        )
        assert 'JOIN (SELECT "idst" FROM core_user WHERE "userid" <> \'/Anonymous\') AS cu' in sql
        assert 'GROUP BY lcp."id_path" ORDER BY "Learning Plan Name" ASC' in sql
        assert "WITH " not in sql

    async def test_statistics(self, make_compiler, make_definition, lp_session):
        report_type = ReportType.LP_USERS_STATISTICS
        definition = make_definition(
            report_type,
            lp_session,
            fields=["lp_name", "stats_path_enrolled_users", "stats_path_completed_users"],
        )
        sql = await make_compiler(report_type, Dialect.SNOWFLAKE).compile(definition, lp_session)

        assert 'COUNT(DISTINCT lcpu."iduser") AS "Users Enrolled In Learning Plan"' in sql
        assert sql.count("LEFT JOIN learning_coursepath_courses_count") == 1

    async def test_gated_fields_need_the_toggle(self, make_compiler, make_definition, admin_session, lp_session):
        report_type = ReportType.LP_USERS_STATISTICS
        fields = ["lp_name", "lp_uuid", "lp_status"]

        compiler = make_compiler(report_type, Dialect.SNOWFLAKE)
        await compiler.compile(make_definition(report_type, admin_session, fields=fields), admin_session)
        assert compiler.stats.dropped_fields == ["lp_uuid", "lp_status"]

        compiler = make_compiler(report_type, Dialect.SNOWFLAKE)
        await compiler.compile(make_definition(report_type, lp_session, fields=fields), lp_session)
        assert compiler.stats.dropped_fields == []
        assert len(compiler.columns) == 3

    async def test_selected_plans_and_enrollment_date(self, make_compiler, make_definition, lp_session):
        report_type = ReportType.LP_USERS_STATISTICS
        definition = make_definition(
            report_type,
            lp_session,
            learning_plans=LearningPlansFilter(all=False, learning_plans=items(9)),
            enrollment_date=last_days(2),
        )
        sql = await make_compiler(report_type, Dialect.SNOWFLAKE).compile(definition, lp_session)

        assert 'FROM learning_coursepath WHERE TRUE AND "id_path" IN (9)) AS lcp' in sql
        assert (
            'FROM learning_coursepath_user WHERE TRUE AND "id_path" IN (9)'
            ' AND (("date_assign" >= DATEADD(day, -2, CURRENT_DATE())))) AS lcpu'
        ) in sql

    async def test_completion_date_adds_mandatory_complete_cte(self, make_compiler, make_definition, lp_session):
        report_type = ReportType.LP_USERS_STATISTICS
        definition = make_definition(report_type, lp_session, completion_date=last_days(10))

        sql = await make_compiler(report_type, Dialect.SNOWFLAKE).compile(definition, lp_session)

        assert sql.startswith("WITH learning_coursepath_coursesuser_mandatory_complete_with AS (SELECT ")
        assert "HAVING lcpcc.\"coursesmandatory\" = COUNT(DISTINCT lcu.\"idcourse\")" in sql
        assert "AND MAX(lcu.\"date_complete\") >= DATEADD(day, -10, CURRENT_DATE())" in sql
        assert "JOIN learning_coursepath_coursesuser_mandatory_complete_with AS lcpcumcw" in sql


class TestDialectParity:
    """Both dialects expose the same columns in the same order"""

    @pytest.mark.parametrize("report_type", [
        ReportType.USERS_COURSES,
        ReportType.USERS_ENROLLMENT_TIME,
        ReportType.USERS_CLASSROOM_SESSIONS,
        ReportType.SURVEYS_INDIVIDUAL_ANSWERS,
        ReportType.ASSETS_STATISTICS,
    ])
    async def test_same_columns(self, make_compiler, make_definition, admin_session, report_type):
        athena = make_compiler(report_type, Dialect.ATHENA)
        snowflake = make_compiler(report_type, Dialect.SNOWFLAKE)
        definition = make_definition(report_type, admin_session, fields=list(athena.catalog.entries))

        await athena.compile(definition, admin_session)
        await snowflake.compile(definition, admin_session)

        assert athena.columns
        assert athena.columns == snowflake.columns
        assert athena.stats.unmapped_fields == snowflake.stats.unmapped_fields
