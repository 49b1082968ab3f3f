"""
Unit tests for the entity filter calculators.
"""

from report_engine.catalog.enums import ReportType
from report_engine.filters.calculators import (
    CourseFilterCalculator,
    IdFilter,
    LearningPlanFilterCalculator,
    StaticListCalculator,
    UserFilterCalculator,
    channels_filter,
    instructors_filter,
    user_additional_field_conditions,
)
from report_engine.reports.schemas import (
    AssetsFilter,
    CoursesFilter,
    LearningPlansFilter,
    ReportDefinition,
    SelectionItem,
    SessionsFilter,
    UsersFilter,
)
from report_engine.services.protocol import BranchDetails, ExtraFieldMetadata, GroupDetails


def items(*ids, descendants=False):
    return [SelectionItem(id=entity_id, descendants=descendants) for entity_id in ids]


class TestIdFilter:
    def test_clauses(self):
        assert IdFilter.unrestricted().clause("x") == ""
        assert IdFilter.nothing().clause("x") == " AND FALSE"
        assert IdFilter.of([3, 1, 3]).clause("x") == " AND x IN (1,3)"

    def test_intersect(self):
        assert IdFilter.unrestricted().intersect(IdFilter.of([1])) == IdFilter.of([1])
        assert IdFilter.of([1, 2]).intersect(IdFilter.unrestricted()) == IdFilter.of([1, 2])
        assert IdFilter.of([1, 2]).intersect(IdFilter.of([2, 3])) == IdFilter.of([2])
        assert IdFilter.of([1]).intersect(IdFilter.of([2])).is_empty


class TestUserFilterCalculator:
    """Users, groups and branches"""

    async def test_all_users_is_unrestricted(self, make_definition, admin_session, metadata):
        definition = make_definition(ReportType.USERS_COURSES, admin_session)
        result = await UserFilterCalculator(definition, admin_session, metadata).calculate()
        assert result.is_unrestricted
        assert "get_groups" not in metadata.calls

    async def test_empty_explicit_selection_matches_nothing(self, make_definition, admin_session, metadata):
        definition = make_definition(ReportType.USERS_COURSES, admin_session, users=UsersFilter(all=False))
        result = await UserFilterCalculator(definition, admin_session, metadata).calculate()
        assert result.is_empty
        assert result.clause("lcu.idUser") == " AND FALSE"

    async def test_users_and_group_members(self, make_definition, admin_session, metadata):
        metadata.groups = {10: GroupDetails(id=10, members=[5, 6])}
        definition = make_definition(
            ReportType.USERS_COURSES,
            admin_session,
            users=UsersFilter(all=False, users=items(1), groups=items(10)),
        )
        result = await UserFilterCalculator(definition, admin_session, metadata).calculate()
        assert result == IdFilter.of([1, 5, 6])

    async def test_branch_descendants(self, make_definition, admin_session, metadata):
        metadata.branches = {
            1: BranchDetails(id=1, children=[2], members=[100]),
            2: BranchDetails(id=2, children=[3], members=[200]),
            3: BranchDetails(id=3, children=[], members=[300]),
            4: BranchDetails(id=4, children=[5], members=[400]),
            5: BranchDetails(id=5, children=[], members=[500]),
        }
        definition = make_definition(
            ReportType.USERS_COURSES,
            admin_session,
            users=UsersFilter(all=False, branches=items(1, descendants=True) + items(4)),
        )
        result = await UserFilterCalculator(definition, admin_session, metadata).calculate()
        assert result == IdFilter.of([100, 200, 300, 400])

    async def test_power_user_is_intersected(self, make_definition, power_user_session, make_metadata):
        metadata = make_metadata(power_user_session)
        metadata.pu_users = [1, 2]
        definition = make_definition(
            ReportType.USERS_COURSES, power_user_session, users=UsersFilter(all=False, users=items(2, 3))
        )
        result = await UserFilterCalculator(definition, power_user_session, metadata).calculate()
        assert result == IdFilter.of([2])

    async def test_power_user_all_users_gets_assigned_users(self, make_definition, power_user_session, make_metadata):
        metadata = make_metadata(power_user_session)
        metadata.pu_users = [7, 8]
        definition = make_definition(ReportType.USERS_COURSES, power_user_session)
        result = await UserFilterCalculator(definition, power_user_session, metadata).calculate()
        assert result == IdFilter.of([7, 8])

    async def test_visibility_check_can_be_skipped(self, make_definition, power_user_session, make_metadata):
        metadata = make_metadata(power_user_session)
        definition = make_definition(ReportType.USERS_COURSES, power_user_session)
        result = await UserFilterCalculator(definition, power_user_session, metadata).calculate(check_visibility=False)
        assert result.is_unrestricted
        assert "get_pu_users" not in metadata.calls

    async def test_power_user_without_assignments_sees_nothing(
        self, make_definition, power_user_session, make_metadata
    ):
        metadata = make_metadata(power_user_session)
        definition = make_definition(ReportType.USERS_COURSES, power_user_session)
        result = await UserFilterCalculator(definition, power_user_session, metadata).calculate()
        assert result.is_empty


    async def test_manager_types_limit_to_subordinates(self, make_definition, admin_session, metadata):
        metadata.subordinates = {1: [7, 8], 2: [9]}
        definition = make_definition(
            ReportType.USERS_COURSES,
            admin_session,
            users=UsersFilter(all=False, users=items(7, 9, 20), manager_types=[1, 2]),
        )
        result = await UserFilterCalculator(definition, admin_session, metadata).calculate()
        assert result == IdFilter.of([7, 9])
        assert "get_user_ids_by_manager" in metadata.calls

    async def test_manager_with_all_users_gets_subordinates(self, make_definition, admin_session, metadata):
        metadata.subordinates = {1: [7, 8]}
        definition = make_definition(ReportType.USERS_COURSES, admin_session, users=UsersFilter(manager_types=[1]))
        result = await UserFilterCalculator(definition, admin_session, metadata).calculate()
        assert result == IdFilter.of([7, 8])

    async def test_manager_without_subordinates_sees_nothing(self, make_definition, admin_session, metadata):
        definition = make_definition(ReportType.USERS_COURSES, admin_session, users=UsersFilter(manager_types=[3]))
        result = await UserFilterCalculator(definition, admin_session, metadata).calculate()
        assert result.clause("lcu.idUser") == " AND FALSE"


class TestOtherCalculators:
    async def test_courses(self, make_definition, admin_session, metadata):
        definition = make_definition(
            ReportType.USERS_COURSES, admin_session, courses=CoursesFilter(all=False, courses=items(4, 2))
        )
        result = await CourseFilterCalculator(definition, admin_session, metadata).calculate()
        assert str(result) == "2,4"

    async def test_power_user_courses(self, make_definition, power_user_session, make_metadata):
        metadata = make_metadata(power_user_session)
        metadata.pu_courses = [2]
        definition = make_definition(
            ReportType.USERS_COURSES, power_user_session, courses=CoursesFilter(all=False, courses=items(4, 2))
        )
        result = await CourseFilterCalculator(definition, power_user_session, metadata).calculate()
        assert result == IdFilter.of([2])

    async def test_learning_plans(self, make_definition, power_user_session, make_metadata):
        metadata = make_metadata(power_user_session)
        metadata.pu_learning_plans = [9]
        definition = make_definition(
            ReportType.USERS_COURSES,
            power_user_session,
            learning_plans=LearningPlansFilter(all=False, learning_plans=items(9, 10)),
        )
        result = await LearningPlanFilterCalculator(definition, power_user_session, metadata).calculate()
        assert result == IdFilter.of([9])

    async def test_static_list_ignores_power_user(self, make_definition, power_user_session, make_metadata):
        metadata = make_metadata(power_user_session)
        definition = make_definition(
            ReportType.USERS_CLASSROOM_SESSIONS,
            power_user_session,
            sessions=SessionsFilter(all=False, sessions=items(3)),
        )
        calculator = StaticListCalculator(definition, power_user_session, metadata, "sessions", "sessions")
        assert await calculator.calculate() == IdFilter.of([3])

    def test_instructors_and_channels(self, make_definition, admin_session):
        classroom = make_definition(
            ReportType.USERS_CLASSROOM_SESSIONS,
            admin_session,
            courses=CoursesFilter(instructors=items(11)),
        )
        assert instructors_filter(classroom) == IdFilter.of([11])

        assets = make_definition(
            ReportType.ASSETS_STATISTICS, admin_session, assets=AssetsFilter(all=False, channels=items(5))
        )
        assert channels_filter(assets) == IdFilter.of([5])
        assert channels_filter(make_definition(ReportType.ASSETS_STATISTICS, admin_session)).is_unrestricted


class TestUserAdditionalFieldConditions:
    """Dropdown custom-field filter of the users section"""

    async def test_disabled_without_flag(self, make_definition, admin_session, metadata):
        definition = make_definition(
            ReportType.USERS_COURSES, admin_session, user_additional_fields_filter={4: 12}
        )
        assert await user_additional_field_conditions(definition, metadata) == {}

    async def test_only_dropdown_fields_are_kept(self, make_definition, admin_session, metadata):
        metadata.user_extra_fields = [
            ExtraFieldMetadata(id=4, title="Region", type="dropdown"),
            ExtraFieldMetadata(id=5, title="Badge number", type="textfield"),
        ]
        definition = make_definition(
            ReportType.USERS_COURSES,
            admin_session,
            users=UsersFilter(is_user_add_fields=True),
            user_additional_fields_filter={4: 12, 5: 1, 6: 2},
        )
        assert await user_additional_field_conditions(definition, metadata) == {4: 12}

    def test_camel_case_payload(self, make_definition, admin_session):
        definition = make_definition(ReportType.USERS_COURSES, admin_session)
        payload = definition.model_dump(mode="json", by_alias=True)
        payload["users"]["isUserAddFields"] = True
        payload["userAdditionalFieldsFilter"] = {"4": 12}

        parsed = ReportDefinition.model_validate(payload)

        assert parsed.users.is_user_add_fields is True
        assert parsed.user_additional_fields_filter == {4: 12}
