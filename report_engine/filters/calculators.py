"""
Entity filter calculators.

Each calculator turns one entity filter of a report definition into an
``IdFilter``: either "no restriction" or an explicit (possibly empty) id set.
Power users are additionally intersected with the entities assigned to them,
and "my team" reports with the caller's subordinates.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from report_engine.catalog.enums import AdditionalFieldsTypes
from report_engine.reports.schemas import ReportDefinition, SelectionItem
from report_engine.reports.session import SessionContext
from report_engine.services.protocol import MetadataService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdFilter:
    """``ids is None`` means unrestricted; an empty tuple matches nothing."""

    ids: Optional[Tuple[int, ...]] = None

    @classmethod
    def unrestricted(cls) -> "IdFilter":
        return cls(None)

    @classmethod
    def nothing(cls) -> "IdFilter":
        return cls(())

    @classmethod
    def of(cls, ids: Iterable[int]) -> "IdFilter":
        return cls(tuple(sorted({int(entity_id) for entity_id in ids})))

    @property
    def is_unrestricted(self) -> bool:
        return self.ids is None

    @property
    def is_empty(self) -> bool:
        return self.ids == ()

    def intersect(self, other: "IdFilter") -> "IdFilter":
        if self.is_unrestricted:
            return other
        if other.is_unrestricted:
            return self
        return IdFilter.of(set(self.ids) & set(other.ids))

    def clause(self, column: str) -> str:
        """`` AND column IN (...)``, `` AND FALSE`` for the empty set, or nothing."""
        if self.is_unrestricted:
            return ""
        if self.is_empty:
            return " AND FALSE"
        return f" AND {column} IN ({self})"

    def __str__(self) -> str:
        if self.ids is None:
            return ""
        return ",".join(str(entity_id) for entity_id in self.ids)


def _selected_ids(items: Iterable[SelectionItem]) -> Set[int]:
    return {item.id for item in items}


class EntityFilterCalculator:
    """Base calculator; subclasses read their own entity filter."""

    def __init__(self, definition: ReportDefinition, session: SessionContext, metadata: MetadataService):
        self.definition = definition
        self.session = session
        self.metadata = metadata

    async def calculate(self, check_visibility: bool = True) -> IdFilter:
        raise NotImplementedError("Method not implemented.")

    def _restrict_to_power_user(self, check_visibility: bool) -> bool:
        return check_visibility and self.session.is_power_user


class UserFilterCalculator(EntityFilterCalculator):
    """Users picked directly, through groups, or through branches (optionally with descendants)."""

    async def calculate(self, check_visibility: bool = True) -> IdFilter:
        users = self.definition.users
        if users is None or users.all:
            result = IdFilter.unrestricted()
        else:
            user_ids = _selected_ids(users.users)
            if users.groups:
                groups = await self.metadata.get_groups(sorted(_selected_ids(users.groups)))
                for group in groups.values():
                    user_ids.update(group.members)
            if users.branches:
                user_ids.update(await self._branch_members(users.branches))
            result = IdFilter.of(user_ids)

        if users is not None and users.manager_types:
            subordinates = IdFilter.of(
                await self.metadata.get_user_ids_by_manager(self.session.id_user, list(users.manager_types))
            )
            if subordinates.is_empty:
                logger.info("User %s has no subordinates for manager types %s", self.session.id_user, users.manager_types)
            result = result.intersect(subordinates)

        if self._restrict_to_power_user(check_visibility):
            assigned = IdFilter.of(await self.metadata.get_pu_users())
            logger.debug("Power user %s has %d assigned users", self.session.id_user, len(assigned.ids))
            result = result.intersect(assigned)
        return result

    async def _branch_members(self, branches: List[SelectionItem]) -> Set[int]:
        """Members of the selected branches; ``descendants`` walks the whole subtree."""
        members: Set[int] = set()
        visited: Set[int] = set()
        with_descendants = {branch.id for branch in branches if branch.descendants}
        frontier = sorted(_selected_ids(branches))
        while frontier:
            visited.update(frontier)
            details = await self.metadata.get_branches(frontier)
            next_frontier: Set[int] = set()
            for branch_id, branch in details.items():
                members.update(branch.members)
                if branch_id in with_descendants:
                    children = set(branch.children) - visited
                    with_descendants.update(children)
                    next_frontier.update(children)
            frontier = sorted(next_frontier)
        return members


class CourseFilterCalculator(EntityFilterCalculator):
    async def calculate(self, check_visibility: bool = True) -> IdFilter:
        courses = self.definition.courses
        if courses is None or courses.all:
            result = IdFilter.unrestricted()
        else:
            result = IdFilter.of(_selected_ids(courses.courses))

        if self._restrict_to_power_user(check_visibility):
            result = result.intersect(IdFilter.of(await self.metadata.get_pu_courses()))
        return result


class LearningPlanFilterCalculator(EntityFilterCalculator):
    async def calculate(self, check_visibility: bool = True) -> IdFilter:
        learning_plans = self.definition.learning_plans
        if learning_plans is None or learning_plans.all:
            result = IdFilter.unrestricted()
        else:
            result = IdFilter.of(_selected_ids(learning_plans.learning_plans))

        if self._restrict_to_power_user(check_visibility):
            result = result.intersect(IdFilter.of(await self.metadata.get_pu_learning_plans()))
        return result


class StaticListCalculator(EntityFilterCalculator):
    """Entities with no power-user assignment: the report's own list is the whole story."""

    def __init__(
        self,
        definition: ReportDefinition,
        session: SessionContext,
        metadata: MetadataService,
        filter_name: str,
        list_name: str,
    ):
        super().__init__(definition, session, metadata)
        self.filter_name = filter_name
        self.list_name = list_name

    async def calculate(self, check_visibility: bool = True) -> IdFilter:
        entity_filter = getattr(self.definition, self.filter_name, None)
        if entity_filter is None or entity_filter.all:
            return IdFilter.unrestricted()
        return IdFilter.of(_selected_ids(getattr(entity_filter, self.list_name)))


async def user_additional_field_conditions(definition: ReportDefinition, metadata: MetadataService) -> Dict[int, int]:
    """
    Dropdown user custom fields the users must match, as ``{field id: option id}``.

    Only applies when the users filter enables custom-field filtering. Ids that
    are not dropdown fields of the platform are ignored.
    """
    users = definition.users
    selected = definition.user_additional_fields_filter
    if users is None or not users.is_user_add_fields or not selected:
        return {}
    dropdowns = {
        field.id for field in await metadata.get_user_extra_fields()
        if field.type == AdditionalFieldsTypes.DROPDOWN.value
    }
    conditions: Dict[int, int] = {}
    for field_id, option_id in sorted(selected.items()):
        if field_id in dropdowns:
            conditions[field_id] = option_id
        else:
            logger.warning("User custom field %s is not a dropdown field; filter ignored", field_id)
    return conditions


def instructors_filter(definition: ReportDefinition) -> IdFilter:
    """Instructor restriction of a classroom report; an empty list means no restriction."""
    courses = definition.courses
    if courses is None or not courses.instructors:
        return IdFilter.unrestricted()
    return IdFilter.of(_selected_ids(courses.instructors))


def channels_filter(definition: ReportDefinition) -> IdFilter:
    assets = definition.assets
    if assets is None or assets.all or not assets.channels:
        return IdFilter.unrestricted()
    return IdFilter.of(_selected_ids(assets.channels))


def groups_filter(definition: ReportDefinition) -> IdFilter:
    """Groups picked in the users filter; no groups means every group."""
    users = definition.users
    if users is None or users.all or not users.groups:
        return IdFilter.unrestricted()
    return IdFilter.of(_selected_ids(users.groups))
