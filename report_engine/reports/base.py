"""Shared compile algorithm of every report-type compiler."""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple
from uuid import uuid4

from report_engine.catalog.enums import (
    DateConditions,
    Dialect,
    EnrollmentTypes,
    ReportType,
    SortDirection,
    SortSelector,
    VisibilityTypes,
)
from report_engine.catalog.fields import (
    FieldId,
    FieldTranslation,
    parse_extra_field,
    translation_key,
)
from report_engine.catalog.registry import ReportCatalog, get_catalog
from report_engine.extra_fields.resolver import ExtraFieldResolver, ResolvedExtraField, WarehouseInspector
from report_engine.filters.calculators import (
    CourseFilterCalculator,
    IdFilter,
    LearningPlanFilterCalculator,
    StaticListCalculator,
    UserFilterCalculator,
    user_additional_field_conditions,
)
from report_engine.query.dialects import get_dialect
from report_engine.query.fragments import CompileStats
from report_engine.reports.context import CompileContext
from report_engine.reports.schemas import (
    DateOption,
    LastEditBy,
    Planning,
    ReportDefinition,
    SortingOptions,
    Visibility,
)
from report_engine.reports.session import SessionContext
from report_engine.services.protocol import MetadataService

logger = logging.getLogger(__name__)

FieldBuilder = Callable[[CompileContext], None]

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

STANDARD_FIELDS = frozenset(field.value for field in FieldId)


def default_date_option() -> DateOption:
    return DateOption(any=True, days=1, type="", operator="", to="", from_="")


def _is_any(option: Optional[DateOption]) -> bool:
    """Only the ``any`` flag counts for the UNION policy; a missing option counts as ``any``."""
    return option is None or option.any


def union_policy(definition: ReportDefinition, session: SessionContext) -> Tuple[bool, bool, bool]:
    """
    Which of (live branch, UNION, archive branch) to emit.

    Archived enrollments exist only with multiple enrollment completions on;
    without that toggle the live branch is always the whole query.
    """
    toggle = session.platform.multiple_enrollment_completions
    types = definition.enrollment.enrollment_types if definition.enrollment else EnrollmentTypes.ACTIVE
    show_active = types in (EnrollmentTypes.ACTIVE, EnrollmentTypes.ACTIVE_AND_ARCHIVED)
    show_archived = types in (EnrollmentTypes.ARCHIVED, EnrollmentTypes.ACTIVE_AND_ARCHIVED)

    archiving_any = _is_any(definition.archiving_date)
    completion_any = _is_any(definition.completion_date)
    enrollment_any = _is_any(definition.enrollment_date)

    only_archived_date_filter = not archiving_any and completion_any and enrollment_any
    archived_and_other = (
        definition.conditions == DateConditions.ALL
        and not archiving_any
        and (not completion_any or not enrollment_any)
    )
    only_archived_query = types == EnrollmentTypes.ACTIVE_AND_ARCHIVED and (
        only_archived_date_filter or archived_and_other
    )

    emit_live = (show_active and not only_archived_query) or not toggle
    emit_union = types == EnrollmentTypes.ACTIVE_AND_ARCHIVED and toggle and not only_archived_query
    emit_archive = show_archived and toggle
    return emit_live, emit_union, emit_archive


class ReportCompiler:
    """
    Base class of the per-report-type compilers.

    Subclasses provide the base FROM (``build_base``), a field -> builder
    table (``field_builders``) and, for enrollment reports, an archive branch.
    """

    report_type: ReportType
    supports_archive = False
    supported_dialects = (Dialect.ATHENA, Dialect.SNOWFLAKE)
    filter_kinds: Tuple[str, ...] = ()

    def __init__(self, dialect: Dialect, metadata: MetadataService, inspector: WarehouseInspector):
        self.dialect_name = Dialect(dialect)
        self.dialect = get_dialect(self.dialect_name)
        self.metadata = metadata
        self.inspector = inspector
        self.stats = CompileStats()
        self.columns: List[str] = []

    @property
    def catalog(self) -> ReportCatalog:
        return get_catalog(self.report_type)

    # ===== HOOKS =====

    def field_builders(self) -> Dict[str, FieldBuilder]:
        raise NotImplementedError("Method not implemented.")

    def build_base(self, ctx: CompileContext) -> None:
        raise NotImplementedError("Method not implemented.")

    def build_extra_field(self, ctx: CompileContext, field: ResolvedExtraField) -> None:
        ctx.select(field.key, "''", "''")

    def translation_labels(self) -> List[FieldTranslation]:
        """CASE-branch labels this report may emit."""
        return list(FieldTranslation)

    def default_filters(self, session: SessionContext) -> Dict[str, object]:
        return {}

    # ===== COMPILE =====

    def check_dialect(self) -> None:
        if self.dialect_name not in self.supported_dialects:
            raise NotImplementedError("Method not implemented.")

    async def compile(
        self,
        definition: ReportDefinition,
        session: SessionContext,
        limit: int = 0,
        is_preview: bool = False,
        check_visibility: bool = True,
        from_schedule: bool = False,
    ) -> str:
        """Compile ``definition`` to SQL text for this compiler's dialect."""
        self.check_dialect()
        self.stats = CompileStats()

        labels, translations = await self._load_translations(definition, session)
        resolver = ExtraFieldResolver(self.metadata, self.inspector)
        extra_fields, labels = await resolver.resolve(
            definition.fields, self.catalog.extra_field_entities, labels
        )
        filters = await self.resolve_filters(definition, session, check_visibility)
        user_field_conditions = {}
        if "users" in self.filter_kinds:
            user_field_conditions = await user_additional_field_conditions(definition, self.metadata)

        ctx = CompileContext(
            definition=definition,
            session=session,
            dialect=self.dialect,
            labels=labels,
            translations=translations,
            filters=filters,
            extra_fields=extra_fields,
            stats=self.stats,
            with_archive=self.supports_archive and session.platform.multiple_enrollment_completions,
            user_field_conditions=user_field_conditions,
        )
        self.build_base(ctx)

        builders = self.field_builders()
        for field in definition.fields:
            self._visit(ctx, field, builders)
        self.finish(ctx)

        if not ctx.live.select:
            ctx.live.add_select("NULL", self.dialect.alias("-"))
            if ctx.archive is not None:
                ctx.archive.add_select("NULL", self.dialect.alias("-"))

        sql = self.assemble(ctx, limit, is_preview, from_schedule)
        self.columns = list(ctx.columns)
        logger.debug(
            "Compiled %s query for %s: %d columns, %d chars",
            self.report_type.value, self.dialect_name.value, len(self.columns), len(sql),
        )
        return sql

    def finish(self, ctx: CompileContext) -> None:
        """Hook run after every field was visited."""

    def _visit(self, ctx: CompileContext, field: str, builders: Dict[str, FieldBuilder]) -> None:
        feature = self.catalog.gates.get(field)
        if feature and not ctx.platform.is_enabled(feature):
            self.stats.dropped_fields.append(field)
            return

        ref = parse_extra_field(field)
        if ref is not None:
            resolved = ctx.extra_fields.get(ref.key)
            if resolved is None:
                self._unmapped(field)
            elif not resolved.materialized:
                ctx.select(ref.key, "''", "''")
            else:
                self.build_extra_field(ctx, resolved)
            return

        builder = builders.get(field)
        if builder is None:
            self._unmapped(field)
            return
        builder(ctx)

    def _unmapped(self, field: str) -> None:
        logger.warning("Field %s is not available for %s reports; skipped", field, self.report_type.value)
        self.stats.unmapped_fields.append(field)

    async def _load_translations(
        self, definition: ReportDefinition, session: SessionContext
    ) -> Tuple[Dict[str, str], Dict[str, str]]:
        """Labels of the selected standard fields, and translated CASE labels."""
        field_keys: Dict[str, str] = {}
        for field in definition.fields:
            if field in STANDARD_FIELDS:
                field_keys[field] = translation_key(FieldId(field))
        case_keys = [translation_key(label) for label in self.translation_labels()]
        keys = sorted(set(field_keys.values()) | set(case_keys))
        translated = await self.metadata.get_translations(keys, session.lang_code)
        labels = {field: translated.get(key, key) for field, key in field_keys.items()}
        translations = {key: translated.get(key, key) for key in case_keys}
        return labels, translations

    async def resolve_filters(
        self, definition: ReportDefinition, session: SessionContext, check_visibility: bool
    ) -> Dict[str, IdFilter]:
        calculators = {
            "users": UserFilterCalculator,
            "courses": CourseFilterCalculator,
            "learning_plans": LearningPlanFilterCalculator,
        }
        filters: Dict[str, IdFilter] = {}
        for kind in self.filter_kinds:
            if kind in calculators:
                calculator = calculators[kind](definition, session, self.metadata)
            else:
                calculator = StaticListCalculator(definition, session, self.metadata, kind, kind)
            filters[kind] = await calculator.calculate(check_visibility)
        return filters

    # ===== ASSEMBLY =====

    def assemble(self, ctx: CompileContext, limit: int, is_preview: bool, from_schedule: bool) -> str:
        emit_live, emit_union, emit_archive = True, False, False
        if ctx.archive is not None:
            emit_live, emit_union, emit_archive = union_policy(ctx.definition, ctx.session)

        ctes = dict(ctx.live.ctes) if emit_live else {}
        if ctx.archive is not None and emit_archive:
            for name, body in ctx.archive.ctes.items():
                ctes.setdefault(name, body)

        branches = []
        if emit_live:
            branches.append(ctx.live.render())
        if emit_archive:
            branches.append(ctx.archive.render())

        sql = ""
        if ctes:
            sql += "WITH " + ", ".join(f"{name} AS ({body})" for name, body in ctes.items()) + " "
        sql += " UNION ".join(branches)

        if not is_preview:
            sql += " " + self.order_by(ctx)
        sql += f" LIMIT {ctx.platform.row_limit(limit, is_preview, from_schedule)}"
        return sql

    def order_by(self, ctx: CompileContext) -> str:
        """ORDER BY the selected sort column, the default sort column, or the first column."""
        sorting = ctx.definition.sorting_options
        direction = "DESC" if sorting.order_by == SortDirection.DESC else "ASC"
        if sorting.selector == SortSelector.CUSTOM and sorting.selected_field in ctx.emitted:
            return f"ORDER BY {ctx.emitted[sorting.selected_field]} {direction}"
        default_field = self.catalog.default_sort.value
        if default_field in ctx.emitted:
            return f"ORDER BY {ctx.emitted[default_field]} {direction}"
        return f"ORDER BY 1 {direction}"

    # ===== DEFAULT STRUCTURE =====

    def default_structure(
        self, session: SessionContext, title: str, description: str = "", author: int = None
    ) -> ReportDefinition:
        """A new definition of this report type with mandatory fields and default filters."""
        now = datetime.now().strftime(DATETIME_FORMAT)
        return ReportDefinition(
            id_report=str(uuid4()),
            type=self.report_type,
            title=title,
            description=description,
            creation_date=now,
            last_edit=now,
            last_edit_by=LastEditBy(id_user=session.id_user),
            author=session.id_user if author is None else author,
            platform=session.platform.base_url,
            standard=False,
            timezone=session.timezone,
            visibility=Visibility(type=VisibilityTypes.ALL_GODADMINS),
            fields=self.catalog.mandatory_fields,
            sorting_options=SortingOptions(
                selector=SortSelector.DEFAULT,
                selected_field=self.catalog.default_sort.value,
                order_by=SortDirection.ASC,
            ),
            planning=Planning(),
            conditions=DateConditions.ALL,
            **self.default_filters(session),
        )

    def legacy_field_maps(self) -> Dict[str, Dict[str, str]]:
        """Legacy section -> (legacy key -> field id) used by the legacy importer."""
        raise NotImplementedError("Method not implemented.")
