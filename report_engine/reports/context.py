"""Per-compile state handed to field builders."""

from typing import Dict, List, Optional

from report_engine.catalog.fields import FieldTranslation, translation_key
from report_engine.catalog.tables import TableAliases, Tables
from report_engine.extra_fields.resolver import ResolvedExtraField
from report_engine.filters.calculators import IdFilter
from report_engine.query.dialects import SqlDialect
from report_engine.query.fragments import CompileStats, QueryFragmentSet
from report_engine.reports.schemas import ReportDefinition
from report_engine.reports.session import SessionContext

ARCHIVE = TableAliases.ARCHIVED_ENROLLMENT_COURSE.value


class CompileContext:
    """
    Everything a field builder needs: the definition, the session, the dialect,
    translated labels, resolved filters and the live/archive fragment sets.

    ``select`` writes one column to both branches so a UNION always lines up.
    """

    def __init__(
        self,
        definition: ReportDefinition,
        session: SessionContext,
        dialect: SqlDialect,
        labels: Dict[str, str],
        translations: Dict[str, str],
        filters: Dict[str, IdFilter],
        extra_fields: Dict[str, ResolvedExtraField],
        stats: CompileStats,
        with_archive: bool = False,
        user_field_conditions: Optional[Dict[int, int]] = None,
    ):
        self.definition = definition
        self.session = session
        self.dialect = dialect
        self.labels = labels
        self.translations = translations
        self.filters = filters
        self.extra_fields = extra_fields
        self.stats = stats
        self.user_field_conditions = user_field_conditions or {}
        self.live = QueryFragmentSet()
        self.archive: Optional[QueryFragmentSet] = QueryFragmentSet() if with_archive else None
        self.columns: List[str] = []
        self.emitted: Dict[str, str] = {}
        self.wrap_values = False

    @property
    def platform(self):
        return self.session.platform

    @property
    def timezone(self) -> str:
        return self.definition.timezone or self.session.timezone or "UTC"

    @property
    def lang_code(self) -> str:
        return self.session.lang_code or self.platform.default_language_code

    def filter(self, kind: str) -> IdFilter:
        return self.filters.get(kind, IdFilter.unrestricted())

    def user_fields_clause(self, column: str) -> str:
        """`` AND column IN (...)`` of the users matching the custom-field conditions, or nothing."""
        if not self.user_field_conditions:
            return ""
        name = self.dialect.column_name
        matches = " AND ".join(
            f"{name(f'field_{field_id}')} = {option_id}"
            for field_id, option_id in sorted(self.user_field_conditions.items())
        )
        return f" AND {column} IN (SELECT {name('id_user')} FROM {Tables.CORE_USER_FIELD_VALUE.value} WHERE {matches})"

    # ===== LABELS =====

    def label(self, field: str) -> str:
        return self.labels.get(field, field)

    def t(self, translation: FieldTranslation) -> str:
        """Translated CASE-branch label, quoted."""
        key = translation_key(translation)
        return self.dialect.case_label(self.translations.get(key, key))

    # ===== EXPRESSIONS =====

    def col(self, alias, column: str) -> str:
        alias = alias.value if isinstance(alias, TableAliases) else alias
        return self.dialect.col(alias, column)

    def value(self, expr: str) -> str:
        """Wrap ``expr`` in the any-value aggregate when the query is grouped."""
        return self.dialect.any_value(expr) if self.wrap_values else expr

    def v(self, alias, column: str) -> str:
        return self.value(self.col(alias, column))

    def archive_col(self, column: str) -> str:
        return self.dialect.col(ARCHIVE, column)

    def archive_json(self, column: str, key: str, alias: str = ARCHIVE) -> str:
        return self.dialect.json_scalar(self.dialect.col(alias, column), key)

    def datetime(self, expr: str) -> str:
        return self.dialect.datetime_format(expr, self.timezone)

    def yes_no(self, condition: str) -> str:
        return f"CASE WHEN {condition} THEN {self.t(FieldTranslation.YES)} ELSE {self.t(FieldTranslation.NO)} END"

    # ===== FRAGMENTS =====

    def select(self, field: str, expr: str, archived: str = "NULL") -> None:
        alias_text = self.label(field)
        alias = self.dialect.alias(alias_text)
        self.live.add_select(expr, alias)
        if self.archive is not None:
            self.archive.add_select(archived, alias)
        self.columns.append(alias_text)
        self.emitted[field] = alias

    def join(self, key: str, clause: str) -> bool:
        return self.live.ensure_join(key, lambda: clause)

    def archive_join(self, key: str, clause: str) -> bool:
        if self.archive is None:
            return False
        return self.archive.ensure_join(key, lambda: clause)
