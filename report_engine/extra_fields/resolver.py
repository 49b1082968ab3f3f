"""Custom field discovery, label de-duplication and warehouse materialisation checks."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from report_engine.catalog.fields import ExtraFieldEntity, ExtraFieldRef, extra_field_key, parse_extra_field
from report_engine.catalog.registry import FieldCatalogEntry
from report_engine.catalog.tables import Tables
from report_engine.services.protocol import ExtraFieldMetadata, MetadataService

logger = logging.getLogger(__name__)

# entity -> (value table, column template)
MATERIALIZATION_COLUMNS: Dict[ExtraFieldEntity, Tuple[str, str]] = {
    ExtraFieldEntity.USER: (Tables.CORE_USER_FIELD_VALUE.value, "field_{id}"),
    ExtraFieldEntity.COURSE: (Tables.LEARNING_COURSE_FIELD_VALUE.value, "field_{id}"),
    ExtraFieldEntity.COURSEUSER: (Tables.LEARNING_COURSEUSER_AGGREGATE.value, "enrollment_fields"),
    ExtraFieldEntity.ILT: (Tables.LT_COURSE_SESSION_FIELD_VALUES.value, "field_{id}"),
    ExtraFieldEntity.LP: (Tables.LEARNING_COURSEPATH_FIELD_VALUE.value, "field_{id}"),
}

METADATA_FETCHERS: Dict[ExtraFieldEntity, str] = {
    ExtraFieldEntity.USER: "get_user_extra_fields",
    ExtraFieldEntity.COURSE: "get_course_extra_fields",
    ExtraFieldEntity.COURSEUSER: "get_courseuser_extra_fields",
    ExtraFieldEntity.ILT: "get_ilt_extra_fields",
    ExtraFieldEntity.LP: "get_lp_extra_fields",
}


class WarehouseInspector:
    """
    Column lookup for warehouse tables.

    Uses SQLAlchemy's inspector when an engine is configured, or an explicit
    ``{table: columns}`` map. With neither, every column is assumed present.
    """

    def __init__(self, engine: Optional[Engine] = None, known_columns: Optional[Dict[str, Iterable[str]]] = None):
        self.engine = engine
        self._columns: Dict[str, Set[str]] = {}
        if known_columns is not None:
            for table, columns in known_columns.items():
                self._columns[table] = {column.lower() for column in columns}
        self._static = known_columns is not None

    def columns(self, table: str) -> Optional[Set[str]]:
        if table in self._columns:
            return self._columns[table]
        if self._static:
            return set()
        if self.engine is None:
            return None
        columns = {column["name"].lower() for column in inspect(self.engine).get_columns(table)}
        self._columns[table] = columns
        return columns

    def has_column(self, table: str, column: str) -> bool:
        columns = self.columns(table)
        if columns is None:
            return True
        return column.lower() in columns


@dataclass
class ResolvedExtraField:
    """A selected custom field ready for a compiler."""

    ref: ExtraFieldRef
    title: str
    type: str
    materialized: bool

    @property
    def key(self) -> str:
        return self.ref.key


class ExtraFieldResolver:
    def __init__(self, metadata: MetadataService, inspector: WarehouseInspector):
        self.metadata = metadata
        self.inspector = inspector
        self._metadata_cache: Dict[ExtraFieldEntity, List[ExtraFieldMetadata]] = {}

    async def _fetch(self, entity: ExtraFieldEntity) -> List[ExtraFieldMetadata]:
        if entity not in self._metadata_cache:
            fetcher = getattr(self.metadata, METADATA_FETCHERS[entity])
            self._metadata_cache[entity] = list(await fetcher())
        return self._metadata_cache[entity]

    async def list_available(self, entity: ExtraFieldEntity) -> List[FieldCatalogEntry]:
        """Catalog entries for every custom field of ``entity``."""
        return [
            FieldCatalogEntry(
                field=extra_field_key(entity, field.id),
                translation_key=field.title,
                is_additional_field=True,
                category=entity.value,
            )
            for field in await self._fetch(entity)
        ]

    def is_materialized(self, ref: ExtraFieldRef) -> bool:
        table, column = MATERIALIZATION_COLUMNS[ref.entity]
        return self.inspector.has_column(table, column.format(id=ref.field_id))

    async def ensure_materialized(self, ref: ExtraFieldRef) -> bool:
        return await asyncio.to_thread(self.is_materialized, ref)

    @staticmethod
    def resolve_duplicate_translations(
        fields: List[ExtraFieldMetadata],
        existing_map: Dict[str, str],
        entity: ExtraFieldEntity,
    ) -> Dict[str, str]:
        """
        Add a label per custom field to a copy of ``existing_map``.

        A label already used in the map gets `` (<entity>)`` appended.
        """
        updated = dict(existing_map)
        used = set(updated.values())
        for field in fields:
            title = field.title
            if title in used:
                title = f"{title} ({entity.value})"
            updated[extra_field_key(entity, field.id)] = title
            used.add(title)
        return updated

    async def resolve(
        self,
        selected_fields: List[str],
        allowed_entities: List[ExtraFieldEntity],
        labels: Dict[str, str],
    ) -> Tuple[Dict[str, ResolvedExtraField], Dict[str, str]]:
        """
        Resolve the custom fields among ``selected_fields``.

        Returns the resolved fields by key and the label map extended with
        their (de-duplicated) titles. Fields of other entities or unknown ids
        are left out.
        """
        refs = [ref for ref in (parse_extra_field(field) for field in selected_fields) if ref]
        resolved: Dict[str, ResolvedExtraField] = {}
        for entity in allowed_entities:
            wanted = {ref.field_id: ref for ref in refs if ref.entity == entity}
            if not wanted:
                continue
            metadata = await self._fetch(entity)
            labels = self.resolve_duplicate_translations(metadata, labels, entity)
            for field in metadata:
                ref = wanted.get(field.id)
                if ref is None:
                    continue
                resolved[ref.key] = ResolvedExtraField(
                    ref=ref,
                    title=labels[ref.key],
                    type=field.type,
                    materialized=await self.ensure_materialized(ref),
                )
                if not resolved[ref.key].materialized:
                    logger.info("Extra field %s is not materialized in the warehouse", ref.key)
        return resolved, labels
