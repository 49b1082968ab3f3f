# report_engine/catalog/__init__.py
"""Field catalogs, platform enumerations and warehouse table names."""

from .enums import Dialect, ReportType, UserLevel
from .fields import ExtraFieldEntity, ExtraFieldRef, FieldId, FieldTranslation, parse_extra_field
from .registry import REPORT_CATALOGS, FieldCatalogEntry, ReportCatalog, get_catalog

__all__ = [
    "Dialect",
    "ReportType",
    "UserLevel",
    "ExtraFieldEntity",
    "ExtraFieldRef",
    "FieldId",
    "FieldTranslation",
    "parse_extra_field",
    "REPORT_CATALOGS",
    "FieldCatalogEntry",
    "ReportCatalog",
    "get_catalog",
]
