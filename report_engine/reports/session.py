"""Caller session and platform configuration, read-only during a compilation."""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet

from report_engine.catalog.enums import ExportLimit, UserLevel

DEFAULT_PLUGINS = frozenset({"classroom", "esignature", "flow", "flowMsTeams"})
DEFAULT_TOGGLES = frozenset({"datalakeV3"})


@dataclass(frozen=True)
class PlatformContext:
    base_url: str = ""
    default_language: str = "english"
    default_language_code: str = "en"
    plugins: FrozenSet[str] = DEFAULT_PLUGINS
    toggles: FrozenSet[str] = DEFAULT_TOGGLES
    show_first_name_first: bool = True
    courses_assignment_type_active: bool = False
    csv_export_limit: int = ExportLimit.CSV.value
    xlsx_export_limit: int = ExportLimit.XLSX.value
    preview_export_limit: int = ExportLimit.PREVIEW.value

    def is_enabled(self, feature: str) -> bool:
        """True when ``feature`` names an active plugin, toggle or config flag."""
        if feature == "coursesAssignmentType":
            return self.courses_assignment_type_active
        return feature in self.plugins or feature in self.toggles

    @property
    def multiple_enrollment_completions(self) -> bool:
        return "toggleMultipleEnrollmentCompletions" in self.toggles

    def export_cap(self, is_preview: bool = False, from_schedule: bool = False) -> int:
        if is_preview:
            return self.preview_export_limit
        if from_schedule:
            return self.csv_export_limit
        return self.xlsx_export_limit

    def row_limit(self, limit: int = 0, is_preview: bool = False, from_schedule: bool = False) -> int:
        """Rows to fetch: ``limit`` capped by the export kind, or the cap itself when 0."""
        cap = self.export_cap(is_preview, from_schedule)
        if limit and limit > 0:
            return min(limit, cap)
        return cap


@dataclass(frozen=True)
class SessionContext:
    id_user: int
    level: UserLevel = UserLevel.GOD_ADMIN
    lang: str = "english"
    lang_code: str = "en"
    timezone: str = "UTC"
    platform: PlatformContext = field(default_factory=PlatformContext)

    @property
    def is_power_user(self) -> bool:
        return self.level == UserLevel.POWER_USER

    @property
    def is_god_admin(self) -> bool:
        return self.level == UserLevel.GOD_ADMIN


def _enabled_names(flags: Dict[str, Any]) -> FrozenSet[str]:
    return frozenset(name for name, enabled in (flags or {}).items() if enabled)


def session_from_payload(payload: Dict[str, Any], limits: Dict[str, int] = None) -> SessionContext:
    """Build a session from the metadata service ``/session`` payload."""
    user = payload.get("user", {})
    platform = payload.get("platform", {})
    configs = platform.get("configs", {})
    limits = limits or {}
    platform_context = PlatformContext(
        base_url=platform.get("platformBaseUrl", ""),
        default_language=platform.get("defaultLanguage", "english"),
        default_language_code=platform.get("defaultLanguageCode", "en"),
        plugins=_enabled_names(platform.get("plugins", {})),
        toggles=_enabled_names(platform.get("toggles", {})),
        show_first_name_first=bool(configs.get("showFirstNameFirst", True)),
        courses_assignment_type_active=bool(configs.get("isCoursesAssignmentTypeActive", False)),
        csv_export_limit=limits.get("csv", ExportLimit.CSV.value),
        xlsx_export_limit=limits.get("xlsx", ExportLimit.XLSX.value),
        preview_export_limit=limits.get("preview", ExportLimit.PREVIEW.value),
    )
    return SessionContext(
        id_user=int(user.get("idUser", 0)),
        level=UserLevel(user.get("level", UserLevel.GOD_ADMIN.value)),
        lang=user.get("lang", platform_context.default_language),
        lang_code=user.get("langCode", platform_context.default_language_code),
        timezone=user.get("timezone") or "UTC",
        platform=platform_context,
    )


def default_session(limits: Dict[str, int] = None) -> SessionContext:
    """Session used when no metadata token is configured."""
    limits = limits or {}
    return SessionContext(
        id_user=0,
        platform=PlatformContext(
            csv_export_limit=limits.get("csv", ExportLimit.CSV.value),
            xlsx_export_limit=limits.get("xlsx", ExportLimit.XLSX.value),
            preview_export_limit=limits.get("preview", ExportLimit.PREVIEW.value),
        ),
    )
