"""
Test configuration and shared fixtures for the report engine test suite.
Provides a fake metadata service, caller sessions and the API test client.
"""

from typing import Any, Dict, List

import pytest
import sqlparse
from fastapi.testclient import TestClient

from report_engine.app import create_app
from report_engine.catalog.enums import Dialect, ReportType, UserLevel
from report_engine.core.dependencies import get_metadata_client, get_warehouse_inspector
from report_engine.extra_fields.resolver import WarehouseInspector
from report_engine.reports.factory import get_compiler
from report_engine.reports.schemas import ReportDefinition
from report_engine.reports.session import DEFAULT_PLUGINS, DEFAULT_TOGGLES, PlatformContext, SessionContext
from report_engine.services.protocol import BranchDetails, ExtraFieldMetadata, GroupDetails


# ===== FAKE METADATA SERVICE =====


class FakeMetadataService:
    """In-memory metadata service; translations echo their keys unless overridden."""

    def __init__(self, session: SessionContext = None):
        self._session = session or SessionContext(id_user=1)
        self.groups: Dict[int, GroupDetails] = {}
        self.branches: Dict[int, BranchDetails] = {}
        self.translations: Dict[str, str] = {}
        self.user_extra_fields: List[ExtraFieldMetadata] = []
        self.course_extra_fields: List[ExtraFieldMetadata] = []
        self.courseuser_extra_fields: List[ExtraFieldMetadata] = []
        self.ilt_extra_fields: List[ExtraFieldMetadata] = []
        self.lp_extra_fields: List[ExtraFieldMetadata] = []
        self.pu_users: List[int] = []
        self.pu_courses: List[int] = []
        self.pu_learning_plans: List[int] = []
        self.subordinates: Dict[int, List[int]] = {}
        self.calls: List[str] = []

    async def session(self) -> SessionContext:
        self.calls.append("session")
        return self._session

    async def get_users(self, ids):
        return {user_id: {"idst": user_id} for user_id in ids}

    async def get_groups(self, ids):
        self.calls.append("get_groups")
        return {group_id: self.groups[group_id] for group_id in ids if group_id in self.groups}

    async def get_branches(self, ids):
        self.calls.append("get_branches")
        return {branch_id: self.branches[branch_id] for branch_id in ids if branch_id in self.branches}

    async def get_courses(self, ids):
        return {course_id: {"idCourse": course_id} for course_id in ids}

    async def get_sessions(self, ids):
        return {session_id: {"id": session_id} for session_id in ids}

    async def get_surveys(self, ids):
        return {survey_id: {"id": survey_id} for survey_id in ids}

    async def get_learning_plans(self, ids):
        return {lp_id: {"id": lp_id} for lp_id in ids}

    async def get_user_extra_fields(self):
        return self.user_extra_fields

    async def get_course_extra_fields(self):
        return self.course_extra_fields

    async def get_courseuser_extra_fields(self):
        return self.courseuser_extra_fields

    async def get_ilt_extra_fields(self):
        return self.ilt_extra_fields

    async def get_lp_extra_fields(self):
        return self.lp_extra_fields

    async def get_translations(self, keys, lang):
        self.calls.append("get_translations")
        return {key: self.translations.get(key, key) for key in keys}

    async def get_user_ids_by_manager(self, user_id, manager_types):
        self.calls.append("get_user_ids_by_manager")
        return [
            subordinate
            for manager_type in manager_types
            for subordinate in self.subordinates.get(manager_type, [])
        ]

    async def get_pu_users(self):
        self.calls.append("get_pu_users")
        return list(self.pu_users)

    async def get_pu_courses(self):
        self.calls.append("get_pu_courses")
        return list(self.pu_courses)

    async def get_pu_learning_plans(self):
        self.calls.append("get_pu_learning_plans")
        return list(self.pu_learning_plans)


# ===== SESSIONS =====


@pytest.fixture
def admin_session() -> SessionContext:
    """God admin on a platform without archived enrollments"""
    return SessionContext(id_user=1, level=UserLevel.GOD_ADMIN, timezone="Europe/Rome")


@pytest.fixture
def archive_session() -> SessionContext:
    """God admin on a platform with multiple enrollment completions"""
    return SessionContext(
        id_user=1,
        level=UserLevel.GOD_ADMIN,
        platform=PlatformContext(toggles=DEFAULT_TOGGLES | {"toggleMultipleEnrollmentCompletions"}),
    )


@pytest.fixture
def power_user_session() -> SessionContext:
    return SessionContext(id_user=42, level=UserLevel.POWER_USER)


@pytest.fixture
def lp_session() -> SessionContext:
    """Session with the learning plan report enhancements on"""
    return SessionContext(
        id_user=1,
        platform=PlatformContext(
            plugins=DEFAULT_PLUGINS,
            toggles=DEFAULT_TOGGLES | {"toggleNewLearningPlanManagementAndReportEnhancement"},
        ),
    )


@pytest.fixture
def metadata(admin_session) -> FakeMetadataService:
    return FakeMetadataService(admin_session)


@pytest.fixture
def inspector() -> WarehouseInspector:
    """No warehouse configured: every column counts as materialized"""
    return WarehouseInspector()


# ===== HELPERS =====


@pytest.fixture
def make_compiler(metadata, inspector):
    def _make(report_type: ReportType, dialect: Dialect = Dialect.ATHENA):
        return get_compiler(report_type, dialect, metadata, inspector)
    return _make


@pytest.fixture
def make_definition(make_compiler):
    """Default definition of a report type with the given extra settings"""
    def _make(report_type: ReportType, session: SessionContext, fields: List[str] = None, **updates: Any):
        definition = make_compiler(report_type).default_structure(session, "Test report")
        if fields is not None:
            updates["fields"] = fields
        return definition.model_copy(update=updates, deep=True)
    return _make


@pytest.fixture
def split_sql():
    """Split compiled SQL into its statements"""
    def _split(sql: str) -> List[str]:
        return [statement for statement in sqlparse.split(sql) if statement.strip()]
    return _split


@pytest.fixture
def make_metadata():
    def _make(session: SessionContext) -> FakeMetadataService:
        return FakeMetadataService(session)
    return _make


@pytest.fixture
def payload():
    """JSON body of a definition as the API receives it"""
    def _payload(definition: ReportDefinition) -> Dict[str, Any]:
        return definition.model_dump(mode="json", by_alias=True)
    return _payload


# ===== API CLIENT =====


@pytest.fixture
def client(metadata, inspector):
    """Create FastAPI test client with the metadata service and inspector overridden"""
    app = create_app()
    app.dependency_overrides[get_metadata_client] = lambda: metadata
    app.dependency_overrides[get_warehouse_inspector] = lambda: inspector

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()
