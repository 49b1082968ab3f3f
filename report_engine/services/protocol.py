"""Contract of the metadata service the compilers depend on."""

from typing import Any, Dict, List, Protocol

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from report_engine.reports.session import SessionContext


class ExtraFieldMetadata(BaseModel):
    """An admin-defined custom field."""

    id: int
    title: str = Field("", validation_alias=AliasChoices("title", "name", "translation"))
    type: str = ""

    model_config = ConfigDict(extra="ignore")


class GroupDetails(BaseModel):
    id: int
    title: str = Field("", validation_alias=AliasChoices("title", "groupid", "name"))
    members: List[int] = []

    model_config = ConfigDict(extra="ignore")


class BranchDetails(BaseModel):
    id: int
    title: str = Field("", validation_alias=AliasChoices("title", "name"))
    code: str = ""
    children: List[int] = []  # direct child branch ids
    members: List[int] = []

    model_config = ConfigDict(extra="ignore")


class MetadataService(Protocol):
    async def session(self) -> SessionContext: ...

    async def get_users(self, ids: List[int]) -> Dict[int, Dict[str, Any]]: ...

    async def get_groups(self, ids: List[int]) -> Dict[int, GroupDetails]: ...

    async def get_branches(self, ids: List[int]) -> Dict[int, BranchDetails]: ...

    async def get_courses(self, ids: List[int]) -> Dict[int, Dict[str, Any]]: ...

    async def get_sessions(self, ids: List[int]) -> Dict[int, Dict[str, Any]]: ...

    async def get_surveys(self, ids: List[int]) -> Dict[int, Dict[str, Any]]: ...

    async def get_learning_plans(self, ids: List[int]) -> Dict[int, Dict[str, Any]]: ...

    async def get_user_extra_fields(self) -> List[ExtraFieldMetadata]: ...

    async def get_course_extra_fields(self) -> List[ExtraFieldMetadata]: ...

    async def get_courseuser_extra_fields(self) -> List[ExtraFieldMetadata]: ...

    async def get_ilt_extra_fields(self) -> List[ExtraFieldMetadata]: ...

    async def get_lp_extra_fields(self) -> List[ExtraFieldMetadata]: ...

    async def get_translations(self, keys: List[str], lang: str) -> Dict[str, str]: ...

    async def get_user_ids_by_manager(self, user_id: int, manager_types: List[int]) -> List[int]: ...

    async def get_pu_users(self) -> List[int]: ...

    async def get_pu_courses(self) -> List[int]: ...

    async def get_pu_learning_plans(self) -> List[int]: ...
