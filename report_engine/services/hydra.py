"""Async client for the platform metadata (Hydra) API."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from report_engine.core.exceptions import (
    MetadataBadRequestError,
    MetadataNotFoundError,
    MetadataServerError,
    MetadataServiceError,
    MetadataUnauthorizedError,
)
from report_engine.reports.session import SessionContext, default_session, session_from_payload
from report_engine.services.protocol import BranchDetails, ExtraFieldMetadata, GroupDetails

logger = logging.getLogger(__name__)

READ_ONLY_METHODS = {"GET", "OPTIONS", "HEAD"}

STATUS_ERRORS = {
    400: MetadataBadRequestError,
    401: MetadataUnauthorizedError,
    404: MetadataNotFoundError,
    500: MetadataServerError,
}

PU_PAGE_SIZE = 1000


class HydraClient:
    """
    Metadata service client.

    Every call sends the bearer token; mutating calls also send the session
    cookie and CSRF token. Non-200 answers raise a MetadataServiceError subclass.
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        cookie: str = "",
        csrf_token: str = "",
        limits: Optional[Dict[str, int]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.cookie = cookie
        self.csrf_token = csrf_token
        self.limits = limits or {}
        self._client = client

    def _get_headers(self, method: str) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        if method.upper() not in READ_ONLY_METHODS:
            if self.cookie:
                headers["Cookie"] = self.cookie
            if self.csrf_token:
                headers["X-CSRF-Token"] = self.csrf_token
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        headers = self._get_headers(method)
        if self._client is not None:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        else:
            async with httpx.AsyncClient(base_url=self.base_url) as client:
                response = await client.request(method, path, headers=headers, **kwargs)

        if response.status_code != 200:
            error_class = STATUS_ERRORS.get(response.status_code, MetadataServiceError)
            logger.error("Metadata request %s %s failed with status %s", method, path, response.status_code)
            raise error_class(
                f"Metadata service answered {response.status_code} for {method} {path}",
                status_code=response.status_code,
            )
        return response.json()

    # ===== SESSION =====

    async def session(self) -> SessionContext:
        if not self.token:
            return default_session(self.limits)
        payload = await self._request("GET", "/report/v1/report/session")
        return session_from_payload(payload.get("data", {}), self.limits)

    # ===== ENTITY DETAILS =====

    async def _details(self, path: str, key: str, ids: List[int]) -> Dict[int, Dict[str, Any]]:
        if not ids:
            return {}
        payload = await self._request("POST", path, json={key: list(ids)})
        return {int(entity_id): details for entity_id, details in (payload.get("data") or {}).items()}

    async def get_users(self, ids: List[int]) -> Dict[int, Dict[str, Any]]:
        return await self._details("/report/v1/report/users_details", "id_users", ids)

    async def get_groups(self, ids: List[int]) -> Dict[int, GroupDetails]:
        details = await self._details("/report/v1/report/groups_details", "id_groups", ids)
        return {group_id: GroupDetails(id=group_id, **{k: v for k, v in data.items() if k != "id"})
                for group_id, data in details.items()}

    async def get_branches(self, ids: List[int]) -> Dict[int, BranchDetails]:
        details = await self._details("/report/v1/report/branches_details", "id_branches", ids)
        return {branch_id: BranchDetails(id=branch_id, **{k: v for k, v in data.items() if k != "id"})
                for branch_id, data in details.items()}

    async def get_courses(self, ids: List[int]) -> Dict[int, Dict[str, Any]]:
        return await self._details("/report/v1/report/courses_details", "id_courses", ids)

    async def get_sessions(self, ids: List[int]) -> Dict[int, Dict[str, Any]]:
        return await self._details("/report/v1/report/sessions-details", "id_sessions", ids)

    async def get_surveys(self, ids: List[int]) -> Dict[int, Dict[str, Any]]:
        return await self._details("/report/v1/report/surveys-details", "id_surveys", ids)

    async def get_learning_plans(self, ids: List[int]) -> Dict[int, Dict[str, Any]]:
        return await self._details("/report/v1/report/learningplans_details", "id_learning_plans", ids)

    # ===== EXTRA FIELDS =====

    async def _extra_fields(self, path: str, params: Dict[str, Any]) -> List[ExtraFieldMetadata]:
        payload = await self._request("GET", path, params=params)
        data = payload.get("data") or []
        items = data.get("items", []) if isinstance(data, dict) else data
        return [ExtraFieldMetadata.model_validate(item) for item in items]

    async def get_user_extra_fields(self) -> List[ExtraFieldMetadata]:
        return await self._extra_fields("/manage/v1/user_fields", {"no_pagination": 1})

    async def _course_fields(self, association: str) -> List[ExtraFieldMetadata]:
        return await self._extra_fields(
            "/learn/v1/courses/field",
            {"no_pagination": 1, "association": association, "show_field": 1},
        )

    async def get_course_extra_fields(self) -> List[ExtraFieldMetadata]:
        return await self._course_fields("course")

    async def get_ilt_extra_fields(self) -> List[ExtraFieldMetadata]:
        return await self._course_fields("ilt")

    async def get_lp_extra_fields(self) -> List[ExtraFieldMetadata]:
        return await self._course_fields("coursepath")

    async def get_courseuser_extra_fields(self) -> List[ExtraFieldMetadata]:
        return await self._extra_fields("/report/v1/report/courseuser_fields", {})

    # ===== TRANSLATIONS / HIERARCHY =====

    async def get_translations(self, keys: List[str], lang: str) -> Dict[str, str]:
        if not keys:
            return {}
        payload = await self._request(
            "POST", "/report/v1/report/translations", json={"translations": list(keys), "lang_code": lang}
        )
        return dict(payload.get("data") or {})

    async def get_user_ids_by_manager(self, user_id: int, manager_types: List[int]) -> List[int]:
        payload = await self._request(
            "GET",
            f"/skill/v1/managers/{user_id}/subordinates",
            params=[("manager_type_id[]", manager_type) for manager_type in manager_types],
        )
        items = (payload.get("data") or {}).get("items", [])
        return [int(item["user_id"]) for item in items if "user_id" in item]

    # ===== POWER USER ASSIGNMENTS =====

    async def get_pu_users(self) -> List[int]:
        """All users assigned to the calling power user, across pages."""
        user_ids: List[int] = []
        page = 1
        while True:
            payload = await self._request(
                "GET",
                "/report/v1/report/pu_users",
                params={"page_dimension": PU_PAGE_SIZE, "page_number": page},
            )
            data = payload.get("data") or {}
            user_ids.extend(int(user_id) for user_id in data.get("items", []))
            if page >= int(data.get("total_pages", 1) or 1):
                break
            page += 1
        return user_ids

    async def get_pu_courses(self) -> List[int]:
        payload = await self._request("GET", "/report/v1/report/pu_courses")
        return [int(course_id) for course_id in payload.get("data") or []]

    async def get_pu_learning_plans(self) -> List[int]:
        payload = await self._request("GET", "/report/v1/report/pu_lps")
        return [int(lp_id) for lp_id in payload.get("data") or []]
