"""Pydantic schemas for legacy report payloads."""

import json
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from report_engine.reports.schemas import ReportDefinition


class VisibilityRule(BaseModel):
    """One member a legacy report is shared with."""

    id_report: str
    member_type: str  # 'user', 'group' or 'branch'
    member_id: str
    select_state: str = "1"  # '2' includes the descendant branches

    model_config = ConfigDict(coerce_numbers_to_str=True)


class LegacyReport(BaseModel):
    """A report row of the legacy reporting tool; ``filter_data`` holds the filter JSON."""

    id_filter: str
    report_type_id: str
    author: str = "0"
    creation_date: str = ""
    filter_name: str = ""
    filter_data: Union[str, Dict[str, Any]] = "{}"
    is_public: str = "0"
    views: str = "0"
    is_standard: str = "0"
    id_job: Optional[str] = None
    last_edit_by: Optional[str] = None
    last_edit: Optional[str] = None
    visibility_type: str = "private"

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    def filter_payload(self) -> Dict[str, Any]:
        if isinstance(self.filter_data, dict):
            return self.filter_data
        return json.loads(self.filter_data or "{}")


class LegacyImportRequest(BaseModel):
    """Request schema for importing legacy reports."""

    reports: List[LegacyReport]
    visibility_rules: List[VisibilityRule] = Field(default_factory=list, alias="visibilityRules")
    platform: str = ""

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("reports")
    @classmethod
    def validate_reports(cls, v: List[LegacyReport]) -> List[LegacyReport]:
        if not v:
            raise ValueError("At least one legacy report is required")
        return v


class LegacyImportResponse(BaseModel):
    parsed: List[ReportDefinition]
    not_parsed: List[LegacyReport] = Field(default_factory=list, serialization_alias="notParsed")

    model_config = ConfigDict(populate_by_name=True)
