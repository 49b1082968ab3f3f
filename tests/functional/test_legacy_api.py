"""
API tests for the legacy import endpoint.
"""

import json

from fastapi.testclient import TestClient


def legacy_payload(id_filter: str, report_type_id: str, filter_data) -> dict:
    return {
        "id_filter": id_filter,
        "report_type_id": report_type_id,
        "author": 3,
        "filter_name": f"Legacy {id_filter}",
        "filter_data": json.dumps(filter_data),
        "visibility_type": "selection",
    }


class TestLegacyImport:
    """Test POST /api/legacy/import"""

    def test_import_mixed_reports(self, client: TestClient):
        """Test convertible reports come back parsed and the rest under notParsed"""
        body = {
            "reports": [
                legacy_payload("10", "1", {
                    "fields": {"user": ["email"]},
                    "order": {"orderBy": "user.email", "type": "asc"},
                    "filters": {"subscription_status": "in_progress"},
                }),
                legacy_payload("11", "1", {"fields": {"user": ["email"]}}),
                legacy_payload("12", "77", {"filters": {}}),
            ],
            "visibilityRules": [{"id_report": "10", "member_type": "user", "member_id": 4}],
            "platform": "acme.example.com",
        }

        response = client.post("/api/legacy/import", json=body)
        assert response.status_code == 200

        result = response.json()
        assert len(result["parsed"]) == 1
        assert [report["id_filter"] for report in result["notParsed"]] == ["11", "12"]

        definition = result["parsed"][0]
        assert definition["importedFromLegacyId"] == "10"
        assert definition["platform"] == "acme.example.com"
        assert definition["author"] == 3
        assert definition["fields"] == ["user_userid", "course_name", "user_email"]
        assert definition["sortingOptions"]["selectedField"] == "user_email"
        assert definition["visibility"]["type"] == 3
        assert definition["visibility"]["users"][0]["id"] == 4
        assert definition["enrollment"]["inProgress"] is True
        assert definition["enrollment"]["completed"] is False

    def test_imported_definition_compiles(self, client: TestClient):
        """Test an imported definition can be sent straight to the compile endpoint"""
        body = {"reports": [legacy_payload("20", "50", {"fields": {"stat": ["likes"]}, "filters": {"x": 1}})]}

        imported = client.post("/api/legacy/import", json=body)
        assert imported.status_code == 200
        definition = imported.json()["parsed"][0]

        response = client.post("/api/reports/compile", json={"definition": definition})
        assert response.status_code == 200
        assert response.json()["columns"][0] == "Asset Name"

    def test_empty_report_list(self, client: TestClient):
        response = client.post("/api/legacy/import", json={"reports": []})
        assert response.status_code == 422
