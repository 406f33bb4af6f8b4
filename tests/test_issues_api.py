"""HTTP tests for the issues API: headers, roles, tenant isolation and activity."""
from uuid import uuid4

import pytest
from tracker_core.api.main import app
from tracker_core.database import get_db


class TestTenantHeaders:
    """Test header-based identity resolution on every issue route."""

    @pytest.mark.parametrize("missing", ["x-user-id", "x-org-id", "x-user-role"])
    def test_missing_header_rejected_before_persistence(self, client, headers, missing):
        """Requests without a tenant header fail with 401 and never open a session."""
        opened = []

        def tracking_get_db():
            opened.append(True)
            yield None

        app.dependency_overrides[get_db] = tracking_get_db
        request_headers = headers("member_a", "org_a", "MEMBER")
        del request_headers[missing]

        response = client.post("/issues", json={"title": "Bug"}, headers=request_headers)

        assert response.status_code == 401
        assert opened == []

    @pytest.mark.parametrize("role", ["OWNER", "admin", "GUEST"])
    def test_invalid_role_rejected(self, client, headers, role):
        response = client.get("/issues", headers=headers("member_a", "org_a", role))

        assert response.status_code == 401
        assert "Invalid role" in response.json()["detail"]

    def test_malformed_org_id_rejected(self, client, headers):
        request_headers = headers("member_a", "org_a", "MEMBER")
        request_headers["x-org-id"] = "not-a-uuid"

        response = client.get("/issues", headers=request_headers)

        assert response.status_code == 401

    def test_member_delete_rejected_before_persistence(self, client, headers):
        opened = []

        def tracking_get_db():
            opened.append(True)
            yield None

        app.dependency_overrides[get_db] = tracking_get_db

        response = client.delete(f"/issues/{uuid4()}", headers=headers("member_a", "org_a", "MEMBER"))

        assert response.status_code == 403
        assert opened == []


class TestIssueEndpoints:
    """Test the CRUD surface."""

    def test_create_response_shape(self, client, headers, tenants):
        response = client.post(
            "/issues",
            json={"title": "Bug", "description": "Crash on save", "assigneeId": str(tenants["admin_a"])},
            headers=headers("member_a", "org_a", "MEMBER"),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "OPEN"
        assert data["organizationId"] == str(tenants["org_a"])
        assert data["createdById"] == str(tenants["member_a"])
        assert data["createdBy"] == {
            "id": str(tenants["member_a"]),
            "name": "Mark Member",
            "email": "mark@a.example",
        }
        assert data["assignee"]["id"] == str(tenants["admin_a"])

    def test_create_rejects_unknown_fields(self, client, headers):
        response = client.post(
            "/issues",
            json={"title": "Bug", "status": "CLOSED"},
            headers=headers("member_a", "org_a", "MEMBER"),
        )

        assert response.status_code == 422

    def test_create_with_foreign_assignee_forbidden(self, client, headers, tenants):
        response = client.post(
            "/issues",
            json={"title": "Bug", "assigneeId": str(tenants["member_b"])},
            headers=headers("member_a", "org_a", "MEMBER"),
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Assignee must belong to your organization"

        listing = client.get("/issues", headers=headers("member_a", "org_a", "MEMBER"))
        assert listing.json() == []

    def test_list_is_scoped_to_organization(self, client, headers):
        client.post("/issues", json={"title": "A"}, headers=headers("member_a", "org_a", "MEMBER"))
        client.post("/issues", json={"title": "B"}, headers=headers("member_b", "org_b", "MEMBER"))

        response = client.get("/issues", headers=headers("admin_a", "org_a", "ADMIN"))

        assert response.status_code == 200
        assert [i["title"] for i in response.json()] == ["A"]

    def test_cross_tenant_access_is_not_found(self, client, headers):
        created = client.post("/issues", json={"title": "Secret"}, headers=headers("member_a", "org_a", "MEMBER"))
        issue_id = created.json()["id"]
        outsider = headers("member_b", "org_b", "ADMIN")

        assert client.get(f"/issues/{issue_id}", headers=outsider).status_code == 404
        assert client.get(f"/issues/{issue_id}/activity", headers=outsider).status_code == 404
        assert client.patch(f"/issues/{issue_id}", json={"status": "CLOSED"}, headers=outsider).status_code == 404
        assert client.delete(f"/issues/{issue_id}", headers=outsider).status_code == 404

        missing = client.get(f"/issues/{uuid4()}", headers=outsider)
        assert missing.json() == client.get(f"/issues/{issue_id}", headers=outsider).json()

        still_there = client.get(f"/issues/{issue_id}", headers=headers("member_a", "org_a", "MEMBER"))
        assert still_there.json()["status"] == "OPEN"

    def test_malformed_issue_id_is_not_found(self, client, headers):
        """An id that is not a UUID answers like any missing issue."""
        admin = headers("admin_a", "org_a", "ADMIN")
        missing = client.get(f"/issues/{uuid4()}", headers=admin)

        responses = [
            client.get("/issues/abc", headers=admin),
            client.get("/issues/abc/activity", headers=admin),
            client.patch("/issues/abc", json={"status": "CLOSED"}, headers=admin),
            client.delete("/issues/abc", headers=admin),
        ]

        assert missing.json() == {"detail": "Issue not found"}
        for response in responses:
            assert response.status_code == 404
            assert response.json() == missing.json()

    def test_update_status_and_assignee(self, client, headers, tenants):
        admin = headers("admin_a", "org_a", "ADMIN")
        issue_id = client.post("/issues", json={"title": "Bug"}, headers=admin).json()["id"]

        response = client.patch(
            f"/issues/{issue_id}",
            json={"status": "RESOLVED", "assigneeId": str(tenants["member_a"])},
            headers=admin,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "RESOLVED"
        assert response.json()["assignee"]["name"] == "Mark Member"

        activities = client.get(f"/issues/{issue_id}/activity", headers=admin).json()
        assert len(activities) == 3
        assert {a["actionType"]: (a["oldValue"], a["newValue"]) for a in activities[:2]} == {
            "STATUS_CHANGED": ("OPEN", "RESOLVED"),
            "ASSIGNEE_CHANGED": ("unassigned", str(tenants["member_a"])),
        }
        assert activities[-1]["actionType"] == "CREATED"
        assert activities[0]["performedByUser"]["email"] == "alice@a.example"

    def test_update_rejects_invalid_status(self, client, headers):
        admin = headers("admin_a", "org_a", "ADMIN")
        issue_id = client.post("/issues", json={"title": "Bug"}, headers=admin).json()["id"]

        response = client.patch(f"/issues/{issue_id}", json={"status": "DONE"}, headers=admin)

        assert response.status_code == 422

    def test_unassign_logs_unassigned(self, client, headers, tenants):
        admin = headers("admin_a", "org_a", "ADMIN")
        issue_id = client.post(
            "/issues", json={"title": "Bug", "assigneeId": str(tenants["member_a"])}, headers=admin
        ).json()["id"]

        response = client.patch(f"/issues/{issue_id}", json={"assigneeId": None}, headers=admin)

        assert response.status_code == 200
        assert response.json()["assignee"] is None
        latest = client.get(f"/issues/{issue_id}", headers=admin).json()["activities"][0]
        assert latest["actionType"] == "ASSIGNEE_CHANGED"
        assert latest["oldValue"] == str(tenants["member_a"])
        assert latest["newValue"] == "unassigned"

    def test_delete_then_fetch_not_found(self, client, headers):
        admin = headers("admin_a", "org_a", "ADMIN")
        issue_id = client.post("/issues", json={"title": "Bug"}, headers=admin).json()["id"]

        response = client.delete(f"/issues/{issue_id}", headers=admin)

        assert response.status_code == 200
        assert response.json() == {"message": "Issue deleted successfully"}
        assert client.get(f"/issues/{issue_id}", headers=admin).status_code == 404


class TestIssueLifecycleScenario:
    """End-to-end: member creates, member update is forbidden, admin updates."""

    def test_scenario(self, client, headers):
        member = headers("member_a", "org_a", "MEMBER")
        admin = headers("admin_a", "org_a", "ADMIN")

        created = client.post("/issues", json={"title": "Bug", "priority": "high"}, headers=member)
        assert created.status_code == 201
        issue_id = created.json()["id"]
        assert created.json()["status"] == "OPEN"

        detail = client.get(f"/issues/{issue_id}", headers=member).json()
        assert [a["actionType"] for a in detail["activities"]] == ["CREATED"]

        forbidden = client.patch(f"/issues/{issue_id}", json={"status": "IN_PROGRESS"}, headers=member)
        assert forbidden.status_code == 403

        updated = client.patch(f"/issues/{issue_id}", json={"status": "IN_PROGRESS"}, headers=admin)
        assert updated.status_code == 200
        assert updated.json()["status"] == "IN_PROGRESS"

        activities = client.get(f"/issues/{issue_id}", headers=admin).json()["activities"]
        assert [a["actionType"] for a in activities] == ["STATUS_CHANGED", "CREATED"]
        assert activities[0]["oldValue"] == "OPEN"
        assert activities[0]["newValue"] == "IN_PROGRESS"


class TestServiceEndpoints:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_root(self, client):
        data = client.get("/").json()
        assert data["name"] == "Tracker Core API"
        assert "x-org-id" in data["required_headers"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
