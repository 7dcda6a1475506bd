"""Tests for role management endpoints and their route guards."""

from fastapi import Depends
from fastapi.testclient import TestClient

from talentdesk.api.guards import PermissionDependency
from talentdesk.core.rbac.permissions import RESOURCE_CATALOG


CURRENT_USER_ID = "current-user-id"


def role_id(client: TestClient, name: str) -> str:
    roles = client.get("/api/roles").json()
    return next(r["id"] for r in roles if r["name"] == name)


def drain(client: TestClient) -> list:
    return client.get("/api/notifications").json()


RECRUITER_PAYLOAD = {
    "name": "Sourcer",
    "description": "Finds candidates",
    "permissions": [
        {"resource": "candidates", "action": "write"},
        {"resource": "reports", "action": "read"},
    ],
}


class TestRoleEndpoints:
    def test_list_default_roles(self, client):
        response = client.get("/api/roles")
        assert response.status_code == 200
        names = {r["name"] for r in response.json()}
        assert names == {"Admin", "HR Manager", "Recruiter", "Viewer"}

    def test_list_resources_in_catalog_order(self, client):
        response = client.get("/api/roles/resources")
        assert response.status_code == 200
        keys = [r["key"] for r in response.json()]
        assert keys == [info.key.value for info in RESOURCE_CATALOG]
        assert all(r["default_action"] == "none" for r in response.json())

    def test_get_role(self, client):
        admin_id = role_id(client, "Admin")
        response = client.get(f"/api/roles/{admin_id}")
        assert response.status_code == 200
        assert response.json()["name"] == "Admin"

    def test_get_missing_role(self, client):
        assert client.get("/api/roles/missing").status_code == 404

    def test_create_role(self, client):
        drain(client)
        response = client.post("/api/roles", json=RECRUITER_PAYLOAD)

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Sourcer"
        assert data["permissions"] == RECRUITER_PAYLOAD["permissions"]
        assert data["created_at"]
        assert [n["description"] for n in drain(client)] == ["Role created successfully"]

    def test_create_duplicate_name(self, client):
        client.post("/api/roles", json=RECRUITER_PAYLOAD)
        response = client.post("/api/roles", json=RECRUITER_PAYLOAD)
        assert response.status_code == 400
        assert "already exists" in response.json()["detail"]

    def test_create_rejects_repeated_resource(self, client):
        payload = dict(RECRUITER_PAYLOAD, permissions=[
            {"resource": "jobs", "action": "read"},
            {"resource": "jobs", "action": "write"},
        ])
        assert client.post("/api/roles", json=payload).status_code == 422

    def test_create_rejects_unknown_resource(self, client):
        payload = dict(RECRUITER_PAYLOAD, permissions=[{"resource": "payroll", "action": "read"}])
        assert client.post("/api/roles", json=payload).status_code == 422

    def test_create_rejects_blank_name(self, client):
        payload = dict(RECRUITER_PAYLOAD, name="   ")
        assert client.post("/api/roles", json=payload).status_code == 422

    def test_update_role(self, client):
        created = client.post("/api/roles", json=RECRUITER_PAYLOAD).json()
        payload = dict(RECRUITER_PAYLOAD, description="Finds and screens candidates")

        response = client.put(f"/api/roles/{created['id']}", json=payload)

        assert response.status_code == 200
        assert response.json()["description"] == "Finds and screens candidates"

    def test_update_missing_role(self, client):
        assert client.put("/api/roles/missing", json=RECRUITER_PAYLOAD).status_code == 404

    def test_delete_role(self, client):
        created = client.post("/api/roles", json=RECRUITER_PAYLOAD).json()

        assert client.delete(f"/api/roles/{created['id']}").status_code == 204
        assert client.get(f"/api/roles/{created['id']}").status_code == 404
        assert client.delete(f"/api/roles/{created['id']}").status_code == 404


class TestCurrentRoleChanges:
    def test_editing_current_role_refreshes_session(self, client):
        admin_id = role_id(client, "Admin")
        payload = {
            "name": "Admin",
            "description": "Role management only",
            "permissions": [{"resource": "roles", "action": "write"}],
        }

        assert client.put(f"/api/roles/{admin_id}", json=payload).status_code == 200

        check = client.get("/api/session/check", params={"resource": "jobs"}).json()
        assert check["allowed"] is False

    def test_deleting_current_role_denies_everything(self, client):
        admin_id = role_id(client, "Admin")

        assert client.delete(f"/api/roles/{admin_id}").status_code == 204

        session = client.get("/api/session").json()
        assert session["current_user"]["role_id"] == admin_id
        assert session["user_role"] is None
        response = client.get("/api/roles", follow_redirects=False)
        assert response.status_code == 303


class TestRouteGuard:
    def test_denied_write_redirects_to_default_route(self, client):
        viewer_id = role_id(client, "Viewer")
        assert client.put(f"/api/users/{CURRENT_USER_ID}/role", json={"role_id": viewer_id}).status_code == 204
        drain(client)

        response = client.post("/api/roles", json=RECRUITER_PAYLOAD, follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/"
        notes = drain(client)
        assert notes[-1]["title"] == "Access Denied"
        assert notes[-1]["variant"] == "destructive"

    def test_redirect_lands_on_dashboard(self, client):
        viewer_id = role_id(client, "Viewer")
        client.put(f"/api/users/{CURRENT_USER_ID}/role", json={"role_id": viewer_id})

        response = client.get("/api/users")

        assert response.status_code == 200
        assert response.json()["name"] == "TalentDesk"

    def test_loading_session_answers_503(self, app):
        client = TestClient(app)

        response = client.get("/api/roles", follow_redirects=False)

        assert response.status_code == 503
        assert response.headers["retry-after"] == "1"
        assert response.json()["status"] == "loading"


class TestEditFlag:
    """``can_edit`` comes from the permission dependency in hook mode: a boolean, never a redirect."""

    def test_admin_can_edit(self, client):
        admin_id = role_id(client, "Admin")
        response = client.get(f"/api/roles/{admin_id}")
        assert response.status_code == 200
        assert response.json()["can_edit"] is True

    def test_read_only_role_gets_false_without_redirect(self, client):
        auditor = client.post("/api/roles", json={
            "name": "Auditor",
            "description": "Reviews role definitions",
            "permissions": [{"resource": "roles", "action": "read"}],
        }).json()
        client.put(f"/api/users/{CURRENT_USER_ID}/role", json={"role_id": auditor["id"]})
        drain(client)

        response = client.get(f"/api/roles/{auditor['id']}", follow_redirects=False)

        assert response.status_code == 200
        assert response.json()["can_edit"] is False
        assert all(n["title"] != "Access Denied" for n in drain(client))

    def test_hook_answers_while_session_loads(self, app):
        @app.get("/can-edit-roles")
        async def can_edit_roles(
            allowed: bool = Depends(PermissionDependency("roles", "write", redirect_on_failure=False)),
        ):
            return {"allowed": allowed}

        response = TestClient(app).get("/can-edit-roles", follow_redirects=False)

        assert response.status_code == 200
        assert response.json() == {"allowed": False}
