import uuid

import pytest
from fastapi.testclient import TestClient

from taskboard.application import Application
from taskboard.main import create_app
from tests.factories import auth_header


def test_welcome_and_health(client):
    welcome = client.get("/")
    assert welcome.status_code == 200
    assert welcome.json()["message"] == "Welcome to the Taskboard API"

    health = client.get("/health")
    body = health.json()
    assert health.status_code == 200
    assert body["status"] == "healthy"
    assert body["environment"] == "test"
    assert set(body["services"]) == {
        "config",
        "database",
        "realtime",
        "auth_service",
        "project_service",
        "task_service",
    }
    assert all(body["services"].values())


def test_sign_up_and_sign_in(client):
    response = client.post(
        "/auth/sign-up",
        json={"firstName": " John ", "lastName": "Doe", "email": "john.doe@example.com"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User account created."
    assert body["data"]["user"]["firstName"] == "John"
    assert body["data"]["user"]["role"] == "USER"
    assert body["data"]["token"]

    duplicate = client.post(
        "/auth/sign-up",
        json={"firstName": "John", "lastName": "Doe", "email": "john.doe@example.com"},
    )
    assert duplicate.status_code == 409

    signed_in = client.post("/auth/sign-in", json={"email": "john.doe@example.com"})
    assert signed_in.status_code == 200
    assert signed_in.json()["data"]["user"]["email"] == "john.doe@example.com"

    missing = client.post("/auth/sign-in", json={"email": "nobody@example.com"})
    assert missing.status_code == 404
    assert missing.json()["message"] == "User not found"


def test_sign_up_validation_returns_field_map(client):
    response = client.post("/auth/sign-up", json={"firstName": "John", "email": "not-an-email"})

    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Validation failed"
    assert set(body["error"]) == {"lastName", "email"}


def test_protected_routes_require_token(client, app_project):
    assert client.get("/projects").status_code == 401
    response = client.get("/tasks", params={"projectId": app_project.id})
    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized. Please sign in."

    bad = client.get("/users", headers={"Authorization": "Bearer nope"})
    assert bad.status_code == 401
    assert bad.json()["message"] == "Unauthorized. Invalid token!"


def test_admin_only_routes(client, application, app_admin, app_member):
    payload = {"title": "P1", "description": "d"}

    forbidden = client.post("/projects", json=payload, headers=auth_header(application, app_member))
    assert forbidden.status_code == 403
    assert forbidden.json()["message"] == "Access Denied."

    created = client.post("/projects", json=payload, headers=auth_header(application, app_admin))
    assert created.status_code == 201
    assert created.json()["message"] == "Project created."
    assert created.json()["data"]["title"] == "P1"

    listed = client.get("/projects", headers=auth_header(application, app_member))
    assert [project["title"] for project in listed.json()["data"]] == ["P1"]


def test_task_crud_over_http(client, application, app_admin, app_member, app_project):
    headers = auth_header(application, app_member)

    created = client.post(
        "/tasks",
        json={
            "title": "T1",
            "projectId": app_project.id,
            "assigneeId": app_member.id,
            "status": "DONE",
        },
        headers=headers,
    )
    assert created.status_code == 201
    task = created.json()["data"]
    assert task["status"] == "TODO"
    assert task["priority"] == "LOW"
    assert len(task["timelines"]) == 2

    listed = client.get("/tasks", params={"projectId": app_project.id}, headers=headers)
    assert listed.json()["message"] == "All tasks."
    assert [item["id"] for item in listed.json()["data"]] == [task["id"]]

    updated = client.patch(
        f"/tasks/{task['id']}",
        json={"title": "T1 v2", "assigneeId": app_admin.id, "priority": "HIGH"},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["assigneeId"] == app_admin.id
    assert updated.json()["data"]["priority"] == "HIGH"

    moved = client.patch(f"/tasks/{task['id']}/status", json={"status": "IN_PROGRESS"}, headers=headers)
    assert moved.status_code == 200
    assert moved.json()["data"]["status"] == "IN_PROGRESS"

    fetched = client.get(f"/tasks/{task['id']}", headers=headers)
    assert fetched.status_code == 200
    assert len(fetched.json()["data"]["timelines"]) == 5

    assert client.delete(f"/tasks/{task['id']}", headers=headers).status_code == 403
    deleted = client.delete(f"/tasks/{task['id']}", headers=auth_header(application, app_admin))
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Task deleted."}

    gone = client.get(f"/tasks/{task['id']}", headers=headers)
    assert gone.status_code == 404


def test_task_validation_errors(client, application, app_member, app_project):
    headers = auth_header(application, app_member)

    response = client.post(
        "/tasks",
        json={"title": "T1", "projectId": str(uuid.uuid4()), "assigneeId": app_member.id},
        headers=headers,
    )
    assert response.status_code == 422
    assert response.json()["message"] == "Task not created!"
    assert response.json()["error"] == {"projectId": "Project doesn't exist"}

    too_long = client.post(
        "/tasks",
        json={"title": "x" * 51, "projectId": app_project.id, "assigneeId": app_member.id},
        headers=headers,
    )
    assert too_long.status_code == 422
    assert "title" in too_long.json()["error"]

    bad_id = client.get("/tasks/42", headers=headers)
    assert bad_id.status_code == 422
    assert bad_id.json()["error"] == {"id": "Invalid ID"}


def test_users_listing(client, application, app_admin, app_member):
    response = client.get("/users", headers=auth_header(application, app_member))

    assert response.status_code == 200
    assert {user["email"] for user in response.json()["data"]} == {
        "admin@example.com",
        "jane.doe@example.com",
    }


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json()["message"] == "Resource not found"


@pytest.mark.parametrize(
    "environment, expected",
    [("production", "Something went wrong!"), ("development", "kaboom")],
)
def test_unhandled_errors_are_sanitized_in_production(config, environment, expected):
    config.ENVIRONMENT = environment
    app = create_app(Application(config))

    @app.get("/explode")
    def explode():
        raise RuntimeError("kaboom")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/explode")

    assert response.status_code == 500
    body = response.json()
    assert body["message"] == expected
    assert ("stack" in body) == (environment == "development")
