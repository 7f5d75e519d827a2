import asyncio

from taskboard.models import TaskStatus
from taskboard.services import RealtimeHub
from tests.factories import FakeSubscriber, StalledSubscriber, auth_header


def test_broadcast_reaches_channel_subscribers_only(hub):
    first, second, elsewhere = FakeSubscriber(), FakeSubscriber(), FakeSubscriber()
    hub.subscribe("project:1", first)
    hub.subscribe("project:1", second)
    hub.subscribe("project:2", elsewhere)

    sent = asyncio.run(hub.broadcast("project:1", {"event": "tasks"}))

    assert sent == 2
    assert first.messages == [{"event": "tasks"}]
    assert second.messages == [{"event": "tasks"}]
    assert elsewhere.messages == []


def test_broadcast_drops_disconnected_subscribers(hub):
    alive, gone = FakeSubscriber(), FakeSubscriber(fail=True)
    hub.subscribe("project:1", alive)
    hub.subscribe("project:1", gone)

    assert asyncio.run(hub.broadcast("project:1", {"event": "tasks"})) == 1
    assert hub.subscriber_count("project:1") == 1


def test_closed_hub_drops_broadcasts():
    hub = RealtimeHub()
    subscriber = FakeSubscriber()
    hub.subscribe("project:1", subscriber)

    assert asyncio.run(hub.broadcast("project:1", {"event": "tasks"})) == 0
    assert subscriber.messages == []


def test_connect_handlers_and_shutdown(hub):
    seen = []

    async def async_handler(subscriber):
        seen.append(("async", subscriber))

    hub.on_client_connected(lambda subscriber: seen.append(("sync", subscriber)))
    hub.on_client_connected(async_handler)
    subscriber = FakeSubscriber()
    asyncio.run(hub.client_connected(subscriber))
    assert seen == [("sync", subscriber), ("async", subscriber)]

    hub.subscribe("project:1", subscriber)
    hub.subscribe("project:2", subscriber)
    assert hub.subscriber_count() == 1

    asyncio.run(hub.destroy())
    assert subscriber.closed_with == 1001
    assert hub.subscriber_count() == 0
    assert not hub.health_check()


def test_unsubscribe_and_disconnect(hub):
    subscriber = FakeSubscriber()
    hub.subscribe("project:1", subscriber)
    hub.subscribe("project:2", subscriber)

    hub.unsubscribe("project:1", subscriber)
    assert hub.subscriber_count("project:1") == 0
    assert hub.subscriber_count("project:2") == 1

    hub.disconnect(subscriber)
    assert hub.subscriber_count() == 0


# WebSocket


def _token(application, user):
    return auth_header(application, user)["Authorization"].split(" ", 1)[1]


def _create_task(client, application, project, assignee, actor):
    response = client.post(
        "/tasks",
        json={"title": "T1", "projectId": project.id, "assigneeId": assignee.id},
        headers=auth_header(application, actor),
    )
    assert response.status_code == 201
    return response.json()["data"]


def test_ws_tasks_subscribes_and_receives_pushes(client, application, app_admin, app_member, app_project):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"event": "tasks", "ack": 1, "data": {"token": _token(application, app_member), "projectId": app_project.id}})
        reply = ws.receive_json()
        assert reply == {"event": "tasks", "ack": 1, "status": "ok", "tasks": []}

        task = _create_task(client, application, app_project, app_member, app_admin)

        push = ws.receive_json()
        assert push["event"] == "tasks"
        assert push["projectId"] == app_project.id
        assert [item["id"] for item in push["tasks"]] == [task["id"]]


def test_ws_status_update(client, application, app_admin, app_member, app_project):
    task = _create_task(client, application, app_project, app_member, app_admin)
    token = _token(application, app_member)

    with client.websocket_connect("/ws") as ws:
        ws.send_json({"event": "task_status_update", "ack": "a1", "data": {"token": token, "task": {"id": task["id"], "status": "DONE"}}})
        reply = ws.receive_json()

    assert reply["status"] == "ok"
    assert reply["ack"] == "a1"
    assert reply["tasks"][0]["status"] == TaskStatus.DONE.value
    assert len(reply["tasks"][0]["timelines"]) == 3


def test_ws_errors_are_reported(client, application, app_member, app_project):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"event": "tasks", "ack": 1, "data": {"token": "garbage", "projectId": app_project.id}})
        assert ws.receive_json() == {
            "event": "tasks",
            "ack": 1,
            "status": "error",
            "error": "Unauthorized. Invalid token!",
        }

        ws.send_json({"event": "task_status_update", "ack": 2, "data": {"token": _token(application, app_member), "task": {"id": "x", "status": "BLOCKED"}}})
        reply = ws.receive_json()
        assert reply["status"] == "error"
        assert reply["error"] == "Task not updated!"

        ws.send_json({"event": "dance", "ack": 3, "data": {}})
        assert ws.receive_json()["error"] == "Unknown event: dance"

        ws.send_text("{not json")
        assert ws.receive_json()["error"] == "Malformed frame"


def test_broadcast_drops_stalled_subscribers():
    hub = RealtimeHub(send_timeout=0.05)
    hub.initialize()
    alive, stalled = FakeSubscriber(), StalledSubscriber()
    hub.subscribe("project:1", alive)
    hub.subscribe("project:1", stalled)

    sent = asyncio.run(asyncio.wait_for(hub.broadcast("project:1", {"event": "tasks"}), timeout=2))

    assert sent == 1
    assert alive.messages == [{"event": "tasks"}]
    assert hub.subscriber_count("project:1") == 1


def test_subscribe_reports_full_channel(hub, monkeypatch):
    monkeypatch.setattr(hub, "MAX_SUBSCRIBERS_PER_CHANNEL", 1)
    first, second = FakeSubscriber(), FakeSubscriber()

    assert hub.subscribe("project:1", first) is True
    assert hub.subscribe("project:1", first) is True
    assert hub.subscribe("project:1", second) is False
    assert hub.subscriber_count("project:1") == 1


def test_ws_rejects_malformed_payloads(client, application, app_admin, app_project):
    token = _token(application, app_admin)

    with client.websocket_connect("/ws") as ws:
        for task in ("oops", ["id", "DONE"], None):
            ws.send_json({"event": "task_status_update", "ack": 1, "data": {"token": token, "task": task}})
            assert ws.receive_json() == {
                "event": "task_status_update",
                "ack": 1,
                "status": "error",
                "error": "Task not updated!",
            }

        ws.send_json({"event": "tasks", "ack": 2, "data": {"token": token, "projectId": ["x"]}})
        reply = ws.receive_json()
        assert reply["status"] == "error"
        assert reply["error"] == "Tasks not found!"

        # The connection is still usable afterwards
        ws.send_json({"event": "tasks", "ack": 3, "data": {"token": token, "projectId": app_project.id}})
        assert ws.receive_json()["status"] == "ok"


def test_ws_reports_full_project_channel(client, application, app_admin, app_project, monkeypatch):
    monkeypatch.setattr(application.realtime, "MAX_SUBSCRIBERS_PER_CHANNEL", 0)

    with client.websocket_connect("/ws") as ws:
        ws.send_json({"event": "tasks", "ack": 1, "data": {"token": _token(application, app_admin), "projectId": app_project.id}})
        reply = ws.receive_json()

    assert reply["status"] == "error"
    assert reply["error"] == "Too many clients are watching this project."
    assert application.realtime.subscriber_count() == 0
