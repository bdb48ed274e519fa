import httpx

from tests.helpers.flow_manager_stub import AUTH, COMPANY_ID


# ── notifications ─────────────────────────────────────────────────────────

def test_list_notifications_is_company_scoped(client, upstream):
    r = client.get("/api/notifications", headers=AUTH)
    assert r.status_code == 200
    assert [n["id"] for n in r.json()["data"]] == [20, 22]
    assert upstream.last().path == "/v1/notifications/"
    assert upstream.last().params == {"company_id": str(COMPANY_ID)}


def test_list_notifications_for_a_trigger_node(client, upstream):
    r = client.get("/api/notifications?trigger_node_id=8", headers=AUTH)
    assert [n["id"] for n in r.json()["data"]] == [22]
    assert upstream.paths() == ["GET /v1/companies/", "GET /v1/nodes/", "GET /v1/notifications/"]
    assert upstream.last().params == {"company_id": str(COMPANY_ID), "trigger_node_id": "8"}


def test_list_notifications_for_foreign_node(client, upstream):
    r = client.get("/api/notifications?trigger_node_id=70", headers=AUTH)
    assert r.status_code == 404
    assert r.json() == {"error": {"code": "NODE_NOT_FOUND"}}
    assert "GET /v1/notifications/" not in upstream.paths()


def test_list_notifications_query_rules(client, upstream):
    r = client.get("/api/notifications?trigger_node_id=x", headers=AUTH)
    assert r.json() == {"error": {"code": "INVALID_TRIGGER_NODE_ID"}}
    assert upstream.calls == []
    r = client.get("/api/notifications?company_id=99", headers=AUTH)
    assert r.status_code == 403
    assert r.json() == {"error": {"code": "FORBIDDEN_COMPANY_ID"}}


def test_create_notification_for_own_node(client, upstream):
    r = client.post("/api/notifications", headers=AUTH, json={"trigger_node_id": 7, "subject": "Hi"})
    assert r.status_code == 201
    assert upstream.paths() == ["GET /v1/companies/", "GET /v1/nodes/", "POST /v1/notifications/"]
    assert upstream.last("POST").body == {
        "trigger_node_id": 7, "company_id": COMPANY_ID, "subject": "Hi", "active": True}


def test_create_notification_for_foreign_node(client, upstream):
    r = client.post("/api/notifications", headers=AUTH, json={"trigger_node_id": 70})
    assert r.status_code == 404
    assert r.json() == {"error": {"code": "NODE_NOT_FOUND"}}
    assert upstream.writes() == []


def test_create_notification_needs_a_trigger_node(client, upstream):
    r = client.post("/api/notifications", headers=AUTH, json={"subject": "Hi"})
    assert r.status_code == 400
    assert r.json() == {"error": {"code": "INVALID_TRIGGER_NODE_ID"}}
    assert upstream.calls == []


def test_create_notification_upstream_failure(client, upstream):
    upstream.override("POST", "notifications/", httpx.Response(422, json={"detail": "bad"}))
    r = client.post("/api/notifications", headers=AUTH, json={"trigger_node_id": 7})
    assert r.status_code == 422
    assert r.json() == {"error": {"code": "NOTIFICATION_CREATE_FAILED", "details": {"detail": "bad"}}}


def test_delete_notification(client, upstream):
    r = client.delete("/api/notifications/20", headers=AUTH)
    assert r.status_code == 200
    assert upstream.last().method == "DELETE"
    assert upstream.last().path == "/v1/notifications/20"


def test_delete_foreign_notification(client, upstream):
    r = client.delete("/api/notifications/21", headers=AUTH)
    assert r.status_code == 404
    assert r.json() == {"error": {"code": "NOTIFICATION_NOT_FOUND"}}
    assert upstream.writes() == []


def test_delete_notification_path_id(client, upstream):
    r = client.delete("/api/notifications/abc", headers=AUTH)
    assert r.json() == {"error": {"code": "INVALID_NOTIFICATION_ID"}}
    assert upstream.calls == []


# ── recipients ────────────────────────────────────────────────────────────

def test_list_recipients(client, upstream):
    r = client.get("/api/notification-recipients?notification_id=20", headers=AUTH)
    assert r.status_code == 200
    assert [x["id"] for x in r.json()["data"]] == [31]
    assert upstream.paths() == [
        "GET /v1/companies/", "GET /v1/notifications/", "GET /v1/notification-recipients/",
    ]


def test_list_recipients_needs_notification(client, upstream):
    r = client.get("/api/notification-recipients", headers=AUTH)
    assert r.status_code == 400
    assert r.json() == {"error": {"code": "NOTIFICATION_ID_REQUIRED"}}
    assert upstream.calls == []


def test_list_recipients_of_foreign_notification(client, upstream):
    r = client.get("/api/notification-recipients?notification_id=21", headers=AUTH)
    assert r.status_code == 404
    assert r.json() == {"error": {"code": "NOTIFICATION_NOT_FOUND"}}
    assert "GET /v1/notification-recipients/" not in upstream.paths()


def test_create_recipient(client, upstream):
    body = {"notification_id": "20", "recipient_type": "email", "recipient_value": "a@b.c"}
    r = client.post("/api/notification-recipients", headers=AUTH, json=body)
    assert r.status_code == 201
    assert upstream.last("POST").path == "/v1/notification-recipients/"
    assert upstream.last("POST").body == {
        "notification_id": 20, "recipient_type": "email", "recipient_value": "a@b.c"}


def test_create_recipient_on_foreign_notification(client, upstream):
    r = client.post("/api/notification-recipients", headers=AUTH, json={"notification_id": 21})
    assert r.status_code == 404
    assert r.json() == {"error": {"code": "NOTIFICATION_NOT_FOUND"}}
    assert upstream.writes() == []


def test_delete_recipient_walks_the_chain(client, upstream):
    r = client.delete("/api/notification-recipients/31?notification_id=20", headers=AUTH)
    assert r.status_code == 200
    assert upstream.paths() == [
        "GET /v1/companies/", "GET /v1/notifications/", "GET /v1/notification-recipients/",
        "DELETE /v1/notification-recipients/31",
    ]


def test_delete_recipient_of_another_notification(client, upstream):
    r = client.delete("/api/notification-recipients/32?notification_id=20", headers=AUTH)
    assert r.status_code == 404
    assert r.json() == {"error": {"code": "RECIPIENT_NOT_FOUND"}}
    assert upstream.writes() == []


def test_delete_recipient_validation(client, upstream):
    r = client.delete("/api/notification-recipients/31", headers=AUTH)
    assert r.json() == {"error": {"code": "NOTIFICATION_ID_REQUIRED"}}
    r = client.delete("/api/notification-recipients/0?notification_id=20", headers=AUTH)
    assert r.json() == {"error": {"code": "INVALID_RECIPIENT_ID"}}
    assert upstream.calls == []
