from tests.helpers.flow_manager_stub import AUTH, NOW_ISO

CP_SCOPE = "condition_id=5&edge_id=11&source_node_id=7"


# ── node ↔ property ───────────────────────────────────────────────────────

def test_list_node_properties(client, upstream):
    r = client.get("/api/node-properties?node_id=7", headers=AUTH)
    assert r.status_code == 200
    assert r.json() == {"data": [{"node_id": 7, "property_id": 3}]}
    assert upstream.last().params == {"node_id": "7"}


def test_list_node_properties_requires_node(client, upstream):
    r = client.get("/api/node-properties", headers=AUTH)
    assert r.status_code == 400
    assert r.json() == {"error": {"code": "NODE_ID_REQUIRED"}}
    assert upstream.calls == []


def test_link_node_to_property_checks_both_sides(client, upstream):
    r = client.post("/api/node-properties?node_id=8", headers=AUTH, json={"property_id": "3"})
    assert r.status_code == 201
    assert upstream.paths() == [
        "GET /v1/companies/", "GET /v1/nodes/", "GET /v1/properties/", "POST /v1/node-properties/",
    ]
    assert upstream.last("POST").body == {"node_id": 8, "property_id": 3}


def test_link_to_foreign_property(client, upstream):
    r = client.post("/api/node-properties", headers=AUTH, json={"node_id": 7, "property_id": 30})
    assert r.status_code == 404
    assert r.json() == {"error": {"code": "PROPERTY_NOT_FOUND"}}
    assert upstream.writes() == []


def test_link_body_validation(client, upstream):
    cases = [
        ("/api/node-properties?node_id=7", {"node_id": 8, "property_id": 3}, "NODE_ID_MISMATCH"),
        ("/api/node-properties", {"property_id": 3}, "NODE_ID_REQUIRED"),
        ("/api/node-properties", {"node_id": "x", "property_id": 3}, "INVALID_NODE_ID"),
        ("/api/node-properties?node_id=7", {"property_id": 0}, "INVALID_PROPERTY_ID"),
        ("/api/node-properties?node_id=abc", {"property_id": 3}, "INVALID_NODE_ID"),
    ]
    for url, body, code in cases:
        r = client.post(url, headers=AUTH, json=body)
        assert r.status_code == 400, body
        assert r.json() == {"error": {"code": code}}
    assert upstream.calls == []


def test_unlink_node_property(client, upstream):
    r = client.delete("/api/node-properties/7/3", headers=AUTH)
    assert r.status_code == 200
    assert upstream.last().method == "DELETE"
    assert upstream.last().path == "/v1/node-properties/7/3"


def test_unlink_with_foreign_property_never_deletes(client, upstream):
    r = client.delete("/api/node-properties/7/30", headers=AUTH)
    assert r.status_code == 404
    assert r.json() == {"error": {"code": "PROPERTY_NOT_FOUND"}}
    assert upstream.writes() == []


# ── condition ↔ property ──────────────────────────────────────────────────

def test_list_condition_properties(client, upstream):
    r = client.get(f"/api/condition-properties?{CP_SCOPE}", headers=AUTH)
    assert r.status_code == 200
    assert [lnk["id"] for lnk in r.json()["data"]] == [9]
    assert upstream.paths() == [
        "GET /v1/companies/", "GET /v1/nodes/", "GET /v1/edges/",
        "GET /v1/conditions/", "GET /v1/condition-properties/",
    ]


def test_condition_property_scope_is_validated_in_order(client, upstream):
    r = client.get("/api/condition-properties", headers=AUTH)
    assert r.json() == {"error": {"code": "CONDITION_ID_REQUIRED"}}
    r = client.get("/api/condition-properties?condition_id=5", headers=AUTH)
    assert r.json() == {"error": {"code": "EDGE_ID_REQUIRED"}}
    r = client.get("/api/condition-properties?condition_id=5&edge_id=11", headers=AUTH)
    assert r.json() == {"error": {"code": "SOURCE_NODE_ID_REQUIRED"}}
    assert upstream.calls == []


def test_create_condition_property(client, upstream):
    r = client.post(f"/api/condition-properties?{CP_SCOPE}", headers=AUTH, json={"property_id": 3})
    assert r.status_code == 201
    assert upstream.paths()[-2:] == ["GET /v1/properties/", "POST /v1/condition-properties/"]
    assert upstream.last("POST").body == {
        "condition_id": 5,
        "property_id": 3,
        "created_at": NOW_ISO,
        "updated_at": NOW_ISO,
    }


def test_create_condition_property_mismatch(client, upstream):
    r = client.post(f"/api/condition-properties?{CP_SCOPE}", headers=AUTH,
                    json={"condition_id": 6, "property_id": 3})
    assert r.status_code == 400
    assert r.json() == {"error": {"code": "CONDITION_ID_MISMATCH"}}
    assert upstream.calls == []


def test_get_condition_property(client, upstream):
    upstream.items["/v1/condition-properties/9"] = {"id": 9, "condition_id": "5", "property_id": 3}
    r = client.get(f"/api/condition-properties/9?{CP_SCOPE}", headers=AUTH)
    assert r.status_code == 200
    assert r.json()["data"]["id"] == 9


def test_get_condition_property_of_other_condition(client, upstream):
    upstream.items["/v1/condition-properties/9"] = {"id": 9, "condition_id": 72, "property_id": 3}
    r = client.get(f"/api/condition-properties/9?{CP_SCOPE}", headers=AUTH)
    assert r.status_code == 404
    assert r.json() == {"error": {"code": "CONDITION_PROPERTY_MISMATCH"}}


def test_update_condition_property(client, upstream):
    r = client.put(f"/api/condition-properties/9?{CP_SCOPE}", headers=AUTH,
                   json={"property_id": 3, "created_at": "2020-01-01T00:00:00.000Z"})
    assert r.status_code == 200
    call = upstream.last("PUT")
    assert call.path == "/v1/condition-properties/9"
    assert call.body == {"condition_id": 5, "property_id": 3, "updated_at": NOW_ISO}


def test_update_condition_property_blank_updated_at_uses_server_time(client, upstream):
    r = client.put(f"/api/condition-properties/9?{CP_SCOPE}", headers=AUTH,
                   json={"property_id": 3, "updated_at": ""})
    assert r.status_code == 200
    assert upstream.last("PUT").body["updated_at"] == NOW_ISO


def test_delete_condition_property_uses_nested_path(client, upstream):
    r = client.delete(f"/api/condition-properties/9?{CP_SCOPE}", headers=AUTH)
    assert r.status_code == 200
    assert upstream.last().path == "/v1/condition-properties/5/9"


def test_condition_property_on_foreign_chain(client, upstream):
    r = client.delete("/api/condition-properties/9?condition_id=72&edge_id=71&source_node_id=70", headers=AUTH)
    assert r.status_code == 404
    assert r.json() == {"error": {"code": "NODE_NOT_FOUND"}}
    assert upstream.writes() == []
