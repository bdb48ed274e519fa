# tests/helpers/flow_manager_stub.py
"""
In-memory stand-in for the flow-manager service, served through
``httpx.MockTransport``.

List endpoints filter the seeded data by their query parameter; every other
call echoes what it received. Each request is recorded in ``calls`` so tests
can assert that nothing was written (or nothing was called at all).
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import httpx

BASE_URL = "http://flows.test/v1"
PREFIX = "/v1/"

TENANT_KEY = "555-0100"
COMPANY_ID = 42
OTHER_COMPANY_ID = 99

EMAIL = "ana@example.com"
AUTH = {"X-User-Email": "Ana@Example.COM"}
FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, 123000, tzinfo=timezone.utc)
NOW_ISO = "2024-05-01T12:00:00.123Z"


@dataclass
class Call:
    method: str
    path: str
    params: Dict[str, str]
    body: Any = None
    raw: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)


Override = Union[httpx.Response, Exception]


class FakeFlowManager:
    def __init__(self) -> None:
        self.calls: List[Call] = []
        self.overrides: Dict[tuple, Override] = {}
        self.items: Dict[str, Any] = {}
        self._next_id = 100
        self.companies: Dict[str, List[dict]] = {TENANT_KEY: [{"id": COMPANY_ID, "unique_identifier": TENANT_KEY}]}
        self.nodes: Dict[int, List[dict]] = {
            COMPANY_ID: [
                {"id": 7, "company_id": COMPANY_ID, "prompt": "Hello"},
                {"id": 8, "company_id": COMPANY_ID, "prompt": "Bye"},
            ],
            OTHER_COMPANY_ID: [{"id": 70, "company_id": OTHER_COMPANY_ID, "prompt": "Theirs"}],
        }
        self.edges: Dict[int, List[dict]] = {
            7: [{"id": 11, "source_node_id": 7, "destination_node_id": 8, "label": "next", "priority": 0}],
            8: [],
            70: [{"id": 71, "source_node_id": 70, "destination_node_id": 70, "label": "loop", "priority": 0}],
        }
        self.conditions: Dict[int, List[dict]] = {
            11: [{"id": 5, "edge_id": 11, "operator": "eq", "compare_value": "yes"}],
            71: [{"id": 72, "edge_id": 71, "operator": "eq", "compare_value": ""}],
        }
        self.properties: Dict[int, List[dict]] = {
            COMPANY_ID: [{"id": 3, "company_id": COMPANY_ID, "name": "city", "type": "string", "description": None}],
            OTHER_COMPANY_ID: [{"id": 30, "company_id": OTHER_COMPANY_ID, "name": "secret", "type": "string"}],
        }
        self.node_properties: Dict[int, List[dict]] = {7: [{"node_id": 7, "property_id": 3}]}
        self.condition_properties: Dict[int, List[dict]] = {5: [{"id": 9, "condition_id": 5, "property_id": 3}]}
        self.notifications: Dict[int, List[dict]] = {
            COMPANY_ID: [
                {"id": 20, "company_id": COMPANY_ID, "trigger_node_id": 7, "subject": "Welcome", "active": True},
                {"id": 22, "company_id": COMPANY_ID, "trigger_node_id": 8, "subject": "Bye", "active": False},
            ],
            OTHER_COMPANY_ID: [
                {"id": 21, "company_id": OTHER_COMPANY_ID, "trigger_node_id": 70, "subject": "Theirs", "active": True},
            ],
        }
        self.notification_recipients: Dict[int, List[dict]] = {
            20: [{"id": 31, "notification_id": 20, "recipient_type": "email", "recipient_value": "ops@example.com"}],
            21: [{"id": 32, "notification_id": 21, "recipient_type": "phone", "recipient_value": "555-0199"}],
        }

    # ── test helpers ──────────────────────────────────────────────────────
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport())

    def override(self, method: str, path: str, outcome: Override) -> None:
        """*path* is relative to the base URL, e.g. ``"nodes/"``."""
        self.overrides[(method.upper(), PREFIX + path)] = outcome

    def writes(self) -> List[Call]:
        return [c for c in self.calls if c.method != "GET"]

    def paths(self) -> List[str]:
        return [f"{c.method} {c.path}" for c in self.calls]

    def last(self, method: Optional[str] = None) -> Call:
        calls = [c for c in self.calls if method is None or c.method == method]
        return calls[-1]

    # ── transport ─────────────────────────────────────────────────────────
    def handler(self, request: httpx.Request) -> httpx.Response:
        raw = request.content or b""
        body = json.loads(raw) if raw else None
        params = dict(request.url.params)
        path = request.url.path
        self.calls.append(Call(request.method, path, params, body, raw, dict(request.headers)))

        outcome = self.overrides.get((request.method, path))
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is not None:
            return outcome

        rel = path[len(PREFIX):] if path.startswith(PREFIX) else path
        if request.method == "POST" and rel == "properties/":
            created = {"id": self._next_id, **body}
            self._next_id += 1
            self.properties.setdefault(body["company_id"], []).append(created)
            return httpx.Response(201, json=created)
        if request.method == "GET" and rel.endswith("/") and rel.count("/") == 1:
            return httpx.Response(200, json=self._listing(rel[:-1], params))
        if request.method == "GET" and path in self.items:
            return httpx.Response(200, json=self.items[path])

        status = 201 if request.method == "POST" else 200
        return httpx.Response(status, json={"echo": {"method": request.method, "path": path, "body": body}})

    def _listing(self, resource: str, params: Dict[str, str]) -> Any:
        def _int(key: str) -> int:
            return int(params.get(key, "0"))

        if resource == "companies":
            return self.companies.get(params.get("unique_identifier", ""), [])
        if resource == "nodes":
            return self.nodes.get(_int("company_id"), [])
        if resource == "edges":
            # the real service answers list reads with an {"items": [...]} envelope
            return {"items": self.edges.get(_int("source_node_id"), [])}
        if resource == "conditions":
            return self.conditions.get(_int("edge_id"), [])
        if resource == "properties":
            return self.properties.get(_int("company_id"), [])
        if resource == "node-properties":
            return self.node_properties.get(_int("node_id"), [])
        if resource == "condition-properties":
            return self.condition_properties.get(_int("condition_id"), [])
        if resource == "notifications":
            found = self.notifications.get(_int("company_id"), [])
            if "trigger_node_id" in params:
                found = [n for n in found if n["trigger_node_id"] == _int("trigger_node_id")]
            return found
        if resource == "notification-recipients":
            return self.notification_recipients.get(_int("notification_id"), [])
        return []
