"""Node↔Property and Condition↔Property link bodies."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from core_http.errors import fail
from core_logging.error_codes import ErrorCode

from flow_bff.payloads.fields import (
    as_result,
    has,
    matching_id,
    positive_int,
    timestamp_or_none,
)


@dataclass(frozen=True)
class NodePropertyLink:
    node_id: int
    property_id: int

    def upstream(self) -> Dict[str, Any]:
        return {"node_id": self.node_id, "property_id": self.property_id}


@as_result
def parse_node_property(record: Mapping[str, Any], query_node_id: Optional[int]) -> NodePropertyLink:
    """``node_id`` may come from the body, the query string, or both (then equal)."""
    if has(record, "node_id"):
        node_id = positive_int(record["node_id"], ErrorCode.INVALID_NODE_ID)
        if query_node_id is not None and node_id != query_node_id:
            fail(400, ErrorCode.NODE_ID_MISMATCH)
    elif query_node_id is not None:
        node_id = query_node_id
    else:
        fail(400, ErrorCode.NODE_ID_REQUIRED)
    property_id = positive_int(record.get("property_id"), ErrorCode.INVALID_PROPERTY_ID)
    return NodePropertyLink(node_id=node_id, property_id=property_id)


@dataclass(frozen=True)
class ConditionPropertyLink:
    condition_id: int
    property_id: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def upstream_create(self, now: str) -> Dict[str, Any]:
        return {
            "condition_id": self.condition_id,
            "property_id": self.property_id,
            "created_at": self.created_at or now,
            "updated_at": self.updated_at or now,
        }

    def upstream_update(self, now: str) -> Dict[str, Any]:
        return {
            "condition_id": self.condition_id,
            "property_id": self.property_id,
            "updated_at": self.updated_at or now,
        }


@as_result
def parse_condition_property(record: Mapping[str, Any], condition_id: int) -> ConditionPropertyLink:
    condition_id = matching_id(record, "condition_id", condition_id,
                               ErrorCode.INVALID_CONDITION_ID, ErrorCode.CONDITION_ID_MISMATCH)
    property_id = positive_int(record.get("property_id"), ErrorCode.INVALID_PROPERTY_ID)
    return ConditionPropertyLink(
        condition_id=condition_id,
        property_id=property_id,
        created_at=timestamp_or_none(record, "created_at"),
        updated_at=timestamp_or_none(record, "updated_at"),
    )
