from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from core_http.errors import fail
from core_logging.error_codes import ErrorCode

from flow_bff.payloads.fields import (
    as_result,
    has,
    integer,
    positive_int,
    required_text,
    strict_timestamp,
    timestamp_or_none,
)


@dataclass(frozen=True)
class EdgeCreate:
    source_node_id: int
    destination_node_id: int
    label: str
    priority: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def upstream(self, now: str) -> Dict[str, Any]:
        return {
            "source_node_id": self.source_node_id,
            "destination_node_id": self.destination_node_id,
            "label": self.label,
            "priority": self.priority,
            "created_at": self.created_at or now,
            "updated_at": self.updated_at or now,
        }


@dataclass(frozen=True)
class EdgeUpdate:
    """Only the submitted fields travel upstream."""
    fields: Dict[str, Any] = field(default_factory=dict)
    updated_at: Optional[str] = None

    @property
    def new_endpoints(self) -> List[int]:
        """Node ids the edge would point at after the update."""
        return [self.fields[k] for k in ("source_node_id", "destination_node_id") if k in self.fields]

    def upstream(self, now: str) -> Dict[str, Any]:
        return {**self.fields, "updated_at": self.updated_at or now}


@as_result
def parse_edge_create(record: Mapping[str, Any]) -> EdgeCreate:
    source = positive_int(record.get("source_node_id"), ErrorCode.INVALID_SOURCE_NODE_ID)
    destination = positive_int(record.get("destination_node_id"), ErrorCode.INVALID_DESTINATION_NODE_ID)
    label = required_text(record, "label", ErrorCode.LABEL_REQUIRED)
    # an explicit null means 0; a missing key is not a priority
    if not has(record, "priority"):
        fail(400, ErrorCode.INVALID_PRIORITY)
    priority = 0 if record["priority"] is None else integer(record["priority"], ErrorCode.INVALID_PRIORITY)
    return EdgeCreate(
        source_node_id=source,
        destination_node_id=destination,
        label=label,
        priority=priority,
        created_at=timestamp_or_none(record, "created_at"),
        updated_at=timestamp_or_none(record, "updated_at"),
    )


@as_result
def parse_edge_update(record: Mapping[str, Any]) -> EdgeUpdate:
    fields: Dict[str, Any] = {}
    if has(record, "source_node_id"):
        fields["source_node_id"] = positive_int(record["source_node_id"], ErrorCode.INVALID_SOURCE_NODE_ID)
    if has(record, "destination_node_id"):
        fields["destination_node_id"] = positive_int(
            record["destination_node_id"], ErrorCode.INVALID_DESTINATION_NODE_ID)
    if has(record, "label"):
        fields["label"] = required_text(record, "label", ErrorCode.LABEL_REQUIRED)
    if has(record, "priority"):
        fields["priority"] = integer(record["priority"], ErrorCode.INVALID_PRIORITY)
    updated_at = strict_timestamp(record, "updated_at", ErrorCode.INVALID_UPDATED_AT)
    if not fields:
        fail(400, ErrorCode.NO_UPDATABLE_FIELDS)
    return EdgeUpdate(fields=fields, updated_at=updated_at)
