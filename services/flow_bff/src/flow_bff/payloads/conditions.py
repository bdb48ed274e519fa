from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from core_http.errors import fail
from core_logging.error_codes import ErrorCode

from flow_bff.payloads.fields import (
    as_result,
    has,
    matching_id,
    required_text,
    strict_timestamp,
    timestamp_or_none,
)


def _compare_value(record: Mapping[str, Any]) -> str:
    """Any non-string comparison value is stored as an empty string."""
    value = record.get("compare_value")
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class ConditionCreate:
    edge_id: int
    operator: str
    compare_value: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def upstream(self, now: str) -> Dict[str, Any]:
        return {
            "edge_id": self.edge_id,
            "operator": self.operator,
            "compare_value": self.compare_value,
            "created_at": self.created_at or now,
            "updated_at": self.updated_at or now,
        }


@dataclass(frozen=True)
class ConditionUpdate:
    fields: Dict[str, Any] = field(default_factory=dict)
    updated_at: Optional[str] = None

    def upstream(self, now: str) -> Dict[str, Any]:
        return {**self.fields, "updated_at": self.updated_at or now}


@as_result
def parse_condition_create(record: Mapping[str, Any], edge_id: int) -> ConditionCreate:
    """*edge_id* comes from the query string; a body ``edge_id`` must repeat it."""
    operator = required_text(record, "operator", ErrorCode.OPERATOR_REQUIRED)
    compare_value = _compare_value(record)
    edge_id = matching_id(record, "edge_id", edge_id, ErrorCode.INVALID_EDGE_ID, ErrorCode.EDGE_ID_MISMATCH)
    return ConditionCreate(
        edge_id=edge_id,
        operator=operator,
        compare_value=compare_value,
        created_at=timestamp_or_none(record, "created_at"),
        updated_at=timestamp_or_none(record, "updated_at"),
    )


@as_result
def parse_condition_update(record: Mapping[str, Any], condition_id: int, edge_id: int) -> ConditionUpdate:
    matching_id(record, "condition_id", condition_id,
                ErrorCode.INVALID_CONDITION_ID, ErrorCode.CONDITION_ID_MISMATCH)
    matching_id(record, "edge_id", edge_id, ErrorCode.INVALID_EDGE_ID, ErrorCode.EDGE_ID_MISMATCH)
    fields: Dict[str, Any] = {}
    if has(record, "operator"):
        fields["operator"] = required_text(record, "operator", ErrorCode.OPERATOR_REQUIRED)
    if has(record, "compare_value"):
        fields["compare_value"] = _compare_value(record)
    updated_at = strict_timestamp(record, "updated_at", ErrorCode.INVALID_UPDATED_AT)
    if not fields:
        fail(400, ErrorCode.NO_UPDATABLE_FIELDS)
    return ConditionUpdate(fields=fields, updated_at=updated_at)
