from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from core_logging.error_codes import ErrorCode

from flow_bff.payloads.fields import as_result, optional_text, required_text, timestamp_or_none


@dataclass(frozen=True)
class PropertyInput:
    name: str
    type: str
    description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def upstream_create(self, company_id: int, now: str) -> Dict[str, Any]:
        # description is always sent, null when not given
        return {
            "company_id": company_id,
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "created_at": self.created_at or now,
            "updated_at": self.updated_at or now,
        }

    def upstream_update(self, now: str) -> Dict[str, Any]:
        body: Dict[str, Any] = {"name": self.name, "type": self.type, "description": self.description}
        if self.created_at:
            body["created_at"] = self.created_at
        body["updated_at"] = self.updated_at or now
        return body


@as_result
def parse_property(record: Mapping[str, Any]) -> PropertyInput:
    return PropertyInput(
        name=required_text(record, "name", ErrorCode.NAME_REQUIRED),
        type=required_text(record, "type", ErrorCode.TYPE_REQUIRED),
        description=optional_text(record, "description"),
        created_at=timestamp_or_none(record, "created_at"),
        updated_at=timestamp_or_none(record, "updated_at"),
    )
