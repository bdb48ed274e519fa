from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from core_logging.error_codes import ErrorCode

from flow_bff.payloads.fields import as_result, required_text, timestamp_or_none


@dataclass(frozen=True)
class NodeInput:
    prompt: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def upstream(self, now: str) -> Dict[str, Any]:
        return {
            "prompt": self.prompt,
            "created_at": self.created_at or now,
            "updated_at": self.updated_at or now,
        }

    def upstream_create(self, company_id: int, now: str) -> Dict[str, Any]:
        return {"company_id": company_id, **self.upstream(now)}


@as_result
def parse_node(record: Mapping[str, Any]) -> NodeInput:
    """Create and update share one shape; ``prompt`` is always required."""
    return NodeInput(
        prompt=required_text(record, "prompt", ErrorCode.PROMPT_REQUIRED),
        created_at=timestamp_or_none(record, "created_at"),
        updated_at=timestamp_or_none(record, "updated_at"),
    )
