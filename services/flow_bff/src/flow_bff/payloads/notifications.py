"""Notification and notification-recipient bodies."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from core_logging.error_codes import ErrorCode

from flow_bff.payloads.fields import as_result, has, positive_int


def _text_or_blank(record: Mapping[str, Any], key: str) -> str:
    value = record.get(key)
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class NotificationCreate:
    trigger_node_id: int
    subject: str = ""
    active: Any = True

    def upstream(self, company_id: int) -> Dict[str, Any]:
        return {
            "trigger_node_id": self.trigger_node_id,
            "company_id": company_id,
            "subject": self.subject,
            "active": self.active,
        }


@as_result
def parse_notification(record: Mapping[str, Any]) -> NotificationCreate:
    """``active`` defaults to true only when the key is absent."""
    return NotificationCreate(
        trigger_node_id=positive_int(record.get("trigger_node_id"), ErrorCode.INVALID_TRIGGER_NODE_ID),
        subject=_text_or_blank(record, "subject"),
        active=record["active"] if has(record, "active") else True,
    )


@dataclass(frozen=True)
class RecipientCreate:
    notification_id: int
    recipient_type: str = ""
    recipient_value: str = ""

    def upstream(self) -> Dict[str, Any]:
        return {
            "notification_id": self.notification_id,
            "recipient_type": self.recipient_type,
            "recipient_value": self.recipient_value,
        }


@as_result
def parse_recipient(record: Mapping[str, Any]) -> RecipientCreate:
    return RecipientCreate(
        notification_id=positive_int(record.get("notification_id"), ErrorCode.INVALID_NOTIFICATION_ID),
        recipient_type=_text_or_blank(record, "recipient_type"),
        recipient_value=_text_or_blank(record, "recipient_value"),
    )
