"""
Ownership chain verification.

A chain is an ordered list of :class:`OwnershipStep`; each step lists the
children of a parent through the upstream list endpoint and looks for the
target id among them. Steps run top-down and stop at the first failure, so a
deeper resource is never probed before its ancestors are proven to belong to
the caller's company.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence

from core_http.errors import Failure
from core_logging import get_logger, log_stage
from core_logging.error_codes import ErrorCode

from flow_bff.service_urls import Resource, ServiceUrls
from flow_bff.upstream import UpstreamProxy

logger = get_logger("flow_bff.ownership")


@dataclass(frozen=True)
class OwnershipStep:
    name: str
    list_url: str
    filter_key: str
    parent_id: int
    target_id: int
    not_found: ErrorCode
    fetch_failed: ErrorCode


def numeric_id(raw: Any) -> Optional[float]:
    """``"7"`` and ``7`` compare equal; booleans and blanks are not ids."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            return None
        return value if math.isfinite(value) else None
    return None


def item_id(item: Any) -> Optional[float]:
    return numeric_id(item.get("id")) if isinstance(item, dict) else None


def contains_id(items: Iterable[Any], target_id: int) -> bool:
    return any(item_id(it) == target_id for it in items)


async def run_step(proxy: UpstreamProxy, step: OwnershipStep) -> Optional[Failure]:
    items = await proxy.list_items(
        step.list_url,
        failure_code=step.fetch_failed,
        params={step.filter_key: step.parent_id},
    )
    if isinstance(items, Failure):
        log_stage(logger, "ownership", "check_failed", check=step.name,
                  parent_id=step.parent_id, target_id=step.target_id,
                  error_code=items.code_value, status_code=items.status)
        return items
    if not contains_id(items, step.target_id):
        log_stage(logger, "ownership", "not_owned", check=step.name,
                  parent_id=step.parent_id, target_id=step.target_id,
                  error_code=step.not_found.value, status_code=404)
        return Failure(404, step.not_found)
    log_stage(logger, "ownership", "check_passed", check=step.name,
              parent_id=step.parent_id, target_id=step.target_id)
    return None


async def verify_chain(proxy: UpstreamProxy, steps: Sequence[OwnershipStep]) -> Optional[Failure]:
    """None when every step passes, otherwise the first step's Failure."""
    for step in steps:
        failure = await run_step(proxy, step)
        if failure is not None:
            return failure
    return None


# ── standard steps ─────────────────────────────────────────────────────────

def node_in_company(urls: ServiceUrls, company_id: int, node_id: int) -> OwnershipStep:
    return OwnershipStep(
        "node_in_company", urls[Resource.NODES], "company_id", company_id, node_id,
        ErrorCode.NODE_NOT_FOUND, ErrorCode.NODES_FETCH_FAILED,
    )


def edge_in_node(urls: ServiceUrls, source_node_id: int, edge_id: int) -> OwnershipStep:
    return OwnershipStep(
        "edge_in_node", urls[Resource.EDGES], "source_node_id", source_node_id, edge_id,
        ErrorCode.EDGE_NOT_FOUND, ErrorCode.EDGES_FETCH_FAILED,
    )


def condition_in_edge(urls: ServiceUrls, edge_id: int, condition_id: int) -> OwnershipStep:
    return OwnershipStep(
        "condition_in_edge", urls[Resource.CONDITIONS], "edge_id", edge_id, condition_id,
        ErrorCode.CONDITION_NOT_FOUND, ErrorCode.CONDITIONS_FETCH_FAILED,
    )


def property_in_company(urls: ServiceUrls, company_id: int, property_id: int) -> OwnershipStep:
    return OwnershipStep(
        "property_in_company", urls[Resource.PROPERTIES], "company_id", company_id, property_id,
        ErrorCode.PROPERTY_NOT_FOUND, ErrorCode.PROPERTIES_FETCH_FAILED,
    )


def notification_in_company(urls: ServiceUrls, company_id: int, notification_id: int) -> OwnershipStep:
    return OwnershipStep(
        "notification_in_company", urls[Resource.NOTIFICATIONS], "company_id", company_id, notification_id,
        ErrorCode.NOTIFICATION_NOT_FOUND, ErrorCode.NOTIFICATIONS_FETCH_FAILED,
    )


def recipient_in_notification(urls: ServiceUrls, notification_id: int, recipient_id: int) -> OwnershipStep:
    return OwnershipStep(
        "recipient_in_notification", urls[Resource.NOTIFICATION_RECIPIENTS], "notification_id",
        notification_id, recipient_id,
        ErrorCode.RECIPIENT_NOT_FOUND, ErrorCode.NOTIFICATION_RECIPIENTS_FETCH_FAILED,
    )


def condition_chain(
    urls: ServiceUrls, company_id: int, source_node_id: int, edge_id: int,
    condition_id: Optional[int] = None,
) -> List[OwnershipStep]:
    """Company → Node → Edge [→ Condition]."""
    steps = [
        node_in_company(urls, company_id, source_node_id),
        edge_in_node(urls, source_node_id, edge_id),
    ]
    if condition_id is not None:
        steps.append(condition_in_edge(urls, edge_id, condition_id))
    return steps
