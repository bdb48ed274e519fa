"""
Whole-workflow read: the company's nodes plus every node's outgoing edges.

Edge listings are fetched by a fixed number of workers that pull node indexes
from one shared cursor, so at most ``workers`` upstream calls are in flight.
A failed edge listing is reported per node instead of failing the read.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core_http.errors import Failure
from core_logging import get_logger, log_stage
from core_logging.error_codes import ErrorCode

from flow_bff.ownership import item_id
from flow_bff.upstream import UpstreamProxy

logger = get_logger("flow_bff.graph")


@dataclass
class GraphView:
    nodes: List[Any]
    edges: List[Any] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {"nodes": self.nodes, "edges": self.edges, "errors": self.errors}


def _node_id(node: Any) -> Optional[int]:
    value = item_id(node)
    if value is None or not value.is_integer() or value <= 0:
        return None
    return int(value)


async def fetch_edges_by_node(
    proxy: UpstreamProxy,
    edges_url: str,
    node_ids: List[int],
    *,
    workers: int,
) -> List[Any]:
    """One result slot per node id, each a list of edges or a Failure."""
    results: List[Any] = [None] * len(node_ids)
    cursor = 0

    async def _worker() -> None:
        nonlocal cursor
        while cursor < len(node_ids):
            index = cursor
            cursor += 1
            results[index] = await proxy.list_items(
                edges_url,
                failure_code=ErrorCode.EDGES_FETCH_FAILED,
                params={"source_node_id": node_ids[index]},
            )

    pool = max(1, min(workers, len(node_ids)))
    await asyncio.gather(*(_worker() for _ in range(pool)))
    return results


async def build_graph(
    proxy: UpstreamProxy,
    *,
    nodes_url: str,
    edges_url: str,
    company_id: int,
    workers: int,
) -> GraphView | Failure:
    nodes = await proxy.list_items(nodes_url, failure_code=ErrorCode.NODES_FETCH_FAILED,
                                   params={"company_id": company_id})
    if isinstance(nodes, Failure):
        return nodes

    node_ids = [nid for nid in (_node_id(n) for n in nodes) if nid is not None]
    view = GraphView(nodes=nodes)
    if not node_ids:
        return view

    results = await fetch_edges_by_node(proxy, edges_url, node_ids, workers=workers)
    for nid, result in zip(node_ids, results):
        if isinstance(result, Failure):
            view.errors.append({"node_id": nid, "code": result.code_value, "status": result.status})
        else:
            view.edges.extend(result)

    log_stage(logger, "graph", "assembled", company_id=company_id,
              nodes=len(nodes), edges=len(view.edges), failed_nodes=len(view.errors),
              workers=min(workers, len(node_ids)))
    return view
