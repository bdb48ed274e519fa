from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from core_http.errors import data_response, unwrap

from flow_bff.context import get_context
from flow_bff.graph import build_graph
from flow_bff.identity import require_principal
from flow_bff.service_urls import Resource

router = APIRouter(tags=["graph"])


@router.get("/graph")
async def get_graph(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    urls = ctx.urls(Resource.NODES, Resource.EDGES)
    company_id = await ctx.company_id(email)
    view = unwrap(await build_graph(
        ctx.proxy,
        nodes_url=urls[Resource.NODES],
        edges_url=urls[Resource.EDGES],
        company_id=company_id,
        workers=ctx.settings.graph_fanout_workers,
    ))
    return data_response(view.as_dict())
