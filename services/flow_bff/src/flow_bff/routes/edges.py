from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from core_http.errors import data_response, unwrap
from core_logging.error_codes import ErrorCode

from flow_bff.context import get_context, read_object
from flow_bff.identity import require_principal
from flow_bff.ownership import edge_in_node, node_in_company
from flow_bff.payloads import parse_edge_create, parse_edge_update
from flow_bff.payloads.fields import path_id
from flow_bff.routes.params import source_node_id
from flow_bff.service_urls import Resource, item_url

router = APIRouter(tags=["edges"])

_RESOURCES = (Resource.NODES, Resource.EDGES)


def _edge_id(raw: str) -> int:
    return path_id(raw, ErrorCode.EDGE_ID_REQUIRED, ErrorCode.INVALID_EDGE_ID)


@router.get("/edges")
async def list_edges(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    source = source_node_id(request)
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify([node_in_company(urls, company_id, source)])
    items = await ctx.list_items(urls[Resource.EDGES], failure_code=ErrorCode.EDGES_FETCH_FAILED,
                                 params={"source_node_id": source})
    return data_response(items)


@router.post("/edges")
async def create_edge(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    edge = unwrap(parse_edge_create(await read_object(request)))
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    # both endpoints must be the caller's nodes
    await ctx.verify([
        node_in_company(urls, company_id, edge.source_node_id),
        node_in_company(urls, company_id, edge.destination_node_id),
    ])
    created = await ctx.forward("POST", urls[Resource.EDGES], failure_code=ErrorCode.EDGES_CREATE_FAILED,
                                json=edge.upstream(ctx.now()))
    return data_response(created, status_code=201)


@router.put("/edges/{edge_id}")
async def update_edge(edge_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    eid = _edge_id(edge_id)
    source = source_node_id(request)
    update = unwrap(parse_edge_update(await read_object(request)))
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    steps = [node_in_company(urls, company_id, source), edge_in_node(urls, source, eid)]
    steps += [node_in_company(urls, company_id, nid) for nid in update.new_endpoints]
    await ctx.verify(steps)
    updated = await ctx.forward("PUT", item_url(urls[Resource.EDGES], eid),
                                failure_code=ErrorCode.EDGES_UPDATE_FAILED, json=update.upstream(ctx.now()))
    return data_response(updated)


@router.delete("/edges/{edge_id}")
async def delete_edge(edge_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    eid = _edge_id(edge_id)
    source = source_node_id(request)
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify([node_in_company(urls, company_id, source), edge_in_node(urls, source, eid)])
    deleted = await ctx.forward("DELETE", item_url(urls[Resource.EDGES], eid),
                                failure_code=ErrorCode.EDGES_DELETE_FAILED)
    return data_response(deleted)
