from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from core_http.errors import data_response, unwrap
from core_logging.error_codes import ErrorCode

from flow_bff.context import get_context, read_object
from flow_bff.identity import require_principal
from flow_bff.ownership import node_in_company
from flow_bff.payloads import parse_node
from flow_bff.payloads.fields import path_id
from flow_bff.routes.params import ensure_same_company, requested_company_id
from flow_bff.service_urls import Resource, item_url

router = APIRouter(tags=["nodes"])


def _node_id(raw: str) -> int:
    return path_id(raw, ErrorCode.NODE_ID_REQUIRED, ErrorCode.INVALID_NODE_ID)


@router.get("/nodes")
async def list_nodes(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    requested = requested_company_id(request)
    urls = ctx.urls(Resource.NODES)
    company_id = await ctx.company_id(email)
    ensure_same_company(requested, company_id)
    items = await ctx.list_items(urls[Resource.NODES], failure_code=ErrorCode.NODES_FETCH_FAILED,
                                 params={"company_id": company_id})
    return data_response(items)


@router.post("/nodes")
async def create_node(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    node = unwrap(parse_node(await read_object(request)))
    urls = ctx.urls(Resource.NODES)
    company_id = await ctx.company_id(email)
    created = await ctx.forward("POST", urls[Resource.NODES], failure_code=ErrorCode.NODES_CREATE_FAILED,
                                json=node.upstream_create(company_id, ctx.now()))
    return data_response(created, status_code=201)


@router.get("/nodes/{node_id}")
async def get_node(node_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    nid = _node_id(node_id)
    urls = ctx.urls(Resource.NODES)
    company_id = await ctx.company_id(email)
    await ctx.verify([node_in_company(urls, company_id, nid)])
    node = await ctx.forward("GET", item_url(urls[Resource.NODES], nid),
                             failure_code=ErrorCode.NODES_FETCH_FAILED)
    return data_response(node)


@router.put("/nodes/{node_id}")
async def update_node(node_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    nid = _node_id(node_id)
    node = unwrap(parse_node(await read_object(request)))
    urls = ctx.urls(Resource.NODES)
    company_id = await ctx.company_id(email)
    await ctx.verify([node_in_company(urls, company_id, nid)])
    updated = await ctx.forward("PUT", item_url(urls[Resource.NODES], nid),
                                failure_code=ErrorCode.NODES_UPDATE_FAILED, json=node.upstream(ctx.now()))
    return data_response(updated)


@router.delete("/nodes/{node_id}")
async def delete_node(node_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    nid = _node_id(node_id)
    urls = ctx.urls(Resource.NODES)
    company_id = await ctx.company_id(email)
    await ctx.verify([node_in_company(urls, company_id, nid)])
    deleted = await ctx.forward("DELETE", item_url(urls[Resource.NODES], nid),
                                failure_code=ErrorCode.NODES_DELETE_FAILED)
    return data_response(deleted)
