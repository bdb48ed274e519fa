"""Conditions are always addressed through their edge and its source node."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from core_http.errors import data_response, unwrap
from core_logging.error_codes import ErrorCode

from flow_bff.context import get_context, read_object
from flow_bff.identity import require_principal
from flow_bff.ownership import condition_chain
from flow_bff.payloads import parse_condition_create, parse_condition_update
from flow_bff.payloads.fields import path_id
from flow_bff.routes import params
from flow_bff.service_urls import Resource, item_url

router = APIRouter(tags=["conditions"])

_RESOURCES = (Resource.NODES, Resource.EDGES, Resource.CONDITIONS)


def _condition_id(raw: str) -> int:
    return path_id(raw, ErrorCode.CONDITION_ID_REQUIRED, ErrorCode.INVALID_CONDITION_ID)


@router.get("/conditions")
async def list_conditions(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    edge_id = params.edge_id(request)
    source = params.source_node_id(request)
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify(condition_chain(urls, company_id, source, edge_id))
    items = await ctx.list_items(urls[Resource.CONDITIONS], failure_code=ErrorCode.CONDITIONS_FETCH_FAILED,
                                 params={"edge_id": edge_id})
    return data_response(items)


@router.post("/conditions")
async def create_condition(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    edge_id = params.edge_id(request)
    source = params.source_node_id(request)
    condition = unwrap(parse_condition_create(await read_object(request), edge_id))
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify(condition_chain(urls, company_id, source, edge_id))
    created = await ctx.forward("POST", urls[Resource.CONDITIONS],
                                failure_code=ErrorCode.CONDITIONS_CREATE_FAILED,
                                json=condition.upstream(ctx.now()))
    return data_response(created, status_code=201)


@router.get("/conditions/{condition_id}")
async def get_condition(condition_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    cid = _condition_id(condition_id)
    edge_id = params.edge_id(request)
    source = params.source_node_id(request)
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify(condition_chain(urls, company_id, source, edge_id, cid))
    condition = await ctx.forward("GET", item_url(urls[Resource.CONDITIONS], cid),
                                  failure_code=ErrorCode.CONDITION_FETCH_FAILED)
    return data_response(condition)


@router.put("/conditions/{condition_id}")
async def update_condition(condition_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    cid = _condition_id(condition_id)
    edge_id = params.edge_id(request)
    source = params.source_node_id(request)
    update = unwrap(parse_condition_update(await read_object(request), cid, edge_id))
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify(condition_chain(urls, company_id, source, edge_id, cid))
    updated = await ctx.forward("PUT", item_url(urls[Resource.CONDITIONS], cid),
                                failure_code=ErrorCode.CONDITIONS_UPDATE_FAILED,
                                json=update.upstream(ctx.now()))
    return data_response(updated)


@router.delete("/conditions/{condition_id}")
async def delete_condition(condition_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    cid = _condition_id(condition_id)
    edge_id = params.edge_id(request)
    source = params.source_node_id(request)
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify(condition_chain(urls, company_id, source, edge_id, cid))
    deleted = await ctx.forward("DELETE", item_url(urls[Resource.CONDITIONS], cid),
                                failure_code=ErrorCode.CONDITIONS_DELETE_FAILED)
    return data_response(deleted)
