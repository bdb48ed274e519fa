"""
Condition↔Property links. Every route carries the full
``condition_id``/``edge_id``/``source_node_id`` triple in its query string.
"""
from __future__ import annotations

from typing import Any, Tuple

from fastapi import APIRouter, Depends, Request

from core_http.errors import data_response, fail, unwrap
from core_logging.error_codes import ErrorCode

from flow_bff.context import get_context, read_object
from flow_bff.identity import require_principal
from flow_bff.ownership import condition_chain, numeric_id, property_in_company
from flow_bff.payloads import parse_condition_property
from flow_bff.payloads.fields import path_id
from flow_bff.routes import params
from flow_bff.service_urls import Resource, item_url

router = APIRouter(tags=["condition-properties"])

_RESOURCES = (
    Resource.NODES, Resource.EDGES, Resource.CONDITIONS,
    Resource.PROPERTIES, Resource.CONDITION_PROPERTIES,
)


def _scope(request: Request) -> Tuple[int, int, int]:
    """(condition_id, edge_id, source_node_id), validated in that order."""
    return params.condition_id(request), params.edge_id(request), params.source_node_id(request)


def _link_id(raw: str) -> int:
    return path_id(raw, ErrorCode.CONDITION_PROPERTY_ID_REQUIRED, ErrorCode.INVALID_CONDITION_PROPERTY_ID)


def _belongs_to(link: Any, condition_id: int) -> bool:
    if not isinstance(link, dict) or "condition_id" not in link:
        return True
    return numeric_id(link["condition_id"]) == condition_id


@router.get("/condition-properties")
async def list_condition_properties(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    cid, eid, source = _scope(request)
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify(condition_chain(urls, company_id, source, eid, cid))
    items = await ctx.list_items(urls[Resource.CONDITION_PROPERTIES],
                                 failure_code=ErrorCode.CONDITION_PROPERTIES_FETCH_FAILED,
                                 params={"condition_id": cid})
    return data_response(items)


@router.post("/condition-properties")
async def create_condition_property(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    cid, eid, source = _scope(request)
    link = unwrap(parse_condition_property(await read_object(request), cid))
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify([
        *condition_chain(urls, company_id, source, eid, cid),
        property_in_company(urls, company_id, link.property_id),
    ])
    created = await ctx.forward("POST", urls[Resource.CONDITION_PROPERTIES],
                                failure_code=ErrorCode.CONDITION_PROPERTIES_CREATE_FAILED,
                                json=link.upstream_create(ctx.now()))
    return data_response(created, status_code=201)


@router.get("/condition-properties/{link_id}")
async def get_condition_property(link_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    lid = _link_id(link_id)
    cid, eid, source = _scope(request)
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify(condition_chain(urls, company_id, source, eid, cid))
    link = await ctx.forward("GET", item_url(urls[Resource.CONDITION_PROPERTIES], lid),
                             failure_code=ErrorCode.CONDITION_PROPERTIES_FETCH_FAILED)
    if not _belongs_to(link, cid):
        fail(404, ErrorCode.CONDITION_PROPERTY_MISMATCH)
    return data_response(link)


@router.put("/condition-properties/{link_id}")
async def update_condition_property(link_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    lid = _link_id(link_id)
    cid, eid, source = _scope(request)
    link = unwrap(parse_condition_property(await read_object(request), cid))
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify([
        *condition_chain(urls, company_id, source, eid, cid),
        property_in_company(urls, company_id, link.property_id),
    ])
    updated = await ctx.forward("PUT", item_url(urls[Resource.CONDITION_PROPERTIES], lid),
                                failure_code=ErrorCode.CONDITION_PROPERTIES_UPDATE_FAILED,
                                json=link.upstream_update(ctx.now()))
    return data_response(updated)


@router.delete("/condition-properties/{link_id}")
async def delete_condition_property(link_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    lid = _link_id(link_id)
    cid, eid, source = _scope(request)
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify(condition_chain(urls, company_id, source, eid, cid))
    # upstream addresses links as <condition_id>/<link id>
    deleted = await ctx.forward("DELETE", item_url(urls[Resource.CONDITION_PROPERTIES], cid, lid),
                                failure_code=ErrorCode.CONDITION_PROPERTIES_DELETE_FAILED)
    return data_response(deleted)
