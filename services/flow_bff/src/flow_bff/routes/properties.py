from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from core_http.errors import data_response, unwrap
from core_logging.error_codes import ErrorCode

from flow_bff.context import get_context, read_object
from flow_bff.identity import require_principal
from flow_bff.ownership import property_in_company
from flow_bff.payloads import parse_property
from flow_bff.payloads.fields import path_id
from flow_bff.routes.params import ensure_same_company, requested_company_id
from flow_bff.service_urls import Resource, item_url

router = APIRouter(tags=["properties"])


def _property_id(raw: str) -> int:
    return path_id(raw, ErrorCode.PROPERTY_ID_REQUIRED, ErrorCode.INVALID_PROPERTY_ID)


@router.get("/properties")
async def list_properties(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    requested = requested_company_id(request)
    urls = ctx.urls(Resource.PROPERTIES)
    company_id = await ctx.company_id(email)
    ensure_same_company(requested, company_id)
    items = await ctx.list_items(urls[Resource.PROPERTIES], failure_code=ErrorCode.PROPERTIES_FETCH_FAILED,
                                 params={"company_id": company_id})
    return data_response(items)


@router.post("/properties")
async def create_property(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    prop = unwrap(parse_property(await read_object(request)))
    urls = ctx.urls(Resource.PROPERTIES)
    company_id = await ctx.company_id(email)
    created = await ctx.forward("POST", urls[Resource.PROPERTIES],
                                failure_code=ErrorCode.PROPERTIES_CREATE_FAILED,
                                json=prop.upstream_create(company_id, ctx.now()))
    return data_response(created, status_code=201)


@router.get("/properties/{property_id}")
async def get_property(property_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    pid = _property_id(property_id)
    urls = ctx.urls(Resource.PROPERTIES)
    company_id = await ctx.company_id(email)
    await ctx.verify([property_in_company(urls, company_id, pid)])
    prop = await ctx.forward("GET", item_url(urls[Resource.PROPERTIES], pid),
                             failure_code=ErrorCode.PROPERTIES_FETCH_FAILED)
    return data_response(prop)


@router.put("/properties/{property_id}")
async def update_property(property_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    pid = _property_id(property_id)
    prop = unwrap(parse_property(await read_object(request)))
    urls = ctx.urls(Resource.PROPERTIES)
    company_id = await ctx.company_id(email)
    await ctx.verify([property_in_company(urls, company_id, pid)])
    updated = await ctx.forward("PUT", item_url(urls[Resource.PROPERTIES], pid),
                                failure_code=ErrorCode.PROPERTIES_UPDATE_FAILED,
                                json=prop.upstream_update(ctx.now()))
    return data_response(updated)


@router.delete("/properties/{property_id}")
async def delete_property(property_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    pid = _property_id(property_id)
    urls = ctx.urls(Resource.PROPERTIES)
    company_id = await ctx.company_id(email)
    await ctx.verify([property_in_company(urls, company_id, pid)])
    deleted = await ctx.forward("DELETE", item_url(urls[Resource.PROPERTIES], pid),
                                failure_code=ErrorCode.PROPERTIES_DELETE_FAILED)
    return data_response(deleted)
