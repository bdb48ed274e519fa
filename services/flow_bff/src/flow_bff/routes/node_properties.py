from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from core_http.errors import data_response, unwrap
from core_logging.error_codes import ErrorCode

from flow_bff.context import get_context, read_object
from flow_bff.identity import require_principal
from flow_bff.ownership import node_in_company, property_in_company
from flow_bff.payloads import parse_node_property
from flow_bff.payloads.fields import optional_query_id, path_id
from flow_bff.routes.params import query_value, required_query_id
from flow_bff.service_urls import Resource, item_url

router = APIRouter(tags=["node-properties"])

_RESOURCES = (Resource.NODES, Resource.PROPERTIES, Resource.NODE_PROPERTIES)


@router.get("/node-properties")
async def list_node_properties(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    node_id = required_query_id(request, "node_id", ErrorCode.NODE_ID_REQUIRED, ErrorCode.INVALID_NODE_ID)
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify([node_in_company(urls, company_id, node_id)])
    items = await ctx.list_items(urls[Resource.NODE_PROPERTIES],
                                 failure_code=ErrorCode.NODE_PROPERTIES_FETCH_FAILED,
                                 params={"node_id": node_id})
    return data_response(items)


@router.post("/node-properties")
async def create_node_property(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    query_node_id = optional_query_id(query_value(request, "node_id"), ErrorCode.INVALID_NODE_ID)
    link = unwrap(parse_node_property(await read_object(request), query_node_id))
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify([
        node_in_company(urls, company_id, link.node_id),
        property_in_company(urls, company_id, link.property_id),
    ])
    created = await ctx.forward("POST", urls[Resource.NODE_PROPERTIES],
                                failure_code=ErrorCode.NODE_PROPERTIES_CREATE_FAILED,
                                json=link.upstream())
    return data_response(created, status_code=201)


@router.delete("/node-properties/{node_id}/{property_id}")
async def delete_node_property(node_id: str, property_id: str, request: Request,
                               email: str = Depends(require_principal)):
    ctx = get_context(request)
    nid = path_id(node_id, ErrorCode.NODE_ID_REQUIRED, ErrorCode.INVALID_NODE_ID)
    pid = path_id(property_id, ErrorCode.PROPERTY_ID_REQUIRED, ErrorCode.INVALID_PROPERTY_ID)
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    # the property side is checked too; the link is only removable when both ends are ours
    await ctx.verify([
        node_in_company(urls, company_id, nid),
        property_in_company(urls, company_id, pid),
    ])
    deleted = await ctx.forward("DELETE", item_url(urls[Resource.NODE_PROPERTIES], nid, pid),
                                failure_code=ErrorCode.NODE_PROPERTIES_DELETE_FAILED)
    return data_response(deleted)
