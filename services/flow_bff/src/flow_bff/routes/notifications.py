from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from core_http.errors import data_response, unwrap
from core_logging.error_codes import ErrorCode

from flow_bff.context import get_context, read_object
from flow_bff.identity import require_principal
from flow_bff.ownership import node_in_company, notification_in_company
from flow_bff.payloads import parse_notification
from flow_bff.payloads.fields import optional_query_id, path_id
from flow_bff.routes.params import ensure_same_company, query_value, requested_company_id
from flow_bff.service_urls import Resource, item_url

router = APIRouter(tags=["notifications"])


@router.get("/notifications")
async def list_notifications(request: Request, email: str = Depends(require_principal)):
    """Company-scoped; ``trigger_node_id`` narrows the list to one node the caller owns."""
    ctx = get_context(request)
    requested = requested_company_id(request)
    trigger_node_id = optional_query_id(query_value(request, "trigger_node_id"), ErrorCode.INVALID_TRIGGER_NODE_ID)
    urls = ctx.urls(Resource.NODES, Resource.NOTIFICATIONS)
    company_id = await ctx.company_id(email)
    ensure_same_company(requested, company_id)
    params = {"company_id": company_id}
    if trigger_node_id is not None:
        await ctx.verify([node_in_company(urls, company_id, trigger_node_id)])
        params["trigger_node_id"] = trigger_node_id
    items = await ctx.list_items(urls[Resource.NOTIFICATIONS],
                                 failure_code=ErrorCode.NOTIFICATIONS_FETCH_FAILED, params=params)
    return data_response(items)


@router.post("/notifications")
async def create_notification(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    notification = unwrap(parse_notification(await read_object(request)))
    urls = ctx.urls(Resource.NODES, Resource.NOTIFICATIONS)
    company_id = await ctx.company_id(email)
    await ctx.verify([node_in_company(urls, company_id, notification.trigger_node_id)])
    created = await ctx.forward("POST", urls[Resource.NOTIFICATIONS],
                                failure_code=ErrorCode.NOTIFICATION_CREATE_FAILED,
                                json=notification.upstream(company_id))
    return data_response(created, status_code=201)


@router.delete("/notifications/{notification_id}")
async def delete_notification(notification_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    nid = path_id(notification_id, ErrorCode.NOTIFICATION_ID_REQUIRED, ErrorCode.INVALID_NOTIFICATION_ID)
    urls = ctx.urls(Resource.NOTIFICATIONS)
    company_id = await ctx.company_id(email)
    await ctx.verify([notification_in_company(urls, company_id, nid)])
    deleted = await ctx.forward("DELETE", item_url(urls[Resource.NOTIFICATIONS], nid),
                                failure_code=ErrorCode.NOTIFICATION_DELETE_FAILED)
    return data_response(deleted)
