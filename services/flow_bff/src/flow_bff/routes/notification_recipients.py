from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from core_http.errors import data_response, unwrap
from core_logging.error_codes import ErrorCode

from flow_bff.context import get_context, read_object
from flow_bff.identity import require_principal
from flow_bff.ownership import notification_in_company, recipient_in_notification
from flow_bff.payloads import parse_recipient
from flow_bff.payloads.fields import path_id
from flow_bff.routes.params import required_query_id
from flow_bff.service_urls import Resource, item_url

router = APIRouter(tags=["notification-recipients"])

_RESOURCES = (Resource.NOTIFICATIONS, Resource.NOTIFICATION_RECIPIENTS)


def _notification_id(request: Request) -> int:
    return required_query_id(request, "notification_id",
                             ErrorCode.NOTIFICATION_ID_REQUIRED, ErrorCode.INVALID_NOTIFICATION_ID)


@router.get("/notification-recipients")
async def list_recipients(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    notification_id = _notification_id(request)
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify([notification_in_company(urls, company_id, notification_id)])
    items = await ctx.list_items(urls[Resource.NOTIFICATION_RECIPIENTS],
                                 failure_code=ErrorCode.NOTIFICATION_RECIPIENTS_FETCH_FAILED,
                                 params={"notification_id": notification_id})
    return data_response(items)


@router.post("/notification-recipients")
async def create_recipient(request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    recipient = unwrap(parse_recipient(await read_object(request)))
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify([notification_in_company(urls, company_id, recipient.notification_id)])
    created = await ctx.forward("POST", urls[Resource.NOTIFICATION_RECIPIENTS],
                                failure_code=ErrorCode.NOTIFICATION_RECIPIENT_CREATE_FAILED,
                                json=recipient.upstream())
    return data_response(created, status_code=201)


@router.delete("/notification-recipients/{recipient_id}")
async def delete_recipient(recipient_id: str, request: Request, email: str = Depends(require_principal)):
    ctx = get_context(request)
    rid = path_id(recipient_id, ErrorCode.RECIPIENT_ID_REQUIRED, ErrorCode.INVALID_RECIPIENT_ID)
    notification_id = _notification_id(request)
    urls = ctx.urls(*_RESOURCES)
    company_id = await ctx.company_id(email)
    await ctx.verify([
        notification_in_company(urls, company_id, notification_id),
        recipient_in_notification(urls, notification_id, rid),
    ])
    deleted = await ctx.forward("DELETE", item_url(urls[Resource.NOTIFICATION_RECIPIENTS], rid),
                                failure_code=ErrorCode.NOTIFICATION_RECIPIENT_DELETE_FAILED)
    return data_response(deleted)
