"""Query-string helpers shared by the resource routers."""
from __future__ import annotations

from typing import Optional

from fastapi import Request

from core_http.errors import fail
from core_logging.error_codes import ErrorCode

from flow_bff.payloads.fields import optional_query_id, query_id


def query_value(request: Request, name: str) -> Optional[str]:
    return request.query_params.get(name)


def required_query_id(request: Request, name: str, required: ErrorCode, invalid: ErrorCode) -> int:
    return query_id(query_value(request, name), required, invalid)


def requested_company_id(request: Request) -> Optional[int]:
    return optional_query_id(query_value(request, "company_id"), ErrorCode.INVALID_COMPANY_ID)


def ensure_same_company(requested: Optional[int], resolved: int) -> None:
    """A caller may name its own company, never another one."""
    if requested is not None and requested != resolved:
        fail(403, ErrorCode.FORBIDDEN_COMPANY_ID)


def source_node_id(request: Request) -> int:
    return required_query_id(request, "source_node_id",
                             ErrorCode.SOURCE_NODE_ID_REQUIRED, ErrorCode.INVALID_SOURCE_NODE_ID)


def edge_id(request: Request) -> int:
    return required_query_id(request, "edge_id", ErrorCode.EDGE_ID_REQUIRED, ErrorCode.INVALID_EDGE_ID)


def condition_id(request: Request) -> int:
    return required_query_id(request, "condition_id",
                             ErrorCode.CONDITION_ID_REQUIRED, ErrorCode.INVALID_CONDITION_ID)
