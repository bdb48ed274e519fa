"""
Caller identity: who is asking (principal) and which tenant they act for
(company id).

The session itself is authenticated by the ingress in front of this service,
which forwards the user's email in ``X-User-Email``.
"""
from __future__ import annotations

import math
from typing import Any, Optional, Union

from fastapi import Request

from core_http.errors import Failure, fail
from core_http.headers import X_USER_EMAIL
from core_logging import get_logger, log_stage
from core_logging.error_codes import ErrorCode
from core_utils.ids import principal_fingerprint

from flow_bff.service_urls import Resource, ServiceLocator
from flow_bff.upstream import UpstreamProxy, extract_items
from flow_bff.users import UserDirectory

logger = get_logger("flow_bff.identity")


def normalize_email(raw: Optional[str]) -> Optional[str]:
    email = (raw or "").strip().lower()
    return email or None


def require_principal(request: Request) -> str:
    """FastAPI dependency; 401 before anything else runs."""
    email = normalize_email(request.headers.get(X_USER_EMAIL))
    if email is None:
        fail(401, ErrorCode.UNAUTHORIZED)
    return email


def coerce_company_id(candidate: Any) -> Optional[int]:
    """``42`` and ``"42"`` are ids; booleans, blanks, non-positive and non-integral values are not."""
    if isinstance(candidate, bool):
        return None
    if isinstance(candidate, int):
        value = candidate
    elif isinstance(candidate, float):
        if not math.isfinite(candidate) or not candidate.is_integer():
            return None
        value = int(candidate)
    elif isinstance(candidate, str):
        try:
            number = float(candidate.strip())
        except ValueError:
            return None
        if not math.isfinite(number) or not number.is_integer():
            return None
        value = int(number)
    else:
        return None
    return value if value > 0 else None


def company_id_from_listing(payload: Any) -> Optional[int]:
    items = extract_items(payload)
    if not items or not isinstance(items[0], dict):
        return None
    first = items[0]
    candidate = first.get("id")
    if candidate is None:
        candidate = first.get("company_id")
    return coerce_company_id(candidate)


class IdentityResolver:
    """Principal email → company id, re-resolved on every request."""

    def __init__(self, locator: ServiceLocator, proxy: UpstreamProxy, directory: UserDirectory) -> None:
        self._locator = locator
        self._proxy = proxy
        self._directory = directory

    async def resolve(self, email: str) -> Union[int, Failure]:
        companies_url = self._locator.url_for(Resource.COMPANIES)
        if companies_url is None:
            return Failure(500, ErrorCode.FLOW_MANAGER_SERVICE_URL_NOT_CONFIGURED)

        fp = principal_fingerprint(email)
        phone = await self._directory.phone_number_for(email)
        if not phone:
            log_stage(logger, "identity", "tenant_key_missing", principal_fp=fp)
            return Failure(400, ErrorCode.COMPANY_NUMBER_REQUIRED)

        payload = await self._proxy.forward(
            "GET", companies_url,
            failure_code=ErrorCode.COMPANIES_FETCH_FAILED,
            params={"unique_identifier": phone},
        )
        if isinstance(payload, Failure):
            return payload

        company_id = company_id_from_listing(payload)
        if company_id is None:
            log_stage(logger, "identity", "company_not_found", principal_fp=fp)
            return Failure(404, ErrorCode.COMPANY_ID_NOT_FOUND, payload)

        log_stage(logger, "identity", "resolved", principal_fp=fp, company_id=company_id)
        return company_id
