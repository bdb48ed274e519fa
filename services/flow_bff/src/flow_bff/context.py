"""
Process-wide collaborators, built once in :func:`flow_bff.app.create_app`
and reached from handlers through ``request.app.state.bff``.

The helpers here convert ``value | Failure`` results into a raised
:class:`DomainError`, so route handlers read as a straight line.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from fastapi import Request

from core_config.settings import Settings
from core_http.errors import unwrap
from core_logging.error_codes import ErrorCode

from flow_bff.identity import IdentityResolver
from flow_bff.ownership import OwnershipStep, verify_chain
from flow_bff.payloads.fields import Clock, iso_timestamp, parse_json_object
from flow_bff.service_urls import Resource, ServiceLocator, ServiceUrls
from flow_bff.upstream import UpstreamProxy
from flow_bff.users import UserDirectory


@dataclass
class BffContext:
    settings: Settings
    locator: ServiceLocator
    proxy: UpstreamProxy
    identity: IdentityResolver
    directory: UserDirectory
    clock: Clock

    def now(self) -> str:
        return iso_timestamp(self.clock())

    def urls(self, *resources: Resource) -> ServiceUrls:
        return unwrap(self.locator.require(*resources))

    async def company_id(self, email: str) -> int:
        return unwrap(await self.identity.resolve(email))

    async def verify(self, steps: Sequence[OwnershipStep]) -> None:
        failure = await verify_chain(self.proxy, steps)
        if failure is not None:
            unwrap(failure)

    async def forward(
        self,
        method: str,
        url: str,
        *,
        failure_code: ErrorCode,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        return unwrap(await self.proxy.forward(
            method, url, failure_code=failure_code, params=params, json=json))

    async def list_items(self, url: str, *, failure_code: ErrorCode, params: Dict[str, Any]) -> list:
        return unwrap(await self.proxy.list_items(url, failure_code=failure_code, params=params))


def get_context(request: Request) -> BffContext:
    return request.app.state.bff


async def read_object(request: Request) -> Dict[str, Any]:
    return unwrap(parse_json_object(await request.body()))
