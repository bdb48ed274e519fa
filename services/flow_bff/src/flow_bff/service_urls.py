"""
Upstream URL resolution.

Every resource lives under the single configured flow-manager base URL. The
configured value may be a bare origin (``https://flows.internal``), a base
path (``https://flows.internal/v1``) or a full resource endpoint
(``https://flows.internal/v1/nodes``); in the last case the resource segment
is swapped for the one requested.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Mapping, Optional, Union
from urllib.parse import quote, urlsplit, urlunsplit

from core_http.errors import Failure
from core_logging.error_codes import ErrorCode


class Resource(str, Enum):
    NODES = "nodes"
    COMPANIES = "companies"
    PROPERTIES = "properties"
    NODE_PROPERTIES = "node-properties"
    EDGES = "edges"
    CONDITIONS = "conditions"
    CONDITION_PROPERTIES = "condition-properties"
    NOTIFICATIONS = "notifications"
    NOTIFICATION_RECIPIENTS = "notification-recipients"


# Longer names first so "node-properties" is not read as "properties"
_TRAILING_RESOURCE = re.compile(
    r"(?:^|/)(?:notification-recipients|condition-properties|node-properties|notifications"
    r"|conditions|properties|companies|edges|nodes)$",
    re.IGNORECASE,
)


def resolve_service_url(base_url: Optional[str], resource: Union[Resource, str]) -> Optional[str]:
    """
    ``<scheme>://<host>[<base path>]/<resource>/`` or None when *base_url* is
    missing or not an absolute http(s) URL. Query and fragment are dropped.
    """
    raw = (base_url or "").strip()
    if not raw:
        return None
    try:
        parts = urlsplit(raw)
        # .port raises ValueError on a malformed port
        parts.port
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        return None
    name = resource.value if isinstance(resource, Resource) else str(resource).strip("/")
    path = parts.path.rstrip("/")
    path = _TRAILING_RESOURCE.sub("", path).rstrip("/")
    return urlunsplit((parts.scheme, parts.netloc, f"{path}/{name}/", "", ""))


def item_url(resource_url: str, *segments: Union[int, str]) -> str:
    """``<resource_url without trailing slash>/<segment>/...``; segments are percent-encoded."""
    parts = urlsplit(resource_url)
    tail = "/".join(quote(str(s), safe="") for s in segments)
    return urlunsplit((parts.scheme, parts.netloc, f"{parts.path.rstrip('/')}/{tail}", "", ""))


_NOT_CONFIGURED = Failure(500, ErrorCode.FLOW_MANAGER_SERVICE_URL_NOT_CONFIGURED)


class ServiceUrls(Mapping[Resource, str]):
    """Resolved resource URLs for one request (only the ones asked for)."""

    def __init__(self, urls: Dict[Resource, str]) -> None:
        self._urls = urls

    def __getitem__(self, key: Resource) -> str:
        return self._urls[key]

    def __iter__(self):
        return iter(self._urls)

    def __len__(self) -> int:
        return len(self._urls)


class ServiceLocator:
    """Pure, stateless URL derivation from the configured base URL."""

    def __init__(self, base_url: Optional[str]) -> None:
        self.base_url = base_url

    @property
    def configured(self) -> bool:
        return resolve_service_url(self.base_url, Resource.NODES) is not None

    def url_for(self, resource: Resource) -> Optional[str]:
        return resolve_service_url(self.base_url, resource)

    def require(self, *resources: Resource) -> Union[ServiceUrls, Failure]:
        """All requested URLs, or the configuration Failure before any network call."""
        urls: Dict[Resource, str] = {}
        for r in resources:
            url = self.url_for(r)
            if url is None:
                return _NOT_CONFIGURED
            urls[r] = url
        return ServiceUrls(urls)
