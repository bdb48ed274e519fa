"""
Canonical HTTP header names used by the BFF and its upstream calls.
"""
from typing import Final, Mapping, Optional

# --- Identity (set by the authenticating ingress) -----------------------------
X_USER_EMAIL: Final[str]   = "X-User-Email"

# --- Correlation -------------------------------------------------------------
X_REQUEST_ID: Final[str]   = "x-request-id"
X_TRACE_ID: Final[str]     = "x-trace-id"

# --- Content negotiation towards the upstream service -------------------------
ACCEPT_JSON: Final[Mapping[str, str]] = {"accept": "application/json"}
JSON_CONTENT_TYPE: Final[str] = "application/json"

def is_json_content_type(value: Optional[str]) -> bool:
    """True when a ``content-type`` header announces JSON (any charset/params)."""
    return JSON_CONTENT_TYPE in (value or "").lower()

__all__ = [
    "X_USER_EMAIL",
    "X_REQUEST_ID",
    "X_TRACE_ID",
    "ACCEPT_JSON",
    "JSON_CONTENT_TYPE",
    "is_json_content_type",
]
