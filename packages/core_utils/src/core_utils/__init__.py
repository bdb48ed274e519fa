from .ids import generate_request_id, principal_fingerprint
from . import jsonx

__all__ = [
    "generate_request_id",
    "principal_fingerprint",
    "jsonx",
]
