import hashlib, uuid

def generate_request_id() -> str:
    """Random 16-hex request id for requests that arrive without one."""
    return uuid.uuid4().hex[:16]

def principal_fingerprint(principal: str) -> str:
    """Short, stable, non-reversible tag for logging a principal (never log emails)."""
    return "sha256:" + hashlib.sha256(principal.encode("utf-8")).hexdigest()[:12]

__all__ = ["generate_request_id", "principal_fingerprint"]
