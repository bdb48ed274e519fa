from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, NoReturn, TypeVar, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core_logging import get_logger, log_stage, record_error
from core_logging.error_codes import ErrorCode
from core_utils import jsonx

class _Unset:
    __slots__ = ()
    def __repr__(self) -> str:
        return "UNSET"

UNSET: Any = _Unset()

@dataclass(frozen=True)
class Failure:
    """
    A typed, terminal outcome of one step (validation, identity, ownership,
    upstream). ``details`` is omitted from the envelope when UNSET; an explicit
    ``None`` is kept (upstream answered with an empty/invalid body).
    """
    status: int
    code: Union[ErrorCode, str]
    details: Any = UNSET

    @property
    def code_value(self) -> str:
        return self.code.value if isinstance(self.code, Enum) else str(self.code)

    def envelope(self) -> dict:
        err: dict = {"code": self.code_value}
        if self.details is not UNSET:
            err["details"] = jsonx.sanitize(self.details)
        return {"error": err}

class DomainError(Exception):
    """Carries a Failure out of a route handler; rendered by the standard handler."""

    def __init__(self, failure: Failure) -> None:
        super().__init__(failure.code_value)
        self.failure = failure

T = TypeVar("T")

def unwrap(result: Union[T, Failure]) -> T:
    """Return *result* unless it is a Failure, in which case raise DomainError."""
    if isinstance(result, Failure):
        raise DomainError(result)
    return result

def fail(status: int, code: Union[ErrorCode, str], details: Any = UNSET) -> NoReturn:
    raise DomainError(Failure(status, code, details))

def error_response(failure: Failure) -> JSONResponse:
    """The single Failure → HTTP response adapter."""
    return JSONResponse(status_code=failure.status, content=failure.envelope())

def data_response(data: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"data": jsonx.sanitize(data)})

_STATUS_CODES = {
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.METHOD_NOT_ALLOWED,
    429: ErrorCode.RATE_LIMITED,
}

def attach_standard_error_handlers(app: FastAPI, *, service: str) -> None:
    """
    Uniform error shaping, every body is ``{"error": {"code", "details"?}}``:
      - DomainError: the carried Failure
      - 422: request validation
      - Starlette HTTP errors (404/405/...)
      - 500: catch-all
    """
    logger = get_logger(service)

    @app.exception_handler(DomainError)
    async def _domain_exc_handler(request: Request, exc: DomainError):
        f = exc.failure
        record_error(
            f.code_value, where=f"{request.method} {request.url.path}",
            message="request failed", logger=logger, status_code=f.status,
        )
        return error_response(f)

    @app.exception_handler(RequestValidationError)
    async def _validation_exc_handler(request: Request, exc: RequestValidationError):
        errors = jsonx.sanitize(exc.errors())
        log_stage(logger, "validation", "failed",
                  errors=errors, url=str(request.url.path), method=request.method)
        return error_response(Failure(422, ErrorCode.VALIDATION_FAILED, {"errors": errors}))

    @app.exception_handler(StarletteHTTPException)
    async def _http_exc_handler(_: Request, exc: StarletteHTTPException):
        code = _STATUS_CODES.get(exc.status_code) or ErrorCode.INTERNAL
        details = exc.detail if exc.detail not in (None, "") else UNSET
        return error_response(Failure(exc.status_code, code, details))

    @app.exception_handler(Exception)
    async def _unhandled_exc_handler(request: Request, exc: Exception):
        record_error(
            ErrorCode.INTERNAL.value, where=f"{request.method} {request.url.path}",
            message=str(exc), logger=logger, status_code=500,
            error_type=exc.__class__.__name__,
        )
        return error_response(Failure(500, ErrorCode.INTERNAL))

__all__ = [
    "UNSET",
    "Failure",
    "DomainError",
    "unwrap",
    "fail",
    "error_response",
    "data_response",
    "attach_standard_error_handlers",
]
