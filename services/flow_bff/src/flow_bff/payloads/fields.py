"""
Field-level parsing shared by every resource.

Helpers raise :class:`DomainError` (400) so a parser reads top to bottom;
:func:`as_result` turns that back into ``value | Failure`` at the parser
boundary.
"""
from __future__ import annotations

import functools
import math
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar, Union

from core_http.errors import DomainError, Failure, fail
from core_logging.error_codes import ErrorCode
from core_utils import jsonx

T = TypeVar("T")

Clock = Callable[[], datetime]

_DIGITS = re.compile(r"[0-9]+")
_MISSING = object()


def system_clock() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """``2024-05-01T12:30:00.123Z`` (UTC, millisecond precision)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def as_result(fn: Callable[..., T]) -> Callable[..., Union[T, Failure]]:
    @functools.wraps(fn)
    def _wrapped(*args: Any, **kwargs: Any) -> Union[T, Failure]:
        try:
            return fn(*args, **kwargs)
        except DomainError as exc:
            return exc.failure
    return _wrapped


# ── bodies ────────────────────────────────────────────────────────────────

def parse_json_object(raw: bytes) -> Union[Dict[str, Any], Failure]:
    """Request body → dict; invalid JSON or any non-object is INVALID_BODY."""
    try:
        value = jsonx.loads(raw) if raw else None
    except ValueError:
        return Failure(400, ErrorCode.INVALID_BODY)
    if not isinstance(value, dict):
        return Failure(400, ErrorCode.INVALID_BODY)
    return value


def has(record: Mapping[str, Any], key: str) -> bool:
    return record.get(key, _MISSING) is not _MISSING


# ── numbers ───────────────────────────────────────────────────────────────

def _as_integer(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return int(number) if math.isfinite(number) and number.is_integer() else None
    return None


def positive_int(value: Any, invalid: ErrorCode) -> int:
    number = _as_integer(value)
    if number is None or number <= 0:
        fail(400, invalid)
    return number


def integer(value: Any, invalid: ErrorCode) -> int:
    number = _as_integer(value)
    if number is None:
        fail(400, invalid)
    return number


def path_id(raw: Optional[str], required: ErrorCode, invalid: ErrorCode) -> int:
    """Path segments must be plain digits (no sign, no exponent, no decimals)."""
    text = (raw or "").strip()
    if not text:
        fail(400, required)
    if not _DIGITS.fullmatch(text) or int(text) <= 0:
        fail(400, invalid)
    return int(text)


def query_id(raw: Optional[str], required: ErrorCode, invalid: ErrorCode) -> int:
    text = (raw or "").strip()
    if not text:
        fail(400, required)
    return positive_int(text, invalid)


def optional_query_id(raw: Optional[str], invalid: ErrorCode) -> Optional[int]:
    text = (raw or "").strip()
    if not text:
        return None
    return positive_int(text, invalid)


def matching_id(record: Mapping[str, Any], key: str, expected: int,
                invalid: ErrorCode, mismatch: ErrorCode) -> int:
    """A body id that must equal the one already taken from the URL."""
    if not has(record, key):
        return expected
    value = positive_int(record[key], invalid)
    if value != expected:
        fail(400, mismatch)
    return value


# ── strings ───────────────────────────────────────────────────────────────

def trimmed(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def required_text(record: Mapping[str, Any], key: str, required: ErrorCode) -> str:
    text = trimmed(record.get(key))
    if not text:
        fail(400, required)
    return text


def optional_text(record: Mapping[str, Any], key: str) -> Optional[str]:
    """Trimmed value, or None when absent, blank or not a string."""
    return trimmed(record.get(key)) or None


def timestamp_or_none(record: Mapping[str, Any], key: str) -> Optional[str]:
    """Lenient timestamp: anything unusable falls back to the server time later."""
    return optional_text(record, key)


def strict_timestamp(record: Mapping[str, Any], key: str, invalid: ErrorCode) -> Optional[str]:
    """Absent is fine; present but blank or non-string is rejected."""
    if not has(record, key):
        return None
    text = trimmed(record[key])
    if not text:
        fail(400, invalid)
    return text


__all__ = [
    "Clock",
    "system_clock",
    "iso_timestamp",
    "as_result",
    "parse_json_object",
    "has",
    "positive_int",
    "integer",
    "path_id",
    "query_id",
    "optional_query_id",
    "matching_id",
    "trimmed",
    "required_text",
    "optional_text",
    "timestamp_or_none",
    "strict_timestamp",
]
