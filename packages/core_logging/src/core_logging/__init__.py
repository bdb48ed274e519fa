from .logger import (
    get_logger,
    log_stage,
    log_once_process,
    bind_trace_ids,
    bind_request_id,
    current_request_id,
    current_trace_ids,
    reset_request_aggregate,
    emit_request_summary,
    emit_request_error_summary,
    record_error,
)

__all__ = [
    "get_logger",
    "log_stage",
    "log_once_process",
    "bind_trace_ids",
    "bind_request_id",
    "current_request_id",
    "current_trace_ids",
    "reset_request_aggregate",
    "emit_request_summary",
    "emit_request_error_summary",
    "record_error",
]
