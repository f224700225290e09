"""Structured logging helpers."""

from .logger import get_trace_id, new_trace_id, setup_logging, trace_scope

__all__ = [
    "get_trace_id",
    "new_trace_id",
    "setup_logging",
    "trace_scope",
]
