"""Operational logging and structured audit utilities."""

from .audit import AuditEvent, JsonlAuditLogger, sanitize_arguments, utc_timestamp
from .configure import ROOT_LOGGER_NAME, get_logger, setup_logging

__all__ = [
    "AuditEvent",
    "JsonlAuditLogger",
    "ROOT_LOGGER_NAME",
    "get_logger",
    "sanitize_arguments",
    "setup_logging",
    "utc_timestamp",
]
