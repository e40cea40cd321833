"""Utility modules for logging, auditing and connection retry."""
from .connection import with_retry, RETRYABLE_EXCEPTIONS
from .logging_config import (
    setup_logging,
    timed,
    timed_section,
    perf_logger,
)
from .audit_log import AuditRecord, log_command, setup_audit_logging

__all__ = [
    "with_retry",
    "RETRYABLE_EXCEPTIONS",
    "setup_logging",
    "timed",
    "timed_section",
    "perf_logger",
    "AuditRecord",
    "log_command",
    "setup_audit_logging",
]
