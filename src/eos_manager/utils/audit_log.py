"""Audit logging for command executions.

Every dispatched command is written as one JSON line to a dedicated audit
logger. The in-memory history ledger is what callers query; this log is
the operator's trail on disk and is only written once
setup_audit_logging() has been called.
"""
import json
import logging
import os
from dataclasses import dataclass, asdict
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..command_engine.schema import CommandResult

# Dedicated audit logger
audit_logger = logging.getLogger("eos_manager.audit")

# Output beyond this is truncated in the audit record
MAX_AUDIT_OUTPUT = 1000


def setup_audit_logging(log_dir: Optional[str] = None) -> Path:
    """Configure audit logging to file.

    Args:
        log_dir: Directory for audit logs. Defaults to ~/.eos-manager/

    Returns:
        Path of the audit log file
    """
    if log_dir is None:
        log_dir = os.path.expanduser("~/.eos-manager")

    Path(log_dir).mkdir(parents=True, exist_ok=True)
    audit_file = Path(log_dir) / "audit.log"

    audit_logger.setLevel(logging.INFO)
    audit_logger.handlers.clear()

    handler = RotatingFileHandler(
        audit_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=10,
        encoding="utf-8",
    )
    # Use JSON format for machine-readability
    handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(handler)

    # Don't propagate to the application log
    audit_logger.propagate = False
    return audit_file


@dataclass
class AuditRecord:
    """Audit record of one command execution."""
    id: str
    timestamp: str
    device_id: str
    device_name: str
    command: str
    status: str
    execution_time: float
    output: str = ""
    user: str = "system"

    @classmethod
    def from_result(cls, result: "CommandResult", user: str = "system") -> "AuditRecord":
        return cls(
            id=result.id,
            timestamp=result.timestamp.isoformat(),
            device_id=result.device_id,
            device_name=result.device_name,
            command=result.command,
            status=result.status.value,
            execution_time=round(result.execution_time, 3),
            output=result.output[:MAX_AUDIT_OUTPUT],
            user=user,
        )

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(asdict(self), indent=None)

    @classmethod
    def from_json(cls, json_str: str) -> "AuditRecord":
        """Parse from JSON string."""
        return cls(**json.loads(json_str))


def log_command(result: "CommandResult", user: str = "system") -> AuditRecord:
    """Write a command result to the audit log."""
    record = AuditRecord.from_result(result, user=user)
    audit_logger.info(record.to_json())
    return record
