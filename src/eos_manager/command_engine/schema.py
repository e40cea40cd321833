"""Schema definitions for the command engine.

Results, script jobs and run summaries passed between the executor,
the script runner and the history ledger.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class CommandStatus(str, Enum):
    """Outcome of a single command execution."""
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class CommandResult:
    """Immutable record of one command executed on one device."""
    device_id: str
    device_name: str
    command: str
    output: str
    status: CommandStatus
    execution_time: float
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def success(self) -> bool:
        return self.status == CommandStatus.SUCCESS

    def to_dict(self) -> dict:
        """Export record (stable field set and order)."""
        return {
            "device_name": self.device_name,
            "command": self.command,
            "output": self.output,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "execution_time": round(self.execution_time, 3),
        }

    def __repr__(self) -> str:
        return (
            f"CommandResult({self.status.value.upper()}, "
            f"device={self.device_id}, command={self.command!r})"
        )


# Ordered, trimmed, non-empty command lines of one script run
ScriptJob = tuple[str, ...]


@dataclass
class ScriptRunSummary:
    """Summary of a script run on a single device."""
    device_id: str
    results: list[CommandResult] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    cancelled: bool = False
    stopped_on_error: bool = False

    @property
    def total(self) -> int:
        """Number of commands actually executed."""
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def first_error(self) -> Optional[CommandResult]:
        return next((r for r in self.results if not r.success), None)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "device_id": self.device_id,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "cancelled": self.cancelled,
            "stopped_on_error": self.stopped_on_error,
            "skipped": self.skipped,
            "results": [
                {"id": r.id, **r.to_dict()}
                for r in self.results
            ],
        }
