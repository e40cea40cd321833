"""In-memory history of executed commands.

The ledger is append-only and ordered newest-first. It is shared by all
concurrent executions, so every read and write happens under one lock and
readers always get a complete snapshot.
"""
import csv
import io
import json
import logging
import threading
from collections import deque
from typing import Optional

from .schema import CommandResult, CommandStatus

logger = logging.getLogger(__name__)

EXPORT_FIELDS = [
    "device_name",
    "command",
    "output",
    "status",
    "timestamp",
    "execution_time",
]


class HistoryLedger:
    """Newest-first record of command results with optional capacity bound."""

    def __init__(self, max_size: Optional[int] = None):
        """
        Initialize the ledger.

        Args:
            max_size: Maximum number of entries kept. The least recent entry
                is evicted first once the bound is reached. None = unbounded.
        """
        if max_size is not None and max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self._entries: deque[CommandResult] = deque(maxlen=max_size)
        self._lock = threading.Lock()

    def append(self, result: CommandResult) -> None:
        """Record a result as the most recent entry."""
        with self._lock:
            if self.max_size is not None and len(self._entries) == self.max_size:
                evicted = self._entries[-1]
                logger.debug(f"History full, evicting {evicted.id} ({evicted.command!r})")
            # appendleft on a bounded deque drops the rightmost (oldest) entry
            self._entries.appendleft(result)

    def all(self) -> tuple[CommandResult, ...]:
        """Snapshot of all entries, most recent first."""
        with self._lock:
            return tuple(self._entries)

    def latest(self) -> Optional[CommandResult]:
        """Most recent entry, if any."""
        with self._lock:
            return self._entries[0] if self._entries else None

    def filter(
        self,
        device_id: Optional[str] = None,
        status: Optional[CommandStatus] = None,
    ) -> list[CommandResult]:
        """Entries matching device and/or status, most recent first."""
        return [
            r for r in self.all()
            if (device_id is None or r.device_id == device_id)
            and (status is None or r.status == status)
        ]

    def clear(self) -> None:
        """Discard all entries."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"History cleared ({count} entries)")

    def export(self, fmt: str = "json") -> str:
        """
        Serialize the ledger for download.

        Args:
            fmt: "json" (array of records) or "csv" (header + one row per entry)

        Returns:
            Serialized history, most recent first
        """
        records = [r.to_dict() for r in self.all()]

        if fmt == "json":
            return json.dumps(records, indent=2)

        if fmt == "csv":
            buf = io.StringIO()
            writer = csv.DictWriter(buf, fieldnames=EXPORT_FIELDS, lineterminator="\n")
            writer.writeheader()
            writer.writerows(records)
            return buf.getvalue()

        raise ValueError(f"Unsupported export format: {fmt}. Must be 'json' or 'csv'")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
