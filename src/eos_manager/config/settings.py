"""Engine settings.

Values come from the ``settings:`` section of devices.yaml and can be
overridden by environment variables:

- EOS_MANAGER_COMMAND_TIMEOUT: Per-command timeout in seconds (default: 30)
- EOS_MANAGER_HISTORY_MAX: History capacity, 0 = unbounded (default: unbounded)
- EOS_MANAGER_COMMAND_INTERVAL: Minimum seconds between script commands (default: 0)
- EOS_MANAGER_STOP_ON_ERROR: Set to "1" to stop scripts on first failure (default: 0)
"""
import os
import logging
from dataclasses import dataclass, fields
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_TIMEOUT = 30.0


@dataclass
class EngineSettings:
    """Tunables for the command engine."""
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    history_max_size: Optional[int] = None
    min_command_interval: float = 0.0
    stop_on_error: bool = False

    def __post_init__(self):
        if self.command_timeout <= 0:
            raise ValueError(f"command_timeout must be positive, got {self.command_timeout}")
        if self.min_command_interval < 0:
            raise ValueError(
                f"min_command_interval cannot be negative, got {self.min_command_interval}"
            )
        # 0 means unbounded
        if self.history_max_size is not None and self.history_max_size <= 0:
            self.history_max_size = None

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "EngineSettings":
        """Build settings from a YAML ``settings:`` mapping, ignoring unknown keys."""
        data = data or {}
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(sorted(unknown))}")
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_env(cls, base: Optional["EngineSettings"] = None) -> "EngineSettings":
        """Apply environment variable overrides on top of base."""
        settings = base or cls()

        timeout = os.environ.get("EOS_MANAGER_COMMAND_TIMEOUT")
        history_max = os.environ.get("EOS_MANAGER_HISTORY_MAX")
        interval = os.environ.get("EOS_MANAGER_COMMAND_INTERVAL")
        stop_on_error = os.environ.get("EOS_MANAGER_STOP_ON_ERROR")

        return cls(
            command_timeout=float(timeout) if timeout else settings.command_timeout,
            history_max_size=int(history_max) if history_max else settings.history_max_size,
            min_command_interval=float(interval) if interval else settings.min_command_interval,
            stop_on_error=(stop_on_error == "1") if stop_on_error else settings.stop_on_error,
        )
