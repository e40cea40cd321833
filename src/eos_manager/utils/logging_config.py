"""Logging configuration for EOS Manager.

Provides configurable logging with:
- File-based logging with rotation
- Console output for real-time debugging
- Performance timing helpers for command dispatch and script runs

Environment Variables:
    EOS_MANAGER_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    EOS_MANAGER_LOG_FILE: Path to log file (default: ~/.eos-manager/eos-manager.log)
    EOS_MANAGER_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    EOS_MANAGER_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from eos_manager.utils.logging_config import setup_logging, timed

    setup_logging()  # Call once at startup

    @timed("run_script")
    async def run_script(self, device_id, script_text):
        ...

    # Or use context manager for sections:
    async with timed_section("execute", device_id="core-switch-01"):
        ...
"""
import asyncio
import functools
import logging
import os
import time
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Callable, Any

# Performance logger - separate from main logger for easy filtering
perf_logger = logging.getLogger("eos_manager.perf")

LOG_FORMAT = "%(asctime)s.%(msecs)03d | %(name)-32s | %(levelname)-7s | %(message)s"
PERF_FORMAT = "%(asctime)s.%(msecs)03d | PERF | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_log_level() -> int:
    """Get log level from environment."""
    level_str = os.environ.get("EOS_MANAGER_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def get_log_file() -> Path:
    """Get log file path from environment."""
    default_path = Path.home() / ".eos-manager" / "eos-manager.log"
    path_str = os.environ.get("EOS_MANAGER_LOG_FILE", str(default_path))
    return Path(path_str)


def setup_logging() -> None:
    """Configure logging for the application.

    Sets up:
    - Console handler (respects EOS_MANAGER_LOG_LEVEL)
    - File handler with rotation (DEBUG level - captures everything)
    - Performance log file for timing metrics
    """
    root_logger = logging.getLogger("eos_manager")
    if root_logger.handlers:
        return

    log_level = get_log_level()
    log_file = get_log_file()
    max_size_mb = int(os.environ.get("EOS_MANAGER_LOG_MAX_SIZE", "10"))
    backup_count = int(os.environ.get("EOS_MANAGER_LOG_BACKUPS", "5"))

    log_file.parent.mkdir(parents=True, exist_ok=True)

    main_format = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    perf_format = logging.Formatter(PERF_FORMAT, datefmt=DATE_FORMAT)

    # MCP uses stdout for the protocol, StreamHandler writes to stderr
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(main_format)

    perf_log_file = log_file.parent / "eos-manager-perf.log"
    perf_handler = RotatingFileHandler(
        perf_log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    perf_handler.setLevel(logging.DEBUG)
    perf_handler.setFormatter(perf_format)

    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # Perf records go to their own file only
    perf_logger.setLevel(logging.DEBUG)
    perf_logger.addHandler(perf_handler)
    perf_logger.propagate = False

    root_logger.info(f"Logging initialized: level={logging.getLevelName(log_level)}, file={log_file}")
    perf_logger.info(f"Performance logging to: {perf_log_file}")


def _format_perf(operation: str, device_id: Optional[str], elapsed_ms: float, outcome: str) -> str:
    return f"{operation:20s} | {device_id or 'N/A':15s} | {elapsed_ms:8.2f}ms | {outcome}"


def timed(operation: str):
    """Decorator to log execution time of an async method.

    The device id is taken from a ``device_id`` argument when present.

    Usage:
        @timed("run_script")
        async def run_script(self, device_id, script_text):
            ...
    """
    def decorator(func: Callable) -> Callable:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError(f"@timed requires a coroutine function, got {func.__name__}")

        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            dev_id = kwargs.get("device_id")
            if dev_id is None and len(args) > 1 and isinstance(args[1], str):
                dev_id = args[1]

            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                elapsed = (time.perf_counter() - start) * 1000
                perf_logger.warning(_format_perf(operation, dev_id, elapsed, f"FAIL: {e}"))
                raise
            elapsed = (time.perf_counter() - start) * 1000
            perf_logger.info(_format_perf(operation, dev_id, elapsed, "OK"))
            return result

        return wrapper

    return decorator


@asynccontextmanager
async def timed_section(operation: str, device_id: Optional[str] = None, **extra):
    """Async context manager for timing code sections.

    Args:
        operation: Name of the operation
        device_id: Device identifier
        **extra: Additional context to log

    Usage:
        async with timed_section("execute", device_id="core-switch-01", command="show vlan"):
            await transport.send(...)
    """
    start = time.perf_counter()
    extra_str = " | ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""

    try:
        yield
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        msg = _format_perf(operation, device_id, elapsed, f"FAIL: {e!r}")
        if extra_str:
            msg += f" | {extra_str}"
        perf_logger.warning(msg)
        raise

    elapsed = (time.perf_counter() - start) * 1000
    msg = _format_perf(operation, device_id, elapsed, "OK")
    if extra_str:
        msg += f" | {extra_str}"
    perf_logger.info(msg)
