"""Command Engine - command dispatch, scripts and history.

Usage:
    from eos_manager.command_engine import CommandExecutor, ScriptRunner, HistoryLedger

    ledger = HistoryLedger(max_size=500)
    executor = CommandExecutor(inventory, SimulatedTransport(), ledger)
    result = await executor.execute("core-switch-01", "show version")

    runner = ScriptRunner(executor)
    summary = await runner.run_script("core-switch-01", "show version\\nshow vlan\\n")
"""
# errors and schema first: devices import them while this package initializes
from .errors import (
    EngineError,
    InvalidRequest,
    EmptyScript,
    DeviceBusy,
    TransportError,
    TransportTimeout,
    TransportFailure,
    InvalidConfiguration,
)
from .schema import CommandResult, CommandStatus, ScriptJob, ScriptRunSummary
from .history import HistoryLedger
from .executor import CommandExecutor, DeviceRegistry
from .script import ScriptRunner, parse_script

__all__ = [
    # Errors
    "EngineError",
    "InvalidRequest",
    "EmptyScript",
    "DeviceBusy",
    "TransportError",
    "TransportTimeout",
    "TransportFailure",
    "InvalidConfiguration",
    # Schema
    "CommandResult",
    "CommandStatus",
    "ScriptJob",
    "ScriptRunSummary",
    # Components
    "HistoryLedger",
    "CommandExecutor",
    "DeviceRegistry",
    "ScriptRunner",
    "parse_script",
]
