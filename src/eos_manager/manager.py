"""DeviceManager - wires inventory, transports, executor, scripts and compiler.

Provides a single entry point for callers (MCP server, automation):
1. Single commands        -> CommandExecutor
2. Multi-line scripts     -> ScriptRunner -> CommandExecutor
3. Configuration intents  -> ConfigCompiler (preview) -> ScriptRunner (apply)
"""
import asyncio
import logging
from typing import Any, Optional

from .command_engine import (
    CommandExecutor,
    CommandResult,
    HistoryLedger,
    ScriptRunner,
    ScriptRunSummary,
)
from .config.inventory import DeviceInventory
from .config.settings import EngineSettings
from .config_engine import ConfigCompiler, ConfigurationIntent, IntentParser
from .devices import Transport, create_transport
from .devices.base import Device

logger = logging.getLogger(__name__)

# EOS configuration session wrapper used by apply_config
CONFIGURE_COMMAND = "configure"
END_COMMAND = "end"


class DeviceManager:
    """
    Facade over the command and config engines.

    Usage:
        manager = DeviceManager(DeviceInventory())
        result = await manager.execute("core-switch-01", "show version")
        summary = await manager.apply_config("core-switch-01", intent)
    """

    def __init__(
        self,
        inventory: DeviceInventory,
        settings: Optional[EngineSettings] = None,
        transports: Optional[dict[str, Transport]] = None,
        ledger: Optional[HistoryLedger] = None,
    ):
        """
        Initialize the manager.

        Args:
            inventory: Device registry
            settings: Engine settings (default: inventory settings + env overrides)
            transports: Transport per type (default: one per type used by inventory)
            ledger: History ledger (default: new ledger sized by settings)
        """
        self.inventory = inventory
        self.settings = settings or EngineSettings.from_env(inventory.settings)

        if transports is None:
            transports = {
                transport_type: create_transport(transport_type)
                for transport_type in inventory.transport_types()
            }
        self.transports = transports

        self.history = ledger if ledger is not None else HistoryLedger(
            max_size=self.settings.history_max_size
        )
        self.executor = CommandExecutor(
            inventory,
            transports,
            self.history,
            timeout=self.settings.command_timeout,
        )
        self.runner = ScriptRunner(
            self.executor,
            stop_on_error=self.settings.stop_on_error,
            min_command_interval=self.settings.min_command_interval,
        )
        self.compiler = ConfigCompiler()
        self.parser = IntentParser()

    def list_devices(self) -> list[Device]:
        """All devices known to the inventory."""
        return self.inventory.list_devices()

    async def execute(self, device_id: str, command: str) -> CommandResult:
        """Execute a single command (see CommandExecutor.execute)."""
        return await self.executor.execute(device_id, command)

    async def run_script(
        self,
        device_id: str,
        script_text: str,
        stop_on_error: Optional[bool] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ScriptRunSummary:
        """Run a script (see ScriptRunner.run_script)."""
        return await self.runner.run_script(
            device_id,
            script_text,
            stop_on_error=stop_on_error,
            cancel_event=cancel_event,
        )

    def compile(self, intent: ConfigurationIntent) -> str:
        """Compile an intent into configuration text."""
        return self.compiler.compile(intent)

    def parse(self, config: dict[str, Any]) -> ConfigurationIntent:
        """Parse an intent dict (for external use)."""
        return self.parser.parse(config)

    def preview(self, config: dict[str, Any]) -> str:
        """Parse and compile an intent dict without touching any device."""
        return self.compile(self.parse(config))

    async def apply_config(
        self,
        device_id: str,
        intent: ConfigurationIntent,
        stop_on_error: bool = True,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ScriptRunSummary:
        """
        Compile an intent and push it to a device.

        The generated lines are wrapped in ``configure`` / ``end`` and run
        as a script, stopping at the first failure by default.

        Raises:
            InvalidConfiguration: If the intent is malformed (nothing is sent)
            InvalidRequest: Missing or unknown device
            DeviceBusy: Device is executing another command
        """
        commands = self.compiler.compile_commands(intent)
        script = "\n".join([CONFIGURE_COMMAND, *commands, END_COMMAND])

        logger.info(
            f"Applying {type(intent).__name__} to {device_id} ({len(commands)} lines)"
        )
        return await self.run_script(
            device_id,
            script,
            stop_on_error=stop_on_error,
            cancel_event=cancel_event,
        )

    async def close(self) -> None:
        """Close all transports."""
        for transport in self.transports.values():
            await transport.close()
