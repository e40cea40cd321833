"""Executor for single commands.

Dispatches one command to one device through its transport, enforces
at most one in-flight command per device and records every attempt in
the history ledger.
"""
import asyncio
import logging
import threading
import time
from typing import Optional, Protocol, Union

from ..devices.base import Device, Transport
from ..utils.audit_log import log_command
from ..utils.logging_config import timed_section
from .errors import DeviceBusy, InvalidRequest, TransportError, TransportTimeout
from .history import HistoryLedger
from .schema import CommandResult, CommandStatus

logger = logging.getLogger(__name__)


class DeviceRegistry(Protocol):
    """Anything that can resolve a device id."""

    def lookup(self, device_id: str) -> Optional[Device]:
        ...


class CommandExecutor:
    """Execute single commands on devices."""

    def __init__(
        self,
        registry: DeviceRegistry,
        transports: Union[Transport, dict[str, Transport]],
        ledger: Optional[HistoryLedger] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize executor.

        Args:
            registry: Device registry used to resolve device ids
            transports: One transport for all devices, or a mapping of
                transport type (Device.transport) to transport
            ledger: History ledger receiving every result
            timeout: Per-command timeout in seconds
        """
        self.registry = registry
        self.ledger = ledger if ledger is not None else HistoryLedger()
        self.timeout = timeout
        if isinstance(transports, Transport):
            self._default_transport: Optional[Transport] = transports
            self._transports: dict[str, Transport] = {}
        else:
            self._default_transport = None
            self._transports = dict(transports)
        self._in_flight: set[str] = set()
        self._in_flight_lock = threading.Lock()

    def is_busy(self, device_id: str) -> bool:
        """Check whether a command is currently in flight for device_id."""
        with self._in_flight_lock:
            return device_id in self._in_flight

    def resolve(self, device_id: str) -> Device:
        """Validate device_id and return the device.

        Raises:
            InvalidRequest: If no device is selected or it is unknown
        """
        if not device_id or not device_id.strip():
            raise InvalidRequest("No device selected")
        device = self.registry.lookup(device_id)
        if device is None:
            raise InvalidRequest(f"Unknown device: {device_id}")
        return device

    def _transport_for(self, device: Device) -> Transport:
        if self._default_transport is not None:
            return self._default_transport
        transport = self._transports.get(device.transport)
        if transport is None:
            raise InvalidRequest(
                f"No transport '{device.transport}' configured for device {device.id}"
            )
        return transport

    async def execute(self, device_id: str, command: str) -> CommandResult:
        """
        Execute a command on a device.

        Args:
            device_id: Registry id of the target device
            command: CLI command text

        Returns:
            CommandResult (success or error); it is also appended to history

        Raises:
            InvalidRequest: Missing/unknown device or empty command
            DeviceBusy: Another command is in flight for this device
        """
        command = (command or "").strip()
        device = self.resolve(device_id)
        if not command:
            raise InvalidRequest("Command text is empty")
        transport = self._transport_for(device)

        with self._in_flight_lock:
            if device.id in self._in_flight:
                raise DeviceBusy(device.id)
            self._in_flight.add(device.id)

        try:
            result = await self._dispatch(device, transport, command)
        finally:
            with self._in_flight_lock:
                self._in_flight.discard(device.id)

        self.ledger.append(result)
        log_command(result)
        return result

    async def _dispatch(self, device: Device, transport: Transport, command: str) -> CommandResult:
        """Send command and normalize every outcome into a CommandResult."""
        logger.info(f"Executing on {device.id}: {command}")
        start = time.perf_counter()

        try:
            async with timed_section("execute", device_id=device.id, command=command):
                try:
                    output, succeeded = await asyncio.wait_for(
                        transport.send(device, command, self.timeout),
                        timeout=self.timeout,
                    )
                except asyncio.TimeoutError as e:
                    raise TransportTimeout(
                        f"Command timed out after {self.timeout:g}s"
                    ) from e
            status = CommandStatus.SUCCESS if succeeded else CommandStatus.ERROR
        except TransportError as e:
            logger.warning(f"{type(e).__name__} on {device.id} for '{command}': {e}")
            output, status = f"% {e}", CommandStatus.ERROR
        except Exception as e:
            logger.exception(f"Transport raised while executing '{command}' on {device.id}")
            output, status = f"% Execution failed: {e}", CommandStatus.ERROR

        elapsed = time.perf_counter() - start
        if status == CommandStatus.ERROR:
            logger.warning(f"Command failed on {device.id} in {elapsed:.2f}s: {command}")

        return CommandResult(
            device_id=device.id,
            device_name=device.name,
            command=command,
            output=output,
            status=status,
            execution_time=elapsed,
        )
