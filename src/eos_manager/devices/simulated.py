"""Simulated EOS transport.

Answers common show commands with canned EOS output so the engine can be
driven without hardware (demos, tests, dry labs).

Environment Variables:
    EOS_MANAGER_SIMULATED_DELAY_MS: Response latency in milliseconds (default: 0)
"""
import asyncio
import logging
import os
from typing import Optional

from .base import Device, DeviceStatus, Transport
from ..command_engine.errors import TransportFailure

logger = logging.getLogger(__name__)

SHOW_VERSION = """Arista {model}
Hardware version: 11.00
Serial number: SSJ17120022
Software image version: {version}
Architecture: i686
Uptime: 45 days, 12 hours and 34 minutes
Total memory: 8155904 kB
Free memory: 5420516 kB"""

SHOW_INTERFACES = """Port      Name               Status       Vlan       Duplex Speed Type
Et1                          connected    1          full   10G    10GBASE-SR
Et2                          connected    1          full   10G    10GBASE-SR
Et3                          notconnect   1          auto   auto   10GBASE-SR
Et48                         connected    20         full   10G    10GBASE-SR
Ma1                          connected    routed     full   1000   10/100/1000"""

SHOW_VLAN = """VLAN  Name                             Status    Ports
----- -------------------------------- --------- -------------------------------
1     default                          active    Et1, Et2, Et3, Et4, Et5, Et6
10    Management                       active
20    Production                       active    Et48
30    Guest                            active"""

INVALID_INPUT = "% Invalid input"

# Substrings that make the simulated device reject a command
ERROR_MARKERS = ("invalid", "error")


class SimulatedTransport(Transport):
    """Transport that fakes an EOS CLI."""

    name = "simulated"

    def __init__(
        self,
        delay: Optional[float] = None,
        responses: Optional[dict[str, str]] = None,
    ):
        """
        Initialize the simulated transport.

        Args:
            delay: Response latency in seconds (default from environment)
            responses: Extra exact-match command -> output overrides
        """
        if delay is None:
            delay_ms = int(os.environ.get("EOS_MANAGER_SIMULATED_DELAY_MS", "0") or "0")
            delay = delay_ms / 1000.0
        self.delay = delay
        self.responses = dict(responses or {})
        self.sent: list[tuple[str, str]] = []

    async def send(self, device: Device, command: str, timeout: float) -> tuple[str, bool]:
        """Return a canned response for command."""
        if device.status == DeviceStatus.OFFLINE:
            raise TransportFailure(f"{device.name} ({device.host}) is unreachable")

        if self.delay:
            await asyncio.sleep(self.delay)

        self.sent.append((device.id, command))
        logger.debug(f"[simulated] {device.id}# {command}")
        return self._respond(device, command)

    def _respond(self, device: Device, command: str) -> tuple[str, bool]:
        if command in self.responses:
            return self.responses[command], True

        lowered = command.lower()
        if any(marker in lowered for marker in ERROR_MARKERS):
            return INVALID_INPUT, False

        if lowered.startswith("show version"):
            return SHOW_VERSION.format(
                model=device.model or "DCS-7050SX3-48YC8",
                version=device.version or "4.28.3M",
            ), True
        if lowered.startswith("show interfaces"):
            return SHOW_INTERFACES, True
        if lowered.startswith("show vlan"):
            return SHOW_VLAN, True
        if lowered.startswith("show"):
            return f"{device.name}# {command}\n(no entries)", True

        # Configuration commands are silent on EOS
        return "", True
