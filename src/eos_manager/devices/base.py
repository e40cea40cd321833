"""Device model and transport abstraction for EOS switches."""
import os
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class DeviceStatus(str, Enum):
    """Reachability of a device as last reported by discovery."""
    ONLINE = "online"
    OFFLINE = "offline"
    WARNING = "warning"
    DISCOVERED = "discovered"


@dataclass
class InterfaceCounts:
    """Interface totals for a device."""
    total: int = 0
    up: int = 0
    down: int = 0


@dataclass
class Device:
    """A switch known to the inventory."""
    id: str
    name: str
    host: str
    model: str = ""
    version: str = ""
    status: DeviceStatus = DeviceStatus.DISCOVERED
    interfaces: InterfaceCounts = field(default_factory=InterfaceCounts)
    last_seen: Optional[datetime] = None
    # Connection settings
    transport: str = "ssh"
    port: int = 22
    username: str = "admin"
    password: Optional[str] = None
    password_env: str = "EOS_MANAGER_PASSWORD"
    timeout: int = 30

    def get_password(self) -> str:
        """Get password from config or environment variable."""
        if self.password:
            return self.password
        return os.environ.get(self.password_env, "")

    def to_dict(self) -> dict:
        """Public view of the device (no credentials)."""
        return {
            "id": self.id,
            "name": self.name,
            "host": self.host,
            "model": self.model,
            "version": self.version,
            "status": self.status.value,
            "interfaces": {
                "total": self.interfaces.total,
                "up": self.interfaces.up,
                "down": self.interfaces.down,
            },
            "last_seen": self.last_seen.isoformat() if self.last_seen else None,
            "transport": self.transport,
        }


class Transport(ABC):
    """Delivers one command to one device."""

    name: str = "base"

    @abstractmethod
    async def send(self, device: Device, command: str, timeout: float) -> tuple[str, bool]:
        """Send a command and wait for the device response.

        Returns:
            Tuple of (output, succeeded)

        Raises:
            TransportFailure: Connection or session could not be established
            TransportTimeout: Device did not answer within timeout
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the transport."""
        pass
