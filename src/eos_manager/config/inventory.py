"""Device inventory management from YAML configuration.

Example devices.yaml:

```yaml
defaults:
  transport: ssh
  username: admin
  password_env: EOS_PASSWORD

settings:
  command_timeout: 20
  history_max_size: 500

devices:
  core-switch-01:
    name: Core-Switch-01
    host: 192.168.1.10
    model: DCS-7050SX3-48YC8
    version: 4.28.3M
    status: online
    interfaces: {total: 54, up: 48, down: 6}
```
"""
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import yaml

from ..devices.base import Device, DeviceStatus, InterfaceCounts
from .settings import EngineSettings

logger = logging.getLogger(__name__)

# Keys a device entry may carry besides the ones mapped explicitly below
DEVICE_FIELDS = {
    "name", "host", "model", "version", "status", "interfaces", "last_seen",
    "transport", "port", "username", "password", "password_env", "timeout",
}


class DeviceInventory:
    """Device registry loaded from YAML config (or a plain dict)."""

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize the inventory.

        Args:
            config_path: Path to devices.yaml (searched for when omitted)
            config: Already-loaded config dict; takes precedence over config_path
        """
        self._config: dict = {}
        self._devices: dict[str, Device] = {}
        if config is not None:
            self.config_path = None
            self._config = config
        else:
            self.config_path = config_path or self._find_config()
            with open(self.config_path) as f:
                self._config = yaml.safe_load(f) or {}
        self._load_devices()

    def _find_config(self) -> str:
        """Find the devices.yaml config file."""
        env_path = os.environ.get("EOS_MANAGER_CONFIG")
        if env_path:
            return env_path

        search_paths = [
            Path.cwd() / "configs" / "devices.yaml",
            Path.cwd() / "devices.yaml",
            Path.home() / ".config" / "eos-manager" / "devices.yaml",
        ]

        for path in search_paths:
            if path.exists():
                return str(path)

        raise FileNotFoundError(
            "Could not find devices.yaml. Create one in ./configs/devices.yaml "
            "or set EOS_MANAGER_CONFIG"
        )

    def _load_devices(self) -> None:
        """Build Device objects, merging defaults into each entry."""
        defaults = self._config.get("defaults", {}) or {}
        for device_id, device_config in (self._config.get("devices", {}) or {}).items():
            merged = {**defaults, **(device_config or {})}
            self._devices[str(device_id)] = self._build_device(str(device_id), merged)
        logger.info(f"Loaded {len(self._devices)} devices")

    @staticmethod
    def _build_device(device_id: str, config: dict[str, Any]) -> Device:
        unknown = set(config) - DEVICE_FIELDS
        if unknown:
            raise ValueError(
                f"Unknown fields for device {device_id}: {', '.join(sorted(unknown))}"
            )
        if not config.get("host"):
            raise ValueError(f"Device {device_id} has no host")

        try:
            status = DeviceStatus(config.get("status", DeviceStatus.DISCOVERED.value))
        except ValueError:
            raise ValueError(
                f"Invalid status for device {device_id}: {config.get('status')}"
            )

        last_seen = config.get("last_seen")
        if isinstance(last_seen, str):
            last_seen = datetime.fromisoformat(last_seen)

        interfaces = config.get("interfaces") or {}
        params = {
            k: v for k, v in config.items()
            if k not in ("status", "interfaces", "last_seen")
        }
        params.setdefault("name", device_id)
        return Device(
            id=device_id,
            status=status,
            interfaces=InterfaceCounts(**interfaces),
            last_seen=last_seen,
            **params,
        )

    @property
    def settings(self) -> EngineSettings:
        """Engine settings from the ``settings:`` section."""
        return EngineSettings.from_dict(self._config.get("settings"))

    def get_device_ids(self) -> list[str]:
        """Get all device IDs."""
        return list(self._devices)

    def lookup(self, device_id: str) -> Optional[Device]:
        """Get a device by id, or None when unknown."""
        return self._devices.get(device_id)

    def get_device(self, device_id: str) -> Device:
        """Get a device by id.

        Raises:
            KeyError: If the device is not in the inventory
        """
        device = self.lookup(device_id)
        if device is None:
            raise KeyError(f"Unknown device: {device_id}")
        return device

    def list_devices(self) -> list[Device]:
        """All devices in inventory order."""
        return list(self._devices.values())

    def get_devices_by_status(self, status: DeviceStatus) -> list[Device]:
        """Get devices filtered by reachability status."""
        return [d for d in self._devices.values() if d.status == status]

    def transport_types(self) -> set[str]:
        """Transport types used by the inventory."""
        return {d.transport for d in self._devices.values()}
