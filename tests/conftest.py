"""Shared fixtures."""
import pytest
from eos_manager.command_engine import CommandExecutor, HistoryLedger
from eos_manager.config.inventory import DeviceInventory
from eos_manager.devices import SimulatedTransport


INVENTORY = {
    "defaults": {"transport": "simulated"},
    "devices": {
        "core-switch-01": {
            "name": "Core-Switch-01",
            "host": "192.168.1.10",
            "model": "DCS-7050SX3-48YC8",
            "version": "4.28.3M",
            "status": "online",
        },
        "access-switch-02": {
            "name": "Access-Switch-02",
            "host": "192.168.1.21",
            "model": "DCS-7280SR-48C6",
            "version": "4.27.2F",
            "status": "online",
        },
        "edge-switch-03": {
            "name": "Edge-Switch-03",
            "host": "192.168.1.30",
            "status": "offline",
        },
    },
}


@pytest.fixture
def inventory():
    return DeviceInventory(config=INVENTORY)


@pytest.fixture
def transport():
    return SimulatedTransport(delay=0)


@pytest.fixture
def ledger():
    return HistoryLedger()


@pytest.fixture
def executor(inventory, transport, ledger):
    return CommandExecutor(inventory, transport, ledger, timeout=5)
