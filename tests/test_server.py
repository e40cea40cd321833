"""Tests for the MCP tool handlers."""
import json

import pytest
from eos_manager import server
from eos_manager.config.settings import EngineSettings
from eos_manager.devices import SimulatedTransport
from eos_manager.manager import DeviceManager


@pytest.fixture
def manager(inventory, monkeypatch):
    mgr = DeviceManager(
        inventory,
        settings=EngineSettings(),
        transports={"simulated": SimulatedTransport()},
    )
    monkeypatch.setattr(server, "manager", mgr)
    return mgr


def payload(contents):
    assert len(contents) == 1
    return json.loads(contents[0].text)


class TestTools:
    """Tests for call_tool dispatch."""

    @pytest.mark.asyncio
    async def test_list_tools(self):
        names = {tool.name for tool in await server.list_tools()}
        assert names == {
            "list_devices",
            "list_quick_commands",
            "execute_command",
            "run_script",
            "get_history",
            "clear_history",
            "export_history",
            "compile_config",
            "apply_config",
        }

    @pytest.mark.asyncio
    async def test_list_devices(self, manager):
        data = payload(await server.call_tool("list_devices", {}))
        assert [d["id"] for d in data["devices"]] == [
            "core-switch-01",
            "access-switch-02",
            "edge-switch-03",
        ]

    @pytest.mark.asyncio
    async def test_list_quick_commands(self, manager):
        data = payload(await server.call_tool("list_quick_commands", {}))
        assert data["commands"][0] == {"label": "Show Version", "command": "show version"}
        assert len(data["commands"]) == 8

    @pytest.mark.asyncio
    async def test_quick_commands_run_on_simulator(self, manager):
        for _, command in server.QUICK_COMMANDS:
            data = payload(await server.call_tool(
                "execute_command", {"device_id": "core-switch-01", "command": command}
            ))
            assert data["status"] == "success", command

    @pytest.mark.asyncio
    async def test_execute_command(self, manager):
        data = payload(await server.call_tool(
            "execute_command", {"device_id": "core-switch-01", "command": "show version"}
        ))
        assert data["status"] == "success"
        assert data["device_name"] == "Core-Switch-01"

    @pytest.mark.asyncio
    async def test_invalid_request_reported(self, manager):
        contents = await server.call_tool(
            "execute_command", {"device_id": "nonexistent", "command": "show version"}
        )
        assert contents[0].text == "Error: Unknown device: nonexistent"
        assert len(manager.history) == 0

    @pytest.mark.asyncio
    async def test_run_script_and_history(self, manager):
        data = payload(await server.call_tool(
            "run_script",
            {"device_id": "core-switch-01", "script": "show version\nshow bogus-error\nshow vlan"},
        ))
        assert data["total"] == 3
        assert data["failed"] == 1

        history = payload(await server.call_tool("get_history", {"status": "error"}))
        assert history["total"] == 1
        assert history["entries"][0]["command"] == "show bogus-error"

        limited = payload(await server.call_tool("get_history", {"limit": 2}))
        assert limited["total"] == 3
        assert [e["command"] for e in limited["entries"]] == ["show vlan", "show bogus-error"]

    @pytest.mark.asyncio
    async def test_export_and_clear(self, manager):
        await server.call_tool("execute_command", {"device_id": "core-switch-01", "command": "show vlan"})
        csv_text = (await server.call_tool("export_history", {"format": "csv"}))[0].text
        assert csv_text.splitlines()[0] == "device_name,command,output,status,timestamp,execution_time"

        assert payload(await server.call_tool("clear_history", {})) == {"cleared": 1}
        assert payload(await server.call_tool("export_history", {})) == []

    @pytest.mark.asyncio
    async def test_compile_config(self, manager):
        contents = await server.call_tool(
            "compile_config",
            {"intent": {"type": "vlans", "vlans": [{"id": 20, "name": "Prod"}, {"id": 10}]}},
        )
        assert contents[0].text == "vlan 10\nvlan 20\n   name Prod"

    @pytest.mark.asyncio
    async def test_compile_config_invalid(self, manager):
        contents = await server.call_tool(
            "compile_config", {"intent": {"type": "vlan", "id": 5000}}
        )
        assert contents[0].text.startswith("Error: Invalid VLAN ID 5000")

    @pytest.mark.asyncio
    async def test_apply_config(self, manager):
        data = payload(await server.call_tool(
            "apply_config",
            {
                "device_id": "access-switch-02",
                "intent": {"type": "system", "hostname": "access-02"},
            },
        ))
        assert data["applied"] is True
        assert data["config"] == "hostname access-02"
        assert [r["command"] for r in data["results"]] == ["configure", "hostname access-02", "end"]

    @pytest.mark.asyncio
    async def test_unknown_tool(self, manager):
        contents = await server.call_tool("reboot", {})
        assert contents[0].text == "Unknown tool: reboot"


class TestResources:
    """Tests for the history resource."""

    @pytest.mark.asyncio
    async def test_list_resources(self):
        resources = await server.list_resources()
        assert [str(r.uri) for r in resources] == [server.HISTORY_URI]

    @pytest.mark.asyncio
    async def test_read_history(self, manager):
        await server.call_tool("execute_command", {"device_id": "core-switch-01", "command": "show vlan"})
        records = json.loads(await server.read_resource(server.HISTORY_URI))
        assert records[0]["command"] == "show vlan"
