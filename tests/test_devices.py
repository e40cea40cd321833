"""Tests for the device model and transports."""
import string

import paramiko
import pytest
from eos_manager import DeviceManager
from eos_manager.command_engine import TransportFailure, TransportTimeout
from eos_manager.config.inventory import DeviceInventory
from eos_manager.config.settings import EngineSettings
from eos_manager.config_engine import InterfaceIntent
from eos_manager.devices import (
    Device,
    DeviceStatus,
    SimulatedTransport,
    SSHTransport,
    create_transport,
)


class TestDevice:
    """Tests for the Device dataclass."""

    def test_get_password_direct(self):
        device = Device(id="leaf1", name="Leaf1", host="10.0.0.1", password="secret")
        assert device.get_password() == "secret"

    def test_get_password_from_env(self, monkeypatch):
        monkeypatch.setenv("EOS_MANAGER_PASSWORD", "env_secret")
        device = Device(id="leaf1", name="Leaf1", host="10.0.0.1")
        assert device.get_password() == "env_secret"

    def test_get_password_custom_env(self, monkeypatch):
        monkeypatch.setenv("CUSTOM_PWD", "custom_secret")
        device = Device(id="leaf1", name="Leaf1", host="10.0.0.1", password_env="CUSTOM_PWD")
        assert device.get_password() == "custom_secret"

    def test_defaults(self):
        device = Device(id="leaf1", name="Leaf1", host="10.0.0.1")
        assert device.status == DeviceStatus.DISCOVERED
        assert device.transport == "ssh"
        assert device.port == 22


class TestCreateTransport:

    def test_known_types(self):
        assert isinstance(create_transport("simulated"), SimulatedTransport)
        assert isinstance(create_transport("SSH"), SSHTransport)

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown transport type"):
            create_transport("telnet")


class TestSimulatedTransport:
    """Tests for the simulated EOS CLI."""

    @pytest.fixture
    def device(self):
        return Device(
            id="core-switch-01",
            name="Core-Switch-01",
            host="192.168.1.10",
            model="DCS-7050SX3-48YC8",
            version="4.28.3M",
            status=DeviceStatus.ONLINE,
        )

    @pytest.mark.asyncio
    async def test_show_version(self, device):
        output, ok = await SimulatedTransport().send(device, "show version", 5)
        assert ok
        assert "Arista DCS-7050SX3-48YC8" in output
        assert "4.28.3M" in output

    @pytest.mark.asyncio
    async def test_invalid_command(self, device):
        output, ok = await SimulatedTransport().send(device, "show invalid", 5)
        assert not ok
        assert output == "% Invalid input"

    @pytest.mark.asyncio
    async def test_config_command_silent(self, device):
        assert await SimulatedTransport().send(device, "vlan 10", 5) == ("", True)

    @pytest.mark.asyncio
    async def test_other_show(self, device):
        output, ok = await SimulatedTransport().send(device, "show ip route", 5)
        assert ok
        assert output.startswith("Core-Switch-01# show ip route")

    @pytest.mark.asyncio
    async def test_response_override(self, device):
        transport = SimulatedTransport(responses={"show clock": "Mon Jan 15 10:30:00 2024"})
        assert await transport.send(device, "show clock", 5) == ("Mon Jan 15 10:30:00 2024", True)

    @pytest.mark.asyncio
    async def test_offline_device(self, device):
        device.status = DeviceStatus.OFFLINE
        transport = SimulatedTransport()
        with pytest.raises(TransportFailure, match="unreachable"):
            await transport.send(device, "show version", 5)
        assert transport.sent == []

    def test_delay_from_env(self, monkeypatch):
        monkeypatch.setenv("EOS_MANAGER_SIMULATED_DELAY_MS", "250")
        assert SimulatedTransport().delay == 0.25


class FakeShell:
    """Stands in for an interactive paramiko channel on an EOS switch.

    Tracks CLI mode like EOS does: config-only commands are rejected in
    exec mode, and the prompt shows the current mode.
    """

    def __init__(self, hostname="leaf1", silent=False, hang_up=False):
        self.hostname = hostname
        self.silent = silent
        self.hang_up = hang_up
        self.mode = ""
        self.commands = []
        self.closed = False
        self._buffer = f"Last login: Mon Jan 15 10:30:00 2024\r\n{self.prompt()}"

    def prompt(self):
        if self.mode:
            return f"{self.hostname}({self.mode})#"
        return f"{self.hostname}#"

    def send(self, data):
        for command in data.splitlines():
            self.commands.append(command)
            if self.hang_up:
                self.closed = True
                return
            if self.silent:
                continue
            reply = self._run(command.strip())
            self._buffer += f"{command}\r\n{reply}{self.prompt()}"

    def _run(self, command):
        if command == "terminal length 0":
            return ""
        if command == "show version":
            return "Arista DCS-7050SX3-48YC8\r\nSoftware image version: \x1b[1m4.28.3M\x1b[0m\r\n"
        if command in ("configure", "configure terminal"):
            self.mode = "config"
            return ""
        if command == "end":
            self.mode = ""
            return ""
        if not self.mode:
            return "% Invalid input\r\n"
        if command.startswith("interface "):
            name = command.split()[1]
            self.mode = f"config-if-{name[:2]}{name.lstrip(string.ascii_letters)}"
            return ""
        if self.mode.startswith("config-if") and command.split()[0] in ("description", "switchport", "shutdown", "no"):
            return ""
        if self.mode == "config" and command.startswith("hostname "):
            return ""
        return "% Invalid input\r\n"

    def recv_ready(self):
        return bool(self._buffer)

    def recv(self, nbytes):
        data, self._buffer = self._buffer[:nbytes], self._buffer[nbytes:]
        return data.encode()

    def close(self):
        self.closed = True


class FakeSSHClient:
    """Stands in for paramiko.SSHClient."""

    def __init__(self, shell=None):
        self.shell = shell or FakeShell()
        self.shells_opened = 0
        self.closed = False

    def get_transport(self):
        return self

    def is_active(self):
        return not self.closed

    def invoke_shell(self):
        self.shells_opened += 1
        return self.shell

    def close(self):
        self.closed = True


class TestSSHTransport:
    """Tests for SSHTransport with a fake paramiko client."""

    @pytest.fixture
    def device(self):
        return Device(id="leaf1", name="Leaf1", host="10.0.0.1", password="pw", timeout=1)

    @pytest.fixture
    def client(self, monkeypatch):
        client = FakeSSHClient()
        monkeypatch.setattr(SSHTransport, "_open", staticmethod(lambda dev: client))
        return client

    @pytest.mark.asyncio
    async def test_send_strips_echo_and_prompt(self, device, client):
        output, ok = await SSHTransport().send(device, "show version", 5)
        assert ok
        assert output == "Arista DCS-7050SX3-48YC8\nSoftware image version: 4.28.3M"

    @pytest.mark.asyncio
    async def test_session_setup_disables_paging(self, device, client):
        await SSHTransport().send(device, "show version", 5)
        assert client.shell.commands == ["terminal length 0", "show version"]

    @pytest.mark.asyncio
    async def test_session_reused(self, device, monkeypatch):
        client = FakeSSHClient()
        opened = []

        def fake_open(dev):
            opened.append(dev.id)
            return client

        monkeypatch.setattr(SSHTransport, "_open", staticmethod(fake_open))
        transport = SSHTransport()
        await transport.send(device, "show version", 5)
        await transport.send(device, "show version", 5)
        assert opened == ["leaf1"]
        assert client.shells_opened == 1

    @pytest.mark.asyncio
    async def test_config_mode_carries_across_commands(self, device, client):
        transport = SSHTransport()
        results = [
            await transport.send(device, command, 5)
            for command in [
                "configure",
                "interface Ethernet1",
                "description Uplink to spine",
                "switchport mode access",
                "no shutdown",
                "end",
            ]
        ]
        assert results == [("", True)] * 6
        assert client.shell.mode == ""

    @pytest.mark.asyncio
    async def test_config_command_outside_config_mode(self, device, client):
        output, ok = await SSHTransport().send(device, "description Uplink", 5)
        assert not ok
        assert output == "% Invalid input"

    @pytest.mark.asyncio
    async def test_apply_config_over_ssh(self, client):
        inventory = DeviceInventory(config={
            "devices": {"leaf1": {"name": "Leaf1", "host": "10.0.0.1", "status": "online"}},
        })
        mgr = DeviceManager(inventory, settings=EngineSettings(), transports={"ssh": SSHTransport()})
        summary = await mgr.apply_config(
            "leaf1",
            InterfaceIntent(interface_name="Ethernet1", vlan_id=20),
        )
        assert summary.failed == 0
        assert summary.succeeded == 7
        assert client.shell.commands[1:3] == ["configure", "interface Ethernet1"]
        await mgr.close()
        assert client.closed

    @pytest.mark.asyncio
    async def test_no_prompt_times_out_and_drops_session(self, device, client):
        transport = SSHTransport()
        await transport.send(device, "show version", 5)
        client.shell.silent = True
        with pytest.raises(TransportTimeout):
            await transport.send(device, "show version", 0.2)
        assert client.closed
        assert transport._sessions == {}

    @pytest.mark.asyncio
    async def test_channel_closed_by_device(self, device, client):
        transport = SSHTransport()
        await transport.send(device, "show version", 5)
        client.shell.hang_up = True
        with pytest.raises(TransportFailure, match="closed"):
            await transport.send(device, "reload", 5)
        assert transport._sessions == {}

    @pytest.mark.asyncio
    async def test_closed_session_reopened(self, device, monkeypatch):
        clients = []

        def fake_open(dev):
            clients.append(FakeSSHClient())
            return clients[-1]

        monkeypatch.setattr(SSHTransport, "_open", staticmethod(fake_open))
        transport = SSHTransport()
        await transport.send(device, "show version", 5)
        clients[0].shell.close()
        _, ok = await transport.send(device, "show version", 5)
        assert ok
        assert len(clients) == 2
        assert clients[0].closed

    @pytest.mark.asyncio
    async def test_auth_failure_not_retried(self, device, monkeypatch):
        attempts = []

        def fake_open(dev):
            attempts.append(dev.id)
            raise paramiko.AuthenticationException("bad password")

        monkeypatch.setattr(SSHTransport, "_open", staticmethod(fake_open))
        with pytest.raises(TransportFailure, match="Authentication failed"):
            await SSHTransport().send(device, "show version", 5)
        assert attempts == ["leaf1"]

    @pytest.mark.asyncio
    async def test_connect_refused(self, device, monkeypatch):
        def fake_open(dev):
            raise ConnectionRefusedError("refused")

        monkeypatch.setattr(SSHTransport, "_open", staticmethod(fake_open))
        with pytest.raises(TransportFailure, match="Could not connect"):
            await SSHTransport(connect_attempts=1).send(device, "show version", 5)

    @pytest.mark.asyncio
    async def test_close(self, device, client):
        transport = SSHTransport()
        await transport.send(device, "show version", 5)
        await transport.close()
        assert client.closed
        assert client.shell.closed
