"""SSH transport for Arista EOS switches.

Each device gets one persistent interactive shell (paramiko invoke_shell),
so CLI mode carries over between commands: ``configure`` followed by
``interface Ethernet1`` lands in interface configuration mode, exactly as
when typed by an operator. A command is complete once the EOS prompt
(``leaf1#``, ``leaf1(config-if-Et1)#``) comes back.

Blocking paramiko calls run in the default thread executor.
"""
import asyncio
import logging
import re
import socket
import time
from dataclasses import dataclass
from typing import Optional

import paramiko

from .base import Device, Transport
from ..command_engine.errors import TransportFailure, TransportTimeout
from ..utils.connection import with_retry

logger = logging.getLogger(__name__)

# EOS prefixes CLI errors with "% " ("% Invalid input", "% Incomplete command")
EOS_ERROR_PREFIX = "%"

# hostname> / hostname# / hostname(config)# / hostname(config-if-Et1)#
PROMPT_PATTERN = re.compile(r"[\w.\-]+(?:\([\w.\-/]+\))?[>#]\s*$")
ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;?]*[a-zA-Z]")

# Sent once per session so long output is never paginated
SESSION_SETUP = ("terminal length 0",)
BANNER_TIMEOUT = 10.0
POLL_INTERVAL = 0.05


@dataclass
class ShellSession:
    """SSH client and its interactive shell channel."""
    client: paramiko.SSHClient
    shell: paramiko.Channel

    def is_active(self) -> bool:
        transport = self.client.get_transport()
        return (
            transport is not None
            and transport.is_active()
            and not self.shell.closed
        )

    def close(self) -> None:
        self.shell.close()
        self.client.close()


def read_until_prompt(shell: paramiko.Channel, timeout: float) -> str:
    """Read from shell until the buffer ends in an EOS prompt.

    Raises:
        socket.timeout: No prompt within timeout
        EOFError: Device closed the channel
    """
    deadline = time.monotonic() + timeout
    output = ""
    while not PROMPT_PATTERN.search(output):
        if shell.recv_ready():
            chunk = shell.recv(65535).decode("utf-8", errors="ignore")
            output += ANSI_ESCAPE.sub("", chunk).replace("\r", "")
            continue
        if shell.closed:
            raise EOFError("Channel closed by device")
        if time.monotonic() > deadline:
            raise socket.timeout(f"No prompt within {timeout:g}s")
        time.sleep(POLL_INTERVAL)
    return output


def clean_output(raw: str, command: str) -> str:
    """Strip the command echo and the trailing prompt."""
    lines = raw.split("\n")
    if lines and command in lines[0]:
        lines = lines[1:]
    if lines and PROMPT_PATTERN.search(lines[-1]):
        lines = lines[:-1]
    return "\n".join(lines).strip()


class SSHTransport(Transport):
    """Send commands to EOS devices over a persistent SSH shell."""

    name = "ssh"

    def __init__(self, connect_attempts: int = 3):
        self.connect_attempts = connect_attempts
        self._sessions: dict[str, ShellSession] = {}

    async def send(self, device: Device, command: str, timeout: float) -> tuple[str, bool]:
        """Run command on device and return (output, succeeded)."""
        session = await self._get_session(device)
        loop = asyncio.get_event_loop()

        def _exec():
            session.shell.send(f"{command}\n")
            return read_until_prompt(session.shell, timeout)

        try:
            raw = await loop.run_in_executor(None, _exec)
        except socket.timeout as e:
            # CLI state is unknown after a lost prompt
            self._drop_session(device.id)
            raise TransportTimeout(f"No response from {device.host} within {timeout:g}s") from e
        except (paramiko.SSHException, OSError, EOFError) as e:
            self._drop_session(device.id)
            raise TransportFailure(f"SSH session to {device.host} failed: {e}") from e

        output = clean_output(raw, command)
        if any(line.startswith(EOS_ERROR_PREFIX) for line in output.splitlines()):
            logger.debug(f"Command '{command}' failed on {device.id}")
            return output, False
        return output, True

    async def _get_session(self, device: Device) -> ShellSession:
        """Return the cached session for device, connecting if needed."""
        session = self._sessions.get(device.id)
        if session is not None:
            if session.is_active():
                return session
            self._drop_session(device.id)

        try:
            session = await self._connect(device)
        except paramiko.AuthenticationException as e:
            raise TransportFailure(f"Authentication failed for {device.username}@{device.host}") from e
        except socket.timeout as e:
            raise TransportTimeout(f"Connection to {device.host} timed out") from e
        except (paramiko.SSHException, OSError, EOFError) as e:
            raise TransportFailure(f"Could not connect to {device.host}:{device.port}: {e}") from e

        self._sessions[device.id] = session
        return session

    async def _connect(self, device: Device) -> ShellSession:
        @with_retry(max_attempts=self.connect_attempts, min_wait=1, max_wait=10)
        async def _attempt() -> paramiko.SSHClient:
            logger.info(f"Connecting to {device.id} at {device.host}:{device.port}")
            loop = asyncio.get_event_loop()
            return await loop.run_in_executor(None, self._open, device)

        client = await _attempt()
        loop = asyncio.get_event_loop()
        try:
            shell = await loop.run_in_executor(None, self._start_shell, client, device)
        except Exception:
            client.close()
            raise
        logger.info(f"Connected to {device.id}")
        return ShellSession(client=client, shell=shell)

    @staticmethod
    def _open(device: Device) -> paramiko.SSHClient:
        ssh = paramiko.SSHClient()
        ssh.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        ssh.connect(
            hostname=device.host,
            port=device.port,
            username=device.username,
            password=device.get_password(),
            timeout=device.timeout,
            allow_agent=False,
            look_for_keys=False,
        )
        return ssh

    @staticmethod
    def _start_shell(client: paramiko.SSHClient, device: Device) -> paramiko.Channel:
        """Open the interactive shell and wait for the first prompt."""
        shell = client.invoke_shell()
        read_until_prompt(shell, BANNER_TIMEOUT)
        for command in SESSION_SETUP:
            shell.send(f"{command}\n")
            read_until_prompt(shell, device.timeout)
        return shell

    def _drop_session(self, device_id: str) -> None:
        session: Optional[ShellSession] = self._sessions.pop(device_id, None)
        if session is None:
            return
        try:
            session.close()
        except Exception as e:
            logger.warning(f"Error closing SSH session to {device_id}: {e}")

    async def close(self) -> None:
        """Close all cached sessions."""
        for device_id in list(self._sessions):
            self._drop_session(device_id)
