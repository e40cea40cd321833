"""MCP Server for EOS switch command orchestration.

Tools exposed:
- list_devices: List all devices in the inventory
- execute_command: Execute a single CLI command on a device
- run_script: Execute a multi-line script, one command per line
- get_history: Show executed commands, most recent first
- clear_history: Discard the command history
- export_history: Export the command history as JSON or CSV
- compile_config: Preview the EOS configuration generated from an intent
- apply_config: Compile an intent and push it to a device

Resources:
- eos://history: Command history as JSON
"""
import asyncio
import json
import logging
import os
from typing import Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    TextContent,
    Tool,
    Resource,
)
from pydantic import AnyUrl

from .command_engine import CommandStatus
from .config.inventory import DeviceInventory
from .manager import DeviceManager
from .utils.audit_log import setup_audit_logging
from .utils.logging_config import setup_logging, timed_section

logger = logging.getLogger(__name__)

# Global manager (initialized on first tool call)
manager: Optional[DeviceManager] = None

HISTORY_URI = "eos://history"

# Preset commands offered to operators, as (label, command)
QUICK_COMMANDS = [
    ("Show Version", "show version"),
    ("Show Interfaces", "show interfaces status"),
    ("Show IP Routes", "show ip route"),
    ("Show VLANs", "show vlan"),
    ("Show MAC Table", "show mac address-table"),
    ("Show Running Config", "show running-config"),
    ("Show System Resources", "show processes top"),
    ("Show BGP Summary", "show ip bgp summary"),
]


def get_manager() -> DeviceManager:
    """Get or create the device manager."""
    global manager
    if manager is None:
        inventory = DeviceInventory(os.environ.get("EOS_MANAGER_CONFIG"))
        manager = DeviceManager(inventory)
    return manager


def _text(payload) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2))]


# Create MCP server
server = Server("eos-manager")


# === TOOLS ===

@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    return [
        Tool(
            name="list_devices",
            description="List all switches in the inventory with model, version and status",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="list_quick_commands",
            description="List preset read-only EOS commands (label and command text) for common checks",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="execute_command",
            description="Execute a single EOS CLI command on a switch. Fails fast if the switch is busy.",
            inputSchema={
                "type": "object",
                "properties": {
                    "device_id": {
                        "type": "string",
                        "description": "Device ID (e.g., 'core-switch-01')"
                    },
                    "command": {
                        "type": "string",
                        "description": "CLI command (e.g., 'show version')"
                    }
                },
                "required": ["device_id", "command"]
            }
        ),
        Tool(
            name="run_script",
            description=(
                "Execute a script on a switch, one command per line. Blank lines are "
                "ignored; commands run strictly in order."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "device_id": {
                        "type": "string",
                        "description": "Device ID"
                    },
                    "script": {
                        "type": "string",
                        "description": "Script text, one command per line"
                    },
                    "stop_on_error": {
                        "type": "boolean",
                        "description": "Stop at the first failed command (default from settings)"
                    }
                },
                "required": ["device_id", "script"]
            }
        ),
        Tool(
            name="get_history",
            description="Show executed commands, most recent first",
            inputSchema={
                "type": "object",
                "properties": {
                    "device_id": {
                        "type": "string",
                        "description": "Only show commands for this device"
                    },
                    "status": {
                        "type": "string",
                        "enum": ["success", "error"],
                        "description": "Only show commands with this outcome"
                    },
                    "limit": {
                        "type": "integer",
                        "description": "Maximum number of entries",
                        "default": 20
                    }
                },
                "required": []
            }
        ),
        Tool(
            name="clear_history",
            description="Discard the command history",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="export_history",
            description="Export the full command history for download",
            inputSchema={
                "type": "object",
                "properties": {
                    "format": {
                        "type": "string",
                        "enum": ["json", "csv"],
                        "default": "json"
                    }
                },
                "required": []
            }
        ),
        Tool(
            name="compile_config",
            description=(
                "Preview the EOS configuration generated from an intent. "
                "Nothing is sent to a device."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "intent": {
                        "type": "object",
                        "description": (
                            "Intent with a 'type' key (interface, vlan, vlans, vxlan, acl, "
                            "routing, system) and its fields"
                        )
                    }
                },
                "required": ["intent"]
            }
        ),
        Tool(
            name="apply_config",
            description="Compile an intent and apply it to a switch inside a configure session",
            inputSchema={
                "type": "object",
                "properties": {
                    "device_id": {
                        "type": "string",
                        "description": "Device ID"
                    },
                    "intent": {
                        "type": "object",
                        "description": "Intent, see compile_config"
                    },
                    "stop_on_error": {
                        "type": "boolean",
                        "default": True
                    }
                },
                "required": ["device_id", "intent"]
            }
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls."""
    device_id = arguments.get("device_id", "N/A")

    async with timed_section(f"tool:{name}", device_id=device_id):
        try:
            mgr = get_manager()

            if name == "list_devices":
                return await handle_list_devices(mgr)

            elif name == "list_quick_commands":
                return await handle_list_quick_commands()

            elif name == "execute_command":
                return await handle_execute_command(
                    mgr,
                    arguments["device_id"],
                    arguments["command"]
                )

            elif name == "run_script":
                return await handle_run_script(
                    mgr,
                    arguments["device_id"],
                    arguments["script"],
                    arguments.get("stop_on_error")
                )

            elif name == "get_history":
                return await handle_get_history(
                    mgr,
                    arguments.get("device_id"),
                    arguments.get("status"),
                    arguments.get("limit", 20)
                )

            elif name == "clear_history":
                return await handle_clear_history(mgr)

            elif name == "export_history":
                return await handle_export_history(mgr, arguments.get("format", "json"))

            elif name == "compile_config":
                return await handle_compile_config(mgr, arguments["intent"])

            elif name == "apply_config":
                return await handle_apply_config(
                    mgr,
                    arguments["device_id"],
                    arguments["intent"],
                    arguments.get("stop_on_error", True)
                )

            else:
                return [TextContent(type="text", text=f"Unknown tool: {name}")]

        except Exception as e:
            logger.exception(f"Tool {name} failed")
            return [TextContent(type="text", text=f"Error: {str(e)}")]


# === TOOL HANDLERS ===

async def handle_list_devices(mgr: DeviceManager) -> list[TextContent]:
    """List all configured devices."""
    return _text({"devices": [d.to_dict() for d in mgr.list_devices()]})


async def handle_list_quick_commands() -> list[TextContent]:
    """List the preset commands."""
    return _text({
        "commands": [{"label": label, "command": command} for label, command in QUICK_COMMANDS]
    })


async def handle_execute_command(
    mgr: DeviceManager,
    device_id: str,
    command: str
) -> list[TextContent]:
    """Execute a single command."""
    result = await mgr.execute(device_id, command)
    return _text({"id": result.id, "device_id": result.device_id, **result.to_dict()})


async def handle_run_script(
    mgr: DeviceManager,
    device_id: str,
    script: str,
    stop_on_error: Optional[bool]
) -> list[TextContent]:
    """Execute a script."""
    summary = await mgr.run_script(device_id, script, stop_on_error=stop_on_error)
    return _text(summary.to_dict())


async def handle_get_history(
    mgr: DeviceManager,
    device_id: Optional[str],
    status: Optional[str],
    limit: int
) -> list[TextContent]:
    """Show command history."""
    entries = mgr.history.filter(
        device_id=device_id,
        status=CommandStatus(status) if status else None,
    )
    return _text({
        "total": len(entries),
        "entries": [{"id": r.id, **r.to_dict()} for r in entries[:limit]],
    })


async def handle_clear_history(mgr: DeviceManager) -> list[TextContent]:
    """Clear command history."""
    count = len(mgr.history)
    mgr.history.clear()
    return _text({"cleared": count})


async def handle_export_history(mgr: DeviceManager, fmt: str) -> list[TextContent]:
    """Export command history."""
    return [TextContent(type="text", text=mgr.history.export(fmt))]


async def handle_compile_config(mgr: DeviceManager, intent: dict) -> list[TextContent]:
    """Preview generated configuration."""
    return [TextContent(type="text", text=mgr.preview(intent))]


async def handle_apply_config(
    mgr: DeviceManager,
    device_id: str,
    intent: dict,
    stop_on_error: bool
) -> list[TextContent]:
    """Compile and apply an intent."""
    parsed = mgr.parse(intent)
    config_text = mgr.compile(parsed)
    summary = await mgr.apply_config(device_id, parsed, stop_on_error=stop_on_error)
    return _text({
        "config": config_text,
        "applied": summary.failed == 0 and not summary.cancelled,
        **summary.to_dict(),
    })


# === RESOURCES ===

@server.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    return [
        Resource(
            uri=AnyUrl(HISTORY_URI),
            name="Command History",
            description="Executed commands, most recent first",
            mimeType="application/json",
        )
    ]


@server.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource."""
    if str(uri) == HISTORY_URI:
        return get_manager().history.export("json")
    return json.dumps({"error": f"Unknown resource: {uri}"})


def main():
    """Run the MCP server."""
    setup_logging()
    setup_audit_logging()

    async def run():
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options()
            )

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass
    finally:
        if manager:
            asyncio.run(manager.close())


if __name__ == "__main__":
    main()
