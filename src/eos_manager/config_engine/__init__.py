"""Config Engine - compile configuration intents into EOS CLI text.

Usage:
    from eos_manager.config_engine import ConfigCompiler, InterfaceIntent

    compiler = ConfigCompiler()
    text = compiler.compile(InterfaceIntent(
        interface_name="Ethernet1",
        port_mode="access",
        vlan_id=20,
    ))

Compilation is pure: nothing is sent to a device. To apply the text, feed
compile_commands() to the ScriptRunner (DeviceManager.apply_config does this).
"""
from .schema import (
    PortMode,
    AdminState,
    AclAction,
    InterfaceIntent,
    VlanIntent,
    VlanSetIntent,
    VxlanIntent,
    AclRule,
    AclIntent,
    StaticRoute,
    BgpNeighbor,
    BgpConfig,
    RoutingIntent,
    SnmpConfig,
    SystemIntent,
    ConfigurationIntent,
)
from .parser import IntentParser, ParseError
from .validator import IntentValidator
from .generator import ConfigCompiler, DEFAULT_DESCRIPTION

__all__ = [
    # Compiler
    "ConfigCompiler",
    "DEFAULT_DESCRIPTION",
    # Schema classes
    "PortMode",
    "AdminState",
    "AclAction",
    "InterfaceIntent",
    "VlanIntent",
    "VlanSetIntent",
    "VxlanIntent",
    "AclRule",
    "AclIntent",
    "StaticRoute",
    "BgpNeighbor",
    "BgpConfig",
    "RoutingIntent",
    "SnmpConfig",
    "SystemIntent",
    "ConfigurationIntent",
    # Parser
    "IntentParser",
    "ParseError",
    # Components (for advanced use)
    "IntentValidator",
]
