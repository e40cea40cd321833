"""Config compiler: renders configuration intents as EOS CLI text.

Every intent type has its own renderer with a fixed clause order.
Rendering is pure: the same intent always yields byte-identical text.
A clause whose field is empty is left out (interface descriptions fall
back to DEFAULT_DESCRIPTION instead).
"""
import logging
from typing import Callable

from ..command_engine.errors import InvalidConfiguration
from .schema import (
    AclAction,
    AclIntent,
    AdminState,
    ConfigurationIntent,
    InterfaceIntent,
    PortMode,
    RoutingIntent,
    SystemIntent,
    VlanIntent,
    VlanSetIntent,
    VxlanIntent,
)
from .validator import IntentValidator

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Configured via EOS Manager"
INDENT = "   "
VXLAN_INTERFACE = "Vxlan1"
ACL_SEQUENCE_STEP = 10


class ConfigCompiler:
    """Compile configuration intents into EOS configuration text."""

    def __init__(self):
        self.validator = IntentValidator()
        self._renderers: dict[type, Callable[..., list[str]]] = {
            InterfaceIntent: self._render_interface,
            VlanIntent: self._render_vlan,
            VlanSetIntent: self._render_vlan_set,
            VxlanIntent: self._render_vxlan,
            AclIntent: self._render_acl,
            RoutingIntent: self._render_routing,
            SystemIntent: self._render_system,
        }

    def compile(self, intent: ConfigurationIntent) -> str:
        """
        Render an intent as EOS configuration text.

        Args:
            intent: Any configuration intent

        Returns:
            Configuration text, one command per line, sub-mode commands
            indented by three spaces

        Raises:
            InvalidConfiguration: If the intent is malformed
        """
        renderer = self._renderers.get(type(intent))
        if renderer is None:
            raise InvalidConfiguration(f"Unsupported intent type: {type(intent).__name__}")

        self.validator.validate(intent)
        lines = renderer(intent)
        logger.debug(f"Compiled {type(intent).__name__} into {len(lines)} lines")
        return "\n".join(lines)

    def compile_commands(self, intent: ConfigurationIntent) -> list[str]:
        """Compile an intent into individual command lines (indentation removed)."""
        return [
            line.strip()
            for line in self.compile(intent).splitlines()
            if line.strip()
        ]

    # --- Layer 2 ---

    def _render_interface(self, intent: InterfaceIntent) -> list[str]:
        """interface header, description, mode, access vlan, admin state."""
        description = intent.description.strip() if intent.description else ""
        mode = PortMode(intent.port_mode)
        admin_state = AdminState(intent.admin_state) if intent.admin_state is not None else None
        lines = [
            f"interface {intent.interface_name.strip()}",
            f"{INDENT}description {description or DEFAULT_DESCRIPTION}",
            f"{INDENT}switchport mode {mode.value}",
        ]

        if mode == PortMode.ACCESS and intent.vlan_id is not None:
            lines.append(f"{INDENT}switchport access vlan {intent.vlan_id}")

        if admin_state == AdminState.UP:
            lines.append(f"{INDENT}no shutdown")
        elif admin_state == AdminState.DOWN:
            lines.append(f"{INDENT}shutdown")

        return lines

    def _render_vlan(self, vlan: VlanIntent) -> list[str]:
        lines = [f"vlan {vlan.vlan_id}"]
        if vlan.name and vlan.name.strip():
            lines.append(f"{INDENT}name {vlan.name.strip()}")
        return lines

    def _render_vlan_set(self, intent: VlanSetIntent) -> list[str]:
        """VLANs in ascending id order."""
        lines: list[str] = []
        for vlan in sorted(intent.vlans, key=lambda v: v.vlan_id):
            lines.extend(self._render_vlan(vlan))
        return lines

    def _render_vxlan(self, intent: VxlanIntent) -> list[str]:
        """Vxlan1 source interface, VNI binding, flood group, then the VLAN."""
        bound = intent.vni is not None and intent.vlan_id is not None

        lines = [
            f"interface {VXLAN_INTERFACE}",
            f"{INDENT}vxlan source-interface {intent.source_interface.strip()}",
        ]
        if bound:
            lines.append(f"{INDENT}vxlan vlan {intent.vlan_id} vni {intent.vni}")
        if intent.multicast_group:
            lines.append(f"{INDENT}vxlan multicast-group {intent.multicast_group}")
        if bound:
            lines.append(f"vlan {intent.vlan_id}")
            lines.append(f"{INDENT}name VXLAN_{intent.vni}")
        return lines

    # --- Security ---

    def _render_acl(self, intent: AclIntent) -> list[str]:
        """Rules keep their order; unnumbered rules get the next multiple of 10."""
        lines = [f"ip access-list {intent.name.strip()}"]
        last_sequence = 0
        for rule in intent.rules:
            if rule.sequence is not None:
                sequence = rule.sequence
            else:
                sequence = (last_sequence // ACL_SEQUENCE_STEP + 1) * ACL_SEQUENCE_STEP
            last_sequence = max(last_sequence, sequence)
            lines.append(
                f"{INDENT}{sequence} {AclAction(rule.action).value} {rule.protocol} "
                f"{rule.source} {rule.destination}"
            )
        return lines

    # --- Routing ---

    def _render_routing(self, intent: RoutingIntent) -> list[str]:
        """Static routes sorted by prefix then next hop, then BGP."""
        lines: list[str] = []
        for route in sorted(intent.static_routes, key=lambda r: (r.prefix, r.next_hop)):
            line = f"ip route {route.prefix} {route.next_hop}"
            if route.distance is not None:
                line += f" {route.distance}"
            lines.append(line)

        bgp = intent.bgp
        if bgp is not None:
            lines.append(f"router bgp {bgp.asn}")
            if bgp.router_id:
                lines.append(f"{INDENT}router-id {bgp.router_id}")
            for neighbor in sorted(bgp.neighbors, key=lambda n: n.address):
                lines.append(f"{INDENT}neighbor {neighbor.address} remote-as {neighbor.remote_as}")
        return lines

    # --- System ---

    def _render_system(self, intent: SystemIntent) -> list[str]:
        """Naming, name servers and NTP in preference order, then SNMP."""
        lines: list[str] = []
        if intent.hostname:
            lines.append(f"hostname {intent.hostname}")
        if intent.domain_name:
            lines.append(f"dns domain {intent.domain_name}")
        for server in intent.dns_servers:
            lines.append(f"ip name-server {server}")
        for server in intent.ntp_servers:
            lines.append(f"ntp server {server}")

        snmp = intent.snmp
        if snmp is not None:
            if snmp.community:
                lines.append(f"snmp-server community {snmp.community} ro")
            if snmp.contact:
                lines.append(f"snmp-server contact {snmp.contact}")
            if snmp.location:
                lines.append(f"snmp-server location {snmp.location}")
            if snmp.host:
                lines.append(f"snmp-server host {snmp.host} version 2c {snmp.community}")
        return lines
