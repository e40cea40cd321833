"""Pre-flight validation for configuration intents.

Catches malformed intents before any text is generated. Device-specific
legality (e.g. whether a VLAN exists on the target) is not checked here.

Every rendered field ends up on one CLI line, so text is rejected when it
would break out of that line (line breaks), and single-word fields
(interface names, servers, protocols) are rejected when they contain
whitespace.
"""
import ipaddress
import re
from typing import Any, Optional

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

VLAN_MIN, VLAN_MAX = 1, 4094
VNI_MIN, VNI_MAX = 1, 16777215
ASN_MIN, ASN_MAX = 1, 4294967295

LINE_BREAK = re.compile(r"[\r\n]")
WHITESPACE = re.compile(r"\s")
HOSTNAME = re.compile(r"[A-Za-z0-9][A-Za-z0-9.\-_]*")
# Protocol name or IP protocol number (ip, tcp, udp, icmp, ospf, 47 ...)
ACL_PROTOCOL = re.compile(r"[A-Za-z0-9-]+")


def _values(enum_type) -> set[str]:
    return {member.value for member in enum_type}


class IntentValidator:
    """Validate configuration intents for logical errors."""

    def validate(self, intent: ConfigurationIntent) -> None:
        """
        Validate an intent.

        Raises:
            InvalidConfiguration: With every problem found, joined by '; '
        """
        errors: list[str] = []

        if isinstance(intent, InterfaceIntent):
            self._validate_interface(intent, errors)
        elif isinstance(intent, VlanIntent):
            self._validate_vlan(intent, errors)
        elif isinstance(intent, VlanSetIntent):
            self._validate_vlan_set(intent, errors)
        elif isinstance(intent, VxlanIntent):
            self._validate_vxlan(intent, errors)
        elif isinstance(intent, AclIntent):
            self._validate_acl(intent, errors)
        elif isinstance(intent, RoutingIntent):
            self._validate_routing(intent, errors)
        elif isinstance(intent, SystemIntent):
            self._validate_system(intent, errors)
        else:
            raise InvalidConfiguration(f"Unsupported intent type: {type(intent).__name__}")

        if errors:
            raise InvalidConfiguration("; ".join(errors))

    # --- Layer 2 ---

    def _validate_interface(self, intent: InterfaceIntent, errors: list[str]) -> None:
        self._check_required_token("Interface name", intent.interface_name, errors)
        self._check_text("description", intent.description, errors)
        if intent.port_mode not in _values(PortMode):
            errors.append(f"Invalid port mode: {intent.port_mode}. Must be 'access' or 'trunk'")
        if intent.admin_state is not None and intent.admin_state not in _values(AdminState):
            errors.append(f"Invalid admin state: {intent.admin_state}. Must be 'up' or 'down'")
        if intent.vlan_id is not None:
            self._check_vlan_id(intent.vlan_id, errors)

    def _validate_vlan(self, vlan: VlanIntent, errors: list[str]) -> None:
        self._check_vlan_id(vlan.vlan_id, errors)
        if vlan.name and self._check_text(f"VLAN {vlan.vlan_id} name", vlan.name, errors):
            if WHITESPACE.search(vlan.name.strip()):
                errors.append(f"VLAN {vlan.vlan_id} name cannot contain spaces: {vlan.name!r}")
        self._check_text(f"VLAN {vlan.vlan_id} description", vlan.description, errors)

    def _validate_vlan_set(self, intent: VlanSetIntent, errors: list[str]) -> None:
        seen: set[int] = set()
        for vlan in intent.vlans:
            self._validate_vlan(vlan, errors)
            if vlan.vlan_id in seen:
                errors.append(f"Duplicate VLAN ID {vlan.vlan_id}")
            seen.add(vlan.vlan_id)

    def _validate_vxlan(self, intent: VxlanIntent, errors: list[str]) -> None:
        self._check_required_token("VXLAN source interface", intent.source_interface, errors)
        if intent.vni is not None and not self._in_range(intent.vni, VNI_MIN, VNI_MAX):
            errors.append(f"Invalid VNI {intent.vni}: must be between {VNI_MIN} and {VNI_MAX}")
        if intent.vlan_id is not None:
            self._check_vlan_id(intent.vlan_id, errors)
        if intent.multicast_group:
            if not self._valid_ipv4(intent.multicast_group):
                errors.append(f"Invalid multicast group: {intent.multicast_group!r}")
            elif not ipaddress.IPv4Address(intent.multicast_group).is_multicast:
                errors.append(
                    f"{intent.multicast_group} is not a multicast address (224.0.0.0/4)"
                )

    # --- Security ---

    def _validate_acl(self, intent: AclIntent, errors: list[str]) -> None:
        if not self._is_token(intent.name):
            errors.append(f"Invalid ACL name: {intent.name!r}")

        sequences: set[int] = set()
        for rule in intent.rules:
            if rule.action not in _values(AclAction):
                errors.append(f"Invalid ACL action: {rule.action}. Must be 'permit' or 'deny'")
            if not isinstance(rule.protocol, str) or not ACL_PROTOCOL.fullmatch(rule.protocol):
                errors.append(f"Invalid ACL protocol: {rule.protocol!r}")
            for label, value in (("source", rule.source), ("destination", rule.destination)):
                if not self._valid_acl_address(value):
                    errors.append(f"Invalid ACL {label}: {value!r}")
            if rule.sequence is not None:
                if not self._in_range(rule.sequence, 1, 4294967295):
                    errors.append(f"Invalid ACL sequence number: {rule.sequence}")
                elif rule.sequence in sequences:
                    errors.append(f"Duplicate ACL sequence number: {rule.sequence}")
                sequences.add(rule.sequence)

    @classmethod
    def _valid_acl_address(cls, value: Any) -> bool:
        if not isinstance(value, str) or not value:
            return False
        if value == "any":
            return True
        if value.startswith("host "):
            return cls._valid_ipv4(value[5:])
        try:
            ipaddress.IPv4Network(value, strict=False)
        except ValueError:
            return False
        return True

    # --- Routing ---

    def _validate_routing(self, intent: RoutingIntent, errors: list[str]) -> None:
        for route in intent.static_routes:
            if not self._valid_ipv4_network(route.prefix):
                errors.append(f"Invalid route prefix: {route.prefix!r}")
            if not self._valid_ipv4(route.next_hop):
                errors.append(f"Invalid next hop for {route.prefix}: {route.next_hop!r}")
            if route.distance is not None and not self._in_range(route.distance, 1, 255):
                errors.append(f"Invalid administrative distance for {route.prefix}: {route.distance}")

        bgp = intent.bgp
        if bgp is None:
            return
        if not self._in_range(bgp.asn, ASN_MIN, ASN_MAX):
            errors.append(f"Invalid BGP AS number: {bgp.asn}")
        if bgp.router_id and not self._valid_ipv4(bgp.router_id):
            errors.append(f"Invalid BGP router-id: {bgp.router_id!r}")
        for neighbor in bgp.neighbors:
            if not self._valid_ipv4(neighbor.address):
                errors.append(f"Invalid BGP neighbor address: {neighbor.address!r}")
            if not self._in_range(neighbor.remote_as, ASN_MIN, ASN_MAX):
                errors.append(f"Invalid remote AS for {neighbor.address}: {neighbor.remote_as}")

    # --- System ---

    def _validate_system(self, intent: SystemIntent, errors: list[str]) -> None:
        if intent.hostname is not None and (
            not isinstance(intent.hostname, str) or not HOSTNAME.fullmatch(intent.hostname)
        ):
            errors.append(f"Invalid hostname: {intent.hostname!r}")
        if intent.domain_name is not None and not self._is_token(intent.domain_name):
            errors.append(f"Invalid domain name: {intent.domain_name!r}")
        for server in intent.dns_servers:
            if not self._valid_ipv4(server):
                errors.append(f"Invalid DNS server: {server!r}")
        for server in intent.ntp_servers:
            if not self._is_token(server):
                errors.append(f"Invalid NTP server: {server!r}")

        snmp = intent.snmp
        if snmp is None:
            return
        if snmp.community is not None and not self._is_token(snmp.community):
            errors.append("SNMP community must be a single word")
        self._check_text("SNMP contact", snmp.contact, errors)
        self._check_text("SNMP location", snmp.location, errors)
        if snmp.host is not None and not self._is_token(snmp.host):
            errors.append(f"Invalid SNMP host: {snmp.host!r}")
        if snmp.host and not snmp.community:
            errors.append("SNMP host requires a community string")

    # --- Helpers ---

    def _check_vlan_id(self, vlan_id: int, errors: list[str]) -> None:
        if not self._in_range(vlan_id, VLAN_MIN, VLAN_MAX):
            errors.append(f"Invalid VLAN ID {vlan_id}: must be between {VLAN_MIN} and {VLAN_MAX}")

    @staticmethod
    def _check_text(label: str, value: Any, errors: list[str]) -> bool:
        """Optional free text: must be a string on a single line."""
        if value is None or value == "":
            return True
        if not isinstance(value, str):
            errors.append(f"{label} must be text, got {type(value).__name__}")
            return False
        if LINE_BREAK.search(value):
            errors.append(f"{label} cannot span multiple lines")
            return False
        return True

    def _check_required_token(self, label: str, value: Any, errors: list[str]) -> None:
        if not isinstance(value, str) or not value.strip():
            errors.append(f"{label} is required")
        elif not self._is_token(value.strip()):
            errors.append(f"{label} cannot contain whitespace: {value!r}")

    @staticmethod
    def _is_token(value: Any) -> bool:
        """Non-empty string without whitespace or line breaks."""
        return isinstance(value, str) and bool(value) and not WHITESPACE.search(value)

    @staticmethod
    def _in_range(value: int, low: int, high: int) -> bool:
        return isinstance(value, int) and not isinstance(value, bool) and low <= value <= high

    @staticmethod
    def _valid_ipv4(value: Optional[str]) -> bool:
        if not isinstance(value, str):
            return False
        try:
            ipaddress.IPv4Address(value)
        except ValueError:
            return False
        return True

    @staticmethod
    def _valid_ipv4_network(value: Optional[str]) -> bool:
        if not isinstance(value, str):
            return False
        try:
            ipaddress.IPv4Network(value)
        except ValueError:
            return False
        return True
