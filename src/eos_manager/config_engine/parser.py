"""Parser for configuration intents.

Converts dict/YAML input into intent dataclasses. Keys may be given in
snake_case or camelCase (``interfaceName``, ``vlanId``, ``portMode`` ...).

Example:

```yaml
type: interface
interface_name: Ethernet1
port_mode: access
vlan_id: 20
admin_state: up
```
"""
import re
from typing import Any, Optional

from ..command_engine.errors import InvalidConfiguration
from .schema import (
    AclIntent,
    AclRule,
    BgpConfig,
    BgpNeighbor,
    ConfigurationIntent,
    InterfaceIntent,
    RoutingIntent,
    SnmpConfig,
    StaticRoute,
    SystemIntent,
    VlanIntent,
    VlanSetIntent,
    VxlanIntent,
)


class ParseError(InvalidConfiguration):
    """Error parsing a configuration intent."""
    pass


_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


# Original UI field names that differ from the dataclass fields
KEY_ALIASES = {
    "interface": "interface_name",
    "vlan": "vlan_id",
    "mode": "port_mode",
    "state": "admin_state",
    "id": "vlan_id",
}


class IntentParser:
    """Parse configuration intents from dict/YAML format."""

    def parse(self, config: dict[str, Any]) -> ConfigurationIntent:
        """
        Parse a configuration dict into an intent.

        Args:
            config: Dict with a ``type`` key (interface, vlan, vlans, vxlan,
                acl, routing, system) and the intent fields

        Returns:
            The matching intent dataclass

        Raises:
            ParseError: If the dict cannot be turned into an intent
        """
        if not isinstance(config, dict):
            raise ParseError(f"Intent must be a mapping, got {type(config).__name__}")

        intent_type = config.get("type")
        if not intent_type:
            raise ParseError("Missing required field: type")

        data = self._normalize({k: v for k, v in config.items() if k != "type"})
        parsers = {
            "interface": self._parse_interface,
            "vlan": self._parse_vlan,
            "vlans": self._parse_vlan_set,
            "vxlan": self._parse_vxlan,
            "acl": self._parse_acl,
            "routing": self._parse_routing,
            "system": self._parse_system,
        }
        parser = parsers.get(str(intent_type).lower())
        if parser is None:
            raise ParseError(
                f"Invalid intent type: {intent_type}. "
                f"Must be one of: {', '.join(parsers)}"
            )
        return parser(data)

    def _normalize(self, data: dict[str, Any]) -> dict[str, Any]:
        """snake_case keys, resolve aliases, treat empty strings as absent."""
        if not isinstance(data, dict):
            raise ParseError(f"Expected a mapping, got {data!r}")
        normalized = {}
        for key, value in data.items():
            key = _snake(str(key))
            key = KEY_ALIASES.get(key, key)
            if isinstance(value, str) and not value.strip():
                value = None
            normalized[key] = value
        return normalized

    # --- Layer 2 ---

    def _parse_interface(self, data: dict[str, Any]) -> InterfaceIntent:
        name = data.get("interface_name")
        if not name:
            raise ParseError("Missing required field: interface_name")
        return InterfaceIntent(
            interface_name=str(name),
            description=self._optional_str(data, "description") or "",
            vlan_id=self._optional_int(data, "vlan_id"),
            port_mode=str(data.get("port_mode") or "access").lower(),
            admin_state=str(data.get("admin_state") or "up").lower(),
        )

    def _parse_vlan(self, data: dict[str, Any]) -> VlanIntent:
        vlan_id = self._optional_int(data, "vlan_id")
        if vlan_id is None:
            raise ParseError("Missing required field: vlan_id")
        return VlanIntent(
            vlan_id=vlan_id,
            name=self._optional_str(data, "name") or "",
            description=self._optional_str(data, "description") or "",
        )

    def _parse_vlan_set(self, data: dict[str, Any]) -> VlanSetIntent:
        """Accepts a list of VLAN dicts or a mapping of VLAN ID -> VLAN dict."""
        entries = data.get("vlans") or []
        if isinstance(entries, dict):
            entries = [
                {"vlan_id": vlan_id, **(vlan_config or {})}
                for vlan_id, vlan_config in entries.items()
            ]
        if not isinstance(entries, list):
            raise ParseError("vlans must be a list or a mapping")
        return VlanSetIntent(
            vlans=[self._parse_vlan(self._normalize(entry)) for entry in entries]
        )

    def _parse_vxlan(self, data: dict[str, Any]) -> VxlanIntent:
        return VxlanIntent(
            vni=self._optional_int(data, "vni"),
            vlan_id=self._optional_int(data, "vlan_id"),
            multicast_group=self._optional_str(data, "multicast_group"),
            source_interface=self._optional_str(data, "source_interface") or "Loopback1",
        )

    # --- Security ---

    def _parse_acl(self, data: dict[str, Any]) -> AclIntent:
        name = data.get("name") or data.get("acl_name")
        if not name:
            raise ParseError("Missing required field: name")

        rules = []
        for entry in data.get("rules") or []:
            rule = self._normalize(entry)
            if not rule.get("action") or not rule.get("source"):
                raise ParseError(f"ACL rule needs action and source: {entry}")
            rules.append(AclRule(
                action=str(rule["action"]).lower(),
                source=str(rule["source"]),
                destination=str(rule.get("destination") or "any"),
                protocol=str(rule.get("protocol") or "ip"),
                sequence=self._optional_int(rule, "sequence"),
            ))
        return AclIntent(name=str(name), rules=rules)

    # --- Routing ---

    def _parse_routing(self, data: dict[str, Any]) -> RoutingIntent:
        routes = []
        for entry in data.get("static_routes") or []:
            route = self._normalize(entry)
            prefix = route.get("prefix") or route.get("destination")
            if not prefix or not route.get("next_hop"):
                raise ParseError(f"Static route needs prefix and next_hop: {entry}")
            routes.append(StaticRoute(
                prefix=str(prefix),
                next_hop=str(route["next_hop"]),
                distance=self._optional_int(route, "distance"),
            ))

        bgp = None
        if data.get("bgp"):
            bgp_data = self._normalize(data["bgp"])
            asn = self._optional_int(bgp_data, "asn")
            if asn is None:
                raise ParseError("BGP config needs asn")
            neighbors = []
            for entry in bgp_data.get("neighbors") or []:
                neighbor = self._normalize(entry)
                address = neighbor.get("address") or neighbor.get("neighbor_ip")
                remote_as = self._optional_int(neighbor, "remote_as")
                if not address or remote_as is None:
                    raise ParseError(f"BGP neighbor needs address and remote_as: {entry}")
                neighbors.append(BgpNeighbor(address=str(address), remote_as=remote_as))
            bgp = BgpConfig(
                asn=asn,
                router_id=self._optional_str(bgp_data, "router_id"),
                neighbors=neighbors,
            )

        return RoutingIntent(static_routes=routes, bgp=bgp)

    # --- System ---

    def _parse_system(self, data: dict[str, Any]) -> SystemIntent:
        snmp = None
        if data.get("snmp"):
            snmp_data = self._normalize(data["snmp"])
            snmp = SnmpConfig(
                community=self._optional_str(snmp_data, "community"),
                contact=self._optional_str(snmp_data, "contact"),
                location=self._optional_str(snmp_data, "location"),
                host=self._optional_str(snmp_data, "host") or self._optional_str(snmp_data, "server"),
            )
        return SystemIntent(
            hostname=self._optional_str(data, "hostname"),
            domain_name=self._optional_str(data, "domain_name"),
            dns_servers=self._string_list(data, "dns_servers", "dns_server"),
            ntp_servers=self._string_list(data, "ntp_servers", "ntp_server"),
            snmp=snmp,
        )

    # --- Helpers ---

    @staticmethod
    def _optional_int(data: dict[str, Any], key: str) -> Optional[int]:
        value = data.get(key)
        if value is None:
            return None
        if isinstance(value, bool):
            raise ParseError(f"Invalid {key}: {value}")
        try:
            return int(value)
        except (ValueError, TypeError):
            raise ParseError(f"Invalid {key}: {value}")

    @staticmethod
    def _optional_str(data: dict[str, Any], key: str) -> Optional[str]:
        """Text field; YAML scalars such as ``name: 100`` arrive as numbers."""
        value = data.get(key)
        if value is None:
            return None
        if isinstance(value, (dict, list)):
            raise ParseError(f"Invalid {key}: expected text, got {type(value).__name__}")
        return str(value)

    @staticmethod
    def _string_list(data: dict[str, Any], key: str, single_key: str) -> list[str]:
        """List field that may also be given as a single value under single_key."""
        value = data.get(key)
        if value is None:
            value = data.get(single_key)
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return [str(v) for v in value]
