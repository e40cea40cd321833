"""Schema definitions for the Config Engine.

Each configuration intent is a plain dataclass. Intents are built by the
caller (or IntentParser) and never mutated by the compiler.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class PortMode(str, Enum):
    """Switchport mode of an interface."""
    ACCESS = "access"
    TRUNK = "trunk"


class AdminState(str, Enum):
    """Administrative state of an interface."""
    UP = "up"
    DOWN = "down"


class AclAction(str, Enum):
    """Action of an ACL rule."""
    PERMIT = "permit"
    DENY = "deny"


# --- Layer 2 ---

@dataclass
class InterfaceIntent:
    """Desired settings for a single switch interface."""
    interface_name: str
    description: str = ""
    vlan_id: Optional[int] = None
    port_mode: PortMode = PortMode.ACCESS
    admin_state: Optional[AdminState] = AdminState.UP


@dataclass
class VlanIntent:
    """A single VLAN definition."""
    vlan_id: int
    name: str = ""
    description: str = ""


@dataclass
class VlanSetIntent:
    """A set of VLANs, unique by vlan_id."""
    vlans: list[VlanIntent] = field(default_factory=list)


@dataclass
class VxlanIntent:
    """VXLAN overlay binding on interface Vxlan1."""
    vni: Optional[int] = None
    vlan_id: Optional[int] = None
    multicast_group: Optional[str] = None
    source_interface: str = "Loopback1"


# --- Security ---

@dataclass
class AclRule:
    """One entry of an IP access list."""
    action: AclAction
    source: str
    destination: str = "any"
    protocol: str = "ip"
    sequence: Optional[int] = None


@dataclass
class AclIntent:
    """A named IP access list."""
    name: str
    rules: list[AclRule] = field(default_factory=list)


# --- Routing ---

@dataclass
class StaticRoute:
    """A static route."""
    prefix: str
    next_hop: str
    distance: Optional[int] = None


@dataclass
class BgpNeighbor:
    """A BGP peer."""
    address: str
    remote_as: int


@dataclass
class BgpConfig:
    """BGP process settings."""
    asn: int
    router_id: Optional[str] = None
    neighbors: list[BgpNeighbor] = field(default_factory=list)


@dataclass
class RoutingIntent:
    """Static routes and BGP."""
    static_routes: list[StaticRoute] = field(default_factory=list)
    bgp: Optional[BgpConfig] = None


# --- System ---

@dataclass
class SnmpConfig:
    """SNMP agent settings."""
    community: Optional[str] = None
    contact: Optional[str] = None
    location: Optional[str] = None
    host: Optional[str] = None


@dataclass
class SystemIntent:
    """System-wide settings (naming, DNS, NTP, SNMP)."""
    hostname: Optional[str] = None
    domain_name: Optional[str] = None
    dns_servers: list[str] = field(default_factory=list)
    ntp_servers: list[str] = field(default_factory=list)
    snmp: Optional[SnmpConfig] = None


ConfigurationIntent = Union[
    InterfaceIntent,
    VlanIntent,
    VlanSetIntent,
    VxlanIntent,
    AclIntent,
    RoutingIntent,
    SystemIntent,
]
