"""Device model and transports."""
from .base import Device, DeviceStatus, InterfaceCounts, Transport
from .simulated import SimulatedTransport
from .ssh import SSHTransport

__all__ = [
    "Device",
    "DeviceStatus",
    "InterfaceCounts",
    "Transport",
    "SimulatedTransport",
    "SSHTransport",
]

# Transport type registry
TRANSPORT_TYPES = {
    "simulated": SimulatedTransport,
    "ssh": SSHTransport,
}


def create_transport(transport_type: str) -> Transport:
    """Factory function to create transport instances."""
    transport_type = transport_type.lower()
    if transport_type not in TRANSPORT_TYPES:
        raise ValueError(f"Unknown transport type: {transport_type}")
    return TRANSPORT_TYPES[transport_type]()
