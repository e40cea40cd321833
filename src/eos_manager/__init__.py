"""EOS Manager - command orchestration and configuration compilation for Arista EOS switches."""
from .manager import DeviceManager

__version__ = "0.1.0"

__all__ = ["DeviceManager", "__version__"]
