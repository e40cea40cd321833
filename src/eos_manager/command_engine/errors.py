"""Exceptions raised by the command and config engines."""


class EngineError(Exception):
    """Base class for all engine errors."""
    pass


class InvalidRequest(EngineError):
    """Request rejected before dispatch (no device, unknown device, empty command)."""
    pass


class EmptyScript(InvalidRequest):
    """Script text contains no executable lines."""
    pass


class DeviceBusy(EngineError):
    """Another execution is already in flight for the device.

    When raised from a script run, ``summary`` holds the ScriptRunSummary
    of the commands executed before the device was found busy.
    """

    def __init__(self, device_id: str):
        super().__init__(f"Device {device_id} is busy executing another command")
        self.device_id = device_id
        self.summary = None


class TransportError(EngineError):
    """Command could not be delivered to the device."""
    pass


class TransportTimeout(TransportError):
    """Device did not answer within the command timeout."""
    pass


class TransportFailure(TransportError):
    """Connection, authentication or session failure."""
    pass


class InvalidConfiguration(EngineError):
    """Configuration intent is malformed and cannot be compiled."""
    pass
