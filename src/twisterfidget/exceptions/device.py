"""Hardware-related exceptions."""

from .base import TwisterFidgetError


class DeviceError(TwisterFidgetError):
    """The controller could not be reached or misbehaved."""
    pass


class DeviceNotFoundError(DeviceError):
    """No MIDI port matches the configured device name."""

    def __init__(self, device_name: str, available_ports: list[str]):
        ports = ", ".join(available_ports) if available_ports else "none"
        super().__init__(
            user_message=f"No MIDI device matching '{device_name}' was found",
            technical_message=f"No port contains '{device_name}' (available: {ports})",
            recoverable=True,
            recovery_hint=(
                "Plug in the controller, or pass --device with part of its port name.\n"
                "Run 'twisterfidget midi list' to see available ports"
            ),
        )
        self.device_name = device_name
        self.available_ports = available_ports
