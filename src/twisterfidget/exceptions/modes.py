"""Mode registry exceptions."""

from .base import TwisterFidgetError


class ModeError(TwisterFidgetError):
    """A mode could not be selected or run."""
    pass


class UnknownModeError(ModeError):
    """The requested mode name is not registered."""

    def __init__(self, name: str, known: list[str]):
        super().__init__(
            user_message=f"Unknown mode '{name}'",
            technical_message=f"Mode '{name}' is not registered (known: {', '.join(known)})",
            recoverable=True,
            recovery_hint="Run 'twisterfidget modes' to list available modes",
        )
        self.name = name
        self.known = known
