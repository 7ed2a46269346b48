"""Exceptions raised by the MPD client facade.

The facade raises; only the bindings layer turns these into values.
"""


class MpdError(Exception):
    """Base class for every error raised by the MPD facade."""


class InvalidArgumentError(MpdError, ValueError):
    """Caller input was malformed or out of range.

    Always raised before any request reaches the daemon.
    """


class MpdConnectionError(MpdError):
    """Failed to connect to MPD, or the transport broke underneath us.

    Attributes:
        message: Message text reported by the daemon or the transport.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class CommandError(MpdError):
    """A daemon request reported failure.

    The message is generic; the daemon's reason is not surfaced at this
    layer.

    Attributes:
        command: Name of the command that failed.
    """

    GENERIC_MESSAGE = "error running mpd command"

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(self.GENERIC_MESSAGE)
