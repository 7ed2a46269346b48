"""Opaque handles for connections handed to script code.

Script code never sees a Connection object. It gets a Handle whose
token is random, so a handle cannot be forged, and a released handle
can never reach a connection again.
"""

import logging
import secrets
from dataclasses import dataclass

from mpdctl.api.mpd import Connection, InvalidArgumentError

logger = logging.getLogger(__name__)

_TOKEN_BYTES = 16


@dataclass(frozen=True, slots=True)
class Handle:
    """Opaque reference to a connection in a HandleTable."""

    token: str

    def __repr__(self) -> str:
        return f"<Handle {self.token[:8]}>"


class HandleTable:
    """Owns every connection handed out to script code.

    Example:
        table = HandleTable()
        handle = table.register(connect("localhost"))
        table.resolve(handle).play()
        table.release(handle)
    """

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, handle: object) -> bool:
        return isinstance(handle, Handle) and handle.token in self._connections

    def register(self, conn: Connection) -> Handle:
        """Take ownership of an open connection.

        Args:
            conn: The connection to own.

        Returns:
            A new Handle for it.
        """
        if not conn.is_open:
            raise InvalidArgumentError("only open connections can be registered")
        token = secrets.token_hex(_TOKEN_BYTES)
        self._connections[token] = conn
        logger.debug("Registered handle %s for %r", token[:8], conn)
        return Handle(token)

    def resolve(self, handle: Handle) -> Connection:
        """Return the connection behind a handle.

        Raises:
            InvalidArgumentError: If the handle is not a live Handle.
        """
        if not isinstance(handle, Handle):
            raise InvalidArgumentError(f"expected a connection handle, got {handle!r}")
        conn = self._connections.get(handle.token)
        if conn is None:
            raise InvalidArgumentError(f"{handle!r} is not a valid connection")
        return conn

    def release(self, handle: Handle) -> None:
        """Close the connection behind a handle and forget the handle.

        Raises:
            InvalidArgumentError: If the handle is not live (e.g. released twice).
        """
        conn = self.resolve(handle)
        del self._connections[handle.token]
        conn.close()

    def close_all(self) -> None:
        """Release every connection still held."""
        connections = list(self._connections.values())
        self._connections.clear()
        for conn in connections:
            if conn.is_open:
                conn.close()
