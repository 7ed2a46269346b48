"""Blocking MPD client facade.

Wraps python-mpd2's MPDClient behind a Connection that owns exactly one
socket, validates arguments before any I/O, and returns frozen value
objects instead of raw dicts.

A Connection is not thread-safe: callers serialise access to it, or use
one Connection per thread.

Example:
    with connect("192.168.1.100", 6600, 5000) as conn:
        status = conn.get_status()
        if status.is_playing:
            track = conn.get_current_track()
            print(f"Playing: {track.title} by {track.artist}")
"""

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any, Self

from mpd import CommandError as MpdCommandError
from mpd import MPDClient, MPDError

from mpdctl.api.mpd.errors import CommandError, InvalidArgumentError, MpdConnectionError
from mpdctl.api.mpd.protocol import is_song_record, parse_stats, parse_status, parse_track
from mpdctl.api.mpd.query import TrackStream
from mpdctl.api.mpd.search import SearchConstraint
from mpdctl.api.mpd.types import (
    Command,
    CommandKind,
    DatabaseStats,
    StatusSnapshot,
    TrackMetadata,
)

logger = logging.getLogger(__name__)

DEFAULT_PORT = 6600
DEFAULT_TIMEOUT_MS = 30_000


def _require_non_negative_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidArgumentError(f"{name} must be non-negative, got {value}")
    return value


def _dispatch(client: MPDClient, command: Command) -> None:
    """Send one playback command through python-mpd2."""
    kind = command.kind
    if kind is CommandKind.STOP:
        client.stop()
    elif kind is CommandKind.PLAY:
        client.play()
    elif kind is CommandKind.TOGGLE_PAUSE:
        # "pause" without argument toggles
        client.pause()
    elif kind is CommandKind.NEXT:
        client.next()
    elif kind is CommandKind.PREVIOUS:
        client.previous()
    elif kind is CommandKind.SET_RANDOM:
        client.random(int(bool(command.argument)))
    elif kind is CommandKind.SET_CONSUME:
        client.consume(int(bool(command.argument)))
    elif kind is CommandKind.SET_REPEAT:
        client.repeat(int(bool(command.argument)))
    elif kind is CommandKind.SET_SINGLE:
        client.single(int(bool(command.argument)))
    elif kind is CommandKind.SET_VOLUME:
        client.setvol(command.argument)
    else:  # pragma: no cover
        raise InvalidArgumentError(f"unsupported command {kind!r}")


class Connection:
    """A single connection to an MPD daemon.

    The connection is opened once and released once. Any operation on a
    connection that is not open raises InvalidArgumentError.

    Attributes:
        host: MPD server hostname, IP or socket path.
        port: MPD server port.
        timeout_ms: Socket timeout in milliseconds.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        password: str = "",
    ) -> None:
        """Validate connection parameters. No I/O happens here.

        Args:
            host: MPD server hostname or IP.
            port: MPD server port, 0 for the default port.
            timeout_ms: Timeout in milliseconds, 0 for the default timeout.
            password: Optional password for authentication.

        Raises:
            InvalidArgumentError: If any argument is malformed.
        """
        if not isinstance(host, str) or not host:
            raise InvalidArgumentError("host must be a non-empty string")
        port = _require_non_negative_int("port", port)
        timeout_ms = _require_non_negative_int("timeout", timeout_ms)
        if not isinstance(password, str):
            raise InvalidArgumentError("password must be a string")

        self.host = host
        self.port = port or DEFAULT_PORT
        self.timeout_ms = timeout_ms or DEFAULT_TIMEOUT_MS
        self.password = password

        self._client: MPDClient | None = None
        self._released = False
        self._pending: TrackStream | None = None

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<Connection {self.host}:{self.port} {state}>"

    @property
    def is_open(self) -> bool:
        """Return True if the connection is open."""
        return self._client is not None

    @property
    def protocol_version(self) -> str:
        """Return MPD protocol version from the greeting."""
        if self._client is None:
            return ""
        return self._client.mpd_version or ""

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open(self) -> None:
        """Connect to the MPD server.

        Raises:
            InvalidArgumentError: If the connection was already opened.
            MpdConnectionError: If the connection or authentication fails.
        """
        if self._client is not None or self._released:
            raise InvalidArgumentError("connection was already opened")

        client = MPDClient()
        client.timeout = self.timeout_ms / 1000
        try:
            client.connect(self.host, self.port)
        except (MPDError, OSError) as e:
            raise MpdConnectionError(
                f"Failed to connect to {self.host}:{self.port}: {e}"
            ) from e

        if self.password:
            try:
                client.password(self.password)
            except (MPDError, OSError) as e:
                client.disconnect()
                raise MpdConnectionError(f"Authentication with {self.host} failed: {e}") from e

        self._client = client
        logger.info("Connected to MPD %s at %s:%d", client.mpd_version, self.host, self.port)

    def close(self) -> None:
        """Release the connection.

        Raises:
            InvalidArgumentError: If the connection is not open.
        """
        client = self._require_open()
        self._client = None
        self._released = True
        self._pending = None
        try:
            client.close()
        except (MPDError, OSError) as e:
            logger.debug("Expected error during MPD close: %s", e)
        finally:
            client.disconnect()
            logger.info("Disconnected from MPD at %s:%d", self.host, self.port)

    def __enter__(self) -> Self:
        """Context manager entry; opens the connection if needed."""
        if not self.is_open:
            self.open()
        return self

    def __exit__(self, *_: object) -> None:
        """Context manager exit; closes the connection if still open."""
        if self.is_open:
            self.close()

    # -------------------------------------------------------------------------
    # Request plumbing
    # -------------------------------------------------------------------------

    def _require_open(self) -> MPDClient:
        if self._client is None:
            raise InvalidArgumentError("connection is not open")
        return self._client

    def _finish_pending(self) -> None:
        """Buffer the rest of an unfinished song list so the next reply lines up."""
        pending = self._pending
        if pending is None or pending.finished:
            return
        logger.debug("Buffering unfinished %s results", pending.request)
        pending.drain()

    @contextmanager
    def _request(self, name: str) -> Iterator[MPDClient]:
        """Run one request, translating python-mpd2 errors."""
        client = self._require_open()
        self._finish_pending()
        logger.debug("MPD request: %s", name)
        try:
            yield client
        except MpdCommandError as e:
            logger.debug("MPD rejected %s: %s", name, e)
            raise CommandError(name) from e
        except (MPDError, OSError) as e:
            raise MpdConnectionError(f"{name} failed: {e}") from e

    def _stream(self, name: str, *args: str) -> TrackStream:
        """Start a song list request and hand back the lazy stream."""
        with self._request(name) as client:
            client.iterate = True
            try:
                records: Iterable[dict[str, Any]] = getattr(client, name)(*args)
            finally:
                client.iterate = False
        stream = TrackStream(records, request=name, on_finish=self._stream_finished)
        self._pending = stream
        return stream

    def _stream_finished(self, stream: TrackStream) -> None:
        if self._pending is stream:
            self._pending = None

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def run(self, command: Command) -> None:
        """Run a playback command.

        Args:
            command: The command to send.

        Raises:
            InvalidArgumentError: If the connection is not open.
            CommandError: If the daemon rejected the command.
        """
        if not isinstance(command, Command):
            raise InvalidArgumentError(f"expected a Command, got {command!r}")
        with self._request(command.name) as client:
            _dispatch(client, command)

    def stop(self) -> None:
        """Stop playback."""
        self.run(Command.simple(CommandKind.STOP))

    def play(self) -> None:
        """Start playback."""
        self.run(Command.simple(CommandKind.PLAY))

    def toggle_pause(self) -> None:
        """Pause if playing, resume if paused."""
        self.run(Command.simple(CommandKind.TOGGLE_PAUSE))

    def next(self) -> None:
        """Skip to next track."""
        self.run(Command.simple(CommandKind.NEXT))

    def previous(self) -> None:
        """Skip to previous track."""
        self.run(Command.simple(CommandKind.PREVIOUS))

    def set_random(self, enabled: bool) -> None:
        self.run(Command.set_random(enabled))

    def set_consume(self, enabled: bool) -> None:
        self.run(Command.set_consume(enabled))

    def set_repeat(self, enabled: bool) -> None:
        self.run(Command.set_repeat(enabled))

    def set_single(self, enabled: bool) -> None:
        self.run(Command.set_single(enabled))

    def set_volume(self, volume: int) -> None:
        """Set volume.

        Args:
            volume: Volume level (0-100). Out of range values are
                rejected and nothing is sent.
        """
        self.run(Command.set_volume(volume))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_status(self) -> StatusSnapshot:
        """Get current player status.

        Returns:
            StatusSnapshot with current state, volume, etc.
        """
        with self._request("status") as client:
            raw = client.status()
        return parse_status(raw)

    def get_current_track(self) -> TrackMetadata | None:
        """Get the song currently playing or paused.

        Returns:
            TrackMetadata, or None when playback is stopped.
        """
        if not self.get_status().has_current_song:
            return None
        with self._request("currentsong") as client:
            raw = client.currentsong()
        if not raw or not is_song_record(raw):
            return None
        return parse_track(raw)

    def get_queue(self) -> TrackStream:
        """Stream the play queue in queue order."""
        return self._stream("playlistinfo")

    def search(self, exact: bool, constraints: Iterable[tuple[str, str]] = ()) -> TrackStream:
        """Search the database.

        Args:
            exact: True for exact matches, False for substring matches.
            constraints: (tag, value) pairs; tag may be "any". Unknown
                tags are skipped.

        Returns:
            TrackStream over the matching songs.
        """
        return self.submit_search(SearchConstraint.from_pairs(exact, constraints))

    def submit_search(self, constraint: SearchConstraint) -> TrackStream:
        """Run a prepared search.

        An empty constraint lists the whole database.
        """
        if constraint.is_empty:
            logger.warning("Search without constraints on %s, listing the whole database", self.host)
            return self._stream("listallinfo")
        return self._stream("find" if constraint.exact else "search", *constraint.as_args())

    def get_stats(self) -> DatabaseStats:
        """Get database statistics."""
        with self._request("stats") as client:
            raw = client.stats()
        return parse_stats(raw)


def connect(
    host: str,
    port: int = DEFAULT_PORT,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    password: str = "",
) -> Connection:
    """Open a connection to MPD.

    Args:
        host: MPD server hostname or IP.
        port: MPD server port, 0 for the default.
        timeout_ms: Timeout in milliseconds, 0 for the default.
        password: Optional password.

    Returns:
        An open Connection. Release it with close() or a with block.

    Raises:
        InvalidArgumentError: If the arguments are malformed.
        MpdConnectionError: If the connection fails.
    """
    conn = Connection(host, port, timeout_ms, password)
    conn.open()
    return conn
