"""Script-facing function table.

Embedding environments call these functions by name. Each takes a
connection handle first (except ``connect``), never raises a facade
error, and answers with an ``Ok`` or ``Err`` value. Tables are plain
dicts keyed the way scripts expect them.

Example:
    mpd = MpdBindings()
    functions = mpd.functions()
    result = functions["connect"]("localhost", 6600, 5000)
    if result.ok:
        handle = result.value
        print(functions["state"](handle).value["state"])
        functions["free_connection"](handle)
"""

import functools
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

from mpdctl.api.mpd import (
    CommandError,
    DatabaseStats,
    InvalidArgumentError,
    MpdConnectionError,
    PlaybackState,
    StatusSnapshot,
    TrackMetadata,
    TrackStream,
    connect,
)
from mpdctl.core.handles import Handle, HandleTable

if TYPE_CHECKING:
    from mpdctl.core.config import ConfigManager

logger = logging.getLogger(__name__)

_TAG_FIELDS: tuple[str, ...] = (
    "title",
    "artist",
    "album_artist",
    "album",
    "track",
    "name",
    "genre",
    "date",
    "composer",
    "performer",
    "comment",
    "disc",
)


class ErrorKind(StrEnum):
    """Discriminator for Err results."""

    INVALID_ARGUMENT = "invalid_argument"
    CONNECTION_ERROR = "connection_error"
    COMMAND_ERROR = "command_error"


@dataclass(frozen=True, slots=True)
class Ok:
    """Successful call.

    Attributes:
        value: Returned value or table (None for commands).
        truncated: For song lists, True if the list was cut short.
    """

    ok: ClassVar[bool] = True

    value: Any = None
    truncated: bool = False


@dataclass(frozen=True, slots=True)
class Err:
    """Failed call.

    Attributes:
        kind: Which kind of failure.
        message: Human-readable message.
    """

    ok: ClassVar[bool] = False

    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


Result = Ok | Err


def _syntax(name: str, signature: inspect.Signature) -> str:
    """Render a function's script-side argument list, e.g. "random(handle, enabled)"."""
    params = []
    for param in list(signature.parameters.values())[1:]:
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            params.append(f"{param.name}...")
        else:
            params.append(param.name)
    return f"{name}({', '.join(params)})"


def _boundary(func: Callable[..., Result]) -> Callable[..., Result]:
    """Turn facade exceptions and malformed calls into Err values."""
    signature = inspect.signature(func)
    syntax = _syntax(func.__name__, signature)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Result:
        try:
            signature.bind(*args, **kwargs)
        except TypeError:
            return Err(ErrorKind.INVALID_ARGUMENT, f"invalid arguments. syntax: {syntax}")
        try:
            return func(*args, **kwargs)
        except InvalidArgumentError as e:
            return Err(ErrorKind.INVALID_ARGUMENT, f"invalid arguments: {e}")
        except MpdConnectionError as e:
            return Err(ErrorKind.CONNECTION_ERROR, f"mpd connection failed: {e.message}")
        except CommandError as e:
            return Err(ErrorKind.COMMAND_ERROR, str(e))

    return wrapper


def status_table(status: StatusSnapshot) -> dict[str, Any]:
    """Convert a StatusSnapshot to a script table.

    An unknown state yields a table holding only "state".
    """
    if status.state is PlaybackState.UNKNOWN:
        return {"state": status.state.value}
    return {
        "state": status.state.value,
        "volume": status.volume,
        "random": status.random,
        "repeat": status.repeat,
        "single": status.single,
        "consume": status.consume,
        "queue_length": status.queue_length,
        "queue_version": status.queue_version,
        "crossfade": status.crossfade,
        "mixrampdb": status.mixramp_db,
        "mixrampdelay": status.mixramp_delay,
        "song_pos": status.song_pos,
        "song_id": status.song_id,
        "next_song_pos": status.next_song_pos,
        "next_song_id": status.next_song_id,
        "elapsed_time": status.elapsed_time,
        "elapsed_ms": status.elapsed_ms,
        "total_time": status.total_time,
        "kbit_rate": status.kbit_rate,
        "update_id": status.update_id,
    }


def song_table(track: TrackMetadata) -> dict[str, Any]:
    """Convert a TrackMetadata to a script table; absent tags are left out."""
    table: dict[str, Any] = {}
    for field_name in _TAG_FIELDS:
        value = getattr(track, field_name)
        if value is not None:
            table[field_name] = value
    table.update(
        {
            "uri": track.uri,
            "duration": track.duration,
            "start": track.start,
            "end": track.end,
            "last_modified": track.last_modified,
            "pos": track.pos,
            "id": track.id,
        }
    )
    return table


def stats_table(stats: DatabaseStats) -> dict[str, Any]:
    """Convert DatabaseStats to a script table."""
    return {
        "artists": stats.artists,
        "albums": stats.albums,
        "songs": stats.songs,
        "uptime": stats.uptime,
        "play_time": stats.play_time,
        "db_play_time": stats.db_play_time,
        "db_update_time": stats.db_update_time,
        "db_update": stats.db_update,
    }


def _song_list(stream: TrackStream) -> Ok:
    songs = [song_table(track) for track in stream]
    return Ok(songs, truncated=stream.truncated)


class MpdBindings:
    """The function table exposed to an embedding script environment.

    Attributes:
        handles: The HandleTable owning every connection opened through
            these bindings.
    """

    NAMES: ClassVar[tuple[str, ...]] = (
        "connect",
        "consume",
        "free_connection",
        "next",
        "now_playing",
        "play",
        "playlist",
        "prev",
        "random",
        "repeat",
        "search",
        "set_volume",
        "single",
        "state",
        "stats",
        "stop",
        "toggle",
    )

    def __init__(
        self,
        handles: HandleTable | None = None,
        config: "ConfigManager | None" = None,
    ) -> None:
        """Initialize the bindings.

        Args:
            handles: Handle table to use (a new one by default).
            config: Optional saved settings supplying connect() defaults.
        """
        self.handles = handles if handles is not None else HandleTable()
        self._config = config

    def functions(self) -> dict[str, Callable[..., Result]]:
        """Return the flat name -> function table."""
        return {name: getattr(self, name) for name in self.NAMES}

    # -- Connection -----------------------------------------------------------

    @_boundary
    def connect(
        self,
        host: str | None = None,
        port: int | None = None,
        timeout: int | None = None,
    ) -> Result:
        """Open a connection; missing arguments come from saved settings."""
        password = ""
        if self._config is not None:
            saved = self._config.get_connection_settings()
            host = saved.host if host is None else host
            port = saved.port if port is None else port
            timeout = saved.timeout_ms if timeout is None else timeout
            password = saved.password
        if host is None or port is None or timeout is None:
            raise InvalidArgumentError("syntax: host, port, timeout")
        conn = connect(host, port, timeout, password)
        return Ok(self.handles.register(conn))

    @_boundary
    def free_connection(self, handle: Handle) -> Result:
        """Release a connection. The handle is dead afterwards."""
        self.handles.release(handle)
        return Ok()

    # -- Commands -------------------------------------------------------------

    @_boundary
    def play(self, handle: Handle) -> Result:
        self.handles.resolve(handle).play()
        return Ok()

    @_boundary
    def stop(self, handle: Handle) -> Result:
        self.handles.resolve(handle).stop()
        return Ok()

    @_boundary
    def toggle(self, handle: Handle) -> Result:
        self.handles.resolve(handle).toggle_pause()
        return Ok()

    @_boundary
    def next(self, handle: Handle) -> Result:
        self.handles.resolve(handle).next()
        return Ok()

    @_boundary
    def prev(self, handle: Handle) -> Result:
        self.handles.resolve(handle).previous()
        return Ok()

    @_boundary
    def random(self, handle: Handle, enabled: bool) -> Result:
        self.handles.resolve(handle).set_random(enabled)
        return Ok()

    @_boundary
    def repeat(self, handle: Handle, enabled: bool) -> Result:
        self.handles.resolve(handle).set_repeat(enabled)
        return Ok()

    @_boundary
    def single(self, handle: Handle, enabled: bool) -> Result:
        self.handles.resolve(handle).set_single(enabled)
        return Ok()

    @_boundary
    def consume(self, handle: Handle, enabled: bool) -> Result:
        self.handles.resolve(handle).set_consume(enabled)
        return Ok()

    @_boundary
    def set_volume(self, handle: Handle, volume: int) -> Result:
        self.handles.resolve(handle).set_volume(volume)
        return Ok()

    # -- Queries --------------------------------------------------------------

    @_boundary
    def state(self, handle: Handle) -> Result:
        return Ok(status_table(self.handles.resolve(handle).get_status()))

    @_boundary
    def now_playing(self, handle: Handle) -> Result:
        """Return the current song table, or Ok(None) when stopped."""
        track = self.handles.resolve(handle).get_current_track()
        return Ok(song_table(track) if track is not None else None)

    @_boundary
    def playlist(self, handle: Handle) -> Result:
        return _song_list(self.handles.resolve(handle).get_queue())

    @_boundary
    def search(self, handle: Handle, exact: bool, *terms: str) -> Result:
        """Search with flat tag/value arguments: tag1, value1, tag2, value2, ..."""
        conn = self.handles.resolve(handle)
        if len(terms) % 2:
            logger.debug("Ignoring unpaired search argument %r", terms[-1])
        pairs = list(zip(terms[0::2], terms[1::2]))
        return _song_list(conn.search(exact, pairs))

    @_boundary
    def stats(self, handle: Handle) -> Result:
        return Ok(stats_table(self.handles.resolve(handle).get_stats()))
