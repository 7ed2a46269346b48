"""MPD data types.

This module defines frozen dataclasses for the values the facade hands
back to callers. None of them keeps a reference to the connection that
produced it.
"""

import time
from dataclasses import dataclass
from enum import Enum, StrEnum

from mpdctl.api.mpd.errors import InvalidArgumentError

VOLUME_MIN = 0
VOLUME_MAX = 100


class PlaybackState(StrEnum):
    """Player state as reported by MPD."""

    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    """MPD player status at one point in time.

    When ``state`` is UNKNOWN no other field is mapped and every field
    keeps its default.

    Attributes:
        state: Player state.
        volume: Volume level (0-100), or -1 if the mixer is unavailable.
        random: Random mode enabled.
        repeat: Repeat mode enabled.
        single: Single mode enabled (including "oneshot").
        consume: Consume mode enabled.
        queue_length: Number of entries in the play queue.
        queue_version: Queue version, bumped on every queue change.
        crossfade: Crossfade in seconds.
        mixramp_db: MixRamp threshold in dB.
        mixramp_delay: MixRamp delay in seconds.
        song_pos: Queue position of the current song, or -1.
        song_id: Queue id of the current song, or -1.
        next_song_pos: Queue position of the next song, or -1.
        next_song_id: Queue id of the next song, or -1.
        elapsed_time: Elapsed time in whole seconds.
        elapsed_ms: Elapsed time in milliseconds.
        total_time: Duration of the current song in whole seconds.
        kbit_rate: Instantaneous bitrate in kbps.
        update_id: Id of the running database update job, or 0.
        audio_format: Audio format string (e.g. "44100:16:2").
        error: Error message reported by the player, if any.
    """

    state: PlaybackState = PlaybackState.UNKNOWN
    volume: int = -1
    random: bool = False
    repeat: bool = False
    single: bool = False
    consume: bool = False
    queue_length: int = 0
    queue_version: int = 0
    crossfade: int = 0
    mixramp_db: float = 0.0
    mixramp_delay: float = 0.0
    song_pos: int = -1
    song_id: int = -1
    next_song_pos: int = -1
    next_song_id: int = -1
    elapsed_time: int = 0
    elapsed_ms: int = 0
    total_time: int = 0
    kbit_rate: int = 0
    update_id: int = 0
    audio_format: str = ""
    error: str = ""

    @property
    def is_playing(self) -> bool:
        """Return True if currently playing."""
        return self.state is PlaybackState.PLAYING

    @property
    def is_paused(self) -> bool:
        """Return True if paused."""
        return self.state is PlaybackState.PAUSED

    @property
    def is_stopped(self) -> bool:
        """Return True if stopped."""
        return self.state is PlaybackState.STOPPED

    @property
    def has_current_song(self) -> bool:
        """Return True if a song is loaded (playing or paused)."""
        return self.state in (PlaybackState.PLAYING, PlaybackState.PAUSED)

    @property
    def progress(self) -> float:
        """Return playback progress as a fraction (0.0 to 1.0)."""
        if self.total_time <= 0:
            return 0.0
        return min(1.0, self.elapsed_ms / (self.total_time * 1000))


@dataclass(frozen=True, slots=True)
class TrackMetadata:
    """One song record from MPD.

    Tag fields are None when the song does not carry the tag.

    Attributes:
        uri: Path of the song relative to MPD's music directory, or a URL.
        title: Title tag.
        artist: Artist tag.
        album_artist: Album artist tag.
        album: Album tag.
        track: Track number (e.g. "3" or "3/12").
        name: Name tag (usually set for streams).
        genre: Genre tag.
        date: Release date.
        composer: Composer tag.
        performer: Performer tag.
        comment: Comment tag.
        disc: Disc number.
        duration: Duration in whole seconds, 0 if unknown.
        start: Start offset of the played range in whole seconds.
        end: End offset of the played range in whole seconds, 0 for "to the end".
        last_modified: Modification time as epoch seconds, 0 if unknown.
        pos: Position in the queue, or -1 if not queued.
        id: Queue id, or -1 if not queued.
    """

    uri: str
    title: str | None = None
    artist: str | None = None
    album_artist: str | None = None
    album: str | None = None
    track: str | None = None
    name: str | None = None
    genre: str | None = None
    date: str | None = None
    composer: str | None = None
    performer: str | None = None
    comment: str | None = None
    disc: str | None = None
    duration: int = 0
    start: int = 0
    end: int = 0
    last_modified: int = 0
    pos: int = -1
    id: int = -1

    @property
    def has_metadata(self) -> bool:
        """Return True if track has title or artist metadata."""
        return bool(self.title or self.artist)

    @property
    def display_title(self) -> str:
        """Return title for display, with filename fallback."""
        if self.title:
            return self.title
        name = self.uri.rsplit("/", 1)[-1]
        if "." in name:
            name = name.rsplit(".", 1)[0]
        return name

    @property
    def display_artist(self) -> str:
        """Return artist for display, falling back to album_artist if empty."""
        return self.artist or self.album_artist or ""


def format_timestamp(epoch: int) -> str:
    """Render epoch seconds in the host locale's ctime format.

    Args:
        epoch: Seconds since the Unix epoch.

    Returns:
        String like "Sun Oct 18 21:04:05 2026", without trailing newline.
    """
    return time.ctime(epoch).rstrip("\n")


@dataclass(frozen=True, slots=True)
class DatabaseStats:
    """MPD database and daemon statistics.

    Attributes:
        artists: Number of distinct artists.
        albums: Number of distinct albums.
        songs: Number of songs.
        uptime: Daemon uptime in seconds.
        play_time: Time spent playing, in seconds.
        db_play_time: Sum of all song durations in the database, in seconds.
        db_update: Time of the last database update as epoch seconds.
    """

    artists: int = 0
    albums: int = 0
    songs: int = 0
    uptime: int = 0
    play_time: int = 0
    db_play_time: int = 0
    db_update: int = 0

    @property
    def db_update_time(self) -> str:
        """Return the last database update as a human-readable string."""
        return format_timestamp(self.db_update)


class CommandKind(Enum):
    """Playback commands understood by Connection.run()."""

    STOP = "stop"
    PLAY = "play"
    TOGGLE_PAUSE = "toggle_pause"
    NEXT = "next"
    PREVIOUS = "previous"
    SET_RANDOM = "set_random"
    SET_CONSUME = "set_consume"
    SET_REPEAT = "set_repeat"
    SET_SINGLE = "set_single"
    SET_VOLUME = "set_volume"


_BOOL_COMMANDS = frozenset(
    {
        CommandKind.SET_RANDOM,
        CommandKind.SET_CONSUME,
        CommandKind.SET_REPEAT,
        CommandKind.SET_SINGLE,
    }
)


@dataclass(frozen=True, slots=True)
class Command:
    """A single playback command and its argument.

    Use the factory classmethods rather than the constructor.

    Example:
        conn.run(Command.set_volume(40))
        conn.run(Command.simple(CommandKind.NEXT))
    """

    kind: CommandKind
    argument: bool | int | None = None

    def __post_init__(self) -> None:
        """Validate the argument against the command kind."""
        if self.kind in _BOOL_COMMANDS:
            if not isinstance(self.argument, bool):
                raise InvalidArgumentError(f"{self.kind.value} requires a boolean argument")
        elif self.kind is CommandKind.SET_VOLUME:
            volume = self.argument
            if isinstance(volume, bool) or not isinstance(volume, int):
                raise InvalidArgumentError("set_volume requires an integer argument")
            if volume < VOLUME_MIN or volume > VOLUME_MAX:
                raise InvalidArgumentError(
                    f"volume {volume} out of range [{VOLUME_MIN}, {VOLUME_MAX}]"
                )
        elif self.argument is not None:
            raise InvalidArgumentError(f"{self.kind.value} takes no argument")

    @property
    def name(self) -> str:
        """Return the command name."""
        return self.kind.value

    @classmethod
    def simple(cls, kind: CommandKind) -> "Command":
        """Create an argument-less command (stop, play, next, ...)."""
        return cls(kind)

    @classmethod
    def set_random(cls, enabled: bool) -> "Command":
        """Create a random mode command."""
        return cls(CommandKind.SET_RANDOM, enabled)

    @classmethod
    def set_consume(cls, enabled: bool) -> "Command":
        """Create a consume mode command."""
        return cls(CommandKind.SET_CONSUME, enabled)

    @classmethod
    def set_repeat(cls, enabled: bool) -> "Command":
        """Create a repeat mode command."""
        return cls(CommandKind.SET_REPEAT, enabled)

    @classmethod
    def set_single(cls, enabled: bool) -> "Command":
        """Create a single mode command."""
        return cls(CommandKind.SET_SINGLE, enabled)

    @classmethod
    def set_volume(cls, volume: int) -> "Command":
        """Create a volume command (0-100)."""
        return cls(CommandKind.SET_VOLUME, volume)
