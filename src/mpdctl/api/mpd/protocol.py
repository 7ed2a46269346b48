"""Mapping of raw MPD responses into typed values.

python-mpd2 hands back responses as plain dicts of strings (lists of
strings for repeated keys). This module turns them into the frozen
dataclasses from ``mpdctl.api.mpd.types`` and owns the table of tag
names MPD accepts in search constraints.

Reference: https://mpd.readthedocs.io/en/stable/protocol.html
"""

import logging
import math
from datetime import datetime
from typing import Any

from mpdctl.api.mpd.types import (
    DatabaseStats,
    PlaybackState,
    StatusSnapshot,
    TrackMetadata,
)

logger = logging.getLogger(__name__)

ANY_TAG = "any"

# Tag names as MPD spells them; matched case-insensitively
KNOWN_TAGS: tuple[str, ...] = (
    "Artist",
    "ArtistSort",
    "Album",
    "AlbumSort",
    "AlbumArtist",
    "AlbumArtistSort",
    "Title",
    "TitleSort",
    "Track",
    "Name",
    "Genre",
    "Mood",
    "Date",
    "OriginalDate",
    "Composer",
    "ComposerSort",
    "Performer",
    "Conductor",
    "Work",
    "Ensemble",
    "Movement",
    "MovementNumber",
    "Location",
    "Grouping",
    "Comment",
    "Disc",
    "Label",
    "MUSICBRAINZ_ARTISTID",
    "MUSICBRAINZ_ALBUMID",
    "MUSICBRAINZ_ALBUMARTISTID",
    "MUSICBRAINZ_TRACKID",
    "MUSICBRAINZ_RELEASETRACKID",
    "MUSICBRAINZ_RELEASEGROUPID",
    "MUSICBRAINZ_WORKID",
)

_TAGS_BY_LOWER: dict[str, str] = {tag.lower(): tag for tag in KNOWN_TAGS}

_STATE_MAP: dict[str, PlaybackState] = {
    "stop": PlaybackState.STOPPED,
    "play": PlaybackState.PLAYING,
    "pause": PlaybackState.PAUSED,
}

# MPD tag key -> TrackMetadata field
_TRACK_TAG_MAP: dict[str, str] = {
    "title": "title",
    "artist": "artist",
    "albumartist": "album_artist",
    "album": "album",
    "track": "track",
    "name": "name",
    "genre": "genre",
    "date": "date",
    "composer": "composer",
    "performer": "performer",
    "comment": "comment",
    "disc": "disc",
}

# MPD status key -> StatusSnapshot field, for the plain integer fields
_STATUS_INT_MAP: dict[str, str] = {
    "volume": "volume",
    "playlistlength": "queue_length",
    "playlist": "queue_version",
    "xfade": "crossfade",
    "song": "song_pos",
    "songid": "song_id",
    "nextsong": "next_song_pos",
    "nextsongid": "next_song_id",
    "bitrate": "kbit_rate",
    "updating_db": "update_id",
}

_STATUS_BOOL_KEYS: tuple[str, ...] = ("random", "repeat", "consume")

# MPD stats key -> DatabaseStats field
_STATS_KEY_MAP: dict[str, str] = {
    "artists": "artists",
    "albums": "albums",
    "songs": "songs",
    "uptime": "uptime",
    "playtime": "play_time",
    "db_playtime": "db_play_time",
    "db_update": "db_update",
}


def resolve_tag(name: str) -> str | None:
    """Return the canonical MPD spelling of a search tag.

    Args:
        name: Tag name in any letter case, or "any".

    Returns:
        Canonical tag name, "any", or None if MPD has no such tag.
    """
    lowered = name.lower()
    if lowered == ANY_TAG:
        return ANY_TAG
    return _TAGS_BY_LOWER.get(lowered)


def normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of a response dict with lower-cased keys."""
    return {key.lower(): value for key, value in data.items()}


def _first(value: Any) -> str:
    """Return the first value of a repeated key, or the value itself."""
    if isinstance(value, list):
        return str(value[0]) if value else ""
    return str(value)


def _to_int(value: Any, default: int = 0) -> int:
    """Parse an integer that MPD may have sent with a fractional part."""
    try:
        return int(float(_first(value)))
    except (ValueError, OverflowError):
        logger.debug("Unparseable integer from MPD: %r", value)
        return default


def _to_float(value: Any, default: float = 0.0) -> float:
    """Parse a finite number; inf and nan count as unparseable."""
    try:
        number = float(_first(value))
    except ValueError:
        number = math.nan
    if not math.isfinite(number):
        logger.debug("Unparseable number from MPD: %r", value)
        return default
    return number


def _parse_range(value: str) -> tuple[int, int]:
    """Parse a song range "start-end" (either side may be empty)."""
    start_str, _, end_str = value.partition("-")
    start = _to_int(start_str) if start_str else 0
    end = _to_int(end_str) if end_str else 0
    return start, end


def _parse_iso_timestamp(value: str) -> int:
    """Parse an ISO 8601 UTC timestamp ("2024-01-31T12:00:00Z") to epoch seconds."""
    try:
        return int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp())
    except ValueError:
        logger.debug("Unparseable timestamp from MPD: %r", value)
        return 0


def parse_state(value: str) -> PlaybackState:
    """Map MPD's "play"/"pause"/"stop" to PlaybackState."""
    return _STATE_MAP.get(value, PlaybackState.UNKNOWN)


def parse_status(raw: dict[str, Any]) -> StatusSnapshot:
    """Parse a status response into StatusSnapshot.

    If the daemon reports a state other than play/pause/stop, only the
    state is mapped.

    Args:
        raw: Response dict from python-mpd2's ``status()``.

    Returns:
        StatusSnapshot instance.
    """
    data = normalize_keys(raw)
    state = parse_state(_first(data.get("state", "")))
    if state is PlaybackState.UNKNOWN:
        return StatusSnapshot(state=state)

    kwargs: dict[str, Any] = {"state": state}

    for mpd_key, field_name in _STATUS_INT_MAP.items():
        if mpd_key in data:
            kwargs[field_name] = _to_int(data[mpd_key], default=-1)

    for key in _STATUS_BOOL_KEYS:
        if key in data:
            kwargs[key] = _first(data[key]) == "1"

    # single can also be "oneshot"
    if "single" in data:
        kwargs["single"] = _first(data["single"]) in ("1", "oneshot")

    if "mixrampdb" in data:
        kwargs["mixramp_db"] = _to_float(data["mixrampdb"])
    if "mixrampdelay" in data:
        kwargs["mixramp_delay"] = _to_float(data["mixrampdelay"])

    # Prefer the precise "elapsed"/"duration"; "time" is "elapsed:total" in whole seconds
    elapsed: float | None = None
    total: float | None = None
    if "time" in data and ":" in _first(data["time"]):
        elapsed_str, total_str = _first(data["time"]).split(":", 1)
        elapsed = _to_float(elapsed_str)
        total = _to_float(total_str)
    if "elapsed" in data:
        elapsed = _to_float(data["elapsed"])
    if "duration" in data:
        total = _to_float(data["duration"])

    if elapsed is not None:
        kwargs["elapsed_time"] = int(elapsed)
        kwargs["elapsed_ms"] = int(round(elapsed * 1000))
    if total is not None:
        kwargs["total_time"] = int(total)

    if "audio" in data:
        kwargs["audio_format"] = _first(data["audio"])
    if "error" in data:
        kwargs["error"] = _first(data["error"])

    return StatusSnapshot(**kwargs)


def parse_track(raw: dict[str, Any]) -> TrackMetadata:
    """Parse one song record into TrackMetadata.

    Repeated tags (e.g. several artists) keep their first value.

    Args:
        raw: One song dict from python-mpd2.

    Returns:
        TrackMetadata instance.
    """
    data = normalize_keys(raw)
    kwargs: dict[str, Any] = {"uri": _first(data.get("file", ""))}

    for mpd_key, field_name in _TRACK_TAG_MAP.items():
        if mpd_key in data:
            kwargs[field_name] = _first(data[mpd_key])

    if "duration" in data:
        kwargs["duration"] = _to_int(data["duration"])
    elif "time" in data:
        kwargs["duration"] = _to_int(data["time"])

    if "range" in data:
        kwargs["start"], kwargs["end"] = _parse_range(_first(data["range"]))

    if "last-modified" in data:
        kwargs["last_modified"] = _parse_iso_timestamp(_first(data["last-modified"]))

    if "pos" in data:
        kwargs["pos"] = _to_int(data["pos"], default=-1)
    if "id" in data:
        kwargs["id"] = _to_int(data["id"], default=-1)

    return TrackMetadata(**kwargs)


def is_song_record(raw: dict[str, Any]) -> bool:
    """Return True for song entries (directory/playlist entries have no "file")."""
    return any(key.lower() == "file" for key in raw)


def parse_stats(raw: dict[str, Any]) -> DatabaseStats:
    """Parse a stats response into DatabaseStats.

    Args:
        raw: Response dict from python-mpd2's ``stats()``.

    Returns:
        DatabaseStats instance.
    """
    data = normalize_keys(raw)
    kwargs: dict[str, int] = {}
    for mpd_key, field_name in _STATS_KEY_MAP.items():
        if mpd_key in data:
            kwargs[field_name] = _to_int(data[mpd_key])
    return DatabaseStats(**kwargs)
