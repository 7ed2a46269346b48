"""MPD client module.

This module provides a blocking MPD client facade on top of python-mpd2,
returning frozen value objects for status, songs and statistics.

Example:
    from mpdctl.api.mpd import connect

    with connect("192.168.1.100", 6600, 5000) as conn:
        status = conn.get_status()
        track = conn.get_current_track()
        hits = conn.search(True, [("artist", "Nina Simone")]).collect()
"""

from mpdctl.api.mpd.client import DEFAULT_PORT, DEFAULT_TIMEOUT_MS, Connection, connect
from mpdctl.api.mpd.errors import (
    CommandError,
    InvalidArgumentError,
    MpdConnectionError,
    MpdError,
)
from mpdctl.api.mpd.query import TrackStream
from mpdctl.api.mpd.search import SearchBuilder, SearchConstraint
from mpdctl.api.mpd.types import (
    Command,
    CommandKind,
    DatabaseStats,
    PlaybackState,
    StatusSnapshot,
    TrackMetadata,
    format_timestamp,
)

__all__ = [
    "DEFAULT_PORT",
    "DEFAULT_TIMEOUT_MS",
    "Command",
    "CommandError",
    "CommandKind",
    "Connection",
    "DatabaseStats",
    "InvalidArgumentError",
    "MpdConnectionError",
    "MpdError",
    "PlaybackState",
    "SearchBuilder",
    "SearchConstraint",
    "StatusSnapshot",
    "TrackMetadata",
    "TrackStream",
    "connect",
    "format_timestamp",
]
