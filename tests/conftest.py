"""Test fixtures for mpdctl tests.

FakeMpdClient stands in for python-mpd2's MPDClient: it keeps a small
in-memory daemon (library, queue, player state) and answers the
commands the facade uses, including iterate mode.
"""

from collections.abc import Generator, Iterator
from typing import Any
from unittest.mock import patch

import pytest
from mpd import CommandError as MpdCommandError
from mpd import ConnectionError as MpdTransportError

from mpdctl.api.mpd import Connection, connect

LIBRARY: list[dict[str, Any]] = [
    {
        "file": "jazz/nina_simone/pastel_blues/01-be_my_husband.flac",
        "title": "Be My Husband",
        "artist": "Nina Simone",
        "albumartist": "Nina Simone",
        "album": "Pastel Blues",
        "track": "1",
        "genre": "Jazz",
        "date": "1965",
        "duration": "170.213",
        "time": "170",
        "last-modified": "2024-01-31T12:00:00Z",
    },
    {
        "file": "jazz/nina_simone/pastel_blues/02-nobody.flac",
        "title": "Nobody Knows You When You're Down and Out",
        "artist": "Nina Simone",
        "album": "Pastel Blues",
        "track": "2",
        "genre": "Jazz",
        "duration": "231.0",
        "last-modified": "2024-01-31T12:00:00Z",
    },
    {
        "file": "rock/can/tago_mago/01-paperhouse.mp3",
        "title": "Paperhouse",
        "artist": ["Can", "Damo Suzuki"],
        "album": "Tago Mago",
        "track": "1/7",
        "genre": "Krautrock",
        "composer": "Czukay",
        "duration": "449.5",
    },
]


class FakeMpdClient:
    """In-memory stand-in for mpd.MPDClient."""

    def __init__(self, library: list[dict[str, Any]] | None = None) -> None:
        self.library = [dict(song) for song in (library if library is not None else LIBRARY)]
        self.queue: list[dict[str, Any]] = []
        self.timeout: float | None = None
        self.iterate = False
        self.mpd_version: str | None = None
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

        self.state = "stop"
        self.volume = 50
        self.options = {"random": "0", "repeat": "0", "single": "0", "consume": "0"}
        self.current: int | None = None
        self.password_required = ""

        self.connect_error: Exception | None = None
        self.failing_commands: set[str] = set()
        self.stream_failure_after: int | None = None
        self.stream_failure: Exception = MpdTransportError("Connection lost while reading line")
        self.status_override: dict[str, Any] | None = None

    # -- helpers ---------------------------------------------------------------

    def enqueue(self, *indexes: int) -> None:
        """Copy library songs into the queue."""
        for index in indexes:
            song = dict(self.library[index])
            song["pos"] = str(len(self.queue))
            song["id"] = str(len(self.queue) + 1)
            self.queue.append(song)

    def command_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.failing_commands:
            raise MpdCommandError(f"[5@0] {{{name}}} failed")

    def _listing(self, songs: list[dict[str, Any]]) -> Any:
        def generate() -> Iterator[dict[str, Any]]:
            for index, song in enumerate(songs):
                if self.stream_failure_after is not None and index >= self.stream_failure_after:
                    raise self.stream_failure
                yield dict(song)

        if self.iterate:
            return generate()
        return list(generate())

    # -- connection ------------------------------------------------------------

    def connect(self, host: str, port: int) -> None:
        self._record("connect", host, port)
        if self.connect_error is not None:
            raise self.connect_error
        self.mpd_version = "0.23.5"

    def password(self, password: str) -> None:
        self._record("password", password)
        if password != self.password_required:
            raise MpdCommandError("[3@0] {password} incorrect password")

    def close(self) -> None:
        self._record("close")

    def disconnect(self) -> None:
        self.calls.append(("disconnect", ()))
        self.mpd_version = None

    # -- playback --------------------------------------------------------------

    def stop(self) -> None:
        self._record("stop")
        self.state = "stop"
        self.current = None

    def play(self) -> None:
        self._record("play")
        if self.queue:
            self.state = "play"
            self.current = self.current or 0

    def pause(self) -> None:
        self._record("pause")
        if self.state == "play":
            self.state = "pause"
        elif self.state == "pause":
            self.state = "play"

    def next(self) -> None:
        self._record("next")

    def previous(self) -> None:
        self._record("previous")

    def random(self, value: int) -> None:
        self._record("random", value)
        self.options["random"] = str(value)

    def repeat(self, value: int) -> None:
        self._record("repeat", value)
        self.options["repeat"] = str(value)

    def single(self, value: int) -> None:
        self._record("single", value)
        self.options["single"] = str(value)

    def consume(self, value: int) -> None:
        self._record("consume", value)
        self.options["consume"] = str(value)

    def setvol(self, value: int) -> None:
        self._record("setvol", value)
        self.volume = int(value)

    # -- queries ---------------------------------------------------------------

    def status(self) -> dict[str, Any]:
        self._record("status")
        if self.status_override is not None:
            return dict(self.status_override)
        status: dict[str, Any] = {
            "volume": str(self.volume),
            **self.options,
            "playlist": "7",
            "playlistlength": str(len(self.queue)),
            "mixrampdb": "0.000000",
            "state": self.state,
        }
        if self.current is not None:
            status.update(
                {
                    "song": str(self.current),
                    "songid": str(self.current + 1),
                    "elapsed": "12.345",
                    "duration": self.queue[self.current].get("duration", "0"),
                    "bitrate": "320",
                    "audio": "44100:16:2",
                }
            )
        return status

    def currentsong(self) -> dict[str, Any]:
        self._record("currentsong")
        if self.current is None:
            return {}
        return dict(self.queue[self.current])

    def playlistinfo(self) -> Any:
        self._record("playlistinfo")
        return self._listing(self.queue)

    def listallinfo(self) -> Any:
        self._record("listallinfo")
        entries: list[dict[str, Any]] = [{"directory": "jazz"}, *self.library]
        return self._listing(entries)

    def _match(self, song: dict[str, Any], tag: str, value: str, exact: bool) -> bool:
        if tag == "any":
            candidates = [v for k, v in song.items() if k != "file"]
        else:
            candidates = [song.get(tag.lower(), "")]
        flat: list[str] = []
        for candidate in candidates:
            flat.extend(candidate if isinstance(candidate, list) else [candidate])
        if exact:
            return value in flat
        return any(value.lower() in item.lower() for item in flat)

    def _filter(self, name: str, args: tuple[str, ...], exact: bool) -> Any:
        self._record(name, *args)
        if not args:
            raise MpdCommandError(f"[2@0] {{{name}}} too few arguments")
        pairs = list(zip(args[0::2], args[1::2]))
        hits = [
            song
            for song in self.library
            if all(self._match(song, tag, value, exact) for tag, value in pairs)
        ]
        return self._listing(hits)

    def find(self, *args: str) -> Any:
        return self._filter("find", args, exact=True)

    def search(self, *args: str) -> Any:
        return self._filter("search", args, exact=False)

    def stats(self) -> dict[str, Any]:
        self._record("stats")
        return {
            "artists": "2",
            "albums": "2",
            "songs": str(len(self.library)),
            "uptime": "3600",
            "playtime": "1200",
            "db_playtime": "850",
            "db_update": "1700000000",
        }


@pytest.fixture
def fake_mpd() -> FakeMpdClient:
    """Return a fresh fake daemon."""
    return FakeMpdClient()


@pytest.fixture
def patched_mpd(fake_mpd: FakeMpdClient) -> Generator[FakeMpdClient, None, None]:
    """Route every MPDClient the facade creates to fake_mpd."""
    with patch("mpdctl.api.mpd.client.MPDClient", return_value=fake_mpd):
        yield fake_mpd


@pytest.fixture
def conn(patched_mpd: FakeMpdClient) -> Generator[Connection, None, None]:
    """Return an open Connection to the fake daemon."""
    connection = connect("localhost", 6600, 1000)
    yield connection
    if connection.is_open:
        connection.close()
