"""Streaming of song lists (queue listings and search results).

A TrackStream wraps the lazy record iterator python-mpd2 returns in
iterate mode. It maps each record to TrackMetadata as it arrives and
counts what it has seen. It can be iterated once.
"""

import logging
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from mpd import CommandError as MpdCommandError
from mpd import MPDError

from mpdctl.api.mpd.errors import CommandError, InvalidArgumentError
from mpdctl.api.mpd.protocol import is_song_record, parse_track
from mpdctl.api.mpd.types import TrackMetadata

logger = logging.getLogger(__name__)


class TrackStream:
    """One-shot, lazily mapped sequence of songs.

    If another request is issued on the connection before the stream is
    exhausted, the rest of the response is read into memory and still
    handed out by the iterator.

    Attributes:
        request: Name of the request that produced the stream.
        count: Number of songs received from the daemon so far.
        truncated: True if the transport failed before the list ended.
        finished: True once the underlying response has been fully read.

    Example:
        stream = conn.get_queue()
        for track in stream:
            print(track.display_title)
        print(stream.count, "songs")
    """

    def __init__(
        self,
        records: Iterable[dict[str, Any]],
        request: str,
        on_finish: Callable[["TrackStream"], None] | None = None,
    ) -> None:
        """Initialize the stream.

        Args:
            records: Raw song dicts, possibly lazily read from the socket.
            request: Request name, used in errors and log lines.
            on_finish: Called once the response has been fully consumed.
        """
        self.request = request
        self._records = iter(records)
        self._on_finish = on_finish
        self._iterator: Iterator[TrackMetadata] | None = None
        self._buffered: deque[TrackMetadata] = deque()
        self._deferred: CommandError | None = None
        self._count = 0
        self._truncated = False
        self._finished = False

    @property
    def count(self) -> int:
        """Return the number of songs received so far."""
        return self._count

    @property
    def truncated(self) -> bool:
        """Return True if the list was cut short by a transport failure."""
        return self._truncated

    @property
    def finished(self) -> bool:
        """Return True once the response has been fully read."""
        return self._finished

    def __iter__(self) -> Iterator[TrackMetadata]:
        """Start iterating. A stream cannot be restarted."""
        if self._iterator is not None:
            raise InvalidArgumentError(f"{self.request} results were already consumed")
        self._iterator = self._generate()
        return self._iterator

    def _generate(self) -> Iterator[TrackMetadata]:
        while True:
            if self._buffered:
                yield self._buffered.popleft()
                continue
            if self._deferred is not None:
                error, self._deferred = self._deferred, None
                raise error
            track = self._read()
            if track is None:
                return
            yield track

    def _read(self) -> TrackMetadata | None:
        """Read the next song off the response, or None once it has ended."""
        while not self._finished:
            try:
                raw = next(self._records)
            except StopIteration:
                self._finish()
                break
            except MpdCommandError as e:
                logger.debug("MPD rejected %s: %s", self.request, e)
                self._finish()
                raise CommandError(self.request) from e
            except (MPDError, OSError) as e:
                # Transport loss or a reply python-mpd2 could not parse
                self._truncated = True
                logger.warning(
                    "%s ended after %d songs, transport failed: %s",
                    self.request,
                    self._count,
                    e,
                )
                self._finish()
                break

            if not is_song_record(raw):
                continue
            self._count += 1
            return parse_track(raw)
        return None

    def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        logger.debug("%s returned %d songs", self.request, self._count)
        if self._on_finish is not None:
            self._on_finish(self)

    def drain(self) -> None:
        """Read the rest of the response into memory.

        Buffered songs are still yielded by the iterator, and a daemon
        error is raised there once they run out.
        """
        while True:
            try:
                track = self._read()
            except CommandError as e:
                self._deferred = e
                return
            if track is None:
                return
            self._buffered.append(track)

    def collect(self) -> tuple[TrackMetadata, ...]:
        """Return all remaining songs as a tuple."""
        iterator = self._iterator if self._iterator is not None else iter(self)
        return tuple(iterator)
