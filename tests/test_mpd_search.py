"""Tests for search constraints and the search builder."""

import logging

import pytest

from mpdctl.api.mpd import (
    Connection,
    InvalidArgumentError,
    SearchBuilder,
    SearchConstraint,
)
from tests.conftest import FakeMpdClient


class TestSearchConstraint:
    """Tests for SearchConstraint.from_pairs."""

    def test_canonical_names(self) -> None:
        """Test tag names are normalised to MPD spelling."""
        constraint = SearchConstraint.from_pairs(True, [("ARTIST", "Can"), ("albumartist", "X")])
        assert constraint.terms == (("Artist", "Can"), ("AlbumArtist", "X"))
        assert constraint.as_args() == ["Artist", "Can", "AlbumArtist", "X"]

    def test_any_kept(self) -> None:
        """Test the any pseudo-tag is accepted."""
        constraint = SearchConstraint.from_pairs(False, [("ANY", "blue")])
        assert constraint.terms == (("any", "blue"),)

    def test_unknown_tags_skipped_and_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test unknown tags are dropped with a log line."""
        with caplog.at_level(logging.INFO, logger="mpdctl.api.mpd.search"):
            constraint = SearchConstraint.from_pairs(True, [("mood", "calm"), ("colour", "red")])
        assert constraint.terms == (("Mood", "calm"),)
        assert "colour" in caplog.text

    def test_order_preserved(self) -> None:
        """Test terms keep caller order."""
        pairs = [("title", "a"), ("artist", "b"), ("album", "c")]
        constraint = SearchConstraint.from_pairs(True, pairs)
        assert [tag for tag, _ in constraint.terms] == ["Title", "Artist", "Album"]

    def test_empty(self) -> None:
        """Test an empty constraint."""
        assert SearchConstraint.from_pairs(True, []).is_empty

    @pytest.mark.parametrize("pairs", [[("artist",)], [("artist", 3)], [(None, "x")], [5]])
    def test_malformed_pairs(self, pairs: list[object]) -> None:
        """Test non-string or non-pair terms are rejected."""
        with pytest.raises(InvalidArgumentError):
            SearchConstraint.from_pairs(True, pairs)  # type: ignore[arg-type]

    def test_exact_must_be_bool(self) -> None:
        """Test the exact flag type."""
        with pytest.raises(InvalidArgumentError):
            SearchConstraint.from_pairs(1, [])  # type: ignore[arg-type]


class TestSearchBuilder:
    """Tests for SearchBuilder."""

    def test_build(self) -> None:
        """Test chained adds."""
        constraint = SearchBuilder(exact=True).add("artist", "Can").add_any("Paper").build()
        assert constraint.exact is True
        assert constraint.terms == (("Artist", "Can"), ("any", "Paper"))

    def test_add_rejects_non_strings(self) -> None:
        """Test add() validates its arguments."""
        with pytest.raises(InvalidArgumentError):
            SearchBuilder().add("artist", 42)  # type: ignore[arg-type]

    def test_submit(self, conn: Connection, patched_mpd: FakeMpdClient) -> None:
        """Test submitting a search on a connection."""
        stream = SearchBuilder(exact=False).add("album", "tago").submit(conn)
        tracks = stream.collect()
        assert [track.title for track in tracks] == ["Paperhouse"]
        assert patched_mpd.calls[-1] == ("search", ("Album", "tago"))
