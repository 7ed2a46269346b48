"""Search constraints and the builder that assembles them.

Unknown tag names are skipped rather than rejected: the resulting
constraint may hold fewer terms than the caller supplied. Every skipped
tag is logged.

Example:
    builder = SearchBuilder(exact=True)
    builder.add("artist", "Nina Simone").add("album", "Pastel Blues")
    for track in builder.submit(conn):
        print(track.title)
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Self

from mpdctl.api.mpd.errors import InvalidArgumentError
from mpdctl.api.mpd.protocol import resolve_tag

if TYPE_CHECKING:
    from mpdctl.api.mpd.client import Connection
    from mpdctl.api.mpd.query import TrackStream

logger = logging.getLogger(__name__)


def _check_term(tag: object, value: object) -> tuple[str, str]:
    if not isinstance(tag, str) or not isinstance(value, str):
        raise InvalidArgumentError(
            f"search terms must be pairs of strings, got ({tag!r}, {value!r})"
        )
    return tag, value


@dataclass(frozen=True, slots=True)
class SearchConstraint:
    """A validated, ordered set of search terms.

    Attributes:
        exact: True for exact matching ("find"), False for
            case-insensitive substring matching ("search").
        terms: (tag, value) pairs with canonical tag names, in caller order.
    """

    exact: bool
    terms: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_pairs(cls, exact: bool, pairs: Iterable[tuple[str, str]]) -> "SearchConstraint":
        """Build a constraint, dropping pairs whose tag MPD does not know.

        Args:
            exact: Exact matching flag.
            pairs: (tag, value) pairs; tag may be "any".

        Returns:
            SearchConstraint with the recognised terms.

        Raises:
            InvalidArgumentError: If exact is not a bool or a pair is not two strings.
        """
        if not isinstance(exact, bool):
            raise InvalidArgumentError("exact must be a boolean")

        terms: list[tuple[str, str]] = []
        for pair in pairs:
            try:
                tag, value = pair
            except (TypeError, ValueError) as e:
                raise InvalidArgumentError(f"search term {pair!r} is not a pair") from e
            tag, value = _check_term(tag, value)
            canonical = resolve_tag(tag)
            if canonical is None:
                logger.info("Ignoring search constraint with unknown tag %r", tag)
                continue
            terms.append((canonical, value))
        return cls(exact=exact, terms=tuple(terms))

    @property
    def is_empty(self) -> bool:
        """Return True if the constraint matches everything."""
        return not self.terms

    def as_args(self) -> list[str]:
        """Return the terms flattened to tag, value, tag, value, ..."""
        return [item for term in self.terms for item in term]


class SearchBuilder:
    """Collects search terms one at a time, then submits them."""

    def __init__(self, exact: bool = False) -> None:
        if not isinstance(exact, bool):
            raise InvalidArgumentError("exact must be a boolean")
        self.exact = exact
        self._pairs: list[tuple[str, str]] = []

    def add(self, tag: str, value: str) -> Self:
        """Add a tag constraint ("any" matches every tag)."""
        self._pairs.append(_check_term(tag, value))
        return self

    def add_any(self, value: str) -> Self:
        """Add a constraint matching value in any tag."""
        return self.add("any", value)

    def build(self) -> SearchConstraint:
        """Return the validated constraint."""
        return SearchConstraint.from_pairs(self.exact, self._pairs)

    def submit(self, conn: "Connection") -> "TrackStream":
        """Run the search on a connection.

        Args:
            conn: An open Connection.

        Returns:
            TrackStream over the matching songs.
        """
        return conn.submit_search(self.build())
