"""Chronological ordering of match records."""
from __future__ import annotations

from datetime import tzinfo
from typing import Iterable, List, Tuple

from .models import MatchRecord
from .normalize import DEFAULT_TZ, match_datetime


def sort_by_kickoff(
    matches: Iterable[MatchRecord],
    *,
    descending: bool = False,
    tz: tzinfo = DEFAULT_TZ,
) -> List[MatchRecord]:
    """Stable sort by kickoff; records without a kickoff keep their order at the end."""

    def _key(match: MatchRecord) -> Tuple[int, float]:
        kickoff = match_datetime(match, tz=tz)
        if kickoff is None:
            return (1, 0.0)
        timestamp = kickoff.timestamp()
        return (0, -timestamp if descending else timestamp)

    return sorted(matches, key=_key)
