"""Fold played matches into a ranked league table."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .config import UNKNOWN_TEAM_LABEL
from .models import MatchRecord, StandingsRow
from .normalize import team_key, team_logo, team_name

LOGGER = logging.getLogger(__name__)

POINTS_FOR_WIN = 3
POINTS_FOR_DRAW = 1


def standings_sort_key(row: StandingsRow, index: int) -> Tuple[int, int, int, str, str, int]:
    """Ordering key: points, goal difference, goals scored, then the name.

    Names are compared case- and accent-insensitively first and verbatim
    second; ``index`` (encounter order) settles anything left.
    """

    return (-row.points, -row.gd, -row.gf, team_key(row.team), row.team, index)


def sort_standings(rows: Sequence[StandingsRow]) -> List[StandingsRow]:
    ordered = [
        row
        for _, row in sorted(
            enumerate(rows), key=lambda item: standings_sort_key(item[1], item[0])
        )
    ]
    for position, row in enumerate(ordered, start=1):
        row.rank = position
    return ordered


def _row_for(table: Dict[str, StandingsRow], name: str, logo: Optional[str]) -> StandingsRow:
    row = table.get(name)
    if row is None:
        row = StandingsRow(team=name, logo=logo)
        table[name] = row
    elif row.logo is None and logo:
        row.logo = logo
    return row


def compute_standings(
    matches: Iterable[MatchRecord],
    *,
    teams: Mapping[str, Optional[str]] | None = None,
    unknown: str = UNKNOWN_TEAM_LABEL,
) -> List[StandingsRow]:
    """Build the ranked table from ``matches``.

    Records without both scores are ignored. ``teams`` maps extra team names
    to crests; each of them gets a row even without a played match.
    """

    table: Dict[str, StandingsRow] = {}

    for match in matches:
        if not match.is_played:
            continue
        home_score = match.home_score
        away_score = match.away_score

        home_row = _row_for(table, team_name(match.home, unknown=unknown), team_logo(match.home))
        away_row = _row_for(table, team_name(match.away, unknown=unknown), team_logo(match.away))

        home_row.played += 1
        away_row.played += 1

        home_row.gf += home_score
        home_row.ga += away_score
        away_row.gf += away_score
        away_row.ga += home_score

        if home_score > away_score:
            home_row.wins += 1
            home_row.points += POINTS_FOR_WIN
            away_row.losses += 1
        elif home_score < away_score:
            away_row.wins += 1
            away_row.points += POINTS_FOR_WIN
            home_row.losses += 1
        else:
            home_row.draws += 1
            away_row.draws += 1
            home_row.points += POINTS_FOR_DRAW
            away_row.points += POINTS_FOR_DRAW

    for name, logo in (teams or {}).items():
        _row_for(table, name, logo)

    rows = sort_standings(list(table.values()))
    LOGGER.debug("Computed standings for %d teams", len(rows))
    return rows
