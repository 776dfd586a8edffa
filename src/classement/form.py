"""Recent-form sequences per team."""
from __future__ import annotations

from datetime import tzinfo
from typing import Dict, Iterable, List, Mapping

from .config import FORM_LENGTH, UNKNOWN_TEAM_LABEL
from .models import MatchRecord
from .normalize import DEFAULT_TZ, team_name
from .ordering import sort_by_kickoff

WIN = "V"
DRAW = "N"
LOSS = "D"
UNKNOWN = "?"


def default_form(length: int = FORM_LENGTH) -> List[str]:
    return [UNKNOWN] * (length + 1)


def outcome(goals_for: int, goals_against: int) -> str:
    if goals_for > goals_against:
        return WIN
    if goals_for == goals_against:
        return DRAW
    return LOSS


def build_form_map(
    matches: Iterable[MatchRecord],
    *,
    length: int = FORM_LENGTH,
    tz: tzinfo = DEFAULT_TZ,
    unknown: str = UNKNOWN_TEAM_LABEL,
) -> Dict[str, List[str]]:
    """Return the latest ``length`` outcomes per team, most recent first.

    Every sequence starts with the ``?`` marker, so a team with a full record
    has ``length + 1`` entries. Teams without a played match are absent.
    """

    played = [match for match in matches if match.is_played]
    form_map: Dict[str, List[str]] = {}

    for match in sort_by_kickoff(played, descending=True, tz=tz):
        home = team_name(match.home, unknown=unknown)
        away = team_name(match.away, unknown=unknown)
        home_form = form_map.setdefault(home, [])
        away_form = form_map.setdefault(away, [])
        if len(home_form) < length:
            home_form.append(outcome(match.home_score, match.away_score))
        if len(away_form) < length:
            away_form.append(outcome(match.away_score, match.home_score))

    return {team: [UNKNOWN, *items] for team, items in form_map.items()}


def form_for(form_map: Mapping[str, List[str]], team: str, *, length: int = FORM_LENGTH) -> List[str]:
    return list(form_map.get(team) or default_form(length))
