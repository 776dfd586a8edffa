"""Partition match records into results, fixtures and postponed entries."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .config import ALL_TEAMS_LABEL, POSTPONED_TOKENS, UNKNOWN_TEAM_LABEL
from .models import MatchRecord
from .normalize import (
    DEFAULT_TZ,
    localize,
    match_datetime,
    match_day,
    team_key,
    team_logo,
    team_name,
)
from .ordering import sort_by_kickoff

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class MatchSplit:
    results: List[MatchRecord]
    fixtures: List[MatchRecord]
    excluded: List[MatchRecord]


def is_postponed(record: MatchRecord, *, tokens: Sequence[str] = POSTPONED_TOKENS) -> bool:
    if record.seems_postponed is True:
        return True
    label = (record.status_label or "").lower()
    return any(token in label for token in tokens)


def has_score(record: MatchRecord) -> bool:
    return record.is_played


def split_matches(
    matches: Iterable[MatchRecord],
    *,
    tokens: Sequence[str] = POSTPONED_TOKENS,
) -> MatchSplit:
    split = MatchSplit(results=[], fixtures=[], excluded=[])
    for match in matches:
        if is_postponed(match, tokens=tokens):
            split.excluded.append(match)
        elif has_score(match):
            split.results.append(match)
        else:
            split.fixtures.append(match)
    return split


def fixture_identity(
    record: MatchRecord,
    *,
    tz: tzinfo = DEFAULT_TZ,
    unknown: str = UNKNOWN_TEAM_LABEL,
) -> Tuple[str, str, object]:
    """Pairing and day of ``record``; manual entries cover fixtures with the same identity."""

    return (
        team_key(team_name(record.home, unknown=unknown)),
        team_key(team_name(record.away, unknown=unknown)),
        match_day(record, tz=tz),
    )


def find_missing_results(
    fixtures: Iterable[MatchRecord],
    manual: Iterable[MatchRecord] = (),
    *,
    now: Optional[datetime] = None,
    tz: tzinfo = DEFAULT_TZ,
    unknown: str = UNKNOWN_TEAM_LABEL,
) -> List[MatchRecord]:
    """Fixtures already kicked off that have neither a score nor a manual entry."""

    reference = localize(now, tz=tz) if now else datetime.now(tz=tz)
    covered = {fixture_identity(record, tz=tz, unknown=unknown) for record in manual}
    missing: List[MatchRecord] = []
    for fixture in fixtures:
        if fixture.is_played:
            continue
        kickoff = match_datetime(fixture, tz=tz)
        if kickoff is None or kickoff >= reference:
            continue
        if fixture_identity(fixture, tz=tz, unknown=unknown) in covered:
            continue
        missing.append(fixture)
    if missing:
        LOGGER.debug("%d fixtures are missing a result", len(missing))
    return missing


def sort_results(matches: Iterable[MatchRecord], *, tz: tzinfo = DEFAULT_TZ) -> List[MatchRecord]:
    return sort_by_kickoff(matches, descending=True, tz=tz)


def sort_fixtures(matches: Iterable[MatchRecord], *, tz: tzinfo = DEFAULT_TZ) -> List[MatchRecord]:
    return sort_by_kickoff(matches, tz=tz)


def team_in_match(
    team: str, record: MatchRecord, *, unknown: str = UNKNOWN_TEAM_LABEL
) -> bool:
    return team in (team_name(record.home, unknown=unknown), team_name(record.away, unknown=unknown))


def filter_by_team(
    matches: Iterable[MatchRecord],
    team: Optional[str],
    *,
    all_label: str = ALL_TEAMS_LABEL,
    unknown: str = UNKNOWN_TEAM_LABEL,
) -> List[MatchRecord]:
    if not team or team == all_label:
        return list(matches)
    return [match for match in matches if team_in_match(team, match, unknown=unknown)]


def build_team_logos(
    matches: Iterable[MatchRecord], *, unknown: str = UNKNOWN_TEAM_LABEL
) -> Dict[str, Optional[str]]:
    """Map every named team to its first known crest; nameless sides are left out."""

    logos: Dict[str, Optional[str]] = {}
    for match in matches:
        for side in (match.home, match.away):
            name = team_name(side, unknown=unknown)
            if name == unknown:
                continue
            if logos.get(name) is None:
                logos[name] = team_logo(side)
    return logos


def build_team_options(
    matches: Iterable[MatchRecord],
    *,
    all_label: str = ALL_TEAMS_LABEL,
    unknown: str = UNKNOWN_TEAM_LABEL,
) -> List[str]:
    names = sorted(
        build_team_logos(matches, unknown=unknown),
        key=lambda name: (team_key(name), name),
    )
    return [all_label, *names]


def build_title(matches: Sequence[MatchRecord]) -> str:
    """Title such as ``"U13 Niveau A - Phase 1 Poule D"`` from the first record."""

    if not matches:
        return ""
    extra: Mapping[str, object] = matches[0].extra
    competition = extra.get("competition")
    phase = extra.get("phase")
    poule = extra.get("poule")

    competition_name = "Compétition"
    if isinstance(competition, Mapping) and competition.get("name"):
        competition_name = str(competition["name"])
    phase_number = phase.get("number") if isinstance(phase, Mapping) else None
    poule_name = str(poule.get("name") or "") if isinstance(poule, Mapping) else ""

    phase_label = f"Phase {phase_number}" if phase_number else ""
    poule_label = poule_name.replace("POULE ", "Poule ")
    suffix = f" {poule_label}" if poule_label else ""
    return f"{competition_name} - {phase_label}{suffix}".strip()
