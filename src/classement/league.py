"""League table view over server data and manual results."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .classify import (
    build_team_logos,
    build_team_options,
    build_title,
    filter_by_team,
    find_missing_results,
    sort_fixtures,
    sort_results,
    split_matches,
)
from .config import EngineConfig
from .form import build_form_map, form_for
from .models import MatchRecord, StandingsRow
from .normalize import effective_date, localize, match_datetime, team_logo, team_name
from .overrides import ManualOverrideSet, merge_matches
from .standings import compute_standings

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class LeagueView:
    title: str
    standings: List[StandingsRow]
    form: Dict[str, List[str]]
    server_form: Dict[str, List[str]]
    results: List[MatchRecord]
    fixtures: List[MatchRecord]
    missing_results: List[MatchRecord]
    team_options: List[str]
    team_logos: Dict[str, Optional[str]]
    generated_at: datetime
    config: EngineConfig = field(default_factory=EngineConfig, repr=False)

    def match_payload(self, record: MatchRecord) -> Dict[str, Any]:
        unknown = self.config.unknown_team_label
        kickoff = match_datetime(record, tz=self.config.tzinfo)
        payload = record.to_payload()
        payload.update(
            {
                "home_team": team_name(record.home, unknown=unknown),
                "away_team": team_name(record.away, unknown=unknown),
                "home_logo": team_logo(record.home),
                "away_logo": team_logo(record.away),
                "effective_date": effective_date(record),
                "kickoff": kickoff.isoformat() if kickoff else None,
            }
        )
        return payload

    def to_payload(self) -> Dict[str, Any]:
        length = self.config.form_length
        standings = []
        for row in self.standings:
            entry = row.to_payload()
            entry["form"] = form_for(self.form, row.team, length=length)
            standings.append(entry)
        return {
            "title": self.title,
            "generated_at": self.generated_at.isoformat(),
            "standings": standings,
            "form": self.form,
            "server_form": self.server_form,
            "results": [self.match_payload(record) for record in self.results],
            "fixtures": [self.match_payload(record) for record in self.fixtures],
            "missing_results": [self.match_payload(record) for record in self.missing_results],
            "team_options": self.team_options,
        }


def build_league_view(
    server: Sequence[MatchRecord],
    manual: Iterable[MatchRecord] = (),
    *,
    now: Optional[datetime] = None,
    results_team: Optional[str] = None,
    fixtures_team: Optional[str] = None,
    title: Optional[str] = None,
    config: Optional[EngineConfig] = None,
) -> LeagueView:
    """Run the whole pipeline over the server records merged with ``manual``.

    Nothing in ``server`` or ``manual`` is modified.
    """

    config = config or EngineConfig()
    tz = config.tzinfo
    unknown = config.unknown_team_label
    tokens = config.postponed_tokens
    length = config.form_length
    reference = localize(now, tz=tz) if now else datetime.now(tz=tz)
    manual_records = list(manual)

    effective = merge_matches(server, manual_records, tz=tz, unknown=unknown)
    split = split_matches(effective, tokens=tokens)
    active = split.results + split.fixtures
    team_logos = build_team_logos(active, unknown=unknown)

    standings = compute_standings(
        split.results,
        teams=team_logos if config.include_unplayed_teams else None,
        unknown=unknown,
    )
    form = build_form_map(split.results, length=length, tz=tz, unknown=unknown)
    server_results = split_matches(server, tokens=tokens).results
    server_form = build_form_map(server_results, length=length, tz=tz, unknown=unknown)

    results = sort_results(
        filter_by_team(split.results, results_team, all_label=config.all_teams_label, unknown=unknown),
        tz=tz,
    )
    fixtures = sort_fixtures(
        filter_by_team(split.fixtures, fixtures_team, all_label=config.all_teams_label, unknown=unknown),
        tz=tz,
    )
    missing = sort_fixtures(
        find_missing_results(split.fixtures, manual_records, now=reference, tz=tz, unknown=unknown),
        tz=tz,
    )

    return LeagueView(
        title=build_title(server) if title is None else title,
        standings=standings,
        form=form,
        server_form=server_form,
        results=results,
        fixtures=fixtures,
        missing_results=missing,
        team_options=build_team_options(active, all_label=config.all_teams_label, unknown=unknown),
        team_logos=team_logos,
        generated_at=reference,
        config=config,
    )


class LeagueSession:
    """One loaded competition plus the manual results entered for it.

    Not thread-safe.
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()
        self.competition: Optional[str] = None
        self.title: str = ""
        self.server_matches: List[MatchRecord] = []
        self.overrides = ManualOverrideSet(
            tz=self.config.tzinfo, unknown=self.config.unknown_team_label
        )

    def load(
        self,
        matches: Iterable[MatchRecord],
        *,
        competition: Optional[str] = None,
        title: Optional[str] = None,
    ) -> None:
        """Replace the server data; manual results of the previous load are discarded."""

        self.server_matches = list(matches)
        self.competition = competition
        self.title = build_title(self.server_matches) if title is None else title
        self.overrides.clear()
        self.overrides.logos = build_team_logos(
            self.server_matches, unknown=self.config.unknown_team_label
        )
        LOGGER.info(
            "Loaded %d matches for %s", len(self.server_matches), competition or "competition"
        )

    def effective_matches(self) -> List[MatchRecord]:
        return merge_matches(
            self.server_matches,
            self.overrides,
            tz=self.config.tzinfo,
            unknown=self.config.unknown_team_label,
        )

    def add_manual(
        self,
        home: Any,
        away: Any,
        match_date: Any,
        home_score: Any,
        away_score: Any,
        **kwargs: Any,
    ) -> MatchRecord:
        return self.overrides.add(home, away, match_date, home_score, away_score, **kwargs)

    def edit_manual(self, handle: str, **changes: Any) -> MatchRecord:
        return self.overrides.edit(handle, **changes)

    def promote_missing(
        self,
        fixture_id: str,
        home_score: Any,
        away_score: Any,
        *,
        now: Optional[datetime] = None,
    ) -> MatchRecord:
        """Give a score to the missing result with id ``fixture_id``."""

        for fixture in self.view(now=now).missing_results:
            if fixture.id == fixture_id:
                return self.overrides.promote(fixture, home_score, away_score)
        raise KeyError(fixture_id)

    def view(
        self,
        *,
        now: Optional[datetime] = None,
        results_team: Optional[str] = None,
        fixtures_team: Optional[str] = None,
    ) -> LeagueView:
        return build_league_view(
            self.server_matches,
            self.overrides,
            now=now,
            results_team=results_team,
            fixtures_team=fixtures_team,
            title=self.title,
            config=self.config,
        )
