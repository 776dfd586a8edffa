"""League table, form and fixture lists for district football competitions."""

from .classify import (
    MatchSplit,
    build_team_options,
    build_title,
    filter_by_team,
    find_missing_results,
    split_matches,
)
from .form import build_form_map, default_form
from .league import LeagueSession, LeagueView, build_league_view
from .models import MatchRecord, SideDescriptor, StandingsRow, parse_matches_payload
from .overrides import ManualMatchError, ManualOverrideSet, merge_matches
from .standings import compute_standings

__all__ = [
    "LeagueSession",
    "LeagueView",
    "ManualMatchError",
    "ManualOverrideSet",
    "MatchRecord",
    "MatchSplit",
    "SideDescriptor",
    "StandingsRow",
    "build_form_map",
    "build_league_view",
    "build_team_options",
    "build_title",
    "compute_standings",
    "default_form",
    "filter_by_team",
    "find_missing_results",
    "merge_matches",
    "parse_matches_payload",
    "split_matches",
]
