from datetime import datetime
from zoneinfo import ZoneInfo

from classement.classify import (
    build_team_logos,
    build_team_options,
    build_title,
    filter_by_team,
    find_missing_results,
    is_postponed,
    sort_fixtures,
    sort_results,
    split_matches,
)
from classement.models import MatchRecord

PARIS = ZoneInfo("Europe/Paris")


def test_split_matches_partitions_records(make_match):
    played = make_match("A", "B", 1, 0)
    fixture = make_match("C", "D")
    postponed_flag = make_match("E", "F", postponed=True)
    postponed_label = make_match("G", "H", 2, 2, status_label="Match REPORTÉ")
    half_scored = make_match("I", "J", 1, None)

    split = split_matches([played, fixture, postponed_flag, postponed_label, half_scored])

    assert split.results == [played]
    assert split.fixtures == [fixture, half_scored]
    assert split.excluded == [postponed_flag, postponed_label]


def test_is_postponed_uses_configured_tokens(make_match):
    record = make_match("A", "B", status_label="Postponed")
    assert not is_postponed(record)
    assert is_postponed(record, tokens=("postponed",))
    assert not is_postponed(make_match("A", "B", postponed=False))


def test_missing_results_are_past_fixtures_without_manual_entry(make_match, now):
    past = make_match("A", "B", date="2024-09-14", time="15H00")
    future = make_match("C", "D", date="2024-10-20")
    undated = make_match("E", "F", date=None)
    covered = make_match("G", "H", date="2024-09-21")
    manual = make_match("G", "H", 1, 0, date="2024-09-21")

    missing = find_missing_results([past, future, undated, covered], [manual], now=now)

    assert missing == [past]


def test_missing_results_are_strictly_before_now(make_match):
    fixture = make_match("A", "B", date="2024-09-14", time="15H00")
    kickoff = datetime(2024, 9, 14, 15, 0, tzinfo=PARIS)
    assert find_missing_results([fixture], now=kickoff) == []
    assert find_missing_results([fixture], now=kickoff.replace(minute=1)) == [fixture]


def test_manual_entry_on_other_day_does_not_cover_fixture(make_match, now):
    fixture = make_match("A", "B", date="2024-09-14")
    manual = make_match("A", "B", 2, 1, date="2024-09-15")
    reverse = make_match("B", "A", 2, 1, date="2024-09-14")
    assert find_missing_results([fixture], [manual, reverse], now=now) == [fixture]


def test_sort_results_and_fixtures(make_match):
    first = make_match("A", "B", 1, 0, date="2024-09-01")
    second = make_match("A", "C", 1, 0, date="2024-09-08")
    undated = make_match("A", "D", 1, 0, date=None)

    assert sort_results([undated, first, second]) == [second, first, undated]
    assert sort_fixtures([undated, second, first]) == [first, second, undated]


def test_filter_by_team(make_match):
    matches = [make_match("A", "B"), make_match("C", "A"), make_match("B", "C")]
    assert filter_by_team(matches, "A") == matches[:2]
    assert filter_by_team(matches, "Toutes") == matches
    assert filter_by_team(matches, "") == matches
    assert filter_by_team(matches, None) == matches


def test_team_options_are_collated_in_french(make_match):
    matches = [
        make_match("Zèbres", "étoile", home_logo="z.png"),
        make_match("Aigles", "Zèbres", away_logo="z2.png"),
    ]
    assert build_team_options(matches) == ["Toutes", "Aigles", "étoile", "Zèbres"]
    assert build_team_logos(matches)["Zèbres"] == "z.png"


def test_build_title_from_payload_fields():
    record = MatchRecord.from_payload(
        {
            "ma_no": 1,
            "competition": {"name": "U13 Niveau A"},
            "phase": {"number": 1},
            "poule": {"name": "POULE D"},
        }
    )
    assert build_title([record]) == "U13 Niveau A - Phase 1 Poule D"
    assert build_title([MatchRecord(id="x")]) == "Compétition -"
    assert build_title([]) == ""


def test_missing_results_accept_naive_now(make_match):
    fixture = make_match("A", "B", date="2024-09-14", time="15H00")
    assert find_missing_results([fixture], now=datetime(2024, 9, 14, 15, 0)) == []
    assert find_missing_results([fixture], now=datetime(2024, 9, 14, 15, 1)) == [fixture]


def test_nameless_sides_are_not_offered_as_teams(make_match):
    matches = [make_match(None, "Aigles"), make_match("", "Zèbres", home_logo="x.png")]
    assert build_team_options(matches) == ["Toutes", "Aigles", "Zèbres"]
    assert "Équipe inconnue" not in build_team_logos(matches)
