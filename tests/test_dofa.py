import pytest
import requests

from classement.dofa import (
    CompetitionLookupError,
    CompetitionRef,
    DofaClient,
    DofaError,
    parse_competition_url,
    parse_level_input,
    parse_poule_input,
    resolve_phase_and_poule,
    score_competition_name,
)

from conftest import COMPETITION_URL, COMPETITIONS, StubResponse, StubSession


def test_parse_competition_url():
    ref = parse_competition_url(COMPETITION_URL)
    assert ref == CompetitionRef(competition_id="439637", phase="1", poule="4")
    assert ref.key == "439637/1/4"


def test_parse_competition_url_requires_all_parameters():
    with pytest.raises(CompetitionLookupError):
        parse_competition_url("https://escaut.fff.fr/competitions?id=439637&phase=1")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("U13A", ("U13", "A")),
        ("u13 niveau a", ("U13", "A")),
        ("Catégorie U15 niveau B", ("U15", "B")),
        ("bonjour", None),
    ],
)
def test_parse_level_input(value, expected):
    assert parse_level_input(value) == expected


def test_parse_poule_input():
    assert parse_poule_input(" 4 ") == ("number", 4)
    assert parse_poule_input("d") == ("letter", "D")
    assert parse_poule_input("Poule D") == ("letter", "D")
    assert parse_poule_input("") is None


def test_score_competition_name():
    assert score_competition_name("U13 NIVEAU A", "U13", "A") == 5
    assert score_competition_name("U13 A", "U13", "A") == 2
    assert score_competition_name("U15 NIVEAU B", "U13", "A") == 1
    assert score_competition_name("SENIORS", "U13", "A") == 0


def test_resolve_phase_and_poule():
    competition = COMPETITIONS[3][1]
    phase, group = resolve_phase_and_poule(competition, 1, "D")
    assert group["stage_number"] == 4
    _, group = resolve_phase_and_poule(competition, 1, "3")
    assert group["name"] == "POULE C"

    with pytest.raises(CompetitionLookupError):
        resolve_phase_and_poule(competition, 2, "D")
    with pytest.raises(CompetitionLookupError):
        resolve_phase_and_poule(competition, 1, "Z")


def test_fetch_matches_parses_hydra_collection(stub_session):
    client = DofaClient("https://api.example/api/", timeout=5, session=stub_session)
    matches = client.fetch_matches(parse_competition_url(COMPETITION_URL))

    assert [match.id for match in matches] == ["1", "2", "3", "4"]
    assert matches[0].is_played
    url, _, timeout = stub_session.calls[0]
    assert url == "https://api.example/api/compets/439637/phases/1/poules/4/matchs"
    assert timeout == 5
    assert stub_session.headers["Accept"] == "application/json"


def test_http_errors_raise_dofa_error():
    session = StubSession({"/matchs": StubResponse(status_code=500, text="boom" * 100)})
    client = DofaClient(session=session)
    with pytest.raises(DofaError) as excinfo:
        client.fetch_matches(CompetitionRef("1", "1", "1"))
    assert excinfo.value.status_code == 500
    assert len(str(excinfo.value)) < 250


def test_network_errors_raise_dofa_error():
    session = StubSession({"/matchs": requests.ConnectionError("unreachable")})
    client = DofaClient(session=session)
    with pytest.raises(DofaError) as excinfo:
        client.fetch_matches(CompetitionRef("1", "1", "1"))
    assert excinfo.value.status_code is None


def test_find_competition_by_level(stub_session):
    client = DofaClient(session=stub_session)
    competition = client.find_competition_by_level("U13 Niveau A", cg_no=89)
    assert competition["cp_no"] == 439637
    _, params, _ = stub_session.calls[0]
    assert ("cg_no", 89) in params
    assert ("groups[]", "compet_light") in params


def test_find_competition_by_level_without_candidates():
    session = StubSession({"/compets": StubResponse([[], [], [], [{"cp_no": 5, "name": "SENIORS D1"}]])})
    client = DofaClient(session=session)
    with pytest.raises(CompetitionLookupError):
        client.find_competition_by_level("U11C")
    with pytest.raises(CompetitionLookupError):
        client.find_competition_by_level("n'importe")


def test_resolve_by_level(stub_session):
    client = DofaClient(session=stub_session)
    ref = client.resolve(level="U13A", phase=1, poule="D")
    assert ref == CompetitionRef(competition_id="439637", phase="1", poule="4")


def test_resolve_requires_url_or_level():
    with pytest.raises(CompetitionLookupError):
        DofaClient(session=StubSession({})).resolve(level="U13A")
