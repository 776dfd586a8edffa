from __future__ import annotations

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from classement.models import ClubDescriptor, MatchRecord, SideDescriptor

PARIS = ZoneInfo("Europe/Paris")


def build_side(name: Optional[str], logo: Optional[str] = None) -> Optional[SideDescriptor]:
    if name is None:
        return None
    club = ClubDescriptor(logo=logo) if logo else None
    return SideDescriptor(short_name=name, club=club)


def build_match(
    home: Optional[str],
    away: Optional[str],
    home_score: Optional[int] = None,
    away_score: Optional[int] = None,
    *,
    date: Optional[str] = "2024-09-14",
    time: Optional[str] = None,
    match_id: Optional[str] = None,
    home_logo: Optional[str] = None,
    away_logo: Optional[str] = None,
    status_label: Optional[str] = None,
    postponed: Optional[bool] = None,
) -> MatchRecord:
    return MatchRecord(
        id=match_id or f"{home}-{away}-{date}",
        date=date,
        time=time,
        home=build_side(home, home_logo),
        away=build_side(away, away_logo),
        home_score=home_score,
        away_score=away_score,
        status_label=status_label,
        seems_postponed=postponed,
    )


@pytest.fixture
def make_match():
    return build_match


@pytest.fixture
def now():
    return datetime(2024, 10, 1, 12, 0, tzinfo=PARIS)


HYDRA_MATCHES = {
    "hydra:member": [
        {
            "ma_no": 1,
            "date": "2024-09-07T00:00:00+00:00",
            "time": "10H00",
            "home": {"short_name": "Aigles", "club": {"logo": "https://img/aigles.png"}},
            "away": {"short_name": "Zèbres"},
            "home_score": 2,
            "away_score": 1,
            "competition": {"name": "U13 Niveau A"},
            "phase": {"number": 1},
            "poule": {"name": "POULE D"},
        },
        {
            "ma_no": 2,
            "date": "2024-09-14T00:00:00+00:00",
            "time": "14H00",
            "home": {"short_name": "Zèbres"},
            "away": {"short_name_ligue": "Étoile"},
            "home_score": None,
            "away_score": None,
        },
        {
            "ma_no": 3,
            "date": "2099-05-01T00:00:00+00:00",
            "home": {"short_name_ligue": "Étoile"},
            "away": {"short_name": "Aigles"},
        },
        {
            "ma_no": 4,
            "initial_date": "2024-09-21T00:00:00+00:00",
            "home": {"short_name": "Fantômes"},
            "away": {"short_name": "Aigles"},
            "seems_postponed": True,
            "status_label": "Reporté",
        },
    ]
}

COMPETITIONS = [
    [],
    [],
    [],
    [
        {
            "cp_no": 1,
            "name": "U15 NIVEAU B",
            "phases": [],
        },
        {
            "cp_no": 439637,
            "name": "U13 NIVEAU A",
            "phases": [
                {
                    "number": 1,
                    "groups": [
                        {"stage_number": 3, "name": "POULE C"},
                        {"stage_number": 4, "name": "POULE D"},
                    ],
                }
            ],
        },
        {"cp_no": 2, "name": "U13 A", "phases": []},
    ],
]

COMPETITION_URL = "https://escaut.fff.fr/competitions?tab=calendar&id=439637&phase=1&poule=4&type=ch"


class StubResponse:
    def __init__(self, payload=None, *, status_code: int = 200, text: str = "") -> None:
        self._payload = payload
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        return self._payload


class StubSession:
    """Answers ``get`` calls from a mapping of URL suffix to response."""

    def __init__(self, responses) -> None:
        self.responses = responses
        self.headers = {}
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        for suffix, response in self.responses.items():
            if url.endswith(suffix):
                if isinstance(response, Exception):
                    raise response
                return response
        return StubResponse(status_code=404, text="not found")


@pytest.fixture
def stub_session():
    return StubSession(
        {
            "/compets/439637/phases/1/poules/4/matchs": StubResponse(HYDRA_MATCHES),
            "/compets": StubResponse(COMPETITIONS),
        }
    )
