"""Typed records for competition matches and standings rows."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

LOGGER = logging.getLogger(__name__)

# Payload keys that are kept aside for the table title.
EXTRA_PAYLOAD_KEYS = ("competition", "phase", "poule")


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_score(value: Any) -> Optional[int]:
    # ``True`` is an int in Python but never a score.
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if value < 0:
        LOGGER.debug("Ignoring negative score value: %s", value)
        return None
    return value


@dataclass(slots=True)
class ClubDescriptor:
    name: Optional[str] = None
    logo: Optional[str] = None

    @classmethod
    def from_payload(cls, value: Any) -> Optional["ClubDescriptor"]:
        if not isinstance(value, Mapping):
            return None
        return cls(name=_clean_text(value.get("name")), logo=_clean_text(value.get("logo")))

    def to_payload(self) -> Dict[str, Optional[str]]:
        return {"name": self.name, "logo": self.logo}


@dataclass(slots=True)
class SideDescriptor:
    """One competing team as it appears on a match record."""

    short_name: Optional[str] = None
    short_name_ligue: Optional[str] = None
    short_name_federation: Optional[str] = None
    name: Optional[str] = None
    club: Optional[ClubDescriptor] = None

    @classmethod
    def from_payload(cls, value: Any) -> Optional["SideDescriptor"]:
        if not isinstance(value, Mapping):
            return None
        return cls(
            short_name=_clean_text(value.get("short_name")),
            short_name_ligue=_clean_text(value.get("short_name_ligue")),
            short_name_federation=_clean_text(value.get("short_name_federation")),
            name=_clean_text(value.get("name")),
            club=ClubDescriptor.from_payload(value.get("club")),
        )

    @classmethod
    def from_name(cls, name: str, logo: Optional[str] = None) -> "SideDescriptor":
        club = ClubDescriptor(logo=logo) if logo else None
        return cls(short_name=name.strip(), club=club)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "short_name": self.short_name,
            "short_name_ligue": self.short_name_ligue,
            "short_name_federation": self.short_name_federation,
            "name": self.name,
            "club": self.club.to_payload() if self.club else None,
        }


@dataclass(slots=True, eq=False)
class MatchRecord:
    """A fixture or a result.

    Records compare by identity: two manual entries for the same pairing and
    day are still distinct records.
    """

    id: str
    date: Optional[str] = None
    initial_date: Optional[str] = None
    time: Optional[str] = None
    home: Optional[SideDescriptor] = None
    away: Optional[SideDescriptor] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    status_label: Optional[str] = None
    seems_postponed: Optional[bool] = None
    is_manual: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_played(self) -> bool:
        return isinstance(self.home_score, int) and isinstance(self.away_score, int)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "MatchRecord":
        identifier = payload.get("ma_no") or payload.get("id") or payload.get("@id") or ""
        postponed = payload.get("seems_postponed")
        return cls(
            id=str(identifier),
            date=_clean_text(payload.get("date")),
            initial_date=_clean_text(payload.get("initial_date")),
            time=_clean_text(payload.get("time")),
            home=SideDescriptor.from_payload(payload.get("home")),
            away=SideDescriptor.from_payload(payload.get("away")),
            home_score=_coerce_score(payload.get("home_score")),
            away_score=_coerce_score(payload.get("away_score")),
            status_label=_clean_text(payload.get("status_label")),
            seems_postponed=postponed if isinstance(postponed, bool) else None,
            is_manual=payload.get("is_manual") is True,
            extra={key: payload[key] for key in EXTRA_PAYLOAD_KEYS if key in payload},
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "initial_date": self.initial_date,
            "time": self.time,
            "home": self.home.to_payload() if self.home else None,
            "away": self.away.to_payload() if self.away else None,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "status_label": self.status_label,
            "seems_postponed": self.seems_postponed,
            "is_manual": self.is_manual,
        }


@dataclass(slots=True)
class StandingsRow:
    team: str
    logo: Optional[str] = None
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    gf: int = 0
    ga: int = 0
    points: int = 0
    rank: int = 0

    @property
    def gd(self) -> int:
        return self.gf - self.ga

    def to_payload(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "team": self.team,
            "logo": self.logo,
            "played": self.played,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "gf": self.gf,
            "ga": self.ga,
            "gd": self.gd,
            "points": self.points,
        }


def parse_matches_payload(data: Any) -> List[MatchRecord]:
    """Build records from a list of match objects or a hydra collection."""

    if isinstance(data, Mapping):
        items = data.get("hydra:member")
        if items is None:
            items = data.get("matches")
    else:
        items = data
    if not isinstance(items, list):
        return []

    records: List[MatchRecord] = []
    for item in items:
        if not isinstance(item, Mapping):
            LOGGER.debug("Skipping non-mapping match entry: %r", item)
            continue
        records.append(MatchRecord.from_payload(item))
    return records
