"""Session-scoped manual results layered over the server data."""
from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, tzinfo
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .classify import fixture_identity
from .config import UNKNOWN_TEAM_LABEL
from .models import MatchRecord, SideDescriptor
from .normalize import DEFAULT_TZ, effective_date, parse_date_value, team_key, team_logo, team_name

LOGGER = logging.getLogger(__name__)


class ManualMatchError(ValueError):
    """Rejected manual match input; the message is shown to the user."""


def _validate_team(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ManualMatchError(message)
    return value.strip()


def _validate_score(value: Any, side_label: str) -> int:
    message = f"Le score {side_label} doit être un nombre entier positif ou nul."
    if isinstance(value, bool):
        raise ManualMatchError(message)
    if isinstance(value, int):
        score = value
    elif isinstance(value, str) and value.strip().isdecimal():
        try:
            score = int(value.strip())
        except ValueError as exc:
            raise ManualMatchError(message) from exc
    else:
        raise ManualMatchError(message)
    if score < 0:
        raise ManualMatchError(message)
    return score


def _validate_date(value: Any, *, tz: tzinfo) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str) or not value.strip():
        raise ManualMatchError("Merci de renseigner la date du match.")
    text = value.strip()
    if parse_date_value(text, tz=tz) is None:
        raise ManualMatchError(f"Date de match invalide : {text}")
    return text


class ManualOverrideSet:
    """Manual match records entered during one session for one competition.

    Records get a generated hex ``id`` which serves as the handle for edits.
    Not thread-safe; callers serialize mutations.
    """

    def __init__(
        self,
        *,
        logos: Optional[Mapping[str, Optional[str]]] = None,
        tz: tzinfo = DEFAULT_TZ,
        unknown: str = UNKNOWN_TEAM_LABEL,
    ) -> None:
        self._records: List[MatchRecord] = []
        self.logos: Dict[str, Optional[str]] = dict(logos or {})
        self.tz = tz
        self.unknown = unknown

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MatchRecord]:
        return iter(self._records)

    @property
    def records(self) -> Tuple[MatchRecord, ...]:
        return tuple(self._records)

    def clear(self) -> None:
        if self._records:
            LOGGER.info("Discarding %d manual matches", len(self._records))
        self._records.clear()

    def get(self, handle: str) -> MatchRecord:
        for record in self._records:
            if record.id == handle:
                return record
        raise KeyError(handle)

    def _side(self, name: str, logo: Optional[str]) -> SideDescriptor:
        return SideDescriptor.from_name(name, logo or self.logos.get(name))

    def _validate(
        self, home: Any, away: Any, match_date: Any, home_score: Any, away_score: Any
    ) -> Tuple[str, str, str, int, int]:
        home_name = _validate_team(home, "Merci de choisir l'équipe à domicile.")
        away_name = _validate_team(away, "Merci de choisir l'équipe à l'extérieur.")
        if team_key(home_name) == team_key(away_name):
            raise ManualMatchError("Les deux équipes doivent être différentes.")
        date_value = _validate_date(match_date, tz=self.tz)
        return (
            home_name,
            away_name,
            date_value,
            _validate_score(home_score, "à domicile"),
            _validate_score(away_score, "à l'extérieur"),
        )

    def add(
        self,
        home: Any,
        away: Any,
        match_date: Any,
        home_score: Any,
        away_score: Any,
        *,
        time: Optional[str] = None,
        home_logo: Optional[str] = None,
        away_logo: Optional[str] = None,
    ) -> MatchRecord:
        home_name, away_name, date_value, home_goals, away_goals = self._validate(
            home, away, match_date, home_score, away_score
        )
        record = MatchRecord(
            id=uuid.uuid4().hex,
            date=date_value,
            time=(time or "").strip() or None,
            home=self._side(home_name, home_logo),
            away=self._side(away_name, away_logo),
            home_score=home_goals,
            away_score=away_goals,
            is_manual=True,
        )
        self._records.append(record)
        LOGGER.info(
            "Added manual result %s %d-%d %s (%s)",
            home_name,
            home_goals,
            away_goals,
            away_name,
            date_value,
        )
        return record

    def edit(
        self,
        handle: str,
        *,
        home: Optional[str] = None,
        away: Optional[str] = None,
        match_date: Any = None,
        home_score: Any = None,
        away_score: Any = None,
        time: Optional[str] = None,
    ) -> MatchRecord:
        """Update the record behind ``handle`` in place.

        Omitted fields keep their current value. Validation runs on the
        resulting values and leaves the record untouched on failure.
        """

        record = self.get(handle)
        current_home = team_name(record.home, unknown=self.unknown)
        current_away = team_name(record.away, unknown=self.unknown)
        home_name, away_name, date_value, home_goals, away_goals = self._validate(
            current_home if home is None else home,
            current_away if away is None else away,
            record.date if match_date is None else match_date,
            record.home_score if home_score is None else home_score,
            record.away_score if away_score is None else away_score,
        )

        if home_name != current_home:
            record.home = self._side(home_name, None)
        if away_name != current_away:
            record.away = self._side(away_name, None)
        record.date = date_value
        record.home_score = home_goals
        record.away_score = away_goals
        if time is not None:
            record.time = time.strip() or None
        LOGGER.info("Edited manual result %s", handle)
        return record

    def promote(self, fixture: MatchRecord, home_score: Any, away_score: Any) -> MatchRecord:
        """Record a score for a fixture that is missing its result."""

        return self.add(
            team_name(fixture.home, unknown=self.unknown),
            team_name(fixture.away, unknown=self.unknown),
            effective_date(fixture),
            home_score,
            away_score,
            time=fixture.time,
            home_logo=team_logo(fixture.home),
            away_logo=team_logo(fixture.away),
        )


def merge_matches(
    server: Iterable[MatchRecord],
    manual: Iterable[MatchRecord],
    *,
    tz: tzinfo = DEFAULT_TZ,
    unknown: str = UNKNOWN_TEAM_LABEL,
) -> List[MatchRecord]:
    """Server records followed by manual ones.

    A server record with the same pairing and day as a manual record is
    dropped in favour of the manual one.
    """

    manual_records = list(manual)
    covered = {fixture_identity(record, tz=tz, unknown=unknown) for record in manual_records}
    merged = [
        record
        for record in server
        if fixture_identity(record, tz=tz, unknown=unknown) not in covered
    ]
    merged.extend(manual_records)
    return merged
