"""Resolve team names, crests and kickoff values from heterogeneous records."""
from __future__ import annotations

import logging
import re
import unicodedata
from datetime import date, datetime, tzinfo
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo

from dateutil import parser

from .config import DEFAULT_TIMEZONE, UNKNOWN_TEAM_LABEL
from .models import MatchRecord, SideDescriptor

LOGGER = logging.getLogger(__name__)

DEFAULT_TZ = ZoneInfo(DEFAULT_TIMEZONE)

# French kickoff labels look like "15H00" or "9H30".
TIME_TOKEN_PATTERN = re.compile(r"(?P<hour>\d{1,2})H(?P<minute>\d{2})")


def team_name(side: Optional[SideDescriptor], *, unknown: str = UNKNOWN_TEAM_LABEL) -> str:
    """Return the display name of ``side``.

    The first populated field wins: short name, league short name, federation
    short name, full name, club name. Without any of them the ``unknown``
    label is returned.
    """

    if side is None:
        return unknown
    club_name = side.club.name if side.club else None
    return (
        side.short_name
        or side.short_name_ligue
        or side.short_name_federation
        or side.name
        or club_name
        or unknown
    )


def team_logo(side: Optional[SideDescriptor]) -> Optional[str]:
    if side is None or side.club is None:
        return None
    return side.club.logo or None


def team_key(name: str) -> str:
    """Case- and accent-insensitive key used to compare and collate team names."""

    normalized = unicodedata.normalize("NFKD", name)
    stripped = "".join(char for char in normalized if not unicodedata.combining(char))
    return re.sub(r"\s+", " ", stripped.casefold()).strip()


def effective_date(record: MatchRecord) -> str:
    return record.date or record.initial_date or ""


def parse_time_token(value: Optional[str]) -> Optional[Tuple[int, int]]:
    """Extract ``(hour, minute)`` from a kickoff label such as ``"15H30"``.

    Labels without a token, or with an impossible clock value, yield ``None``
    so the caller keeps the date at midnight.
    """

    if not value:
        return None
    match = TIME_TOKEN_PATTERN.search(value)
    if not match:
        return None
    hour = int(match.group("hour"))
    minute = int(match.group("minute"))
    if hour > 23 or minute > 59:
        LOGGER.debug("Ignoring out-of-range kickoff label: %s", value)
        return None
    return hour, minute


def localize(value: datetime, *, tz: tzinfo = DEFAULT_TZ) -> datetime:
    """Attach ``tz`` to a naive value; aware values are converted into ``tz``."""

    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def parse_date_value(value: Optional[str], *, tz: tzinfo = DEFAULT_TZ) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = parser.isoparse(value)
    except (ValueError, OverflowError):
        try:
            parsed = parser.parse(value, dayfirst=True)
        except (ValueError, OverflowError):
            LOGGER.debug("Unparseable match date: %s", value)
            return None
    return localize(parsed, tz=tz)


def match_datetime(record: MatchRecord, *, tz: tzinfo = DEFAULT_TZ) -> Optional[datetime]:
    """Combine the effective date and the kickoff label of ``record``.

    ``None`` means the kickoff is unknown; such records sort after every dated
    one.
    """

    base = parse_date_value(effective_date(record), tz=tz)
    if base is None:
        return None
    clock = parse_time_token(record.time)
    if clock is None:
        return base
    hour, minute = clock
    return base.replace(hour=hour, minute=minute, second=0, microsecond=0)


def match_day(record: MatchRecord, *, tz: tzinfo = DEFAULT_TZ) -> Union[date, str]:
    kickoff = match_datetime(record, tz=tz)
    if kickoff is None:
        return effective_date(record)
    return kickoff.date()
