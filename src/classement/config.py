"""Configuration helpers for the classement toolkit."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

import yaml

DEFAULT_TIMEZONE = "Europe/Paris"
DEFAULT_API_BASE_URL = "https://api-dofa.fff.fr/api"
DEFAULT_CG_NO = 89  # District Escaut
UNKNOWN_TEAM_LABEL = "Équipe inconnue"
ALL_TEAMS_LABEL = "Toutes"
POSTPONED_TOKENS: Sequence[str] = ("report",)
FORM_LENGTH = 5


@dataclass(slots=True)
class EngineConfig:
    """Settings of the standings and reconciliation engine."""

    timezone: str = DEFAULT_TIMEZONE
    postponed_tokens: Sequence[str] = POSTPONED_TOKENS
    form_length: int = FORM_LENGTH
    unknown_team_label: str = UNKNOWN_TEAM_LABEL
    all_teams_label: str = ALL_TEAMS_LABEL
    include_unplayed_teams: bool = True

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass(slots=True)
class ApiConfig:
    """Settings required to talk to the DOFA competition API."""

    base_url: str = DEFAULT_API_BASE_URL
    cg_no: int = DEFAULT_CG_NO
    timeout: int = 30


@dataclass(slots=True)
class AppConfig:
    """Root configuration model."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    api: ApiConfig = field(default_factory=ApiConfig)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "AppConfig":
        engine = EngineConfig()
        engine_section = mapping.get("engine")
        if isinstance(engine_section, Mapping):
            timezone = str(engine_section.get("timezone", "") or "").strip()
            if timezone:
                engine.timezone = timezone
            tokens_value = engine_section.get("postponed_tokens")
            if isinstance(tokens_value, Sequence) and not isinstance(tokens_value, (str, bytes)):
                tokens = tuple(str(token).strip().lower() for token in tokens_value if str(token).strip())
                if tokens:
                    engine.postponed_tokens = tokens
            engine.form_length = _coerce_positive_int(
                engine_section.get("form_length"), FORM_LENGTH
            )
            unknown_label = str(engine_section.get("unknown_team_label", "") or "").strip()
            if unknown_label:
                engine.unknown_team_label = unknown_label
            all_label = str(engine_section.get("all_teams_label", "") or "").strip()
            if all_label:
                engine.all_teams_label = all_label
            include_unplayed = engine_section.get("include_unplayed_teams")
            if isinstance(include_unplayed, bool):
                engine.include_unplayed_teams = include_unplayed

        api = ApiConfig()
        api_section = mapping.get("api")
        if isinstance(api_section, Mapping):
            base_url = str(api_section.get("base_url", "") or "").strip()
            if base_url:
                api.base_url = base_url.rstrip("/")
            api.cg_no = _coerce_positive_int(api_section.get("cg_no"), DEFAULT_CG_NO)
            api.timeout = _coerce_positive_int(api_section.get("timeout"), 30)

        return cls(engine=engine, api=api)


def _coerce_positive_int(value: object, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load a configuration file from YAML, or the defaults without a path."""

    if path is None:
        return AppConfig()
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        raise ValueError("Configuration file must contain a mapping at the root.")
    return AppConfig.from_mapping(data)


DEFAULT_CONFIG = AppConfig()
