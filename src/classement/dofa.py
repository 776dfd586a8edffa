"""Helper utilities to talk to the FFF DOFA competition API."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import parse_qs, urlparse

import requests

from .config import DEFAULT_API_BASE_URL, DEFAULT_CG_NO
from .models import MatchRecord, parse_matches_payload

LOGGER = logging.getLogger(__name__)


class CompetitionLookupError(ValueError):
    """The competition could not be resolved from the user's input."""


class DofaError(RuntimeError):
    """The DOFA API was unreachable or answered with an error."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class CompetitionRef:
    competition_id: str
    phase: str
    poule: str

    @property
    def key(self) -> str:
        return f"{self.competition_id}/{self.phase}/{self.poule}"


def _normalize_spaces(value: Any) -> str:
    return re.sub(r"\s+", " ", str(value or "")).strip()


def parse_competition_url(url: str) -> CompetitionRef:
    """Read ``id``, ``phase`` and ``poule`` from a competition page link."""

    query = parse_qs(urlparse(url.strip()).query)

    def _first(name: str) -> str:
        values = query.get(name) or [""]
        return values[0].strip()

    competition_id, phase, poule = _first("id"), _first("phase"), _first("poule")
    if not competition_id or not phase or not poule:
        raise CompetitionLookupError("Le lien doit contenir id, phase et poule.")
    return CompetitionRef(competition_id=competition_id, phase=phase, poule=poule)


def parse_level_input(value: str) -> Optional[Tuple[str, str]]:
    """Return ``(age, letter)`` for inputs such as ``"U13A"`` or ``"U13 Niveau A"``."""

    raw = _normalize_spaces(value).upper()
    compact = raw.replace(" ", "")

    for pattern in (r"^(U\d{2})([A-Z])$", r"^(U\d{2})NIVEAU([A-Z])$"):
        match = re.match(pattern, compact)
        if match:
            return match.group(1), match.group(2)

    match = re.search(r"(U\d{2})\s*(?:NIVEAU\s*)?([A-Z])\b", raw)
    if match:
        return match.group(1), match.group(2)
    return None


def parse_poule_input(value: str) -> Optional[Tuple[str, Any]]:
    raw = _normalize_spaces(value).upper()
    if raw.isdigit():
        return "number", int(raw)
    match = re.search(r"\b([A-Z])$", raw) or re.search(r"([A-Z])", raw)
    if match:
        return "letter", match.group(1)
    return None


def score_competition_name(name: str, age: str, letter: str) -> int:
    upper = name.upper()
    score = 0
    if re.search(rf"{age}\s*(?:NIVEAU\s*)?{letter}\b", upper):
        score += 2
    if "NIVEAU" in upper:
        score += 1
    if f"{age} NIVEAU {letter}" in upper:
        score += 2
    return score


def resolve_phase_and_poule(
    competition: Mapping[str, Any], phase_number: int, poule_input: str
) -> Tuple[Mapping[str, Any], Mapping[str, Any]]:
    phases = competition.get("phases") or []
    phase = next(
        (item for item in phases if _as_int(item.get("number")) == phase_number),
        None,
    )
    if phase is None:
        raise CompetitionLookupError(f"Phase {phase_number} introuvable pour cette compétition.")

    parsed = parse_poule_input(poule_input)
    if parsed is None:
        raise CompetitionLookupError("La poule doit être un numéro ou une lettre (ex: D).")

    kind, value = parsed
    groups = phase.get("groups") or []
    if kind == "number":
        group = next((item for item in groups if _as_int(item.get("stage_number")) == value), None)
    else:
        target = f"POULE {value}"
        group = next(
            (item for item in groups if target in str(item.get("name") or "").upper()),
            None,
        )
    if group is None:
        raise CompetitionLookupError(
            f"Poule {poule_input} introuvable pour la phase {phase_number}."
        )
    return phase, group


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class DofaClient:
    """Minimal client for the DOFA competition endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        *,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": "classement/1.0",
                "Accept": "application/json",
            }
        )

    def _request(self, path: str, params: Optional[Any] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            LOGGER.error("API request failed: %s", exc)
            raise DofaError(f"Erreur réseau : {exc}") from exc
        if not response.ok:
            LOGGER.error("API request failed: %s %s", response.status_code, url)
            raise DofaError(
                f"Erreur API ({response.status_code}): {response.text[:200]}",
                status_code=response.status_code,
            )
        return response.json()

    def fetch_matches(self, ref: CompetitionRef) -> List[MatchRecord]:
        path = f"/compets/{ref.competition_id}/phases/{ref.phase}/poules/{ref.poule}/matchs"
        payload = self._request(path)
        matches = parse_matches_payload(payload)
        LOGGER.debug("Fetched %d matches for %s", len(matches), ref.key)
        return matches

    def fetch_competitions(self, cg_no: int = DEFAULT_CG_NO) -> List[Dict[str, Any]]:
        params = [
            ("cg_no", cg_no),
            ("competition_type", "CH"),
            ("groups[]", "compet_light"),
        ]
        data = self._request("/compets", params=params)
        if isinstance(data, list) and len(data) > 3 and isinstance(data[3], list):
            return data[3]
        if isinstance(data, Mapping) and isinstance(data.get("hydra:member"), list):
            return data["hydra:member"]
        return []

    def find_competition_by_level(self, level: str, cg_no: int = DEFAULT_CG_NO) -> Dict[str, Any]:
        parsed = parse_level_input(level)
        if parsed is None:
            raise CompetitionLookupError(
                "Le niveau doit ressembler à 'U13A' ou 'U13 Niveau A'."
            )
        age, letter = parsed
        candidates = [
            (score_competition_name(str(comp.get("name") or ""), age, letter), comp)
            for comp in self.fetch_competitions(cg_no)
        ]
        candidates = [item for item in candidates if item[0] > 0]
        if not candidates:
            raise CompetitionLookupError(f"Aucune compétition trouvée pour {age} Niveau {letter}.")
        candidates.sort(key=lambda item: (-item[0], str(item[1].get("name") or "").casefold()))
        return candidates[0][1]

    def resolve(
        self,
        *,
        url: Optional[str] = None,
        level: Optional[str] = None,
        phase: Optional[int] = None,
        poule: Optional[str] = None,
        cg_no: int = DEFAULT_CG_NO,
    ) -> CompetitionRef:
        """Resolve either a competition link or a level/phase/poule triple."""

        if url:
            return parse_competition_url(url)
        if level and phase and poule:
            competition = self.find_competition_by_level(level, cg_no)
            phase_item, group = resolve_phase_and_poule(competition, int(phase), poule)
            return CompetitionRef(
                competition_id=str(competition.get("cp_no", "")),
                phase=str(phase_item.get("number", "")),
                poule=str(group.get("stage_number", "")),
            )
        raise CompetitionLookupError("Fournis soit une URL, soit niveau + phase + poule.")
