"""FastAPI application exposing the league table and manual results."""
from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from .config import AppConfig, load_config
from .dofa import CompetitionLookupError, DofaClient, DofaError
from .league import LeagueSession
from .overrides import ManualMatchError


CONFIG_ENV_VAR = "CLASSEMENT_CONFIG"


def _load_app_config() -> AppConfig:
    path = os.environ.get(CONFIG_ENV_VAR)
    return load_config(Path(path)) if path else AppConfig()


CONFIG = _load_app_config()
SESSION = LeagueSession(CONFIG.engine)
# The session is not thread-safe; endpoints run in a threadpool.
SESSION_LOCK = threading.Lock()
_CLIENT: Optional[DofaClient] = None

app = FastAPI(title="Classement API")

ScoreValue = Union[int, str, None]


class ManualMatchIn(BaseModel):
    home: str = ""
    away: str = ""
    date: str = ""
    home_score: ScoreValue = None
    away_score: ScoreValue = None
    time: Optional[str] = None


class ManualMatchUpdate(BaseModel):
    home: Optional[str] = None
    away: Optional[str] = None
    date: Optional[str] = None
    home_score: ScoreValue = None
    away_score: ScoreValue = None
    time: Optional[str] = None


class ScoreIn(BaseModel):
    home_score: ScoreValue = None
    away_score: ScoreValue = None


def get_client() -> DofaClient:
    global _CLIENT
    if _CLIENT is None:
        _CLIENT = DofaClient(CONFIG.api.base_url, timeout=CONFIG.api.timeout)
    return _CLIENT


@app.get("/api/standings")
def get_standings(
    url: Optional[str] = Query(None, description="Lien de la page compétition."),
    level: Optional[str] = Query(None, description="Niveau, p. ex. U13A."),
    phase: Optional[int] = Query(None, ge=1),
    poule: Optional[str] = Query(None, description="Numéro ou lettre de poule."),
    cg_no: Optional[int] = Query(None, description="Numéro du centre de gestion."),
) -> Dict[str, Any]:
    """Load a competition, reset manual results and return the computed view."""

    client = get_client()
    try:
        ref = client.resolve(
            url=url,
            level=level,
            phase=phase,
            poule=poule,
            cg_no=cg_no or CONFIG.api.cg_no,
        )
        matches = client.fetch_matches(ref)
    except CompetitionLookupError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except DofaError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    with SESSION_LOCK:
        SESSION.load(matches, competition=ref.key)
        payload = SESSION.view().to_payload()
    payload.update(
        {
            "source": "URL compétition" if url else f"Recherche {level}",
            "competitionId": ref.competition_id,
            "phase": ref.phase,
            "poule": ref.poule,
        }
    )
    return payload


@app.get("/api/view")
def get_view(
    results_team: Optional[str] = Query(None),
    fixtures_team: Optional[str] = Query(None),
) -> Dict[str, Any]:
    """Return the view of the loaded competition with optional team filters."""

    with SESSION_LOCK:
        view = SESSION.view(results_team=results_team, fixtures_team=fixtures_team)
        return view.to_payload()


@app.post("/api/manual-matches", status_code=201)
def add_manual_match(body: ManualMatchIn) -> Dict[str, Any]:
    with SESSION_LOCK:
        try:
            record = SESSION.add_manual(
                body.home,
                body.away,
                body.date,
                body.home_score,
                body.away_score,
                time=body.time,
            )
        except ManualMatchError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return SESSION.view().match_payload(record)


@app.put("/api/manual-matches/{handle}")
def edit_manual_match(handle: str, body: ManualMatchUpdate) -> Dict[str, Any]:
    with SESSION_LOCK:
        try:
            record = SESSION.edit_manual(
                handle,
                home=body.home,
                away=body.away,
                match_date=body.date,
                home_score=body.home_score,
                away_score=body.away_score,
                time=body.time,
            )
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Match manuel introuvable.") from exc
        except ManualMatchError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return SESSION.view().match_payload(record)


@app.post("/api/missing-results/{fixture_id}/promote", status_code=201)
def promote_missing_result(fixture_id: str, body: ScoreIn) -> Dict[str, Any]:
    with SESSION_LOCK:
        try:
            record = SESSION.promote_missing(fixture_id, body.home_score, body.away_score)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Résultat manquant introuvable.") from exc
        except ManualMatchError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return SESSION.view().match_payload(record)
