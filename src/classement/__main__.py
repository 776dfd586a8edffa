from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from dateutil import parser as date_parser

from .config import load_config
from .dofa import CompetitionLookupError, DofaClient, DofaError
from .league import LeagueSession, LeagueView
from .models import MatchRecord, parse_matches_payload
from .overrides import ManualMatchError

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Classement, résultats et calendrier d'une poule.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--matches",
        type=Path,
        help="Fichier JSON contenant les matchs (liste ou collection hydra).",
    )
    source.add_argument(
        "--url",
        help="Lien de la compétition (doit contenir id, phase et poule).",
    )
    source.add_argument(
        "--level",
        help="Niveau recherché, p. ex. 'U13A' (avec --phase et --poule).",
    )
    parser.add_argument("--phase", type=int, help="Numéro de phase pour --level.")
    parser.add_argument("--poule", help="Numéro ou lettre de poule pour --level.")
    parser.add_argument("--cg-no", type=int, default=None, help="Centre de gestion (Standard: 89).")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Fichier de configuration YAML.",
    )
    parser.add_argument(
        "--manual",
        action="append",
        default=[],
        metavar="DOMICILE;EXTERIEUR;DATE;BUTS_DOM;BUTS_EXT",
        help="Résultat saisi à la main, répétable.",
    )
    parser.add_argument("--results-team", default=None, help="Filtrer les résultats sur une équipe.")
    parser.add_argument("--fixtures-team", default=None, help="Filtrer le calendrier sur une équipe.")
    parser.add_argument(
        "--now",
        default=None,
        help="Date de référence pour les résultats manquants (ISO 8601).",
    )
    parser.add_argument("--json", action="store_true", help="Sortie au format JSON.")
    parser.add_argument("--output", type=Path, default=None, help="Écrire la sortie dans un fichier.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Journalisation détaillée.")
    return parser


def _parse_manual_entry(raw: str) -> List[str]:
    parts = [part.strip() for part in raw.split(";")]
    if len(parts) not in (5, 6):
        raise ManualMatchError(
            f"Format attendu 'Domicile;Extérieur;Date;Buts;Buts[;Heure]' : {raw}"
        )
    return parts


def _format_match(view: LeagueView, record: MatchRecord) -> str:
    payload = view.match_payload(record)
    date_label = payload["effective_date"][:10]
    if record.is_played:
        score = f"{record.home_score} - {record.away_score}"
    else:
        score = "-"
    time_label = f" {record.time}" if record.time and not record.is_played else ""
    marker = " (manuel)" if record.is_manual else ""
    return f"{date_label}{time_label}  {payload['home_team']}  {score}  {payload['away_team']}{marker}"


def render_text(view: LeagueView) -> str:
    lines: List[str] = []
    if view.title:
        lines.extend([view.title, ""])
    lines.append("Classement")
    for entry in view.to_payload()["standings"]:
        lines.append(
            "{rank:>3}  {team:<30} {played:>3} {wins:>3} {draws:>3} {losses:>3}"
            " {gf:>3}:{ga:<3} {gd:>4} {points:>4}  {form}".format(
                form=" ".join(entry["form"]), **{k: v for k, v in entry.items() if k != "form"}
            )
        )
    sections = (
        ("Résultats", view.results),
        ("Calendrier", view.fixtures),
        ("Résultats manquants", view.missing_results),
    )
    for heading, records in sections:
        lines.extend(["", heading])
        if not records:
            lines.append("  (aucun)")
        for record in records:
            lines.append(f"  {_format_match(view, record)}")
    return "\n".join(lines) + "\n"


def _load_matches(
    args: argparse.Namespace, factory: "_ClientFactory"
) -> Tuple[List[MatchRecord], str]:
    if args.matches:
        data = json.loads(args.matches.read_text(encoding="utf-8"))
        return parse_matches_payload(data), str(args.matches)
    client = factory()
    ref = client.resolve(
        url=args.url,
        level=args.level,
        phase=args.phase,
        poule=args.poule,
        cg_no=args.cg_no or factory.cg_no,
    )
    return client.fetch_matches(ref), ref.key


class _ClientFactory:
    def __init__(self, base_url: str, timeout: int, cg_no: int) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.cg_no = cg_no

    def __call__(self) -> DofaClient:
        return DofaClient(self.base_url, timeout=self.timeout)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    factory = _ClientFactory(config.api.base_url, config.api.timeout, config.api.cg_no)
    now = None
    if args.now:
        try:
            now = date_parser.isoparse(args.now)
        except ValueError:
            parser.error(f"--now: date invalide ({args.now})")
        if now.tzinfo is None:
            now = now.replace(tzinfo=config.engine.tzinfo)

    session = LeagueSession(config.engine)
    try:
        matches, competition = _load_matches(args, factory)
        session.load(matches, competition=competition)
        LOGGER.debug("Loaded %d matches from %s", len(matches), competition)
        for raw in args.manual:
            parts = _parse_manual_entry(raw)
            session.add_manual(
                parts[0],
                parts[1],
                parts[2],
                parts[3],
                parts[4],
                time=parts[5] if len(parts) == 6 else None,
            )
    except (CompetitionLookupError, DofaError, ManualMatchError) as exc:
        print(f"Erreur : {exc}", file=sys.stderr)
        return 1
    except (OSError, json.JSONDecodeError) as exc:
        print(f"Erreur : matchs illisibles ({exc})", file=sys.stderr)
        return 1

    view = session.view(
        now=now,
        results_team=args.results_team,
        fixtures_team=args.fixtures_team,
    )
    if args.json:
        output = json.dumps(view.to_payload(), ensure_ascii=False, indent=2) + "\n"
    else:
        output = render_text(view)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
