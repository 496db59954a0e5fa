"""
Affiche le compte à rebours avant une cérémonie.

Outil de diagnostic: permet de vérifier l'instant cible calculé pour une date, une heure locale et
un fuseau IANA donnés, sans passer par la base de données.

Usage:
    python -m wedding_backend.scripts.wedding_countdown
        --date 2025-06-15 --time "4:00 PM" --tz Asia/Tashkent
"""

from __future__ import annotations

import argparse
import sys
from datetime import UTC, datetime

from wedding_backend.core.logging import setup_logging
from wedding_backend.domain.countdown import (
    DEFAULT_TIMEZONE,
    DEFAULT_WEDDING_TIME,
    countdown_until,
    target_instant,
)
from wedding_backend.domain.errors import InvalidInputError

EXIT_INVALID_INPUT = 2


def _parse_now(raw: str | None) -> datetime:
    if not raw:
        return datetime.now(UTC)
    now = datetime.fromisoformat(raw)
    return now if now.tzinfo else now.replace(tzinfo=UTC)


def main(argv: list[str] | None = None) -> int:
    """Point d'entrée: imprime l'instant cible et le temps restant."""
    parser = argparse.ArgumentParser(description="Wedding countdown")
    parser.add_argument("--date", required=True, help="Wedding date (YYYY-MM-DD)")
    parser.add_argument("--time", default=DEFAULT_WEDDING_TIME, help="Local ceremony time")
    parser.add_argument("--tz", default=DEFAULT_TIMEZONE, help="IANA timezone")
    parser.add_argument("--now", default=None, help="Evaluation instant (ISO, UTC if naive)")
    args = parser.parse_args(argv)

    try:
        now = _parse_now(args.now)
        target = target_instant(args.date, args.time, args.tz)
        result = countdown_until(target, now)
    except (InvalidInputError, ValueError) as err:
        print(f"invalid input: {err}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    print(f"target={target.isoformat()}")
    print(
        f"days={result.days} hours={result.hours} "
        f"minutes={result.minutes} seconds={result.seconds}"
    )
    return 0


if __name__ == "__main__":  # pragma: no cover - script entry
    setup_logging("WARNING", stream=sys.stderr)
    sys.exit(main())
