"""Compte à rebours avant le mariage, sensible au fuseau horaire.

Le calcul combine la date et l'heure locale de la cérémonie, les interprète dans le fuseau IANA du
mariage (avec ses propres règles d'heure d'été) puis décompose la durée restante en jours, heures,
minutes et secondes entières.

Politique d'erreurs:
- heure ou fuseau mal formés: repli sur une valeur par défaut, avertissement journalisé;
- date mal formée ou `now` naïf: `InvalidInputError` remontée à l'appelant.
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog
from pydantic import BaseModel, ConfigDict, Field

from wedding_backend.domain.errors import InvalidInputError, InvalidWeddingDateError

log = structlog.get_logger(__name__)

DEFAULT_TIMEZONE = "Asia/Tashkent"
DEFAULT_WEDDING_TIME = "4:00 PM"
FALLBACK_TIME = time(16, 0)

_SECONDS_PER_DAY = 86400
_SECONDS_PER_HOUR = 3600
_SECONDS_PER_MINUTE = 60

_TIME_24H_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")
_TIME_12H_RE = re.compile(r"^(\d{1,2})(?::(\d{2}))?(?::\d{2})?\s*([ap])\.?\s*m\.?$", re.IGNORECASE)


class WeddingSchedule(BaseModel):
    """Date, heure locale et fuseau d'une cérémonie."""

    model_config = ConfigDict(frozen=True)

    wedding_date: date
    time_of_day: str = DEFAULT_WEDDING_TIME
    timezone: str = DEFAULT_TIMEZONE


class CountdownResult(BaseModel):
    """Durée restante, arrondie à l'unité inférieure. Tout à zéro une fois l'instant passé."""

    model_config = ConfigDict(frozen=True)

    days: int = Field(0, ge=0)
    hours: int = Field(0, ge=0)
    minutes: int = Field(0, ge=0)
    seconds: int = Field(0, ge=0)

    @classmethod
    def zero(cls) -> CountdownResult:
        return cls()

    @property
    def is_over(self) -> bool:
        return not (self.days or self.hours or self.minutes or self.seconds)


def _parse_clock(text: str) -> time | None:
    """Parse `HH:MM` ou `H:MM AM/PM`; None si le texte n'est pas reconnu."""
    raw = text.strip()
    m = _TIME_24H_RE.match(raw)
    if m:
        hour, minute = int(m.group(1)), int(m.group(2))
        if hour <= 23 and minute <= 59:
            return time(hour, minute)
        return None
    m = _TIME_12H_RE.match(raw)
    if m:
        hour, minute = int(m.group(1)), int(m.group(2) or 0)
        if not 1 <= hour <= 12 or minute > 59:
            return None
        hour %= 12
        if m.group(3).lower() == "p":
            hour += 12
        return time(hour, minute)
    return None


def parse_time_of_day(text: str | None, default: time = FALLBACK_TIME) -> time:
    """Normalise une heure libre en heure:minute.

    Accepte les formes 24 h (`16:00`, `09:30:00`) et 12 h (`4:00 PM`, `11 am`, `4:30 p.m.`).
    Un texte vide ou illisible retombe sur `default` sans lever d'exception.
    """
    if not text or not isinstance(text, str):
        return default
    parsed = _parse_clock(text)
    if parsed is None:
        log.warning("wedding_time_unparseable", value=text, fallback=default.isoformat("minutes"))
        return default
    return parsed


def resolve_timezone(name: str | None, default: str = DEFAULT_TIMEZONE) -> ZoneInfo:
    """Retourne la zone IANA `name`, ou la zone par défaut si elle est inconnue.

    Un nom de région seul (`Asia`) ou trop long lève `OSError` côté zoneinfo: même repli.
    """
    if name and isinstance(name, str):
        try:
            return ZoneInfo(name.strip())
        except (ZoneInfoNotFoundError, ValueError, OSError):
            log.warning("wedding_timezone_unknown", value=name, fallback=default)
    return ZoneInfo(default)


def coerce_date(value: object) -> date:
    """Convertit la date du mariage (date, datetime ou chaîne ISO) en `date`.

    Raises:
        InvalidWeddingDateError: si la valeur n'est pas une date calendaire valide.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        try:
            return date.fromisoformat(raw)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(raw).date()
        except ValueError as err:
            raise InvalidWeddingDateError(f"invalid_wedding_date:{value}") from err
    raise InvalidWeddingDateError(f"invalid_wedding_date:{value!r}")


def target_instant(
    wedding_date: object,
    time_of_day: str | None,
    timezone: str | None,
    *,
    default_timezone: str = DEFAULT_TIMEZONE,
    default_time: time = FALLBACK_TIME,
) -> datetime:
    """Instant absolu (UTC) de la cérémonie.

    L'heure murale est interprétée avec le décalage du fuseau du mariage à la date visée; une heure
    ambiguë ou inexistante (changement d'heure) suit la sémantique `fold=0` de zoneinfo.
    """
    day = coerce_date(wedding_date)
    clock = parse_time_of_day(time_of_day, default=default_time)
    zone = resolve_timezone(timezone, default=default_timezone)
    return datetime.combine(day, clock, tzinfo=zone).astimezone(UTC)


def compute_countdown(
    wedding_date: object,
    time_of_day: str | None,
    timezone: str | None,
    now: datetime,
    *,
    default_timezone: str = DEFAULT_TIMEZONE,
    default_time: time = FALLBACK_TIME,
) -> CountdownResult:
    """Calcule le temps restant entre `now` et la cérémonie.

    Args:
        wedding_date: date calendaire du mariage.
        time_of_day: heure locale libre (`16:00`, `4:00 PM`).
        timezone: identifiant IANA du lieu de la cérémonie.
        now: instant d'évaluation, obligatoirement avec fuseau.

    Returns:
        CountdownResult: jours/heures/minutes/secondes restants, tout à zéro si l'instant est passé.

    Raises:
        InvalidWeddingDateError: date mal formée.
        InvalidInputError: `now` sans information de fuseau.
    """
    _require_aware(now)
    target = target_instant(
        wedding_date,
        time_of_day,
        timezone,
        default_timezone=default_timezone,
        default_time=default_time,
    )
    return countdown_until(target, now)


def countdown_until(target: datetime, now: datetime) -> CountdownResult:
    """Décompose la durée entre `now` et un instant cible déjà résolu."""
    _require_aware(now)
    remaining = target - now
    if remaining <= timedelta(0):
        return CountdownResult.zero()
    total = remaining // timedelta(seconds=1)
    days, rest = divmod(total, _SECONDS_PER_DAY)
    hours, rest = divmod(rest, _SECONDS_PER_HOUR)
    minutes, seconds = divmod(rest, _SECONDS_PER_MINUTE)
    return CountdownResult(days=days, hours=hours, minutes=minutes, seconds=seconds)


def _require_aware(now: datetime) -> None:
    if now.tzinfo is None or now.utcoffset() is None:
        raise InvalidInputError("naive_now")


def countdown_for(
    schedule: WeddingSchedule,
    now: datetime,
    *,
    default_timezone: str = DEFAULT_TIMEZONE,
    default_time: time = FALLBACK_TIME,
) -> CountdownResult:
    """Raccourci de `compute_countdown` pour un `WeddingSchedule`."""
    return compute_countdown(
        schedule.wedding_date,
        schedule.time_of_day,
        schedule.timezone,
        now,
        default_timezone=default_timezone,
        default_time=default_time,
    )
