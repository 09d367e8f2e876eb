"""Heure civile locale du service (America/Sao_Paulo, UTC-3 fixe).

Le Bresil n'applique plus l'heure d'ete depuis 2019 : un decalage fixe
donne la meme date civile que le fuseau officiel.
"""

from datetime import date, datetime, time, timedelta, timezone

LOCAL_TZ = timezone(timedelta(hours=-3), "America/Sao_Paulo")

# Nom IANA transmis a Google Calendar avec chaque evenement
CALENDAR_TIMEZONE = "America/Sao_Paulo"


def local_now() -> datetime:
    """Instant courant, exprime en heure locale."""
    return datetime.now(LOCAL_TZ)


def to_local(value: datetime) -> datetime:
    """Convertit un datetime en heure locale.

    Un datetime naif est considere comme deja exprime en heure locale.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=LOCAL_TZ)
    return value.astimezone(LOCAL_TZ)


def local_date(value: date | datetime) -> date:
    """Date civile locale d'une date ou d'un instant."""
    if isinstance(value, datetime):
        return to_local(value).date()
    return value


def at_hour(day: date, hour: int, minute: int = 0) -> datetime:
    """Instant local ``day`` a ``hour:minute``."""
    return datetime.combine(day, time(hour, minute), tzinfo=LOCAL_TZ)


def isoformat(value: datetime) -> str:
    """Format ISO a la seconde avec decalage explicite, ex. 2026-02-12T15:00:00-03:00."""
    return to_local(value).isoformat(timespec="seconds")


def parse_iso(raw: str) -> datetime:
    """Parse un horodatage ISO 8601 (suffixe ``Z`` accepte) en datetime local.

    Raises:
        ValueError: Si la chaine n'est pas un horodatage ISO valide.
    """
    return to_local(datetime.fromisoformat(raw.strip().replace("Z", "+00:00")))
