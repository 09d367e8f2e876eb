"""Calendrier des jours bloques (feriados) -- aucune vistoria ces jours-la.

La liste est statique pour un deploiement : feriados nacionais, le
feriado estadual du Rio Grande do Sul (Revolucao Farroupilha) et les
dates supplementaires de la variable BLOCKED_DATES.
"""

import logging
from datetime import date, datetime, timedelta

from app.errors import ConfigurationError
from app.services.local_time import local_date

logger = logging.getLogger(__name__)

# Annees couvertes par la liste statique
HOLIDAY_YEARS = range(2025, 2031)

# (mois, jour) des feriados a date fixe
_FIXED_HOLIDAYS = (
    (1, 1),  # Confraternizacao Universal
    (4, 21),  # Tiradentes
    (5, 1),  # Dia do Trabalho
    (9, 7),  # Independencia
    (9, 20),  # Revolucao Farroupilha (RS)
    (10, 12),  # Nossa Senhora Aparecida
    (11, 2),  # Finados
    (11, 15),  # Proclamacao da Republica
    (11, 20),  # Consciencia Negra (national depuis 2024)
    (12, 25),  # Natal
)

# Decalages (jours) par rapport a Paques
_EASTER_OFFSETS = (
    -48,  # Carnaval (lundi)
    -47,  # Carnaval (mardi)
    -2,  # Sexta-feira Santa
    60,  # Corpus Christi
)


def easter_sunday(year: int) -> date:
    """Dimanche de Paques (calendrier gregorien, algorithme de Meeus)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7  # noqa: E741
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def holidays_for_year(year: int) -> set[date]:
    """Feriados (nationaux + RS) d'une annee."""
    days = {date(year, month, day) for month, day in _FIXED_HOLIDAYS}
    easter = easter_sunday(year)
    days.update(easter + timedelta(days=offset) for offset in _EASTER_OFFSETS)
    return days


HOLIDAYS: frozenset[date] = frozenset(
    day for year in HOLIDAY_YEARS for day in holidays_for_year(year)
)


def parse_extra_dates(raw: str | None) -> set[date]:
    """Parse une liste de dates ISO separees par des virgules.

    Raises:
        ConfigurationError: Si une date est illisible.
    """
    if not raw:
        return set()
    extra = set()
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        try:
            extra.add(date.fromisoformat(token))
        except ValueError as exc:
            raise ConfigurationError(f"BLOCKED_DATES invalide: {token!r}") from exc
    return extra


def load_blocked_dates(extra: str | None = None) -> frozenset[date]:
    """Ensemble immuable des dates bloquees : feriados + dates configurees."""
    extra_dates = parse_extra_dates(extra)
    if extra_dates:
        logger.debug("%d extra blocked date(s) configured", len(extra_dates))
    return HOLIDAYS | frozenset(extra_dates)


def is_blocked(value: date | datetime, blocked_dates: frozenset[date] = HOLIDAYS) -> bool:
    """Indique si la date civile locale de ``value`` est bloquee.

    Un datetime est d'abord converti en date locale (UTC-3) : l'instant
    2026-12-25T02:00Z tombe le 24 decembre a Sao Paulo.
    """
    return local_date(value) in blocked_dates
