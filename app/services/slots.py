"""Generation des creneaux de vistoria et filtrage par les periodes occupees.

Un creneau expose au client dure ``visit_duration_minutes``. La detection
de conflit reserve ``visit_duration_minutes + buffer_minutes`` : c'est
``TimeSlot.conflict_end``.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

from app.services.holidays import is_blocked
from app.services.local_time import at_hour, isoformat, parse_iso, to_local

logger = logging.getLogger(__name__)

# Heures fixes du mode simule (sans Google Calendar)
MOCK_MORNING_HOURS = (9, 10)
MOCK_AFTERNOON_HOURS = (14, 15, 16, 17)

_WEEKEND = (5, 6)  # samedi, dimanche


@dataclass(frozen=True)
class WorkHours:
    """Configuration immuable des plages de vistoria.

    Attributs :
        morning: (heure_debut, heure_fin) du matin, fin exclue.
        afternoon: (heure_debut, heure_fin) de l'apres-midi, fin exclue.
        visit_duration_minutes: Duree visible d'une vistoria.
        buffer_minutes: Marge reservee apres chaque rendez-vous.
        max_slots_per_window: Nombre max de candidats par plage et par jour.
    """

    morning: tuple[int, int] = (9, 11)
    afternoon: tuple[int, int] = (14, 18)
    visit_duration_minutes: int = 60
    buffer_minutes: int = 30
    max_slots_per_window: int = 4

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "WorkHours":
        """Construit la configuration depuis la config Flask."""
        return cls(
            morning=tuple(config["WORK_MORNING"]),
            afternoon=tuple(config["WORK_AFTERNOON"]),
            visit_duration_minutes=int(config["VISIT_DURATION_MINUTES"]),
            buffer_minutes=int(config["BOOKING_BUFFER_MINUTES"]),
            max_slots_per_window=int(config["MAX_SLOTS_PER_WINDOW"]),
        )

    @property
    def visit_duration(self) -> timedelta:
        return timedelta(minutes=self.visit_duration_minutes)

    @property
    def buffer(self) -> timedelta:
        return timedelta(minutes=self.buffer_minutes)

    @property
    def windows(self) -> tuple[tuple[int, int], ...]:
        return (self.morning, self.afternoon)


@dataclass(frozen=True)
class TimeSlot:
    """Creneau de vistoria, en heure locale UTC-3."""

    start: datetime
    end: datetime
    conflict_end: datetime

    @classmethod
    def at(cls, start: datetime, work_hours: WorkHours) -> "TimeSlot":
        return cls(
            start=start,
            end=start + work_hours.visit_duration,
            conflict_end=start + work_hours.visit_duration + work_hours.buffer,
        )

    @property
    def display(self) -> str:
        return self.start.strftime("%H:%M")

    def to_dict(self) -> dict[str, str]:
        return {
            "start": isoformat(self.start),
            "end": isoformat(self.end),
            "display": self.display,
        }


@dataclass(frozen=True)
class BusyInterval:
    """Periode occupee rapportee par le calendrier externe."""

    start: datetime
    end: datetime

    @classmethod
    def from_api(cls, item: Mapping[str, str]) -> "BusyInterval":
        """Construit l'intervalle depuis un element ``busy`` de freebusy.query."""
        return cls(start=parse_iso(item["start"]), end=parse_iso(item["end"]))


def _is_workday(day: date, blocked_dates: frozenset[date]) -> bool:
    return day.weekday() not in _WEEKEND and not is_blocked(day, blocked_dates)


def generate_slots(
    start_date: date,
    horizon_days: int,
    work_hours: WorkHours,
    blocked_dates: frozenset[date],
    now: datetime,
) -> Iterator[TimeSlot]:
    """Genere les creneaux candidats des ``horizon_days`` prochains jours.

    Saute les week-ends, les dates bloquees et les creneaux deja passes.
    Le plafond ``max_slots_per_window`` s'applique aux candidats, avant
    tout filtrage par les periodes occupees.

    Yields:
        TimeSlot dans l'ordre chronologique.
    """
    now = to_local(now)
    for offset in range(horizon_days):
        day = start_date + timedelta(days=offset)
        if not _is_workday(day, blocked_dates):
            continue

        for window_start, window_end in work_hours.windows:
            produced = 0
            for hour in range(window_start, window_end):
                if produced >= work_hours.max_slots_per_window:
                    break
                start = at_hour(day, hour)
                if start <= now:
                    continue
                produced += 1
                yield TimeSlot.at(start, work_hours)


def generate_mock_slots(
    start_date: date,
    now: datetime,
    blocked_dates: frozenset[date],
    work_hours: WorkHours,
    horizon_days: int = 15,
) -> list[TimeSlot]:
    """Liste deterministe de creneaux pour le mode simule.

    Deux heures le matin et quatre l'apres-midi, chaque jour ouvre non bloque.
    """
    now = to_local(now)
    slots = []
    for offset in range(horizon_days):
        day = start_date + timedelta(days=offset)
        if not _is_workday(day, blocked_dates):
            continue
        for hour in MOCK_MORNING_HOURS + MOCK_AFTERNOON_HOURS:
            start = at_hour(day, hour)
            if start > now:
                slots.append(TimeSlot.at(start, work_hours))
    return slots


def overlaps(slot: TimeSlot, busy: BusyInterval) -> bool:
    """Intersection de [start, conflict_end) et [busy.start, busy.end)."""
    return slot.start < busy.end and slot.conflict_end > busy.start


def resolve_availability(
    candidates: Iterable[TimeSlot],
    busy: Iterable[BusyInterval],
) -> list[TimeSlot]:
    """Retire les candidats qui chevauchent une periode occupee.

    L'ordre chronologique des candidats est conserve.
    """
    busy = list(busy)
    available = [slot for slot in candidates if not any(overlaps(slot, b) for b in busy)]
    logger.debug("%d slot(s) available against %d busy interval(s)", len(available), len(busy))
    return available
