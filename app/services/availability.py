"""Service de disponibilite -- combine creneaux candidats et agenda partage."""

import logging
from datetime import date, datetime, timedelta

from app.services.google_calendar import CalendarClient
from app.services.local_time import at_hour, to_local
from app.services.slots import TimeSlot, WorkHours, generate_slots, resolve_availability

logger = logging.getLogger(__name__)


def find_available_slots(
    calendar: CalendarClient,
    work_hours: WorkHours,
    blocked_dates: frozenset[date],
    now: datetime,
    horizon_days: int = 30,
) -> list[TimeSlot]:
    """Creneaux reservables sur les ``horizon_days`` prochains jours.

    Les periodes occupees sont lues une seule fois pour tout l'horizon.

    Raises:
        UpstreamUnavailable: Agenda injoignable.
        ConfigurationError: Cle privee mal formee.
    """
    now = to_local(now)
    today = now.date()
    range_end = at_hour(today + timedelta(days=horizon_days), 0)

    busy = calendar.fetch_busy(now, range_end)
    candidates = generate_slots(today, horizon_days, work_hours, blocked_dates, now)
    slots = resolve_availability(candidates, busy)

    logger.info(
        "Availability: %d slot(s) over %d day(s), %d busy interval(s)",
        len(slots),
        horizon_days,
        len(busy),
    )
    return slots
