"""Service de reservation -- ecrit la vistoria dans l'agenda partage.

Sequence : validation -> relecture des periodes occupees autour du creneau
-> detection de conflit -> creation de l'evenement.

La relecture ferme la plupart des courses entre deux clients qui ont vu la
meme disponibilite, mais pas toutes : sans verrou, deux reservations a
quelques centaines de millisecondes d'intervalle peuvent passer toutes les
deux.
"""

import logging
import re
import time
from dataclasses import dataclass
from datetime import date, datetime

from app.errors import ConflictError, ValidationError
from app.services.google_calendar import CalendarClient
from app.services.holidays import HOLIDAYS, is_blocked
from app.services.local_time import CALENDAR_TIMEZONE, isoformat, local_now, parse_iso, to_local
from app.services.slots import BusyInterval, WorkHours

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_MIN_PHONE_DIGITS = 10

# Nom du champ JSON -> attribut de BookingRequest
REQUIRED_FIELDS = {
    "startIso": "start_iso",
    "endIso": "end_iso",
    "name": "name",
    "email": "email",
    "phone": "phone",
}


@dataclass(frozen=True)
class BookingRequest:
    """Demande de vistoria telle que soumise par le site."""

    start_iso: str | None
    end_iso: str | None
    name: str | None
    email: str | None
    phone: str | None
    readable_slot: str | None = None
    description: str | None = None
    valor_fipe: float | None = None
    valor_proposta: float | None = None


@dataclass(frozen=True)
class BookingResult:
    """Resultat d'une reservation (reelle ou simulee)."""

    event_id: str
    hangout_link: str | None = None
    mock: bool = False


def _is_bookable_slot(
    start: datetime,
    end: datetime,
    work_hours: WorkHours,
    blocked_dates: frozenset[date],
) -> bool:
    """Le creneau doit etre un de ceux que ``generate_slots`` peut proposer."""
    start = to_local(start)
    if start.weekday() >= 5 or is_blocked(start, blocked_dates):
        return False
    if start.minute or start.second or start.microsecond:
        return False
    if not any(first <= start.hour < last for first, last in work_hours.windows):
        return False
    return end - start == work_hours.visit_duration


def validate_booking(
    request: BookingRequest,
    now: datetime,
    work_hours: WorkHours,
    blocked_dates: frozenset[date] = HOLIDAYS,
) -> tuple[datetime, datetime]:
    """Verifie la demande et retourne (debut, fin) en heure locale.

    Seuls les creneaux de la grille de disponibilite sont acceptes : jour
    ouvre non bloque, heure pleine dans une fenetre, duree d'une visite.

    Raises:
        ValidationError: Champ obligatoire absent ou valeur invalide.
    """
    missing = [
        field for field, attr in REQUIRED_FIELDS.items()
        if not (getattr(request, attr) or "").strip()
    ]
    if missing:
        raise ValidationError(f"Dados incompletos: {', '.join(missing)}")

    try:
        start = parse_iso(request.start_iso)
        end = parse_iso(request.end_iso)
    except ValueError as exc:
        raise ValidationError("Horário inválido") from exc
    if end <= start:
        raise ValidationError("Horário inválido")
    if start <= to_local(now):
        raise ValidationError("Este horário já passou")
    if not _is_bookable_slot(start, end, work_hours, blocked_dates):
        raise ValidationError("Horário inválido")

    if not _EMAIL_RE.match(request.email.strip()):
        raise ValidationError("Email inválido")
    if len(re.sub(r"\D", "", request.phone)) < _MIN_PHONE_DIGITS:
        raise ValidationError("Telefone inválido")

    return start, end


def has_conflict(start: datetime, busy: list[BusyInterval], work_hours: WorkHours) -> bool:
    """Conflit si [start, start + visite) touche une periode occupee prolongee du buffer."""
    visit_end = start + work_hours.visit_duration
    return any(
        start < interval.end + work_hours.buffer and visit_end > interval.start
        for interval in busy
    )


def format_brl(value: int | float | None) -> str:
    """Formate un montant en reais, ex. 85000 -> 'R$ 85.000,00'."""
    if value is None:
        return "N/A"
    us_style = f"{value:,.2f}"
    return "R$ " + us_style.replace(",", "_").replace(".", ",").replace("_", ".")


def build_event(request: BookingRequest, start: datetime, end: datetime) -> dict:
    """Corps de l'evenement Google Calendar.

    Pas d'invite : le compte de service n'a pas de delegation pour en envoyer.
    """
    description = (
        f"Cliente: {request.name}\n"
        f"Email: {request.email}\n"
        f"Telefone: {request.phone}\n\n"
        f"{request.description or 'Vistoria de veículo agendada'}\n\n"
        "=== VALORES ===\n"
        f"Tabela FIPE: {format_brl(request.valor_fipe)}\n"
        f"Proposta: {format_brl(request.valor_proposta)}"
    )
    return {
        "summary": f"Vistoria - {request.name}",
        "description": description,
        "start": {"dateTime": isoformat(start), "timeZone": CALENDAR_TIMEZONE},
        "end": {"dateTime": isoformat(end), "timeZone": CALENDAR_TIMEZONE},
        "reminders": {
            "useDefault": False,
            "overrides": [{"method": "popup", "minutes": 30}],
        },
    }


def commit_booking(
    request: BookingRequest,
    calendar: CalendarClient | None,
    work_hours: WorkHours,
    blocked_dates: frozenset[date] = HOLIDAYS,
    now: datetime | None = None,
) -> BookingResult:
    """Reserve le creneau demande.

    Sans agenda configure, la demande est seulement journalisee et un
    identifiant synthetique ``mock-<ms>`` est retourne.

    Raises:
        ValidationError: Demande incomplete ou invalide.
        ConflictError: Le creneau vient d'etre pris.
        UpstreamError: Agenda injoignable ou requete rejetee.
        ConfigurationError: Cle privee mal formee.
    """
    now = now or local_now()
    start, end = validate_booking(request, now, work_hours, blocked_dates)

    if calendar is None:
        logger.warning(
            "Booking received without Google Calendar (mock): name=%s slot=%s",
            request.name,
            request.readable_slot or isoformat(start),
        )
        return BookingResult(event_id=f"mock-{int(time.time() * 1000)}", mock=True)

    check_start = start - work_hours.buffer
    check_end = start + work_hours.visit_duration + work_hours.buffer
    busy = calendar.fetch_busy(check_start, check_end)

    if has_conflict(start, busy, work_hours):
        logger.info("Booking conflict at %s (%d busy interval(s))", isoformat(start), len(busy))
        raise ConflictError("Este horário acabou de ser reservado. Escolha outro horário.")

    created = calendar.create_event(build_event(request, start, end))
    logger.info(
        "Booking created: event=%s name=%s slot=%s",
        created["event_id"],
        request.name,
        request.readable_slot or isoformat(start),
    )
    return BookingResult(event_id=created["event_id"], hangout_link=created.get("hangout_link"))
