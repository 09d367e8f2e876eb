"""Definitions des routes API."""

import logging

from flask import current_app, jsonify, request
from pydantic import ValidationError as PydanticValidationError

from app.api import api_bp
from app.api.errors import error_response
from app.errors import ConfigurationError, UpstreamError
from app.extensions import limiter
from app.schemas.availability import AvailabilityResponse, SlotSchema
from app.schemas.quote import QuoteRequest
from app.schemas.schedule import ScheduleRequest
from app.services import fipe_service
from app.services.availability import find_available_slots
from app.services.booking import commit_booking
from app.services.google_calendar import calendar_from_config
from app.services.holidays import load_blocked_dates
from app.services.local_time import local_now
from app.services.slots import WorkHours, generate_mock_slots

logger = logging.getLogger(__name__)


@api_bp.route("/health", methods=["GET"])
def health():
    """Point de controle de sante de l'API."""
    return jsonify(
        {
            "ok": True,
            "status": "ok",
            "version": current_app.config.get("APP_VERSION", "0.0.0"),
            "calendar": calendar_from_config(current_app.config) is not None,
        }
    )


def _slots_payload(slots) -> list[SlotSchema]:
    return [SlotSchema(**slot.to_dict()) for slot in slots]


def _mock_availability(work_hours: WorkHours, blocked_dates) -> AvailabilityResponse:
    now = local_now()
    slots = generate_mock_slots(
        now.date(),
        now,
        blocked_dates,
        work_hours,
        horizon_days=current_app.config["MOCK_HORIZON_DAYS"],
    )
    return AvailabilityResponse(slots=_slots_payload(slots), mock=True)


@api_bp.route("/availability", methods=["GET"])
def availability():
    """Creneaux de vistoria reservables.

    Sans Google Calendar : creneaux simules (mock=true). Si l'agenda est
    injoignable, AVAILABILITY_FALLBACK_TO_MOCK decide entre creneaux simules
    et erreur 503 explicite.
    """
    config = current_app.config
    work_hours = WorkHours.from_config(config)
    blocked_dates = load_blocked_dates(config.get("BLOCKED_DATES"))

    calendar = calendar_from_config(config)
    if calendar is None:
        logger.info("Google Calendar non configure -- creneaux simules")
        response = _mock_availability(work_hours, blocked_dates)
        return jsonify(response.model_dump(by_alias=True, exclude_none=True))

    try:
        slots = find_available_slots(
            calendar,
            work_hours,
            blocked_dates,
            local_now(),
            horizon_days=config["AVAILABILITY_HORIZON_DAYS"],
        )
    except (UpstreamError, ConfigurationError) as exc:
        if config["AVAILABILITY_FALLBACK_TO_MOCK"]:
            logger.error("Availability lookup failed, serving mock slots: %s", exc)
            response = _mock_availability(work_hours, blocked_dates)
            return jsonify(response.model_dump(by_alias=True, exclude_none=True))
        logger.error("Availability lookup failed: %s", exc)
        response = AvailabilityResponse(ok=False, error="Agenda indisponível no momento")
        return jsonify(response.model_dump(by_alias=True, exclude_none=True)), 503

    response = AvailabilityResponse(slots=_slots_payload(slots), calendar_id=calendar.calendar_id)
    return jsonify(response.model_dump(by_alias=True, exclude_none=True))


@api_bp.route("/quote", methods=["POST"])
@limiter.limit("30/minute")
def quote():
    """Cotation d'un vehicule : valeur FIPE et proposition d'achat."""
    json_data = request.get_json(silent=True)
    if not json_data:
        return error_response("Dados incompletos", 400)

    try:
        req = QuoteRequest.model_validate(json_data)
    except PydanticValidationError as exc:
        logger.warning("Validation error: %s", exc)
        return error_response("Dados inválidos", 400)

    config = current_app.config
    result = fipe_service.get_quote(
        req.plate,
        req.mileage,
        config.get("FIPE_API_KEY"),
        base_url=config["FIPE_API_URL"],
        timeout=config["FIPE_API_TIMEOUT"],
        discount_rate=config["OFFER_DISCOUNT_RATE"],
        fallback_to_mock=config["QUOTE_FALLBACK_TO_MOCK"],
    )
    return jsonify(result.to_dict())


@api_bp.route("/schedule", methods=["POST"])
@limiter.limit("10/minute")
def schedule():
    """Reserve une vistoria dans l'agenda partage.

    409 si le creneau vient d'etre pris : le site doit recharger la disponibilite.
    """
    json_data = request.get_json(silent=True)
    if not json_data:
        return error_response("Dados incompletos", 400)

    try:
        req = ScheduleRequest.model_validate(json_data)
    except PydanticValidationError as exc:
        logger.warning("Validation error: %s", exc)
        return error_response("Dados inválidos", 400)

    config = current_app.config
    result = commit_booking(
        req.to_booking(),
        calendar_from_config(config),
        WorkHours.from_config(config),
        blocked_dates=load_blocked_dates(config.get("BLOCKED_DATES")),
    )

    if result.mock:
        return jsonify(
            {
                "ok": True,
                "mock": True,
                "message": "Agendamento registrado (modo desenvolvimento)",
                "eventId": result.event_id,
                "readableSlot": req.readable_slot,
            }
        )

    body = {"ok": True, "eventId": result.event_id, "readableSlot": req.readable_slot}
    if result.hangout_link:
        body["hangoutLink"] = result.hangout_link
    return jsonify(body)
