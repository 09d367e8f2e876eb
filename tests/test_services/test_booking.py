"""Tests for the booking service (guarded calendar write)."""

from datetime import date, datetime

import pytest

from app.errors import ConflictError, UpstreamUnavailable, ValidationError
from app.services.booking import (
    BookingRequest,
    build_event,
    commit_booking,
    format_brl,
    has_conflict,
    validate_booking,
)
from app.services.local_time import LOCAL_TZ, at_hour
from app.services.slots import BusyInterval, WorkHours

WEDNESDAY = date(2026, 3, 4)
NOW = datetime(2026, 3, 2, 8, 0, tzinfo=LOCAL_TZ)
WORK_HOURS = WorkHours()


def _request(hour=9, **overrides):
    fields = {
        "start_iso": f"2026-03-04T{hour:02d}:00:00-03:00",
        "end_iso": f"2026-03-04T{hour + 1:02d}:00:00-03:00",
        "name": "Ana Souza",
        "email": "ana@example.com",
        "phone": "(51) 99999-0000",
        "readable_slot": f"04/03/2026 {hour:02d}:00",
        "description": "Vistoria de veículo\nPlaca: IST1A23\nKM: 80000",
        "valor_fipe": 85000,
        "valor_proposta": 69700,
    }
    fields.update(overrides)
    return BookingRequest(**fields)


def _busy(start_hm, end_hm):
    return BusyInterval(start=at_hour(WEDNESDAY, *start_hm), end=at_hour(WEDNESDAY, *end_hm))


class TestValidateBooking:
    def test_returns_local_bounds(self):
        start, end = validate_booking(_request(), NOW, WORK_HOURS)
        assert start == at_hour(WEDNESDAY, 9)
        assert end == at_hour(WEDNESDAY, 10)

    def test_accepts_utc_timestamps(self):
        start, _ = validate_booking(
            _request(start_iso="2026-03-04T12:00:00Z", end_iso="2026-03-04T13:00:00Z"),
            NOW,
            WORK_HOURS,
        )
        assert start == at_hour(WEDNESDAY, 9)

    @pytest.mark.parametrize("field,json_name", [
        ("start_iso", "startIso"),
        ("end_iso", "endIso"),
        ("name", "name"),
        ("email", "email"),
        ("phone", "phone"),
    ])
    def test_missing_required_field(self, field, json_name):
        with pytest.raises(ValidationError, match=json_name):
            validate_booking(_request(**{field: None}), NOW, WORK_HOURS)

    def test_blank_field_counts_as_missing(self):
        with pytest.raises(ValidationError, match="name"):
            validate_booking(_request(name="   "), NOW, WORK_HOURS)

    def test_unparseable_timestamp(self):
        with pytest.raises(ValidationError):
            validate_booking(_request(start_iso="amanha as 9h"), NOW, WORK_HOURS)

    def test_end_before_start(self):
        with pytest.raises(ValidationError):
            validate_booking(_request(end_iso="2026-03-04T08:00:00-03:00"), NOW, WORK_HOURS)

    def test_past_slot(self):
        later = datetime(2026, 3, 5, 8, 0, tzinfo=LOCAL_TZ)
        with pytest.raises(ValidationError, match="passou"):
            validate_booking(_request(), later, WORK_HOURS)

    def test_invalid_email(self):
        with pytest.raises(ValidationError, match="Email"):
            validate_booking(_request(email="ana@"), NOW, WORK_HOURS)

    def test_short_phone(self):
        with pytest.raises(ValidationError, match="Telefone"):
            validate_booking(_request(phone="9999-0000"), NOW, WORK_HOURS)

    @pytest.mark.parametrize("start_iso,end_iso", [
        ("2026-03-07T09:00:00-03:00", "2026-03-07T10:00:00-03:00"),  # sabado
        ("2026-03-08T03:00:00-03:00", "2026-03-08T04:00:00-03:00"),  # domingo de madrugada
        ("2026-04-21T09:00:00-03:00", "2026-04-21T10:00:00-03:00"),  # Tiradentes
        ("2026-03-04T12:00:00-03:00", "2026-03-04T13:00:00-03:00"),  # almoco
        ("2026-03-04T18:00:00-03:00", "2026-03-04T19:00:00-03:00"),  # fim do expediente
        ("2026-03-04T09:30:00-03:00", "2026-03-04T10:30:00-03:00"),  # fora da grade
        ("2026-03-04T09:00:00-03:00", "2026-03-04T18:00:00-03:00"),  # duracao longa
        ("2026-03-04T09:00:00-03:00", "2026-03-04T09:30:00-03:00"),  # duracao curta
    ])
    def test_slot_outside_grid(self, start_iso, end_iso):
        with pytest.raises(ValidationError, match="Horário inválido"):
            validate_booking(_request(start_iso=start_iso, end_iso=end_iso), NOW, WORK_HOURS)

    def test_configured_blocked_date(self):
        with pytest.raises(ValidationError, match="Horário inválido"):
            validate_booking(_request(), NOW, WORK_HOURS, frozenset({WEDNESDAY}))

    def test_last_hour_of_window_is_accepted(self):
        start, end = validate_booking(_request(hour=17), NOW, WORK_HOURS)
        assert start == at_hour(WEDNESDAY, 17)
        assert end == at_hour(WEDNESDAY, 18)


class TestHasConflict:
    def test_buffer_after_busy_interval_conflicts(self, work_hours):
        """Busy [08:45, 09:00) + 30 min buffer ends 09:30 -> overlaps a 09:00 visit."""
        assert has_conflict(at_hour(WEDNESDAY, 9), [_busy((8, 45), (9, 0))], work_hours) is True

    def test_busy_ending_a_buffer_before_is_free(self, work_hours):
        assert has_conflict(at_hour(WEDNESDAY, 9), [_busy((8, 0), (8, 30))], work_hours) is False

    def test_busy_starting_at_visit_end_is_free(self, work_hours):
        assert has_conflict(at_hour(WEDNESDAY, 9), [_busy((10, 0), (11, 0))], work_hours) is False

    def test_busy_inside_visit_conflicts(self, work_hours):
        assert has_conflict(at_hour(WEDNESDAY, 9), [_busy((9, 15), (9, 30))], work_hours) is True

    def test_no_busy(self, work_hours):
        assert has_conflict(at_hour(WEDNESDAY, 9), [], work_hours) is False


class TestFormatBrl:
    def test_thousands(self):
        assert format_brl(85000) == "R$ 85.000,00"

    def test_cents(self):
        assert format_brl(1234567.5) == "R$ 1.234.567,50"

    def test_missing(self):
        assert format_brl(None) == "N/A"

    def test_zero_is_a_value(self):
        assert format_brl(0) == "R$ 0,00"


class TestBuildEvent:
    def test_event_body(self):
        start, end = at_hour(WEDNESDAY, 9), at_hour(WEDNESDAY, 10)
        event = build_event(_request(), start, end)

        assert event["summary"] == "Vistoria - Ana Souza"
        assert event["start"] == {
            "dateTime": "2026-03-04T09:00:00-03:00",
            "timeZone": "America/Sao_Paulo",
        }
        assert event["end"]["dateTime"] == "2026-03-04T10:00:00-03:00"
        assert "attendees" not in event
        assert "ana@example.com" in event["description"]
        assert "(51) 99999-0000" in event["description"]
        assert "Placa: IST1A23" in event["description"]
        assert "Tabela FIPE: R$ 85.000,00" in event["description"]
        assert "Proposta: R$ 69.700,00" in event["description"]

    def test_default_description_and_missing_values(self):
        event = build_event(
            _request(description=None, valor_fipe=None, valor_proposta=None),
            at_hour(WEDNESDAY, 9),
            at_hour(WEDNESDAY, 10),
        )
        assert "Vistoria de veículo agendada" in event["description"]
        assert "Tabela FIPE: N/A" in event["description"]


class TestCommitBooking:
    def test_conflict_is_reported(self, calendar, work_hours):
        calendar.fetch_busy.return_value = [_busy((8, 45), (9, 0))]

        with pytest.raises(ConflictError):
            commit_booking(_request(hour=9), calendar, work_hours, now=NOW)

        calendar.create_event.assert_not_called()

    def test_free_slot_creates_event(self, calendar, work_hours):
        result = commit_booking(_request(hour=10), calendar, work_hours, now=NOW)

        assert result.event_id == "evt123"
        assert result.hangout_link == "https://calendar.google.com/event?eid=evt123"
        assert result.mock is False
        calendar.create_event.assert_called_once()

    def test_guard_window_around_slot(self, calendar, work_hours):
        commit_booking(_request(hour=10), calendar, work_hours, now=NOW)

        check_start, check_end = calendar.fetch_busy.call_args.args
        assert check_start == datetime(2026, 3, 4, 9, 30, tzinfo=LOCAL_TZ)
        assert check_end == datetime(2026, 3, 4, 11, 30, tzinfo=LOCAL_TZ)

    def test_event_uses_requested_bounds(self, calendar, work_hours):
        commit_booking(_request(hour=14), calendar, work_hours, now=NOW)

        event = calendar.create_event.call_args.args[0]
        assert event["start"]["dateTime"] == "2026-03-04T14:00:00-03:00"
        assert event["end"]["dateTime"] == "2026-03-04T15:00:00-03:00"

    def test_validation_happens_before_any_call(self, calendar, work_hours):
        with pytest.raises(ValidationError):
            commit_booking(_request(email=None), calendar, work_hours, now=NOW)

        calendar.fetch_busy.assert_not_called()

    def test_stretched_event_is_rejected_before_any_call(self, calendar, work_hours):
        request = _request(hour=9, end_iso="2026-03-04T18:00:00-03:00")

        with pytest.raises(ValidationError, match="Horário inválido"):
            commit_booking(request, calendar, work_hours, now=NOW)

        calendar.fetch_busy.assert_not_called()
        calendar.create_event.assert_not_called()

    def test_configured_blocked_date_is_rejected(self, calendar, work_hours):
        with pytest.raises(ValidationError):
            commit_booking(
                _request(), calendar, work_hours, blocked_dates=frozenset({WEDNESDAY}), now=NOW
            )

        calendar.fetch_busy.assert_not_called()

    def test_mock_mode_without_calendar(self, work_hours):
        result = commit_booking(_request(), None, work_hours, now=NOW)

        assert result.mock is True
        assert result.event_id.startswith("mock-")
        assert result.hangout_link is None

    def test_mock_mode_still_validates(self, work_hours):
        with pytest.raises(ValidationError):
            commit_booking(_request(phone=None), None, work_hours, now=NOW)

    def test_upstream_error_propagates(self, calendar, work_hours):
        calendar.fetch_busy.side_effect = UpstreamUnavailable("Agenda indisponível no momento")

        with pytest.raises(UpstreamUnavailable):
            commit_booking(_request(), calendar, work_hours, now=NOW)

        calendar.create_event.assert_not_called()
