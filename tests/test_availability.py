"""Tests for the slot lookup handler and its public endpoints."""

import uuid
from datetime import time

import pytest

from app.models import AppointmentStatus, AvailabilityWindow
from app.services.availability.availability_service import AvailabilityService, day_of_week
from app.services.availability.schedule_service import ScheduleService
from app.services.exceptions import BookingError, BusinessNotFoundError, ServiceNotFoundError, StaffNotFoundError
from tests.conftest import (
    SUNDAY,
    add_appointment,
    add_blocked_date,
    add_service,
    add_staff,
    add_window,
)


class TestDayOfWeek:

    def test_sunday_is_zero(self):
        assert day_of_week(SUNDAY) == 0

    def test_saturday_is_six(self):
        assert day_of_week(SUNDAY.replace(day=7)) == 6


class TestGetAvailableSlots:

    def test_default_duration_is_sixty_minutes(self, db, business):
        add_window(db, business, 0, "09:00", "11:00")

        slots = AvailabilityService.get_available_slots(db, business.id, SUNDAY)

        assert slots == ["09:00", "09:15", "09:30", "09:45", "10:00"]

    def test_service_duration_sizes_slots(self, db, business):
        add_window(db, business, 0, "09:00", "10:00")
        service = add_service(db, business, duration=45)

        slots = AvailabilityService.get_available_slots(db, business.id, SUNDAY, service_id=service.id)

        assert slots == ["09:00", "09:15"]

    def test_service_without_duration_falls_back_to_default(self, db, business):
        add_window(db, business, 0, "09:00", "10:00")
        service = add_service(db, business, duration=None)

        slots = AvailabilityService.get_available_slots(db, business.id, SUNDAY, service_id=service.id)

        assert slots == ["09:00"]

    def test_no_windows_for_weekday(self, db, business):
        add_window(db, business, 1, "09:00", "12:00")
        assert AvailabilityService.get_available_slots(db, business.id, SUNDAY) == []

    def test_inactive_window_ignored(self, db, business):
        add_window(db, business, 0, "09:00", "12:00", is_active=False)
        assert AvailabilityService.get_available_slots(db, business.id, SUNDAY) == []

    def test_existing_appointment_excluded(self, db, business):
        add_window(db, business, 0, "09:00", "12:00")
        add_appointment(db, business, SUNDAY, "10:00", duration=30)

        slots = AvailabilityService.get_available_slots(db, business.id, SUNDAY, service_id=add_service(db, business).id)

        assert "10:00" not in slots
        assert "09:45" not in slots
        assert "09:30" in slots
        assert "10:30" in slots

    def test_cancelled_appointment_does_not_occupy(self, db, business):
        add_window(db, business, 0, "09:00", "12:00")
        service = add_service(db, business)
        add_appointment(db, business, SUNDAY, "10:00", status=AppointmentStatus.CANCELLED)

        slots = AvailabilityService.get_available_slots(db, business.id, SUNDAY, service_id=service.id)

        assert "10:00" in slots

    def test_business_wide_block(self, db, business):
        add_window(db, business, 0, "09:00", "12:00")
        add_blocked_date(db, business, SUNDAY)
        assert AvailabilityService.get_available_slots(db, business.id, SUNDAY) == []

    def test_business_wide_block_applies_to_staff(self, db, business):
        staff = add_staff(db, business)
        add_window(db, business, 0, "09:00", "12:00", staff=staff)
        add_blocked_date(db, business, SUNDAY)

        assert AvailabilityService.get_available_slots(db, business.id, SUNDAY, staff_member_id=staff.id) == []

    def test_staff_block_leaves_general_calendar_open(self, db, business):
        staff = add_staff(db, business)
        add_window(db, business, 0, "09:00", "12:00")
        add_blocked_date(db, business, SUNDAY, staff=staff)

        assert AvailabilityService.get_available_slots(db, business.id, SUNDAY) != []

    def test_staff_uses_own_windows(self, db, business):
        staff = add_staff(db, business)
        add_window(db, business, 0, "09:00", "12:00")
        add_window(db, business, 0, "14:00", "15:00", staff=staff)

        slots = AvailabilityService.get_available_slots(db, business.id, SUNDAY, staff_member_id=staff.id)

        assert slots == ["14:00"]

    def test_other_staff_appointments_do_not_reduce_slots(self, db, business):
        maya = add_staff(db, business, "Maya")
        yoni = add_staff(db, business, "Yoni")
        service = add_service(db, business)
        add_window(db, business, 0, "09:00", "10:00", staff=maya)
        add_appointment(db, business, SUNDAY, "09:00", staff=yoni)

        slots = AvailabilityService.get_available_slots(
            db, business.id, SUNDAY, service_id=service.id, staff_member_id=maya.id
        )

        assert slots == ["09:00", "09:15", "09:30"]

    def test_unknown_business(self, db):
        with pytest.raises(BusinessNotFoundError):
            AvailabilityService.get_available_slots(db, uuid.uuid4(), SUNDAY)

    def test_unknown_service(self, db, business):
        with pytest.raises(ServiceNotFoundError):
            AvailabilityService.get_available_slots(db, business.id, SUNDAY, service_id=uuid.uuid4())

    def test_staff_of_another_business(self, db, business):
        from tests.conftest import make_business

        other = make_business(db, name="Other", slug="other", email="other@example.com")
        staff = add_staff(db, other)

        with pytest.raises(StaffNotFoundError):
            AvailabilityService.get_available_slots(db, business.id, SUNDAY, staff_member_id=staff.id)


class TestBufferSetting:

    def test_buffer_ignored_by_default(self, db, business):
        add_window(db, business, 0, "09:00", "12:00")
        service = add_service(db, business)
        add_appointment(db, business, SUNDAY, "10:00")

        slots = AvailabilityService.get_available_slots(db, business.id, SUNDAY, service_id=service.id)

        assert "09:30" in slots

    def test_buffer_applied_when_enabled(self, db, business, monkeypatch):
        from app.services.availability import availability_service

        monkeypatch.setattr(availability_service.settings, "APPLY_BOOKING_BUFFER", True)
        add_window(db, business, 0, "09:00", "12:00")
        service = add_service(db, business)
        add_appointment(db, business, SUNDAY, "10:00")

        slots = AvailabilityService.get_available_slots(db, business.id, SUNDAY, service_id=service.id)

        # default buffer is 15 minutes either side
        assert "09:30" not in slots
        assert "10:30" not in slots
        assert "09:15" in slots
        assert "10:45" in slots


class TestSlotEndpoints:

    def test_slots_by_slug(self, client, db, business):
        add_window(db, business, 0, "09:00", "10:00")
        service = add_service(db, business, duration=30)

        response = client.get(
            "/api/v1/public/booking/noa-studio/available-slots",
            params={"date": SUNDAY.isoformat(), "service_id": str(service.id)},
        )

        assert response.status_code == 200
        assert response.json() == {"date": "2025-06-01", "slots": ["09:00", "09:15", "09:30"]}

    def test_empty_day_is_not_an_error(self, client, db, business):
        response = client.get(
            "/api/v1/public/booking/noa-studio/available-slots", params={"date": SUNDAY.isoformat()}
        )

        assert response.status_code == 200
        assert response.json()["slots"] == []

    def test_unknown_slug(self, client, db):
        response = client.get(
            "/api/v1/public/booking/nobody/available-slots", params={"date": SUNDAY.isoformat()}
        )
        assert response.status_code == 404

    def test_unknown_service_is_404(self, client, db, business):
        response = client.get(
            "/api/v1/public/booking/noa-studio/available-slots",
            params={"date": SUNDAY.isoformat(), "service_id": str(uuid.uuid4())},
        )
        assert response.status_code == 404

    def test_legacy_lookup_by_business_id(self, client, db, business):
        add_window(db, business, 0, "09:00", "10:00")

        response = client.get(
            "/api/v1/public/available-slots",
            params={"business_id": str(business.id), "date": SUNDAY.isoformat()},
        )

        assert response.status_code == 200
        assert response.json()["slots"] == ["09:00"]

    @pytest.mark.parametrize("params", [{}, {"date": "2025-06-01"}, {"business_id": str(uuid.uuid4())}])
    def test_legacy_lookup_requires_business_and_date(self, client, db, params):
        response = client.get("/api/v1/public/available-slots", params=params)
        assert response.status_code == 400

    def test_booking_page(self, client, db, business):
        add_service(db, business)
        add_staff(db, business)

        response = client.get("/api/v1/public/booking/noa-studio")

        assert response.status_code == 200
        body = response.json()
        assert body["business"]["name"] == "Noa Studio"
        assert body["settings"] == {"advance_booking_days": 30, "cancellation_hours": 24}
        assert [s["name"] for s in body["services"]] == ["Haircut"]
        assert [s["name"] for s in body["staff"]] == ["Maya"]


WINDOWS = "/api/v1/dashboard/availability/windows"
SLOTS = "/api/v1/public/booking/noa-studio/available-slots"


class TestWindowTimePrecision:

    def test_create_with_seconds_is_422(self, client, db, business, auth_headers):
        response = client.post(
            WINDOWS, json={"day_of_week": 0, "start_time": "09:00:30", "end_time": "12:00"}, headers=auth_headers
        )

        assert response.status_code == 422
        db.expire_all()
        assert db.query(AvailabilityWindow).count() == 0

        lookup = client.get(SLOTS, params={"date": SUNDAY.isoformat()})
        assert lookup.status_code == 200
        assert lookup.json()["slots"] == []

    def test_update_with_seconds_is_422(self, client, db, business, auth_headers):
        window = add_window(db, business, 0, "09:00", "10:00")

        response = client.patch(f"{WINDOWS}/{window.id}", json={"end_time": "10:00:15"}, headers=auth_headers)

        assert response.status_code == 422
        lookup = client.get(SLOTS, params={"date": SUNDAY.isoformat()})
        assert lookup.status_code == 200
        assert lookup.json()["slots"] == ["09:00"]

    def test_replace_day_with_seconds_is_422(self, client, db, business, auth_headers):
        response = client.put(
            "/api/v1/dashboard/availability/days/0",
            json={"windows": [{"start_time": "09:00", "end_time": "12:00:01"}]},
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_service_refuses_sub_minute_times(self, db, business):
        with pytest.raises(BookingError):
            ScheduleService.create_window(db, business.id, 0, time(9, 0, 30), time(12, 0))

        with pytest.raises(BookingError):
            ScheduleService.replace_day(
                db, business.id, 0, [{"start_time": time(9, 0), "end_time": time(12, 0, 0, 500)}]
            )

        assert db.query(AvailabilityWindow).count() == 0

    def test_service_update_with_seconds_is_rolled_back(self, db, business):
        window = add_window(db, business, 0, "09:00", "10:00")

        with pytest.raises(BookingError):
            ScheduleService.update_window(db, business.id, window.id, start_time=time(9, 0, 45))

        db.expire_all()
        assert db.get(AvailabilityWindow, window.id).start_time == time(9, 0)

    def test_latest_window_end_is_2359(self, client, db, business, auth_headers):
        response = client.post(
            WINDOWS, json={"day_of_week": 0, "start_time": "22:00", "end_time": "23:59"}, headers=auth_headers
        )
        assert response.status_code == 201

        slots = client.get(SLOTS, params={"date": SUNDAY.isoformat()}).json()["slots"]

        # A 60 minute default service must finish by 23:59, so 23:00 is never offered
        assert slots == ["22:00", "22:15", "22:30", "22:45"]
