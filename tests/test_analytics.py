"""Tests for dashboard stats and analytics reports."""

from datetime import date, timedelta

import pytest

from app.models import AppointmentStatus
from app.services.analytics.analytics_service import AnalyticsService, growth, month_start, percent
from app.utils.time_utils import local_today
from tests.conftest import (
    add_appointment,
    add_service,
    add_staff,
    add_team_member,
    member_headers,
)

BASE = "/api/v1/dashboard"

# A Sunday in the middle of the month
TODAY = date(2025, 6, 15)


@pytest.fixture
def history(db, business):
    """Four June bookings and one in May, priced through two services."""
    haircut = add_service(db, business, name="Haircut", price="100.00")
    colour = add_service(db, business, name="Colour", duration=60, price="250.00")
    maya = add_staff(db, business)

    add_appointment(db, business, date(2025, 5, 10), "09:00", service=haircut,
                    status=AppointmentStatus.COMPLETED, phone="0500000001")
    add_appointment(db, business, date(2025, 6, 2), "10:00", service=haircut, staff=maya,
                    status=AppointmentStatus.COMPLETED, phone="0500000001")
    add_appointment(db, business, date(2025, 6, 3), "10:00", service=haircut,
                    status=AppointmentStatus.COMPLETED, phone="0500000002")
    add_appointment(db, business, date(2025, 6, 4), "14:00", duration=60, service=colour,
                    status=AppointmentStatus.CANCELLED, phone="0500000003", reason="Feeling sick")
    add_appointment(db, business, date(2025, 6, 20), "14:00", duration=60, service=colour,
                    phone="0500000003")
    return {"haircut": haircut, "colour": colour, "maya": maya}


class TestHelpers:

    def test_month_start_crosses_years(self):
        assert month_start(date(2025, 1, 20), -1) == date(2024, 12, 1)
        assert month_start(date(2025, 12, 5), 1) == date(2026, 1, 1)
        assert month_start(date(2025, 6, 15)) == date(2025, 6, 1)

    def test_growth_against_empty_month_is_zero(self):
        assert growth(5, 0) == 0.0
        assert growth(3, 2) == 50.0
        assert growth(1, 4) == -75.0

    def test_percent(self):
        assert percent(1, 3) == 33
        assert percent(1, 3, 2) == 33.33
        assert percent(0, 0) == 0


class TestDashboardStats:

    def test_counters(self, db, business):
        add_appointment(db, business, TODAY, "09:00", phone="0500000001")
        add_appointment(db, business, TODAY, "10:00", status=AppointmentStatus.CANCELLED, phone="0500000001")
        add_appointment(db, business, TODAY + timedelta(days=3), "09:00", phone="0500000002")
        add_appointment(db, business, TODAY - timedelta(days=3), "09:00", phone="0500000003")

        stats = AnalyticsService.dashboard_stats(db, business.id, today=TODAY)

        assert stats["total_appointments"] == 4
        assert stats["today_appointments"] == 1
        assert stats["total_customers"] == 3
        # Past scheduled bookings are no longer pending
        assert stats["pending_appointments"] == 2
        assert stats["date"] == "2025-06-15"

    def test_empty_business(self, db, business):
        stats = AnalyticsService.dashboard_stats(db, business.id, today=TODAY)

        assert stats["total_appointments"] == 0
        assert stats["total_customers"] == 0


class TestOverview:

    def test_month_over_month(self, db, business, history):
        overview = AnalyticsService.overview(db, business.id, today=TODAY)

        assert overview["period"] == "2025-06"
        assert overview["total_appointments"] == 5
        assert overview["this_month_appointments"] == 4
        assert overview["last_month_appointments"] == 1
        assert overview["appointment_growth"] == 300.0
        # Only completed bookings earn revenue
        assert overview["this_month_revenue"] == 200.0
        assert overview["last_month_revenue"] == 100.0
        assert overview["revenue_growth"] == 100.0

    def test_status_split_and_top_services(self, db, business, history):
        overview = AnalyticsService.overview(db, business.id, today=TODAY)

        assert overview["status_stats"][AppointmentStatus.COMPLETED] == 2
        assert overview["status_stats"][AppointmentStatus.CANCELLED] == 1
        assert overview["status_stats"][AppointmentStatus.SCHEDULED] == 1
        assert overview["status_stats"][AppointmentStatus.NO_SHOW] == 0
        assert {(s["name"], s["count"]) for s in overview["top_services"]} == {("Haircut", 2), ("Colour", 2)}

    def test_six_month_series(self, db, business, history):
        monthly = AnalyticsService.overview(db, business.id, today=TODAY)["monthly"]

        assert [m["month"] for m in monthly] == ["2025-01", "2025-02", "2025-03", "2025-04", "2025-05", "2025-06"]
        assert [m["appointments"] for m in monthly] == [0, 0, 0, 0, 1, 4]


class TestPatterns:

    def test_popular_hours(self, db, business, history):
        patterns = AnalyticsService.patterns(db, business.id, days=30, today=TODAY)

        assert patterns["since"] == "2025-05-16"
        assert patterns["popular_hours"] == [
            {"hour": "10:00", "bookings": 2, "completed": 2, "completion_rate": 100},
            {"hour": "14:00", "bookings": 2, "completed": 0, "completion_rate": 0},
        ]

    def test_weekly_patterns_use_sunday_first_numbering(self, db, business, history):
        weekly = AnalyticsService.patterns(db, business.id, days=30, today=TODAY)["weekly_patterns"]

        monday = weekly[0]
        assert monday["day_of_week"] == 1
        assert monday["day_name"] == "Monday"
        assert monday["revenue"] == 100.0
        assert monday["average_revenue"] == 100.0
        assert [d["day_name"] for d in weekly] == ["Monday", "Tuesday", "Wednesday", "Friday"]

    def test_cancellation_reasons(self, db, business, history):
        add_appointment(db, business, date(2025, 6, 5), "09:00", status=AppointmentStatus.CANCELLED)

        analysis = AnalyticsService.patterns(db, business.id, days=30, today=TODAY)["cancellation_analysis"]

        # The cancellation without a reason still counts towards the total
        assert analysis == [{"reason": "Feeling sick", "count": 1, "percentage": 50}]

    def test_window_excludes_older_bookings(self, db, business, history):
        patterns = AnalyticsService.patterns(db, business.id, days=30, today=TODAY)

        assert [m["month"] for m in patterns["monthly_patterns"]] == ["2025-06"]


class TestServicePerformance:

    def test_rates_and_revenue(self, db, business, history):
        report = AnalyticsService.services(db, business.id, days=30, today=TODAY)
        by_name = {s["name"]: s for s in report["service_performance"]}

        haircut = by_name["Haircut"]
        assert haircut["total_bookings"] == 2
        assert haircut["completion_rate"] == 100.0
        assert haircut["total_revenue"] == 200.0
        assert haircut["average_revenue"] == 100.0

        colour = by_name["Colour"]
        assert colour["total_bookings"] == 2
        assert colour["cancelled_bookings"] == 1
        assert colour["cancellation_rate"] == 50.0
        assert colour["total_revenue"] == 0.0
        assert colour["price"] == 250.0

    def test_unbooked_services_are_listed_but_not_distributed(self, db, business, history):
        add_service(db, business, name="Beard trim", price="40.00")

        report = AnalyticsService.services(db, business.id, days=30, today=TODAY)

        assert "Beard trim" in {s["name"] for s in report["service_performance"]}
        assert "Beard trim" not in {s["name"] for s in report["service_distribution"]}
        assert report["service_performance"][-1]["name"] == "Beard trim"


class TestStaffPerformance:

    def test_owner_and_staff_entries(self, db, business, history):
        report = AnalyticsService.staff(db, business.id, days=30, today=TODAY)
        by_id = {s["id"]: s for s in report["staff_performance"]}

        owner = by_id["owner"]
        assert owner["name"] == "Noa"
        assert owner["total_appointments"] == 3
        assert owner["completed_appointments"] == 1
        assert owner["cancelled_appointments"] == 1
        assert owner["total_revenue"] == 100.0

        maya = by_id[str(history["maya"].id)]
        assert maya["total_appointments"] == 1
        assert maya["completion_rate"] == 100.0
        assert maya["total_revenue"] == 100.0

    def test_staff_without_bookings_are_left_out(self, db, business, history):
        add_staff(db, business, name="Idle")

        report = AnalyticsService.staff(db, business.id, days=30, today=TODAY)

        assert "Idle" not in {s["name"] for s in report["staff_performance"]}
        assert report["staff_comparison"][0]["name"] == "Noa"


class TestAnalyticsEndpoints:

    def test_stats(self, client, db, business, auth_headers):
        add_appointment(db, business, local_today(), "09:00")

        response = client.get(f"{BASE}/stats", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["today_appointments"] == 1

    def test_reports_for_owner(self, client, business, auth_headers):
        for report in ("overview", "patterns", "services", "staff"):
            response = client.get(f"{BASE}/analytics/{report}", headers=auth_headers)
            assert response.status_code == 200, report

    def test_days_out_of_range(self, client, business, auth_headers):
        response = client.get(f"{BASE}/analytics/patterns", params={"days": 0}, headers=auth_headers)

        assert response.status_code == 422

    def test_requires_login(self, client, business):
        assert client.get(f"{BASE}/analytics/overview").status_code in (401, 403)

    def test_member_without_reports_permission(self, client, db, business):
        headers = member_headers(add_team_member(db, business, role_name="Staff"))

        assert client.get(f"{BASE}/stats", headers=headers).status_code == 200
        response = client.get(f"{BASE}/analytics/overview", headers=headers)
        assert response.status_code == 403
        assert "reports" in response.json()["detail"]

    def test_manager_sees_reports(self, client, db, business):
        headers = member_headers(add_team_member(db, business, role_name="Manager"))

        response = client.get(f"{BASE}/analytics/services", headers=headers)

        assert response.status_code == 200
        assert response.json()["business_id"] == str(business.id)
