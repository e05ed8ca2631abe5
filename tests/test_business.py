"""Tests for owner sign-up, login and business settings."""

import pytest

from app.services.business.business_service import BusinessService, slugify
from app.services.exceptions import BookingError
from tests.conftest import make_business


class TestSlugify:

    @pytest.mark.parametrize("name, expected", [
        ("My Salon", "my-salon"),
        ("Noa's Studio!", "noas-studio"),
        ("  Cuts   &   Colour  ", "cuts-colour"),
        ("a--b", "a-b"),
        ("סטודיו נועה", ""),
    ])
    def test_examples(self, name, expected):
        assert slugify(name) == expected

    def test_max_length(self):
        assert len(slugify("x" * 80)) == 50


class TestUniqueSlug:

    def test_suffix_when_taken(self, db, business):
        assert BusinessService.generate_unique_slug(db, "Noa Studio") == "noa-studio-1"

    def test_counts_up(self, db, business):
        make_business(db, name="Noa Studio", slug="noa-studio-1", email="second@example.com")
        assert BusinessService.generate_unique_slug(db, "Noa Studio") == "noa-studio-2"

    def test_own_slug_is_not_a_clash(self, db, business):
        assert BusinessService.generate_unique_slug(db, "Noa Studio", business.id) == "noa-studio"

    def test_unsluggable_name(self, db):
        assert BusinessService.generate_unique_slug(db, "!!!") == "business"


class TestSettings:

    def test_defaults(self, db, business):
        row = BusinessService.get_settings(db, business.id)

        assert (row.buffer_minutes, row.advance_booking_days, row.cancellation_hours) == (15, 30, 24)
        assert not row.whatsapp_enabled
        assert row.reminder_24h_enabled

    def test_unknown_field_rejected(self, db, business):
        with pytest.raises(BookingError):
            BusinessService.update_settings(db, business.id, {"theme": "dark"})

    def test_negative_value_rejected(self, db, business):
        with pytest.raises(BookingError):
            BusinessService.update_settings(db, business.id, {"cancellation_hours": -1})

        db.expire_all()
        assert BusinessService.get_settings(db, business.id).cancellation_hours == 24


class TestAuthEndpoints:

    def test_register_creates_business(self, client, db):
        response = client.post("/api/v1/auth/register", json={
            "email": "Owner@Example.com",
            "password": "password123",
            "business_name": "Cuts & Colour",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "owner@example.com"
        assert body["link_slug"] == "cuts-colour"
        assert body["access_token"]

        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["business"]["name"] == "Cuts & Colour"

        settings = client.get(
            "/api/v1/dashboard/business/settings",
            headers={"Authorization": f"Bearer {body['access_token']}"},
        )
        assert settings.json()["advance_booking_days"] == 30

    def test_duplicate_email(self, client, db, business):
        response = client.post("/api/v1/auth/register", json={
            "email": "owner@example.com",
            "password": "password123",
            "business_name": "Again",
        })
        assert response.status_code == 400

    def test_short_password(self, client, db):
        response = client.post("/api/v1/auth/register", json={
            "email": "new@example.com",
            "password": "short",
            "business_name": "Shop",
        })
        assert response.status_code == 422

    def test_login(self, client, db, business):
        response = client.post("/api/v1/auth/login", json={"email": "owner@example.com", "password": "password123"})

        assert response.status_code == 200
        assert response.json()["business_id"] == str(business.id)

    def test_wrong_password(self, client, db, business):
        response = client.post("/api/v1/auth/login", json={"email": "owner@example.com", "password": "nope-nope"})
        assert response.status_code == 401

    def test_garbage_token(self, client, db):
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401


class TestBusinessEndpoints:

    def test_update_profile(self, client, db, business, auth_headers):
        response = client.patch(
            "/api/v1/dashboard/business", json={"address": "Herzl 1, Tel Aviv"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["address"] == "Herzl 1, Tel Aviv"
        assert response.json()["name"] == "Noa Studio"

    def test_update_settings(self, client, db, business, auth_headers):
        response = client.patch(
            "/api/v1/dashboard/business/settings",
            json={"whatsapp_enabled": True, "advance_booking_days": 60},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["whatsapp_enabled"] is True
        assert response.json()["advance_booking_days"] == 60
        assert response.json()["cancellation_hours"] == 24

    def test_negative_setting_is_422(self, client, db, business, auth_headers):
        response = client.patch(
            "/api/v1/dashboard/business/settings", json={"buffer_minutes": -5}, headers=auth_headers
        )
        assert response.status_code == 422

    def test_regenerate_link_slug(self, client, db, business, auth_headers):
        make_business(db, name="Other", slug="new-name", email="other@example.com")

        response = client.post(
            "/api/v1/dashboard/business/link-slug", json={"business_name": "New Name"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["link_slug"] == "new-name-1"
        assert response.json()["business"]["name"] == "New Name"

    def test_inactive_business_link_is_404(self, client, db, business):
        business.is_active = False
        db.commit()

        assert client.get("/api/v1/public/booking/noa-studio").status_code == 404
