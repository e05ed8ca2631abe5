"""Tests for roles, team members, invitations and member permissions."""

from datetime import timedelta

import pytest

from app.models import User
from app.models.team import InvitationStatus, Permission, Role, TeamInvitation, TeamMember
from app.services.exceptions import BookingError, ResourceNotFoundError
from app.services.team.invitation_service import InvitationService
from app.services.team.role_service import RoleService
from app.utils.time_utils import utc_now
from tests.conftest import (
    SUNDAY,
    add_appointment,
    add_team_member,
    make_business,
    member_headers,
    owner_headers,
)

TEAM = "/api/v1/dashboard/team"
AUTH = "/api/v1/auth"


def role_named(db, business, name):
    RoleService.ensure_default_roles(db, business.id)
    return db.query(Role).filter(Role.business_id == business.id, Role.name == name).one()


def invite(db, business, email="maya@example.com", role="Staff"):
    return InvitationService.create_invitation(
        db, business, email, role_named(db, business, role).id, invited_by=business.owner_id
    )


class TestRoles:

    def test_defaults_seeded_once(self, db, business):
        RoleService.ensure_default_roles(db, business.id)
        roles = RoleService.list_roles(db, business.id)

        assert [r.name for r in roles] == ["Administrator", "Manager", "Staff"]
        assert role_named(db, business, "Administrator").permissions == list(Permission.ALL)

    def test_create_keeps_canonical_order(self, db, business):
        role = RoleService.create_role(db, business.id, "Front desk", ["write", "read"])

        assert role.permissions == ["read", "write"]

    def test_duplicate_name(self, db, business):
        with pytest.raises(BookingError, match="already exists"):
            RoleService.create_role(db, business.id, "Manager", ["read"])

    def test_unknown_permission_is_422(self, client, business, auth_headers):
        response = client.post(f"{TEAM}/roles", json={"name": "Odd", "permissions": ["fly"]}, headers=auth_headers)

        assert response.status_code == 422

    def test_create_and_delete_over_http(self, client, business, auth_headers):
        created = client.post(
            f"{TEAM}/roles", json={"name": "Reports only", "permissions": ["read", "reports"]}, headers=auth_headers
        )
        assert created.status_code == 201

        deleted = client.delete(f"{TEAM}/roles/{created.json()['id']}", headers=auth_headers)
        assert deleted.status_code == 204

        names = [r["name"] for r in client.get(f"{TEAM}/roles", headers=auth_headers).json()["roles"]]
        assert "Reports only" not in names

    def test_role_in_use_cannot_be_deleted(self, db, business):
        invitation = invite(db, business)

        with pytest.raises(BookingError):
            RoleService.delete_role(db, business.id, invitation.role_id)

    def test_other_business_role_not_found(self, db, business):
        other = make_business(db, name="Other", slug="other", email="other@example.com")
        foreign = role_named(db, other, "Staff")

        with pytest.raises(ResourceNotFoundError):
            RoleService.get_role(db, business.id, foreign.id)


class TestInvitations:

    def test_create(self, client, db, business, auth_headers):
        role = role_named(db, business, "Manager")

        response = client.post(
            f"{TEAM}/invitations", json={"email": "Maya@Example.com", "role_id": str(role.id)}, headers=auth_headers
        )

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "maya@example.com"
        assert body["role_name"] == "Manager"
        assert body["status"] == InvitationStatus.PENDING
        assert body["invite_url"].endswith(f"/register?invite={db.query(TeamInvitation).one().token}")

    def test_pending_duplicate_rejected(self, db, business):
        invite(db, business)

        with pytest.raises(BookingError, match="already sent"):
            invite(db, business)

    def test_existing_account_rejected(self, client, db, business, auth_headers):
        role = role_named(db, business, "Staff")

        response = client.post(
            f"{TEAM}/invitations", json={"email": "owner@example.com", "role_id": str(role.id)}, headers=auth_headers
        )

        assert response.status_code == 400

    def test_revoke(self, client, db, business, auth_headers):
        invitation = invite(db, business)

        assert client.delete(f"{TEAM}/invitations/{invitation.id}", headers=auth_headers).status_code == 204
        assert client.get(f"{TEAM}/invitations", headers=auth_headers).json()["total"] == 0

        closed = client.get(f"{TEAM}/invitations", params={"include_closed": True}, headers=auth_headers).json()
        assert closed["invitations"][0]["status"] == InvitationStatus.REVOKED

        # Revoking twice is refused
        assert client.delete(f"{TEAM}/invitations/{invitation.id}", headers=auth_headers).status_code == 400

    def test_resend_extends_expiry(self, db, business):
        invitation = invite(db, business)
        invitation.expires_at = utc_now() + timedelta(hours=1)
        db.commit()

        renewed = InvitationService.resend_invitation(db, business.id, invitation.id)

        assert renewed.status == InvitationStatus.PENDING
        assert not renewed.is_expired()
        # Compared naive: SQLite drops the UTC offset on the way back
        assert renewed.expires_at.replace(tzinfo=None) > (utc_now() + timedelta(days=6)).replace(tzinfo=None)

    def test_expired_invitation_is_marked(self, db, business):
        invitation = invite(db, business)
        invitation.expires_at = utc_now() - timedelta(minutes=1)
        db.commit()

        with pytest.raises(BookingError, match="expired"):
            InvitationService.resend_invitation(db, business.id, invitation.id)

        db.expire_all()
        assert db.get(TeamInvitation, invitation.id).status == InvitationStatus.EXPIRED

    def test_stale_invitations_drop_out_of_pending_list(self, db, business):
        invitation = invite(db, business)
        invitation.expires_at = utc_now() - timedelta(minutes=1)
        db.commit()

        assert InvitationService.list_invitations(db, business.id) == []
        # An expired invitation no longer blocks a fresh one
        assert invite(db, business).status == InvitationStatus.PENDING


class TestAcceptInvitation:

    def test_preview(self, client, db, business):
        invitation = invite(db, business, role="Manager")

        response = client.get(f"{AUTH}/invitations/{invitation.token}")

        assert response.status_code == 200
        assert response.json()["business_name"] == "Noa Studio"
        assert response.json()["role_name"] == "Manager"

    def test_unknown_token(self, client, business):
        assert client.get(f"{AUTH}/invitations/not-a-token").status_code == 404

    def test_accept_creates_member_and_signs_in(self, client, db, business):
        invitation = invite(db, business)

        response = client.post(
            f"{AUTH}/accept-invitation",
            json={"token": invitation.token, "password": "password123", "full_name": "Maya"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "maya@example.com"
        assert body["business_id"] == str(business.id)

        me = client.get(f"{AUTH}/me", headers={"Authorization": f"Bearer {body['access_token']}"}).json()
        assert me["business"]["id"] == str(business.id)
        assert me["membership"]["role_name"] == "Staff"

        db.expire_all()
        assert db.get(TeamInvitation, invitation.id).status == InvitationStatus.ACCEPTED

    def test_token_works_once(self, client, db, business):
        invitation = invite(db, business)
        payload = {"token": invitation.token, "password": "password123"}

        assert client.post(f"{AUTH}/accept-invitation", json=payload).status_code == 201
        assert client.post(f"{AUTH}/accept-invitation", json=payload).status_code == 400

    def test_member_login_returns_business(self, client, db, business):
        add_team_member(db, business)

        response = client.post(f"{AUTH}/login", json={"email": "maya@example.com", "password": "password123"})

        assert response.status_code == 200
        assert response.json()["business_id"] == str(business.id)


class TestMemberPermissions:

    def test_staff_can_read_and_write_but_not_delete(self, client, db, business):
        headers = member_headers(add_team_member(db, business, role_name="Staff"))
        appointment = add_appointment(db, business, SUNDAY, "10:00")

        assert client.get("/api/v1/dashboard/appointments", headers=headers).status_code == 200
        response = client.delete(f"/api/v1/dashboard/appointments/{appointment.id}", headers=headers)
        assert response.status_code == 403
        assert "delete" in response.json()["detail"]

    def test_staff_cannot_manage_team(self, client, db, business):
        headers = member_headers(add_team_member(db, business, role_name="Staff"))

        assert client.get(f"{TEAM}/members", headers=headers).status_code == 403

    def test_administrator_manages_team(self, client, db, business):
        headers = member_headers(add_team_member(db, business, role_name="Administrator"))

        assert client.get(f"{TEAM}/members", headers=headers).status_code == 200

    def test_inactive_member_loses_access(self, client, db, business, auth_headers):
        member = add_team_member(db, business)

        response = client.patch(f"{TEAM}/members/{member.id}", json={"status": "inactive"}, headers=auth_headers)

        assert response.status_code == 200
        assert client.get("/api/v1/dashboard/appointments", headers=member_headers(member)).status_code == 404

    def test_change_role(self, client, db, business, auth_headers):
        member = add_team_member(db, business)
        manager = role_named(db, business, "Manager")

        response = client.patch(f"{TEAM}/members/{member.id}", json={"role_id": str(manager.id)}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["role_name"] == "Manager"
        assert "reports" in response.json()["permissions"]

    def test_remove_member(self, client, db, business, auth_headers):
        member = add_team_member(db, business)
        user_id = member.user_id

        assert client.delete(f"{TEAM}/members/{member.id}", headers=auth_headers).status_code == 204

        db.expire_all()
        assert db.query(TeamMember).count() == 0
        assert db.get(User, user_id).is_active is False

    def test_members_scoped_to_business(self, client, db, business):
        other = make_business(db, name="Other", slug="other", email="other@example.com")
        member = add_team_member(db, other)

        response = client.get(f"{TEAM}/members/{member.id}", headers=owner_headers(business))

        assert response.status_code == 404
