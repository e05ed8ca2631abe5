"""Shared test fixtures and helpers."""

import os

# Configure before the app modules read settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["TWILIO_ACCOUNT_SID"] = ""
os.environ["TWILIO_AUTH_TOKEN"] = ""
os.environ["APPLY_BOOKING_BUFFER"] = "false"
os.environ["DEFAULT_TIMEZONE"] = "Asia/Jerusalem"

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import create_access_token
from app.config.database import SessionLocal, engine
from app.main import app
from app.models import (
    Appointment,
    AppointmentStatus,
    Base,
    Business,
    BusinessSettings,
    Service,
    StaffMember,
    User,
)
from app.models.availability import AvailabilityWindow, BlockedDate
from app.models.team import Role, TeamMember
from app.services.appointment import appointment_service
from app.services.availability.availability_service import day_of_week
from app.services.team.role_service import RoleService
from app.services.whatsapp import notification_service
from app.services.whatsapp.whatsapp_notifier import DeliveryResult
from app.utils.time_utils import local_today

# 2025-06-01 is a Sunday (day_of_week == 0)
SUNDAY = date(2025, 6, 1)


class QueuedTask:
    """Stands in for a Celery task; records .delay() calls instead of hitting a broker."""

    def __init__(self):
        self.calls = []

    def delay(self, *args):
        self.calls.append(args)


class FakeNotifier:
    """Records outgoing WhatsApp messages."""

    def __init__(self, success: bool = True):
        self.success = success
        self.sent = []

    def send(self, phone: str, message: str) -> DeliveryResult:
        self.sent.append((phone, message))
        if self.success:
            return DeliveryResult(success=True, method="link", link=f"https://wa.me/{phone}")
        return DeliveryResult(success=False, method="api", error="rejected")


@pytest.fixture(autouse=True)
def queued_notifications(monkeypatch):
    task = QueuedTask()
    monkeypatch.setattr(appointment_service, "send_appointment_notification", task)
    return task


@pytest.fixture
def notifier(monkeypatch):
    fake = FakeNotifier()
    monkeypatch.setattr(notification_service, "whatsapp_notifier", fake)
    return fake


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def business(db):
    return make_business(db)


@pytest.fixture
def auth_headers(business):
    return owner_headers(business)


def owner_headers(business: Business) -> dict:
    return {"Authorization": f"Bearer {create_access_token(business.owner_id)}"}


def make_business(
    db,
    name: str = "Noa Studio",
    slug: str = "noa-studio",
    email: str = "owner@example.com",
    **settings_overrides,
) -> Business:
    """Owner, business and settings rows in one go."""
    owner = User(email=email, hashed_password=User.hash_password("password123"), full_name="Noa")
    db.add(owner)
    db.flush()

    business = Business(owner_id=owner.id, name=name, link_slug=slug, is_active=True)
    business.settings = BusinessSettings(**settings_overrides)
    db.add(business)
    db.commit()
    db.refresh(business)
    return business


def add_window(
    db,
    business: Business,
    day: int,
    start: str,
    end: str,
    staff: Optional[StaffMember] = None,
    is_active: bool = True,
) -> AvailabilityWindow:
    window = AvailabilityWindow(
        business_id=business.id,
        staff_member_id=staff.id if staff else None,
        day_of_week=day,
        start_time=time.fromisoformat(start),
        end_time=time.fromisoformat(end),
        is_active=is_active,
    )
    db.add(window)
    db.commit()
    return window


def add_blocked_date(db, business: Business, blocked: date, staff: Optional[StaffMember] = None) -> BlockedDate:
    row = BlockedDate(business_id=business.id, blocked_date=blocked, staff_member_id=staff.id if staff else None)
    db.add(row)
    db.commit()
    return row


def add_staff(db, business: Business, name: str = "Maya") -> StaffMember:
    staff = StaffMember(business_id=business.id, name=name, is_active=True)
    db.add(staff)
    db.commit()
    db.refresh(staff)
    return staff


def add_service(
    db,
    business: Business,
    name: str = "Haircut",
    duration: Optional[int] = 30,
    price: Optional[str] = None,
) -> Service:
    service = Service(
        business_id=business.id,
        name=name,
        duration_minutes=duration,
        price=Decimal(price) if price is not None else None,
        is_active=True,
    )
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


def add_appointment(
    db,
    business: Business,
    on: date,
    start: str,
    duration: int = 30,
    staff: Optional[StaffMember] = None,
    status: str = AppointmentStatus.SCHEDULED,
    phone: Optional[str] = "0501234567",
    service: Optional[Service] = None,
    reason: Optional[str] = None,
) -> Appointment:
    """Insert a booking directly, bypassing the overlap checks."""
    begins = time.fromisoformat(start)
    ends = (datetime.combine(on, begins) + timedelta(minutes=duration)).time()
    appointment = Appointment(
        business_id=business.id,
        staff_member_id=staff.id if staff else None,
        service_id=service.id if service else None,
        customer_name="Dana Levi",
        customer_phone=phone,
        date=on,
        start_time=begins,
        end_time=ends,
        duration_minutes=duration,
        status=status,
        cancellation_reason=reason,
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return appointment


def add_team_member(db, business: Business, role_name: str = "Staff", email: str = "maya@example.com") -> TeamMember:
    """A signed-up member holding one of the business's default roles."""
    RoleService.ensure_default_roles(db, business.id)
    role = db.query(Role).filter(Role.business_id == business.id, Role.name == role_name).one()

    user = User(email=email, hashed_password=User.hash_password("password123"), full_name="Maya")
    db.add(user)
    db.flush()

    member = TeamMember(business_id=business.id, user_id=user.id, role_id=role.id, invited_by=business.owner_id)
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


def member_headers(member: TeamMember) -> dict:
    return {"Authorization": f"Bearer {create_access_token(member.user_id)}"}


def open_day_ahead(db, business: Business, days: int = 7, start: str = "09:00", end: str = "12:00") -> date:
    """A bookable future date with one general window on it."""
    target = local_today() + timedelta(days=days)
    add_window(db, business, day_of_week(target), start, end)
    return target
