# app/models/__init__.py
from .base import Base
from .user import User
from .business import Business, BusinessSettings
from .staff import StaffMember
from .service import Service, service_staff_association
from .availability import AvailabilityWindow, BlockedDate
from .appointment import Appointment, AppointmentStatus
from .reminder import ScheduledReminder, ReminderStatus
from .whatsapp import WhatsAppTemplate, WhatsAppMessage, MessageType
from .team import (
    Permission,
    Role,
    TeamMember,
    TeamMemberStatus,
    TeamInvitation,
    InvitationStatus,
)

__all__ = [
    "Base",
    "User",
    "Business",
    "BusinessSettings",
    "StaffMember",
    "Service",
    "service_staff_association",
    "AvailabilityWindow",
    "BlockedDate",
    "Appointment",
    "AppointmentStatus",
    "ScheduledReminder",
    "ReminderStatus",
    "WhatsAppTemplate",
    "WhatsAppMessage",
    "MessageType",
    "Permission",
    "Role",
    "TeamMember",
    "TeamMemberStatus",
    "TeamInvitation",
    "InvitationStatus",
]
