# app/models/reminder.py
"""Reminders queued for delivery ahead of an appointment"""
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from app.models.base import Base


class ReminderStatus:
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ScheduledReminder(Base):
    __tablename__ = "scheduled_reminders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    appointment_id = Column(
        UUID(as_uuid=True),
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    business_id = Column(UUID(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)

    reminder_type = Column(String(10), nullable=False)  # 24h, 2h, 30m
    scheduled_time = Column(DateTime(timezone=True), nullable=False, index=True)  # UTC
    status = Column(String(20), nullable=False, default=ReminderStatus.PENDING, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    processed_at = Column(DateTime(timezone=True), nullable=True)

    appointment = relationship("Appointment")

    def to_dict(self):
        return {
            "id": str(self.id),
            "appointment_id": str(self.appointment_id),
            "reminder_type": self.reminder_type,
            "scheduled_time": self.scheduled_time.isoformat(),
            "status": self.status,
        }
