# app/models/whatsapp.py
"""WhatsApp message templates and the outbound message log"""
from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid
from app.models.base import Base


class MessageType:
    CONFIRMATION = "confirmation"
    REMINDER = "reminder"
    CANCELLATION = "cancellation"
    RESCHEDULE = "reschedule"

    ALL = (CONFIRMATION, REMINDER, CANCELLATION, RESCHEDULE)


class WhatsAppTemplate(Base):
    __tablename__ = "whatsapp_templates"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(UUID(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)

    template_type = Column(String(20), nullable=False)
    message_template = Column(Text, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("business_id", "template_type", name="uq_whatsapp_template_type"),
    )

    def to_dict(self):
        return {
            "id": str(self.id),
            "template_type": self.template_type,
            "message_template": self.message_template,
            "is_active": self.is_active,
        }


class WhatsAppMessage(Base):
    __tablename__ = "whatsapp_messages"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(UUID(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    appointment_id = Column(UUID(as_uuid=True), ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True)

    phone_number = Column(String(30), nullable=False)
    message_type = Column(String(20), nullable=False)
    message_content = Column(Text, nullable=False)

    status = Column(String(20), nullable=False)  # sent, failed
    method = Column(String(10), nullable=True)  # api, link
    external_id = Column(String, nullable=True)
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    sent_at = Column(DateTime(timezone=True), nullable=True)
