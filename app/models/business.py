# app/models/business.py
"""
Business Model - one tenant of the booking platform
Settings live in a 1:1 table so the slot handler can read them cheaply.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from app.models.base import Base


class Business(Base):
    __tablename__ = "businesses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    name = Column(String(200), nullable=False)
    phone_number = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(String(500), nullable=True)
    description = Column(String(1000), nullable=True)

    # Public booking link: /book/{link_slug}
    link_slug = Column(String(60), unique=True, nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    is_active = Column(Boolean, default=True)

    owner = relationship("User", back_populates="business")
    settings = relationship(
        "BusinessSettings",
        back_populates="business",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Business(id={self.id}, name={self.name})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "name": self.name,
            "phone_number": self.phone_number,
            "email": self.email,
            "address": self.address,
            "description": self.description,
            "link_slug": self.link_slug,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class BusinessSettings(Base):
    __tablename__ = "business_settings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(
        UUID(as_uuid=True),
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    # Gap owners want between bookings. Read by the slot handler but only
    # applied when APPLY_BOOKING_BUFFER is enabled.
    buffer_minutes = Column(Integer, nullable=False, default=15)
    advance_booking_days = Column(Integer, nullable=False, default=30)
    cancellation_hours = Column(Integer, nullable=False, default=24)

    # WhatsApp
    whatsapp_enabled = Column(Boolean, nullable=False, default=False)
    auto_confirmation_enabled = Column(Boolean, nullable=False, default=True)
    reminder_24h_enabled = Column(Boolean, nullable=False, default=True)
    reminder_2h_enabled = Column(Boolean, nullable=False, default=False)
    reminder_30m_enabled = Column(Boolean, nullable=False, default=False)

    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    business = relationship("Business", back_populates="settings")

    def to_dict(self):
        return {
            "business_id": str(self.business_id),
            "buffer_minutes": self.buffer_minutes,
            "advance_booking_days": self.advance_booking_days,
            "cancellation_hours": self.cancellation_hours,
            "whatsapp_enabled": self.whatsapp_enabled,
            "auto_confirmation_enabled": self.auto_confirmation_enabled,
            "reminder_24h_enabled": self.reminder_24h_enabled,
            "reminder_2h_enabled": self.reminder_2h_enabled,
            "reminder_30m_enabled": self.reminder_30m_enabled,
        }
