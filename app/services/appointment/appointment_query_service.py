# ============================================================================
# FILE: app/services/appointment/appointment_query_service.py
# Read-side of appointments for the dashboard
# ============================================================================
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional, Dict, Any
from uuid import UUID

from app.models.appointment import Appointment, AppointmentStatus
from app.utils.time_utils import local_today


class AppointmentQueryService:
    """Filtering and pagination over a business's appointments."""

    @staticmethod
    def list_appointments(
            db: Session,
            business_id: UUID,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            status: Optional[str] = None,
            staff_member_id: Optional[UUID] = None,
            customer_phone: Optional[str] = None,
            skip: int = 0,
            limit: int = 50
    ) -> Dict[str, Any]:
        """Get paginated list of appointments with filters."""
        query = db.query(Appointment).filter(Appointment.business_id == business_id)

        if start_date:
            query = query.filter(Appointment.date >= start_date)
        if end_date:
            query = query.filter(Appointment.date <= end_date)
        if status:
            query = query.filter(Appointment.status == status)
        if staff_member_id:
            query = query.filter(Appointment.staff_member_id == staff_member_id)
        if customer_phone:
            query = query.filter(Appointment.customer_phone == customer_phone)

        query = query.order_by(Appointment.date.asc(), Appointment.start_time.asc())
        total = query.count()
        appointments = query.offset(skip).limit(limit).all()

        return {
            "business_id": str(business_id),
            "total_appointments": total,
            "page": {
                "skip": skip,
                "limit": limit,
                "total_pages": (total + limit - 1) // limit if total > 0 else 0
            },
            "filters": {
                "start_date": start_date.isoformat() if start_date else None,
                "end_date": end_date.isoformat() if end_date else None,
                "status": status,
                "staff_member_id": str(staff_member_id) if staff_member_id else None,
                "customer_phone": customer_phone
            },
            "appointments": [appt.to_dict() for appt in appointments]
        }

    @staticmethod
    def get_todays_appointments(
            db: Session,
            business_id: UUID
    ) -> Dict[str, Any]:
        """Scheduled and confirmed appointments for today (business timezone)."""
        today = local_today()

        appointments = db.query(Appointment).filter(
            Appointment.business_id == business_id,
            Appointment.date == today,
            Appointment.status.in_([AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED])
        ).order_by(Appointment.start_time.asc()).all()

        return {
            "business_id": str(business_id),
            "date": today.isoformat(),
            "total_appointments": len(appointments),
            "appointments": [appt.to_dict() for appt in appointments]
        }
