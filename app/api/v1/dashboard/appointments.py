# ============================================================================
# FILE: app/api/v1/dashboard/appointments.py
# Session authenticated endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException, Query, Path
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID
import logging

from app.config.database import get_db
from app.models.business import Business
from app.api.dependencies import get_current_business
from app.schemas.appointment import AppointmentCancel, AppointmentCreate, AppointmentReschedule, AppointmentUpdate
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.appointment.appointment_service import AppointmentService
from app.services.exceptions import BookingError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["dashboard-appointments"])


@router.get("")
def list_appointments(
        start_date: Optional[date] = Query(None, description="Filter appointments on or after this date"),
        end_date: Optional[date] = Query(None, description="Filter appointments on or before this date"),
        status: Optional[str] = Query(None,
                                      description="Filter by status (scheduled, confirmed, cancelled, completed, no_show)"),
        staff_member_id: Optional[UUID] = Query(None, description="Filter by staff member"),
        customer_phone: Optional[str] = Query(None, description="Filter by customer phone number"),
        skip: int = Query(0, ge=0, description="Number of records to skip"),
        limit: int = Query(50, ge=1, le=100, description="Number of records to return"),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    """
    Get a list of all appointments for your business.
    Requires authenticated session.
    """
    return AppointmentQueryService.list_appointments(
        db=db,
        business_id=business.id,
        start_date=start_date,
        end_date=end_date,
        status=status,
        staff_member_id=staff_member_id,
        customer_phone=customer_phone,
        skip=skip,
        limit=limit
    )


@router.get("/upcoming/today")
def get_todays_appointments(
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    """Get all appointments scheduled for today."""
    return AppointmentQueryService.get_todays_appointments(db=db, business_id=business.id)


@router.get("/{appointment_id}")
def get_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    return AppointmentService.get_appointment(db, business.id, appointment_id).to_dict()


@router.post("", status_code=201)
def create_appointment(
        request: AppointmentCreate,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    """
    Book on behalf of a customer. The owner may book outside the public
    booking horizon, but never on top of another appointment (409).
    """
    try:
        appointment = AppointmentService.create_appointment(
            db,
            business_id=business.id,
            customer_name=request.customer_name,
            appointment_date=request.date,
            start_time=request.time,
            customer_phone=request.customer_phone,
            service_id=request.service_id,
            staff_member_id=request.staff_member_id,
            service_description=request.service_description,
            notes=request.notes,
        )
        return {"message": "Appointment added successfully", "appointment": appointment.to_dict()}

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.error(f"Error creating appointment: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail={"error": "create_failed", "message": str(e)})


@router.patch("/{appointment_id}")
def update_appointment(
        request: AppointmentUpdate,
        appointment_id: UUID = Path(...),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    appointment = AppointmentService.update_appointment(
        db, business.id, appointment_id, status=request.status, notes=request.notes
    )
    return appointment.to_dict()


@router.post("/{appointment_id}/reschedule")
def reschedule_appointment(
        request: AppointmentReschedule,
        appointment_id: UUID = Path(...),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    try:
        appointment = AppointmentService.reschedule_appointment(
            db, business.id, appointment_id, request.date, request.time, request.staff_member_id
        )
        return {"message": "Appointment rescheduled", "appointment": appointment.to_dict()}

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.error(f"Error rescheduling appointment {appointment_id}: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail={"error": "reschedule_failed", "message": str(e)})


@router.post("/{appointment_id}/cancel")
def cancel_appointment(
        request: Optional[AppointmentCancel] = None,
        appointment_id: UUID = Path(...),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    reason = request.reason if request else None
    appointment = AppointmentService.cancel_appointment(db, business.id, appointment_id, reason=reason)
    return {"message": "Appointment cancelled", "appointment": appointment.to_dict()}


@router.delete("/{appointment_id}", status_code=204)
def delete_appointment(
        appointment_id: UUID = Path(...),
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    AppointmentService.delete_appointment(db, business.id, appointment_id)
