# ============================================================================
# FILE: app/api/v1/public/booking.py
# Public booking endpoints - reached through a business's link slug
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException, Query, Path
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID
import logging

from app.config.database import get_db
from app.schemas.appointment import PublicBookingRequest, PublicCancelRequest, PublicRescheduleRequest
from app.schemas.availability import AvailableSlotsResponse
from app.services.appointment.booking_service import BookingService
from app.services.availability.availability_service import AvailabilityService
from app.services.business.business_service import BusinessService
from app.services.catalog.service_catalog_service import ServiceCatalogService
from app.services.catalog.staff_service import StaffService
from app.services.exceptions import BookingError

logger = logging.getLogger(__name__)
router = APIRouter(tags=["public-booking"])


def _slot_lookup_failed(db: Session, e: Exception) -> HTTPException:
    logger.error(f"Error computing available slots: {str(e)}", exc_info=True)
    db.rollback()
    return HTTPException(
        status_code=500,
        detail={"error": "slot_lookup_failed", "message": "Could not compute available slots"}
    )


@router.get("/booking/{slug}")
def get_booking_page(
        slug: str = Path(..., description="The business's public link slug"),
        db: Session = Depends(get_db)
):
    """Business profile, booking policy and catalogue for the public booking page."""
    business = BusinessService.get_business_by_slug(db, slug)
    booking_settings = BusinessService.get_settings(db, business.id)

    return {
        "business": business.to_dict(),
        "settings": {
            "advance_booking_days": booking_settings.advance_booking_days,
            "cancellation_hours": booking_settings.cancellation_hours,
        },
        "services": [s.to_dict() for s in ServiceCatalogService.list_services(db, business.id)],
        "staff": [s.to_dict() for s in StaffService.list_staff(db, business.id)],
    }


@router.get("/booking/{slug}/available-slots", response_model=AvailableSlotsResponse)
def get_available_slots_by_slug(
        slug: str = Path(..., description="The business's public link slug"),
        date: date = Query(..., description="Day to search (YYYY-MM-DD)"),
        service_id: Optional[UUID] = Query(None, description="Size slots to this service's duration"),
        staff_member_id: Optional[UUID] = Query(None, description="Search this staff member's calendar"),
        db: Session = Depends(get_db)
):
    """
    Bookable start times for one day.
    An empty list means the day is fully booked, blocked or closed.
    """
    try:
        business = BusinessService.get_business_by_slug(db, slug)
        slots = AvailabilityService.get_available_slots(
            db, business.id, date, service_id=service_id, staff_member_id=staff_member_id
        )
        return AvailableSlotsResponse(date=date, slots=slots)

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        raise _slot_lookup_failed(db, e)


@router.get("/available-slots", response_model=AvailableSlotsResponse)
def get_available_slots(
        business_id: Optional[UUID] = Query(None, description="The business ID"),
        date: Optional[date] = Query(None, description="Day to search (YYYY-MM-DD)"),
        service_id: Optional[UUID] = Query(None),
        staff_member_id: Optional[UUID] = Query(None),
        db: Session = Depends(get_db)
):
    """Slot lookup by business id, kept for embedded widgets."""
    if not business_id or not date:
        raise HTTPException(status_code=400, detail="business_id and date are required")

    try:
        slots = AvailabilityService.get_available_slots(
            db, business_id, date, service_id=service_id, staff_member_id=staff_member_id
        )
        return AvailableSlotsResponse(date=date, slots=slots)

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        raise _slot_lookup_failed(db, e)


@router.post("/booking/{slug}/appointments", status_code=201)
def book_appointment(
        request: PublicBookingRequest,
        slug: str = Path(...),
        db: Session = Depends(get_db)
):
    """Book one of the offered slots. 409 when the slot was taken in the meantime."""
    try:
        business = BusinessService.get_business_by_slug(db, slug)
        appointment = BookingService.book(
            db,
            business,
            customer_name=request.customer_name,
            customer_phone=request.customer_phone,
            target_date=request.date,
            start_time=request.time,
            service_id=request.service_id,
            staff_member_id=request.staff_member_id,
            service_description=request.service_description,
            notes=request.notes,
        )
        return {"message": "Appointment booked successfully", "appointment": appointment.to_dict()}

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.error(f"Error booking appointment for {slug}: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail={"error": "booking_failed", "message": str(e)})


@router.post("/booking/{slug}/appointments/{appointment_id}/reschedule")
def reschedule_appointment(
        request: PublicRescheduleRequest,
        slug: str = Path(...),
        appointment_id: UUID = Path(...),
        db: Session = Depends(get_db)
):
    try:
        business = BusinessService.get_business_by_slug(db, slug)
        appointment = BookingService.reschedule(
            db,
            business,
            appointment_id=appointment_id,
            customer_phone=request.customer_phone,
            new_date=request.date,
            new_time=request.time,
            staff_member_id=request.staff_member_id,
        )
        return {"message": "Appointment rescheduled", "appointment": appointment.to_dict()}

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.error(f"Error rescheduling appointment {appointment_id}: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail={"error": "reschedule_failed", "message": str(e)})


@router.post("/booking/{slug}/appointments/{appointment_id}/cancel")
def cancel_appointment(
        request: PublicCancelRequest,
        slug: str = Path(...),
        appointment_id: UUID = Path(...),
        db: Session = Depends(get_db)
):
    """Cancel subject to the business's minimum notice."""
    try:
        business = BusinessService.get_business_by_slug(db, slug)
        appointment = BookingService.cancel(
            db, business, appointment_id, request.customer_phone, request.reason
        )
        return {"message": "Appointment cancelled", "appointment": appointment.to_dict()}

    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.error(f"Error cancelling appointment {appointment_id}: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail={"error": "cancel_failed", "message": str(e)})
