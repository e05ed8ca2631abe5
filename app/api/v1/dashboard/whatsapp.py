# app/api/v1/dashboard/whatsapp.py
"""WhatsApp templates and manual messages"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from app.api.dependencies import get_current_business
from app.config.database import get_db
from app.models.business import Business
from app.schemas.whatsapp import SendMessageRequest, TemplateUpsert
from app.services.exceptions import BookingError
from app.services.whatsapp.notification_service import NotificationService
from app.services.whatsapp.template_service import DEFAULT_TEMPLATES, TemplateService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/whatsapp", tags=["dashboard-whatsapp"])


@router.get("/templates")
def list_templates(
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    """Saved templates, plus the built-in text used for any type without one."""
    return {
        "templates": [t.to_dict() for t in TemplateService.list_templates(db, business.id)],
        "defaults": DEFAULT_TEMPLATES,
    }


@router.put("/templates")
def upsert_template(
        template_data: TemplateUpsert,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    template = TemplateService.upsert_template(
        db,
        business.id,
        template_data.template_type,
        template_data.message_template,
        template_data.is_active,
    )
    return template.to_dict()


@router.post("/send")
def send_message(
        request: SendMessageRequest,
        business: Business = Depends(get_current_business),
        db: Session = Depends(get_db)
):
    """
    Send a message now. Without custom_message the active template for
    message_type is rendered with template_variables.
    """
    try:
        result = NotificationService.send_appointment_message(
            db,
            business.id,
            phone_number=request.phone_number,
            message_type=request.message_type,
            appointment_id=request.appointment_id,
            custom_message=request.custom_message,
            template_variables=request.template_variables,
        )
    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.error(f"Error sending WhatsApp message: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail={"error": "send_failed", "message": str(e)})

    if not result["success"]:
        raise HTTPException(status_code=502, detail={"error": "delivery_failed", **result})
    return result
