# app/services/whatsapp/template_service.py
"""Message templates: placeholder rendering and per-business overrides"""
import re
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.models.appointment import Appointment
from app.models.business import Business
from app.models.whatsapp import MessageType, WhatsAppTemplate
from app.services.exceptions import BookingError
import logging

logger = logging.getLogger(__name__)
settings = get_settings()

_CONDITIONAL = re.compile(r"{{#(\w+)}}(.*?){{/\1}}", re.DOTALL)
_PLACEHOLDER = re.compile(r"{{(\w+)}}")

DEFAULT_TEMPLATES = {
    MessageType.CONFIRMATION: (
        "Hi {{customer_name}}! Your appointment at {{business_name}} is confirmed "
        "for {{date}} at {{time}}."
        "{{#service_name}} Service: {{service_name}}.{{/service_name}}"
        "{{#business_address}} Address: {{business_address}}.{{/business_address}}"
        "{{#management_link}}\nManage your booking: {{management_link}}{{/management_link}}"
    ),
    MessageType.REMINDER: (
        "Reminder: {{customer_name}}, you have an appointment at {{business_name}} "
        "{{#reminder_time}}{{reminder_time}}, {{/reminder_time}}on {{date}} at {{time}}."
        "{{#business_address}} Address: {{business_address}}.{{/business_address}}"
    ),
    MessageType.CANCELLATION: (
        "Hi {{customer_name}}, your appointment at {{business_name}} on {{date}} "
        "at {{time}} has been cancelled."
    ),
    MessageType.RESCHEDULE: (
        "Hi {{customer_name}}, your appointment at {{business_name}} has been moved "
        "to {{date}} at {{time}}."
    ),
}


def _as_text(value: Any) -> str:
    if value is None or value is False:
        return ""
    return str(value)


def render_template(template: str, variables: Dict[str, Any]) -> str:
    """
    Fill a message template.

    {{name}} is replaced by the variable's value, or nothing when it is missing
    or falsy. {{#name}}...{{/name}} keeps its content only when the variable is
    truthy. The result is stripped of surrounding whitespace.
    """
    def _conditional(match):
        key, content = match.group(1), match.group(2)
        return content if variables.get(key) else ""

    rendered = _CONDITIONAL.sub(_conditional, template)
    rendered = _PLACEHOLDER.sub(lambda m: _as_text(variables.get(m.group(1))), rendered)
    return rendered.strip()


def build_variables(appointment: Appointment, business: Business) -> Dict[str, str]:
    """Template variables describing one appointment"""
    management_link = None
    if business.link_slug:
        management_link = (
            f"{settings.PUBLIC_APP_URL.rstrip('/')}/book/{business.link_slug}"
            f"?appointmentId={appointment.id}"
        )

    return {
        "customer_name": appointment.customer_name,
        "date": appointment.date.strftime("%d/%m/%Y"),
        "time": appointment.start_time.strftime("%H:%M"),
        "business_name": business.name,
        "business_address": business.address or "",
        "service_name": appointment.service_description or "",
        "service_duration": str(appointment.duration_minutes),
        "management_link": management_link or "",
    }


class TemplateService:

    @staticmethod
    def list_templates(db: Session, business_id: UUID) -> List[WhatsAppTemplate]:
        return db.query(WhatsAppTemplate).filter(
            WhatsAppTemplate.business_id == business_id
        ).order_by(WhatsAppTemplate.template_type.asc()).all()

    @staticmethod
    def get_active_template(db: Session, business_id: UUID, template_type: str) -> Optional[WhatsAppTemplate]:
        return db.query(WhatsAppTemplate).filter(
            WhatsAppTemplate.business_id == business_id,
            WhatsAppTemplate.template_type == template_type,
            WhatsAppTemplate.is_active == True
        ).first()

    @staticmethod
    def upsert_template(
            db: Session,
            business_id: UUID,
            template_type: str,
            message_template: str,
            is_active: bool = True
    ) -> WhatsAppTemplate:
        if template_type not in MessageType.ALL:
            raise BookingError(f"Unknown template type: {template_type}")

        template = db.query(WhatsAppTemplate).filter(
            WhatsAppTemplate.business_id == business_id,
            WhatsAppTemplate.template_type == template_type
        ).first()

        if template:
            template.message_template = message_template
            template.is_active = is_active
        else:
            template = WhatsAppTemplate(
                business_id=business_id,
                template_type=template_type,
                message_template=message_template,
                is_active=is_active,
            )
            db.add(template)

        db.commit()
        db.refresh(template)
        logger.info(f"Saved {template_type} template for business {business_id}")
        return template

    @staticmethod
    def compose(
            db: Session,
            appointment: Appointment,
            business: Business,
            message_type: str,
            extra: Optional[Dict[str, Any]] = None
    ) -> str:
        """Render the business's active template for the type, or the default text"""
        template = TemplateService.get_active_template(db, business.id, message_type)
        source = template.message_template if template else DEFAULT_TEMPLATES[message_type]
        variables = build_variables(appointment, business)
        variables.update(extra or {})
        return render_template(source, variables)
