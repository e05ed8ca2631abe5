"""Schemas for WhatsApp templates and manual sends"""
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.models.whatsapp import MessageType


def _message_type(v: str) -> str:
    if v not in MessageType.ALL:
        raise ValueError(f"Type must be one of: {', '.join(MessageType.ALL)}")
    return v


class TemplateUpsert(BaseModel):
    template_type: str
    message_template: str = Field(..., min_length=1)
    is_active: bool = True

    @field_validator("template_type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        return _message_type(v)

    class Config:
        json_schema_extra = {
            "example": {
                "template_type": "confirmation",
                "message_template": "Hi {{customer_name}}, see you on {{date}} at {{time}}!"
                                    "{{#business_address}} We're at {{business_address}}.{{/business_address}}",
                "is_active": True
            }
        }


class SendMessageRequest(BaseModel):
    phone_number: str = Field(..., min_length=7, max_length=30)
    message_type: str
    appointment_id: Optional[UUID] = None
    custom_message: Optional[str] = None
    template_variables: Optional[Dict[str, Any]] = None

    @field_validator("message_type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        return _message_type(v)
