# app/services/whatsapp/whatsapp_notifier.py
"""WhatsApp delivery via Twilio, with a click-to-chat link fallback"""
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from twilio.rest import Client
from twilio.base.exceptions import TwilioException

from app.config.settings import get_settings
import logging

logger = logging.getLogger(__name__)
settings = get_settings()


def normalize_phone(phone: str, country_code: Optional[str] = None) -> str:
    """
    Digits-only international form.

    "050-123 4567" -> "972501234567"; numbers already carrying the country
    code are kept as they are.
    """
    country_code = country_code or settings.WHATSAPP_COUNTRY_CODE
    digits = re.sub(r"\D", "", phone or "")
    if digits.startswith(country_code):
        return digits
    if digits.startswith("0"):
        digits = digits[1:]
    return f"{country_code}{digits}"


@dataclass
class DeliveryResult:
    success: bool
    method: str  # "api" or "link"
    message_id: Optional[str] = None
    link: Optional[str] = None
    error: Optional[str] = None


class WhatsAppNotifier:
    """Sends one text message to one phone number"""

    def __init__(self, account_sid: Optional[str] = None, auth_token: Optional[str] = None,
                 from_number: Optional[str] = None):
        self.account_sid = account_sid if account_sid is not None else settings.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token if auth_token is not None else settings.TWILIO_AUTH_TOKEN
        self.from_number = from_number if from_number is not None else settings.TWILIO_WHATSAPP_FROM
        self._client = None

    @property
    def api_enabled(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = Client(self.account_sid, self.auth_token)
        return self._client

    def send(self, phone: str, message: str) -> DeliveryResult:
        to_number = normalize_phone(phone)

        if not self.api_enabled:
            link = f"https://wa.me/{to_number}?text={quote(message)}"
            logger.info(f"WhatsApp API not configured, generated link for {to_number}")
            return DeliveryResult(success=True, method="link", link=link)

        try:
            twilio_message = self.client.messages.create(
                body=message,
                from_=f"whatsapp:{self.from_number}",
                to=f"whatsapp:+{to_number}"
            )
            logger.info(f"WhatsApp message sent to {to_number}: {twilio_message.sid}")
            return DeliveryResult(success=True, method="api", message_id=twilio_message.sid)

        except TwilioException as e:
            logger.error(f"Twilio error sending WhatsApp to {to_number}: {str(e)}")
            return DeliveryResult(success=False, method="api", error=str(e))


whatsapp_notifier = WhatsAppNotifier()
