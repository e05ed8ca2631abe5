# app/services/exceptions.py
"""Domain errors raised by the service layer and mapped to HTTP by routers"""


class BookingError(Exception):
    """Base class for expected, user-facing booking failures"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BusinessNotFoundError(BookingError):
    status_code = 404


class ServiceNotFoundError(BookingError):
    status_code = 404


class StaffNotFoundError(BookingError):
    status_code = 404


class AppointmentNotFoundError(BookingError):
    status_code = 404


class SlotUnavailableError(BookingError):
    """The requested start time is taken or outside availability"""

    status_code = 409


class BookingPolicyError(BookingError):
    """Request violates a business policy (booking window, cancellation notice)"""

    status_code = 422


class WhatsAppDisabledError(BookingError):
    pass


class TemplateNotFoundError(BookingError):
    pass


class ResourceNotFoundError(BookingError):
    """Generic 404 for owner-managed rows (windows, blocked dates, templates)"""

    status_code = 404
