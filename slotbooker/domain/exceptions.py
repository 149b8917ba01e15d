"""
Domain-specific exception hierarchy for the slot booking application.
"""


class SlotBookerError(Exception):
    """Base class for all application-level errors."""


class CalendarGatewayError(SlotBookerError):
    """Raised when the external calendar cannot be read or written."""


class AuthenticationError(CalendarGatewayError):
    """Raised when credential material is missing, malformed or rejected."""


class AvailabilityError(SlotBookerError):
    """Raised with a user-facing message when slots cannot be listed."""


class BookingValidationError(SlotBookerError):
    """Raised when caller input cannot be turned into a booking request."""
