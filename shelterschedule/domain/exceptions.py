"""
Domain-specific exception hierarchy for the shelter scheduling application.
"""


class ScheduleError(Exception):
    """Base class for all application-level errors."""


class ScheduleRequestError(ScheduleError):
    """Raised when a schedule request has invalid parameters."""


class AnimalNotFoundError(ScheduleError):
    """Raised when the requested animal does not exist."""


class InvalidShelterHoursError(ScheduleError):
    """Raised when a shelter does not open before it closes."""


class SlotSourceError(ScheduleError):
    """Raised when slot data cannot be fetched or parsed."""
