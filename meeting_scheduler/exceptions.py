"""
Exceptions raised by the Smart Meeting Scheduler
"""


class SchedulerError(Exception):
    """Base class for scheduler errors"""


class ValidationError(SchedulerError):
    """Raised when a request payload is missing required fields"""

    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = errors or [message]


class EmailDeliveryError(SchedulerError):
    """Raised when no SMTP transport can be established or a send fails"""

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.code = code


class CalendarUnavailableError(SchedulerError):
    """Raised when the Google Calendar client cannot be built"""


class AuthenticationError(SchedulerError):
    """Raised when a request has no authenticated user"""
