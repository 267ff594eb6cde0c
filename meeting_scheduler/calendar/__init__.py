"""
Calendar access: Google Calendar, the mock calendar and iCalendar output
"""
from .calendar_manager import CalendarManager, get_calendar_manager
from .event_store import LocalEventStore
from .events import CalendarEvent, MeetingDetails
from .ical import generate_icalendar
from .mock_calendar_manager import MockCalendarManager

__all__ = [
    'CalendarManager', 'MockCalendarManager', 'get_calendar_manager',
    'LocalEventStore', 'CalendarEvent', 'MeetingDetails', 'generate_icalendar',
]
