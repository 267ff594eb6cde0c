"""
Google Calendar integration for the Smart Meeting Scheduler
"""
import logging
import os
from datetime import datetime, timedelta
from typing import Dict, List

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from config.settings import Config
from meeting_scheduler.calendar.event_store import LocalEventStore
from meeting_scheduler.calendar.events import (
    CalendarEvent,
    MeetingDetails,
    parse_datetime,
    sort_events,
    to_utc_iso,
)
from meeting_scheduler.calendar.mock_calendar_manager import (
    MockCalendarManager,
    local_timezone_name,
)
from meeting_scheduler.exceptions import CalendarUnavailableError

logger = logging.getLogger(__name__)


class CalendarManager:
    """Live calendar manager that falls back to mock data when Google fails"""

    def __init__(self, config: Config = None, store: LocalEventStore = None, service=None):
        self.config = config or Config()
        self.store = store if store is not None else LocalEventStore(self.config.EVENT_STORE_PATH)
        self.mock = MockCalendarManager(self.config, self.store)
        self._service = service

    def _get_credentials(self) -> Credentials:
        """Load authorized-user credentials for the Calendar API"""
        token_path = self.config.CALENDAR_TOKEN_PATH
        if not token_path or not os.path.exists(token_path):
            raise CalendarUnavailableError(f"Calendar token file not found: {token_path}")
        return Credentials.from_authorized_user_file(token_path, self.config.CALENDAR_SCOPES)

    def _build_calendar_service(self):
        """Build (once) the Google Calendar v3 service"""
        if self._service is None:
            credentials = self._get_credentials()
            self._service = build("calendar", "v3", credentials=credentials, cache_discovery=False)
        return self._service

    def create_calendar_event(self, meeting: MeetingDetails) -> CalendarEvent:
        """Insert the meeting into the primary calendar and notify attendees"""
        try:
            calendar_service = self._build_calendar_service()
            time_zone = local_timezone_name(self.config)

            body = {
                "summary": meeting.title,
                "description": meeting.description,
                "start": {"dateTime": to_utc_iso(meeting.start_time), "timeZone": time_zone},
                "end": {"dateTime": to_utc_iso(meeting.end_time), "timeZone": time_zone},
                "attendees": [{"email": email} for email in meeting.attendees],
                "location": meeting.location or self.config.DEFAULT_LOCATION,
                "reminders": {"useDefault": True},
            }

            logger.info(f"Sending event to Google Calendar: {meeting.title}")
            created = calendar_service.events().insert(
                calendarId=self.config.CALENDAR_ID,
                body=body,
                sendUpdates="all",
            ).execute()
            logger.info(f"✅ Event created: {created.get('htmlLink')}")

            # keep a copy so the event shows up before the next list call
            self.store.append(dict(created, source="google"))
            return CalendarEvent.from_dict(created)

        except Exception as e:
            logger.error(f"Error creating calendar event: {e}")
            logger.warning("Google Calendar API failed, falling back to mock data")
            return self.mock.create_calendar_event(meeting, source="mock_fallback")

    def fetch_calendar_events(self, days: int = None) -> List[CalendarEvent]:
        """List upcoming events merged with locally created ones"""
        days = days or self.config.DEFAULT_LOOKAHEAD_DAYS
        stored = self.store.load()

        try:
            calendar_service = self._build_calendar_service()
            time_min = datetime.now().astimezone()
            time_max = time_min + timedelta(days=days)

            logger.info(f"📅 Fetching Google Calendar events for the next {days} days")
            events_result = calendar_service.events().list(
                calendarId=self.config.CALENDAR_ID,
                timeMin=time_min.isoformat(),
                timeMax=time_max.isoformat(),
                showDeleted=False,
                singleEvents=True,
                orderBy="startTime",
            ).execute()

            google_events = events_result.get("items", [])
            google_ids = {event.get("id") for event in google_events}

            # stored copies of Google events are superseded by the fresh list
            remaining = [
                event for event in stored
                if event.get("id") not in google_ids and event.get("source") != "google"
            ]
            self.store.save(remaining)

            merged = [CalendarEvent.from_dict(event) for event in google_events + remaining]
            logger.info(f"✅ Retrieved {len(google_events)} Google events, {len(remaining)} local events")
            return sort_events(merged)

        except HttpError as e:
            logger.error(f"HTTP error fetching calendar events: {e}")
        except Exception as e:
            logger.error(f"Error fetching calendar events: {e}")

        logger.warning("Google Calendar API failed, falling back to mock data")
        return self.mock.fetch_calendar_events(days)

    def check_free_busy(self, emails: List[str], start_time=None, end_time=None) -> Dict[str, Dict]:
        """Query free/busy for each email; mock data on failure"""
        try:
            start, end = free_busy_window(start_time, end_time, self.config.DEFAULT_LOOKAHEAD_DAYS)
            calendar_service = self._build_calendar_service()

            logger.info("Checking free/busy status via Google Calendar API")
            response = calendar_service.freebusy().query(body={
                "timeMin": start.isoformat(),
                "timeMax": end.isoformat(),
                "items": [{"id": email} for email in emails],
            }).execute()
            return response.get("calendars", {})

        except Exception as e:
            logger.error(f"Error checking free/busy status: {e}")
            logger.info("Falling back to mock data due to API error")
            return self.mock.check_free_busy(emails, start_time, end_time)

    def delete_event(self, event_id: str) -> bool:
        """Remove an event from the local cache; the real calendar is untouched"""
        return self.mock.delete_event(event_id)


def free_busy_window(start_time, end_time, days: int):
    """Resolve a free/busy query window, defaulting to now through now + days"""
    start = parse_datetime(start_time) if start_time else datetime.now().astimezone()
    end = parse_datetime(end_time) if end_time else start + timedelta(days=days)
    return start, end


def get_calendar_manager(config: Config = None, store: LocalEventStore = None):
    """Pick the mock manager in mock data mode, the live manager otherwise"""
    config = config or Config()
    if config.USE_MOCK_DATA:
        logger.info("🔄 Using mock calendar manager (mock data mode)")
        return MockCalendarManager(config, store)
    logger.info("✅ Using real Google Calendar integration")
    return CalendarManager(config, store)
