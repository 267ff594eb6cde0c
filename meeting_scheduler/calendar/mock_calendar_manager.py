"""
Mock Calendar Manager for running without Google Calendar credentials
"""
import logging
import time
from datetime import datetime, timedelta
from typing import Dict, List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from config.settings import Config
from meeting_scheduler.calendar.event_store import LocalEventStore
from meeting_scheduler.calendar.events import (
    CalendarEvent,
    MeetingDetails,
    dedupe_events,
    sort_events,
    to_utc_iso,
)

logger = logging.getLogger(__name__)


def local_timezone_name(config: Config = None) -> str:
    """IANA zone name for new events; Google rejects abbreviations like PDT"""
    name = (config or Config()).TIMEZONE or "UTC"
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown time zone '{name}', using UTC")
        return "UTC"
    return name


class MockCalendarManager:
    """Calendar manager backed by the local event store and fixed demo events"""

    def __init__(self, config: Config = None, store: LocalEventStore = None):
        self.config = config or Config()
        self.store = store if store is not None else LocalEventStore(self.config.EVENT_STORE_PATH)
        self._deleted_ids = set()

    def _create_mock_events(self, now: datetime = None) -> List[CalendarEvent]:
        """Create the demo events relative to the current day"""
        now = now or datetime.now()
        tomorrow = now + timedelta(days=1)
        day_after_tomorrow = now + timedelta(days=2)
        tz_name = self.config.MOCK_TIMEZONE

        def at(day: datetime, hour: int, minute: int = 0) -> Dict[str, str]:
            moment = day.replace(hour=hour, minute=minute, second=0, microsecond=0)
            return {"dateTime": to_utc_iso(moment), "timeZone": tz_name}

        return [
            CalendarEvent(
                event_id="event-1",
                summary="Weekly Team Meeting",
                description="Discuss weekly progress and upcoming tasks",
                start=at(tomorrow, 10),
                end=at(tomorrow, 11),
                attendees=["team@example.com", "manager@example.com"],
                location="Google Meet",
            ),
            CalendarEvent(
                event_id="event-2",
                summary="Project Review",
                description="Review project progress with stakeholders",
                start=at(day_after_tomorrow, 14),
                end=at(day_after_tomorrow, 15, 30),
                attendees=[
                    "stakeholder1@example.com",
                    "stakeholder2@example.com",
                    "manager@example.com",
                ],
                location="Conference Room A",
            ),
            CalendarEvent(
                event_id="event-3",
                summary="One-on-One with Manager",
                description="Weekly one-on-one meeting",
                start=at(tomorrow, 15),
                end=at(tomorrow, 15, 30),
                attendees=["manager@example.com"],
                location="Manager's Office",
            ),
        ]

    def stored_events(self) -> List[CalendarEvent]:
        return [CalendarEvent.from_dict(data) for data in self.store.load()]

    def create_calendar_event(self, meeting: MeetingDetails, source: str = None) -> CalendarEvent:
        """Create a mock event and persist it to the local store"""
        logger.info(f"📋 MOCK: Creating calendar event '{meeting.title}'")
        event = CalendarEvent.from_meeting(
            meeting,
            event_id=f"mock-event-id-{int(time.time() * 1000)}",
            time_zone=local_timezone_name(self.config),
            default_location=self.config.DEFAULT_LOCATION,
            source=source,
        )
        self.store.append(event.to_dict())
        return event

    def fetch_calendar_events(self, days: int = None) -> List[CalendarEvent]:
        """Stored events followed by the demo events, de-duplicated and sorted"""
        logger.info("📋 MOCK: Using mock calendar events")
        combined = self.stored_events() + self._create_mock_events()
        combined = [event for event in combined if event.event_id not in self._deleted_ids]
        return sort_events(dedupe_events(combined))

    def check_free_busy(self, emails: List[str], start_time=None, end_time=None) -> Dict[str, Dict]:
        """Every user is busy for the next hour"""
        logger.info(f"🔍 MOCK: Free/busy for {len(emails)} users")
        now = datetime.now()
        busy = [{"start": to_utc_iso(now), "end": to_utc_iso(now + timedelta(hours=1))}]
        return {email: {"busy": [dict(period) for period in busy]} for email in emails}

    def delete_event(self, event_id: str) -> bool:
        """Remove an event from the local cache only"""
        if event_id in self._deleted_ids:
            return False
        removed = self.store.remove(event_id)
        if not removed and event_id in {e.event_id for e in self._create_mock_events()}:
            removed = True
        if removed:
            self._deleted_ids.add(event_id)
            logger.info(f"Deleted event {event_id} from local cache")
        return removed

