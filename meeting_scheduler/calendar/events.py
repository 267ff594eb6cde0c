"""
Meeting and calendar event models
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union


def parse_datetime(value: Union[str, datetime]) -> datetime:
    """Parse an ISO 8601 timestamp into an aware datetime.

    A trailing ``Z`` is accepted. Naive values are interpreted in the
    server's local timezone.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


def to_utc_iso(value: Union[str, datetime]) -> str:
    """Render a timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ``"""
    dt = parse_datetime(value).astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def split_attendees(attendees: Union[str, List[str], None]) -> List[str]:
    """Normalize attendees given as a list or a comma-separated string"""
    if not attendees:
        return []
    if isinstance(attendees, str):
        attendees = attendees.split(",")
    return [str(a).strip() for a in attendees if a and str(a).strip()]


class MeetingDetails:
    """Meeting fields as submitted by the scheduling form"""

    def __init__(self, title: str, start_time: str = None, end_time: str = None,
                 attendees: List[str] = None, description: str = "",
                 location: str = "", duration: int = None):
        self.title = title
        self.start_time = start_time
        self.end_time = end_time
        self.attendees = attendees or []
        self.description = description or ""
        self.location = location or ""
        self.duration = duration

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MeetingDetails":
        """Build from a camelCase JSON payload"""
        duration = data.get("duration")
        return cls(
            title=data.get("title") or "",
            start_time=data.get("startTime"),
            end_time=data.get("endTime"),
            attendees=split_attendees(data.get("attendees")),
            description=data.get("description") or "",
            location=data.get("location") or "",
            duration=int(duration) if duration not in (None, "") else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "attendees": list(self.attendees),
            "location": self.location,
        }

    @property
    def start(self) -> datetime:
        return parse_datetime(self.start_time)

    @property
    def end(self) -> datetime:
        return parse_datetime(self.end_time)

    @property
    def duration_minutes(self) -> int:
        if self.start_time and self.end_time:
            return round((self.end - self.start).total_seconds() / 60)
        return self.duration


class CalendarEvent:
    """Calendar event in the Google Calendar resource shape"""

    def __init__(self, event_id: str, summary: str, start: Dict[str, str],
                 end: Dict[str, str], attendees: List[str] = None,
                 description: str = "", location: str = None,
                 status: str = None, html_link: str = None, source: str = None):
        self.event_id = event_id
        self.summary = summary
        self.start = start
        self.end = end
        self.attendees = attendees or []
        self.description = description or ""
        self.location = location
        self.status = status
        self.html_link = html_link
        self.source = source
        self.num_attendees = len(self.attendees)

    @classmethod
    def from_meeting(cls, meeting: MeetingDetails, event_id: str, time_zone: str,
                     default_location: str, source: str = None) -> "CalendarEvent":
        return cls(
            event_id=event_id,
            summary=meeting.title,
            description=meeting.description,
            start={"dateTime": to_utc_iso(meeting.start_time), "timeZone": time_zone},
            end={"dateTime": to_utc_iso(meeting.end_time), "timeZone": time_zone},
            attendees=list(meeting.attendees),
            location=meeting.location or default_location,
            status="confirmed",
            html_link="https://calendar.google.com/",
            source=source,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CalendarEvent":
        """Parse a Google Calendar event resource (or a stored copy of one)"""
        attendees = [a["email"] for a in data.get("attendees", []) if a.get("email")]
        return cls(
            event_id=data.get("id", ""),
            summary=data.get("summary", "Untitled Event"),
            description=data.get("description", ""),
            start=data.get("start", {}),
            end=data.get("end", {}),
            attendees=attendees,
            location=data.get("location"),
            status=data.get("status"),
            html_link=data.get("htmlLink"),
            source=data.get("source"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format for JSON serialization"""
        data = {
            "id": self.event_id,
            "summary": self.summary,
            "description": self.description,
            "start": dict(self.start),
            "end": dict(self.end),
            "attendees": [{"email": email} for email in self.attendees],
        }
        if self.location is not None:
            data["location"] = self.location
        if self.status:
            data["status"] = self.status
        if self.html_link:
            data["htmlLink"] = self.html_link
        if self.source:
            data["source"] = self.source
        return data

    @property
    def is_all_day(self) -> bool:
        return "dateTime" not in self.start

    @property
    def start_datetime(self) -> Optional[datetime]:
        value = self.start.get("dateTime") or self.start.get("date")
        if not value:
            return None
        return parse_datetime(value)

    def sort_key(self) -> float:
        start = self.start_datetime
        return start.timestamp() if start else 0.0


def sort_events(events: List[CalendarEvent]) -> List[CalendarEvent]:
    return sorted(events, key=lambda event: event.sort_key())


def dedupe_events(events: List[CalendarEvent]) -> List[CalendarEvent]:
    """Drop events whose id was already seen; the first occurrence wins"""
    seen = set()
    unique = []
    for event in events:
        if event.event_id in seen:
            continue
        seen.add(event.event_id)
        unique.append(event)
    return unique
