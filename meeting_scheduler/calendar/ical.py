"""
iCalendar (RFC 5545) generation for meeting invitations
"""
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

from config.settings import Config
from meeting_scheduler.calendar.events import MeetingDetails, parse_datetime

MAX_LINE_OCTETS = 75


def escape_text(text: str) -> str:
    """Escape a TEXT value: backslashes, semicolons, commas and newlines"""
    if text is None:
        return ""
    text = text.replace("\\", "\\\\")
    text = text.replace(";", "\\;")
    text = text.replace(",", "\\,")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return text.replace("\n", "\\n")


def fold_line(line: str) -> str:
    """Fold a content line at 75 octets; continuations start with a space"""
    if len(line.encode("utf-8")) <= MAX_LINE_OCTETS:
        return line

    parts = []
    current = ""
    for char in line:
        # continuation lines spend one octet on the leading space
        limit = MAX_LINE_OCTETS if not parts else MAX_LINE_OCTETS - 1
        if len((current + char).encode("utf-8")) > limit:
            parts.append(current)
            current = char
        else:
            current += char
    parts.append(current)
    return "\r\n ".join(parts)


def format_datetime(value: Union[str, datetime]) -> str:
    """Format a timestamp as UTC ``YYYYMMDDTHHMMSSZ``"""
    return parse_datetime(value).astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def generate_uid(domain: str, now: datetime = None) -> str:
    millis = int((now.timestamp() if now else time.time()) * 1000)
    return f"meeting-{millis}@{domain}"


def generate_icalendar(meeting: MeetingDetails, organizer: Dict[str, str],
                       now: Optional[datetime] = None, uid: str = None,
                       config: Config = None) -> str:
    """Build a METHOD:REQUEST calendar with a single VEVENT for the meeting.

    Args:
        meeting: Meeting to describe; start and end times are required
        organizer: Mapping with ``name`` and ``email``
        now: Timestamp used for DTSTAMP and the default UID
        uid: Explicit UID, generated from ``now`` when omitted
        config: Settings holding PRODID and the UID domain

    Returns:
        str: CRLF-delimited iCalendar text
    """
    config = config or Config()
    now = now or datetime.now(timezone.utc)
    uid = uid or generate_uid(config.ICAL_UID_DOMAIN, now)

    lines: List[str] = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{config.ICAL_PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:REQUEST",
        "BEGIN:VEVENT",
        f"UID:{uid}",
        f"DTSTAMP:{format_datetime(now)}",
        f"DTSTART:{format_datetime(meeting.start_time)}",
        f"DTEND:{format_datetime(meeting.end_time)}",
        f"SUMMARY:{escape_text(meeting.title)}",
    ]
    if meeting.location:
        lines.append(f"LOCATION:{escape_text(meeting.location)}")
    if meeting.description:
        lines.append(f"DESCRIPTION:{escape_text(meeting.description)}")
    lines.append("STATUS:CONFIRMED")

    organizer_name = (organizer.get("name") or config.DEFAULT_SENDER_NAME).replace('"', "'")
    if any(char in organizer_name for char in ":;,"):
        organizer_name = f'"{organizer_name}"'
    lines.append(f"ORGANIZER;CN={organizer_name}:mailto:{organizer.get('email')}")

    for attendee in meeting.attendees:
        lines.append(f"ATTENDEE;ROLE=REQ-PARTICIPANT;RSVP=TRUE:mailto:{attendee}")

    lines.extend(["END:VEVENT", "END:VCALENDAR"])
    return "".join(fold_line(line) + "\r\n" for line in lines)
