"""
Validation utilities for the meeting scheduler API
"""
import re
from typing import Any, Dict, List

from meeting_scheduler.calendar.events import parse_datetime, split_attendees

TEST_EMAIL_FIELDS = ["recipient", "subject", "message", "senderName", "senderEmail"]
MEETING_TEXT_FIELDS = ["title", "description", "location"]


class RequestValidator:
    """Validator for incoming API payloads"""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format"""
        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not isinstance(email, str):
            return False
        return bool(re.match(email_pattern, email))

    @staticmethod
    def validate_iso_datetime(value: Any) -> bool:
        """Validate an ISO 8601 timestamp (``Z`` suffix allowed)"""
        if not value:
            return False
        try:
            parse_datetime(value)
            return True
        except (TypeError, ValueError):
            return False

    @staticmethod
    def validate_test_email_form(form: Dict[str, Any]) -> List[str]:
        """Every field of the diagnostic email form is required"""
        errors = []
        for field in TEST_EMAIL_FIELDS:
            if not (form.get(field) or "").strip():
                errors.append(f"Missing required field: {field}")
        return errors

    @staticmethod
    def validate_text_fields(data: Dict[str, Any]) -> List[str]:
        """Free-text meeting fields must be strings when present"""
        return [
            f"'{field}' must be a string"
            for field in MEETING_TEXT_FIELDS
            if data.get(field) is not None and not isinstance(data[field], str)
        ]

    @staticmethod
    def validate_time_range(data: Dict[str, Any], start_field: str = "startTime",
                            end_field: str = "endTime") -> List[str]:
        errors = []
        for field in (start_field, end_field):
            if not data.get(field):
                errors.append(f"Missing required field: {field}")
            elif not RequestValidator.validate_iso_datetime(data[field]):
                errors.append(f"Invalid datetime format in '{field}': {data[field]}")

        if not errors and parse_datetime(data[end_field]) <= parse_datetime(data[start_field]):
            errors.append(f"'{end_field}' must be after '{start_field}'")
        return errors

    @staticmethod
    def validate_invitation_request(data: Dict[str, Any]) -> List[str]:
        """Validate a ``{meetingDetails, sender?}`` payload.

        The attendee check comes first so that its message is the one
        reported when several problems are present.
        """
        meeting = data.get("meetingDetails")
        if not isinstance(meeting, dict):
            return ["Missing required field: meetingDetails"]

        attendees = meeting.get("attendees")
        if not isinstance(attendees, list) or not split_attendees(attendees):
            return ["At least one attendee is required"]

        errors = RequestValidator.validate_text_fields(meeting)
        for attendee in split_attendees(attendees):
            if not RequestValidator.validate_email(attendee):
                errors.append(f"Invalid email format in attendees: {attendee}")

        errors.extend(RequestValidator.validate_time_range(meeting))

        sender = data.get("sender")
        if sender is not None:
            if not isinstance(sender, dict):
                errors.append("'sender' must be an object")
            else:
                if sender.get("email") and not RequestValidator.validate_email(sender["email"]):
                    errors.append(f"Invalid email format in 'sender': {sender['email']}")
                if sender.get("name") is not None and not isinstance(sender["name"], str):
                    errors.append("'sender.name' must be a string")
        return errors

    @staticmethod
    def validate_meeting(data: Dict[str, Any], require_times: bool = True) -> List[str]:
        """Validate a meeting payload for event creation or time suggestions"""
        errors = RequestValidator.validate_text_fields(data)
        title = data.get("title")
        if title is None or (isinstance(title, str) and not title.strip()):
            errors.append("Missing required field: title")

        attendees = data.get("attendees")
        if attendees is not None and not isinstance(attendees, (list, str)):
            errors.append("'attendees' must be a list or a comma-separated string")
        else:
            for attendee in split_attendees(attendees):
                if not RequestValidator.validate_email(attendee):
                    errors.append(f"Invalid email format in attendees: {attendee}")

        if require_times:
            errors.extend(RequestValidator.validate_time_range(data))

        duration = data.get("duration")
        if duration not in (None, ""):
            try:
                if int(duration) <= 0:
                    errors.append("'duration' must be a positive number of minutes")
            except (TypeError, ValueError):
                errors.append(f"Invalid duration: {duration}")
        return errors

    @staticmethod
    def validate_free_busy_request(data: Dict[str, Any]) -> List[str]:
        errors = []
        emails = data.get("emails")
        if not isinstance(emails, list) or not emails:
            errors.append("'emails' must be a non-empty list")
        else:
            for email in emails:
                if not RequestValidator.validate_email(email):
                    errors.append(f"Invalid email format in emails: {email}")

        for field in ("timeMin", "timeMax"):
            if data.get(field) and not RequestValidator.validate_iso_datetime(data[field]):
                errors.append(f"Invalid datetime format in '{field}': {data[field]}")
        return errors

    @staticmethod
    def validate_preferences(data: Any) -> List[str]:
        if not isinstance(data, dict):
            return ["Preferences must be a JSON object"]

        errors = []
        for field in ("workStartTime", "workEndTime", "lunchTime", "summaryTime"):
            value = data.get(field)
            if value is not None and not re.match(r'^([01]\d|2[0-3]):[0-5]\d$', str(value)):
                errors.append(f"Invalid time format in '{field}': {value}. Expected: HH:MM")
        return errors


class DataSanitizer:
    """Sanitize and clean input data"""

    @staticmethod
    def sanitize_email(email: str) -> str:
        """Sanitize email address"""
        return email.strip().lower()

    @staticmethod
    def sanitize_text(text: str) -> str:
        """Collapse whitespace on single-line fields"""
        return re.sub(r'\s+', ' ', (text or "").strip())

    @staticmethod
    def sanitize_attendees(attendees: Any) -> List[str]:
        """Lower-case, strip and de-duplicate attendee addresses, keeping order"""
        seen = []
        for attendee in split_attendees(attendees):
            email = DataSanitizer.sanitize_email(attendee)
            if email not in seen:
                seen.append(email)
        return seen

    @staticmethod
    def sanitize_meeting(data: Dict[str, Any]) -> Dict[str, Any]:
        """Sanitize a meeting payload; descriptions keep their line breaks"""
        sanitized = dict(data)

        for field in ("title", "location"):
            if field in sanitized and sanitized[field] is not None:
                sanitized[field] = DataSanitizer.sanitize_text(sanitized[field])

        if sanitized.get("description"):
            sanitized["description"] = sanitized["description"].strip()

        if "attendees" in sanitized:
            sanitized["attendees"] = DataSanitizer.sanitize_attendees(sanitized["attendees"])

        return sanitized
