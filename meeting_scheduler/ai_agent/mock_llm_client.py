"""
Mock LLM Client producing placeholder summaries and suggestions
"""
import logging
import random
from datetime import datetime, timedelta
from typing import Any, Dict, List

from config.settings import Config
from meeting_scheduler.calendar.events import CalendarEvent, MeetingDetails, to_utc_iso

logger = logging.getLogger(__name__)

NO_MEETINGS_TOMORROW = "You have no meetings scheduled for tomorrow."
FALLBACK_REASON = "Based on typical business hours and generated as a fallback option."


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def _hour_of(value: str, default: int) -> int:
    """Hour component of an ``HH:MM`` preference value"""
    try:
        return int(str(value).split(":")[0])
    except (TypeError, ValueError):
        return default


class MockLLMClient:
    """Deterministic and randomized stand-ins for LLM output"""

    def __init__(self, config: Config = None, rng: random.Random = None):
        self.config = config or Config()
        self.rng = rng or random.Random()
        self.model_name = "mock-llm"

    def generate_fallback_summary(self, events: List[CalendarEvent], now: datetime = None) -> str:
        """Summarize tomorrow's events without calling a model"""
        now = now or datetime.now().astimezone()
        tomorrow = (now + timedelta(days=1)).date()

        tomorrow_events = []
        for event in events:
            start = event.start_datetime
            if start is None:
                continue
            if event.is_all_day:
                start_date = start.date()
            else:
                start_date = start.astimezone(now.tzinfo).date()
            if start_date == tomorrow:
                tomorrow_events.append(event)

        if not tomorrow_events:
            return NO_MEETINGS_TOMORROW

        count = len(tomorrow_events)
        summary = f"You have {count} meeting{'s' if count > 1 else ''} scheduled for tomorrow:\n\n"

        for event in tomorrow_events:
            if event.is_all_day:
                when = "All day"
            else:
                when = event.start_datetime.astimezone(now.tzinfo).strftime("%H:%M")

            summary += f"• {when} - {event.summary}"
            if event.attendees:
                summary += f" with {_plural(len(event.attendees), 'attendee')}"
            summary += "\n"

        return summary

    def generate_fallback_time_suggestions(self, meeting: MeetingDetails,
                                           preferences: Dict[str, Any] = None,
                                           now: datetime = None) -> List[Dict[str, Any]]:
        """Five random slots on the following days within working hours"""
        now = now or datetime.now()
        preferences = preferences or {}
        duration = meeting.duration or self.config.DEFAULT_MEETING_DURATION

        first_hour = _hour_of(preferences.get("workStartTime"), 9)
        last_hour = _hour_of(preferences.get("workEndTime"), 17) - 1
        if last_hour < first_hour:
            first_hour, last_hour = 9, 16

        suggestions = []
        for i in range(1, self.config.SUGGESTION_COUNT + 1):
            start = (now + timedelta(days=i)).replace(
                hour=self.rng.randint(first_hour, last_hour),
                minute=self.rng.choice([0, 30]),
                second=0,
                microsecond=0,
            )
            end = start + timedelta(minutes=duration)
            suggestions.append({
                "id": i,
                "start": to_utc_iso(start),
                "end": to_utc_iso(end),
                "score": round(70 + self.rng.random() * 30),
                "reason": FALLBACK_REASON,
            })

        logger.info(f"🤖 MOCK: Generated {len(suggestions)} fallback time suggestions")
        return suggestions
