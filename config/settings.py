"""
Configuration settings for the Smart Meeting Scheduler
"""
import os
from typing import Dict, List

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    # Runtime environment
    ENVIRONMENT = os.getenv("APP_ENV", "development")
    APP_TITLE = "Smart Meeting Scheduler"

    # Mock data mode: substitute static/randomized data for live API calls.
    # On by default because OAuth is usually not configured for localhost.
    USE_MOCK_DATA = _env_bool("USE_MOCK_DATA", True)

    # Gmail OAuth2 configuration
    GMAIL_EMAIL = os.getenv("GMAIL_EMAIL", "")
    GMAIL_CLIENT_ID = os.getenv("GMAIL_CLIENT_ID", "")
    GMAIL_CLIENT_SECRET = os.getenv("GMAIL_CLIENT_SECRET", "")
    GMAIL_REFRESH_TOKEN = os.getenv("GMAIL_REFRESH_TOKEN", "")
    GMAIL_REDIRECT_URI = os.getenv("GMAIL_REDIRECT_URI", "")
    GMAIL_APP_PASSWORD = os.getenv("GMAIL_APP_PASSWORD", "")
    GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

    # SMTP configuration
    SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))  # STARTTLS, not implicit SSL
    SMTP_CONNECTION_TIMEOUT = 10  # seconds
    SMTP_SOCKET_TIMEOUT = 30  # seconds
    SMTP_PROBE_PORTS = [25, 465, 587]
    SMTP_PROBE_TIMEOUT = 5  # seconds
    MAX_SEND_WORKERS = 5

    # Default organizer when a request does not name one
    DEFAULT_SENDER_NAME = "Meeting Organizer"
    DEFAULT_SENDER_EMAIL = os.getenv("DEFAULT_SENDER_EMAIL", "notifications@zofriplan.com")

    # iCalendar configuration
    ICAL_PRODID = "-//ZofriPlan//Meeting Scheduler//EN"
    ICAL_UID_DOMAIN = "zofriplan.com"

    # API Configuration
    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("PORT", "5000"))
    RELAY_URL = os.getenv("RELAY_URL", "http://localhost:5000")
    RELAY_TIMEOUT = 15  # seconds
    CORS_ORIGINS = _env_list(
        "CORS_ORIGINS",
        ["http://localhost:3000", "http://localhost:5000", "http://localhost:5173"],
    )
    CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    CORS_HEADERS = ["Content-Type", "Authorization"]
    STATIC_BUILD_DIR = os.getenv("STATIC_BUILD_DIR", "build")

    # Calendar Configuration
    CALENDAR_TOKEN_PATH = os.getenv("GOOGLE_CALENDAR_TOKEN", "token.json")
    CALENDAR_SCOPES = [
        "https://www.googleapis.com/auth/calendar",
        "https://www.googleapis.com/auth/calendar.events",
    ]
    CALENDAR_ID = "primary"
    DEFAULT_LOOKAHEAD_DAYS = 7
    DEFAULT_LOCATION = "Virtual Meeting"
    EVENT_STORE_PATH = os.getenv("EVENT_STORE_PATH") or None  # None keeps events in memory
    MOCK_TIMEZONE = "America/Los_Angeles"
    TIMEZONE = os.getenv("TIMEZONE", "UTC")  # IANA name sent with new events

    # Firebase / Firestore configuration
    FIREBASE_CREDENTIALS_PATH = os.getenv("FIREBASE_CREDENTIALS", "")
    PREFERENCES_COLLECTION = "users"
    DEMO_USER = {
        "uid": "demo-user",
        "email": "demo@example.com",
        "displayName": "Demo User",
        "photoURL": None,
    }
    DEFAULT_PREFERENCES = {
        "autoSchedule": True,
        "dailySummary": True,
        "summaryTime": "18:00",
        "workStartTime": "09:00",
        "workEndTime": "17:00",
        "lunchTime": "12:00",
        "lunchDuration": 60,
        "importantContacts": "",
    }

    # LLM Configuration (Gemini through its OpenAI-compatible endpoint)
    LLM_BASE_URL = os.getenv(
        "LLM_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/openai/"
    )
    LLM_API_KEY = os.getenv("GEMINI_API_KEY", "")
    DEFAULT_MODEL = os.getenv("LLM_MODEL", "gemini-2.0-flash")
    LLM_TIMEOUT = 15
    LLM_MAX_RETRIES = 2
    MAX_TOKENS = 1024
    TEMPERATURE = 0.4
    TOP_P = 0.9

    # Scheduling Configuration
    DEFAULT_MEETING_DURATION = 30  # minutes
    SUGGESTION_COUNT = 5
    SUGGESTION_WINDOW_DAYS = 7

    DAILY_SUMMARY_PROMPT = """Generate a concise daily summary of the following meetings.
Highlight any important meetings with key stakeholders or executives.
Format with bullet points for each day.
{events_json}"""

    SUGGESTION_PROMPT = """Please suggest 3-5 optimal meeting times in the next {window_days} days for a meeting with the following details:
Title: {title}
Description: {description}
Duration: {duration} minutes
Attendees: {attendees}
Working hours: {work_start} - {work_end}
Current time: {current_time}

Return the results ONLY as a JSON array with the following format (no other text):
[
  {{
    "start": "2025-04-20T09:00:00.000Z",
    "end": "2025-04-20T09:30:00.000Z",
    "score": 85,
    "reason": "string explanation"
  }}
]
"start" and "end" are ISO 8601 strings and "score" is a 0-100 confidence score."""

    def get_model_config(self, model_name: str = None) -> Dict[str, object]:
        """Get model configuration for the completion endpoint"""
        return {
            "base_url": self.LLM_BASE_URL,
            "model": model_name or self.DEFAULT_MODEL,
            "max_tokens": self.MAX_TOKENS,
            "temperature": self.TEMPERATURE,
            "top_p": self.TOP_P,
        }

    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"
