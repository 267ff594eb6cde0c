"""
Pytest configuration and shared fixtures.
"""
import random
from unittest.mock import MagicMock

import pytest

from config.settings import Config
from meeting_scheduler.ai_agent.llm_client import LLMClient
from meeting_scheduler.ai_agent.mock_llm_client import MockLLMClient
from meeting_scheduler.api.flask_server import SchedulerAPI
from meeting_scheduler.calendar.event_store import LocalEventStore
from meeting_scheduler.calendar.events import MeetingDetails
from meeting_scheduler.calendar.mock_calendar_manager import MockCalendarManager
from meeting_scheduler.mailer.service import InvitationService
from meeting_scheduler.users.auth import Authenticator
from meeting_scheduler.users.preferences import MemoryPreferenceBackend, PreferenceRepository


class FakeTransport:
    """Records sent messages; fails for the addresses listed in ``failing``"""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.sent = []

    def send(self, message):
        recipient = message["To"]
        if recipient in self.failing:
            raise RuntimeError(f"Mailbox unavailable: {recipient}")
        self.sent.append(message)
        return f"<{len(self.sent)}.{recipient}>"


@pytest.fixture
def config():
    """Mock-mode development settings with no external state"""
    cfg = Config()
    cfg.ENVIRONMENT = "development"
    cfg.USE_MOCK_DATA = True
    cfg.GMAIL_EMAIL = "organizer@example.com"
    cfg.GMAIL_REFRESH_TOKEN = "refresh-token"
    cfg.GMAIL_CLIENT_ID = "client-id"
    cfg.GMAIL_CLIENT_SECRET = "client-secret"
    cfg.GMAIL_APP_PASSWORD = ""
    cfg.EVENT_STORE_PATH = None
    cfg.RELAY_URL = "http://relay.test"
    return cfg


@pytest.fixture
def live_config(config):
    """Settings with mock data mode switched off"""
    config.USE_MOCK_DATA = False
    return config


@pytest.fixture
def meeting():
    return MeetingDetails(
        title="Quarterly Planning",
        start_time="2025-04-21T09:00:00Z",
        end_time="2025-04-21T10:30:00Z",
        attendees=["alice@example.com", "bob@example.com"],
        description="Agenda:\nBudget; roadmap, hiring",
        location="Room 4",
    )


@pytest.fixture
def sample_google_event():
    """Sample Google Calendar API event response."""
    return {
        "id": "google-event-1",
        "summary": "Design Review",
        "description": "Review the new designs",
        "location": "Room 2",
        "status": "confirmed",
        "htmlLink": "https://calendar.google.com/event?eid=abc",
        "start": {"dateTime": "2030-01-15T09:00:00-05:00", "timeZone": "America/New_York"},
        "end": {"dateTime": "2030-01-15T10:00:00-05:00", "timeZone": "America/New_York"},
        "attendees": [
            {"email": "john@example.com", "responseStatus": "accepted"},
            {"email": "jane@example.com", "responseStatus": "tentative"},
        ],
    }


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def api(config, transport):
    """API with every service injected and running on mock data"""
    return SchedulerAPI(
        config=config,
        calendar_manager=MockCalendarManager(config, LocalEventStore()),
        llm_client=LLMClient(config=config, fallback=MockLLMClient(config, random.Random(7))),
        invitation_service=InvitationService(config, transport_factory=lambda cfg: transport),
        preference_repository=PreferenceRepository(MemoryPreferenceBackend(), config),
        authenticator=Authenticator(config),
        smtp_probe=MagicMock(return_value={"25": "Connection timed out", "465": "Connected successfully",
                                           "587": "Connected successfully"}),
    )


@pytest.fixture
def client(api):
    api.app.testing = True
    return api.app.test_client()


@pytest.fixture
def make_transport():
    return FakeTransport
