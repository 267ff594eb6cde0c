"""
Client for the email relay endpoints of the scheduler server
"""
import logging
import time
from typing import Any, Dict, List

import requests

from config.settings import Config
from meeting_scheduler.calendar.events import MeetingDetails
from meeting_scheduler.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


class RelayClient:
    """HTTP client used by front ends and scripts to send mail through the relay"""

    def __init__(self, base_url: str = None, config: Config = None, session: requests.Session = None):
        self.config = config or Config()
        self.base_url = (base_url or self.config.RELAY_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = self.config.RELAY_TIMEOUT

    def check_health(self) -> bool:
        """Test the relay health endpoint"""
        try:
            response = self.session.get(f"{self.base_url}/api/test", timeout=5)
            if response.status_code == 200:
                logger.info("Health check passed")
                return True
            logger.error(f"Health check failed: {response.status_code}")
            return False
        except requests.RequestException as e:
            logger.error(f"Health check error: {e}")
            return False

    def smtp_test(self) -> Dict[str, str]:
        """Fetch the relay's SMTP port probe results"""
        response = self.session.get(f"{self.base_url}/smtp-test", timeout=self.timeout)
        response.raise_for_status()
        return response.json().get("results", {})

    def send_test_email(self, recipient: str, subject: str, message: str,
                        sender_name: str, sender_email: str = None) -> bool:
        """Submit the diagnostic email form; True when the relay reports success"""
        form = {
            "recipient": recipient,
            "subject": subject,
            "message": message,
            "senderName": sender_name,
            "senderEmail": sender_email or self.config.GMAIL_EMAIL,
        }
        try:
            response = self.session.post(f"{self.base_url}/email-test/send", data=form,
                                         timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Error sending test email to {recipient}: {e}")
            return False
        return response.ok

    def send_meeting_invitations(self, meeting: MeetingDetails,
                                 sender: Dict[str, str] = None) -> List[Dict[str, Any]]:
        """Ask the relay to email every attendee; returns one result per attendee"""
        logger.info(
            f"🔔 Sending meeting invitations for \"{meeting.title}\" "
            f"to {len(meeting.attendees)} attendees"
        )
        payload = {"meetingDetails": meeting.to_dict()}
        if sender:
            payload["sender"] = sender

        try:
            start_time = time.time()
            response = self.session.post(f"{self.base_url}/api/send-email", json=payload,
                                         timeout=self.timeout)
            logger.info(f"Relay responded {response.status_code} in {time.time() - start_time:.2f}s")
        except requests.RequestException as e:
            logger.error(f"Error sending meeting invitations: {e}")
            if self.config.is_production():
                raise EmailDeliveryError(f"Relay unreachable: {e}") from e
            logger.info("Falling back to mock email results in development mode")
            return [
                {"status": "success", "recipient": recipient, "mock": True}
                for recipient in meeting.attendees
            ]

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code in (200, 207):
            return body.get("results", [])

        error = body.get("error") or f"HTTP {response.status_code}"
        logger.error(f"Relay rejected invitations: {error}")
        return [
            {"status": "error", "recipient": recipient, "error": error}
            for recipient in meeting.attendees
        ]
