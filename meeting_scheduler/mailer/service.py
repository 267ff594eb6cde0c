"""
Meeting invitation dispatch
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Tuple

from config.settings import Config
from meeting_scheduler.calendar.events import MeetingDetails
from meeting_scheduler.calendar.ical import generate_icalendar
from meeting_scheduler.mailer.messages import build_invitation, build_test_email
from meeting_scheduler.mailer.transport import GmailTransport, create_transport

logger = logging.getLogger(__name__)


class InvitationService:
    """Sends test emails and per-attendee meeting invitations"""

    def __init__(self, config: Config = None,
                 transport_factory: Callable[[Config], GmailTransport] = None):
        self.config = config or Config()
        self.transport_factory = transport_factory or create_transport

    def default_sender(self) -> Dict[str, str]:
        return {
            "name": self.config.DEFAULT_SENDER_NAME,
            "email": self.config.GMAIL_EMAIL or self.config.DEFAULT_SENDER_EMAIL,
        }

    def send_test_email(self, recipient: str, subject: str, message: str,
                        sender_name: str, sender_email: str = None) -> str:
        """Send a single diagnostic email; returns its Message-ID"""
        from_email = sender_email or self.config.GMAIL_EMAIL
        logger.info(f"Creating transporter for {from_email}")
        transport = self.transport_factory(self.config)
        logger.info("Transporter created successfully")

        msg = build_test_email(recipient, subject, message, sender_name, from_email, self.config)
        return transport.send(msg)

    def send_meeting_invitations(self, meeting: MeetingDetails,
                                 sender: Dict[str, str] = None) -> List[Dict[str, Any]]:
        """Email every attendee in parallel and collect one result per attendee.

        Transport creation failures propagate; individual send failures are
        reported in the results instead.
        """
        overrides = {key: value for key, value in (sender or {}).items() if value}
        sender = dict(self.default_sender(), **overrides)
        logger.info(
            f"🔔 Sending meeting invitations for \"{meeting.title}\" "
            f"to {len(meeting.attendees)} attendees"
        )

        transport = self.transport_factory(self.config)
        ics_content = generate_icalendar(meeting, sender, config=self.config)

        def send_one(recipient: str) -> Dict[str, Any]:
            try:
                msg = build_invitation(meeting, recipient, sender, ics_content, self.config)
                message_id = transport.send(msg)
                return {"status": "success", "recipient": recipient, "messageId": message_id}
            except Exception as e:
                logger.error(f"Failed to send email to {recipient}: {e}")
                return {"status": "error", "recipient": recipient, "error": str(e)}

        start_time = time.time()
        workers = max(1, min(len(meeting.attendees), self.config.MAX_SEND_WORKERS))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(send_one, meeting.attendees))

        sent = sum(1 for result in results if result["status"] == "success")
        logger.info(
            f"✅ Invitations dispatched: {sent}/{len(results)} in {time.time() - start_time:.2f}s"
        )
        return results


def dispatch_report(results: List[Dict[str, Any]]) -> Tuple[int, Dict[str, Any]]:
    """HTTP status and body for a batch of invitation results"""
    failed = [result for result in results if result["status"] == "error"]
    if failed:
        return 207, {
            "message": f"{len(results) - len(failed)} of {len(results)} emails sent successfully",
            "results": results,
        }
    return 200, {"message": "All meeting invitations sent successfully", "results": results}
