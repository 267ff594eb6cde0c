import base64
from unittest.mock import MagicMock

import pytest

from meeting_scheduler.exceptions import EmailDeliveryError
from meeting_scheduler.mailer.service import InvitationService, dispatch_report


def test_all_invitations_sent(config, meeting, transport):
    service = InvitationService(config, transport_factory=lambda cfg: transport)

    results = service.send_meeting_invitations(meeting)

    assert [r["recipient"] for r in results] == ["alice@example.com", "bob@example.com"]
    assert all(r["status"] == "success" and r["messageId"] for r in results)
    assert sorted(m["To"] for m in transport.sent) == ["alice@example.com", "bob@example.com"]
    assert dispatch_report(results) == (200, {
        "message": "All meeting invitations sent successfully",
        "results": results,
    })


def test_partial_failure_is_reported_per_recipient(config, meeting, make_transport):
    transport = make_transport(failing={"bob@example.com"})
    service = InvitationService(config, transport_factory=lambda cfg: transport)

    results = service.send_meeting_invitations(meeting)

    assert results[0]["status"] == "success"
    assert results[1] == {
        "status": "error",
        "recipient": "bob@example.com",
        "error": "Mailbox unavailable: bob@example.com",
    }
    status, body = dispatch_report(results)
    assert status == 207
    assert body["message"] == "1 of 2 emails sent successfully"


def test_every_recipient_gets_the_same_calendar(config, meeting, transport):
    service = InvitationService(config, transport_factory=lambda cfg: transport)
    service.send_meeting_invitations(meeting, {"name": "Jane Host"})

    attachments = [msg.get_payload()[1].get_payload() for msg in transport.sent]
    assert len(set(attachments)) == 1
    ics = base64.b64decode(attachments[0]).decode("utf-8")
    assert "ORGANIZER;CN=Jane Host:mailto:organizer@example.com" in ics


def test_null_sender_fields_keep_defaults(config, meeting, transport):
    service = InvitationService(config, transport_factory=lambda cfg: transport)
    service.send_meeting_invitations(meeting, {"name": None, "email": None})

    ics = base64.b64decode(transport.sent[0].get_payload()[1].get_payload()).decode("utf-8")
    assert f"ORGANIZER;CN={config.DEFAULT_SENDER_NAME}:mailto:organizer@example.com" in ics
    assert "mailto:None" not in ics


def test_transport_failure_propagates(config, meeting):
    factory = MagicMock(side_effect=EmailDeliveryError("no credentials", code="EAUTH"))
    service = InvitationService(config, transport_factory=factory)

    with pytest.raises(EmailDeliveryError):
        service.send_meeting_invitations(meeting)
    factory.assert_called_once_with(config)


def test_send_test_email(config, transport):
    service = InvitationService(config, transport_factory=lambda cfg: transport)

    message_id = service.send_test_email("alice@example.com", "Ping", "Hello", "Tester")

    assert message_id == "<1.alice@example.com>"
    assert transport.sent[0]["From"] == "Tester <organizer@example.com>"


def test_default_sender(config):
    assert InvitationService(config).default_sender() == {
        "name": "Meeting Organizer",
        "email": "organizer@example.com",
    }
    config.GMAIL_EMAIL = ""
    assert InvitationService(config).default_sender()["email"] == config.DEFAULT_SENDER_EMAIL
