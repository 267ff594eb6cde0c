from unittest.mock import MagicMock

import pytest
import requests

from meeting_scheduler.exceptions import EmailDeliveryError
from meeting_scheduler.mailer.relay_client import RelayClient


def _response(status_code, body=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = body if body is not None else {}
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def relay(config, session):
    return RelayClient(config=config, session=session)


def test_send_meeting_invitations(relay, session, meeting):
    results = [{"status": "success", "recipient": "alice@example.com", "messageId": "<1>"},
               {"status": "error", "recipient": "bob@example.com", "error": "rejected"}]
    session.post.return_value = _response(207, {"message": "1 of 2 emails sent successfully", "results": results})

    assert relay.send_meeting_invitations(meeting, {"name": "Host"}) == results

    url = session.post.call_args.args[0]
    payload = session.post.call_args.kwargs["json"]
    assert url == "http://relay.test/api/send-email"
    assert payload["meetingDetails"]["attendees"] == ["alice@example.com", "bob@example.com"]
    assert payload["sender"] == {"name": "Host"}


def test_rejected_request_marks_every_attendee(relay, session, meeting):
    session.post.return_value = _response(500, {"error": "Failed to send meeting invitations"})

    results = relay.send_meeting_invitations(meeting)

    assert [r["status"] for r in results] == ["error", "error"]
    assert results[0]["error"] == "Failed to send meeting invitations"


def test_unreachable_relay_returns_mock_results_in_development(relay, session, meeting):
    session.post.side_effect = requests.ConnectionError("refused")

    assert relay.send_meeting_invitations(meeting) == [
        {"status": "success", "recipient": "alice@example.com", "mock": True},
        {"status": "success", "recipient": "bob@example.com", "mock": True},
    ]


def test_unreachable_relay_raises_in_production(relay, session, meeting, config):
    config.ENVIRONMENT = "production"
    session.post.side_effect = requests.ConnectionError("refused")

    with pytest.raises(EmailDeliveryError):
        relay.send_meeting_invitations(meeting)


def test_send_test_email_posts_form(relay, session):
    session.post.return_value = _response(200)

    assert relay.send_test_email("alice@example.com", "Hi", "Hello", "Tester") is True

    assert session.post.call_args.args[0] == "http://relay.test/email-test/send"
    assert session.post.call_args.kwargs["data"]["senderEmail"] == "organizer@example.com"


def test_check_health(relay, session):
    session.get.return_value = _response(200, {"message": "API server is working properly!"})
    assert relay.check_health() is True

    session.get.side_effect = requests.Timeout("slow")
    assert relay.check_health() is False


def test_smtp_test(relay, session):
    session.get.return_value = _response(200, {"results": {"587": "Connected successfully"}})
    assert relay.smtp_test() == {"587": "Connected successfully"}
    assert session.get.call_args.args[0] == "http://relay.test/smtp-test"
