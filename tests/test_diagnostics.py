import socket
from unittest.mock import MagicMock, patch

from meeting_scheduler.mailer import diagnostics


@patch("meeting_scheduler.mailer.diagnostics.socket.create_connection")
def test_probe_port_connected(create_connection):
    create_connection.return_value = MagicMock()
    assert diagnostics.probe_port("smtp.gmail.com", 587, 5) == "Connected successfully"
    create_connection.assert_called_once_with(("smtp.gmail.com", 587), timeout=5)


@patch("meeting_scheduler.mailer.diagnostics.socket.create_connection")
def test_probe_port_timeout(create_connection):
    create_connection.side_effect = socket.timeout("timed out")
    assert diagnostics.probe_port("smtp.gmail.com", 25, 5) == "Connection timed out"


@patch("meeting_scheduler.mailer.diagnostics.socket.create_connection")
def test_probe_port_error(create_connection):
    create_connection.side_effect = ConnectionRefusedError("connection refused")
    assert diagnostics.probe_port("smtp.gmail.com", 465, 5) == "Error: connection refused"


@patch("meeting_scheduler.mailer.diagnostics.probe_port")
def test_probe_smtp_ports_keys_by_port(probe_port):
    probe_port.side_effect = lambda host, port, timeout: f"{host}:{port}:{timeout}"

    results = diagnostics.probe_smtp_ports("smtp.gmail.com", [25, 465, 587], timeout=2)

    assert results == {
        "25": "smtp.gmail.com:25:2",
        "465": "smtp.gmail.com:465:2",
        "587": "smtp.gmail.com:587:2",
    }


@patch("meeting_scheduler.mailer.diagnostics.socket.getaddrinfo")
def test_resolve_host_deduplicates(getaddrinfo):
    getaddrinfo.return_value = [
        (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("142.250.1.108", 0)),
        (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("142.250.1.108", 0)),
        (socket.AF_INET6, socket.SOCK_STREAM, 6, "", ("2607:f8b0::6c", 0, 0, 0)),
    ]
    assert diagnostics.resolve_host("smtp.gmail.com") == ["142.250.1.108", "2607:f8b0::6c"]


@patch("meeting_scheduler.mailer.diagnostics.socket.getaddrinfo")
def test_dns_failure_is_only_logged(getaddrinfo, caplog):
    getaddrinfo.side_effect = socket.gaierror("Name or service not known")
    diagnostics.log_dns_lookup("smtp.gmail.com")
    assert "DNS lookup failed" in caplog.text
