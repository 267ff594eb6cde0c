"""
Gmail SMTP transport authenticated with OAuth2 (XOAUTH2) or an app password
"""
import logging
import smtplib
import socket
import ssl
from email.message import Message
from email.utils import make_msgid
from typing import Callable, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from config.settings import Config
from meeting_scheduler.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)

GMAIL_SCOPE = "https://mail.google.com/"


def error_code(error: Exception) -> Optional[str]:
    """Best-effort short code for an SMTP or socket failure"""
    if isinstance(error, EmailDeliveryError) and error.code:
        return error.code
    if isinstance(error, (socket.timeout, TimeoutError)):
        return "ETIMEDOUT"
    if isinstance(error, smtplib.SMTPResponseException):
        return str(error.smtp_code)
    if isinstance(error, smtplib.SMTPException):
        return type(error).__name__
    if isinstance(error, OSError) and error.errno:
        return str(error.errno)
    return None


def xoauth2_string(user: str, access_token: str) -> str:
    return f"user={user}\x01auth=Bearer {access_token}\x01\x01"


class GmailTransport:
    """Sends messages through smtp.gmail.com, one connection per message"""

    def __init__(self, config: Config = None, smtp_factory: Callable = None,
                 credentials: Credentials = None):
        self.config = config or Config()
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.credentials = credentials
        self.access_token = None
        self.auth_method = None

    @property
    def user(self) -> str:
        return self.config.GMAIL_EMAIL

    def _build_credentials(self) -> Credentials:
        return Credentials(
            token=None,
            refresh_token=self.config.GMAIL_REFRESH_TOKEN,
            client_id=self.config.GMAIL_CLIENT_ID,
            client_secret=self.config.GMAIL_CLIENT_SECRET,
            token_uri=self.config.GOOGLE_TOKEN_URI,
            scopes=[GMAIL_SCOPE],
        )

    def get_access_token(self) -> str:
        """Exchange the refresh token for a fresh access token"""
        if not self.config.GMAIL_REFRESH_TOKEN:
            raise EmailDeliveryError("GMAIL_REFRESH_TOKEN is not configured", code="EAUTH")
        credentials = self.credentials or self._build_credentials()
        credentials.refresh(Request())
        self.credentials = credentials
        return credentials.token

    def open(self) -> "GmailTransport":
        """Resolve the authentication method; app password when OAuth fails"""
        try:
            self.access_token = self.get_access_token()
            self.auth_method = "oauth2"
            logger.info("Successfully obtained access token")
        except Exception as e:
            logger.error(f"Error creating email transporter: {e}")
            if not self.config.GMAIL_APP_PASSWORD:
                if isinstance(e, EmailDeliveryError):
                    raise
                raise EmailDeliveryError(f"OAuth2 token refresh failed: {e}", code="EAUTH") from e
            logger.info("Attempting alternative authentication with app password")
            self.auth_method = "password"
        return self

    def _authenticate(self, smtp: smtplib.SMTP):
        if self.auth_method == "oauth2":
            auth_string = xoauth2_string(self.user, self.access_token)
            # a second challenge carries the error payload; answer it with an empty line
            smtp.auth("XOAUTH2", lambda challenge=None: auth_string if challenge is None else "")
        elif self.auth_method == "password":
            smtp.login(self.user, self.config.GMAIL_APP_PASSWORD)
        else:
            raise EmailDeliveryError("Transport used before open()", code="EAUTH")

    def send(self, message: Message) -> str:
        """Send a message and return its Message-ID"""
        if not message.get("Message-ID"):
            domain = self.user.split("@")[-1] if "@" in self.user else None
            message["Message-ID"] = make_msgid(domain=domain)

        smtp = self.smtp_factory(timeout=self.config.SMTP_CONNECTION_TIMEOUT)
        try:
            smtp.connect(self.config.SMTP_HOST, self.config.SMTP_PORT)
            if smtp.sock is not None:
                smtp.sock.settimeout(self.config.SMTP_SOCKET_TIMEOUT)
            smtp.ehlo()
            smtp.starttls(context=ssl.create_default_context())
            smtp.ehlo()
            self._authenticate(smtp)
            smtp.send_message(message)
        finally:
            try:
                smtp.quit()
            except (smtplib.SMTPException, OSError):
                smtp.close()

        logger.info(f"Email sent successfully: {message['Message-ID']}")
        return message["Message-ID"]


def create_transport(config: Config = None) -> GmailTransport:
    """Build and open a transport for a single request"""
    return GmailTransport(config).open()
