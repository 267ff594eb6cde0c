"""
MIME message builders for test emails and meeting invitations
"""
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Dict

from jinja2 import Environment

from config.settings import Config
from meeting_scheduler.calendar.events import MeetingDetails, parse_datetime

_templates = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)

TEST_EMAIL_HTML = _templates.from_string("""\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #e0e0e0; border-radius: 5px;">
  <h2 style="color: #1976d2;">Test Email</h2>
  <p>{{ message }}</p>
  <div style="margin-top: 30px; color: #757575; font-size: 12px;">
    This is a test email from {{ app_title }}.
  </div>
</div>
""")

INVITATION_HTML = _templates.from_string("""\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #e0e0e0; border-radius: 5px;">
  <h2 style="color: #1976d2;">Meeting Invitation</h2>
  <h3>{{ title }}</h3>
  <div style="margin: 20px 0; padding: 15px; background-color: #f5f5f5; border-radius: 4px;">
    <div style="margin-bottom: 10px;"><strong>Date and Time:</strong> {{ when }}</div>
    <div style="margin-bottom: 10px;"><strong>Duration:</strong> {{ duration }}</div>
    <div style="margin-bottom: 10px;"><strong>Location:</strong> {{ location }}</div>
    {% if description_lines %}
    <div style="margin-top: 15px;">
      <strong>Description:</strong><br>
      {% for line in description_lines %}{{ line }}{% if not loop.last %}<br>{% endif %}{% endfor %}
    </div>
    {% endif %}
  </div>
  <div style="margin-top: 30px; color: #757575; font-size: 12px;">
    This is an automated invitation from {{ app_title }}.
  </div>
</div>
""")


def format_meeting_time(value) -> str:
    """e.g. ``Monday, April 21, 2025 at 09:00 AM`` in the server's timezone"""
    dt = parse_datetime(value).astimezone()
    return f"{dt:%A, %B} {dt.day}, {dt:%Y} at {dt:%I:%M %p}"


def format_duration(start, end) -> str:
    """Human-readable duration between two timestamps"""
    minutes = round((parse_datetime(end) - parse_datetime(start)).total_seconds() / 60)
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    hours, minutes = divmod(minutes, 60)
    text = f"{hours} hour{'s' if hours > 1 else ''}"
    if minutes > 0:
        text += f" {minutes} minute{'s' if minutes > 1 else ''}"
    return text


def build_test_email(recipient: str, subject: str, message: str, sender_name: str,
                     sender_email: str, config: Config = None) -> MIMEMultipart:
    config = config or Config()
    msg = MIMEMultipart("alternative")
    msg["From"] = formataddr((sender_name, sender_email))
    msg["To"] = recipient
    msg["Subject"] = subject
    msg.attach(MIMEText(message, "plain", "utf-8"))
    msg.attach(MIMEText(
        TEST_EMAIL_HTML.render(message=message, app_title=config.APP_TITLE), "html", "utf-8"
    ))
    return msg


def invitation_text(meeting: MeetingDetails, config: Config) -> str:
    lines = [
        f"You have been invited to a meeting: {meeting.title}",
        "",
        f"Date and Time: {format_meeting_time(meeting.start_time)}",
        f"Duration: {format_duration(meeting.start_time, meeting.end_time)}",
        f"Location: {meeting.location or 'Not specified'}",
        "",
    ]
    if meeting.description:
        lines.extend([f"Description: {meeting.description}", ""])
    lines.append(f"This is an automated invitation from {config.APP_TITLE}.")
    return "\n".join(lines) + "\n"


def build_invitation(meeting: MeetingDetails, recipient: str, sender: Dict[str, str],
                     ics_content: str, config: Config = None) -> MIMEMultipart:
    """Invitation with plain, HTML and text/calendar parts plus an invite.ics attachment"""
    config = config or Config()
    from_email = config.GMAIL_EMAIL or sender.get("email")

    msg = MIMEMultipart("mixed")
    msg["From"] = formataddr((sender.get("name") or config.DEFAULT_SENDER_NAME, from_email))
    msg["To"] = recipient
    msg["Subject"] = f"Meeting Invitation: {meeting.title}"

    body = MIMEMultipart("alternative")
    body.attach(MIMEText(invitation_text(meeting, config), "plain", "utf-8"))
    body.attach(MIMEText(INVITATION_HTML.render(
        title=meeting.title,
        when=format_meeting_time(meeting.start_time),
        duration=format_duration(meeting.start_time, meeting.end_time),
        location=meeting.location or "Not specified",
        description_lines=meeting.description.splitlines() if meeting.description else [],
        app_title=config.APP_TITLE,
    ), "html", "utf-8"))

    calendar_part = MIMEText(ics_content, "calendar", "utf-8")
    calendar_part.set_param("method", "REQUEST")
    body.attach(calendar_part)
    msg.attach(body)

    attachment = MIMEBase("application", "ics", name="invite.ics")
    attachment.set_payload(ics_content.encode("utf-8"))
    encoders.encode_base64(attachment)
    attachment.add_header("Content-Disposition", "attachment", filename="invite.ics")
    msg.attach(attachment)
    return msg
