"""
Flask API server for the Smart Meeting Scheduler: email relay, calendar,
AI assistant and user preference endpoints
"""
import logging
import os
import signal
import sys
import time
from datetime import datetime
from typing import Callable, Dict, Optional

from flask import Flask, abort, jsonify, render_template_string, request, send_from_directory
from flask_cors import CORS

from config.settings import Config
from meeting_scheduler.ai_agent.llm_client import LLMClient
from meeting_scheduler.calendar.calendar_manager import get_calendar_manager
from meeting_scheduler.calendar.events import MeetingDetails
from meeting_scheduler.exceptions import AuthenticationError, ValidationError
from meeting_scheduler.mailer.diagnostics import log_dns_lookup, probe_smtp_ports
from meeting_scheduler.mailer.service import InvitationService, dispatch_report
from meeting_scheduler.mailer.transport import error_code
from meeting_scheduler.users.auth import Authenticator
from meeting_scheduler.users.preferences import UserProfile, get_preference_repository
from utils.logger import SchedulerLogger
from utils.validators import DataSanitizer, RequestValidator

logger = logging.getLogger(__name__)

EMAIL_TEST_PAGE = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0"/>
  <title>Email Testing Page</title>
  <style>
    body { font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px; }
    h1 { color: #1976d2; }
    form { background: #f5f5f5; padding: 20px; border-radius: 8px; }
    label { display: block; margin-top: 10px; font-weight: bold; }
    input, textarea { width: 100%; padding: 8px; margin-top: 5px; border: 1px solid #ddd; border-radius: 4px; }
    button { margin-top: 15px; background: #1976d2; color: white; border: none; padding: 10px 15px; border-radius: 4px; cursor: pointer; }
    button:hover { background: #1565c0; }
  </style>
</head>
<body>
  <h1>Email Testing Page</h1>
  <p>Use this form to test sending emails through your server.</p>
  <form action="/email-test/send" method="POST">
    <label for="recipient">Recipient Email:</label>
    <input type="email" id="recipient" name="recipient" required />

    <label for="subject">Subject:</label>
    <input type="text" id="subject" name="subject" value="Test Email" required />

    <label for="message">Message:</label>
    <textarea id="message" name="message" rows="5" required>This is a test email from {{ app_title }}.</textarea>

    <label for="senderName">Sender Name:</label>
    <input type="text" id="senderName" name="senderName" value="Test Sender" required />

    <label for="senderEmail">Sender Email:</label>
    <input type="email" id="senderEmail" name="senderEmail" value="{{ sender_email }}" required />

    <button type="submit">Send Test Email</button>
  </form>
</body>
</html>
"""

EMAIL_SENT_PAGE = """\
<h1>Email Sent Successfully!</h1>
<p><strong>To:</strong> {{ recipient }}</p>
<p><strong>Subject:</strong> {{ subject }}</p>
<p><strong>Message ID:</strong> {{ message_id }}</p>
"""

EMAIL_FAILED_PAGE = """\
<h1>Failed to Send Email</h1>
<p><strong>Error:</strong> {{ error }}</p>
<p><strong>Error Code:</strong> {{ code }}</p>
"""

BAD_REQUEST_PAGE = "<h1>400 Bad Request</h1><p>All fields are required.</p>"


class SchedulerAPI:
    """
    Flask API server wiring the mailer, calendar, AI and user services
    """

    def __init__(self, config: Config = None, calendar_manager=None, llm_client: LLMClient = None,
                 invitation_service: InvitationService = None, preference_repository=None,
                 authenticator: Authenticator = None, smtp_probe: Callable = None):
        self.config = config or Config()
        self.app = Flask(__name__, static_folder=None)
        CORS(
            self.app,
            origins=self.config.CORS_ORIGINS,
            methods=self.config.CORS_METHODS,
            allow_headers=self.config.CORS_HEADERS,
            supports_credentials=True,
        )

        self.calendar = calendar_manager or get_calendar_manager(self.config)
        self.llm = llm_client or LLMClient(config=self.config)
        self.mailer = invitation_service or InvitationService(self.config)
        self.preferences = preference_repository or get_preference_repository(self.config)
        self.authenticator = authenticator or Authenticator(self.config)
        self.smtp_probe = smtp_probe or probe_smtp_ports
        self.start_time = time.time()

        self._setup_routes()
        if self.config.is_production():
            self._setup_static_routes()

    def _current_user(self, required: bool = True) -> Optional[UserProfile]:
        try:
            return self.authenticator.authenticate(request.headers.get("Authorization"))
        except AuthenticationError:
            if required:
                raise
            return None

    @staticmethod
    def _json_body() -> Dict:
        data = request.get_json(silent=True)
        if data is None:
            raise ValidationError("No JSON data provided")
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    def _setup_routes(self):
        """Setup Flask routes"""

        @self.app.route('/health', methods=['GET'])
        def health_check():
            """Health check endpoint"""
            return jsonify({
                "status": "healthy",
                "timestamp": datetime.now().isoformat(),
                "environment": self.config.ENVIRONMENT,
                "mock_data": self.config.USE_MOCK_DATA,
                "uptime": time.time() - self.start_time,
            })

        @self.app.route('/api/test', methods=['GET'])
        def api_test():
            return jsonify({"message": "API server is working properly!"})

        @self.app.route('/email-test', methods=['GET'])
        def email_test_page():
            return render_template_string(
                EMAIL_TEST_PAGE,
                app_title=self.config.APP_TITLE,
                sender_email=self.config.GMAIL_EMAIL,
            )

        @self.app.route('/email-test/send', methods=['POST'])
        def email_test_send():
            """Handle the email test form submission"""
            logger.info("Received email test request")
            form = request.form
            if RequestValidator.validate_test_email_form(form):
                return BAD_REQUEST_PAGE, 400

            try:
                log_dns_lookup(self.config.SMTP_HOST)
                message_id = self.mailer.send_test_email(
                    recipient=form["recipient"].strip(),
                    subject=form["subject"],
                    message=form["message"],
                    sender_name=form["senderName"],
                    sender_email=form["senderEmail"].strip(),
                )
                logger.info(f"Email sent successfully: {message_id}")
                return render_template_string(
                    EMAIL_SENT_PAGE,
                    recipient=form["recipient"],
                    subject=form["subject"],
                    message_id=message_id,
                ), 200
            except Exception as e:
                code = error_code(e)
                logger.error(f"Error sending test email: {e}")
                if code == "ETIMEDOUT":
                    logger.error("Connection timed out. Check network connectivity, "
                                 "firewall rules for outgoing SMTP and the SMTP server status")
                return render_template_string(
                    EMAIL_FAILED_PAGE, error=str(e), code=code or "N/A"
                ), 500

        @self.app.route('/api/send-email', methods=['POST'])
        def send_email():
            """Send meeting invitations to every attendee"""
            logger.info("Received request to /api/send-email")
            start_time = time.time()

            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                data = {}
            errors = RequestValidator.validate_invitation_request(data)
            if errors:
                raise ValidationError(errors[0], errors)

            meeting_data = DataSanitizer.sanitize_meeting(data["meetingDetails"])
            sender = data.get("sender")
            logger.info(f"   📋 Title: {meeting_data.get('title')}")
            logger.info(f"   👥 Attendees: {len(meeting_data['attendees'])} people")

            try:
                meeting = MeetingDetails.from_dict(meeting_data)
                results = self.mailer.send_meeting_invitations(meeting, sender)
            except Exception as e:
                logger.error(f"Error sending meeting invitations: {e}")
                return jsonify({
                    "error": "Failed to send meeting invitations",
                    "details": str(e),
                }), 500

            status_code, body = dispatch_report(results)
            SchedulerLogger.log_dispatch(meeting_data, results, status_code, time.time() - start_time)
            return jsonify(body), status_code

        @self.app.route('/smtp-test', methods=['GET'])
        def smtp_test():
            """Probe outbound connectivity to the SMTP host"""
            results = self.smtp_probe(
                self.config.SMTP_HOST,
                self.config.SMTP_PROBE_PORTS,
                self.config.SMTP_PROBE_TIMEOUT,
            )
            return jsonify({"message": "SMTP Connection Test Results", "results": results})

        @self.app.route('/api/events', methods=['GET'])
        def list_events():
            days = request.args.get('days', self.config.DEFAULT_LOOKAHEAD_DAYS)
            try:
                days = int(days)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid days: {days}")
            if days <= 0:
                raise ValidationError("'days' must be positive")

            events = self.calendar.fetch_calendar_events(days)
            return jsonify({"events": [event.to_dict() for event in events], "count": len(events)})

        @self.app.route('/api/events', methods=['POST'])
        def create_event():
            data = self._json_body()
            errors = RequestValidator.validate_meeting(data)
            if errors:
                raise ValidationError(errors[0], errors)

            meeting = MeetingDetails.from_dict(DataSanitizer.sanitize_meeting(data))
            event = self.calendar.create_calendar_event(meeting)
            logger.info(f"📅 Created event {event.event_id}: {event.summary}")
            return jsonify(event.to_dict()), 201

        @self.app.route('/api/events/<event_id>', methods=['DELETE'])
        def delete_event(event_id):
            if not self.calendar.delete_event(event_id):
                return jsonify({"error": "Event not found"}), 404
            return jsonify({"deleted": True, "id": event_id})

        @self.app.route('/api/freebusy', methods=['POST'])
        def free_busy():
            data = self._json_body()
            errors = RequestValidator.validate_free_busy_request(data)
            if errors:
                raise ValidationError(errors[0], errors)

            emails = DataSanitizer.sanitize_attendees(data["emails"])
            calendars = self.calendar.check_free_busy(emails, data.get("timeMin"), data.get("timeMax"))
            return jsonify({"calendars": calendars})

        @self.app.route('/api/summary', methods=['GET'])
        def daily_summary():
            events = self.calendar.fetch_calendar_events(self.config.DEFAULT_LOOKAHEAD_DAYS)
            summary = self.llm.get_daily_summary(events)
            return jsonify({"summary": summary, "generated_at": datetime.now().isoformat()})

        @self.app.route('/api/suggestions', methods=['POST'])
        def suggest_times():
            data = self._json_body()
            errors = RequestValidator.validate_meeting(data, require_times=False)
            if errors:
                raise ValidationError(errors[0], errors)

            meeting = MeetingDetails.from_dict(DataSanitizer.sanitize_meeting(data))
            user = self._current_user(required=False)
            preferences = self.preferences.get_user_preferences(user) if user else None
            suggestions = self.llm.suggest_meeting_times(meeting, preferences)
            return jsonify({"suggestions": suggestions})

        @self.app.route('/api/preferences', methods=['GET'])
        def get_preferences():
            user = self._current_user()
            return jsonify({"preferences": self.preferences.get_user_preferences(user)})

        @self.app.route('/api/preferences', methods=['PUT'])
        def update_preferences():
            user = self._current_user()
            data = self._json_body()
            preferences = data.get("preferences", data)
            errors = RequestValidator.validate_preferences(preferences)
            if errors:
                raise ValidationError(errors[0], errors)

            self.preferences.update_user_preferences(user, preferences)
            return jsonify({"updated": True, "preferences": preferences})

        @self.app.route('/api/profile', methods=['GET'])
        def get_profile():
            user = self._current_user()
            return jsonify(self.preferences.get_user_profile(user))

        @self.app.errorhandler(ValidationError)
        def validation_error(error):
            return jsonify({"error": str(error), "errors": error.errors}), 400

        @self.app.errorhandler(AuthenticationError)
        def authentication_error(error):
            return jsonify({"error": str(error)}), 401

        @self.app.errorhandler(404)
        def not_found(error):
            return jsonify({"error": "Endpoint not found"}), 404

        @self.app.errorhandler(405)
        def method_not_allowed(error):
            return jsonify({"error": "Method not allowed"}), 405

        @self.app.errorhandler(500)
        def internal_error(error):
            return jsonify({"error": "Internal server error"}), 500

    def _setup_static_routes(self):
        """Serve the front-end build with a fallback to index.html"""
        build_dir = os.path.abspath(self.config.STATIC_BUILD_DIR)
        logger.info(f"Serving static build from {build_dir}")

        @self.app.route('/', defaults={'path': ''})
        @self.app.route('/<path:path>')
        def serve_frontend(path):
            if path.startswith('api/'):
                abort(404)
            if path and os.path.isfile(os.path.join(build_dir, path)):
                return send_from_directory(build_dir, path)
            return send_from_directory(build_dir, 'index.html')

    def _setup_signal_handlers(self):
        """Setup graceful shutdown handlers"""
        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, shutting down gracefully...")
            self.shutdown()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def run(self, host=None, port=None, debug=False):
        """Run the Flask server"""
        host = host or self.config.API_HOST
        port = port or self.config.API_PORT

        self._setup_signal_handlers()
        self.start_time = time.time()

        logger.info(f"Server running on port {port}")
        logger.info(f"Email test interface available at: http://localhost:{port}/email-test")
        logger.info(f"SMTP test interface available at: http://localhost:{port}/smtp-test")
        logger.info(f"Mock data mode: {'ON' if self.config.USE_MOCK_DATA else 'OFF'}")

        try:
            self.app.run(
                host=host,
                port=port,
                debug=debug,
                threaded=True,
                use_reloader=False
            )
        except Exception as e:
            logger.error(f"Failed to start server: {e}")
            raise

    def shutdown(self):
        """Graceful shutdown"""
        logger.info("Shutting down meeting scheduler API server...")


def create_app(config: Config = None) -> Flask:
    """Factory function to create Flask app"""
    api = SchedulerAPI(config)
    return api.app
