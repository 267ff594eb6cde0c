#!/usr/bin/env python3
"""
Main entry point for the Smart Meeting Scheduler

Runs the API server or talks to a running server through the relay client.
"""

import json
import logging
import sys

from config.settings import Config
from meeting_scheduler.ai_agent.llm_client import LLMClient
from meeting_scheduler.api.flask_server import SchedulerAPI
from meeting_scheduler.calendar.calendar_manager import get_calendar_manager
from meeting_scheduler.calendar.events import MeetingDetails
from meeting_scheduler.mailer.relay_client import RelayClient
from utils.logger import SchedulerLogger

logger = logging.getLogger(__name__)


def run_server(host=None, port=None, debug=False):
    """Run the Flask API server"""
    SchedulerLogger.setup_logging(log_level="INFO")
    logger.info("Starting Smart Meeting Scheduler...")

    try:
        api = SchedulerAPI()
        api.run(host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise


def run_smoke(api_url=None) -> bool:
    """Check a running server: health endpoint plus SMTP port probe"""
    SchedulerLogger.setup_logging(log_level="INFO")
    client = RelayClient(api_url)

    logger.info(f"Running smoke checks against {client.base_url}")
    healthy = client.check_health()
    print(f"\nHealth: {'OK' if healthy else 'FAILED'}")
    if not healthy:
        return False

    try:
        results = client.smtp_test()
    except Exception as e:
        print(f"SMTP test failed: {e}")
        return False

    print("SMTP connectivity:")
    for port, outcome in sorted(results.items(), key=lambda item: int(item[0])):
        print(f"  {port}: {outcome}")
    return True


def send_invite(input_file, api_url=None):
    """Send the meeting described in a JSON file through the relay"""
    SchedulerLogger.setup_logging(log_level="INFO")

    with open(input_file, 'r') as f:
        data = json.load(f)

    meeting = MeetingDetails.from_dict(data.get("meetingDetails", data))
    results = RelayClient(api_url).send_meeting_invitations(meeting, data.get("sender"))
    print(json.dumps(results, indent=2))
    return all(result.get("status") == "success" for result in results)


def print_summary():
    """Print the AI summary of tomorrow's meetings"""
    SchedulerLogger.setup_logging(log_level="WARNING")
    config = Config()

    events = get_calendar_manager(config).fetch_calendar_events(config.DEFAULT_LOOKAHEAD_DAYS)
    print(LLMClient(config=config).get_daily_summary(events))


def main():
    """Main CLI entry point"""
    import argparse

    parser = argparse.ArgumentParser(description='Smart Meeting Scheduler')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Server command
    server_parser = subparsers.add_parser('server', help='Run the API server')
    server_parser.add_argument('--host', default=None, help='Host to bind to')
    server_parser.add_argument('--port', type=int, default=None, help='Port to bind to')
    server_parser.add_argument('--debug', action='store_true', help='Enable debug mode')

    # Smoke command
    smoke_parser = subparsers.add_parser('smoke', help='Check a running server')
    smoke_parser.add_argument('--url', default=None, help='Server URL to check')

    # Invite command
    invite_parser = subparsers.add_parser('invite', help='Send a meeting invitation from a JSON file')
    invite_parser.add_argument('input_file', help='Meeting JSON file')
    invite_parser.add_argument('--url', default=None, help='Relay server URL')

    subparsers.add_parser('summary', help="Print the summary of tomorrow's meetings")

    args = parser.parse_args()

    if args.command == 'server':
        run_server(host=args.host, port=args.port, debug=args.debug)

    elif args.command == 'smoke':
        sys.exit(0 if run_smoke(api_url=args.url) else 1)

    elif args.command == 'invite':
        sys.exit(0 if send_invite(args.input_file, api_url=args.url) else 1)

    elif args.command == 'summary':
        print_summary()

    else:
        parser.print_help()


if __name__ == '__main__':
    main()
