"""
Smart Meeting Scheduler - An AI-assisted meeting scheduling service

This package provides a meeting scheduling backend that:
- Relays meeting invitations and test emails through Gmail SMTP
- Generates iCalendar invitations for every meeting
- Integrates with Google Calendar, with a local mock calendar
- Uses an LLM for meeting time suggestions and daily summaries
- Stores per-user scheduling preferences in Firestore
"""

__version__ = "1.0.0"
__author__ = "Smart Meeting Scheduler Team"
