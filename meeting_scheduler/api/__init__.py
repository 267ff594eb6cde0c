"""
HTTP API for the meeting scheduler
"""
from .flask_server import SchedulerAPI, create_app

__all__ = ['SchedulerAPI', 'create_app']
