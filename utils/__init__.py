"""
Utility modules for the meeting scheduler
"""

from .logger import SchedulerLogger
from .validators import RequestValidator, DataSanitizer

__all__ = ['SchedulerLogger', 'RequestValidator', 'DataSanitizer']
