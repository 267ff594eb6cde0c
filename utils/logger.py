"""
Logging utilities for the meeting scheduler
"""
import json
import logging
import sys
from datetime import datetime
from typing import Any, Dict, List


class SchedulerLogger:
    """Logging setup and structured request summaries"""

    @staticmethod
    def setup_logging(log_level: str = "INFO", log_file: str = None):
        """Setup logging configuration"""

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, log_level.upper()))
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        # Suppress some noisy loggers
        for name in ('urllib3', 'googleapiclient', 'google.auth', 'httpx', 'openai', 'werkzeug'):
            logging.getLogger(name).setLevel(logging.WARNING)

        return root_logger

    @staticmethod
    def dispatch_summary(meeting: Dict[str, Any], results: List[Dict[str, Any]],
                         status_code: int, processing_time: float) -> Dict[str, Any]:
        sent = [r["recipient"] for r in results if r.get("status") == "success"]
        failed = [r["recipient"] for r in results if r.get("status") == "error"]
        return {
            "timestamp": datetime.now().isoformat(),
            "processing_time_seconds": round(processing_time, 3),
            "status_code": status_code,
            "meeting": {
                "title": meeting.get("title"),
                "start": meeting.get("startTime"),
                "end": meeting.get("endTime"),
                "attendees_count": len(meeting.get("attendees") or []),
            },
            "sent": sent,
            "failed": failed,
        }

    @staticmethod
    def log_dispatch(meeting: Dict[str, Any], results: List[Dict[str, Any]],
                     status_code: int, processing_time: float):
        """Log an invitation dispatch for debugging"""
        logger = logging.getLogger(__name__)
        log_entry = SchedulerLogger.dispatch_summary(meeting, results, status_code, processing_time)
        logger.info(f"Invitations dispatched: {json.dumps(log_entry, indent=2)}")
