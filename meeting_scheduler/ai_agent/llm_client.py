"""
LLM client for meeting time suggestions and daily summaries
"""
import json
import logging
import re
import threading
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from openai import OpenAI

from config.settings import Config
from meeting_scheduler.ai_agent.mock_llm_client import NO_MEETINGS_TOMORROW, MockLLMClient
from meeting_scheduler.calendar.events import CalendarEvent, MeetingDetails

logger = logging.getLogger(__name__)

JSON_FENCE = re.compile(r"```json\s*\n([\s\S]*?)\n\s*```")
PLAIN_FENCE = re.compile(r"```\s*\n([\s\S]*?)\n\s*```")


class LLMClient:
    """Chat-completion client with placeholder fallbacks"""

    def __init__(self, model_name: str = None, config: Config = None,
                 client: OpenAI = None, fallback: MockLLMClient = None):
        self.config = config or Config()
        self.model_config = self.config.get_model_config(model_name)
        self.model_name = self.model_config["model"]
        self.fallback = fallback or MockLLMClient(self.config)

        self.client = client
        if self.client is None and not self.config.USE_MOCK_DATA:
            self.client = OpenAI(
                api_key=self.config.LLM_API_KEY or "NULL",
                base_url=self.model_config["base_url"],
                timeout=self.config.LLM_TIMEOUT,
                max_retries=self.config.LLM_MAX_RETRIES,
            )

        self._response_cache = {}
        self._cache_lock = threading.Lock()
        self._cache_hits = 0
        self._total_requests = 0

        logger.info(f"Initialized LLM client: {self.model_name}")

    def _get_cache_key(self, prompt: str, temperature: float) -> str:
        """Generate cache key for request"""
        return f"{hash(prompt)}_{temperature}_{self.model_name}"

    def _make_completion_request(self, prompt: str, temperature: float = None,
                                 use_cache: bool = True) -> Optional[str]:
        """Send one chat completion; returns None on any failure"""
        if self.client is None:
            return None

        temperature = temperature if temperature is not None else self.model_config["temperature"]
        cache_key = self._get_cache_key(prompt, temperature)
        self._total_requests += 1

        if use_cache:
            with self._cache_lock:
                cached = self._response_cache.get(cache_key)
                if cached is not None:
                    self._cache_hits += 1
            if cached is not None:
                logger.debug(f"Cache hit ({self._cache_hits}/{self._total_requests})")
                return cached

        try:
            start_time = time.time()
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.model_config["max_tokens"],
                temperature=temperature,
                top_p=self.model_config["top_p"],
            )
            content = (response.choices[0].message.content or "").strip()
            logger.info(f"LLM response from {self.model_name}: {time.time() - start_time:.2f}s")

            if not content:
                return None

            if use_cache:
                with self._cache_lock:
                    self._response_cache[cache_key] = content
                    while len(self._response_cache) > 100:
                        self._response_cache.pop(next(iter(self._response_cache)))

            return content

        except Exception as e:
            logger.error(f"Error calling LLM API: {e}")
            return None

    def get_daily_summary(self, events: List[CalendarEvent]) -> str:
        """Generate a daily summary of upcoming meetings"""
        if self.config.USE_MOCK_DATA:
            logger.info("Using mock AI summary (mock data mode)")
            return self.fallback.generate_fallback_summary(events)

        if not events:
            return NO_MEETINGS_TOMORROW

        events_data = []
        for event in events:
            if event.is_all_day:
                when = "All day"
            else:
                when = event.start_datetime.astimezone().strftime("%Y-%m-%d %H:%M")
            events_data.append({
                "title": event.summary,
                "time": when,
                "attendees": ", ".join(event.attendees) if event.attendees else "None",
                "location": event.location or "Not specified",
            })

        prompt = self.config.DAILY_SUMMARY_PROMPT.format(
            events_json=json.dumps(events_data, indent=2)
        )
        response = self._make_completion_request(prompt)
        if not response:
            logger.warning("LLM request failed, using fallback summary")
            return self.fallback.generate_fallback_summary(events)
        return response

    def suggest_meeting_times(self, meeting: MeetingDetails,
                              preferences: Dict[str, Any] = None) -> List[Dict[str, Any]]:
        """Suggest meeting times; fallback slots when the model output is unusable"""
        if self.config.USE_MOCK_DATA:
            logger.info("Using mock AI suggestions (mock data mode)")
            return self.fallback.generate_fallback_time_suggestions(meeting, preferences)

        preferences = preferences or {}
        prompt = self.config.SUGGESTION_PROMPT.format(
            window_days=self.config.SUGGESTION_WINDOW_DAYS,
            title=meeting.title,
            description=meeting.description or "No description provided",
            duration=meeting.duration or self.config.DEFAULT_MEETING_DURATION,
            attendees=", ".join(meeting.attendees) or "No attendees specified",
            work_start=preferences.get("workStartTime", "09:00"),
            work_end=preferences.get("workEndTime", "17:00"),
            current_time=datetime.now().astimezone().isoformat(),
        )

        response = self._make_completion_request(prompt, use_cache=False)
        if not response:
            logger.warning("LLM request failed, using fallback time suggestions")
            return self.fallback.generate_fallback_time_suggestions(meeting, preferences)

        suggestions = self.parse_suggestions(response)
        if suggestions is None:
            return self.fallback.generate_fallback_time_suggestions(meeting, preferences)

        logger.info(f"LLM suggested {len(suggestions)} meeting times")
        return suggestions

    @staticmethod
    def extract_json_text(response: str) -> str:
        """Pull the JSON payload out of a fenced or bare model response"""
        for pattern in (JSON_FENCE, PLAIN_FENCE):
            match = pattern.search(response)
            if match:
                return match.group(1)
        return response.strip() or "[]"

    @classmethod
    def parse_suggestions(cls, response: str) -> Optional[List[Dict[str, Any]]]:
        """Parse a JSON array of suggestions and number them from 1"""
        try:
            data = json.loads(cls.extract_json_text(response))
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing AI response: {e}")
            return None

        if not isinstance(data, list):
            logger.error("AI response is not a JSON array")
            return None

        return [
            dict(item, id=index + 1)
            for index, item in enumerate(entry for entry in data if isinstance(entry, dict))
        ]
