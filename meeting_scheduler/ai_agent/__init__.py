"""
AI helpers: LLM-backed meeting suggestions and summaries with mock fallbacks
"""
from .llm_client import LLMClient
from .mock_llm_client import MockLLMClient

__all__ = ['LLMClient', 'MockLLMClient']
