"""LLM integration for categorization, column detection and insights."""

from llm.factory import get_llm_provider
from llm.providers.base import LLMProvider

__all__ = ["get_llm_provider", "LLMProvider"]
