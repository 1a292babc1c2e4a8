"""Factory for the LLM provider behind categorization, column detection and insights."""

from typing import Optional
from config import Config
from llm.providers.base import LLMProvider
from llm.providers.openai import OpenAIProvider
from logger import get_logger

logger = get_logger()


def get_llm_provider(config: Optional[Config]) -> Optional[LLMProvider]:
    """Build the provider used for categorization, column detection and insights.

    Args:
        config: Application configuration, or None.

    Returns:
        LLMProvider instance, or None when the [llm] section is disabled or
        names no provider. Callers then use the keyword rules.

    Raises:
        ValueError: If the [llm] section names an unknown provider or lacks
                    the API key its provider needs.
    """
    if config is None or not config.llm_enabled:
        logger.debug(
            "LLM disabled, categories, columns and insights use keyword rules"
        )
        return None

    provider_name = config.llm_provider or None

    if provider_name == "openai":
        if not config.llm_openai_api_key:
            raise ValueError(
                "[llm] provider is 'openai' but openai_api_key not configured; "
                "set it or disable llm to categorize with keyword rules"
            )

        model = config.llm_openai_model or None
        logger.debug(
            f"Using OpenAI (model: {model or 'prompt default'}) for "
            "categorization, column detection and insights"
        )

        return OpenAIProvider(api_key=config.llm_openai_api_key, model=model)

    elif provider_name is None:
        logger.info("LLM enabled but no provider set, using keyword rules")
        return None

    else:
        raise ValueError(
            f"Unknown LLM provider: {provider_name} (supported: openai)"
        )
