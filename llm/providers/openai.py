"""OpenAI provider implementation using structured outputs."""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Type
from pydantic import BaseModel
from openai import OpenAI
from llm.providers.base import LLMProvider
from llm.prompts.loader import PromptManager
from logger import get_logger

logger = get_logger()


# Pydantic models for structured output
class CategoryChoice(BaseModel):
    """Single category label chosen for a transaction."""

    category: str


class ColumnAssignment(BaseModel):
    """Header names chosen for each transaction field."""

    date: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[str] = None
    debit: Optional[str] = None
    credit: Optional[str] = None


class InsightList(BaseModel):
    """Short list of spending insights."""

    insights: List[str]


class OpenAIProvider(LLMProvider):
    """OpenAI implementation using structured outputs for reliable JSON parsing."""

    def __init__(self, api_key: str, model: Optional[str] = None, client=None):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key.
            model: Model to use (e.g., "gpt-4o-mini"). If None, uses prompt default.
            client: Optional pre-built client, used by tests.
        """
        self.client = client or OpenAI(api_key=api_key)
        self.model = model
        self.prompt_manager = PromptManager()

    def suggest_category(
        self,
        description: str,
        amount: Decimal,
        type: str,
        allowed_categories: Sequence[str],
    ) -> Optional[str]:
        result = self._complete(
            "categorization",
            {
                "categories": ", ".join(allowed_categories),
                "description": description,
                "amount": f"{amount:.2f}",
                "type": type,
            },
            CategoryChoice,
        )
        if result is None:
            return None
        return result.category.strip()

    def detect_columns(self, headers: Sequence[str]) -> Dict[str, Optional[str]]:
        headers_text = "\n".join(f"- {header}" for header in headers)
        result = self._complete(
            "column_detection", {"headers": headers_text}, ColumnAssignment
        )
        if result is None:
            return ColumnAssignment().model_dump()
        return result.model_dump()

    def generate_insights(self, summary: str) -> List[str]:
        result = self._complete("insights", {"summary": summary}, InsightList)
        if result is None:
            return []
        return result.insights

    def _complete(
        self,
        prompt_name: str,
        variables: Dict[str, Any],
        response_format: Type[BaseModel],
    ) -> Optional[BaseModel]:
        """Render a prompt, call OpenAI and return the parsed response.

        Returns:
            Parsed pydantic object, or None if the model returned nothing parseable.

        Raises:
            Exception: If the OpenAI API call fails.
        """
        rendered_prompt = self.prompt_manager.render_prompt(prompt_name, variables)

        model = self.model or rendered_prompt["parameters"].get("model", "gpt-4o-mini")
        temperature = rendered_prompt["parameters"].get("temperature", 0.1)
        max_tokens = rendered_prompt["parameters"].get("max_tokens", 500)

        logger.debug(
            f"Calling OpenAI for '{prompt_name}' "
            f"(model: {model}, prompt version: {rendered_prompt['version']})"
        )

        try:
            response = self.client.chat.completions.parse(
                model=model,
                messages=[
                    {"role": "system", "content": rendered_prompt["system_prompt"]},
                    {"role": "user", "content": rendered_prompt["user_prompt"]},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                response_format=response_format,
            )
        except Exception as e:
            logger.error(f"OpenAI API error: {e}")
            raise

        result = response.choices[0].message.parsed
        if result is None:
            logger.warning(f"OpenAI returned null parsed response for '{prompt_name}'")
        return result
