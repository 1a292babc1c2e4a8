"""Insight model for derived spending observations."""

from dataclasses import dataclass
from typing import Optional

INSIGHT_TYPES = ("warning", "info", "suggestion")


@dataclass
class Insight:
    """A human-readable observation about spending.

    Attributes:
        message: The insight text.
        type: One of INSIGHT_TYPES for rule-based insights, None for
              free-text insights returned by the LLM.
    """

    message: str
    type: Optional[str] = None
