"""LLM prompts."""

from llmsgen.prompts.enrichment import (
    ENRICHMENT_RESPONSE_SHAPE,
    ENRICHMENT_SYSTEM_PROMPT,
)

__all__ = [
    "ENRICHMENT_SYSTEM_PROMPT",
    "ENRICHMENT_RESPONSE_SHAPE",
]
