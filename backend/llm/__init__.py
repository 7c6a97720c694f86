"""
LLM integration for the Meeting Analytics backend.

- client: AnthropicClient, the async Messages API wrapper
- parser: ResponseParser and value coercion helpers
- prompts: prompt builders, one per insight kind plus categorization
- generators: InsightGenerator
- categorization: CategorizationService
"""

from backend.llm.client import AnthropicClient
from backend.llm.parser import ResponseParser, coerce_string_list, coerce_text
from backend.llm.generators import InsightGenerator, NOT_CONFIGURED_MESSAGE
from backend.llm.categorization import CategorizationService, normalize_categorization


__all__ = [
    'AnthropicClient',
    'ResponseParser',
    'coerce_string_list',
    'coerce_text',
    'InsightGenerator',
    'NOT_CONFIGURED_MESSAGE',
    'CategorizationService',
    'normalize_categorization',
]
