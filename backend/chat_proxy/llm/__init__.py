"""LLM module - upstream chat model client."""

from .base import LLMProvider, LLMResult, ResultKind
from .anthropic_provider import AnthropicProvider, NO_CONTENT_PLACEHOLDER
from .factory import create_llm_provider
from .formatting import enhance_message

__all__ = [
    'LLMProvider',
    'LLMResult',
    'ResultKind',
    'AnthropicProvider',
    'NO_CONTENT_PLACEHOLDER',
    'create_llm_provider',
    'enhance_message',
]
