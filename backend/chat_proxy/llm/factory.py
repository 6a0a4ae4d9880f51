"""
LLM Provider Factory - Builds the provider from application settings.
"""

from typing import Any

from .anthropic_provider import AnthropicProvider


def create_llm_provider(config: Any) -> AnthropicProvider:
    """
    Create the Anthropic provider described by config.

    A missing API key is logged by the caller, not rejected here: requests
    will then come back as upstream authentication errors.

    Args:
        config: Settings object with the anthropic_* and llm_* fields
    """
    return AnthropicProvider(
        api_key=config.anthropic_api_key,
        model=config.llm_model,
        api_url=config.anthropic_api_url,
        api_version=config.anthropic_version,
        default_temperature=config.llm_temperature,
        default_max_tokens=config.llm_max_tokens,
        timeout=config.llm_timeout_seconds,
    )
