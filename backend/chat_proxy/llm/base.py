"""
LLM Provider Base - Abstract base for the upstream chat model and its result type.

Providers never raise for network or upstream trouble. Every call returns an
LLMResult whose kind tells the caller whether the text is a real reply.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from ..models.session import Message, MessageRole


class ResultKind(str, Enum):
    """Outcome of a single upstream call."""
    SUCCESS = "success"
    UPSTREAM_ERROR = "upstream_error"
    TRANSPORT_ERROR = "transport_error"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class LLMResult:
    """Tagged result of an LLM call."""
    kind: ResultKind
    text: str
    model: str = ""
    usage: Dict[str, int] = field(default_factory=dict)
    status_code: Optional[int] = None

    @classmethod
    def success(cls, text: str, model: str = "", usage: Optional[Dict[str, int]] = None) -> "LLMResult":
        return cls(ResultKind.SUCCESS, text, model=model, usage=usage or {})

    @classmethod
    def upstream_error(cls, message: str, status_code: Optional[int] = None) -> "LLMResult":
        return cls(ResultKind.UPSTREAM_ERROR, message, status_code=status_code)

    @classmethod
    def transport_error(cls, message: str) -> "LLMResult":
        return cls(ResultKind.TRANSPORT_ERROR, message)

    @classmethod
    def timeout(cls, message: str) -> "LLMResult":
        return cls(ResultKind.TIMEOUT, message)

    @property
    def ok(self) -> bool:
        return self.kind is ResultKind.SUCCESS

    def text_or_error(self) -> str:
        """Render the result as a single string, prefixing errors by kind."""
        if self.kind is ResultKind.SUCCESS:
            return self.text
        if self.kind is ResultKind.UPSTREAM_ERROR:
            return f"Claude API Error: {self.text}"
        return f"Error: {self.text}"


class LLMProvider(ABC):
    """
    Abstract base class for upstream chat model providers.
    """

    def __init__(self, api_key: str, model: str, default_temperature: float = 1.0,
                 default_max_tokens: int = 1024):
        self.api_key = api_key
        self.model = model
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens

    @abstractmethod
    async def send(
        self,
        history: Sequence[Message],
        new_user_text: str,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResult:
        """
        Send the conversation so far plus one new user message.

        Args:
            history: Earlier messages, oldest first
            new_user_text: Text appended as the final user message
            model: Model id override
            max_tokens: Max tokens override
            temperature: Sampling temperature override

        Returns:
            LLMResult tagged with the outcome
        """

    @abstractmethod
    async def aclose(self) -> None:
        """Release the provider's connection pool."""

    def _format_messages(self, history: Sequence[Message], new_user_text: str) -> List[Dict[str, Any]]:
        """Convert history plus the new user text to API message dicts."""
        messages = [m.to_api() for m in history]
        messages.append({"role": MessageRole.USER.value, "content": new_user_text})
        return messages
