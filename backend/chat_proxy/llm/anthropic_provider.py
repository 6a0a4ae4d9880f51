"""
Anthropic LLM Provider.
Talks to the Messages API over one long-lived httpx connection pool.
"""

import httpx
import logging
import time
from typing import Any, Dict, Optional, Sequence

from .base import LLMProvider, LLMResult
from ..models.session import Message

logger = logging.getLogger(__name__)

NO_CONTENT_PLACEHOLDER = "No response from Claude"


class AnthropicProvider(LLMProvider):
    """
    Provider for the Anthropic Messages API.

    The httpx.AsyncClient is created once and reused for every call until
    aclose(). Pass http_client to supply a preconfigured client (tests use
    one backed by httpx.MockTransport).
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-20241022",
        api_url: str = "https://api.anthropic.com/v1/messages",
        api_version: str = "2023-06-01",
        default_temperature: float = 1.0,
        default_max_tokens: int = 1024,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(api_key, model, default_temperature, default_max_tokens)
        self.api_url = api_url
        self.api_version = api_version
        self.timeout = timeout
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
            "content-type": "application/json",
        }

    def _build_payload(
        self,
        history: Sequence[Message],
        new_user_text: str,
        model: Optional[str],
        max_tokens: Optional[int],
        temperature: Optional[float],
    ) -> Dict[str, Any]:
        return {
            "model": model or self.model,
            "max_tokens": max_tokens or self.default_max_tokens,
            "messages": self._format_messages(history, new_user_text),
            "temperature": temperature if temperature is not None else self.default_temperature,
        }

    @staticmethod
    def _parse_error(response: httpx.Response) -> str:
        """Pull error.message out of an error body, or fall back to status and raw text."""
        try:
            return str(response.json()["error"]["message"])
        except (ValueError, KeyError, TypeError) as e:
            logger.debug(f"Failed to parse error response: {e}")
            return f"HTTP {response.status_code}: {response.text}"

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        blocks = data.get("content")
        if not isinstance(blocks, list) or not blocks or not isinstance(blocks[0], dict):
            return NO_CONTENT_PLACEHOLDER
        text = blocks[0].get("text")
        return text if text is not None else NO_CONTENT_PLACEHOLDER

    async def send(
        self,
        history: Sequence[Message],
        new_user_text: str,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResult:
        """Send one Messages API request and tag the outcome."""
        start_time = time.time()
        payload = self._build_payload(history, new_user_text, model, max_tokens, temperature)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"LLM API call starting: provider=anthropic, model={payload['model']}, "
                f"max_tokens={payload['max_tokens']}, temperature={payload['temperature']}, "
                f"{len(payload['messages'])} messages"
            )

        def _duration_ms() -> float:
            return round((time.time() - start_time) * 1000, 2)

        try:
            resp = await self._client.post(
                self.api_url, json=payload, headers=self._get_headers(), timeout=self.timeout
            )
        except httpx.TimeoutException as e:
            logger.error(
                f"LLM API call timed out after {self.timeout}s",
                extra={"extra_fields": {
                    "provider": "anthropic",
                    "model": payload["model"],
                    "duration_ms": _duration_ms(),
                    "error": repr(e),
                }}
            )
            return LLMResult.timeout(f"Request to Claude API timed out after {self.timeout:g}s")
        except httpx.HTTPError as e:
            logger.error(
                f"LLM API call failed: {e}",
                exc_info=True,
                extra={"extra_fields": {
                    "provider": "anthropic",
                    "model": payload["model"],
                    "duration_ms": _duration_ms(),
                    "error": str(e),
                }}
            )
            return LLMResult.transport_error(str(e) or type(e).__name__)

        logger.debug(f"LLM API response status: {resp.status_code}")

        if not resp.is_success:
            message = self._parse_error(resp)
            logger.error(
                f"LLM API error response: {resp.status_code}",
                extra={"extra_fields": {
                    "provider": "anthropic",
                    "model": payload["model"],
                    "status_code": resp.status_code,
                    "duration_ms": _duration_ms(),
                    "error": message,
                }}
            )
            return LLMResult.upstream_error(message, status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError:
            logger.error(f"LLM API returned a non-JSON body with status {resp.status_code}")
            return LLMResult.upstream_error(
                f"Malformed response body: {resp.text[:200]}", status_code=resp.status_code
            )

        if not isinstance(data, dict):
            logger.error(f"LLM API returned a JSON body that is not an object: {type(data).__name__}")
            return LLMResult.upstream_error(
                f"Malformed response body: {resp.text[:200]}", status_code=resp.status_code
            )

        usage = data.get("usage")
        if not isinstance(usage, dict):
            usage = {}
        model_used = data.get("model", payload["model"])

        logger.info(
            "LLM API call completed",
            extra={"extra_fields": {
                "provider": "anthropic",
                "model": model_used,
                "input_tokens": usage.get("input_tokens", 0),
                "output_tokens": usage.get("output_tokens", 0),
                "stop_reason": data.get("stop_reason"),
                "duration_ms": _duration_ms(),
            }}
        )

        return LLMResult.success(self._extract_text(data), model=model_used, usage=usage)

    async def aclose(self) -> None:
        await self._client.aclose()
        logger.info("Anthropic HTTP client closed")
