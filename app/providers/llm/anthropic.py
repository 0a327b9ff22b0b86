from typing import List, Dict, Any, Optional
import time

import anthropic
from anthropic import AsyncAnthropic

from .base import (
    LLMProvider, LLMMessage, LLMResponse,
    LLMProviderError, LLMProviderAPIError, LLMProviderAuthError, LLMProviderRateLimitError,
)


class AnthropicProvider(LLMProvider):
    """Anthropic Claude LLM provider"""

    def __init__(self, api_key: str, model: Optional[str] = None, **kwargs):
        if not model:
            raise ValueError("AnthropicProvider requires a model to be specified")

        super().__init__(api_key, model, **kwargs)

    def _setup_client(self, **kwargs) -> None:
        """Initialize the Anthropic client"""
        try:
            self.client = AsyncAnthropic(api_key=self.api_key, **kwargs)
        except Exception as e:
            self.logger.error(f"Failed to initialize Anthropic client: {e}")
            raise LLMProviderAuthError(f"Failed to initialize Anthropic client: {e}")

    @staticmethod
    def _split_system(messages: List[LLMMessage]) -> tuple[Optional[str], List[Dict[str, Any]]]:
        system_parts: List[str] = []
        converted: List[Dict[str, Any]] = []
        for msg in messages:
            if msg.role == "system":
                if msg.content:
                    system_parts.append(msg.content)
                continue
            if not msg.content:
                continue
            # The conversation must open on a user turn
            if not converted and msg.role == "assistant":
                system_parts.append(msg.content)
                continue
            # Anthropic requires alternating turns; merge consecutive same-role messages
            if converted and converted[-1]["role"] == msg.role:
                converted[-1]["content"] += f"\n\n{msg.content}"
            else:
                converted.append({"role": msg.role, "content": msg.content})
        system = "\n\n".join(system_parts) if system_parts else None
        return system, converted

    async def generate_response(
        self,
        messages: List[LLMMessage],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate a response from Claude"""
        start_time = time.time()
        system_message, anthropic_messages = self._split_system(messages)

        request_params: Dict[str, Any] = {
            "model": self.model,
            "messages": anthropic_messages,
            "max_tokens": max_tokens or 1024,
        }
        if system_message:
            request_params["system"] = system_message
        if temperature is not None:
            request_params["temperature"] = temperature
        request_params.update(kwargs)

        try:
            response = await self.client.messages.create(**request_params)
        except anthropic.AuthenticationError as e:
            self._raise(LLMProviderAuthError(f"Authentication failed: {e}"), "generate_response")
        except anthropic.RateLimitError as e:
            self._raise(LLMProviderRateLimitError(f"Rate limit exceeded: {e}"), "generate_response")
        except anthropic.APIError as e:
            self._raise(LLMProviderAPIError(f"API error: {e}"), "generate_response")
        except Exception as e:
            self._raise(LLMProviderError(f"Unexpected error: {e}"), "generate_response")

        content = "".join(
            block.text for block in (response.content or []) if getattr(block, "type", None) == "text"
        )

        return LLMResponse(
            content=content or None,
            tokens_used=response.usage.output_tokens if getattr(response, "usage", None) else None,
            model=self.model,
            finish_reason=getattr(response, "stop_reason", None),
            response_time_ms=self._measure_time(start_time),
        )
