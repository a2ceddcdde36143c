"""Completion client abstraction with an Anthropic API backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from talkbot.ai.prompt import Prompt
from talkbot.config import AIConfig, AnthropicConfig
from talkbot.core.errors import CompletionFailure
from talkbot.log import get_logger

logger = get_logger(__name__)

# Anthropic stop reasons meaning the model finished on its own
NATURAL_STOP_REASONS = frozenset({"end_turn", "stop_sequence"})


@dataclass(frozen=True)
class Completion:
    """Generated text plus whether generation ended naturally."""

    text: str
    is_finish_reason_stop: bool
    input_tokens: int = 0
    output_tokens: int = 0


class CompletionClient(ABC):
    """Abstract base class for completion backends."""

    @abstractmethod
    async def generate_completion(self, prompt: Prompt) -> Completion:
        """Generate the next AI message for ``prompt``.

        Raises on any failure, including timeouts; the caller treats every
        exception as a failed completion.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        ...


class AnthropicCompletionClient(CompletionClient):
    """Anthropic Messages API backend using the official SDK."""

    def __init__(self, config: AnthropicConfig, ai_config: AIConfig):
        import anthropic

        self._client = anthropic.AsyncAnthropic(
            api_key=config.api_key,
            base_url=config.base_url,
            max_retries=config.max_retries,
            timeout=config.timeout,
        )
        self._ai = ai_config

    @property
    def model_name(self) -> str:
        return self._ai.model

    async def generate_completion(self, prompt: Prompt) -> Completion:
        messages = prompt.to_messages()
        if not messages:
            raise CompletionFailure("Prompt has no messages to complete")

        kwargs: dict[str, Any] = {
            "model": self._ai.model,
            "max_tokens": self._ai.max_tokens,
            "messages": messages,
            "temperature": self._ai.temperature,
        }
        if self._ai.system_prompt:
            kwargs["system"] = self._ai.system_prompt

        response = await self._client.messages.create(**kwargs)

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        logger.debug(
            "completion_generated",
            model=self._ai.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            stop_reason=response.stop_reason,
        )
        return Completion(
            text=text,
            is_finish_reason_stop=response.stop_reason in NATURAL_STOP_REASONS,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
