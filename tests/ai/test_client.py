"""Tests for AnthropicCompletionClient."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from talkbot.ai.client import AnthropicCompletionClient
from talkbot.ai.prompt import ROLE_AI, ROLE_HUMAN, Prompt
from talkbot.config import AIConfig, AnthropicConfig
from talkbot.core.errors import CompletionFailure


def _response(text: str, stop_reason: str) -> SimpleNamespace:
    return SimpleNamespace(
        content=[
            SimpleNamespace(type="text", text=text),
            SimpleNamespace(type="tool_use", name="ignored"),
        ],
        stop_reason=stop_reason,
        usage=SimpleNamespace(input_tokens=12, output_tokens=34),
    )


class TestAnthropicCompletionClient:
    @pytest.fixture
    def ai_config(self) -> AIConfig:
        return AIConfig(model="claude-test", max_tokens=256, system_prompt="Be brief.")

    @pytest.fixture
    def client(self, ai_config: AIConfig) -> AnthropicCompletionClient:
        client = AnthropicCompletionClient(AnthropicConfig(api_key="sk-test"), ai_config)
        client._client = MagicMock()
        client._client.messages.create = AsyncMock(return_value=_response("Hi!", "end_turn"))
        return client

    @pytest.fixture
    def prompt(self) -> Prompt:
        return Prompt().write(ROLE_HUMAN, "Hello").write(ROLE_AI)

    async def test_sends_prompt_messages(self, client, prompt) -> None:
        await client.generate_completion(prompt)

        kwargs = client._client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 256
        assert kwargs["system"] == "Be brief."
        assert kwargs["messages"] == [{"role": "user", "content": "Hello"}]

    async def test_natural_stop(self, client, prompt) -> None:
        completion = await client.generate_completion(prompt)

        assert completion.text == "Hi!"
        assert completion.is_finish_reason_stop
        assert (completion.input_tokens, completion.output_tokens) == (12, 34)

    async def test_max_tokens_is_not_a_natural_stop(self, client, prompt) -> None:
        client._client.messages.create.return_value = _response("Once upon", "max_tokens")

        completion = await client.generate_completion(prompt)

        assert not completion.is_finish_reason_stop

    async def test_omits_empty_system_prompt(self, prompt) -> None:
        client = AnthropicCompletionClient(AnthropicConfig(api_key="sk-test"), AIConfig())
        client._client = MagicMock()
        client._client.messages.create = AsyncMock(return_value=_response("ok", "end_turn"))

        await client.generate_completion(prompt)

        assert "system" not in client._client.messages.create.call_args.kwargs

    async def test_empty_prompt_is_rejected(self, client) -> None:
        with pytest.raises(CompletionFailure):
            await client.generate_completion(Prompt())

        client._client.messages.create.assert_not_called()

    async def test_api_errors_propagate(self, client, prompt) -> None:
        client._client.messages.create.side_effect = ConnectionError("reset")

        with pytest.raises(ConnectionError):
            await client.generate_completion(prompt)

    def test_model_name(self, client) -> None:
        assert client.model_name == "claude-test"
