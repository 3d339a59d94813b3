"""
Tests for AI reply drafting
"""
from types import SimpleNamespace

import httpx
import openai
import pytest

from review_responder.core.exceptions import UpstreamAPIError
from review_responder.services.reply_service import (
    NEGATIVE_INSTRUCTION, POSITIVE_INSTRUCTION, ReplyDrafter, build_prompt,
)


class FakeCompletions:
    def __init__(self, content="Obrigado pela avaliação!", error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _fake_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class TestPrompt:

    @pytest.mark.parametrize("rating", [4, 5])
    def test_high_ratings_are_thanked(self, rating):
        prompt = build_prompt(rating, "Adorei")
        assert POSITIVE_INSTRUCTION in prompt
        assert NEGATIVE_INSTRUCTION not in prompt
        assert f"Nota: {rating}/5" in prompt

    @pytest.mark.parametrize("rating", [1, 2, 3])
    def test_low_ratings_are_conciliatory(self, rating):
        prompt = build_prompt(rating, "Demorou muito")
        assert NEGATIVE_INSTRUCTION in prompt
        assert POSITIVE_INSTRUCTION not in prompt
        assert "Comentário: Demorou muito" in prompt


class TestReplyDrafter:

    @pytest.mark.asyncio
    async def test_draft_returns_completion_text(self):
        completions = FakeCompletions(content="  Muito obrigado pelo feedback!  ")
        drafter = ReplyDrafter(api_key="sk-test", model="gpt-test", client=_fake_client(completions))

        draft = await drafter.draft(5, "Excelente")

        assert draft == "Muito obrigado pelo feedback!"
        call = completions.calls[0]
        assert call["model"] == "gpt-test"
        assert call["temperature"] == 0.7
        assert call["max_tokens"] == 150
        assert [m["role"] for m in call["messages"]] == ["system", "user"]
        assert "Excelente" in call["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_api_failure_is_an_upstream_error(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        completions = FakeCompletions(error=openai.APIConnectionError(request=request))
        drafter = ReplyDrafter(api_key="sk-test", client=_fake_client(completions))

        with pytest.raises(UpstreamAPIError):
            await drafter.draft(2, "Ruim")
