import asyncio
from types import SimpleNamespace

import pytest

from reposcout.core.errors import LLMError, LLMResponseError, LLMTimeoutError
from reposcout.services.llm import (
    PROVIDER_DEEPSEEK,
    PROVIDER_OPENAI,
    LLMClient,
    build_llm_client,
    has_llm_credentials,
)


class _Completions:
    def __init__(self, reply=None, *, error=None, delay=0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.requests = []

    async def create(self, **request):
        self.requests.append(request)
        await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.reply


def _sdk(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def _reply(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


MESSAGES = [{"role": "user", "content": "hi"}]


def test_openai_requests_json_mode():
    completions = _Completions(_reply('{"ok": true}'))
    client = LLMClient(_sdk(completions), model="gpt-4o-mini", provider=PROVIDER_OPENAI)

    text = asyncio.run(client.complete(MESSAGES, timeout_s=1, max_tokens=50))

    assert text == '{"ok": true}'
    request = completions.requests[0]
    assert request["response_format"] == {"type": "json_object"}
    assert request["max_tokens"] == 50
    assert request["temperature"] == 0.3


def test_deepseek_omits_json_mode():
    completions = _Completions(_reply("{}"))
    client = LLMClient(_sdk(completions), model="deepseek-chat", provider=PROVIDER_DEEPSEEK)
    asyncio.run(client.complete(MESSAGES, timeout_s=1))
    assert "response_format" not in completions.requests[0]
    assert "max_tokens" not in completions.requests[0]


def test_timeout_raises_llm_timeout():
    client = LLMClient(_sdk(_Completions(_reply("{}"), delay=1.0)), model="m", provider=PROVIDER_OPENAI)
    with pytest.raises(LLMTimeoutError):
        asyncio.run(client.complete(MESSAGES, timeout_s=0.01))


@pytest.mark.parametrize("reply", [SimpleNamespace(choices=[]), _reply(None), _reply("   ")])
def test_empty_reply_raises_response_error(reply):
    client = LLMClient(_sdk(_Completions(reply)), model="m", provider=PROVIDER_OPENAI)
    with pytest.raises(LLMResponseError):
        asyncio.run(client.complete(MESSAGES, timeout_s=1))


def test_sdk_errors_are_wrapped():
    client = LLMClient(_sdk(_Completions(error=RuntimeError("503"))), model="m", provider=PROVIDER_OPENAI)
    with pytest.raises(LLMError, match="503"):
        asyncio.run(client.complete(MESSAGES, timeout_s=1))


def test_provider_selection(settings):
    assert has_llm_credentials(settings)
    assert build_llm_client(settings).provider == PROVIDER_OPENAI

    deepseek = build_llm_client(settings.model_copy(update={"deepseek_api_key": "ds"}))
    assert deepseek.provider == PROVIDER_DEEPSEEK
    assert deepseek.model == "deepseek-chat"

    bare = settings.model_copy(update={"openai_api_key": None})
    assert not has_llm_credentials(bare)
    with pytest.raises(RuntimeError):
        build_llm_client(bare)
