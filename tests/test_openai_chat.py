import base64
from types import SimpleNamespace

import httpx
import openai
import pytest

from dish_carbon.errors import ProviderConnectionError, ProviderHTTPError, ProviderTimeoutError
from dish_carbon.integrations.openai_chat import (
    OpenAIChatProvider,
    ProviderRequest,
    image_data_url,
    vision_content,
)

URL = "https://api.openai.com/v1/chat/completions"


class StubCompletions:
    def __init__(self, outcome):
        self.outcome = outcome
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def stub_client(outcome):
    completions = StubCompletions(outcome)
    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(with_raw_response=completions)))
    return client, completions


def _request():
    return httpx.Request("POST", URL)


@pytest.mark.asyncio
async def test_returns_raw_body_and_sends_wire_fields():
    raw = SimpleNamespace(status_code=200, text='{"choices": []}')
    client, completions = stub_client(raw)
    provider = OpenAIChatProvider("sk-test", client=client)

    rsp = await provider.complete(ProviderRequest(model="gpt-4o-mini", content="hi", max_tokens=200), timeout=45)

    assert rsp.status_code == 200
    assert rsp.text == '{"choices": []}'
    assert completions.kwargs == {
        "model": "gpt-4o-mini",
        "messages": [{"role": "user", "content": "hi"}],
        "max_tokens": 200,
        "temperature": 0,
        "timeout": 45,
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [404, 429, 500])
async def test_status_errors_keep_their_code(status):
    response = httpx.Response(status, request=_request(), text="nope")
    err = openai.APIStatusError("failed", response=response, body=None)
    client, _ = stub_client(err)

    with pytest.raises(ProviderHTTPError) as exc:
        await OpenAIChatProvider("sk-test", client=client).complete(
            ProviderRequest(model="m", content="x", max_tokens=1)
        )
    assert exc.value.status_code == status
    assert exc.value.retryable == (status != 404)


@pytest.mark.asyncio
async def test_timeout_is_retryable():
    client, _ = stub_client(openai.APITimeoutError(request=_request()))
    with pytest.raises(ProviderTimeoutError) as exc:
        await OpenAIChatProvider("sk-test", client=client).complete(
            ProviderRequest(model="m", content="x", max_tokens=1)
        )
    assert exc.value.retryable


@pytest.mark.asyncio
async def test_connection_error_is_fatal():
    client, _ = stub_client(openai.APIConnectionError(request=_request()))
    with pytest.raises(ProviderConnectionError) as exc:
        await OpenAIChatProvider("sk-test", client=client).complete(
            ProviderRequest(model="m", content="x", max_tokens=1)
        )
    assert not exc.value.retryable


def test_image_data_url_round_trips_bytes():
    url = image_data_url(b"\x89PNG", "image/png")
    prefix, b64 = url.split(",", 1)
    assert prefix == "data:image/png;base64"
    assert base64.b64decode(b64) == b"\x89PNG"


def test_vision_content_parts():
    parts = vision_content("What is this?", "data:image/jpeg;base64,AAAA")
    assert parts == [
        {"type": "text", "text": "What is this?"},
        {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,AAAA"}},
    ]


@pytest.mark.asyncio
async def test_close_closes_sdk_client():
    closed = []

    async def close():
        closed.append(True)

    client, _ = stub_client(SimpleNamespace(status_code=200, text="{}"))
    client.close = close
    await OpenAIChatProvider("sk-test", client=client).close()
    assert closed == [True]
