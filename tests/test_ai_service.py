import asyncio
import json

import httpx
import pytest

from backend.app.core.exceptions import AIProviderError
from backend.app.core.settings import Settings
from backend.app.services.ai_service import AIService, parse_event_stream

PLAYLAB_STREAM = 'data: {"delta": "Student is"}\ndata: {"delta": " on track."}\ndata: [DONE]\n'


def ai_settings(**overrides) -> Settings:
    values = dict(
        playlab_api_key="playlab-key",
        playlab_project_id="proj-1",
        playlab_base_url="https://playlab.test/api/v1",
        openai_api_key="openai-key",
        openai_base_url="https://openai.test/v1",
    )
    values.update(overrides)
    return Settings(**values)


def make_handler(playlab_status=200, calls=None):
    calls = calls if calls is not None else []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        path = request.url.path
        if path == "/api/v1/projects/proj-1/conversations":
            if playlab_status != 200:
                return httpx.Response(playlab_status, json={"error": "down"})
            return httpx.Response(200, json={"conversation": {"id": "conv-9"}})
        if path == "/api/v1/projects/proj-1/conversations/conv-9/messages":
            return httpx.Response(200, text=PLAYLAB_STREAM)
        if path == "/v1/chat/completions":
            return httpx.Response(200, json={"choices": [{"message": {"content": "OpenAI summary"}}]})
        return httpx.Response(404)

    return handler


def test_parse_event_stream():
    assert parse_event_stream(PLAYLAB_STREAM) == "Student is on track."
    assert parse_event_stream('data: {"content": "A"}\ndata: plain text\n') == "Aplain text"
    assert parse_event_stream("no events here") is None
    assert parse_event_stream('data: {"delta": ""}\ndata: [DONE]\n') == ""


def test_empty_playlab_stream_is_not_returned_raw():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/conversations"):
            return httpx.Response(200, json={"conversation": {"id": "conv-9"}})
        return httpx.Response(200, text='data: {"delta": ""}\ndata: [DONE]\n')

    service = AIService(ai_settings(), transport=httpx.MockTransport(handler))
    assert asyncio.run(service.summarize("Summarize this", provider="playlab")) == ""


def test_playlab_body_without_events_is_returned_as_is():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/conversations"):
            return httpx.Response(200, json={"conversation": {"id": "conv-9"}})
        return httpx.Response(200, text="Plain summary")

    service = AIService(ai_settings(), transport=httpx.MockTransport(handler))
    assert asyncio.run(service.summarize("Summarize this", provider="playlab")) == "Plain summary"


def test_playlab_is_primary():
    calls = []
    service = AIService(ai_settings(), transport=httpx.MockTransport(make_handler(calls=calls)))

    assert asyncio.run(service.summarize("Summarize this")) == "Student is on track."
    message_request = calls[1]
    assert message_request.headers["Authorization"] == "Bearer playlab-key"
    assert json.loads(message_request.content) == {"input": {"message": "Summarize this"}}


def test_falls_back_to_openai_when_playlab_fails():
    calls = []
    service = AIService(ai_settings(), transport=httpx.MockTransport(make_handler(playlab_status=500, calls=calls)))

    assert asyncio.run(service.summarize("Summarize this")) == "OpenAI summary"
    body = json.loads(calls[-1].content)
    assert body["messages"][-1] == {"role": "user", "content": "Summarize this"}


def test_openai_can_be_forced():
    calls = []
    service = AIService(ai_settings(), transport=httpx.MockTransport(make_handler(calls=calls)))

    assert asyncio.run(service.summarize("Summarize this", provider="openai")) == "OpenAI summary"
    assert len(calls) == 1


def test_forced_playlab_failure_propagates():
    service = AIService(ai_settings(), transport=httpx.MockTransport(make_handler(playlab_status=500)))
    with pytest.raises(AIProviderError) as excinfo:
        asyncio.run(service.summarize("Summarize this", provider="playlab"))
    assert excinfo.value.provider == "playlab"


def test_missing_credentials_raise_provider_error():
    service = AIService(
        ai_settings(playlab_api_key=None, openai_api_key=None),
        transport=httpx.MockTransport(make_handler()),
    )
    with pytest.raises(AIProviderError) as excinfo:
        asyncio.run(service.summarize("Summarize this"))
    assert excinfo.value.provider == "openai"
