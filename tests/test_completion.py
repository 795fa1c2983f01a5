import json

import httpx
import pytest

from conftest import PROVIDER_URL, completion_payload, make_provider
from study_buddy.services.completion import (
    BAD_STATUS,
    HTTP_ERROR,
    MALFORMED_RESPONSE,
    NOT_CONFIGURED,
    TIMEOUT,
    CompletionError,
)

MESSAGES = [
    {"role": "system", "content": "You are an expert tutor in Calculus."},
    {"role": "user", "content": "What is a limit?"},
]


async def test_unconfigured_client_refuses_to_call():
    client = make_provider(api_key=None)

    assert not client.configured
    with pytest.raises(CompletionError) as exc:
        await client.complete(MESSAGES)
    assert exc.value.reason == NOT_CONFIGURED


async def test_successful_completion_returns_first_choice():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [
            {"message": {"content": "  A limit describes where a function is heading.  "}},
            {"message": {"content": "second choice"}},
        ]})

    text = await make_provider(handler).complete(MESSAGES, max_tokens=1000, temperature=0.7)

    assert text == "A limit describes where a function is heading."
    assert seen["url"] == PROVIDER_URL
    assert seen["headers"]["authorization"] == "Bearer test-key"
    assert seen["headers"]["http-referer"] == "http://localhost:3000/"
    assert seen["body"] == {
        "model": "test/model",
        "messages": MESSAGES,
        "temperature": 0.7,
        "max_tokens": 1000,
    }


async def test_error_status_is_reported():
    client = make_provider(lambda request: httpx.Response(503, json={"error": "overloaded"}))

    with pytest.raises(CompletionError) as exc:
        await client.complete(MESSAGES)
    assert exc.value.reason == BAD_STATUS


@pytest.mark.parametrize("response", [
    httpx.Response(200, content=b"<html>not json</html>"),
    httpx.Response(200, json={"choices": []}),
    httpx.Response(200, json={"choices": [{"message": {}}]}),
    httpx.Response(200, json={"unexpected": True}),
    httpx.Response(200, json=completion_payload("   ")),
])
async def test_malformed_response_is_reported(response):
    client = make_provider(lambda request: response)

    with pytest.raises(CompletionError) as exc:
        await client.complete(MESSAGES)
    assert exc.value.reason == MALFORMED_RESPONSE


async def test_network_error_is_reported():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CompletionError) as exc:
        await make_provider(handler).complete(MESSAGES)
    assert exc.value.reason == HTTP_ERROR


async def test_timeout_is_reported():
    def handler(request):
        raise httpx.ReadTimeout("upstream too slow", request=request)

    with pytest.raises(CompletionError) as exc:
        await make_provider(handler).complete(MESSAGES)
    assert exc.value.reason == TIMEOUT
