import asyncio
import base64
import json
import logging

import httpx
import pytest

from app.errors import DownstreamSendError
from app.providers import IdentifyAction, SegmentClient, TrackAction


def _client(handler) -> SegmentClient:
    return SegmentClient(
        "write-key",
        base_url="https://segment.test/",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


def test_track_posts_to_track_endpoint() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True})

    action = TrackAction(user_id="u1", event="Email - opened email", timestamp="2021-01-01T00:00:00Z")
    asyncio.run(action.send(_client(handler)))

    assert len(seen) == 1
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://segment.test/v1/track"
    assert request.headers["authorization"] == "Basic " + base64.b64encode(b"write-key:").decode()
    assert json.loads(request.content) == {
        "userId": "u1",
        "event": "Email - opened email",
        "properties": {},
        "context": {},
        "timestamp": "2021-01-01T00:00:00Z",
    }


def test_identify_posts_to_identify_endpoint() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    action = IdentifyAction(user_id="u1", traits={"plan": "pro"}, anonymous_id="anon-1")
    asyncio.run(action.send(_client(handler)))

    assert seen[0].url.path == "/v1/identify"
    sent = json.loads(seen[0].content)
    assert sent["traits"] == {"plan": "pro"}
    assert sent["anonymousId"] == "anon-1"


def test_rejected_payload_raises_send_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"success": False, "code": "invalid_request", "message": "bad userId"})

    with pytest.raises(DownstreamSendError) as exc_info:
        asyncio.run(_client(handler).track({"userId": "u1", "event": "x"}))

    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "segment.track failed: 400 invalid_request: bad userId"


def test_network_failure_raises_send_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(DownstreamSendError) as exc_info:
        asyncio.run(_client(handler).identify({"userId": "u1"}))

    assert "connection refused" in exc_info.value.message
    assert exc_info.value.action == "identify"


def test_accepted_call_is_logged_with_provider_name(caplog: pytest.LogCaptureFixture) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200)

    client = _client(handler)
    with caplog.at_level(logging.DEBUG, logger="app.providers.segment"):
        asyncio.run(client.track({"userId": "u1", "event": "x"}))

    assert client.provider_name == "segment"
    assert "segment.track accepted (200)" in caplog.text
