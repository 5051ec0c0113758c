from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.config import EnvironmentConfig, Settings
from app.errors import DownstreamSendError
from app.main import create_application
from app.providers import AnalyticsClient


class RecordingClient(AnalyticsClient):
    """Analytics client that records calls instead of sending them."""

    def __init__(self, write_key: str, calls: list[tuple[str, str, dict]], fail_with: str | None = None) -> None:
        self.write_key = write_key
        self._calls = calls
        self._fail_with = fail_with

    @property
    def provider_name(self) -> str:
        return "recording"

    async def identify(self, payload: dict[str, Any]) -> None:
        self._record("identify", payload)

    async def track(self, payload: dict[str, Any]) -> None:
        self._record("track", payload)

    def _record(self, action: str, payload: dict[str, Any]) -> None:
        if self._fail_with is not None:
            raise DownstreamSendError(action, self._fail_with)
        self._calls.append((self.write_key, action, payload))


class Outbound:
    """Shared state between a test and the clients the app builds."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict]] = []
        self.fail_with: str | None = None

    def factory(self, write_key: str) -> RecordingClient:
        return RecordingClient(write_key, self.calls, self.fail_with)


@pytest.fixture()
def environments() -> EnvironmentConfig:
    return EnvironmentConfig.model_validate(
        {
            "environments": {
                "prod": {"segment_write_key": "prod-key"},
                "staging": {"segment_write_key": "staging-key"},
            }
        }
    )


@pytest.fixture()
def outbound() -> Outbound:
    return Outbound()


@pytest.fixture()
def client(environments: EnvironmentConfig, outbound: Outbound) -> TestClient:
    app = create_application(
        environments,
        app_settings=Settings(max_body_bytes=4096),
        client_factory=outbound.factory,
    )
    with TestClient(app) as test_client:
        yield test_client
