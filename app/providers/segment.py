"""Segment HTTP tracking API client."""

import logging
from typing import Any

import httpx

from app.config import settings
from app.errors import DownstreamSendError, parse_segment_error

from .base import AnalyticsClient

logger = logging.getLogger(__name__)


class SegmentClient(AnalyticsClient):
    """Segment client bound to a single write key.

    Every call is sent once; failures surface as DownstreamSendError.
    """

    def __init__(
        self,
        write_key: str,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._write_key = write_key
        self._base_url = (base_url or settings.segment_api_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.segment_timeout
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return "segment"

    async def identify(self, payload: dict[str, Any]) -> None:
        await self._send("identify", payload)

    async def track(self, payload: dict[str, Any]) -> None:
        await self._send("track", payload)

    async def _send(self, action: str, payload: dict[str, Any]) -> None:
        url = f"{self._base_url}/v1/{action}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    url,
                    auth=(self._write_key, ""),
                    json=payload,
                )
        except httpx.HTTPError as e:
            raise DownstreamSendError(action, str(e) or type(e).__name__) from e

        if not response.is_success:
            detail = parse_segment_error(response.text)
            raise DownstreamSendError(action, f"{response.status_code} {detail}".strip())

        logger.debug(f"{self.provider_name}.{action} accepted ({response.status_code})")
