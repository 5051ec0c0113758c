"""Webhook ingestion endpoints - forward Customer.io webhooks to Segment."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from app.classifier import Suppress, classify
from app.config import EnvironmentConfig, Settings
from app.customerio import decode_webhook
from app.errors import PayloadTooLargeError
from app.providers import ACTIONS, AnalyticsClient, ClientFactory

logger = logging.getLogger(__name__)
router = APIRouter()

EnvParam = Annotated[str, Query(description="Environment whose Segment write key is used")]


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_environments(request: Request) -> EnvironmentConfig:
    return request.app.state.environments


def get_client_factory(request: Request) -> ClientFactory:
    return request.app.state.client_factory


def get_client(
    env: EnvParam = "",
    environments: EnvironmentConfig = Depends(get_environments),
    client_factory: ClientFactory = Depends(get_client_factory),
) -> AnalyticsClient:
    """Resolve the environment and build a client for its write key."""
    credentials = environments.get(env)
    return client_factory(credentials.segment_write_key)


async def read_body(request: Request, limit: int) -> bytes:
    """Read the complete request body, refusing anything over `limit` bytes."""
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise PayloadTooLargeError(limit)
    return bytes(body)


def _ok() -> PlainTextResponse:
    return PlainTextResponse("ok")


@router.post("", response_class=PlainTextResponse)
async def customerio_webhook(
    request: Request,
    env: EnvParam = "",
    client: AnalyticsClient = Depends(get_client),
    settings: Settings = Depends(get_settings),
):
    """Classify a Customer.io webhook and forward it as a track call."""
    webhook = decode_webhook(await read_body(request, settings.max_body_bytes))
    webhook.customer_id()  # raises MissingRequiredFieldError

    outcome = classify(webhook.source, webhook.event_type)
    if isinstance(outcome, Suppress):
        logger.info(f"webhook env={env} event_type={webhook.event_type} event_id={webhook.event_id}: suppressed")
        return _ok()

    await webhook.to_track(outcome.event_name).send(client)

    logger.info(f"webhook env={env} event_type={webhook.event_type} event_id={webhook.event_id}: forwarded as {outcome.event_name!r}")
    return _ok()


async def _forward_action(kind: str, request: Request, env: str, client: AnalyticsClient, settings: Settings):
    action = ACTIONS[kind].decode(await read_body(request, settings.max_body_bytes))
    await action.send(client)
    logger.info(f"webhook/{kind} env={env} user_id={action.user_id}: ok")
    return _ok()


@router.post("/identify", response_class=PlainTextResponse)
async def identify_webhook(
    request: Request,
    env: EnvParam = "",
    client: AnalyticsClient = Depends(get_client),
    settings: Settings = Depends(get_settings),
):
    """Forward an identify payload as-is."""
    return await _forward_action("identify", request, env, client, settings)


@router.post("/track", response_class=PlainTextResponse)
async def track_webhook(
    request: Request,
    env: EnvParam = "",
    client: AnalyticsClient = Depends(get_client),
    settings: Settings = Depends(get_settings),
):
    """Forward a track payload as-is. The Customer.io suppression table is not applied here."""
    return await _forward_action("track", request, env, client, settings)
