"""Webhook router - FastAPI application factory and process entry point."""

import argparse
import functools
import logging
import sys

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from app import __version__
from app.config import EnvironmentConfig, Settings, load_environments, settings
from app.errors import ConfigLoadError, WebhookError
from app.providers import ClientFactory, SegmentClient
from app.routers import health, webhooks

logger = logging.getLogger(__name__)


async def webhook_error_handler(request: Request, exc: WebhookError) -> PlainTextResponse:
    """Turn a per-request failure into a plain-text response and log it."""
    line = f"{request.method} {request.url.path} env={request.query_params.get('env', '')}: {exc.status_code} {exc.log_message}"
    if exc.status_code >= 500:
        logger.error(line)
    else:
        logger.warning(line)
    return PlainTextResponse(exc.message, status_code=exc.status_code)


def create_application(
    environments: EnvironmentConfig,
    *,
    app_settings: Settings | None = None,
    client_factory: ClientFactory | None = None,
) -> FastAPI:
    """Build the application around an already-loaded environment mapping."""
    app_settings = app_settings or settings
    if client_factory is None:
        client_factory = functools.partial(
            SegmentClient,
            base_url=app_settings.segment_api_url,
            timeout=app_settings.segment_timeout,
        )

    app = FastAPI(
        title="Webhook Router",
        description="Forwards Customer.io webhooks to Segment",
        version=__version__,
        debug=app_settings.debug,
    )

    app.state.settings = app_settings
    app.state.environments = environments
    app.state.client_factory = client_factory

    app.add_exception_handler(WebhookError, webhook_error_handler)

    app.include_router(health.router)
    app.include_router(webhooks.router, prefix="/webhook", tags=["webhooks"])

    return app


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="webhook-router")
    parser.add_argument("--config", default=settings.config_path, help="Path to the config file")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(settings.log_level)

    try:
        environments = load_environments(args.config)
    except ConfigLoadError as e:
        logger.critical(str(e))
        sys.exit(1)

    app = create_application(environments)

    logger.info(f"Listening on {args.host}:{args.port} for incoming webhooks to forward to segment.com")
    uvicorn.run(app, host=args.host, port=args.port, log_level=settings.log_level.lower())
