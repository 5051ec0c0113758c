from datetime import datetime, timezone

from fastapi import APIRouter, Request
from pydantic import BaseModel

from app import __version__


router = APIRouter(tags=["health"])

_startup_time = datetime.now(timezone.utc)


class EndpointInfo(BaseModel):
    path: str
    description: str
    provider: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float
    endpoints: list[EndpointInfo]


class EnvironmentsResponse(BaseModel):
    environments: list[str]


ENDPOINTS = [
    EndpointInfo(path="/health", description="Router status and API directory"),
    EndpointInfo(path="/health/environments", description="Configured environments"),
    EndpointInfo(path="/webhook", description="Customer.io webhook, classified and tracked", provider="Segment"),
    EndpointInfo(path="/webhook/identify", description="Identify call passthrough", provider="Segment"),
    EndpointInfo(path="/webhook/track", description="Track call passthrough", provider="Segment"),
]


@router.get("/health", response_model=HealthResponse)
async def health_check():
    uptime = (datetime.now(timezone.utc) - _startup_time).total_seconds()

    return HealthResponse(
        status="ok",
        version=__version__,
        uptime_seconds=round(uptime, 2),
        endpoints=ENDPOINTS,
    )


@router.get("/health/environments", response_model=EnvironmentsResponse)
async def list_environments(request: Request):
    # Names only; write keys never leave the process.
    return EnvironmentsResponse(environments=request.app.state.environments.names())
