"""Identify and Track analytics actions."""

from typing import Any, ClassVar

from pydantic import Field, field_validator

from .base import AnalyticsAction, AnalyticsClient


class IdentifyAction(AnalyticsAction):
    """Establish or update a user profile's traits."""

    kind: ClassVar[str] = "identify"

    traits: dict[str, Any] = Field(default_factory=dict)

    @field_validator("traits", mode="before")
    @classmethod
    def null_traits(cls, value: Any) -> Any:
        return {} if value is None else value

    async def send(self, client: AnalyticsClient) -> None:
        await client.identify(self.to_payload())


class TrackAction(AnalyticsAction):
    """Record a discrete named event with properties."""

    kind: ClassVar[str] = "track"

    event: str = Field(..., min_length=1)
    properties: dict[str, Any] = Field(default_factory=dict)

    @field_validator("properties", mode="before")
    @classmethod
    def null_properties(cls, value: Any) -> Any:
        return {} if value is None else value

    async def send(self, client: AnalyticsClient) -> None:
        await client.track(self.to_payload())


ACTIONS: dict[str, type[AnalyticsAction]] = {
    IdentifyAction.kind: IdentifyAction,
    TrackAction.kind: TrackAction,
}
