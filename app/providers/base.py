"""Base interfaces for outbound analytics clients and the actions sent through them."""

import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from app.errors import PayloadDecodeError

# Full date, "T", full time, then "Z" or a numeric offset
RFC3339_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})"
)


def format_rfc3339(moment: datetime) -> str:
    """Format a datetime as second-precision RFC3339 in UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}Z"
    )


def now_rfc3339() -> str:
    return format_rfc3339(datetime.now(timezone.utc))


def check_rfc3339(value: str, field: str = "timestamp") -> str:
    """Return value unchanged if it is an RFC3339 date-time, else raise ValueError."""
    if RFC3339_PATTERN.fullmatch(value) is None:
        raise ValueError(f"{field} {value!r} is not RFC3339")
    try:
        datetime.fromisoformat(value)
    except ValueError:
        raise ValueError(f"{field} {value!r} is not RFC3339") from None
    return value


class AnalyticsClient(ABC):
    """Abstract base class for analytics ingestion clients bound to one write key."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return provider identifier."""
        pass

    @abstractmethod
    async def identify(self, payload: dict[str, Any]) -> None:
        """Send an identify call. Raises DownstreamSendError on failure."""
        pass

    @abstractmethod
    async def track(self, payload: dict[str, Any]) -> None:
        """Send a track call. Raises DownstreamSendError on failure."""
        pass


# Builds a client for a given write key
ClientFactory = Callable[[str], AnalyticsClient]


class AnalyticsAction(BaseModel, ABC):
    """An outbound analytics call that knows how to decode and send itself."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kind: ClassVar[str]

    user_id: str = Field(..., alias="userId", min_length=1)
    anonymous_id: str | None = Field(None, alias="anonymousId")
    context: dict[str, Any] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=now_rfc3339)

    @field_validator("timestamp", mode="before")
    @classmethod
    def default_timestamp(cls, value: Any) -> Any:
        return now_rfc3339() if value is None else value

    @field_validator("timestamp")
    @classmethod
    def check_timestamp(cls, value: str) -> str:
        # Passed through as given
        return check_rfc3339(value)

    @field_validator("context", mode="before")
    @classmethod
    def null_context(cls, value: Any) -> Any:
        return {} if value is None else value

    @classmethod
    def decode(cls, body: bytes) -> "AnalyticsAction":
        """Parse a JSON request body. Raises PayloadDecodeError on bad input."""
        try:
            return cls.model_validate_json(body)
        except ValidationError as e:
            raise PayloadDecodeError(f"{cls.kind}: {e}") from e

    def to_payload(self) -> dict[str, Any]:
        """Segment wire representation (camelCase keys, unset optionals omitted)."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @abstractmethod
    async def send(self, client: AnalyticsClient) -> None:
        """Transmit this action through the given client."""
        pass
