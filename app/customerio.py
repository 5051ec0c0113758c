"""Customer.io webhook payload decoding and normalization."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, field_validator

from app.errors import MissingRequiredFieldError, PayloadDecodeError
from app.providers import TrackAction
from app.providers.base import check_rfc3339, format_rfc3339, now_rfc3339

DEFAULT_EVENT_SOURCE = "customerio"

# Stripped from data before forwarding; holds template variables, not event properties
REDACTED_DATA_KEYS = ("variables",)


class CustomerIOWebhook(BaseModel):
    """Inbound Customer.io webhook.

    Either `timestamp` (epoch seconds) or `timestamp_iso` (RFC3339) is expected;
    when both are missing the processing time is used instead.
    """

    model_config = ConfigDict(extra="ignore")

    event_source: str | None = None
    event_type: str
    event_id: str = ""
    timestamp: StrictInt | None = None
    timestamp_iso: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("event_id", mode="before")
    @classmethod
    def null_event_id(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("timestamp")
    @classmethod
    def check_epoch(cls, value: int | None) -> int | None:
        if value is not None:
            try:
                datetime.fromtimestamp(value, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                raise ValueError(f"timestamp {value} is out of range") from None
        return value

    @field_validator("timestamp_iso")
    @classmethod
    def check_iso(cls, value: str | None) -> str | None:
        if value is not None:
            check_rfc3339(value, "timestamp_iso")
        return value

    @field_validator("data", mode="before")
    @classmethod
    def null_data(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("data")
    @classmethod
    def redact_data(cls, value: dict[str, Any]) -> dict[str, Any]:
        for key in REDACTED_DATA_KEYS:
            value.pop(key, None)
        return value

    @property
    def source(self) -> str:
        return self.event_source if self.event_source is not None else DEFAULT_EVENT_SOURCE

    def timestamp_rfc3339(self) -> str:
        """Resolve the event time: epoch field, then ISO field, then now."""
        if self.timestamp is not None:
            return format_rfc3339(datetime.fromtimestamp(self.timestamp, tz=timezone.utc))
        if self.timestamp_iso is not None:
            return self.timestamp_iso
        return now_rfc3339()

    def customer_id(self) -> str:
        """Return data.customer_id, the subject of the event."""
        customer_id = self.data.get("customer_id")
        if not isinstance(customer_id, str) or not customer_id:
            raise MissingRequiredFieldError("data.customer_id")
        return customer_id

    def to_track(self, event_name: str) -> TrackAction:
        return TrackAction(
            user_id=self.customer_id(),
            event=event_name,
            properties=self.data,
            context={"event_id": self.event_id},
            timestamp=self.timestamp_rfc3339(),
        )


def decode_webhook(body: bytes) -> CustomerIOWebhook:
    """Parse a raw request body. Raises PayloadDecodeError on bad input."""
    try:
        return CustomerIOWebhook.model_validate_json(body)
    except ValidationError as e:
        raise PayloadDecodeError(f"customerio: {e}") from e
