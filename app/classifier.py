"""Maps Customer.io event types onto Segment event names."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Forward:
    """Forward the webhook as a track call with this event name."""
    event_name: str


@dataclass(frozen=True)
class Suppress:
    """Acknowledge the webhook without a downstream call."""


SUPPRESS = Suppress()

# None means suppress
EVENT_NAMES: dict[str, str | None] = {
    "customer_unsubscribed": "Email - unsubscribed",
    "email_converted": None,
    "email_drafted": None,
    "email_dropped": None,
    "email_delivered": None,
    "email_bounced": "Email - email failed",
    "email_failed": "Email - email failed",
    "email_spammed": "Email - email failed",
    "email_sent": "Email - email sent",
    "email_opened": "Email - opened email",
    "email_clicked": "Email - clicked email",
}


def classify(event_source: str, event_type: str) -> Forward | Suppress:
    """Decide what to do with a raw event type.

    Unknown event types are forwarded as "<event_source>:<event_type>".
    """
    if event_type not in EVENT_NAMES:
        return Forward(f"{event_source}:{event_type}")

    name = EVENT_NAMES[event_type]
    if name is None:
        return SUPPRESS
    return Forward(name)
