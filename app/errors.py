"""Error taxonomy and shared error-parsing utilities for the webhook router."""

import json


class RouterError(Exception):
    """Base class for all webhook router errors."""


class ConfigLoadError(RouterError):
    """Environment config could not be read. Fatal at startup."""


class WebhookError(RouterError):
    """A per-request failure that maps onto an HTTP status and a plain-text body."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def log_message(self) -> str:
        """Server-side description; may say more than the response body."""
        return self.message


class UnknownEnvironmentError(WebhookError):
    status_code = 400

    def __init__(self, env: str):
        super().__init__(f'Environment "{env}" does not exist')
        self.env = env


class PayloadTooLargeError(WebhookError):
    status_code = 413

    def __init__(self, limit: int):
        super().__init__("request body too large")
        self.limit = limit

    @property
    def log_message(self) -> str:
        return f"request body over {self.limit} bytes"


class PayloadDecodeError(WebhookError):
    status_code = 406

    def __init__(self, reason: str):
        # The client only ever sees "bad request"; the reason is for the log.
        super().__init__("bad request")
        self.reason = reason

    @property
    def log_message(self) -> str:
        return self.reason


class MissingRequiredFieldError(WebhookError):
    status_code = 406

    def __init__(self, field: str):
        super().__init__(f"{field} is nil")
        self.field = field


class DownstreamSendError(WebhookError):
    status_code = 500

    def __init__(self, action: str, detail: str):
        super().__init__(f"segment.{action} failed: {detail}")
        self.action = action
        self.detail = detail


def parse_segment_error(response_text: str) -> str:
    """Extract a readable message from a Segment API error response.

    Segment returns JSON like {"success": false, "message": "...", "code": "..."}.
    Returns "code: message" when parseable, raw text otherwise.
    """
    try:
        body = json.loads(response_text)
    except ValueError:
        return response_text
    if isinstance(body, dict):
        msg = body.get("message", "")
        code = body.get("code", "")
        if msg:
            return f"{code}: {msg}" if code else msg
    return response_text
