"""Exceptions raised while handling webhook events."""

import json
from typing import Any


class LineBotError(Exception):
    """Base class for all bot errors."""


class UnknownEventKindError(LineBotError):
    """Raised when an inbound event carries an unrecognized ``type``."""

    def __init__(self, event: Any):
        self.event = event
        super().__init__(f"Unknown event: {_dump(event)}")


class UnknownMessageKindError(LineBotError):
    """Raised when a message event carries an unrecognized message ``type``."""

    def __init__(self, message: Any):
        self.message = message
        super().__init__(f"Unknown message: {_dump(message)}")


class UnsupportedContentProviderError(LineBotError):
    """Raised when a media message's content provider is neither line nor external."""

    def __init__(self, message_id: str, provider_type: str | None):
        self.message_id = message_id
        self.provider_type = provider_type
        super().__init__(
            f"Unsupported content provider {provider_type!r} for message {message_id}"
        )


class StreamError(LineBotError):
    """Raised when a content stream fails before reaching end of data."""

    def __init__(self, message_id: str, reason: str):
        self.message_id = message_id
        self.reason = reason
        super().__init__(f"Content stream for message {message_id} failed: {reason}")


class PlatformApiError(LineBotError):
    """Raised when the LINE platform rejects an outbound call or cannot be reached."""

    def __init__(self, operation: str, status_code: int | None, detail: str):
        self.operation = operation
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{operation} failed (status={status_code}): {detail}")


class BatchDispatchError(LineBotError):
    """Raised when one or more events of a webhook batch failed."""

    def __init__(self, failures: list[BaseException], total: int):
        self.failures = failures
        self.total = total
        super().__init__(f"{len(failures)} of {total} events failed")


def _dump(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(value)
