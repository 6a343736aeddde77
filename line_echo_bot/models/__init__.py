"""Webhook event and reply models."""

from line_echo_bot.models.events import InboundEvent, WebhookPayload, parse_event
from line_echo_bot.models.replies import ReplyMessage, to_wire

__all__ = [
    "InboundEvent",
    "WebhookPayload",
    "parse_event",
    "ReplyMessage",
    "to_wire",
]
