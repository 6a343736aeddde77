"""Send replies bound to an event's reply token."""

from collections.abc import Sequence

from line_echo_bot.models.replies import ReplyMessage, TextReply
from line_echo_bot.services.messaging_protocol import LinePlatform


async def send_reply(
    platform: LinePlatform,
    reply_token: str,
    payloads: ReplyMessage | Sequence[ReplyMessage],
) -> None:
    """Send one reply or an ordered sequence of replies as a single call.

    Errors from the platform are not handled here; they propagate to the
    caller as PlatformApiError.
    """
    if not isinstance(payloads, Sequence):
        payloads = [payloads]
    await platform.reply_message(reply_token, list(payloads))


async def reply_text(
    platform: LinePlatform,
    reply_token: str,
    texts: str | Sequence[str],
) -> None:
    """Reply with one or more plain text messages."""
    if isinstance(texts, str):
        texts = [texts]
    await send_reply(platform, reply_token, [TextReply(text=text) for text in texts])
