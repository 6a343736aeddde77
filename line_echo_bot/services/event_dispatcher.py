"""Webhook event dispatch service.

Routes each inbound event to a handler keyed by event type and, for
message events, by message type. Every handler ends in at most one reply
call, so a reply token is never used twice.

Media messages hosted on the platform are downloaded first and replied
to with a link into the ``/downloaded`` static mount; externally-hosted
media is forwarded by URL.
"""

from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path
from typing import Any

import logfire

from line_echo_bot.constants import (
    CONTENT_PROVIDER_EXTERNAL,
    CONTENT_PROVIDER_LINE,
    DATETIME_PICKER_POSTBACKS,
    DOWNLOAD_DIR,
    DOWNLOADED_URL_PREFIX,
    FOLLOW_GREETING,
    MEDIA_FILE_EXTENSIONS,
    VIDEO_PREVIEW_PLACEHOLDER,
)
from line_echo_bot.errors import BatchDispatchError, UnsupportedContentProviderError
from line_echo_bot.models.events import (
    AudioMessage,
    BeaconEvent,
    FollowEvent,
    ImageMessage,
    InboundEvent,
    JoinEvent,
    LeaveEvent,
    LocationMessage,
    MediaMessage,
    MessageEvent,
    PostbackEvent,
    StickerMessage,
    TextMessage,
    UnfollowEvent,
    VideoMessage,
    parse_event,
)
from line_echo_bot.models.replies import (
    AudioReply,
    ImageReply,
    LocationReply,
    StickerReply,
    VideoReply,
)
from line_echo_bot.services.content_fetcher import download_content
from line_echo_bot.services.messaging_protocol import LinePlatform
from line_echo_bot.services.reply_sender import reply_text, send_reply

# Webhook verification requests carry a synthetic token such as "0000..." or "ffff..."
_VERIFICATION_TOKEN = re.compile(r"(.)\1*")


def is_verification_token(reply_token: Any) -> bool:
    """Return True for reply tokens made of a single repeated character."""
    return isinstance(reply_token, str) and bool(
        _VERIFICATION_TOKEN.fullmatch(reply_token)
    )


class EventDispatcher:
    """Dispatch webhook events to their handlers.

    The platform client and the public base URL are passed in explicitly,
    so tests can run the dispatcher against MockLinePlatform.

    Example:
        >>> dispatcher = EventDispatcher(platform, base_url="https://bot.example.com")
        >>> await dispatcher.dispatch_batch(payload["events"])
    """

    def __init__(
        self,
        platform: LinePlatform,
        base_url: str,
        download_dir: Path = DOWNLOAD_DIR,
    ):
        """Initialize the dispatcher.

        Args:
            platform: Client for reply and content calls
            base_url: Public URL of this server, used to link downloaded media
            download_dir: Directory that the /downloaded mount serves
        """
        self._platform = platform
        self._base_url = base_url.rstrip("/")
        self._download_dir = download_dir

    async def dispatch_batch(self, events: list[Any]) -> None:
        """Handle every event of a webhook batch concurrently.

        Waits until all events have settled, then reports failures together.

        Raises:
            BatchDispatchError: If any event failed
        """
        results = await asyncio.gather(
            *(self.handle_event(event) for event in events),
            return_exceptions=True,
        )
        failures = [result for result in results if isinstance(result, BaseException)]
        for failure in failures:
            logfire.error(
                "Event handling failed",
                error=str(failure),
                error_type=type(failure).__name__,
            )
        if failures:
            raise BatchDispatchError(failures, total=len(events))

    async def handle_event(self, raw_event: Any) -> None:
        """Handle a single raw webhook event.

        Raises:
            UnknownEventKindError: If the event type is not recognized
            UnknownMessageKindError: If the message type is not recognized
            UnsupportedContentProviderError: If a media message names an unknown provider
            StreamError: If downloading media content fails
            PlatformApiError: If the reply is rejected
        """
        if isinstance(raw_event, dict) and is_verification_token(
            raw_event.get("replyToken")
        ):
            logfire.info(
                "Verification webhook received",
                message=json.dumps(raw_event.get("message"), ensure_ascii=False),
            )
            return

        event = parse_event(raw_event)
        if event.delivery_context and event.delivery_context.is_redelivery:
            logfire.info(
                "Redelivered event",
                event_type=event.type,
                webhook_event_id=event.webhook_event_id,
            )
        await self._dispatch(event)

    async def _dispatch(self, event: InboundEvent) -> None:
        if isinstance(event, MessageEvent):
            await self._handle_message(event)
        elif isinstance(event, FollowEvent):
            await reply_text(self._platform, event.reply_token, FOLLOW_GREETING)
        elif isinstance(event, UnfollowEvent):
            logfire.info("Unfollowed this bot", event=_dump_event(event))
        elif isinstance(event, JoinEvent):
            await reply_text(
                self._platform, event.reply_token, f"Joined {event.source.type}"
            )
        elif isinstance(event, LeaveEvent):
            logfire.info("Left", event=_dump_event(event))
        elif isinstance(event, PostbackEvent):
            await reply_text(
                self._platform, event.reply_token, postback_reply_text(event)
            )
        elif isinstance(event, BeaconEvent):
            await reply_text(
                self._platform, event.reply_token, f"Got beacon: {event.beacon.hwid}"
            )
        else:
            raise TypeError(f"Unhandled event model: {type(event).__name__}")

    # =========================================================================
    # Message handlers
    # =========================================================================

    async def _handle_message(self, event: MessageEvent) -> None:
        message = event.message
        logfire.info(
            "Handling message", message_type=message.type, message_id=message.id
        )

        if isinstance(message, TextMessage):
            await reply_text(self._platform, event.reply_token, message.text)
        elif isinstance(message, LocationMessage):
            await send_reply(
                self._platform,
                event.reply_token,
                LocationReply(
                    title=message.title,
                    address=message.address,
                    latitude=message.latitude,
                    longitude=message.longitude,
                ),
            )
        elif isinstance(message, StickerMessage):
            await send_reply(
                self._platform,
                event.reply_token,
                StickerReply(
                    package_id=message.package_id, sticker_id=message.sticker_id
                ),
            )
        elif isinstance(message, ImageMessage):
            original_url, preview_url = await self._resolve_media_urls(message)
            await send_reply(
                self._platform,
                event.reply_token,
                ImageReply(
                    original_content_url=original_url,
                    preview_image_url=preview_url,
                ),
            )
        elif isinstance(message, VideoMessage):
            original_url, preview_url = await self._resolve_media_urls(message)
            await send_reply(
                self._platform,
                event.reply_token,
                VideoReply(
                    original_content_url=original_url,
                    preview_image_url=preview_url,
                ),
            )
        elif isinstance(message, AudioMessage):
            original_url, _ = await self._resolve_media_urls(message)
            await send_reply(
                self._platform,
                event.reply_token,
                AudioReply(original_content_url=original_url, duration=message.duration),
            )
        else:
            raise TypeError(f"Unhandled message model: {type(message).__name__}")

    async def _resolve_media_urls(
        self, message: MediaMessage
    ) -> tuple[str | None, str | None]:
        """Return (original URL, preview URL) to reply with for a media message.

        Platform-hosted content is downloaded first. The preview is the
        content itself for images and a fixed placeholder for videos; audio
        has none.
        """
        provider = message.content_provider

        if provider.type == CONTENT_PROVIDER_EXTERNAL:
            return provider.original_content_url, provider.preview_image_url

        if provider.type != CONTENT_PROVIDER_LINE:
            raise UnsupportedContentProviderError(message.id, provider.type)

        destination = self._download_dir / (
            f"{message.id}{MEDIA_FILE_EXTENSIONS[message.type]}"
        )
        path = await download_content(self._platform, message.id, destination)
        original_url = self.public_url(path.name)

        if isinstance(message, ImageMessage):
            return original_url, original_url
        if isinstance(message, VideoMessage):
            return original_url, self.public_url(VIDEO_PREVIEW_PLACEHOLDER)
        return original_url, None

    def public_url(self, file_name: str) -> str:
        """Link to a file served from the download directory."""
        return f"{self._base_url}{DOWNLOADED_URL_PREFIX}/{file_name}"


def postback_reply_text(event: PostbackEvent) -> str:
    """Echo postback data, plus picker parameters for datetime picker postbacks."""
    data = event.postback.data
    if data in DATETIME_PICKER_POSTBACKS and event.postback.params is not None:
        params = json.dumps(
            event.postback.params, ensure_ascii=False, separators=(",", ":")
        )
        data += f"({params})"
    return data


def _dump_event(event: InboundEvent) -> str:
    return event.model_dump_json(by_alias=True, exclude_none=True)
