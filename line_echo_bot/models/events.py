"""Inbound LINE webhook event models.

Events and messages are tagged unions discriminated on their ``type``
field. ``parse_event`` is the only place that deals with unrecognized
kinds; everything past it works with concrete model classes.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from line_echo_bot.errors import UnknownEventKindError, UnknownMessageKindError


class LineModel(BaseModel):
    """Base model accepting the platform's camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Source
# =============================================================================


class Source(LineModel):
    """Where an event came from: a user, a group chat or a multi-person room."""

    type: Literal["user", "group", "room"]
    user_id: str | None = None
    group_id: str | None = None
    room_id: str | None = None


class DeliveryContext(LineModel):
    is_redelivery: bool = False


# =============================================================================
# Messages
# =============================================================================


class ContentProvider(LineModel):
    """Where a media message's binary content lives.

    ``line`` means the content must be fetched from the platform;
    ``external`` means the URLs below are already public.
    """

    type: str
    original_content_url: str | None = None
    preview_image_url: str | None = None


class TextMessage(LineModel):
    type: Literal["text"]
    id: str
    text: str


class ImageMessage(LineModel):
    type: Literal["image"]
    id: str
    content_provider: ContentProvider


class VideoMessage(LineModel):
    type: Literal["video"]
    id: str
    content_provider: ContentProvider
    duration: int | None = None


class AudioMessage(LineModel):
    type: Literal["audio"]
    id: str
    content_provider: ContentProvider
    duration: int | None = None


class LocationMessage(LineModel):
    type: Literal["location"]
    id: str
    title: str | None = None
    address: str | None = None
    latitude: float
    longitude: float


class StickerMessage(LineModel):
    type: Literal["sticker"]
    id: str
    package_id: str
    sticker_id: str


InboundMessage = Annotated[
    Union[
        TextMessage,
        ImageMessage,
        VideoMessage,
        AudioMessage,
        LocationMessage,
        StickerMessage,
    ],
    Field(discriminator="type"),
]

MediaMessage = Union[ImageMessage, VideoMessage, AudioMessage]


# =============================================================================
# Events
# =============================================================================


class EventBase(LineModel):
    """Fields shared by every webhook event."""

    reply_token: str | None = None
    source: Source | None = None
    timestamp: int | None = None
    mode: str | None = None
    webhook_event_id: str | None = None
    delivery_context: DeliveryContext | None = None


class MessageEvent(EventBase):
    type: Literal["message"]
    message: InboundMessage


class FollowEvent(EventBase):
    type: Literal["follow"]


class UnfollowEvent(EventBase):
    type: Literal["unfollow"]


class JoinEvent(EventBase):
    type: Literal["join"]
    source: Source


class LeaveEvent(EventBase):
    type: Literal["leave"]


class Postback(LineModel):
    data: str
    params: dict[str, str] | None = None


class PostbackEvent(EventBase):
    type: Literal["postback"]
    postback: Postback


class Beacon(LineModel):
    hwid: str
    type: str | None = None
    dm: str | None = None


class BeaconEvent(EventBase):
    type: Literal["beacon"]
    beacon: Beacon


InboundEvent = Annotated[
    Union[
        MessageEvent,
        FollowEvent,
        UnfollowEvent,
        JoinEvent,
        LeaveEvent,
        PostbackEvent,
        BeaconEvent,
    ],
    Field(discriminator="type"),
]

EVENT_TYPES = frozenset(
    {"message", "follow", "unfollow", "join", "leave", "postback", "beacon"}
)
MESSAGE_TYPES = frozenset({"text", "image", "video", "audio", "location", "sticker"})

_event_adapter: TypeAdapter[InboundEvent] = TypeAdapter(InboundEvent)


class WebhookPayload(LineModel):
    """Webhook request body. ``events`` stays raw so each event parses on its own."""

    destination: str | None = None
    events: list[Any]


def parse_event(raw: Any) -> InboundEvent:
    """Validate one raw webhook event into its concrete model.

    Args:
        raw: Decoded JSON object for a single event

    Returns:
        The matching event model

    Raises:
        UnknownEventKindError: If the event type is not recognized
        UnknownMessageKindError: If a message event carries an unrecognized message type
        pydantic.ValidationError: If a known kind is missing required fields
    """
    if not isinstance(raw, dict) or raw.get("type") not in EVENT_TYPES:
        raise UnknownEventKindError(raw)

    if raw["type"] == "message":
        message = raw.get("message")
        if not isinstance(message, dict) or message.get("type") not in MESSAGE_TYPES:
            raise UnknownMessageKindError(message)

    return _event_adapter.validate_python(raw)
