"""Outbound reply message models."""

from typing import Annotated, Any, Literal, Union

from pydantic import Field

from line_echo_bot.models.events import LineModel


class TextReply(LineModel):
    type: Literal["text"] = "text"
    text: str


class ImageReply(LineModel):
    type: Literal["image"] = "image"
    original_content_url: str
    preview_image_url: str


class VideoReply(LineModel):
    type: Literal["video"] = "video"
    original_content_url: str
    preview_image_url: str


class AudioReply(LineModel):
    type: Literal["audio"] = "audio"
    original_content_url: str
    duration: int


class LocationReply(LineModel):
    type: Literal["location"] = "location"
    title: str
    address: str
    latitude: float
    longitude: float


class StickerReply(LineModel):
    type: Literal["sticker"] = "sticker"
    package_id: str
    sticker_id: str


ReplyMessage = Annotated[
    Union[TextReply, ImageReply, VideoReply, AudioReply, LocationReply, StickerReply],
    Field(discriminator="type"),
]


def to_wire(reply: LineModel) -> dict[str, Any]:
    """Serialize a reply the way the Messaging API expects it."""
    return reply.model_dump(by_alias=True, exclude_none=True)
