"""LINE Messaging API client."""

import time
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

import httpx
import logfire

from line_echo_bot.constants import LINE_API_BASE_URL, LINE_DATA_API_BASE_URL
from line_echo_bot.errors import PlatformApiError, StreamError
from line_echo_bot.logging_config import mask_pii
from line_echo_bot.models.replies import ReplyMessage, to_wire


class LineApiClient:
    """httpx implementation of the LinePlatform protocol.

    The underlying ``httpx.AsyncClient`` is owned by the caller, which
    creates it once at startup and closes it at shutdown.

    Example:
        >>> async with httpx.AsyncClient() as http:
        ...     client = LineApiClient(http, channel_access_token="...")
        ...     await client.reply_message("token", [TextReply(text="Hello!")])
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        channel_access_token: str,
        reply_timeout_seconds: float | None = None,
    ):
        """Initialize with an HTTP client and the channel access token.

        Args:
            http_client: Shared async HTTP client
            channel_access_token: LINE channel access token for API calls
            reply_timeout_seconds: Timeout for reply calls (None keeps the client default)
        """
        if not channel_access_token:
            raise ValueError("channel_access_token is required")
        self._http = http_client
        self._headers = {"Authorization": f"Bearer {channel_access_token}"}
        self._reply_timeout = reply_timeout_seconds

    async def reply_message(
        self,
        reply_token: str,
        messages: Sequence[ReplyMessage],
    ) -> None:
        """
        Send replies via the Messaging API reply endpoint.

        Args:
            reply_token: Single-use token issued with the inbound event
            messages: Ordered replies, sent in one call

        Raises:
            PlatformApiError: On a non-2xx response or a transport failure
        """
        start_time = time.time()
        url = f"{LINE_API_BASE_URL}/message/reply"
        payload = {
            "replyToken": reply_token,
            "messages": [to_wire(message) for message in messages],
        }

        logfire.info(
            "Sending LINE reply",
            reply_token=mask_pii(reply_token),
            message_types=[message.type for message in messages],
        )

        kwargs = {}
        if self._reply_timeout is not None:
            kwargs["timeout"] = self._reply_timeout

        try:
            response = await self._http.post(
                url, headers=self._headers, json=payload, **kwargs
            )
        except httpx.RequestError as e:
            elapsed = time.time() - start_time
            logfire.error(
                "LINE API request error",
                reply_token=mask_pii(reply_token),
                error=str(e),
                error_type=type(e).__name__,
                response_time_ms=elapsed * 1000,
            )
            raise PlatformApiError("reply_message", None, str(e)) from e

        elapsed = time.time() - start_time
        if response.is_success:
            logfire.info(
                "LINE reply sent successfully",
                reply_token=mask_pii(reply_token),
                status_code=response.status_code,
                response_time_ms=elapsed * 1000,
            )
            return

        logfire.error(
            "LINE reply failed",
            reply_token=mask_pii(reply_token),
            status_code=response.status_code,
            response_body=response.text[:500],  # Limit response body length
            response_time_ms=elapsed * 1000,
        )
        raise PlatformApiError(
            "reply_message", response.status_code, response.text[:500]
        )

    @asynccontextmanager
    async def open_message_content(
        self, message_id: str
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        """
        Open a streaming read of a message's binary content.

        No read timeout is applied: large videos may take a while.

        Args:
            message_id: Id of the media message

        Yields:
            Async iterator of byte chunks

        Raises:
            PlatformApiError: If the content cannot be requested
            StreamError: From the yielded iterator, if the stream breaks midway
        """
        url = f"{LINE_DATA_API_BASE_URL}/message/{message_id}/content"
        logfire.info("Fetching LINE message content", message_id=message_id)

        try:
            async with self._http.stream(
                "GET", url, headers=self._headers, timeout=httpx.Timeout(None)
            ) as response:
                if not response.is_success:
                    body = (await response.aread()).decode("utf-8", "replace")
                    logfire.error(
                        "LINE content request failed",
                        message_id=message_id,
                        status_code=response.status_code,
                        response_body=body[:500],
                    )
                    raise PlatformApiError(
                        "get_message_content", response.status_code, body[:500]
                    )
                yield _iter_content(response, message_id)
        except httpx.RequestError as e:
            logfire.error(
                "LINE content request error",
                message_id=message_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PlatformApiError("get_message_content", None, str(e)) from e


async def _iter_content(
    response: httpx.Response, message_id: str
) -> AsyncIterator[bytes]:
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    except httpx.HTTPError as e:
        raise StreamError(message_id, str(e)) from e
