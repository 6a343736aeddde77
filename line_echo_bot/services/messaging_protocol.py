"""Messaging abstraction protocols for decoupling from the LINE API.

This module provides a Protocol-based abstraction for the two platform
operations the bot depends on, allowing the application to:
- Inject an explicitly constructed client instead of a module-wide singleton
- Exercise the dispatcher in tests without complex httpx mocking
"""

from collections.abc import AsyncIterator, Sequence
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol

from line_echo_bot.errors import PlatformApiError, StreamError
from line_echo_bot.models.replies import ReplyMessage


class LinePlatform(Protocol):
    """Protocol for replying to events and fetching message content.

    Implementations must provide these methods to handle platform operations.
    Using a Protocol allows type checking while supporting duck typing and
    easy test mocking.
    """

    async def reply_message(
        self,
        reply_token: str,
        messages: Sequence[ReplyMessage],
    ) -> None:
        """Send replies bound to a reply token.

        Args:
            reply_token: Single-use token issued with the inbound event
            messages: Ordered replies, sent as one reply operation

        Raises:
            PlatformApiError: If the platform rejects the call
        """
        ...

    def open_message_content(
        self,
        message_id: str,
    ) -> AbstractAsyncContextManager[AsyncIterator[bytes]]:
        """Open a streaming read of a message's binary content.

        Args:
            message_id: Id of the media message

        Returns:
            Async context manager yielding an iterator of byte chunks. The
            iterator raises StreamError if the stream fails midway.

        Raises:
            PlatformApiError: If the platform refuses to serve the content
        """
        ...


class MockLinePlatform:
    """In-memory implementation for testing.

    Allows tests to verify reply and download behavior without making
    real API calls.

    Example:
        >>> platform = MockLinePlatform(contents={"m1": b"data"})
        >>> await platform.reply_message("token", [TextReply(text="hi")])
        >>> platform.replies
        [('token', [TextReply(type='text', text='hi')])]
    """

    def __init__(
        self,
        contents: dict[str, bytes] | None = None,
        chunk_size: int = 4,
        fail_stream_after: int | None = None,
        reply_error: PlatformApiError | None = None,
    ):
        """Initialize mock platform.

        Args:
            contents: Binary content to serve, keyed by message id
            chunk_size: Size of the chunks yielded by content streams
            fail_stream_after: Raise StreamError after this many chunks
            reply_error: Error to raise from reply_message, if any
        """
        self._contents = contents or {}
        self._chunk_size = chunk_size
        self._fail_stream_after = fail_stream_after
        self._reply_error = reply_error
        self.replies: list[tuple[str, list[ReplyMessage]]] = []
        self.content_requests: list[str] = []

    async def reply_message(
        self, reply_token: str, messages: Sequence[ReplyMessage]
    ) -> None:
        """Record the reply and raise the configured error, if any."""
        self.replies.append((reply_token, list(messages)))
        if self._reply_error is not None:
            raise self._reply_error

    @asynccontextmanager
    async def open_message_content(
        self, message_id: str
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        """Record the request and stream the configured content."""
        self.content_requests.append(message_id)
        if message_id not in self._contents:
            raise PlatformApiError(
                "get_message_content", 404, f"no content for message {message_id}"
            )
        yield self._iter_chunks(message_id)

    async def _iter_chunks(self, message_id: str) -> AsyncIterator[bytes]:
        data = self._contents[message_id]
        for index, start in enumerate(range(0, len(data), self._chunk_size)):
            if self._fail_stream_after is not None and index >= self._fail_stream_after:
                raise StreamError(message_id, "connection reset")
            yield data[start : start + self._chunk_size]
