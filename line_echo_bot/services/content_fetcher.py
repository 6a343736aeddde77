"""Download platform-hosted message content to local disk."""

import asyncio
import time
from pathlib import Path

import logfire

from line_echo_bot.errors import StreamError
from line_echo_bot.services.messaging_protocol import LinePlatform


async def download_content(
    platform: LinePlatform,
    message_id: str,
    destination: Path,
) -> Path:
    """
    Stream a message's binary content into a file.

    The file is written as chunks arrive. If the stream fails, whatever was
    already written stays on disk.

    Args:
        platform: Platform client used to open the content stream
        message_id: Id of the media message
        destination: File to write; its parent directory is created if needed

    Returns:
        The destination path, once the stream reached end of data

    Raises:
        StreamError: If the stream fails before end of data
        PlatformApiError: If the platform refuses to serve the content
    """
    start_time = time.time()
    destination.parent.mkdir(parents=True, exist_ok=True)

    written = 0
    async with platform.open_message_content(message_id) as chunks:
        # Blocking file I/O stays off the event loop
        fh = await asyncio.to_thread(destination.open, "wb")
        try:
            async for chunk in chunks:
                await asyncio.to_thread(fh.write, chunk)
                written += len(chunk)
        except StreamError as e:
            logfire.error(
                "Content download failed",
                message_id=message_id,
                destination=str(destination),
                bytes_written=written,
                error=e.reason,
            )
            raise
        finally:
            await asyncio.to_thread(fh.close)

    logfire.info(
        "Content downloaded",
        message_id=message_id,
        destination=str(destination),
        bytes_written=written,
        response_time_ms=(time.time() - start_time) * 1000,
    )
    return destination
