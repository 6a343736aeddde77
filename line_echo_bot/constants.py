"""Application-wide constants.

This module centralizes all magic numbers and configuration constants
to ensure a single source of truth and easier maintenance.
"""

from pathlib import Path

# =============================================================================
# LINE Messaging API
# =============================================================================

LINE_API_BASE_URL = "https://api.line.me/v2/bot"

# Content downloads are served from a separate host
LINE_DATA_API_BASE_URL = "https://api-data.line.me/v2/bot"

# Header carrying the request body signature on inbound webhooks
LINE_SIGNATURE_HEADER = "X-Line-Signature"

# Timeout for reply calls (seconds). Content streams have no read timeout.
LINE_API_TIMEOUT_SECONDS = 10.0

# =============================================================================
# HTTP Surface
# =============================================================================

WEBHOOK_PATH = "/linebot"

DEFAULT_PORT = 3000

STATIC_URL_PREFIX = "/static"
DOWNLOADED_URL_PREFIX = "/downloaded"

# =============================================================================
# Local Storage
# =============================================================================

STATIC_DIR = Path("static")
DOWNLOAD_DIR = Path("downloaded")

# File extensions for downloaded media, keyed by message type
MEDIA_FILE_EXTENSIONS = {
    "image": ".jpg",
    "video": ".mp4",
    "audio": ".m4a",
}

# Platform-hosted videos come without a preview stream
VIDEO_PREVIEW_PLACEHOLDER = "preview.png"

# =============================================================================
# Reply Content
# =============================================================================

FOLLOW_GREETING = "お友だち追加ありがとうございます！"

# Postback data values emitted by the datetime picker action
DATETIME_PICKER_POSTBACKS = frozenset({"DATE", "TIME", "DATETIME"})

# =============================================================================
# Content Provider Kinds
# =============================================================================

CONTENT_PROVIDER_LINE = "line"
CONTENT_PROVIDER_EXTERNAL = "external"
