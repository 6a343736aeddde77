"""Typer-based developer CLI: run the server and poke a running webhook."""

import json
import os

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

from pathlib import Path

_project_root = Path(__file__).resolve().parent.parent.parent
from dotenv import load_dotenv

load_dotenv(_project_root / ".env")
load_dotenv(_project_root / ".env.local")

import httpx
import typer

from line_echo_bot.constants import DEFAULT_PORT, LINE_SIGNATURE_HEADER, WEBHOOK_PATH
from line_echo_bot.middleware.signature import compute_signature

app = typer.Typer(help="LINE echo bot developer tools.")

# The platform's "Verify" button sends a token made of one repeated character
VERIFICATION_REPLY_TOKEN = "0" * 32


def build_verification_payload() -> dict:
    """Body mimicking the platform's webhook verification request."""
    return {
        "destination": "U" + "0" * 32,
        "events": [
            {
                "type": "message",
                "replyToken": VERIFICATION_REPLY_TOKEN,
                "source": {"type": "user", "userId": "U" + "0" * 32},
                "timestamp": 0,
                "mode": "active",
                "message": {"type": "text", "id": "100001", "text": "Hello, world"},
            }
        ],
    }


@app.command()
def serve(
    port: int = typer.Option(
        DEFAULT_PORT, envvar="PORT", help="Port to listen on"
    ),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the webhook server."""
    import uvicorn

    uvicorn.run("line_echo_bot.main:app", host="0.0.0.0", port=port, reload=reload)


@app.command()
def sign(
    body_file: Path = typer.Argument(..., exists=True, dir_okay=False),
    channel_secret: str = typer.Option(
        ..., envvar="LINE_CHANNEL_SECRET", help="LINE channel secret"
    ),
):
    """Print the X-Line-Signature value for a request body file."""
    typer.echo(compute_signature(channel_secret, body_file.read_bytes()))


@app.command()
def ping(
    url: str = typer.Option(
        f"http://localhost:{DEFAULT_PORT}{WEBHOOK_PATH}", help="Webhook URL"
    ),
    channel_secret: str | None = typer.Option(
        None, envvar="LINE_CHANNEL_SECRET", help="Sign the request when set"
    ),
):
    """Send a verification webhook to a running server."""
    body = json.dumps(build_verification_payload()).encode("utf-8")
    headers = {"Content-Type": "application/json"}
    if channel_secret:
        headers[LINE_SIGNATURE_HEADER] = compute_signature(channel_secret, body)

    try:
        response = httpx.post(url, content=body, headers=headers)
    except httpx.RequestError as e:
        typer.echo(f"✗ Could not reach {url}: {e}", err=True)
        raise typer.Exit(1)

    if response.status_code == 200:
        typer.echo(f"✓ {url} answered 200")
        return

    typer.echo(f"✗ {url} answered {response.status_code}", err=True)
    raise typer.Exit(1)


if __name__ == "__main__":
    app()
