"""Click CLI for sending messages and fetching media from the shell."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Coroutine
from typing import Any

import click
import httpx

from wabot.client import WhatsApp
from wabot.models import MediaType


def _run(coro: Coroutine[Any, Any, Any]) -> Any:
    try:
        return asyncio.run(coro)
    except httpx.HTTPStatusError as exc:
        raise click.ClickException(
            f"WhatsApp API returned {exc.response.status_code}: {exc.response.text}",
        ) from exc
    except httpx.RequestError as exc:
        raise click.ClickException(f"HTTP request failed: {exc}") from exc


def _echo_response(resp: httpx.Response) -> None:
    click.echo(json.dumps(resp.json(), indent=2))


@click.group()
@click.option("--number-id", envvar="WHATSAPP_NUMBER_ID", required=True,
              help="WhatsApp Business phone number id.")
@click.option("--token", envvar="WHATSAPP_TOKEN", required=True, help="Cloud API access token.")
@click.option("--api-version", envvar="WHATSAPP_API_VERSION", default=21, type=int,
              show_default=True, help="Graph API version.")
@click.pass_context
def cli(ctx: click.Context, number_id: str, token: str, api_version: int) -> None:
    """Send WhatsApp messages and fetch media."""
    ctx.ensure_object(dict)
    ctx.obj["client"] = WhatsApp(number_id=number_id, token=token, version=api_version)


@cli.command("send-text")
@click.argument("phone")
@click.argument("text")
@click.option("--no-preview", is_flag=True, help="Disable link previews.")
@click.pass_context
def send_text(ctx: click.Context, phone: str, text: str, no_preview: bool) -> None:
    """Send a text message."""
    client: WhatsApp = ctx.obj["client"]
    resp = _run(client.send_message(phone, text, web_page_preview=not no_preview))
    _echo_response(resp)


@cli.command("send-template")
@click.argument("phone")
@click.argument("name")
@click.option("--language", default="en_US", show_default=True, help="Template language code.")
@click.pass_context
def send_template(ctx: click.Context, phone: str, name: str, language: str) -> None:
    """Send an approved message template."""
    client: WhatsApp = ctx.obj["client"]
    resp = _run(client.send_template_message(phone, name, language_code=language))
    _echo_response(resp)


@cli.command("send-media")
@click.argument("phone")
@click.argument("media")
@click.option("--type", "media_type", default=MediaType.IMAGE.value, show_default=True,
              type=click.Choice([m.value for m in MediaType]), help="Media kind.")
@click.option("--caption", default=None, help="Caption for image, video or document.")
@click.pass_context
def send_media(
    ctx: click.Context, phone: str, media: str, media_type: str, caption: str | None,
) -> None:
    """Send media by URL or uploaded media id."""
    client: WhatsApp = ctx.obj["client"]
    resp = _run(client.send_media_message(phone, media, caption=caption, media_type=media_type))
    _echo_response(resp)


@cli.command("media-info")
@click.argument("media_id")
@click.pass_context
def media_info(ctx: click.Context, media_id: str) -> None:
    """Show the download URL and metadata of a media id."""
    client: WhatsApp = ctx.obj["client"]
    click.echo(json.dumps(_run(client.get_media_url(media_id)), indent=2))


@cli.command()
@click.argument("media_id")
@click.option("--dir", "directory", default="tmp/media", show_default=True,
              help="Directory to save into.")
@click.pass_context
def download(ctx: click.Context, media_id: str, directory: str) -> None:
    """Download media to a local file."""
    client: WhatsApp = ctx.obj["client"]
    path = _run(client.download_media(media_id, directory))
    click.echo(f"Saved: {path}")
