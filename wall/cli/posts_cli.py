"""
Command‑line interface for the wall.

This module defines the `posts` command group for the Typer‑based CLI:

    • wall posts list                        print the wall once
    • wall posts create "hello" --image p    compose and share a post
    • wall posts watch                       print the wall, then follow new posts

The CLI is responsible for dependency creation. Each command builds
WallSettings from the environment, and its async runner turns them into a
backend client, a PostRepository, and a WallController. The commands stay
thin: loading, posting, and error text live in the controller.
"""

import asyncio
from pathlib import Path
from typing import Optional, Tuple

import typer

from wall.client_factory import ClientProvider
from wall.config import WallSettings
from wall.controller import ImageAttachment, WallController, load_image
from wall.errors import ConfigurationError
from wall.logging_utils import configure_logging, log_verbose
from wall.realtime import InsertSubscription
from wall.repository import PostRepository
from wall.types import MAX_BODY_LENGTH, BackendClient, PostRecord, is_submittable

from .render import render_banner, render_post, render_wall

# ---------------------------------------------------------------------------
# Sub‑application definition
# ---------------------------------------------------------------------------
posts_app = typer.Typer(
    help="Read the wall, share posts, and follow new posts as they arrive."
)


async def open_wall(settings: WallSettings) -> Tuple[BackendClient, WallController]:
    """
    Build the backend client and a controller bound to it.

    Raises
    ------
    ConfigurationError
        Under the fail‑fast policy when Supabase is not configured.
    """
    client = await ClientProvider(settings).get()
    repository = PostRepository(client, bucket=settings.bucket)
    return client, WallController(repository)


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Command: posts list
# ---------------------------------------------------------------------------
async def _run_list(settings: WallSettings, verbose: bool) -> None:
    _, controller = await open_wall(settings)
    log_verbose("Loading your wall...", verbose)
    await controller.load()
    typer.echo(render_wall(controller))


@posts_app.command("list")
def list_posts(
    verbose: bool = typer.Option(False, "--verbose", help="Show progress and debug logs."),
) -> None:
    """Print every post on the wall, newest first."""
    configure_logging(verbose)
    try:
        asyncio.run(_run_list(WallSettings.from_env(), verbose))
    except (ConfigurationError, ValueError) as e:
        _fail(str(e))


# ---------------------------------------------------------------------------
# Command: posts create
# ---------------------------------------------------------------------------
async def _run_create(
    settings: WallSettings,
    body: str,
    image: Optional[ImageAttachment],
    verbose: bool,
) -> Tuple[bool, WallController]:
    _, controller = await open_wall(settings)
    controller.set_message(body)
    log_verbose(controller.character_count, verbose)

    if image is not None:
        controller.attach_image(image)
        log_verbose(f"Uploading image {image.filename}...", verbose)

    log_verbose("Sharing post...", verbose)
    shared = await controller.submit()
    return shared, controller


@posts_app.command("create")
def create_post(
    body: str = typer.Argument("", help=f"Post text (up to {MAX_BODY_LENGTH} characters)."),
    image: Optional[Path] = typer.Option(
        None,
        "--image",
        help="Optional JPG, PNG, GIF or WEBP image up to 5MB.",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show progress and debug logs."),
) -> None:
    """Share a post with an optional image."""
    configure_logging(verbose)

    attachment: Optional[ImageAttachment] = None
    if image is not None:
        try:
            attachment = load_image(image)
        except (FileNotFoundError, ValueError) as e:
            _fail(str(e))

    if not is_submittable(body, attachment is not None):
        _fail("Nothing to share: provide a message or an image.")

    if len(body) > MAX_BODY_LENGTH:
        typer.echo(f"Message truncated to {MAX_BODY_LENGTH} characters.")

    try:
        shared, controller = asyncio.run(
            _run_create(WallSettings.from_env(), body, attachment, verbose)
        )
    except (ConfigurationError, ValueError) as e:
        _fail(str(e))
        return

    if not shared:
        for line in render_banner(controller):
            typer.echo(line, err=True)
        raise typer.Exit(code=1)

    typer.echo("Shared.")
    if verbose:
        typer.echo(render_wall(controller))


# ---------------------------------------------------------------------------
# Command: posts watch
# ---------------------------------------------------------------------------
async def _run_watch(
    settings: WallSettings,
    limit: Optional[int],
    duration: Optional[float],
) -> int:
    client, controller = await open_wall(settings)
    await controller.load()
    typer.echo(render_wall(controller))

    if controller.is_config_error:
        return 1

    arrivals: "asyncio.Queue[PostRecord]" = asyncio.Queue()

    def on_insert(record: PostRecord) -> None:
        before = len(controller.posts)
        controller.handle_insert(record)
        if len(controller.posts) > before:
            arrivals.put_nowait(record)

    async def _follow() -> None:
        seen = 0
        while limit is None or seen < limit:
            record = await arrivals.get()
            controller.tick()
            typer.echo("")
            typer.echo(render_post(record, controller))
            seen += 1

    async with InsertSubscription(client, on_insert) as subscription:
        if not subscription.is_subscribed:
            typer.echo("Real-time updates are unavailable.", err=True)
            return 1

        typer.echo("")
        typer.echo("Watching for new posts (Ctrl+C to stop)...")
        try:
            await asyncio.wait_for(_follow(), timeout=duration)
        except asyncio.TimeoutError:
            pass
    return 0


@posts_app.command("watch")
def watch_posts(
    limit: Optional[int] = typer.Option(
        None, "--limit", min=1, help="Stop after this many new posts."
    ),
    duration: Optional[float] = typer.Option(
        None, "--duration", min=0.0, help="Stop after this many seconds."
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show progress and debug logs."),
) -> None:
    """Print the wall, then stream new posts as they are shared."""
    configure_logging(verbose)
    try:
        code = asyncio.run(_run_watch(WallSettings.from_env(), limit, duration))
    except (ConfigurationError, ValueError) as e:
        _fail(str(e))
        return
    except KeyboardInterrupt:
        code = 0

    if code:
        raise typer.Exit(code=code)
