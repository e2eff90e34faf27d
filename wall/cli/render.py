"""
Plain‑text rendering of the wall for the terminal.

The functions here are pure: they read WallController state and return
strings, which keeps them easy to assert on in tests. posts_cli.py decides
when to print them.
"""

from typing import List

from wall.controller import WallController
from wall.types import PostRecord

EMPTY_WALL = "No posts yet. Be the first to share something!"
CONFIG_HINT = "This app requires Supabase configuration. Please check your environment variables."
DEFAULT_AUTHOR = "Anonymous"


def render_banner(controller: WallController) -> List[str]:
    """Error banner lines; empty when there is no error."""
    if not controller.error:
        return []

    title = "Configuration Error" if controller.is_config_error else "Error"
    lines = [f"[{title}] {controller.error}"]
    if controller.is_config_error:
        lines.append(CONFIG_HINT)
    return lines


def render_post(post: PostRecord, controller: WallController) -> str:
    author = post.get("user_id") or DEFAULT_AUTHOR
    when = controller.format_date(post.get("created_at", ""))
    lines = [f"{author} · {when}"]

    body = post.get("body")
    if body:
        lines.append(body)

    image_url = post.get("image_url")
    if image_url:
        lines.append(f"[image] {image_url}")

    return "\n".join(lines)


def render_wall(controller: WallController) -> str:
    """Banner, then every post separated by a blank line (or the empty notice)."""
    blocks = ["\n".join(render_banner(controller))] if controller.error else []

    if controller.posts:
        blocks.extend(render_post(post, controller) for post in controller.posts)
    else:
        blocks.append(EMPTY_WALL)

    return "\n\n".join(blocks)
