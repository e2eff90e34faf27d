"""
Root entrypoint for the Wall CLI.

This module defines the top‑level `wall` command and mounts the sub‑apps
from other modules under wall/cli/:

    • wall/cli/posts_cli.py   →  `wall posts ...`

Configuration is read from the environment. A `.env` file in the working
directory is loaded first, so SUPABASE_URL and SUPABASE_ANON_KEY can live
there during development.
"""

# ---------------------------------------------------------------------------
# Imports (must be at top to satisfy flake8 E402)
# ---------------------------------------------------------------------------
from dotenv import load_dotenv
import typer

from .posts_cli import posts_app

# Load environment variables
load_dotenv()

# ---------------------------------------------------------------------------
# Root CLI application
# ---------------------------------------------------------------------------
cli = typer.Typer(
    help=(
        "Wall: a shared feed of short posts and images.\n\n"
        "  Read the wall:\n"
        "      wall posts list\n\n"
        "  Share a post:\n"
        '      wall posts create "hello" --image photo.png\n\n'
        "  Follow new posts live:\n"
        "      wall posts watch\n\n"
        "Without SUPABASE_URL and SUPABASE_ANON_KEY the wall runs in a "
        "disabled mode that reports the missing configuration."
    )
)

# ---------------------------------------------------------------------------
# Register sub‑applications
# ---------------------------------------------------------------------------
cli.add_typer(posts_app, name="posts")

# ---------------------------------------------------------------------------
# Entry point for `python -m wall.cli.main`
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    cli()
