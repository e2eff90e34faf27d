"""
CLI tests for `wall posts ...` using Typer's CliRunner.

Configured runs patch acreate_client with the in‑memory SDK double, so the
whole stack (settings → factory → SupabaseBackend → repository →
controller → render) runs without network access.
"""

import asyncio

import pytest

import wall.client_factory as client_factory
from tests.fixtures.fake_supabase_sdk import FakeAsyncSupabase, FakeChannel
from wall.cli.main import cli

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def configured(clean_env, fake_sdk):
    """Environment with Supabase credentials and a patched SDK factory."""

    async def fake_acreate_client(url, key, *args, **kwargs):
        return fake_sdk

    clean_env.setenv("SUPABASE_URL", "https://p.supabase.co")
    clean_env.setenv("SUPABASE_ANON_KEY", "anon")
    clean_env.setattr(client_factory, "acreate_client", fake_acreate_client)
    return fake_sdk


# =====================================================================
# posts list
# =====================================================================


def test_list_empty_wall(cli_runner, configured) -> None:
    result = cli_runner.invoke(cli, ["posts", "list"])

    assert result.exit_code == 0
    assert "No posts yet. Be the first to share something!" in result.output


def test_list_shows_posts_newest_first(cli_runner, configured) -> None:
    configured.add_row("posts", {"body": "first post"})
    configured.add_row("posts", {"body": "second post", "image_url": "https://x/cat.png"})

    result = cli_runner.invoke(cli, ["posts", "list"])

    assert result.exit_code == 0
    assert result.output.index("second post") < result.output.index("first post")
    assert "[image] https://x/cat.png" in result.output
    assert "Anonymous · " in result.output


def test_list_without_configuration_shows_banner(cli_runner, clean_env) -> None:
    result = cli_runner.invoke(cli, ["posts", "list"])

    assert result.exit_code == 0
    assert "[Configuration Error] App is not properly configured." in result.output
    assert "Please check your environment variables." in result.output
    assert "No posts yet." in result.output


def test_list_fail_fast_exits_with_error(cli_runner, clean_env) -> None:
    clean_env.setenv("WALL_FALLBACK_POLICY", "fail-fast")

    result = cli_runner.invoke(cli, ["posts", "list"])

    assert result.exit_code == 1
    assert "Error: Missing Supabase configuration" in result.output


def test_list_reports_backend_errors(cli_runner, configured) -> None:
    configured.query_error = ConnectionError("connection refused")

    result = cli_runner.invoke(cli, ["posts", "list"])

    assert result.exit_code == 0
    assert "[Error] Failed to load posts: connection refused" in result.output


# =====================================================================
# posts create
# =====================================================================


def test_create_text_post(cli_runner, configured) -> None:
    result = cli_runner.invoke(cli, ["posts", "create", "  hello from the terminal  "])

    assert result.exit_code == 0
    assert "Shared." in result.output
    assert configured.tables["posts"][0]["body"] == "hello from the terminal"


def test_create_with_image(cli_runner, configured, tmp_path) -> None:
    image = tmp_path / "cat.png"
    image.write_bytes(PNG_BYTES)

    result = cli_runner.invoke(cli, ["posts", "create", "look", "--image", str(image)])

    assert result.exit_code == 0
    ((bucket, path), (data, options)) = next(iter(configured.objects.items()))
    assert bucket == "post-images"
    assert path.startswith("post-images/") and path.endswith(".png")
    assert data == PNG_BYTES
    assert options == {"content-type": "image/png"}
    assert configured.tables["posts"][0]["image_url"].endswith(path)


def test_create_verbose_prints_counter_and_wall(cli_runner, configured) -> None:
    result = cli_runner.invoke(cli, ["posts", "create", "hello", "--verbose"])

    assert result.exit_code == 0
    assert "5/280" in result.output
    assert "Sharing post..." in result.output
    assert "hello" in result.output.split("Shared.")[1]


def test_create_truncates_long_message(cli_runner, configured) -> None:
    result = cli_runner.invoke(cli, ["posts", "create", "x" * 300])

    assert result.exit_code == 0
    assert "Message truncated to 280 characters." in result.output
    assert len(configured.tables["posts"][0]["body"]) == 280


def test_create_requires_message_or_image(cli_runner, configured) -> None:
    result = cli_runner.invoke(cli, ["posts", "create", "   "])

    assert result.exit_code == 1
    assert "Nothing to share" in result.output
    assert configured.tables["posts"] == []


def test_create_rejects_unsupported_image(cli_runner, configured, tmp_path) -> None:
    doc = tmp_path / "notes.pdf"
    doc.write_bytes(b"%PDF")

    result = cli_runner.invoke(cli, ["posts", "create", "hi", "--image", str(doc)])

    assert result.exit_code == 1
    assert "Unsupported image type .pdf" in result.output


def test_create_without_configuration_fails(cli_runner, clean_env) -> None:
    result = cli_runner.invoke(cli, ["posts", "create", "hello"])

    assert result.exit_code == 1
    assert "App is not properly configured" in result.output


def test_create_reports_backend_rejection(cli_runner, configured) -> None:
    configured.query_error = ConnectionError("connection reset")

    result = cli_runner.invoke(cli, ["posts", "create", "hello"])

    assert result.exit_code == 1
    assert "Failed to post message: connection reset" in result.output


# =====================================================================
# posts watch
# =====================================================================


class _PushingChannel(FakeChannel):
    """Channel that inserts rows as soon as it is subscribed."""

    def __init__(self, sdk, name, rows):
        super().__init__(sdk, name)
        self.rows = rows

    async def subscribe(self, callback=None):
        await super().subscribe(callback)
        loop = asyncio.get_running_loop()
        for row in self.rows:
            loop.call_soon(self.sdk.add_row, "posts", dict(row))
        return self


class _PushingSupabase(FakeAsyncSupabase):
    def __init__(self, rows):
        super().__init__()
        self.pending = rows

    def channel(self, name):
        channel = _PushingChannel(self, name, self.pending)
        self.channels.append(channel)
        return channel


@pytest.fixture
def pushing_sdk(clean_env):
    sdk = _PushingSupabase([{"body": "live one"}, {"body": "live two"}])

    async def fake_acreate_client(url, key, *args, **kwargs):
        return sdk

    clean_env.setenv("SUPABASE_URL", "https://p.supabase.co")
    clean_env.setenv("SUPABASE_ANON_KEY", "anon")
    clean_env.setattr(client_factory, "acreate_client", fake_acreate_client)
    return sdk


def test_watch_streams_new_posts_and_tears_down(cli_runner, pushing_sdk) -> None:
    result = cli_runner.invoke(cli, ["posts", "watch", "--limit", "2"])

    assert result.exit_code == 0
    assert "No posts yet." in result.output
    assert "Watching for new posts" in result.output
    assert result.output.index("live one") < result.output.index("live two")
    assert len(pushing_sdk.removed) == 1
    assert pushing_sdk.channels == []


def test_watch_stops_after_duration(cli_runner, configured) -> None:
    result = cli_runner.invoke(cli, ["posts", "watch", "--duration", "0.05"])

    assert result.exit_code == 0
    assert "Watching for new posts" in result.output
    assert len(configured.removed) == 1


def test_watch_survives_teardown_failure(cli_runner, configured) -> None:
    configured.remove_error = ConnectionError("socket already closed")

    result = cli_runner.invoke(cli, ["posts", "watch", "--duration", "0.01"])

    assert result.exit_code == 0


def test_watch_reports_subscription_failure(cli_runner, configured) -> None:
    configured.subscribe_error = ConnectionError("realtime unavailable")

    result = cli_runner.invoke(cli, ["posts", "watch", "--duration", "0.01"])

    assert result.exit_code == 1
    assert "Real-time updates are unavailable." in result.output


def test_watch_without_configuration_exits(cli_runner, clean_env) -> None:
    result = cli_runner.invoke(cli, ["posts", "watch"])

    assert result.exit_code == 1
    assert "App is not properly configured" in result.output
