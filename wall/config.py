# wall/config.py
"""
Process configuration for the Wall backend.

Values are read from the environment, which the CLI populates from a `.env`
file via python-dotenv before any settings are built. Two values are
required to talk to Supabase:

    • SUPABASE_URL        project endpoint
    • SUPABASE_ANON_KEY   public (anon) API key

The NEXT_PUBLIC_* names used by the hosted web front end are accepted as
fallbacks so one `.env` file can serve both.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

DEFAULT_BUCKET = "post-images"
DEFAULT_TABLE = "posts"


class FallbackPolicy(str, Enum):
    """What to do when the backend cannot be configured."""

    DEGRADE = "degrade"
    FAIL_FAST = "fail-fast"


def _first_set(env: Mapping[str, str], *names: str) -> Optional[str]:
    # Empty strings count as missing.
    for name in names:
        value = (env.get(name) or "").strip()
        if value:
            return value
    return None


@dataclass(frozen=True)
class WallSettings:
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    fallback_policy: FallbackPolicy = FallbackPolicy.DEGRADE
    bucket: str = DEFAULT_BUCKET
    table: str = DEFAULT_TABLE

    @property
    def is_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def missing(self) -> list[str]:
        """Names of the required values that are absent."""
        names = []
        if not self.supabase_url:
            names.append("SUPABASE_URL")
        if not self.supabase_key:
            names.append("SUPABASE_ANON_KEY")
        return names

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "WallSettings":
        """
        Build settings from the environment.

        Parameters
        ----------
        env : Mapping[str, str] | None
            Source mapping; defaults to os.environ. Tests pass a plain dict.

        Raises
        ------
        ValueError
            If WALL_FALLBACK_POLICY holds an unknown policy name.
        """
        source = os.environ if env is None else env

        policy_name = (source.get("WALL_FALLBACK_POLICY") or FallbackPolicy.DEGRADE.value).strip()
        try:
            policy = FallbackPolicy(policy_name.lower())
        except ValueError as e:
            raise ValueError(
                f"Unknown WALL_FALLBACK_POLICY {policy_name!r}; "
                "expected 'degrade' or 'fail-fast'"
            ) from e

        return cls(
            supabase_url=_first_set(source, "SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
            supabase_key=_first_set(
                source,
                "SUPABASE_ANON_KEY",
                "SUPABASE_KEY",
                "NEXT_PUBLIC_SUPABASE_ANON_KEY",
            ),
            fallback_policy=policy,
            bucket=_first_set(source, "WALL_BUCKET") or DEFAULT_BUCKET,
            table=_first_set(source, "WALL_TABLE") or DEFAULT_TABLE,
        )
