"""Backend variants used when the hosted Supabase project is unavailable."""

from .disabled_client import DisabledClient

__all__ = ["DisabledClient"]
