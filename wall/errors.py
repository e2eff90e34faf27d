"""
Error types and sentinels shared across the Wall application.

Backend operations report failures as strings inside a BackendResponse
rather than raising. The only exception that escapes the backend layer is
ConfigurationError, raised by the fail‑fast construction policy.
"""

from typing import Optional

# Sentinel error text returned by the DisabledClient for every operation.
NOT_CONFIGURED = "Supabase not configured"


class WallError(Exception):
    """Base class for Wall application errors."""


class ConfigurationError(WallError):
    """Raised when the backend cannot be configured under the fail‑fast policy."""


def is_not_configured(error: Optional[str]) -> bool:
    """Return True when `error` is the "not configured" sentinel."""
    return error == NOT_CONFIGURED
