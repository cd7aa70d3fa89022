"""Exception hierarchy shared by the sync job."""

from __future__ import annotations


class SyncError(Exception):
    """Base class for every fatal error raised by customer-sync."""


class ConfigError(SyncError):
    """Configuration file missing, unreadable or failing validation."""


class StoreError(SyncError):
    """A search-store operation failed (transport, timeout or error response)."""

    def __init__(self, operation: str, message: str, status_code: int | None = None) -> None:
        self.operation = operation
        self.status_code = status_code
        detail = f"{operation} failed"
        if status_code is not None:
            detail += f" with status {status_code}"
        super().__init__(f"{detail}: {message}")


__all__ = ["ConfigError", "StoreError", "SyncError"]
