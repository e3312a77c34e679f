# noonsync/models/errors.py

"""Error taxonomy for sync, import and catalog operations.

Extraction misses are deliberately absent: a strategy that finds
nothing returns :meth:`ExtractionResult.miss` instead of raising.
"""

from typing import Any


class NoonSyncError(Exception):
    """Base class for every error raised by noonsync."""

    error: str = "Error"

    def __init__(self, message: str, details: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        """Render as the ``{"error", "message", "details"}`` JSON body."""
        return {
            "error": self.error,
            "message": self.message,
            "details": self.details,
        }


class SyncError(NoonSyncError):
    """A sync attempt against a live source failed."""

    error = "Sync Failed"


class ConfigurationError(SyncError):
    """Credentials are missing or invalid; never retried."""

    error = "Missing Credentials"


class UpstreamRejection(SyncError):
    """The storefront or seller API answered with a non-success status."""

    def __init__(
        self,
        status_code: int,
        message: str,
        details: str = "",
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["status"] = self.status_code
        return payload


class TransportFailure(SyncError):
    """Connection-level failure, including timeouts."""

    error = "Connection Error"


class MalformedImport(NoonSyncError):
    """A manual import payload was not a JSON array."""

    error = "Invalid Import"


class ProductNotFound(NoonSyncError):
    """An update referenced a product id absent from the catalog."""

    error = "Product Not Found"
