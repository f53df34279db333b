"""Exception types for the friendly URL service."""

from typing import Optional


class FriendlyUrlError(Exception):
    """Base class for friendly URL errors."""


class ConflictError(FriendlyUrlError):
    """An active mapping already owns the friendly URL or item id."""
    
    def __init__(self, message: str, field: Optional[str] = None, value: Optional[str] = None):
        """Initialize conflict error.
        
        Args:
            message: Human readable message
            field: Name of the unique field that collided (friendly_url or item_id)
            value: The colliding value
        """
        super().__init__(message)
        self.field = field
        self.value = value


class NotFoundError(FriendlyUrlError):
    """The mapping targeted by an update does not exist."""


class StorageError(FriendlyUrlError):
    """The storage medium is unreachable or its contents are corrupt."""


class ScanInProgressError(FriendlyUrlError):
    """A full catalog scan is already running."""
