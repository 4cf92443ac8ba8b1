from typing import Optional


class FeedError(Exception):
    """Base class for feed ingestion failures."""
    pass


class FeedFetchError(FeedError):
    """Raised when a feed (or image) URL cannot be retrieved."""

    def __init__(
        self,
        url: str,
        status: Optional[int] = None,
        reason: str = "",
        label: str = "feed",
    ):
        self.url = url
        self.status = status
        self.reason = reason
        if status is not None:
            message = f"Failed to fetch {label}: {status} {reason}".rstrip()
        else:
            message = f"Failed to fetch {label}: {reason or 'network error'}"
        super().__init__(message)


class FeedParseError(FeedError):
    """Raised when a feed document cannot be split into rows at all."""
    pass


class FeedReadError(FeedParseError):
    """Raised when a feed file cannot be read from disk."""
    pass


class SyncInProgressError(FeedError):
    """Raised when a sync is requested while another one is still running."""
    pass
