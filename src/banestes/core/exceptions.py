"""Exception hierarchy for banestes."""

from typing import Optional


class BanestesError(Exception):
    """Base exception for all banestes errors."""


class FeedError(BanestesError):
    """Raised when a feed cannot be fetched, tokenized or has no header."""

    def __init__(self, message: str, feed: Optional[str] = None, url: Optional[str] = None):
        super().__init__(message)
        self.feed = feed
        self.url = url


class FeedSchemaError(FeedError):
    """Raised when a feed header lacks required columns."""

    def __init__(
        self,
        message: str,
        missing: list[str],
        feed: Optional[str] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message, feed=feed, url=url)
        self.missing = missing


class ResourceLoadError(BanestesError):
    """Raised when an external resource (map provider) fails to load."""
