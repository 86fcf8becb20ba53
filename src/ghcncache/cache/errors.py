"""Exceptions raised by the cache, the origin fetcher and maintenance."""

from pathlib import Path
from typing import Union


class GhcnCacheError(Exception):
    """Base exception for cache-related errors."""

    pass


class ConfigurationError(GhcnCacheError):
    """Raised when the cache root is missing or unusable."""

    pass


class OriginUnavailable(GhcnCacheError):
    """Raised when the origin server cannot be probed."""

    def __init__(self, uri: str, message: str):
        super().__init__(f"Unable to fetch header for {uri}: {message}")
        self.uri = uri


class InvalidPolicy(GhcnCacheError, ValueError):
    """Raised when a refresh directive cannot be parsed."""

    pass


class RemovalError(GhcnCacheError):
    """A single cached file that could not be deleted.

    Collected rather than raised by maintenance operations.
    """

    def __init__(self, path: Union[str, Path], reason: Union[str, Exception]):
        super().__init__(f"Cannot remove {path}: {reason}")
        self.path = Path(path)
        self.reason = str(reason)


class InvalidKey(GhcnCacheError, ValueError):
    """Raised when a URI has no final path segment to use as a cache key."""

    pass
