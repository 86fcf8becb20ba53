"""Flat file store mapping content keys to files under a cache root."""

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ghcncache.cache.clock import SystemClock
from ghcncache.cache.errors import ConfigurationError, GhcnCacheError, InvalidKey

logger = logging.getLogger(__name__)


class CacheStore:
    """Stores raw content in one directory, one file per content key.

    No metadata is kept alongside the content: the bytes on disk are exactly
    the bytes last stored, and the file's modification time is the only
    record of when it was cached. Keyed operations accept either a key or the
    full URI the key is derived from.

    Examples:
        >>> store = CacheStore("/tmp/ghcn")
        >>> store.store("https://host/daily/ghcnd-stations.txt", b"...")
        >>> store.load("ghcnd-stations.txt")
        b'...'
    """

    def __init__(self, root: Union[str, Path], clock: Optional[SystemClock] = None):
        """Initialize the store.

        Args:
            root: Cache root directory. It is never created implicitly.
            clock: Source of file modification times
        """
        self.root = Path(root).expanduser()
        self.clock = clock or SystemClock()

    def __repr__(self) -> str:
        return f"CacheStore({str(self.root)!r})"

    @staticmethod
    def key_for(uri: str) -> str:
        """Derive the content key for a URI.

        The key is the last '/'-separated segment with ':' characters removed.

        Examples:
            >>> CacheStore.key_for("https://host/path/ghcnd-stations.txt")
            'ghcnd-stations.txt'
            >>> CacheStore.key_for("https://host/a:b/c:d")
            'cd'
        """
        return uri.split("/")[-1].replace(":", "")

    def path_for(self, key_or_uri: str) -> Path:
        """Get the file path for a key (or URI).

        Raises:
            InvalidKey: If the URI has no final segment (e.g. ends in '/')
        """
        key = self.key_for(key_or_uri)
        if not key:
            raise InvalidKey(f"No cache key in {key_or_uri!r}")
        return self.root / key

    def _existing_path(self, key_or_uri: str) -> Optional[Path]:
        try:
            path = self.path_for(key_or_uri)
        except InvalidKey:
            return None
        return path if path.is_file() else None

    def exists(self, key_or_uri: str) -> bool:
        return self._existing_path(key_or_uri) is not None

    def modified_time(self, key_or_uri: str) -> Optional[datetime]:
        """Modification time of the cached file, or None if not cached."""
        path = self._existing_path(key_or_uri)
        if path is None:
            return None
        return self.clock.modified_time(path)

    def load(self, key_or_uri: str) -> Optional[bytes]:
        """Read cached content.

        Returns:
            File content, or None if nothing is cached for the key
        """
        path = self._existing_path(key_or_uri)
        if path is None:
            return None
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def store(self, key_or_uri: str, content: bytes) -> Path:
        """Write content for a key, replacing any existing file.

        The content is written to a temporary file in the cache root and then
        renamed over the target, so readers never see a partial file.

        Returns:
            Path of the stored file

        Raises:
            ConfigurationError: If the cache root does not exist
            InvalidKey: If no cache key can be derived from the URI
            GhcnCacheError: If the file cannot be written
        """
        path = self.path_for(key_or_uri)
        if not self.root.is_dir():
            raise ConfigurationError(f"Cache directory doesn't exist: {self.root}")

        fd, temp_name = tempfile.mkstemp(
            dir=self.root, prefix=f".{path.name}.", suffix=".tmp"
        )
        temp_path = Path(temp_name)

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.replace(temp_path, path)
        except OSError as e:
            logger.error(f"Error writing cache file {path}: {e}")
            try:
                temp_path.unlink()
            except FileNotFoundError:
                pass
            except OSError as cleanup_error:
                logger.warning(f"Failed to clean up temp file {temp_path}: {cleanup_error}")
            raise GhcnCacheError(f"Cannot write cache file {path}: {e}") from e

        logger.debug(f"Stored {len(content)} bytes in {path}")
        return path

    def remove(self, key_or_uri: str) -> bool:
        """Delete the cached file for a key.

        Returns:
            True if a file was deleted, False if there was nothing to delete
        """
        path = self._existing_path(key_or_uri)
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True
