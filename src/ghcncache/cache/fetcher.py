"""Fetching with a local file cache and refresh policies."""

import enum
import logging
import warnings
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ghcncache.cache.clock import SystemClock
from ghcncache.cache.config import CacheConfig
from ghcncache.cache.origin import OriginFetcher
from ghcncache.cache.policy import (
    Always,
    FreshnessPolicy,
    Never,
    WithinDays,
    Yearly,
    cutoff_for,
    parse_policy,
)
from ghcncache.cache.store import CacheStore

logger = logging.getLogger(__name__)


class Source(enum.Enum):
    """Where the content of a fetch came from."""

    CACHE = "cache"
    ORIGIN = "origin"


@dataclass(frozen=True)
class FetchOutcome:
    """Result of a fetch.

    Content may be None even for a successful fetch: a 'never' fetch of an
    uncached key, or a retrieval that obtained nothing.
    """

    source: Source
    content: Optional[bytes]

    @property
    def from_cache(self) -> bool:
        return self.source is Source.CACHE

    def text(self, encoding: str = "utf-8") -> Optional[str]:
        if self.content is None:
            return None
        return self.content.decode(encoding)


class CachedFetcher:
    """Fetches resources by URI, serving from the cache when it is fresh enough.

    Args:
        cache_root: Cache directory, or None to disable caching entirely
        origin: Origin fetcher used for probes and retrievals
        clock: Source of the current time and file modification times
        refresh: Policy used when fetch() is called without one

    Examples:
        >>> fetcher = CachedFetcher("~/.ghcn_cache")
        >>> outcome = fetcher.fetch(url, "yearly")
        >>> outcome.from_cache
        True
    """

    def __init__(
        self,
        cache_root: Optional[Union[str, Path]],
        origin: Optional[OriginFetcher] = None,
        clock: Optional[SystemClock] = None,
        refresh: Union[str, int, FreshnessPolicy] = "yearly",
    ):
        self.refresh = parse_policy(refresh)
        self.clock = clock or SystemClock()
        self.origin = origin or OriginFetcher()
        self.store = (
            CacheStore(cache_root, clock=self.clock) if cache_root is not None else None
        )
        self._warned_no_cache = False

    @classmethod
    def from_config(
        cls, config: CacheConfig, origin: Optional[OriginFetcher] = None
    ) -> "CachedFetcher":
        """Build a fetcher from a CacheConfig."""
        return cls(
            config.cache_dir,
            origin=origin or OriginFetcher(timeout=config.timeout),
            refresh=config.refresh,
        )

    def __enter__(self) -> "CachedFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.origin.close()

    def fetch(
        self, uri: str, policy: Optional[Union[str, int, FreshnessPolicy]] = None
    ) -> FetchOutcome:
        """Fetch a resource, consulting the cache according to a refresh policy.

        Args:
            uri: Location of the resource
            policy: Refresh directive ('always', 'never', 'yearly', days);
                the fetcher's default when omitted

        Returns:
            FetchOutcome with the source and content (possibly None)

        Raises:
            InvalidPolicy: If the policy cannot be parsed (before any I/O)
            InvalidKey: If the URI has no file name to cache under (before any I/O)
            OriginUnavailable: If the origin must be probed and cannot be
            ConfigurationError: If content must be stored and the cache root
                does not exist
        """
        policy = self.refresh if policy is None else parse_policy(policy)

        if self.store is None:
            self._warn_no_cache()
            return FetchOutcome(Source.ORIGIN, self.origin.retrieve(uri))

        self.store.path_for(uri)  # rejects URIs without a file name
        logger.debug(f"Fetching {uri} with refresh={policy}")

        match policy:
            case Never():
                return self._fetch_never(uri)
            case Always():
                return self._fetch_always(uri)
            case Yearly() | WithinDays():
                return self._fetch_since(uri, cutoff_for(policy, self.clock.now()))

        raise AssertionError(f"Unhandled policy: {policy!r}")

    def _warn_no_cache(self) -> None:
        if not self._warned_no_cache:
            warnings.warn(
                "No cache location configured, so HTTP queries will not be cached"
            )
            self._warned_no_cache = True

    def _fetch_never(self, uri: str) -> FetchOutcome:
        content = self.store.load(uri)
        if content is None:
            logger.debug(f"{self.store.key_for(uri)} is not cached")
        return FetchOutcome(Source.CACHE, content)

    def _fetch_always(self, uri: str) -> FetchOutcome:
        cached_mtime = self.store.modified_time(uri)
        if cached_mtime is None:
            return self._retrieve_and_store(uri)

        info = self.origin.probe(uri)
        if info.modified_time is not None and info.modified_time > cached_mtime:
            logger.debug(f"{uri} changed since it was cached")
            return self._retrieve_and_store(uri)

        return self._from_cache(uri)

    def _fetch_since(self, uri: str, cutoff: datetime) -> FetchOutcome:
        cached_mtime = self.store.modified_time(uri)
        if cached_mtime is not None and cached_mtime >= cutoff:
            return self._from_cache(uri)

        info = self.origin.probe(uri)

        # Older than the cutoff, but still current with the origin
        if cached_mtime is not None and (
            info.modified_time is None or cached_mtime >= info.modified_time
        ):
            return self._from_cache(uri)

        return self._retrieve_and_store(uri)

    def _from_cache(self, uri: str) -> FetchOutcome:
        logger.debug(f"Using cached {self.store.key_for(uri)}")
        return FetchOutcome(Source.CACHE, self.store.load(uri))

    def _retrieve_and_store(self, uri: str) -> FetchOutcome:
        # An empty retrieval leaves any existing (stale) file untouched
        content = self.origin.retrieve(uri)
        if content:
            self.store.store(uri, content)
        return FetchOutcome(Source.ORIGIN, content)
