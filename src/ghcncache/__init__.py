"""ghcncache: Cached fetching of GHCN-Daily station catalogs and daily data."""

__version__ = "0.1.0"

from ghcncache.cache import CacheConfig, CachedFetcher, CacheStore, FetchOutcome

__all__ = ["CacheConfig", "CachedFetcher", "CacheStore", "FetchOutcome", "__version__"]
