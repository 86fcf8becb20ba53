"""Local file cache for the GHCN-Daily archive.

This module fetches station catalogs and daily-data files over HTTP and keeps
them in a flat cache directory, re-fetching according to a refresh policy.

Key components:
- CacheStore: Raw load/store/remove of cached files
- OriginFetcher: HEAD probes and GET retrievals against the archive
- CachedFetcher: Refresh-policy evaluation over the store and the origin
- maintenance: Classification, filtering and removal of cached files
"""

from ghcncache.cache.config import CacheConfig
from ghcncache.cache.errors import (
    ConfigurationError,
    GhcnCacheError,
    InvalidKey,
    InvalidPolicy,
    OriginUnavailable,
    RemovalError,
)
from ghcncache.cache.fetcher import CachedFetcher, FetchOutcome, Source
from ghcncache.cache.maintenance import (
    CacheFileRecord,
    CacheReport,
    FileKind,
    FilterCriteria,
    classify,
    clean,
    filter_records,
    remove_records,
    report,
)
from ghcncache.cache.origin import OriginFetcher, OriginInfo
from ghcncache.cache.policy import (
    Always,
    FreshnessPolicy,
    Never,
    WithinDays,
    Yearly,
    parse_policy,
)
from ghcncache.cache.store import CacheStore

__all__ = [
    "CacheConfig",
    "CacheStore",
    "OriginFetcher",
    "OriginInfo",
    "CachedFetcher",
    "FetchOutcome",
    "Source",
    "FreshnessPolicy",
    "Always",
    "Never",
    "Yearly",
    "WithinDays",
    "parse_policy",
    "CacheFileRecord",
    "CacheReport",
    "FileKind",
    "FilterCriteria",
    "classify",
    "clean",
    "filter_records",
    "remove_records",
    "report",
    "GhcnCacheError",
    "ConfigurationError",
    "OriginUnavailable",
    "InvalidPolicy",
    "InvalidKey",
    "RemovalError",
]
