"""Cache configuration management."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_BASE_URL = "https://www.ncei.noaa.gov/pub/data/ghcn/daily/"
DEFAULT_PROFILE = Path.home() / ".ghcn_fetch.yaml"


@dataclass(frozen=True)
class CacheConfig:
    """Configuration for the GHCN file cache.

    Attributes:
        cache_dir: Flat directory holding cached files. None disables caching,
            in which case every fetch goes to the origin.
        refresh: Default refresh directive ('always', 'never', 'yearly' or a
            number of days)
        timeout: Timeout in seconds for each HTTP request
        profile: YAML profile whose station aliases are protected from removal
        base_url: Root of the GHCN-Daily archive
    """

    cache_dir: Optional[Path] = None
    refresh: str = "yearly"
    timeout: float = 30.0
    profile: Path = field(default=DEFAULT_PROFILE)
    base_url: str = DEFAULT_BASE_URL

    def __post_init__(self):
        """Normalize paths so strings and '~' are accepted."""
        if self.cache_dir is not None:
            object.__setattr__(self, "cache_dir", Path(self.cache_dir).expanduser())
        object.__setattr__(self, "profile", Path(self.profile).expanduser())
        object.__setattr__(self, "timeout", float(self.timeout))
        object.__setattr__(self, "refresh", str(self.refresh))

    @property
    def caching_enabled(self) -> bool:
        return self.cache_dir is not None

    def url_for(self, filename: str) -> str:
        """Join a file name onto the archive base URL.

        Examples:
            >>> CacheConfig().url_for("ghcnd-stations.txt")
            'https://www.ncei.noaa.gov/pub/data/ghcn/daily/ghcnd-stations.txt'
        """
        return self.base_url.rstrip("/") + "/" + filename.lstrip("/")

    def station_url(self, station_id: str) -> str:
        """URL of the daily-data file for a station."""
        return self.url_for(f"all/{station_id}.dly")

    @classmethod
    def load(cls, config_path: Path) -> "CacheConfig":
        """Load configuration from a JSON file.

        Args:
            config_path: Path to config file

        Returns:
            CacheConfig instance (defaults if the file does not exist)
        """
        config_path = Path(config_path)
        if not config_path.exists():
            return cls()

        with open(config_path, "r") as f:
            data = json.load(f)

        return cls(**data)

    def save(self, config_path: Path) -> None:
        """Save configuration to a JSON file.

        Args:
            config_path: Path to config file
        """
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "cache_dir": str(self.cache_dir) if self.cache_dir is not None else None,
            "refresh": self.refresh,
            "timeout": self.timeout,
            "profile": str(self.profile),
            "base_url": self.base_url,
        }

        with open(config_path, "w") as f:
            json.dump(data, f, indent=2)

    @classmethod
    def from_env(cls) -> "CacheConfig":
        """Create configuration from environment variables.

        Environment variables:
            GHCN_CACHE_DIR: Cache directory path
            GHCN_CACHE_REFRESH: Default refresh directive
            GHCN_CACHE_TIMEOUT: HTTP timeout in seconds
            GHCN_PROFILE: Profile file path

        Returns:
            CacheConfig instance
        """
        kwargs = {}

        if os.getenv("GHCN_CACHE_DIR"):
            kwargs["cache_dir"] = Path(os.getenv("GHCN_CACHE_DIR"))

        if os.getenv("GHCN_CACHE_REFRESH"):
            kwargs["refresh"] = os.getenv("GHCN_CACHE_REFRESH")

        if os.getenv("GHCN_CACHE_TIMEOUT"):
            kwargs["timeout"] = float(os.getenv("GHCN_CACHE_TIMEOUT"))

        if os.getenv("GHCN_PROFILE"):
            kwargs["profile"] = Path(os.getenv("GHCN_PROFILE"))

        return cls(**kwargs)
