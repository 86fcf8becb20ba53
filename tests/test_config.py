"""Unit tests for cache configuration."""

from pathlib import Path

import pytest

from ghcncache.cache.config import DEFAULT_BASE_URL, CacheConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GHCN_CACHE_DIR", "GHCN_CACHE_REFRESH", "GHCN_CACHE_TIMEOUT", "GHCN_PROFILE"):
        monkeypatch.delenv(name, raising=False)


class TestCacheConfig:
    """Test configuration defaults and normalization."""

    def test_defaults(self):
        config = CacheConfig()
        assert config.cache_dir is None
        assert config.caching_enabled is False
        assert config.refresh == "yearly"
        assert config.timeout == 30.0
        assert config.base_url == DEFAULT_BASE_URL

    def test_string_cache_dir_becomes_path(self, tmp_path):
        config = CacheConfig(cache_dir=str(tmp_path))
        assert config.cache_dir == tmp_path
        assert config.caching_enabled

    def test_config_is_immutable(self):
        config = CacheConfig()
        with pytest.raises(AttributeError):
            config.refresh = "never"

    def test_url_helpers(self):
        config = CacheConfig(base_url="https://archive.test/daily")
        assert config.url_for("ghcnd-stations.txt") == "https://archive.test/daily/ghcnd-stations.txt"
        assert config.station_url("CA006105887") == "https://archive.test/daily/all/CA006105887.dly"


class TestConfigSources:
    """Test loading configuration from files and the environment."""

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GHCN_CACHE_DIR", str(tmp_path))
        monkeypatch.setenv("GHCN_CACHE_REFRESH", "7")
        monkeypatch.setenv("GHCN_CACHE_TIMEOUT", "2.5")
        monkeypatch.setenv("GHCN_PROFILE", str(tmp_path / "p.yaml"))

        config = CacheConfig.from_env()

        assert config.cache_dir == tmp_path
        assert config.refresh == "7"
        assert config.timeout == 2.5
        assert config.profile == tmp_path / "p.yaml"

    def test_from_env_defaults(self):
        assert CacheConfig.from_env() == CacheConfig()

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "conf" / "config.json"
        config = CacheConfig(cache_dir=tmp_path, refresh="always", timeout=10)

        config.save(path)

        assert CacheConfig.load(path) == config

    def test_load_missing_file_gives_defaults(self, tmp_path):
        assert CacheConfig.load(tmp_path / "nope.json") == CacheConfig()

    def test_no_cache_dir_survives_save(self, tmp_path):
        path = tmp_path / "config.json"
        CacheConfig().save(path)
        assert CacheConfig.load(path).cache_dir is None
