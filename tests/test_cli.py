"""Tests for the ghcn-cache command line."""

import pytest
from click.testing import CliRunner

from ghcncache.cli.main import cli


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GHCN_CACHE_DIR", "GHCN_CACHE_REFRESH", "GHCN_CACHE_TIMEOUT", "GHCN_PROFILE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def profile(tmp_path):
    path = tmp_path / "profile.yaml"
    path.write_text("aliases:\n  yow: CA006105887\n")
    return path


@pytest.fixture
def populated_cache(cache_dir, catalog):
    (cache_dir / "ghcnd-stations.txt").write_text(catalog)
    for station_id in ("CA006105887", "CA006106000", "USW00094728"):
        (cache_dir / f"{station_id}.dly").write_bytes(b"x" * 2048)
    return cache_dir


def invoke(cache_dir, profile, *args, **kwargs):
    runner = CliRunner()
    return runner.invoke(
        cli, ["--cachedir", str(cache_dir), "--profile", str(profile), *args], **kwargs
    )


class TestFetch:
    """Test the fetch command."""

    def test_fetch_never_from_cache(self, cache_dir, profile):
        (cache_dir / "ghcnd-stations.txt").write_bytes(b"hello stations")

        result = invoke(cache_dir, profile, "fetch", "ghcnd-stations.txt", "--refresh", "never")

        assert result.exit_code == 0
        assert "hello stations" in result.output

    def test_fetch_to_file(self, cache_dir, profile, tmp_path):
        (cache_dir / "CA006105887.dly").write_bytes(b"daily")
        output = tmp_path / "out.dly"

        result = invoke(
            cache_dir, profile, "fetch", "all/CA006105887.dly", "-r", "never", "-o", str(output)
        )

        assert result.exit_code == 0
        assert output.read_bytes() == b"daily"

    def test_fetch_never_missing_exits_nonzero(self, cache_dir, profile):
        result = invoke(cache_dir, profile, "fetch", "ghcnd-stations.txt", "-r", "never")
        assert result.exit_code == 1

    def test_invalid_refresh(self, cache_dir, profile):
        result = invoke(cache_dir, profile, "fetch", "ghcnd-stations.txt", "-r", "sometimes")

        assert result.exit_code == 1
        assert "Invalid refresh option" in result.output


class TestReport:
    """Test the report command."""

    def test_report_lists_data_files(self, populated_cache, profile):
        result = invoke(populated_cache, profile, "report")

        assert result.exit_code == 0
        assert "CA006105887" in result.output
        assert "USW00094728" in result.output
        assert "Total cache size: 6 KB" in result.output

    def test_report_filters_by_country(self, populated_cache, profile):
        result = invoke(populated_cache, profile, "report", "--country", "US")

        assert result.exit_code == 0
        assert "USW00094728" in result.output
        assert "CA006105887" not in result.output

    def test_report_nothing_selected(self, populated_cache, profile):
        result = invoke(populated_cache, profile, "report", "--above", "100")

        assert result.exit_code == 0
        assert "No cached files selected" in result.output

    def test_missing_cache_dir(self, tmp_path, profile):
        result = invoke(tmp_path / "missing", profile, "report")

        assert result.exit_code == 1
        assert "Cache directory not found" in result.output


class TestRemoveAndClean:
    """Test the remove and clean commands."""

    def test_remove_keeps_aliased_stations(self, populated_cache, profile):
        result = invoke(populated_cache, profile, "remove", "--country", "CA", "-y")

        assert result.exit_code == 0
        assert "CA006106000" in result.output
        assert (populated_cache / "CA006105887.dly").exists()
        assert not (populated_cache / "CA006106000.dly").exists()
        assert (populated_cache / "USW00094728.dly").exists()

    def test_remove_cancelled(self, populated_cache, profile):
        result = invoke(populated_cache, profile, "remove", input="n\n")

        assert "Cancelled" in result.output
        assert (populated_cache / "USW00094728.dly").exists()

    def test_clean(self, populated_cache, profile):
        (populated_cache / "keep.me").write_text("not a cache file")

        result = invoke(populated_cache, profile, "clean", "-y")

        assert result.exit_code == 0
        assert [p.name for p in populated_cache.iterdir()] == ["keep.me"]
