"""Shared fixtures: a fixed clock, a scripted origin and catalog helpers."""

import os
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from ghcncache.cache.clock import SystemClock
from ghcncache.cache.errors import OriginUnavailable
from ghcncache.cache.origin import OriginInfo

FIXED_NOW = datetime(2024, 6, 15, 12, 0, 0)


class FixedClock(SystemClock):
    """Clock frozen at a given local time; file times still come from disk."""

    def __init__(self, now: datetime = FIXED_NOW):
        self._now = now

    def now(self) -> datetime:
        return self._now


class FakeOrigin:
    """Origin stand-in that records calls and returns scripted results."""

    def __init__(self, content=b"fresh content", modified_time=None, probe_error=False):
        self.content = content
        self.modified_time = modified_time
        self.probe_error = probe_error
        self.probes = []
        self.retrieves = []
        self.closed = False

    @property
    def calls(self) -> int:
        return len(self.probes) + len(self.retrieves)

    def probe(self, uri):
        self.probes.append(uri)
        if self.probe_error:
            raise OriginUnavailable(uri, "HTTP 503")
        return OriginInfo(content_type="text/plain", modified_time=self.modified_time)

    def retrieve(self, uri):
        self.retrieves.append(uri)
        return self.content

    def close(self):
        self.closed = True


@pytest.fixture
def fixed_clock():
    """Clock frozen at 2024-06-15 12:00 local time."""
    return FixedClock()


@pytest.fixture
def origin():
    """Scripted origin; set content, modified_time or probe_error per test."""
    return FakeOrigin()


@pytest.fixture
def days_ago(fixed_clock):
    """Return a function giving the local time N days before the fixed clock."""

    def _days_ago(days: float) -> datetime:
        return fixed_clock.now() - timedelta(days=days)

    return _days_ago


@pytest.fixture
def set_mtime():
    """Return a function that sets a file's modification time."""

    def _set_mtime(path: Path, when: datetime) -> None:
        ts = when.timestamp()
        os.utime(path, (ts, ts))

    return _set_mtime


@pytest.fixture
def station_line():
    """Return a function formatting one fixed-width ghcnd-stations.txt row."""

    def _station_line(station_id, state, name, lat=45.0, lon=-75.0, elev=100.0):
        return f"{station_id:<11} {lat:>8.4f} {lon:>9.4f} {elev:>6.1f} {state:<2} {name:<30}"

    return _station_line


@pytest.fixture
def catalog(station_line):
    """Three-station ghcnd-stations.txt content."""
    return "\n".join(
        [
            station_line("CA006105887", "ON", "OTTAWA CDA"),
            station_line("CA006106000", "ON", "OTTAWA INTL A"),
            station_line("USW00094728", "NY", "NEW YORK CNTRL PK TWR"),
        ]
    ) + "\n"


@pytest.fixture
def cache_dir(tmp_path):
    """Empty cache directory."""
    path = tmp_path / "cache"
    path.mkdir()
    return path
