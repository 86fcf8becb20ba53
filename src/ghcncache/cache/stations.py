"""Station catalog and profile helpers used by cache maintenance."""

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Set, Union

import pandas as pd
import yaml

logger = logging.getLogger(__name__)

STATIONS_FILENAME = "ghcnd-stations.txt"

# Fixed-width layout of ghcnd-stations.txt (zero-based, end exclusive)
_STATION_COLSPECS = [(0, 11), (12, 20), (21, 30), (31, 37), (38, 40), (41, 71)]
_STATION_COLUMNS = ["station_id", "latitude", "longitude", "elevation", "state", "location"]


@dataclass(frozen=True)
class Station:
    """One row of the GHCN-Daily station catalog."""

    station_id: str
    state: str
    location: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    elevation: Optional[float] = None

    @property
    def country(self) -> str:
        """FIPS country code (first two characters of the station id)."""
        return self.station_id[:2]


def _to_float(value) -> Optional[float]:
    return None if pd.isna(value) else float(value)


def parse_stations(text: str) -> Dict[str, Station]:
    """Parse the content of ghcnd-stations.txt.

    Args:
        text: Catalog content

    Returns:
        Dict mapping station id to Station
    """
    if not text.strip():
        return {}

    df = pd.read_fwf(
        io.StringIO(text),
        colspecs=_STATION_COLSPECS,
        names=_STATION_COLUMNS,
        header=None,
        dtype=str,
        keep_default_na=False,
    )
    df = df[df["station_id"] != ""].copy()
    for column in ("latitude", "longitude", "elevation"):
        df[column] = pd.to_numeric(df[column], errors="coerce")

    return {
        row.station_id: Station(
            station_id=row.station_id,
            state=row.state,
            location=row.location,
            latitude=_to_float(row.latitude),
            longitude=_to_float(row.longitude),
            elevation=_to_float(row.elevation),
        )
        for row in df.itertuples(index=False)
    }


def load_stations(cache_root: Union[str, Path]) -> Optional[Dict[str, Station]]:
    """Load the station catalog from a cache directory.

    Returns:
        Parsed catalog, or None if ghcnd-stations.txt is not cached
    """
    path = Path(cache_root) / STATIONS_FILENAME
    if not path.is_file():
        return None
    return parse_stations(path.read_text(encoding="utf-8", errors="replace"))


def load_protected_ids(profile_path: Optional[Union[str, Path]]) -> Set[str]:
    """Collect the station ids named by aliases in a YAML profile.

    The profile's 'aliases' mapping has values that are comma-separated
    station ids, e.g. ``yow: CA006105887,CA006105976``.

    Returns:
        Set of protected station ids (empty if there is no profile)
    """
    if profile_path is None:
        return set()

    path = Path(profile_path).expanduser()
    if not path.is_file():
        return set()

    with open(path, "r") as f:
        profile = yaml.safe_load(f) or {}

    aliases = profile.get("aliases") if isinstance(profile, dict) else None
    if not aliases:
        return set()

    protected = set()
    for value in aliases.values():
        if value is None:
            continue
        for station_id in str(value).split(","):
            station_id = station_id.strip()
            if station_id:
                protected.add(station_id)

    logger.debug(f"Loaded {len(protected)} protected station ids from {path}")
    return protected
