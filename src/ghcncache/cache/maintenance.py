"""Cache maintenance: classify, filter, report and remove cached files.

Maintenance works directly on the cache directory and never goes through the
fetch path. Removal is best effort: every file is attempted and failures are
returned as RemovalError objects instead of being raised.
"""

import enum
import logging
import re
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Union

from ghcncache.cache.clock import SystemClock
from ghcncache.cache.errors import RemovalError
from ghcncache.cache.stations import Station, load_stations

logger = logging.getLogger(__name__)

_DATA_FILE = re.compile(r"^(?P<id>.+)\.dly$")
_CATALOG_FILE = re.compile(r"^ghcnd-(?P<id>.+)\.txt$")

SECONDS_PER_DAY = 24 * 60 * 60


class FileKind(enum.Enum):
    """Classification of a cached file."""

    ACTIVE = "active"
    DISCARDABLE = "discardable"
    CATALOG = "catalog"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class CacheFileRecord:
    """A file found in the cache directory.

    Attributes:
        id: Station id for data files, the file name otherwise
        kind: Classification
        size: Size in bytes
        age: Whole days since the file was last modified
        path: Location of the file
        country: Country code of the station (data files only)
        state: State or province of the station, when the catalog knows it
        location: Station name, when the catalog knows it
    """

    id: str
    kind: FileKind
    size: int
    age: int
    path: Path
    country: Optional[str] = None
    state: Optional[str] = None
    location: Optional[str] = None

    @property
    def size_kb(self) -> int:
        """Size in kilobytes, rounded half up."""
        return int(self.size / 1024 + 0.5)


@dataclass(frozen=True)
class FilterCriteria:
    """Conjunctive record filter; unset fields accept everything.

    Zero size and age bounds count as unset.

    Attributes:
        kinds: Accepted classifications
        country: Exact country code
        state: Exact state or province code
        location: Case-insensitive regular expression searched in the location
        invert: Select records whose location does NOT match
        above: Size in KB must be greater than this
        below: Size in KB must be less than this
        age: Age in days must be at least this
    """

    kinds: Optional[FrozenSet[FileKind]] = None
    country: Optional[str] = None
    state: Optional[str] = None
    location: Optional[str] = None
    invert: bool = False
    above: Optional[int] = None
    below: Optional[int] = None
    age: Optional[int] = None

    def __post_init__(self):
        if self.kinds is not None:
            object.__setattr__(self, "kinds", frozenset(self.kinds))

    def matches(self, record: CacheFileRecord) -> bool:
        if self.kinds and record.kind not in self.kinds:
            return False
        if self.country and record.country != self.country:
            return False
        if self.state and record.state != self.state:
            return False

        kb = record.size_kb
        if self.above and kb <= self.above:
            return False
        if self.below and kb >= self.below:
            return False

        if self.age and record.age < self.age:
            return False

        if self.location:
            found = re.search(
                self.location, record.location or "", re.IGNORECASE | re.MULTILINE | re.DOTALL
            )
            if bool(found) == self.invert:
                return False

        return True


@dataclass(frozen=True)
class CacheReport:
    """Selected records sorted by id, with their total size."""

    records: List[CacheFileRecord]
    total_kb: int

    def __iter__(self):
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)


def _kind_for(name: str, protected_ids: FrozenSet[str]):
    """Return (id, kind) for a file name."""
    match = _DATA_FILE.match(name)
    if match:
        station_id = match.group("id")
        kind = FileKind.ACTIVE if station_id in protected_ids else FileKind.DISCARDABLE
        return station_id, kind
    if _CATALOG_FILE.match(name):
        return name, FileKind.CATALOG
    return name, FileKind.UNCLASSIFIED


def _age_in_days(now: datetime, mtime: Optional[datetime]) -> int:
    if mtime is None:
        return 0
    return int((now - mtime).total_seconds() / SECONDS_PER_DAY)


def classify(
    cache_root: Union[str, Path],
    protected_ids: Iterable[str] = (),
    stations: Optional[Dict[str, Station]] = None,
    clock: Optional[SystemClock] = None,
) -> List[CacheFileRecord]:
    """Scan the cache directory and classify every file in it.

    Args:
        cache_root: Cache directory
        protected_ids: Station ids that must be kept (profile aliases)
        stations: Station catalog; read from ghcnd-stations.txt in the cache
            when not given
        clock: Source of the current time and file modification times

    Returns:
        Records for all files, sorted by id. Files that follow neither naming
        convention are listed as UNCLASSIFIED.
    """
    root = Path(cache_root)
    clock = clock or SystemClock()
    protected = frozenset(protected_ids)

    if not root.is_dir():
        logger.warning(f"Cache directory doesn't exist: {root}")
        return []

    if stations is None:
        stations = load_stations(root)
        if stations is None:
            logger.warning(
                "No ghcnd-stations.txt file in the cache; "
                "station details are unavailable"
            )
            stations = {}

    now = clock.now()
    records = []
    for path in root.iterdir():
        if not path.is_file() or path.name.startswith("."):
            continue

        record_id, kind = _kind_for(path.name, protected)
        try:
            size = path.stat().st_size
        except FileNotFoundError:
            # deleted while scanning
            continue

        record = CacheFileRecord(
            id=record_id,
            kind=kind,
            size=size,
            age=_age_in_days(now, clock.modified_time(path)),
            path=path,
        )
        if kind in (FileKind.ACTIVE, FileKind.DISCARDABLE):
            station = stations.get(record_id)
            record = replace(
                record,
                country=station.country if station else record_id[:2],
                state=station.state if station else None,
                location=station.location if station else None,
            )
        records.append(record)

    return sorted(records, key=lambda r: r.id)


def filter_records(
    records: Iterable[CacheFileRecord], criteria: FilterCriteria
) -> List[CacheFileRecord]:
    """Return the records selected by the criteria, preserving order."""
    return [record for record in records if criteria.matches(record)]


def report(records: Iterable[CacheFileRecord]) -> CacheReport:
    """Summarize records for display."""
    ordered = sorted(records, key=lambda r: r.id)
    return CacheReport(records=ordered, total_kb=sum(r.size_kb for r in ordered))


def _unlink(path: Path, errors: List[RemovalError]) -> bool:
    try:
        path.unlink()
    except OSError as e:
        error = RemovalError(path, e.strerror or e)
        logger.warning(str(error))
        errors.append(error)
        return False
    return True


def remove_records(
    records: Iterable[CacheFileRecord], keep_protected: bool = True
) -> List[RemovalError]:
    """Delete the files behind the given records.

    Args:
        records: Records to delete
        keep_protected: Skip ACTIVE records (stations named by profile aliases)

    Returns:
        Errors for files that could not be deleted; empty on full success
    """
    errors: List[RemovalError] = []
    for record in records:
        if keep_protected and record.kind is FileKind.ACTIVE:
            logger.debug(f"Keeping protected station {record.id}")
            continue
        if _unlink(record.path, errors):
            logger.info(f"Removed {record.path}")
    return errors


def is_cache_file(name: str) -> bool:
    """Whether a file name follows the data or catalog naming convention."""
    return bool(_DATA_FILE.match(name) or _CATALOG_FILE.match(name))


def clean(cache_root: Union[str, Path]) -> List[RemovalError]:
    """Delete every data and catalog file, leaving the directory and other files.

    Returns:
        Errors for files that could not be deleted; empty on full success
    """
    root = Path(cache_root)
    errors: List[RemovalError] = []

    try:
        paths = sorted(root.iterdir())
    except OSError as e:
        error = RemovalError(root, e.strerror or e)
        logger.warning(str(error))
        return [error]

    for path in paths:
        if is_cache_file(path.name) and not path.is_dir():
            _unlink(path, errors)

    return errors
