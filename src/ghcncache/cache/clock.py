"""Time sources used for freshness decisions and file ages."""

from datetime import datetime
from pathlib import Path
from typing import Optional


class SystemClock:
    """Local wall-clock time and filesystem modification times.

    Freshness and age calculations go through this object so tests can
    substitute fixed timestamps.
    """

    def now(self) -> datetime:
        return datetime.now()

    def modified_time(self, path: Path) -> Optional[datetime]:
        """Return the local modification time of a file, or None if absent."""
        try:
            return datetime.fromtimestamp(Path(path).stat().st_mtime)
        except FileNotFoundError:
            return None
