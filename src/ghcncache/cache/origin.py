"""HTTP access to the origin archive."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

import httpx

from ghcncache.cache.errors import OriginUnavailable

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class OriginInfo:
    """Metadata reported by the origin for a resource.

    Attributes:
        content_type: Value of the Content-Type header
        length: Content length in bytes
        modified_time: Last-Modified as a naive local datetime
        expiry: Expires header as a naive local datetime
        server: Value of the Server header
    """

    content_type: Optional[str] = None
    length: Optional[int] = None
    modified_time: Optional[datetime] = None
    expiry: Optional[datetime] = None
    server: Optional[str] = None

    @classmethod
    def from_headers(cls, headers: httpx.Headers) -> "OriginInfo":
        length = headers.get("content-length")
        return cls(
            content_type=headers.get("content-type"),
            length=int(length) if length and length.isdigit() else None,
            modified_time=_parse_http_date(headers.get("last-modified")),
            expiry=_parse_http_date(headers.get("expires")),
            server=headers.get("server"),
        )


def _parse_http_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an HTTP date header into a naive local datetime."""
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring unparsable HTTP date: {value!r}")
        return None
    if parsed.tzinfo is None:
        # HTTP dates are always GMT
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone().replace(tzinfo=None)


class OriginFetcher:
    """Performs HEAD probes and GET retrievals against the archive.

    Each operation is a single attempt bounded by the configured timeout.

    Examples:
        >>> with OriginFetcher(timeout=10) as origin:
        ...     info = origin.probe(url)
        ...     content = origin.retrieve(url)
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ):
        """Initialize the fetcher.

        Args:
            timeout: Timeout in seconds for each request
            client: Existing httpx client to use. It is not closed by close().
        """
        self.timeout = timeout
        self._owns_client = client is None
        self.client = client or httpx.Client(
            timeout=httpx.Timeout(timeout), follow_redirects=True
        )

    def __enter__(self) -> "OriginFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def probe(self, uri: str) -> OriginInfo:
        """Fetch the headers of a resource without its body.

        Raises:
            OriginUnavailable: On network errors, timeouts or a non-success status
        """
        try:
            response = self.client.head(uri, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise OriginUnavailable(uri, f"HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise OriginUnavailable(uri, str(e) or type(e).__name__) from e

        info = OriginInfo.from_headers(response.headers)
        logger.debug(f"Probed {uri}: modified {info.modified_time}")
        return info

    def retrieve(self, uri: str) -> Optional[bytes]:
        """Download a resource.

        Returns:
            The body, or None if nothing could be obtained
        """
        try:
            response = self.client.get(uri, follow_redirects=True)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Unable to retrieve {uri}: {e}")
            return None

        return response.content
