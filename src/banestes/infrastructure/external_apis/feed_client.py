"""Spreadsheet CSV feed client."""

import csv
import io
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

import httpx

from banestes.core.config import get_settings
from banestes.core.exceptions import FeedError
from banestes.core.logging import get_logger
from banestes.domain.services.row_decoder import FeedRows, RawRow, dedupe_headers

logger = get_logger(__name__)


def parse_csv(text: str, feed: Optional[str] = None, url: Optional[str] = None) -> FeedRows:
    """Tokenize header-delimited CSV text into row dicts.

    Blank lines are skipped. Short rows are padded with empty strings and
    cells beyond the header are dropped.

    Raises:
        FeedError: If the text cannot be tokenized or has no header row
    """
    try:
        lines = [
            row
            for row in csv.reader(io.StringIO(text), strict=True)
            if any(cell.strip() for cell in row)
        ]
    except csv.Error as e:
        raise FeedError(f"Malformed CSV: {e}", feed=feed, url=url) from e

    if not lines:
        raise FeedError("Feed has no header row", feed=feed, url=url)

    header = dedupe_headers([name.strip() for name in lines[0]])
    width = len(header)

    rows: list[RawRow] = []
    truncated = 0
    for line in lines[1:]:
        if len(line) > width:
            truncated += 1
            line = line[:width]
        elif len(line) < width:
            line = line + [""] * (width - len(line))
        rows.append(dict(zip(header, line)))

    if truncated:
        logger.warning("Rows with extra cells truncated", feed=feed, rows=truncated)

    return FeedRows(rows, header=header)


class FeedBatch:
    """Result of loading several feeds at once.

    Each feed resolves to either its rows or its error; one failure never
    hides the others.
    """

    def __init__(self) -> None:
        self.rows: dict[str, FeedRows] = {}
        self.errors: dict[str, FeedError] = {}

    def get(self, feed: str) -> FeedRows:
        """Rows for a feed, raising its error if the feed failed."""
        if feed in self.errors:
            raise self.errors[feed]
        return self.rows[feed]


class FeedClient:
    """HTTP client for the spreadsheet CSV feeds.

    Fetch failures are reported, never retried here; retry policy belongs
    to the caller.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_workers: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize feed client.

        Args:
            timeout: Request timeout in seconds (from settings if not provided)
            max_workers: Parallel fetches for load_many (from settings if not provided)
            transport: Optional httpx transport (used by tests)
        """
        self.settings = get_settings()
        self.timeout = timeout or self.settings.feed_timeout_seconds
        self.max_workers = max_workers or self.settings.feed_max_workers

        self.client = httpx.Client(
            timeout=self.timeout,
            follow_redirects=True,
            transport=transport,
        )

        logger.debug("Feed client initialized", timeout=self.timeout)

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close HTTP client."""
        if self.client:
            self.client.close()

    def load_feed(self, url: str, feed: Optional[str] = None) -> FeedRows:
        """Fetch a feed and tokenize it into raw rows.

        Args:
            url: Feed URL
            feed: Feed name, used for logging and error context

        Returns:
            One dict per data line, keyed by (deduplicated) column name,
            with the header kept on ``rows.header``

        Raises:
            FeedError: On transport failure, undecodable body or missing header
        """
        logger.debug("Fetching feed", feed=feed, url=url)

        try:
            response = self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "HTTP error fetching feed",
                feed=feed,
                url=url,
                status_code=e.response.status_code,
            )
            raise FeedError(
                f"Feed returned HTTP {e.response.status_code}", feed=feed, url=url
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Failed to fetch feed", feed=feed, url=url, error=str(e))
            raise FeedError(f"Failed to fetch feed: {e}", feed=feed, url=url) from e

        try:
            text = response.content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FeedError("Feed is not valid UTF-8", feed=feed, url=url) from e

        rows = parse_csv(text, feed=feed, url=url)
        logger.info("Feed loaded", feed=feed, rows=len(rows))
        return rows

    def load_many(self, urls: dict[str, str]) -> FeedBatch:
        """Fetch several feeds concurrently and wait for all of them.

        Args:
            urls: Feed name to URL mapping

        Returns:
            FeedBatch with rows or error per feed
        """
        batch = FeedBatch()
        if not urls:
            return batch

        workers = min(self.max_workers, len(urls))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_feed = {
                executor.submit(self.load_feed, url, feed): feed
                for feed, url in urls.items()
            }

            for future in as_completed(future_to_feed):
                feed = future_to_feed[future]
                try:
                    batch.rows[feed] = future.result()
                except FeedError as e:
                    batch.errors[feed] = e

        if batch.errors:
            logger.warning(
                "Some feeds failed to load",
                failed=sorted(batch.errors),
                loaded=sorted(batch.rows),
            )
        return batch
