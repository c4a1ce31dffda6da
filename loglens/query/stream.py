"""Stream mode: filtered retrieval of raw log events."""

import logging
import time
from datetime import tzinfo
from typing import TYPE_CHECKING

from loglens.exceptions import TransportError, UpstreamError
from loglens.query.models import StreamResult, TimeSelector
from loglens.query.timewindow import resolve_time_range

if TYPE_CHECKING:
    from loglens.transport.base import LogTransport

logger = logging.getLogger(__name__)


class StreamFetcher:
    """
    Fetch raw log events for a time window, newest first.

    One call is one round-trip: resolve the window, ask the transport for
    matching events, sort by timestamp descending. Failures are reported, not
    retried; re-running is up to the caller.

    Usage:
        fetcher = StreamFetcher(transport)
        result = await fetcher.fetch_stream(
            source="/aws/lambda/api",
            pattern="ERROR",
            selector=Relative("1h"),
            limit=100,
            now_ms=now_ms,
        )
    """

    def __init__(self, transport: "LogTransport") -> None:
        """
        Initialize stream fetcher.

        Args:
            transport: Backend transport providing filter_events
        """
        self.transport = transport

    async def fetch_stream(
        self,
        source: str,
        pattern: str | None,
        selector: TimeSelector,
        limit: int,
        now_ms: int,
        tz: tzinfo | None = None,
    ) -> StreamResult:
        """
        Fetch events from a log source.

        Args:
            source: Log source (log group) name
            pattern: Optional filter pattern; an empty string means no filter
            selector: Time selector for the window
            limit: Maximum number of events to fetch
            now_ms: Current time in epoch milliseconds
            tz: Zone for naive custom bounds

        Returns:
            StreamResult with events sorted by timestamp descending

        Raises:
            ValueError: If limit is not positive
            InvalidTimestampError: If a custom bound does not parse
            InvertedRangeError: If a custom range is inverted
            UpstreamError: If the transport call fails
        """
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit}")

        time_range = resolve_time_range(selector, now_ms, tz)
        pattern = pattern or None

        logger.info(
            "Fetching stream",
            extra={
                "source": source,
                "has_pattern": pattern is not None,
                "start_ms": time_range.start_ms,
                "end_ms": time_range.end_ms,
                "limit": limit,
            },
        )

        start_time = time.time()
        try:
            events = await self.transport.filter_events(
                source, pattern, time_range.start_ms, time_range.end_ms, limit
            )
        except Exception as e:
            message = e.message if isinstance(e, TransportError) else str(e)
            logger.error(
                f"Stream fetch failed: {message}",
                extra={"source": source, "error": message},
            )
            raise UpstreamError(message, source=source) from e

        events = sorted(events, key=lambda event: event.timestamp_ms, reverse=True)
        execution_time = time.time() - start_time

        logger.info(
            "Stream fetched",
            extra={
                "source": source,
                "event_count": len(events),
                "execution_time": execution_time,
            },
        )

        return StreamResult(
            events=events,
            source=source,
            time_range=time_range,
            pattern=pattern,
            execution_time_seconds=execution_time,
        )
