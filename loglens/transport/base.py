"""Log backend transport interface for LogLens.

The query engine never talks to the network itself; it drives a transport
that exposes exactly three calls:

- filter_events: direct filtered retrieval of raw log lines (stream mode)
- submit_query: start an asynchronous analytics query (query mode)
- poll_query: observe the status and rows of a submitted query

All operations are async. Implementations raise TransportError on failure and
never retry.
"""

import itertools
import random
import time
from abc import ABC, abstractmethod

from loglens.exceptions import TransportError
from loglens.query.models import JobStatus, LogEvent, PollResult


class LogTransport(ABC):
    """Abstract base class for log backend transports."""

    @abstractmethod
    async def filter_events(
        self,
        source: str,
        pattern: str | None,
        start_ms: int,
        end_ms: int,
        limit: int,
    ) -> list[LogEvent]:
        """Fetch raw events from a log source.

        Args:
            source: Log source (log group) name
            pattern: Optional backend filter pattern
            start_ms: Window start, epoch milliseconds
            end_ms: Window end, epoch milliseconds
            limit: Maximum number of events

        Returns:
            Events in the backend's native order

        Raises:
            TransportError: If the backend call fails
        """
        pass

    @abstractmethod
    async def submit_query(
        self,
        source: str,
        query_text: str,
        start_seconds: int,
        end_seconds: int,
    ) -> str:
        """Start an analytics query.

        Args:
            source: Log source (log group) name
            query_text: Pipeline query text
            start_seconds: Window start, epoch seconds
            end_seconds: Window end, epoch seconds

        Returns:
            Backend job ID

        Raises:
            TransportError: If the backend rejects the query
        """
        pass

    @abstractmethod
    async def poll_query(self, job_id: str) -> PollResult:
        """Observe a submitted query.

        Args:
            job_id: ID returned by submit_query

        Returns:
            Current status and, once complete, the result rows

        Raises:
            TransportError: If the backend call fails
        """
        pass


class MockTransport(LogTransport):
    """In-memory transport serving synthetic data.

    Useful for:
    - Demo mode without AWS credentials
    - Unit tests of the CLI and API
    - Exercising the poll loop with a controllable number of Running states
    """

    MESSAGES = (
        "INFO Request processed successfully",
        "DEBUG Cache hit for key user-session",
        "WARN Slow response from downstream service",
        "ERROR Connection reset by peer",
        "INFO Health check passed",
    )

    def __init__(
        self,
        running_polls: int = 1,
        row_count: int = 20,
        seed: int | None = None,
        clock_ms=None,
    ) -> None:
        """Initialize mock transport.

        Args:
            running_polls: Polls answered with Running before Complete
            row_count: Rows returned by a completed query
            seed: Seed for the synthetic data generator
            clock_ms: Callable returning epoch milliseconds (defaults to time.time)
        """
        self.running_polls = running_polls
        self.row_count = row_count
        self._random = random.Random(seed)
        self._clock_ms = clock_ms or (lambda: int(time.time() * 1000))
        self._ids = itertools.count(1)
        self._jobs: dict[str, dict] = {}
        self.submitted: list[dict] = []

    async def filter_events(
        self,
        source: str,
        pattern: str | None,
        start_ms: int,
        end_ms: int,
        limit: int,
    ) -> list[LogEvent]:
        """Generate up to ``limit`` events inside the window."""
        events = []
        span = max(end_ms - start_ms, 1)
        for index in range(limit):
            message = self._random.choice(self.MESSAGES)
            if pattern and pattern.lower() not in message.lower():
                continue
            timestamp = start_ms + self._random.randrange(span)
            events.append(
                LogEvent(
                    event_id=f"mock-{index}",
                    timestamp_ms=timestamp,
                    message=f"{message} [{source}]",
                    ingestion_time_ms=min(timestamp + 250, end_ms),
                    log_stream="mock-stream",
                )
            )
        return events

    async def submit_query(
        self,
        source: str,
        query_text: str,
        start_seconds: int,
        end_seconds: int,
    ) -> str:
        """Register a job that completes after ``running_polls`` polls."""
        job_id = f"mock-query-{next(self._ids)}"
        self._jobs[job_id] = {"polls": 0}
        self.submitted.append(
            {
                "job_id": job_id,
                "source": source,
                "query": query_text,
                "start_seconds": start_seconds,
                "end_seconds": end_seconds,
            }
        )
        return job_id

    async def poll_query(self, job_id: str) -> PollResult:
        """Advance the job one step."""
        job = self._jobs.get(job_id)
        if job is None:
            raise TransportError("poll_query", f"Unknown query id: {job_id}")

        job["polls"] += 1
        if job["polls"] <= self.running_polls:
            return PollResult(status=JobStatus.RUNNING)

        now = self._clock_ms()
        rows = [
            [
                {"field": "@timestamp", "value": _format_ms(now - i * 60000)},
                {"field": "@message", "value": f"Mock Log Event {i} - Something happened"},
                {"field": "@ptr", "value": f"{self._random.getrandbits(48):012x}"},
            ]
            for i in range(self.row_count)
        ]
        return PollResult(status=JobStatus.COMPLETE, rows=rows)


def _format_ms(epoch_ms: int) -> str:
    """Render epoch ms the way the backend renders @timestamp."""
    seconds, millis = divmod(epoch_ms, 1000)
    return time.strftime("%Y-%m-%d %H:%M:%S", time.gmtime(seconds)) + f".{millis:03d}"
