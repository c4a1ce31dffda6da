"""Query and stream data models and result types."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Union


RELATIVE_DURATIONS_MS: dict[str, int] = {
    "1h": 3_600_000,
    "6h": 21_600_000,
    "24h": 86_400_000,
}

TIME_MODES = ("1h", "6h", "24h", "all", "custom")


@dataclass(frozen=True)
class Relative:
    """Window ending now and reaching back a fixed duration."""

    duration: Literal["1h", "6h", "24h"]

    def __post_init__(self) -> None:
        if self.duration not in RELATIVE_DURATIONS_MS:
            raise ValueError(
                f"Unsupported duration: {self.duration} "
                f"(expected one of {', '.join(RELATIVE_DURATIONS_MS)})"
            )

    @property
    def duration_ms(self) -> int:
        return RELATIVE_DURATIONS_MS[self.duration]


@dataclass(frozen=True)
class AllTime:
    """Window from the epoch until now."""


@dataclass(frozen=True)
class Custom:
    """Window between two wall-clock strings in the operator's local time."""

    start_local: str
    end_local: str


TimeSelector = Union[Relative, AllTime, Custom]


def parse_time_selector(
    mode: str, start: str | None = None, end: str | None = None
) -> TimeSelector:
    """
    Build a time selector from a mode string.

    Args:
        mode: One of 1h, 6h, 24h, all, custom
        start: Local start time (custom mode only)
        end: Local end time (custom mode only)

    Returns:
        The matching selector

    Raises:
        ValueError: If the mode is unknown or custom bounds are missing
    """
    mode = mode.strip().lower()
    if mode in RELATIVE_DURATIONS_MS:
        return Relative(mode)  # type: ignore[arg-type]
    if mode == "all":
        return AllTime()
    if mode == "custom":
        if not start or not end:
            raise ValueError("Custom time range requires both start and end")
        return Custom(start_local=start, end_local=end)
    raise ValueError(f"Unknown time mode: {mode} (expected one of {', '.join(TIME_MODES)})")


@dataclass(frozen=True)
class TimeRange:
    """Concrete epoch range in milliseconds, start <= end."""

    start_ms: int
    end_ms: int

    def __post_init__(self) -> None:
        if self.start_ms > self.end_ms:
            raise ValueError(f"start_ms {self.start_ms} is after end_ms {self.end_ms}")

    @property
    def start_seconds(self) -> int:
        return self.start_ms // 1000

    @property
    def end_seconds(self) -> int:
        return self.end_ms // 1000

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


@dataclass(frozen=True)
class LogEvent:
    """A single raw log line returned in stream mode."""

    event_id: str
    timestamp_ms: int
    message: str
    ingestion_time_ms: int
    log_stream: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "timestamp_ms": self.timestamp_ms,
            "message": self.message,
            "ingestion_time_ms": self.ingestion_time_ms,
            "log_stream": self.log_stream,
        }


ResultRow = dict[str, str]


class JobStatus(str, Enum):
    """Status of an asynchronous analytics query job."""

    SCHEDULED = "Scheduled"
    RUNNING = "Running"
    COMPLETE = "Complete"
    FAILED = "Failed"
    CANCELLED = "Cancelled"
    TIMEOUT = "Timeout"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: "str | JobStatus | None") -> "JobStatus":
        """Parse a backend status string; anything unrecognised is UNKNOWN."""
        if isinstance(value, JobStatus):
            return value
        if not value:
            return cls.UNKNOWN
        for status in cls:
            if status.value.lower() == value.strip().lower():
                return status
        return cls.UNKNOWN

    @property
    def is_pending(self) -> bool:
        return self in (JobStatus.SCHEDULED, JobStatus.RUNNING)

    @property
    def is_terminal(self) -> bool:
        return not self.is_pending


@dataclass
class PollResult:
    """
    One observation of a query job.

    Attributes:
        status: Job status reported by the backend
        rows: Result rows, each a list of {"field": ..., "value": ...} pairs.
            Only meaningful once status is COMPLETE.
    """

    status: JobStatus
    rows: list[list[dict[str, Any]]] | None = None


class ExecutionState(str, Enum):
    """States of the query executor."""

    SUBMITTING = "submitting"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    ABANDONED = "abandoned"
    TIMED_OUT = "timed_out"


@dataclass
class QueryResult:
    """
    Query mode result with rows and execution metadata.

    Attributes:
        rows: Shaped result rows; column sets may differ between rows
        query: Pipeline query text submitted to the backend
        source: Log source the query ran against
        job_id: Backend job identifier
        time_range: Resolved window
        poll_count: Number of status polls issued
        execution_time_seconds: Wall time from submission to completion
    """

    rows: list[ResultRow]
    query: str
    source: str
    job_id: str
    time_range: TimeRange
    poll_count: int
    execution_time_seconds: float

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def columns(self) -> list[str]:
        """Union of column names in first-seen order."""
        seen: dict[str, None] = {}
        for row in self.rows:
            for name in row:
                seen.setdefault(name, None)
        return list(seen)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary (for JSON serialization)."""
        return {
            "source": self.source,
            "query": self.query,
            "job_id": self.job_id,
            "start_ms": self.time_range.start_ms,
            "end_ms": self.time_range.end_ms,
            "columns": self.columns,
            "rows": self.rows,
            "row_count": self.row_count,
            "poll_count": self.poll_count,
            "execution_time_seconds": self.execution_time_seconds,
        }


@dataclass
class StreamResult:
    """Stream mode result, events newest first."""

    events: list[LogEvent]
    source: str
    time_range: TimeRange
    pattern: str | None = None
    execution_time_seconds: float = 0.0

    @property
    def event_count(self) -> int:
        return len(self.events)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "pattern": self.pattern,
            "start_ms": self.time_range.start_ms,
            "end_ms": self.time_range.end_ms,
            "events": [event.to_dict() for event in self.events],
            "event_count": self.event_count,
            "execution_time_seconds": self.execution_time_seconds,
        }


@dataclass
class QueryMetrics:
    """
    Query execution metrics for monitoring and logging.

    Attributes:
        source: Log source queried
        query_hash: Hash of the SQL text for deduplication
        execution_time_seconds: Total execution time
        poll_count: Status polls issued
        row_count: Number of rows returned
        success: Whether query succeeded
        error_type: Type of error if query failed
    """

    source: str
    query_hash: str
    execution_time_seconds: float
    poll_count: int
    row_count: int
    success: bool
    error_type: str | None = None

    def to_dict(self) -> dict:
        """Convert metrics to dictionary for logging."""
        return {
            "source": self.source,
            "query_hash": self.query_hash,
            "execution_time_seconds": self.execution_time_seconds,
            "poll_count": self.poll_count,
            "row_count": self.row_count,
            "success": self.success,
            "error_type": self.error_type,
        }
