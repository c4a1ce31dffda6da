"""SQL-to-pipeline translation and log query execution."""

from loglens.query.executor import (
    CancellationToken,
    QueryExecutor,
    QueryHandle,
    QueryRun,
    shape_rows,
)
from loglens.query.models import (
    AllTime,
    Custom,
    ExecutionState,
    JobStatus,
    LogEvent,
    PollResult,
    QueryMetrics,
    QueryResult,
    Relative,
    StreamResult,
    TimeRange,
    TimeSelector,
    parse_time_selector,
)
from loglens.query.pipeline import DEFAULT_PIPELINE, PipelineQuery
from loglens.query.stream import StreamFetcher
from loglens.query.timewindow import resolve_time_range
from loglens.query.translator import translate, translate_to_text
from loglens.query.validator import (
    PatternValidator,
    check_patterns,
    hash_query,
    sanitize_for_logging,
)

__all__ = [
    "AllTime",
    "CancellationToken",
    "Custom",
    "DEFAULT_PIPELINE",
    "ExecutionState",
    "JobStatus",
    "LogEvent",
    "PatternValidator",
    "PipelineQuery",
    "PollResult",
    "QueryExecutor",
    "QueryHandle",
    "QueryMetrics",
    "QueryResult",
    "QueryRun",
    "Relative",
    "StreamFetcher",
    "StreamResult",
    "TimeRange",
    "TimeSelector",
    "check_patterns",
    "hash_query",
    "parse_time_selector",
    "resolve_time_range",
    "sanitize_for_logging",
    "shape_rows",
    "translate",
    "translate_to_text",
]
