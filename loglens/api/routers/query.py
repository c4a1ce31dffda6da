"""Query router for LogLens API.

This module provides endpoints for translating SQL into Logs Insights
pipelines and for running translated queries against a log group.
"""

import logging
import time
from typing import Optional

import structlog
from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from loglens.api.dependencies import AppSettings, Transport
from loglens.api.exceptions import BadRequestException
from loglens.logging_config import log_operation
from loglens.query import (
    QueryExecutor,
    TimeSelector,
    check_patterns,
    parse_time_selector,
    translate_to_text,
)

logger = logging.getLogger(__name__)
op_logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["query"])


class TimeWindowRequest(BaseModel):
    """Time window shared by query and stream requests."""

    time: str = Field("1h", description="Time window: 1h, 6h, 24h, all, custom")
    start: Optional[str] = Field(None, description="Custom window start (local ISO time)")
    end: Optional[str] = Field(None, description="Custom window end (local ISO time)")

    def selector(self) -> TimeSelector:
        """Build the time selector, rejecting unknown modes with 400."""
        try:
            return parse_time_selector(self.time, self.start, self.end)
        except ValueError as e:
            raise BadRequestException(str(e))


class TranslateRequest(BaseModel):
    """SQL translation request."""

    query: str = Field(..., description="SQL-subset query to translate")


class TranslateResponse(BaseModel):
    """SQL translation response."""

    query: str
    pipeline: str
    warnings: list[str]


class QueryRequest(TimeWindowRequest):
    """Query run request."""

    query: str = Field(..., min_length=1, description="SQL-subset query to run")
    timeout_seconds: Optional[float] = Field(
        None, gt=0, le=3600, description="Deadline for the run (server default if unset)"
    )


class QueryResponse(BaseModel):
    """Query run response."""

    source: str
    query: str
    job_id: str
    start_ms: int
    end_ms: int
    columns: list[str]
    rows: list[dict[str, str]]
    row_count: int
    poll_count: int
    execution_time_ms: float
    warnings: list[str]


@router.post(
    "/translate",
    response_model=TranslateResponse,
    status_code=status.HTTP_200_OK,
    summary="Translate SQL to a pipeline query",
)
async def translate_query(request: TranslateRequest) -> TranslateResponse:
    """Translate SQL into pipeline text without contacting the backend.

    Example:
        POST /api/v1/translate
        {"query": "SELECT @message WHERE @message LIKE '%error%' LIMIT 5"}
    """
    pipeline = translate_to_text(request.query)
    log_operation(op_logger, "translate", pipeline=pipeline)

    return TranslateResponse(
        query=request.query,
        pipeline=pipeline,
        warnings=check_patterns(request.query),
    )


@router.post(
    "/query/{source:path}",
    response_model=QueryResponse,
    status_code=status.HTTP_200_OK,
    summary="Run a SQL query against a log group",
    description="""
Translate the query, submit it as a Logs Insights job and poll until it ends.

Example:
    POST /api/v1/query/app-logs
    {
        "query": "SELECT count(*) GROUP BY @logStream",
        "time": "24h",
        "timeout_seconds": 60
    }
""",
)
async def run_query(
    source: str,
    request: QueryRequest,
    transport: Transport,
    settings: AppSettings,
) -> QueryResponse:
    """Run a query. Domain errors are turned into responses by the app handler."""
    selector = request.selector()
    timeout = request.timeout_seconds or settings.query_timeout_seconds

    log_operation(op_logger, "query", source=source, time_mode=request.time)

    executor = QueryExecutor(transport, poll_interval_seconds=settings.poll_interval_seconds)
    result = await executor.run_query(
        source=source,
        sql=request.query,
        selector=selector,
        now_ms=int(time.time() * 1000),
        timeout_seconds=timeout,
    )

    logger.info(
        f"Query returned {result.row_count} rows",
        extra={"source": source, "job_id": result.job_id, "row_count": result.row_count},
    )

    return QueryResponse(
        source=result.source,
        query=result.query,
        job_id=result.job_id,
        start_ms=result.time_range.start_ms,
        end_ms=result.time_range.end_ms,
        columns=result.columns,
        rows=result.rows,
        row_count=result.row_count,
        poll_count=result.poll_count,
        execution_time_ms=result.execution_time_seconds * 1000,
        warnings=check_patterns(request.query),
    )
