"""Stream router for LogLens API."""

import logging
import time
from typing import Optional

import structlog
from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from loglens.api.dependencies import AppSettings, Transport
from loglens.api.routers.query import TimeWindowRequest
from loglens.logging_config import log_operation
from loglens.query import StreamFetcher

logger = logging.getLogger(__name__)
op_logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/stream", tags=["stream"])


class StreamRequest(TimeWindowRequest):
    """Stream fetch request."""

    pattern: Optional[str] = Field(None, description="CloudWatch filter pattern")
    limit: Optional[int] = Field(
        None, ge=1, le=10000, description="Maximum events (server default if unset)"
    )


class EventModel(BaseModel):
    """A raw log event."""

    event_id: str
    timestamp_ms: int
    message: str
    ingestion_time_ms: int
    log_stream: Optional[str] = None


class StreamResponse(BaseModel):
    """Stream fetch response, events newest first."""

    source: str
    pattern: Optional[str]
    start_ms: int
    end_ms: int
    events: list[EventModel]
    event_count: int
    execution_time_ms: float


@router.post(
    "/{source:path}",
    response_model=StreamResponse,
    status_code=status.HTTP_200_OK,
    summary="Fetch raw events from a log group",
)
async def fetch_stream(
    source: str,
    request: StreamRequest,
    transport: Transport,
    settings: AppSettings,
) -> StreamResponse:
    """Fetch filtered events for the requested window.

    Example:
        POST /api/v1/stream/app-logs
        {"pattern": "ERROR", "time": "6h", "limit": 50}
    """
    selector = request.selector()
    limit = request.limit or settings.stream_default_limit

    log_operation(op_logger, "stream", source=source, time_mode=request.time, limit=limit)

    fetcher = StreamFetcher(transport)
    result = await fetcher.fetch_stream(
        source=source,
        pattern=request.pattern,
        selector=selector,
        limit=limit,
        now_ms=int(time.time() * 1000),
    )

    logger.debug(
        f"Stream returned {result.event_count} events",
        extra={"source": source, "event_count": result.event_count},
    )

    return StreamResponse(
        source=result.source,
        pattern=result.pattern,
        start_ms=result.time_range.start_ms,
        end_ms=result.time_range.end_ms,
        events=[EventModel(**event.to_dict()) for event in result.events],
        event_count=result.event_count,
        execution_time_ms=result.execution_time_seconds * 1000,
    )
