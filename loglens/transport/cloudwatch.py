"""CloudWatch Logs transport for LogLens.

This module implements LogTransport on top of the CloudWatch Logs API:
- filter_log_events for stream mode
- start_query / get_query_results for Logs Insights queries
- Async operations using aioboto3
- Credentials from the standard AWS chain or a named profile
"""

import time
from typing import Any

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from loglens.exceptions import TransportError
from loglens.query.models import JobStatus, LogEvent, PollResult
from loglens.transport.base import LogTransport


class CloudWatchLogsTransport(LogTransport):
    """CloudWatch Logs transport.

    A client is opened per call, so one transport instance can be shared by
    concurrent stream fetches and queries.

    Example:
        transport = CloudWatchLogsTransport(region="eu-west-1")
        job_id = await transport.submit_query(
            "/aws/lambda/api", "fields @message | limit 5", 1700000000, 1700003600
        )

        transport = CloudWatchLogsTransport(
            region="us-east-1",
            endpoint_url="http://localhost:4566"
        )
    """

    def __init__(
        self,
        region: str = "us-east-1",
        profile: str | None = None,
        endpoint_url: str | None = None,
        session: aioboto3.Session | None = None,
    ) -> None:
        """Initialize CloudWatch Logs transport.

        Args:
            region: AWS region (default: us-east-1)
            profile: Named AWS profile (optional, uses default chain if not provided)
            endpoint_url: Custom endpoint URL (for LocalStack, etc.)
            session: Pre-built aioboto3 session (overrides profile)
        """
        self.region = region
        self.profile = profile
        self.endpoint_url = endpoint_url
        self._session = session or aioboto3.Session(profile_name=profile)

    def _get_client_kwargs(self) -> dict[str, Any]:
        """Get kwargs for creating the logs client.

        Returns:
            Dictionary of client configuration parameters
        """
        kwargs: dict[str, Any] = {
            "service_name": "logs",
            "region_name": self.region,
        }

        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url

        return kwargs

    async def filter_events(
        self,
        source: str,
        pattern: str | None,
        start_ms: int,
        end_ms: int,
        limit: int,
    ) -> list[LogEvent]:
        """Fetch events with filter_log_events.

        Events missing a timestamp or ingestion time are stamped with the
        time of the call.
        """
        params: dict[str, Any] = {
            "logGroupName": source,
            "startTime": start_ms,
            "endTime": end_ms,
            "limit": limit,
        }
        if pattern:
            params["filterPattern"] = pattern

        try:
            async with self._session.client(**self._get_client_kwargs()) as logs:
                response = await logs.filter_log_events(**params)
        except (ClientError, BotoCoreError) as e:
            raise TransportError("filter_log_events", str(e)) from e

        now_ms = int(time.time() * 1000)
        return [
            LogEvent(
                event_id=event.get("eventId") or "",
                timestamp_ms=event.get("timestamp") or now_ms,
                message=event.get("message") or "",
                ingestion_time_ms=event.get("ingestionTime") or now_ms,
                log_stream=event.get("logStreamName"),
            )
            for event in response.get("events", [])
        ]

    async def submit_query(
        self,
        source: str,
        query_text: str,
        start_seconds: int,
        end_seconds: int,
    ) -> str:
        """Start a Logs Insights query."""
        try:
            async with self._session.client(**self._get_client_kwargs()) as logs:
                response = await logs.start_query(
                    logGroupName=source,
                    queryString=query_text,
                    startTime=start_seconds,
                    endTime=end_seconds,
                )
        except (ClientError, BotoCoreError) as e:
            raise TransportError("start_query", str(e)) from e

        query_id = response.get("queryId")
        if not query_id:
            raise TransportError("start_query", "Failed to start query: no query id returned")
        return query_id

    async def poll_query(self, job_id: str) -> PollResult:
        """Fetch status and rows of a Logs Insights query."""
        try:
            async with self._session.client(**self._get_client_kwargs()) as logs:
                response = await logs.get_query_results(queryId=job_id)
        except (ClientError, BotoCoreError) as e:
            raise TransportError("get_query_results", str(e)) from e

        return PollResult(
            status=JobStatus.parse(response.get("status")),
            rows=response.get("results"),
        )
