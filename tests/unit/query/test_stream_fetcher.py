"""Tests for the stream fetcher."""

from datetime import timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError

from loglens.exceptions import (
    InvalidTimestampError,
    InvertedRangeError,
    TransportError,
    UpstreamError,
)
from loglens.query.models import AllTime, Custom, LogEvent, Relative
from loglens.query.stream import StreamFetcher
from loglens.transport import MockTransport

NOW_MS = 1_700_000_000_000


def make_event(event_id: str, timestamp_ms: int) -> LogEvent:
    return LogEvent(
        event_id=event_id,
        timestamp_ms=timestamp_ms,
        message=f"message {event_id}",
        ingestion_time_ms=timestamp_ms + 10,
    )


@pytest.fixture
def transport():
    """Transport stub with an async filter_events."""
    stub = MagicMock()
    stub.filter_events = AsyncMock(return_value=[])
    return stub


class TestFetchStream:
    """Tests for StreamFetcher.fetch_stream."""

    @pytest.mark.asyncio
    async def test_sorts_newest_first(self, transport):
        transport.filter_events.return_value = [
            make_event("a", 200),
            make_event("b", 900),
            make_event("c", 100),
            make_event("d", 500),
        ]

        result = await StreamFetcher(transport).fetch_stream(
            "app-logs", None, Relative("1h"), 50, NOW_MS
        )

        assert [event.event_id for event in result.events] == ["b", "d", "a", "c"]
        assert result.event_count == 4

    @pytest.mark.asyncio
    async def test_output_is_non_increasing(self):
        result = await StreamFetcher(MockTransport(seed=7)).fetch_stream(
            "app-logs", None, Relative("24h"), 200, NOW_MS
        )

        timestamps = [event.timestamp_ms for event in result.events]
        assert timestamps == sorted(timestamps, reverse=True)
        assert len(timestamps) == 200

    @pytest.mark.asyncio
    async def test_passes_resolved_window(self, transport):
        result = await StreamFetcher(transport).fetch_stream(
            "app-logs", "ERROR", Relative("1h"), 25, NOW_MS
        )

        transport.filter_events.assert_awaited_once_with(
            "app-logs", "ERROR", NOW_MS - 3_600_000, NOW_MS, 25
        )
        assert result.time_range.start_ms == NOW_MS - 3_600_000
        assert result.pattern == "ERROR"

    @pytest.mark.asyncio
    async def test_empty_pattern_means_no_filter(self, transport):
        await StreamFetcher(transport).fetch_stream("app-logs", "", AllTime(), 10, NOW_MS)

        transport.filter_events.assert_awaited_once_with("app-logs", None, 0, NOW_MS, 10)

    @pytest.mark.asyncio
    async def test_custom_window(self, transport):
        selector = Custom("2024-01-01T10:00", "2024-01-01T11:00")
        await StreamFetcher(transport).fetch_stream(
            "app-logs", None, selector, 10, NOW_MS, tz=timezone.utc
        )

        args = transport.filter_events.await_args.args
        assert args[2] == 1_704_103_200_000
        assert args[3] == 1_704_106_800_000

    @pytest.mark.asyncio
    async def test_invalid_timestamp_not_sent(self, transport):
        with pytest.raises(InvalidTimestampError):
            await StreamFetcher(transport).fetch_stream(
                "app-logs", None, Custom("bad", "2024-01-01T10:00"), 10, NOW_MS
            )
        transport.filter_events.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_inverted_range_not_sent(self, transport):
        with pytest.raises(InvertedRangeError):
            await StreamFetcher(transport).fetch_stream(
                "app-logs",
                None,
                Custom("2024-01-02T10:00", "2024-01-01T10:00"),
                10,
                NOW_MS,
            )
        transport.filter_events.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transport_error_becomes_upstream(self, transport):
        transport.filter_events.side_effect = TransportError(
            "filter_log_events", "ResourceNotFoundException"
        )

        with pytest.raises(UpstreamError) as exc_info:
            await StreamFetcher(transport).fetch_stream(
                "missing", None, Relative("1h"), 10, NOW_MS
            )

        assert exc_info.value.message == "filter_log_events failed: ResourceNotFoundException"
        assert exc_info.value.context["source"] == "missing"
        transport.filter_events.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_upstream(self, transport):
        transport.filter_events.side_effect = ClientError(
            {"Error": {"Code": "ThrottlingException", "Message": "Rate exceeded"}},
            "FilterLogEvents",
        )

        with pytest.raises(UpstreamError, match="Rate exceeded"):
            await StreamFetcher(transport).fetch_stream(
                "app-logs", None, Relative("1h"), 10, NOW_MS
            )

    @pytest.mark.asyncio
    async def test_rejects_non_positive_limit(self, transport):
        with pytest.raises(ValueError):
            await StreamFetcher(transport).fetch_stream(
                "app-logs", None, Relative("1h"), 0, NOW_MS
            )

    @pytest.mark.asyncio
    async def test_to_dict(self, transport):
        transport.filter_events.return_value = [make_event("a", 100)]

        result = await StreamFetcher(transport).fetch_stream(
            "app-logs", None, AllTime(), 10, NOW_MS
        )
        data = result.to_dict()

        assert data["event_count"] == 1
        assert data["events"][0]["event_id"] == "a"
        assert data["start_ms"] == 0
