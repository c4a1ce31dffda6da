"""Resolve time selectors into concrete epoch ranges."""

from datetime import datetime, tzinfo

from loglens.exceptions import InvalidTimestampError, InvertedRangeError
from loglens.query.models import AllTime, Custom, Relative, TimeRange, TimeSelector


def parse_local_timestamp(value: str, tz: tzinfo | None = None) -> int:
    """
    Parse a wall-clock string into epoch milliseconds.

    Accepts ISO 8601 date-times at minute or second precision
    (``2024-01-02T10:00``, ``2024-01-02 10:00:30``). Strings without an
    offset are read in ``tz``, or in the host's local zone when ``tz`` is None.

    Raises:
        InvalidTimestampError: If the string does not parse
    """
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise InvalidTimestampError(value)

    # fromisoformat only accepts a Z suffix from 3.11 on
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidTimestampError(value) from None

    if parsed.tzinfo is None and tz is not None:
        parsed = parsed.replace(tzinfo=tz)

    # naive datetimes resolve against the local zone here
    return int(parsed.timestamp() * 1000)


def resolve_time_range(
    selector: TimeSelector, now_ms: int, tz: tzinfo | None = None
) -> TimeRange:
    """
    Turn a time selector into a TimeRange.

    ``now_ms`` is supplied by the caller so the result is fully determined by
    the arguments.

    Args:
        selector: Relative, AllTime or Custom selector
        now_ms: Current time in epoch milliseconds
        tz: Zone for naive custom bounds (host local zone when None)

    Returns:
        TimeRange with start <= end

    Raises:
        InvalidTimestampError: If a custom bound does not parse
        InvertedRangeError: If a custom start is after its end
    """
    if isinstance(selector, Relative):
        return TimeRange(start_ms=now_ms - selector.duration_ms, end_ms=now_ms)

    if isinstance(selector, AllTime):
        return TimeRange(start_ms=0, end_ms=now_ms)

    if isinstance(selector, Custom):
        start_ms = parse_local_timestamp(selector.start_local, tz)
        end_ms = parse_local_timestamp(selector.end_local, tz)
        if start_ms > end_ms:
            raise InvertedRangeError(selector.start_local, selector.end_local)
        return TimeRange(start_ms=start_ms, end_ms=end_ms)

    raise TypeError(f"Unsupported time selector: {selector!r}")
