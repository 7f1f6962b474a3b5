"""Time parsing and formatting utilities."""

from __future__ import annotations

from datetime import UTC, datetime, tzinfo
from typing import Callable

from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current wall-clock instant, timezone-aware (UTC)."""

    return datetime.now(UTC)


def tzinfo_from_name(tz_name: str) -> tzinfo:
    """Create tzinfo from an IANA timezone name.

    Args:
        tz_name: Timezone name like "Asia/Shanghai".

    Returns:
        tzinfo instance.

    Raises:
        ValueError: If timezone name is invalid on this system.
    """

    try:
        return ZoneInfo(tz_name)
    except Exception as exc:  # ZoneInfo raises KeyError / ZoneInfoNotFoundError (platform dependent)
        raise ValueError(f"无效时区：{tz_name!r}。例如可用：Asia/Shanghai") from exc


def iso_timestamp(dt: datetime) -> str:
    """Format an instant as UTC ISO-8601 with millisecond precision and "Z".

    Example: ``2025-12-18T01:30:00.123Z``. Naive datetimes are treated as UTC.
    """

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    text = dt.astimezone(UTC).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def parse_iso_timestamp(text: str) -> datetime:
    """Parse an ISO-8601 timestamp (as produced by :func:`iso_timestamp`).

    Raises:
        ValueError: If cannot parse.
    """

    s = text.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError as exc:
        raise ValueError(f"无法解析时间：{text!r}。建议格式：2025-12-18T01:30:00.000Z") from exc
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def epoch_ms_from_dt(dt: datetime) -> int:
    """Convert a datetime to epoch milliseconds (naive is treated as UTC)."""

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return round(dt.timestamp() * 1000)


def local_time_label(timestamp: str, tz_name: str) -> str:
    """Human-readable local clock time (HH:MM:SS) of an ISO export timestamp."""

    dt = parse_iso_timestamp(timestamp).astimezone(tzinfo_from_name(tz_name))
    return dt.strftime("%H:%M:%S")


def iso_from_epoch_ms(epoch_ms: int) -> str:
    """ISO export timestamp of an epoch-milliseconds instant."""

    return iso_timestamp(datetime.fromtimestamp(epoch_ms / 1000.0, tz=UTC))
