"""AdsDesk — Date Preset → Time Window Resolver.

The Graph API resolves ``date_preset`` and ``time_range`` dates against the
ad account's own timezone. To report against a fixed reference clock
(UTC+7 by default) a preset is translated to a concrete date range computed
in that clock, converted to UTC, and widened by one day on each side. The
upstream offset is unknown, so the window must be a superset of the
intended period.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

from adsdesk.config import settings
from adsdesk.connectors.meta.errors import MalformedInputError
from adsdesk.models.snapshot_models import TimeWindow
from adsdesk.core.logging import get_logger

logger = get_logger("meta.time_window")

ROLLING_PRESET_DAYS = {
    "last_7d": 7,
    "last_14d": 14,
    "last_28d": 28,
    "last_30d": 30,
}

TRANSLATABLE_PRESETS = frozenset(
    {"today", "yesterday", "this_month", "last_month", *ROLLING_PRESET_DAYS}
)

WIDEN_BY = timedelta(days=1)
_END_OF_DAY = time(23, 59, 59, 999000)


def _local_bounds(
    date_preset: str, today: date, tz: timezone
) -> Optional[Tuple[datetime, datetime]]:
    """Start/end instants of the preset, in the reference clock."""

    def start_of(d: date) -> datetime:
        return datetime.combine(d, time.min, tzinfo=tz)

    def end_of(d: date) -> datetime:
        return datetime.combine(d, _END_OF_DAY, tzinfo=tz)

    if date_preset == "today":
        return start_of(today), end_of(today)
    if date_preset == "yesterday":
        yesterday = today - timedelta(days=1)
        return start_of(yesterday), end_of(yesterday)
    if date_preset in ROLLING_PRESET_DAYS:
        # N days including today
        days = ROLLING_PRESET_DAYS[date_preset]
        return start_of(today - timedelta(days=days - 1)), end_of(today)
    if date_preset == "this_month":
        return start_of(today.replace(day=1)), end_of(today)
    if date_preset == "last_month":
        last_of_prev = today.replace(day=1) - timedelta(days=1)
        return start_of(last_of_prev.replace(day=1)), end_of(last_of_prev)
    return None


def resolve_time_window(
    date_preset: Optional[str],
    translate: bool = False,
    account_timezone: Optional[str] = None,
    now: Optional[datetime] = None,
    utc_offset_hours: Optional[int] = None,
) -> TimeWindow:
    """Resolve a named preset into a TimeWindow.

    Returns the preset sentinel when translation is off or the preset is
    not day-granular (``maximum``, ``lifetime``...).
    """
    date_preset = date_preset or settings.default_date_preset
    if not translate or date_preset not in TRANSLATABLE_PRESETS:
        return TimeWindow.preset(date_preset)

    offset = (
        settings.reference_utc_offset_hours
        if utc_offset_hours is None
        else utc_offset_hours
    )
    tz = timezone(timedelta(hours=offset))
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    today = now.astimezone(tz).date()

    since_local, until_local = _local_bounds(date_preset, today, tz)
    since_utc = since_local.astimezone(timezone.utc)
    until_utc = until_local.astimezone(timezone.utc)

    window = TimeWindow(
        since=(since_utc - WIDEN_BY).date(),
        until=(until_utc + WIDEN_BY).date(),
    )
    logger.debug(
        f"Translated {date_preset} at UTC{offset:+d} → {window.since}..{window.until}"
        f" (account timezone {account_timezone or 'unknown'})",
        extra={"date_preset": date_preset},
    )
    return window


def custom_time_window(
    since: Optional[str],
    until: Optional[str],
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
) -> TimeWindow:
    """Caller-supplied range, passed through verbatim.

    ``time_range`` only has day granularity and is read in the account's
    timezone, so clock times cannot be honoured; they are carried on the
    window for display and logged.
    """
    if not since or not until:
        raise MalformedInputError(
            "since and until must be date strings in YYYY-MM-DD format"
        )
    try:
        window = TimeWindow(
            since=date.fromisoformat(since),
            until=date.fromisoformat(until),
            start_time=start_time,
            end_time=end_time,
        )
    except ValueError as e:
        raise MalformedInputError(f"Invalid date in custom range: {e}") from e

    if start_time or end_time:
        logger.info(
            f"Custom range {since} {start_time or ''} → {until} {end_time or ''}: "
            "clock times are informational, Graph API filters by whole days"
        )
    return window
