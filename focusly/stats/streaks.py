"""
Tool: Streak Calculator
Purpose: Count consecutive active calendar days from completed focus sessions

Every session is bucketed into a calendar day in ONE timezone per call: the
user's preferred timezone, or the system timezone when none is set. Sessions
recorded while travelling are therefore attributed to the day they fall on
in the user's home timezone, which keeps "which day did I work" stable.

Usage:
    from focusly.stats.streaks import calculate_streak, streak_needs_reset

    streak = calculate_streak(sessions, timezone="America/New_York")
    streak.current, streak.longest, streak.last_active_date

    # Nightly check: has the user lost their streak?
    if streak_needs_reset(streak.last_active_date, today):
        ...

Precondition:
    ``Session.completed_at`` is a datetime. Anything else is a caller bug
    and raises TypeError.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil.tz import tzlocal

from focusly.config_models import FocuslyConfig, load_config
from focusly.logging_config import get_logger
from focusly.models import Session, StreakData

logger = get_logger(__name__)

UTC = timezone.utc
ONE_DAY = timedelta(days=1)


# ─────────────────────────────────────────────────────────────────────────────
# Timezone resolution
# ─────────────────────────────────────────────────────────────────────────────


def get_system_timezone() -> tzinfo:
    """
    Return the timezone of the machine we are running on.

    The result follows the local DST rules, so a winter session is read
    with the winter offset even when the code runs in summer.
    """
    return tzlocal()


def resolve_timezone(value: str | tzinfo | None) -> tzinfo:
    """
    Turn an IANA name (or tzinfo) into a tzinfo.

    Empty values and unknown names fall back to the system timezone.
    """
    if value is None or value == "":
        return get_system_timezone()
    if isinstance(value, tzinfo):
        return value

    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.warning("unknown_timezone", timezone=value, error=str(e))
        return get_system_timezone()


def get_user_timezone(config: FocuslyConfig | None = None) -> tzinfo:
    """Timezone from the user's saved preference, else the system timezone."""
    if config is None:
        config = load_config()
    return resolve_timezone(config.user.timezone)


# ─────────────────────────────────────────────────────────────────────────────
# Day bucketing
# ─────────────────────────────────────────────────────────────────────────────


def day_key(instant: datetime, tz: tzinfo) -> date:
    """Calendar day of *instant* as seen in *tz*. Naive instants are UTC."""
    if not isinstance(instant, datetime):
        raise TypeError(f"Expected a datetime, got {type(instant).__name__}: {instant!r}")
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=UTC)
    return instant.astimezone(tz).date()


def today_in_timezone(tz: tzinfo, now: datetime | None = None) -> date:
    return day_key(now or datetime.now(UTC), tz)


def start_of_day(instant: datetime, tz: tzinfo) -> datetime:
    """Local midnight of the day containing *instant*, as a UTC instant."""
    midnight = datetime.combine(day_key(instant, tz), time.min, tzinfo=tz)
    return midnight.astimezone(UTC)


def group_sessions_by_day(
    sessions: Iterable[Session],
    tz: tzinfo,
    include_incomplete: bool = False,
) -> dict[date, list[Session]]:
    """
    Bucket sessions by calendar day in *tz*.

    Days without sessions have no entry. Sessions whose ``completed`` flag
    is False are skipped unless *include_incomplete* is set.
    """
    days: dict[date, list[Session]] = {}
    for session in sessions:
        if not (session.completed or include_incomplete):
            continue
        days.setdefault(day_key(session.completed_at, tz), []).append(session)
    return days


# ─────────────────────────────────────────────────────────────────────────────
# Streaks
# ─────────────────────────────────────────────────────────────────────────────


def calculate_streak(
    sessions: Iterable[Session],
    timezone: str | tzinfo | None = None,
    today: date | datetime | None = None,
    include_incomplete: bool = False,
) -> StreakData:
    """
    Calculate current and longest streaks of active days.

    Args:
        sessions: Sessions in any order
        timezone: IANA name or tzinfo; defaults to the user's preference
        today: Day the current streak must end on; defaults to today in
            the resolved timezone
        include_incomplete: Also count sessions that were not completed

    Returns:
        StreakData. ``current`` is 0 when there is no activity today;
        several sessions on one day count as one day.
    """
    tz = resolve_timezone(timezone) if timezone is not None else get_user_timezone()

    days = group_sessions_by_day(sessions, tz, include_incomplete=include_incomplete)
    if not days:
        return StreakData()

    sorted_days = sorted(days, reverse=True)

    if today is None:
        today = today_in_timezone(tz)
    elif isinstance(today, datetime):
        today = day_key(today, tz)

    current = 0
    check = today
    while check in days:
        current += 1
        check -= ONE_DAY

    longest = run = 1
    for newer, older in zip(sorted_days, sorted_days[1:]):
        if newer - older == ONE_DAY:
            run += 1
            longest = max(longest, run)
        else:
            run = 1

    logger.debug(
        "streak_calculated",
        active_days=len(sorted_days),
        current=current,
        longest=longest,
        timezone=tz,
        last_active_date=sorted_days[0],
    )

    return StreakData(current=current, longest=longest, last_active_date=sorted_days[0])


def streak_needs_reset(last_active_date: date | None, today: date, grace_days: int = 1) -> bool:
    """
    True when more than *grace_days* whole days passed since the last active day.

    A user with no recorded activity has no streak to reset.
    """
    if last_active_date is None:
        return False
    return (today - last_active_date).days > grace_days


__all__ = [
    "calculate_streak",
    "day_key",
    "get_system_timezone",
    "get_user_timezone",
    "group_sessions_by_day",
    "resolve_timezone",
    "start_of_day",
    "streak_needs_reset",
    "today_in_timezone",
]
