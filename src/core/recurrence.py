"""Date math for weekly pickup schedules and recurring service frequencies."""

from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from src.core.config import constants


# Sunday-first numbering, matching how pickup days are stored
WEEKDAY_INDEX: dict[str, int] = {
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}

WEEKDAY_NAMES: tuple[str, ...] = tuple(name.capitalize() for name in WEEKDAY_INDEX)

FREQUENCY_STEP_DAYS: dict[str, int] = {
    "weekly": 7,
    "biweekly": 14,
}


def weekday_index(name: str) -> int:
    """Map a weekday name to 0..6 (Sunday=0), case-insensitively.

    Unrecognised names resolve to Sunday. Use ``parse_weekday`` where bad
    input must be rejected instead.
    """
    return WEEKDAY_INDEX.get(name.strip().lower(), 0)


def parse_weekday(name: str) -> int:
    """Strict variant of ``weekday_index``.

    Raises:
        ValueError: If the name is not a weekday
    """
    key = name.strip().lower()
    if key not in WEEKDAY_INDEX:
        raise ValueError(f"Unknown weekday: {name!r}. Expected one of {', '.join(WEEKDAY_NAMES)}")
    return WEEKDAY_INDEX[key]


def sunday_based_weekday(day: date) -> int:
    """Return the Sunday=0 weekday number of a date."""
    return (day.weekday() + 1) % constants.DAYS_PER_WEEK


def first_occurrence_on_or_after(start: date, weekday: int, range_end: date | None = None) -> date | None:
    """Return the first date on or after ``start`` that falls on ``weekday``.

    Returns None when that date lies beyond ``range_end``.
    """
    offset = (weekday - sunday_based_weekday(start)) % constants.DAYS_PER_WEEK
    occurrence = start + timedelta(days=offset)
    if range_end is not None and occurrence > range_end:
        return None
    return occurrence


def weekly_occurrences(first: date, range_end: date) -> tuple[date, ...]:
    """Return ``first, first+7, first+14, ...`` while not after ``range_end``."""
    if first > range_end:
        return ()
    count = (range_end - first).days // constants.DAYS_PER_WEEK + 1
    return tuple(first + timedelta(weeks=k) for k in range(count))


def month_bounds(day: date) -> tuple[date, date]:
    """Return the first and last calendar day of the month containing ``day``."""
    first = day.replace(day=1)
    last = first + relativedelta(months=1) - timedelta(days=1)
    return first, last


def step_dates(anchor: date, frequency: str, end: date) -> tuple[date, ...]:
    """Return the dates strictly after ``anchor`` and not after ``end`` for a frequency.

    Monthly steps are computed as ``anchor + k months`` so a month-end anchor
    is clamped per month rather than drifting (Jan 31 -> Feb 28 -> Mar 31).

    Raises:
        ValueError: If the frequency has no recurrence (onetime or unknown)
    """
    if frequency == "monthly":
        dates: list[date] = []
        k = 1
        while (candidate := anchor + relativedelta(months=k)) <= end:
            dates.append(candidate)
            k += 1
        return tuple(dates)

    step = FREQUENCY_STEP_DAYS.get(str(frequency))
    if step is None:
        raise ValueError(f"Frequency {frequency!r} does not recur")

    if anchor + timedelta(days=step) > end:
        return ()
    count = (end - anchor).days // step
    return tuple(anchor + timedelta(days=step * k) for k in range(1, count + 1))
