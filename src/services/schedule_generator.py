"""Monthly task schedule generation from a weekly pickup pattern."""

from collections.abc import Iterable
from datetime import date, timedelta
from decimal import Decimal

from src.core.recurrence import first_occurrence_on_or_after, weekday_index, weekly_occurrences
from src.domain.service import PickupDay
from src.domain.task import ScheduledTask


# Work happens the evening before the bins go out
SERVICE_LEAD_DAYS = 1


def pickup_note(can_number: int) -> str:
    """Note attached to generated pickup tasks."""
    return f"Trash pickup - Can {can_number}"


def generate_month_schedule(
    pickup_days: Iterable[PickupDay],
    month_start: date,
    month_end: date,
    price: Decimal,
) -> tuple[ScheduledTask, ...]:
    """Produce one task descriptor per pickup-day occurrence inside a month.

    Each occurrence of a pickup weekday between ``month_start`` and ``month_end``
    yields a task dated one day earlier, so the first entry of a month may fall
    on the last day of the previous month. Entries are grouped per pickup day,
    not sorted by date.

    Args:
        pickup_days: Weekly pickup pattern
        month_start: First day of the target month
        month_end: Last day of the target month
        price: Price captured on every generated task

    Returns:
        Immutable sequence of task descriptors
    """
    entries: list[ScheduledTask] = []
    for pickup_day in pickup_days:
        first = first_occurrence_on_or_after(month_start, weekday_index(pickup_day.day_of_week), month_end)
        if first is None:
            continue
        entries.extend(
            ScheduledTask(
                scheduled_date=occurrence - timedelta(days=SERVICE_LEAD_DAYS),
                can_number=pickup_day.can_number,
                price_per_task=price,
                notes=pickup_note(pickup_day.can_number),
            )
            for occurrence in weekly_occurrences(first, month_end)
        )
    return tuple(entries)


def regeneration_window(month_start: date, month_end: date) -> tuple[date, date]:
    """Date range a month's schedule can emit into, inclusive on both ends."""
    # Starts one lead day before the month: a pickup on the 1st is serviced on
    # the previous month's last day, and reruns must delete that task too.
    return month_start - timedelta(days=SERVICE_LEAD_DAYS), month_end
