#!/usr/bin/env python3
"""
Driver Rotation Scheduler
Builds a rotating driver -> location calendar over a fixed number of scheduled days.
"""

import uuid
from datetime import date, timedelta
from typing import Callable, Iterable, Iterator, List, Sequence

from ops_models import Driver, Location, ScheduleEntry
from ops_store import ValidationAbort

SCHEDULED_DAYS = 30

DAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']


def weekday_index(day: date) -> int:
    """Day of week with 0=Sunday, 6=Saturday."""
    return (day.weekday() + 1) % 7


def validate_options(rotation_interval: int, excluded_days: Iterable[int]) -> frozenset:
    """Check generation options and return the excluded weekdays as a set."""
    if isinstance(rotation_interval, bool) or not isinstance(rotation_interval, int) or rotation_interval < 1:
        raise ValidationAbort(f"Rotation interval must be a positive whole number of days, got {rotation_interval!r}")

    excluded = frozenset(excluded_days)
    invalid = sorted(d for d in excluded if isinstance(d, bool) or not isinstance(d, int) or not 0 <= d <= 6)
    if invalid:
        raise ValidationAbort(f"Excluded days must be weekday numbers 0 (Sunday) to 6 (Saturday), got {invalid}")
    if len(excluded) == 7:
        raise ValidationAbort("Every day of the week is excluded; nothing can be scheduled.")
    return excluded


def scheduled_dates(start: date, excluded_days: frozenset, count: int = SCHEDULED_DAYS) -> Iterator[date]:
    """Yield the first `count` dates from `start` (inclusive) whose weekday is not excluded."""
    current_date = start
    days_scheduled = 0
    while days_scheduled < count:
        if weekday_index(current_date) not in excluded_days:
            yield current_date
            days_scheduled += 1
        current_date += timedelta(days=1)


def location_index(driver_offset: int, day_number: int, rotation_interval: int, location_count: int) -> int:
    """Location slot for a driver on the Nth scheduled day."""
    rotation_block = day_number // rotation_interval
    return (driver_offset + rotation_block) % location_count


def build_rotation(drivers: Sequence[Driver], locations: Sequence[Location], rotation_interval: int,
                   excluded_days: Iterable[int], start: date, days: int = SCHEDULED_DAYS,
                   id_factory: Callable[[], str] = lambda: str(uuid.uuid4())) -> List[ScheduleEntry]:
    """
    Compute the rotation calendar.

    Each driver starts at the location matching its position in `drivers` and
    moves one location forward every `rotation_interval` scheduled days.
    Excluded weekdays are skipped without counting towards the rotation.

    Args:
        drivers: Drivers to schedule, in the order offsets are assigned
        locations: Locations to rotate through
        rotation_interval: Scheduled days spent at each location
        excluded_days: Weekdays (0=Sunday ... 6=Saturday) never scheduled
        start: First candidate date
        days: Number of scheduled days to produce
        id_factory: Produces the id of each entry

    Returns:
        Entries ordered by date, then by driver order
    """
    excluded = validate_options(rotation_interval, excluded_days)
    if not drivers or not locations:
        raise ValidationAbort("No active dedicated drivers or schedulable locations available.")

    entries = []
    for day_number, current_date in enumerate(scheduled_dates(start, excluded, days)):
        for driver_offset, driver in enumerate(drivers):
            location = locations[location_index(driver_offset, day_number, rotation_interval, len(locations))]
            entries.append(ScheduleEntry(
                id=id_factory(),
                driver_id=driver.id,
                driver_name=driver.name,
                date=current_date.isoformat(),
                location_id=location.id,
                location_name=location.name
            ))
    return entries
