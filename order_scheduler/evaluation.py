"""Sequence evaluation with an optional schedule cache.

Wraps the simulator so the optimizer can score a sequence by its total
penalty and reuse the schedule when it revisits the same ordering.
"""

from __future__ import annotations

from typing import Sequence

from .catalog import DEFAULT_CATALOG, Catalog
from .models import Order, Schedule
from .simulator import simulate
from .work_calendar import DEFAULT_CALENDAR, WorkCalendar

CacheType = dict[tuple[str, ...], Schedule]


def evaluate(
    sequence: Sequence[Order],
    cache: CacheType | None = None,
    catalog: Catalog = DEFAULT_CATALOG,
    calendar: WorkCalendar = DEFAULT_CALENDAR,
) -> Schedule:
    key = tuple(order.id for order in sequence)
    if cache is not None and key in cache:
        return cache[key]
    schedule = simulate(sequence, catalog=catalog, calendar=calendar)
    if cache is not None:
        cache[key] = schedule
    return schedule
