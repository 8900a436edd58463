"""Order summary and machine work timetable derived from a schedule.

Both projections are read-only: they never mutate the schedule they are
built from. ``order_summary`` follows the input order list; the work
timetable is ordered by day, stage, machine and start minute.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Iterator, Sequence

from .catalog import DEFAULT_CATALOG, Catalog
from .errors import ScheduleInvariantError
from .models import Order, Schedule
from .work_calendar import DEFAULT_CALENDAR, WorkCalendar

logger = logging.getLogger("order_scheduler.reporter")

ORDER_SUMMARY_HEADER = ["Order", "Total profit", "Penalty", "Work start", "Finished", "Deadline"]
WORK_TIMETABLE_HEADER = ["Date", "Machine", "Start", "End", "Order"]
INSTANT_FORMAT = "%m.%d %H:%M"
DAY_FORMAT = "%Y.%m.%d."
TIME_FORMAT = "%H:%M"


@dataclass(frozen=True)
class OrderSummaryRow:
    order_id: str
    net_profit: int
    penalty: int
    start_minute: int
    end_minute: int
    start: datetime
    finished: datetime
    deadline: datetime


@dataclass(frozen=True)
class WorkTimetableRow:
    """One machine interval clipped to a single working day."""

    day: date
    stage: int
    stage_name: str
    machine: int
    start_minute: int
    end_minute: int
    start: datetime
    end: datetime
    order_id: str

    @property
    def machine_label(self) -> str:
        return f"{self.stage_name}-{self.machine + 1}"


def order_summary(
    schedule: Schedule,
    orders: Sequence[Order],
    calendar: WorkCalendar = DEFAULT_CALENDAR,
) -> list[OrderSummaryRow]:
    """Summarise every order of ``orders`` (input order) against ``schedule``.

    Raises:
        ScheduleInvariantError: If an order is missing from the schedule.
    """
    positions = {order.id: position for position, order in enumerate(schedule.sequence)}
    spans: dict[int, tuple[int, int]] = {}
    for pool in schedule.machines:
        for machine in pool:
            for interval in machine.intervals:
                lo, hi = spans.get(interval.position, (interval.start, interval.end))
                spans[interval.position] = (min(lo, interval.start), max(hi, interval.end))

    rows = []
    for order in orders:
        position = positions.get(order.id)
        if position is None or position not in spans:
            raise ScheduleInvariantError(
                f"Order {order.id} is not part of the schedule", order_id=order.id
            )
        start_minute, end_minute = spans[position]
        penalty = schedule.penalties[position].amount
        rows.append(
            OrderSummaryRow(
                order_id=order.id,
                net_profit=order.gross_profit - penalty,
                penalty=penalty,
                start_minute=start_minute,
                end_minute=end_minute,
                start=calendar.to_datetime(start_minute, is_start=True),
                finished=calendar.to_datetime(end_minute, is_start=False),
                deadline=order.deadline,
            )
        )
    return rows


def split_by_day(start: int, end: int, calendar: WorkCalendar) -> Iterator[tuple[int, int, int]]:
    """Yield ``(day, start, end)`` pieces of ``[start, end)`` cut at window ends."""
    current = start
    while current < end:
        day = calendar.day_of(current)
        piece_end = min(end, calendar.day_end(day))
        yield day, current, piece_end
        current = piece_end


def work_timetable(
    schedule: Schedule,
    catalog: Catalog = DEFAULT_CATALOG,
    calendar: WorkCalendar = DEFAULT_CALENDAR,
) -> list[WorkTimetableRow]:
    keyed: list[tuple[tuple[int, int, int, int], WorkTimetableRow]] = []
    for stage, pool in enumerate(schedule.machines):
        for machine in pool:
            for interval in machine.intervals:
                for day, start, end in split_by_day(interval.start, interval.end, calendar):
                    start_at = calendar.to_datetime(start, is_start=True)
                    row = WorkTimetableRow(
                        day=start_at.date(),
                        stage=stage,
                        stage_name=catalog.stage_names[stage],
                        machine=machine.index,
                        start_minute=start,
                        end_minute=end,
                        start=start_at,
                        end=calendar.to_datetime(end, is_start=False),
                        order_id=interval.order_id,
                    )
                    keyed.append(((day, stage, machine.index, start), row))
    keyed.sort(key=lambda item: item[0])
    return [row for _, row in keyed]


def _money(amount: int, currency: str) -> str:
    return f"{amount} {currency}" if currency else str(amount)


def write_order_summary(
    rows: Sequence[OrderSummaryRow], path: str | Path, currency: str = "Ft"
) -> Path:
    out_path = Path(path)
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(ORDER_SUMMARY_HEADER)
        for r in rows:
            writer.writerow(
                [
                    r.order_id,
                    _money(r.net_profit, currency),
                    _money(r.penalty, currency),
                    r.start.strftime(INSTANT_FORMAT),
                    r.finished.strftime(INSTANT_FORMAT),
                    r.deadline.strftime(INSTANT_FORMAT),
                ]
            )
    logger.info("Wrote order summary (%d rows) to %s", len(rows), out_path)
    return out_path


def write_work_timetable(rows: Sequence[WorkTimetableRow], path: str | Path) -> Path:
    out_path = Path(path)
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(WORK_TIMETABLE_HEADER)
        for r in rows:
            writer.writerow(
                [
                    r.day.strftime(DAY_FORMAT),
                    r.machine_label,
                    r.start.strftime(TIME_FORMAT),
                    r.end.strftime(TIME_FORMAT),
                    r.order_id,
                ]
            )
    logger.info("Wrote work timetable (%d rows) to %s", len(rows), out_path)
    return out_path
