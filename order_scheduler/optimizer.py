"""Adjacent-swap local search over the order release sequence.

The search starts from the orders sorted by slack (deadline minus the
finish they would reach alone on the line, largest first) and repeatedly
pulls a heavily penalised order one slot earlier, past a neighbour with a
smaller penalty. ``fixed_count`` counts consecutive runs without a strict
improvement; it also selects which penalty rank is promoted next, so the
search moves down the penalty ranking before giving up.
"""

from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Iterator, Sequence

from .catalog import DEFAULT_CATALOG, Catalog
from .evaluation import CacheType, evaluate
from .models import Order, Schedule
from .simulator import simulate, validate_orders
from .work_calendar import DEFAULT_CALENDAR, WorkCalendar

logger = logging.getLogger("order_scheduler.optimizer")


@dataclass
class SearchState:
    """Mutable state of one optimizer run."""

    current: list[Order]
    best_sequence: list[Order] = field(default_factory=list)
    best_schedule: Schedule | None = None
    best_penalty: float = math.inf
    fixed_count: int = 0
    iteration: int = 0
    penalty_history: list[int] = field(default_factory=list)
    best_history: list[int] = field(default_factory=list)

    def update_best(self, schedule: Schedule) -> bool:
        """Record ``schedule`` if it strictly improves. Returns True if improved."""
        total = schedule.total_penalty
        self.penalty_history.append(total)
        if total < self.best_penalty:
            self.best_penalty = total
            self.best_schedule = schedule
            self.best_sequence = list(self.current)
            self.best_history.append(total)
            self.fixed_count = 0
            return True
        self.fixed_count += 1
        return False


@dataclass(frozen=True)
class OptimizationResult:
    """Best schedule found by :func:`optimize`.

    Fields:
        schedule: Timetable and penalties of the best sequence.
        sequence: Order sequence that produced ``schedule``.
        total_penalty: Sum of all penalty amounts in ``schedule``.
        iterations: Number of simulator runs in the main loop.
        penalty_history: Total penalty of every main-loop run.
        best_history: Best total penalty after each improvement.
    """

    schedule: Schedule
    sequence: tuple[Order, ...]
    total_penalty: int
    iterations: int
    penalty_history: list[int]
    best_history: list[int]


@contextmanager
def open_log_file(path: str | None) -> Iterator[Any]:
    """Context manager for the optional per-iteration trace file."""
    log_file = None
    if path:
        try:
            log_file = open(path, "w", encoding="utf-8")
            log_file.write("iteration,fixed_count,current_penalty,best_penalty,sequence\n")
        except OSError as e:
            logger.warning("Failed to open iteration log %s: %s", path, e)
            log_file = None
    try:
        yield log_file
    finally:
        if log_file:
            log_file.close()


def log_iteration(log_file: Any, state: SearchState, current_penalty: int) -> None:
    if log_file:
        sequence_str = " ".join(order.id for order in state.current)
        log_file.write(
            f"{state.iteration},{state.fixed_count},{current_penalty},"
            f'{state.best_penalty},"{sequence_str}"\n'
        )


def swap_orders(sequence: list[Order], i: int, j: int) -> list[Order]:
    """Return a new sequence with the orders at positions i and j swapped."""
    swapped = sequence.copy()
    swapped[i], swapped[j] = swapped[j], swapped[i]
    return swapped


def compute_slack(
    order: Order,
    catalog: Catalog = DEFAULT_CATALOG,
    calendar: WorkCalendar = DEFAULT_CALENDAR,
) -> timedelta:
    """Deadline minus the finish ``order`` reaches when scheduled alone."""
    solo = simulate([order], catalog=catalog, calendar=calendar)
    return order.deadline - solo.penalties[0].finish


def initial_sequence(
    orders: Sequence[Order],
    catalog: Catalog = DEFAULT_CATALOG,
    calendar: WorkCalendar = DEFAULT_CALENDAR,
) -> list[Order]:
    """Sort orders by slack, most slack first.

    Equal slacks keep their input order.
    """
    slack = [compute_slack(order, catalog, calendar) for order in orders]
    ranked = sorted(range(len(orders)), key=lambda i: slack[i], reverse=True)
    return [orders[i] for i in ranked]


def optimize(
    orders: Sequence[Order],
    catalog: Catalog = DEFAULT_CATALOG,
    calendar: WorkCalendar = DEFAULT_CALENDAR,
    cache: CacheType | None = None,
    iter_log_path: str | None = None,
) -> OptimizationResult:
    """Search for an order sequence with a small total lateness penalty.

    Each round simulates the working sequence. A strictly better total
    becomes the new best and resets ``fixed_count``; otherwise
    ``fixed_count`` grows by one. The order holding the ``fixed_count``-th
    largest penalty of the round is then swapped with its predecessor when
    the predecessor's penalty is strictly smaller. The run stops once
    ``fixed_count`` reaches ``len(orders) - 1``.

    Args:
        orders: Orders to schedule, in input order.
        catalog: Stage capacities and processing times.
        calendar: Working-day calendar used for deadlines.
        cache: Optional schedule cache shared with :func:`evaluate`.
        iter_log_path: Optional CSV trace written once per round.

    Returns:
        OptimizationResult with the best schedule and the sequence behind it.

    Raises:
        InvalidScheduleInput: If an order or the catalog is invalid.
    """
    validate_orders(orders, catalog)
    if cache is None:
        cache = {}

    if not orders:
        empty = simulate([], catalog=catalog, calendar=calendar)
        return OptimizationResult(
            schedule=empty,
            sequence=(),
            total_penalty=0,
            iterations=0,
            penalty_history=[],
            best_history=[],
        )

    state = SearchState(current=initial_sequence(orders, catalog, calendar))
    order_count = len(orders)
    logger.info("Optimizing %d orders", order_count)

    with open_log_file(iter_log_path) as log_file:
        while True:
            schedule = evaluate(state.current, cache=cache, catalog=catalog, calendar=calendar)
            if state.update_best(schedule):
                logger.info(
                    "Iteration %d: new best total penalty %d", state.iteration, state.best_penalty
                )
            log_iteration(log_file, state, schedule.total_penalty)
            logger.debug(
                "Iteration %d: current=%d best=%s fixed=%d",
                state.iteration,
                schedule.total_penalty,
                state.best_penalty,
                state.fixed_count,
            )
            state.iteration += 1
            if state.fixed_count >= order_count - 1:
                break

            ranked = sorted(schedule.penalties, key=lambda p: p.amount, reverse=True)
            target = ranked[state.fixed_count]
            if target.position != 0:
                previous = schedule.penalties[target.position - 1]
                if previous.amount < target.amount:
                    state.current = swap_orders(state.current, previous.position, target.position)

    assert state.best_schedule is not None
    total = int(state.best_penalty)
    logger.info(
        "Optimization finished after %d iterations, total penalty %d", state.iteration, total
    )
    return OptimizationResult(
        schedule=state.best_schedule,
        sequence=tuple(state.best_sequence),
        total_penalty=total,
        iterations=state.iteration,
        penalty_history=state.penalty_history,
        best_history=state.best_history,
    )
