import logging
from datetime import timedelta
from typing import Iterable, Sequence

from .catalog import DEFAULT_CATALOG, Catalog
from .errors import InvalidScheduleInput, ScheduleInvariantError
from .models import Machine, Order, Penalty, PieceOperation, Schedule, ScheduledInterval
from .work_calendar import DEFAULT_CALENDAR, WorkCalendar

logger = logging.getLogger("order_scheduler.simulator")

ONE_DAY = timedelta(days=1)


def validate_orders(orders: Iterable[Order], catalog: Catalog = DEFAULT_CATALOG) -> None:
    """Check that every order can be placed on the line described by ``catalog``.

    Raises:
        InvalidScheduleInput: On a stage without machines, an unknown product,
            a non-positive quantity, a negative penalty rate or a repeated id.
    """
    catalog.validate()
    seen: set[str] = set()
    for order in orders:
        if order.product not in catalog.processing_times:
            raise InvalidScheduleInput(
                f"Order {order.id}: unknown product {order.product!r}", order_id=order.id
            )
        if order.quantity <= 0:
            raise InvalidScheduleInput(
                f"Order {order.id}: quantity must be positive, got {order.quantity}",
                order_id=order.id,
            )
        if order.penalty_per_day < 0:
            raise InvalidScheduleInput(
                f"Order {order.id}: penalty per day must not be negative", order_id=order.id
            )
        if order.id in seen:
            raise InvalidScheduleInput(f"Duplicate order id {order.id}", order_id=order.id)
        seen.add(order.id)


def compute_penalty(
    order: Order,
    position: int,
    completion: int,
    calendar: WorkCalendar = DEFAULT_CALENDAR,
) -> Penalty:
    """Charge ``penalty_per_day`` for every started day past the deadline.

    The deadline is inclusive: finishing exactly on it costs nothing.
    """
    finish = calendar.to_datetime(completion, is_start=False)
    days_late = -((order.deadline - finish) // ONE_DAY)
    amount = max(0, days_late * order.penalty_per_day)
    return Penalty(position=position, amount=amount, completion=completion, finish=finish)


def simulate(
    sequence: Sequence[Order],
    catalog: Catalog = DEFAULT_CATALOG,
    calendar: WorkCalendar = DEFAULT_CALENDAR,
    validate: bool = False,
) -> Schedule:
    """Decode an order sequence into a machine-level timetable.

    Orders are taken in sequence order and every piece of an order walks the
    stages 0..n-1. At each stage the piece goes to the machine that becomes
    free first (the first such machine in pool order on ties) and starts as
    soon as both that machine and the piece's previous stage are done, so
    pieces of one order are pipelined through the line.

    Args:
        sequence: Orders in the order they are released to the line.
        catalog: Stage capacities and processing times.
        calendar: Used to turn completion minutes into calendar instants
            for the penalty computation.
        validate: When True check orders and catalog before decoding.

    Returns:
        Schedule: Per-machine intervals, per-position penalties and the flat
        list of piece operations.

    Raises:
        InvalidScheduleInput: When ``validate`` is set and the input is invalid.
        ScheduleInvariantError: If a stage offers no machine for a piece.
    """
    if validate:
        validate_orders(sequence, catalog)

    machines = [
        [Machine(stage=stage, index=i) for i in range(catalog.capacities[stage])]
        for stage in range(catalog.stage_count)
    ]
    penalties: list[Penalty] = []
    operations: list[PieceOperation] = []

    for position, order in enumerate(sequence):
        times = catalog.processing_times[order.product]
        completion = 0
        for piece in range(order.quantity):
            # end of the same piece on the previous stage
            ready = 0
            for stage in range(catalog.stage_count):
                pool = machines[stage]
                chosen = -1
                for idx, machine in enumerate(pool):
                    if chosen < 0 or machine.next_free < pool[chosen].next_free:
                        chosen = idx
                if chosen < 0:
                    raise ScheduleInvariantError(
                        f"Order {order.id}: no machine available at stage {stage}",
                        order_id=order.id,
                        stage=stage,
                    )
                machine = pool[chosen]
                start = max(machine.next_free, ready)
                end = start + times[stage]

                last = machine.intervals[-1] if machine.intervals else None
                if last is not None and last.position == position and last.end == start:
                    last.end = end
                else:
                    machine.intervals.append(
                        ScheduledInterval(start=start, end=end, position=position, order_id=order.id)
                    )
                machine.next_free = end

                operations.append(
                    PieceOperation(
                        position=position,
                        piece=piece,
                        stage=stage,
                        machine=chosen,
                        start=start,
                        end=end,
                    )
                )
                ready = end
            completion = ready
        penalties.append(compute_penalty(order, position, completion, calendar))

    logger.debug(
        "Simulated %d orders: %d operations, total penalty %d",
        len(sequence),
        len(operations),
        sum(p.amount for p in penalties),
    )
    return Schedule(
        sequence=tuple(sequence),
        machines=machines,
        penalties=penalties,
        operations=operations,
    )


def check_no_machine_overlap(schedule: Schedule) -> bool:
    """Ensure intervals of every machine are ordered and never overlap.

    Raises:
        AssertionError: On the first interval that starts before its
        predecessor on the same machine has ended.
    """
    for pool in schedule.machines:
        for machine in pool:
            prev_end = -1
            for interval in machine.intervals:
                if interval.start < prev_end or interval.end < interval.start:
                    raise AssertionError(
                        f"Overlap on machine {machine.stage}-{machine.index} "
                        f"between end {prev_end} and start {interval.start}"
                    )
                prev_end = interval.end
    return True


def check_stage_precedence(schedule: Schedule) -> bool:
    """Ensure every piece starts a stage only after finishing the previous one.

    Raises:
        AssertionError: On the first piece that violates stage order.
    """
    finished: dict[tuple[int, int], tuple[int, int]] = {}
    for op in schedule.operations:
        key = (op.position, op.piece)
        if op.stage > 0:
            prev_stage, prev_end = finished.get(key, (-1, 0))
            if prev_stage != op.stage - 1 or op.start < prev_end:
                raise AssertionError(
                    f"Piece {op.piece} of position {op.position} starts stage {op.stage} "
                    f"at {op.start} before stage {prev_stage} ended at {prev_end}"
                )
        finished[key] = (op.stage, op.end)
    return True
