import random
from datetime import datetime

import pytest

from order_scheduler.catalog import DEFAULT_CATALOG, Catalog
from order_scheduler.errors import InvalidScheduleInput
from order_scheduler.models import Product
from order_scheduler.simulator import (
    check_no_machine_overlap,
    check_stage_precedence,
    compute_penalty,
    simulate,
    validate_orders,
)


def random_orders(make_order, count: int, seed: int):
    rng = random.Random(seed)
    products = list(Product)
    return [
        make_order(
            f"O{i}",
            product=rng.choice(products),
            quantity=rng.randint(1, 12),
            deadline=datetime(2020, 7, 20 + rng.randint(0, 3), rng.randint(6, 21)),
            penalty_per_day=rng.randint(0, 5) * 1000,
        )
        for i in range(count)
    ]


def test_single_piece_runs_through_all_stages(make_order, line_catalog):
    order = make_order("A", deadline=datetime(2020, 12, 31))
    sched = simulate([order], catalog=line_catalog)
    assert sched.penalties[0].completion == 50
    assert sched.penalties[0].amount == 0
    assert sched.total_penalty == 0
    starts = [op.start for op in sched.operations]
    assert starts == [0, 5, 15, 23, 28, 40]


def test_pipelined_pieces_and_compaction(make_order, line_catalog):
    order = make_order("A", quantity=2)
    sched = simulate([order], catalog=line_catalog)
    spans = [[(i.start, i.end) for i in pool[0].intervals] for pool in sched.machines]
    assert spans == [
        [(0, 10)],
        [(5, 25)],
        [(15, 23), (25, 33)],
        [(23, 28), (33, 38)],
        [(28, 52)],
        [(40, 50), (52, 62)],
    ]
    assert sched.penalties[0].completion == 62


def test_earliest_free_machine_first_in_pool_wins(make_order):
    order = make_order("A", quantity=2)
    sched = simulate([order], catalog=DEFAULT_CATALOG)
    cutting = sched.machines[0]
    assert [(i.start, i.end) for i in cutting[0].intervals] == [(0, 5)]
    assert [(i.start, i.end) for i in cutting[1].intervals] == [(0, 5)]
    assert all(not m.intervals for m in cutting[2:])
    # the single testing machine takes both pieces back to back
    assert [(i.start, i.end) for i in sched.machines[3][0].intervals] == [(23, 33)]
    assert sched.penalties[0].completion == 55


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_no_overlap_and_precedence_on_random_sequences(make_order, seed):
    orders = random_orders(make_order, 8, seed)
    sched = simulate(orders)
    assert check_no_machine_overlap(sched)
    assert check_stage_precedence(sched)


def test_quantity_conservation(make_order):
    orders = random_orders(make_order, 6, 11)
    sched = simulate(orders)
    for position, order in enumerate(orders):
        for stage in range(DEFAULT_CATALOG.stage_count):
            busy = sum(
                i.end - i.start
                for machine in sched.machines[stage]
                for i in machine.intervals
                if i.position == position
            )
            expected = order.quantity * DEFAULT_CATALOG.processing_time(order.product, stage)
            assert busy == expected
            pieces = [
                op for op in sched.operations if op.position == position and op.stage == stage
            ]
            assert len(pieces) == order.quantity


def test_simulation_is_idempotent(make_order):
    orders = random_orders(make_order, 7, 5)
    first = simulate(orders)
    second = simulate(orders)
    assert first == second
    assert first.machines is not second.machines


def test_penalties_are_non_negative_and_zero_when_on_time(make_order):
    orders = random_orders(make_order, 10, 21)
    sched = simulate(orders)
    for penalty, order in zip(sched.penalties, orders):
        assert penalty.amount >= 0
        if penalty.finish <= order.deadline:
            assert penalty.amount == 0
        elif order.penalty_per_day > 0:
            assert penalty.amount > 0


def test_deadline_is_inclusive(make_order, line_catalog):
    on_time = make_order("A", deadline=datetime(2020, 7, 20, 6, 50), penalty_per_day=100)
    late = make_order("B", deadline=datetime(2020, 7, 20, 6, 49), penalty_per_day=100)
    assert simulate([on_time], catalog=line_catalog).penalties[0].amount == 0
    assert simulate([late], catalog=line_catalog).penalties[0].amount == 100


def test_penalty_rounds_started_days_up(make_order):
    # completion 960 is the close of the first window: 2020-07-20 22:00
    exact = make_order("A", deadline=datetime(2020, 7, 19, 22, 0), penalty_per_day=100)
    over = make_order("B", deadline=datetime(2020, 7, 19, 21, 0), penalty_per_day=100)
    assert compute_penalty(exact, 0, 960).amount == 100
    assert compute_penalty(over, 0, 960).amount == 200
    assert compute_penalty(exact, 0, 960).finish == datetime(2020, 7, 20, 22, 0)


def test_validate_rejects_bad_input(make_order):
    with pytest.raises(InvalidScheduleInput) as exc:
        validate_orders([make_order("A", quantity=0)])
    assert exc.value.order_id == "A"
    with pytest.raises(InvalidScheduleInput):
        validate_orders([make_order("A"), make_order("A")])
    with pytest.raises(InvalidScheduleInput):
        simulate([make_order("A", quantity=-1)], validate=True)


def test_zero_capacity_stage_is_rejected(make_order):
    catalog = Catalog(
        stage_names=DEFAULT_CATALOG.stage_names,
        capacities=(1, 1, 0, 1, 1, 1),
        processing_times=DEFAULT_CATALOG.processing_times,
    )
    with pytest.raises(InvalidScheduleInput) as exc:
        simulate([make_order("A")], catalog=catalog, validate=True)
    assert exc.value.stage == 2
