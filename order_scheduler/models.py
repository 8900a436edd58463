"""Core data structures for the six-stage order scheduling problem.

This module defines:
    Product          -- closed enumeration of manufactured product families.
    Order            -- immutable customer order read from the input file.
    ScheduledInterval -- contiguous busy period of one machine for one order.
    Machine          -- one unit of stage capacity with its interval list.
    PieceOperation   -- single piece processed at a single stage.
    Penalty          -- lateness charge of the order at a sequence position.
    Schedule         -- full result of one simulation run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Product(str, Enum):
    GYB = "GYB"
    FB = "FB"
    SB = "SB"


@dataclass(frozen=True)
class Order:
    """Customer order.

    Attributes:
        id: Unique order identifier (opaque string).
        product: Product variant to manufacture.
        quantity: Number of physical pieces (>= 1).
        deadline: Calendar instant the order is due.
        profit_per_piece: Profit of one delivered piece.
        penalty_per_day: Charge for every started day of lateness (>= 0).
    """

    id: str
    product: Product
    quantity: int
    deadline: datetime
    profit_per_piece: int
    penalty_per_day: int

    @property
    def gross_profit(self) -> int:
        return self.quantity * self.profit_per_piece


@dataclass(slots=True)
class ScheduledInterval:
    """Busy period ``[start, end)`` in minutes since the calendar anchor.

    ``position`` is the index of the owning order in the simulated sequence.
    """

    start: int
    end: int
    position: int
    order_id: str


@dataclass(slots=True)
class Machine:
    """Single machine of a stage; intervals are ordered and non-overlapping."""

    stage: int
    index: int
    intervals: list[ScheduledInterval] = field(default_factory=list)
    next_free: int = 0


@dataclass(frozen=True)
class PieceOperation:
    """One piece of one order processed at one stage.

    Fields:
        position: Index of the order in the simulated sequence.
        piece: Piece number inside the order (0-based).
        stage: Stage index (0..5).
        machine: Machine index inside the stage pool.
        start: Start minute.
        end: Completion minute (start + processing time).
    """

    position: int
    piece: int
    stage: int
    machine: int
    start: int
    end: int


@dataclass(frozen=True)
class Penalty:
    """Lateness charge of the order at ``position``.

    Fields:
        position: Index of the order in the simulated sequence.
        amount: Penalty amount, never negative.
        completion: Completion minute of the order's last piece at the last stage.
        finish: ``completion`` converted to a calendar instant (end convention).
    """

    position: int
    amount: int
    completion: int
    finish: datetime


@dataclass(frozen=True)
class Schedule:
    """Machine timetable plus per-order penalties of one simulation run.

    Fields:
        sequence: Orders in the simulated order; every positional index below
            refers to this tuple.
        machines: ``machines[stage][index]`` -> Machine with its intervals.
        penalties: ``penalties[position]`` -> Penalty of ``sequence[position]``.
        operations: Flat list of all piece operations in placement order.
    """

    sequence: tuple[Order, ...]
    machines: list[list[Machine]]
    penalties: list[Penalty]
    operations: list[PieceOperation]

    @property
    def total_penalty(self) -> int:
        return sum(p.amount for p in self.penalties)
