"""Core package of the six-stage order scheduler.

Exports the data model, the simulator and the sequence optimizer.
"""

from order_scheduler.catalog import DEFAULT_CATALOG, Catalog  # noqa: F401
from order_scheduler.errors import (  # noqa: F401
    InvalidScheduleInput,
    ScheduleInvariantError,
    SchedulingError,
)
from order_scheduler.models import Order, Penalty, Product, Schedule  # noqa: F401
from order_scheduler.optimizer import OptimizationResult, optimize  # noqa: F401
from order_scheduler.simulator import simulate  # noqa: F401
from order_scheduler.work_calendar import DEFAULT_CALENDAR, WorkCalendar  # noqa: F401

__all__ = [
    "Catalog",
    "DEFAULT_CATALOG",
    "DEFAULT_CALENDAR",
    "InvalidScheduleInput",
    "OptimizationResult",
    "Order",
    "Penalty",
    "Product",
    "Schedule",
    "ScheduleInvariantError",
    "SchedulingError",
    "WorkCalendar",
    "optimize",
    "simulate",
]
