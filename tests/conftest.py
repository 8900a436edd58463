"""Pytest configuration, shared fixtures & custom summary hook.

Also ensures the project root is on sys.path for imports.
"""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from types import MappingProxyType

import pytest

# Ensure project root is on sys.path so 'import order_scheduler.*' works
_root = Path(__file__).resolve().parents[1]
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from order_scheduler.catalog import Catalog  # noqa: E402
from order_scheduler.models import Order, Product  # noqa: E402

FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def line_catalog() -> Catalog:
    """Single machine per stage, default processing times."""
    return Catalog(
        stage_names=("Cutting", "Bending", "Welding", "Testing", "Painting", "Packing"),
        capacities=(1, 1, 1, 1, 1, 1),
        processing_times=MappingProxyType(
            {
                Product.GYB: (5, 10, 8, 5, 12, 10),
                Product.FB: (8, 16, 12, 5, 20, 15),
                Product.SB: (6, 15, 10, 5, 15, 12),
            }
        ),
    )


@pytest.fixture
def make_order():
    def _make(
        order_id: str,
        product: Product = Product.GYB,
        quantity: int = 1,
        deadline: datetime = datetime(2020, 8, 31),
        profit_per_piece: int = 1000,
        penalty_per_day: int = 100,
    ) -> Order:
        return Order(
            id=order_id,
            product=product,
            quantity=quantity,
            deadline=deadline,
            profit_per_piece=profit_per_piece,
            penalty_per_day=penalty_per_day,
        )

    return _make


@pytest.fixture
def orders_csv() -> Path:
    return FIXTURES / "orders.csv"


def pytest_terminal_summary(
    terminalreporter: pytest.TerminalReporter,
    exitstatus: int,
    config: pytest.Config,
) -> None:  # noqa: D401
    """Append a compact custom summary at the end of test session."""
    stats = terminalreporter.stats
    collected = terminalreporter._numcollected  # type: ignore[attr-defined]
    passed = len(stats.get("passed", []))
    failed = len(stats.get("failed", []))
    errors = len(stats.get("error", []))
    skipped = len(stats.get("skipped", []))

    terminalreporter.section("Custom summary", sep="=")
    terminalreporter.write_line(
        "Collected: "
        f"{collected} | Passed: {passed} | Failed: {failed} | "
        f"Errors: {errors} | Skipped: {skipped}"
    )
    if failed:
        terminalreporter.write_line("Failed tests:")
        for rep in stats["failed"]:
            terminalreporter.write_line(f"  - {rep.nodeid}")
