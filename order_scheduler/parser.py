"""Reader for the comma separated order list.

Expected layout (first line is a header and is skipped)::

    Order,Product,Quantity,Deadline,Profit per piece,Penalty per day
    MEGR-001,GYB,1 000,07.25 14:00,1 500,30 000

Numbers may use spaces as thousands separators. Deadlines carry no year;
``deadline_year`` is prepended before parsing.
"""

from __future__ import annotations

import logging
from datetime import datetime

from .errors import InvalidScheduleInput
from .models import Order, Product

logger = logging.getLogger("order_scheduler.parser")

FIELD_COUNT = 6
DEADLINE_FORMATS = ("%Y.%m.%d %H:%M", "%Y.%m.%d. %H:%M", "%Y.%m.%d", "%Y.%m.%d.")


def _parse_int(token: str, name: str, line_no: int, order_id: str) -> int:
    try:
        return int(token.replace(" ", ""))
    except ValueError:
        raise InvalidScheduleInput(
            f"Line {line_no}: invalid {name} {token!r}", order_id=order_id
        ) from None


def _parse_deadline(token: str, year: int, line_no: int, order_id: str) -> datetime:
    text = f"{year}.{token.strip()}"
    for fmt in DEADLINE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise InvalidScheduleInput(f"Line {line_no}: invalid deadline {token!r}", order_id=order_id)


def parse_order_line(line: str, line_no: int = 0, deadline_year: int = 2020) -> Order:
    """Parse a single order line.

    Raises:
        InvalidScheduleInput: On a wrong column count, unknown product,
            non-positive quantity, negative money field or bad deadline.
    """
    tokens = [token.strip() for token in line.split(",")]
    if len(tokens) != FIELD_COUNT:
        raise InvalidScheduleInput(
            f"Line {line_no}: expected {FIELD_COUNT} fields, got {len(tokens)}"
        )
    order_id = tokens[0]
    if not order_id:
        raise InvalidScheduleInput(f"Line {line_no}: empty order id")
    try:
        product = Product(tokens[1])
    except ValueError:
        raise InvalidScheduleInput(
            f"Line {line_no}: unknown product {tokens[1]!r}", order_id=order_id
        ) from None
    quantity = _parse_int(tokens[2], "quantity", line_no, order_id)
    if quantity <= 0:
        raise InvalidScheduleInput(
            f"Line {line_no}: quantity must be positive, got {quantity}", order_id=order_id
        )
    deadline = _parse_deadline(tokens[3], deadline_year, line_no, order_id)
    profit = _parse_int(tokens[4], "profit per piece", line_no, order_id)
    penalty = _parse_int(tokens[5], "penalty per day", line_no, order_id)
    if profit < 0 or penalty < 0:
        raise InvalidScheduleInput(
            f"Line {line_no}: profit and penalty must not be negative", order_id=order_id
        )
    return Order(
        id=order_id,
        product=product,
        quantity=quantity,
        deadline=deadline,
        profit_per_piece=profit,
        penalty_per_day=penalty,
    )


def parse_orders(file_path: str, deadline_year: int = 2020) -> list[Order]:
    """Read all orders from ``file_path`` in file order.

    Raises:
        InvalidScheduleInput: On any malformed line or a repeated order id.
        OSError: If the file cannot be read.
    """
    orders: list[Order] = []
    seen: set[str] = set()
    with open(file_path, "r", encoding="utf-8-sig") as f:
        lines = f.read().splitlines()

    # first line is the header
    for line_no, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        order = parse_order_line(line, line_no, deadline_year)
        if order.id in seen:
            raise InvalidScheduleInput(
                f"Line {line_no}: duplicate order id {order.id}", order_id=order.id
            )
        seen.add(order.id)
        orders.append(order)

    logger.info("Read %d orders from %s", len(orders), file_path)
    return orders
