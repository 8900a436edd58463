import argparse
import logging
import os
import sys
from typing import Sequence

import yaml

from .catalog import DEFAULT_CATALOG
from .config import SchedulerConfig, load_config
from .errors import SchedulingError
from .optimizer import OptimizationResult, optimize
from .parser import parse_orders
from .reporter import order_summary, work_timetable, write_order_summary, write_work_timetable
from .visualization import plot_gantt, plot_penalty_convergence

logger = logging.getLogger("order_scheduler")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str, log_file: str | None = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def _remove_outputs(*paths: str) -> None:
    for path in paths:
        if os.path.isfile(path):
            os.remove(path)
            logger.info("Removed partial output %s", path)


def run(
    input_path: str,
    summary_path: str,
    timetable_path: str,
    config: SchedulerConfig,
) -> OptimizationResult:
    """Schedule the orders of ``input_path`` and write both reports.

    Reports are built in memory first. If writing either file or rendering
    the charts fails, both outputs are removed before the error propagates.
    """
    orders = parse_orders(input_path, deadline_year=config.deadline_year)
    for order in orders:
        logger.debug(
            "Order %s (%s x%d) stage workload: %s",
            order.id,
            order.product.value,
            order.quantity,
            DEFAULT_CATALOG.total_stage_minutes(order),
        )

    result = optimize(orders, calendar=config.calendar, iter_log_path=config.iter_log)
    summary_rows = order_summary(result.schedule, orders, calendar=config.calendar)
    timetable_rows = work_timetable(result.schedule, calendar=config.calendar)

    try:
        write_order_summary(summary_rows, summary_path, currency=config.currency)
        write_work_timetable(timetable_rows, timetable_path)
        if config.charts_enabled:
            os.makedirs(config.charts_dir, exist_ok=True)
            plot_gantt(result.schedule, os.path.join(config.charts_dir, "gantt_schedule.png"))
            plot_penalty_convergence(result, os.path.join(config.charts_dir, "convergence.png"))
    except (SchedulingError, OSError, ValueError):
        _remove_outputs(summary_path, timetable_path)
        raise
    return result


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Schedule production orders over the six-stage line to minimise penalties"
    )
    parser.add_argument("input", help="Order list (comma separated, header line first)")
    parser.add_argument("order_summary", help="Destination of the order summary CSV")
    parser.add_argument("work_timetable", help="Destination of the machine work timetable CSV")
    parser.add_argument("--config", default=None, help="Path to a YAML/JSON config file")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        configure_logging(config.log_level, config.log_file)
    except OSError as e:
        print(f"Cannot open log file: {e}", file=sys.stderr)
        return 1

    logger.info("Order scheduler is started")
    try:
        result = run(args.input, args.order_summary, args.work_timetable, config)
    except (SchedulingError, OSError, ValueError) as e:
        logger.exception("Order scheduling failed")
        print(str(e), file=sys.stderr)
        if config.log_file:
            print(f"Please read {config.log_file} for more details", file=sys.stderr)
        return 1

    logger.info(
        "Order scheduler successfully finished: %d orders, total penalty %d",
        len(result.sequence),
        result.total_penalty,
    )
    return 0
