import logging
import os
from pathlib import Path

import matplotlib

matplotlib.use("Agg")  # Must be set before importing pyplot
import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.patches import Patch  # noqa: E402

from .catalog import DEFAULT_CATALOG, Catalog  # noqa: E402
from .models import Schedule  # noqa: E402
from .optimizer import OptimizationResult  # noqa: E402

logger = logging.getLogger("order_scheduler.visualization")


def _ensure_dir(path: str):
    if path:
        os.makedirs(path, exist_ok=True)


def plot_gantt(
    schedule: Schedule,
    save_path: str | Path,
    catalog: Catalog = DEFAULT_CATALOG,
    show_legend: bool | None = None,
) -> str:
    """Draw one row per machine (grouped by stage) and save the chart.

    Bars are coloured by order; the legend is shown automatically for up to
    40 orders unless ``show_legend`` forces it either way.
    """
    rows = [(stage, machine) for stage, pool in enumerate(schedule.machines) for machine in pool]
    n_orders = len(schedule.sequence)
    horizon = max(
        (i.end for _, m in rows for i in m.intervals),
        default=0,
    )

    # Adaptive sizing: height grows with machines
    fig, ax = plt.subplots(
        figsize=(min(10 + horizon / 2000, 18), min(0.45 * len(rows) + 2, 16)),
        constrained_layout=True,
    )
    cmap = matplotlib.colormaps["tab20"]
    colors = [cmap(i % 20) for i in range(max(n_orders, 1))]
    for row, (_, machine) in enumerate(rows):
        for interval in machine.intervals:
            ax.barh(
                row,
                interval.end - interval.start,
                left=interval.start,
                height=0.8,
                color=colors[interval.position],
                alpha=0.85,
                edgecolor="black",
                linewidth=0.4,
            )
    ax.set_xlabel("Production minute", fontsize=12)
    ax.set_ylabel("Machine", fontsize=12)
    ax.set_title(
        f"Work schedule - total penalty = {schedule.total_penalty}",
        fontsize=14,
        fontweight="bold",
    )
    ax.set_yticks(range(len(rows)))
    ax.set_yticklabels([f"{catalog.stage_names[s]}-{m.index + 1}" for s, m in rows])
    ax.invert_yaxis()
    ax.grid(True, alpha=0.25, axis="x", linestyle="--", linewidth=0.7)

    if show_legend is None:
        show_legend = n_orders <= 40
    if show_legend and n_orders:
        handles = [
            Patch(facecolor=colors[p], alpha=0.85, edgecolor="black", label=order.id)
            for p, order in enumerate(schedule.sequence)
        ]
        ax.legend(
            handles=handles,
            bbox_to_anchor=(1.02, 1),
            loc="upper left",
            borderaxespad=0.0,
            fontsize=8,
            frameon=False,
            ncol=1 if n_orders <= 25 else 2,
        )

    filepath = str(save_path)
    _ensure_dir(os.path.dirname(filepath))
    fig.savefig(filepath, dpi=180)
    plt.close(fig)
    logger.info("Gantt chart saved as: %s", filepath)
    return filepath


def plot_penalty_convergence(result: OptimizationResult, save_path: str | Path) -> str:
    """Plot the total penalty of every optimizer round and the running best."""
    fig, ax = plt.subplots(figsize=(10, 6), constrained_layout=True)
    iterations = list(range(len(result.penalty_history)))
    running_best = []
    best = None
    for value in result.penalty_history:
        best = value if best is None else min(best, value)
        running_best.append(best)

    ax.plot(iterations, result.penalty_history, label="current", linewidth=1.5, color="#888888")
    ax.plot(
        iterations,
        running_best,
        label="best",
        linewidth=2,
        marker="o",
        markersize=4,
        markerfacecolor="white",
        color="#1f77b4",
    )
    if iterations:
        ax.annotate(
            f"Best: {running_best[-1]}",
            xy=(iterations[-1], running_best[-1]),
            xytext=(10, -20),
            textcoords="offset points",
            bbox=dict(boxstyle="round,pad=0.3", facecolor="lightgreen", alpha=0.7),
        )
    ax.set_xlabel("Iteration", fontsize=12)
    ax.set_ylabel("Total penalty", fontsize=12)
    ax.set_title("Convergence", fontsize=14, fontweight="bold")
    ax.grid(True, alpha=0.25, linestyle="--", linewidth=0.7)
    ax.legend(frameon=False, fontsize=9)

    filepath = str(save_path)
    _ensure_dir(os.path.dirname(filepath))
    fig.savefig(filepath, dpi=180)
    plt.close(fig)
    logger.info("Convergence plot saved as: %s", filepath)
    return filepath
