"""Static product catalog: stage capacities and per-piece processing times."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from .errors import InvalidScheduleInput
from .models import Order, Product

STAGE_COUNT = 6


@dataclass(frozen=True)
class Catalog:
    """Immutable lookup of the production line.

    Attributes:
        stage_names: Display name of every stage.
        capacities: Number of parallel machines per stage.
        processing_times: Product -> minutes needed for one piece at each stage.
    """

    stage_names: tuple[str, ...]
    capacities: tuple[int, ...]
    processing_times: Mapping[Product, tuple[int, ...]]

    @property
    def stage_count(self) -> int:
        return len(self.capacities)

    def processing_time(self, product: Product, stage: int) -> int:
        return self.processing_times[product][stage]

    def total_stage_minutes(self, order: Order) -> list[int]:
        """Total work of ``order`` per stage (processing time x quantity)."""
        times = self.processing_times[order.product]
        return [t * order.quantity for t in times]

    def validate(self) -> None:
        """Reject a catalog the simulator cannot run on.

        Raises:
            InvalidScheduleInput: If a stage has no machine or a product vector
                does not have one non-negative entry per stage.
        """
        if len(self.stage_names) != self.stage_count:
            raise InvalidScheduleInput("Stage names do not match the number of stages")
        for stage, capacity in enumerate(self.capacities):
            if capacity <= 0:
                raise InvalidScheduleInput(
                    f"Stage {stage} ({self.stage_names[stage]}) has no machines", stage=stage
                )
        for product, times in self.processing_times.items():
            if len(times) != self.stage_count:
                raise InvalidScheduleInput(
                    f"Product {product.value} defines {len(times)} stage times, "
                    f"expected {self.stage_count}"
                )
            if any(t < 0 for t in times):
                raise InvalidScheduleInput(f"Product {product.value} has a negative stage time")


DEFAULT_CATALOG = Catalog(
    stage_names=("Cutting", "Bending", "Welding", "Testing", "Painting", "Packing"),
    capacities=(6, 2, 3, 1, 4, 3),
    processing_times=MappingProxyType(
        {
            Product.GYB: (5, 10, 8, 5, 12, 10),
            Product.FB: (8, 16, 12, 5, 20, 15),
            Product.SB: (6, 15, 10, 5, 15, 12),
        }
    ),
)
