"""Rank simulation traces by daily energy.

Many priority orders are operationally indistinguishable: once the units that
are never started are ignored they produce the same day. Traces are therefore
grouped by their rounded total energy and the groups are ranked from the
lowest (best) energy upwards.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import pandas as pd

from chillstage.core.entities import PriorityOrder
from chillstage.core.simulator import SimulationTrace

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 20


def round_energy(value: float) -> int:
    """Round to the nearest whole energy unit, halves rounding up."""
    return math.floor(value + 0.5)


def is_valid_trace(trace: SimulationTrace) -> bool:
    """Degenerate runs (no usable COP at all, NaN, inf) cannot be ranked."""
    return math.isfinite(trace.total_energy) and trace.total_energy > 0


@dataclass(frozen=True)
class RankedGroup:
    """Traces sharing the same rounded total energy."""

    energy: int
    traces: tuple[SimulationTrace, ...]

    @property
    def priority_orders(self) -> list[PriorityOrder]:
        return [t.priority_order for t in self.traces]

    @property
    def best(self) -> SimulationTrace:
        """Lowest exact energy in the group (first in ranking order)."""
        return self.traces[0]

    @property
    def effective_orders(self) -> list[tuple[str, ...]]:
        """Distinct effective orders, in first-seen order."""
        seen: dict[tuple[str, ...], None] = {}
        for trace in self.traces:
            seen.setdefault(trace.effective_order, None)
        return list(seen)

    @property
    def average_cop(self) -> float:
        return sum(t.average_cop for t in self.traces) / len(self.traces)

    def __len__(self) -> int:
        return len(self.traces)


def group_by_energy(
    traces: Iterable[SimulationTrace], top_n: int | None = DEFAULT_TOP_N
) -> list[RankedGroup]:
    """Filter invalid traces, group by rounded energy and keep the best ``top_n`` groups.

    Within a group traces are ordered by exact energy; equal energies keep
    their input order, so the result is fully determined by the input order.
    """
    traces = list(traces)
    valid = [t for t in traces if is_valid_trace(t)]
    if len(valid) < len(traces):
        logger.debug(f"Discarded {len(traces) - len(valid)} trace(s) without valid energy")

    valid.sort(key=lambda t: t.total_energy)

    grouped: dict[int, list[SimulationTrace]] = {}
    for trace in valid:
        grouped.setdefault(round_energy(trace.total_energy), []).append(trace)

    groups = [RankedGroup(energy, tuple(members)) for energy, members in sorted(grouped.items())]
    if top_n is not None:
        groups = groups[:top_n]
    return groups


def ranking_frame(groups: list[RankedGroup]) -> pd.DataFrame:
    """Leaderboard with one row per group."""
    columns = ["rank", "energy", "orders", "average_cop", "best_order", "effective_order"]
    rows: list[dict[str, Any]] = [
        {
            "rank": rank,
            "energy": group.energy,
            "orders": len(group),
            "average_cop": round(group.average_cop, 3),
            "best_order": str(group.best.priority_order),
            "effective_order": " -> ".join(group.best.effective_order),
        }
        for rank, group in enumerate(groups, start=1)
    ]
    return pd.DataFrame(rows, columns=columns)
