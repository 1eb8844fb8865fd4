"""Hourly staging decision procedure.

Given the combination running in the previous hour, the load of the current
hour and a priority order, decide which combination runs this hour.

Rules:
1. Bootstrap (nothing running yet): grow the combination in priority order
   until it covers the load; fall back to the whole fleet.
2. Capacity-forced add: if the running combination is short, try the single
   next unit in priority order. Adopt it if that closes the gap.
3. Efficiency: evaluate adding the next unit in priority order and removing
   the lowest-priority running unit. A removal is also accepted when the
   running capacity exceeds the load by more than the excess ratio.

The decision is a pure function of its inputs so it can be exercised hour by
hour without running a whole day.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from chillstage.core.capacity import CapacityModel
from chillstage.core.entities import Combination, PriorityOrder
from chillstage.core.performance import PerformanceTable

logger = logging.getLogger(__name__)


class DecisionType(str, Enum):
    """Which rule produced a staging decision."""

    START = "start"
    CAPACITY_ADD = "capacity_add"
    EFFICIENCY_ADD = "efficiency_add"
    EFFICIENCY_REMOVE = "efficiency_remove"
    EXCESS_REMOVE = "excess_remove"
    HOLD = "hold"


@dataclass(frozen=True)
class StagingDecision:
    """Outcome of one hourly decision."""

    decision_type: DecisionType
    combination: Combination
    cop: float | None  # None if the table has no data for the combination
    capacity: float
    reason: str = ""

    @property
    def changed(self) -> bool:
        return self.decision_type not in (DecisionType.START, DecisionType.HOLD)


@dataclass(frozen=True)
class _Candidate:
    decision_type: DecisionType
    combination: Combination
    cop: float | None
    capacity: float
    reason: str

    @property
    def cop_value(self) -> float:
        return self.cop or 0.0


class StagingController:
    """Decides the running chiller combination hour by hour."""

    DEFAULT_EXCESS_CAPACITY_RATIO = 1.5

    def __init__(
        self,
        capacity_model: CapacityModel,
        performance: PerformanceTable,
        config: dict[str, Any] | None = None,
    ):
        self.capacity_model = capacity_model
        self.performance = performance
        self.config = config or {}

        staging_cfg = self.config.get("staging", {})
        self.excess_capacity_ratio = staging_cfg.get(
            "excess_capacity_ratio", self.DEFAULT_EXCESS_CAPACITY_RATIO
        )
        self.load_unit = self.config.get("profile", {}).get(
            "load_unit", capacity_model.load_unit
        )

    def decide(
        self, current: Combination | None, priority_order: PriorityOrder, load: float
    ) -> StagingDecision:
        """Decide this hour's combination.

        Args:
            current: Combination running in the previous hour, ``None`` before
                the first hour.
            priority_order: Ranking used for adding and removing units.
            load: Cooling load of this hour.
        """
        if current is None or len(current) == 0:
            return self._bootstrap(priority_order, load)
        return self._step(current, priority_order, load)

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _bootstrap(self, priority_order: PriorityOrder, load: float) -> StagingDecision:
        combination = priority_order.prefix(len(priority_order))
        for size in range(1, len(priority_order) + 1):
            candidate = priority_order.prefix(size)
            if self.capacity_model.capacity(candidate) >= load:
                combination = candidate
                break

        return StagingDecision(
            DecisionType.START,
            combination,
            self.performance.cop(combination, load),
            self.capacity_model.capacity(combination),
            reason=f"Starting with {combination} for {load:.0f} {self.load_unit} load",
        )

    def _step(
        self, current: Combination, priority_order: PriorityOrder, load: float
    ) -> StagingDecision:
        current_cap = self.capacity_model.capacity(current)
        current_cop = self.performance.cop(current, load)
        current_cop_value = current_cop or 0.0

        next_unit = priority_order.next_missing(current)

        # 1. Capacity-forced add: only the single next unit is ever tried
        if current_cap < load and next_unit is not None:
            added = current.add(next_unit)
            added_cap = self.capacity_model.capacity(added)
            if added_cap >= load:
                return StagingDecision(
                    DecisionType.CAPACITY_ADD,
                    added,
                    self.performance.cop(added, load),
                    added_cap,
                    reason=(
                        f"Added {next_unit} for capacity "
                        f"({current_cap:.0f} -> {added_cap:.0f} {self.load_unit})"
                    ),
                )

        # 2. Efficiency evaluation
        add_candidate = self._add_candidate(current, next_unit, load, current_cop_value)
        remove_candidate = self._remove_candidate(
            current, priority_order, load, current_cap, current_cop_value
        )

        chosen = add_candidate or remove_candidate
        if add_candidate and remove_candidate:
            if add_candidate.cop_value > remove_candidate.cop_value:
                chosen = add_candidate
            else:
                chosen = remove_candidate

        if chosen is None:
            return StagingDecision(
                DecisionType.HOLD,
                current,
                current_cop,
                current_cap,
                reason="No change needed - current combination is optimal",
            )

        return StagingDecision(
            chosen.decision_type, chosen.combination, chosen.cop, chosen.capacity, chosen.reason
        )

    def _add_candidate(
        self, current: Combination, next_unit: str | None, load: float, current_cop: float
    ) -> _Candidate | None:
        if next_unit is None:
            return None

        added = current.add(next_unit)
        added_cap = self.capacity_model.capacity(added)
        if added_cap < load:
            return None

        added_cop = self.performance.cop(added, load)
        if (added_cop or 0.0) <= current_cop:
            return None

        return _Candidate(
            DecisionType.EFFICIENCY_ADD,
            added,
            added_cop,
            added_cap,
            reason=f"Added {next_unit} for efficiency (COP: {added_cop:.2f} vs {current_cop:.2f})",
        )

    def _remove_candidate(
        self,
        current: Combination,
        priority_order: PriorityOrder,
        load: float,
        current_cap: float,
        current_cop: float,
    ) -> _Candidate | None:
        if len(current) <= 1:
            return None

        unit = priority_order.lowest_running(current)
        if unit is None:
            return None

        reduced = current.remove(unit)
        reduced_cap = self.capacity_model.capacity(reduced)
        if reduced_cap < load:
            return None

        reduced_cop = self.performance.cop(reduced, load)
        reduced_cop_value = reduced_cop or 0.0

        if reduced_cop_value > current_cop:
            return _Candidate(
                DecisionType.EFFICIENCY_REMOVE,
                reduced,
                reduced_cop,
                reduced_cap,
                reason=(
                    f"Removed {unit} for efficiency "
                    f"(COP: {reduced_cop_value:.2f} vs {current_cop:.2f})"
                ),
            )

        if current_cap > load * self.excess_capacity_ratio:
            return _Candidate(
                DecisionType.EXCESS_REMOVE,
                reduced,
                reduced_cop,
                reduced_cap,
                reason=(
                    f"Removed {unit} due to excess capacity "
                    f"({current_cap:.0f} {self.load_unit} vs {load:.0f} {self.load_unit} load)"
                ),
            )

        return None
