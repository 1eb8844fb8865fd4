"""Daily simulation of chiller staging for one priority order.

Folds the staging decision over a load profile hour by hour and records the
resulting combinations, staging events and energy aggregates.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

import pandas as pd

from chillstage.core.capacity import CapacityModel
from chillstage.core.controller import StagingController, StagingDecision
from chillstage.core.entities import Combination, PriorityOrder, StagingAction
from chillstage.core.performance import PerformanceTable
from chillstage.core.profile import LoadProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HourlyRecord:
    """Combination running during one hour."""

    hour: int
    combination: Combination
    load: float
    cop: float | None
    capacity: float
    reason: str = ""

    @property
    def shortfall(self) -> bool:
        """Running capacity does not cover the load."""
        return self.capacity < self.load

    @property
    def has_valid_cop(self) -> bool:
        return self.cop is not None and math.isfinite(self.cop) and self.cop > 0

    @property
    def energy(self) -> float:
        """Electrical energy for the hour; 0 when the COP is unusable."""
        return self.load / self.cop if self.has_valid_cop else 0.0


@dataclass(frozen=True)
class StagingEvent:
    """A unit added or removed between two consecutive hours."""

    hour: int
    action: StagingAction
    unit: str
    combination: Combination
    load: float
    cop: float | None
    reason: str


@dataclass(frozen=True)
class SimulationTrace:
    """Hour-by-hour result of simulating one priority order over one day."""

    priority_order: PriorityOrder
    hourly: tuple[HourlyRecord, ...]
    events: tuple[StagingEvent, ...] = ()
    total_energy: float = 0.0
    average_cop: float = 0.0
    included_hours: int = 0

    @property
    def starting_combination(self) -> Combination | None:
        return self.hourly[0].combination if self.hourly else None

    @property
    def shortfall_hours(self) -> list[int]:
        return [r.hour for r in self.hourly if r.shortfall]

    @property
    def excluded_hours(self) -> list[int]:
        """Hours left out of the aggregates for lack of a usable COP."""
        return [r.hour for r in self.hourly if not r.has_valid_cop]

    @property
    def effective_order(self) -> tuple[str, ...]:
        """Units of the largest combination used, in priority order.

        Priority orders that only differ in units never started behave
        identically, so this is the part of the order that actually matters.
        """
        largest: Combination | None = None
        for record in self.hourly:
            if largest is None or len(record.combination) > len(largest):
                largest = record.combination
        if largest is None:
            return ()
        return tuple(u for u in self.priority_order if u in largest)

    def to_frame(self) -> pd.DataFrame:
        """Hourly records as a DataFrame indexed by hour."""
        frame = pd.DataFrame(
            [
                {
                    "hour": r.hour,
                    "combination": r.combination.key,
                    "units": len(r.combination),
                    "load": r.load,
                    "cop": r.cop,
                    "capacity": r.capacity,
                    "energy": r.energy,
                    "shortfall": r.shortfall,
                    "reason": r.reason,
                }
                for r in self.hourly
            ]
        )
        return frame.set_index("hour")

    def events_frame(self) -> pd.DataFrame:
        columns = ["hour", "action", "unit", "combination", "load", "cop", "reason"]
        return pd.DataFrame(
            [
                {
                    "hour": e.hour,
                    "action": e.action.value,
                    "unit": e.unit,
                    "combination": e.combination.key,
                    "load": e.load,
                    "cop": e.cop,
                    "reason": e.reason,
                }
                for e in self.events
            ],
            columns=columns,
        )

    def get_summary(self) -> dict[str, Any]:
        """Summary for a presentation layer."""
        return {
            "priority_order": list(self.priority_order),
            "effective_order": list(self.effective_order),
            "total_energy": round(self.total_energy, 2),
            "average_cop": round(self.average_cop, 3),
            "starting_combination": (
                self.starting_combination.key if self.starting_combination else None
            ),
            "staging_events": len(self.events),
            "shortfall_hours": self.shortfall_hours,
            "excluded_hours": self.excluded_hours,
        }


class DailySimulator:
    """Runs the staging decision over a full load profile."""

    def __init__(
        self,
        capacity_model: CapacityModel,
        performance: PerformanceTable,
        config: dict[str, Any] | None = None,
        controller: StagingController | None = None,
    ):
        self.config = config or {}
        self.capacity_model = capacity_model
        self.performance = performance
        self.controller = controller or StagingController(
            capacity_model, performance, self.config
        )

    def step(
        self,
        current: Combination | None,
        priority_order: PriorityOrder,
        hour: int,
        load: float,
    ) -> tuple[HourlyRecord, list[StagingEvent]]:
        """Simulate a single hour starting from ``current``."""
        decision = self.controller.decide(current, priority_order, load)
        record = HourlyRecord(
            hour=hour,
            combination=decision.combination,
            load=load,
            cop=decision.cop,
            capacity=decision.capacity,
            reason=decision.reason,
        )
        events = self._staging_events(current, decision, priority_order, hour, load)
        return record, events

    def run(self, priority_order: PriorityOrder, load_profile: LoadProfile) -> SimulationTrace:
        """Simulate one day. Never raises on missing data or insufficient capacity."""
        records: list[HourlyRecord] = []
        events: list[StagingEvent] = []
        current: Combination | None = None

        for sample in load_profile:
            record, hour_events = self.step(current, priority_order, sample.hour, sample.load)
            records.append(record)
            events.extend(hour_events)
            current = record.combination

        return self._build_trace(priority_order, records, events)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _staging_events(
        previous: Combination | None,
        decision: StagingDecision,
        priority_order: PriorityOrder,
        hour: int,
        load: float,
    ) -> list[StagingEvent]:
        # The starting combination is not a transition between two hours
        if previous is None or decision.combination == previous:
            return []

        new = decision.combination
        added = priority_order.sort_units(u for u in new if u not in previous)
        removed = priority_order.sort_units(u for u in previous if u not in new)

        events = [
            StagingEvent(hour, StagingAction.ADD, unit, new, load, decision.cop, decision.reason)
            for unit in added
        ]
        events.extend(
            StagingEvent(hour, StagingAction.REMOVE, unit, new, load, decision.cop, decision.reason)
            for unit in removed
        )
        return events

    @staticmethod
    def _build_trace(
        priority_order: PriorityOrder,
        records: list[HourlyRecord],
        events: list[StagingEvent],
    ) -> SimulationTrace:
        included = [r for r in records if r.has_valid_cop]
        excluded = len(records) - len(included)
        if excluded:
            logger.debug(f"{priority_order}: {excluded} hour(s) without usable COP excluded")

        total_energy = sum(r.energy for r in included)
        average_cop = sum(r.cop for r in included) / len(included) if included else 0.0

        return SimulationTrace(
            priority_order=priority_order,
            hourly=tuple(records),
            events=tuple(events),
            total_energy=total_energy,
            average_cop=average_cop,
            included_hours=len(included),
        )
