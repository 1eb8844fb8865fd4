"""Exhaustive priority-order search.

Every permutation of the fleet is simulated over the load profile and the
resulting traces are ranked by daily energy. Work is processed in batches;
after each batch a progress event is reported and, before the next one, a
cancellation flag is checked. A permutation is never interrupted halfway.
"""

import itertools
import logging
import math
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Protocol

from chillstage.analysis.ranking import DEFAULT_TOP_N, RankedGroup, group_by_energy
from chillstage.core.capacity import CapacityModel
from chillstage.core.entities import ConfigurationError, PriorityOrder, Unit
from chillstage.core.performance import PerformanceTable
from chillstage.core.profile import LoadProfile
from chillstage.core.simulator import DailySimulator, SimulationTrace

logger = logging.getLogger(__name__)


class CancelFlag(Protocol):
    def is_set(self) -> bool: ...


@dataclass(frozen=True)
class SearchProgress:
    """Progress after a completed batch."""

    completed: int
    total: int

    @property
    def percentage(self) -> int:
        """Whole percent, halves rounding up."""
        if not self.total:
            return 100
        return math.floor(self.completed / self.total * 100 + 0.5)


class SearchCancelledError(RuntimeError):
    """The search was cancelled between two batches."""

    def __init__(self, completed: int, total: int):
        super().__init__(f"Search cancelled after {completed}/{total} priority orders")
        self.completed = completed
        self.total = total


ProgressCallback = Callable[[SearchProgress], None]


class PriorityOrderSearch:
    """Evaluates all priority orders of a fleet and ranks them by energy."""

    DEFAULT_BATCH_SIZE = 50

    def __init__(
        self,
        units: Iterable[Unit],
        performance: PerformanceTable,
        config: dict[str, Any] | None = None,
    ):
        self.config = config or {}
        self.units: list[Unit] = list(units)
        if not self.units:
            raise ConfigurationError("Cannot search priority orders of an empty fleet.")

        names = [u.name for u in self.units]
        if len(set(names)) != len(names):
            raise ConfigurationError(f"Duplicate unit names: {names}")

        search_cfg = self.config.get("search", {})
        self.batch_size = int(search_cfg.get("batch_size", self.DEFAULT_BATCH_SIZE))
        self.top_n = search_cfg.get("top_n", DEFAULT_TOP_N)
        if self.batch_size < 1:
            raise ConfigurationError(f"Batch size must be positive, got {self.batch_size}")

        load_unit = self.config.get("profile", {}).get("load_unit", "kW")
        self.capacity_model = CapacityModel(self.units, load_unit=load_unit)
        self.performance = performance
        self.simulator = DailySimulator(self.capacity_model, performance, self.config)

    @property
    def total_orders(self) -> int:
        return math.factorial(len(self.units))

    def iter_priority_orders(self) -> Iterator[PriorityOrder]:
        """All permutations in lexicographic order of the input unit positions."""
        for names in itertools.permutations(u.name for u in self.units):
            yield PriorityOrder(names)

    def evaluate(self, priority_order: PriorityOrder, load_profile: LoadProfile) -> SimulationTrace:
        return self.simulator.run(priority_order, load_profile)

    def run(
        self,
        load_profile: LoadProfile,
        progress_callback: ProgressCallback | None = None,
        cancel_flag: CancelFlag | None = None,
    ) -> list[RankedGroup]:
        """Simulate every priority order and return the best ``top_n`` energy groups.

        Args:
            load_profile: Hourly loads for the day.
            progress_callback: Called with a :class:`SearchProgress` after each batch.
            cancel_flag: Anything with ``is_set()`` (e.g. ``threading.Event``),
                checked before each batch.

        Raises:
            ConfigurationError: Empty load profile.
            SearchCancelledError: ``cancel_flag`` was set.
        """
        if load_profile is None or len(load_profile) == 0:
            raise ConfigurationError("Load profile is empty.")

        total = self.total_orders
        logger.info(f"Evaluating {total} priority orders for {len(self.units)} units")

        traces: list[SimulationTrace] = []
        orders = self.iter_priority_orders()
        completed = 0

        while completed < total:
            if cancel_flag is not None and cancel_flag.is_set():
                logger.warning(f"Search cancelled at {completed}/{total}")
                raise SearchCancelledError(completed, total)

            batch = list(itertools.islice(orders, self.batch_size))
            if not batch:
                break
            traces.extend(self.evaluate(order, load_profile) for order in batch)
            completed += len(batch)

            progress = SearchProgress(completed, total)
            logger.debug(f"Progress {completed}/{total} ({progress.percentage}%)")
            if progress_callback is not None:
                progress_callback(progress)

        groups = group_by_energy(traces, top_n=self.top_n)
        logger.info(
            f"Search finished: {len(groups)} energy group(s)"
            + (f", best {groups[0].energy}" if groups else "")
        )
        return groups


def search_priority_orders(
    units: Iterable[Unit],
    performance: PerformanceTable,
    load_profile: LoadProfile | Iterable[tuple[int, float]],
    progress_callback: ProgressCallback | None = None,
    cancel_flag: CancelFlag | None = None,
    config: dict[str, Any] | None = None,
) -> list[RankedGroup]:
    """Convenience wrapper around :class:`PriorityOrderSearch`."""
    config = config or {}
    search = PriorityOrderSearch(units, performance, config)
    hours = config.get("profile", {}).get("hours", 24)
    profile = LoadProfile.coerce(load_profile, hours=hours)
    return search.run(profile, progress_callback=progress_callback, cancel_flag=cancel_flag)
