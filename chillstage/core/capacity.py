"""Capacity model: rated output of units and combinations."""

import logging
from collections.abc import Iterable

from chillstage.core.entities import Unit

logger = logging.getLogger(__name__)

# 1 refrigeration ton (TR) = 3.516 kW thermal
TR_TO_KW = 3.516

_CONVERSION_FACTORS = {
    ("TR", "kW"): TR_TO_KW,
    ("kW", "TR"): 1.0 / TR_TO_KW,
}


def convert_capacity(value: float, source_unit: str, target_unit: str) -> float:
    """Convert a capacity value between kW and TR."""
    if source_unit == target_unit:
        return value
    factor = _CONVERSION_FACTORS.get((source_unit, target_unit))
    if factor is None:
        raise ValueError(f"Unknown capacity conversion {source_unit} -> {target_unit}")
    return value * factor


class CapacityModel:
    """Maps unit ids to rated output expressed in the load profile's unit."""

    def __init__(self, units: Iterable[Unit], load_unit: str = "kW"):
        self.load_unit = load_unit
        self.units: dict[str, Unit] = {}
        self._capacities: dict[str, float] = {}

        for unit in units:
            self.units[unit.name] = unit
            self._capacities[unit.name] = convert_capacity(
                unit.capacity, unit.capacity_unit, load_unit
            )

    def unit_capacity(self, name: str) -> float:
        return self._capacities.get(name, 0.0)

    def capacity(self, combination: Iterable[str]) -> float:
        """Total rated output of a combination. Unknown ids contribute 0."""
        return sum(self.unit_capacity(name) for name in sorted(set(combination)))

    def total(self) -> float:
        return sum(self.unit_capacity(name) for name in self.units)

    def __len__(self) -> int:
        return len(self.units)
