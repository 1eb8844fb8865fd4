"""Core entities and common types for chiller staging analysis."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

COMBINATION_DELIMITER = "+"


class ConfigurationError(ValueError):
    """Raised when inputs make a meaningful analysis impossible."""


class StagingAction(str, Enum):
    """Direction of a staging event."""

    ADD = "add"
    REMOVE = "remove"


class Unit(BaseModel):
    """A single chiller in the fleet."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    capacity: float = Field(ge=0.0)
    capacity_unit: str = "kW"  # kW or TR
    unit_type: str | None = None  # informational only (e.g. VSD)


@dataclass(frozen=True)
class Combination:
    """A set of running units in canonical (sorted, de-duplicated) form.

    Equality and hashing only look at the member set, so ``Combination(("B", "A"))``
    and ``Combination(("A", "B"))`` are the same value.
    """

    units: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "units", tuple(sorted(set(self.units))))

    @classmethod
    def of(cls, *units: str) -> "Combination":
        return cls(tuple(units))

    @classmethod
    def parse(cls, key: str, delimiter: str = COMBINATION_DELIMITER) -> "Combination":
        """Parse a delimiter-joined key such as ``"CH2+CH1"``."""
        parts = [p.strip() for p in str(key).split(delimiter)]
        return cls(tuple(p for p in parts if p))

    @property
    def key(self) -> str:
        return COMBINATION_DELIMITER.join(self.units)

    def add(self, unit: str) -> "Combination":
        return Combination(self.units + (unit,))

    def remove(self, unit: str) -> "Combination":
        return Combination(tuple(u for u in self.units if u != unit))

    def __len__(self) -> int:
        return len(self.units)

    def __iter__(self) -> Iterator[str]:
        return iter(self.units)

    def __contains__(self, unit: object) -> bool:
        return unit in self.units

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class PriorityOrder:
    """Total ranking of units. Position 0 holds rank 1 (started first, removed last)."""

    units: tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "units", tuple(self.units))
        if not self.units:
            raise ConfigurationError("Priority order needs at least one unit.")
        if len(set(self.units)) != len(self.units):
            raise ConfigurationError(f"Duplicate units in priority order: {self.units}")

    @classmethod
    def from_ranks(cls, ranks: dict[str, int]) -> "PriorityOrder":
        """Build from a ``unit -> rank`` mapping; ranks must be a permutation of 1..N."""
        if sorted(ranks.values()) != list(range(1, len(ranks) + 1)):
            raise ConfigurationError(
                f"Ranks must be a permutation of 1..{len(ranks)}, got {sorted(ranks.values())}"
            )
        return cls(tuple(sorted(ranks, key=ranks.__getitem__)))

    def prefix(self, size: int) -> Combination:
        """The combination of the ``size`` highest-priority units."""
        return Combination(self.units[:size])

    def next_missing(self, combination: Iterable[str]) -> str | None:
        """Highest-priority unit that is not part of ``combination``."""
        running = set(combination)
        for unit in self.units:
            if unit not in running:
                return unit
        return None

    def lowest_running(self, combination: Iterable[str]) -> str | None:
        """Running unit with the highest rank number."""
        running = set(combination)
        for unit in reversed(self.units):
            if unit in running:
                return unit
        return None

    def sort_units(self, units: Iterable[str]) -> list[str]:
        """Sort known units by rank; unknown units go last."""
        position = {unit: i for i, unit in enumerate(self.units)}
        return sorted(units, key=lambda u: position.get(u, len(position)))

    def __len__(self) -> int:
        return len(self.units)

    def __iter__(self) -> Iterator[str]:
        return iter(self.units)

    def __str__(self) -> str:
        return " -> ".join(self.units)
