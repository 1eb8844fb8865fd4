"""Performance table: sampled COP curves per chiller combination.

Tables are organised by combination size (1 = single chiller, 2 = pairs, ...).
Each table holds, for every combination it knows, a series of
``(load, COP)`` samples. Lookups return the COP of the sample whose load is
closest to the requested load.

Missing samples are never turned into zeros: a combination without any valid
sample yields ``None`` so callers can tell "not measured" apart from a real
(terrible) COP.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import numpy as np
import pandas as pd

from chillstage.core.entities import COMBINATION_DELIMITER, Combination

logger = logging.getLogger(__name__)

DEFAULT_LOAD_COLUMN = "kW"


class PerformanceTable:
    """Nearest-load COP lookup over per-size sample tables."""

    def __init__(self):
        # size -> combination -> (loads, cops), both float arrays in source row order
        self._tables: dict[int, dict[Combination, tuple[np.ndarray, np.ndarray]]] = {}

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_frames(
        cls,
        frames: Mapping[int, pd.DataFrame],
        load_column: str = DEFAULT_LOAD_COLUMN,
        delimiter: str = COMBINATION_DELIMITER,
    ) -> "PerformanceTable":
        """Build from one DataFrame per combination size.

        Args:
            frames: ``{size: frame}``; each frame has a load column and one
                column per combination key (e.g. ``"CH1+CH3"``).
            load_column: Name of the load column.
            delimiter: Separator used inside combination keys.
        """
        table = cls()
        for size, frame in frames.items():
            table.add_frame(int(size), frame, load_column=load_column, delimiter=delimiter)
        return table

    @classmethod
    def from_records(
        cls,
        records: Mapping[int, Iterable[Mapping[str, Any]]],
        load_column: str = DEFAULT_LOAD_COLUMN,
        delimiter: str = COMBINATION_DELIMITER,
    ) -> "PerformanceTable":
        """Build from row dicts, e.g. ``{1: [{"kW": 500, "CH1": 5.2}, ...]}``."""
        frames = {size: pd.DataFrame(list(rows)) for size, rows in records.items()}
        return cls.from_frames(frames, load_column=load_column, delimiter=delimiter)

    def add_frame(
        self,
        size: int,
        frame: pd.DataFrame,
        load_column: str = DEFAULT_LOAD_COLUMN,
        delimiter: str = COMBINATION_DELIMITER,
    ) -> None:
        """Register every combination column of ``frame`` under ``size``."""
        if frame.empty:
            return
        if load_column not in frame.columns:
            raise ValueError(f"Performance table for size {size} has no '{load_column}' column")

        loads = pd.to_numeric(frame[load_column], errors="coerce").astype(float)
        subtable = self._tables.setdefault(size, {})

        for column in frame.columns:
            if column == load_column:
                continue

            combination = Combination.parse(column, delimiter)
            if len(combination) != size:
                logger.warning(
                    f"Skipping column '{column}': {len(combination)} units in size-{size} table"
                )
                continue

            cops = pd.to_numeric(frame[column], errors="coerce").astype(float)
            mask = np.isfinite(loads) & np.isfinite(cops)
            if not mask.any():
                logger.warning(f"No valid COP samples for {combination}")
                continue

            # First column wins for a combination; later spellings are ignored
            if combination in subtable:
                logger.warning(
                    f"Ignoring column '{column}': samples for {combination} already loaded"
                )
                continue

            subtable[combination] = (
                loads[mask].to_numpy(dtype=float),
                cops[mask].to_numpy(dtype=float),
            )

        logger.debug(f"Loaded {len(subtable)} combinations for size {size}")

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def cop(self, combination: Combination, load: float) -> float | None:
        """COP of the sample closest to ``load``; ``None`` if there is no data.

        Ties between equally distant samples go to the first one in table order.
        """
        if not self.has_data(combination):
            return None

        loads, cops = self._tables[len(combination)][combination]
        # argmin returns the first index on ties
        idx = int(np.argmin(np.abs(loads - load)))
        return float(cops[idx])

    def max_cop(self, combination: Combination) -> float | None:
        """Best sampled COP of a combination."""
        if not self.has_data(combination):
            return None
        return float(np.max(self._tables[len(combination)][combination][1]))

    def has_data(self, combination: Combination) -> bool:
        return combination in self._tables.get(len(combination), {})

    def combinations(self, size: int | None = None) -> list[Combination]:
        """Known combinations, optionally restricted to one size."""
        sizes = [size] if size is not None else sorted(self._tables)
        found: list[Combination] = []
        for s in sizes:
            found.extend(sorted(self._tables.get(s, {}), key=lambda c: c.units))
        return found

    @property
    def sizes(self) -> list[int]:
        return sorted(self._tables)

    def get_summary(self) -> dict[str, Any]:
        return {
            "sizes": self.sizes,
            "combinations": {size: len(self._tables[size]) for size in self.sizes},
        }
