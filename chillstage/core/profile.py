"""Hourly cooling load profile."""

import math
from collections.abc import Iterable, Iterator
from typing import Any

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from chillstage.core.entities import ConfigurationError

HOURS_PER_DAY = 24


class LoadSample(BaseModel):
    """Cooling load for one hour of the day."""

    model_config = ConfigDict(frozen=True)

    hour: int = Field(ge=0)
    load: float


class LoadProfile:
    """Fixed-length, hour-ordered sequence of load samples.

    The profile is read-only once built. Construction fails fast on anything
    that would make a daily simulation meaningless: empty input, the wrong
    number of hours, gaps or disorder in the hours, negative or non-finite loads.
    """

    def __init__(self, samples: Iterable[LoadSample], hours: int | None = HOURS_PER_DAY):
        self._samples: tuple[LoadSample, ...] = tuple(samples)
        self._validate(hours)
        self._loads = np.array([s.load for s in self._samples], dtype=float)

    def _validate(self, hours: int | None):
        if not self._samples:
            raise ConfigurationError("Load profile is empty.")

        if hours is not None and len(self._samples) != hours:
            raise ConfigurationError(
                f"Load profile has {len(self._samples)} samples, expected {hours}."
            )

        for expected, sample in enumerate(self._samples):
            if sample.hour != expected:
                raise ConfigurationError(
                    f"Load profile hours must run 0..{len(self._samples) - 1} in order, "
                    f"found hour {sample.hour} at position {expected}."
                )
            if not math.isfinite(sample.load) or sample.load < 0:
                raise ConfigurationError(f"Invalid load {sample.load} at hour {sample.hour}.")

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_pairs(
        cls, pairs: Iterable[tuple[int, float]], hours: int | None = HOURS_PER_DAY
    ) -> "LoadProfile":
        ordered = sorted(pairs, key=lambda p: p[0])
        return cls(
            (LoadSample(hour=int(h), load=float(load)) for h, load in ordered), hours=hours
        )

    @classmethod
    def from_loads(cls, loads: Iterable[float], hours: int | None = HOURS_PER_DAY) -> "LoadProfile":
        return cls(
            (LoadSample(hour=h, load=float(load)) for h, load in enumerate(loads)), hours=hours
        )

    @classmethod
    def from_series(cls, series: pd.Series, hours: int | None = HOURS_PER_DAY) -> "LoadProfile":
        """Build from a Series indexed by hour, or by timestamps (hour of day is used)."""
        index = series.index
        if isinstance(index, pd.DatetimeIndex):
            hour_values = index.hour
        else:
            hour_values = index.astype(int)
        return cls.from_pairs(zip(hour_values, series.astype(float)), hours=hours)

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        hour_column: str = "hour",
        load_column: str = "load",
        hours: int | None = HOURS_PER_DAY,
    ) -> "LoadProfile":
        if hour_column not in frame.columns or load_column not in frame.columns:
            raise ConfigurationError(
                f"Load profile frame needs '{hour_column}' and '{load_column}' columns."
            )
        series = pd.Series(frame[load_column].to_numpy(), index=frame[hour_column])
        if not isinstance(series.index, pd.DatetimeIndex) and series.index.dtype == object:
            series.index = pd.to_datetime(series.index)
        return cls.from_series(series, hours=hours)

    @classmethod
    def coerce(cls, value: Any, hours: int | None = HOURS_PER_DAY) -> "LoadProfile":
        """Accept a LoadProfile, a Series or an iterable of ``(hour, load)`` pairs."""
        if isinstance(value, LoadProfile):
            return value
        if isinstance(value, pd.Series):
            return cls.from_series(value, hours=hours)
        return cls.from_pairs(list(value), hours=hours)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def loads(self) -> np.ndarray:
        return self._loads.copy()

    @property
    def peak_load(self) -> float:
        return float(self._loads.max())

    @property
    def average_load(self) -> float:
        return float(self._loads.mean())

    @property
    def total_load(self) -> float:
        return float(self._loads.sum())

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[LoadSample]:
        return iter(self._samples)

    def __getitem__(self, hour: int) -> LoadSample:
        return self._samples[hour]
