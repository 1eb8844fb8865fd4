#!/usr/bin/env python3
"""Rank all chiller priority orders for a daily cooling load profile.

Inputs:
- chillers.csv: columns ``Chiller``, ``Capacity (TR)``, ``Type``
- load_profile.csv: first column timestamp (``2025-06-17 00:00:00``), second column load (kW)
- cop_N.csv: one file per combination size N (given in order 1, 2, ...), with
  a ``kW`` column and one COP column per combination (``CH1+CH2``)
"""

import argparse
import logging
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from chillstage.analysis.ranking import ranking_frame
from chillstage.config import ChillStageConfig
from chillstage.core.entities import Combination, Unit
from chillstage.core.performance import PerformanceTable
from chillstage.core.profile import LoadProfile
from chillstage.core.search import PriorityOrderSearch, SearchProgress

load_dotenv()

logger = logging.getLogger("rank_priority_orders")


def load_units(path: Path) -> list[Unit]:
    df = pd.read_csv(path)
    return [
        Unit(
            name=str(row["Chiller"]),
            capacity=float(row["Capacity (TR)"]),
            capacity_unit="TR",
            unit_type=str(row["Type"]) if pd.notna(row.get("Type")) else None,
        )
        for _, row in df.iterrows()
    ]


def load_profile(path: Path, hours: int) -> LoadProfile:
    df = pd.read_csv(path)
    series = pd.Series(
        pd.to_numeric(df.iloc[:, 1], errors="coerce").to_numpy(),
        index=pd.to_datetime(df.iloc[:, 0]),
    ).dropna()
    return LoadProfile.from_series(series, hours=hours)


def log_progress(progress: SearchProgress):
    logger.info(f"{progress.completed}/{progress.total} ({progress.percentage}%)")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Rank chiller priority orders by daily energy",
        epilog=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("chillers", type=Path, help="Chiller list CSV")
    parser.add_argument("profile", type=Path, help="Hourly load profile CSV")
    parser.add_argument(
        "cop", type=Path, nargs="+", help="COP table CSVs, one per combination size (1, 2, ...)"
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="YAML config file (default: environment)"
    )
    args = parser.parse_args(argv)

    config = ChillStageConfig.from_yaml(args.config) if args.config else ChillStageConfig()
    logging.basicConfig(
        level=config.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    units = load_units(args.chillers)
    profile = load_profile(args.profile, config.profile.hours)
    performance = PerformanceTable.from_frames(
        {size: pd.read_csv(p) for size, p in enumerate(args.cop, start=1)},
        load_column=config.performance.load_column,
        delimiter=config.performance.delimiter,
    )

    unmeasured = [u.name for u in units if not performance.has_data(Combination.of(u.name))]
    if unmeasured:
        logger.warning(f"No single-unit COP data for: {', '.join(unmeasured)}")

    print(f"Load: peak {profile.peak_load:.0f} kW, average {profile.average_load:.0f} kW")

    search = PriorityOrderSearch(units, performance, config.to_dict())
    groups = search.run(profile, progress_callback=log_progress)

    if not groups:
        print("No priority order produced a valid energy result.")
        return 1

    print(ranking_frame(groups).to_string(index=False))

    best = groups[0].best
    print(f"\nBest order: {best.priority_order}")
    print(best.events_frame().to_string(index=False))
    if best.shortfall_hours:
        print(f"⚠ Insufficient capacity at hours: {best.shortfall_hours}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
