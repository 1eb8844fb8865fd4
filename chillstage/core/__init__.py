"""Core modules for chiller staging analysis."""

from chillstage.core.capacity import CapacityModel
from chillstage.core.controller import StagingController
from chillstage.core.entities import Combination, ConfigurationError, PriorityOrder, Unit
from chillstage.core.performance import PerformanceTable
from chillstage.core.profile import LoadProfile
from chillstage.core.simulator import DailySimulator, SimulationTrace

__all__ = [
    "CapacityModel",
    "Combination",
    "ConfigurationError",
    "DailySimulator",
    "LoadProfile",
    "PerformanceTable",
    "PriorityOrder",
    "SimulationTrace",
    "StagingController",
    "Unit",
]
