"""Data-generating process for the edit-attempt study."""

from multilevel_ab.simulation import config, random_variates, generator
from multilevel_ab.simulation.config import SimulationConfig

__all__ = ["SimulationConfig", "config", "random_variates", "generator"]
