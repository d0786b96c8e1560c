"""
Simulation Parameters
=====================

Parameters of the data-generating process for the edit-attempt study.

The process has two levels:
- User level: baseline log-odds, number of edit attempts, and propensity
  to use the new interface (bimodal for very active users)
- Attempt level: interface assignment and Bernoulli edit outcome

Example Usage:
--------------
>>> from multilevel_ab.simulation.config import SimulationConfig
>>>
>>> config = SimulationConfig(n_users=200, random_seed=7)
>>> config.exponential_rate
0.02
>>> small = config.with_overrides(n_users=10)
"""

import math
import numpy as np
from dataclasses import dataclass, replace
from typing import Tuple


@dataclass(frozen=True)
class SimulationConfig:
    """Container for the global parameters of one simulation run."""

    # Fixed effects on the log-odds scale
    beta0: float = -0.7
    beta1: float = 0.8

    n_users: int = 100

    # Users with more attempts than this are "active" power users
    active_threshold: int = 150
    # Propensities an active user is assigned (avoider, adopter)
    active_override_probs: Tuple[float, float] = (0.05, 0.85)
    # Beta(a, b) propensity for typical users
    typical_beta_shape: Tuple[float, float] = (1.5, 1.5)

    # Mean attempts per user (exponential scale = 1 / rate)
    mean_trials_scale: float = 50.0
    # Sd of the per-user deviation from beta0
    intercept_sd: float = 0.75

    random_seed: int = 42

    def __post_init__(self):
        if not (math.isfinite(self.beta0) and math.isfinite(self.beta1)):
            raise ValueError("beta0 and beta1 must be finite")
        if not _is_integer(self.n_users):
            raise ValueError("n_users must be an integer")
        if self.n_users <= 0:
            raise ValueError("n_users must be positive")
        if not _is_integer(self.active_threshold):
            raise ValueError("active_threshold must be an integer")
        if self.active_threshold < 0:
            raise ValueError("active_threshold must be non-negative")

        if len(self.active_override_probs) != 2:
            raise ValueError("active_override_probs must have exactly 2 elements")
        if any(not 0 <= p <= 1 for p in self.active_override_probs):
            raise ValueError("active_override_probs must be in [0, 1]")

        if len(self.typical_beta_shape) != 2:
            raise ValueError("typical_beta_shape must have exactly 2 elements")
        if any(s <= 0 for s in self.typical_beta_shape):
            raise ValueError("typical_beta_shape parameters must be positive")

        if self.mean_trials_scale <= 0:
            raise ValueError("mean_trials_scale must be positive")
        if self.intercept_sd <= 0:
            raise ValueError("intercept_sd must be positive")

    @property
    def exponential_rate(self) -> float:
        """Rate of the exponential draw for the number of attempts."""
        return 1.0 / self.mean_trials_scale

    def with_overrides(self, **changes) -> "SimulationConfig":
        """Return a validated copy with some fields replaced."""
        return replace(self, **changes)


def _is_integer(value) -> bool:
    """True for Python and numpy integers, False for bools and floats."""
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))
