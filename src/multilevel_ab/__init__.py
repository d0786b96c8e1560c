"""
Multilevel A/B Simulation Study
===============================

Simulates users making repeated edit attempts with an old or new editing
interface under a known two-level random-effects process, then recovers the
interface effect with competing inference methods.

Modules:
--------
- simulation: Configuration, random-variate primitives, data generators
- data: Derived views (most-active users, paired per-user table, model input)
- core: Pooled logit, random-intercept logit, Bayesian model, paired tests
- diagnostics: Parameter recovery and dataset summaries
- pipelines: End-to-end study run

Example Usage:
--------------
>>> from multilevel_ab.simulation import SimulationConfig, generator
>>> from multilevel_ab.data import views
>>> from multilevel_ab.core import frequentist
>>>
>>> # Simulate 100 users (seed 42)
>>> df = generator.simulate_population(SimulationConfig())
>>>
>>> # Pooled logistic regression of edit success on interface
>>> result = frequentist.pooled_logistic_regression(views.to_model_input(df))
>>> print(f"beta1 = {result['beta1']:.3f}")

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__license__ = "MIT"

from multilevel_ab.simulation import config, random_variates, generator
from multilevel_ab.simulation.config import SimulationConfig
from multilevel_ab.data import views
from multilevel_ab.core import frequentist, multilevel

__all__ = [
    "SimulationConfig",
    "config",
    "random_variates",
    "generator",
    "views",
    "frequentist",
    "multilevel",
]
