"""Inference methods for the interface effect."""

import importlib

from multilevel_ab.core import frequentist, multilevel

__all__ = ["frequentist", "multilevel", "bayesian"]


def __getattr__(name: str):
    """
    Import the Bayesian module on first access.

    PyMC is slow to import, so ``multilevel_ab.core`` only loads it when
    ``core.bayesian`` is actually used.
    """
    if name == 'bayesian':
        return importlib.import_module('multilevel_ab.core.bayesian')
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
