"""Derived views over simulated edit-attempt data."""

from multilevel_ab.data import views

__all__ = ["views"]
