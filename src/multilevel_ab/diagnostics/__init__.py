"""Parameter-recovery diagnostics."""

from multilevel_ab.diagnostics import recovery

__all__ = ["recovery"]
