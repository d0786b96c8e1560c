"""
End-to-end study pipelines.

Available pipelines:
- interface_study_pipeline: Simulate edit attempts and compare pooled,
  random-intercept, Bayesian and paired estimates of the interface effect
"""

# Lazy import: the pipeline pulls in every inference module, so importing
# the package alone stays cheap

__all__ = [
    'run_interface_study',
]


def __getattr__(name: str):
    """
    Lazy import pipeline functions on first access.

    Raises
    ------
    AttributeError
        If the requested attribute doesn't exist
    """
    if name == 'run_interface_study':
        from multilevel_ab.pipelines.interface_study_pipeline import run_interface_study
        return run_interface_study
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
