"""
Random-Variate Primitives
=========================

Named draws used throughout data generation. Every function takes the
random generator explicitly, so a run is reproducible from the seed of the
generator its caller owns; nothing here touches ``np.random`` global state.

Example Usage:
--------------
>>> from multilevel_ab.simulation import random_variates as rv
>>>
>>> rng = rv.make_rng(0)
>>> rv.normal(rng, mean=0.0, sd=0.75, size=3)
>>> rv.bernoulli(rng, p=[0.1, 0.5, 0.9])
"""

import numpy as np
from typing import List, Optional, Sequence, Union
from scipy.special import expit

ArrayLike = Union[float, Sequence[float], np.ndarray]


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create the generator that a simulation run threads through every draw."""
    return np.random.default_rng(seed)


def spawn_rngs(seed: Optional[int], n: int) -> List[np.random.Generator]:
    """
    Create ``n`` statistically independent generators from one run seed.

    Stream ``i`` depends only on ``seed`` and ``i``, so units can be
    generated in any order (or in parallel) and still reproduce.
    """
    if n <= 0:
        raise ValueError("n must be positive")
    children = np.random.SeedSequence(seed).spawn(n)
    return [np.random.default_rng(child) for child in children]


def normal(rng: np.random.Generator, mean: float, sd: float, size: int = 1) -> np.ndarray:
    """Draw ``size`` values from Normal(mean, sd)."""
    return rng.normal(loc=mean, scale=sd, size=size)


def exponential(rng: np.random.Generator, rate: float, size: int = 1) -> np.ndarray:
    """Draw ``size`` values from Exponential(rate), i.e. mean ``1 / rate``."""
    return rng.exponential(scale=1.0 / rate, size=size)


def beta(rng: np.random.Generator, a: float, b: float, size: int = 1) -> np.ndarray:
    """Draw ``size`` values from Beta(a, b)."""
    return rng.beta(a, b, size=size)


def bernoulli(
    rng: np.random.Generator,
    p: ArrayLike,
    size: Optional[int] = None,
) -> np.ndarray:
    """
    Draw Bernoulli outcomes as a 0/1 integer array.

    Parameters
    ----------
    rng : np.random.Generator
        Random generator
    p : float or array-like
        Success probability. A scalar gives ``size`` draws (default 1);
        an array gives one draw per element.
    size : int, optional
        Number of draws for scalar ``p``

    Notes
    -----
    ``p`` must lie in [0, 1]; numpy raises ``ValueError`` otherwise.
    """
    p = np.asarray(p, dtype=float)
    if p.ndim == 0 and size is None:
        size = 1
    return rng.binomial(1, p, size=size).astype(int)


def uniform_choice(rng: np.random.Generator, values: Sequence[float], size: int = 1) -> np.ndarray:
    """Draw ``size`` values uniformly at random from a finite set."""
    return rng.choice(np.asarray(values), size=size)


def inverse_logit(x: ArrayLike) -> np.ndarray:
    """Logistic sigmoid ``1 / (1 + exp(-x))``, unclamped."""
    return expit(x)


if __name__ == "__main__":
    # Demo
    print("=" * 80)
    print("Random-Variate Primitives Demo")
    print("=" * 80)

    rng = make_rng(0)
    print(f"Normal(0, 0.75):      {normal(rng, 0.0, 0.75, size=5).round(3)}")
    print(f"Exponential(1/50):    {exponential(rng, 1 / 50, size=5).round(1)}")
    print(f"Beta(1.5, 1.5):       {beta(rng, 1.5, 1.5, size=5).round(3)}")
    print(f"Bernoulli(0.3):       {bernoulli(rng, 0.3, size=10)}")
    print(f"Choice(0.05, 0.85):   {uniform_choice(rng, [0.05, 0.85], size=5)}")
    print(f"inverse_logit(-0.7):  {inverse_logit(-0.7):.4f}")
