"""
Frequentist Estimates of the Interface Effect
=============================================

Pooled logistic regression of edit success on interface, a delta-method
confidence interval for the implied difference in success probability, and
paired tests on per-user success proportions.

Example Usage:
--------------
>>> from multilevel_ab.core import frequentist
>>> from multilevel_ab.data import views
>>>
>>> # Pooled logit: edit_success ~ used_new_interface
>>> pooled = frequentist.pooled_logistic_regression(views.to_model_input(df))
>>> print(f"beta1 = {pooled['beta1']:.3f} (SE {pooled['se_beta1']:.3f})")
>>>
>>> # Difference in success probability with a delta-method CI
>>> delta = frequentist.delta_method_difference(
...     pooled['beta0'], pooled['beta1'], pooled['cov_params']
... )
>>>
>>> # Paired t-test on per-user proportions
>>> paired = views.paired_interface_table(df)
>>> result = frequentist.paired_proportion_test(paired['prop_new'], paired['prop_old'])
"""

import numpy as np
import pandas as pd
import statsmodels.api as sm
from typing import Dict, Any
from scipy import stats
from scipy.special import expit

from multilevel_ab.data.views import ModelInput


def pooled_logistic_regression(
    model_input: ModelInput,
    alpha: float = 0.05,
) -> Dict[str, Any]:
    """
    Logistic regression of the response on the interface flag, ignoring users.

    Every attempt is treated as independent, so attempts from very active
    users dominate the estimate and the standard errors ignore the
    clustering of attempts within users.

    Parameters
    ----------
    model_input : ModelInput
        Response, interface flag and user ids
    alpha : float, default=0.05
        Significance level for the Wald intervals

    Returns
    -------
    dict
        Dictionary with keys:
        - beta0, beta1: Intercept and interface coefficient (log-odds)
        - se_beta0, se_beta1: Standard errors
        - p_value_beta1: Wald test p-value for beta1
        - ci_beta1: (lower, upper) Wald CI for beta1
        - odds_ratio: exp(beta1)
        - ci_odds_ratio: (lower, upper) CI for the odds ratio
        - cov_params: 2x2 covariance of (beta0, beta1)
        - n_obs: Number of attempts
        - converged: Whether the optimizer converged
        - result: statsmodels results object

    Raises
    ------
    ValueError
        If both interface values are not present (beta1 is not identified)
    """
    if not 0 < alpha < 1:
        raise ValueError("alpha must be in (0, 1)")
    if np.unique(model_input.fixed_predictor).size < 2:
        raise ValueError("fixed_predictor must contain both 0 and 1")

    exog = pd.DataFrame({
        'intercept': np.ones(model_input.n_obs),
        'used_new_interface': model_input.fixed_predictor,
    })
    result = sm.Logit(model_input.response, exog).fit(disp=0)

    params = result.params
    bse = result.bse
    z_critical = stats.norm.ppf(1 - alpha / 2)

    beta1 = params['used_new_interface']
    se_beta1 = bse['used_new_interface']
    ci_beta1 = (beta1 - z_critical * se_beta1, beta1 + z_critical * se_beta1)

    return {
        'beta0': params['intercept'],
        'beta1': beta1,
        'se_beta0': bse['intercept'],
        'se_beta1': se_beta1,
        'p_value_beta1': result.pvalues['used_new_interface'],
        'ci_beta1': ci_beta1,
        'odds_ratio': np.exp(beta1),
        'ci_odds_ratio': (np.exp(ci_beta1[0]), np.exp(ci_beta1[1])),
        'cov_params': np.asarray(result.cov_params()),
        'n_obs': model_input.n_obs,
        'converged': bool(result.mle_retvals.get('converged', True)),
        'result': result,
    }


def delta_method_difference(
    beta0: float,
    beta1: float,
    cov: np.ndarray,
    alpha: float = 0.05,
) -> Dict[str, float]:
    """
    Difference in success probability implied by a logit fit, with a
    delta-method confidence interval.

    Parameters
    ----------
    beta0 : float
        Intercept (log-odds of success with the old interface)
    beta1 : float
        Interface coefficient
    cov : np.ndarray
        2x2 covariance matrix of (beta0, beta1)
    alpha : float, default=0.05
        Significance level

    Returns
    -------
    dict
        Dictionary with keys:
        - p_old: expit(beta0)
        - p_new: expit(beta0 + beta1)
        - difference: p_new - p_old
        - se: Delta-method standard error of the difference
        - ci_lower, ci_upper: Normal-approximation CI bounds
        - relative_lift: difference / p_old

    Notes
    -----
    - g(b0, b1) = expit(b0 + b1) - expit(b0)
    - Gradient: [p_new(1-p_new) - p_old(1-p_old), p_new(1-p_new)]
    - Var[g] ≈ ∇g' Σ ∇g
    """
    cov = np.asarray(cov, dtype=float)
    if cov.shape != (2, 2):
        raise ValueError("cov must be a 2x2 matrix")
    if not np.allclose(cov, cov.T):
        raise ValueError("cov must be symmetric")
    if np.any(np.linalg.eigvalsh(cov) < -1e-12):
        raise ValueError("cov must be positive semidefinite")

    p_old = expit(beta0)
    p_new = expit(beta0 + beta1)
    difference = p_new - p_old

    gradient = np.array([
        p_new * (1 - p_new) - p_old * (1 - p_old),
        p_new * (1 - p_new),
    ])
    se = np.sqrt(max(gradient @ cov @ gradient, 0.0))

    z_critical = stats.norm.ppf(1 - alpha / 2)

    return {
        'p_old': p_old,
        'p_new': p_new,
        'difference': difference,
        'se': se,
        'ci_lower': difference - z_critical * se,
        'ci_upper': difference + z_critical * se,
        'relative_lift': difference / p_old if p_old > 0 else np.nan,
    }


def paired_proportion_test(
    prop_new: np.ndarray,
    prop_old: np.ndarray,
    alpha: float = 0.05,
    method: str = 't-test',
) -> Dict[str, Any]:
    """
    Paired test of per-user success proportions under the two interfaces.

    Parameters
    ----------
    prop_new : np.ndarray
        Per-user success proportion with the new interface
    prop_old : np.ndarray
        Per-user success proportion with the old interface (same users,
        same order)
    alpha : float, default=0.05
        Significance level
    method : str, default='t-test'
        't-test' (scipy.stats.ttest_rel) or 'wilcoxon' (signed-rank)

    Returns
    -------
    dict
        Dictionary with keys:
        - n_pairs: Number of users
        - mean_new, mean_old: Mean proportions
        - mean_difference: Mean of prop_new - prop_old
        - statistic: Test statistic
        - p_value: Two-sided p-value
        - ci_lower, ci_upper: t interval for the mean difference
        - significant: Whether p_value < alpha
        - method: Test used

    Notes
    -----
    - Each user counts once regardless of how many attempts they made
    - Users who never tried one interface have no pair; callers should
      build the inputs from ``views.paired_interface_table``
    """
    prop_new = np.asarray(prop_new, dtype=float)
    prop_old = np.asarray(prop_old, dtype=float)

    if len(prop_new) != len(prop_old):
        raise ValueError("prop_new and prop_old must have the same length")
    if len(prop_new) < 2:
        raise ValueError("Need at least 2 paired observations")
    if method not in ('t-test', 'wilcoxon'):
        raise ValueError("method must be 't-test' or 'wilcoxon'")

    differences = prop_new - prop_old
    n_pairs = len(differences)
    mean_difference = differences.mean()

    if method == 't-test':
        statistic, p_value = stats.ttest_rel(prop_new, prop_old)
    else:
        statistic, p_value = stats.wilcoxon(prop_new, prop_old)

    se = differences.std(ddof=1) / np.sqrt(n_pairs)
    t_critical = stats.t.ppf(1 - alpha / 2, df=n_pairs - 1)

    return {
        'n_pairs': n_pairs,
        'mean_new': prop_new.mean(),
        'mean_old': prop_old.mean(),
        'mean_difference': mean_difference,
        'statistic': statistic,
        'p_value': p_value,
        'ci_lower': mean_difference - t_critical * se,
        'ci_upper': mean_difference + t_critical * se,
        'significant': p_value < alpha,
        'method': method,
    }


if __name__ == "__main__":
    # Demo
    from multilevel_ab.simulation import SimulationConfig, generator
    from multilevel_ab.data import views

    print("=" * 80)
    print("Frequentist Estimates Demo")
    print("=" * 80)

    config = SimulationConfig()
    df = generator.simulate_population(config)

    print("\n📈 POOLED LOGISTIC REGRESSION")
    print("-" * 80)
    pooled = pooled_logistic_regression(views.to_model_input(df))
    print(f"beta0: {pooled['beta0']:.3f} (true {config.beta0})")
    print(f"beta1: {pooled['beta1']:.3f} (true {config.beta1})")
    print(f"95% CI beta1: [{pooled['ci_beta1'][0]:.3f}, {pooled['ci_beta1'][1]:.3f}]")

    delta = delta_method_difference(pooled['beta0'], pooled['beta1'], pooled['cov_params'])
    print(f"P(success) old: {delta['p_old']:.2%}, new: {delta['p_new']:.2%}")
    print(f"Difference: {delta['difference']*100:.2f}pp "
          f"[{delta['ci_lower']*100:.2f}, {delta['ci_upper']*100:.2f}]")

    print("\n👥 PAIRED T-TEST (per-user proportions)")
    print("-" * 80)
    paired = views.paired_interface_table(df)
    result = paired_proportion_test(paired['prop_new'], paired['prop_old'])
    print(f"Users with both interfaces: {result['n_pairs']}")
    print(f"Mean difference: {result['mean_difference']*100:.2f}pp")
    print(f"t = {result['statistic']:.3f}, p = {result['p_value']:.4f}")
