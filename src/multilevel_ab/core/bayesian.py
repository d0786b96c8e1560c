"""
Bayesian Hierarchical Logistic Model
====================================

Bayesian counterpart of the random-intercept logistic regression, sampled
with PyMC's NUTS sampler:

    beta0, beta1 ~ Normal(0, prior_beta_sd)
    sigma_user   ~ HalfCauchy(prior_sigma_scale)
    z_user       ~ Normal(0, 1)
    logit P(success) = beta0 + sigma_user * z_user + beta1 * used_new_interface

The user intercepts use the non-centred parameterization, which samples
without divergences when some users have only a handful of attempts.

Example Usage:
--------------
>>> from multilevel_ab.core import bayesian
>>> from multilevel_ab.data import views
>>>
>>> result = bayesian.hierarchical_logit_posterior(
...     views.to_model_input(df), draws=1000, tune=1000, random_seed=42
... )
>>> print(f"P(beta1 > 0) = {result['prob_beta1_positive']:.2%}")
>>> print(result['summary'])
"""

import numpy as np
import pymc as pm
import arviz as az
from typing import Dict, Any, Optional

from multilevel_ab.data.views import ModelInput

PARAMETERS = ['beta0', 'beta1', 'sigma_user']


def build_model(
    model_input: ModelInput,
    prior_beta_sd: float = 2.5,
    prior_sigma_scale: float = 1.0,
) -> pm.Model:
    """Build the PyMC model without sampling it."""
    coords = {'user': list(model_input.groups)}

    with pm.Model(coords=coords) as model:
        beta0 = pm.Normal('beta0', mu=0.0, sigma=prior_beta_sd)
        beta1 = pm.Normal('beta1', mu=0.0, sigma=prior_beta_sd)
        sigma_user = pm.HalfCauchy('sigma_user', beta=prior_sigma_scale)

        z_user = pm.Normal('z_user', mu=0.0, sigma=1.0, dims='user')
        user_effect = pm.Deterministic('user_effect', sigma_user * z_user, dims='user')

        logit_p = (
            beta0
            + user_effect[model_input.group_index]
            + beta1 * model_input.fixed_predictor
        )
        pm.Bernoulli('edit_success', logit_p=logit_p, observed=model_input.response)

    return model


def hierarchical_logit_posterior(
    model_input: ModelInput,
    draws: int = 1000,
    tune: int = 1000,
    chains: int = 2,
    cores: int = 1,
    target_accept: float = 0.9,
    prior_beta_sd: float = 2.5,
    prior_sigma_scale: float = 1.0,
    hdi_prob: float = 0.95,
    random_seed: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Sample the posterior of the hierarchical logistic model.

    Parameters
    ----------
    model_input : ModelInput
        Response, interface flag and user ids
    draws : int, default=1000
        Posterior draws per chain
    tune : int, default=1000
        Tuning steps per chain (discarded)
    chains : int, default=2
        Number of chains
    cores : int, default=1
        Number of chains sampled in parallel
    target_accept : float, default=0.9
        NUTS target acceptance rate
    prior_beta_sd : float, default=2.5
        Prior sd of beta0 and beta1 (weakly informative on the log-odds scale)
    prior_sigma_scale : float, default=1.0
        Scale of the half-Cauchy prior on sigma_user
    hdi_prob : float, default=0.95
        Mass of the credible intervals
    random_seed : int, optional
        Random seed for reproducibility

    Returns
    -------
    dict
        Dictionary with keys:
        - idata: arviz.InferenceData with the posterior draws
        - summary: arviz.summary table for beta0, beta1, sigma_user
        - beta0_mean, beta1_mean, sigma_user_mean: Posterior means
        - beta0_ci, beta1_ci, sigma_user_ci: Equal-tailed credible intervals
        - beta0, beta1: Posterior means (same as *_mean, for comparison tables)
        - ci_beta1: Same as beta1_ci
        - prob_beta1_positive: P(beta1 > 0 | data)
        - divergences: Number of divergent transitions
        - max_r_hat: Largest R-hat over beta0, beta1, sigma_user

    Notes
    -----
    - Divergences and poor R-hat are reported, not acted on; check them
      before trusting the estimates
    """
    if draws < 1 or tune < 0 or chains < 1:
        raise ValueError("draws and chains must be positive and tune non-negative")
    if prior_beta_sd <= 0 or prior_sigma_scale <= 0:
        raise ValueError("Prior parameters must be positive")
    if not 0 < hdi_prob < 1:
        raise ValueError("hdi_prob must be in (0, 1)")

    model = build_model(model_input, prior_beta_sd, prior_sigma_scale)

    with model:
        idata = pm.sample(
            draws=draws,
            tune=tune,
            chains=chains,
            cores=cores,
            target_accept=target_accept,
            random_seed=random_seed,
            progressbar=False,
        )

    summary = az.summary(idata, var_names=PARAMETERS, hdi_prob=hdi_prob)

    tail = (1 - hdi_prob) / 2
    result = {'idata': idata, 'summary': summary}
    for name in PARAMETERS:
        samples = idata.posterior[name].values.ravel()
        result[f'{name}_mean'] = samples.mean()
        result[f'{name}_ci'] = (np.quantile(samples, tail), np.quantile(samples, 1 - tail))

    beta1_samples = idata.posterior['beta1'].values.ravel()

    result.update({
        'beta0': result['beta0_mean'],
        'beta1': result['beta1_mean'],
        'ci_beta1': result['beta1_ci'],
        'prob_beta1_positive': (beta1_samples > 0).mean(),
        'divergences': int(idata.sample_stats['diverging'].values.sum()),
        'max_r_hat': float(summary['r_hat'].max()),
    })
    return result
