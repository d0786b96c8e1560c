"""
Edit-Interface Study Pipeline

Simulates users making edit attempts with an old and a new editing interface,
then recovers the interface effect with four competing methods.

Use Case: Comparing inference methods on data nested within users, where a
few very active users contribute most of the attempts

Pipeline Steps:
1. Simulate the population (known beta0, beta1)
2. Summarize the dataset
3. Pooled logistic regression + delta-method CI
4. Pooled logistic regression without the most active users
5. Random-intercept logistic regression
6. Bayesian hierarchical logistic model (PyMC)
7. Paired t-test on per-user success proportions
8. Parameter recovery table
"""

import numpy as np
from typing import Dict, Any, Optional

from multilevel_ab.simulation import generator
from multilevel_ab.simulation.config import SimulationConfig
from multilevel_ab.data import views
from multilevel_ab.core import frequentist, multilevel
from multilevel_ab.diagnostics import recovery

N_STEPS = 8


def run_interface_study(
    config: Optional[SimulationConfig] = None,
    top_k: int = 10,
    run_multilevel: bool = True,
    run_bayesian: bool = True,
    bayes_kwargs: Optional[Dict[str, Any]] = None,
    verbose: bool = True,
) -> Dict[str, Any]:
    """
    Run the complete simulation and inference study.

    Parameters
    ----------
    config : SimulationConfig, optional
        Simulation parameters. Default: ``SimulationConfig()`` (100 users,
        seed 42, beta0=-0.7, beta1=0.8)
    top_k : int, default=10
        Number of most active users dropped in the sensitivity refit
    run_multilevel : bool, default=True
        Fit the random-intercept logistic regression
    run_bayesian : bool, default=True
        Sample the Bayesian hierarchical model (slowest step)
    bayes_kwargs : dict, optional
        Extra arguments for ``bayesian.hierarchical_logit_posterior``.
        ``random_seed`` defaults to ``config.random_seed``.
    verbose : bool, default=True
        Print detailed progress and results.

    Returns
    -------
    Dict[str, Any]
        Results of every step: ``config``, ``data``, ``data_summary``,
        ``most_active``, ``pooled``, ``pooled_delta``,
        ``pooled_excluding_active``, ``multilevel``, ``bayesian``,
        ``paired_table``, ``paired_test``, ``recovery``. Skipped steps
        are None.

    Examples
    --------
    >>> results = run_interface_study(run_bayesian=False, verbose=False)
    >>> results['recovery'][['method', 'beta1_hat']]
    """
    if config is None:
        config = SimulationConfig()

    results = {
        'config': config,
        'multilevel': None,
        'bayesian': None,
        'paired_test': None,
    }

    # ========================================================================
    # STEP 1: Simulate Data
    # ========================================================================
    if verbose:
        print("=" * 70)
        print("EDIT-INTERFACE MULTILEVEL SIMULATION STUDY")
        print("=" * 70)
        print(f"\n[1/{N_STEPS}] Simulating {config.n_users} users (seed={config.random_seed})...")

    df = generator.simulate_population(config)
    results['data'] = df

    if verbose:
        print(f"   ✓ Generated {len(df):,} edit attempts")
        print(f"   ✓ True beta0 = {config.beta0}, true beta1 = {config.beta1}")

    # ========================================================================
    # STEP 2: Dataset Summary
    # ========================================================================
    if verbose:
        print(f"\n[2/{N_STEPS}] Summarizing dataset...")

    results['data_summary'] = recovery.summarize_dataset(df, active_threshold=config.active_threshold)
    results['most_active'] = views.most_active_users(df, k=top_k)

    if verbose:
        summary = results['data_summary']
        top = results['most_active']
        print(f"   ✓ Attempts per user: mean {summary['mean_attempts_per_user']:.1f}, "
              f"max {summary['max_attempts_per_user']}")
        print(f"   ✓ Active users (> {config.active_threshold} attempts): {summary['n_active_users']}")
        print(f"   ✓ New interface share: {summary['new_interface_share']:.2%}")
        print(f"   ✓ Success rate (old): {summary['success_rate_old']:.2%}")
        print(f"   ✓ Success rate (new): {summary['success_rate_new']:.2%}")
        print(f"   ✓ Top {top['n_users']} users make {top['share_of_edits']:.2%} of all attempts "
              f"({top['total_edits']:,} attempts, {top['edits_with_new_interface']:,} with new interface)")

    # ========================================================================
    # STEP 3: Pooled Logistic Regression
    # ========================================================================
    if verbose:
        print(f"\n[3/{N_STEPS}] Pooled logistic regression (all attempts independent)...")

    model_input = views.to_model_input(df)
    results['pooled'] = frequentist.pooled_logistic_regression(model_input)
    pooled = results['pooled']
    results['pooled_delta'] = frequentist.delta_method_difference(
        pooled['beta0'], pooled['beta1'], pooled['cov_params']
    )

    if verbose:
        delta = results['pooled_delta']
        print(f"   ✓ beta1 = {pooled['beta1']:.3f} "
              f"[{pooled['ci_beta1'][0]:.3f}, {pooled['ci_beta1'][1]:.3f}]")
        print(f"   ✓ Odds ratio = {pooled['odds_ratio']:.3f}")
        print(f"   ✓ P(success): old {delta['p_old']:.2%} → new {delta['p_new']:.2%}")
        print(f"   ✓ Difference = {delta['difference']*100:.2f}pp "
              f"[{delta['ci_lower']*100:.2f}, {delta['ci_upper']*100:.2f}] (delta method)")
        if not pooled['converged']:
            print(f"   ⚠️  Optimizer did not report convergence")

    # ========================================================================
    # STEP 4: Sensitivity - Drop Most Active Users
    # ========================================================================
    if verbose:
        print(f"\n[4/{N_STEPS}] Pooled logistic regression without the top {top_k} users...")

    reduced = views.exclude_users(df, results['most_active']['user_ids'])
    results['pooled_excluding_active'] = None

    if reduced['used_new_interface'].nunique() == 2:
        results['pooled_excluding_active'] = frequentist.pooled_logistic_regression(
            views.to_model_input(reduced)
        )
        if verbose:
            excl = results['pooled_excluding_active']
            print(f"   ✓ Attempts remaining: {excl['n_obs']:,}")
            print(f"   ✓ beta1 = {excl['beta1']:.3f} "
                  f"[{excl['ci_beta1'][0]:.3f}, {excl['ci_beta1'][1]:.3f}]")
            print(f"   → Change vs all users: {excl['beta1'] - pooled['beta1']:+.3f}")
    elif verbose:
        print(f"   ⚠️  Remaining {len(reduced)} attempt(s) do not cover both interfaces - refit skipped")

    # ========================================================================
    # STEP 5: Random-Intercept Logistic Regression
    # ========================================================================
    if run_multilevel:
        if verbose:
            print(f"\n[5/{N_STEPS}] Random-intercept logistic regression (users as groups)...")

        results['multilevel'] = multilevel.random_intercept_logit(model_input)

        if verbose:
            mixed = results['multilevel']
            print(f"   ✓ beta1 = {mixed['beta1']:.3f} "
                  f"[{mixed['ci_beta1'][0]:.3f}, {mixed['ci_beta1'][1]:.3f}]")
            print(f"   ✓ sigma_user = {mixed['sigma_user']:.3f} (true {config.intercept_sd})")
    elif verbose:
        print(f"\n[5/{N_STEPS}] Random-intercept logistic regression skipped")

    # ========================================================================
    # STEP 6: Bayesian Hierarchical Model
    # ========================================================================
    if run_bayesian:
        if verbose:
            print(f"\n[6/{N_STEPS}] Bayesian hierarchical model (PyMC NUTS)...")

        from multilevel_ab.core import bayesian

        kwargs = {'random_seed': config.random_seed}
        kwargs.update(bayes_kwargs or {})
        results['bayesian'] = bayesian.hierarchical_logit_posterior(model_input, **kwargs)

        if verbose:
            bayes = results['bayesian']
            print(f"   ✓ beta1 posterior mean = {bayes['beta1_mean']:.3f} "
                  f"[{bayes['beta1_ci'][0]:.3f}, {bayes['beta1_ci'][1]:.3f}]")
            print(f"   ✓ sigma_user posterior mean = {bayes['sigma_user_mean']:.3f}")
            print(f"   ✓ P(beta1 > 0) = {bayes['prob_beta1_positive']:.2%}")
            if bayes['divergences'] > 0:
                print(f"   ⚠️  {bayes['divergences']} divergent transitions")
            if bayes['max_r_hat'] > 1.01:
                print(f"   ⚠️  Max R-hat = {bayes['max_r_hat']:.3f} (> 1.01)")
    elif verbose:
        print(f"\n[6/{N_STEPS}] Bayesian hierarchical model skipped")

    # ========================================================================
    # STEP 7: Paired Test on Per-User Proportions
    # ========================================================================
    if verbose:
        print(f"\n[7/{N_STEPS}] Paired t-test on per-user success proportions...")

    results['paired_table'] = views.paired_interface_table(df)
    paired = results['paired_table']

    if len(paired) >= 2:
        results['paired_test'] = frequentist.paired_proportion_test(
            paired['prop_new'].to_numpy(), paired['prop_old'].to_numpy()
        )
        if verbose:
            test = results['paired_test']
            print(f"   ✓ Users with both interfaces: {test['n_pairs']} of {config.n_users}")
            print(f"   ✓ Mean difference = {test['mean_difference']*100:.2f}pp "
                  f"[{test['ci_lower']*100:.2f}, {test['ci_upper']*100:.2f}]")
            print(f"   ✓ t = {test['statistic']:.3f}, p = {test['p_value']:.4f}")
            print(f"   Significant: {'✓ YES' if test['significant'] else '○ NO'}")
    elif verbose:
        print(f"   ⚠️  Only {len(paired)} user(s) tried both interfaces - test skipped")

    # ========================================================================
    # STEP 8: Parameter Recovery
    # ========================================================================
    if verbose:
        print(f"\n[8/{N_STEPS}] Comparing recovered parameters with the truth...")

    estimates = {'pooled': results['pooled']}
    if results['pooled_excluding_active'] is not None:
        estimates['pooled_excluding_active'] = results['pooled_excluding_active']
    if results['multilevel'] is not None:
        estimates['random_intercept'] = results['multilevel']
    if results['bayesian'] is not None:
        estimates['bayesian'] = results['bayesian']

    results['recovery'] = recovery.recovery_table(estimates, beta0=config.beta0, beta1=config.beta1)

    if verbose:
        print(f"\n{'Method':<26} {'beta0':>8} {'beta1':>8} {'error':>8} {'95% interval':>20} {'covers':>7}")
        print("-" * 82)
        for row in results['recovery'].itertuples(index=False):
            interval = f"[{row.ci_lower:.3f}, {row.ci_upper:.3f}]" if not np.isnan(row.ci_lower) else "-"
            covers = '✓' if row.covers_true_beta1 else '✗'
            print(f"{row.method:<26} {row.beta0_hat:>8.3f} {row.beta1_hat:>8.3f} "
                  f"{row.beta1_error:>+8.3f} {interval:>20} {covers:>7}")

        print(f"\n" + "=" * 70)
        print(f"✅ Study complete!")
        print(f"=" * 70 + "\n")

    return results
