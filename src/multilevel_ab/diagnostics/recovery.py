"""
Parameter Recovery
==================

Compare the interface effect recovered by each inference method with the
true parameters of the simulation.

Example Usage:
--------------
>>> from multilevel_ab.diagnostics import recovery
>>>
>>> table = recovery.recovery_table(
...     {'pooled': pooled, 'random_intercept': mixed},
...     beta0=-0.7, beta1=0.8,
... )
>>> print(table[['method', 'beta1_hat', 'covers_true_beta1']])
"""

import numpy as np
import pandas as pd
from typing import Dict, Any, Optional

RECOVERY_COLUMNS = [
    'method',
    'beta0_hat',
    'beta1_hat',
    'beta0_error',
    'beta1_error',
    'ci_lower',
    'ci_upper',
    'covers_true_beta1',
]


def recovery_table(
    estimates: Dict[str, Dict[str, Any]],
    beta0: float,
    beta1: float,
) -> pd.DataFrame:
    """
    One row per method with its estimates and errors against the truth.

    Parameters
    ----------
    estimates : dict
        Method name -> result dict with at least ``beta0`` and ``beta1``
        and optionally ``ci_beta1`` as (lower, upper)
    beta0 : float
        True intercept
    beta1 : float
        True interface effect

    Returns
    -------
    pd.DataFrame
        Columns ``method``, ``beta0_hat``, ``beta1_hat``, ``beta0_error``,
        ``beta1_error`` (estimate - truth), ``ci_lower``, ``ci_upper`` and
        ``covers_true_beta1`` (None when the method has no interval)
    """
    rows = []
    for method, result in estimates.items():
        if 'beta0' not in result or 'beta1' not in result:
            raise ValueError(f"Estimates for '{method}' must contain 'beta0' and 'beta1'")

        ci = result.get('ci_beta1')
        ci_lower, ci_upper = ci if ci is not None else (np.nan, np.nan)
        covers = bool(ci_lower <= beta1 <= ci_upper) if ci is not None else None

        rows.append({
            'method': method,
            'beta0_hat': float(result['beta0']),
            'beta1_hat': float(result['beta1']),
            'beta0_error': float(result['beta0']) - beta0,
            'beta1_error': float(result['beta1']) - beta1,
            'ci_lower': float(ci_lower),
            'ci_upper': float(ci_upper),
            'covers_true_beta1': covers,
        })

    return pd.DataFrame(rows, columns=RECOVERY_COLUMNS)


def summarize_dataset(
    df: pd.DataFrame,
    active_threshold: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Headline numbers of a simulated dataset.

    Parameters
    ----------
    df : pd.DataFrame
        Edit attempts
    active_threshold : int, optional
        When given and the latent ``n_edit_attempts`` column is present,
        also count users above the threshold

    Returns
    -------
    dict
        Dictionary with keys:
        - n_users, n_attempts: Distinct users and total attempts
        - mean_attempts_per_user, max_attempts_per_user
        - new_interface_share: Fraction of attempts with the new interface
        - success_rate_old, success_rate_new: Success rates per interface
        - n_active_users: Users above ``active_threshold`` (or None)
    """
    per_user = df.groupby('user_id', observed=True).size()
    used_new = df['used_new_interface'] == 1

    n_active_users = None
    if active_threshold is not None and 'n_edit_attempts' in df.columns:
        attempts = df.groupby('user_id', observed=True)['n_edit_attempts'].first()
        n_active_users = int((attempts > active_threshold).sum())

    return {
        'n_users': int(per_user.size),
        'n_attempts': int(len(df)),
        'mean_attempts_per_user': float(per_user.mean()) if per_user.size else np.nan,
        'max_attempts_per_user': int(per_user.max()) if per_user.size else 0,
        'new_interface_share': float(used_new.mean()) if len(df) else np.nan,
        'success_rate_old': float(df.loc[~used_new, 'edit_success'].mean()) if (~used_new).any() else np.nan,
        'success_rate_new': float(df.loc[used_new, 'edit_success'].mean()) if used_new.any() else np.nan,
        'n_active_users': n_active_users,
    }
