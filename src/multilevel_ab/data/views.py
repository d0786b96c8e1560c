"""
Derived Views of Edit-Attempt Data
==================================

Read-only transformations of a simulated dataset used by the inference
methods: the most-active-user subset, the paired per-user table, per-user
summaries, and the typed input handed to every model fit.

None of these functions modifies the DataFrame it receives.

Example Usage:
--------------
>>> from multilevel_ab.data import views
>>>
>>> top = views.most_active_users(df, k=10)
>>> without_top = views.exclude_users(df, top['user_ids'])
>>>
>>> paired = views.paired_interface_table(df)
>>> print(f"{len(paired)} users tried both interfaces")
>>>
>>> model_input = views.to_model_input(df)
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from typing import Dict, Iterable, Any

PAIRED_COLUMNS = [
    'user_id',
    'n_old',
    'successes_old',
    'n_new',
    'successes_new',
    'prop_old',
    'prop_new',
    'difference',
]


def most_active_users(df: pd.DataFrame, k: int = 10) -> Dict[str, Any]:
    """
    Find the ``k`` users with the most edit attempts.

    Parameters
    ----------
    df : pd.DataFrame
        Edit attempts with ``user_id``, ``used_new_interface``, ``edit_success``
    k : int, default=10
        Number of users to select

    Returns
    -------
    dict
        Dictionary with keys:
        - user_ids: Selected user ids, most active first
        - trial_counts: Attempts per selected user
        - n_users: Number of users selected (``min(k, distinct users)``)
        - total_edits: Attempts by the selected users
        - edits_with_new_interface: Of which with the new interface
        - successes_with_new_interface: Successful new-interface attempts
        - successes_without_new_interface: Successful old-interface attempts
        - share_of_edits: Fraction of all attempts made by the selected users

    Notes
    -----
    Counts are ranked with a stable sort over user ids in ascending order,
    so equal counts at the cut-off go to the smaller user id.
    """
    if k < 1:
        raise ValueError("k must be at least 1")

    counts = df.groupby('user_id', sort=True, observed=True).size()
    top = counts.sort_values(ascending=False, kind='mergesort').head(k)

    subset = df[df['user_id'].isin(top.index)]
    used_new = subset['used_new_interface'] == 1

    return {
        'user_ids': list(top.index),
        'trial_counts': [int(c) for c in top.values],
        'n_users': len(top),
        'total_edits': int(len(subset)),
        'edits_with_new_interface': int(used_new.sum()),
        'successes_with_new_interface': int(subset.loc[used_new, 'edit_success'].sum()),
        'successes_without_new_interface': int(subset.loc[~used_new, 'edit_success'].sum()),
        'share_of_edits': len(subset) / len(df) if len(df) > 0 else np.nan,
    }


def exclude_users(df: pd.DataFrame, user_ids: Iterable[str]) -> pd.DataFrame:
    """Return a copy of ``df`` without the attempts of ``user_ids``."""
    return df[~df['user_id'].isin(list(user_ids))].reset_index(drop=True)


def paired_interface_table(df: pd.DataFrame) -> pd.DataFrame:
    """
    Per-user success counts and proportions under each interface.

    Only users with at least one attempt under each interface are kept;
    the others cannot contribute a within-user comparison.

    Parameters
    ----------
    df : pd.DataFrame
        Edit attempts with ``user_id``, ``used_new_interface``, ``edit_success``

    Returns
    -------
    pd.DataFrame
        One row per kept user with columns ``user_id``, ``n_old``,
        ``successes_old``, ``n_new``, ``successes_new``, ``prop_old``,
        ``prop_new`` and ``difference`` (``prop_new - prop_old``). Empty
        (same columns) when no user tried both interfaces.
    """
    if len(df) == 0:
        return pd.DataFrame(columns=PAIRED_COLUMNS)

    grouped = (
        df.groupby(['user_id', 'used_new_interface'], observed=True)['edit_success']
        .agg(['size', 'sum'])
        .unstack('used_new_interface')
    )

    table = pd.DataFrame({
        'n_old': grouped[('size', 0)] if ('size', 0) in grouped else 0,
        'successes_old': grouped[('sum', 0)] if ('sum', 0) in grouped else 0,
        'n_new': grouped[('size', 1)] if ('size', 1) in grouped else 0,
        'successes_new': grouped[('sum', 1)] if ('sum', 1) in grouped else 0,
    }, index=grouped.index).fillna(0).astype(int)

    table = table[(table['n_old'] > 0) & (table['n_new'] > 0)]
    if len(table) == 0:
        return pd.DataFrame(columns=PAIRED_COLUMNS)

    table['prop_old'] = table['successes_old'] / table['n_old']
    table['prop_new'] = table['successes_new'] / table['n_new']
    table['difference'] = table['prop_new'] - table['prop_old']

    return table.reset_index()[PAIRED_COLUMNS]


def user_summary(df: pd.DataFrame) -> pd.DataFrame:
    """
    One row per user: attempts, successes, new-interface share, and the
    latent user parameters when the dataset still carries them.
    """
    grouped = df.groupby('user_id', sort=True, observed=True)
    summary = pd.DataFrame({
        'n_attempts': grouped.size(),
        'n_successes': grouped['edit_success'].sum(),
        'new_interface_share': grouped['used_new_interface'].mean(),
        'success_rate': grouped['edit_success'].mean(),
    })

    for column in ('user_intercept', 'n_edit_attempts', 'prob_using_new_interface'):
        if column in df.columns:
            summary[column] = grouped[column].first()

    return summary.reset_index()


@dataclass(frozen=True, eq=False)
class ModelInput:
    """
    Typed input shared by every model fit.

    ``response`` and ``fixed_predictor`` are 0/1 integer arrays and
    ``group_id`` holds the user id of each observation.
    """
    response: np.ndarray
    fixed_predictor: np.ndarray
    group_id: np.ndarray
    groups: np.ndarray = field(init=False)
    group_index: np.ndarray = field(init=False)

    def __post_init__(self):
        response = np.asarray(self.response)
        predictor = np.asarray(self.fixed_predictor)
        group_id = np.asarray(self.group_id).astype(str)

        if response.ndim != 1 or predictor.ndim != 1 or group_id.ndim != 1:
            raise ValueError("response, fixed_predictor and group_id must be 1-dimensional")
        if not (len(response) == len(predictor) == len(group_id)):
            raise ValueError("response, fixed_predictor and group_id must have the same length")
        if len(response) == 0:
            raise ValueError("Need at least 1 observation")
        if not np.isin(response, [0, 1]).all():
            raise ValueError("response must contain only 0 and 1")
        if not np.isin(predictor, [0, 1]).all():
            raise ValueError("fixed_predictor must contain only 0 and 1")

        groups, group_index = np.unique(group_id, return_inverse=True)

        object.__setattr__(self, 'response', response.astype(int))
        object.__setattr__(self, 'fixed_predictor', predictor.astype(int))
        object.__setattr__(self, 'group_id', group_id)
        object.__setattr__(self, 'groups', groups)
        object.__setattr__(self, 'group_index', group_index)

    @property
    def n_obs(self) -> int:
        return len(self.response)

    @property
    def n_groups(self) -> int:
        return len(self.groups)


def to_model_input(df: pd.DataFrame) -> ModelInput:
    """Build the model input from ``edit_success``, ``used_new_interface`` and ``user_id``."""
    return ModelInput(
        response=df['edit_success'].to_numpy(),
        fixed_predictor=df['used_new_interface'].to_numpy(),
        group_id=df['user_id'].to_numpy(),
    )
