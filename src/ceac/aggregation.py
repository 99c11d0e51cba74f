"""
Win proportions and the tables derived from them.

Wide tables have a 'wtp' column followed by one column per strategy
(strat1..stratN). Long tables have columns wtp, strategy, proportion, where
strategy is the display label as an ordered categorical.
"""

import warnings
from typing import Dict, Optional

import numpy as np
import pandas as pd
from scipy import stats

from .config import CEACConfig
from .errors import AggregationInvariantError


def _column_labels(config: CEACConfig) -> Dict[str, str]:
    return dict(zip(config.strategy_columns, config.labels))


def _strategy_columns(table: pd.DataFrame) -> list:
    return [c for c in table.columns if str(c).startswith('strat')]


# =============================================================================
# Counts and proportions
# =============================================================================

def win_counts(winners: pd.DataFrame, config: CEACConfig) -> pd.DataFrame:
    """
    Number of PSA draws won by each strategy at each threshold.

    Strategies that never win get 0. Strategy ids outside 1..num_strats are
    dropped, which shows up as a shortfall in check_proportions.
    """
    counts = pd.crosstab(winners['wtp'], winners['strategy_id'])
    counts = counts.reindex(columns=config.strategy_ids, fill_value=0)
    counts.columns = config.strategy_columns
    counts = counts.astype('int64').reset_index()
    counts.columns.name = None
    return counts


def win_proportions(winners: pd.DataFrame, config: CEACConfig) -> pd.DataFrame:
    """
    Fraction of the config.num_runs draws won by each strategy, per threshold.

    Returns:
        Wide table: wtp, strat1..stratN, sorted by wtp
    """
    counts = win_counts(winners, config)
    props = counts.copy()
    cols = config.strategy_columns
    props[cols] = counts[cols].astype('float64') / config.num_runs
    return props


def check_proportions(
    proportions: pd.DataFrame,
    tolerance: float = 1e-9,
    strict: bool = False
) -> pd.DataFrame:
    """
    Check that win proportions sum to 1 at every threshold.

    Args:
        proportions: Wide or long proportion table
        tolerance: Allowed absolute deviation from 1
        strict: Raise instead of warning when a threshold fails

    Returns:
        DataFrame (wtp, total) of the failing thresholds; empty if all pass

    Raises:
        AggregationInvariantError: if strict and any threshold fails
    """
    if 'proportion' in proportions.columns:
        totals = proportions.groupby('wtp')['proportion'].sum()
    else:
        cols = _strategy_columns(proportions)
        totals = proportions.set_index('wtp')[cols].sum(axis=1)

    ok = np.isclose(totals.to_numpy(dtype=float), 1.0, rtol=0.0, atol=tolerance)
    failures = totals[~ok].rename('total').reset_index()

    if not failures.empty:
        pairs = ", ".join(
            f"wtp={w:,.2f}: {t:.6f}"
            for w, t in zip(failures['wtp'], failures['total'])
        )
        message = (
            f"Win proportions do not sum to 1 at {len(failures)} "
            f"threshold(s): {pairs}"
        )
        if strict:
            raise AggregationInvariantError(message)
        warnings.warn(message, RuntimeWarning, stacklevel=2)

    return failures


# =============================================================================
# Reshaping
# =============================================================================

def to_long(proportions: pd.DataFrame, config: CEACConfig) -> pd.DataFrame:
    """Unpivot a wide proportion table to one row per (wtp, strategy)."""
    long = proportions.melt(
        id_vars='wtp',
        value_vars=config.strategy_columns,
        var_name='strategy',
        value_name='proportion'
    )
    long['strategy'] = pd.Categorical(
        long['strategy'].map(_column_labels(config)),
        categories=config.labels,
        ordered=True
    )
    return long.sort_values(['wtp', 'strategy'], kind='stable').reset_index(drop=True)


def to_wide(long: pd.DataFrame, config: CEACConfig) -> pd.DataFrame:
    """Inverse of to_long."""
    label_to_column = {v: k for k, v in _column_labels(config).items()}
    wide = long.assign(strategy=long['strategy'].astype(str)).pivot(
        index='wtp', columns='strategy', values='proportion'
    )
    wide = wide.rename(columns=label_to_column)[config.strategy_columns]
    wide = wide.reset_index()
    wide.columns.name = None
    return wide


# =============================================================================
# Additional summaries
# =============================================================================

def proportion_intervals(
    counts: pd.DataFrame,
    config: CEACConfig,
    alpha: float = 0.05
) -> pd.DataFrame:
    """
    Clopper-Pearson intervals for each win proportion.

    A CEAC estimated from a finite number of PSA draws carries Monte Carlo
    error; these bounds give its size.

    Args:
        counts: Output of win_counts
        config: Supplies num_runs and labels
        alpha: 1 - confidence level

    Returns:
        Long table: wtp, strategy, proportion, lower, upper
    """
    n = config.num_runs
    long = to_long(counts, config).rename(columns={'proportion': 'wins'})
    k = long['wins'].to_numpy(dtype=float)

    with np.errstate(invalid='ignore'):
        lower = stats.beta.ppf(alpha / 2, k, n - k + 1)
        upper = stats.beta.ppf(1 - alpha / 2, k + 1, n - k)

    long['proportion'] = k / n
    long['lower'] = np.where(k == 0, 0.0, lower)
    long['upper'] = np.where(k == n, 1.0, upper)
    return long[['wtp', 'strategy', 'proportion', 'lower', 'upper']]


def expected_nmb(expanded: pd.DataFrame, config: CEACConfig) -> pd.DataFrame:
    """Mean NMB over PSA draws, per strategy and threshold (wide)."""
    means = (
        expanded.groupby(['wtp', 'strategy_id'])['nmb']
        .mean()
        .unstack('strategy_id')
        .reindex(columns=config.strategy_ids)
    )
    means.columns = config.strategy_columns
    return means.reset_index()


def acceptability_frontier(
    expanded: pd.DataFrame,
    proportions: pd.DataFrame,
    config: CEACConfig
) -> pd.DataFrame:
    """
    Cost-effectiveness acceptability frontier.

    At each threshold the optimal strategy is the one with the highest
    expected NMB (first in strategy order on ties). The frontier is its
    win probability, which can be below that of another strategy when the
    NMB distributions are skewed.

    Returns:
        DataFrame: wtp, strategy_id, strategy, expected_nmb, proportion
    """
    means = expected_nmb(expanded, config).set_index('wtp')
    props = proportions.set_index('wtp')

    best_col = means.idxmax(axis=1)
    labels = _column_labels(config)
    rows = []
    for wtp, col in best_col.items():
        rows.append({
            'wtp': wtp,
            'strategy_id': config.strategy_columns.index(col) + 1,
            'strategy': labels[col],
            'expected_nmb': means.at[wtp, col],
            'proportion': props.at[wtp, col],
        })
    return pd.DataFrame(rows)


def switch_points(
    proportions: pd.DataFrame,
    config: CEACConfig
) -> pd.DataFrame:
    """
    Thresholds where the strategy most likely to be cost-effective changes.

    Returns:
        DataFrame: wtp, from_strategy, to_strategy
    """
    labels = _column_labels(config)
    modal = (
        proportions.sort_values('wtp')
        .set_index('wtp')[config.strategy_columns]
        .idxmax(axis=1)
        .map(labels)
    )
    previous = modal.shift(1)
    changed = previous.notna() & (modal != previous)
    return pd.DataFrame({
        'wtp': modal.index[changed.to_numpy()],
        'from_strategy': previous[changed].to_numpy(),
        'to_strategy': modal[changed].to_numpy(),
    })


def proportions_at(
    proportions: pd.DataFrame,
    config: CEACConfig,
    wtp: float,
    atol: Optional[float] = None
) -> Dict[str, float]:
    """
    Win proportions by label at the sweep threshold nearest to wtp.

    Raises:
        KeyError: if atol is given and no threshold lies within it
    """
    wtps = proportions['wtp'].to_numpy(dtype=float)
    i = int(np.argmin(np.abs(wtps - wtp)))
    if atol is not None and abs(wtps[i] - wtp) > atol:
        raise KeyError(f"No threshold within {atol} of {wtp}")
    row = proportions.iloc[i]
    return {label: float(row[col]) for col, label in _column_labels(config).items()}
