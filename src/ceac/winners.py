"""
Per-draw winner selection.

Within each (psa_run_num, wtp) group the strategy with the highest NMB wins.
When several strategies share the maximum, the first one in input row order
wins; count_ties reports where that happened.
"""

import warnings

import numpy as np
import pandas as pd

from .errors import InputSchemaError


GROUP_KEYS = ['wtp', 'psa_run_num']


def select_winners(expanded: pd.DataFrame) -> pd.DataFrame:
    """
    Pick exactly one winning row per (psa_run_num, wtp) group.

    Args:
        expanded: Output of expand_nmb

    Returns:
        Winner rows with the same columns, sorted by wtp then psa_run_num
    """
    if not np.isfinite(expanded['nmb'].to_numpy(dtype=float)).all():
        raise InputSchemaError("NMB contains missing or non-finite values")

    # idxmax returns the first position achieving the maximum
    positional = expanded.reset_index(drop=True)
    idx = positional.groupby(GROUP_KEYS, sort=True)['nmb'].idxmax()
    return positional.loc[idx.to_numpy()].reset_index(drop=True)


def count_ties(expanded: pd.DataFrame) -> pd.DataFrame:
    """
    Groups where more than one strategy reaches the maximum NMB.

    Returns:
        DataFrame with columns wtp, psa_run_num, n_tied
    """
    group_max = expanded.groupby(GROUP_KEYS)['nmb'].transform('max')
    at_max = expanded[expanded['nmb'] == group_max]
    counts = at_max.groupby(GROUP_KEYS).size()
    return counts[counts > 1].rename('n_tied').reset_index()


def warn_ties(ties: pd.DataFrame) -> None:
    """Warn when the tie-break decided any winner (ties from count_ties)."""
    if ties.empty:
        return
    thresholds = ties['wtp'].nunique()
    warnings.warn(
        f"{len(ties)} (run, threshold) group(s) across {thresholds} "
        f"threshold(s) had tied maximal NMB; the first row in input order won",
        RuntimeWarning,
        stacklevel=2
    )
