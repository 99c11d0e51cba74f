"""
Net monetary benefit across a willingness-to-pay sweep.

    nmb = wtp * avg_disc_qaly_mult - avg_disc_cost
"""

from typing import Iterable, Union

import numpy as np
import pandas as pd


EXPANDED_COLUMNS = ['strategy_id', 'psa_run_num', 'nmb', 'wtp']

ArrayLike = Union[float, np.ndarray, pd.Series]


def net_monetary_benefit(
    qaly: ArrayLike,
    cost: ArrayLike,
    wtp: float
) -> ArrayLike:
    """NMB of a health benefit at a given willingness to pay."""
    return wtp * qaly - cost


def nmb_block(psa: pd.DataFrame, wtp: float) -> pd.DataFrame:
    """NMB for every PSA row at a single threshold, in input row order."""
    return pd.DataFrame({
        'strategy_id': psa['strategy_id'].to_numpy(),
        'psa_run_num': psa['psa_run_num'].to_numpy(),
        'nmb': net_monetary_benefit(
            psa['avg_disc_qaly_mult'].to_numpy(dtype=float),
            psa['avg_disc_cost'].to_numpy(dtype=float),
            wtp
        ),
        'wtp': np.full(len(psa), float(wtp)),
    })


def expand_nmb(psa: pd.DataFrame, thresholds: Iterable[float]) -> pd.DataFrame:
    """
    Stack one NMB block per threshold.

    Args:
        psa: PSA result table
        thresholds: Willingness-to-pay values, processed in order

    Returns:
        DataFrame with EXPANDED_COLUMNS and len(psa) * len(thresholds) rows
    """
    blocks = [nmb_block(psa, t) for t in thresholds]
    if not blocks:
        return pd.DataFrame({
            'strategy_id': pd.Series(dtype='int64'),
            'psa_run_num': pd.Series(dtype='int64'),
            'nmb': pd.Series(dtype='float64'),
            'wtp': pd.Series(dtype='float64'),
        })
    return pd.concat(blocks, ignore_index=True)
