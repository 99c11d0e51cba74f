"""
Shared fixtures for ceac tests.
"""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from ceac import CEACConfig, PSA_COLUMNS


@pytest.fixture
def psa_factory():
    """
    Build a PSA table from per-row (strategy_id, psa_run_num, qaly, cost).

    Columns not used by the pipeline are filled with plausible constants.
    """
    def make(rows):
        rows = list(rows)
        n = len(rows)
        strategy_id, run_num, qaly, cost = (np.array(col) for col in zip(*rows))
        df = pd.DataFrame({
            'strategy_id': strategy_id.astype('int64'),
            'psa_run_num': run_num.astype('int64'),
            'run_id': np.arange(1, n + 1),
            'avg_lifespan': np.full(n, 70.0),
            'avg_cost': cost.astype(float) * 1.4,
            'avg_disc_cost': cost.astype(float),
            'avg_qaly_min': qaly.astype(float) * 1.5,
            'avg_disc_qaly_min': qaly.astype(float),
            'avg_qaly_mult': qaly.astype(float) * 1.5,
            'avg_disc_qaly_mult': qaly.astype(float),
            'n_screens': np.zeros(n, dtype='int64'),
            'n_cases_detected': np.zeros(n, dtype='int64'),
            'n_cases_missed': np.zeros(n, dtype='int64'),
            'n_complications': np.zeros(n, dtype='int64'),
            'n_deaths': np.zeros(n, dtype='int64'),
        })
        return df[PSA_COLUMNS]
    return make


@pytest.fixture
def two_strategy_config():
    """2 strategies x 3 runs, thresholds 0 and 100,000."""
    return CEACConfig(
        num_runs=3,
        num_strats=2,
        wtp_min=0.0,
        wtp_max=100_000.0,
        n_thresholds=2,
        strategy_labels={1: "Cheap", 2: "Effective"},
    )


@pytest.fixture
def two_strategy_psa(psa_factory):
    """Strategy 1 wins at WTP 0, strategy 2 wins at WTP 100,000."""
    rows = []
    for run in (1, 2, 3):
        rows.append((1, run, 10.0 + 0.01 * run, 1000.0 + run))
        rows.append((2, run, 11.0 + 0.01 * run, 5000.0 + run))
    return psa_factory(rows)


@pytest.fixture
def small_config():
    """Default strategies, 40 runs, 11 thresholds."""
    return CEACConfig(num_runs=40, n_thresholds=11)
