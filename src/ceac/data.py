"""
Synthetic PSA output for demos and tests.

Strategies are ordered by screening intensity: each step up costs more and
buys a smaller QALY gain than the last, so the cost-effective strategy moves
up the ladder as willingness to pay rises. Per-draw noise is shared across
strategies within a run, as it would be when all strategies are evaluated
on the same sampled parameter set.
"""

from typing import Optional

import numpy as np
import pandas as pd

from .config import CEACConfig
from .schema import PSA_COLUMNS


def strategy_means(
    num_strats: int,
    base_cost: float = 1000.0,
    cost_step: float = 600.0,
    base_qaly: float = 20.0,
    qaly_step: float = 0.03
) -> pd.DataFrame:
    """
    Mean discounted cost and QALYs per strategy.

    Step k (strategy k -> k+1) adds cost_step * k and qaly_step / k, giving
    incremental ratios of (cost_step / qaly_step) * k**2.
    """
    steps = np.arange(1, num_strats)
    cost = base_cost + np.concatenate([[0.0], np.cumsum(cost_step * steps)])
    qaly = base_qaly + np.concatenate([[0.0], np.cumsum(qaly_step / steps)])
    return pd.DataFrame({
        'strategy_id': np.arange(1, num_strats + 1),
        'disc_cost': cost,
        'disc_qaly': qaly,
    })


def generate_psa_results(
    config: Optional[CEACConfig] = None,
    cost_sd: float = 0.10,
    qaly_sd: float = 0.02,
    strategy_qaly_sd: float = 0.005,
    seed: Optional[int] = None
) -> pd.DataFrame:
    """
    Generate a PSA result table with the full 15-column schema.

    Args:
        config: Run and strategy counts (default CEACConfig())
        cost_sd: Log-scale sd of the per-run cost multiplier
        qaly_sd: sd of the per-run QALY shift, shared by all strategies
        strategy_qaly_sd: sd of independent per-row QALY noise
        seed: Random seed for reproducibility

    Returns:
        DataFrame ordered by psa_run_num then strategy_id
    """
    if seed is not None:
        np.random.seed(seed)

    if config is None:
        config = CEACConfig()

    n_runs = config.num_runs
    n_strats = config.num_strats
    means = strategy_means(n_strats)

    strategy_id = np.tile(means['strategy_id'].to_numpy(), n_runs)
    psa_run_num = np.repeat(np.arange(1, n_runs + 1), n_strats)
    n_rows = n_runs * n_strats

    cost_mult = np.repeat(np.random.lognormal(0.0, cost_sd, n_runs), n_strats)
    qaly_shift = np.repeat(np.random.normal(0.0, qaly_sd, n_runs), n_strats)

    disc_cost = np.tile(means['disc_cost'].to_numpy(), n_runs) * cost_mult
    disc_qaly = (
        np.tile(means['disc_qaly'].to_numpy(), n_runs)
        + qaly_shift
        + np.random.normal(0.0, strategy_qaly_sd, n_rows)
    )

    # Undiscounted and min-utility variants are fixed scalings
    qaly_mult = disc_qaly * 1.5
    lifespan = qaly_mult / 0.85

    screens = np.random.poisson(2.0 * (strategy_id - 1) + 0.1)
    detected = np.random.poisson(0.5 * strategy_id)
    missed = np.random.poisson(np.maximum(3.0 - 0.5 * strategy_id, 0.1))
    complications = np.random.poisson(0.05 * screens + 0.01)
    deaths = np.random.poisson(0.2 * missed + 0.05)

    df = pd.DataFrame({
        'strategy_id': strategy_id,
        'psa_run_num': psa_run_num,
        'run_id': np.arange(1, n_rows + 1),
        'avg_lifespan': lifespan,
        'avg_cost': disc_cost * 1.4,
        'avg_disc_cost': disc_cost,
        'avg_qaly_min': qaly_mult * 1.02,
        'avg_disc_qaly_min': disc_qaly * 1.02,
        'avg_qaly_mult': qaly_mult,
        'avg_disc_qaly_mult': disc_qaly,
        'n_screens': screens,
        'n_cases_detected': detected,
        'n_cases_missed': missed,
        'n_complications': complications,
        'n_deaths': deaths,
    })
    return df[PSA_COLUMNS]
