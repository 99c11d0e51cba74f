"""
End-to-end CEAC pipeline.

load -> validate -> expand NMB -> select winners -> proportions -> check
-> reshape. Rendering is left to the caller (see plotting.plot_ceac) so the
pipeline itself has no display side effects.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import pandas as pd

from .config import CEACConfig
from .schema import coerce_psa_frame, load_psa_results, validate_psa_cardinality
from .nmb import expand_nmb
from .winners import select_winners, count_ties, warn_ties
from .aggregation import (
    win_counts,
    win_proportions,
    check_proportions,
    to_long,
    proportion_intervals,
    acceptability_frontier,
    proportions_at,
)


@dataclass
class CEACResult:
    """All intermediate and final tables of a CEAC run."""
    config: CEACConfig
    psa: pd.DataFrame
    expanded: pd.DataFrame
    winners: pd.DataFrame
    counts: pd.DataFrame
    proportions: pd.DataFrame
    long: pd.DataFrame
    failures: pd.DataFrame
    ties: pd.DataFrame
    intervals: pd.DataFrame
    frontier: pd.DataFrame
    elapsed_time: float

    @property
    def valid(self) -> bool:
        """True if proportions summed to 1 at every threshold."""
        return self.failures.empty


def run_ceac(
    psa: pd.DataFrame,
    config: Optional[CEACConfig] = None,
    validate: bool = True,
    strict: bool = True,
    alpha: float = 0.05,
    verbose: bool = False
) -> CEACResult:
    """
    Build a CEAC from a PSA result table.

    Args:
        psa: PSA result table (coerced to the schema if needed)
        config: Run/strategy counts and WTP sweep (default CEACConfig())
        validate: Check one row per (run, strategy) before expanding
        strict: Raise if proportions do not sum to 1; otherwise warn
        alpha: 1 - confidence level for the proportion intervals
        verbose: Print progress

    Returns:
        CEACResult with every intermediate table
    """
    if config is None:
        config = CEACConfig()

    start_time = time.time()
    psa = coerce_psa_frame(psa, config)
    if validate:
        validate_psa_cardinality(psa, config)

    thresholds = config.thresholds()
    if verbose:
        print(f"CEAC: {config.num_runs} runs x {config.num_strats} strategies")
        print(f"  Thresholds: {len(thresholds)} from "
              f"{config.wtp_min:,.0f} to {config.wtp_max:,.0f}")

    expanded = expand_nmb(psa, thresholds)
    winners = select_winners(expanded)
    ties = count_ties(expanded)
    warn_ties(ties)
    if verbose:
        print(f"  Expanded rows: {len(expanded):,}")
        print(f"  Winner rows:   {len(winners):,} ({len(ties)} tied groups)")

    counts = win_counts(winners, config)
    proportions = win_proportions(winners, config)
    failures = check_proportions(
        proportions, tolerance=config.tolerance, strict=strict
    )

    long = to_long(proportions, config)
    intervals = proportion_intervals(counts, config, alpha=alpha)
    frontier = acceptability_frontier(expanded, proportions, config)

    elapsed = time.time() - start_time
    if verbose:
        status = "ok" if failures.empty else f"{len(failures)} failing thresholds"
        print(f"\nDone in {elapsed:.2f}s (sum-to-1 check: {status})")

    return CEACResult(
        config=config,
        psa=psa,
        expanded=expanded,
        winners=winners,
        counts=counts,
        proportions=proportions,
        long=long,
        failures=failures,
        ties=ties,
        intervals=intervals,
        frontier=frontier,
        elapsed_time=elapsed,
    )


def run_ceac_from_csv(
    path: Union[str, Path],
    config: Optional[CEACConfig] = None,
    header: bool = True,
    **kwargs
) -> CEACResult:
    """Load a PSA result CSV and run the pipeline on it."""
    psa = load_psa_results(path, header=header)
    return run_ceac(psa, config, **kwargs)


def compare_thresholds(
    result: CEACResult,
    thresholds: Iterable[float]
) -> Dict[float, Dict[str, float]]:
    """
    Win proportions by strategy at selected thresholds.

    Each requested value is matched to the nearest threshold in the sweep.

    Returns:
        Dict mapping requested threshold -> {label: proportion}
    """
    return {
        t: proportions_at(result.proportions, result.config, t)
        for t in thresholds
    }
