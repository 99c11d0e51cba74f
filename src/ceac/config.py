"""
Pipeline configuration.

Run counts, strategy set and the willingness-to-pay sweep are passed
explicitly to every stage rather than living as module constants.
"""

from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np


DEFAULT_STRATEGY_LABELS: Dict[int, str] = {
    1: "Never",
    2: "One-Time",
    3: "Every 2 Years",
    4: "Every 1 Year",
    5: "Every 6 Months",
}


@dataclass
class CEACConfig:
    """
    Parameters of a CEAC run.

    Args:
        num_runs: Number of PSA draws (distinct psa_run_num values)
        num_strats: Number of competing strategies per draw
        wtp_min: First willingness-to-pay threshold
        wtp_max: Last willingness-to-pay threshold (inclusive)
        n_thresholds: Number of evenly spaced thresholds in the sweep
        strategy_labels: strategy_id -> display name
        tolerance: Allowed deviation of summed proportions from 1
    """
    num_runs: int = 1000
    num_strats: int = 5
    wtp_min: float = 0.0
    wtp_max: float = 500_000.0
    n_thresholds: int = 50
    strategy_labels: Dict[int, str] = field(
        default_factory=lambda: dict(DEFAULT_STRATEGY_LABELS)
    )
    tolerance: float = 1e-9

    def __post_init__(self):
        if self.num_runs < 1:
            raise ValueError(f"num_runs must be positive, got {self.num_runs}")
        if self.num_strats < 1:
            raise ValueError(f"num_strats must be positive, got {self.num_strats}")
        if self.n_thresholds < 1:
            raise ValueError(
                f"n_thresholds must be positive, got {self.n_thresholds}"
            )
        if self.wtp_max < self.wtp_min:
            raise ValueError(
                f"wtp_max ({self.wtp_max}) is below wtp_min ({self.wtp_min})"
            )
        missing = [s for s in self.strategy_ids if s not in self.strategy_labels]
        if missing:
            raise ValueError(f"No display label for strategies {missing}")

    @property
    def strategy_ids(self) -> List[int]:
        return list(range(1, self.num_strats + 1))

    @property
    def strategy_columns(self) -> List[str]:
        """Wide-table column names, strat1..stratN."""
        return [strategy_column(s) for s in self.strategy_ids]

    @property
    def labels(self) -> List[str]:
        """Display labels in strategy_id order."""
        return [self.strategy_labels[s] for s in self.strategy_ids]

    def thresholds(self) -> np.ndarray:
        """The willingness-to-pay sweep, endpoints included."""
        return np.linspace(self.wtp_min, self.wtp_max, self.n_thresholds)


def strategy_column(strategy_id: int) -> str:
    return f"strat{strategy_id}"
