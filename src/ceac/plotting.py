"""
CEAC rendering with matplotlib.
"""

from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib import colormaps
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.ticker import FuncFormatter

from .config import CEACConfig


def currency_formatter(symbol: str = '$') -> FuncFormatter:
    """Tick formatter rendering 100000 as $100,000."""
    return FuncFormatter(lambda x, pos: f"{symbol}{x:,.0f}")


def strategy_colours(config: CEACConfig) -> Dict[str, tuple]:
    """Fixed colour per strategy label, in strategy_id order."""
    cmap = colormaps['tab10']
    return {
        label: cmap(i % cmap.N)
        for i, label in enumerate(config.labels)
    }


def plot_ceac(
    long: pd.DataFrame,
    config: CEACConfig,
    ax: Optional[Axes] = None,
    intervals: Optional[pd.DataFrame] = None,
    frontier: Optional[pd.DataFrame] = None,
    title: str = "Cost Effectiveness Acceptability Curve",
    currency: str = '$'
) -> Tuple[Figure, Axes]:
    """
    Line chart of win probability against willingness to pay.

    Args:
        long: Long proportion table (wtp, strategy, proportion)
        config: Supplies strategy labels and order
        ax: Axes to draw on (new figure if None)
        intervals: Optional output of proportion_intervals, drawn as bands
        frontier: Optional output of acceptability_frontier, drawn as markers
        title: Axes title
        currency: Symbol for the x tick labels

    Returns:
        (fig, ax)
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(9, 5))
    else:
        fig = ax.figure

    colours = strategy_colours(config)
    for label in config.labels:
        curve = long[long['strategy'] == label].sort_values('wtp')
        ax.plot(
            curve['wtp'], curve['proportion'],
            label=label, color=colours[label], linewidth=1.8
        )
        if intervals is not None:
            band = intervals[intervals['strategy'] == label].sort_values('wtp')
            ax.fill_between(
                band['wtp'], band['lower'], band['upper'],
                color=colours[label], alpha=0.15, linewidth=0
            )

    if frontier is not None:
        ax.scatter(
            frontier['wtp'], frontier['proportion'],
            marker='o', s=14, color='black', zorder=3,
            label='Frontier'
        )

    if config.wtp_max > config.wtp_min:
        ax.set_xlim(config.wtp_min, config.wtp_max)
    else:
        # Single threshold: pad so the limits are not singular
        pad = max(abs(config.wtp_min) * 0.05, 1.0)
        ax.set_xlim(config.wtp_min - pad, config.wtp_max + pad)
    ax.set_ylim(0.0, 1.0)
    ax.xaxis.set_major_formatter(currency_formatter(currency))
    ax.set_xlabel("Willingness-to-pay threshold (per QALY)")
    ax.set_ylabel("Probability cost-effective")
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    ax.legend(title="Strategy", loc='best')

    return fig, ax


def save_figure(fig: Figure, path: Union[str, Path], dpi: int = 150) -> Path:
    """Write a figure to disk, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches='tight')
    return path
