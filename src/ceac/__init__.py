"""
ceac - Cost effectiveness acceptability curves from PSA output.
"""

from .config import (
    CEACConfig,
    DEFAULT_STRATEGY_LABELS,
    strategy_column,
)

from .errors import (
    CEACError,
    InputSchemaError,
    InputCardinalityError,
    AggregationInvariantError,
)

from .schema import (
    psa_schema,
    PSA_SCHEMA,
    PSA_COLUMNS,
    coerce_psa_frame,
    load_psa_results,
    validate_psa_cardinality,
)

from .data import (
    strategy_means,
    generate_psa_results,
)

from .nmb import (
    net_monetary_benefit,
    nmb_block,
    expand_nmb,
)

from .winners import (
    select_winners,
    count_ties,
    warn_ties,
)

from .aggregation import (
    win_counts,
    win_proportions,
    check_proportions,
    to_long,
    to_wide,
    proportion_intervals,
    expected_nmb,
    acceptability_frontier,
    switch_points,
    proportions_at,
)

from .plotting import (
    currency_formatter,
    strategy_colours,
    plot_ceac,
    save_figure,
)

from .runner import (
    CEACResult,
    run_ceac,
    run_ceac_from_csv,
    compare_thresholds,
)

__all__ = [
    # Config
    "CEACConfig",
    "DEFAULT_STRATEGY_LABELS",
    "strategy_column",
    # Errors
    "CEACError",
    "InputSchemaError",
    "InputCardinalityError",
    "AggregationInvariantError",
    # Schema
    "psa_schema",
    "PSA_SCHEMA",
    "PSA_COLUMNS",
    "coerce_psa_frame",
    "load_psa_results",
    "validate_psa_cardinality",
    # Synthetic data
    "strategy_means",
    "generate_psa_results",
    # NMB
    "net_monetary_benefit",
    "nmb_block",
    "expand_nmb",
    # Winners
    "select_winners",
    "count_ties",
    "warn_ties",
    # Aggregation
    "win_counts",
    "win_proportions",
    "check_proportions",
    "to_long",
    "to_wide",
    "proportion_intervals",
    "expected_nmb",
    "acceptability_frontier",
    "switch_points",
    "proportions_at",
    # Plotting
    "currency_formatter",
    "strategy_colours",
    "plot_ceac",
    "save_figure",
    # Runner
    "CEACResult",
    "run_ceac",
    "run_ceac_from_csv",
    "compare_thresholds",
]
