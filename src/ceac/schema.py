"""
PSA result schema and loader.

PSA output files carry 15 columns in a fixed positional order. Names come
from the schema rather than from whatever header the file has; types and
value ranges are enforced by pandera, so a malformed file is rejected at
load time instead of failing somewhere downstream.
"""

from pathlib import Path
from typing import List, Optional, Union

import numpy as np
import pandas as pd
import pandera.pandas as pa
from pandera.errors import SchemaError, SchemaErrors

from .config import CEACConfig
from .errors import InputSchemaError, InputCardinalityError


_finite = pa.Check(np.isfinite, error="finite")


def _count(*checks) -> pa.Column:
    # Nullable Int64 refuses to truncate 1.5 -> 1 during coercion
    return pa.Column("Int64", [pa.Check.ge(0), *checks], nullable=False)


def _measure() -> pa.Column:
    return pa.Column(float, [pa.Check.ge(0.0), _finite], nullable=False)


def psa_schema(config: Optional[CEACConfig] = None) -> pa.DataFrameSchema:
    """
    Schema of the PSA result table.

    With a config, strategy_id and psa_run_num are also bounded by
    num_strats and num_runs.
    """
    if config is None:
        strategy_check = pa.Check.ge(1)
        run_check = pa.Check.ge(1)
    else:
        strategy_check = pa.Check.in_range(1, config.num_strats)
        run_check = pa.Check.in_range(1, config.num_runs)

    return pa.DataFrameSchema(
        {
            "strategy_id": _count(strategy_check),
            "psa_run_num": _count(run_check),
            "run_id": _count(),
            "avg_lifespan": _measure(),
            "avg_cost": _measure(),
            "avg_disc_cost": _measure(),
            "avg_qaly_min": _measure(),
            "avg_disc_qaly_min": _measure(),
            "avg_qaly_mult": _measure(),
            "avg_disc_qaly_mult": _measure(),
            # Case counts
            "n_screens": _count(),
            "n_cases_detected": _count(),
            "n_cases_missed": _count(),
            "n_complications": _count(),
            "n_deaths": _count(),
        },
        coerce=True,
        strict=True,
        ordered=True,
    )


PSA_SCHEMA = psa_schema()

PSA_COLUMNS: List[str] = list(PSA_SCHEMA.columns)

INT_COLUMNS: List[str] = [
    "strategy_id", "psa_run_num", "run_id",
    "n_screens", "n_cases_detected", "n_cases_missed", "n_complications", "n_deaths",
]


def _failed_columns(err: Union[SchemaError, SchemaErrors]) -> List[str]:
    cases = getattr(err, 'failure_cases', None)
    if isinstance(cases, pd.DataFrame) and 'column' in cases.columns:
        return sorted(str(c) for c in cases['column'].dropna().unique())
    return []


def coerce_psa_frame(
    df: pd.DataFrame,
    config: Optional[CEACConfig] = None
) -> pd.DataFrame:
    """
    Apply the PSA schema to a raw table.

    Columns are renamed by position, coerced to their declared types and
    checked against their ranges. Row order is preserved; the index is reset.

    Args:
        df: Raw 15-column table
        config: Optional bounds for strategy_id and psa_run_num

    Raises:
        InputSchemaError: wrong column count, or missing / non-numeric /
            non-integral / out-of-range / non-finite values, naming the
            failing columns
    """
    if df.shape[1] != len(PSA_COLUMNS):
        raise InputSchemaError(
            f"Expected {len(PSA_COLUMNS)} columns, got {df.shape[1]}"
        )

    out = df.copy()
    out.columns = PSA_COLUMNS
    out = out.reset_index(drop=True)

    try:
        out = psa_schema(config).validate(out, lazy=True)
    except (SchemaError, SchemaErrors) as err:
        columns = _failed_columns(err)
        if columns:
            raise InputSchemaError(
                f"Missing or invalid values in columns: {columns}"
            ) from err
        raise InputSchemaError(str(err)) from err

    return out.astype({c: 'int64' for c in INT_COLUMNS})


def load_psa_results(
    path: Union[str, Path],
    header: bool = True
) -> pd.DataFrame:
    """
    Read a PSA result CSV.

    Args:
        path: CSV file with one row per (strategy, PSA draw)
        header: Whether the first line is a header row (its names are ignored)

    Returns:
        DataFrame with PSA_COLUMNS, rows in file order
    """
    raw = pd.read_csv(path, header=0 if header else None)
    return coerce_psa_frame(raw)


def validate_psa_cardinality(psa: pd.DataFrame, config: CEACConfig) -> None:
    """
    Check that the table holds exactly one row per (run, strategy).

    Raises:
        InputCardinalityError: describing the first problem found
    """
    expected_rows = config.num_runs * config.num_strats
    if len(psa) != expected_rows:
        raise InputCardinalityError(
            f"Expected {expected_rows} rows ({config.num_runs} runs x "
            f"{config.num_strats} strategies), got {len(psa)}"
        )

    unknown = sorted(set(psa['strategy_id']) - set(config.strategy_ids))
    if unknown:
        raise InputCardinalityError(
            f"Unknown strategy ids {unknown}; expected 1..{config.num_strats}"
        )

    n_runs = psa['psa_run_num'].nunique()
    if n_runs != config.num_runs:
        raise InputCardinalityError(
            f"Expected {config.num_runs} distinct PSA runs, got {n_runs}"
        )

    duplicated = psa.duplicated(['psa_run_num', 'strategy_id'])
    if duplicated.any():
        row = psa.loc[duplicated.idxmax()]
        raise InputCardinalityError(
            f"Strategy {row['strategy_id']} appears more than once "
            f"in PSA run {row['psa_run_num']}"
        )
