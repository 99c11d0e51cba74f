"""
Tests for the end-to-end pipeline and rendering.

Tests cover:
- Two-strategy scenario with known winners
- Generated 5-strategy data
- CSV entry point
- Strict and lenient sum-to-1 handling
- Plot construction
"""

import warnings

import matplotlib.pyplot as plt
import numpy as np
import pytest

from ceac import (
    CEACConfig,
    CEACResult,
    run_ceac,
    run_ceac_from_csv,
    compare_thresholds,
    generate_psa_results,
    plot_ceac,
    save_figure,
    currency_formatter,
    strategy_colours,
    InputCardinalityError,
    InputSchemaError,
)


class TestTwoStrategyScenario:
    """2 strategies x 3 runs with a known answer."""

    def test_win_proportions_flip(self, two_strategy_config, two_strategy_psa):
        """(1, 0) at WTP 0 and (0, 1) at WTP 100,000."""
        result = run_ceac(two_strategy_psa, two_strategy_config)
        props = result.proportions.set_index('wtp')

        assert props.loc[0.0, 'strat1'] == 1.0
        assert props.loc[0.0, 'strat2'] == 0.0
        assert props.loc[100_000.0, 'strat1'] == 0.0
        assert props.loc[100_000.0, 'strat2'] == 1.0

    def test_compare_thresholds(self, two_strategy_config, two_strategy_psa):
        """Labelled proportions at requested thresholds."""
        result = run_ceac(two_strategy_psa, two_strategy_config)
        table = compare_thresholds(result, [0.0, 100_000.0])

        assert table[0.0] == {"Cheap": 1.0, "Effective": 0.0}
        assert table[100_000.0] == {"Cheap": 0.0, "Effective": 1.0}

    def test_result_tables(self, two_strategy_config, two_strategy_psa):
        """Intermediate tables have the expected sizes."""
        result = run_ceac(two_strategy_psa, two_strategy_config)

        assert isinstance(result, CEACResult)
        assert len(result.expanded) == 6 * 2
        assert len(result.winners) == 3 * 2
        assert len(result.long) == 2 * 2
        assert result.valid
        assert result.ties.empty
        assert result.elapsed_time >= 0


class TestGeneratedData:
    """Full-size runs on generated data."""

    def test_default_config(self):
        """1000 runs x 5 strategies x 50 thresholds."""
        config = CEACConfig()
        psa = generate_psa_results(config, seed=42)

        result = run_ceac(psa, config)

        assert len(result.psa) == 5000
        assert len(result.expanded) == 250_000
        assert len(result.winners) == 50_000
        assert len(result.long) == 250
        assert result.valid

    def test_intensive_strategies_gain_with_wtp(self):
        """Most intensive strategy wins more often at the top of the sweep."""
        config = CEACConfig(num_runs=200, n_thresholds=20)
        psa = generate_psa_results(config, seed=7)

        props = run_ceac(psa, config).proportions

        assert props['strat5'].iloc[-1] > props['strat5'].iloc[0]
        assert props['strat1'].iloc[-1] < props['strat1'].iloc[0]

    def test_verbose_prints_progress(self, small_config, capsys):
        """verbose=True reports sizes and check status."""
        psa = generate_psa_results(small_config, seed=1)
        run_ceac(psa, small_config, verbose=True)

        out = capsys.readouterr().out
        assert "Expanded rows" in out
        assert "sum-to-1 check: ok" in out


class TestValidation:
    """Input and invariant failures surface to the caller."""

    def test_ties_warned(self, psa_factory):
        """Lines crossing at t=100 tie there and the run warns about it."""
        # nmb1 = 100 t, nmb2 = 200 t - 10000
        psa = psa_factory([(1, 1, 100.0, 0.0), (2, 1, 200.0, 10_000.0)])
        config = CEACConfig(
            num_runs=1, num_strats=2, wtp_min=50.0, wtp_max=150.0,
            n_thresholds=3, strategy_labels={1: "Cheap", 2: "Effective"},
        )

        with pytest.warns(RuntimeWarning, match='tied maximal NMB'):
            result = run_ceac(psa, config)

        assert result.ties['wtp'].tolist() == [100.0]
        assert result.winners['strategy_id'].tolist() == [1, 1, 2]

    def test_no_tie_warning_on_distinct_nmb(self, two_strategy_config, two_strategy_psa):
        """Clean input runs without warnings."""
        with warnings.catch_warnings():
            warnings.simplefilter("error", RuntimeWarning)
            result = run_ceac(two_strategy_psa, two_strategy_config)

        assert result.ties.empty

    def test_out_of_range_run_number(self, psa_factory):
        """psa_run_num outside 1..num_runs fails before any expansion."""
        psa = psa_factory([(1, -3, 5.0, 100.0), (2, -3, 6.0, 200.0)])
        config = CEACConfig(
            num_runs=1, num_strats=2, wtp_max=100_000.0, n_thresholds=2,
            strategy_labels={1: "Cheap", 2: "Effective"},
        )

        with pytest.raises(InputSchemaError, match='psa_run_num'):
            run_ceac(psa, config)

    def test_infinite_qaly_named(self, two_strategy_config, two_strategy_psa):
        """An infinite QALY is reported against its column."""
        psa = two_strategy_psa.copy()
        psa.loc[0, 'avg_disc_qaly_mult'] = np.inf

        with pytest.raises(InputSchemaError, match='avg_disc_qaly_mult'):
            run_ceac(psa, two_strategy_config)

    def test_cardinality_checked(self, small_config):
        """A missing row raises before expansion."""
        psa = generate_psa_results(small_config, seed=1).iloc[:-1]

        with pytest.raises(InputCardinalityError):
            run_ceac(psa, small_config)

    def test_schema_checked(self, small_config):
        """A missing column raises InputSchemaError."""
        psa = generate_psa_results(small_config, seed=1).drop(columns='n_deaths')

        with pytest.raises(InputSchemaError):
            run_ceac(psa, small_config)

    def test_lenient_mode_reports(self, two_strategy_psa):
        """With validation off and strict off, failures are returned."""
        # Claims 4 runs but only 3 exist, so proportions sum to 0.75
        config = CEACConfig(
            num_runs=4, num_strats=2, wtp_max=100_000.0, n_thresholds=2,
            strategy_labels={1: "Cheap", 2: "Effective"},
        )

        with pytest.warns(RuntimeWarning):
            result = run_ceac(two_strategy_psa, config, validate=False, strict=False)

        assert not result.valid
        assert result.failures['total'].tolist() == pytest.approx([0.75, 0.75])


class TestCsvEntryPoint:
    """Tests for run_ceac_from_csv."""

    def test_round_trip_through_file(self, tmp_path, small_config):
        """Same proportions from a CSV as from the frame."""
        psa = generate_psa_results(small_config, seed=9)
        path = tmp_path / "psa.csv"
        psa.to_csv(path, index=False)

        from_file = run_ceac_from_csv(path, small_config)
        from_frame = run_ceac(psa, small_config)

        assert np.allclose(
            from_file.proportions.to_numpy(),
            from_frame.proportions.to_numpy()
        )


class TestPlotting:
    """Tests for plot_ceac."""

    def test_one_line_per_strategy(self, small_config):
        """Five curves, labelled axes, titled legend."""
        result = run_ceac(generate_psa_results(small_config, seed=4), small_config)

        fig, ax = plot_ceac(result.long, small_config)

        assert len(ax.get_lines()) == 5
        assert [line.get_label() for line in ax.get_lines()] == small_config.labels
        assert ax.get_legend().get_title().get_text() == "Strategy"
        assert ax.get_ylim() == (0.0, 1.0)
        plt.close(fig)

    def test_draws_on_given_axes(self, small_config):
        """Existing axes are reused, bands and frontier added."""
        result = run_ceac(generate_psa_results(small_config, seed=4), small_config)
        fig, ax = plt.subplots()

        fig2, ax2 = plot_ceac(
            result.long, small_config, ax=ax,
            intervals=result.intervals, frontier=result.frontier
        )

        assert ax2 is ax
        assert fig2 is fig
        assert len(ax.collections) == 5 + 1
        plt.close(fig)

    def test_currency_ticks(self):
        """Thresholds formatted as dollars with separators."""
        fmt = currency_formatter()
        assert fmt(100_000.0, 0) == "$100,000"
        assert fmt(0.0, 0) == "$0"

    def test_colours_fixed_per_label(self, small_config):
        """Each label has its own colour."""
        colours = strategy_colours(small_config)
        assert list(colours) == small_config.labels
        assert len(set(colours.values())) == 5

    def test_single_threshold_limits(self, two_strategy_psa):
        """wtp_min == wtp_max draws with padded, non-singular limits."""
        config = CEACConfig(
            num_runs=3, num_strats=2, wtp_min=50_000.0, wtp_max=50_000.0,
            n_thresholds=1, strategy_labels={1: "Cheap", 2: "Effective"},
        )
        result = run_ceac(two_strategy_psa, config)

        with warnings.catch_warnings():
            warnings.simplefilter("error", UserWarning)
            fig, ax = plot_ceac(result.long, config)

        low, high = ax.get_xlim()
        assert low < 50_000.0 < high
        plt.close(fig)

    def test_save_figure(self, tmp_path, small_config):
        """Figure written to a nested path."""
        result = run_ceac(generate_psa_results(small_config, seed=4), small_config)
        fig, _ = plot_ceac(result.long, small_config)

        path = save_figure(fig, tmp_path / "out" / "ceac.png")

        assert path.exists()
        plt.close(fig)
