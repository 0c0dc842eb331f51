"""Tests for the derived aggregates and figure builders."""

import math
import random

import plotly.graph_objects as go
import pytest

from dashboard_views import (
    DAYS,
    DEVICE_DISTRIBUTION,
    REGIONS,
    activity_heatmap,
    device_pie_figure,
    error_breakdown,
    error_severity,
    heatmap_figure,
    metric_trend_figure,
    recent_rows,
    region_bar_figure,
    regional_summary,
    response_time_figure,
    summary_stats,
    throughput_figure,
)
from metrics_stream import METRIC_FIELDS

from tests.conftest import T0


class TestErrorSeverity:
    """Tests for error_severity() and error_breakdown()."""

    @pytest.mark.parametrize(
        ("errors", "level"),
        [(0, "ok"), (1, "warning"), (4, "warning"), (5, "critical"), (9, "critical")],
    )
    def test_levels(self, errors: int, level: str) -> None:
        assert error_severity(errors) == level

    def test_breakdown_counts_every_level(self, make_sample) -> None:
        samples = [make_sample(i, errors=e) for i, e in enumerate([0, 0, 3, 7])]

        assert error_breakdown(samples) == {"ok": 2, "warning": 1, "critical": 1}

    def test_breakdown_of_nothing(self) -> None:
        assert error_breakdown([]) == {"ok": 0, "warning": 0, "critical": 0}


class TestRegionalSummary:
    """Tests for regional_summary()."""

    def test_keeps_declared_order(self) -> None:
        summary = regional_summary()

        assert list(summary["region"]) == [r["region"] for r in REGIONS]

    def test_shares_sum_to_hundred(self) -> None:
        summary = regional_summary()

        assert summary["share"].sum() == pytest.approx(100.0, abs=0.5)
        assert summary.loc[summary["region"] == "Asia Pacific", "share"].item() == pytest.approx(32.0)


class TestActivityHeatmap:
    """Tests for activity_heatmap()."""

    def test_shape_and_labels(self) -> None:
        grid = activity_heatmap(random.Random(0))

        assert grid.shape == (7, 24)
        assert list(grid.index) == DAYS
        assert list(grid.columns) == list(range(24))

    def test_values_follow_daily_cycle_bounds(self) -> None:
        grid = activity_heatmap(random.Random(0))

        for hour in grid.columns:
            wave = math.sin(hour / 24 * math.pi * 2) * 30
            assert grid[hour].between(wave, 100 + wave).all()


class TestRecentRows:
    """Tests for recent_rows()."""

    def test_newest_first_and_limited(self, make_sample) -> None:
        samples = [make_sample(T0 + i * 1000, users=i) for i in range(25)]

        table = recent_rows(samples, limit=10)

        assert len(table) == 10
        assert list(table["Users"]) == [str(i) for i in range(24, 14, -1)]

    def test_formats_columns(self, make_sample) -> None:
        table = recent_rows([make_sample(T0, users=12345, revenue=10.5, throughput=77, response_time=99.04)])

        row = table.iloc[0]
        assert row["Users"] == "12,345"
        assert row["Revenue"] == "$10.50"
        assert row["Throughput"] == "77/s"
        assert row["Response Time"] == "99.0ms"
        assert row["Time"] == "00:00:00"

    def test_empty_window(self) -> None:
        assert recent_rows([]).empty


class TestSummaryStats:
    """Tests for summary_stats()."""

    def test_mean_min_max(self, make_sample) -> None:
        samples = [make_sample(i, users=u) for i, u in enumerate([100, 200, 600])]

        stats = summary_stats(samples)

        assert list(stats.index) == list(METRIC_FIELDS)
        assert stats.loc["users", "mean"] == pytest.approx(300)
        assert stats.loc["users", "min"] == 100
        assert stats.loc["users", "max"] == 600

    def test_empty_window_gives_nan(self) -> None:
        stats = summary_stats([])

        assert stats["mean"].isna().all()


class TestFigures:
    """Smoke tests for the plotly figure builders."""

    def test_metric_trend_figure(self, make_sample) -> None:
        samples = [make_sample(T0 + i * 1000, revenue=float(i)) for i in range(5)]

        fig = metric_trend_figure(samples, "revenue")

        assert isinstance(fig, go.Figure)
        assert list(fig.data[0].y) == [0.0, 1.0, 2.0, 3.0, 4.0]
        assert fig.layout.title.text == "Revenue over time"

    def test_metric_trend_rejects_unknown_metric(self, make_sample) -> None:
        with pytest.raises(ValueError):
            metric_trend_figure([make_sample(T0)], "cpu")

    def test_throughput_figure_has_two_traces(self, make_sample) -> None:
        fig = throughput_figure([make_sample(T0), make_sample(T0 + 1000)])

        assert [trace.name for trace in fig.data] == ["Throughput", "Errors"]

    def test_response_time_figure(self, make_sample) -> None:
        fig = response_time_figure([make_sample(T0, response_time=80.0)])

        assert list(fig.data[0].y) == [80.0]

    def test_device_pie_figure(self) -> None:
        fig = device_pie_figure()

        assert list(fig.data[0].labels) == [d["name"] for d in DEVICE_DISTRIBUTION]

    def test_region_bar_and_heatmap_figures(self) -> None:
        bar = region_bar_figure(regional_summary())
        heat = heatmap_figure(activity_heatmap(random.Random(1)))

        assert len(bar.data[0].y) == len(REGIONS)
        assert len(heat.data[0].z) == 7
