"""
Tests for the chart configuration builder.
"""

import pytest

from gittempo import chart
from gittempo.activity_binner import BinnedSeries
from gittempo.zoom_planner import ZoomWindow


@pytest.fixture
def series():
    return BinnedSeries(
        labels=["Jan 5, 1PM", "Jan 5, 2PM", "Jan 5, 3PM"],
        additions=[10, 0, 20],
        deletions=[-4, 0, -6],
        trend=[3, 10, 7],
    )


class TestEnsureChartRegistered:
    """Tests for one-time component registration."""

    def test_registers_once(self, monkeypatch):
        monkeypatch.setattr(chart, "_registered_components", ())

        first = chart.ensure_chart_registered()
        second = chart.ensure_chart_registered()

        assert first == chart.CHART_COMPONENTS
        assert second is first

    def test_includes_zoom_plugin(self):
        assert "Zoom" in chart.ensure_chart_registered()


class TestCalculateTotals:
    """Tests for calculate_totals."""

    def test_deletions_reported_as_magnitude(self, series):
        assert chart.calculate_totals(series) == {"additions": 30, "deletions": 10}

    def test_empty_series(self):
        assert chart.calculate_totals(BinnedSeries()) == {"additions": 0, "deletions": 0}


class TestBuildChartData:
    """Tests for build_chart_data."""

    def test_bar_mode_stacks_additions_and_deletions(self, series):
        data = chart.build_chart_data(series, "bar", show_trend=False)

        assert data["labels"] == series.labels
        assert [d["label"] for d in data["datasets"]] == ["Additions", "Deletions"]
        assert data["datasets"][0]["data"] == [10, 0, 20]
        assert data["datasets"][1]["data"] == [-4, 0, -6]
        assert all(d["stack"] == "stack1" for d in data["datasets"])

    def test_line_mode_plots_net_changes(self, series):
        data = chart.build_chart_data(series, "line", show_trend=False)

        assert len(data["datasets"]) == 1
        assert data["datasets"][0]["label"] == "Net Changes"
        assert data["datasets"][0]["data"] == [6, 0, 14]
        assert data["datasets"][0]["fill"] is True

    def test_trend_dataset(self, series):
        data = chart.build_chart_data(series, "bar", show_trend=True)
        trend = data["datasets"][-1]

        assert trend["label"] == "Trend"
        assert trend["type"] == "line"
        assert trend["data"] == [3, 10, 7]
        assert trend["borderDash"] == [4, 4]

    def test_unknown_mode(self, series):
        with pytest.raises(ValueError, match="Unknown chart mode"):
            chart.build_chart_data(series, "pie")


class TestBuildChartOptions:
    """Tests for build_chart_options."""

    def test_bar_mode_is_stacked(self):
        options = chart.build_chart_options("bar")
        assert options["scales"]["x"]["stacked"] is True
        assert options["scales"]["y"]["stacked"] is True

    def test_line_mode_not_stacked(self):
        options = chart.build_chart_options("line")
        assert options["scales"]["x"]["stacked"] is False

    def test_zoom_window_sets_axis_limits(self):
        options = chart.build_chart_options("bar", ZoomWindow(2, 8))
        assert options["scales"]["x"]["min"] == 2
        assert options["scales"]["x"]["max"] == 8

    def test_full_range_leaves_axis_open(self):
        options = chart.build_chart_options("bar", ZoomWindow(None, None))
        assert "min" not in options["scales"]["x"]
        assert "max" not in options["scales"]["x"]

    def test_tooltips_show_absolute_values(self):
        assert chart.build_chart_options()["plugins"]["tooltip"]["absoluteValues"] is True


def test_build_chart_config(series):
    config = chart.build_chart_config(series, "line", show_trend=True, window=ZoomWindow(0, 1))

    assert config["type"] == "line"
    assert len(config["data"]["datasets"]) == 2
    assert config["options"]["scales"]["x"]["max"] == 1
