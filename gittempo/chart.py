"""
Chart configuration handed to the browser-side Chart.js renderer.

Builds the data/options payload for the commit chart. Drawing is left to
Chart.js; this module only decides what gets drawn.
"""

import logging

from gittempo.activity_binner import BinnedSeries
from gittempo.zoom_planner import ZoomWindow

logger = logging.getLogger(__name__)

CHART_MODES = ("bar", "line")

# Chart.js components the graph page registers before first render
CHART_COMPONENTS = (
    "CategoryScale",
    "LinearScale",
    "BarElement",
    "PointElement",
    "LineElement",
    "Tooltip",
    "Legend",
    "Zoom",
)

ADDITIONS_COLOR = "rgba(34,197,94,0.8)"
DELETIONS_COLOR = "rgba(239,68,68,0.8)"
NET_FILL_COLOR = "rgba(34,197,94,0.3)"
TREND_COLOR = "rgba(59,130,246,0.9)"
TICK_COLOR = "#ccc"
GRID_COLOR = "rgba(255,255,255,0.1)"

_registered_components: tuple[str, ...] = ()


def ensure_chart_registered() -> tuple[str, ...]:
    """
    Register the chart components once per process.

    Safe to call repeatedly; later calls return the existing registration.
    """
    global _registered_components
    if not _registered_components:
        _registered_components = CHART_COMPONENTS
        logger.debug("Registered chart components: %s", ", ".join(CHART_COMPONENTS))
    return _registered_components


def _check_mode(mode: str) -> None:
    if mode not in CHART_MODES:
        raise ValueError(f"Unknown chart mode '{mode}'. Expected one of: {', '.join(CHART_MODES)}")


def calculate_totals(series: BinnedSeries) -> dict:
    """
    Total additions and deletions across the series.

    Deletions are reported as a positive magnitude.
    """
    return {
        "additions": sum(series.additions),
        "deletions": sum(abs(value) for value in series.deletions),
    }


def build_chart_data(series: BinnedSeries, mode: str = "bar", show_trend: bool = True) -> dict:
    """
    Build Chart.js datasets for the series.

    Bar mode stacks additions above the axis and deletions below it. Line
    mode plots net changes (additions + negated deletions) as a filled line.
    """
    _check_mode(mode)
    ensure_chart_registered()

    if mode == "bar":
        datasets = [
            {
                "label": "Additions",
                "data": series.additions,
                "backgroundColor": ADDITIONS_COLOR,
                "stack": "stack1",
            },
            {
                "label": "Deletions",
                "data": series.deletions,
                "backgroundColor": DELETIONS_COLOR,
                "stack": "stack1",
            },
        ]
    else:
        datasets = [
            {
                "label": "Net Changes",
                "data": [added + deleted for added, deleted in zip(series.additions, series.deletions)],
                "borderColor": ADDITIONS_COLOR,
                "backgroundColor": NET_FILL_COLOR,
                "fill": True,
                "tension": 0.3,
            }
        ]

    if show_trend:
        datasets.append(
            {
                "label": "Trend",
                "data": series.trend,
                "borderColor": TREND_COLOR,
                "borderDash": [4, 4],
                "pointRadius": 0,
                "type": "line",
            }
        )

    return {"labels": series.labels, "datasets": datasets}


def build_chart_options(mode: str = "bar", window: ZoomWindow | None = None) -> dict:
    """
    Build Chart.js options, applying the zoom window to the x axis.

    Tooltips show absolute values; the page's tooltip callback reads the
    "absoluteValues" flag.
    """
    _check_mode(mode)
    stacked = mode == "bar"

    x_scale = {
        "ticks": {"color": TICK_COLOR, "maxRotation": 90, "minRotation": 45},
        "grid": {"color": GRID_COLOR},
        "stacked": stacked,
    }
    if window is not None:
        if window.min_index is not None:
            x_scale["min"] = window.min_index
        if window.max_index is not None:
            x_scale["max"] = window.max_index

    return {
        "responsive": True,
        "maintainAspectRatio": False,
        "plugins": {
            "legend": {"labels": {"color": "#fff"}},
            "tooltip": {"absoluteValues": True},
        },
        "scales": {
            "x": x_scale,
            "y": {
                "ticks": {"color": TICK_COLOR},
                "grid": {"color": GRID_COLOR},
                "stacked": stacked,
            },
        },
    }


def build_chart_config(
    series: BinnedSeries,
    mode: str = "bar",
    show_trend: bool = True,
    window: ZoomWindow | None = None,
) -> dict:
    """Full Chart.js config: type, data and options."""
    return {
        "type": mode,
        "data": build_chart_data(series, mode, show_trend),
        "options": build_chart_options(mode, window),
    }
