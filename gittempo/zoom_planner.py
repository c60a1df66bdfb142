"""
Auto-zoom planner for the commit chart.

Computes the [start, end] bucket range that frames the chart on its
active region, with density-aware padding and a minimum visible width.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import NamedTuple, Optional

from gittempo.activity_binner import BinnedSeries

logger = logging.getLogger(__name__)


class ZoomWindow(NamedTuple):
    """Visible bucket range. (None, None) means the full range."""

    min_index: Optional[int]
    max_index: Optional[int]


@dataclass(frozen=True)
class ZoomState:
    """
    Caller-owned zoom state.

    min_index/max_index are the current view; last_zoom_key and
    last_zoom_range remember the most recent auto-zoom so repeated
    requests against unchanged data are no-ops.
    """

    min_index: Optional[int] = None
    max_index: Optional[int] = None
    last_zoom_key: str = ""
    last_zoom_range: Optional[tuple[int, int]] = None

    @property
    def window(self) -> ZoomWindow:
        return ZoomWindow(self.min_index, self.max_index)


def reset_zoom_state(state: Optional[ZoomState] = None) -> ZoomState:
    """Clear the view window and the remembered zoom range."""
    if state is None:
        return ZoomState()
    return replace(state, min_index=None, max_index=None, last_zoom_range=None)


def _base_padding(active_count: int, density: float) -> int:
    if active_count <= 2:
        return 0
    elif density < 0.1:
        return 1
    elif density < 0.3:
        return 2
    else:
        return 2


def _time_frame_multiplier(total_hours: float) -> float:
    if total_hours <= 12:
        return 1.0
    elif total_hours <= 24:
        return 0.75
    elif total_hours <= 48:
        return 0.5
    else:
        return 0.25


def _minimum_range(total_hours: float, active_count: int, total_buckets: int) -> int:
    """
    Narrowest window, in buckets, the planner will show.

    Sparse activity counts as at least two buckets, so a lone commit on a
    two-day chart still gets five buckets of context.
    """
    sparse = max(active_count, 2)
    if total_hours >= 168:
        if active_count <= 2:
            return sparse + 2
        return max(4, math.floor(total_buckets * 0.10))
    elif total_hours >= 48:
        if active_count <= 2:
            return sparse + 3
        return max(6, math.floor(total_buckets * 0.15))
    elif total_hours >= 24:
        if active_count <= 4:
            return sparse + 4
        return max(8, math.floor(total_buckets * 0.20))
    else:
        if active_count <= 4:
            return sparse + 4
        return max(8, math.floor(total_buckets * 0.30))


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def compute_zoom_window(
    series: BinnedSeries,
    total_hours: float,
    current_zoom_key: str,
    prior: Optional[ZoomState] = None,
) -> tuple[Optional[ZoomWindow], ZoomState]:
    """
    Compute the auto-zoom window for a binned series.

    Args:
        series: Binned chart series
        total_hours: Duration of the charted time window
        current_zoom_key: Identifies the filter inputs the series was built from
        prior: Zoom state from the previous call

    Returns:
        (window, state). window is None when the request is a no-op (the
        prior zoom still matches), ZoomWindow(None, None) when there is no
        activity to frame, and the bucket range otherwise.
    """
    if prior is None:
        prior = ZoomState()

    active = [
        i
        for i, (added, deleted) in enumerate(zip(series.additions, series.deletions))
        if added > 0 or deleted < 0
    ]

    if not active:
        full_range = ZoomWindow(None, None)
        return full_range, ZoomState(last_zoom_key=current_zoom_key, last_zoom_range=None)

    total_buckets = len(series.additions)
    last_index = total_buckets - 1
    min_active = active[0]
    max_active = active[-1]
    active_count = len(active)
    density = active_count / total_buckets

    padding = _round_half_up(
        _base_padding(active_count, density) * _time_frame_multiplier(total_hours)
    )

    start = max(0, min_active - padding)
    end = min(last_index, max_active + padding)

    min_range = _minimum_range(total_hours, active_count, total_buckets)
    if end - start < min_range:
        center = (min_active + max_active) // 2
        half_range = math.ceil(min_range / 2)
        start = center - half_range
        end = center + half_range
        if start < 0:
            end = min(last_index, end - start)
            start = 0
        if end > last_index:
            start = max(0, start - (end - last_index))
            end = last_index

    if (
        prior.last_zoom_key == current_zoom_key
        and prior.last_zoom_range is not None
        and abs(prior.last_zoom_range[0] - start) <= 1
        and abs(prior.last_zoom_range[1] - end) <= 1
    ):
        logger.debug("Zoom for %r unchanged, skipping", current_zoom_key)
        return None, prior

    logger.debug(
        "Zoom %r: %d active of %d buckets -> [%d, %d]",
        current_zoom_key, active_count, total_buckets, start, end,
    )
    new_state = ZoomState(
        min_index=start,
        max_index=end,
        last_zoom_key=current_zoom_key,
        last_zoom_range=(start, end),
    )
    return ZoomWindow(start, end), new_state


class ZoomController:
    """
    Owns the zoom state for one chart view.

    The view window is reset whenever the filter key changes, since a
    window computed against other data is meaningless.
    """

    def __init__(self, zoom_key: str = ""):
        self.zoom_key = zoom_key
        self.state = ZoomState()

    def update_filters(self, zoom_key: str) -> bool:
        """
        Record new filter inputs.

        Returns:
            True if the key changed and the zoom was reset
        """
        if zoom_key == self.zoom_key:
            return False
        self.zoom_key = zoom_key
        self.state = reset_zoom_state(self.state)
        return True

    def auto_zoom(self, series: BinnedSeries, total_hours: float) -> ZoomWindow:
        """Apply the planner and return the window to display."""
        window, self.state = compute_zoom_window(series, total_hours, self.zoom_key, self.state)
        if window is None:
            return self.state.window
        return window
