"""
Activity binner for the commit chart.

Groups change records into time buckets over a requested window and
produces index-aligned label, additions, deletions and trend series.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from gittempo.commit_parser import ChangeRecord


@dataclass(frozen=True)
class TimeWindow:
    """Half-open span of time [start, end) covered by the chart."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError("Time window start must be before its end.")

    @classmethod
    def from_hours_back(cls, hours: int, now: Optional[datetime] = None) -> "TimeWindow":
        """
        Window covering the last `hours` whole hours, including the current one.

        Args:
            hours: Look-back duration in hours
            now: Override for the current time (for testing)
        """
        if hours <= 0:
            raise ValueError("hours must be positive")
        if now is None:
            now = datetime.now(timezone.utc)
        end = now.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)
        return cls(start=end - timedelta(hours=hours), end=end)

    @property
    def total_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600


@dataclass
class BinnedSeries:
    """Index-aligned chart series. Deletions are stored as negative values."""

    labels: list[str] = field(default_factory=list)
    additions: list[int] = field(default_factory=list)
    deletions: list[int] = field(default_factory=list)
    trend: list[int] = field(default_factory=list)
    bucket_hours: int = 1

    def __len__(self) -> int:
        return len(self.labels)

    def to_dict(self) -> dict:
        return {
            "labels": self.labels,
            "additions": self.additions,
            "deletions": self.deletions,
            "trend": self.trend,
            "bucket_hours": self.bucket_hours,
        }


def choose_bucket_hours(total_hours: float) -> int:
    """
    Pick a bucket width so long windows stay readable.

    Returns:
        Bucket width in hours:
            6: more than 7 days
            3: more than 72 hours
            2: more than 48 hours
            1: otherwise
    """
    if total_hours > 168:
        return 6
    elif total_hours > 72:
        return 3
    elif total_hours > 48:
        return 2
    else:
        return 1


def _hour_label(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}{suffix}"


def format_bucket_label(bucket_start: datetime, bucket_hours: int) -> str:
    """
    Render a bucket label.

    Single-hour buckets look like "Jan 5, 3PM"; wider buckets add the end
    hour, e.g. "Jan 5, 3PM - 6PM".
    """
    label = f"{bucket_start.strftime('%b')} {bucket_start.day}, {_hour_label(bucket_start)}"
    if bucket_hours == 1:
        return label
    bucket_end = bucket_start + timedelta(hours=bucket_hours)
    return f"{label} - {_hour_label(bucket_end)}"


def calculate_trend(values: list[int]) -> list[int]:
    """
    Centered 3-point moving average, treating missing neighbours as 0.

    Halves round up, so the first and last points are always defined.
    """
    trend = []
    for i, current in enumerate(values):
        prev = values[i - 1] if i > 0 else 0
        nxt = values[i + 1] if i + 1 < len(values) else 0
        trend.append(math.floor((prev + current + nxt) / 3 + 0.5))
    return trend


def bin_records(
    records: list[ChangeRecord],
    window: TimeWindow,
    hide_dependency_changes: bool = False,
) -> BinnedSeries:
    """
    Bin change records into time buckets covering the window.

    Args:
        records: Change records, already filtered by author
        window: Time span to cover
        hide_dependency_changes: Count only the non-dependency portion of
            commits that touched dependency files

    Returns:
        BinnedSeries with one entry per bucket, oldest first. Records that
        fall outside the window are dropped.
    """
    total_hours = window.total_hours
    bucket_hours = choose_bucket_hours(total_hours)
    num_buckets = math.ceil(total_hours / bucket_hours)

    additions = [0] * num_buckets
    deletions = [0] * num_buckets

    for record in records:
        hours_since_start = (record.timestamp - window.start).total_seconds() / 3600
        bin_index = math.floor(hours_since_start / bucket_hours)
        if bin_index < 0 or bin_index >= num_buckets:
            continue

        if hide_dependency_changes and record.is_dependency_change:
            additions[bin_index] += record.non_dependency_additions
            deletions[bin_index] += record.non_dependency_deletions
        else:
            additions[bin_index] += record.additions
            deletions[bin_index] += record.deletions

    labels = [
        format_bucket_label(window.start + timedelta(hours=i * bucket_hours), bucket_hours)
        for i in range(num_buckets)
    ]

    return BinnedSeries(
        labels=labels,
        additions=additions,
        deletions=[-value for value in deletions],
        trend=calculate_trend(additions),
        bucket_hours=bucket_hours,
    )
