"""
Filters applied to change records before binning.
"""

from gittempo.activity_binner import TimeWindow
from gittempo.commit_parser import ChangeRecord


def list_authors(records: list[ChangeRecord]) -> list[str]:
    """Unique author names in first-seen order."""
    return list(dict.fromkeys(record.author for record in records))


def filter_records(
    records: list[ChangeRecord],
    authors: list[str] | None = None,
    include_initial: bool = True,
) -> list[ChangeRecord]:
    """
    Keep records from the selected authors.

    Args:
        records: All change records for the repository
        authors: Authors to keep. None keeps everyone; an empty list keeps no one.
        include_initial: When False, drop the earliest commit

    Returns:
        Filtered records in their original order
    """
    filtered = records
    if authors is not None:
        selected = set(authors)
        filtered = [record for record in filtered if record.author in selected]

    if not include_initial and records:
        first = min(records, key=lambda record: record.timestamp)
        filtered = [record for record in filtered if record is not first]

    return filtered


def make_zoom_key(
    window: TimeWindow | int,
    authors: list[str] | None,
    hide_dependency_changes: bool,
    include_initial: bool = True,
) -> str:
    """
    Build the key identifying the inputs a chart was filtered with.

    Args:
        window: Look-back hours, or an explicit TimeWindow
        authors: Selected authors (None means everyone)
        hide_dependency_changes: Dependency-hide flag
        include_initial: Initial-commit toggle
    """
    if isinstance(window, TimeWindow):
        window_part = f"{window.start.isoformat()}..{window.end.isoformat()}"
    else:
        window_part = f"{window}h"

    author_part = "*" if authors is None else ",".join(sorted(authors))
    return f"{window_part}|{author_part}|deps:{int(hide_dependency_changes)}|initial:{int(include_initial)}"
