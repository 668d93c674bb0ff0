# twr_engine/services/analytics/downsampling.py
"""
Display downsampling.

Long ranges are thinned to roughly weekly points before charting. This is
strictly a presentation step: it runs AFTER returns and statistics are
computed.
"""

from collections.abc import Sequence
from typing import TypeVar

from twr_engine.services.constants import DEFAULT_DOWNSAMPLE_INTERVAL_DAYS


# Any point type with a `date` attribute (ValuationPoint, SeriesPoint, PricePoint)
T = TypeVar("T")


def downsample_by_days(
        points: Sequence[T],
        every_n_days: int = DEFAULT_DOWNSAMPLE_INTERVAL_DAYS,
) -> list[T]:
    """
    Keep a point whenever at least N calendar days passed since the last kept one.

    The first point is always kept and the final point is always appended,
    so the displayed series ends on the same day as the data.

    Args:
        points: Date-ordered series (anything with a ``date`` attribute)
        every_n_days: Minimum spacing in days

    Returns:
        Thinned series; inputs of N points or fewer come back unchanged
    """
    if len(points) <= every_n_days:
        return list(points)

    kept: list[T] = []
    last_kept = None

    for point in points:
        if last_kept is None or (point.date - last_kept).days >= every_n_days:
            kept.append(point)
            last_kept = point.date

    if kept[-1] is not points[-1]:
        kept.append(points[-1])

    return kept
