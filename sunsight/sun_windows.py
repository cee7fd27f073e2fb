"""
Sun window aggregation.
Groups consecutive unblocked blockage samples into visible time intervals.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from .models import BlockagePoint, SunWindow


def compute_sun_windows(points: Iterable[BlockagePoint]) -> Tuple[SunWindow, ...]:
    """
    Merge contiguous unblocked samples into sun windows.

    A window opens at the first unblocked sample and ends at the time of the
    next blocked sample. A window still open at the last sample ends there.
    Zero-length windows are dropped.

    Args:
        points: Blockage samples for one day (above-horizon only)

    Returns:
        Chronological, non-overlapping sun windows
    """
    ordered = sorted(points, key=lambda p: p.time)
    windows: List[SunWindow] = []
    window_start: Optional[datetime] = None

    for point in ordered:
        if not point.blocked:
            if window_start is None:
                window_start = point.time
        elif window_start is not None:
            windows.append(SunWindow(start=window_start, end=point.time))
            window_start = None

    if window_start is not None:
        last = ordered[-1].time
        if last > window_start:
            windows.append(SunWindow(start=window_start, end=last))

    return tuple(windows)
