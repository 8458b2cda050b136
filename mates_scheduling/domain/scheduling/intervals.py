"""Half-open time intervals and the checks the scheduler runs over them"""

from datetime import datetime, timezone
from typing import Iterable, NamedTuple, Optional


class Interval(NamedTuple):
    """Half-open interval [start, end) in naive UTC"""

    start: datetime
    end: datetime

    @property
    def duration(self):
        return self.end - self.start


def normalize_instant(value: datetime) -> datetime:
    """Convert to naive UTC; naive input is taken as UTC already"""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def is_valid(interval: Interval) -> bool:
    """Zero-length and reversed intervals are invalid"""
    return interval.start < interval.end


def overlaps(a: Interval, b: Interval) -> bool:
    """True iff the two half-open intervals share any instant"""
    return a.start < b.end and b.start < a.end


def clamped_within(interval: Interval, bound: Optional[Interval]) -> bool:
    """True iff there is no bound or the interval lies inside it"""
    if bound is None:
        return True
    return interval.start >= bound.start and interval.end <= bound.end


def find_overlap(intervals: Iterable[Interval]) -> Optional[tuple[Interval, Interval]]:
    """
    Return the first overlapping pair in a batch, or None.

    Sorting by start makes one adjacent pass equivalent to the pairwise check,
    and the answer does not depend on the input order.
    """
    ordered = sorted(intervals)
    for previous, current in zip(ordered, ordered[1:]):
        if overlaps(previous, current):
            return previous, current
    return None


def event_bound(range_start: Optional[datetime], range_end: Optional[datetime]) -> Optional[Interval]:
    """Build the search bound of an event; a missing side is left open"""
    if range_start is None and range_end is None:
        return None
    return Interval(
        start=range_start if range_start is not None else datetime.min,
        end=range_end if range_end is not None else datetime.max,
    )
