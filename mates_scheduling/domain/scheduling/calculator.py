"""
Coverage calculator

Sweeps over every member's availability boundaries to find the start times
where the most members are free for the whole meeting.

Steps:
1. Every interval contributes a +1 boundary at its start and a -1 at its end.
2. Boundaries are sorted by time with -1 before +1 on ties, so back-to-back
   intervals never count as simultaneous.
3. The sweep yields segments of constant coverage between consecutive instants.
4. For every coverage level k, consecutive segments with coverage >= k are merged
   into maximal runs. A run at least `duration` long is a candidate window whose
   representative start is the run's start, scored k.
5. Candidates sharing a start keep only their best score, then are ranked by
   score descending and start ascending.

The function is total: bad input simply yields fewer (or no) candidates.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Mapping

from .intervals import Interval

logger = logging.getLogger(__name__)

START = 1
END = -1


@dataclass(frozen=True)
class Segment:
    start: datetime
    end: datetime
    coverage: int


@dataclass(frozen=True)
class Candidate:
    """A ranked meeting start and how many members can attend it"""

    start_time: datetime
    score: int


def compute(
    ranges_by_user: Mapping[str, Iterable[Interval]],
    duration: timedelta,
    top_n: int,
) -> list[Candidate]:
    """Return at most `top_n` ranked candidates, or [] when nothing fits"""
    if top_n <= 0:
        return []

    boundaries = _boundaries(ranges_by_user)
    segments = _segments(boundaries)
    candidates = _candidate_windows(segments, duration)

    ranked = sorted(candidates, key=lambda c: (-c.score, c.start_time))
    logger.debug(
        f"Coverage sweep: {len(boundaries)} boundaries, {len(segments)} segments, "
        f"{len(ranked)} candidates"
    )
    return ranked[:top_n]


def _boundaries(ranges_by_user: Mapping[str, Iterable[Interval]]) -> list[tuple[datetime, int]]:
    boundaries = []
    for intervals in ranges_by_user.values():
        for interval in intervals:
            if interval.start >= interval.end:
                continue
            boundaries.append((interval.start, START))
            boundaries.append((interval.end, END))
    # END (-1) sorts before START (+1) at the same instant
    boundaries.sort()
    return boundaries


def _segments(boundaries: list[tuple[datetime, int]]) -> list[Segment]:
    segments = []
    coverage = 0
    for index, (time, delta) in enumerate(boundaries):
        coverage += delta
        if index + 1 == len(boundaries):
            break
        next_time = boundaries[index + 1][0]
        if next_time > time:
            segments.append(Segment(start=time, end=next_time, coverage=coverage))
    return segments


def _candidate_windows(segments: list[Segment], duration: timedelta) -> list[Candidate]:
    best_by_start: dict[datetime, Candidate] = {}
    levels = sorted({s.coverage for s in segments if s.coverage > 0})

    for level in levels:
        for run_start, run_end in _runs_at_least(segments, level):
            if run_end - run_start < duration:
                continue
            current = best_by_start.get(run_start)
            if current is None or level > current.score:
                best_by_start[run_start] = Candidate(start_time=run_start, score=level)

    return list(best_by_start.values())


def _runs_at_least(segments: list[Segment], level: int):
    """Yield (start, end) of maximal contiguous runs with coverage >= level"""
    run_start = None
    run_end = None
    for segment in segments:
        if segment.coverage >= level and run_end == segment.start:
            run_end = segment.end
        elif segment.coverage >= level:
            if run_start is not None:
                yield run_start, run_end
            run_start, run_end = segment.start, segment.end
        elif run_start is not None:
            yield run_start, run_end
            run_start = run_end = None
    if run_start is not None:
        yield run_start, run_end
