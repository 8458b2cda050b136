"""
Availability range store

Owns each member's submitted free-time windows for an event. A submission is
validated as a whole before anything is written, then replaces the member's
previous set inside the caller's transaction.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Event, EventAvailabilityRange
from .exceptions import AvailabilityValidationError
from .intervals import Interval, clamped_within, event_bound, find_overlap, is_valid
from .repository import AvailabilityRepository
from .triggers import AvailabilitySubmitted, SynchronousDispatcher

logger = logging.getLogger(__name__)


class AvailabilityStore:
    """Range store for member availability"""

    def __init__(self, dispatcher: Optional[SynchronousDispatcher] = None):
        self.repo = AvailabilityRepository()
        self.dispatcher = dispatcher

    def validate(self, event: Event, intervals: list[Interval]) -> None:
        """Reject the whole batch on the first problem found"""
        if not intervals:
            raise AvailabilityValidationError("At least one availability range is required.")

        for interval in intervals:
            if not is_valid(interval):
                logger.warning(
                    f"⚠️ Invalid range for event {event.id}: {interval.start} >= {interval.end}"
                )
                raise AvailabilityValidationError("AvailableTo must be later than AvailableFrom.")

        if event.is_auto_scheduled:
            bound = event_bound(event.range_start, event.range_end)
            for interval in intervals:
                if not clamped_within(interval, bound):
                    logger.warning(
                        f"⚠️ Range {interval.start}-{interval.end} is outside event {event.id} range"
                    )
                    raise AvailabilityValidationError("Availability range outside event range.")

        overlap = find_overlap(intervals)
        if overlap is not None:
            first, second = overlap
            logger.warning(
                f"⚠️ Overlapping ranges for event {event.id}: "
                f"{first.start}-{first.end} and {second.start}-{second.end}"
            )
            raise AvailabilityValidationError(
                "One or more ranges in the request overlap with each other."
            )

    def submit(
        self, db: Session, event: Event, user_id: str, intervals: list[Interval]
    ) -> list[EventAvailabilityRange]:
        """Validate, then replace the member's ranges with `intervals`"""
        self.validate(event, intervals)

        replaced = self.repo.delete_user_ranges(db, event.id, user_id)
        if replaced:
            logger.info(
                f"🗑️ Removed {replaced} old availability ranges for user {user_id} in event {event.id}"
            )

        rows = self.repo.add_ranges(db, event.id, user_id, sorted(intervals))
        logger.info(f"📥 User {user_id} added {len(rows)} availability ranges for event {event.id}")

        if self.dispatcher is not None:
            self.dispatcher.publish(
                AvailabilitySubmitted(
                    event_id=event.id,
                    user_id=user_id,
                    range_count=len(rows),
                    replaced_count=replaced,
                )
            )
        return rows

    def remove(self, db: Session, event: Event, user_id: str) -> int:
        """Drop every range the member stored for the event"""
        removed = self.repo.delete_user_ranges(db, event.id, user_id)
        logger.info(f"🗑️ User {user_id} deleted {removed} availability ranges for event {event.id}")
        return removed

    def all_members_submitted(self, db: Session, event_id: str, member_ids: set[str]) -> bool:
        """True iff the group has members and every one has at least one stored range"""
        if not member_ids:
            return False
        submitted = self.repo.get_submitted_user_ids(db, event_id)
        return set(member_ids) <= submitted

    def submitted_user_ids(self, db: Session, event_id: str) -> set[str]:
        return self.repo.get_submitted_user_ids(db, event_id)

    def ranges_for(self, db: Session, event_id: str) -> dict[str, list[Interval]]:
        """Group the event's stored ranges by member"""
        ranges_by_user: dict[str, list[Interval]] = {}
        for row in self.repo.get_ranges(db, event_id):
            ranges_by_user.setdefault(row.user_id, []).append(
                Interval(start=row.available_from, end=row.available_to)
            )
        return ranges_by_user
