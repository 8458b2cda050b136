"""
Scheduling service - drives an event from collected availability to a fixed date

Status is derived from the event's fields rather than stored:

- awaiting_availability: not scheduled, some members have not submitted
- suggested: not scheduled, ranked suggestions exist
- unresolved: not scheduled, everyone submitted but no slot fits
- scheduled: start_date is set

Every mutating call runs in one transaction per event: it takes the event's
in-process lock, re-reads the event row FOR UPDATE, does its work and commits.
Database conflicts are retried a bounded number of times.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Callable, Optional

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from ...config import SCHEDULING_MAX_RETRIES, SCHEDULING_RETRY_BACKOFF_SECONDS, SUGGESTION_LIMIT
from ...models import Event, EventAvailabilityRange, EventSuggestion, GroupMember
from .availability import AvailabilityStore
from .calculator import compute
from .exceptions import (
    ConcurrencyConflictError,
    EventAlreadyScheduledError,
    EventNotFoundError,
    SuggestionNotFoundError,
)
from .intervals import Interval, normalize_instant
from .locking import EventLockRegistry, event_locks
from .repository import AvailabilityRepository, EventRepository, GroupRepository, SuggestionRepository
from .triggers import AllMembersSubmitted, SynchronousDispatcher

logger = logging.getLogger(__name__)


class SchedulingStatus(str, Enum):
    AWAITING_AVAILABILITY = "awaiting_availability"
    SUGGESTED = "suggested"
    UNRESOLVED = "unresolved"
    SCHEDULED = "scheduled"


@dataclass
class SubmissionResult:
    ranges: list[EventAvailabilityRange]
    triggered: bool
    status: SchedulingStatus
    suggestions: list[EventSuggestion] = field(default_factory=list)


@dataclass
class StatusReport:
    event: Event
    status: SchedulingStatus
    suggestions: list[EventSuggestion]
    submitted_user_ids: set[str]
    pending_user_ids: set[str]


class SchedulingService:
    """Service layer for availability-based scheduling"""

    def __init__(
        self,
        db: Session,
        dispatcher: Optional[SynchronousDispatcher] = None,
        locks: Optional[EventLockRegistry] = None,
        list_member_ids: Optional[Callable[[Session, str], set[str]]] = None,
        suggestion_limit: int = SUGGESTION_LIMIT,
        max_retries: int = SCHEDULING_MAX_RETRIES,
        retry_backoff: float = SCHEDULING_RETRY_BACKOFF_SECONDS,
    ):
        self.db = db
        self.events = EventRepository()
        self.ranges = AvailabilityRepository()
        self.suggestions = SuggestionRepository()
        self.locks = locks or event_locks
        self.list_member_ids = list_member_ids or GroupRepository.list_member_ids
        self.suggestion_limit = suggestion_limit
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff

        self.dispatcher = dispatcher or SynchronousDispatcher()
        self.dispatcher.subscribe(AllMembersSubmitted, self.handle_all_members_submitted)
        self.store = AvailabilityStore(self.dispatcher)

    # ========================================================================
    # TRANSACTIONS
    # ========================================================================

    def _in_event_transaction(self, group_id: str, event_id: str, work: Callable[[Event], object]):
        """Run `work` on the locked event and commit, retrying on conflicts.

        The event lock is held for one attempt at a time; backoff happens
        with the lock released so other writers on the event can finish.
        """
        for attempt in range(self.max_retries + 1):
            with self.locks.hold(event_id):
                try:
                    event = self.events.get_event_for_update(self.db, group_id, event_id)
                    if event is None:
                        logger.warning(f"⚠️ Event {event_id} not found in group {group_id}")
                        raise EventNotFoundError(event_id)
                    result = work(event)
                    self.db.commit()
                    return result
                except OperationalError as e:
                    self.db.rollback()
                    if attempt == self.max_retries:
                        logger.error(
                            f"❌ Giving up on event {event_id} after {attempt + 1} attempts: {e}"
                        )
                        raise ConcurrencyConflictError(
                            "The event is being updated by someone else. Please try again."
                        ) from e
                    logger.warning(f"🔁 Conflict on event {event_id} (attempt {attempt + 1}), retrying")
                except Exception:
                    self.db.rollback()
                    raise
            time.sleep(self.retry_backoff * (attempt + 1))

    def get_event(self, group_id: str, event_id: str) -> Event:
        event = self.events.get_event(self.db, group_id, event_id)
        if event is None:
            logger.warning(f"⚠️ Event {event_id} not found in group {group_id}")
            raise EventNotFoundError(event_id)
        return event

    # ========================================================================
    # AVAILABILITY
    # ========================================================================

    def submit_availability(
        self, group_id: str, event_id: str, member: GroupMember, ranges: list[Interval]
    ) -> SubmissionResult:
        """Replace the member's ranges and compute suggestions once everyone is in"""
        user_id = member.user_id
        intervals = [
            Interval(start=normalize_instant(r.start), end=normalize_instant(r.end)) for r in ranges
        ]
        logger.info(
            f"📥 User {user_id} posts {len(intervals)} availability ranges for event {event_id} "
            f"in group {group_id}"
        )

        def work(event: Event) -> SubmissionResult:
            rows = self.store.submit(self.db, event, user_id, intervals)
            member_ids = self.list_member_ids(self.db, event.group_id)

            triggered = False
            # A scheduled event keeps its date; new ranges are stored but not used
            if not event.is_scheduled and self.store.all_members_submitted(
                self.db, event.id, member_ids
            ):
                logger.info(f"✅ All members submitted availability for event {event.id}")
                self.dispatcher.publish(
                    AllMembersSubmitted(
                        event_id=event.id,
                        group_id=event.group_id,
                        member_ids=frozenset(member_ids),
                    )
                )
                triggered = True

            suggestions = self.suggestions.get_suggestions(self.db, event.id)
            status = self._derive_status(event, suggestions, member_ids)
            return SubmissionResult(
                ranges=rows, triggered=triggered, status=status, suggestions=suggestions
            )

        return self._in_event_transaction(group_id, event_id, work)

    def delete_availability(self, group_id: str, event_id: str, member: GroupMember) -> int:
        """Remove the member's ranges; stale suggestions go with them"""

        def work(event: Event) -> int:
            removed = self.store.remove(self.db, event, member.user_id)
            if removed and not event.is_scheduled:
                cleared = self.suggestions.clear_suggestions(self.db, event.id)
                if cleared:
                    logger.info(f"🧹 Cleared {cleared} stale suggestions for event {event.id}")
            return removed

        return self._in_event_transaction(group_id, event_id, work)

    def list_availability(self, group_id: str, event_id: str) -> list[EventAvailabilityRange]:
        event = self.get_event(group_id, event_id)
        return self.ranges.get_ranges(self.db, event.id)

    # ========================================================================
    # SUGGESTIONS
    # ========================================================================

    def handle_all_members_submitted(self, message: AllMembersSubmitted) -> list[EventSuggestion]:
        """Trigger handler; runs inside the submitting transaction"""
        event = self.db.get(Event, message.event_id)
        if event is None or event.is_scheduled:
            return []
        return self._suggest(event)

    def _suggest(self, event: Event) -> list[EventSuggestion]:
        ranges_by_user = self.store.ranges_for(self.db, event.id)
        candidates = compute(
            ranges_by_user, timedelta(minutes=event.duration_minutes), self.suggestion_limit
        )
        rows = self.suggestions.replace_suggestions(self.db, event.id, candidates)

        if not rows:
            logger.info(f"🤷 No feasible slot yet for event {event.id}")
        for row in rows:
            logger.info(
                f"📅 Suggested {row.start_time} for event {event.id} "
                f"with {row.score} available users"
            )
        return rows

    def recalculate(self, group_id: str, event_id: str) -> list[EventSuggestion]:
        """Recompute suggestions from whatever ranges are stored now"""

        def work(event: Event) -> list[EventSuggestion]:
            if event.is_scheduled:
                logger.warning(f"⚠️ Recalculation requested for scheduled event {event.id}")
                raise EventAlreadyScheduledError(event.id)
            return self._suggest(event)

        return self._in_event_transaction(group_id, event_id, work)

    def list_suggestions(self, group_id: str, event_id: str) -> list[EventSuggestion]:
        event = self.get_event(group_id, event_id)
        return self.suggestions.get_suggestions(self.db, event.id)

    def choose_suggestion(
        self, group_id: str, event_id: str, suggestion_id: str, member: GroupMember
    ) -> Event:
        """Fix the event's date to a suggestion and close it for auto-scheduling"""
        logger.info(
            f"🗳️ User {member.user_id} chooses suggestion {suggestion_id} for event {event_id}"
        )

        def work(event: Event) -> Event:
            suggestion = self.suggestions.get_suggestion(self.db, event.id, suggestion_id)
            if suggestion is None:
                logger.warning(f"⚠️ Suggestion {suggestion_id} not found for event {event.id}")
                raise SuggestionNotFoundError(suggestion_id)

            event.start_date = suggestion.start_time
            event.end_date = suggestion.start_time + timedelta(minutes=event.duration_minutes)
            event.is_auto_scheduled = False
            self.suggestions.clear_suggestions(self.db, event.id)
            self.db.flush()

            logger.info(
                f"✅ Event {event.id} scheduled for {event.start_date} - {event.end_date}"
            )
            return event

        return self._in_event_transaction(group_id, event_id, work)

    # ========================================================================
    # STATUS
    # ========================================================================

    def _derive_status(
        self, event: Event, suggestions: list[EventSuggestion], member_ids: set[str]
    ) -> SchedulingStatus:
        if event.is_scheduled:
            return SchedulingStatus.SCHEDULED
        if suggestions:
            return SchedulingStatus.SUGGESTED
        if self.store.all_members_submitted(self.db, event.id, member_ids):
            return SchedulingStatus.UNRESOLVED
        return SchedulingStatus.AWAITING_AVAILABILITY

    def get_status(self, group_id: str, event_id: str) -> StatusReport:
        event = self.get_event(group_id, event_id)
        member_ids = self.list_member_ids(self.db, event.group_id)
        suggestions = self.suggestions.get_suggestions(self.db, event.id)
        submitted = self.store.submitted_user_ids(self.db, event.id)
        return StatusReport(
            event=event,
            status=self._derive_status(event, suggestions, member_ids),
            suggestions=suggestions,
            submitted_user_ids=submitted & set(member_ids),
            pending_user_ids=set(member_ids) - submitted,
        )
