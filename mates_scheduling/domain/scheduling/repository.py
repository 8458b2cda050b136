"""Scheduling repository - Database operations for events, ranges and suggestions

Methods only flush; the scheduling service owns commit and rollback so that a
whole submission lands in one transaction.
"""

from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...models import Event, EventAvailabilityRange, EventSuggestion, GroupMember
from .calculator import Candidate
from .intervals import Interval


class EventRepository:
    """Repository for the scheduling fields of events"""

    @staticmethod
    def get_event(db: Session, group_id: str, event_id: str) -> Optional[Event]:
        """Get an event scoped to its group"""
        return db.query(Event).filter(Event.id == event_id, Event.group_id == group_id).first()

    @staticmethod
    def get_event_for_update(db: Session, group_id: str, event_id: str) -> Optional[Event]:
        """Get an event and lock its row until the transaction ends"""
        return (
            db.query(Event)
            .filter(Event.id == event_id, Event.group_id == group_id)
            .with_for_update()
            .populate_existing()
            .first()
        )


class AvailabilityRepository:
    """Repository for member availability ranges"""

    @staticmethod
    def get_ranges(db: Session, event_id: str) -> list[EventAvailabilityRange]:
        """Get all ranges for an event"""
        return (
            db.query(EventAvailabilityRange)
            .filter(EventAvailabilityRange.event_id == event_id)
            .order_by(EventAvailabilityRange.user_id, EventAvailabilityRange.available_from)
            .all()
        )

    @staticmethod
    def delete_user_ranges(db: Session, event_id: str, user_id: str) -> int:
        """Delete every range of a member for an event, returning how many went"""
        deleted = (
            db.query(EventAvailabilityRange)
            .filter(
                EventAvailabilityRange.event_id == event_id,
                EventAvailabilityRange.user_id == user_id,
            )
            .delete(synchronize_session=False)
        )
        db.flush()
        return deleted

    @staticmethod
    def add_ranges(
        db: Session, event_id: str, user_id: str, intervals: Iterable[Interval]
    ) -> list[EventAvailabilityRange]:
        """Insert a batch of ranges for a member"""
        rows = [
            EventAvailabilityRange(
                event_id=event_id,
                user_id=user_id,
                available_from=interval.start,
                available_to=interval.end,
            )
            for interval in intervals
        ]
        db.add_all(rows)
        db.flush()
        return rows

    @staticmethod
    def get_submitted_user_ids(db: Session, event_id: str) -> set[str]:
        """Get ids of members with at least one stored range"""
        rows = (
            db.query(EventAvailabilityRange.user_id)
            .filter(EventAvailabilityRange.event_id == event_id)
            .distinct()
            .all()
        )
        return {row.user_id for row in rows}


class SuggestionRepository:
    """Repository for ranked suggestions"""

    @staticmethod
    def get_suggestions(db: Session, event_id: str) -> list[EventSuggestion]:
        """Get suggestions in rank order"""
        return (
            db.query(EventSuggestion)
            .filter(EventSuggestion.event_id == event_id)
            .order_by(EventSuggestion.rank)
            .all()
        )

    @staticmethod
    def get_suggestion(db: Session, event_id: str, suggestion_id: str) -> Optional[EventSuggestion]:
        """Get one of the event's current suggestions"""
        return (
            db.query(EventSuggestion)
            .filter(EventSuggestion.event_id == event_id, EventSuggestion.id == suggestion_id)
            .first()
        )

    @staticmethod
    def clear_suggestions(db: Session, event_id: str) -> int:
        """Delete all suggestions of an event"""
        deleted = (
            db.query(EventSuggestion)
            .filter(EventSuggestion.event_id == event_id)
            .delete(synchronize_session=False)
        )
        db.flush()
        return deleted

    @staticmethod
    def replace_suggestions(
        db: Session, event_id: str, candidates: list[Candidate]
    ) -> list[EventSuggestion]:
        """Clear the event's suggestions and store the new ranking"""
        SuggestionRepository.clear_suggestions(db, event_id)
        rows = [
            EventSuggestion(
                event_id=event_id,
                start_time=candidate.start_time,
                score=candidate.score,
                rank=position,
            )
            for position, candidate in enumerate(candidates, start=1)
        ]
        db.add_all(rows)
        db.flush()
        return rows


class GroupRepository:
    """Read access to the membership collaborator's tables"""

    @staticmethod
    def list_member_ids(db: Session, group_id: str) -> set[str]:
        """Get ids of accepted members of a group"""
        rows = (
            db.query(GroupMember.user_id)
            .filter(GroupMember.group_id == group_id, GroupMember.acceptance_status == "accepted")
            .all()
        )
        return {row.user_id for row in rows}

    @staticmethod
    def get_member(db: Session, group_id: str, user_id: str) -> Optional[GroupMember]:
        """Get an accepted membership"""
        return (
            db.query(GroupMember)
            .filter(
                GroupMember.group_id == group_id,
                GroupMember.user_id == user_id,
                GroupMember.acceptance_status == "accepted",
            )
            .first()
        )
