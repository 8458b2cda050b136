import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from .config import DEFAULT_EVENT_DURATION_MINUTES
from .database import Base


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


class Group(Base):
    """Group owned by the membership service; read here to scope events"""

    __tablename__ = "groups"

    id = Column(String(36), primary_key=True, default=generate_public_id)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class GroupMember(Base):
    """Membership row; only accepted members count toward 'everyone submitted'"""

    __tablename__ = "group_members"
    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_group_member"),)

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(String(36), ForeignKey("groups.id"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    # pending, accepted, rejected
    acceptance_status = Column(String(20), default="accepted", nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    joined_at = Column(DateTime, server_default=func.now())


class Event(Base):
    """Scheduling-relevant slice of a group event.

    Title, description and location belong to the event CRUD service; this table
    only carries what the scheduling engine reads and writes.
    """

    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=generate_public_id)
    group_id = Column(String(36), ForeignKey("groups.id"), nullable=False, index=True)
    title = Column(String(255), nullable=True)

    # Required meeting length
    duration_minutes = Column(Integer, default=DEFAULT_EVENT_DURATION_MINUTES, nullable=False)
    # Optional outer bound the group agreed to search within (naive UTC)
    range_start = Column(DateTime, nullable=True)
    range_end = Column(DateTime, nullable=True)
    # True while the final date is still derived from member availability
    is_auto_scheduled = Column(Boolean, default=False, nullable=False)

    # Set together once finalized
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def is_scheduled(self) -> bool:
        return self.start_date is not None


class EventAvailabilityRange(Base):
    """One free-time window submitted by a member for an event"""

    __tablename__ = "event_availability_ranges"
    __table_args__ = (Index("ix_availability_event_user", "event_id", "user_id"),)

    id = Column(String(36), primary_key=True, default=generate_public_id)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False)
    available_from = Column(DateTime, nullable=False)
    available_to = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class EventSuggestion(Base):
    """Ranked candidate start time produced by the coverage calculator"""

    __tablename__ = "event_suggestions"

    id = Column(String(36), primary_key=True, default=generate_public_id)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    # Number of members available for the whole meeting
    score = Column(Integer, nullable=False)
    # 1-based position in the ranking
    rank = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
