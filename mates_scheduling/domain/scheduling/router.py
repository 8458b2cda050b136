"""Scheduling router - FastAPI endpoints for availability and event dates"""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_group_member
from ...database import get_db
from ...models import EventAvailabilityRange, EventSuggestion, GroupMember
from ...shared.validators import validate_uuid
from .exceptions import EventNotFoundError, SuggestionNotFoundError
from .schemas import (
    AvailabilityRangeRequest,
    AvailabilityRangeResponse,
    ChooseSuggestionResponse,
    DeleteAvailabilityResponse,
    SchedulingStatusResponse,
    SubmitAvailabilityResponse,
    SuggestionResponse,
)
from .service import SchedulingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/groups/{group_id}/events/{event_id}", tags=["Scheduling"])


def get_scheduling_service(db: Session = Depends(get_db)) -> SchedulingService:
    """Dependency injection for SchedulingService"""
    return SchedulingService(db)


def valid_event_id(event_id: str) -> str:
    """Reject ids that cannot name an event before touching the database"""
    if not validate_uuid(event_id):
        raise EventNotFoundError(event_id)
    return event_id


def _range_response(r: EventAvailabilityRange) -> AvailabilityRangeResponse:
    return AvailabilityRangeResponse(
        id=r.id,
        eventId=r.event_id,
        userId=r.user_id,
        availableFrom=r.available_from,
        availableTo=r.available_to,
    )


def _suggestion_response(s: EventSuggestion, duration_minutes: int) -> SuggestionResponse:
    return SuggestionResponse(
        id=s.id,
        eventId=s.event_id,
        startTime=s.start_time,
        endTime=s.start_time + timedelta(minutes=duration_minutes),
        score=s.score,
        rank=s.rank,
    )


# ============================================================================
# AVAILABILITY RANGES
# ============================================================================


@router.post("/availability-range", response_model=SubmitAvailabilityResponse)
def submit_availability(
    group_id: str,
    ranges: list[AvailabilityRangeRequest],
    event_id: str = Depends(valid_event_id),
    member: GroupMember = Depends(require_group_member),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Replace the caller's availability; the last member in triggers suggestions"""
    result = service.submit_availability(
        group_id, event_id, member, [r.to_interval() for r in ranges]
    )
    event = service.get_event(group_id, event_id)
    return SubmitAvailabilityResponse(
        message="Availability ranges added successfully.",
        ranges=[_range_response(r) for r in result.ranges],
        status=result.status.value,
        suggestionsGenerated=result.triggered,
        suggestions=[_suggestion_response(s, event.duration_minutes) for s in result.suggestions],
    )


@router.get("/availability-range", response_model=list[AvailabilityRangeResponse])
def list_availability(
    group_id: str,
    event_id: str = Depends(valid_event_id),
    member: GroupMember = Depends(require_group_member),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Get every member's availability for an event"""
    return [_range_response(r) for r in service.list_availability(group_id, event_id)]


@router.delete("/availability-range", response_model=DeleteAvailabilityResponse)
def delete_availability(
    group_id: str,
    event_id: str = Depends(valid_event_id),
    member: GroupMember = Depends(require_group_member),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Delete all of the caller's availability for an event"""
    deleted = service.delete_availability(group_id, event_id, member)
    if deleted == 0:
        return DeleteAvailabilityResponse(
            message="No availability ranges to delete.", deletedCount=0
        )
    return DeleteAvailabilityResponse(
        message="Availability ranges deleted successfully.", deletedCount=deleted
    )


# ============================================================================
# SUGGESTIONS AND FINALIZATION
# ============================================================================


@router.get("/suggestions", response_model=list[SuggestionResponse])
def list_suggestions(
    group_id: str,
    event_id: str = Depends(valid_event_id),
    member: GroupMember = Depends(require_group_member),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Get the event's ranked suggestions"""
    event = service.get_event(group_id, event_id)
    return [
        _suggestion_response(s, event.duration_minutes)
        for s in service.list_suggestions(group_id, event_id)
    ]


@router.post("/calculate-best-date", response_model=list[SuggestionResponse])
def calculate_best_date(
    group_id: str,
    event_id: str = Depends(valid_event_id),
    member: GroupMember = Depends(require_group_member),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Recompute suggestions from the availability stored so far"""
    logger.info(f"🧮 User {member.user_id} recalculates best dates for event {event_id}")
    suggestions = service.recalculate(group_id, event_id)
    event = service.get_event(group_id, event_id)
    return [_suggestion_response(s, event.duration_minutes) for s in suggestions]


@router.post("/{suggestion_id}/choose-best-date", response_model=ChooseSuggestionResponse)
def choose_best_date(
    group_id: str,
    suggestion_id: str,
    event_id: str = Depends(valid_event_id),
    member: GroupMember = Depends(require_group_member),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Fix the event's date to one of its suggestions"""
    if not validate_uuid(suggestion_id):
        raise SuggestionNotFoundError(suggestion_id)

    event = service.choose_suggestion(group_id, event_id, suggestion_id, member)
    return ChooseSuggestionResponse(
        message="Best date chosen successfully.",
        eventId=event.id,
        startDate=event.start_date,
        endDate=event.end_date,
    )


@router.get("/scheduling-status", response_model=SchedulingStatusResponse)
def get_scheduling_status(
    group_id: str,
    event_id: str = Depends(valid_event_id),
    member: GroupMember = Depends(require_group_member),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Get where the event stands in the scheduling flow"""
    report = service.get_status(group_id, event_id)
    event = report.event
    return SchedulingStatusResponse(
        eventId=event.id,
        status=report.status.value,
        isAutoScheduled=event.is_auto_scheduled,
        durationMinutes=event.duration_minutes,
        rangeStart=event.range_start,
        rangeEnd=event.range_end,
        startDate=event.start_date,
        endDate=event.end_date,
        suggestions=[_suggestion_response(s, event.duration_minutes) for s in report.suggestions],
        submittedUserIds=sorted(report.submitted_user_ids),
        pendingUserIds=sorted(report.pending_user_ids),
    )
