"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from .intervals import Interval, normalize_instant


class AvailabilityRangeRequest(BaseModel):
    """One free-time window; offsets are converted to UTC"""

    availableFrom: datetime
    availableTo: datetime

    @field_validator("availableFrom", "availableTo")
    @classmethod
    def to_utc(cls, v):
        return normalize_instant(v)

    def to_interval(self) -> Interval:
        return Interval(start=self.availableFrom, end=self.availableTo)


class AvailabilityRangeResponse(BaseModel):
    id: str
    eventId: str
    userId: str
    availableFrom: datetime
    availableTo: datetime


class SuggestionResponse(BaseModel):
    id: str
    eventId: str
    startTime: datetime
    endTime: datetime
    score: int
    rank: int


class SubmitAvailabilityResponse(BaseModel):
    message: str
    ranges: list[AvailabilityRangeResponse]
    status: str
    suggestionsGenerated: bool
    suggestions: list[SuggestionResponse]


class DeleteAvailabilityResponse(BaseModel):
    message: str
    deletedCount: int


class ChooseSuggestionResponse(BaseModel):
    message: str
    eventId: str
    startDate: datetime
    endDate: datetime


class SchedulingStatusResponse(BaseModel):
    eventId: str
    status: str
    isAutoScheduled: bool
    durationMinutes: int
    rangeStart: Optional[datetime] = None
    rangeEnd: Optional[datetime] = None
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    suggestions: list[SuggestionResponse]
    submittedUserIds: list[str]
    pendingUserIds: list[str]
