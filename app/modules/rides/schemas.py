from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class RideStatus(str, Enum):
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ParticipantStatus(str, Enum):
    REQUESTED = "REQUESTED"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class RideCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    start_location: str = Field(min_length=1)
    end_location: Optional[str] = None
    experience_level: Optional[str] = None
    xp_required: Optional[int] = None
    pace: Optional[str] = None
    distance: Optional[float] = None
    duration: Optional[int] = Field(default=None, gt=0)  # minutes
    scheduled_at: Optional[datetime] = None
    keep_permanently: bool = False
    club_id: Optional[str] = None


class RideUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    start_location: Optional[str] = None
    end_location: Optional[str] = None
    experience_level: Optional[str] = None
    xp_required: Optional[int] = None
    pace: Optional[str] = None
    distance: Optional[float] = None
    duration: Optional[int] = Field(default=None, gt=0)
    scheduled_at: Optional[datetime] = None
    keep_permanently: Optional[bool] = None


class RideResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    start_location: str
    end_location: Optional[str] = None
    experience_level: Optional[str] = None
    xp_required: Optional[int] = None
    pace: Optional[str] = None
    distance: Optional[float] = None
    duration: Optional[int] = None
    scheduled_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    status: RideStatus
    keep_permanently: bool = False
    creator_id: str
    club_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ParticipantStatusUpdate(BaseModel):
    status: ParticipantStatus


class ParticipantResponse(BaseModel):
    id: str
    ride_id: str
    user_id: str
    status: ParticipantStatus
    joined_at: Optional[datetime] = None

    class Config:
        from_attributes = True
