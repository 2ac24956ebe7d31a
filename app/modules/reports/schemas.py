from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class ReportType(str, Enum):
    RIDE = "RIDE"
    CLUB = "CLUB"
    LISTING = "LISTING"
    POST = "POST"
    USER = "USER"


class ReportStatus(str, Enum):
    PENDING = "PENDING"
    REVIEWING = "REVIEWING"
    RESOLVED = "RESOLVED"
    DISMISSED = "DISMISSED"


class ReportPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ReportCreate(BaseModel):
    type: ReportType
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    reported_item_id: Optional[str] = None
    reported_item_name: Optional[str] = None
    priority: ReportPriority = ReportPriority.MEDIUM


class ReportUpdate(BaseModel):
    status: ReportStatus
    resolution: Optional[str] = None


class ReportResponse(BaseModel):
    id: str
    reporter_id: Optional[str] = None
    type: ReportType
    title: str
    description: Optional[str] = None
    reported_item_id: Optional[str] = None
    reported_item_name: Optional[str] = None
    status: ReportStatus = ReportStatus.PENDING
    priority: ReportPriority = ReportPriority.MEDIUM
    resolution: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
