from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class PostCreate(BaseModel):
    content: str = Field(min_length=1)
    images: List[str] = Field(default_factory=list)
    ride_id: Optional[str] = None
    club_id: Optional[str] = None


class PostResponse(BaseModel):
    id: str
    author_id: str
    content: str
    images: List[str] = Field(default_factory=list)
    ride_id: Optional[str] = None
    club_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
