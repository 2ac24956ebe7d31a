from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum


class ListingCondition(str, Enum):
    NEW = "NEW"
    LIKE_NEW = "LIKE_NEW"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"


class ListingCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    price: float = Field(ge=0)
    currency: str = "USD"
    category: Optional[str] = None
    condition: Optional[ListingCondition] = None
    images: List[str] = Field(default_factory=list)
    location: Optional[str] = None


class ListingUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = None
    category: Optional[str] = None
    condition: Optional[ListingCondition] = None
    images: Optional[List[str]] = None
    location: Optional[str] = None
    is_sold: Optional[bool] = None


class ListingResponse(BaseModel):
    id: str
    seller_id: str
    title: str
    description: Optional[str] = None
    price: float
    currency: str = "USD"
    category: Optional[str] = None
    condition: Optional[ListingCondition] = None
    images: List[str] = Field(default_factory=list)
    location: Optional[str] = None
    is_sold: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
