from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.config.permissions_config import ClubMemberRole


class ClubCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    is_public: bool = True


class ClubUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    is_public: Optional[bool] = None


class ClubResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    is_public: bool = True
    verified: bool = False
    owner_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ClubVerify(BaseModel):
    verified: bool = True


class ClubMemberResponse(BaseModel):
    id: str
    club_id: str
    user_id: str
    role: ClubMemberRole
    joined_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MemberRoleUpdate(BaseModel):
    role: ClubMemberRole
