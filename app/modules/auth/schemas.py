from pydantic import BaseModel
from typing import List, Optional

from app.config.permissions_config import UserRole


class MeResponse(BaseModel):
    id: str
    email: Optional[str] = None
    roles: List[UserRole]
    permissions: List[str]
    can_access_web: bool
    can_access_mobile: bool
