from pydantic import BaseModel
from typing import List

from app.config.permissions_config import UserRole


class RoleAssign(BaseModel):
    role: UserRole


class UserRolesResponse(BaseModel):
    user_id: str
    roles: List[UserRole]


class PermissionEntry(BaseModel):
    name: str
    roles: List[str]


class RoleEntry(BaseModel):
    name: str
    level: int
    permissions: List[str]


class PermissionMatrixResponse(BaseModel):
    permissions: List[PermissionEntry]
    roles: List[RoleEntry]
