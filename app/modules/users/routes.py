from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.users.schemas import UserUpdate, UserResponse
from app.modules.users.service import UserService
from app.modules.roles.schemas import UserRolesResponse
from app.modules.roles.service import RoleService
from app.core.access import Principal, decide_permission, enforce
from app.core.dependencies import get_current_principal, get_role_service
from supabase import Client

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


def _require_self_or_manager(principal: Principal, user_id: str) -> None:
    if principal.id != user_id:
        enforce(decide_permission(principal, "MANAGE_USERS"))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service)
):
    return service.get_user_by_id(user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    principal: Principal = Depends(get_current_principal),
    service: UserService = Depends(get_user_service)
):
    """Update a profile (the user themself, or MANAGE_USERS)"""
    _require_self_or_manager(principal, user_id)
    return service.update_user(user_id, user_data)


@router.get("/{user_id}/roles", response_model=UserRolesResponse)
async def get_user_roles(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    role_service: RoleService = Depends(get_role_service)
):
    """Effective role set, including the implicit USER role"""
    _require_self_or_manager(principal, user_id)
    roles = role_service.resolve_roles(user_id)
    return UserRolesResponse(user_id=user_id, roles=sorted(roles, key=lambda r: r.value))
