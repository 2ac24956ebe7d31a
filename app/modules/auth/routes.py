from fastapi import APIRouter, Depends
from app.modules.auth.schemas import MeResponse
from app.core.access import Principal
from app.core.dependencies import get_current_principal
from app.config.permissions_config import can_access_mobile, can_access_web, permissions_for_roles

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=MeResponse)
async def get_current_user(
    principal: Principal = Depends(get_current_principal),
):
    """Current authenticated user with roles and effective permissions (for frontend UI)."""
    return MeResponse(
        id=principal.id,
        email=principal.email,
        roles=sorted(principal.roles, key=lambda r: r.value),
        permissions=permissions_for_roles(principal.roles),
        can_access_web=can_access_web(principal.roles),
        can_access_mobile=can_access_mobile(principal.roles),
    )
