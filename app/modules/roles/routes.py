from fastapi import APIRouter, Depends
from app.modules.roles.schemas import PermissionMatrixResponse
from app.config.permissions_config import get_permission_matrix
from app.core.access import Principal
from app.core.dependencies import get_current_principal

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("/matrix", response_model=PermissionMatrixResponse)
async def get_matrix(principal: Principal = Depends(get_current_principal)):
    """Static permission matrix and role hierarchy, for client-side gating"""
    return get_permission_matrix()
