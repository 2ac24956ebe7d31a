from fastapi import APIRouter, BackgroundTasks, Depends
from app.database.supabase_client import get_supabase
from app.modules.clubs.schemas import (
    ClubCreate, ClubUpdate, ClubResponse, ClubMemberResponse, MemberRoleUpdate
)
from app.modules.clubs.service import ClubService
from app.config.permissions_config import ClubMemberRole
from app.core.access import Principal
from app.core.dependencies import (
    ClubAccess,
    get_current_principal,
    require_club_role,
    require_ownership_or_admin,
    require_permission,
)
from app.core.notifications import NotificationEvent, notify
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/clubs", tags=["clubs"])


def get_club_service(supabase: Client = Depends(get_supabase)) -> ClubService:
    return ClubService(supabase)


@router.get("", response_model=List[ClubResponse])
async def list_clubs(
    owner_id: Optional[str] = None,
    verified: Optional[bool] = None,
    limit: int = 20,
    offset: int = 0,
    principal: Principal = Depends(get_current_principal),
    service: ClubService = Depends(get_club_service)
):
    """List clubs; private clubs are only listed for admins"""
    return service.list_clubs(
        include_private=principal.is_admin,
        owner_id=owner_id,
        verified=verified,
        limit=limit,
        offset=offset,
    )


@router.post("", response_model=ClubResponse, status_code=201)
async def create_club(
    club_data: ClubCreate,
    principal: Principal = Depends(require_permission("CREATE_CLUBS")),
    service: ClubService = Depends(get_club_service)
):
    """Create a club; the caller becomes its owner"""
    return service.create_club(club_data, principal.id)


@router.get("/{club_id}", response_model=ClubResponse)
async def get_club(
    club_id: str,
    principal: Principal = Depends(get_current_principal),
    service: ClubService = Depends(get_club_service)
):
    return service.get_club_by_id(club_id)


@router.patch("/{club_id}", response_model=ClubResponse)
async def update_club(
    club_id: str,
    club_data: ClubUpdate,
    principal: Principal = Depends(require_ownership_or_admin("club", "club_id")),
    service: ClubService = Depends(get_club_service)
):
    """Update club settings (owner, club ADMIN/FOUNDER, or system admin)"""
    return service.update_club(club_id, club_data)


@router.delete("/{club_id}", status_code=204)
async def delete_club(
    club_id: str,
    access: ClubAccess = Depends(require_club_role(ClubMemberRole.FOUNDER)),
    service: ClubService = Depends(get_club_service)
):
    """Delete a club (FOUNDER or system admin)"""
    service.delete_club(club_id)
    return None


@router.post("/{club_id}/join", response_model=ClubMemberResponse, status_code=201)
async def join_club(
    club_id: str,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(require_permission("JOIN_CLUBS")),
    service: ClubService = Depends(get_club_service)
):
    member = service.join_club(club_id, principal.id)
    club = service.get_club_by_id(club_id)
    background_tasks.add_task(
        notify,
        NotificationEvent(
            type="club.member_joined",
            recipient_id=club.owner_id,
            payload={"club_id": club_id, "user_id": principal.id},
        ),
    )
    return member


@router.delete("/{club_id}/leave", status_code=204)
async def leave_club(
    club_id: str,
    principal: Principal = Depends(get_current_principal),
    service: ClubService = Depends(get_club_service)
):
    service.leave_club(club_id, principal.id)
    return None


@router.get("/{club_id}/members", response_model=List[ClubMemberResponse])
async def list_members(
    club_id: str,
    access: ClubAccess = Depends(require_club_role(ClubMemberRole.MEMBER)),
    service: ClubService = Depends(get_club_service)
):
    """List club members (members only)"""
    return service.list_members(club_id)


@router.patch("/{club_id}/members/{user_id}", response_model=ClubMemberResponse)
async def update_member_role(
    club_id: str,
    user_id: str,
    body: MemberRoleUpdate,
    access: ClubAccess = Depends(require_club_role(ClubMemberRole.ADMIN)),
    service: ClubService = Depends(get_club_service)
):
    """Change a member's club role (club ADMIN or higher)"""
    return service.update_member_role(club_id, user_id, body.role, access.acting_role)


@router.delete("/{club_id}/members/{user_id}", status_code=204)
async def remove_member(
    club_id: str,
    user_id: str,
    access: ClubAccess = Depends(require_club_role(ClubMemberRole.ADMIN)),
    service: ClubService = Depends(get_club_service)
):
    """Remove a member (club ADMIN or higher). FOUNDER rows cannot be removed."""
    service.remove_member(club_id, user_id, access.acting_role)
    return None
