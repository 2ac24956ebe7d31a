from fastapi import APIRouter, Depends, HTTPException
from app.database.supabase_client import get_supabase
from app.modules.rides.schemas import (
    RideCreate, RideUpdate, RideResponse, RideStatus,
    ParticipantResponse, ParticipantStatus, ParticipantStatusUpdate
)
from app.modules.rides.service import RideService
from app.config.permissions_config import ClubMemberRole
from app.core.access import Principal
from app.core.dependencies import (
    get_current_principal,
    get_ownership_resolver,
    require_ownership_or_admin,
    require_permission,
)
from app.core.ownership import OwnershipResolver
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/rides", tags=["rides"])

# Ride owners may only accept or decline join requests
_DECIDABLE_STATUSES = (ParticipantStatus.ACCEPTED, ParticipantStatus.DECLINED)


def get_ride_service(supabase: Client = Depends(get_supabase)) -> RideService:
    return RideService(supabase)


@router.get("", response_model=List[RideResponse])
async def list_rides(
    status: Optional[RideStatus] = None,
    creator_id: Optional[str] = None,
    club_id: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
    principal: Principal = Depends(get_current_principal),
    service: RideService = Depends(get_ride_service)
):
    """List rides with optional status/creator/club filters"""
    return service.list_rides(status=status, creator_id=creator_id, club_id=club_id, limit=limit, offset=offset)


@router.post("", response_model=RideResponse, status_code=201)
async def create_ride(
    ride_data: RideCreate,
    principal: Principal = Depends(require_permission("CREATE_RIDES")),
    resolver: OwnershipResolver = Depends(get_ownership_resolver),
    service: RideService = Depends(get_ride_service)
):
    """Create a ride (club rides need OFFICER or higher in that club)"""
    if ride_data.club_id:
        resolver.require_club_role(principal, ride_data.club_id, ClubMemberRole.OFFICER)
    return service.create_ride(ride_data, principal.id)


@router.get("/{id}", response_model=RideResponse)
async def get_ride(
    id: str,
    principal: Principal = Depends(get_current_principal),
    service: RideService = Depends(get_ride_service)
):
    """Get ride by ID"""
    return service.get_ride_by_id(id)


@router.patch("/{id}", response_model=RideResponse)
async def update_ride(
    id: str,
    ride_data: RideUpdate,
    principal: Principal = Depends(require_ownership_or_admin("ride")),
    service: RideService = Depends(get_ride_service)
):
    """Update a planned ride (creator or admin)"""
    return service.update_ride(id, ride_data)


@router.post("/{id}/cancel", response_model=RideResponse)
async def cancel_ride(
    id: str,
    principal: Principal = Depends(require_ownership_or_admin("ride")),
    service: RideService = Depends(get_ride_service)
):
    """Cancel a ride that has not completed yet (creator or admin)"""
    return service.cancel_ride(id)


@router.delete("/{id}", status_code=204)
async def delete_ride(
    id: str,
    principal: Principal = Depends(require_ownership_or_admin("ride")),
    service: RideService = Depends(get_ride_service)
):
    """Delete a ride (creator or admin)"""
    service.delete_ride(id)
    return None


@router.post("/{id}/join", response_model=ParticipantResponse, status_code=201)
async def join_ride(
    id: str,
    principal: Principal = Depends(require_permission("JOIN_RIDES")),
    service: RideService = Depends(get_ride_service)
):
    """Request to join a planned ride"""
    return service.join_ride(id, principal.id)


@router.delete("/{id}/leave", status_code=204)
async def leave_ride(
    id: str,
    principal: Principal = Depends(get_current_principal),
    service: RideService = Depends(get_ride_service)
):
    """Leave a ride"""
    service.leave_ride(id, principal.id)
    return None


@router.get("/{id}/participants", response_model=List[ParticipantResponse])
async def list_participants(
    id: str,
    principal: Principal = Depends(get_current_principal),
    service: RideService = Depends(get_ride_service)
):
    return service.list_participants(id)


@router.patch("/{id}/participants/{user_id}", response_model=ParticipantResponse)
async def update_participant_status(
    id: str,
    user_id: str,
    body: ParticipantStatusUpdate,
    principal: Principal = Depends(require_ownership_or_admin("ride")),
    service: RideService = Depends(get_ride_service)
):
    """Accept or decline a join request (creator or admin)"""
    if body.status not in _DECIDABLE_STATUSES:
        raise HTTPException(status_code=400, detail="Status must be ACCEPTED or DECLINED")
    return service.update_participant_status(id, user_id, body.status)
