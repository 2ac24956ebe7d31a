from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.listings.schemas import ListingCreate, ListingUpdate, ListingResponse
from app.modules.listings.service import ListingService
from app.core.access import Principal
from app.core.dependencies import get_current_principal, require_ownership_or_admin, require_permission
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/listings", tags=["listings"])


def get_listing_service(supabase: Client = Depends(get_supabase)) -> ListingService:
    return ListingService(supabase)


@router.get("", response_model=List[ListingResponse])
async def list_listings(
    seller_id: Optional[str] = None,
    category: Optional[str] = None,
    include_sold: bool = False,
    limit: int = 20,
    offset: int = 0,
    principal: Principal = Depends(get_current_principal),
    service: ListingService = Depends(get_listing_service)
):
    return service.list_listings(
        seller_id=seller_id, category=category, include_sold=include_sold, limit=limit, offset=offset
    )


@router.post("", response_model=ListingResponse, status_code=201)
async def create_listing(
    listing_data: ListingCreate,
    principal: Principal = Depends(require_permission("CREATE_LISTINGS")),
    service: ListingService = Depends(get_listing_service)
):
    return service.create_listing(listing_data, principal.id)


@router.get("/{id}", response_model=ListingResponse)
async def get_listing(
    id: str,
    principal: Principal = Depends(get_current_principal),
    service: ListingService = Depends(get_listing_service)
):
    return service.get_listing_by_id(id)


@router.patch("/{id}", response_model=ListingResponse)
async def update_listing(
    id: str,
    listing_data: ListingUpdate,
    principal: Principal = Depends(require_ownership_or_admin("listing")),
    service: ListingService = Depends(get_listing_service)
):
    """Update a listing (seller or admin)"""
    return service.update_listing(id, listing_data)


@router.delete("/{id}", status_code=204)
async def delete_listing(
    id: str,
    principal: Principal = Depends(require_ownership_or_admin("listing")),
    service: ListingService = Depends(get_listing_service)
):
    """Delete a listing (seller or admin)"""
    service.delete_listing(id)
    return None
