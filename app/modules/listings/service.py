from supabase import Client
from app.modules.listings.schemas import ListingCreate, ListingUpdate, ListingResponse
from app.modules.roles.service import RoleService
from app.config.permissions_config import UserRole
from app.core.errors import AppError, DatabaseError, ErrorCode, NotFound
from app.core.timeutils import to_iso, utcnow
from app.database.supabase_client import first_row
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


class ListingService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_listing(self, listing_data: ListingCreate, seller_id: str) -> ListingResponse:
        """Create a listing; the seller gains SELLER if they did not hold it yet"""
        try:
            now = to_iso(utcnow())
            result = self.supabase.table("marketplace_listings").insert({
                **listing_data.model_dump(mode="json"),
                "seller_id": seller_id,
                "is_sold": False,
                "created_at": now,
                "updated_at": now,
            }).execute()
            if not result.data:
                raise DatabaseError("Failed to create listing")

            RoleService(self.supabase).grant_role(seller_id, UserRole.SELLER)
            return ListingResponse(**result.data[0])
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error creating listing: {e}")
            raise DatabaseError("Failed to create listing")

    def get_listing_by_id(self, listing_id: str) -> ListingResponse:
        result = self.supabase.table("marketplace_listings")\
            .select("*")\
            .eq("id", listing_id)\
            .maybe_single()\
            .execute()
        row = first_row(result)
        if row is None:
            raise NotFound("Listing not found", ErrorCode.LISTING_NOT_FOUND)
        return ListingResponse(**row)

    def list_listings(
        self,
        seller_id: Optional[str] = None,
        category: Optional[str] = None,
        include_sold: bool = False,
        limit: int = 20,
        offset: int = 0
    ) -> List[ListingResponse]:
        query = self.supabase.table("marketplace_listings").select("*")
        if seller_id:
            query = query.eq("seller_id", seller_id)
        if category:
            query = query.eq("category", category)
        if not include_sold:
            query = query.eq("is_sold", False)
        result = query.order("created_at", desc=True)\
            .limit(limit)\
            .offset(offset)\
            .execute()
        return [ListingResponse(**row) for row in (result.data or [])]

    def update_listing(self, listing_id: str, listing_data: ListingUpdate) -> ListingResponse:
        update_data = listing_data.model_dump(mode="json", exclude_unset=True)
        update_data["updated_at"] = to_iso(utcnow())
        result = self.supabase.table("marketplace_listings")\
            .update(update_data)\
            .eq("id", listing_id)\
            .execute()
        if not result.data:
            raise NotFound("Listing not found", ErrorCode.LISTING_NOT_FOUND)
        return ListingResponse(**result.data[0])

    def delete_listing(self, listing_id: str) -> bool:
        result = self.supabase.table("marketplace_listings")\
            .delete()\
            .eq("id", listing_id)\
            .execute()
        if not result.data:
            raise NotFound("Listing not found", ErrorCode.LISTING_NOT_FOUND)
        return True
