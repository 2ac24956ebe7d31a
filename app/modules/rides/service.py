from supabase import Client
from app.modules.rides.schemas import (
    RideCreate, RideUpdate, RideResponse, RideStatus,
    ParticipantResponse, ParticipantStatus
)
from app.modules.rides.lifecycle import CANCELLABLE_STATES, compute_ends_at
from app.core.errors import AppError, Conflict, DatabaseError, ErrorCode, NotFound
from app.core.timeutils import parse_ts, to_iso, utcnow
from app.database.supabase_client import first_row, is_unique_violation
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


class RideService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_row(self, ride_id: str) -> dict:
        result = self.supabase.table("rides")\
            .select("*")\
            .eq("id", ride_id)\
            .maybe_single()\
            .execute()
        row = first_row(result)
        if row is None:
            raise NotFound("Ride not found", ErrorCode.RIDE_NOT_FOUND)
        return row

    def create_ride(self, ride_data: RideCreate, user_id: str) -> RideResponse:
        """Create a ride in PLANNED; the creator joins it as an accepted participant"""
        try:
            now = to_iso(utcnow())
            insert_data = ride_data.model_dump(exclude={"scheduled_at"})
            insert_data.update({
                "scheduled_at": to_iso(ride_data.scheduled_at),
                "ends_at": to_iso(compute_ends_at(ride_data.scheduled_at, ride_data.duration)),
                "status": RideStatus.PLANNED.value,
                "creator_id": user_id,
                "created_at": now,
                "updated_at": now,
            })
            result = self.supabase.table("rides").insert(insert_data).execute()
            if not result.data:
                raise DatabaseError("Failed to create ride")
            ride = result.data[0]

            self.supabase.table("ride_participants").insert({
                "ride_id": ride["id"],
                "user_id": user_id,
                "status": ParticipantStatus.ACCEPTED.value,
                "joined_at": now,
            }).execute()

            return RideResponse(**ride)
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error creating ride: {e}")
            raise DatabaseError("Failed to create ride")

    def get_ride_by_id(self, ride_id: str) -> RideResponse:
        return RideResponse(**self._get_row(ride_id))

    def list_rides(
        self,
        status: Optional[RideStatus] = None,
        creator_id: Optional[str] = None,
        club_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> List[RideResponse]:
        try:
            query = self.supabase.table("rides").select("*")
            if status:
                query = query.eq("status", RideStatus(status).value)
            if creator_id:
                query = query.eq("creator_id", creator_id)
            if club_id:
                query = query.eq("club_id", club_id)
            result = query.order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [RideResponse(**ride) for ride in (result.data or [])]
        except Exception as e:
            logger.error(f"Error listing rides: {e}")
            raise DatabaseError("Failed to list rides")

    def update_ride(self, ride_id: str, ride_data: RideUpdate) -> RideResponse:
        """Update a PLANNED ride. creator_id and status are not updatable here."""
        current = self._get_row(ride_id)
        if current["status"] != RideStatus.PLANNED.value:
            raise Conflict(f"Cannot update a ride that is {current['status']}", ErrorCode.CONFLICT)

        update_data = ride_data.model_dump(exclude_unset=True, exclude={"scheduled_at"})
        if "scheduled_at" in ride_data.model_fields_set:
            update_data["scheduled_at"] = to_iso(ride_data.scheduled_at)
        if "scheduled_at" in ride_data.model_fields_set or "duration" in ride_data.model_fields_set:
            scheduled_at = ride_data.scheduled_at if "scheduled_at" in ride_data.model_fields_set \
                else parse_ts(current.get("scheduled_at"))
            duration = update_data.get("duration", current.get("duration"))
            update_data["ends_at"] = to_iso(compute_ends_at(scheduled_at, duration))
        update_data["updated_at"] = to_iso(utcnow())

        # Conditional on PLANNED so a concurrent lifecycle pass wins cleanly
        result = self.supabase.table("rides")\
            .update(update_data)\
            .eq("id", ride_id)\
            .eq("status", RideStatus.PLANNED.value)\
            .execute()
        if not result.data:
            raise Conflict("Ride is no longer in PLANNED state")
        return RideResponse(**result.data[0])

    def cancel_ride(self, ride_id: str) -> RideResponse:
        """Creator action; allowed at any point before the ride is COMPLETED"""
        now = to_iso(utcnow())
        result = self.supabase.table("rides")\
            .update({"status": RideStatus.CANCELLED.value, "cancelled_at": now, "updated_at": now})\
            .eq("id", ride_id)\
            .in_("status", [s.value for s in CANCELLABLE_STATES])\
            .execute()
        if result.data:
            logger.info(f"Ride {ride_id} cancelled")
            return RideResponse(**result.data[0])
        current = self._get_row(ride_id)
        raise Conflict(f"Cannot cancel a ride that is {current['status']}")

    def delete_ride(self, ride_id: str) -> bool:
        """Delete the ride after its participants and posts"""
        self._get_row(ride_id)
        self.supabase.table("ride_participants")\
            .delete()\
            .eq("ride_id", ride_id)\
            .execute()
        self.supabase.table("posts")\
            .delete()\
            .eq("ride_id", ride_id)\
            .execute()
        result = self.supabase.table("rides")\
            .delete()\
            .eq("id", ride_id)\
            .execute()
        return len(result.data or []) > 0

    def join_ride(self, ride_id: str, user_id: str) -> ParticipantResponse:
        ride = self._get_row(ride_id)
        if ride["status"] != RideStatus.PLANNED.value:
            raise Conflict("Cannot join a ride that has already started or ended")

        existing = self.supabase.table("ride_participants")\
            .select("id")\
            .eq("ride_id", ride_id)\
            .eq("user_id", user_id)\
            .execute()
        if existing.data:
            raise Conflict("You have already requested to join this ride", ErrorCode.ALREADY_EXISTS)

        try:
            result = self.supabase.table("ride_participants").insert({
                "ride_id": ride_id,
                "user_id": user_id,
                "status": ParticipantStatus.REQUESTED.value,
                "joined_at": to_iso(utcnow()),
            }).execute()
        except Exception as e:
            # A concurrent request inserted the same (ride_id, user_id) first
            if is_unique_violation(e):
                raise Conflict("You have already requested to join this ride", ErrorCode.ALREADY_EXISTS)
            raise
        if not result.data:
            raise DatabaseError("Failed to join ride")
        return ParticipantResponse(**result.data[0])

    def leave_ride(self, ride_id: str, user_id: str) -> bool:
        result = self.supabase.table("ride_participants")\
            .delete()\
            .eq("ride_id", ride_id)\
            .eq("user_id", user_id)\
            .execute()
        if not result.data:
            raise NotFound("You are not a participant in this ride")
        return True

    def update_participant_status(self, ride_id: str, user_id: str, status: ParticipantStatus) -> ParticipantResponse:
        result = self.supabase.table("ride_participants")\
            .update({"status": ParticipantStatus(status).value})\
            .eq("ride_id", ride_id)\
            .eq("user_id", user_id)\
            .execute()
        if not result.data:
            raise NotFound("Participant not found")
        return ParticipantResponse(**result.data[0])

    def list_participants(self, ride_id: str) -> List[ParticipantResponse]:
        self._get_row(ride_id)
        result = self.supabase.table("ride_participants")\
            .select("*")\
            .eq("ride_id", ride_id)\
            .execute()
        return [ParticipantResponse(**p) for p in (result.data or [])]
