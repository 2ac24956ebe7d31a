"""
Time-driven ride lifecycle.

PLANNED -> IN_PROGRESS -> COMPLETED, plus CANCELLED from either non-terminal
state by an explicit creator action. Scheduler passes only ever move rides
forward, and every write is a conditional update on the still-qualifying
predicate, so a ride cancelled while a pass is running stays cancelled.

A ride whose start and end are both in the past is started and then completed
in the same pass: it is written IN_PROGRESS first and COMPLETED second, so it
observably passes through IN_PROGRESS.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, FrozenSet, List, Optional
import logging

from supabase import Client

from app.config import settings
from app.core.timeutils import as_utc, to_iso, utcnow
from app.database.supabase_client import first_row
from app.modules.rides.schemas import ParticipantStatus, RideStatus

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[RideStatus, FrozenSet[RideStatus]] = {
    RideStatus.PLANNED: frozenset({RideStatus.IN_PROGRESS, RideStatus.CANCELLED}),
    RideStatus.IN_PROGRESS: frozenset({RideStatus.COMPLETED, RideStatus.CANCELLED}),
    RideStatus.COMPLETED: frozenset(),
    RideStatus.CANCELLED: frozenset(),
}

TERMINAL_STATES = frozenset(s for s, targets in ALLOWED_TRANSITIONS.items() if not targets)
CANCELLABLE_STATES = frozenset(s for s, targets in ALLOWED_TRANSITIONS.items() if RideStatus.CANCELLED in targets)


def can_transition(current: RideStatus, target: RideStatus) -> bool:
    return RideStatus(target) in ALLOWED_TRANSITIONS[RideStatus(current)]


def compute_ends_at(scheduled_at: Optional[datetime], duration_minutes: Optional[int]) -> Optional[datetime]:
    if scheduled_at is None:
        return None
    minutes = duration_minutes or settings.default_ride_duration_minutes
    return as_utc(scheduled_at) + timedelta(minutes=minutes)


@dataclass
class LifecycleResult:
    started: List[str] = field(default_factory=list)
    completed: List[str] = field(default_factory=list)
    credited: int = 0

    @property
    def updated(self) -> int:
        return len(self.started) + len(self.completed)

    def summary(self) -> dict:
        return {
            "started": len(self.started),
            "completed": len(self.completed),
            "updated": self.updated,
            "credited": self.credited,
        }


@dataclass
class CleanupResult:
    deleted: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def summary(self) -> dict:
        return {"deleted": len(self.deleted), "errors": list(self.errors)}


class RideLifecycle:
    def __init__(
        self,
        supabase: Client,
        retention_days: Optional[int] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.supabase = supabase
        self.retention_days = settings.ride_retention_days if retention_days is None else retention_days
        self.clock = clock

    def start_due_rides(self, now: datetime) -> List[str]:
        stamp = to_iso(now)
        result = self.supabase.table("rides")\
            .update({"status": RideStatus.IN_PROGRESS.value, "started_at": stamp, "updated_at": stamp})\
            .eq("status", RideStatus.PLANNED.value)\
            .lte("scheduled_at", stamp)\
            .execute()
        return [row["id"] for row in (result.data or [])]

    def complete_finished_rides(self, now: datetime) -> List[str]:
        stamp = to_iso(now)
        result = self.supabase.table("rides")\
            .update({"status": RideStatus.COMPLETED.value, "ended_at": stamp, "updated_at": stamp})\
            .eq("status", RideStatus.IN_PROGRESS.value)\
            .lte("ends_at", stamp)\
            .execute()
        return [row["id"] for row in (result.data or [])]

    def credit_completed_participants(self) -> int:
        """Mark ACCEPTED riders of COMPLETED rides as COMPLETED.

        Runs on every pass rather than only for rides completed in that pass, so
        a crediting write that failed earlier is picked up the next time.
        """
        pending = self.supabase.table("ride_participants")\
            .select("ride_id")\
            .eq("status", ParticipantStatus.ACCEPTED.value)\
            .execute()
        candidate_ids = sorted({row["ride_id"] for row in (pending.data or [])})
        if not candidate_ids:
            return 0
        completed = self.supabase.table("rides")\
            .select("id")\
            .in_("id", candidate_ids)\
            .eq("status", RideStatus.COMPLETED.value)\
            .execute()
        ride_ids = [row["id"] for row in (completed.data or [])]
        if not ride_ids:
            return 0
        result = self.supabase.table("ride_participants")\
            .update({"status": ParticipantStatus.COMPLETED.value})\
            .in_("ride_id", ride_ids)\
            .eq("status", ParticipantStatus.ACCEPTED.value)\
            .execute()
        return len(result.data or [])

    def advance(self, now: Optional[datetime] = None) -> LifecycleResult:
        """One scheduler pass over all non-terminal rides."""
        now = as_utc(now or self.clock())
        result = LifecycleResult()
        result.started = self.start_due_rides(now)
        result.completed = self.complete_finished_rides(now)
        result.credited = self.credit_completed_participants()
        if result.updated or result.credited:
            logger.info(
                f"Ride statuses updated: {len(result.started)} started, {len(result.completed)} completed, "
                f"{result.credited} participant(s) credited"
            )
        return result

    def _still_expired(self, ride_id: str, cutoff_iso: str) -> bool:
        result = self.supabase.table("rides")\
            .select("id")\
            .eq("id", ride_id)\
            .eq("status", RideStatus.COMPLETED.value)\
            .eq("keep_permanently", False)\
            .lt("ended_at", cutoff_iso)\
            .maybe_single()\
            .execute()
        return first_row(result) is not None

    def _delete_ride(self, ride_id: str, cutoff_iso: str) -> bool:
        # Children go first so a failed ride delete leaves a retryable ride, never orphans
        if not self._still_expired(ride_id, cutoff_iso):
            return False
        self.supabase.table("ride_participants").delete().eq("ride_id", ride_id).execute()
        self.supabase.table("posts").delete().eq("ride_id", ride_id).execute()
        # Same predicate as the candidate query, so a ride flagged keep_permanently meanwhile survives
        result = self.supabase.table("rides")\
            .delete()\
            .eq("id", ride_id)\
            .eq("status", RideStatus.COMPLETED.value)\
            .eq("keep_permanently", False)\
            .lt("ended_at", cutoff_iso)\
            .execute()
        return bool(result.data)

    def cleanup_expired(self, now: Optional[datetime] = None) -> CleanupResult:
        """Delete COMPLETED rides past the retention window unless keep_permanently is set."""
        now = as_utc(now or self.clock())
        cutoff_iso = to_iso(now - timedelta(days=self.retention_days))
        result = CleanupResult()

        candidates = self.supabase.table("rides")\
            .select("id, title")\
            .eq("status", RideStatus.COMPLETED.value)\
            .eq("keep_permanently", False)\
            .lt("ended_at", cutoff_iso)\
            .execute()
        rides = candidates.data or []
        if rides:
            logger.info(f"Found {len(rides)} ride(s) eligible for deletion")

        for ride in rides:
            try:
                if self._delete_ride(ride["id"], cutoff_iso):
                    result.deleted.append(ride["id"])
                    logger.info(f"Deleted ride: {ride.get('title')} ({ride['id']})")
            except Exception as e:
                message = f"Failed to delete ride {ride['id']}: {e}"
                logger.error(message)
                result.errors.append(message)

        if rides:
            logger.info(f"Ride cleanup completed. Deleted: {len(result.deleted)}, Errors: {len(result.errors)}")
        return result
