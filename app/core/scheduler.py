"""
Background job scheduler.

Jobs are registered by name with an APScheduler trigger and a no-argument
handler. Each job has its own lock: a scheduled trigger that fires while the
job is still running is skipped, and a manual run of a running job is
rejected with Conflict. Different jobs never wait on each other.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging
import threading

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from app.config import settings
from app.core.errors import Conflict, ErrorCode, JobExecutionError, NotFound
from app.core.timeutils import to_iso, utcnow
from app.database.supabase_client import get_service_supabase

logger = logging.getLogger(__name__)


@dataclass
class JobState:
    running: bool = False
    last_started_at: Optional[datetime] = None
    last_finished_at: Optional[datetime] = None
    last_result: Any = None
    last_error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "running": self.running,
            "last_started_at": to_iso(self.last_started_at),
            "last_finished_at": to_iso(self.last_finished_at),
            "last_result": self.last_result,
            "last_error": self.last_error,
        }


@dataclass
class RegisteredJob:
    name: str
    handler: Callable[[], Any]
    trigger: BaseTrigger
    lock: threading.Lock
    state: JobState


class JobScheduler:
    def __init__(self, timezone: str = "UTC"):
        self.timezone = timezone
        self._jobs: Dict[str, RegisteredJob] = {}
        self._scheduler: Optional[BackgroundScheduler] = None
        # Guards state updates only, never held while a handler runs
        self._state_lock = threading.Lock()

    def register(self, name: str, handler: Callable[[], Any], trigger: BaseTrigger) -> None:
        if name in self._jobs:
            raise ValueError(f"Job already registered: {name}")
        self._jobs[name] = RegisteredJob(
            name=name,
            handler=handler,
            trigger=trigger,
            lock=threading.Lock(),
            state=JobState(),
        )

    def _get_job(self, name: str) -> RegisteredJob:
        job = self._jobs.get(name)
        if job is None:
            raise NotFound(f"Job '{name}' not found", ErrorCode.JOB_NOT_FOUND)
        return job

    def _execute(self, job: RegisteredJob) -> Any:
        """Run the handler with job.lock already held and record the outcome."""
        try:
            with self._state_lock:
                job.state.running = True
                job.state.last_started_at = utcnow()
            logger.info(f"Job {job.name} started")
            result = job.handler()
        except Exception as e:
            with self._state_lock:
                job.state.last_error = str(e)
                job.state.last_result = None
            raise
        else:
            with self._state_lock:
                job.state.last_error = None
                job.state.last_result = result
            logger.info(f"Job {job.name} completed: {result}")
            return result
        finally:
            with self._state_lock:
                job.state.running = False
                job.state.last_finished_at = utcnow()
            job.lock.release()

    def _run_scheduled(self, name: str) -> None:
        job = self._get_job(name)
        if not job.lock.acquire(blocking=False):
            logger.info(f"Job {name} is still running, skipping this trigger")
            return
        try:
            self._execute(job)
        except Exception:
            logger.exception(f"Scheduled job {name} failed")

    def run_job_manually(self, name: str) -> Any:
        """Run a job now on the calling thread. Raises Conflict if it is already running."""
        job = self._get_job(name)
        if not job.lock.acquire(blocking=False):
            raise Conflict(f"Job '{name}' is already running", ErrorCode.JOB_ALREADY_RUNNING)
        logger.info(f"Job {name} triggered manually")
        try:
            return self._execute(job)
        except Exception as e:
            logger.exception(f"Manual run of job {name} failed")
            raise JobExecutionError(name, e) from e

    def list_jobs(self) -> List[dict]:
        jobs = []
        for name, job in self._jobs.items():
            next_run = None
            if self._scheduler is not None:
                scheduled = self._scheduler.get_job(name)
                if scheduled is not None and scheduled.next_run_time is not None:
                    next_run = scheduled.next_run_time.isoformat()
            with self._state_lock:
                state = job.state.to_dict()
            jobs.append({"name": name, "trigger": str(job.trigger), "next_run_time": next_run, **state})
        return jobs

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        if self.running:
            return
        self._scheduler = BackgroundScheduler(timezone=self.timezone)
        for name, job in self._jobs.items():
            self._scheduler.add_job(
                self._run_scheduled,
                trigger=job.trigger,
                args=[name],
                id=name,
                max_instances=1,
                coalesce=True,
                replace_existing=True,
            )
        self._scheduler.start()
        logger.info(f"Scheduler started with jobs: {', '.join(self._jobs)}")

    def shutdown(self) -> None:
        if self.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
        self._scheduler = None


def create_job_scheduler(client_factory: Callable[[], Any] = get_service_supabase) -> JobScheduler:
    """Scheduler with the built-in maintenance jobs, using the service-role client."""
    # Imported here to keep app.core free of module-level imports from app.modules
    from app.modules.rides.lifecycle import RideLifecycle
    from app.modules.users.service import UserService

    scheduler = JobScheduler(timezone=settings.scheduler_timezone)

    def update_ride_statuses():
        return RideLifecycle(client_factory()).advance().summary()

    def cleanup_old_rides():
        return RideLifecycle(client_factory()).cleanup_expired().summary()

    def update_user_statistics():
        return UserService(client_factory()).update_ride_statistics()

    scheduler.register(
        "update_ride_statuses",
        update_ride_statuses,
        IntervalTrigger(minutes=settings.ride_status_interval_minutes),
    )
    scheduler.register(
        "cleanup_old_rides",
        cleanup_old_rides,
        CronTrigger(hour=settings.ride_cleanup_hour, minute=0, timezone=settings.scheduler_timezone),
    )
    scheduler.register(
        "update_user_statistics",
        update_user_statistics,
        CronTrigger(hour=settings.user_stats_hour, minute=0, timezone=settings.scheduler_timezone),
    )
    return scheduler


job_scheduler = create_job_scheduler()


def get_job_scheduler() -> JobScheduler:
    return job_scheduler
