"""
Scheduler setup for the booking lifecycle jobs using APScheduler.

Supports a Redis job store for running several worker instances. The job
store only keeps trigger state: every at-most-once guarantee comes from the
conditional updates inside the jobs, so instances never need a shared lock.
"""

from urllib.parse import urlparse

from apscheduler.jobstores.redis import RedisJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from config import settings
from utils.logging_config import setup_logging

from .activation import activate_scheduled_bookings
from .no_show import handle_no_show_safety
from .reminders import send_reminders_15min, send_reminders_1h, send_reminders_24h

logger = setup_logging(
    name=__name__, log_level=settings.log_level, log_file="scheduler.log", log_dir="logs"
)


def _redis_jobstore(redis_url: str) -> RedisJobStore:
    # redis://host:port/db or redis://:password@host:port/db
    parsed = urlparse(redis_url)
    kwargs = {
        "host": parsed.hostname or "localhost",
        "port": parsed.port or 6379,
        "db": int(parsed.path.lstrip("/") or 0),
        "password": parsed.password,
    }
    if parsed.scheme == "rediss":
        kwargs["ssl"] = True
    return RedisJobStore(**kwargs)


def create_scheduler() -> AsyncIOScheduler:
    """
    Create scheduler with Redis backend for clustering support.

    Falls back to the in-memory job store if Redis is not configured or
    cannot be set up.
    """
    if settings.redis_url:
        try:
            jobstores = {"default": _redis_jobstore(settings.redis_url)}
            logger.info("Scheduler using Redis job store")
            return AsyncIOScheduler(jobstores=jobstores, timezone="UTC")
        except Exception as e:
            logger.warning(
                f"Failed to initialize Redis job store: {e}. Falling back to in-memory job store."
            )

    logger.info("Scheduler using in-memory job store")
    return AsyncIOScheduler(timezone="UTC")


def job_definitions():
    """``(job id, coroutine, interval minutes, description)`` for each timed job."""
    return [
        (
            "activate_scheduled_bookings",
            activate_scheduled_bookings,
            settings.activation_interval_minutes,
            "Activate scheduled bookings due soon",
        ),
        (
            "send_reminders_24h",
            send_reminders_24h,
            settings.reminder_24h_interval_minutes,
            "Send 24-hour technician reminders",
        ),
        (
            "send_reminders_1h",
            send_reminders_1h,
            settings.reminder_1h_interval_minutes,
            "Send 1-hour technician reminders",
        ),
        (
            "send_reminders_15min",
            send_reminders_15min,
            settings.reminder_15min_interval_minutes,
            "Send 15-minute technician reminders",
        ),
        (
            "handle_no_show_safety",
            handle_no_show_safety,
            settings.no_show_interval_minutes,
            "Recover bookings whose technician did not show",
        ),
    ]


scheduler = create_scheduler()


def setup_scheduler() -> AsyncIOScheduler:
    """Register the five lifecycle jobs and start the scheduler.

    Must be called from within a running event loop.
    """
    logger.info("Initializing scheduled booking jobs...")

    for job_id, func, minutes, name in job_definitions():
        scheduler.add_job(
            func,
            trigger=IntervalTrigger(minutes=minutes),
            id=job_id,
            name=name,
            replace_existing=True,
            coalesce=True,
            max_instances=settings.job_max_instances,
            misfire_grace_time=settings.job_misfire_grace_seconds,
        )
        logger.info(f"Job {job_id} scheduled every {minutes} min")

    scheduler.start()
    logger.info("All scheduled booking jobs are running")
    return scheduler


def shutdown_scheduler(wait: bool = False) -> None:
    """Shutdown the scheduler.

    In-flight ticks are not awaited by default; anything left half-done is
    picked up again by the next tick of some instance.
    """
    if scheduler.running:
        scheduler.shutdown(wait=wait)
    logger.info("Scheduler stopped")
