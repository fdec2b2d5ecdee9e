"""
Background scheduler for the reminder scan.

Uses APScheduler to run the :class:`ReminderService` on a fixed interval
while the API process is up.
"""

import logging
from typing import Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from club.services.reminders import ReminderService

logger = logging.getLogger(__name__)

REMINDER_JOB_ID = "scan_reminders"

scheduler: Optional[BackgroundScheduler] = None


def _on_job_error(event):
    exc = event.exception
    logger.error("Scheduled job failed: job_id=%s error=%s", event.job_id, exc,
                 exc_info=(type(exc), exc, exc.__traceback__) if exc else None, )


def _on_job_missed(event):
    logger.warning("Scheduled job missed: job_id=%s scheduled_run_time=%s", event.job_id, event.scheduled_run_time)


def init_scheduler(reminders: ReminderService, interval_seconds: int = 60, timezone: str = "UTC",
                   start: bool = True) -> BackgroundScheduler:
    """Create the scheduler with the reminder job and start it.

    Called once from the application lifespan.
    """
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already initialized")
        return scheduler

    scheduler = BackgroundScheduler(timezone=timezone, job_defaults={
        "coalesce": True,
        "max_instances": 1,
        "misfire_grace_time": interval_seconds,
    })
    scheduler.add_job(func=reminders.run, trigger=IntervalTrigger(seconds=interval_seconds), id=REMINDER_JOB_ID,
                      name="Scan upcoming classes and new sessions", replace_existing=True, )
    scheduler.add_listener(_on_job_error, EVENT_JOB_ERROR)
    scheduler.add_listener(_on_job_missed, EVENT_JOB_MISSED)
    logger.info("Scheduled job: %s (every %d seconds)", REMINDER_JOB_ID, interval_seconds)

    if start:
        scheduler.start()
        logger.info("Background scheduler started")
    return scheduler


def shutdown_scheduler() -> None:
    global scheduler

    if scheduler is not None:
        if scheduler.running:
            scheduler.shutdown(wait=True)
        logger.info("Background scheduler shut down")
        scheduler = None


def get_scheduler_status() -> dict:
    if scheduler is None:
        return {"status": "not_initialized", "jobs": []}

    jobs = [{"id": job.id, "name": job.name,
             "next_run_time": job.next_run_time.isoformat() if getattr(job, "next_run_time", None) else None,
             "trigger": str(job.trigger)} for job in scheduler.get_jobs()]
    return {"status": "running" if scheduler.running else "stopped", "jobs": jobs}
