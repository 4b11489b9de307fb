"""APScheduler-based trigger for pending scraping jobs.

Once a day (02:00 UTC by default) every PENDING job is run through the
job service. Runs never overlap.
"""

from typing import Optional

import structlog
from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from pricetracker.services.job_service import ScrapingJobService

logger = structlog.get_logger(__name__)


class ScrapingScheduler:
    """Runs pending scraping jobs on a cron schedule.

    This scheduler:
    - Fires run_pending_jobs() on the configured cron expression
    - Allows a single run at a time
    - Logs failures without stopping the scheduler
    """

    JOB_ID = "run_pending_scraping_jobs"

    def __init__(self, job_service: ScrapingJobService, cron: str = "0 2 * * *"):
        """Initialize scraping scheduler.

        Args:
            job_service: Service that runs the jobs
            cron: Standard 5-field crontab expression, evaluated in UTC
        """
        self.job_service = job_service
        self.cron = cron
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.logger = logger.bind(service="scraping_scheduler")

    def start(self) -> Optional[Job]:
        """Register the cron job and start the scheduler."""
        if self.scheduler.running:
            self.logger.warning("scheduler_already_running")
            return None

        job = self.scheduler.add_job(
            func=self._run_pending_wrapper,
            trigger=CronTrigger.from_crontab(self.cron, timezone="UTC"),
            id=self.JOB_ID,
            name="Run pending scraping jobs",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()

        self.logger.info(
            "scheduler_started",
            cron=self.cron,
            next_run=job.next_run_time.isoformat() if job.next_run_time else None,
        )
        return job

    def stop(self) -> None:
        """Stop the scheduler without waiting for a run in progress."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            self.logger.info("scheduler_stopped")
        else:
            self.logger.warning("scheduler_not_running")

    async def _run_pending_wrapper(self) -> None:
        """Entry point called by APScheduler.

        Catches all exceptions so a failed run never unschedules the job.
        """
        try:
            jobs = await self.job_service.run_pending_jobs()
            self.logger.info("scheduled_run_complete", jobs_run=len(jobs))
        except Exception as e:
            self.logger.error("scheduled_run_failed", error=str(e), exc_info=True)
