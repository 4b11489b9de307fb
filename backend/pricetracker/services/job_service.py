"""Scraping job lifecycle: PENDING -> RUNNING -> COMPLETED | FAILED."""

import uuid
from typing import List, Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from pricetracker.core.exceptions import InvalidJobStateError, NotFoundError
from pricetracker.models.base import utcnow
from pricetracker.models.enums import JobStatus
from pricetracker.models.scraping_job import ScrapingJob
from pricetracker.models.source import Source
from pricetracker.scrapers.registry import ScraperRegistry
from pricetracker.services.unification_service import ProductUnificationService


logger = structlog.get_logger(__name__)


class ScrapingJobService:
    """Creates and runs scraping jobs.

    A run:
    1. Loads the job and its source, refusing anything not PENDING
    2. Marks it RUNNING and commits, so the state is visible while scraping
    3. Scrapes the source and unifies the results
    4. Marks it COMPLETED or FAILED and updates the source's counters

    Failures inside the run never escape ``run_job``; they are recorded on
    the job. Only a missing job or a job in the wrong state raises.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        registry: ScraperRegistry,
        unification: ProductUnificationService,
    ):
        self.session_factory = session_factory
        self.registry = registry
        self.unification = unification
        self.logger = logger.bind(service="job_service")

    async def create_job(
        self,
        source_id: uuid.UUID,
        keyword: str,
        category: Optional[str] = None,
    ) -> ScrapingJob:
        """Queue a PENDING job for a source.

        Raises:
            NotFoundError: If the source does not exist
        """
        async with self.session_factory() as db:
            source = await db.get(Source, source_id)
            if source is None:
                raise NotFoundError("Source", source_id)

            job = ScrapingJob(
                source_id=source_id,
                search_keyword=keyword,
                category=category,
                status=JobStatus.PENDING,
            )
            db.add(job)
            await db.commit()

        self.logger.info("job_created", job_id=str(job.id), source=source.name, keyword=keyword)
        return job

    async def run_job(self, job_id: uuid.UUID) -> ScrapingJob:
        """Run a PENDING job to completion.

        Args:
            job_id: Job to run

        Returns:
            The job in its terminal state

        Raises:
            NotFoundError: If the job does not exist
            InvalidJobStateError: If the job is not PENDING (it is left unchanged)
        """
        async with self.session_factory() as db:
            result = await db.execute(
                select(ScrapingJob)
                .options(selectinload(ScrapingJob.source))
                .where(ScrapingJob.id == job_id)
            )
            job = result.scalar_one_or_none()
            if job is None:
                raise NotFoundError("ScrapingJob", job_id)
            if job.status != JobStatus.PENDING:
                raise InvalidJobStateError(job_id, job.status.value)

            source = job.source
            job.status = JobStatus.RUNNING
            job.started_at = utcnow()
            await db.commit()

        self.logger.info(
            "job_started",
            job_id=str(job_id),
            source=source.name,
            keyword=job.search_keyword,
        )

        items_found = None
        error_message = None
        try:
            scraper = self.registry.get(source.scraper_type)
            results = await scraper.scrape(job.search_keyword, job.category)
            stats = await self.unification.save_results(results, source)
            items_found = len(results)

            self.logger.info("job_completed", job_id=str(job_id), items_found=items_found, **stats)

        except Exception as e:
            error_message = str(e) or type(e).__name__
            self.logger.error("job_failed", job_id=str(job_id), error=str(e), exc_info=True)

        try:
            return await self._finish_job(job_id, source.id, items_found, error_message)
        except Exception as e:
            self.logger.error("job_finish_failed", job_id=str(job_id), error=str(e), exc_info=True)
            return await self._fail_job(job, str(e) or type(e).__name__)

    async def _finish_job(
        self,
        job_id: uuid.UUID,
        source_id: uuid.UUID,
        items_found: Optional[int],
        error_message: Optional[str],
    ) -> ScrapingJob:
        """Write the terminal state and bump the source counter in one unit of work.

        The counter is incremented in SQL so overlapping runs on one source
        all count.
        """
        now = utcnow()
        counter = "failed_scrapes" if error_message is not None else "successful_scrapes"

        async with self.session_factory() as db:
            job = await db.get(ScrapingJob, job_id)
            job.status = JobStatus.FAILED if error_message is not None else JobStatus.COMPLETED
            job.items_found = items_found
            job.error_message = error_message
            job.completed_at = now

            await db.execute(
                update(Source)
                .where(Source.id == source_id)
                .values({counter: getattr(Source, counter) + 1, "last_scraped_at": now})
                .execution_options(synchronize_session=False)
            )
            await db.commit()

        return job

    async def _fail_job(self, job: ScrapingJob, error_message: str) -> ScrapingJob:
        """Mark a job FAILED from a fresh session after its normal finish failed.

        If even that write fails the job stays RUNNING in the database; the
        returned copy still carries the failure.
        """
        job.status = JobStatus.FAILED
        job.error_message = error_message
        job.completed_at = utcnow()

        try:
            async with self.session_factory() as db:
                await db.execute(
                    update(ScrapingJob)
                    .where(ScrapingJob.id == job.id)
                    .values(
                        status=JobStatus.FAILED,
                        error_message=error_message,
                        completed_at=job.completed_at,
                    )
                    .execution_options(synchronize_session=False)
                )
                await db.commit()
        except Exception as e:
            self.logger.error("job_left_running", job_id=str(job.id), error=str(e), exc_info=True)

        return job

    async def run_pending_jobs(self) -> List[ScrapingJob]:
        """Run every PENDING job, oldest first.

        A job that cannot be run (e.g. another worker already started it) is
        logged and skipped.

        Returns:
            Jobs that were run
        """
        async with self.session_factory() as db:
            result = await db.execute(
                select(ScrapingJob.id)
                .where(ScrapingJob.status == JobStatus.PENDING)
                .order_by(ScrapingJob.created_at)
            )
            job_ids = list(result.scalars().all())

        self.logger.info("pending_jobs_found", count=len(job_ids))

        processed: List[ScrapingJob] = []
        for job_id in job_ids:
            try:
                processed.append(await self.run_job(job_id))
            except Exception as e:
                self.logger.error("pending_job_skipped", job_id=str(job_id), error=str(e))

        return processed

    async def get_job(self, job_id: uuid.UUID) -> ScrapingJob:
        """Get a job by ID.

        Raises:
            NotFoundError: If the job does not exist
        """
        async with self.session_factory() as db:
            job = await db.get(ScrapingJob, job_id)
        if job is None:
            raise NotFoundError("ScrapingJob", job_id)
        return job

    async def list_jobs(
        self,
        status: Optional[JobStatus] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[ScrapingJob]:
        """List jobs, newest first, optionally filtered by status."""
        stmt = select(ScrapingJob).order_by(ScrapingJob.created_at.desc()).offset(skip).limit(limit)
        if status is not None:
            stmt = stmt.where(ScrapingJob.status == status)

        async with self.session_factory() as db:
            result = await db.execute(stmt)
            return list(result.scalars().all())
