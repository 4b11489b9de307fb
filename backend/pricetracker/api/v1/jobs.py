"""Scraping job API endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from pricetracker.dependencies import get_job_service
from pricetracker.models.enums import JobStatus
from pricetracker.schemas import ApiResponse, JobCreateRequest, JobResponse, PaginationMeta
from pricetracker.services.job_service import ScrapingJobService

router = APIRouter()


@router.post("", response_model=ApiResponse, status_code=201)
async def create_job(
    body: JobCreateRequest,
    service: ScrapingJobService = Depends(get_job_service),
):
    """Queue a scraping job. It runs on the next scheduled pass or via /run."""
    job = await service.create_job(body.source_id, body.search_keyword, body.category)
    return ApiResponse(status="success", data=JobResponse.model_validate(job))


@router.get("", response_model=ApiResponse)
async def list_jobs(
    status: Optional[JobStatus] = Query(None, description="Filter by job status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    service: ScrapingJobService = Depends(get_job_service),
):
    """List scraping jobs, newest first."""
    jobs = await service.list_jobs(status=status, skip=skip, limit=limit)
    return ApiResponse(
        status="success",
        data=[JobResponse.model_validate(j) for j in jobs],
        meta=PaginationMeta(skip=skip, limit=limit, count=len(jobs)),
    )


@router.post("/run-pending", response_model=ApiResponse)
async def run_pending_jobs(service: ScrapingJobService = Depends(get_job_service)):
    """Run every pending job now, one after another."""
    jobs = await service.run_pending_jobs()
    return ApiResponse(status="success", data=[JobResponse.model_validate(j) for j in jobs])


@router.get("/{job_id}", response_model=ApiResponse)
async def get_job(job_id: UUID, service: ScrapingJobService = Depends(get_job_service)):
    """Get a scraping job by ID."""
    job = await service.get_job(job_id)
    return ApiResponse(status="success", data=JobResponse.model_validate(job))


@router.post("/{job_id}/run", response_model=ApiResponse)
async def run_job(job_id: UUID, service: ScrapingJobService = Depends(get_job_service)):
    """Run a pending job synchronously and return it in its final state.

    Returns 409 if the job is not pending.
    """
    job = await service.run_job(job_id)
    return ApiResponse(status="success", data=JobResponse.model_validate(job))
