"""Crawl API router.

Endpoints to trigger crawls, read the crawl audit trail, re-score stored
listings and ingest postings crawled outside this process.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from jobscout.database import get_db
from jobscout.dependencies import get_user_id
from jobscout.errors import CompanyNotFoundError, CrawlInProgressError
from jobscout.schemas.crawl import (
    BatchCrawlResult,
    CrawlLogResponse,
    CrawlResult,
    ExternalCrawlRequest,
)
from jobscout.services.crawling import CrawlOrchestrator, get_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/crawl", tags=["crawl"])


@router.post(
    "/companies/{company_id}",
    response_model=CrawlResult,
    summary="Crawl one company"
)
async def crawl_company(
    company_id: UUID,
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    orchestrator: CrawlOrchestrator = Depends(get_orchestrator),
) -> CrawlResult:
    """Crawl a single company's career page.

    A crawl that fails inside the company (board missing, page timeout) still
    returns 200 with ``status="failed"``; the failure is in the crawl log.

    Raises:
        HTTPException 404: Company not found
        HTTPException 409: Another crawl is in progress
    """
    try:
        return await orchestrator.crawl_company(db, user_id, company_id)
    except CompanyNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CrawlInProgressError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post(
    "/all",
    response_model=BatchCrawlResult,
    summary="Crawl all active companies"
)
async def crawl_all_companies(
    api_only: bool = Query(False, description="Skip companies that need a browser"),
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    orchestrator: CrawlOrchestrator = Depends(get_orchestrator),
) -> BatchCrawlResult:
    """Crawl every active company, one at a time.

    Raises:
        HTTPException 409: Another crawl is in progress
    """
    try:
        return await orchestrator.crawl_all_companies(db, user_id, api_only=api_only)
    except CrawlInProgressError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get(
    "/logs",
    response_model=list[CrawlLogResponse],
    summary="List crawl logs"
)
async def list_crawl_logs(
    company_id: UUID | None = Query(None, description="Only logs for this company"),
    limit: int = Query(20, ge=1, le=200, description="Maximum number of logs"),
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    orchestrator: CrawlOrchestrator = Depends(get_orchestrator),
) -> list[CrawlLogResponse]:
    """Return the crawl audit trail, newest first."""
    return await orchestrator.get_crawl_logs(db, user_id, company_id=company_id, limit=limit)


@router.post(
    "/recalculate-scores",
    summary="Re-score stored listings"
)
async def recalculate_scores(
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    orchestrator: CrawlOrchestrator = Depends(get_orchestrator),
) -> dict:
    """Recompute match scores after a profile change.

    Returns:
        Number of listings whose score changed
    """
    updated = await orchestrator.recalculate_match_scores(db, user_id)
    return {"updated": updated}


@router.post(
    "/companies/{company_id}/external-results",
    response_model=CrawlResult,
    status_code=status.HTTP_201_CREATED,
    summary="Ingest externally crawled postings"
)
async def save_external_results(
    company_id: UUID,
    request: ExternalCrawlRequest,
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    orchestrator: CrawlOrchestrator = Depends(get_orchestrator),
) -> CrawlResult:
    """Store postings crawled by a browser running outside this service.

    Raises:
        HTTPException 404: Company not found
    """
    try:
        return await orchestrator.save_external_crawl_results(
            db, user_id, company_id, request.jobs, duration_ms=request.duration_ms
        )
    except CompanyNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
