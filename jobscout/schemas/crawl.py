"""Crawl-related Pydantic schemas.

Results returned by the crawl orchestrator and the audit log view.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from jobscout.schemas.job import ParsedJob


class CrawlResult(BaseModel):
    """Outcome of crawling a single company."""

    company_id: UUID
    company_name: str
    status: Literal["success", "failed"]
    jobs_found: int = 0
    new_jobs: int = 0
    error: str | None = None
    duration_ms: int | None = None


class BatchCrawlResult(BaseModel):
    """Outcome of crawling every active company of a user.

    Aggregate counts only include successful companies.
    """

    results: list[CrawlResult]
    total_jobs_found: int = 0
    new_jobs_found: int = 0
    skipped_company_ids: list[UUID] | None = Field(
        None,
        description="Companies without an API adapter, set only for api_only runs",
    )

    @property
    def companies_crawled(self) -> int:
        return len(self.results)


class CrawlLogResponse(BaseModel):
    """Schema for a crawl audit log entry."""

    id: UUID
    company_id: UUID
    company_name: str | None = None
    started_at: datetime
    completed_at: datetime | None = None
    status: Literal["running", "success", "failed"]
    jobs_found: int
    new_jobs: int
    error: str | None = None

    class Config:
        from_attributes = True


class ExternalCrawlRequest(BaseModel):
    """Postings crawled outside this process (e.g. a local browser run)."""

    jobs: list[ParsedJob] = Field(default_factory=list)
    duration_ms: int | None = Field(None, ge=0)
