"""Job-related Pydantic schemas.

This module defines the transient ParsedJob value produced by source adapters
and the career page crawler.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class ParsedJob(BaseModel):
    """A single posting returned by an adapter or crawler for one crawl pass.

    Never stored directly; the orchestrator folds it into a JobListing.
    """

    external_id: str = Field(..., min_length=1, description="Source-specific ID, stable across crawls")
    title: str
    url: str
    location: str | None = None
    remote: bool = False
    department: str | None = None
    description: str | None = None
    posted_at: datetime | None = None

