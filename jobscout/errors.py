"""Typed errors raised by the crawl pipeline.

Routers translate these into HTTP responses; the orchestrator converts any
error raised inside a single-company crawl into a failed CrawlLog.
"""


class JobScoutError(Exception):
    """Base class for pipeline errors."""


class NotFoundError(JobScoutError, ValueError):
    """A requested resource does not exist or belongs to another user."""


class CompanyNotFoundError(NotFoundError):
    def __init__(self, company_id):
        self.company_id = company_id
        super().__init__(f"Company not found: {company_id}")


class ListingNotFoundError(NotFoundError):
    def __init__(self, listing_id):
        self.listing_id = listing_id
        super().__init__(f"Job listing not found: {listing_id}")


class BoardNotFoundError(NotFoundError):
    """The job board API returned 404 for the extracted token."""


class CrawlInProgressError(JobScoutError):
    """Another crawl holds the process-wide crawl lock."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "A crawl operation is already in progress. Please wait and try again."
        )


class UpstreamError(JobScoutError):
    """A job board API or career page could not be fetched."""


class SourceTokenError(UpstreamError):
    """No board token could be extracted from the career page URL."""
