"""Database models for JobScout."""

from .base import Base
from .company import Company
from .crawl_log import CrawlLog
from .job_listing import JOB_STATUSES, JobListing
from .job_profile import JobProfile

__all__ = [
    "Base",
    "Company",
    "CrawlLog",
    "JobListing",
    "JobProfile",
    "JOB_STATUSES",
]
