"""Ashby job board adapter.

API Docs: https://developers.ashbyhq.com/docs/public-job-posting-api
"""

import re
from typing import Any

from jobscout.schemas.job import ParsedJob
from jobscout.services.sources.base import SourceAdapter
from jobscout.utils.date_parser import parse_posted_at
from jobscout.utils.text import is_remote_location, strip_html

ASHBY_API_BASE = "https://api.ashbyhq.com/posting-api/job-board"


class AshbyAdapter(SourceAdapter):
    """Adapter for boards hosted on Ashby.

    Known URL shapes:
        https://jobs.ashbyhq.com/companyname
        https://jobs.ashby.com/companyname
        https://api.ashbyhq.com/posting-api/job-board/companyname
    """

    SOURCE_TYPE = "ashby"
    DISPLAY_NAME = "Ashby"
    TOKEN_PATTERNS = (
        re.compile(r"jobs\.ashbyhq\.com/([^/?#]+)", re.IGNORECASE),
        re.compile(r"jobs\.ashby\.com/([^/?#]+)", re.IGNORECASE),
        re.compile(r"api\.ashbyhq\.com/posting-api/job-board/([^/?#]+)", re.IGNORECASE),
    )

    def build_api_url(self, token: str) -> str:
        return f"{ASHBY_API_BASE}/{token}"

    def map_response(self, payload: dict[str, Any]) -> list[ParsedJob]:
        jobs: list[ParsedJob] = []
        for job in payload.get("jobs", []):
            location = job.get("location") or None
            description = job.get("descriptionPlain") or (
                strip_html(job["description"]) if job.get("description") else None
            )

            jobs.append(
                ParsedJob(
                    external_id=job["id"],
                    title=job.get("title", ""),
                    url=job.get("jobUrl", ""),
                    location=location,
                    remote=bool(job.get("isRemote")) or is_remote_location(location),
                    department=job.get("department") or job.get("team"),
                    description=description,
                    posted_at=parse_posted_at(job.get("publishedDate")),
                )
            )
        return jobs
