"""Lever job board adapter.

API Docs: https://github.com/lever/postings-api
"""

import re
from typing import Any

from jobscout.schemas.job import ParsedJob
from jobscout.services.sources.base import SourceAdapter
from jobscout.utils.date_parser import parse_posted_at
from jobscout.utils.text import strip_html

LEVER_API_BASE = "https://api.lever.co/v0/postings"


class LeverAdapter(SourceAdapter):
    """Adapter for boards hosted on Lever.

    Known URL shapes:
        https://jobs.lever.co/companyname
        https://jobs.lever.co/companyname/job-id
        https://lever.co/companyname
        https://api.lever.co/v0/postings/companyname
    """

    SOURCE_TYPE = "lever"
    DISPLAY_NAME = "Lever"
    TOKEN_PATTERNS = (
        re.compile(r"api\.lever\.co/v0/postings/([^/?#]+)", re.IGNORECASE),
        re.compile(r"jobs\.lever\.co/([^/?#]+)", re.IGNORECASE),
        re.compile(r"lever\.co/([^/?#]+)", re.IGNORECASE),
    )

    def build_api_url(self, token: str) -> str:
        return f"{LEVER_API_BASE}/{token}?mode=json"

    def map_response(self, payload: list[dict[str, Any]]) -> list[ParsedJob]:
        jobs: list[ParsedJob] = []
        for job in payload:
            categories = job.get("categories") or {}
            location = categories.get("location") or None
            remote = job.get("workplaceType") == "remote" or (
                "remote" in location.lower() if location else False
            )
            description = job.get("descriptionPlain") or (
                strip_html(job["description"]) if job.get("description") else None
            )

            jobs.append(
                ParsedJob(
                    external_id=job["id"],
                    title=job.get("text", ""),
                    url=job.get("hostedUrl", ""),
                    location=location,
                    remote=remote,
                    department=categories.get("department") or categories.get("team"),
                    description=description,
                    posted_at=parse_posted_at(job.get("createdAt")),
                )
            )
        return jobs
