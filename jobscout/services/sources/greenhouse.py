"""Greenhouse job board adapter.

API Docs: https://developers.greenhouse.io/job-board.html
"""

import re
from typing import Any

from jobscout.schemas.job import ParsedJob
from jobscout.services.sources.base import SourceAdapter
from jobscout.utils.date_parser import parse_posted_at
from jobscout.utils.text import is_remote_location, strip_html

GREENHOUSE_API_BASE = "https://boards-api.greenhouse.io/v1/boards"


class GreenhouseAdapter(SourceAdapter):
    """Adapter for boards hosted on Greenhouse.

    Known URL shapes:
        https://boards.greenhouse.io/companyname
        https://boards.greenhouse.io/companyname/jobs/123
        https://job-boards.greenhouse.io/companyname
        https://www.greenhouse.io/company/companyname
    """

    SOURCE_TYPE = "greenhouse"
    DISPLAY_NAME = "Greenhouse"
    TOKEN_PATTERNS = (
        re.compile(r"boards\.greenhouse\.io/([^/?#]+)", re.IGNORECASE),
        re.compile(r"job-boards\.greenhouse\.io/([^/?#]+)", re.IGNORECASE),
        re.compile(r"greenhouse\.io/company/([^/?#]+)", re.IGNORECASE),
    )

    def build_api_url(self, token: str) -> str:
        return f"{GREENHOUSE_API_BASE}/{token}/jobs?content=true"

    def map_response(self, payload: dict[str, Any]) -> list[ParsedJob]:
        jobs: list[ParsedJob] = []
        for job in payload.get("jobs", []):
            location = (job.get("location") or {}).get("name") or None
            departments = job.get("departments") or []
            content = job.get("content")

            jobs.append(
                ParsedJob(
                    external_id=str(job["id"]),
                    title=job.get("title", ""),
                    url=job.get("absolute_url", ""),
                    location=location,
                    remote=is_remote_location(location),
                    department=departments[0].get("name") if departments else None,
                    description=strip_html(content) if content else None,
                    posted_at=parse_posted_at(job.get("updated_at")),
                )
            )
        return jobs
