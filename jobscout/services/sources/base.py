"""Source adapter contract for API-based job boards.

Each adapter turns a company career page URL into normalized ParsedJob
values by calling the provider's public read API.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any

import httpx

from jobscout.config import settings
from jobscout.errors import BoardNotFoundError, SourceTokenError, UpstreamError
from jobscout.schemas.job import ParsedJob

logger = logging.getLogger(__name__)


class SourceAdapter(ABC):
    """Abstract base for provider-specific job board adapters.

    Subclasses set ``SOURCE_TYPE``, ``DISPLAY_NAME`` and ``TOKEN_PATTERNS``
    and implement ``build_api_url()`` and ``map_response()``.

    Constructor Args:
        client: Optional shared ``httpx.AsyncClient``. When omitted a client
            is created for each request.
        timeout: Request timeout in seconds. Defaults to settings.http_timeout
    """

    SOURCE_TYPE: str = "base"
    DISPLAY_NAME: str = "Base"
    TOKEN_PATTERNS: tuple[re.Pattern[str], ...] = ()

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        self.client = client
        self.timeout = timeout or settings.http_timeout

    def extract_token(self, career_url: str) -> str | None:
        """Extract the board/company token from a career page URL.

        Patterns are tried in order; the first capture wins.

        Args:
            career_url: The career page URL

        Returns:
            The token, or None if the URL matches none of the known shapes
        """
        for pattern in self.TOKEN_PATTERNS:
            match = pattern.search(career_url)
            if match and match.group(1):
                return match.group(1)
        return None

    async def parse(self, career_url: str) -> list[ParsedJob]:
        """Fetch and normalize every open posting for the career page.

        Args:
            career_url: The career page URL

        Returns:
            Parsed jobs in the order the API returned them

        Raises:
            SourceTokenError: If no token can be extracted from the URL
            BoardNotFoundError: If the API returns 404 for the token
            UpstreamError: On any other non-2xx response
        """
        token = self.extract_token(career_url)
        if not token:
            raise SourceTokenError(
                f"Could not extract {self.DISPLAY_NAME} board token from URL: {career_url}"
            )

        payload = await self._fetch_json(self.build_api_url(token), token)
        jobs = self.map_response(payload)
        logger.info(f"{self.DISPLAY_NAME} board '{token}' returned {len(jobs)} jobs")
        return jobs

    @abstractmethod
    def build_api_url(self, token: str) -> str:
        """Return the public API URL listing postings for ``token``."""

    @abstractmethod
    def map_response(self, payload: Any) -> list[ParsedJob]:
        """Map the provider's JSON payload to ParsedJob values."""

    async def _fetch_json(self, api_url: str, token: str) -> Any:
        if self.client is not None:
            response = await self.client.get(
                api_url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        else:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    api_url,
                    headers={"Accept": "application/json"},
                    timeout=self.timeout,
                )

        if response.status_code == 404:
            raise BoardNotFoundError(f"{self.DISPLAY_NAME} board not found: {token}")
        if not response.is_success:
            raise UpstreamError(
                f"{self.DISPLAY_NAME} API error: "
                f"{response.status_code} {response.reason_phrase}"
            )
        return response.json()
