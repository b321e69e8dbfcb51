"""Heuristic crawler for career pages without a job board API.

Renders the page in headless Chromium, expands lazily loaded listings and
extracts postings in two passes:

1. Structured data - ``application/ld+json`` JobPosting blocks.
2. HTML heuristics - only when pass 1 finds nothing. Ordered container
   selectors are tried and the first selector that yields postings wins;
   results from different selectors are never merged.

The precedence of both passes, the selector order and the skip-phrase list
are part of the crawler's contract; test fixtures encode real career pages.
"""

import hashlib
import json
import logging
import re
from typing import Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Error as PlaywrightError, Page

from jobscout.schemas.job import ParsedJob
from jobscout.services.browser import BrowserManager, browser_manager
from jobscout.utils.date_parser import parse_posted_at
from jobscout.utils.text import is_remote_location, normalize_whitespace, strip_html

logger = logging.getLogger(__name__)

NAVIGATION_TIMEOUT_MS = 30_000
SETTLE_DELAY_MS = 2_000
LOAD_MORE_DELAY_MS = 2_000
LOAD_MORE_VISIBLE_TIMEOUT_MS = 1_000
SCROLL_CYCLES = 5
SCROLL_DELAY_MS = 500
SCROLL_FINAL_DELAY_MS = 1_000

LOAD_MORE_SELECTORS = [
    'button:has-text("Load More")',
    'button:has-text("Show More")',
    'button:has-text("View All")',
    'a:has-text("Load More")',
    'a:has-text("Show More")',
    ".load-more",
    ".show-more",
]

# Containers that commonly hold a single job listing
JOB_SELECTORS = [
    "[data-job]",
    "[data-job-id]",
    ".job-listing",
    ".job-item",
    ".job-card",
    ".job-post",
    ".career-item",
    ".career-listing",
    ".opening",
    ".position",
    ".vacancy",
    ".jobs-list li",
    ".careers-list li",
    ".openings-list li",
    'a[href*="/job/"]',
    'a[href*="/jobs/"]',
    'a[href*="/career"]',
    'a[href*="/position"]',
    'a[href*="/opening"]',
    'a[href*="/apply"]',
]

TITLE_SELECTORS = [
    "h1",
    "h2",
    "h3",
    "h4",
    ".job-title",
    ".position-title",
    ".title",
    "[data-title]",
    "a",
]

LOCATION_SELECTORS = [
    ".location",
    ".job-location",
    "[data-location]",
    ".city",
    ".office",
]

# Link texts that are navigation, not job titles
SKIP_PHRASES = (
    "about us",
    "contact",
    "home",
    "blog",
    "news",
    "login",
    "sign up",
    "privacy",
    "terms",
    "cookie",
)

EXTERNAL_ID_PATTERNS = [
    re.compile(r"/jobs?/(\d+)", re.IGNORECASE),
    re.compile(r"/positions?/(\d+)", re.IGNORECASE),
    re.compile(r"/openings?/(\d+)", re.IGNORECASE),
    re.compile(r"[?&]id=(\d+)", re.IGNORECASE),
    re.compile(r"[?&]job[_-]?id=(\d+)", re.IGNORECASE),
]

MIN_TITLE_LENGTH = 3
MAX_TITLE_LENGTH = 200


def generate_external_id(url: str | None, title: str, index: int) -> str:
    """Build a stable external ID for a scraped posting.

    Numeric IDs embedded in the URL are preferred, then a hash of the URL.
    Postings without a URL fall back to a hash of the title plus its index.
    """
    if url:
        for pattern in EXTERNAL_ID_PATTERNS:
            match = pattern.search(url)
            if match:
                return match.group(1)
        return f"url_{hashlib.sha256(url.encode()).hexdigest()[:16]}"

    return f"title_{hashlib.sha256(title.encode()).hexdigest()[:12]}_{index}"


def _element_text(element: Tag) -> str:
    return normalize_whitespace(element.get_text(" "))


def _is_job_posting(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    item_type = item.get("@type")
    if isinstance(item_type, list):
        return "JobPosting" in item_type
    return item_type == "JobPosting"


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _json_ld_location(data: dict[str, Any]) -> str | None:
    job_location = _first(data.get("jobLocation"))
    if not isinstance(job_location, dict):
        return None
    address = job_location.get("address")
    if not isinstance(address, dict):
        return None

    country = address.get("addressCountry")
    if isinstance(country, dict):
        country = country.get("name")

    parts = [
        address.get("addressLocality"),
        address.get("addressRegion"),
        country,
    ]
    location = ", ".join(str(part) for part in parts if part)
    return location or None


def _json_ld_identifier(data: dict[str, Any]) -> str | None:
    identifier = data.get("identifier")
    if isinstance(identifier, dict):
        identifier = identifier.get("value")
    if identifier in (None, ""):
        return None
    return str(identifier)


def parse_job_posting(data: dict[str, Any], base_url: str) -> ParsedJob:
    """Map a schema.org JobPosting object to a ParsedJob."""
    location = _json_ld_location(data)
    url = data.get("url") or base_url
    title = data.get("title") or "Untitled Position"
    description = data.get("description")
    department = data.get("occupationalCategory")

    return ParsedJob(
        external_id=_json_ld_identifier(data) or generate_external_id(url, title, 0),
        title=normalize_whitespace(str(title)),
        url=urljoin(base_url, str(url)),
        location=location,
        remote=data.get("jobLocationType") == "TELECOMMUTE" or is_remote_location(location),
        department=str(department) if department else None,
        description=strip_html(description) if isinstance(description, str) and description else None,
        posted_at=parse_posted_at(data.get("datePosted")),
    )


def extract_structured_data(soup: BeautifulSoup, base_url: str) -> list[ParsedJob]:
    """First pass: JobPosting objects embedded as JSON-LD.

    Handles a single object, a top-level array, and an ``@graph`` list.
    Blocks with invalid JSON are skipped.
    """
    jobs: list[ParsedJob] = []

    for script in soup.select('script[type="application/ld+json"]'):
        raw = script.string or script.get_text()
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.debug("Skipping invalid JSON-LD block")
            continue

        if isinstance(data, list):
            candidates = data
        elif isinstance(data, dict) and isinstance(data.get("@graph"), list):
            candidates = [data, *data["@graph"]]
        else:
            candidates = [data]

        for item in candidates:
            if _is_job_posting(item):
                jobs.append(parse_job_posting(item, base_url))

    return jobs


def _extract_title(element: Tag) -> str | None:
    for selector in TITLE_SELECTORS:
        title_el = element.select_one(selector)
        if title_el is None:
            continue
        title = _element_text(title_el)
        if title and MIN_TITLE_LENGTH < len(title) < MAX_TITLE_LENGTH:
            return title

    # A bare link is its own title
    if element.name == "a":
        return _element_text(element) or None
    return None


def _extract_url(element: Tag, base_url: str) -> str | None:
    href = element.get("href") if element.name == "a" else None
    if not href:
        link = element.find("a", href=True)
        href = link.get("href") if link else None
    if not href:
        return None
    return urljoin(base_url, href.strip())


def _extract_location(element: Tag) -> str | None:
    for selector in LOCATION_SELECTORS:
        location_el = element.select_one(selector)
        if location_el is None:
            continue
        location = _element_text(location_el)
        if location:
            return location
    return None


def extract_jobs_from_html(soup: BeautifulSoup, base_url: str) -> list[ParsedJob]:
    """Second pass: pattern-match job listing containers in the DOM."""
    jobs: list[ParsedJob] = []
    seen_urls: set[str] = set()

    for selector in JOB_SELECTORS:
        for index, element in enumerate(soup.select(selector)):
            title = _extract_title(element)
            if not title or len(title) < MIN_TITLE_LENGTH:
                continue

            title_lower = title.lower()
            if any(phrase in title_lower for phrase in SKIP_PHRASES):
                continue

            url = _extract_url(element, base_url)
            if url:
                if url in seen_urls:
                    continue
                seen_urls.add(url)

            location = _extract_location(element)
            jobs.append(
                ParsedJob(
                    external_id=generate_external_id(url, title, index),
                    title=title,
                    url=url or base_url,
                    location=location,
                    remote=is_remote_location(location),
                )
            )

        if jobs:
            logger.debug(f"Selector '{selector}' matched {len(jobs)} jobs")
            break

    return jobs


def extract_jobs(html: str, base_url: str) -> list[ParsedJob]:
    """Extract postings from rendered HTML, structured data first."""
    soup = BeautifulSoup(html, "html.parser")
    jobs = extract_structured_data(soup, base_url)
    if jobs:
        logger.info(f"Found {len(jobs)} jobs in structured data on {base_url}")
        return jobs

    jobs = extract_jobs_from_html(soup, base_url)
    logger.info(f"Found {len(jobs)} jobs by HTML heuristics on {base_url}")
    return jobs


class CareerPageCrawler:
    """Crawls custom career pages through a shared BrowserManager.

    Args:
        browser: Browser lifecycle manager. Defaults to the process-wide one
    """

    def __init__(self, browser: BrowserManager | None = None):
        self.browser = browser or browser_manager

    async def crawl(self, career_url: str) -> list[ParsedJob]:
        """Render ``career_url`` and extract its job postings.

        Args:
            career_url: Career page URL

        Returns:
            Extracted postings; an empty list is a valid result

        Raises:
            playwright.async_api.TimeoutError: If navigation times out
            playwright.async_api.Error: On other browser failures
        """
        browser = await self.browser.acquire()
        try:
            page = await browser.new_page()
            try:
                await page.goto(
                    career_url,
                    wait_until="networkidle",
                    timeout=NAVIGATION_TIMEOUT_MS,
                )
                await page.wait_for_timeout(SETTLE_DELAY_MS)
                await self._expand_content(page)
                html = await page.content()
            finally:
                await page.close()
        finally:
            self.browser.release()

        return extract_jobs(html, career_url)

    async def _expand_content(self, page: Page) -> None:
        """Click "load more" affordances and scroll to trigger lazy loading."""
        for selector in LOAD_MORE_SELECTORS:
            try:
                button = page.locator(selector).first
                if await button.is_visible(timeout=LOAD_MORE_VISIBLE_TIMEOUT_MS):
                    await button.click()
                    await page.wait_for_timeout(LOAD_MORE_DELAY_MS)
            except PlaywrightError:
                continue

        try:
            viewport_height = await page.evaluate("document.documentElement.clientHeight")
            for _ in range(SCROLL_CYCLES):
                await page.evaluate(f"window.scrollBy(0, {int(viewport_height)})")
                await page.wait_for_timeout(SCROLL_DELAY_MS)
            await page.wait_for_timeout(SCROLL_FINAL_DELAY_MS)
        except PlaywrightError as e:
            logger.debug(f"Scrolling failed on {page.url}: {e}")
