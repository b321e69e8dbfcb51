"""Crawl orchestration service.

Coordinates job crawling across a user's companies:

- serializes crawls behind a process-wide single-flight lock that fails
  fast instead of queuing,
- records one CrawlLog per company attempt (running → success | failed),
- dispatches to a job board adapter or the heuristic career page crawler,
- scores and upserts postings keyed by (company_id, external_id),
- recovers CrawlLogs abandoned by a crashed process,
- bounds browser memory during batch crawls.

Failure Handling:
    Errors inside a single company's crawl are caught at the company
    boundary and become a failed CrawlLog plus a failed CrawlResult; a batch
    always continues with the next company. Lock contention and
    "company not found" for a single crawl propagate to the caller.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import NamedTuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobscout.config import Settings, settings
from jobscout.errors import CrawlInProgressError
from jobscout.models import Company, CrawlLog, JobListing
from jobscout.models.base import utcnow
from jobscout.schemas.crawl import BatchCrawlResult, CrawlLogResponse, CrawlResult
from jobscout.schemas.job import ParsedJob
from jobscout.schemas.job_profile import JobProfileData
from jobscout.services.browser import BrowserManager, browser_manager
from jobscout.services.career_page_crawler import CareerPageCrawler
from jobscout.services.companies import get_company, list_companies
from jobscout.services.job_profiles import get_job_profile
from jobscout.services.matching import calculate_match_score, calculate_match_scores
from jobscout.services.sources import AdapterRegistry, default_registry

logger = logging.getLogger(__name__)

STALE_CRAWL_ERROR = "Crawl timed out or server restarted"


class CrawlTarget(NamedTuple):
    """Detached snapshot of the Company fields a crawl needs."""

    id: UUID
    name: str
    career_page_url: str
    source_type: str | None

    @classmethod
    def from_company(cls, company: Company) -> "CrawlTarget":
        return cls(company.id, company.name, company.career_page_url, company.source_type)


class CrawlLock:
    """Single-permit, non-blocking crawl lock.

    ``held()`` raises CrawlInProgressError immediately when another crawl
    holds the permit; callers are never queued.
    """

    def __init__(self) -> None:
        self._semaphore = asyncio.Semaphore(1)

    @property
    def locked(self) -> bool:
        return self._semaphore.locked()

    async def try_acquire(self) -> bool:
        if self._semaphore.locked():
            return False
        await self._semaphore.acquire()
        return True

    def release(self) -> None:
        self._semaphore.release()

    @asynccontextmanager
    async def held(self):
        if not await self.try_acquire():
            logger.warning("Rejected crawl request: another crawl is in progress")
            raise CrawlInProgressError()
        try:
            yield
        finally:
            self.release()


class CrawlOrchestrator:
    """Runs auditable, single-flight crawls for a user's companies.

    Args:
        registry: Adapter registry used to pick API adapters
        page_crawler: Heuristic crawler for sources without an adapter
        browser: Browser manager shared with the page crawler
        lock: Crawl lock; one per process
        config: Settings providing delays, restart interval and staleness window
    """

    def __init__(
        self,
        registry: AdapterRegistry | None = None,
        page_crawler: CareerPageCrawler | None = None,
        browser: BrowserManager | None = None,
        lock: CrawlLock | None = None,
        config: Settings | None = None,
    ):
        self.registry = registry or default_registry
        self.browser = browser or browser_manager
        self.page_crawler = page_crawler or CareerPageCrawler(self.browser)
        self.lock = lock or CrawlLock()
        self.settings = config or settings

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def crawl_company(
        self, db: AsyncSession, user_id: UUID, company_id: UUID
    ) -> CrawlResult:
        """Crawl a single company's career page.

        Raises:
            CrawlInProgressError: If another crawl is running
            CompanyNotFoundError: If the company is missing or not the user's
        """
        await self.cleanup_stuck_crawl_logs(db)

        async with self.lock.held():
            company = await get_company(db, user_id, company_id)
            return await self._crawl_company_internal(
                db, user_id, CrawlTarget.from_company(company)
            )

    async def crawl_all_companies(
        self, db: AsyncSession, user_id: UUID, api_only: bool = False
    ) -> BatchCrawlResult:
        """Crawl every active company of the user, sequentially by name.

        Args:
            db: Database session
            user_id: Owner of the companies
            api_only: Only crawl companies with a job board adapter; the
                others are returned in ``skipped_company_ids`` so browser
                crawls can be deferred

        Raises:
            CrawlInProgressError: If another crawl is running
        """
        await self.cleanup_stuck_crawl_logs(db)

        async with self.lock.held():
            all_companies = await list_companies(db, user_id, active_only=True)

            skipped_company_ids: list[UUID] | None = None
            companies = all_companies
            if api_only:
                companies = [c for c in all_companies if self.registry.has_parser(c.source_type)]
                skipped_company_ids = [
                    c.id for c in all_companies if not self.registry.has_parser(c.source_type)
                ]

            logger.info(
                f"Starting batch crawl for user {user_id}: {len(companies)} companies"
                + (f", {len(skipped_company_ids)} skipped (api_only)" if api_only else "")
            )

            targets = [CrawlTarget.from_company(c) for c in companies]
            results: list[CrawlResult] = []
            total_jobs_found = 0
            new_jobs_found = 0
            restart_interval = max(self.settings.browser_restart_interval, 1)
            delay = (
                self.settings.crawl_delay_api_seconds
                if api_only
                else self.settings.crawl_delay_browser_seconds
            )

            try:
                for index, target in enumerate(targets):
                    result = await self._crawl_company_internal(db, user_id, target)
                    results.append(result)

                    if result.status == "success":
                        total_jobs_found += result.jobs_found
                        new_jobs_found += result.new_jobs

                    is_last = index == len(targets) - 1
                    if not api_only and (index + 1) % restart_interval == 0 and not is_last:
                        logger.info(f"Restarting browser after {index + 1} companies")
                        await self.browser.close()

                    if not is_last:
                        await asyncio.sleep(delay)
            finally:
                await self.browser.close()

            logger.info(
                f"Batch crawl finished for user {user_id}: "
                f"{total_jobs_found} jobs found, {new_jobs_found} new"
            )

            return BatchCrawlResult(
                results=results,
                total_jobs_found=total_jobs_found,
                new_jobs_found=new_jobs_found,
                skipped_company_ids=skipped_company_ids,
            )

    async def get_crawl_logs(
        self,
        db: AsyncSession,
        user_id: UUID,
        company_id: UUID | None = None,
        limit: int = 20,
    ) -> list[CrawlLogResponse]:
        """Return the user's crawl audit trail, newest first."""
        query = (
            select(CrawlLog, Company.name)
            .join(Company, CrawlLog.company_id == Company.id)
            .where(Company.user_id == user_id)
            .order_by(CrawlLog.started_at.desc())
            .limit(limit)
        )
        if company_id is not None:
            query = query.where(Company.id == company_id)

        result = await db.execute(query)
        return [
            CrawlLogResponse.model_validate(log).model_copy(update={"company_name": name})
            for log, name in result.all()
        ]

    async def recalculate_match_scores(self, db: AsyncSession, user_id: UUID) -> int:
        """Re-score every stored listing of the user against their current profile.

        Listings are read in fixed-size pages to bound memory; only rows
        whose score changed are written.

        Returns:
            Number of listings whose score changed
        """
        profile = await get_job_profile(db, user_id)
        batch_size = self.settings.score_recalc_batch_size

        updated = 0
        offset = 0
        while True:
            result = await db.execute(
                select(JobListing)
                .join(Company, JobListing.company_id == Company.id)
                .where(Company.user_id == user_id)
                .order_by(JobListing.id)
                .offset(offset)
                .limit(batch_size)
            )
            listings = result.scalars().all()

            for listing in listings:
                new_score = calculate_match_score(listing, profile)
                if new_score != listing.match_score:
                    listing.match_score = new_score
                    updated += 1

            await db.commit()

            if len(listings) < batch_size:
                break
            offset += batch_size

        logger.info(f"Recalculated match scores for user {user_id}: {updated} updated")
        return updated

    async def save_external_crawl_results(
        self,
        db: AsyncSession,
        user_id: UUID,
        company_id: UUID,
        jobs: list[ParsedJob],
        duration_ms: int | None = None,
    ) -> CrawlResult:
        """Persist postings crawled outside this process.

        Goes through the same audit log, scoring and upsert path as a regular
        crawl but does not take the crawl lock, since no browser or
        remote source is touched here.

        Raises:
            CompanyNotFoundError: If the company is missing or not the user's
        """
        company = await get_company(db, user_id, company_id)
        company_name = company.name

        log_id = await self.start_crawl_log(db, company_id)

        try:
            profile = await get_job_profile(db, user_id)
            found, new_jobs = await self.save_jobs(db, company_id, jobs, profile)
            await self.complete_crawl_log(db, log_id, "success", found, new_jobs)
            return CrawlResult(
                company_id=company_id,
                company_name=company_name,
                status="success",
                jobs_found=found,
                new_jobs=new_jobs,
                duration_ms=duration_ms,
            )
        except Exception as e:
            return await self._fail(db, log_id, company_id, company_name, e, duration_ms)

    # ------------------------------------------------------------------
    # Crawl log lifecycle
    # ------------------------------------------------------------------

    async def cleanup_stuck_crawl_logs(self, db: AsyncSession) -> int:
        """Fail crawl logs stuck in "running" past the staleness window.

        Such rows are left behind by a crashed process. Safe to run
        repeatedly; only rows already stuck are touched.

        Returns:
            Number of logs force-failed
        """
        cutoff = utcnow() - timedelta(minutes=self.settings.stale_crawl_minutes)
        result = await db.execute(
            select(CrawlLog).where(
                CrawlLog.status == "running", CrawlLog.started_at < cutoff
            )
        )
        stuck = result.scalars().all()

        now = utcnow()
        for log in stuck:
            log.status = "failed"
            log.completed_at = now
            log.error = STALE_CRAWL_ERROR
        await db.commit()

        count = len(stuck)
        if count:
            logger.warning(f"Marked {count} stuck crawl log(s) as failed")
        return count

    async def start_crawl_log(self, db: AsyncSession, company_id: UUID) -> UUID:
        log = CrawlLog(company_id=company_id, status="running", started_at=utcnow())
        db.add(log)
        await db.commit()
        return log.id

    async def complete_crawl_log(
        self,
        db: AsyncSession,
        log_id: UUID,
        status: str,
        jobs_found: int,
        new_jobs: int,
        error: str | None = None,
    ) -> None:
        log = await db.get(CrawlLog, log_id)
        log.completed_at = utcnow()
        log.status = status
        log.jobs_found = jobs_found
        log.new_jobs = new_jobs
        log.error = error
        await db.commit()

    # ------------------------------------------------------------------
    # Per-company crawl
    # ------------------------------------------------------------------

    async def save_jobs(
        self,
        db: AsyncSession,
        company_id: UUID,
        jobs: list[ParsedJob],
        profile: JobProfileData | None,
    ) -> tuple[int, int]:
        """Upsert parsed jobs for one company.

        Existing listings get their mutable fields, score and last_seen_at
        refreshed; status and first_seen_at are never touched. New listings
        start as "new" with both seen timestamps set to now.

        Returns:
            (jobs found, jobs newly inserted)
        """
        scores = calculate_match_scores(jobs, profile)
        now = utcnow()
        new_count = 0
        # Listings touched in this pass, so repeated external IDs in one
        # response update the same row
        touched: dict[str, JobListing] = {}

        for job in jobs:
            listing = touched.get(job.external_id)
            if listing is None:
                result = await db.execute(
                    select(JobListing).where(
                        JobListing.company_id == company_id,
                        JobListing.external_id == job.external_id,
                    )
                )
                listing = result.scalar_one_or_none()

            if listing is None:
                listing = JobListing(
                    company_id=company_id,
                    external_id=job.external_id,
                    first_seen_at=now,
                    status="new",
                )
                db.add(listing)
                new_count += 1

            listing.title = job.title
            listing.url = job.url
            listing.location = job.location
            listing.remote = job.remote
            listing.department = job.department
            listing.description = job.description
            listing.posted_at = job.posted_at
            listing.last_seen_at = now
            listing.match_score = scores[job.external_id]
            touched[job.external_id] = listing

        await db.commit()
        return len(jobs), new_count

    async def fetch_jobs(self, target: CrawlTarget) -> list[ParsedJob]:
        """Dispatch to the company's API adapter, or the heuristic crawler."""
        adapter = self.registry.get_parser(target.source_type)
        if adapter is not None:
            return await adapter.parse(target.career_page_url)
        return await self.page_crawler.crawl(target.career_page_url)

    async def _crawl_company_internal(
        self, db: AsyncSession, user_id: UUID, target: CrawlTarget
    ) -> CrawlResult:
        company_id = target.id
        company_name = target.name
        start = time.perf_counter()

        log_id = await self.start_crawl_log(db, company_id)
        logger.info(f"Crawling {company_name} ({target.source_type or 'unknown'})")

        try:
            profile = await get_job_profile(db, user_id)
            jobs = await self.fetch_jobs(target)
            found, new_jobs = await self.save_jobs(db, company_id, jobs, profile)
            await self.complete_crawl_log(db, log_id, "success", found, new_jobs)
        except Exception as e:
            return await self._fail(
                db, log_id, company_id, company_name, e, _elapsed_ms(start)
            )

        logger.info(f"Crawled {company_name}: {found} jobs, {new_jobs} new")
        return CrawlResult(
            company_id=company_id,
            company_name=company_name,
            status="success",
            jobs_found=found,
            new_jobs=new_jobs,
            duration_ms=_elapsed_ms(start),
        )

    async def _fail(
        self,
        db: AsyncSession,
        log_id: UUID,
        company_id: UUID,
        company_name: str,
        error: Exception,
        duration_ms: int | None,
    ) -> CrawlResult:
        message = str(error) or type(error).__name__
        logger.error(f"Crawl failed for {company_name}: {type(error).__name__}: {message}")

        # Discard any partial upserts before closing the log
        await db.rollback()
        await self.complete_crawl_log(db, log_id, "failed", 0, 0, message)

        return CrawlResult(
            company_id=company_id,
            company_name=company_name,
            status="failed",
            error=message,
            duration_ms=duration_ms,
        )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


# Process-wide orchestrator; its lock is the single-flight guard
crawl_orchestrator = CrawlOrchestrator()


def get_orchestrator() -> CrawlOrchestrator:
    """FastAPI dependency returning the process-wide orchestrator."""
    return crawl_orchestrator
