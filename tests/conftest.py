import os
import tempfile

# Settings are read at import time; point them at SQLite before jobscout loads
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "jobscout-test.db"),
)

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from jobscout.config import Settings
from jobscout.models import Base, Company
from jobscout.schemas.job import ParsedJob
from jobscout.services.crawling import CrawlLock, CrawlOrchestrator
from jobscout.services.sources import AdapterRegistry


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'jobscout.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def test_settings():
    return Settings(
        database_url="sqlite+aiosqlite://",
        crawl_delay_api_seconds=0,
        crawl_delay_browser_seconds=0,
        browser_restart_interval=5,
        stale_crawl_minutes=5,
        score_recalc_batch_size=100,
    )


class FakeAdapter:
    """Adapter double returning canned jobs or raising a canned error."""

    def __init__(self, jobs=None, error=None):
        self.jobs = jobs or []
        self.error = error
        self.calls = []

    async def parse(self, career_url):
        self.calls.append(career_url)
        if self.error is not None:
            raise self.error
        return list(self.jobs)


class FakePageCrawler:
    def __init__(self, jobs_by_url=None, error=None):
        self.jobs_by_url = jobs_by_url or {}
        self.error = error
        self.calls = []

    async def crawl(self, career_url):
        self.calls.append(career_url)
        if self.error is not None:
            raise self.error
        return list(self.jobs_by_url.get(career_url, []))


class FakeBrowserManager:
    def __init__(self):
        self.close_calls = 0
        self.is_running = False

    async def close(self):
        self.close_calls += 1


@pytest.fixture
def fake_adapter():
    return FakeAdapter()


@pytest.fixture
def fake_page_crawler():
    return FakePageCrawler()


@pytest.fixture
def fake_browser():
    return FakeBrowserManager()


@pytest.fixture
def orchestrator(fake_adapter, fake_page_crawler, fake_browser, test_settings):
    return CrawlOrchestrator(
        registry=AdapterRegistry({"greenhouse": fake_adapter}),
        page_crawler=fake_page_crawler,
        browser=fake_browser,
        lock=CrawlLock(),
        config=test_settings,
    )


def make_job(external_id, title="Software Engineer", **fields):
    return ParsedJob(
        external_id=external_id,
        title=title,
        url=fields.pop("url", f"https://example.com/jobs/{external_id}"),
        **fields,
    )


async def add_company(db, user_id, name="Acme", url="https://boards.greenhouse.io/acme",
                      source_type="greenhouse", active=True):
    company = Company(
        user_id=user_id,
        name=name,
        career_page_url=url,
        source_type=source_type,
        active=active,
    )
    db.add(company)
    await db.commit()
    return company
