from uuid import uuid4

import httpx
import pytest

from jobscout.database import get_db
from jobscout.models import JobListing, JobProfile
from jobscout.services.crawling import get_orchestrator
from main import app
from tests.conftest import add_company, make_job


@pytest.fixture
async def client(session_factory, orchestrator):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def headers(user_id):
    return {"X-User-Id": str(user_id)}


async def test_crawl_company(client, db, user_id, fake_adapter):
    company = await add_company(db, user_id)
    fake_adapter.jobs = [make_job("1"), make_job("2")]

    response = await client.post(f"/api/v1/crawl/companies/{company.id}", headers=headers(user_id))

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert (body["jobs_found"], body["new_jobs"]) == (2, 2)


async def test_crawl_unknown_company_is_404(client, user_id):
    response = await client.post(f"/api/v1/crawl/companies/{uuid4()}", headers=headers(user_id))

    assert response.status_code == 404
    assert response.json()["detail"].startswith("Company not found")


async def test_crawl_while_locked_is_409(client, db, user_id, orchestrator):
    company = await add_company(db, user_id)
    assert await orchestrator.lock.try_acquire()
    try:
        single = await client.post(f"/api/v1/crawl/companies/{company.id}", headers=headers(user_id))
        batch = await client.post("/api/v1/crawl/all", headers=headers(user_id))
    finally:
        orchestrator.lock.release()

    assert single.status_code == 409
    assert batch.status_code == 409
    assert "already in progress" in single.json()["detail"]


async def test_missing_user_header_is_422(client):
    response = await client.post("/api/v1/crawl/all")

    assert response.status_code == 422


async def test_crawl_all_api_only(client, db, user_id):
    api = await add_company(db, user_id, name="Alpha")
    custom = await add_company(db, user_id, name="Beta", url="https://beta.com/jobs", source_type="custom")

    response = await client.post("/api/v1/crawl/all?api_only=true", headers=headers(user_id))

    assert response.status_code == 200
    body = response.json()
    assert [r["company_id"] for r in body["results"]] == [str(api.id)]
    assert body["skipped_company_ids"] == [str(custom.id)]


async def test_crawl_logs(client, db, user_id):
    company = await add_company(db, user_id)
    await client.post(f"/api/v1/crawl/companies/{company.id}", headers=headers(user_id))

    response = await client.get(
        "/api/v1/crawl/logs", params={"company_id": str(company.id)}, headers=headers(user_id)
    )

    assert response.status_code == 200
    (log,) = response.json()
    assert log["company_name"] == "Acme"
    assert log["status"] == "success"

    other = await client.get("/api/v1/crawl/logs", headers=headers(uuid4()))
    assert other.json() == []


async def test_recalculate_scores(client, db, user_id, fake_adapter):
    company = await add_company(db, user_id)
    fake_adapter.jobs = [make_job("1", title="Engineer"), make_job("2", title="Chef")]
    await client.post(f"/api/v1/crawl/companies/{company.id}", headers=headers(user_id))
    db.add(JobProfile(user_id=user_id, titles=["Engineer"]))
    await db.commit()

    response = await client.post("/api/v1/crawl/recalculate-scores", headers=headers(user_id))

    assert response.status_code == 200
    assert response.json() == {"updated": 2}


async def test_external_results(client, db, user_id):
    company = await add_company(db, user_id, url="https://acme.com/careers", source_type="custom")
    payload = {
        "jobs": [
            {"external_id": "url_abc", "title": "Engineer", "url": "https://acme.com/careers/1"},
        ],
        "duration_ms": 900,
    }

    response = await client.post(
        f"/api/v1/crawl/companies/{company.id}/external-results",
        json=payload,
        headers=headers(user_id),
    )

    assert response.status_code == 201
    assert response.json()["new_jobs"] == 1

    missing = await client.post(
        f"/api/v1/crawl/companies/{uuid4()}/external-results", json=payload, headers=headers(user_id)
    )
    assert missing.status_code == 404


async def test_score_breakdown(client, db, user_id):
    company = await add_company(db, user_id)
    listing = JobListing(
        company_id=company.id,
        external_id="1",
        title="Senior Python Engineer",
        url="https://boards.greenhouse.io/acme/jobs/1",
        location="Austin, TX",
    )
    db.add_all([listing, JobProfile(user_id=user_id, keywords=["python"], locations=["US"])])
    await db.commit()

    response = await client.get(
        f"/api/v1/listings/{listing.id}/score-breakdown", headers=headers(user_id)
    )

    assert response.status_code == 200
    body = response.json()
    assert body["total_score"] == 20
    assert [c["name"] for c in body["categories"]] == ["Keywords", "Location"]
    assert body["profile_preferences"]["locations"] == ["US"]

    foreign = await client.get(
        f"/api/v1/listings/{listing.id}/score-breakdown", headers=headers(uuid4())
    )
    assert foreign.status_code == 404


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert "database" in response.json()["dependencies"]
