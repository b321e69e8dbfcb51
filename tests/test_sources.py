from datetime import datetime, timezone

import httpx
import pytest

from jobscout.errors import BoardNotFoundError, SourceTokenError, UpstreamError
from jobscout.schemas.job_profile import JobProfileData
from jobscout.services.matching import calculate_match_score
from jobscout.services.sources import AshbyAdapter, GreenhouseAdapter, LeverAdapter


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.parametrize(
    "adapter,url,token",
    [
        (GreenhouseAdapter(), "https://boards.greenhouse.io/acme", "acme"),
        (GreenhouseAdapter(), "https://boards.greenhouse.io/acme/jobs/123", "acme"),
        (GreenhouseAdapter(), "https://job-boards.greenhouse.io/acme", "acme"),
        (GreenhouseAdapter(), "https://www.greenhouse.io/company/acme", "acme"),
        (LeverAdapter(), "https://jobs.lever.co/acme/abc-123", "acme"),
        (LeverAdapter(), "https://lever.co/acme", "acme"),
        (LeverAdapter(), "https://api.lever.co/v0/postings/acme?mode=json", "acme"),
        (AshbyAdapter(), "https://jobs.ashbyhq.com/acme", "acme"),
        (AshbyAdapter(), "https://jobs.ashby.com/acme", "acme"),
        (AshbyAdapter(), "https://api.ashbyhq.com/posting-api/job-board/acme", "acme"),
    ],
)
def test_extract_token(adapter, url, token):
    assert adapter.extract_token(url) == token


def test_extract_token_unknown_url():
    assert GreenhouseAdapter().extract_token("https://acme.com/careers") is None
    assert LeverAdapter().extract_token("https://acme.com/careers") is None
    assert AshbyAdapter().extract_token("https://acme.com/careers") is None


async def test_greenhouse_parse_maps_jobs():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(
            200,
            json={
                "jobs": [
                    {
                        "id": 4012,
                        "title": "Backend Engineer",
                        "absolute_url": "https://boards.greenhouse.io/acme/jobs/4012",
                        "location": {"name": "Remote - US"},
                        "departments": [{"name": "Engineering"}, {"name": "Platform"}],
                        "content": "&lt;p&gt;Build &amp;amp; ship&lt;/p&gt;",
                        "updated_at": "2024-03-01T12:00:00-05:00",
                    },
                    {
                        "id": 4013,
                        "title": "Office Manager",
                        "absolute_url": "https://boards.greenhouse.io/acme/jobs/4013",
                        "location": {"name": "Berlin"},
                        "departments": [],
                    },
                ]
            },
        )

    adapter = GreenhouseAdapter(client=mock_client(handler))
    jobs = await adapter.parse("https://boards.greenhouse.io/acme")

    assert str(requests[0].url) == (
        "https://boards-api.greenhouse.io/v1/boards/acme/jobs?content=true"
    )
    assert [job.external_id for job in jobs] == ["4012", "4013"]

    first = jobs[0]
    assert first.remote is True
    assert first.department == "Engineering"
    assert first.description == "Build & ship"
    assert first.posted_at == datetime(2024, 3, 1, 17, 0, tzinfo=timezone.utc)

    second = jobs[1]
    assert second.remote is False
    assert second.department is None
    assert second.description is None
    assert second.posted_at is None


async def test_greenhouse_board_not_found():
    adapter = GreenhouseAdapter(client=mock_client(lambda request: httpx.Response(404)))

    with pytest.raises(BoardNotFoundError, match="Greenhouse board not found: acme"):
        await adapter.parse("https://boards.greenhouse.io/acme")


async def test_upstream_error_includes_status():
    adapter = LeverAdapter(client=mock_client(lambda request: httpx.Response(503)))

    with pytest.raises(UpstreamError, match="Lever API error: 503 Service Unavailable"):
        await adapter.parse("https://jobs.lever.co/acme")


async def test_missing_token_raises_before_request():
    def handler(request):
        raise AssertionError("no request expected")

    adapter = AshbyAdapter(client=mock_client(handler))

    with pytest.raises(SourceTokenError):
        await adapter.parse("https://acme.com/careers")


async def test_lever_parse_maps_jobs():
    def handler(request):
        assert str(request.url) == "https://api.lever.co/v0/postings/acme?mode=json"
        return httpx.Response(
            200,
            json=[
                {
                    "id": "a1b2",
                    "text": "Data Engineer",
                    "hostedUrl": "https://jobs.lever.co/acme/a1b2",
                    "categories": {"location": "Toronto", "team": "Data"},
                    "workplaceType": "remote",
                    "descriptionPlain": "Pipelines",
                    "createdAt": 1709294400000,
                },
                {
                    "id": "c3d4",
                    "text": "Recruiter",
                    "hostedUrl": "https://jobs.lever.co/acme/c3d4",
                    "categories": {"location": "Remote, EU", "department": "People"},
                    "description": "<div>Hire <b>people</b></div>",
                },
                {
                    "id": "e5f6",
                    "text": "Chef",
                    "hostedUrl": "https://jobs.lever.co/acme/e5f6",
                    "categories": {"location": "Paris"},
                },
            ],
        )

    jobs = await LeverAdapter(client=mock_client(handler)).parse("https://jobs.lever.co/acme")

    assert [job.external_id for job in jobs] == ["a1b2", "c3d4", "e5f6"]
    assert jobs[0].remote is True
    assert jobs[0].department == "Data"
    assert jobs[0].description == "Pipelines"
    assert jobs[0].posted_at == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert jobs[1].remote is True
    assert jobs[1].department == "People"
    assert jobs[1].description == "Hire people"
    assert jobs[2].remote is False


async def test_ashby_parse_maps_jobs():
    def handler(request):
        assert str(request.url) == "https://api.ashbyhq.com/posting-api/job-board/acme"
        return httpx.Response(
            200,
            json={
                "jobs": [
                    {
                        "id": "uuid-1",
                        "title": "Designer",
                        "jobUrl": "https://jobs.ashbyhq.com/acme/uuid-1",
                        "location": "New York",
                        "isRemote": True,
                        "team": "Design",
                        "descriptionPlain": "Design things",
                        "publishedDate": "2024-02-10",
                    },
                    {
                        "id": "uuid-2",
                        "title": "Support Lead",
                        "jobUrl": "https://jobs.ashbyhq.com/acme/uuid-2",
                        "location": "Work from home",
                        "department": "Support",
                        "description": "<p>Help customers</p>",
                    },
                ]
            },
        )

    jobs = await AshbyAdapter(client=mock_client(handler)).parse("https://jobs.ashbyhq.com/acme")

    assert jobs[0].remote is True
    assert jobs[0].department == "Design"
    assert jobs[0].description == "Design things"
    assert jobs[0].posted_at == datetime(2024, 2, 10, tzinfo=timezone.utc)
    assert jobs[1].remote is True
    assert jobs[1].department == "Support"
    assert jobs[1].description == "Help customers"


async def test_greenhouse_description_ignores_embedded_styles():
    def handler(request):
        return httpx.Response(
            200,
            json={
                "jobs": [
                    {
                        "id": 1,
                        "title": "Chef",
                        "absolute_url": "https://boards.greenhouse.io/acme/jobs/1",
                        "content": (
                            "&lt;style&gt;.react-root{display:flex}&lt;/style&gt;"
                            "&lt;p&gt;Cook food&lt;/p&gt;"
                        ),
                    }
                ]
            },
        )

    (job,) = await GreenhouseAdapter(client=mock_client(handler)).parse(
        "https://boards.greenhouse.io/acme"
    )

    assert job.description == "Cook food"
    assert calculate_match_score(job, JobProfileData(keywords=["react"])) == 0
