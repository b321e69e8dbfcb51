import pytest

from jobscout.schemas.job_profile import JobProfileData
from jobscout.services.matching import (
    calculate_match_score,
    calculate_match_score_with_breakdown,
    calculate_match_scores,
    calculate_title_score,
    matches_as_word,
)
from tests.conftest import make_job


def test_no_profile_is_neutral():
    breakdown = calculate_match_score_with_breakdown(make_job("1"), None)

    assert breakdown.total_score == 50
    assert [c.name for c in breakdown.categories] == ["No Profile"]


def test_profile_without_preferences_is_neutral():
    profile = JobProfileData(excluded_titles=["Intern"], excluded_locations=["Berlin"])

    breakdown = calculate_match_score_with_breakdown(make_job("1", title="Intern"), profile)

    assert breakdown.total_score == 50
    assert [c.name for c in breakdown.categories] == ["No Preferences"]


def test_country_code_does_not_match_inside_city_name():
    profile = JobProfileData(locations=["US"])

    austin = make_job("1", location="Austin, TX")
    remote_us = make_job("2", location="Remote - US")
    remote_comma_us = make_job("3", location="Remote, US")

    assert matches_as_word("Austin, TX", "US") is False
    assert matches_as_word("Remote, US", "US") is True
    assert calculate_match_score(austin, profile) == 0
    assert calculate_match_score(remote_us, profile) == 100
    assert calculate_match_score(remote_comma_us, profile) == 100


def test_keywords_only_profile_has_thirty_possible_points():
    profile = JobProfileData(keywords=["python", "postgres", "kubernetes"])
    job = make_job("1", title="Backend Engineer", description="Python and Postgres services")

    breakdown = calculate_match_score_with_breakdown(job, profile)

    assert breakdown.possible == 30
    assert [c.name for c in breakdown.categories] == ["Keywords"]
    assert breakdown.categories[0].earned == 20
    assert breakdown.total_score == 67


def test_repeated_keywords_count_once():
    profile = JobProfileData(keywords=["Python", "python", " PYTHON "])
    job = make_job("1", title="Python Developer")

    breakdown = calculate_match_score_with_breakdown(job, profile)

    assert breakdown.categories[0].earned == 10
    assert breakdown.total_score == 33


def test_location_ignored_when_job_has_no_location():
    profile = JobProfileData(titles=["Engineer"], locations=["Berlin"])

    breakdown = calculate_match_score_with_breakdown(make_job("1", location=None), profile)

    assert [c.name for c in breakdown.categories] == ["Title Match"]
    assert breakdown.total_score == 100


def test_remote_only_profile():
    profile = JobProfileData(titles=["Engineer"], remote_only=True)

    remote = make_job("1", remote=True)
    onsite = make_job("2", remote=False)

    assert calculate_match_score(remote, profile) == 100
    assert calculate_match_score(onsite, profile) == 80


def test_partial_title_credit_is_floored():
    assert calculate_title_score("Data Analyst", ["Senior Data Platform"]) == 13
    assert calculate_title_score("Staff Platform Engineer", ["Platform Engineer"]) == 40
    assert calculate_title_score("Product Designer", ["Platform Engineer"]) == 0


def test_total_rounds_half_up():
    # 13 of 40 is 32.5
    profile = JobProfileData(titles=["Senior Data Platform"])

    assert calculate_match_score(make_job("1", title="Data Analyst"), profile) == 33


def test_all_categories_combined():
    profile = JobProfileData(
        titles=["Backend Engineer"],
        keywords=["python", "go"],
        locations=["Berlin"],
        remote_only=True,
    )
    job = make_job(
        "1",
        title="Senior Backend Engineer",
        description="We write Python",
        location="Berlin, Germany",
        remote=False,
    )

    breakdown = calculate_match_score_with_breakdown(job, profile)
    earned = {c.name: c.earned for c in breakdown.categories}

    assert earned == {"Title Match": 40, "Keywords": 10, "Location": 20, "Remote": 0}
    assert breakdown.possible == 100
    assert breakdown.total_score == 70


def test_excluded_title_scores_zero():
    profile = JobProfileData(titles=["Engineer"], excluded_titles=["manager"])

    breakdown = calculate_match_score_with_breakdown(
        make_job("1", title="Engineering Manager"), profile
    )

    assert breakdown.total_score == 0
    assert [c.name for c in breakdown.categories] == ["Excluded"]


def test_excluded_location_matches_whole_words():
    profile = JobProfileData(titles=["Engineer"], excluded_locations=["US"])

    assert calculate_match_score(make_job("1", location="Austin, TX"), profile) == 100
    assert calculate_match_score(make_job("2", location="New York, US"), profile) == 0


@pytest.mark.parametrize(
    "profile",
    [
        None,
        JobProfileData(),
        JobProfileData(titles=["Engineer"]),
        JobProfileData(keywords=["a", "b", "c", "d", "e"]),
        JobProfileData(locations=["Remote"], remote_only=True),
        JobProfileData(titles=["x"], keywords=["y"], locations=["z"], remote_only=True),
    ],
)
def test_score_is_within_bounds(profile):
    jobs = [
        make_job("1", title="Engineer", description="a b c d e", location="Remote", remote=True),
        make_job("2", title="Chef", location="Paris"),
        make_job("3", title="x y z"),
    ]

    for job in jobs:
        breakdown = calculate_match_score_with_breakdown(job, profile)
        assert 0 <= breakdown.total_score <= 100
        assert breakdown.total_score == calculate_match_score(job, profile)


def test_batch_scores_keyed_by_external_id():
    profile = JobProfileData(titles=["Engineer"])
    jobs = [make_job("a", title="Engineer"), make_job("b", title="Chef")]

    assert calculate_match_scores(jobs, profile) == {"a": 100, "b": 0}
