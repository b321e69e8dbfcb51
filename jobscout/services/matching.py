"""Job matching service.

Calculates 0-100 relevance scores between job postings and a user's
JobProfile. Scoring is a pure function of the job and the profile.

Only the categories the user actually configured contribute to the
possible points, so a user who only sets keywords is scored purely on
keyword overlap:

    Title     40  any profile title contained in the job title, else
                  partial credit for overlapping words
    Keywords  30  10 per distinct keyword found in title/description/department
    Location  20  whole-word match; counted only when the job has a location
    Remote    10  counted only when the profile is remote-only
"""

import math
import re
from collections.abc import Iterable
from typing import Any, Protocol

from jobscout.schemas.job_profile import JobProfileData
from jobscout.schemas.matching import (
    ProfilePreferences,
    ScoreBreakdown,
    ScoreBreakdownCategory,
)

TITLE_WEIGHT = 40
KEYWORD_WEIGHT = 30
LOCATION_WEIGHT = 20
REMOTE_WEIGHT = 10

POINTS_PER_KEYWORD = 10
NEUTRAL_SCORE = 50
MIN_TITLE_WORD_LENGTH = 3


class ScorableJob(Protocol):
    """Anything with posting fields: ParsedJob, JobListing rows, ..."""

    title: str
    description: str | None
    department: str | None
    location: str | None
    remote: bool


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _as_profile(profile: Any) -> JobProfileData | None:
    if profile is None or isinstance(profile, JobProfileData):
        return profile
    return JobProfileData.model_validate(profile)


def _dedupe(terms: Iterable[str]) -> list[str]:
    """Drop blank and case-insensitively repeated terms, keeping order."""
    seen: set[str] = set()
    unique: list[str] = []
    for term in terms:
        key = term.strip().lower()
        if key and key not in seen:
            seen.add(key)
            unique.append(term.strip())
    return unique


def matches_as_word(text: str, term: str) -> bool:
    """Check if ``term`` appears as a whole word in ``text``.

    Keeps a country code like "US" from matching inside "Austin".
    """
    return re.search(rf"\b{re.escape(term)}\b", text, re.IGNORECASE) is not None


def _searchable_content(job: ScorableJob) -> str:
    parts = [job.title]
    if getattr(job, "description", None):
        parts.append(job.description)
    if getattr(job, "department", None):
        parts.append(job.department)
    return " ".join(parts).lower()


def _title_words(text: str) -> list[str]:
    return [w for w in text.lower().split() if len(w) >= MIN_TITLE_WORD_LENGTH]


def calculate_title_score(job_title: str, profile_titles: list[str]) -> int:
    """Full weight for a contained profile title, else partial word-overlap credit."""
    title_lower = job_title.lower()
    for title in profile_titles:
        if title.lower() in title_lower:
            return TITLE_WEIGHT

    job_words = set(_title_words(job_title))
    for title in profile_titles:
        title_words = _title_words(title)
        matching = [w for w in title_words if w in job_words]
        if matching:
            return math.floor(len(matching) / len(title_words) * TITLE_WEIGHT)

    return 0


def _matched_keywords(job: ScorableJob, keywords: list[str]) -> list[str]:
    content = _searchable_content(job)
    return [k for k in keywords if k.lower() in content]


def calculate_location_score(job_location: str, profile_locations: list[str]) -> int:
    if any(matches_as_word(job_location, loc) for loc in profile_locations):
        return LOCATION_WEIGHT
    return 0


def calculate_remote_score(is_remote: bool) -> int:
    return REMOTE_WEIGHT if is_remote else 0


def _exclusion_reason(job: ScorableJob, profile: JobProfileData) -> str | None:
    title_lower = job.title.lower()
    for excluded in _dedupe(profile.excluded_titles):
        if excluded.lower() in title_lower:
            return f"Title matches excluded: {excluded}"

    if job.location:
        for excluded in _dedupe(profile.excluded_locations):
            if matches_as_word(job.location, excluded):
                return f"Location matches excluded: {excluded}"
    return None


def calculate_match_score_with_breakdown(
    job: ScorableJob,
    profile: Any,
) -> ScoreBreakdown:
    """Calculate a match score decomposed into named categories.

    Args:
        job: Posting to score (ParsedJob, JobListing, or similar)
        profile: JobProfileData, a JobProfile row, or None

    Returns:
        ScoreBreakdown whose total_score equals calculate_match_score()
    """
    profile = _as_profile(profile)
    preferences = ProfilePreferences(
        titles=profile.titles if profile else [],
        keywords=profile.keywords if profile else [],
        locations=profile.locations if profile else [],
        remote_only=profile.remote_only if profile else False,
    )

    if profile is None:
        return _neutral_breakdown(
            "No Profile", "No job profile set - showing neutral score", preferences
        )
    if not profile.has_preferences:
        return _neutral_breakdown(
            "No Preferences",
            "No preferences configured - showing neutral score",
            preferences,
        )

    reason = _exclusion_reason(job, profile)
    if reason:
        return ScoreBreakdown(
            total_score=0,
            categories=[
                ScoreBreakdownCategory(
                    name="Excluded", earned=0, possible=100, percentage=0, details=reason
                )
            ],
            profile_preferences=preferences,
        )

    categories: list[ScoreBreakdownCategory] = []

    if profile.titles:
        earned = calculate_title_score(job.title, profile.titles)
        title_lower = job.title.lower()
        matched = [t for t in profile.titles if t.lower() in title_lower]
        categories.append(
            _category(
                "Title Match",
                earned,
                TITLE_WEIGHT,
                f"Matched: {', '.join(matched)}"
                if matched
                else f"No match for: {', '.join(profile.titles)}",
            )
        )

    if profile.keywords:
        keywords = _dedupe(profile.keywords)
        matched = _matched_keywords(job, keywords)
        earned = min(KEYWORD_WEIGHT, len(matched) * POINTS_PER_KEYWORD)
        categories.append(
            _category(
                "Keywords",
                earned,
                KEYWORD_WEIGHT,
                f"Found: {', '.join(matched)}"
                if matched
                else f"None found from: {', '.join(keywords)}",
            )
        )

    if profile.locations and job.location:
        matched = [loc for loc in profile.locations if matches_as_word(job.location, loc)]
        earned = calculate_location_score(job.location, profile.locations)
        categories.append(
            _category(
                "Location",
                earned,
                LOCATION_WEIGHT,
                f"Matched: {', '.join(matched)}"
                if matched
                else f'"{job.location}" doesn\'t match: {", ".join(profile.locations)}',
            )
        )

    if profile.remote_only:
        remote = bool(job.remote)
        categories.append(
            _category(
                "Remote",
                calculate_remote_score(remote),
                REMOTE_WEIGHT,
                "Job is remote" if remote else "Job is not remote",
            )
        )

    earned_total = sum(c.earned for c in categories)
    possible_total = sum(c.possible for c in categories)
    total = (
        _round_half_up(earned_total / possible_total * 100)
        if possible_total
        else NEUTRAL_SCORE
    )

    return ScoreBreakdown(
        total_score=total,
        categories=categories,
        profile_preferences=preferences,
    )


def calculate_match_score(job: ScorableJob, profile: Any) -> int:
    """Calculate a 0-100 match score between a job and a profile.

    Returns 50 when there is no profile or it has no preferences set.
    """
    return calculate_match_score_with_breakdown(job, profile).total_score


def calculate_match_scores(jobs: Iterable[Any], profile: Any) -> dict[str, int]:
    """Score many jobs against one profile, keyed by external_id."""
    profile = _as_profile(profile)
    return {job.external_id: calculate_match_score(job, profile) for job in jobs}


def _category(name: str, earned: int, possible: int, details: str) -> ScoreBreakdownCategory:
    return ScoreBreakdownCategory(
        name=name,
        earned=earned,
        possible=possible,
        percentage=_round_half_up(earned / possible * 100),
        details=details,
    )


def _neutral_breakdown(
    name: str, details: str, preferences: ProfilePreferences
) -> ScoreBreakdown:
    return ScoreBreakdown(
        total_score=NEUTRAL_SCORE,
        categories=[
            ScoreBreakdownCategory(
                name=name,
                earned=NEUTRAL_SCORE,
                possible=100,
                percentage=NEUTRAL_SCORE,
                details=details,
            )
        ],
        profile_preferences=preferences,
    )
