"""Job listing lookups and score explanations."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobscout.errors import ListingNotFoundError
from jobscout.models import Company, JobListing
from jobscout.schemas.matching import ScoreBreakdown
from jobscout.services.job_profiles import get_job_profile
from jobscout.services.matching import calculate_match_score_with_breakdown


async def get_listing(db: AsyncSession, user_id: UUID, listing_id: UUID) -> JobListing:
    """Fetch a listing whose company belongs to ``user_id``.

    Raises:
        ListingNotFoundError: If it does not exist or belongs to another user
    """
    result = await db.execute(
        select(JobListing)
        .join(Company, JobListing.company_id == Company.id)
        .where(JobListing.id == listing_id, Company.user_id == user_id)
    )
    listing = result.scalar_one_or_none()
    if listing is None:
        raise ListingNotFoundError(listing_id)
    return listing


async def get_score_breakdown(
    db: AsyncSession, user_id: UUID, listing_id: UUID
) -> ScoreBreakdown:
    """Explain a listing's score against the user's current profile.

    The breakdown is computed fresh, so it reflects profile edits that have
    not been applied by a score recalculation yet.
    """
    listing = await get_listing(db, user_id, listing_id)
    profile = await get_job_profile(db, user_id)
    return calculate_match_score_with_breakdown(listing, profile)
