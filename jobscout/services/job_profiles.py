"""Job profile access. The crawl pipeline only reads profiles."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobscout.models import JobProfile
from jobscout.schemas.job_profile import JobProfileData, JobProfileUpdate


async def get_job_profile(db: AsyncSession, user_id: UUID) -> JobProfileData | None:
    """Return the user's scoring profile, or None if they never set one."""
    result = await db.execute(select(JobProfile).where(JobProfile.user_id == user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        return None
    return JobProfileData.model_validate(profile)


async def upsert_job_profile(
    db: AsyncSession, user_id: UUID, data: JobProfileUpdate
) -> JobProfile:
    """Create the profile or apply the fields present in ``data``."""
    result = await db.execute(select(JobProfile).where(JobProfile.user_id == user_id))
    profile = result.scalar_one_or_none()
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    if profile is None:
        profile = JobProfile(user_id=user_id, **changes)
        db.add(profile)
    else:
        for field, value in changes.items():
            setattr(profile, field, value)

    await db.commit()
    await db.refresh(profile)
    return profile
