"""Company data access used by the crawl pipeline.

Source type detection happens here: once on creation, and again only when
the career page URL changes.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobscout.errors import CompanyNotFoundError
from jobscout.models import Company
from jobscout.schemas.company import CompanyCreate, CompanyUpdate
from jobscout.services.sources import detect_source_type

logger = logging.getLogger(__name__)


async def get_company(db: AsyncSession, user_id: UUID, company_id: UUID) -> Company:
    """Fetch a company owned by ``user_id``.

    Raises:
        CompanyNotFoundError: If it does not exist or belongs to another user
    """
    result = await db.execute(
        select(Company).where(Company.id == company_id, Company.user_id == user_id)
    )
    company = result.scalar_one_or_none()
    if company is None:
        raise CompanyNotFoundError(company_id)
    return company


async def list_companies(
    db: AsyncSession, user_id: UUID, active_only: bool = False
) -> list[Company]:
    """List a user's companies ordered by name."""
    query = select(Company).where(Company.user_id == user_id).order_by(Company.name)
    if active_only:
        query = query.where(Company.active.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def create_company(
    db: AsyncSession, user_id: UUID, data: CompanyCreate
) -> Company:
    company = Company(
        user_id=user_id,
        name=data.name,
        career_page_url=data.career_page_url,
        source_type=detect_source_type(data.career_page_url).value,
    )
    db.add(company)
    await db.commit()
    await db.refresh(company)

    logger.info(f"Created company {company.id}: {company.name} ({company.source_type})")
    return company


async def update_company(
    db: AsyncSession, user_id: UUID, company_id: UUID, data: CompanyUpdate
) -> Company:
    company = await get_company(db, user_id, company_id)
    changes = data.model_dump(exclude_unset=True)

    new_url = changes.get("career_page_url")
    if new_url and new_url != company.career_page_url:
        changes["source_type"] = detect_source_type(new_url).value

    for field, value in changes.items():
        setattr(company, field, value)

    await db.commit()
    await db.refresh(company)
    return company
