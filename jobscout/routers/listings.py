"""Job listings API router."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from jobscout.database import get_db
from jobscout.dependencies import get_user_id
from jobscout.errors import ListingNotFoundError
from jobscout.schemas.matching import ScoreBreakdown
from jobscout.services.listings import get_score_breakdown

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/listings", tags=["listings"])


@router.get(
    "/{listing_id}/score-breakdown",
    response_model=ScoreBreakdown,
    summary="Explain a listing's match score"
)
async def score_breakdown(
    listing_id: UUID,
    user_id: UUID = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
) -> ScoreBreakdown:
    """Break a listing's match score down by category.

    Raises:
        HTTPException 404: Listing not found
    """
    try:
        return await get_score_breakdown(db, user_id, listing_id)
    except ListingNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
