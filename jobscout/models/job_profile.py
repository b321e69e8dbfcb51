"""JobProfile model: per-user preferences used for relevance scoring."""

from typing import List
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class JobProfile(Base, TimestampMixin):
    """Scoring preferences for one user. Read-only for the crawl pipeline."""

    __tablename__ = "job_profiles"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(nullable=False, unique=True, index=True)

    # Preference lists - Store as JSON arrays
    keywords: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    titles: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    locations: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    excluded_titles: Mapped[List[str]] = mapped_column(
        JSON, default=list, nullable=False
    )
    excluded_locations: Mapped[List[str]] = mapped_column(
        JSON, default=list, nullable=False
    )

    remote_only: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<JobProfile(user_id={self.user_id}, remote_only={self.remote_only})>"
