"""JobListing model for deduplicated postings discovered by crawling."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from .company import Company

# Valid values for JobListing.status. Only users move a listing along this
# flow; crawls never write the column after insert.
JOB_STATUSES = ("new", "viewed", "applied", "dismissed")


class JobListing(Base, TimestampMixin):
    """A persisted job posting, unique per (company_id, external_id).

    Status Flow:
        new → viewed → applied
                     → dismissed
    """

    __tablename__ = "job_listings"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Source-specific identifier, stable across crawls
    external_id: Mapped[str] = mapped_column(String(255), nullable=False)

    # Posting content
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    remote: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    department: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    posted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Lifecycle
    first_seen_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    last_seen_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), default="new", nullable=False)

    # Cached relevance score (0-100)
    match_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    company: Mapped["Company"] = relationship(back_populates="job_listings")

    __table_args__ = (
        UniqueConstraint(
            "company_id", "external_id", name="uq_job_listings_company_external"
        ),
        Index("idx_job_listings_status", "status"),
        Index("idx_job_listings_match_score", "match_score"),
    )

    def __repr__(self) -> str:
        return (
            f"<JobListing(external_id='{self.external_id}', "
            f"title='{self.title}', status={self.status})>"
        )
