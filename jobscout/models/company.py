"""Company model for tracked employers and their career pages."""

from typing import TYPE_CHECKING, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .crawl_log import CrawlLog
    from .job_listing import JobListing


class Company(Base, TimestampMixin):
    """A tracked employer owned by a single user.

    ``source_type`` is detected from ``career_page_url`` when the company is
    created and re-detected only when the URL changes.
    """

    __tablename__ = "companies"

    # Primary Key - UUID
    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
        nullable=False,
    )

    # Owner (users live outside this service)
    user_id: Mapped[UUID] = mapped_column(nullable=False, index=True)

    # Career page
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    career_page_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    source_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Free-form metadata
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    headquarters: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    founded_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    revenue_estimate: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    stage: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Relationships - rows are removed by ON DELETE CASCADE
    job_listings: Mapped[List["JobListing"]] = relationship(
        back_populates="company",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    crawl_logs: Mapped[List["CrawlLog"]] = relationship(
        back_populates="company",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_companies_user_name"),
    )

    def __repr__(self) -> str:
        return f"<Company(name='{self.name}', source_type='{self.source_type}')>"
