"""CrawlLog model: one audit record per crawl attempt against a company."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from .company import Company


class CrawlLog(Base, TimestampMixin):
    """Audit record of a single crawl attempt.

    Status Flow:
        running → success
                → failed (error, timeout, or abandoned by a crashed process)

    A row is created when the crawl starts and updated exactly once when it
    reaches a terminal state. Rows are never deleted by the pipeline.

    Attributes:
        company_id: Company that was crawled
        started_at: When the crawl began
        completed_at: When the crawl reached a terminal state (None while running)
        status: "running", "success" or "failed"
        jobs_found: Postings returned by the adapter or crawler
        new_jobs: Postings inserted for the first time
        error: Error message when status is "failed"
    """

    __tablename__ = "crawl_logs"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    company_id: Mapped[UUID] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    status: Mapped[str] = mapped_column(String(20), default="running", nullable=False)
    # Valid values: "running", "success", "failed"

    jobs_found: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    new_jobs: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    company: Mapped["Company"] = relationship(back_populates="crawl_logs")

    __table_args__ = (
        Index("idx_crawl_logs_status_started", "status", "started_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<CrawlLog(id={self.id}, company_id={self.company_id}, "
            f"status={self.status}, found={self.jobs_found}, new={self.new_jobs})>"
        )
