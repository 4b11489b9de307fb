"""Scraping job tracking."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pricetracker.models.base import Base, UUIDPrimaryKeyMixin, utcnow
from pricetracker.models.enums import JobStatus

if TYPE_CHECKING:
    from pricetracker.models.source import Source


class ScrapingJob(UUIDPrimaryKeyMixin, Base):
    """One request to scrape a source for a keyword.

    Created PENDING and run at most once. COMPLETED and FAILED are terminal;
    retrying means creating a new job.
    """

    __tablename__ = "scraping_jobs"

    source_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sources.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    search_keyword: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    status: Mapped[JobStatus] = mapped_column(
        Enum(JobStatus, native_enum=False, length=20),
        nullable=False,
        default=JobStatus.PENDING,
        index=True,
    )
    items_found: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Error message if job failed",
    )

    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    source: Mapped["Source"] = relationship()

    def __repr__(self) -> str:
        return f"<ScrapingJob(id={self.id}, source_id={self.source_id}, status={self.status})>"
