"""Source model representing an external retail site."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pricetracker.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from pricetracker.models.enums import ScraperType, SourceStatus


class Source(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Retail site scraped for prices (Amazon ES, MediaMarkt ES, ...).

    Created by configuration/seeding. The job runner updates the counters and
    last_scraped_at after every job; sources are never deleted.
    """

    __tablename__ = "sources"

    name: Mapped[str] = mapped_column(String(100), nullable=False, comment="Display name")
    base_url: Mapped[str] = mapped_column(String(500), nullable=False)
    scraper_type: Mapped[ScraperType] = mapped_column(
        Enum(ScraperType, native_enum=False, length=20),
        nullable=False,
        index=True,
        comment="Which registered scraper handles this source",
    )
    status: Mapped[SourceStatus] = mapped_column(
        Enum(SourceStatus, native_enum=False, length=20),
        nullable=False,
        default=SourceStatus.ACTIVE,
    )

    last_scraped_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    successful_scrapes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_scrapes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Source(id={self.id}, name='{self.name}', scraper_type={self.scraper_type})>"
