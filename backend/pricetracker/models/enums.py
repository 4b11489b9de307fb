"""Enumerations shared by models, services and scrapers."""

import enum


class ScraperType(str, enum.Enum):
    """Scraper implementation backing a source."""

    AMAZON = "amazon"
    MEDIAMARKT = "mediamarkt"
    PCCOMPONENTES = "pccomponentes"


class SourceStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class JobStatus(str, enum.Enum):
    """Scraping job lifecycle: PENDING -> RUNNING -> COMPLETED | FAILED."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class AlertStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    TRIGGERED = "TRIGGERED"
