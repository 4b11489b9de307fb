"""Site-specific scraper implementations.

Each module implements a class that inherits from BaseSiteScraper.
"""

from .amazon import AmazonScraper
from .mediamarkt import MediaMarktScraper
from .pccomponentes import PCComponentesScraper

__all__ = [
    "AmazonScraper",
    "MediaMarktScraper",
    "PCComponentesScraper",
]
