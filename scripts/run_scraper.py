"""Manual scraper runner for testing and debugging site scrapers.

Runs one site scraper against the live site and prints what it parsed.
Nothing is written to the database.

Usage:
    python scripts/run_scraper.py --source amazon --keyword "rtx 4070"
    python scripts/run_scraper.py --source pccomponentes --keyword ssd --limit 5
"""

import asyncio
import argparse
import sys
import os
from decimal import Decimal
from typing import Optional

# Add backend to path so we can import pricetracker modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from pricetracker.models.enums import ScraperType
from pricetracker.scrapers.registry import build_scraper_registry


async def run_scraper(source: str, keyword: str, limit: int = 10):
    """Run a site scraper and display the results.

    Args:
        source: Scraper type value (e.g., "amazon")
        keyword: Search keyword
        limit: Maximum number of items to display (default: 10)
    """
    registry = build_scraper_registry()
    scraper = registry.get(ScraperType(source))

    print(f"\n{'='*70}")
    print(f"  Running {scraper.site_name} scraper")
    print(f"{'='*70}")
    print(f"  Keyword: {keyword}")
    print(f"  Display Limit: {limit}")
    print(f"{'='*70}\n")

    items = await scraper.scrape(keyword)

    if not items:
        print("No items found (or the site could not be fetched).\n")
        return

    print(f"Found {len(items)} items\n")

    for i, item in enumerate(items[:limit], 1):
        print(f"[{i}] {item.name}")
        print(f"    Price: {_format_price(item.price)}")
        print(f"    In stock: {'yes' if item.in_stock else 'no'}")
        if item.url:
            print(f"    URL: {item.url[:80]}")
        print()

    # Summary
    priced = [item for item in items if item.price is not None]
    print(f"{'='*70}")
    print(f"  Summary")
    print(f"{'='*70}")
    print(f"  Total Items: {len(items)}")
    print(f"  With price: {len(priced)}")
    print(f"  Without URL: {sum(1 for item in items if not item.url)}")
    if priced:
        cheapest = min(priced, key=lambda item: item.price)
        print(f"  Cheapest: {_format_price(cheapest.price)} ({cheapest.name[:40]})")
    print(f"{'='*70}\n")


def _format_price(price: Optional[Decimal]) -> str:
    """Format a price in euros, or '-' when missing."""
    if price is None:
        return "-"
    return f"{price:,.2f} EUR"


def main():
    """Parse arguments and run the scraper."""
    parser = argparse.ArgumentParser(
        description="Run a site scraper for testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_scraper.py --source amazon --keyword "rtx 4070"
  python scripts/run_scraper.py --source mediamarkt --keyword portatil
  python scripts/run_scraper.py --source pccomponentes --keyword ssd --limit 5
        """,
    )

    parser.add_argument(
        "--source",
        required=True,
        choices=[t.value for t in ScraperType],
        help="Source to scrape",
    )

    parser.add_argument(
        "--keyword",
        required=True,
        help="Search keyword",
    )

    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Maximum number of items to display (default: 10)",
    )

    args = parser.parse_args()

    asyncio.run(run_scraper(args.source, args.keyword, args.limit))


if __name__ == "__main__":
    main()
