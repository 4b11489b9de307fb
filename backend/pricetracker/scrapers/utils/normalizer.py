"""Data normalization utilities for price parsing and URL handling."""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from urllib.parse import urljoin


_CURRENCY_TOKENS = ("EUR", "€")
_WHITESPACE = re.compile(r"\s+")


class PriceNormalizer:
    """Price parsing for the formats served by Spanish retail sites.

    Prices arrive as JSON numbers, plain decimal strings ("599.99"),
    Spanish-formatted strings ("1.299,00 €") or split whole/fraction
    fragments. Anything that cannot be read as a finite amount is None.
    """

    @staticmethod
    def to_decimal(raw: Any) -> Optional[Decimal]:
        """Convert a number or plain decimal string to Decimal.

        Returns:
            Decimal value, or None if parsing fails
        """
        if raw is None or isinstance(raw, bool):
            return None
        if isinstance(raw, Decimal):
            value = raw
        else:
            text = str(raw).strip()
            if not text:
                return None
            try:
                value = Decimal(text)
            except InvalidOperation:
                return None
        return value if value.is_finite() else None

    @classmethod
    def parse_locale_price(cls, raw: Any) -> Optional[Decimal]:
        """Parse a price that may use a comma as decimal separator.

        Handles:
        - 599.99 / "599.99" -> 599.99
        - "599,99" -> 599.99
        - "1.299,00 €" -> 1299.00 (dots are thousands separators when a comma is present)

        Args:
            raw: Raw price value

        Returns:
            Decimal price value, or None if parsing fails
        """
        if raw is None or isinstance(raw, (int, float, Decimal)):
            return cls.to_decimal(raw)

        text = str(raw)
        for token in _CURRENCY_TOKENS:
            text = text.replace(token, "")
        text = _WHITESPACE.sub("", text)

        if "," in text:
            text = text.replace(".", "").replace(",", ".")

        return cls.to_decimal(text)

    @classmethod
    def from_parts(cls, whole: str, fraction: Optional[str]) -> Optional[Decimal]:
        """Join a split price ("1.299" + "00") into a Decimal.

        Separators in the whole part are dropped; a missing fraction means 00.
        """
        whole = (whole or "").replace(".", "").replace(",", "").strip()
        if not whole:
            return None
        fraction = (fraction or "").strip() or "00"
        return cls.to_decimal(f"{whole}.{fraction}")


def to_absolute_url(base_url: str, href: Optional[str]) -> Optional[str]:
    """Resolve a possibly relative link against a site's base URL.

    Args:
        base_url: Site root, e.g. "https://www.amazon.es"
        href: Link as found in the page

    Returns:
        Absolute URL, or None for empty links
    """
    if not href or not href.strip():
        return None
    href = href.strip()
    if href.startswith(("http://", "https://")):
        return href
    return urljoin(base_url.rstrip("/") + "/", href)
