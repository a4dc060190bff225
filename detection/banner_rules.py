"""
detection/banner_rules.py

Deterministic, rule-based anomaly engine for promotional banners.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import List

from app.domain.signals import AnomalyRecord, BannerSignal, CatalogItem
from detection.base import BaseAnomalyEngine


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_MAX_ANOMALIES: int = 50

UNKNOWN_BRAND: str = "Unknown"


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def discount_reason(discount: float | None, signal: BannerSignal) -> str | None:
    """Return the discount-range reason for one item, or ``None``.

    Bounds are inclusive: a discount equal to either bound is in range.
    """
    if discount is None or not signal.has_discount_range:
        return None
    if discount < signal.discount_lower:
        return f"Discount {discount}% is below banner minimum {signal.discount_lower}%"
    if discount > signal.discount_upper:
        return f"Discount {discount}% is above banner maximum {signal.discount_upper}%"
    return None


def brand_matches(item_brand: str, banner_brand: str) -> bool:
    """Case-insensitive containment in either direction ("Nike" ~ "Nike India")."""
    item = item_brand.casefold()
    banner = banner_brand.casefold()
    return banner in item or item in banner


def brand_reason(brand: str | None, signal: BannerSignal) -> str | None:
    """Return the brand-mismatch reason for one item, or ``None``."""
    if brand is None or not brand.strip() or not signal.brands:
        return None
    if any(brand_matches(brand, banner_brand) for banner_brand in signal.brands):
        return None
    return f"Brand '{brand}' does not match banner brands: [{', '.join(signal.brands)}]"


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class BannerAnomalyEngine(BaseAnomalyEngine):
    """
    Flags catalog items that contradict their banner's claims.

    Rules evaluated per item (independently, both may fire)
    --------------------------------------------------------
    1. Discount range - item discount outside [lower, upper].
    2. Brand match    - item brand matches none of the banner brands.

    Output is truncated to the first ``max_anomalies`` records in catalog
    order; no severity ranking is applied.
    """

    def __init__(self, max_anomalies: int = DEFAULT_MAX_ANOMALIES) -> None:
        self._max_anomalies = max(0, max_anomalies)

    @property
    def max_anomalies(self) -> int:
        return self._max_anomalies

    def detect(
        self,
        items: Sequence[CatalogItem],
        signal: BannerSignal,
    ) -> tuple[AnomalyRecord, ...]:
        records: List[AnomalyRecord] = []

        for item in items:
            if len(records) >= self._max_anomalies:
                break

            reasons = [
                reason
                for reason in (
                    discount_reason(item.discount_percent, signal),
                    brand_reason(item.brand_name, signal),
                )
                if reason is not None
            ]
            if not reasons:
                continue

            records.append(
                AnomalyRecord(
                    item_code=item.code,
                    brand_name=item.brand_name or UNKNOWN_BRAND,
                    discount_percent=item.discount_percent,
                    reasons=tuple(reasons),
                )
            )

        return tuple(records)
