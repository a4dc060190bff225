"""
app/domain/signals.py

Value objects exchanged between the adapters, the rule engine and the scan
orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from app.domain.errors import InvalidBannerSignal

_MIN_DISCOUNT = 0.0
_MAX_DISCOUNT = 100.0


def _clean_brands(brands: Any) -> tuple[str, ...]:
    cleaned: list[str] = []
    for brand in brands or ():
        text = str(brand).strip()
        if text:
            cleaned.append(text)
    return tuple(cleaned)


@dataclass(frozen=True)
class BannerSignal:
    """
    Brand and discount claims extracted from one promotional banner.

    Bounds are validated eagerly: a present bound must lie in [0, 100] and
    ``discount_lower`` may not exceed ``discount_upper``. Either bound may be
    ``None`` when the banner advertises no discount, in which case the
    discount rule does not apply.
    """

    brands: tuple[str, ...] = ()
    discount_lower: float | None = None
    discount_upper: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "brands", _clean_brands(self.brands))
        for name in ("discount_lower", "discount_upper"):
            value = getattr(self, name)
            if value is None:
                continue
            value = float(value)
            if not _MIN_DISCOUNT <= value <= _MAX_DISCOUNT:
                raise InvalidBannerSignal(
                    f"{name}={value} is outside [{_MIN_DISCOUNT}, {_MAX_DISCOUNT}]."
                )
            object.__setattr__(self, name, value)

        if self.has_discount_range and self.discount_lower > self.discount_upper:
            raise InvalidBannerSignal(
                f"discount_lower={self.discount_lower} exceeds "
                f"discount_upper={self.discount_upper}."
            )

    @property
    def has_discount_range(self) -> bool:
        return self.discount_lower is not None and self.discount_upper is not None

    def to_payload(self) -> dict[str, Any]:
        return {
            "brands": list(self.brands),
            "discount_range": {
                "lower": self.discount_lower,
                "upper": self.discount_upper,
            },
        }


@dataclass(frozen=True)
class CatalogItem:
    """
    One real product returned by the catalog for a catalog id.
    """

    code: str
    brand_name: str | None = None
    discount_percent: float | None = None

    def __post_init__(self) -> None:
        if self.discount_percent is not None:
            object.__setattr__(self, "discount_percent", float(self.discount_percent))


@dataclass(frozen=True)
class AnomalyRecord:
    """
    A catalog item whose attributes contradict its banner's claims.
    """

    item_code: str
    brand_name: str
    discount_percent: float | None
    reasons: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "reasons", tuple(self.reasons))
        if not self.reasons:
            raise ValueError(f"AnomalyRecord for {self.item_code!r} requires at least one reason.")

    def to_payload(self) -> dict[str, Any]:
        return {
            "code": self.item_code,
            "brand_name": self.brand_name,
            "discount_percent": self.discount_percent,
            "anomaly_reasons": list(self.reasons),
        }


@dataclass(frozen=True)
class ScanComponent:
    """
    One scannable banner on a page: image URL, catalog id and layout type.
    """

    banner_url: str
    catalog_id: str
    component_type: str = "banner"

    def to_payload(self) -> dict[str, Any]:
        return {
            "banner_url": self.banner_url,
            "catalog_id": self.catalog_id,
            "component_type": self.component_type,
        }
