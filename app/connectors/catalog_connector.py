"""
app/connectors/catalog_connector.py

Product catalog adapter returning the real items behind a banner.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

import requests

from app.config import CatalogSettings, ExternalHTTPSettings
from app.connectors.base import BaseConnector
from app.domain.signals import CatalogItem
from app.services.result_cache import ResultCache

logger = logging.getLogger(__name__)

FALLBACK_ITEMS: tuple[CatalogItem, ...] = (
    CatalogItem(code="PROD001", brand_name="Zara", discount_percent=60.0),
    CatalogItem(code="PROD002", brand_name="Nike", discount_percent=15.0),
    CatalogItem(code="PROD003", brand_name="Adidas", discount_percent=35.0),
    CatalogItem(code="PROD004", brand_name="Calvin Klein", discount_percent=30.0),
    CatalogItem(code="PROD005", brand_name="Puma", discount_percent=45.0),
)


class CatalogResponseError(ValueError):
    """Raised when a catalog payload has no product list."""


@dataclass(frozen=True)
class CatalogFetchResult:
    """
    Catalog items plus a flag telling real catalog data from fallback data.
    """

    source: str
    items: tuple[CatalogItem, ...]
    is_fallback: bool = False


def _optional_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # NaN and infinities are not valid JSON and defeat the range comparisons.
    return number if math.isfinite(number) else None


def parse_catalog_payload(payload: Any) -> tuple[CatalogItem, ...]:
    """
    Normalize a catalog search payload into CatalogItems.

    Products without a code are dropped; a missing discount or brand is
    kept as ``None`` so the corresponding rule is skipped.
    """

    products = payload.get("products") if isinstance(payload, dict) else None
    if not isinstance(products, list):
        raise CatalogResponseError("Catalog payload has no 'products' list.")

    items: list[CatalogItem] = []
    skipped = 0
    for product in products:
        if not isinstance(product, dict):
            skipped += 1
            continue
        code = str(product.get("code") or "").strip()
        if not code:
            skipped += 1
            continue

        variant = product.get("fnlColorVariantData")
        brand = variant.get("brandName") if isinstance(variant, dict) else None
        brand_name = str(brand).strip() if brand is not None else None

        items.append(
            CatalogItem(
                code=code,
                brand_name=brand_name or None,
                discount_percent=_optional_float(product.get("discountPercent")),
            )
        )

    if skipped:
        logger.warning("Skipped %s catalog products without a usable code", skipped)
    return tuple(items)


class CatalogConnector(BaseConnector):
    """
    Adapter for fetching catalog items by catalog (curated) id.

    Never propagates a failure while fallback is enabled; results are
    cached by catalog id when a cache is injected.
    """

    def __init__(
        self,
        *,
        settings: CatalogSettings,
        http_settings: ExternalHTTPSettings,
        cache: ResultCache[CatalogFetchResult] | None = None,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(
            source="catalog",
            http_settings=http_settings,
            session=session,
            use_fallback=settings.use_fallback,
        )
        self._settings = settings
        self._cache = cache

    def fetch_items(self, catalog_id: str) -> CatalogFetchResult:
        if self._cache is None:
            return self._fetch_uncached(catalog_id)
        return self._cache.get_or_load(catalog_id, lambda: self._fetch_uncached(catalog_id))

    def _fetch_uncached(self, catalog_id: str) -> CatalogFetchResult:
        logger.info("Fetching catalog items catalog_id=%s", catalog_id)
        items, is_fallback = self._with_fallback(
            lambda: self._fetch(catalog_id),
            lambda: FALLBACK_ITEMS,
            subject=catalog_id,
        )
        logger.info(
            "Retrieved %s catalog items catalog_id=%s fallback=%s",
            len(items),
            catalog_id,
            is_fallback,
        )
        return CatalogFetchResult(source=self.source, items=items, is_fallback=is_fallback)

    def _fetch(self, catalog_id: str) -> tuple[CatalogItem, ...]:
        payload = self._request_json(
            method="GET",
            url=self._settings.base_url,
            params={"curatedid": catalog_id},
            headers={"User-Agent": self._settings.user_agent},
        )
        return parse_catalog_payload(payload)
