"""
app/services/detection_service.py

Detection entry point: fetch a banner's claims and catalog, run the rules.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from app.config import (
    get_catalog_settings,
    get_detection_settings,
    get_external_http_settings,
    get_result_cache_settings,
    get_vision_settings,
)
from app.connectors.catalog_connector import CatalogConnector, CatalogFetchResult
from app.connectors.vision_connector import BannerVisionConnector, SignalFetchResult
from app.domain.scan import DetectionResult
from app.services.result_cache import ResultCache
from detection.banner_rules import BannerAnomalyEngine
from detection.base import BaseAnomalyEngine

logger = logging.getLogger(__name__)


class DetectionService:
    """
    Reconciles one banner against the catalog behind it.

    Adapter failures are absorbed by the adapters' fallback; anything that
    still raises (fallback disabled, unexpected errors) propagates so the
    caller can contain it at component scope.
    """

    def __init__(
        self,
        *,
        vision: BannerVisionConnector,
        catalog: CatalogConnector,
        engine: BaseAnomalyEngine | None = None,
    ) -> None:
        self._vision = vision
        self._catalog = catalog
        self._engine = engine or BannerAnomalyEngine()

    def detect(self, banner_url: str, catalog_id: str) -> DetectionResult:
        logger.info("Starting anomaly detection banner_url=%s catalog_id=%s", banner_url, catalog_id)

        signal_result = self._vision.fetch_signal(banner_url)
        catalog_result = self._catalog.fetch_items(catalog_id)
        anomalies = self._engine.detect(catalog_result.items, signal_result.signal)

        result = DetectionResult(
            banner_url=banner_url,
            catalog_id=catalog_id,
            banner_signal=signal_result.signal,
            anomalies=anomalies,
            signal_is_fallback=signal_result.is_fallback,
            catalog_is_fallback=catalog_result.is_fallback,
        )
        logger.info(
            "Detected %s anomalies across %s catalog items banner_url=%s "
            "signal_fallback=%s catalog_fallback=%s",
            result.total_anomalies,
            len(catalog_result.items),
            banner_url,
            result.signal_is_fallback,
            result.catalog_is_fallback,
        )
        return result


@lru_cache(maxsize=1)
def get_detection_service() -> DetectionService:
    """
    Build and cache the detection service with its cached adapters.
    """

    http_settings = get_external_http_settings()
    cache_settings = get_result_cache_settings()
    signal_cache: ResultCache[SignalFetchResult] = ResultCache.from_settings(cache_settings)
    catalog_cache: ResultCache[CatalogFetchResult] = ResultCache.from_settings(cache_settings)

    return DetectionService(
        vision=BannerVisionConnector(
            settings=get_vision_settings(),
            http_settings=http_settings,
            cache=signal_cache,
        ),
        catalog=CatalogConnector(
            settings=get_catalog_settings(),
            http_settings=http_settings,
            cache=catalog_cache,
        ),
        engine=BannerAnomalyEngine(max_anomalies=get_detection_settings().max_anomalies),
    )
