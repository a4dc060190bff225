"""
app/connectors/vision_connector.py

Vision model adapter that turns a banner image URL into a BannerSignal.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any

import requests

from app.config import ExternalHTTPSettings, VisionSettings
from app.connectors.base import BaseConnector
from app.domain.signals import BannerSignal
from app.services.result_cache import ResultCache

logger = logging.getLogger(__name__)

FALLBACK_BRANDS: tuple[str, ...] = ("Nike", "Adidas", "Puma", "Reebok")
FALLBACK_DISCOUNT_LOWER: float = 20.0
FALLBACK_DISCOUNT_UPPER: float = 50.0

EXTRACTION_PROMPT = """Analyze this banner image and extract the following information:
1. Brand names mentioned in the image (look for logos, brand text, company names)
2. Discount information (percentages, offers, sales)
3. Any promotional text

Return the response in JSON format with the following structure:
{
  "brands": ["brand1", "brand2", ...],
  "discount": {
    "text": "original discount text found in image",
    "range": {"lower": number, "upper": number}
  },
  "analysis": "brief description of what you found in the image"
}

For discount ranges:
- "Up to X%" means lower=0, upper=X
- "X% to Y%" means lower=X, upper=Y
- "X% off" means lower=0, upper=X
- "Min. X% off" means lower=X, upper=100
- If there are multiple discounts, use the highest range
- If there is no discount, omit "range"

Extract brand names exactly as they appear in the image."""


class VisionResponseError(ValueError):
    """Raised when the model reply does not contain a usable JSON analysis."""


@dataclass(frozen=True)
class SignalFetchResult:
    """
    Banner signal plus a flag telling real model output from fallback data.
    """

    source: str
    signal: BannerSignal
    is_fallback: bool = False


def fallback_signal() -> BannerSignal:
    return BannerSignal(
        brands=FALLBACK_BRANDS,
        discount_lower=FALLBACK_DISCOUNT_LOWER,
        discount_upper=FALLBACK_DISCOUNT_UPPER,
    )


def _optional_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # NaN and infinities are not valid JSON and defeat the range comparisons.
    return number if math.isfinite(number) else None


def parse_analysis_text(text: str) -> BannerSignal:
    """
    Extract the JSON object embedded in a model reply and build a signal.

    The model may wrap its JSON in prose or a fenced block, so the span
    from the first ``{`` to the last ``}`` is decoded.
    """

    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise VisionResponseError("Model reply contains no JSON object.")

    try:
        analysis = json.loads(text[start:end])
    except ValueError as exc:
        raise VisionResponseError("Model reply JSON could not be decoded.") from exc
    if not isinstance(analysis, dict):
        raise VisionResponseError("Model reply JSON is not an object.")

    brands = analysis.get("brands")
    if not isinstance(brands, list):
        brands = []

    discount = analysis.get("discount")
    discount_range = discount.get("range") if isinstance(discount, dict) else None
    lower = upper = None
    if isinstance(discount_range, dict):
        lower = _optional_float(discount_range.get("lower"))
        upper = _optional_float(discount_range.get("upper"))

    # InvalidBannerSignal propagates as a parse failure.
    return BannerSignal(brands=tuple(str(brand) for brand in brands), discount_lower=lower, discount_upper=upper)


class BannerVisionConnector(BaseConnector):
    """
    Adapter for extracting brand and discount claims from banner images.

    Never propagates a failure while fallback is enabled: a missing API
    key, transport error or unusable reply yields the fixed fallback
    signal, flagged with ``is_fallback=True``. Results are cached by
    banner URL when a cache is injected.
    """

    def __init__(
        self,
        *,
        settings: VisionSettings,
        http_settings: ExternalHTTPSettings,
        cache: ResultCache[SignalFetchResult] | None = None,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(
            source="vision",
            http_settings=http_settings,
            session=session,
            use_fallback=settings.use_fallback,
        )
        self._settings = settings
        self._cache = cache

    def fetch_signal(self, banner_url: str) -> SignalFetchResult:
        if self._cache is None:
            return self._fetch_uncached(banner_url)
        return self._cache.get_or_load(banner_url, lambda: self._fetch_uncached(banner_url))

    def _fetch_uncached(self, banner_url: str) -> SignalFetchResult:
        logger.info("Analyzing banner url=%s", banner_url)
        signal, is_fallback = self._with_fallback(
            lambda: self._analyze(banner_url),
            fallback_signal,
            subject=banner_url,
        )
        if not is_fallback:
            logger.info(
                "Banner analysis completed url=%s brands=%s lower=%s upper=%s",
                banner_url,
                list(signal.brands),
                signal.discount_lower,
                signal.discount_upper,
            )
        return SignalFetchResult(source=self.source, signal=signal, is_fallback=is_fallback)

    def _analyze(self, banner_url: str) -> BannerSignal:
        if not self._settings.api_key:
            raise VisionResponseError("VISION_API_KEY is not configured.")

        payload = self._request_json(
            method="POST",
            url=f"{self._settings.api_url.rstrip('/')}/v1/messages",
            headers={
                "x-api-key": self._settings.api_key,
                "anthropic-version": self._settings.api_version,
                "content-type": "application/json",
            },
            json_body={
                "model": self._settings.model,
                "max_tokens": self._settings.max_tokens,
                "messages": [
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": EXTRACTION_PROMPT},
                            {"type": "image", "source": {"type": "url", "url": banner_url}},
                        ],
                    }
                ],
            },
        )
        return parse_analysis_text(self._first_text_block(payload))

    @staticmethod
    def _first_text_block(payload: Any) -> str:
        content = payload.get("content") if isinstance(payload, dict) else None
        if not isinstance(content, list) or not content:
            raise VisionResponseError("Model reply has no content blocks.")
        for block in content:
            if isinstance(block, dict) and block.get("type", "text") == "text":
                text = block.get("text")
                if isinstance(text, str):
                    return text
        raise VisionResponseError("Model reply has no text block.")
