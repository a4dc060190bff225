"""
app/schemas/detection.py

Request and response schemas for single-banner anomaly detection.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.scan import DetectionResult, DetectionStatus


class DetectionRequest(BaseModel):
    """
    API request model for reconciling one banner with its catalog.
    """

    banner_url: str = Field(..., min_length=1)
    catalog_id: str = Field(..., min_length=1)


class DiscountRangeResponse(BaseModel):
    lower: float | None = None
    upper: float | None = None


class BannerSignalResponse(BaseModel):
    brands: list[str] = Field(default_factory=list)
    discount_range: DiscountRangeResponse = Field(default_factory=DiscountRangeResponse)
    is_fallback: bool = False


class AnomalyResponse(BaseModel):
    code: str
    brand_name: str
    discount_percent: float | None = None
    anomaly_reasons: list[str] = Field(..., min_length=1)


class DetectionResponse(BaseModel):
    """
    API response model for one detection run.

    On failure only the identifiers, ``status="error"`` and ``error`` are
    populated.
    """

    banner_url: str
    catalog_id: str
    banner_signal: BannerSignalResponse | None = None
    catalog_is_fallback: bool = False
    anomalies: list[AnomalyResponse] = Field(default_factory=list)
    total_anomalies: int = Field(0, ge=0)
    status: str = DetectionStatus.SUCCESS
    error: str | None = None

    @classmethod
    def from_result(cls, result: DetectionResult) -> "DetectionResponse":
        return cls.model_validate(result.to_payload())

    @classmethod
    def failed(cls, banner_url: str, catalog_id: str, error: str) -> "DetectionResponse":
        return cls(
            banner_url=banner_url,
            catalog_id=catalog_id,
            status=DetectionStatus.ERROR,
            error=error,
        )


class DetectionHealthResponse(BaseModel):
    status: str
    service: str
