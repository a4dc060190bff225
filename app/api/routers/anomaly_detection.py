"""
app/api/routers/anomaly_detection.py

Single-banner anomaly detection endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.schemas.detection import DetectionHealthResponse, DetectionRequest, DetectionResponse
from app.services.detection_service import DetectionService, get_detection_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/anomaly", tags=["anomaly-detection"])


@router.post(
    "/detect",
    response_model=DetectionResponse,
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": DetectionResponse}},
)
def detect_anomalies(
    body: DetectionRequest,
    detection_service: DetectionService = Depends(get_detection_service),
) -> DetectionResponse | JSONResponse:
    """
    Reconcile one banner with its catalog.

    A detection failure is reported in the body with ``status="error"``
    and HTTP 500.
    """

    try:
        result = detection_service.detect(body.banner_url, body.catalog_id)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Anomaly detection failed banner_url=%s catalog_id=%s", body.banner_url, body.catalog_id)
        failed = DetectionResponse.failed(body.banner_url, body.catalog_id, str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=failed.model_dump(mode="json"),
        )

    return DetectionResponse.from_result(result)


@router.get("/health", response_model=DetectionHealthResponse)
def detection_health() -> DetectionHealthResponse:
    return DetectionHealthResponse(status="healthy", service="banner-anomaly-detection")
