"""
app/api/routers package marker.
"""

from app.api.routers.anomaly_detection import router as anomaly_detection_router
from app.api.routers.scheduler import router as scheduler_router

__all__ = [
    "anomaly_detection_router",
    "scheduler_router",
]
