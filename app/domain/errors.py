"""
app/domain/errors.py

Exception taxonomy for the scan pipeline and its management surface.

Failures are contained at the smallest scope that can absorb them:
component, then page, then the whole scan run.
"""

from __future__ import annotations


class ScanPipelineError(Exception):
    """Base exception for scan pipeline failures."""


class AdapterTransportError(ScanPipelineError):
    """Raised when an external adapter cannot reach its service after retries."""


class MalformedSourceDocument(ScanPipelineError):
    """Raised when a CMS page document cannot be parsed into slots and banners."""


class ComponentDetectionError(ScanPipelineError):
    """Raised when detection for a single banner component fails."""


class PersistenceError(ScanPipelineError):
    """Raised when the report or page configuration store is unavailable."""


class InvalidBannerSignal(ScanPipelineError, ValueError):
    """Raised when a banner signal's discount bounds are out of range or inverted."""


class PageConfigurationError(Exception):
    """Base exception for page configuration management."""


class PageNotFoundError(PageConfigurationError):
    """Raised when a page configuration id or name does not exist."""


class PageAlreadyExistsError(PageConfigurationError):
    """Raised when creating or renaming a page onto an existing page name."""


class ReportNotFoundError(Exception):
    """Raised when a scan report id does not exist."""


class ScanAlreadyRunningError(RuntimeError):
    """Raised when a scan is requested while another scan run holds the lock."""
