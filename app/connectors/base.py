"""
app/connectors/base.py

Base adapter abstraction and shared HTTP mechanics.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any, TypeVar

import requests

from app.config import ExternalHTTPSettings
from app.domain.errors import AdapterTransportError
from app.logging_utils import log_event

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

T = TypeVar("T")


class BaseConnector:
    """
    Shared plumbing for the vision, catalog and CMS adapters.

    Requests are rate limited, retried with exponential backoff on
    timeouts, connection errors and retryable status codes, and surface as
    :class:`AdapterTransportError` once retries are exhausted.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
        use_fallback: bool = True,
    ) -> None:
        self.source = source
        # An injected session is shared; otherwise each thread gets its own.
        self._shared_session = session
        self._thread_sessions = threading.local()
        self._use_fallback = use_fallback
        self._timeout_seconds = http_settings.timeout_seconds
        self._max_retries = http_settings.max_retries
        self._backoff_initial_seconds = http_settings.backoff_initial_seconds
        self._backoff_multiplier = http_settings.backoff_multiplier
        self._min_request_interval_seconds = (
            1.0 / http_settings.rate_limit_per_second if http_settings.rate_limit_per_second > 0 else 0.0
        )
        self._last_request_monotonic: float = 0.0
        self._rate_lock = threading.Lock()

    @property
    def http_session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._thread_sessions, "session", None)
        if session is None:
            session = requests.Session()
            self._thread_sessions.session = session
        return session

    def _with_fallback(
        self,
        load: Callable[[], T],
        fallback: Callable[[], T],
        *,
        subject: str,
        fallback_on: tuple[type[BaseException], ...] = (Exception,),
    ) -> tuple[T, bool]:
        """
        Run *load*; on a listed failure return ``(fallback(), True)``.

        When fallback is disabled the failure propagates, wrapped as
        :class:`AdapterTransportError` unless it already is one.
        """

        try:
            return load(), False
        except fallback_on as exc:
            if not self._use_fallback:
                if isinstance(exc, AdapterTransportError):
                    raise
                raise AdapterTransportError(f"{self.source}: {exc}") from exc

            log_event(
                logger,
                logging.WARNING,
                "adapter_fallback_used",
                source=self.source,
                subject=subject,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return fallback(), True

    def _request_json(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json_body: Any = None,
    ) -> Any:
        """
        Execute an HTTP request and return parsed JSON with retry support.
        """

        response = self._request(method=method, url=url, params=params, headers=headers, json_body=json_body)
        try:
            return response.json()
        except ValueError as exc:
            raise AdapterTransportError(f"{self.source}: response was not valid JSON.") from exc

    def _request_text(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> str:
        """
        Execute an HTTP request and return response text with retry support.
        """

        response = self._request(method=method, url=url, params=params, headers=headers)
        return response.text

    def _request(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json_body: Any = None,
    ) -> requests.Response:
        """
        Execute an HTTP request with rate limiting and exponential backoff.
        """

        last_error: Exception | None = None
        for attempt in range(self._max_retries + 1):
            self._apply_rate_limit()
            try:
                response = self.http_session.request(
                    method=method,
                    url=url,
                    params=params,
                    headers=headers,
                    json=json_body,
                    timeout=self._timeout_seconds,
                )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable HTTP status code: {response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return response
            except requests.HTTPError as exc:
                last_error = exc
                status_code = exc.response.status_code if exc.response is not None else None
                if status_code not in RETRYABLE_STATUS_CODES:
                    logger.error(
                        "Adapter request failed source=%s status=%s url=%s error=%s",
                        self.source,
                        status_code,
                        url,
                        exc,
                    )
                    raise AdapterTransportError(
                        f"{self.source}: non-retryable request failure (status={status_code})."
                    ) from exc
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc

            if attempt >= self._max_retries:
                break

            backoff_seconds = self._backoff_initial_seconds * (self._backoff_multiplier**attempt)
            logger.warning(
                "Adapter request retry source=%s attempt=%s/%s wait_seconds=%.2f url=%s",
                self.source,
                attempt + 1,
                self._max_retries,
                backoff_seconds,
                url,
            )
            time.sleep(backoff_seconds)

        logger.error(
            "Adapter request exhausted retries source=%s url=%s error=%s",
            self.source,
            url,
            last_error,
        )
        raise AdapterTransportError(f"{self.source}: request failed after retries.") from last_error

    def _apply_rate_limit(self) -> None:
        """
        Enforce minimum interval between outbound requests.
        """

        if self._min_request_interval_seconds <= 0:
            return

        with self._rate_lock:
            now = time.monotonic()
            elapsed = now - self._last_request_monotonic
            remaining = self._min_request_interval_seconds - elapsed
            if remaining > 0:
                time.sleep(remaining)
            self._last_request_monotonic = time.monotonic()
