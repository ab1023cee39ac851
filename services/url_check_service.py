# -*- coding: utf-8 -*-
"""
URL reachability checks for link fields of the investment wizard.

A HEAD request (following redirects) is tried first; sites that reject or
time out on HEAD get a GET. Results with an HTTP status are cached for a
short time so re-validating the same link does not hit the network again.
"""

import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import requests

from app.config import Config
from services.translation_manager import tr
from services.validation.validation_strategy import is_valid_url
from utils.logger import get_logger

logger = get_logger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; PortfolioAdmin URL check)"


@dataclass(frozen=True)
class UrlCheckResult:
    """Outcome of a reachability check."""
    ok: bool
    status: Optional[int] = None
    final_url: Optional[str] = None  # set only when the request was redirected
    error: Optional[str] = None

    @property
    def redirected(self) -> bool:
        return self.final_url is not None

    @property
    def message(self) -> str:
        """User-facing explanation for a failed check."""
        if self.ok:
            return ""
        if self.status:
            return tr("validation.url.unreachable", status=self.status)
        if self.error:
            return tr("validation.url.check_failed")
        return tr("validation.url.unreachable_generic")

    def to_dict(self) -> dict:
        data = {"ok": self.ok}
        if self.status is not None:
            data["status"] = self.status
        if self.final_url:
            data["finalUrl"] = self.final_url
        if self.error:
            data["error"] = self.error
        return data


class UrlCheckService:
    """Checks whether URLs answer with a 2xx status."""

    def __init__(self, timeout: int = None, cache_ttl: int = None,
                 session: Optional[requests.Session] = None):
        self.timeout = timeout or Config.URL_CHECK_TIMEOUT
        self.cache_ttl = Config.URL_CHECK_CACHE_TTL if cache_ttl is None else cache_ttl
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        self._cache: Dict[str, Tuple[float, UrlCheckResult]] = {}
        self._lock = threading.Lock()

    def check(self, url: str) -> UrlCheckResult:
        """
        Check that ``url`` is reachable.

        Returns:
            UrlCheckResult with ok, status and final_url (when redirected),
            or ok=False with an error for malformed URLs and network failures
        """
        if not url or not url.strip():
            return UrlCheckResult(ok=False, error="URL parameter is required")

        url = url.strip()
        if not is_valid_url(url):
            return UrlCheckResult(ok=False, error=tr("validation.url.invalid_format"))

        cached = self._get_cached(url)
        if cached is not None:
            logger.debug(f"URL check cache hit: {url}")
            return cached

        try:
            response = self._request("HEAD", url)
        except requests.exceptions.RequestException as head_error:
            logger.debug(f"HEAD failed for {url}, falling back to GET: {head_error}")
            try:
                response = self._request("GET", url)
            except requests.exceptions.RequestException as get_error:
                logger.warning(f"URL check failed: {url} - {get_error}")
                return UrlCheckResult(ok=False, error=str(get_error))

        result = UrlCheckResult(
            ok=response.ok,
            status=response.status_code,
            final_url=response.url if response.url and response.url != url else None,
        )
        logger.info(f"URL check {url} -> {result.status}{' (redirected)' if result.redirected else ''}")
        self._store(url, result)
        return result

    def clear_cache(self):
        with self._lock:
            self._cache.clear()

    def _request(self, method: str, url: str) -> requests.Response:
        response = self.session.request(
            method,
            url,
            allow_redirects=True,
            timeout=self.timeout,
            stream=(method == "GET"),
        )
        response.close()
        return response

    def _get_cached(self, url: str) -> Optional[UrlCheckResult]:
        with self._lock:
            entry = self._cache.get(url)
            if entry is None:
                return None
            stored_at, result = entry
            if time.monotonic() - stored_at > self.cache_ttl:
                del self._cache[url]
                return None
            return result

    def _store(self, url: str, result: UrlCheckResult):
        if self.cache_ttl <= 0:
            return
        now = time.monotonic()
        with self._lock:
            expired = [key for key, (stored_at, _) in self._cache.items() if now - stored_at > self.cache_ttl]
            for key in expired:
                del self._cache[key]
            self._cache[url] = (now, result)
