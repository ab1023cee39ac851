# -*- coding: utf-8 -*-
"""
Tests for the URL reachability checker.

Tests cover:
- Format checks before any request
- HEAD with GET fallback
- Redirect reporting
- Result caching
"""

from unittest import mock

import pytest
import requests

from services.translation_manager import tr
from services.url_check_service import UrlCheckResult, UrlCheckService


def _response(status, url):
    response = mock.Mock(spec=requests.Response)
    response.status_code = status
    response.ok = 200 <= status < 400
    response.url = url
    return response


@pytest.fixture
def session():
    """Mocked requests session."""
    session = mock.Mock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def checker(session):
    """Create checker over the mocked session."""
    return UrlCheckService(timeout=3, cache_ttl=60, session=session)


class TestFormat:
    """Test input checks."""

    def test_empty_url(self, checker, session):
        """Test empty input is rejected without a request."""
        result = checker.check("  ")
        assert not result.ok
        assert result.error == "URL parameter is required"
        session.request.assert_not_called()

    def test_malformed_url(self, checker, session):
        """Test malformed URLs are rejected without a request."""
        result = checker.check("acme dot io")
        assert not result.ok
        assert result.error == tr("validation.url.invalid_format")
        session.request.assert_not_called()


class TestRequests:
    """Test HTTP behaviour."""

    def test_reachable(self, checker, session):
        """Test a 200 HEAD response is ok."""
        session.request.return_value = _response(200, "https://acme.io")

        result = checker.check("https://acme.io")

        assert result == UrlCheckResult(ok=True, status=200)
        session.request.assert_called_once_with(
            "HEAD", "https://acme.io", allow_redirects=True, timeout=3, stream=False
        )

    def test_not_found(self, checker, session):
        """Test a 404 response is reported with its status."""
        session.request.return_value = _response(404, "https://acme.io/missing")

        result = checker.check("https://acme.io/missing")

        assert not result.ok
        assert result.status == 404
        assert result.message == tr("validation.url.unreachable", status=404)

    def test_redirect_reports_final_url(self, checker, session):
        """Test the final URL is reported after redirects."""
        session.request.return_value = _response(200, "https://www.acme.io/")

        result = checker.check("http://acme.io")

        assert result.ok
        assert result.redirected
        assert result.to_dict() == {"ok": True, "status": 200, "finalUrl": "https://www.acme.io/"}

    def test_get_fallback(self, checker, session):
        """Test a failing HEAD falls back to GET."""
        session.request.side_effect = [
            requests.exceptions.ConnectionError("HEAD not allowed"),
            _response(200, "https://acme.io"),
        ]

        result = checker.check("https://acme.io")

        assert result.ok
        assert [c.args[0] for c in session.request.call_args_list] == ["HEAD", "GET"]

    def test_network_failure(self, checker, session):
        """Test HEAD and GET failures give an unreachable result."""
        session.request.side_effect = requests.exceptions.Timeout("timed out")

        result = checker.check("https://acme.io")

        assert not result.ok
        assert result.status is None
        assert "timed out" in result.error
        assert result.message == tr("validation.url.check_failed")


class TestCache:
    """Test result caching."""

    def test_cached_result(self, checker, session):
        """Test a second check of the same URL does not hit the network."""
        session.request.return_value = _response(200, "https://acme.io")

        first = checker.check("https://acme.io")
        second = checker.check(" https://acme.io ")

        assert first == second
        assert session.request.call_count == 1

    def test_expired_entry(self, session):
        """Test expired entries are checked again."""
        session.request.return_value = _response(200, "https://acme.io")
        checker = UrlCheckService(timeout=3, cache_ttl=60, session=session)

        with mock.patch("services.url_check_service.time.monotonic", side_effect=[0.0, 61.0, 61.0]):
            checker.check("https://acme.io")
            checker.check("https://acme.io")

        assert session.request.call_count == 2

    def test_expired_entries_evicted_on_store(self, checker, session):
        """Test storing a result drops expired entries of other URLs."""
        session.request.return_value = _response(200, "https://acme.io")

        with mock.patch("services.url_check_service.time.monotonic") as monotonic:
            monotonic.return_value = 0.0
            checker.check("https://acme.io")
            monotonic.return_value = 30.0
            checker.check("https://beta.io")
            monotonic.return_value = 61.0
            checker.check("https://gamma.io")

        assert set(checker._cache) == {"https://beta.io", "https://gamma.io"}

    def test_failures_not_cached(self, checker, session):
        """Test network failures are retried on the next check."""
        session.request.side_effect = [
            requests.exceptions.ConnectionError("down"),
            requests.exceptions.ConnectionError("down"),
            _response(200, "https://acme.io"),
        ]

        assert not checker.check("https://acme.io").ok
        assert checker.check("https://acme.io").ok

    def test_clear_cache(self, checker, session):
        """Test clearing the cache forces a new request."""
        session.request.return_value = _response(200, "https://acme.io")

        checker.check("https://acme.io")
        checker.clear_cache()
        checker.check("https://acme.io")

        assert session.request.call_count == 2
