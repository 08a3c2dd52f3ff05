"""
npm registry probe with mocked HTTP: time-map parsing, caching, filters, rate-limit retry.
"""

from __future__ import annotations

from datetime import timezone
from unittest.mock import MagicMock, patch

import pytest
import requests

from prebuild_scheduler.core.errors import RegistryError
from prebuild_scheduler.providers.npm import NpmRegistry
from prebuild_scheduler.providers.resilience import RetryConfig

# Keys deliberately out of publish order; order must come from the timestamps.
_TIME_MAP = {
    "created": "2024-01-01T00:00:00.000Z",
    "modified": "2025-06-01T00:00:00.000Z",
    "1.1.0": "2025-03-01T10:00:00.000Z",
    "1.0.0": "2025-01-01T10:00:00.000Z",
    "1.2.0-rc.1": "2025-04-01T10:00:00.000Z",
    "1.2.0": "2025-05-01T10:00:00.000Z",
    "0.9.0": "2024-06-01T10:00:00.000Z",
}

_DOWNLOADS = {"1.0.0": 50_000, "1.1.0": 5_000, "1.2.0": 200_000, "0.9.0": 20_000}


def _resp(status_code=200, payload=None, headers=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = "OK" if status_code < 400 else "Error"
    resp.json.return_value = payload if payload is not None else {}
    resp.headers = headers or {}
    return resp


def _router(metadata_resp, downloads_resp):
    def fake_get(url, **kwargs):
        if "/last-week" in url:
            return downloads_resp
        return metadata_resp

    return fake_get


@pytest.fixture
def registry():
    return NpmRegistry(retry_config=RetryConfig(max_attempts=3, base_delay_s=0.0))


class TestFetchVersions:
    @patch("prebuild_scheduler.providers.npm.requests.get")
    def test_skips_non_semver_keys(self, mock_get, registry):
        mock_get.side_effect = _router(_resp(payload={"time": _TIME_MAP}), _resp(payload={"downloads": _DOWNLOADS}))
        versions = {v.version for v in registry.fetch_versions("lib")}
        assert versions == {"0.9.0", "1.0.0", "1.1.0", "1.2.0-rc.1", "1.2.0"}

    @patch("prebuild_scheduler.providers.npm.requests.get")
    def test_attaches_downloads_and_utc_dates(self, mock_get, registry):
        mock_get.side_effect = _router(_resp(payload={"time": _TIME_MAP}), _resp(payload={"downloads": _DOWNLOADS}))
        by_version = {v.version: v for v in registry.fetch_versions("lib")}
        assert by_version["1.0.0"].downloads_last_week == 50_000
        assert by_version["1.2.0-rc.1"].downloads_last_week is None
        assert by_version["1.0.0"].publish_date.tzinfo == timezone.utc

    @patch("prebuild_scheduler.providers.npm.requests.get")
    def test_results_are_cached(self, mock_get, registry):
        mock_get.side_effect = _router(_resp(payload={"time": _TIME_MAP}), _resp(payload={"downloads": _DOWNLOADS}))
        registry.fetch_versions("lib")
        registry.fetch_versions("lib")
        metadata_calls = [c for c in mock_get.call_args_list if "/last-week" not in c.args[0]]
        assert len(metadata_calls) == 1

    @patch("prebuild_scheduler.providers.npm.requests.get")
    def test_non_2xx_raises_registry_error(self, mock_get, registry):
        mock_get.return_value = _resp(status_code=404)
        with pytest.raises(RegistryError) as exc_info:
            registry.fetch_versions("does-not-exist")
        assert exc_info.value.status_code == 404
        assert exc_info.value.package_name == "does-not-exist"

    @patch("prebuild_scheduler.providers.npm.requests.get")
    def test_transport_error_raises_registry_error(self, mock_get, registry):
        mock_get.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(RegistryError, match="connection refused"):
            registry.fetch_versions("lib")

    @patch("prebuild_scheduler.providers.npm.requests.get")
    def test_scoped_package_downloads_url_is_encoded(self, mock_get, registry):
        mock_get.side_effect = _router(_resp(payload={"time": {"1.0.0": "2025-01-01T00:00:00Z"}}), _resp(payload={}))
        registry.fetch_versions("@scope/pkg")
        urls = [c.args[0] for c in mock_get.call_args_list]
        assert "https://registry.npmjs.org/@scope/pkg" in urls
        assert "https://api.npmjs.org/versions/%40scope%2Fpkg/last-week" in urls


class TestDownloads:
    @patch("prebuild_scheduler.providers.npm.requests.get")
    def test_failure_yields_empty_map(self, mock_get, registry):
        mock_get.return_value = _resp(status_code=500)
        assert registry.fetch_downloads_last_week("lib") == {}

    @patch("prebuild_scheduler.providers.resilience.time.sleep")
    @patch("prebuild_scheduler.providers.npm.requests.get")
    def test_rate_limit_retried_with_retry_after(self, mock_get, mock_sleep):
        mock_get.side_effect = [
            _resp(status_code=429, headers={"retry-after": "2"}),
            _resp(payload={"downloads": {"1.0.0": 7}}),
        ]
        registry = NpmRegistry()
        assert registry.fetch_downloads_last_week("lib") == {"1.0.0": 7}
        assert mock_get.call_count == 2
        mock_sleep.assert_called_once_with(2.0)

    @patch("prebuild_scheduler.providers.resilience.time.sleep")
    @patch("prebuild_scheduler.providers.npm.requests.get")
    def test_rate_limit_gives_up_after_max_attempts(self, mock_get, mock_sleep):
        mock_get.return_value = _resp(status_code=429)
        registry = NpmRegistry(retry_config=RetryConfig(max_attempts=3, base_delay_s=1.0))
        assert registry.fetch_downloads_last_week("lib") == {}
        assert mock_get.call_count == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0, 2.0]


class TestFindMatchingVersions:
    @patch("prebuild_scheduler.providers.npm.requests.get")
    def test_no_matcher_no_network(self, mock_get, registry):
        assert registry.find_matching_versions("lib", None) == []
        mock_get.assert_not_called()

    @patch("prebuild_scheduler.providers.npm.requests.get")
    def test_filters_and_sorts_by_publish_date(self, mock_get, registry):
        mock_get.side_effect = _router(_resp(payload={"time": _TIME_MAP}), _resp(payload={"downloads": _DOWNLOADS}))
        found = registry.find_matching_versions("lib", "*", weekly_downloads_threshold=10_000)
        assert [v.version for v in found] == ["0.9.0", "1.0.0", "1.2.0"]

    @patch("prebuild_scheduler.providers.npm.requests.get")
    def test_published_after_is_inclusive(self, mock_get, registry):
        mock_get.side_effect = _router(_resp(payload={"time": _TIME_MAP}), _resp(payload={"downloads": _DOWNLOADS}))
        found = registry.find_matching_versions("lib", ">=1.0.0", published_after="2025-03-01")
        assert [v.version for v in found] == ["1.1.0", "1.2.0"]

    @patch("prebuild_scheduler.providers.npm.requests.get")
    def test_malformed_published_after_is_ignored(self, mock_get, registry):
        mock_get.side_effect = _router(_resp(payload={"time": _TIME_MAP}), _resp(payload={"downloads": _DOWNLOADS}))
        found = registry.find_matching_versions("lib", "1.*", published_after="March 2025")
        assert [v.version for v in found] == ["1.0.0", "1.1.0", "1.2.0"]
