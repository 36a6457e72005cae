"""Tests for the download cache, HTTP download helper and application cache."""

from unittest.mock import Mock, patch

import pytest
import requests

from constants import Constants
from common.errors import DownloadError
from common.http_client import robust_download
from util.application_cache import ApplicationCache, DownloadCache

URI = "https://repo.example.com/tomcat/tomcat-7.0.42.tar.gz"


def response(status_code, body=b"", headers=None):
    """Build a streamed requests response double."""
    res = Mock()
    res.status_code = status_code
    res.headers = headers or {}
    res.iter_content = Mock(return_value=[body])
    return res


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("common.http_client.time.sleep", lambda _seconds: None)


class TestRobustDownload:
    """Streaming download with retries."""

    @patch("common.http_client.requests.get")
    def test_success_writes_destination(self, mock_get, tmp_path):
        mock_get.return_value = response(200, b"payload", {"ETag": '"v1"'})
        destination = tmp_path / "out" / "file"

        status, headers, error = robust_download(URI, destination, headers={"If-None-Match": '"v0"'})

        assert (status, error) == (200, None)
        assert headers["ETag"] == '"v1"'
        assert destination.read_bytes() == b"payload"
        sent_headers = mock_get.call_args.kwargs["headers"]
        assert sent_headers["If-None-Match"] == '"v0"'
        assert sent_headers["User-Agent"] == Constants.USER_AGENT
        assert mock_get.call_args.kwargs["stream"] is True

    @patch("common.http_client.requests.get")
    def test_not_modified_leaves_destination_alone(self, mock_get, tmp_path):
        destination = tmp_path / "file"
        destination.write_bytes(b"old")
        mock_get.return_value = response(304)

        status, _, _ = robust_download(URI, destination)

        assert status == 304
        assert destination.read_bytes() == b"old"

    @patch("common.http_client.requests.get")
    def test_server_errors_are_retried(self, mock_get, tmp_path):
        mock_get.side_effect = [response(503), response(200, b"ok")]

        status, _, _ = robust_download(URI, tmp_path / "file")

        assert status == 200
        assert mock_get.call_count == 2

    @patch("common.http_client.requests.get")
    def test_transport_failures_exhaust_retries(self, mock_get, tmp_path):
        mock_get.side_effect = requests.ConnectionError("connection refused")

        status, headers, error = robust_download(URI, tmp_path / "file")

        assert status == 0
        assert headers == {}
        assert "connection refused" in error
        assert mock_get.call_count == Constants.HTTP_RETRY_MAX
        assert not (tmp_path / "file").exists()

    @patch("common.http_client.requests.get")
    def test_timeouts_are_reported(self, mock_get, tmp_path):
        mock_get.side_effect = requests.Timeout()

        status, _, error = robust_download(URI, tmp_path / "file")

        assert status == 0
        assert "timeout" in error

    def test_file_uri(self, tmp_path):
        source = tmp_path / "source.tar.gz"
        source.write_bytes(b"local")

        status, _, error = robust_download(source.as_uri(), tmp_path / "copy")

        assert (status, error) == (200, None)
        assert (tmp_path / "copy").read_bytes() == b"local"

    def test_missing_file_uri(self, tmp_path):
        status, _, error = robust_download((tmp_path / "absent").as_uri(), tmp_path / "copy")
        assert status == 404
        assert "does not exist" in error


class TestDownloadCache:
    """Revalidation and offline behavior of the on-disk cache."""

    @patch("common.http_client.requests.get")
    def test_first_download_stores_validators(self, mock_get, tmp_path):
        mock_get.return_value = response(
            200, b"tomcat", {"ETag": '"abc"', "Last-Modified": "Wed, 01 May 2013 00:00:00 GMT"}
        )
        cache = DownloadCache(tmp_path)

        path = cache.get(URI, "Tomcat", "7.0.42")

        assert path.read_bytes() == b"tomcat"
        assert path.with_suffix(".etag").read_text(encoding="utf-8") == '"abc"'
        assert path.with_suffix(".last_modified").read_text(encoding="utf-8").startswith("Wed")

    @patch("common.http_client.requests.get")
    def test_not_modified_serves_cached_copy(self, mock_get, tmp_path):
        mock_get.return_value = response(200, b"tomcat", {"ETag": '"abc"'})
        cache = DownloadCache(tmp_path)
        first = cache.get(URI, "Tomcat", "7.0.42")

        mock_get.return_value = response(304)
        second = cache.get(URI, "Tomcat", "7.0.42")

        assert second == first
        assert second.read_bytes() == b"tomcat"
        assert mock_get.call_args.kwargs["headers"]["If-None-Match"] == '"abc"'

    @patch("common.http_client.requests.get")
    def test_network_failure_with_cached_copy(self, mock_get, tmp_path, caplog):
        mock_get.return_value = response(200, b"tomcat")
        cache = DownloadCache(tmp_path)
        cache.get(URI, "Tomcat", "7.0.42")

        mock_get.side_effect = requests.ConnectionError("offline")
        with caplog.at_level("WARNING"):
            path = cache.get(URI, "Tomcat", "7.0.42")

        assert path.read_bytes() == b"tomcat"
        assert "using cached copy" in caplog.text

    @patch("common.http_client.requests.get")
    def test_network_failure_without_cached_copy(self, mock_get, tmp_path):
        mock_get.side_effect = requests.ConnectionError("offline")

        with pytest.raises(DownloadError) as excinfo:
            DownloadCache(tmp_path).get(URI, "Tomcat", "7.0.42")

        assert excinfo.value.name == "Tomcat"
        assert excinfo.value.version == "7.0.42"
        assert "Tomcat 7.0.42" in str(excinfo.value)
        assert "offline" in str(excinfo.value)

    @patch("common.http_client.requests.get")
    def test_not_found(self, mock_get, tmp_path):
        mock_get.return_value = response(404)
        with pytest.raises(DownloadError, match="HTTP 404"):
            DownloadCache(tmp_path).get(URI, "Tomcat", "7.0.42")

    @patch("common.http_client.requests.get")
    def test_distinct_uris_do_not_collide(self, mock_get, tmp_path):
        mock_get.side_effect = [response(200, b"one"), response(200, b"two")]
        cache = DownloadCache(tmp_path)

        first = cache.get(URI, "Tomcat")
        second = cache.get(URI + ".sha1", "Tomcat")

        assert first != second
        assert first.read_bytes() == b"one"


class TestApplicationCache:
    """Logged downloads and JAR placement."""

    def test_download_logs_duration(self, tmp_path, caplog):
        source = tmp_path / "tomcat.tar.gz"
        source.write_bytes(b"archive")
        cache = ApplicationCache(tmp_path / "cache")

        with caplog.at_level("INFO"):
            path = cache.download("Tomcat", "7.0.42", source.as_uri())

        assert path.read_bytes() == b"archive"
        assert "Downloading Tomcat 7.0.42 from" in caplog.text

    def test_download_jar(self, tmp_path):
        source = tmp_path / "support.jar"
        source.write_bytes(b"jar")
        cache = ApplicationCache(tmp_path / "cache")

        target = cache.download_jar(
            "1.0.0", source.as_uri(), "Buildpack Tomcat Support",
            "tomcat-buildpack-support-1.0.0.jar", tmp_path / "tomcat" / "lib",
        )

        assert target == tmp_path / "tomcat" / "lib" / "tomcat-buildpack-support-1.0.0.jar"
        assert target.read_bytes() == b"jar"

    def test_cache_root_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv(Constants.ENV_CACHE_DIR, str(tmp_path / "env-cache"))
        assert ApplicationCache().download_cache.cache_root == tmp_path / "env-cache"
