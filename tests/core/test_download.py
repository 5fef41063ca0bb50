"""
Unit tests for download module.

Tests download functionality with mocked network requests.
"""

import pytest
import requests
import responses
from unittest.mock import call, patch

from ctagskit.core.download import (
    DownloadProgress,
    download_file,
    format_progress,
)
from ctagskit.core.exceptions import DownloadError, NetworkError

URL = "https://github.com/universal-ctags/ctags-nightly-build/releases/download/v6.1.0/uctags.tar.gz"
ASSET_URL = "https://objects.githubusercontent.com/release-asset/uctags.tar.gz"


class TestDownloadProgress:
    """Test DownloadProgress dataclass."""

    def test_progress_to_string(self):
        """Test progress string representation."""
        progress = DownloadProgress(
            bytes_downloaded=52428800,  # 50 MB
            total_bytes=104857600,  # 100 MB
            percentage=50.0,
            speed_bps=1048576,  # 1 MB/s
            eta_seconds=50,
        )

        result = str(progress)

        assert "50.0/100.0 MB" in result
        assert "50.0%" in result
        assert "1.0 MB/s" in result
        assert "ETA: 50s" in result


class TestFormatProgress:
    """Test format_progress function."""

    def test_format_with_unknown_size(self):
        """Test formatting progress with unknown total size."""
        progress = DownloadProgress(
            bytes_downloaded=10485760,  # 10 MB
            total_bytes=0,  # Unknown
            percentage=0.0,
            speed_bps=1048576,  # 1 MB/s
            eta_seconds=0,
        )

        result = format_progress(progress)

        assert "10.0 MB" in result
        assert "1.0 MB/s" in result
        assert "ETA" not in result  # No ETA for unknown size


class TestSingleAttempt:
    """Test behavior of one download attempt (no retries)."""

    @responses.activate
    def test_simple_download(self, tmp_path):
        """Test simple download writes the body to disk."""
        content = b"archive bytes"
        destination = tmp_path / "sub" / "ctags.tar.gz"
        responses.add(
            responses.GET,
            URL,
            body=content,
            status=200,
            headers={"content-length": str(len(content))},
        )

        result = download_file(URL, destination, max_retries=0)

        assert result == destination
        assert destination.read_bytes() == content

    @responses.activate
    def test_overwrites_existing_file(self, tmp_path):
        """Test a stale file at the destination is replaced, not appended to."""
        destination = tmp_path / "ctags.tar.gz"
        destination.write_bytes(b"stale partial content from an earlier attempt")
        responses.add(responses.GET, URL, body=b"fresh")

        download_file(URL, destination, max_retries=0)

        assert destination.read_bytes() == b"fresh"

    @responses.activate
    def test_follows_redirect_chain(self, tmp_path):
        """Test 302 -> 301 -> 200 is followed."""
        hop = "https://github.com/redirect-hop"
        responses.add(responses.GET, URL, status=302, headers={"Location": hop})
        responses.add(responses.GET, hop, status=301, headers={"Location": ASSET_URL})
        responses.add(responses.GET, ASSET_URL, body=b"payload")
        destination = tmp_path / "ctags.tar.gz"

        download_file(URL, destination, max_retries=0)

        assert destination.read_bytes() == b"payload"
        assert [c.request.url for c in responses.calls] == [URL, hop, ASSET_URL]

    @responses.activate
    def test_relative_redirect(self, tmp_path):
        """Test a relative Location is resolved against the current URL."""
        responses.add(
            responses.GET, URL, status=302, headers={"Location": "/assets/uctags.tar.gz"}
        )
        responses.add(
            responses.GET, "https://github.com/assets/uctags.tar.gz", body=b"payload"
        )
        destination = tmp_path / "ctags.tar.gz"

        download_file(URL, destination, max_retries=0)

        assert destination.read_bytes() == b"payload"

    @responses.activate
    def test_redirect_loop_detected(self, tmp_path):
        """Test a redirect cycle fails instead of looping forever."""
        other = "https://github.com/other"
        responses.add(responses.GET, URL, status=302, headers={"Location": other})
        responses.add(responses.GET, other, status=302, headers={"Location": URL})

        with pytest.raises(NetworkError, match="Redirect loop"):
            download_file(URL, tmp_path / "ctags.tar.gz", max_retries=0)

        assert len(responses.calls) == 2

    @responses.activate
    def test_redirect_limit(self, tmp_path):
        """Test the hop limit is enforced."""
        for i in range(4):
            responses.add(
                responses.GET,
                f"https://github.com/hop{i}" if i else URL,
                status=302,
                headers={"Location": f"https://github.com/hop{i + 1}"},
            )

        with pytest.raises(NetworkError, match="Too many redirects"):
            download_file(URL, tmp_path / "ctags.tar.gz", max_retries=0, max_redirects=2)

    @responses.activate
    def test_redirect_without_location(self, tmp_path):
        """Test a redirect with no target fails."""
        responses.add(responses.GET, URL, status=302)

        with pytest.raises(NetworkError, match="without Location"):
            download_file(URL, tmp_path / "ctags.tar.gz", max_retries=0)

    @responses.activate
    def test_error_status(self, tmp_path):
        """Test non-success status raises DownloadError and writes nothing."""
        responses.add(responses.GET, URL, status=404)
        destination = tmp_path / "ctags.tar.gz"

        with pytest.raises(DownloadError, match="status 404") as exc_info:
            download_file(URL, destination, max_retries=0)

        assert exc_info.value.status_code == 404
        assert not destination.exists()

    @responses.activate
    def test_timeout(self, tmp_path):
        """Test timeouts surface as NetworkError."""
        responses.add(
            responses.GET, URL, body=requests.exceptions.ReadTimeout("read timed out")
        )

        with pytest.raises(NetworkError, match="timeout"):
            download_file(URL, tmp_path / "ctags.tar.gz", max_retries=0)

    @responses.activate
    def test_progress_callback(self, tmp_path):
        """Test download reports progress."""
        content = b"x" * 100000
        responses.add(
            responses.GET,
            URL,
            body=content,
            headers={"content-length": str(len(content))},
        )
        updates = []

        download_file(
            URL, tmp_path / "ctags.tar.gz", max_retries=0, progress_callback=updates.append
        )

        assert len(updates) > 0
        assert updates[-1].bytes_downloaded == len(content)
        assert updates[-1].percentage == 100.0

    def test_empty_url(self, tmp_path):
        with pytest.raises(ValueError, match="URL cannot be empty"):
            download_file("", tmp_path / "file")

    def test_negative_retries(self, tmp_path):
        with pytest.raises(ValueError, match="max_retries"):
            download_file(URL, tmp_path / "file", max_retries=-1)


class TestRetries:
    """Test the retry and backoff policy."""

    @responses.activate
    @patch("ctagskit.core.download.time.sleep")
    def test_total_attempts_is_retries_plus_one(self, mock_sleep, tmp_path):
        """Test exactly retries + 1 attempts are made."""
        responses.add(responses.GET, URL, status=503)

        with pytest.raises(DownloadError):
            download_file(URL, tmp_path / "ctags.tar.gz", max_retries=3)

        assert len(responses.calls) == 4

    @responses.activate
    @patch("ctagskit.core.download.time.sleep")
    def test_linear_backoff(self, mock_sleep, tmp_path):
        """Test delays grow linearly with the attempt number."""
        responses.add(responses.GET, URL, status=500)

        with pytest.raises(DownloadError):
            download_file(URL, tmp_path / "ctags.tar.gz", max_retries=3, retry_delay=1.0)

        assert mock_sleep.call_args_list == [call(1.0), call(2.0), call(3.0)]

    @responses.activate
    @patch("ctagskit.core.download.time.sleep")
    def test_final_error_propagates_unwrapped(self, mock_sleep, tmp_path):
        """Test the last attempt's error is raised as is."""
        responses.add(responses.GET, URL, status=500)
        responses.add(responses.GET, URL, status=502)

        with pytest.raises(DownloadError) as exc_info:
            download_file(URL, tmp_path / "ctags.tar.gz", max_retries=1)

        assert exc_info.value.status_code == 502
        assert str(exc_info.value) == "Download failed with status 502"

    @responses.activate
    @patch("ctagskit.core.download.time.sleep")
    def test_succeeds_after_failures(self, mock_sleep, tmp_path):
        """Test two failures followed by success."""
        responses.add(responses.GET, URL, status=500)
        responses.add(
            responses.GET, URL, body=requests.exceptions.ConnectionError("reset")
        )
        responses.add(responses.GET, URL, body=b"payload")
        destination = tmp_path / "ctags.tar.gz"

        result = download_file(URL, destination, max_retries=3)

        assert result == destination
        assert destination.read_bytes() == b"payload"
        assert len(responses.calls) == 3
        assert mock_sleep.call_count == 2

    @responses.activate
    @patch("ctagskit.core.download.time.sleep")
    def test_no_retries(self, mock_sleep, tmp_path):
        """Test max_retries=0 makes a single attempt."""
        responses.add(responses.GET, URL, status=500)

        with pytest.raises(DownloadError):
            download_file(URL, tmp_path / "ctags.tar.gz", max_retries=0)

        assert len(responses.calls) == 1
        mock_sleep.assert_not_called()
