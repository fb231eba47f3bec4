"""
Tests for release resolution and download.
"""

import http.client
import json

import pytest

from node_exporter_installer.core.errors import ReleaseError
from node_exporter_installer.core.models.config import ReleaseAsset
from node_exporter_installer.core.services import release
from tests.simulated_host import (
    ARCHIVE_BYTES,
    ARCHIVE_NAME,
    ARCHIVE_URL,
    SimulatedHost,
    release_metadata,
)

REPO = "prometheus/node_exporter"


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(release.time, "sleep", lambda seconds: None)


class TestSelectAsset:
    def test_picks_platform_archive(self):
        asset = release.select_asset(release_metadata(), "linux-amd64")
        assert asset == ReleaseAsset(
            name=ARCHIVE_NAME, url=ARCHIVE_URL, version="1.8.2", size_bytes=len(ARCHIVE_BYTES),
        )

    def test_no_match(self):
        assert release.select_asset(release_metadata(include_linux=False), "linux-amd64") is None

    def test_no_assets(self):
        assert release.select_asset({"tag_name": "v1.0.0"}, "linux-amd64") is None


class TestResolveLatest:
    def test_resolves(self):
        sim = SimulatedHost()
        asset = release.resolve_latest_asset("linux-amd64", repo=REPO, fetch=sim.fetch)
        assert asset.url == ARCHIVE_URL

    def test_missing_platform_asset(self):
        sim = SimulatedHost(release=release_metadata(include_linux=False))
        with pytest.raises(ReleaseError, match="Could not find a release asset for platform 'linux-amd64'"):
            release.resolve_latest_asset("linux-amd64", repo=REPO, fetch=sim.fetch)

    def test_invalid_json(self):
        with pytest.raises(ReleaseError, match="Invalid release metadata"):
            release.resolve_latest_asset("linux-amd64", repo=REPO, fetch=lambda url, timeout: b"<html>")

    def test_non_mapping(self):
        with pytest.raises(ReleaseError, match="Unexpected release metadata"):
            release.resolve_latest_asset("linux-amd64", repo=REPO, fetch=lambda url, timeout: b"[]")

    def test_retries_then_succeeds(self):
        calls = []

        def flaky(url, timeout):
            calls.append(timeout)
            if len(calls) < 3:
                raise TimeoutError("timed out")
            return json.dumps(release_metadata()).encode()

        asset = release.resolve_latest_asset("linux-amd64", repo=REPO, timeout=7, retries=3, fetch=flaky)
        assert asset.name == ARCHIVE_NAME
        assert calls == [7, 7, 7]

    def test_gives_up_after_retries(self):
        calls = []

        def down(url, timeout):
            calls.append(url)
            raise OSError("connection refused")

        with pytest.raises(ReleaseError, match="failed after 2 attempt"):
            release.resolve_latest_asset("linux-amd64", repo=REPO, retries=2, fetch=down)
        assert len(calls) == 2

    def test_truncated_response_is_retried_then_reported(self):
        calls = []

        def truncated(url, timeout):
            calls.append(url)
            raise http.client.IncompleteRead(b"partial", 4096)

        with pytest.raises(ReleaseError, match="failed after 3 attempt"):
            release.resolve_latest_asset("linux-amd64", repo=REPO, retries=3, fetch=truncated)
        assert len(calls) == 3


class TestDownload:
    def test_writes_archive(self, tmp_path):
        sim = SimulatedHost()
        asset = release.select_asset(release_metadata(), "linux-amd64")
        path = release.download_asset(asset, tmp_path, fetch=sim.fetch)
        assert path == tmp_path / ARCHIVE_NAME
        assert path.read_bytes() == ARCHIVE_BYTES

    def test_size_mismatch(self, tmp_path):
        asset = ReleaseAsset(name=ARCHIVE_NAME, url=ARCHIVE_URL, size_bytes=999)
        with pytest.raises(ReleaseError, match="expected 999"):
            release.download_asset(asset, tmp_path, fetch=lambda url, timeout: b"short")

    def test_truncated_download(self, tmp_path):
        asset = release.select_asset(release_metadata(), "linux-amd64")

        def truncated(url, timeout):
            raise http.client.IncompleteRead(b"partial", len(ARCHIVE_BYTES))

        with pytest.raises(ReleaseError, match="failed after 1 attempt"):
            release.download_asset(asset, tmp_path, retries=1, fetch=truncated)
        assert not (tmp_path / ARCHIVE_NAME).exists()

    def test_unwritable_destination(self, tmp_path):
        sim = SimulatedHost()
        asset = release.select_asset(release_metadata(), "linux-amd64")
        with pytest.raises(ReleaseError, match=f"Could not save {ARCHIVE_NAME}"):
            release.download_asset(asset, tmp_path / "missing", fetch=sim.fetch)

    def test_extracted_binary_location(self, tmp_path):
        archive = tmp_path / ARCHIVE_NAME
        assert release.extracted_binary(archive) == (
            tmp_path / "node_exporter-1.8.2.linux-amd64" / "node_exporter"
        )
