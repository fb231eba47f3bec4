"""
Release resolution and download.

Asks the GitHub releases API for the latest node_exporter release,
picks the asset whose name contains ``<platform>.tar.gz`` and
downloads it. Every HTTP request has a timeout and is retried with a
linear backoff; the last error is reported if all attempts fail.
"""

from __future__ import annotations

import http.client
import json
import logging
import time
import urllib.request
from collections.abc import Callable
from pathlib import Path

from node_exporter_installer import __version__
from node_exporter_installer.core.errors import ReleaseError
from node_exporter_installer.core.models.config import ReleaseAsset

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, int], bytes]

_API_URL = "https://api.github.com/repos/{repo}/releases/latest"
_BACKOFF_SECONDS = 2.0


def _http_get(url: str, timeout: int) -> bytes:
    req = urllib.request.Request(
        url,
        headers={
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": f"node-exporter-installer/{__version__}",
        },
    )
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        return resp.read()


def _fetch_with_retries(fetch: Fetcher, url: str, timeout: int, retries: int) -> bytes:
    last_error: Exception | None = None
    for attempt in range(1, retries + 1):
        try:
            return fetch(url, timeout)
        except (OSError, http.client.HTTPException, ValueError) as exc:
            last_error = exc
            logger.warning("GET %s failed (attempt %d/%d): %s", url, attempt, retries, exc)
            if attempt < retries:
                time.sleep(_BACKOFF_SECONDS * attempt)
    raise ReleaseError(f"Request to {url} failed after {retries} attempt(s): {last_error}")


def select_asset(release: dict, platform_tag: str) -> ReleaseAsset | None:
    """First asset of ``release`` built for ``platform_tag``."""
    wanted = f"{platform_tag}.tar.gz"
    for asset in release.get("assets", []):
        name = asset.get("name", "")
        if wanted in name and asset.get("browser_download_url"):
            return ReleaseAsset(
                name=name,
                url=asset["browser_download_url"],
                version=release.get("tag_name", "").lstrip("v"),
                size_bytes=asset.get("size", 0),
            )
    return None


def resolve_latest_asset(
    platform_tag: str,
    *,
    repo: str,
    timeout: int = 30,
    retries: int = 3,
    fetch: Fetcher | None = None,
) -> ReleaseAsset:
    """Resolve the download URL of the latest release for ``platform_tag``.

    Raises:
        ReleaseError: The API could not be reached, returned something
            unexpected, or has no asset for this platform.
    """
    url = _API_URL.format(repo=repo)
    raw = _fetch_with_retries(fetch or _http_get, url, timeout, retries)

    try:
        release = json.loads(raw)
    except ValueError as exc:
        raise ReleaseError(f"Invalid release metadata from {url}: {exc}") from exc
    if not isinstance(release, dict):
        raise ReleaseError(f"Unexpected release metadata from {url}")

    asset = select_asset(release, platform_tag)
    if asset is None:
        raise ReleaseError(
            f"Could not find a release asset for platform '{platform_tag}' "
            f"in {repo} {release.get('tag_name', '')}".rstrip()
        )
    logger.info("Latest release %s: %s", asset.version, asset.url)
    return asset


def download_asset(
    asset: ReleaseAsset,
    dest_dir: Path,
    *,
    timeout: int = 30,
    retries: int = 3,
    fetch: Fetcher | None = None,
) -> Path:
    """Download ``asset`` into ``dest_dir`` and return the file path."""
    data = _fetch_with_retries(fetch or _http_get, asset.url, timeout, retries)
    if asset.size_bytes and len(data) != asset.size_bytes:
        raise ReleaseError(
            f"Downloaded {len(data)} bytes for {asset.name}, expected {asset.size_bytes}"
        )
    target = dest_dir / asset.name
    try:
        target.write_bytes(data)
    except OSError as exc:
        raise ReleaseError(f"Could not save {asset.name} to {dest_dir}: {exc}") from exc
    logger.debug("Downloaded %s (%d bytes)", target, len(data))
    return target


def extracted_binary(archive: Path, binary_name: str = "node_exporter") -> Path:
    """Where ``tar -xzf`` leaves the binary of a release archive."""
    stem = archive.name.removesuffix(".tar.gz")
    return archive.parent / stem / binary_name
