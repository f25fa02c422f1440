"""Downloading release assets and unpacking their binaries."""

from __future__ import annotations

import http.client
import tempfile
import urllib.request
from pathlib import Path

from flix.extract import unpack_tarball

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
_TIMEOUT = 60
_TARBALL_SUFFIXES = (".tar.gz", ".tgz")


def fetch_bytes(url: str) -> bytes | None:
    """Return the body at url, or None if the request fails."""
    request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urllib.request.urlopen(request, timeout=_TIMEOUT) as response:
            return response.read()
    except (OSError, ValueError, http.client.HTTPException):
        return None


def store_asset(
    data: bytes, url: str, package_name: str, temp_root: Path | str
) -> Path | None:
    """Place a downloaded asset's binary under temp_root and return its path.

    Tarballs are searched for the package's binary; anything else is stored
    as a standalone executable. Returns None when nothing usable was stored.
    """
    temp_dir = Path(temp_root) / package_name
    try:
        temp_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        pass
    target = temp_dir / package_name

    if url.endswith(_TARBALL_SUFFIXES):
        return target if unpack_tarball(data, package_name, target) else None

    try:
        target.write_bytes(data)
        target.chmod(0o755)
    except OSError:
        return None
    return target


def download_and_unpack(url: str, package_name: str) -> Path | None:
    """Download url and return the path of the extracted executable, or None."""
    print(f"📥 Fetching: {url.rsplit('/', 1)[-1]}")
    data = fetch_bytes(url)
    if data is None:
        return None
    temp_root = Path(tempfile.gettempdir()) / "flix_dl"
    return store_asset(data, url, package_name, temp_root)