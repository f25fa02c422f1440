"""Release providers that locate pre-built binaries for a repository."""

from __future__ import annotations

import http.client
import re
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass

from flix.downloader import USER_AGENT
from flix.sysinfo import SystemInfo, get_search_terms, get_system_info

_TIMEOUT = 30
_SIGNATURE_SUFFIXES = (".sha256", ".asc", ".sig", ".sha256sum", ".sha1")
_SEPARATORS = re.compile(r"[\"'>]")


class Provider(ABC):
    """A hosting service that may publish pre-built release binaries."""

    name: str = ""

    @abstractmethod
    def supports(self, url: str) -> bool:
        """Whether this provider handles the given repository URL."""

    @abstractmethod
    def find_asset_url(self, repo_url: str, git_ref: str | None = None) -> str | None:
        """Find a download URL for a binary matching this host."""

    @abstractmethod
    def extract_tag(self, asset_url: str) -> str | None:
        """Extract the release tag from an asset URL."""

    @abstractmethod
    def get_latest_tag(self, repo_url: str) -> str | None:
        """Resolve the latest release tag of the repository."""


class GenericProvider(Provider):
    """Catch-all provider for unknown git hosts; it knows no releases."""

    name = "Generic Git"

    def supports(self, url: str) -> bool:
        return True

    def find_asset_url(self, repo_url: str, git_ref: str | None = None) -> str | None:
        return None

    def extract_tag(self, asset_url: str) -> str | None:
        return None

    def get_latest_tag(self, repo_url: str) -> str | None:
        return None


def _open(url: str):
    request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    return urllib.request.urlopen(request, timeout=_TIMEOUT)


def _fetch_page(url: str) -> tuple[str, str] | None:
    """Return (final URL after redirects, body text), or None on failure."""
    try:
        with _open(url) as response:
            final_url = response.geturl()
            text = response.read().decode("utf-8")
    except (OSError, ValueError, http.client.HTTPException):
        return None
    return final_url, text


def scan_html_for_link(html: str, terms: list[str], os_term: str) -> str | None:
    """Find a release download link in html matching the OS and architecture."""
    is_arm_host = any(t in ("aarch64", "arm64") for t in terms)
    is_x86_host = any(t in ("x86_64", "amd64") for t in terms)

    for part in _SEPARATORS.split(html):
        candidate = part.split("<", 1)[0].strip()
        if "/releases/download/" not in candidate:
            continue
        lower = candidate.lower()
        has_os = os_term in lower
        has_arch = any(t and t in lower for t in terms)

        if is_arm_host and any(m in lower for m in ("x86_64", "amd64", "x64")):
            continue
        if is_x86_host and any(m in lower for m in ("aarch64", "arm64", "arm")):
            continue

        if has_os and has_arch:
            if lower.endswith(_SIGNATURE_SUFFIXES):
                continue
            return candidate
    return None


def absolute_asset_url(repo_url: str, dl_path: str) -> str:
    """Turn a link found on a release page into an absolute URL."""
    if dl_path.startswith("http"):
        return dl_path
    domain = "/".join(repo_url.split("/")[:3])
    separator = "" if dl_path.startswith("/") else "/"
    return f"{domain}{separator}{dl_path}"


@dataclass
class GithubProvider(Provider):
    """Finds release binaries by scraping GitHub release pages."""

    info: SystemInfo | None = None
    name = "GitHub"

    def _host(self) -> SystemInfo:
        return self.info or get_system_info()

    def supports(self, url: str) -> bool:
        return "github.com" in url

    def find_asset_url(self, repo_url: str, git_ref: str | None = None) -> str | None:
        info = self._host()
        terms = get_search_terms(info)
        os_term = info.os.lower()

        if git_ref is not None:
            page_url = f"{repo_url}/releases/tag/{git_ref}"
        else:
            page_url = f"{repo_url}/releases/latest"
        page = _fetch_page(page_url.replace(".git", ""))
        if page is None:
            return None
        final_url, html = page

        link = scan_html_for_link(html, terms, os_term)
        if link is None:
            detected_tag = final_url.split("/")[-1]
            if detected_tag:
                expanded_url = (
                    f"{repo_url.replace('.git', '')}/releases/expanded_assets/{detected_tag}"
                )
                expanded = _fetch_page(expanded_url)
                if expanded is not None:
                    link = scan_html_for_link(expanded[1], terms, os_term)

        if link is None:
            return None
        return absolute_asset_url(repo_url, link)

    def extract_tag(self, asset_url: str) -> str | None:
        parts = asset_url.split("/releases/download/")
        if len(parts) > 1:
            return parts[1].split("/")[0]
        return None

    def get_latest_tag(self, repo_url: str) -> str | None:
        latest_url = f"{repo_url.replace('.git', '')}/releases/latest"
        try:
            with _open(latest_url) as response:
                final_url = response.geturl()
        except (OSError, ValueError, http.client.HTTPException):
            return None
        parts = final_url.split("/releases/tag/")
        if len(parts) > 1:
            return parts[1]
        return None


def get_provider(url: str) -> Provider:
    """Choose the provider that handles url."""
    github = GithubProvider()
    if github.supports(url):
        return github
    return GenericProvider()