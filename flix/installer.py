"""Installing packages from release binaries or from source."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path

from flix import builder, git_manager
from flix.config import DEFAULT_BIN_DIR, FlixConfig, PackageEntry, load_config, save_config
from flix.downloader import download_and_unpack
from flix.flags import SharedArgs
from flix.providers import get_provider
from flix.system import copy_with_sudo, ensure_dir_exists

_URL_PREFIXES = ("http://", "https://", "git://", "git@")


class InstallError(Exception):
    """Raised when a package cannot be installed."""

    def __init__(self, message: str, hints: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.hints = hints


def is_repository_url(url: str) -> bool:
    """Whether url looks like a clonable repository URL."""
    return url.startswith(_URL_PREFIXES)


def _strip_git_suffix(url: str) -> str:
    while url.endswith(".git"):
        url = url[: -len(".git")]
    return url


def package_name_from_url(url: str) -> str:
    """Derive a package name from the last path segment of a repository URL."""
    return _strip_git_suffix(url).rsplit("/", 1)[-1]


def merge_tags(existing: list[str] | None, new_tags: list[str], url: str) -> list[str]:
    """Combine existing tags with new ones, adding 'github' for GitHub sources."""
    if existing is None:
        tags = list(new_tags)
    else:
        tags = list(existing)
        for tag in new_tags:
            if tag not in tags:
                tags.append(tag)
    if "github.com" in url and "github" not in tags:
        tags.append("github")
    return tags


def finalize_install(
    config: FlixConfig,
    name: str,
    url: str,
    src_file: Path | str,
    shared: SharedArgs,
    version_hash: str,
    tag: str | None,
) -> None:
    """Copy the binary into the bin directory and record the package."""
    if shared.path is not None:
        bin_dir = Path(shared.path)
    else:
        bin_dir = Path(config.default_install_path or DEFAULT_BIN_DIR)

    ensure_dir_exists(bin_dir)
    final_dest = bin_dir / name
    copy_with_sudo(src_file, final_dest)

    existing = config.packages.get(name)
    tags = merge_tags(existing.tags if existing else None, shared.tags, url)

    config.packages[name] = PackageEntry(
        source=url,
        tags=tags,
        version_hash=version_hash,
        version_tag=tag,
        bin_path=final_dest,
    )
    save_config(config)
    print(f"✅ Installed '{name}'!")


def _install_release(
    config: FlixConfig,
    url: str,
    url_clean: str,
    package_name: str,
    shared: SharedArgs,
    git_ref: str | None,
) -> tuple[bool, str | None]:
    """Try a pre-built binary; return (installed, git ref for a source build)."""
    provider = get_provider(url_clean)
    print(f"🔍 Searching for pre-built binary for '{package_name}' via {provider.name}...")

    dl_url = provider.find_asset_url(url_clean, git_ref)
    if dl_url is not None:
        bin_path = download_and_unpack(dl_url, package_name)
        if bin_path is not None:
            version_tag = provider.extract_tag(dl_url) or "RELEASE"
            finalize_install(config, package_name, url, bin_path, shared, version_tag, git_ref)
            return True, git_ref

    print("⚠️ No matching binary found. Falling back to source build...")
    if git_ref is None:
        print("🏷️ Resolving latest release tag...")
        latest = provider.get_latest_tag(url_clean)
        if latest is not None:
            print(f"📌 Found latest release: {latest}")
            git_ref = latest
        else:
            print("⚠️ Could not resolve latest release tag, falling back to default branch.")
    return False, git_ref


def install(
    url: str,
    shared: SharedArgs,
    use_release: bool = False,
    is_default: bool = False,
    git_ref: str | None = None,
) -> None:
    """Install a package from a repository URL.

    Raises InstallError when the URL is invalid, the package is already
    installed without force, or cloning or building fails.
    """
    if not is_repository_url(url):
        raise InstallError(
            f"'{url}' does not look like a valid repository URL.",
            hints=(
                "💡 Tip: If you are trying to update an existing package, "
                f"run: flix update {url}",
                "💡 Tip: If you are trying to install a new package, provide the "
                "full URL (e.g., https://github.com/user/repo)",
            ),
        )

    config = load_config()
    url_clean = _strip_git_suffix(url)
    package_name = package_name_from_url(url)

    if package_name in config.packages and not shared.force:
        raise InstallError(
            f"Package '{package_name}' already installed. Use -f to overwrite."
        )

    if use_release:
        installed, git_ref = _install_release(
            config, url, url_clean, package_name, shared, git_ref
        )
        if installed:
            return

    print(f"🚀 Building '{package_name}' from source...")
    temp_dir = Path(tempfile.gettempdir()) / "flix_builds" / package_name
    if temp_dir.exists():
        shutil.rmtree(temp_dir, ignore_errors=True)

    try:
        commit_hash = git_manager.fetch_and_checkout(url, temp_dir, git_ref)
    except git_manager.GitError as exc:
        raise InstallError(str(exc)) from exc

    bin_file = builder.detect_and_build(temp_dir, package_name, shared.quiet)
    if bin_file is None:
        raise InstallError("Build failed or binary could not be located.")
    finalize_install(config, package_name, url, bin_file, shared, commit_hash[:8], git_ref)