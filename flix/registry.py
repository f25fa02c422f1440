"""Listing, removing, tagging and updating installed packages."""

from __future__ import annotations

import dataclasses
import json
import subprocess
import sys
from typing import NamedTuple

from flix.config import FlixConfig, load_config, save_config
from flix.flags import SharedArgs
from flix.installer import InstallError, install


class PackageNotInstalledError(LookupError):
    """Raised when an operation names a package that is not installed."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Package '{name}' is not installed.")
        self.name = name


class TagChanges(NamedTuple):
    """Result of applying tag additions and removals."""

    tags: list[str]
    added: list[str]
    removed: list[str]


def _format_tags(tags: list[str]) -> str:
    return "[" + ", ".join(json.dumps(tag, ensure_ascii=False) for tag in tags) + "]"


def format_listing(config: FlixConfig, shared: SharedArgs) -> str:
    """Render the installed packages as a table, filtered by tags and path."""
    lines = [f"{'Package':<20} {'Version':<15} {'Tags':<20}", "-" * 55]
    for name, entry in sorted(config.packages.items()):
        if shared.tags and not any(tag in entry.tags for tag in shared.tags):
            continue
        if shared.path is not None and str(entry.bin_path.parent) != shared.path:
            continue
        version = entry.version_tag if entry.version_tag is not None else entry.version_hash
        lines.append(f"{name:<20} {version:<15} {_format_tags(entry.tags)}")
    return "\n".join(lines)


def list_packages(shared: SharedArgs) -> None:
    """Print the table of installed packages."""
    print(format_listing(load_config(), shared))


def _confirm(prompt: str) -> bool:
    try:
        answer = input(prompt)
    except EOFError:
        answer = ""
    return answer.strip().lower() == "y"


def remove(name: str, shared: SharedArgs) -> bool:
    """Remove an installed package and its binary; return True if it was removed."""
    config = load_config()

    if not shared.yes and not _confirm(f"Are you sure you want to remove '{name}'? [y/N]: "):
        print("❌ Aborted.")
        return False

    entry = config.packages.pop(name, None)
    if entry is None:
        print(f"⚠️ Package '{name}' not found.")
        return False

    if entry.bin_path.exists():
        try:
            subprocess.run(["sudo", "rm", str(entry.bin_path)], check=False)
        except OSError:
            pass
    save_config(config)
    print(f"✅ Removed '{name}'.")
    return True


def apply_tag_changes(tags: list[str], add: list[str], remove: list[str]) -> TagChanges:
    """Apply removals then additions to a tag list, reporting what changed."""
    result = list(tags)
    added: list[str] = []
    removed: list[str] = []
    for tag in remove:
        if tag in result:
            result.remove(tag)
            removed.append(tag)
    for tag in add:
        if tag not in result:
            result.append(tag)
            added.append(tag)
    return TagChanges(result, added, removed)


def manage_tags(name: str, add: list[str], remove: list[str]) -> tuple[list[str], list[str]]:
    """Add and remove tags of an installed package; return (added, removed)."""
    config = load_config()
    entry = config.packages.get(name)
    if entry is None:
        raise PackageNotInstalledError(name)

    changes = apply_tag_changes(entry.tags, add, remove)
    if changes.added or changes.removed:
        entry.tags = changes.tags
        save_config(config)
    return changes.added, changes.removed


def update(name: str | None, shared: SharedArgs, release: bool = False) -> None:
    """Reinstall one or all packages when forced."""
    config = load_config()

    if name is not None:
        entry = config.packages.get(name)
        if entry is None:
            print(f"⚠️ Package '{name}' not found.")
            return
        targets = [(name, entry)]
    else:
        if not config.packages:
            print("📋 No packages installed to update.")
            return
        targets = sorted(config.packages.items())

    for pkg_name, entry in targets:
        if not shared.force:
            print(f"✅ '{pkg_name}' is already up to date. Use -f to force a fresh install.")
            continue
        print(f"🔄 Force updating '{pkg_name}'...")
        try:
            install(
                entry.source,
                dataclasses.replace(shared, tags=list(shared.tags)),
                release,
                False,
                entry.version_tag,
            )
        except InstallError as exc:
            print(f"❌ Error: {exc}", file=sys.stderr)
            for hint in exc.hints:
                print(hint)