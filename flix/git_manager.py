"""Cloning repositories and checking out requested revisions."""

from __future__ import annotations

import subprocess
from pathlib import Path


class GitError(Exception):
    """Raised when cloning or checking out a repository fails."""


def _git(*args: str) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            ["git", *args], capture_output=True, text=True, check=False
        )
    except OSError as exc:
        raise GitError(f"Git Error: {exc}") from exc


def fetch_and_checkout(url: str, dest: Path | str, git_ref: str | None = None) -> str:
    """Clone url into dest, optionally check out git_ref, and return the HEAD hash."""
    dest = str(dest)
    print("📦 Cloning repository...")
    clone = _git("clone", "--", url, dest)
    if clone.returncode != 0:
        detail = (clone.stderr or "").strip() or "clone failed"
        raise GitError(f"Git Error: {detail}")

    if git_ref is not None:
        print(f"⚓ Checking out version: {git_ref}...")
        resolved = _git(
            "-C", dest, "rev-parse", "--verify", "--quiet", f"{git_ref}^{{commit}}"
        )
        commit = (resolved.stdout or "").strip()
        if resolved.returncode != 0 or not commit:
            raise GitError(f"Git Ref '{git_ref}' not found.")
        _git("-C", dest, "checkout", "--quiet", "--detach", commit)

    head = _git("-C", dest, "rev-parse", "HEAD")
    commit_hash = (head.stdout or "").strip()
    if head.returncode != 0 or not commit_hash:
        raise GitError("Failed to get HEAD")
    return commit_hash