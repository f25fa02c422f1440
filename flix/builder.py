"""Building cloned projects from source."""

from __future__ import annotations

import subprocess
from pathlib import Path


def find_release_binary(path: Path | str, name: str) -> Path | None:
    """Locate the built binary under target/release."""
    release_dir = Path(path) / "target" / "release"
    exact = release_dir / name
    if exact.exists():
        return exact
    try:
        candidates = sorted(release_dir.iterdir())
    except OSError:
        return None
    return next(
        (p for p in candidates if p.is_file() and p.suffix != ".d"),
        None,
    )


def detect_and_build(path: Path | str, name: str, quiet: bool) -> Path | None:
    """Build a Cargo project in path and return its binary, or None on failure."""
    path = Path(path)
    if not (path / "Cargo.toml").exists():
        return None
    print(f"🛠️ Building '{name}'...")
    output = subprocess.DEVNULL if quiet else None
    try:
        result = subprocess.run(
            ["cargo", "build", "--release"],
            cwd=path,
            stdout=output,
            stderr=output,
            check=False,
        )
    except OSError:
        return None
    if result.returncode != 0:
        return None
    return find_release_binary(path, name)