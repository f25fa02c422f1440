"""Privileged file-system operations and self-installation."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from flix.config import DEFAULT_BIN_DIR, load_config


def _run_quietly(command: list[str]) -> None:
    try:
        subprocess.run(command, check=False)
    except OSError:
        pass


def ensure_dir_exists(path: Path | str) -> None:
    """Create path with sudo if it does not exist yet."""
    path = Path(path)
    if not path.exists():
        _run_quietly(["sudo", "mkdir", "-p", str(path)])


def copy_with_sudo(src: Path | str, dest: Path | str) -> None:
    """Copy src to dest with sudo and make the copy executable."""
    _run_quietly(["sudo", "cp", str(src), str(dest)])
    _run_quietly(["sudo", "chmod", "+x", str(dest)])


def _current_executable() -> Path:
    if not sys.argv or not sys.argv[0]:
        raise RuntimeError("Failed to get current exe path")
    return Path(sys.argv[0]).resolve()


def self_install() -> None:
    """Install the running flix command into the configured bin directory."""
    config = load_config()
    bin_dir = config.default_install_path or DEFAULT_BIN_DIR
    current_exe = _current_executable()
    target = Path(bin_dir) / "flix"

    ensure_dir_exists(bin_dir)
    copy_with_sudo(current_exe, target)
    print(f"✅ Flix installed to {target}. Run 'flix shell-init'.")