"""Configuration model and its storage on disk."""

from __future__ import annotations

import os
import subprocess
import sys
import tempfile
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import platformdirs
import tomli_w

SYSTEM_BASE = Path("/usr/local/flix")
DEFAULT_BIN_DIR = SYSTEM_BASE / "bin"
CONFIG_FILE_NAME = "config.toml"


def _require(data: dict[str, Any], key: str, kind: type) -> Any:
    try:
        value = data[key]
    except KeyError:
        raise ValueError(f"missing field `{key}`") from None
    if not isinstance(value, kind):
        raise ValueError(f"invalid type for field `{key}`")
    return value


@dataclass
class PackageEntry:
    """One installed package as recorded in the configuration."""

    source: str
    tags: list[str]
    version_hash: str
    version_tag: str | None
    bin_path: Path

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "source": self.source,
            "tags": list(self.tags),
            "version_hash": self.version_hash,
        }
        if self.version_tag is not None:
            data["version_tag"] = self.version_tag
        data["bin_path"] = str(self.bin_path)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PackageEntry":
        if not isinstance(data, dict):
            raise ValueError("package entry must be a table")
        tags = _require(data, "tags", list)
        if not all(isinstance(tag, str) for tag in tags):
            raise ValueError("invalid type for field `tags`")
        version_tag = data.get("version_tag")
        if version_tag is not None and not isinstance(version_tag, str):
            raise ValueError("invalid type for field `version_tag`")
        return cls(
            source=_require(data, "source", str),
            tags=list(tags),
            version_hash=_require(data, "version_hash", str),
            version_tag=version_tag,
            bin_path=Path(_require(data, "bin_path", str)),
        )


@dataclass
class FlixConfig:
    """The whole flix configuration: install path and installed packages."""

    default_install_path: Path | None = None
    packages: dict[str, PackageEntry] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.default_install_path is not None:
            data["default_install_path"] = str(self.default_install_path)
        data["packages"] = {
            name: self.packages[name].to_dict() for name in sorted(self.packages)
        }
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FlixConfig":
        if not isinstance(data, dict):
            raise ValueError("configuration must be a table")
        raw_path = data.get("default_install_path")
        if raw_path is not None and not isinstance(raw_path, str):
            raise ValueError("invalid type for field `default_install_path`")
        packages = _require(data, "packages", dict)
        return cls(
            default_install_path=Path(raw_path) if raw_path is not None else None,
            packages={
                name: PackageEntry.from_dict(packages[name]) for name in sorted(packages)
            },
        )

    def dumps(self) -> str:
        """Serialise the configuration to TOML text."""
        return tomli_w.dumps(self.to_dict())

    @classmethod
    def loads(cls, text: str) -> "FlixConfig":
        """Parse TOML text; raises ValueError on malformed content."""
        return cls.from_dict(tomllib.loads(text))


def get_config_paths() -> tuple[Path, Path]:
    """Return the configuration file path and the directory holding it."""
    if SYSTEM_BASE.exists() or os.environ.get("USER", "") == "root":
        etc_dir = SYSTEM_BASE / "etc"
        return etc_dir / CONFIG_FILE_NAME, etc_dir
    config_dir = Path(platformdirs.user_config_path("flix"))
    return config_dir / CONFIG_FILE_NAME, config_dir


def load_config() -> FlixConfig:
    """Read the configuration, falling back to an empty one on any problem."""
    path, _ = get_config_paths()
    if not path.exists():
        return FlixConfig()
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        text = ""
    try:
        return FlixConfig.loads(text)
    except ValueError:
        return FlixConfig()


def _run_quietly(command: list[str]) -> None:
    try:
        subprocess.run(command, check=False)
    except OSError:
        pass


def save_config(config: FlixConfig) -> None:
    """Write the configuration, escalating with sudo if the directory is not writable."""
    path, directory = get_config_paths()
    text = config.dumps()
    try:
        directory.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError:
        tmp_path = Path(tempfile.gettempdir()) / "flix_config.tmp"
        try:
            tmp_path.write_text(text, encoding="utf-8")
        except OSError:
            pass
        _run_quietly(["sudo", "mkdir", "-p", str(directory)])
        _run_quietly(["sudo", "cp", str(tmp_path), str(path)])


def _ask(prompt: str) -> str:
    try:
        return input(prompt)
    except EOFError:
        return ""


def interactive_setup() -> Path:
    """Ask the user where binaries should be installed."""
    print("\nWelcome to Flix! Initial Setup Required.")
    print("-----------------------------------------")
    print("[1] System-wide (Default) ")
    print(f"    - Location: {DEFAULT_BIN_DIR}")

    home = os.environ.get("HOME", "/home")
    user_bin = f"{home}/.local/flix/bin"
    print("[2] User-local")
    print(f"    - Location: {user_bin}")
    print("[3] Custom Path")
    print("[0] Cancel")

    choice = _ask("\nSelection [1]: ").strip()
    if choice == "2":
        return Path(user_bin)
    if choice == "3":
        return Path(_ask("Enter custom bin directory: ").strip())
    if choice == "0":
        sys.exit(0)
    return DEFAULT_BIN_DIR