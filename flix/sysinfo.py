"""Host operating system and architecture detection."""

from __future__ import annotations

import platform
import sys
from dataclasses import dataclass

_OS_NAMES = {"darwin": "macos", "win32": "windows", "cygwin": "windows"}
_ARCH_NAMES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "i386": "x86",
    "i686": "x86",
    "armv7l": "arm",
}


@dataclass(frozen=True)
class SystemInfo:
    """Operating system and CPU architecture names."""

    os: str
    arch: str


def _os_name() -> str:
    name = sys.platform
    return _OS_NAMES.get(name, name.rstrip("0123456789"))


def _arch_name() -> str:
    machine = platform.machine().lower()
    return _ARCH_NAMES.get(machine, machine)


def get_system_info() -> SystemInfo:
    """Describe the running host."""
    return SystemInfo(os=_os_name(), arch=_arch_name())


def get_search_terms(info: SystemInfo | None = None) -> list[str]:
    """Architecture names a release asset for this host may carry."""
    info = info or get_system_info()
    arch = info.arch.lower()
    terms = [arch]
    if arch == "aarch64":
        terms.append("arm64")
    if arch == "x86_64":
        terms.append("amd64")
    return terms


def get_binary_patterns(package_name: str, info: SystemInfo | None = None) -> list[str]:
    """Name patterns that identify a binary built for this host."""
    info = info or get_system_info()
    patterns = [
        f"{package_name}-{info.os}-{info.arch}",
        f"{package_name}-{info.arch}",
    ]
    if info.os == "linux":
        patterns.extend(["linux", "musl"])
    return patterns