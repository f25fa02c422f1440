"""Locating and extracting a package binary from a gzip tarball."""

from __future__ import annotations

import io
import shutil
import tarfile
import zlib
from pathlib import Path, PurePosixPath

_DOC_MARKERS = (".md", ".txt", "license", "readme")


def matches_package(file_name: str, package_name: str) -> bool:
    """Whether an archive member name looks like the package's binary."""
    pkg = package_name.lower()
    fname = file_name.lower()
    clean_pkg = pkg.replace("-rs", "")
    if not (fname == pkg or fname == clean_pkg or fname in pkg):
        return False
    return not any(marker in fname for marker in _DOC_MARKERS)


def unpack_tarball(data: bytes, package_name: str, target_path: Path | str) -> bool:
    """Extract the first member matching the package to target_path.

    Returns True on success, False when the archive is unreadable or holds
    no matching binary.
    """
    target = Path(target_path)
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
            for member in archive:
                if not member.isfile():
                    continue
                name = PurePosixPath(member.name).name
                if not name or not matches_package(name, package_name):
                    continue
                source = archive.extractfile(member)
                if source is None:
                    return False
                target.parent.mkdir(parents=True, exist_ok=True)
                with source, target.open("wb") as out:
                    shutil.copyfileobj(source, out)
                target.chmod(member.mode & 0o7777)
                return True
    except (tarfile.TarError, zlib.error, EOFError, OSError):
        return False
    return False