"""Command-line options shared by several flix commands."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field


def split_csv(value: str) -> list[str]:
    """Split a comma-separated option value into its items."""
    return value.split(",")


@dataclass
class SharedArgs:
    """Options accepted by install, remove, list and update."""

    quiet: bool = False
    force: bool = False
    yes: bool = False
    tags: list[str] = field(default_factory=list)
    path: str | None = None

    @classmethod
    def from_namespace(cls, namespace: argparse.Namespace) -> "SharedArgs":
        """Build the options from a parsed argparse namespace."""
        return cls(
            quiet=bool(getattr(namespace, "quiet", False)),
            force=bool(getattr(namespace, "force", False)),
            yes=bool(getattr(namespace, "yes", False)),
            tags=list(getattr(namespace, "tags", None) or []),
            path=getattr(namespace, "path", None),
        )


def add_shared_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Register the shared options on a parser and return it."""
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress standard build output (e.g., cargo noise)",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Overwrite existing binaries or force a fresh build",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Skip interactive prompts and use defaults",
    )
    parser.add_argument(
        "-t",
        "--tags",
        action="extend",
        type=split_csv,
        default=None,
        metavar="TAGS",
        help="Comma-separated list of tags for filtering or categorizing",
    )
    parser.add_argument(
        "-p",
        "--path",
        default=None,
        help="Override the installation or search path for this command",
    )
    return parser