"""The flix command line."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from flix.config import load_config
from flix.flags import SharedArgs, add_shared_arguments, split_csv
from flix.installer import InstallError, install
from flix.registry import (
    PackageNotInstalledError,
    list_packages,
    manage_tags,
    remove,
    update,
)
from flix.shell import shell_init
from flix.system import self_install

PROG = "flix"
VERSION = "0.2.3"
HIDDEN_COMMANDS = frozenset({"generate-completion", "_list-installed"})
COMPLETION_SHELLS = ("bash",)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for every flix command."""
    parser = argparse.ArgumentParser(
        prog=PROG, description="The Blazingly Fast Package Manager"
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"{PROG} {VERSION}",
        help="Print version information",
    )
    commands = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    install_cmd = commands.add_parser(
        "install", help="Install a package from a git URL or search for releases"
    )
    install_cmd.add_argument("url")
    add_shared_arguments(install_cmd)
    install_cmd.add_argument(
        "-r",
        "--release",
        action="store_true",
        help="Search for pre-built binaries on GitHub Releases first",
    )
    install_cmd.add_argument(
        "-d",
        "--default",
        action="store_true",
        help="Mark this package as the primary/default binary",
    )
    install_cmd.add_argument(
        "-V",
        "--git-ref",
        dest="version",
        default=None,
        help="Install a specific git tag or commit hash (e.g., -V v0.1.0)",
    )

    remove_cmd = commands.add_parser("remove", help="Remove an installed package")
    remove_cmd.add_argument("name")
    add_shared_arguments(remove_cmd)

    list_cmd = commands.add_parser("list", help="List all installed packages")
    add_shared_arguments(list_cmd)

    tag_cmd = commands.add_parser("tag", help="Manage tags for an installed package")
    tag_cmd.add_argument("name", help="Name of the installed package")
    tag_cmd.add_argument(
        "-a",
        "--add",
        action="extend",
        type=split_csv,
        default=None,
        help="Tags to add (comma-separated)",
    )
    tag_cmd.add_argument(
        "-r",
        "--remove",
        action="extend",
        type=split_csv,
        default=None,
        help="Tags to remove (comma-separated)",
    )

    update_cmd = commands.add_parser(
        "update", help="Update installed packages to their latest versions"
    )
    update_cmd.add_argument(
        "name", nargs="?", default=None, help="Name of a specific package to update"
    )
    add_shared_arguments(update_cmd)
    update_cmd.add_argument(
        "-r",
        "--release",
        action="store_true",
        help="Prefer pre-built binary updates if available",
    )

    default_cmd = commands.add_parser(
        "default", help="Configure the global installation directory"
    )
    default_cmd.add_argument(
        "-s", "--set", default=None, help="The new path to set as the global default"
    )

    commands.add_parser("shell-init", help="Configure shell PATH (bash/zsh/profile)")
    commands.add_parser("setup", help="Run the interactive first-time setup")

    completion_cmd = commands.add_parser("generate-completion")
    completion_cmd.add_argument("shell", choices=COMPLETION_SHELLS)

    commands.add_parser("_list-installed")
    return parser


def _subcommand_parsers(parser: argparse.ArgumentParser) -> dict[str, argparse.ArgumentParser]:
    for action in parser._actions:
        if isinstance(action, argparse._SubParsersAction):
            return dict(action.choices)
    return {}


def _option_strings(parser: argparse.ArgumentParser) -> list[str]:
    return [opt for action in parser._actions for opt in action.option_strings]


def bash_completion(parser: argparse.ArgumentParser) -> str:
    """Generate a bash completion script defining the _flix function."""
    subcommands = _subcommand_parsers(parser)
    visible = [name for name in subcommands if name not in HIDDEN_COMMANDS]
    top_words = " ".join(_option_strings(parser) + visible)
    prog = parser.prog

    lines = [
        "_" + prog + "() {",
        "    local cur cmd opts",
        "    COMPREPLY=()",
        '    cur="${COMP_WORDS[COMP_CWORD]}"',
        '    cmd="${COMP_WORDS[1]}"',
        "",
        "    if [[ ${COMP_CWORD} -eq 1 ]]; then",
        '        opts="' + top_words + '"',
        '        COMPREPLY=( $(compgen -W "${opts}" -- "${cur}") )',
        "        return 0",
        "    fi",
        "",
        '    case "${cmd}" in',
    ]
    for name in visible:
        words = " ".join(_option_strings(subcommands[name]))
        lines.extend(
            [
                "        " + name + ")",
                '            opts="' + words + '"',
                "            ;;",
            ]
        )
    lines.extend(
        [
            "        *)",
            '            opts=""',
            "            ;;",
            "    esac",
            "",
            '    COMPREPLY=( $(compgen -W "${opts}" -- "${cur}") )',
            "    return 0",
            "}",
            "",
            "complete -F _" + prog + " -o bashdefault -o default " + prog,
            "",
        ]
    )
    return "\n".join(lines)


def _run_install(args: argparse.Namespace) -> int:
    try:
        install(
            args.url,
            SharedArgs.from_namespace(args),
            args.release,
            args.default,
            args.version,
        )
    except InstallError as exc:
        print(f"❌ Error: {exc}", file=sys.stderr)
        for hint in exc.hints:
            print(hint)
        return 1
    return 0


def _run_tag(args: argparse.Namespace) -> int:
    name = args.name
    try:
        added, removed = manage_tags(name, list(args.add or []), list(args.remove or []))
    except PackageNotInstalledError as exc:
        print(f"❌ Error: {exc}", file=sys.stderr)
        return 1
    for tag in removed:
        print(f"➖ Removed tag '{tag}' from '{name}'")
    for tag in added:
        print(f"➕ Added tag '{tag}' to '{name}'")
    if not added and not removed:
        print(f"ℹ️ No changes made to tags for '{name}'.")
    else:
        print(f"✅ Tags updated for '{name}'.")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the flix command line and return its exit status."""
    parser = build_parser()
    arguments = list(sys.argv[1:] if argv is None else argv)
    if not arguments:
        parser.print_help(sys.stderr)
        return 2
    args = parser.parse_args(arguments)

    match args.command:
        case "install":
            return _run_install(args)
        case "list":
            list_packages(SharedArgs.from_namespace(args))
        case "tag":
            return _run_tag(args)
        case "update":
            update(args.name, SharedArgs.from_namespace(args), args.release)
        case "remove":
            remove(args.name, SharedArgs.from_namespace(args))
        case "default":
            if args.set is not None:
                print(f"⚙️ Feature coming soon: Set default path to {args.set}")
        case "shell-init":
            shell_init()
        case "setup":
            self_install()
        case "generate-completion":
            sys.stdout.write(bash_completion(parser))
        case "_list-installed":
            for name in sorted(load_config().packages):
                print(name)
    return 0


if __name__ == "__main__":
    sys.exit(main())