"""Shell integration: PATH entries and bash autocompletion."""

from __future__ import annotations

import os
import subprocess
import sys
import tempfile
from pathlib import Path

from flix.config import DEFAULT_BIN_DIR, load_config
from flix.system import copy_with_sudo, ensure_dir_exists

PATH_SHELL_FILES = (".bashrc", ".zshrc", ".profile")
COMPLETION_SHELL_FILES = (".bashrc", ".zshrc")
COMPLETION_SCRIPT_NAME = "flix_completion.bash"

DYNAMIC_WRAPPER = r"""
# --- FLIX DYNAMIC WRAPPER ---
_flix_dynamic() {
    local cur cmd
    cur="${COMP_WORDS[COMP_CWORD]}"
    cmd="${COMP_WORDS[1]}"
    
    if [[ "$cmd" == "update" || "$cmd" == "remove" ]]; then
        if [[ "$cur" != -* ]]; then
            # Call the binary directly to get the current list
            local pkgs=$(flix _list-installed 2>/dev/null)
            COMPREPLY=( $(compgen -W "${pkgs}" -- "${cur}") )
            return 0
        fi
    fi
    
    # Fallback to standard clap completion
    _flix "$@"
}
complete -F _flix_dynamic -o bashdefault -o default flix
"""


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return ""


def setup_path(base_dir: Path | str, home: Path | str) -> bool:
    """Append base_dir to PATH in the user's shell start-up files.

    Returns True when at least one file was changed.
    """
    path_str = str(base_dir)
    path_line = f'\n# Flix Package Manager\nexport PATH="$PATH:{path_str}"'
    updated = False

    for sh in PATH_SHELL_FILES:
        rc_file = Path(home) / sh
        if not rc_file.exists():
            continue
        if path_str in _read_text(rc_file):
            print(f"ℹ️ Flix path already exists in {sh}")
            continue
        try:
            handle = rc_file.open("a", encoding="utf-8")
        except OSError:
            continue
        with handle:
            try:
                handle.write(path_line + "\n")
            except OSError as exc:
                print(f"❌ Failed to write to {sh}: {exc}", file=sys.stderr)
                continue
        print(f"✅ Added Flix to {sh}")
        updated = True
    return updated


def _current_executable() -> Path:
    if not sys.argv or not sys.argv[0]:
        raise RuntimeError("Failed to get current exe")
    return Path(sys.argv[0]).resolve()


def _generate_completion_script() -> str | None:
    command = [str(_current_executable()), "generate-completion", "bash"]
    try:
        result = subprocess.run(command, capture_output=True, check=False)
    except OSError:
        return None
    output = result.stdout or b""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    return output


def setup_autocomplete(etc_dir: Path | str, home: Path | str) -> bool:
    """Install the bash completion script and source it from the shell files.

    Returns True when at least one shell file was hooked.
    """
    global_script = Path(etc_dir) / COMPLETION_SCRIPT_NAME
    script = _generate_completion_script()
    if script is None:
        return False
    script += DYNAMIC_WRAPPER

    temp_path = Path(tempfile.gettempdir()) / COMPLETION_SCRIPT_NAME
    try:
        temp_path.write_text(script, encoding="utf-8")
    except OSError:
        return False
    copy_with_sudo(temp_path, global_script)
    temp_path.unlink(missing_ok=True)

    source_line = f"source {global_script}"
    updated = False
    for sh in COMPLETION_SHELL_FILES:
        rc_file = Path(home) / sh
        if not rc_file.exists() or source_line in _read_text(rc_file):
            continue
        try:
            with rc_file.open("a", encoding="utf-8") as handle:
                handle.write(f"\n# Flix Autocompletion\n{source_line}\n")
        except OSError:
            continue
        print(f"✅ Hooked autocompletion into {sh}")
        updated = True
    return updated


def shell_init() -> None:
    """Configure PATH and autocompletion for the current user."""
    config = load_config()
    base_dir = Path(config.default_install_path or DEFAULT_BIN_DIR)
    etc_dir = base_dir.parent / "etc"

    ensure_dir_exists(etc_dir)
    home = os.environ.get("HOME", "/home")

    updated = setup_path(base_dir, home)
    updated = setup_autocomplete(etc_dir, home) or updated

    if updated:
        print("\n✨ PATH and Autocomplete updated! To use immediately, run:")
        print("    source ~/.bashrc")