"""
PATH handling for the install directory.

The installer never modifies the parent shell. It updates its own process
environment and prints instructions; persisting the PATH entry in a shell
startup file is an explicit opt-in through add_to_path().
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

logger = logging.getLogger(__name__)

SHELL_RC_FILES = {
    "bash": ".bashrc",
    "zsh": ".zshrc",
    "fish": ".config/fish/config.fish",
}

MARKER = "# Added by gate-installer"

# Separators between PATH entries in export lines of any supported shell
_ENTRY_SEPARATORS = re.compile(r"[\s:=\"']+")


def is_on_path(directory: str | Path, path: str | None = None) -> bool:
    """Check if a directory is on PATH."""
    target = os.path.realpath(os.path.expanduser(str(directory)))
    search = os.environ.get("PATH", "") if path is None else path
    return any(os.path.realpath(d) == target for d in search.split(os.pathsep) if d)


def update_session_path(directory: str | Path) -> bool:
    """
    Prepend directory to this process's PATH.

    Only child processes of the installer see the change.

    Returns:
        True if PATH was changed, False if the directory was already present.
    """
    directory = os.path.expanduser(str(directory))
    if is_on_path(directory):
        return False
    current = os.environ.get("PATH", "")
    os.environ["PATH"] = directory + (os.pathsep + current if current else "")
    return True


def detect_shell() -> str:
    """Detect the user's login shell from $SHELL."""
    shell = os.path.basename(os.environ.get("SHELL", ""))
    if shell in SHELL_RC_FILES:
        return shell
    return "bash"


def path_export_line(directory: str | Path, shell: str = "bash") -> str:
    """Shell statement that puts directory in front of PATH."""
    if shell == "fish":
        return f'set -gx PATH "{directory}" $PATH'
    return f'export PATH="{directory}:$PATH"'


def rc_file(shell: str, home: str | Path | None = None) -> Path:
    """Startup file for a shell."""
    base = Path(home) if home is not None else Path.home()
    return base / SHELL_RC_FILES.get(shell, SHELL_RC_FILES["bash"])


def configured_entries(text: str) -> set[str]:
    """Whole PATH-like entries mentioned on non-comment lines of a startup file."""
    entries: set[str] = set()
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        entries.update(e.rstrip("/") or "/" for e in _ENTRY_SEPARATORS.split(line) if e)
    return entries


def add_to_path(
    directory: str | Path,
    shell: str | None = None,
    home: str | Path | None = None,
) -> Path | None:
    """
    Persist a PATH entry in the shell startup file.

    Args:
        directory: Directory to add.
        shell: Shell name, detected from $SHELL if omitted.
        home: Home directory override.

    Returns:
        The modified file, or None if it already mentions the directory.
    """
    shell = shell or detect_shell()
    directory = os.path.expanduser(str(directory)).rstrip("/") or "/"
    target = rc_file(shell, home)

    if target.exists() and directory in configured_entries(target.read_text()):
        logger.info(f"{directory} already configured in {target}")
        return None

    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "a") as f:
        f.write(f"\n{MARKER}\n{path_export_line(directory, shell)}\n")

    logger.info(f"Added {directory} to PATH in {target}")
    return target
