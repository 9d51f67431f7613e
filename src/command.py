# module for built-in commands and executable lookup

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional

if TYPE_CHECKING:
    from ops import ShellSession

EXIT_MESSAGE = "Exiting mysh"


def out(text: str) -> None:
    """Write a line to fd 1 so redirections and pipes see it."""
    os.write(1, (text + "\n").encode())


def err(text: str) -> None:
    sys.stderr.write(f"mysh: {text}\n")
    sys.stderr.flush()


def is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def find_executable(name: str, dirs: Iterable[str]) -> Optional[str]:
    """Return the first dirs/name that exists and is executable."""
    for d in dirs:
        if not d:
            continue
        candidate = os.path.join(d, name)
        if is_executable(candidate):
            return candidate
    return None


def search_path(session: "ShellSession") -> List[str]:
    return session.env.get("PATH", os.defpath).split(":")


# --- Built-ins ---
# Each takes the argv (argv[0] is the builtin name) and the session and
# returns an exit code: 0 success, 1 failure.

def builtin_cd(argv: List[str], session: "ShellSession") -> int:
    if len(argv) < 2:
        err("cd: missing argument")
        return 1
    try:
        os.chdir(argv[1])
    except OSError as e:
        err(f"cd: {argv[1]}: {e.strerror}")
        return 1
    session.env["PWD"] = os.getcwd()
    return 0


def builtin_pwd(argv: List[str], session: "ShellSession") -> int:
    try:
        cwd = os.getcwd()
    except OSError as e:
        err(f"pwd: {e.strerror}")
        return 1
    out(cwd)
    return 0


def builtin_which(argv: List[str], session: "ShellSession") -> int:
    if len(argv) != 2 or argv[1] in builtin_commands:
        err("which: incorrect arguments")
        return 1
    found = find_executable(argv[1], search_path(session))
    if found is None:
        err(f"which: no {argv[1]} in PATH")
        return 1
    out(found)
    return 0


def builtin_exit(argv: List[str], session: "ShellSession") -> int:
    out(EXIT_MESSAGE)
    argv.clear()
    sys.exit(0)


builtin_commands: Dict[str, Callable[[List[str], "ShellSession"], int]] = {
    "cd": builtin_cd,
    "pwd": builtin_pwd,
    "which": builtin_which,
    "exit": builtin_exit,
}
