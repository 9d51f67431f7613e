#!/usr/bin/env python3

# Entry of mysh

from __future__ import annotations

import argparse
import os
import sys
from typing import Optional

try:
    import readline  # type: ignore
except Exception:  # pragma: no cover - fallback when readline unavailable
    readline = None

READLINE_ACTIVE = bool(readline)

PROMPT = "mysh> "
WELCOME_MESSAGE = "Welcome to my shell!"
GOODBYE_MESSAGE = "Exiting"

from command import err  # local modules in the same folder
from lines import LineReader
from ops import ShellSession, execute_line


def setup_readline() -> None:
    if not READLINE_ACTIVE:
        return
    try:
        readline.parse_and_bind("set editing-mode emacs")
        readline.parse_and_bind("Control-l: clear-screen")
    except Exception:
        pass


def repl(session: ShellSession) -> int:
    """Interactive loop: prompt, read a line, execute, repeat until EOF."""
    setup_readline()
    print(WELCOME_MESSAGE)
    while True:
        try:
            line = input(PROMPT)
        except EOFError:
            # Ctrl-D on empty line -> exit
            print()
            break
        except KeyboardInterrupt:
            # Ctrl-C at prompt -> new line and continue
            print()
            continue
        execute_line(line, session)
    print(GOODBYE_MESSAGE)
    return 0


def run_batch(reader: LineReader, session: ShellSession) -> int:
    """Execute every line from reader without prompts or banners."""
    for line in reader:
        execute_line(line, session)
    return 0


def parse_args(args=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="mysh - a small command interpreter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mysh              # interactive when stdin is a terminal
  mysh script.sh    # run the commands in script.sh
  cmds | mysh       # run commands read from a pipe
""",
    )

    parser.add_argument(
        "script",
        nargs="?",
        metavar="SCRIPT",
        help="File of commands to run in batch mode",
    )

    return parser.parse_args(args)


def run(script: Optional[str] = None) -> int:
    session = ShellSession(inherit_env=True)
    if script is not None:
        try:
            reader = LineReader.open(script)
        except OSError as e:
            err(f"{script}: {e.strerror}")
            return 1
        return run_batch(reader, session)
    if sys.stdin.isatty():
        return repl(session)
    return run_batch(LineReader(os.dup(sys.stdin.fileno())), session)


def main() -> None:
    args = parse_args()
    sys.exit(run(script=args.script))


if __name__ == "__main__":
    main()
