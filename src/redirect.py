"""Standard-stream redirection for mysh commands.

Redirections rewrite the calling process's descriptors 0 and 1 directly so
that built-ins (which write to fd 1) and spawned programs (which inherit the
descriptors) both see them. Every command runs under a StreamGuard that puts
the original descriptors back on the way out.
"""
from __future__ import annotations

import os
import sys
from typing import Dict, List

from groups import OPERATORS

STDIN_FD = 0
STDOUT_FD = 1

# Owner read-write, group read-write, no world access
OUTPUT_MODE = 0o660


class StreamGuard:
    """Remember fds 0/1 on entry and restore them on every exit path."""

    def __init__(self, fds: tuple[int, ...] = (STDIN_FD, STDOUT_FD)) -> None:
        self.fds = fds
        self._saved: Dict[int, int] = {}

    def __enter__(self) -> "StreamGuard":
        flush_std_streams()
        for fd in self.fds:
            try:
                self._saved[fd] = os.dup(fd)
            except OSError:
                # fd not open in this process; nothing to restore later
                continue
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        flush_std_streams()
        for fd, saved in self._saved.items():
            try:
                os.dup2(saved, fd)
            finally:
                os.close(saved)
        self._saved.clear()


def flush_std_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        flush = getattr(stream, "flush", None)
        if callable(flush):
            flush()


def _redirect(path: str, flags: int, target_fd: int) -> None:
    fd = os.open(path, flags, OUTPUT_MODE)
    try:
        os.dup2(fd, target_fd)
    finally:
        os.close(fd)


def apply_redirections(tokens: List[str]) -> List[str]:
    """Apply every '<' / '>' in tokens to this process and strip them.

    Raises ValueError when an operator has no usable operand and OSError
    when a target cannot be opened. Callers run this inside a StreamGuard.
    Returns tokens, mutated in place.
    """
    i = 0
    while i < len(tokens):
        op = tokens[i]
        if op not in ("<", ">"):
            i += 1
            continue
        if i + 1 >= len(tokens) or tokens[i + 1] in OPERATORS:
            raise ValueError(f"redirection missing target after '{op}'")
        target = tokens[i + 1]
        if op == "<":
            _redirect(target, os.O_RDONLY, STDIN_FD)
        else:
            _redirect(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, STDOUT_FD)
        del tokens[i:i + 2]
    return tokens
