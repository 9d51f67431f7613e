from __future__ import annotations

import os
import subprocess
import sys
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from command import builtin_commands, err, find_executable
from groups import split_pipeline, tokenize
from redirect import STDIN_FD, STDOUT_FD, StreamGuard, apply_redirections, flush_std_streams

MAX_COMMAND_LENGTH = 10000

# Directories searched, in order, for bare command names
DEFAULT_SEARCH_DIRS: Tuple[str, ...] = ("/usr/local/bin", "/usr/bin", "/bin")

CONDITIONALS = ("then", "else")


class ShellSession:
    """Holds session-wide shell context: environment, lookup dirs, last status."""

    def __init__(self, inherit_env: bool = True, search_dirs: Optional[Iterable[str]] = None) -> None:
        # String-only environment used as base for subprocesses
        self.env: Dict[str, str] = dict(os.environ) if inherit_env else {}
        if search_dirs is None:
            override = os.environ.get("MYSH_SEARCH_DIRS")
            search_dirs = override.split(":") if override else DEFAULT_SEARCH_DIRS
        self.search_dirs: Tuple[str, ...] = tuple(d for d in search_dirs if d)
        # Exit code of the most recent command; 0 means success
        self.last_status: int = 0

    @property
    def succeeded(self) -> bool:
        return self.last_status == 0

    def set_status(self, code: int) -> int:
        self.last_status = code
        return code

    def get_env(self) -> Dict[str, str]:
        return dict(self.env)


# --------- Conditional gate ---------

def should_run(tokens: List[str], session: ShellSession) -> bool:
    """Decide whether a then/else-prefixed command runs.

    The prefix token, if present, is removed from tokens whether or not the
    command runs. Unprefixed commands always run.
    """
    if not tokens or tokens[0] not in CONDITIONALS:
        return True
    head = tokens.pop(0)
    if head == "then":
        return session.succeeded
    return not session.succeeded


# --------- Dispatch ---------

def resolve_command(name: str, session: ShellSession) -> Optional[str]:
    if "/" in name:
        return name
    return find_executable(name, session.search_dirs)


def _exit_code(code: int) -> int:
    # Killed by signal N -> 128 + N, like other shells
    return 128 - code if code < 0 else code


def _spawn_error(path: str, e: OSError) -> int:
    err(f"{path}: {e.strerror}")
    if isinstance(e, FileNotFoundError):
        return 127
    if isinstance(e, PermissionError):
        return 126
    return 1


def _spawn(path: str, argv: List[str], session: ShellSession) -> int:
    try:
        proc = subprocess.Popen(argv, executable=path, env=session.get_env())
    except OSError as e:
        return _spawn_error(path, e)
    while True:
        try:
            return _exit_code(proc.wait())
        except KeyboardInterrupt:
            # The child got the same SIGINT; keep waiting so it is reaped.
            continue


def _exec_in_place(path: str, argv: List[str], session: ShellSession) -> int:
    """Replace the current process image; only returns on failure."""
    flush_std_streams()
    try:
        os.execve(path, argv, session.get_env())
    except OSError as e:
        return _spawn_error(path, e)
    return 1


def run_command(argv: List[str], session: ShellSession, *, replace: bool = False) -> int:
    """Run one pipeline stage: redirections, then a built-in or a program.

    Standard streams are restored before returning no matter how the command
    ends. With replace=True an external program takes over this process
    (used inside forked pipeline stages). Updates and returns last status;
    a stage vetoed by a then/else prefix leaves it unchanged.
    """
    if not should_run(argv, session):
        return session.last_status
    with StreamGuard():
        try:
            apply_redirections(argv)
        except ValueError as e:
            err(str(e))
            return session.set_status(1)
        except OSError as e:
            err(f"{e.filename}: {e.strerror}")
            return session.set_status(1)
        if not argv:
            err("missing command")
            return session.set_status(1)

        name = argv[0]
        builtin = builtin_commands.get(name)
        if builtin is not None:
            rc = builtin(argv, session)
        else:
            path = resolve_command(name, session)
            if path is None:
                err(f"command not found: {name}")
                rc = 127
            elif replace:
                rc = _exec_in_place(path, argv, session)
            else:
                rc = _spawn(path, argv, session)
    return session.set_status(rc)


# --------- Pipeline ---------

def _fork_stage(argv: List[str], session: ShellSession, fd: int, target_fd: int,
                pipe_fds: Sequence[int]) -> int:
    pid = os.fork()
    if pid:
        return pid
    code = 1
    try:
        os.dup2(fd, target_fd)
        for p in pipe_fds:
            os.close(p)
        code = run_command(argv, session, replace=True)
    except SystemExit as e:
        code = e.code if isinstance(e.code, int) else 0
    except Exception as e:
        err(f"{argv[0] if argv else 'pipeline'}: {e}")
    finally:
        sys.stderr.flush()
        os._exit(code & 0xFF)


def _wait(pid: int) -> int:
    while True:
        try:
            _, status = os.waitpid(pid, 0)
            break
        except KeyboardInterrupt:
            continue
    return _exit_code(os.waitstatus_to_exitcode(status))


def run_pipeline(tokens: List[str], session: ShellSession) -> int:
    """Run tokens as a single command or as two stages joined by one pipe.

    Both stages run in forked children; this process closes its copies of
    the pipe and reaps both before returning. Last status becomes the
    second stage's exit code.
    """
    stage_a, stage_b = split_pipeline(tokens)
    if stage_b is None:
        return run_command(stage_a, session)

    flush_std_streams()
    read_fd, write_fd = os.pipe()
    pids: List[int] = []
    statuses: List[int] = []
    try:
        pids.append(_fork_stage(stage_a, session, write_fd, STDOUT_FD, (read_fd, write_fd)))
        pids.append(_fork_stage(stage_b, session, read_fd, STDIN_FD, (read_fd, write_fd)))
    finally:
        os.close(read_fd)
        os.close(write_fd)
        statuses = [_wait(pid) for pid in pids]
    return session.set_status(statuses[-1])


# --------- Line entry point ---------

def execute_line(line: str, session: ShellSession) -> int:
    """Tokenize and run one input line, returning the resulting last status."""
    if len(line) >= MAX_COMMAND_LENGTH:
        err("command too long")
        return session.set_status(1)
    try:
        tokens = tokenize(line)
    except ValueError as e:
        err(str(e))
        return session.set_status(1)

    if not should_run(tokens, session) or not tokens:
        return session.last_status

    try:
        return run_pipeline(tokens, session)
    except ValueError as e:
        err(str(e))
    except OSError as e:
        err(e.strerror or str(e))
    return session.set_status(1)
