import os
import sys
from pathlib import Path
import pytest

# Ensure we can import modules from src/ at collection time
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture()
def sandbox(tmp_path, monkeypatch):
    # Work in an isolated temp directory
    monkeypatch.chdir(tmp_path)
    # Prune environment to a minimal safe set
    safe_env = {
        "PATH": os.environ.get("PATH", "/usr/bin:/bin"),
        "HOME": str(tmp_path),
        "LANG": os.environ.get("LANG", "C"),
        "LC_ALL": os.environ.get("LC_ALL", "C"),
        "TERM": os.environ.get("TERM", "dumb"),
    }
    monkeypatch.delenv("MYSH_SEARCH_DIRS", raising=False)
    monkeypatch.setenv("PATH", safe_env["PATH"])
    return tmp_path, safe_env


@pytest.fixture()
def session(sandbox):
    from ops import ShellSession
    tmp_path, safe_env = sandbox
    sess = ShellSession(inherit_env=False)
    sess.env.update(safe_env)
    return sess


@pytest.fixture()
def make_script(tmp_path):
    """Create an executable shell script in tmp_path/bin and return its path."""
    bindir = tmp_path / "bin"
    bindir.mkdir(exist_ok=True)

    def _make(name: str, body: str) -> Path:
        path = bindir / name
        path.write_text("#!/bin/sh\n" + body + "\n")
        path.chmod(0o755)
        return path

    return _make
