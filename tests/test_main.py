"""Tests for the mysh entry point: argument parsing and batch mode."""

import os
import subprocess
import sys
from pathlib import Path

import pytest  # type: ignore

import main
from lines import LineReader
from main import parse_args, run_batch

ROOT = Path(__file__).resolve().parent.parent
MAIN = ROOT / "src" / "main.py"


def run_mysh(args, cwd, stdin=None, env=None):
    return subprocess.run(
        [sys.executable, str(MAIN), *args],
        input=stdin,
        capture_output=True,
        text=True,
        cwd=str(cwd),
        env=env,
        timeout=30,
    )


class TestParseArgs:
    def test_no_script(self):
        assert parse_args([]).script is None

    def test_script(self):
        assert parse_args(["run.sh"]).script == "run.sh"


class TestBatchMode:
    def test_script_file(self, tmp_path):
        script = tmp_path / "cmds.sh"
        script.write_text(
            "echo first > out.txt\n"
            "cat<out.txt|wc -l>count.txt\n"
            "false\n"
            "then echo skipped > skipped.txt\n"
            "else echo handled > handled.txt\n"
            "pwd"
        )
        proc = run_mysh([str(script)], tmp_path)
        assert proc.returncode == 0
        assert (tmp_path / "out.txt").read_text() == "first\n"
        assert (tmp_path / "count.txt").read_text().strip() == "1"
        assert not (tmp_path / "skipped.txt").exists()
        assert (tmp_path / "handled.txt").read_text() == "handled\n"
        # no banners or prompts in batch mode
        assert "Welcome" not in proc.stdout
        assert "mysh> " not in proc.stdout
        assert proc.stdout.strip().endswith(str(tmp_path.resolve()))

    def test_commands_from_pipe(self, tmp_path):
        proc = run_mysh([], tmp_path, stdin="echo piped\nsurely-not-a-real-command-xyz\n")
        assert proc.returncode == 0
        assert "piped" in proc.stdout
        assert "command not found" in proc.stderr

    def test_exit_stops_processing(self, tmp_path):
        proc = run_mysh([], tmp_path, stdin="exit\necho after > after.txt\n")
        assert proc.returncode == 0
        assert "Exiting mysh" in proc.stdout
        assert not (tmp_path / "after.txt").exists()

    def test_missing_script(self, tmp_path):
        proc = run_mysh([str(tmp_path / "nope.sh")], tmp_path)
        assert proc.returncode == 1
        assert "nope.sh" in proc.stderr

    def test_run_batch_in_process(self, session, tmp_path):
        r, w = os.pipe()
        os.write(w, b"echo one > a.txt\ncd /nonexistent-dir\nelse echo two > b.txt")
        os.close(w)
        assert run_batch(LineReader(r, chunk_size=5), session) == 0
        assert (tmp_path / "a.txt").read_text() == "one\n"
        assert (tmp_path / "b.txt").read_text() == "two\n"


class TestRun:
    def test_run_with_script(self, sandbox, monkeypatch):
        tmp_path, _ = sandbox
        script = tmp_path / "s.sh"
        script.write_text("echo via-run > r.txt\n")
        assert main.run(str(script)) == 0
        assert (tmp_path / "r.txt").read_text() == "via-run\n"

    def test_repl_banners(self, session, monkeypatch, capsys):
        inputs = iter(["", "cd /nonexistent-dir"])

        def fake_input(prompt):
            try:
                return next(inputs)
            except StopIteration:
                raise EOFError

        monkeypatch.setattr("builtins.input", fake_input)
        assert main.repl(session) == 0
        out = capsys.readouterr().out
        assert out.startswith(main.WELCOME_MESSAGE)
        assert out.rstrip().endswith(main.GOODBYE_MESSAGE)
        assert not session.succeeded

    def test_repl_keyboard_interrupt_continues(self, session, monkeypatch):
        events = iter([KeyboardInterrupt, EOFError])

        def fake_input(prompt):
            raise next(events)

        monkeypatch.setattr("builtins.input", fake_input)
        assert main.repl(session) == 0
