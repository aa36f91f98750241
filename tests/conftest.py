"""Pytest configuration and shared fixtures for schemagate tests."""

import logging
import os
import shutil
import stat
import subprocess
from pathlib import Path

import pytest

from schemagate.models import GateConfig, ProcessResult

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

FAKE_CHECKER = """#!/bin/sh
# Records how it was called, then behaves as FAKE_CHECKER_* says.
here="$(dirname "$0")"
printf '%s\\n' "$@" > "$here/checker-args.txt"
pwd > "$here/checker-cwd.txt"
if [ -n "$FAKE_CHECKER_STDOUT" ]; then printf '%s' "$FAKE_CHECKER_STDOUT"; fi
if [ -n "$FAKE_CHECKER_STDOUT_FILE" ]; then cat "$FAKE_CHECKER_STDOUT_FILE"; fi
if [ -n "$FAKE_CHECKER_STDERR" ]; then printf '%s' "$FAKE_CHECKER_STDERR" >&2; fi
exit "${FAKE_CHECKER_EXIT:-0}"
"""


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo the CLI's logger setup so tests don't leak handlers into each other."""
    yield
    root = logging.getLogger("schemagate")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.propagate = True
    root.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def clean_environ(monkeypatch):
    """Strip settings that would change gate behaviour on a CI machine."""
    for name in (
        "CI", "buf_path", "buf_config", "WORKSPACE",
        "SCHEMAGATE_CHECKER", "SCHEMAGATE_CONFIG", "SCHEMAGATE_WORKSPACE",
        "SCHEMAGATE_MAINLINE", "SCHEMAGATE_REMOTE", "SCHEMAGATE_SETTINGS",
        "SCHEMAGATE_LOG_LEVEL", "SCHEMAGATE_LOG_DIR",
        "FAKE_CHECKER_EXIT", "FAKE_CHECKER_STDOUT", "FAKE_CHECKER_STDERR", "FAKE_CHECKER_STDOUT_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


# ============================================================================
# Fake process runner
# ============================================================================

class RecordingRunner:
    """Stands in for run_command; answers git and checker calls from flags."""

    def __init__(
        self,
        merging: bool = False,
        branch_exists: bool = True,
        merge_base: str | None = "c" * 40,
        fetch_exit: int = 0,
        checker_exit: int = 0,
        checker_stdout: bytes = b"",
        checker_stderr: bytes = b"",
        not_a_repo: bool = False,
    ):
        self.merging = merging
        self.branch_exists = branch_exists
        self.merge_base = merge_base
        self.fetch_exit = fetch_exit
        self.checker_exit = checker_exit
        self.checker_stdout = checker_stdout
        self.checker_stderr = checker_stderr
        self.not_a_repo = not_a_repo
        self.calls: list[tuple[list[str], Path]] = []

    def __call__(self, args, cwd):
        argv = [str(a) for a in args]
        self.calls.append((argv, Path(cwd)))

        if argv[0] != "git":
            return ProcessResult(
                args=argv,
                exit_code=self.checker_exit,
                stdout=self.checker_stdout,
                stderr=self.checker_stderr,
            )

        if self.not_a_repo:
            return ProcessResult(
                args=argv,
                exit_code=128,
                stderr=b"fatal: not a git repository (or any of the parent directories): .git\n",
            )

        sub = argv[1]
        if sub == "rev-parse":
            ref = argv[-1]
            found = self.merging if ref == "MERGE_HEAD" else self.branch_exists
            return ProcessResult(args=argv, exit_code=0 if found else 1, stdout=b"f" * 40 + b"\n" if found else b"")
        if sub == "fetch":
            stderr = b"" if self.fetch_exit == 0 else b"fatal: couldn't find remote ref master\n"
            return ProcessResult(args=argv, exit_code=self.fetch_exit, stderr=stderr)
        if sub == "merge-base":
            if self.merge_base is None:
                return ProcessResult(args=argv, exit_code=1)
            return ProcessResult(args=argv, exit_code=0, stdout=self.merge_base.encode() + b"\n")
        raise AssertionError(f"unexpected git call: {argv}")

    @property
    def commands(self) -> list[str]:
        """Call names in order: git subcommands, or "checker"."""
        return [argv[1] if argv[0] == "git" else "checker" for argv, _ in self.calls]


# ============================================================================
# Filesystem layout
# ============================================================================

@pytest.fixture
def fake_checker(tmp_path):
    """An executable shell script standing in for the checker."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    checker = bin_dir / "buf"
    checker.write_text(FAKE_CHECKER)
    checker.chmod(checker.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return checker


@pytest.fixture
def layout(tmp_path, fake_checker):
    """Checker, config and workspace files, reached through symlinks.

    Returns a dict with the real paths, the link paths and the repo root.
    """
    repo = tmp_path / "repo"
    repo.mkdir()
    workspace = repo / "WORKSPACE"
    workspace.write_text("")
    config = tmp_path / "buf.yaml"
    config.write_text("version: v1\nbreaking:\n  use:\n    - FILE\n")

    links = tmp_path / "runfiles"
    links.mkdir()
    (links / "buf").symlink_to(fake_checker)
    (links / "buf.yaml").symlink_to(config)
    (links / "WORKSPACE").symlink_to(workspace)

    return {
        "repo": repo,
        "checker": fake_checker,
        "config": config,
        "workspace": workspace,
        "checker_link": links / "buf",
        "config_link": links / "buf.yaml",
        "workspace_link": links / "WORKSPACE",
    }


@pytest.fixture
def gate_config(layout):
    return GateConfig(
        checker_ref=layout["checker_link"],
        config_ref=layout["config_link"],
        workspace_ref=layout["workspace_link"],
    )


# ============================================================================
# Real git repositories
# ============================================================================

@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Isolate git from the user's configuration."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test Author")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "author@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test Author")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "author@example.com")
    for name in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE"):
        monkeypatch.delenv(name, raising=False)
    return home


def git(repo: Path, *args: str, check: bool = True) -> str:
    """Run git in ``repo`` and return stripped stdout."""
    proc = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        env=os.environ.copy(),
    )
    if check and proc.returncode != 0:
        raise AssertionError(f"git {' '.join(args)} failed: {proc.stderr}")
    return proc.stdout.strip()


def init_repo(path: Path) -> Path:
    """Create a repository whose initial branch is master."""
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init", "-q")
    git(path, "symbolic-ref", "HEAD", "refs/heads/master")
    return path


def commit(repo: Path, name: str, content: str | None = None) -> str:
    """Write ``name`` and commit it; returns the new commit id."""
    target = repo / name
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content if content is not None else f"{name}\n")
    git(repo, "add", name)
    git(repo, "commit", "-q", "-m", f"Add {name}")
    return git(repo, "rev-parse", "HEAD")


@pytest.fixture
def git_helpers():
    """Helpers for building repositories: git(), init_repo(), commit()."""
    return {"git": git, "init_repo": init_repo, "commit": commit}
