from __future__ import annotations

import shutil
import subprocess
import textwrap
from pathlib import Path

import pytest

from wtree.worktrees import (
    GitError,
    WorktreeDirectory,
    copy_file,
    list_worktrees,
    parse_worktrees,
    remove_worktree,
    sort_by_branch,
)
from wtree.worktrees import git as git_module

PORCELAIN = textwrap.dedent(
    """\
    worktree /repo
    HEAD 1234567890abcdef1234567890abcdef12345678
    branch refs/heads/main

    worktree /repo-feature
    HEAD abcdef1234567890abcdef1234567890abcdef12
    branch refs/heads/feature/login

    worktree /repo-detached
    HEAD fedcba9876543210fedcba9876543210fedcba98
    detached
    """
)


def test_parse_worktrees_reads_porcelain_blocks() -> None:
    worktrees = parse_worktrees(PORCELAIN)

    assert [(wt.path, wt.branch, wt.commit) for wt in worktrees] == [
        ("/repo", "main", "1234567"),
        ("/repo-feature", "feature/login", "abcdef1"),
        ("/repo-detached", "detached", "fedcba9"),
    ]


def test_parse_worktrees_handles_empty_output() -> None:
    assert parse_worktrees("") == []


def test_worktree_identity_is_path() -> None:
    first = WorktreeDirectory(path="/repo", branch="main", commit="1234567")
    second = WorktreeDirectory(path="/repo", branch="renamed", commit="")

    assert first == second
    assert len({first, second}) == 1


def test_sort_by_branch_is_case_insensitive() -> None:
    worktrees = [
        WorktreeDirectory(path="/b", branch="beta"),
        WorktreeDirectory(path="/a", branch="Alpha"),
    ]
    assert [wt.branch for wt in sort_by_branch(worktrees)] == ["Alpha", "beta"]


def test_copy_file_creates_parent_directories(tmp_path: Path) -> None:
    source_root = tmp_path / "main"
    (source_root / "config").mkdir(parents=True)
    (source_root / "config" / "app.json").write_text('{"port": 3000}', encoding="utf-8")
    target = tmp_path / "feature"
    target.mkdir()

    results = copy_file(source_root, "config/app.json", [WorktreeDirectory(path=str(target), branch="feature")])

    assert [result.ok for result in results] == [True]
    assert (target / "config" / "app.json").read_text(encoding="utf-8") == '{"port": 3000}'


def test_copy_file_reports_per_worktree_failures(tmp_path: Path) -> None:
    source_root = tmp_path / "main"
    source_root.mkdir()
    (source_root / ".env").write_text("PORT=3000\n", encoding="utf-8")
    good = tmp_path / "good"
    good.mkdir()
    blocked = tmp_path / "blocked"
    blocked.write_text("not a directory", encoding="utf-8")

    results = copy_file(
        source_root,
        ".env",
        [
            WorktreeDirectory(path=str(blocked), branch="blocked"),
            WorktreeDirectory(path=str(good), branch="good"),
        ],
    )

    assert not results[0].ok
    assert results[1].ok
    assert (good / ".env").read_text(encoding="utf-8") == "PORT=3000\n"


def test_copy_file_requires_source(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        copy_file(tmp_path, ".env", [])


def test_remove_worktree_falls_back_to_force(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[list[str]] = []

    def fake_run_git(args, *, cwd=None, git="git"):
        calls.append(list(args))
        if "--force" not in args:
            raise GitError("contains modified or untracked files")
        return ""

    monkeypatch.setattr(git_module, "_run_git", fake_run_git)

    result = remove_worktree(WorktreeDirectory(path="/repo-feature", branch="feature"))

    assert result.removed and result.forced
    assert calls == [
        ["worktree", "remove", "/repo-feature"],
        ["worktree", "remove", "--force", "/repo-feature"],
    ]


def test_remove_worktree_reports_first_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run_git(args, *, cwd=None, git="git"):
        raise GitError("locked" if "--force" not in args else "still locked")

    monkeypatch.setattr(git_module, "_run_git", fake_run_git)

    result = remove_worktree(WorktreeDirectory(path="/repo-feature", branch="feature"))

    assert not result.removed
    assert result.error == "locked"


def test_list_worktrees_outside_repository_raises(tmp_path: Path) -> None:
    with pytest.raises(GitError):
        list_worktrees(tmp_path, git=str(tmp_path / "no-such-git"))


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
def test_list_worktrees_against_real_repository(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()

    def git(*args: str) -> None:
        subprocess.run(
            ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
            cwd=repo,
            check=True,
            capture_output=True,
        )

    git("init", "-b", "main")
    git("commit", "--allow-empty", "-m", "init")
    git("worktree", "add", "-b", "feature", str(tmp_path / "feature"))

    worktrees = list_worktrees(repo)

    assert [wt.branch for wt in worktrees] == ["main", "feature"]
    assert Path(worktrees[1].path).resolve() == (tmp_path / "feature").resolve()
    assert len(worktrees[0].commit) == 7
