"""Tests for GitRangeResolver against real throw-away repositories."""

from __future__ import annotations

import pytest

import adapters.git_history as git_history
from adapters.git_history import GitRangeResolver, GitResult
from conftest import GitRepo
from core.errors import (
    CommitLookupError,
    RangeResolutionError,
    RefNotCommit,
    RefResolutionError,
    RepositoryNotFoundError,
    TraversalError,
)


def test_range_is_oldest_first(git_repo: GitRepo):
    first = git_repo.commit("feat: PROJ-1 first")
    second = git_repo.commit("feat: PROJ-2 second")
    third = git_repo.commit("feat: PROJ-3 third")

    commits = GitRangeResolver(git_repo.path).resolve("base", "HEAD")

    assert [c.id for c in commits] == [git_repo.short(first), git_repo.short(second), git_repo.short(third)]
    assert [c.summary for c in commits] == ["feat: PROJ-1 first", "feat: PROJ-2 second", "feat: PROJ-3 third"]
    assert len({c.id for c in commits}) == len(commits)


def test_start_ref_is_excluded(git_repo: GitRepo):
    git_repo.commit("feat: PROJ-1 first")

    commits = GitRangeResolver(git_repo.path).resolve("base", "HEAD")

    assert "Initial commit" not in [c.summary for c in commits]


def test_same_ref_yields_empty_range(git_repo: GitRepo):
    git_repo.commit("feat: PROJ-1 first")

    assert GitRangeResolver(git_repo.path).resolve("HEAD", "HEAD") == []


def test_commits_reachable_from_start_are_hidden(git_repo: GitRepo):
    """A commit merged into both sides is excluded because start can reach it."""

    git_repo.git("checkout", "-b", "feature")
    feature_commit = git_repo.commit("feat: PROJ-10 shared work")
    git_repo.git("checkout", "-")
    main_commit = git_repo.commit("feat: PROJ-11 mainline")
    git_repo.git("merge", "--no-ff", "--no-edit", "-m", "Merge PROJ-12 feature", "feature")
    git_repo.git("tag", "release")

    git_repo.git("checkout", "feature")
    tip = git_repo.commit("feat: PROJ-13 follow-up")
    git_repo.git("merge", "--no-ff", "--no-edit", "-m", "Merge PROJ-14 release", "release")

    commits = GitRangeResolver(git_repo.path).resolve("release", "feature")
    ids = [c.id for c in commits]

    assert git_repo.short(feature_commit) not in ids
    assert git_repo.short(main_commit) not in ids
    assert git_repo.short(tip) in ids
    assert [c.summary for c in commits][-1] == "Merge PROJ-14 release"
    assert len(commits) == 2


def test_annotated_tag_start_is_peeled_to_its_commit(git_repo: GitRepo):
    git_repo.git("tag", "-a", "v1", "-m", "release v1")
    newer = git_repo.commit("fix: PROJ-2 after tag")

    commits = GitRangeResolver(git_repo.path).resolve("v1", "HEAD")

    assert [c.id for c in commits] == [git_repo.short(newer)]


def test_summary_is_first_line_only(git_repo: GitRepo):
    git_repo.commit("feat: PROJ-7 subject line\n\nBody mentioning OTHER-1.")

    (commit,) = GitRangeResolver(git_repo.path).resolve("base", "HEAD")

    assert commit.summary == "feat: PROJ-7 subject line"


def test_empty_message_gives_empty_summary(git_repo: GitRepo):
    git_repo.commit("")

    (commit,) = GitRangeResolver(git_repo.path).resolve("base", "HEAD")

    assert commit.summary == ""


def test_unresolvable_start_ref(git_repo: GitRepo):
    with pytest.raises(RefResolutionError) as excinfo:
        GitRangeResolver(git_repo.path).resolve("nonexistent-branch", "HEAD")

    assert excinfo.value.ref == "nonexistent-branch"
    assert "Failed to resolve start_ref 'nonexistent-branch'" in str(excinfo.value)


def test_unresolvable_end_ref(git_repo: GitRepo):
    with pytest.raises(RefResolutionError) as excinfo:
        GitRangeResolver(git_repo.path).resolve("base", "does-not-exist")

    assert excinfo.value.ref == "does-not-exist"
    assert excinfo.value.role == "end_ref"


def test_option_like_ref_is_rejected(git_repo: GitRepo):
    with pytest.raises(RefResolutionError):
        GitRangeResolver(git_repo.path).resolve("--all", "HEAD")


def test_start_ref_pointing_to_a_tree(git_repo: GitRepo):
    git_repo.commit("feat: PROJ-1 first")
    git_repo.git("tag", "tree-tag", "HEAD^{tree}")

    with pytest.raises(RefNotCommit) as excinfo:
        GitRangeResolver(git_repo.path).resolve("tree-tag", "HEAD")

    assert excinfo.value.ref == "tree-tag"


def test_end_ref_pointing_to_a_tree_fails_traversal(git_repo: GitRepo):
    git_repo.commit("feat: PROJ-1 first")
    git_repo.git("tag", "tree-tag", "HEAD^{tree}")

    with pytest.raises(TraversalError):
        GitRangeResolver(git_repo.path).resolve("base", "tree-tag")


def test_not_a_repository(tmp_path):
    plain = tmp_path / "plain"
    plain.mkdir()

    with pytest.raises(RepositoryNotFoundError):
        GitRangeResolver(plain).resolve("HEAD~1", "HEAD")


def test_missing_directory(tmp_path):
    with pytest.raises(RangeResolutionError):
        GitRangeResolver(tmp_path / "missing").resolve("HEAD~1", "HEAD")


def test_missing_git_binary(git_repo: GitRepo, monkeypatch):
    def no_git(*args, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", "git")

    monkeypatch.setattr(git_history.subprocess, "run", no_git)

    with pytest.raises(RepositoryNotFoundError):
        GitRangeResolver(git_repo.path).resolve("base", "HEAD")


def test_revwalk_failure(git_repo: GitRepo, fail_git):
    git_repo.commit("feat: PROJ-1 first")
    fail_git("rev-list", "fatal: boom")

    with pytest.raises(TraversalError) as excinfo:
        GitRangeResolver(git_repo.path).resolve("base", "HEAD")

    assert "Error during revwalk: fatal: boom" in str(excinfo.value)


def test_commit_lookup_failure_returns_nothing(git_repo: GitRepo, fail_git):
    git_repo.commit("feat: PROJ-1 first")
    git_repo.commit("feat: PROJ-2 second")
    fail_git("log", "fatal: bad object")

    resolved = None
    with pytest.raises(CommitLookupError) as excinfo:
        resolved = GitRangeResolver(git_repo.path).resolve("base", "HEAD")

    assert resolved is None
    assert "fatal: bad object" in str(excinfo.value)


def test_commit_missing_from_log_output(git_repo: GitRepo, monkeypatch):
    first = git_repo.commit("feat: PROJ-1 first")
    git_repo.commit("feat: PROJ-2 second")
    original = GitRangeResolver._run_git

    def drop_first_commit(self, args, *, stdin=None):
        result = original(self, args, stdin=stdin)
        if args[0] != "log":
            return result
        kept = [line for line in result.stdout.splitlines() if not line.startswith(first)]
        return GitResult(returncode=0, stdout="\n".join(kept) + "\n", stderr="")

    monkeypatch.setattr(GitRangeResolver, "_run_git", drop_first_commit)

    with pytest.raises(CommitLookupError) as excinfo:
        GitRangeResolver(git_repo.path).resolve("base", "HEAD")

    assert excinfo.value.oid == first


def test_commit_details_are_read_in_one_call(git_repo: GitRepo, monkeypatch):
    for n in range(1, 6):
        git_repo.commit(f"feat: PROJ-{n} change")
    original = GitRangeResolver._run_git
    commands: list[str] = []

    def record(self, args, *, stdin=None):
        commands.append(args[0])
        return original(self, args, stdin=stdin)

    monkeypatch.setattr(GitRangeResolver, "_run_git", record)

    commits = GitRangeResolver(git_repo.path).resolve("base", "HEAD")

    assert [c.summary for c in commits] == [f"feat: PROJ-{n} change" for n in range(1, 6)]
    assert commands.count("log") == 1
    assert "show" not in commands
