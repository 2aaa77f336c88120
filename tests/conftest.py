"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Callable

import httpx
import pytest

from adapters.git_history import GitRangeResolver, GitResult
from core.config import AppSettings

# Fixed epoch so every test repository gets the same, strictly increasing commit dates.
_BASE_TIMESTAMP = 1_700_000_000


class GitRepo:
    """Throw-away repository driven through the git binary."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._tick = 0

    def git(self, *args: str) -> str:
        self._tick += 1
        stamp = f"{_BASE_TIMESTAMP + self._tick} +0000"
        env = {
            **os.environ,
            "GIT_AUTHOR_DATE": stamp,
            "GIT_COMMITTER_DATE": stamp,
        }
        result = subprocess.run(
            ["git", *args],
            cwd=self.path,
            check=True,
            capture_output=True,
            text=True,
            env=env,
        )
        return result.stdout.strip()

    def commit(self, message: str) -> str:
        """Create an (empty) commit and return its full hash."""

        if message:
            self.git("commit", "--allow-empty", "-m", message)
        else:
            self.git("commit", "--allow-empty", "--allow-empty-message", "-m", "")
        return self.git("rev-parse", "HEAD")

    def short(self, rev: str) -> str:
        return self.git("rev-parse", "--short", rev)


@pytest.fixture()
def git_repo(tmp_path: Path) -> GitRepo:
    """Repository with one baseline commit tagged `base`."""

    repo_path = tmp_path / "repo"
    repo_path.mkdir()
    repo = GitRepo(repo_path)
    repo.git("init")
    repo.git("config", "user.name", "Test User")
    repo.git("config", "user.email", "test@example.com")
    repo.git("config", "commit.gpgsign", "false")
    repo.git("config", "tag.gpgsign", "false")
    repo.commit("Initial commit")
    repo.git("tag", "base")
    return repo


class FakeJira:
    """In-memory Jira: answers `/rest/api/2/issue/<key>` from a status table."""

    def __init__(
        self,
        statuses: dict[str, int] | None = None,
        *,
        default_status: int = 404,
        error: Exception | None = None,
    ) -> None:
        self.statuses = dict(statuses or {})
        self.default_status = default_status
        self.error = error
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        key = request.url.path.rsplit("/", 1)[-1]
        status = self.statuses.get(key, self.default_status)
        return httpx.Response(status, json={"key": key, "fields": {"summary": "Mocked issue summary"}})

    def client(self, **kwargs: object) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler), **kwargs)

    @property
    def requested_keys(self) -> list[str]:
        return [r.url.path.rsplit("/", 1)[-1] for r in self.requests]


@pytest.fixture()
def fake_jira_factory() -> Callable[..., FakeJira]:
    return FakeJira


@pytest.fixture()
def fail_git(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Make one git sub-command (`rev-list`, `log`, ...) exit with status 128."""

    original = GitRangeResolver._run_git

    def install(command: str, stderr: str = "fatal: boom") -> None:
        def run_git(self: GitRangeResolver, args: list[str], *, stdin: str | None = None) -> GitResult:
            if args and args[0] == command:
                return GitResult(returncode=128, stdout="", stderr=stderr)
            return original(self, args, stdin=stdin)

        monkeypatch.setattr(GitRangeResolver, "_run_git", run_git)

    return install


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real `.env` files and TICKET_GATE_* variables out of the tests."""

    monkeypatch.setitem(AppSettings.model_config, "env_file", None)
    for name in list(os.environ):
        if name.upper().startswith("TICKET_GATE_"):
            monkeypatch.delenv(name, raising=False)
