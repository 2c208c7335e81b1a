"""Pytest fixtures for prrompt tests."""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

import pytest
import structlog

from prrompt.config import PrromptConfig
from prrompt.git.fake import FakeGitGateway
from prrompt.git.gateway import CommandGitGateway
from prrompt.infra.command import CommandRunner

FEATURE_BRANCH = "feature-branch"

GitRunner = Callable[..., str]


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo global structlog configuration made by CLI tests.

    ``configure_logging`` binds the logger to the (later closed) stream that
    CliRunner substitutes for stderr; reset it so later tests can log.
    """
    yield
    structlog.reset_defaults()


def _git(repo: Path, *args: str, check: bool = True) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=check,
    )
    return result.stdout.strip()


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository.

    Creates a repo with:
    - an initial commit on main
    - a checked-out feature branch (``feature-branch``)
    - hooks disabled, so commits made by the tests never re-enter prrompt
    """
    repo = tmp_path / "repo"
    repo.mkdir()

    _git(repo, "init")
    _git(repo, "config", "user.email", "test@test.com")
    _git(repo, "config", "user.name", "Test User")
    _git(repo, "config", "commit.gpgsign", "false")
    _git(repo, "config", "core.hooksPath", "/dev/null")

    (repo / "README.md").write_text("# Test repo\n")
    _git(repo, "add", "-A")
    _git(repo, "commit", "-m", "Initial commit")
    _git(repo, "branch", "-M", "main")
    _git(repo, "checkout", "-b", FEATURE_BRANCH)

    return repo


@pytest.fixture
def git(tmp_git_repo: Path) -> GitRunner:
    """Run git in the temporary repository and return stripped stdout."""

    def run(*args: str, check: bool = True) -> str:
        return _git(tmp_git_repo, *args, check=check)

    return run


@pytest.fixture
def commit_files(tmp_git_repo: Path, git: GitRunner) -> Callable[..., str]:
    """Write files, commit them, and return the new commit SHA."""

    def commit(message: str, files: dict[str, str]) -> str:
        for rel_path, content in files.items():
            path = tmp_git_repo / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
            git("add", "--", rel_path)
        git("commit", "-m", message)
        return git("rev-parse", "HEAD")

    return commit


@pytest.fixture
def gateway(tmp_git_repo: Path) -> CommandGitGateway:
    """Create a CommandGitGateway for the temporary repository."""
    return CommandGitGateway(CommandRunner(), repo_root=tmp_git_repo)


@pytest.fixture
def fake_gateway() -> FakeGitGateway:
    """Create an in-memory gateway checked out on a feature branch."""
    return FakeGitGateway(current=FEATURE_BRANCH)


@pytest.fixture
def default_config() -> PrromptConfig:
    """Create a default PrromptConfig."""
    return PrromptConfig()
