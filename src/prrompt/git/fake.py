"""In-memory git gateway for testing."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from prrompt.exceptions import GitError

logger = structlog.get_logger()


@dataclass
class FakeCommit:
    """A commit known to the fake repository.

    Attributes:
        sha: Full commit SHA.
        message: Commit message.
        files: Paths touched by the commit.
        deleted: Paths among ``files`` that the commit deletes.
    """

    sha: str
    message: str
    files: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)


@dataclass
class FakeFailure:
    """Describes a gateway operation the fake should fail.

    Attributes:
        operation: Gateway method name (e.g. ``cherry_pick_no_commit``).
        message: Error message to raise with.
        path: Only fail when the operation is called for this path.
        leaves_cherry_pick: Leave a cherry-pick in progress when failing,
            as a conflicting ``git cherry-pick`` does.
    """

    operation: str
    message: str = "simulated failure"
    path: str | None = None
    leaves_cherry_pick: bool = False


class FakeGitGateway:
    """A fake GitGateway that keeps repository state in memory.

    Branches are modelled as commit lists, the index as an ordered list of
    staged paths. Every call is recorded in ``calls`` so tests can assert on
    the exact sequence of operations.

    Example:
        >>> gateway = FakeGitGateway(current="feature")
        >>> commit = gateway.add_commit("Add prompt", ["prompts/a.md"])
        >>> gateway.changed_files(commit.sha)
        ['prompts/a.md']
    """

    def __init__(
        self,
        *,
        current: str = "feature",
        branches: list[str] | None = None,
        config: dict[str, str] | None = None,
        failures: list[FakeFailure] | None = None,
        hooks_path: Path | None = None,
    ) -> None:
        """Initialize the fake repository.

        Args:
            current: Branch checked out initially.
            branches: Other branches that exist (``main`` always exists).
            config: Git configuration values.
            failures: Operations that should raise GitError.
            hooks_path: Value returned by ``hooks_dir``.
        """
        self.current = current
        self.branches: dict[str, list[FakeCommit]] = {"main": []}
        for name in [current, *(branches or [])]:
            self.branches.setdefault(name, [])
        self.commits: dict[str, FakeCommit] = {}
        self.config = dict(config or {})
        self.failures = list(failures or [])
        self.hooks_path = hooks_path or Path(".git/hooks")

        self.staged: list[str] = []
        self.unstaged: list[str] = []
        self.discarded: list[str] = []
        self.pushed: list[tuple[str, str]] = []
        self.dirty = False
        self.stashes: list[str] = []
        self.cherry_pick_in_progress = False
        self.calls: list[str] = []

    # Test setup helpers

    def add_commit(
        self,
        message: str,
        files: list[str],
        *,
        branch: str | None = None,
        deleted: list[str] | None = None,
    ) -> FakeCommit:
        """Record a commit on a branch (the current one by default)."""
        target = branch or self.current
        commit = FakeCommit(
            sha=self._next_sha(message),
            message=message,
            files=list(files),
            deleted=list(deleted or []),
        )
        self.commits[commit.sha] = commit
        self.branches.setdefault(target, []).append(commit)
        return commit

    def fail(
        self,
        operation: str,
        message: str = "simulated failure",
        *,
        path: str | None = None,
        leaves_cherry_pick: bool = False,
    ) -> None:
        """Make a gateway operation fail."""
        self.failures.append(
            FakeFailure(
                operation=operation,
                message=message,
                path=path,
                leaves_cherry_pick=leaves_cherry_pick,
            )
        )

    def head(self, branch: str | None = None) -> FakeCommit | None:
        """Latest commit on a branch."""
        history = self.branches.get(branch or self.current, [])
        return history[-1] if history else None

    def _next_sha(self, message: str) -> str:
        seed = f"{len(self.commits)}:{message}".encode()
        return hashlib.sha1(seed).hexdigest()

    def _enter(self, operation: str, path: str | None = None) -> None:
        self.calls.append(operation)
        for failure in self.failures:
            if failure.operation != operation:
                continue
            if failure.path is not None and failure.path != path:
                continue
            if failure.leaves_cherry_pick:
                self.cherry_pick_in_progress = True
            logger.debug("FakeGitGateway simulating failure", operation=operation)
            raise GitError(failure.message, operation=operation, returncode=1)

    def _require_branch(self, operation: str, name: str) -> None:
        if name not in self.branches:
            msg = f"pathspec '{name}' did not match any branch"
            raise GitError(msg, operation=operation, returncode=1)

    def _require_commit(self, operation: str, sha: str) -> FakeCommit:
        commit = self.commits.get(sha)
        if commit is None:
            msg = f"bad object {sha}"
            raise GitError(msg, operation=operation, returncode=128)
        return commit

    # GitGateway

    def current_branch(self) -> str:
        self._enter("current_branch")
        return self.current

    def resolve_commit(self, ref: str) -> str:
        self._enter("resolve_commit")
        if ref == "HEAD":
            head = self.head()
            if head is not None:
                return head.sha
        matches = [sha for sha in self.commits if len(ref) >= 4 and sha.startswith(ref)]
        if len(matches) == 1:
            return matches[0]
        msg = f"Needed a single revision: {ref}"
        raise GitError(msg, operation="resolve_commit", returncode=128)

    def commit_message(self, sha: str) -> str:
        self._enter("commit_message")
        return self._require_commit("commit_message", sha).message.strip()

    def changed_files(self, sha: str) -> list[str]:
        self._enter("changed_files")
        return list(self._require_commit("changed_files", sha).files)

    def create_branch(self, name: str, base: str) -> None:
        self._enter("create_branch")
        if name in self.branches:
            msg = f"a branch named '{name}' already exists"
            raise GitError(msg, operation="create_branch", returncode=128)
        self._require_branch("create_branch", base)
        self.branches[name] = list(self.branches[base])
        self.current = name

    def switch_branch(self, name: str, *, force: bool = False) -> None:
        self._enter("switch_branch")
        self._require_branch("switch_branch", name)
        if force:
            self.staged.clear()
            self.dirty = False
            self.cherry_pick_in_progress = False
        self.current = name

    def cherry_pick_no_commit(self, sha: str) -> None:
        self._enter("cherry_pick_no_commit")
        commit = self._require_commit("cherry_pick_no_commit", sha)
        tracked = {path for c in self.branches[self.current] for path in c.files}
        for path in commit.files:
            if path in commit.deleted and path not in tracked:
                # Deleting a file the branch never had changes nothing.
                continue
            if path.strip() and path not in self.staged:
                self.staged.append(path)

    def abort_cherry_pick(self) -> None:
        self._enter("abort_cherry_pick")
        if not self.cherry_pick_in_progress:
            msg = "no cherry-pick or revert in progress"
            raise GitError(msg, operation="abort_cherry_pick", returncode=128)
        self.cherry_pick_in_progress = False
        self.staged.clear()

    def stage(self, path: str) -> None:
        self._enter("stage", path)
        if path not in self.staged:
            self.staged.append(path)
        if path in self.unstaged:
            self.unstaged.remove(path)

    def unstage(self, path: str) -> None:
        self._enter("unstage", path)
        if path in self.staged:
            self.staged.remove(path)
        self.unstaged.append(path)

    def discard(self, path: str) -> None:
        self._enter("discard", path)
        if path in self.unstaged:
            self.unstaged.remove(path)
        self.discarded.append(path)

    def staged_files(self) -> list[str]:
        self._enter("staged_files")
        return list(self.staged)

    def has_local_changes(self) -> bool:
        self._enter("has_local_changes")
        return self.dirty

    def stash_push(self, message: str) -> None:
        self._enter("stash_push")
        self.stashes.append(message)
        self.dirty = False

    def stash_pop(self) -> None:
        self._enter("stash_pop")
        if not self.stashes:
            msg = "No stash entries found."
            raise GitError(msg, operation="stash_pop", returncode=1)
        self.stashes.pop()
        self.dirty = True

    def commit(self, message: str) -> str:
        self._enter("commit")
        if not self.staged:
            msg = "nothing to commit, working tree clean"
            raise GitError(msg, operation="commit", returncode=1)
        commit = self.add_commit(message, self.staged)
        self.staged.clear()
        return commit.sha

    def push(self, branch: str, *, remote: str = "origin") -> None:
        self._enter("push")
        self._require_branch("push", branch)
        self.pushed.append((remote, branch))

    def delete_branch(self, name: str, *, force: bool = True) -> None:
        self._enter("delete_branch")
        self._require_branch("delete_branch", name)
        if name == self.current:
            msg = f"cannot delete branch '{name}' used by worktree"
            raise GitError(msg, operation="delete_branch", returncode=1)
        del self.branches[name]

    def config_get(self, key: str) -> str | None:
        self._enter("config_get")
        return self.config.get(key)

    def remote_url(self, remote: str = "origin") -> str | None:
        self._enter("remote_url")
        return self.config.get(f"remote.{remote}.url")

    def hooks_dir(self) -> Path:
        self._enter("hooks_dir")
        return self.hooks_path
