"""Git capability interface and its subprocess-backed adapter."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

from prrompt.exceptions import GitError
from prrompt.infra.command import CommandRunner

logger = structlog.get_logger()


def _split_nul(output: str) -> list[str]:
    return [entry for entry in output.split("\0") if entry]


@runtime_checkable
class GitGateway(Protocol):
    """Protocol for the repository operations prrompt needs.

    Every operation is atomic from the caller's point of view and raises
    GitError when the underlying command fails.
    """

    def current_branch(self) -> str:
        """Name of the checked-out branch (``HEAD`` when detached)."""
        ...

    def resolve_commit(self, ref: str) -> str:
        """Resolve a commit-ish to its full SHA."""
        ...

    def commit_message(self, sha: str) -> str:
        """Full message of a commit, surrounding whitespace stripped."""
        ...

    def changed_files(self, sha: str) -> list[str]:
        """Paths touched by a commit relative to its parent."""
        ...

    def create_branch(self, name: str, base: str) -> None:
        """Create ``name`` from ``base`` and switch to it."""
        ...

    def switch_branch(self, name: str, *, force: bool = False) -> None:
        """Switch to an existing branch, optionally discarding local changes."""
        ...

    def cherry_pick_no_commit(self, sha: str) -> None:
        """Apply a commit's changes to the index and working tree without committing."""
        ...

    def abort_cherry_pick(self) -> None:
        """Abort an in-progress cherry-pick."""
        ...

    def stage(self, path: str) -> None:
        """Add a path to the index."""
        ...

    def unstage(self, path: str) -> None:
        """Remove a path's changes from the index, keeping the working tree."""
        ...

    def staged_files(self) -> list[str]:
        """Paths whose index entry differs from HEAD."""
        ...

    def has_local_changes(self) -> bool:
        """Whether tracked files have uncommitted changes."""
        ...

    def stash_push(self, message: str) -> None:
        """Stash uncommitted changes to tracked files."""
        ...

    def stash_pop(self) -> None:
        """Reapply the latest stash, index included, and drop it."""
        ...

    def discard(self, path: str) -> None:
        """Restore a path's working-tree content from the index."""
        ...

    def commit(self, message: str) -> str:
        """Commit staged changes and return the new SHA."""
        ...

    def push(self, branch: str, *, remote: str = "origin") -> None:
        """Push a branch and set its upstream."""
        ...

    def delete_branch(self, name: str, *, force: bool = True) -> None:
        """Delete a local branch."""
        ...

    def config_get(self, key: str) -> str | None:
        """Read a configuration value, None when unset."""
        ...

    def remote_url(self, remote: str = "origin") -> str | None:
        """URL of a remote, None when unset."""
        ...

    def hooks_dir(self) -> Path:
        """Directory git reads hooks from."""
        ...


class CommandGitGateway:
    """GitGateway implementation that shells out to the git binary.

    Example:
        >>> gateway = CommandGitGateway(CommandRunner(), repo_root=Path.cwd())
        >>> gateway.current_branch()
        'feature-branch'
    """

    def __init__(
        self,
        cmd: CommandRunner | None = None,
        repo_root: Path | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            cmd: CommandRunner instance.
            repo_root: Directory to run git in (defaults to the process cwd).
        """
        self.cmd = cmd or CommandRunner()
        self.repo_root = repo_root

    def _git(self, operation: str, args: list[str]) -> str:
        """Run git and raise GitError on a non-zero exit.

        Args:
            operation: Short name of the operation, used in errors and logs.
            args: Git subcommand and arguments.

        Returns:
            Captured stdout.

        Raises:
            GitError: If git exits non-zero or cannot be started.
        """
        returncode, stdout, stderr = self.cmd.run_git(
            args, cwd=self.repo_root, check=False
        )
        if returncode != 0:
            detail = stderr.strip() or stdout.strip()
            logger.debug(
                "Git operation failed",
                operation=operation,
                returncode=returncode,
                stderr=detail,
            )
            msg = f"Failed to {operation}: {detail}" if detail else f"Failed to {operation}"
            raise GitError(
                msg,
                operation=operation,
                command=["git", *args],
                returncode=returncode,
                stderr=detail,
                cwd=self.repo_root,
            )
        return stdout

    def current_branch(self) -> str:
        stdout = self._git("get current branch", ["rev-parse", "--abbrev-ref", "HEAD"])
        return stdout.strip()

    def resolve_commit(self, ref: str) -> str:
        return self._git(
            "resolve commit", ["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"]
        ).strip()

    def commit_message(self, sha: str) -> str:
        return self._git(
            "get commit message", ["log", "--format=%B", "-n", "1", sha]
        ).strip()

    def changed_files(self, sha: str) -> list[str]:
        """List the paths a commit touched.

        ``--root`` makes a root commit report all of its files instead of
        nothing. ``-z`` keeps paths verbatim; without it git quotes
        non-ASCII names.

        Args:
            sha: Commit to inspect.

        Returns:
            Repository-relative paths, in git's output order.
        """
        stdout = self._git(
            "get changed files",
            ["diff-tree", "--no-commit-id", "--name-only", "-r", "-z", "--root", sha],
        )
        return _split_nul(stdout)

    def create_branch(self, name: str, base: str) -> None:
        self._git("create branch", ["checkout", "-b", name, base])

    def switch_branch(self, name: str, *, force: bool = False) -> None:
        args = ["checkout"]
        if force:
            args.append("--force")
        args.append(name)
        self._git("switch branch", args)

    def cherry_pick_no_commit(self, sha: str) -> None:
        self._git("cherry-pick", ["cherry-pick", "--no-commit", sha])

    def abort_cherry_pick(self) -> None:
        self._git("abort cherry-pick", ["cherry-pick", "--abort"])

    def stage(self, path: str) -> None:
        self._git("stage path", ["add", "--", path])

    def unstage(self, path: str) -> None:
        self._git("unstage path", ["restore", "--staged", "--", path])

    def staged_files(self) -> list[str]:
        stdout = self._git("list staged files", ["diff", "--cached", "--name-only", "-z"])
        return _split_nul(stdout)

    def has_local_changes(self) -> bool:
        stdout = self._git(
            "check working tree", ["status", "--porcelain", "-z", "--untracked-files=no"]
        )
        return bool(stdout.strip("\0"))

    def stash_push(self, message: str) -> None:
        self._git("stash local changes", ["stash", "push", "--quiet", "--message", message])

    def stash_pop(self) -> None:
        self._git("restore stashed changes", ["stash", "pop", "--quiet", "--index"])

    def discard(self, path: str) -> None:
        """Restore a path in the working tree from the index.

        After ``unstage`` the index holds the base branch's version, so this
        drops the commit's change to the path. A path that is not in the
        index at all (a file the commit added) is removed from disk instead.

        Args:
            path: Repository-relative path.
        """
        returncode, stdout, _ = self.cmd.run_git(
            ["ls-files", "--error-unmatch", "--", path],
            cwd=self.repo_root,
            check=False,
        )
        if returncode == 0 and stdout.strip():
            self._git("discard path", ["restore", "--", path])
            return

        target = (self.repo_root or Path.cwd()) / path
        try:
            target.unlink(missing_ok=True)
        except OSError as e:
            msg = f"Failed to discard path: {e}"
            raise GitError(msg, operation="discard path", cwd=self.repo_root) from e

    def commit(self, message: str) -> str:
        self._git("commit", ["commit", "-m", message])
        return self._git("read new commit", ["rev-parse", "HEAD"]).strip()

    def push(self, branch: str, *, remote: str = "origin") -> None:
        self._git("push", ["push", "--set-upstream", remote, branch])

    def delete_branch(self, name: str, *, force: bool = True) -> None:
        self._git("delete branch", ["branch", "-D" if force else "-d", name])

    def config_get(self, key: str) -> str | None:
        """Read a git configuration value.

        Args:
            key: Configuration key, e.g. ``prrompt.baseBranch``.

        Returns:
            The value, or None when the key is not set.

        Raises:
            GitError: If git fails for any reason other than a missing key.
        """
        returncode, stdout, stderr = self.cmd.run_git(
            ["config", "--get", key], cwd=self.repo_root, check=False
        )
        if returncode == 1:
            return None
        if returncode != 0:
            msg = f"Failed to read config '{key}': {stderr.strip()}"
            raise GitError(
                msg,
                operation="read config",
                command=["git", "config", "--get", key],
                returncode=returncode,
                stderr=stderr.strip(),
                cwd=self.repo_root,
            )
        return stdout.strip()

    def remote_url(self, remote: str = "origin") -> str | None:
        return self.config_get(f"remote.{remote}.url")

    def hooks_dir(self) -> Path:
        stdout = self._git("locate hooks directory", ["rev-parse", "--git-path", "hooks"])
        path = Path(stdout.strip())
        if not path.is_absolute() and self.repo_root is not None:
            path = self.repo_root / path
        return path
