"""Subprocess command runner with logging."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

import structlog

from prrompt.exceptions import GitError

logger = structlog.get_logger()


class CommandRunner:
    """Runs subprocess commands with consistent logging.

    All subprocess calls in prrompt go through this class so that every
    git invocation is logged the same way.

    Example:
        >>> runner = CommandRunner()
        >>> runner.run_git(["rev-parse", "--abbrev-ref", "HEAD"], cwd=Path("."))
        (0, 'main\\n', '')
    """

    def __init__(self, env: dict[str, str] | None = None) -> None:
        """Initialize the command runner.

        Args:
            env: Extra environment variables for every command.
        """
        self.env = env or {}

    def run_capture(
        self,
        command: list[str],
        *,
        cwd: Path | None = None,
        check: bool = False,
        env: dict[str, str] | None = None,
    ) -> tuple[int, str, str]:
        """Run a command and capture stdout/stderr in memory.

        Args:
            command: Command and arguments to run.
            cwd: Working directory for the command.
            check: If True, raise on non-zero exit code.
            env: Environment variables (merged with current env).

        Returns:
            Tuple of (returncode, stdout, stderr).

        Raises:
            GitError: If the command cannot be started, or if check=True and
                it fails.
        """
        log = logger.bind(command=command, cwd=str(cwd) if cwd else None)
        log.debug("Running command")

        full_env = os.environ.copy()
        full_env.update(self.env)
        if env:
            full_env.update(env)

        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                env=full_env,
                check=False,
            )
        except FileNotFoundError as e:
            log.error("Command not found", command=command[0])
            msg = f"Command not found: {command[0]}"
            raise GitError(msg, command=command, cwd=cwd) from e

        log.debug("Command completed", returncode=result.returncode)

        if check and result.returncode != 0:
            msg = f"Command failed with exit code {result.returncode}: {' '.join(command)}"
            raise GitError(
                msg,
                command=command,
                returncode=result.returncode,
                stderr=result.stderr.strip(),
                cwd=cwd,
            )

        return result.returncode, result.stdout, result.stderr

    def run_git(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        check: bool = True,
    ) -> tuple[int, str, str]:
        """Run a git command.

        Args:
            args: Git subcommand and arguments.
            cwd: Working directory (must be in a git repo).
            check: If True, raise on non-zero exit code.

        Returns:
            Tuple of (returncode, stdout, stderr).
        """
        return self.run_capture(["git", *args], cwd=cwd, check=check)
