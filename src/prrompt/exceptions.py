"""Custom exceptions for prrompt."""

from pathlib import Path


class PrromptError(Exception):
    """Base exception for all prrompt errors."""

    pass


class ConfigError(PrromptError):
    """Raised when a configuration value is invalid."""

    def __init__(
        self,
        message: str,
        *,
        key: str = "",
        value: str | None = None,
    ) -> None:
        super().__init__(message)
        self.key = key
        self.value = value


class GitError(PrromptError):
    """Raised when a git command fails."""

    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
        cwd: Path | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr
        self.cwd = cwd


class ExtractionError(PrromptError):
    """Base for failures of an extraction run.

    Attributes:
        sha: Commit being processed.
        branch: Extraction branch involved, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        sha: str = "",
        branch: str = "",
    ) -> None:
        super().__init__(message)
        self.sha = sha
        self.branch = branch


class AnalysisError(ExtractionError):
    """Raised when the commit cannot be inspected (message, branch or diff)."""

    pass


class BranchError(ExtractionError):
    """Raised when the extraction branch cannot be created."""

    pass


class CherryPickError(ExtractionError):
    """Raised when the commit's changes cannot be applied to the extraction branch."""

    pass


class CommitError(ExtractionError):
    """Raised when the curated prompt-only commit cannot be made."""

    pass


class RestoreError(ExtractionError):
    """Raised when switching back to the source branch fails.

    The user is left on the extraction branch when this happens.
    """

    pass


class PushWarning(ExtractionError):
    """Non-fatal: the extraction branch exists locally but was not pushed."""

    pass


class HookError(PrromptError):
    """Raised when the post-commit hook cannot be installed."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path
