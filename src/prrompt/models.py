"""Data types shared by the extraction workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from prrompt.exceptions import PushWarning

SHORT_SHA_LENGTH = 7


class Stage(str, Enum):
    """States of an extraction run."""

    IDLE = "idle"
    ANALYZING = "analyzing"
    NO_PROMPT_FILES = "no_prompt_files"
    EXTRACTING = "extracting"
    ABORTING = "aborting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class CommitInfo:
    """What the orchestrator knows about the commit being processed.

    Attributes:
        sha: Full commit SHA.
        message: Full commit message.
        prompt_files: Changed paths matching a prompt pattern.
        other_files: All other changed paths.
        source_branch: Branch checked out when the commit was analyzed.
    """

    sha: str
    message: str
    prompt_files: tuple[str, ...] = ()
    other_files: tuple[str, ...] = ()
    source_branch: str = ""

    @property
    def short_sha(self) -> str:
        """Abbreviated SHA used in branch names and messages."""
        return self.sha[:SHORT_SHA_LENGTH]

    @property
    def is_mixed(self) -> bool:
        """Whether the commit also touches non-prompt files."""
        return len(self.other_files) > 0

    @property
    def has_prompt_files(self) -> bool:
        """Whether the commit touches any prompt file."""
        return len(self.prompt_files) > 0

    @property
    def kind(self) -> str:
        """Human label for the commit type."""
        return "MIXED" if self.is_mixed else "PROMPT-ONLY"


@dataclass
class ExtractionResult:
    """Outcome of one extraction run.

    Attributes:
        stage: Terminal stage reached.
        commit: Analyzed commit, None when the run was skipped before analysis.
        branch: Extraction branch created.
        commit_sha: SHA of the extraction commit.
        commit_message: Message used for the extraction commit.
        pushed: Whether the extraction branch was pushed.
        push_warning: Push failure, when the push did not succeed.
        compare_url: URL (or fallback instruction) for opening a pull request.
        skipped_reason: Why the run did nothing, when it did nothing.
        transitions: Stages visited, in order.
    """

    stage: Stage
    commit: CommitInfo | None = None
    branch: str | None = None
    commit_sha: str | None = None
    commit_message: str | None = None
    pushed: bool = False
    push_warning: PushWarning | None = None
    compare_url: str | None = None
    skipped_reason: str | None = None
    transitions: list[Stage] = field(default_factory=list)

    @property
    def extracted(self) -> bool:
        """Whether an extraction branch was produced."""
        return self.branch is not None and self.commit_sha is not None
