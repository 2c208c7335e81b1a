"""Extraction of prompt file changes onto a dedicated branch."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from prrompt.classifier import classify
from prrompt.exceptions import (
    AnalysisError,
    BranchError,
    CherryPickError,
    CommitError,
    GitError,
    PushWarning,
    RestoreError,
)
from prrompt.models import CommitInfo, ExtractionResult, Stage
from prrompt.remote import compare_url, manual_pr_hint

if TYPE_CHECKING:
    from prrompt.config import PrromptConfig
    from prrompt.git.gateway import GitGateway

logger = structlog.get_logger()

DETACHED_HEAD = "HEAD"


def build_commit_message(info: CommitInfo, commit_prefix: str) -> str:
    """Build the message for the extraction commit.

    Args:
        info: Commit being extracted.
        commit_prefix: Prefix wrapped in brackets ahead of the original message.

    Returns:
        The commit message. Mixed commits get an ``Extracted from`` trailer.
    """
    message = f"[{commit_prefix}] {info.message}"
    if info.is_mixed:
        message += f"\n\nExtracted from {info.source_branch} ({info.short_sha})"
    return message


class ExtractionOrchestrator:
    """Moves the prompt file changes of a commit onto their own branch.

    Stages: IDLE -> ANALYZING -> (NO_PROMPT_FILES | EXTRACTING) -> DONE.
    A failure after the extraction branch exists goes through ABORTING,
    which puts the repository back the way it was, before the error is
    raised. Every git operation runs strictly in sequence.

    Example:
        >>> orchestrator = ExtractionOrchestrator(gateway, PrromptConfig())
        >>> result = orchestrator.run("3f2a9c1d...")
        >>> result.branch
        'skill-update/3f2a9c1'
    """

    def __init__(self, gateway: GitGateway, config: PrromptConfig) -> None:
        """Initialize the orchestrator.

        Args:
            gateway: Repository operations.
            config: Resolved configuration for this invocation.
        """
        self.gateway = gateway
        self.config = config
        self.stage = Stage.IDLE
        self._transitions: list[Stage] = [Stage.IDLE]
        self._stashed = False

    def _transition(self, stage: Stage) -> None:
        logger.debug("Stage transition", from_stage=self.stage.value, to_stage=stage.value)
        self.stage = stage
        self._transitions.append(stage)

    def _finish(self, result: ExtractionResult) -> ExtractionResult:
        self._transition(Stage.DONE)
        result.stage = Stage.DONE
        result.transitions = list(self._transitions)
        return result

    def run(self, ref: str) -> ExtractionResult:
        """Process one commit.

        Args:
            ref: Commit to process (the hook passes the new commit's SHA).

        Returns:
            ExtractionResult describing what happened.

        Raises:
            AnalysisError: If the commit cannot be inspected.
            BranchError: If the extraction branch cannot be created.
            CherryPickError: If the commit's changes do not apply.
            CommitError: If the prompt-only commit cannot be made.
            RestoreError: If switching back to the source branch fails.
        """
        self.stage = Stage.IDLE
        self._transitions = [Stage.IDLE]
        self._stashed = False
        log = logger.bind(ref=ref)

        skip_reason = self._recursion_guard()
        if skip_reason:
            log.info("Skipping commit", reason=skip_reason)
            return self._finish(
                ExtractionResult(stage=Stage.DONE, skipped_reason=skip_reason)
            )

        info = self.analyze(ref)

        if info.source_branch == DETACHED_HEAD:
            log.info("Skipping commit made on a detached HEAD")
            return self._finish(
                ExtractionResult(
                    stage=Stage.DONE,
                    commit=info,
                    skipped_reason="detached HEAD",
                )
            )

        if not info.has_prompt_files:
            self._transition(Stage.NO_PROMPT_FILES)
            log.debug("No prompt files in commit", files=len(info.other_files))
            return self._finish(
                ExtractionResult(
                    stage=Stage.DONE,
                    commit=info,
                    skipped_reason="no prompt files",
                )
            )

        return self.extract(info)

    def _recursion_guard(self) -> str | None:
        """Return a reason to skip when already on an extraction branch.

        The commit made on the extraction branch fires the post-commit hook
        again; this is where that second invocation stops.
        """
        try:
            branch = self.gateway.current_branch()
        except GitError as e:
            # Analysis reads the branch again and reports the failure.
            logger.debug("Could not read current branch for guard", error=str(e))
            return None

        if self.config.is_extraction_branch(branch):
            return f"already on extraction branch {branch}"
        return None

    def analyze(self, ref: str) -> CommitInfo:
        """Inspect a commit and classify its changed files.

        Args:
            ref: Commit to inspect.

        Returns:
            CommitInfo for the commit.

        Raises:
            AnalysisError: If the commit, its message, the current branch or
                its changed files cannot be read.
        """
        self._transition(Stage.ANALYZING)
        log = logger.bind(ref=ref)

        try:
            sha = self.gateway.resolve_commit(ref)
            message = self.gateway.commit_message(sha)
            source_branch = self.gateway.current_branch()
            changed = self.gateway.changed_files(sha)
        except GitError as e:
            self._transition(Stage.FAILED)
            log.error("Commit analysis failed", operation=e.operation, error=str(e))
            msg = f"Cannot analyze commit {ref}: {e}"
            raise AnalysisError(msg, sha=ref) from e

        prompt_files, other_files = classify(changed, self.config.prompt_patterns)
        info = CommitInfo(
            sha=sha,
            message=message,
            prompt_files=tuple(prompt_files),
            other_files=tuple(other_files),
            source_branch=source_branch,
        )
        log.info(
            "Commit analyzed",
            sha=info.short_sha,
            source_branch=source_branch,
            prompt_files=len(info.prompt_files),
            other_files=len(info.other_files),
            kind=info.kind,
        )
        return info

    def extract(self, info: CommitInfo) -> ExtractionResult:
        """Create, commit and push the extraction branch for a commit.

        Args:
            info: Analyzed commit with at least one prompt file.

        Returns:
            ExtractionResult for the finished extraction.

        Raises:
            BranchError: If the extraction branch cannot be created.
            CherryPickError: If the commit's changes do not apply.
            CommitError: If the prompt-only commit cannot be made.
            RestoreError: If switching back to the source branch, or reapplying
                stashed local changes there, fails.
        """
        self._transition(Stage.EXTRACTING)
        branch = self.config.branch_name(info.sha)
        log = logger.bind(sha=info.short_sha, branch=branch, source_branch=info.source_branch)

        try:
            self._stash_local_changes(branch)
        except GitError as e:
            self._transition(Stage.FAILED)
            log.error("Could not set aside local changes", error=str(e))
            msg = f"Failed to set aside local changes before creating {branch}: {e}"
            raise BranchError(msg, sha=info.sha, branch=branch) from e

        log.info("Creating extraction branch", base_branch=self.config.base_branch)
        try:
            self.gateway.create_branch(branch, self.config.base_branch)
        except GitError as e:
            self._transition(Stage.FAILED)
            log.error("Branch creation failed", error=str(e))
            self._reapply_after_failure()
            msg = f"Failed to create branch {branch} from {self.config.base_branch}: {e}"
            raise BranchError(msg, sha=info.sha, branch=branch) from e

        log.info("Applying commit without committing")
        try:
            self.gateway.cherry_pick_no_commit(info.sha)
        except GitError as e:
            log.error("Cherry-pick failed", error=str(e))
            self._abort(info, branch)
            msg = f"Failed to cherry-pick {info.short_sha} onto {branch}: {e}"
            raise CherryPickError(msg, sha=info.sha, branch=branch) from e

        if info.is_mixed:
            try:
                self._exclude_other_files(info)
            except GitError as e:
                log.error("Could not exclude non-prompt file", error=str(e))
                self._abort(info, branch)
                msg = f"Failed to exclude non-prompt files from {branch}: {e}"
                raise CommitError(msg, sha=info.sha, branch=branch) from e

        message = build_commit_message(info, self.config.commit_prefix)
        try:
            commit_sha = self.gateway.commit(message)
        except GitError as e:
            log.error("Commit failed", error=str(e))
            self._abort(info, branch)
            msg = f"Failed to commit on {branch}: {e}"
            raise CommitError(msg, sha=info.sha, branch=branch) from e
        log.info("Extraction commit created", commit_sha=commit_sha[:7])

        push_warning = self._push(info, branch)

        try:
            self.gateway.switch_branch(info.source_branch, force=True)
        except GitError as e:
            self._transition(Stage.FAILED)
            log.error("Could not return to source branch", error=str(e))
            msg = f"Failed to return to {info.source_branch}, still on {branch}: {e}"
            if self._stashed:
                msg += " (local changes are kept in the stash)"
            raise RestoreError(msg, sha=info.sha, branch=branch) from e

        try:
            self._reapply_local_changes()
        except GitError as e:
            self._transition(Stage.FAILED)
            log.error("Could not reapply local changes", error=str(e))
            msg = (
                f"Returned to {info.source_branch} but could not reapply local changes, "
                f"they are kept in the stash: {e}"
            )
            raise RestoreError(msg, sha=info.sha, branch=branch) from e

        return self._finish(
            ExtractionResult(
                stage=Stage.DONE,
                commit=info,
                branch=branch,
                commit_sha=commit_sha,
                commit_message=message,
                pushed=push_warning is None,
                push_warning=push_warning,
                compare_url=self._compare_url(branch),
            )
        )

    def _exclude_other_files(self, info: CommitInfo) -> None:
        """Keep non-prompt files out of the extraction commit.

        Files are unstaged and left in the working tree. With
        ``discard_other_files`` their working-tree changes are dropped too.
        A path the cherry-pick left identical to the base branch (such as a
        deletion of a file the base never had) is already excluded.
        """
        staged = set(self.gateway.staged_files())
        for path in info.other_files:
            if path not in staged:
                logger.debug("Non-prompt file has no staged change", path=path)
                continue
            logger.debug("Unstaging non-prompt file", path=path)
            self.gateway.unstage(path)
            if self.config.discard_other_files:
                logger.debug("Discarding non-prompt file", path=path)
                self.gateway.discard(path)

    def _stash_local_changes(self, branch: str) -> None:
        """Stash uncommitted changes to tracked files before leaving the branch.

        The hook also runs after partial commits, and the forced switch back
        to the source branch would otherwise throw those changes away.
        """
        if not self.gateway.has_local_changes():
            return
        logger.info("Stashing local changes", branch=branch)
        self.gateway.stash_push(f"prrompt: local changes before {branch}")
        self._stashed = True

    def _reapply_local_changes(self) -> None:
        if not self._stashed:
            return
        self.gateway.stash_pop()
        self._stashed = False
        logger.info("Reapplied local changes")

    def _reapply_after_failure(self) -> None:
        try:
            self._reapply_local_changes()
        except GitError as e:
            logger.warning(
                "Could not reapply local changes, they are kept in the stash", error=str(e)
            )

    def _push(self, info: CommitInfo, branch: str) -> PushWarning | None:
        remote = self.config.remote
        try:
            self.gateway.push(branch, remote=remote)
        except GitError as e:
            logger.warning(
                "Push failed, push the branch manually",
                branch=branch,
                remote=remote,
                error=str(e),
            )
            msg = f"Failed to push {branch} to {remote} (push it manually): {e}"
            return PushWarning(msg, sha=info.sha, branch=branch)
        logger.info("Pushed extraction branch", branch=branch, remote=remote)
        return None

    def _compare_url(self, branch: str) -> str:
        try:
            remote_url = self.gateway.remote_url(self.config.remote)
        except GitError as e:
            logger.debug("Could not read remote URL", error=str(e))
            remote_url = None
        return compare_url(remote_url, self.config.base_branch, branch) or manual_pr_hint(branch)

    def _abort(self, info: CommitInfo, branch: str) -> None:
        """Undo a partial extraction.

        Each step runs even if the one before it failed. Failures here are
        logged; the error that caused the abort is what the caller raises.
        """
        self._transition(Stage.ABORTING)
        log = logger.bind(sha=info.short_sha, branch=branch, source_branch=info.source_branch)
        log.warning("Aborting extraction")

        try:
            self.gateway.abort_cherry_pick()
        except GitError as e:
            # A clean --no-commit cherry-pick leaves nothing to abort.
            log.debug("No cherry-pick to abort", error=str(e))

        returned = True
        try:
            self.gateway.switch_branch(info.source_branch, force=True)
        except GitError as e:
            returned = False
            log.warning("Could not return to source branch during abort", error=str(e))

        try:
            self.gateway.delete_branch(branch, force=True)
        except GitError as e:
            log.warning("Could not delete extraction branch", error=str(e))

        if returned:
            self._reapply_after_failure()
        elif self._stashed:
            log.warning("Local changes are kept in the stash")

        self._transition(Stage.FAILED)
