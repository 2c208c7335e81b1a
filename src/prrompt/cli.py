"""CLI interface for prrompt."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import structlog
import typer

from prrompt import __version__
from prrompt.config import PrromptConfig
from prrompt.exceptions import PrromptError
from prrompt.extractor import ExtractionOrchestrator
from prrompt.git.gateway import CommandGitGateway
from prrompt.hooks import install_hook
from prrompt.infra.command import CommandRunner
from prrompt.models import ExtractionResult

logger = structlog.get_logger()

INSTALL_COMMAND = "install"
SUMMARY_WIDTH = 60

app = typer.Typer(
    name="prrompt",
    help="Move prompt file changes from a commit onto their own branch.",
    add_completion=False,
)


def configure_logging(verbose: bool = False) -> None:
    """Configure structlog for console output on stderr."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.INFO if verbose else logging.WARNING
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"prrompt version {__version__}")
        raise typer.Exit()


def truncate(text: str, max_len: int) -> str:
    """Shorten text to max_len characters, marking the cut with an ellipsis."""
    if len(text) <= max_len:
        return text
    return text[:max_len] + "..."


def _fail(error: Exception) -> typer.Exit:
    message = " ".join(str(error).split())
    typer.echo(typer.style(f"Error: {message}", fg=typer.colors.RED), err=True)
    return typer.Exit(1)


def _print_summary(result: ExtractionResult) -> None:
    info = result.commit
    if info is None:
        return

    typer.echo("")
    typer.echo("=" * SUMMARY_WIDTH)
    typer.echo(f"Processing commit: {info.short_sha}")
    typer.echo(f"Message: {truncate(info.message, SUMMARY_WIDTH)}")
    typer.echo(f"Prompt files: {len(info.prompt_files)}")
    typer.echo(f"Other files: {len(info.other_files)}")
    typer.echo(f"Type: {info.kind}")
    typer.echo("=" * SUMMARY_WIDTH)

    typer.echo(typer.style(f"Created branch: {result.branch}", fg=typer.colors.GREEN))
    if result.pushed:
        typer.echo(typer.style(f"Pushed: {result.branch}", fg=typer.colors.GREEN))
    elif result.push_warning is not None:
        typer.echo(
            typer.style(f"Warning: {result.push_warning}", fg=typer.colors.YELLOW),
            err=True,
        )
    typer.echo("")
    typer.echo(f"Create PR: {result.compare_url}")
    typer.echo("")


@app.command()
def main(
    target: Annotated[
        str | None,
        typer.Argument(
            help="Commit to process, or 'install' to install the post-commit hook",
            show_default=False,
        ),
    ] = None,
    repo_dir: Annotated[
        Path | None,
        typer.Option(
            "--dir",
            "-d",
            help="Repository directory (defaults to the current directory)",
            exists=True,
            file_okay=False,
            resolve_path=True,
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="With 'install': replace an existing hook"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Show progress logs"),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Process a commit as a git post-commit hook.

    Prompt file changes (paths under the configured prompt patterns) are
    committed again on a new branch created from the base branch, and that
    branch is pushed.

    Configuration (git config): prrompt.commitPrefix, prrompt.branchPrefix,
    prrompt.baseBranch, prrompt.promptPatterns, prrompt.remote,
    prrompt.discardOtherFiles.
    """
    configure_logging(verbose)

    if target is None:
        typer.echo("Usage: prrompt <commit-sha>")
        typer.echo("This tool is meant to be run as a git post-commit hook")
        typer.echo("Run 'prrompt install' to install the hook")
        raise typer.Exit(1)

    gateway = CommandGitGateway(CommandRunner(), repo_root=repo_dir)

    if target == INSTALL_COMMAND:
        try:
            hook_path = install_hook(gateway, force=force)
        except PrromptError as e:
            raise _fail(e) from e
        typer.echo(
            typer.style(f"Installed post-commit hook at {hook_path}", fg=typer.colors.GREEN)
        )
        return

    log = logger.bind(command="extract", target=target)
    try:
        config = PrromptConfig.load(gateway)
        result = ExtractionOrchestrator(gateway, config).run(target)
    except PrromptError as e:
        log.debug("Extraction failed", error=str(e))
        raise _fail(e) from e

    if not result.extracted:
        log.info("Nothing extracted", reason=result.skipped_reason)
        return

    _print_summary(result)
