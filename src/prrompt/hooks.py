"""Installation of the prrompt post-commit hook."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from prrompt.exceptions import HookError

if TYPE_CHECKING:
    from prrompt.git.gateway import GitGateway

logger = structlog.get_logger()

HOOK_NAME = "post-commit"
HOOK_MARKER = "# prrompt post-commit hook"


def render_hook(python: str | None = None) -> str:
    """Render the post-commit hook script.

    Args:
        python: Interpreter the hook runs prrompt with (defaults to the
            current one, so the hook finds the same installation).

    Returns:
        Shell script content.
    """
    interpreter = python or sys.executable
    return (
        "#!/bin/sh\n"
        f"{HOOK_MARKER}\n"
        "\n"
        "COMMIT_SHA=$(git rev-parse HEAD)\n"
        f'"{interpreter}" -m prrompt "$COMMIT_SHA"\n'
    )


def install_hook(
    gateway: GitGateway,
    *,
    force: bool = False,
    python: str | None = None,
) -> Path:
    """Write the post-commit hook into the repository's hooks directory.

    Args:
        gateway: Gateway used to locate the hooks directory.
        force: Overwrite a post-commit hook that prrompt did not write.
        python: Interpreter for the hook (see ``render_hook``).

    Returns:
        Path of the installed hook.

    Raises:
        HookError: If a foreign hook exists and force is False, or the hook
            cannot be written.
        GitError: If the hooks directory cannot be located.
    """
    hook_path = gateway.hooks_dir() / HOOK_NAME
    log = logger.bind(hook=str(hook_path))

    if hook_path.exists() and not force:
        try:
            existing = hook_path.read_text()
        except OSError as e:
            msg = f"Cannot read existing hook {hook_path}: {e}"
            raise HookError(msg, path=hook_path) from e
        if HOOK_MARKER not in existing:
            msg = f"A post-commit hook already exists at {hook_path} (use --force to replace it)"
            raise HookError(msg, path=hook_path)
        log.info("Replacing existing prrompt hook")

    try:
        hook_path.parent.mkdir(parents=True, exist_ok=True)
        hook_path.write_text(render_hook(python))
        hook_path.chmod(0o755)
    except OSError as e:
        msg = f"Failed to write hook {hook_path}: {e}"
        raise HookError(msg, path=hook_path) from e

    log.info("Installed post-commit hook")
    return hook_path
