"""Unit tests for post-commit hook installation."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from prrompt.exceptions import HookError
from prrompt.git.fake import FakeGitGateway
from prrompt.hooks import HOOK_MARKER, install_hook, render_hook


def test_render_hook_runs_prrompt_with_new_commit() -> None:
    script = render_hook("/opt/venv/bin/python")

    assert script.startswith("#!/bin/sh\n")
    assert HOOK_MARKER in script
    assert "COMMIT_SHA=$(git rev-parse HEAD)" in script
    assert '"/opt/venv/bin/python" -m prrompt "$COMMIT_SHA"' in script


def test_install_writes_executable_hook(tmp_path: Path) -> None:
    hooks_dir = tmp_path / "hooks"
    gateway = FakeGitGateway(hooks_path=hooks_dir)

    hook_path = install_hook(gateway, python="python3")

    assert hook_path == hooks_dir / "post-commit"
    assert hook_path.read_text() == render_hook("python3")
    assert os.access(hook_path, os.X_OK)


def test_install_replaces_own_hook(tmp_path: Path) -> None:
    gateway = FakeGitGateway(hooks_path=tmp_path)
    install_hook(gateway, python="old-python")

    hook_path = install_hook(gateway, python="new-python")

    assert '"new-python" -m prrompt' in hook_path.read_text()


def test_install_refuses_foreign_hook(tmp_path: Path) -> None:
    existing = tmp_path / "post-commit"
    existing.write_text("#!/bin/sh\necho custom\n")
    gateway = FakeGitGateway(hooks_path=tmp_path)

    with pytest.raises(HookError) as exc_info:
        install_hook(gateway)

    assert exc_info.value.path == existing
    assert "--force" in str(exc_info.value)
    assert existing.read_text() == "#!/bin/sh\necho custom\n"


def test_install_force_replaces_foreign_hook(tmp_path: Path) -> None:
    existing = tmp_path / "post-commit"
    existing.write_text("#!/bin/sh\necho custom\n")
    gateway = FakeGitGateway(hooks_path=tmp_path)

    install_hook(gateway, force=True, python="python3")

    assert HOOK_MARKER in existing.read_text()
