"""Unit tests for pull request URL helpers."""

from __future__ import annotations

import pytest

from prrompt.remote import compare_url, github_repo, manual_pr_hint


@pytest.mark.parametrize(
    "remote_url",
    [
        "git@github.com:acme/widgets.git",
        "git@github.com:acme/widgets",
        "ssh://git@github.com/acme/widgets.git",
        "https://github.com/acme/widgets.git",
        "https://github.com/acme/widgets",
        "https://token@github.com/acme/widgets.git",
    ],
)
def test_github_remote_forms(remote_url: str) -> None:
    assert github_repo(remote_url) == "acme/widgets"


def test_compare_url() -> None:
    url = compare_url("git@github.com:acme/widgets.git", "main", "skill-update/abc1234")

    assert url == "https://github.com/acme/widgets/compare/main...skill-update/abc1234?expand=1"


@pytest.mark.parametrize(
    "remote_url",
    [None, "", "git@gitlab.com:acme/widgets.git", "/srv/git/widgets.git"],
)
def test_unknown_remote_has_no_compare_url(remote_url: str | None) -> None:
    assert compare_url(remote_url, "main", "skill-update/abc1234") is None


def test_manual_pr_hint() -> None:
    assert manual_pr_hint("skill-update/abc1234") == (
        "Create PR manually for branch: skill-update/abc1234"
    )
