"""Pull request URL helpers."""

from __future__ import annotations

import re

_GITHUB_PATTERNS = (
    re.compile(r"^git@github\.com:(?P<repo>[^/]+/[^/]+?)(?:\.git)?/?$"),
    re.compile(r"^ssh://git@github\.com(?::\d+)?/(?P<repo>[^/]+/[^/]+?)(?:\.git)?/?$"),
    re.compile(r"^https?://(?:[^@/]+@)?github\.com/(?P<repo>[^/]+/[^/]+?)(?:\.git)?/?$"),
)


def github_repo(remote_url: str) -> str | None:
    """Extract ``owner/repo`` from a GitHub remote URL."""
    url = remote_url.strip()
    for pattern in _GITHUB_PATTERNS:
        match = pattern.match(url)
        if match:
            return match.group("repo")
    return None


def compare_url(remote_url: str | None, base: str, head: str) -> str | None:
    """Build a "compare and open pull request" URL.

    Args:
        remote_url: URL of the remote the branch was pushed to.
        base: Branch the pull request targets.
        head: Branch with the changes.

    Returns:
        The URL, or None when the remote is not a recognised host.
    """
    if not remote_url:
        return None
    repo = github_repo(remote_url)
    if repo is None:
        return None
    return f"https://github.com/{repo}/compare/{base}...{head}?expand=1"


def manual_pr_hint(head: str) -> str:
    """Fallback shown when no compare URL can be built."""
    return f"Create PR manually for branch: {head}"
