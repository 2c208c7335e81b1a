"""Classification of changed paths into prompt and other files."""

from __future__ import annotations

from collections.abc import Iterable, Sequence


def is_prompt_file(path: str, patterns: Iterable[str]) -> bool:
    """Check whether a path starts with any prompt pattern.

    Patterns are plain prefixes, not globs: ``prompts/`` matches
    ``prompts/a.md`` and ``prompts/sub/b.md`` but not ``src/prompts/a.md``.
    """
    return any(path.startswith(pattern) for pattern in patterns)


def classify(
    changed_paths: Sequence[str], patterns: Sequence[str]
) -> tuple[list[str], list[str]]:
    """Partition changed paths into prompt files and other files.

    Blank entries are dropped. Both result lists keep the input order, and
    every remaining path lands in exactly one of them.

    Args:
        changed_paths: Paths touched by a commit.
        patterns: Path prefixes that mark a prompt file.

    Returns:
        Tuple of (prompt_files, other_files).
    """
    prompt_files: list[str] = []
    other_files: list[str] = []

    for raw in changed_paths:
        path = raw.strip()
        if not path:
            continue
        if is_prompt_file(path, patterns):
            prompt_files.append(path)
        else:
            other_files.append(path)

    return prompt_files, other_files
